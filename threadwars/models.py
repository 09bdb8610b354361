"""Game entities and settings."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

from threadwars.vector_ops import Vector2

Color = tuple[int, int, int, int]
Rect = tuple[float, float, float, float]

YELLOW: Color = (253, 249, 0, 255)
BLUE: Color = (0, 121, 241, 255)
GREEN: Color = (0, 228, 48, 255)
PINK: Color = (255, 109, 194, 255)
RED: Color = (230, 41, 55, 255)

PLAYER_COLORS: tuple[Color, ...] = (YELLOW, BLUE, GREEN, PINK)


def _centered_square(center: Vector2, size: float) -> Rect:
    half = size / 2
    return (center.x - half, center.y - half, float(size), float(size))


@dataclass
class Player:
    """A player-controlled character."""

    position: Vector2 = field(default_factory=Vector2)
    flip_dir: int = 1
    speed: float = 10.0
    size: int = 100
    health: float = 100.0
    color: Color = YELLOW
    lock: threading.RLock = field(default_factory=threading.RLock, repr=False, compare=False)

    def hitbox(self) -> Rect:
        """Axis-aligned square ``(left, top, width, height)`` centred on the player."""
        return _centered_square(self.position, self.size)


@dataclass
class Enemy:
    """A zombie that walks towards the nearest player."""

    position: Vector2 = field(default_factory=Vector2)
    damage: float = 5.0
    speed: int = 0
    size: int = 30
    active: bool = False
    color: Color = RED


@dataclass
class SolarCharger:
    """A placed solar panel that charges the shared battery every frame."""

    width: int = 0
    height: int = 0
    position: Vector2 = field(default_factory=Vector2)
    active: bool = False

    def charge_per_frame(self, target_fps: int) -> float:
        """Battery charge added by this panel during one frame."""
        return (self.height * self.width) / 100000 / target_fps


@dataclass
class SolarCell:
    """A collectable solar cell lying on the map."""

    position: Vector2 = field(default_factory=Vector2)
    size: int = 0
    active: bool = False

    def hitbox(self) -> Rect:
        """Axis-aligned square ``(left, top, width, height)`` centred on the cell."""
        return _centered_square(self.position, self.size)


@dataclass(frozen=True)
class EnemyWave:
    """A wave: how many enemies appear and how many seconds before they do."""

    num_enemies: int
    wait_time: int


def default_waves() -> list[EnemyWave]:
    """The three waves the game is played with."""
    return [
        EnemyWave(num_enemies=5, wait_time=10),
        EnemyWave(num_enemies=25, wait_time=40),
        EnemyWave(num_enemies=50, wait_time=80),
    ]


@dataclass
class GameSettings:
    """Tunable parameters of a game."""

    player_count: int = 2
    message_duration: int = 1
    gun_range: int = 300
    max_enemies: int = 300
    max_solar_cells: int = 100
    max_solar_chargers: int = 300
    solar_charger_workers: int = 5
    map_size: int = 2000
    target_fps: int = 60
    waves: list[EnemyWave] = field(default_factory=default_waves)
    player_size: int = 100
    player_health: float = 100.0
    player_speed: int = 600
    enemy_size: int = 70
    enemy_damage: float = 5.0
    enemy_speed: int = 200
    solar_cell_size: int = 20
    solar_cells_per_batch: int = 20
    shot_cost: float = 0.1

    def __post_init__(self) -> None:
        if self.player_count < 1:
            raise ValueError("player_count must be at least 1")
        if self.target_fps < 1:
            raise ValueError("target_fps must be at least 1")
        if self.map_size < 2:
            raise ValueError("map_size must be at least 2")
        if self.solar_charger_workers < 1:
            raise ValueError("solar_charger_workers must be at least 1")