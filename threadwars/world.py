"""Game state and the rules that advance it from frame to frame."""

from __future__ import annotations

import math
import random
import threading
from collections.abc import Callable
from enum import IntEnum

from threadwars.models import (
    PLAYER_COLORS,
    RED,
    Enemy,
    GameSettings,
    Player,
    Rect,
    SolarCell,
    SolarCharger,
)
from threadwars.vector_ops import Vector2, direction, distance, normalize

SoundHook = Callable[[str], None]

CHARGER_HEIGHT = 100
CHARGER_UNIT_WIDTH = 100
CELLS_PER_CHARGER_UNIT = 10
ENEMY_COLLISION_FACTOR = 0.55
MESSAGE_FONT_SIZE = 20
WAVE_FONT_SIZE = 45


class MenuChoice(IntEnum):
    """Entries of the pause and game-over menu, in display order."""

    RESTART = 0
    CONTROLS = 1
    END_GAME = 2


def _rects_overlap(a: Rect, b: Rect) -> bool:
    ax, ay, aw, ah = a
    bx, by, bw, bh = b
    return ax < bx + bw and ax + aw > bx and ay < by + bh and ay + ah > by


def _circles_overlap(c1: Vector2, r1: float, c2: Vector2, r2: float) -> bool:
    return distance(c1, c2) <= r1 + r2


class World:
    """Everything that happens in a game, independent of drawing and input devices."""

    def __init__(
        self,
        settings: GameSettings | None = None,
        rng: random.Random | None = None,
        on_sound: SoundHook | None = None,
    ) -> None:
        self.settings = settings if settings is not None else GameSettings()
        self.rng = rng if rng is not None else random.Random()
        self.on_sound = on_sound

        s = self.settings
        self.waves = list(s.waves)
        self.current_wave = 0
        self.last_wave_frame = 0
        self.frame_count = 0

        self.battery = 0.0
        self.battery_lock = threading.Lock()

        self.players = [
            Player(
                position=self._start_position(i),
                flip_dir=1,
                speed=s.player_speed / s.target_fps,
                size=s.player_size,
                health=s.player_health,
                color=PLAYER_COLORS[i % len(PLAYER_COLORS)],
            )
            for i in range(s.player_count)
        ]

        self.enemies = [Enemy() for _ in range(s.max_enemies)]
        self.enemy_count = 0
        self.enemy_lock = threading.Lock()

        self.solar_cells = [SolarCell() for _ in range(s.max_solar_cells)]
        self.solar_cells_collected = 0
        self.solar_cells_lock = threading.Lock()

        self.solar_chargers = [SolarCharger() for _ in range(s.max_solar_chargers)]

        self.message = ""
        self.message_opacity = 0.0
        self.message_added_frame = 0
        self.message_font_size = MESSAGE_FONT_SIZE

        self.paused = False
        self.quitting = False
        self.game_over = False
        self.game_won = False

        self.menu_selection = MenuChoice.RESTART
        self.show_controls_menu = False
        self.show_pause_menu = False

    def _start_position(self, index: int) -> Vector2:
        return Vector2(float(index * (20 + self.settings.player_size)), 0.0)

    def _play(self, name: str) -> None:
        if self.on_sound is not None:
            self.on_sound(name)

    # Messages

    def show_message(self, text: str, font_size: int) -> None:
        """Display ``text`` at full opacity; it fades out over the message duration."""
        self.message = text
        self.message_font_size = font_size
        self.message_added_frame = self.frame_count
        self.message_opacity = 1.0

    def update_message(self) -> float:
        """Recompute the fading message's opacity and return it."""
        s = self.settings
        elapsed = self.frame_count - self.message_added_frame
        opacity = 1 - elapsed / (s.message_duration * s.target_fps)
        self.message_opacity = min(1.0, max(0.0, opacity))
        return self.message_opacity

    # Solar cells and chargers

    def add_solar_cell(self, position: Vector2) -> bool:
        """Place a cell in the first free slot; False if every slot is taken."""
        with self.solar_cells_lock:
            for cell in self.solar_cells:
                if not cell.active:
                    cell.active = True
                    cell.position = position
                    cell.size = self.settings.solar_cell_size
                    return True
        return False

    def generate_solar_cells(self, count: int | None = None) -> None:
        """Scatter ``count`` cells at random spots on the map."""
        if count is None:
            count = self.settings.solar_cells_per_batch
        radius = self.settings.map_size // 2
        for _ in range(count):
            x = self.rng.randrange(radius) * 2 - radius
            y = self.rng.randrange(radius) * 2 - radius
            self.add_solar_cell(Vector2(float(x), float(y)))

    def collect_solar_cells(self, player: Player) -> int:
        """Pick up every cell touching ``player``; return how many were taken."""
        collected = 0
        box = player.hitbox()
        with self.solar_cells_lock:
            for cell in self.solar_cells:
                if cell.active and _rects_overlap(box, cell.hitbox()):
                    self.solar_cells_collected += 1
                    self._play("pickup")
                    cell.active = False
                    collected += 1
        return collected

    def build_solar_charger(self, position: Vector2, size: int) -> bool:
        """Spend cells on a charger of ``size`` units; False if there are too few."""
        cost = size * CELLS_PER_CHARGER_UNIT
        if self.solar_cells_collected < cost:
            self.show_message("Not enough solar cells, collect more.", MESSAGE_FONT_SIZE)
            return False

        with self.solar_cells_lock:
            self._play("place")
            self.solar_cells_collected -= cost

        for charger in self.solar_chargers:
            if not charger.active:
                charger.active = True
                charger.height = CHARGER_HEIGHT
                charger.width = size * CHARGER_UNIT_WIDTH
                charger.position = position
                break
        return True

    def charge_batteries(self, worker: int) -> float:
        """Add one frame of charge from the chargers owned by ``worker``."""
        s = self.settings
        share = s.max_solar_chargers // s.solar_charger_workers
        total = 0.0
        for charger in self.solar_chargers[worker * share:(worker + 1) * share]:
            if charger.active:
                amount = charger.charge_per_frame(s.target_fps)
                with self.battery_lock:
                    self.battery += amount
                total += amount
        return total

    # Enemies

    def closest_enemy_index(self, origin: Vector2) -> int | None:
        """Index of the active enemy nearest ``origin``, or None if there is none."""
        best: int | None = None
        shortest = float(2**31 - 1)
        for index, enemy in enumerate(self.enemies):
            if enemy.active:
                gap = distance(enemy.position, origin)
                if gap < shortest:
                    shortest = gap
                    best = index
        return best

    def add_enemies(self, count: int) -> int:
        """Activate up to ``count`` enemies at random spots; return how many appeared."""
        s = self.settings
        added = 0
        half = s.map_size / 2
        with self.enemy_lock:
            for enemy in self.enemies:
                if count <= 0 or self.enemy_count > s.max_enemies:
                    break
                if enemy.active:
                    continue
                enemy.active = True
                enemy.size = s.enemy_size
                enemy.color = RED
                enemy.damage = s.enemy_damage
                enemy.speed = s.enemy_speed // s.target_fps
                enemy.position = Vector2(
                    self.rng.randrange(s.map_size) - half,
                    self.rng.randrange(s.map_size) - half,
                )
                self.enemy_count += 1
                count -= 1
                added += 1
        return added

    def kill_enemy(self, index: int) -> None:
        """Remove the enemy at ``index`` from play."""
        self.enemies[index].active = False
        with self.enemy_lock:
            self.enemy_count -= 1

    def shoot(self, player: Player) -> bool:
        """Fire at the nearest enemy in range; True if one was killed."""
        s = self.settings
        if self.battery <= s.shot_cost:
            self._play("no_ammo")
            self.show_message("[!] Not enough battery, make solar panels", MESSAGE_FONT_SIZE)
            return False

        with player.lock:
            origin = player.position
            target = self.closest_enemy_index(origin)

        if target is None or distance(self.enemies[target].position, origin) > s.gun_range:
            return False

        with self.battery_lock:
            self._play("shoot")
            self.kill_enemy(target)
            self.battery -= s.shot_cost
            self._play("shoot")
        return True

    def update_enemies(self) -> None:
        """Move every enemy towards its nearest player, or bite if close enough."""
        fps = self.settings.target_fps
        for index, enemy in enumerate(self.enemies):
            if not enemy.active:
                continue

            closest: Player | None = None
            shortest = float(2**31 - 1)
            for player in self.players:
                with player.lock:
                    gap = distance(enemy.position, player.position)
                if gap < shortest:
                    shortest = gap
                    closest = player
            if closest is None:
                continue

            if shortest < closest.size:
                with closest.lock:
                    closest.health -= enemy.damage / fps
                continue

            heading = direction(enemy.position, closest.position)
            velocity = heading * enemy.speed
            enemy.position = enemy.position + velocity

            colliding = False
            radius = enemy.size * ENEMY_COLLISION_FACTOR
            for other_index, other in enumerate(self.enemies):
                if not other.active or other_index == index:
                    continue
                if _circles_overlap(
                    enemy.position, radius, other.position, other.size * ENEMY_COLLISION_FACTOR
                ):
                    colliding = True
                    push = direction(other.position, enemy.position)
                    enemy.position = enemy.position + push * (enemy.speed * 0.5)

            if colliding:
                enemy.position = enemy.position - velocity

    # Players

    def move_player(self, player: Player, dx: int, dy: int) -> Vector2:
        """Step ``player`` in the direction ``(dx, dy)``, staying inside the map."""
        if dx < 0:
            player.flip_dir = -1
        elif dx > 0:
            player.flip_dir = 1

        if self.paused or (dx == 0 and dy == 0):
            return player.position

        heading = normalize(Vector2(float(dx), float(dy)))
        vx = heading.x * player.speed
        vy = heading.y * player.speed
        bound = self.settings.map_size // 2
        pos = player.position
        if (vx < 0 and pos.x < -bound) or (vx > 0 and pos.x > bound):
            vx = 0.0
        if (vy < 0 and pos.y < -bound) or (vy > 0 and pos.y > bound):
            vy = 0.0

        with player.lock:
            player.position = Vector2(player.position.x + vx, player.position.y + vy)
            return player.position

    # Waves and game state

    def generate_enemies(self) -> None:
        """Release the next wave when its time has come, or win once all are gone."""
        if self.current_wave < len(self.waves):
            wave = self.waves[self.current_wave]
            due = self.last_wave_frame + wave.wait_time * self.settings.target_fps
            if self.frame_count > due:
                self.show_message(f"WAVE {self.current_wave} begins!", WAVE_FONT_SIZE)
                self.add_enemies(wave.num_enemies)
                self.last_wave_frame = self.frame_count
                self.current_wave += 1
        elif self.enemy_count <= 0:
            self.win()

    def check_game_over(self) -> bool:
        """End the game if any player's health has dropped below zero."""
        if any(player.health < 0 for player in self.players):
            self.paused = True
            self.game_over = True
        return self.game_over

    def win(self) -> None:
        """Mark the game as won."""
        self.paused = True
        self.game_won = True

    def restart(self) -> None:
        """Reset the game to its starting state, keeping the frame counter."""
        self.paused = False
        self.current_wave = 0
        self.last_wave_frame = self.frame_count
        self.battery = 0.0
        self.solar_cells_collected = 0
        self.enemy_count = 0
        self.game_over = False
        self.game_won = False

        for index, player in enumerate(self.players):
            player.health = self.settings.player_health
            player.position = self._start_position(index)
        for enemy in self.enemies:
            enemy.active = False
        for charger in self.solar_chargers:
            charger.active = False
        for cell in self.solar_cells:
            cell.active = False

        self.generate_solar_cells()

    def seconds_to_next_wave(self) -> int | None:
        """Whole seconds until the next wave, or None if no wave is coming."""
        if self.current_wave >= len(self.waves):
            return None
        fps = self.settings.target_fps
        remaining = (
            self.waves[self.current_wave].wait_time * fps + self.last_wave_frame - self.frame_count
        )
        seconds = int(remaining / fps)
        return seconds if seconds >= 0 else None

    # Menu

    def menu_next(self) -> MenuChoice:
        """Move the menu highlight down, wrapping around."""
        self.menu_selection = MenuChoice((self.menu_selection + 1) % len(MenuChoice))
        return self.menu_selection

    def menu_previous(self) -> MenuChoice:
        """Move the menu highlight up, wrapping around."""
        self.menu_selection = MenuChoice((self.menu_selection - 1) % len(MenuChoice))
        return self.menu_selection

    def choose_menu(self) -> MenuChoice:
        """Carry out the highlighted menu entry and return it."""
        choice = MenuChoice(self.menu_selection)
        if choice is MenuChoice.RESTART:
            self.restart()
        elif choice is MenuChoice.CONTROLS:
            self.show_controls_menu = True
            self.show_pause_menu = False
        else:
            self.quitting = True
        return choice

    # Frame

    def step(self) -> None:
        """Advance the world by one frame."""
        s = self.settings
        if self.frame_count % (s.target_fps * 5) == 0:
            self.generate_solar_cells()

        self.check_game_over()

        if not self.paused:
            self.generate_enemies()
            self.update_message()
            self.update_enemies()
            for worker in range(s.solar_charger_workers):
                self.charge_batteries(worker)
            self.frame_count += 1