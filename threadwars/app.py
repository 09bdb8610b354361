"""Window, input, sound and drawing for a split-screen game of the world."""

from __future__ import annotations

import argparse
import random
import sys
import threading
import time
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import pygame

from threadwars.models import GREEN, RED, YELLOW, Color
from threadwars.vector_ops import Vector2, distance
from threadwars.world import MenuChoice, World

WHITE: Color = (255, 255, 255, 255)
BLACK: Color = (0, 0, 0, 255)
GRAY: Color = (130, 130, 130, 255)
LIGHTGRAY: Color = (200, 200, 200, 255)
CHARGER_COLOR: Color = (50, 50, 50, 255)

TITLE = "Thread Wars"
MESSAGE_DRAW_SIZE = 45
HUD_FONT_SIZE = 25
BAR_FONT_SIZE = 18
SOUND_COPIES = 50
ZOMBIE_VOLUME = 0.5
ZOOM_STEP = 0.25
DEBUG_ENEMY_BATCH = 5
OVERLAY_ALPHA = 178

CONTROLS_TEXT = (
    ("PLAYER 1:", 0.30),
    ("WASD - Move", 0.35),
    ("SPACE - Shoot", 0.40),
    ("1/2 - Build Solar (Small/Large)", 0.45),
    ("PLAYER 2:", 0.55),
    ("ARROWS - Move", 0.60),
    ("ENTER - Shoot", 0.65),
    ("9/0 - Build Solar (Small/Large)", 0.70),
    ("Press BackSpace to go back", 0.85),
)
MENU_LABELS = {
    MenuChoice.RESTART: "Restart",
    MenuChoice.CONTROLS: "Controls",
    MenuChoice.END_GAME: "End Game",
}


@dataclass(frozen=True)
class Controls:
    """The keys one player uses."""

    up: int
    left: int
    down: int
    right: int
    shoot: int
    build_small: int
    build_large: int


CONTROL_SCHEMES: tuple[Controls, ...] = (
    Controls(
        up=pygame.K_w,
        left=pygame.K_a,
        down=pygame.K_s,
        right=pygame.K_d,
        shoot=pygame.K_SPACE,
        build_small=pygame.K_1,
        build_large=pygame.K_2,
    ),
    Controls(
        up=pygame.K_UP,
        left=pygame.K_LEFT,
        down=pygame.K_DOWN,
        right=pygame.K_RIGHT,
        shoot=pygame.K_RETURN,
        build_small=pygame.K_9,
        build_large=pygame.K_0,
    ),
)

_WATCHED_KEYS = frozenset(
    key
    for scheme in CONTROL_SCHEMES
    for key in (scheme.up, scheme.left, scheme.down, scheme.right)
)


def health_color(fraction: float) -> Color:
    """Bar colour for a fill level: green when high, yellow when middling, red when low."""
    if fraction > 0.6:
        return GREEN
    if fraction > 0.3:
        return YELLOW
    return RED


class MultiSound:
    """A pool of copies of one sound, played in turn so they can overlap."""

    def __init__(self, sounds: Iterable[Any]) -> None:
        self._sounds = list(sounds)
        if not self._sounds:
            raise ValueError("a MultiSound needs at least one sound")
        self._next = 0

    @classmethod
    def load(cls, path: Path, copies: int = SOUND_COPIES) -> MultiSound:
        """Load ``path`` once and share it between ``copies`` slots."""
        sound = pygame.mixer.Sound(str(path))
        return cls([sound] * copies)

    def __len__(self) -> int:
        return len(self._sounds)

    def play(self) -> None:
        """Play the current copy and move on to the next one."""
        self._sounds[self._next].play()
        self._next = (self._next + 1) % len(self._sounds)


@dataclass
class SoundBank:
    """All the game's sounds: named effects, the music and the zombie groans."""

    effects: dict[str, MultiSound] = field(default_factory=dict)
    music: Any = None
    zombies: list[Any] = field(default_factory=list)

    @classmethod
    def load(cls, directory: Path) -> SoundBank:
        """Load the sounds from an ``audio`` directory."""
        effects = {
            "shoot": MultiSound.load(directory / "shoot.wav"),
            "pickup": MultiSound.load(directory / "pickup.wav"),
            "place": MultiSound.load(directory / "place.wav"),
            "no_ammo": MultiSound.load(directory / "noAmmo.wav"),
        }
        music = pygame.mixer.Sound(str(directory / "music.wav"))
        zombies = [
            pygame.mixer.Sound(str(directory / "zombie" / f"zombie{n}.wav")) for n in range(1, 8)
        ]
        return cls(effects=effects, music=music, zombies=zombies)

    def play(self, name: str) -> None:
        """Play the effect called ``name``."""
        try:
            effect = self.effects[name]
        except KeyError:
            raise KeyError(f"unknown sound {name!r}") from None
        effect.play()


@dataclass
class Viewport:
    """One player's part of the screen and the camera that follows them."""

    index: int
    player: Any
    width: int
    height: int
    zoom: float = 1.0
    target: Vector2 = field(default_factory=Vector2)
    surface: Any = None


@dataclass(frozen=True)
class _InputState:
    held: frozenset[int] = frozenset()
    pressed: frozenset[int] = frozenset()


def _to_screen(viewport: Viewport, pos: Vector2) -> tuple[float, float]:
    return (
        (pos.x - viewport.target.x) * viewport.zoom + viewport.width / 2,
        (pos.y - viewport.target.y) * viewport.zoom + viewport.height / 2,
    )


class App:
    """Runs a world in a window: one thread per player reads input, the main loop draws."""

    def __init__(
        self,
        world: World | None = None,
        screen_size: tuple[int, int] = (1280, 720),
        assets: Path = Path("assets"),
        fullscreen: bool = True,
    ) -> None:
        self.world = world if world is not None else World()
        self.assets = Path(assets)
        self.fullscreen = fullscreen
        self.sounds = SoundBank()
        self.world.on_sound = self._play_effect
        self.viewports: list[Viewport] = []
        self._build_viewports(screen_size)

        self._input = _InputState()
        self._semaphores: list[threading.Semaphore] = []
        self._threads: list[threading.Thread] = []
        self._zombie_channels: dict[int, Any] = {}
        self._rng = random.Random()

        self._screen: Any = None
        self._clock: Any = None
        self._fonts: dict[int, Any] = {}
        self._player_textures: list[Any] = []
        self._zombie_texture: Any = None

    # Setup

    def _build_viewports(self, screen_size: tuple[int, int]) -> None:
        width, height = screen_size
        count = len(self.world.players)
        old_zoom = {vp.index: vp.zoom for vp in self.viewports}
        self.viewports = [
            Viewport(
                index=i,
                player=player,
                width=width // count,
                height=height,
                zoom=old_zoom.get(i, 1.0),
            )
            for i, player in enumerate(self.world.players)
        ]

    def _play_effect(self, name: str) -> None:
        if name in self.sounds.effects:
            self.sounds.play(name)

    def _load_textures(self) -> None:
        try:
            self._player_textures = [
                pygame.image.load(str(self.assets / "player1.png")).convert_alpha(),
                pygame.image.load(str(self.assets / "player2.png")).convert_alpha(),
            ]
        except (pygame.error, FileNotFoundError) as exc:
            raise FileNotFoundError("ERROR: Failed to load player textures!") from exc
        try:
            self._zombie_texture = pygame.image.load(
                str(self.assets / "zombie.png")
            ).convert_alpha()
        except (pygame.error, FileNotFoundError):
            self._zombie_texture = None

    def _load_sounds(self) -> None:
        try:
            pygame.mixer.init()
            self.sounds = SoundBank.load(self.assets / "audio")
        except (pygame.error, FileNotFoundError):
            self.sounds = SoundBank()

    # Player threads

    def _start_workers(self) -> None:
        count = len(self.viewports)
        self._semaphores = [threading.Semaphore(1 if i == 0 else 0) for i in range(count)]
        self._threads = [
            threading.Thread(target=self._player_loop, args=(i,), daemon=True)
            for i in range(count)
        ]
        for thread in self._threads:
            thread.start()

    def _player_loop(self, index: int) -> None:
        own = self._semaphores[index]
        following = self._semaphores[(index + 1) % len(self._semaphores)]
        last_frame = -1
        while not self.world.quitting:
            if not own.acquire(timeout=0.05):
                continue
            frame = self.world.frame_count
            if frame == last_frame:
                following.release()
                time.sleep(0.001)
                continue
            last_frame = frame
            state = self._input
            self._apply_input(index, state.held, state.pressed)
            following.release()

    def _apply_input(self, index: int, held: Iterable[int], pressed: Iterable[int]) -> None:
        held = set(held)
        pressed = set(pressed)
        world = self.world
        scheme = CONTROL_SCHEMES[index % len(CONTROL_SCHEMES)]
        player = world.players[index]

        dx = dy = 0
        if scheme.up in held:
            dy = -1
        if scheme.left in held:
            dx = -1
        if scheme.down in held:
            dy = 1
        if scheme.right in held:
            dx = 1

        if scheme.build_small in pressed:
            with player.lock:
                world.build_solar_charger(player.position, 1)
        if scheme.build_large in pressed:
            with player.lock:
                world.build_solar_charger(player.position, 2)
        if scheme.shoot in pressed:
            world.shoot(player)

        if index == 0:
            if pygame.K_EQUALS in pressed:
                for viewport in self.viewports:
                    viewport.zoom += ZOOM_STEP
            if pygame.K_MINUS in pressed:
                for viewport in self.viewports:
                    viewport.zoom -= ZOOM_STEP

        world.collect_solar_cells(player)
        world.move_player(player, dx, dy)

    def stop(self) -> None:
        """Ask the game to end and wait for the player threads."""
        self.world.quitting = True
        for semaphore in self._semaphores:
            semaphore.release()
        for thread in self._threads:
            thread.join(timeout=1.0)
        if self.sounds.music is not None:
            self.sounds.music.stop()

    # Main loop

    def run(self) -> None:
        """Open the window and play until the game is ended or the window closed."""
        pygame.init()
        try:
            if self.fullscreen:
                self._screen = pygame.display.set_mode((0, 0), pygame.FULLSCREEN)
            else:
                size = (sum(vp.width for vp in self.viewports), self.viewports[0].height)
                self._screen = pygame.display.set_mode(size)
            pygame.display.set_caption(TITLE)
            self._clock = pygame.time.Clock()
            self._load_textures()
            self._load_sounds()
            self._build_viewports(self._screen.get_size())
            self._start_workers()

            while not self.world.quitting:
                pressed: set[int] = set()
                for event in pygame.event.get():
                    if event.type == pygame.QUIT:
                        self.world.quitting = True
                    elif event.type == pygame.KEYDOWN:
                        pressed.add(event.key)
                state = pygame.key.get_pressed()
                held = frozenset(key for key in _WATCHED_KEYS if state[key])
                self._input = _InputState(held, frozenset(pressed))

                self._update(pressed)
                self.draw()
                pygame.display.flip()
                self._clock.tick(self.world.settings.target_fps)
        finally:
            self.stop()
            pygame.quit()

    def _update(self, pressed: Iterable[int]) -> None:
        pressed = set(pressed)
        world = self.world
        music = self.sounds.music

        if music is not None and not world.paused and music.get_num_channels() == 0:
            music.play()

        if (pygame.K_p in pressed or pygame.K_ESCAPE in pressed) and not (
            world.game_over or world.game_won
        ):
            world.paused = not world.paused
            if world.paused:
                if music is not None:
                    music.stop()
                world.show_pause_menu = True
                world.show_controls_menu = False
                world.menu_selection = MenuChoice.RESTART
            elif music is not None:
                music.play()

        if pygame.K_BACKSPACE in pressed:
            world.add_enemies(DEBUG_ENEMY_BATCH)

        world.step()
        if not world.paused:
            self._update_zombie_sounds()

        self._handle_menu_input(pressed)

    def _handle_menu_input(self, pressed: set[int]) -> None:
        world = self.world
        finished = world.game_over or world.game_won
        if world.paused and not finished:
            if world.show_controls_menu:
                if pygame.K_BACKSPACE in pressed:
                    world.show_controls_menu = False
                return
            self._navigate_menu(pressed)
        elif finished:
            self._navigate_menu(pressed)
            if world.show_controls_menu and pygame.K_BACKSPACE in pressed:
                world.show_controls_menu = False

    def _navigate_menu(self, pressed: set[int]) -> None:
        if pygame.K_DOWN in pressed:
            self.world.menu_next()
        if pygame.K_UP in pressed:
            self.world.menu_previous()
        if pygame.K_RETURN in pressed:
            self.world.choose_menu()

    def _update_zombie_sounds(self) -> None:
        if not self.sounds.zombies:
            return
        for index, enemy in enumerate(self.world.enemies):
            channel = self._zombie_channels.get(index)
            if not enemy.active:
                if channel is not None:
                    channel.stop()
                    del self._zombie_channels[index]
                continue
            if channel is None or not channel.get_busy():
                sound = self._rng.choice(self.sounds.zombies)
                sound.set_volume(ZOMBIE_VOLUME)
                new_channel = sound.play()
                if new_channel is None:
                    self._zombie_channels.pop(index, None)
                else:
                    self._zombie_channels[index] = new_channel

    # Drawing

    def _font(self, size: int) -> Any:
        size = max(1, int(size))
        font = self._fonts.get(size)
        if font is None:
            font = pygame.font.Font(None, size)
            self._fonts[size] = font
        return font

    def _measure(self, text: str, size: int) -> int:
        return self._font(size).size(text)[0]

    def _text(self, surface: Any, text: str, x: float, y: float, size: int, color: Color) -> None:
        rendered = self._font(size).render(text, True, color[:3])
        if len(color) == 4 and color[3] < 255:
            rendered.set_alpha(color[3])
        surface.blit(rendered, (int(x), int(y)))

    def _dim(self, surface: Any) -> None:
        shade = pygame.Surface(surface.get_size(), pygame.SRCALPHA)
        shade.fill((0, 0, 0, OVERLAY_ALPHA))
        surface.blit(shade, (0, 0))

    def draw(self) -> None:
        """Draw one frame: every viewport, the shared HUD and any menu."""
        if self._screen is None:
            raise RuntimeError("the window is not open")
        screen = self._screen
        world = self.world
        screen_w, screen_h = screen.get_size()
        slot = screen_w // len(self.viewports)

        for viewport in self.viewports:
            self._draw_viewport(viewport)

        screen.fill(BLACK[:3])
        for i, viewport in enumerate(self.viewports):
            screen.blit(viewport.surface, (i * slot, 0))
        for i in range(1, len(self.viewports)):
            pygame.draw.rect(screen, WHITE[:3], (i * slot - 2, 0, 4, screen_h))

        fraction = min(1.0, max(0.0, world.battery / 100.0))
        bar_height = 20
        pygame.draw.rect(screen, GRAY[:3], (0, 0, screen_w, bar_height))
        pygame.draw.rect(
            screen, health_color(fraction)[:3], (0, 0, int(screen_w * fraction), bar_height)
        )
        battery_text = f"{world.battery:.1f} volts"
        self._text(
            screen,
            battery_text,
            screen_w / 2 - self._measure(battery_text, BAR_FONT_SIZE) / 2,
            1,
            BAR_FONT_SIZE,
            WHITE,
        )

        fps = self._clock.get_fps() if self._clock is not None else 0.0
        self._text(screen, f"{round(fps)} FPS", 0, bar_height + 5, 20, GREEN)

        with world.enemy_lock:
            enemies_left = world.enemy_count
        seconds = world.seconds_to_next_wave()
        next_wave = f"{seconds}s" if seconds is not None else "Infinity"
        lines = (
            f"Enemies Alive: {enemies_left}",
            f"Solar Cells: {world.solar_cells_collected}",
            f"Current Wave: {world.current_wave}",
            f"Time to next wave: {next_wave}",
        )
        for n, line in enumerate(lines):
            self._text(
                screen,
                line,
                screen_w * 0.01,
                bar_height + 30 + n * HUD_FONT_SIZE,
                HUD_FONT_SIZE,
                WHITE,
            )

        self._draw_message(screen)
        self._draw_overlays(screen)

    def _draw_viewport(self, viewport: Viewport) -> None:
        world = self.world
        if viewport.surface is None or viewport.surface.get_size() != (
            viewport.width,
            viewport.height,
        ):
            viewport.surface = pygame.Surface((viewport.width, viewport.height))
        surface = viewport.surface
        zoom = viewport.zoom

        with viewport.player.lock:
            pos = viewport.player.position
            viewport.target = Vector2(float(int(pos.x)), float(int(pos.y)))

        surface.fill(BLACK[:3])

        half = world.settings.map_size / 2
        left, top = _to_screen(viewport, Vector2(-half, -half))
        side = world.settings.map_size * zoom
        pygame.draw.rect(surface, GREEN[:3], (left, top, side, side), 1)

        for charger in world.solar_chargers:
            if charger.active:
                corner = Vector2(
                    charger.position.x - charger.width / 4,
                    charger.position.y - charger.height / 4,
                )
                x, y = _to_screen(viewport, corner)
                pygame.draw.rect(
                    surface,
                    CHARGER_COLOR[:3],
                    (x, y, charger.width * zoom, charger.height * zoom),
                )

        for cell in world.solar_cells:
            if cell.active:
                cx, cy, cw, ch = cell.hitbox()
                x, y = _to_screen(viewport, Vector2(cx, cy))
                radius = max(1, int(cw * zoom / 2))
                pygame.draw.rect(
                    surface, GRAY[:3], (x, y, cw * zoom, ch * zoom), border_radius=radius
                )

        player_pos = viewport.player.position
        target = world.closest_enemy_index(player_pos)
        if target is not None:
            enemy_pos = world.enemies[target].position
            if distance(player_pos, enemy_pos) <= world.settings.gun_range:
                pygame.draw.line(
                    surface,
                    YELLOW[:3],
                    _to_screen(viewport, player_pos),
                    _to_screen(viewport, enemy_pos),
                )

        for enemy in world.enemies:
            if not enemy.active:
                continue
            size = max(1, int(enemy.size * zoom))
            cx, cy = _to_screen(viewport, enemy.position)
            if self._zombie_texture is not None:
                image = pygame.transform.scale(self._zombie_texture, (size, size))
                surface.blit(image, (cx - size / 2, cy - size / 2))
            else:
                pygame.draw.circle(surface, enemy.color[:3], (cx, cy), size / 2)

        for i, player in enumerate(world.players):
            with player.lock:
                size = max(1, int(player.size * zoom))
                cx, cy = _to_screen(viewport, player.position)
                flipped = player.flip_dir < 0
                color = player.color
            if self._player_textures:
                texture = self._player_textures[i % len(self._player_textures)]
                image = pygame.transform.scale(texture, (size, size))
                if flipped:
                    image = pygame.transform.flip(image, True, False)
                surface.blit(image, (cx - size / 2, cy - size / 2))
            else:
                pygame.draw.rect(surface, color[:3], (cx - size / 2, cy - size / 2, size, size))

        back_x = viewport.width / 2 - 160
        back_y = viewport.height - 40
        pygame.draw.rect(surface, GRAY[:3], (back_x, back_y, 340, 20))
        with viewport.player.lock:
            health = viewport.player.health
        fraction = health / 100.0
        pygame.draw.rect(
            surface,
            health_color(fraction)[:3],
            (back_x, back_y, max(0.0, 340 * fraction), 20),
        )
        health_text = f"{health:.1f}"
        self._text(
            surface,
            health_text,
            viewport.width / 2 - self._measure(health_text, BAR_FONT_SIZE) / 2,
            viewport.height - BAR_FONT_SIZE - viewport.height * 0.025,
            BAR_FONT_SIZE,
            WHITE,
        )

    def _draw_message(self, screen: Any) -> None:
        world = self.world
        if not world.message:
            return
        alpha = int(255 * world.message_opacity)
        if alpha <= 0:
            return
        screen_w, screen_h = screen.get_size()
        width = self._measure(world.message, MESSAGE_DRAW_SIZE)
        x = screen_w * 0.5 - width * 0.5
        y = screen_h * 0.5 - MESSAGE_DRAW_SIZE * 0.5
        backdrop = pygame.Surface((max(1, width), MESSAGE_DRAW_SIZE), pygame.SRCALPHA)
        backdrop.fill((0, 0, 0, alpha))
        screen.blit(backdrop, (int(x), int(y)))
        self._text(screen, world.message, x, y, MESSAGE_DRAW_SIZE, (255, 255, 255, alpha))

    def _draw_overlays(self, screen: Any) -> None:
        world = self.world
        finished = world.game_over or world.game_won
        if world.paused and not finished:
            self._dim(screen)
            if world.show_controls_menu:
                self._draw_controls(screen)
            else:
                self._draw_pause_menu(screen)
        if finished:
            self._dim(screen)
            screen_w, screen_h = screen.get_size()
            title = "Game Over :(" if world.game_over else "YOU SURVIVED :)"
            size = int(screen_h * 0.1)
            self._text(
                screen,
                title,
                screen_w / 2 - self._measure(title, size) / 2,
                screen_h * 0.2,
                size,
                WHITE,
            )
            self._draw_menu_options(screen)
            if world.show_controls_menu:
                self._dim(screen)
                self._draw_controls(screen)

    def _menu_layout(self, screen: Any) -> tuple[int, int, int, int, int, int]:
        screen_w, screen_h = screen.get_size()
        font_size = int(screen_h * 0.05)
        button_height = int(screen_h * 0.08)
        button_width = int(screen_w * 0.3)
        spacing = int(screen_h * 0.02)
        center_x = screen_w // 2
        start_y = screen_h // 2 - (button_height * 3 + spacing * 2) // 2
        return center_x, start_y, font_size, button_height, button_width, spacing

    def _draw_pause_menu(self, screen: Any) -> None:
        center_x, start_y, font_size, _, _, spacing = self._menu_layout(screen)
        self._text(
            screen,
            "PAUSED",
            center_x - self._measure("PAUSED", font_size) / 2,
            start_y - font_size - spacing,
            font_size,
            WHITE,
        )
        self._draw_menu_options(screen)

    def _draw_menu_options(self, screen: Any) -> None:
        center_x, start_y, font_size, height, width, spacing = self._menu_layout(screen)
        for choice in MenuChoice:
            top = start_y + (height + spacing) * int(choice)
            pygame.draw.rect(screen, LIGHTGRAY[:3], (center_x - width // 2, top, width, height))
            label = MENU_LABELS[choice]
            color = YELLOW if self.world.menu_selection == choice else WHITE
            self._text(
                screen,
                label,
                center_x - self._measure(label, font_size) / 2,
                top + (height - font_size) / 2,
                font_size,
                color,
            )

    def _draw_controls(self, screen: Any) -> None:
        screen_w, screen_h = screen.get_size()
        font_size = int(screen_h * 0.04)
        title_size = int(screen_h * 0.05)
        center_x = screen_w // 2
        self._text(
            screen,
            "CONTROLS",
            center_x - self._measure("CONTROLS", title_size) / 2,
            screen_h * 0.2,
            title_size,
            WHITE,
        )
        for line, height in CONTROLS_TEXT:
            self._text(
                screen,
                line,
                center_x - self._measure(line, font_size) / 2,
                screen_h * height,
                font_size,
                YELLOW,
            )


def main(argv: Sequence[str] | None = None) -> int:
    """Start the game; return the process exit status."""
    parser = argparse.ArgumentParser(
        prog="threadwars", description="Two-player split-screen survival game."
    )
    parser.add_argument("--assets", type=Path, default=Path("assets"), help="asset directory")
    parser.add_argument("--windowed", action="store_true", help="do not go fullscreen")
    args = parser.parse_args(argv)

    app = App(assets=args.assets, fullscreen=not args.windowed)
    try:
        app.run()
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0