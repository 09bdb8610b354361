import random

import pygame
import pytest

from threadwars.app import (
    CONTROL_SCHEMES,
    App,
    Controls,
    MultiSound,
    SoundBank,
    Viewport,
    health_color,
    main,
)
from threadwars.models import GREEN, RED, YELLOW, GameSettings
from threadwars.world import MenuChoice, World


class FakeSound:
    def __init__(self):
        self.plays = 0

    def play(self):
        self.plays += 1


def make_app():
    world = World(GameSettings(), rng=random.Random(7))
    return App(world)


@pytest.mark.parametrize(
    "fraction, expected",
    [(1.0, GREEN), (0.61, GREEN), (0.6, YELLOW), (0.5, YELLOW), (0.3, RED), (0.0, RED), (-1.0, RED)],
)
def test_health_color_thresholds(fraction, expected):
    assert health_color(fraction) == expected


def test_multisound_round_robin():
    first, second = FakeSound(), FakeSound()
    multi = MultiSound([first, second])
    for _ in range(3):
        multi.play()
    assert (first.plays, second.plays) == (2, 1)
    assert len(multi) == 2


def test_multisound_needs_sounds():
    with pytest.raises(ValueError):
        MultiSound([])


def test_soundbank_plays_named_effect():
    sound = FakeSound()
    bank = SoundBank(effects={"shoot": MultiSound([sound])})
    bank.play("shoot")
    assert sound.plays == 1


def test_soundbank_unknown_name():
    bank = SoundBank()
    with pytest.raises(KeyError):
        bank.play("shoot")


def test_control_schemes_match_keymaps():
    assert CONTROL_SCHEMES[0] == Controls(
        pygame.K_w, pygame.K_a, pygame.K_s, pygame.K_d, pygame.K_SPACE, pygame.K_1, pygame.K_2
    )
    assert CONTROL_SCHEMES[1].shoot == pygame.K_RETURN
    assert CONTROL_SCHEMES[1].build_large == pygame.K_0


def test_viewports_split_screen_between_players():
    world = World(GameSettings(player_count=2))
    app = App(world, screen_size=(1000, 500))
    assert [vp.width for vp in app.viewports] == [500, 500]
    assert all(vp.height == 500 for vp in app.viewports)
    assert [vp.player for vp in app.viewports] == world.players
    assert isinstance(app.viewports[0], Viewport) and app.viewports[0].zoom == 1.0


def test_movement_input_moves_player_right():
    app = make_app()
    player = app.world.players[0]
    start = player.position
    app._apply_input(0, {pygame.K_d}, set())
    assert player.position.x == pytest.approx(start.x + player.speed)
    assert player.position.y == start.y
    assert player.flip_dir == 1


def test_second_player_uses_arrow_keys():
    app = make_app()
    player = app.world.players[1]
    start = player.position
    app._apply_input(1, {pygame.K_LEFT}, set())
    assert player.position.x == pytest.approx(start.x - player.speed)
    assert player.flip_dir == -1
    app._apply_input(1, {pygame.K_a}, set())
    assert player.position.x == pytest.approx(start.x - player.speed)


def test_build_without_cells_shows_message():
    app = make_app()
    app._apply_input(0, set(), {pygame.K_1})
    assert app.world.message == "Not enough solar cells, collect more."
    assert not any(charger.active for charger in app.world.solar_chargers)


def test_shoot_without_battery_shows_message():
    app = make_app()
    app._apply_input(0, set(), {pygame.K_SPACE})
    assert app.world.message == "[!] Not enough battery, make solar panels"


def test_zoom_keys_only_from_first_viewport():
    app = make_app()
    app._apply_input(1, set(), {pygame.K_EQUALS})
    assert [vp.zoom for vp in app.viewports] == [1.0, 1.0]
    app._apply_input(0, set(), {pygame.K_EQUALS})
    app._apply_input(0, set(), {pygame.K_EQUALS})
    app._apply_input(0, set(), {pygame.K_MINUS})
    assert [vp.zoom for vp in app.viewports] == [1.25, 1.25]


def test_pause_key_opens_menu():
    app = make_app()
    app.world.menu_selection = MenuChoice.END_GAME
    app._update({pygame.K_p})
    assert app.world.paused
    assert app.world.show_pause_menu
    assert app.world.menu_selection == MenuChoice.RESTART
    app._update({pygame.K_ESCAPE})
    assert not app.world.paused


def test_menu_navigation_while_paused():
    app = make_app()
    app._update({pygame.K_p})
    app._update({pygame.K_DOWN})
    assert app.world.menu_selection == MenuChoice.CONTROLS
    app._update({pygame.K_RETURN})
    assert app.world.show_controls_menu
    app._update({pygame.K_BACKSPACE})
    assert not app.world.show_controls_menu


def test_end_game_from_menu_quits():
    app = make_app()
    app._update({pygame.K_p})
    app._update({pygame.K_UP})
    assert app.world.menu_selection == MenuChoice.END_GAME
    app._update({pygame.K_RETURN})
    assert app.world.quitting


def test_backspace_adds_enemies():
    app = make_app()
    app._update({pygame.K_BACKSPACE})
    assert app.world.enemy_count == 5
    assert sum(enemy.active for enemy in app.world.enemies) == 5


def test_update_advances_frame_unless_paused():
    app = make_app()
    app._update(set())
    assert app.world.frame_count == 1
    app._update({pygame.K_p})
    app._update(set())
    assert app.world.frame_count == 1


def test_stop_joins_player_threads():
    app = make_app()
    app._start_workers()
    assert all(thread.is_alive() for thread in app._threads)
    app.stop()
    assert app.world.quitting
    assert not any(thread.is_alive() for thread in app._threads)


def test_draw_without_window_raises():
    app = make_app()
    with pytest.raises(RuntimeError):
        app.draw()


def test_main_rejects_unknown_option():
    with pytest.raises(SystemExit) as info:
        main(["--no-such-option"])
    assert info.value.code == 2