import pytest

from threadwars.models import (
    Enemy,
    EnemyWave,
    GameSettings,
    Player,
    SolarCell,
    SolarCharger,
    default_waves,
)
from threadwars.vector_ops import Vector2


def test_default_waves_match_game():
    waves = default_waves()
    assert [(w.num_enemies, w.wait_time) for w in waves] == [(5, 10), (25, 40), (50, 80)]


def test_default_waves_are_fresh_lists():
    first = default_waves()
    first.pop()
    assert len(default_waves()) == 3


def test_player_hitbox_is_centred_on_position():
    player = Player(position=Vector2(40, -12), size=100)
    left, top, width, height = player.hitbox()
    assert (width, height) == (100, 100)
    assert left + width / 2 == pytest.approx(40)
    assert top + height / 2 == pytest.approx(-12)


def test_solar_cell_hitbox_is_centred_on_position():
    cell = SolarCell(position=Vector2(-300, 250), size=20, active=True)
    left, top, width, height = cell.hitbox()
    assert (width, height) == (20, 20)
    assert left + width / 2 == pytest.approx(-300)
    assert top + height / 2 == pytest.approx(250)


def test_hitbox_follows_moved_player():
    player = Player()
    before = player.hitbox()
    player.position = player.position + Vector2(5, 7)
    after = player.hitbox()
    assert after[0] - before[0] == pytest.approx(5)
    assert after[1] - before[1] == pytest.approx(7)


def test_inactive_charger_shape_gives_no_charge():
    assert SolarCharger().charge_per_frame(60) == 0


def test_large_charger_charges_twice_small():
    small = SolarCharger(width=100, height=100, active=True)
    large = SolarCharger(width=200, height=100, active=True)
    assert large.charge_per_frame(60) == pytest.approx(2 * small.charge_per_frame(60))


def test_charge_over_one_second_independent_of_fps():
    charger = SolarCharger(width=200, height=100, active=True)
    assert charger.charge_per_frame(30) * 30 == pytest.approx(charger.charge_per_frame(120) * 120)


def test_enemy_defaults():
    enemy = Enemy()
    assert enemy.active is False
    assert enemy.size == 30
    assert enemy.damage == 5


def test_settings_defaults_from_game():
    settings = GameSettings()
    assert settings.player_count == 2
    assert settings.gun_range == 300
    assert settings.max_enemies == 300
    assert settings.max_solar_cells == 100
    assert settings.map_size == 2000
    assert settings.target_fps == 60
    assert settings.waves == default_waves()


@pytest.mark.parametrize(
    "kwargs",
    [{"player_count": 0}, {"target_fps": 0}, {"map_size": 1}, {"solar_charger_workers": 0}],
)
def test_settings_reject_invalid_values(kwargs):
    with pytest.raises(ValueError):
        GameSettings(**kwargs)


def test_enemy_wave_is_immutable():
    wave = EnemyWave(num_enemies=5, wait_time=10)
    with pytest.raises(AttributeError):
        wave.num_enemies = 6  # type: ignore[misc]
    assert (wave.num_enemies, wave.wait_time) == (5, 10)


def test_players_have_independent_locks():
    a, b = Player(), Player()
    assert a.lock is not b.lock
    assert a == b