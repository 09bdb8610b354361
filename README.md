# threadwars

A two-player, split-screen survival arcade game. Zombies come in waves.
Pick up solar cells that appear on the map, spend them on solar chargers,
and let the chargers fill the shared battery that powers your guns. Outlast
every wave to win; if either player's health drops below zero, the game is
over.

## Installing

```
pip install .
```

The game needs a display and an asset directory. By default it looks for
`assets/` in the directory you start it from. It must hold `player1.png`
and `player2.png`; without them the game prints
`ERROR: Failed to load player textures!` and exits with status 1.
`zombie.png` and the sounds under `audio/` (`shoot.wav`, `pickup.wav`,
`place.wav`, `noAmmo.wav`, `music.wav` and `zombie/zombie1.wav` to
`zombie/zombie7.wav`) are optional: without the image zombies are drawn as
red circles, and without the sounds the game runs silently.

## Playing

```
threadwars
```

Options:

- `--assets DIR` reads images and sounds from `DIR` instead of `assets`.
- `--windowed` opens a window instead of going full screen.

The screen is split into one view per player, each camera following its
player.

| Action                        | Player 1 | Player 2   |
|-------------------------------|----------|------------|
| Move                          | W A S D  | Arrow keys |
| Shoot the nearest zombie      | Space    | Enter      |
| Build small solar charger     | 1        | 9          |
| Build large solar charger     | 2        | 0          |

Shared keys:

- `P` or `Esc` pauses and opens the menu (Restart, Controls, End Game);
  move with the arrow keys and choose with Enter. After the game is won or
  lost the same menu is shown.
- `=` and `-` zoom both views in and out.
- Backspace calls in five extra zombies; on the controls screen it also
  returns to the menu.

### Rules in short

- A shot needs more than 0.1 volts of battery, costs 0.1 volts and kills
  the nearest zombie within range (300 units). With too little charge you
  get a warning instead.
- A small charger costs 10 solar cells, a large one 20. Every active
  charger adds charge each frame in proportion to its area.
- Twenty new solar cells are scattered over the map every five seconds.
- Zombies walk towards the nearest player and drain health while in reach.
- Three waves arrive: 5 zombies after 10 s, 25 after a further 40 s and 50
  after a further 80 s. Clear the last one to win.

## Using the game logic on its own

The simulation lives in `threadwars.world.World` and does not need a window,
so it can be driven from scripts or tests:

```python
from threadwars.world import World

world = World()
world.generate_solar_cells(20)
world.add_enemies(5)
for _ in range(60):
    world.step()
print(world.seconds_to_next_wave())
```

`World` also takes a `GameSettings`, a `random.Random` for reproducible
games, and an `on_sound` callback that receives effect names (`"shoot"`,
`"pickup"`, `"place"`, `"no_ammo"`).

Vector helpers (`Vector2`, `distance`, `magnitude`, `normalize`,
`direction`) are in `threadwars.vector_ops`, and the game's data types
(`Player`, `Enemy`, `SolarCharger`, `SolarCell`, `EnemyWave`,
`GameSettings`, `default_waves`) in `threadwars.models`. The window, input,
sounds and drawing are in `threadwars.app` (`App`, `main`).

## What it does not do

There is no saving or loading of games, no high-score table and no network
play: both players share one keyboard and one screen.

## Running the tests

```
pip install ".[test]"
pytest
```