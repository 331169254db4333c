# snakegrid

A classic snake game on a 20 × 20 grid. Steer the snake, eat apples to grow,
and try to fill the whole board without hitting a wall or your own body.

## Installing

```
pip install .
```

This pulls in `pygame`, which is used for the window, input and drawing.

## Playing

```
snakegrid
```

The command opens a 640 × 480 window. It takes no options besides `--help`.

| Key                 | Action                                        |
|---------------------|-----------------------------------------------|
| W / Up arrow        | move up                                       |
| A / Left arrow      | move left                                     |
| S / Down arrow      | move down                                     |
| D / Right arrow     | move right                                    |
| Space (hold)        | speed up                                      |
| Esc                 | pause / resume; quits once the game has ended |
| R                   | restart after a win or a loss                 |

The snake starts on the left of the board heading right, with the apple in the
middle. It cannot turn straight back onto its own neck. Each apple eaten adds
a body segment and the apple moves to a random free cell. The score shown
under the board is the number of body segments.

The game is won when no cell is left empty (or holding only the apple), and
lost when the head leaves the board or runs into the body; moving into the
cell the tail is just leaving is allowed. Once the game is over it stops
moving until you restart with R or quit with Esc.

## Using the pieces

Apart from `snakegrid.app`, the modules do not use pygame and can be driven
directly:

- `snakegrid.ecs` provides `Registry`, a minimal entity-component store
  (`create`, `destroy`, `clear`, `valid`, `emplace`, `get`, `all_of`, `view`,
  `count`), and `Signal`, which calls every connected callable in order.
- `snakegrid.components` holds the component records: `Position`, `Velocity`,
  `DeltaTime`, `KeyControl`, `SnakePart`, `SnakePartHead`, `SnakeApple` and
  `SnakeBoundary2D`.
- `snakegrid.grid` turns a registry into rows of `MapSlotState` flags with
  `get_map`, converts between positions and cell indices with
  `index_from_pos` and `pos_from_index`, and draws a grid as text with
  `format_map` (`.` empty, `$` head, `x` body, `@` apple).
- `snakegrid.translate_2d` moves every entity with a `Position` and a
  `Velocity` by one `DeltaTime` step (`update`, or `connect` to a `Signal`).
- `snakegrid.trailing` makes the body follow the head and moves the apple
  once it is eaten (`do_trailing`, `apple_update`, `is_going_backwards`).
- `snakegrid.gameplay` applies key presses (`up_key_down`, `left_key_down`,
  `down_key_down`, `right_key_down`, `shift_key_down`, `shift_key_up`), steps
  the game with `update`, and reports `is_game_success`, `is_game_failure`,
  `get_score` and `is_speeding_up`. Call `init` once before stepping, or
  `connect` to hook the step to a `Signal`. `update` takes an optional
  `random.Random` used to place the apple.
- `snakegrid.app` sets up the starting scene with `init_gameplay_scene`,
  computes the board's box in the window with `centered_boundary`, and runs
  the window through `SnakeApp` and `main`.

```python
import random

from snakegrid import gameplay, translate_2d
from snakegrid.app import init_gameplay_scene
from snakegrid.ecs import Registry
from snakegrid.grid import format_map, get_map

registry = Registry()
init_gameplay_scene(registry)
gameplay.init(registry)
rng = random.Random(0)

gameplay.up_key_down(registry)
for _ in range(10):
    translate_2d.update(registry)
    gameplay.update(registry, rng)

print(format_map(get_map(registry)))
print("score:", gameplay.get_score(registry))
```

## What it does not do

The board size, speed and window size are fixed in `snakegrid.app` and cannot
be changed from the command line. Scores are not saved between sessions, and
there is no menu or sound.

## Running the tests

```
pip install .[test]
pytest
```