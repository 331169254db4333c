import pygame
import pytest

from snakegrid import app, gameplay
from snakegrid.components import DeltaTime, KeyControl, Position, SnakeApple, SnakeBoundary2D, SnakePartHead
from snakegrid.ecs import Registry
from snakegrid.grid import index_from_pos

_START = (2.5, app.MAP_HEIGHT / 2.0 - 1.0)
_TICK = app.DESIRED_TICK_PERIOD_MS
_MARGINS = (app.MAP_MARGIN_PX, app.MAP_MARGIN_PX)


@pytest.fixture
def snake_app():
    return app.SnakeApp()


def _last(registry, *types):
    return registry.view(*types)[0][-1]


def _head_xy(snake_app):
    pos = gameplay.snake_head_position(snake_app.registry)
    return pos.x, pos.y


def _force_failure(snake_app):
    pos = _last(snake_app.registry, SnakePartHead, Position)
    pos.x, pos.y = -5.0, -5.0


def _run_ticks(snake_app, ticks):
    snake_app.advance(0)
    return snake_app.advance(_TICK * ticks)


def test_tick_step_at_full_speed_stays_below_limit(snake_app):
    dt_ms = _last(snake_app.registry, DeltaTime).dt_ms
    assert dt_ms == _TICK
    assert dt_ms > 0

    snake_app.handle_key_down(pygame.K_SPACE)
    for tick in range(3):
        snake_app.advance(dt_ms * tick)
    before = _head_xy(snake_app)[0]
    snake_app.advance(dt_ms * 3)
    step = _head_xy(snake_app)[0] - before

    assert 0.0 < step <= app.TICK_UNIT_TRAVELLED
    assert step == pytest.approx(app.MAX_POSSIBLE_SPEED * dt_ms / 1000.0, rel=1e-4)


def test_init_gameplay_scene_builds_fresh_game():
    registry = Registry()
    stale = registry.create()
    app.init_gameplay_scene(registry)
    assert not registry.valid(stale)
    assert registry.count(SnakeApple) == 1
    assert registry.count(SnakePartHead) == 1
    assert gameplay.get_score(registry) == 0
    control = _last(registry, KeyControl)
    assert (control.last_movement_key, control.is_shift_key_down) == ("d", False)
    assert _last(registry, DeltaTime).dt_ms == _TICK
    boundary = _last(registry, SnakeBoundary2D)
    assert (boundary.x, boundary.y) == (app.MAP_WIDTH, app.MAP_HEIGHT)
    apple_pos = _last(registry, SnakeApple, Position)
    assert (apple_pos.x, apple_pos.y) == (app.MAP_WIDTH / 2.0, app.MAP_HEIGHT / 2.0)
    head = gameplay.snake_head_position(registry)
    assert (head.x, head.y) == _START
    assert not gameplay.is_game_failure(registry)
    assert not gameplay.is_game_success(registry)


@pytest.mark.parametrize("width, height", [(640, 480), (480, 640), (300, 300)])
def test_centered_boundary_is_square_and_centred(width, height):
    x, y, w, h = app.centered_boundary(width, height, 30, 30)
    assert w == h
    assert x + w / 2.0 == width / 2.0
    assert y + h == height - 30
    assert w == min(width, height) - 60


def test_escape_toggles_pause(snake_app):
    assert snake_app.handle_key_down(pygame.K_ESCAPE) is True
    assert snake_app.paused is True
    assert snake_app.status_text().startswith("Game paused.")
    assert snake_app.handle_key_down(pygame.K_ESCAPE) is True
    assert snake_app.paused is False
    assert snake_app.status_text() == "Score: 0"


@pytest.mark.parametrize(
    "key, expected",
    [
        (pygame.K_w, "w"),
        (pygame.K_UP, "w"),
        (pygame.K_a, "a"),
        (pygame.K_LEFT, "a"),
        (pygame.K_s, "s"),
        (pygame.K_DOWN, "s"),
        (pygame.K_d, "d"),
        (pygame.K_RIGHT, "d"),
    ],
)
def test_movement_keys_set_direction(snake_app, key, expected):
    snake_app.handle_key_down(pygame.K_s if expected != "s" else pygame.K_w)
    snake_app.handle_key_down(key)
    assert _last(snake_app.registry, KeyControl).last_movement_key == expected


def test_space_speeds_up_while_held(snake_app):
    snake_app.handle_key_down(pygame.K_SPACE)
    assert gameplay.is_speeding_up(snake_app.registry) is True
    snake_app.handle_key_up(pygame.K_SPACE)
    assert gameplay.is_speeding_up(snake_app.registry) is False


def test_first_advance_only_records_time(snake_app):
    assert snake_app.advance(1000) is False
    assert _head_xy(snake_app) == _START


def test_advance_moves_head_right(snake_app):
    redraw = _run_ticks(snake_app, 20)
    head_x, head_y = _head_xy(snake_app)
    assert 2.5 < head_x < 4.0
    assert head_y == _START[1]
    velocity = gameplay.snake_head_velocity(snake_app.registry)
    assert (velocity.x, velocity.y) == (app.SPEED, 0.0)
    assert redraw is True


def test_paused_game_does_not_move_but_redraws(snake_app):
    snake_app.handle_key_down(pygame.K_ESCAPE)
    assert _run_ticks(snake_app, 5) is True
    assert _head_xy(snake_app)[0] == 2.5


def test_advance_without_elapsed_tick_does_nothing(snake_app):
    snake_app.advance(100)
    assert snake_app.advance(100 + _TICK - 1) is False
    assert _head_xy(snake_app)[0] == 2.5


def test_game_over_status_and_escape_quits(snake_app):
    _force_failure(snake_app)
    assert snake_app.status_text().startswith("Game over!")
    assert snake_app.handle_key_down(pygame.K_ESCAPE) is False
    assert snake_app.paused is False


def test_restart_only_after_game_over(snake_app):
    _run_ticks(snake_app, 10)
    moved = _head_xy(snake_app)
    snake_app.handle_key_down(pygame.K_r)
    assert _head_xy(snake_app) == moved

    _force_failure(snake_app)
    snake_app.handle_key_down(pygame.K_r)
    assert _head_xy(snake_app) == _START
    assert not gameplay.is_game_failure(snake_app.registry)


def test_game_over_freezes_updates(snake_app):
    _force_failure(snake_app)
    _run_ticks(snake_app, 10)
    assert _head_xy(snake_app) == (-5.0, -5.0)


def _cell_center(surface, pos):
    x, y, w, h = app.centered_boundary(*surface.get_size(), *_MARGINS)
    col, row = index_from_pos(pos, app.MAP_HEIGHT)
    cell_w = w / app.MAP_WIDTH
    cell_h = h / app.MAP_HEIGHT
    return int(x + (col + 0.5) * cell_w), int(y + (row + 0.5) * cell_h)


def _rgb(surface, point):
    return tuple(surface.get_at(point))[:3]


def test_render_draws_apple_and_head(snake_app):
    surface = pygame.Surface((app.WINDOW_WIDTH, app.WINDOW_HEIGHT))
    assert snake_app.render(surface) is True
    apple_pos = _last(snake_app.registry, SnakeApple, Position)
    head_pos = gameplay.snake_head_position(snake_app.registry)
    assert _rgb(surface, _cell_center(surface, apple_pos)) == (255, 0, 0)
    assert _rgb(surface, _cell_center(surface, head_pos)) == (0, 0, 255)
    x, y, _, h = app.centered_boundary(app.WINDOW_WIDTH, app.WINDOW_HEIGHT, *_MARGINS)
    assert _rgb(surface, (int(x), int(y + h / 3))) == (255, 255, 255)


def test_render_fails_when_map_does_not_fit(snake_app):
    surface = pygame.Surface((40, 40))
    assert snake_app.render(surface) is False
    assert _rgb(surface, (20, 20)) == (0, 0, 0)