"""Windowed snake game: scene setup, fixed-step loop, input and drawing."""

from __future__ import annotations

import argparse
import os

os.environ.setdefault("PYGAME_HIDE_SUPPORT_PROMPT", "1")

import pygame  # noqa: E402

from snakegrid import gameplay, translate_2d  # noqa: E402
from snakegrid.components import (  # noqa: E402
    DeltaTime,
    KeyControl,
    Position,
    SnakeApple,
    SnakeBoundary2D,
    SnakePartHead,
    Velocity,
)
from snakegrid.ecs import Registry, Signal  # noqa: E402
from snakegrid.grid import MapSlotState, get_map  # noqa: E402

__all__ = [
    "WINDOW_WIDTH",
    "WINDOW_HEIGHT",
    "MAP_MARGIN_PX",
    "SPEED",
    "SPEED_UP_FACTOR",
    "TICK_UNIT_TRAVELLED",
    "MAP_WIDTH",
    "MAP_HEIGHT",
    "MAX_POSSIBLE_SPEED",
    "DESIRED_TICK_PERIOD_MS",
    "init_gameplay_scene",
    "centered_boundary",
    "SnakeApp",
    "main",
]

WINDOW_WIDTH = 640
WINDOW_HEIGHT = 480
MAP_MARGIN_PX = 30

SPEED = 2.0
SPEED_UP_FACTOR = 5.0
# At most half a cell per tick, so the head never skips a cell.
TICK_UNIT_TRAVELLED = 0.25
MAP_WIDTH = 20
MAP_HEIGHT = 20

MAX_POSSIBLE_SPEED = SPEED * SPEED_UP_FACTOR
_MAXIMUM_TICK_PERIOD_MS = TICK_UNIT_TRAVELLED * 1000.0 / MAX_POSSIBLE_SPEED
DESIRED_TICK_PERIOD_MS = int(_MAXIMUM_TICK_PERIOD_MS - 1.0)

_WHITE = (255, 255, 255)
_BLACK = (0, 0, 0)
_GREEN = (0, 255, 0)
_RED = (255, 0, 0)

_MOVEMENT_KEYS = {
    pygame.K_w: gameplay.up_key_down,
    pygame.K_UP: gameplay.up_key_down,
    pygame.K_a: gameplay.left_key_down,
    pygame.K_LEFT: gameplay.left_key_down,
    pygame.K_s: gameplay.down_key_down,
    pygame.K_DOWN: gameplay.down_key_down,
    pygame.K_d: gameplay.right_key_down,
    pygame.K_RIGHT: gameplay.right_key_down,
}


def init_gameplay_scene(registry: Registry) -> None:
    """Reset the registry to a fresh game: state, apple in the middle, head on the left."""
    registry.clear()
    state = registry.create()
    registry.emplace(state, DeltaTime(DESIRED_TICK_PERIOD_MS))
    registry.emplace(state, KeyControl("d", False))
    registry.emplace(state, SnakeBoundary2D(MAP_WIDTH, MAP_HEIGHT))

    center_x = MAP_WIDTH / 2.0
    center_y = MAP_HEIGHT / 2.0
    apple = registry.create()
    registry.emplace(apple, Position(center_x, center_y))
    registry.emplace(apple, SnakeApple())

    head = registry.create()
    head_y = center_y - 1.0 if center_y >= 1.5 else 0.5
    registry.emplace(head, Position(2.5, head_y))
    registry.emplace(head, Velocity(0.0, 0.0))
    registry.emplace(head, SnakePartHead(SPEED, SPEED_UP_FACTOR))


def centered_boundary(
    window_width: int, window_height: int, h_margin: int, v_margin: int
) -> tuple[float, float, float, float]:
    """Square map box ``(x, y, w, h)``, centred horizontally, ``v_margin`` above the bottom."""
    if window_width < window_height:
        side = float(window_width - 2 * h_margin)
    else:
        side = float(window_height - 2 * v_margin)
    x = window_width / 2.0 - side / 2.0
    y = float(window_height - v_margin) - side
    return x, y, side, side


class SnakeApp:
    """Game state, fixed-step updates and key handling for one play session."""

    def __init__(self) -> None:
        self.registry = Registry()
        self.paused = False
        self._update_signal = Signal()
        init_gameplay_scene(self.registry)
        translate_2d.connect(self._update_signal)
        gameplay.connect(self._update_signal, self.registry)
        self._previous_tick: int | None = None
        self._last_map = get_map(self.registry)
        self._font: pygame.font.Font | None = None

    def _is_over(self) -> bool:
        return gameplay.is_game_success(self.registry) or gameplay.is_game_failure(
            self.registry
        )

    def handle_key_down(self, key: int) -> bool:
        """React to a pressed key; returns False when the game should quit."""
        if key == pygame.K_ESCAPE:
            if self._is_over():
                return False
            self.paused = not self.paused
        elif key in _MOVEMENT_KEYS:
            _MOVEMENT_KEYS[key](self.registry)
        elif key == pygame.K_SPACE:
            gameplay.shift_key_down(self.registry)
        elif key == pygame.K_r:
            if self._is_over():
                init_gameplay_scene(self.registry)
        return True

    def handle_key_up(self, key: int) -> None:
        """React to a released key."""
        if key == pygame.K_SPACE:
            gameplay.shift_key_up(self.registry)

    def advance(self, now_ms: int) -> bool:
        """Run every fixed step due by ``now_ms``; returns whether to redraw.

        The first call only records the starting time.
        """
        if self._previous_tick is None:
            self._previous_tick = now_ms
            return False
        redraw = False
        while now_ms - self._previous_tick >= DESIRED_TICK_PERIOD_MS:
            if not self.paused and not self._is_over():
                self._update_signal(self.registry)
            self._previous_tick += DESIRED_TICK_PERIOD_MS
            current = get_map(self.registry)
            if current != self._last_map or self.paused:
                self._last_map = current
                redraw = True
        return redraw

    def status_text(self) -> str:
        """The line shown under the map."""
        score = gameplay.get_score(self.registry)
        if self.paused:
            return f"Game paused. Press ESC to resume. Score: {score}"
        if gameplay.is_game_success(self.registry):
            return f"Congratulations! You won! Press R to restart. Score: {score}"
        if gameplay.is_game_failure(self.registry):
            return f"Game over! Press R to restart. Score: {score}"
        return f"Score: {score}"

    def _status_color(self) -> tuple[int, int, int]:
        if self.paused:
            return _WHITE
        if gameplay.is_game_success(self.registry):
            return _GREEN
        if gameplay.is_game_failure(self.registry):
            return _RED
        return _WHITE

    def render(self, surface: pygame.Surface) -> bool:
        """Draw the map, its border and the status line; False if the map does not fit."""
        width, height = surface.get_size()
        box_x, box_y, box_w, box_h = centered_boundary(
            width, height, MAP_MARGIN_PX, MAP_MARGIN_PX
        )
        surface.fill(_BLACK)
        if box_w <= 0.0 or box_h <= 0.0:
            return False
        border = pygame.Rect(int(box_x), int(box_y), int(box_w), int(box_h))
        pygame.draw.rect(surface, _WHITE, border, 1)

        grid = get_map(self.registry)
        cell_h = box_h / len(grid) if grid else 0.0
        for i, row in enumerate(grid):
            if not row:
                continue
            cell_w = box_w / len(row)
            top = int(box_y + i * cell_h)
            bottom = int(box_y + (i + 1) * cell_h)
            for j, slot in enumerate(row):
                color = (
                    255 if slot & MapSlotState.APPLE else 0,
                    255 if slot & MapSlotState.SNAKE_BODY else 0,
                    255 if slot & MapSlotState.SNAKE_HEAD else 0,
                )
                if color == _BLACK:
                    continue
                left = int(box_x + j * cell_w)
                right = int(box_x + (j + 1) * cell_w)
                surface.fill(color, pygame.Rect(left, top, right - left, bottom - top))

        if not pygame.font.get_init():
            pygame.font.init()
        if self._font is None:
            self._font = pygame.font.Font(None, 18)
        text = self._font.render(self.status_text(), True, self._status_color())
        surface.blit(text, (int(box_x), int(box_y + box_h + 10.0)))
        return True


def main(argv: list[str] | None = None) -> int:
    """Open the game window and run until it is closed."""
    parser = argparse.ArgumentParser(prog="snakegrid", description="Play snake.")
    parser.parse_args(argv)

    pygame.init()
    try:
        screen = pygame.display.set_mode((WINDOW_WIDTH, WINDOW_HEIGHT))
        pygame.display.set_caption("Snake Game")
        app = SnakeApp()
        app.render(screen)
        pygame.display.flip()
        app.advance(pygame.time.get_ticks())

        running = True
        while running:
            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if not app.handle_key_down(event.key):
                        running = False
                elif event.type == pygame.KEYUP:
                    app.handle_key_up(event.key)
            if not running:
                break
            if app.advance(pygame.time.get_ticks()):
                app.render(screen)
                pygame.display.flip()
            pygame.time.delay(DESIRED_TICK_PERIOD_MS // 2)
    finally:
        pygame.quit()
    return 0