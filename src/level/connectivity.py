"""Flood-fill queries and the bidirectional random-walk connectivity backstop."""

from collections import deque
from typing import List, Set
import logging
import random

from src.level.generation_params import RoomGenerationParams
from src.level.geometry import Point
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType

logger = logging.getLogger(__name__)


def flood_fill(grid: TileGrid, start: Point) -> Set[Point]:
    """
    Collect every non-wall cell 4-connected to ``start``.

    Args:
        grid: Grid to analyze
        start: Seed cell

    Returns:
        Reached cells; empty if start is a wall
    """
    if grid.is_solid(*start):
        return set()
    region = {start}
    queue = deque([start])
    while queue:
        x, y = queue.popleft()
        for nx, ny in grid.neighbours4(x, y):
            if (nx, ny) not in region and not grid.is_solid(nx, ny):
                region.add((nx, ny))
                queue.append((nx, ny))
    return region


def find_regions(grid: TileGrid) -> List[Set[Point]]:
    """
    Find all disconnected non-wall regions in the grid.

    Returns a list where each element is a set of coordinates forming
    one connected region.
    """
    unvisited = {(x, y) for x, y, tile in grid.cells() if not tile.is_solid}
    regions = []
    while unvisited:
        start = min(unvisited, key=lambda p: (p[1], p[0]))
        region = flood_fill(grid, start)
        unvisited -= region
        regions.append(region)
    return regions


def verify_connectivity(grid: TileGrid, start: Point, end: Point) -> bool:
    """True when a flood fill from start comes within one cell of end."""
    if grid.is_solid(*start) or grid.is_solid(*end):
        return False
    reached = flood_fill(grid, start)
    ex, ey = end
    return any(abs(x - ex) <= 1 and abs(y - ey) <= 1 for x, y in reached)


def _dig_brush(grid: TileGrid, x: int, y: int, brush: int) -> None:
    half = brush // 2
    grid.dig_rect_walls_only(x - half, y - half, brush, brush)


def random_walk(grid: TileGrid, start: Point, target: Point, params: RoomGenerationParams,
                rng: random.Random, prefer_right: bool = True) -> bool:
    """
    Biased random walk from start toward target, carving only walls.

    Args:
        grid: Grid to carve into
        start: Walk origin
        target: Walk destination
        params: Validated room parameters (brush size, horizontal bias)
        rng: Seeded random source
        prefer_right: Direction to move when the walker has no delta

    Returns:
        True if the walker reached the target within the step budget
    """
    brush = params.walk_brush_size
    half = brush // 2
    min_x, max_x = half + 1, grid.width - half - 2
    min_y, max_y = half + 1, grid.height - half - 2
    x, y = start
    max_steps = (grid.width + grid.height) * 3
    # Entrance/exit sit on the border, outside the walker's clamp band
    goal_x = min(max(target[0], min_x), max_x)
    goal_y = min(max(target[1], min_y), max_y)

    for _ in range(max_steps):
        _dig_brush(grid, x, y, brush)

        dx = goal_x - x
        dy = goal_y - y
        if abs(dx) <= half and abs(dy) <= half:
            _dig_brush(grid, goal_x, goal_y, brush)
            _dig_brush(grid, target[0], target[1], brush)
            return True

        step_x = (dx > 0) - (dx < 0)
        step_y = (dy > 0) - (dy < 0)
        if dx != 0 and rng.random() < params.horizontal_bias:
            x += step_x
        elif dy != 0:
            y += step_y
        elif dx != 0:
            x += step_x
        else:
            x += 1 if prefer_right else -1

        x = min(max(x, min_x), max_x)
        y = min(max(y, min_y), max_y)

    logger.debug("Random walk %s -> %s exhausted %d steps", start, target, max_steps)
    return False


def ensure_connectivity(grid: TileGrid, start: Point, end: Point, params: RoomGenerationParams,
                        rng: random.Random) -> bool:
    """
    Carve a backstop path between entrance and exit in both directions.

    Returns:
        Whether entrance and exit share a component afterwards. Failure is
        logged as a warning, never raised.
    """
    random_walk(grid, start, end, params, rng, prefer_right=True)
    random_walk(grid, end, start, params, rng, prefer_right=False)

    connected = verify_connectivity(grid, start, end)
    if not connected:
        logger.warning("Entrance %s and exit %s are still disconnected after both walks", start, end)
    return connected


def remove_disconnected_islands(grid: TileGrid, start: Point) -> int:
    """
    Fill every non-wall cell unreachable from ``start`` with WALL.

    Returns:
        Number of cells filled
    """
    reachable = flood_fill(grid, start)
    if not reachable:
        logger.warning("Island removal skipped: start %s is inside a wall", start)
        return 0
    filled = 0
    for x, y, tile in list(grid.cells()):
        if not tile.is_solid and (x, y) not in reachable:
            grid.set_tile(x, y, TileType.WALL)
            filled += 1
    if filled:
        logger.debug("Removed %d unreachable cells", filled)
    return filled
