"""Carve straight and L-shaped corridors along room graph edges."""

from typing import Dict, List
import logging
import random

from src.level.generation_params import RoomGenerationParams
from src.level.geometry import Point
from src.level.room_graph import RoomEdge, RoomGraph
from src.level.room_placer import RoomRegion
from src.level.tile_grid import TileGrid

logger = logging.getLogger(__name__)


def corridor_endpoints(room_a: RoomRegion, room_b: RoomRegion):
    """Closest point on each room's bounds toward the other room's center."""
    start = room_a.closest_point_to(room_b.center)
    end = room_b.closest_point_to(room_a.center)
    return start, end


def carve_horizontal(grid: TileGrid, x1: int, x2: int, center_y: int, width: int) -> int:
    half = width // 2
    low = min(x1, x2)
    return grid.dig_rect_walls_only(low, center_y - half, abs(x2 - x1) + 1, width)


def carve_vertical(grid: TileGrid, y1: int, y2: int, center_x: int, width: int) -> int:
    half = width // 2
    low = min(y1, y2)
    return grid.dig_rect_walls_only(center_x - half, low, width, abs(y2 - y1) + 1)


def carve_corner(grid: TileGrid, corner: Point, width: int) -> int:
    """Dig a square around an L-corner so the bend has no pinch point."""
    half = width // 2
    return grid.dig_rect_walls_only(corner[0] - half, corner[1] - half, half * 2 + 1, half * 2 + 1)


def carve_segment(grid: TileGrid, start: Point, end: Point, width: int) -> int:
    """Carve an axis-aligned band from start to end.

    A segment counts as horizontal when its rows match or when it runs
    further across than down; the band follows the middle line of the
    other axis.
    """
    dx = end[0] - start[0]
    dy = end[1] - start[1]
    if dy == 0 or (dx != 0 and abs(dy) < abs(dx)):
        return carve_horizontal(grid, start[0], end[0], (start[1] + end[1]) // 2, width)
    return carve_vertical(grid, start[1], end[1], (start[0] + end[0]) // 2, width)


def carve_l_shape(grid: TileGrid, start: Point, end: Point, width: int, horizontal_first: bool) -> Point:
    if horizontal_first:
        corner = (end[0], start[1])
    else:
        corner = (start[0], end[1])
    carve_segment(grid, start, corner, width)
    carve_segment(grid, corner, end, width)
    carve_corner(grid, corner, width)
    return corner


def carve_edge(grid: TileGrid, room_a: RoomRegion, room_b: RoomRegion,
               params: RoomGenerationParams, rng: random.Random) -> bool:
    """
    Carve one corridor between two rooms.

    Args:
        grid: Grid to carve into
        room_a: First room
        room_b: Second room
        params: Validated room parameters
        rng: Seeded random source

    Returns:
        True if the corridor was straight, False if L-shaped
    """
    width = params.corridor_width
    half = width // 2
    start, end = corridor_endpoints(room_a, room_b)
    dx = end[0] - start[0]
    dy = end[1] - start[1]

    if abs(dy) <= half:
        carve_horizontal(grid, start[0], end[0], (start[1] + end[1]) // 2, width)
        return True
    if abs(dx) <= half:
        carve_vertical(grid, start[1], end[1], (start[0] + end[0]) // 2, width)
        return True

    horizontal_first = rng.random() < params.l_shape_corridor_chance
    carve_l_shape(grid, start, end, width, horizontal_first)
    return False


def carve_corridors(grid: TileGrid, rooms: List[RoomRegion], graph: RoomGraph,
                    params: RoomGenerationParams, rng: random.Random) -> int:
    """Carve a corridor for every final edge of the room graph.

    Returns:
        Number of corridors carved
    """
    by_id: Dict[int, RoomRegion] = {room.id: room for room in rooms}
    straight = 0
    carved = 0
    edge: RoomEdge
    for edge in graph.final_edges:
        room_a = by_id.get(edge.room_a)
        room_b = by_id.get(edge.room_b)
        if room_a is None or room_b is None:
            logger.warning("Edge %s references an unknown room, skipping", edge.key)
            continue
        if carve_edge(grid, room_a, room_b, params, rng):
            straight += 1
        carved += 1

    logger.debug("Carved %d corridors (%d straight, %d L-shaped)", carved, straight, carved - straight)
    return carved
