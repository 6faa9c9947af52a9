"""Carve one irregular room per BSP leaf and tag entrance/exit regions."""

from dataclasses import dataclass
from enum import Enum
from typing import List, Optional
import logging
import random

from src.level.bsp_partitioner import BspTree
from src.level.generation_params import RoomGenerationParams
from src.level.geometry import Point, Rect, euclidean
from src.level.tile_grid import TileGrid

logger = logging.getLogger(__name__)


class RegionType(Enum):
    ENTRANCE = "entrance"
    EXIT = "exit"
    COMBAT = "combat"
    CONNECTOR = "connector"
    REST = "rest"


@dataclass
class RoomRegion:
    id: int
    bounds: Rect
    is_entrance: bool = False
    is_exit: bool = False
    region_type: RegionType = RegionType.COMBAT

    @property
    def center(self) -> Point:
        return self.bounds.center

    @property
    def area(self) -> int:
        return self.bounds.area

    def closest_point_to(self, target: Point) -> Point:
        return self.bounds.closest_point_to(target)

    def __str__(self) -> str:
        return f"Room#{self.id}[{self.region_type.value}]({self.bounds.x},{self.bounds.y} {self.bounds.width}x{self.bounds.height})"


def _room_dimension(leaf_size: int, params: RoomGenerationParams, rng: random.Random) -> Optional[int]:
    """Pick a room dimension inside a leaf, or None if the leaf is too small."""
    min_size = params.corridor_width + 3
    max_size = leaf_size - params.room_padding * 2
    if max_size < min_size:
        return None
    jitter = 1 + rng.uniform(-0.1, 0.1)
    size = round(leaf_size * params.room_fill_ratio * jitter)
    return min(max(size, min_size), max_size)


def place_rooms(grid: TileGrid, tree: BspTree, params: RoomGenerationParams,
                rng: random.Random) -> List[RoomRegion]:
    """
    Carve a randomized sub-rectangle into every BSP leaf.

    Args:
        grid: Grid to carve into
        tree: Partition tree
        params: Validated room parameters
        rng: Seeded random source

    Returns:
        Placed regions with sequential ids
    """
    rooms: List[RoomRegion] = []
    for leaf in tree.leaves():
        bounds = leaf.bounds
        width = _room_dimension(bounds.width, params, rng)
        height = _room_dimension(bounds.height, params, rng)
        if width is None or height is None:
            logger.debug("Skipping leaf %d (%dx%d): too small", leaf.index, bounds.width, bounds.height)
            continue

        slack_x = bounds.width - width - params.room_padding * 2
        slack_y = bounds.height - height - params.room_padding * 2
        x = bounds.x + params.room_padding + rng.randint(0, max(0, slack_x))
        y = bounds.y + params.room_padding + rng.randint(0, max(0, slack_y))

        region = RoomRegion(id=len(rooms), bounds=Rect(x, y, width, height))
        grid.dig_rect(x, y, width, height)
        rooms.append(region)

    logger.debug("Placed %d rooms from %d leaves", len(rooms), tree.leaf_count)
    return rooms


def mark_entrance_exit(rooms: List[RoomRegion], entrance: Point, exit_pos: Point) -> None:
    """Flag the regions nearest to the global entrance and exit points."""
    if not rooms:
        return
    entrance_room = min(rooms, key=lambda r: euclidean(r.center, entrance))
    exit_room = min(rooms, key=lambda r: euclidean(r.center, exit_pos))

    entrance_room.is_entrance = True
    entrance_room.region_type = RegionType.ENTRANCE
    exit_room.is_exit = True
    if exit_room is not entrance_room:
        exit_room.region_type = RegionType.EXIT
    logger.debug("Entrance room: %s, exit room: %s", entrance_room, exit_room)


def assign_region_types(rooms: List[RoomRegion], params: RoomGenerationParams) -> None:
    """Tag the remaining regions as combat, connector or rest areas by size."""
    total_area = params.room_width * params.room_height
    combat_count = 0
    rest_count = 0
    for room in rooms:
        if room.is_entrance or room.is_exit:
            continue
        ratio = room.area / total_area
        if ratio > 0.15 and combat_count < 2:
            room.region_type = RegionType.COMBAT
            combat_count += 1
        elif ratio < 0.08 or room.bounds.width < 8 or room.bounds.height < 6:
            room.region_type = RegionType.CONNECTOR
        elif rest_count < 1:
            room.region_type = RegionType.REST
            rest_count += 1
        else:
            room.region_type = RegionType.COMBAT
            combat_count += 1
