"""Bake generated rooms and levels into flat tile maps for rendering.

Baked rooms carry a wall border around the generated grid with openings
at the entrance and exit rows so corridors or neighbouring rooms can join.
"""

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple
import logging

from src.level.geometry import Point
from src.level.level_data import LevelData
from src.level.room_data import RoomData
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType

logger = logging.getLogger(__name__)

BAKE_PADDING = 3
OPENING_ROWS = 3
BOSS_DOOR_WIDTH = 2


@dataclass
class RoomAnchors:
    """Entrance/exit positions published after a room is baked."""
    entrance_grid: Point
    exit_grid: Point
    entrance_world: Tuple[float, float]
    exit_world: Tuple[float, float]
    entrance_direction: Point = (-1, 0)
    exit_direction: Point = (1, 0)

    @classmethod
    def from_room(cls, room: RoomData, tile_size: int, origin: Point = (0, 0)) -> "RoomAnchors":
        def to_world(cell: Point) -> Tuple[float, float]:
            # Centre of the cell in pixels
            return ((origin[0] + cell[0] + 0.5) * tile_size, (origin[1] + cell[1] + 0.5) * tile_size)

        return cls(
            entrance_grid=room.entrance,
            exit_grid=room.exit,
            entrance_world=to_world(room.entrance),
            exit_world=to_world(room.exit),
        )


AnchorCallback = Callable[[RoomAnchors], None]


class AnchorPublisher:
    """Notifies subscribers whenever a room's anchors change."""

    def __init__(self):
        self._subscribers: List[AnchorCallback] = []

    def subscribe(self, callback: AnchorCallback) -> None:
        if callback not in self._subscribers:
            self._subscribers.append(callback)

    def unsubscribe(self, callback: AnchorCallback) -> None:
        if callback in self._subscribers:
            self._subscribers.remove(callback)

    def publish(self, anchors: RoomAnchors) -> None:
        logger.debug("Anchors updated: entrance %s exit %s", anchors.entrance_grid, anchors.exit_grid)
        for callback in list(self._subscribers):
            callback(anchors)


@dataclass
class BakedRoom:
    """A room grid with its wall border; ``offset`` maps room cells into it."""
    grid: TileGrid
    offset: Point
    door_cells: List[Point] = field(default_factory=list)

    def to_room_coords(self, x: int, y: int) -> Point:
        return x - self.offset[0], y - self.offset[1]


def _in_opening(x: int, y: int, room: RoomData) -> bool:
    if x < 0:
        door_y = room.entrance[1]
    elif x >= room.width:
        door_y = room.exit[1]
    else:
        return False
    return door_y - OPENING_ROWS + 1 <= y <= door_y


def bake_room(room: RoomData, padding: int = BAKE_PADDING, tile_size: int = 32,
              publisher: Optional[AnchorPublisher] = None) -> BakedRoom:
    """
    Bake a room into a padded grid.

    Args:
        room: Generated room
        padding: Border thickness in tiles
        tile_size: Pixel size used for the published world anchors
        publisher: Optional publisher notified with the room anchors

    Returns:
        BakedRoom whose grid is ``padding`` tiles larger on every side
    """
    baked = TileGrid(room.width + padding * 2, room.height + padding * 2, TileType.WALL)
    for by in range(baked.height):
        for bx in range(baked.width):
            x, y = bx - padding, by - padding
            if room.grid.is_in_bounds(x, y):
                baked.set_tile(bx, by, room.grid.get_tile(x, y))
            elif _in_opening(x, y, room):
                baked.set_tile(bx, by, TileType.FLOOR)

    door_cells: List[Point] = []
    if room.needs_door_at_exit:
        ex, ey = room.exit
        for dx in range(BOSS_DOOR_WIDTH):
            for dy in range(OPENING_ROWS):
                door_cells.append((ex + dx + padding, ey - dy + padding))

    if publisher is not None:
        publisher.publish(RoomAnchors.from_room(room, tile_size))
    return BakedRoom(grid=baked, offset=(padding, padding), door_cells=door_cells)


def bake_level(level: LevelData) -> Dict[Point, TileType]:
    """
    Compose a world-space tile map from every room grid and corridor.

    Room tiles win over corridor tiles; corridor tiles only fill cells that
    lie outside every room. Rooms without grid data are skipped.
    """
    tiles: Dict[Point, TileType] = {}
    for room in level.rooms:
        if room.room_data is None:
            logger.warning("Room %d has no grid data; skipped while baking", room.id)
            continue
        ox, oy = room.world_position
        for x, y, tile in room.room_data.grid.cells():
            tiles[(ox + x, oy + y)] = tile

    bounds = [room.world_bounds for room in level.rooms]
    for corridor in level.corridors:
        for (x, y), tile in corridor.get_tiles():
            if any(rect.contains(x, y) for rect in bounds):
                continue
            tiles[(x, y)] = tile
    logger.debug("Baked level %s into %d tiles", level.level_seed, len(tiles))
    return tiles
