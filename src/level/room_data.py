"""Aggregate result of generating one room."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from src.level.bsp_partitioner import BspTree
from src.level.generation_params import RoomType
from src.level.geometry import Point
from src.level.room_graph import RoomGraph
from src.level.room_placer import RoomRegion
from src.level.spawn_extractor import SpawnCandidate, SpawnType
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType


@dataclass
class RoomData:
    """Everything produced by one ``generate_room`` call.

    Immutable once generation completes, except for spawn consumption
    bookkeeping (``mark_spawn_used``).
    """
    seed: str
    room_type: RoomType
    grid: TileGrid
    entrance: Point
    exit: Point
    bsp: Optional[BspTree] = None
    rooms: List[RoomRegion] = field(default_factory=list)
    graph: Optional[RoomGraph] = None
    spawns: List[SpawnCandidate] = field(default_factory=list)
    platforms: List[Point] = field(default_factory=list)
    needs_door_at_exit: bool = False
    connected: bool = False

    @property
    def width(self) -> int:
        return self.grid.width

    @property
    def height(self) -> int:
        return self.grid.height

    @property
    def openness(self) -> float:
        """Fraction of cells that are not walls."""
        total = self.width * self.height
        return (total - self.grid.count(TileType.WALL)) / total

    @property
    def platform_count(self) -> int:
        return self.grid.count(TileType.PLATFORM)

    def tile_counts(self) -> Dict[str, int]:
        return {tile.display_name: self.grid.count(tile) for tile in TileType}

    def floor_tiles(self) -> List[Point]:
        """FLOOR cells an entity can stand in (standable cell directly below)."""
        return [(x, y) for x, y, tile in self.grid.cells()
                if tile == TileType.FLOOR and self.grid.is_standable(x, y + 1)]

    def get_unused_spawns(self, spawn_type: Optional[SpawnType] = None) -> List[SpawnCandidate]:
        return [s for s in self.spawns
                if not s.is_used and (spawn_type is None or s.spawn_type == spawn_type)]

    def mark_spawn_used(self, position: Point) -> bool:
        for spawn in self.spawns:
            if spawn.position == tuple(position) and not spawn.is_used:
                spawn.is_used = True
                return True
        return False

    def summary(self) -> str:
        ground = sum(1 for s in self.spawns if s.spawn_type == SpawnType.GROUND)
        air = sum(1 for s in self.spawns if s.spawn_type == SpawnType.AIR)
        return (f"RoomData(seed={self.seed}, type={self.room_type.value}, size={self.width}x{self.height}, "
                f"rooms={len(self.rooms)}, openness={self.openness:.1%}, platforms={self.platform_count}, "
                f"spawns={len(self.spawns)} [ground {ground}, air {air}], connected={self.connected})")

    def __str__(self) -> str:
        return self.summary()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "seed": self.seed,
            "room_type": self.room_type.value,
            "width": self.width,
            "height": self.height,
            "entrance": list(self.entrance),
            "exit": list(self.exit),
            "tiles": self.grid.to_rows(),
            "rooms": [{"id": r.id, "bounds": r.bounds.to_dict(), "type": r.region_type.value} for r in self.rooms],
            "graph": self.graph.to_dict() if self.graph else None,
            "spawns": [s.to_dict() for s in self.spawns],
            "needs_door_at_exit": self.needs_door_at_exit,
            "connected": self.connected,
        }
