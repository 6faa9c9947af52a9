"""
Level data structures for multi-room level assembly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, List, Optional, Set, Tuple
import json
import os

from src.level.errors import ConfigError
from src.level.generation_params import RoomType
from src.level.geometry import Point, Rect
from src.level.room_data import RoomData
from src.tiles.tile_types import TileType


def _add(a: Point, b: Point) -> Point:
    return a[0] + b[0], a[1] + b[1]


@dataclass
class PlacedRoom:
    """
    A generated room positioned in level (world) space.

    Attributes:
        id: Sequential room id, left to right
        room_type: Entrance, combat or boss
        seed: Seed that reproduces ``room_data``
        world_position: Offset of the room's top-left cell
        room_data: Generated room, absent when loaded from a layout
        width, height, entrance_local, exit_local: cached for serialization
    """
    id: int
    room_type: RoomType
    seed: str
    world_position: Point = (0, 0)
    room_data: Optional[RoomData] = None
    width: int = 0
    height: int = 0
    entrance_local: Point = (0, 0)
    exit_local: Point = (0, 0)

    def __post_init__(self):
        if self.room_data is not None:
            self.set_room_data(self.room_data)

    def set_room_data(self, data: RoomData) -> None:
        self.room_data = data
        self.seed = data.seed
        self.width = data.width
        self.height = data.height
        self.entrance_local = data.entrance
        self.exit_local = data.exit

    @property
    def world_bounds(self) -> Rect:
        return Rect(self.world_position[0], self.world_position[1], self.width, self.height)

    @property
    def world_entrance(self) -> Point:
        return _add(self.world_position, self.entrance_local)

    @property
    def world_exit(self) -> Point:
        return _add(self.world_position, self.exit_local)

    def overlaps_with(self, other: "PlacedRoom", padding: int = 0) -> bool:
        return self.world_bounds.overlaps(other.world_bounds, padding)

    def __str__(self) -> str:
        return f"PlacedRoom#{self.id}[{self.room_type.value}] at {self.world_position} ({self.width}x{self.height})"


@dataclass
class CorridorSegment:
    """Inter-room corridor from one room's exit to the next room's entrance.

    ``start``/``end`` are door cells (standing rows) in world space. The
    interior is ``height`` rows ending on the door row. L-shaped corridors
    drop or climb through a ``width``-wide shaft starting at ``corner``.
    """
    id: int
    from_room_id: int
    to_room_id: int
    start: Point
    end: Point
    corner: Point
    width: int = 3
    height: int = 3
    is_straight: bool = True
    platforms: List[Point] = field(default_factory=list)

    @property
    def height_difference(self) -> int:
        return self.end[1] - self.start[1]

    @property
    def bounds(self) -> Rect:
        min_x = self.start[0]
        max_x = self.end[0]
        min_y = min(self.start[1], self.end[1]) - self.height
        max_y = max(self.start[1], self.end[1]) + 1
        return Rect(min_x, min_y, max_x - min_x + 1, max_y - min_y + 1)

    def interior_cells(self) -> Set[Point]:
        """FLOOR cells strictly between the two door columns."""
        cells: Set[Point] = set()
        x_from, x_to = self.start[0] + 1, self.end[0] - 1

        def band(x1: int, x2: int, door_y: int) -> None:
            for x in range(x1, x2 + 1):
                for y in range(door_y - self.height + 1, door_y + 1):
                    cells.add((x, y))

        if self.is_straight:
            band(x_from, x_to, self.start[1])
            return cells

        corner_x = self.corner[0]
        band(x_from, corner_x + self.width - 1, self.start[1])
        band(corner_x, x_to, self.end[1])
        top = min(self.start[1], self.end[1]) - self.height + 1
        bottom = max(self.start[1], self.end[1])
        for x in range(corner_x, corner_x + self.width):
            for y in range(top, bottom + 1):
                cells.add((x, y))
        return cells

    def get_tiles(self) -> Iterator[Tuple[Point, TileType]]:
        """Yield the corridor's wall frame, floor interior and platform rows."""
        interior = self.interior_cells()
        tiles: Dict[Point, TileType] = {}
        for x, y in interior:
            for dx in (-1, 0, 1):
                for dy in (-1, 0, 1):
                    neighbour = (x + dx, y + dy)
                    if neighbour in interior or not (self.start[0] < neighbour[0] < self.end[0]):
                        continue
                    tiles[neighbour] = TileType.WALL
        for cell in interior:
            tiles[cell] = TileType.FLOOR
        for px, py in self.platforms:
            for dx in range(self.width):
                tiles[(px + dx, py)] = TileType.PLATFORM
        for position in sorted(tiles):
            yield position, tiles[position]

    def overlaps_with_room(self, room: PlacedRoom) -> bool:
        """True if the corridor intrudes into a room it does not connect."""
        if room.id in (self.from_room_id, self.to_room_id):
            return False
        return self.bounds.overlaps(room.world_bounds)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "from_room_id": self.from_room_id,
            "to_room_id": self.to_room_id,
            "start": list(self.start),
            "end": list(self.end),
            "corner": list(self.corner),
            "width": self.width,
            "height": self.height,
            "is_straight": self.is_straight,
            "platforms": [list(p) for p in self.platforms],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CorridorSegment":
        return cls(
            id=data["id"],
            from_room_id=data["from_room_id"],
            to_room_id=data["to_room_id"],
            start=tuple(data["start"]),
            end=tuple(data["end"]),
            corner=tuple(data["corner"]),
            width=data.get("width", 3),
            height=data.get("height", 3),
            is_straight=data.get("is_straight", True),
            platforms=[tuple(p) for p in data.get("platforms", [])],
        )

    def __str__(self) -> str:
        return (f"Corridor#{self.id}[Room{self.from_room_id}->Room{self.to_room_id}]"
                f"(start={self.start}, end={self.end}, corner={self.corner}, "
                f"dy={self.height_difference}, platforms={len(self.platforms)})")


@dataclass
class LevelData:
    """
    Represents a complete linear multi-room level.

    Attributes:
        level_seed: Seed the level was assembled from
        rooms: Rooms in left-to-right order
        corridors: One corridor per adjacent room pair
        conflicts: (corridor id, room id) overlaps found while building corridors
    """
    level_seed: str = ""
    rooms: List[PlacedRoom] = field(default_factory=list)
    corridors: List[CorridorSegment] = field(default_factory=list)
    conflicts: List[Tuple[int, int]] = field(default_factory=list)

    @property
    def room_count(self) -> int:
        return len(self.rooms)

    @property
    def corridor_count(self) -> int:
        return len(self.corridors)

    @property
    def total_bounds(self) -> Rect:
        """Union of every room and corridor bounds."""
        rects = [room.world_bounds for room in self.rooms] + [c.bounds for c in self.corridors]
        if not rects:
            return Rect(0, 0, 0, 0)
        total = rects[0]
        for rect in rects[1:]:
            total = total.union(rect)
        return total

    @property
    def entrance_room(self) -> Optional[PlacedRoom]:
        return next((r for r in self.rooms if r.room_type == RoomType.ENTRANCE), None)

    @property
    def boss_room(self) -> Optional[PlacedRoom]:
        return next((r for r in self.rooms if r.room_type == RoomType.BOSS), None)

    @property
    def combat_rooms(self) -> List[PlacedRoom]:
        return [r for r in self.rooms if r.room_type == RoomType.COMBAT]

    def get_room(self, room_id: int) -> Optional[PlacedRoom]:
        """Get room by ID."""
        return next((r for r in self.rooms if r.id == room_id), None)

    def add_room(self, room: PlacedRoom) -> None:
        self.rooms.append(room)

    def get_corridors_for_room(self, room_id: int) -> List[CorridorSegment]:
        return [c for c in self.corridors if room_id in (c.from_room_id, c.to_room_id)]

    def get_overlapping_rooms(self, padding: int = 0) -> List[Tuple[int, int]]:
        """All pairs of room ids whose world bounds overlap."""
        overlaps = []
        for i, a in enumerate(self.rooms):
            for b in self.rooms[i + 1:]:
                if a.overlaps_with(b, padding):
                    overlaps.append((a.id, b.id))
        return overlaps

    def get_corridor_overlaps(self) -> List[Tuple[int, int]]:
        """(corridor id, room id) pairs where a corridor crosses a non-endpoint room."""
        return [(c.id, r.id) for c in self.corridors for r in self.rooms if c.overlaps_with_room(r)]

    def __str__(self) -> str:
        bounds = self.total_bounds
        return (f"LevelData(seed={self.level_seed}, rooms={self.room_count}, "
                f"corridors={self.corridor_count}, bounds={bounds.width}x{bounds.height})")


@dataclass
class PlacedRoomRecord:
    """Serializable stand-in for a PlacedRoom (no grid)."""
    id: int
    room_type: str
    seed: str
    world_position: List[int]
    width: int
    height: int
    entrance_local: List[int]
    exit_local: List[int]

    @classmethod
    def from_room(cls, room: PlacedRoom) -> "PlacedRoomRecord":
        return cls(
            id=room.id,
            room_type=room.room_type.value,
            seed=room.seed,
            world_position=list(room.world_position),
            width=room.width,
            height=room.height,
            entrance_local=list(room.entrance_local),
            exit_local=list(room.exit_local),
        )

    def to_room(self) -> PlacedRoom:
        return PlacedRoom(
            id=self.id,
            room_type=RoomType(self.room_type),
            seed=self.seed,
            world_position=tuple(self.world_position),
            width=self.width,
            height=self.height,
            entrance_local=tuple(self.entrance_local),
            exit_local=tuple(self.exit_local),
        )


@dataclass
class LevelLayout:
    """Persisted level: enough to replay generation without storing grids."""
    level_name: str = "NewLevel"
    level_seed: str = ""
    created_at: str = ""
    rooms: List[PlacedRoomRecord] = field(default_factory=list)
    corridors: List[Dict[str, Any]] = field(default_factory=list)
    generator_params: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_level(cls, level: LevelData, generator_params: Optional[Dict[str, Any]] = None,
                   level_name: str = "NewLevel") -> "LevelLayout":
        return cls(
            level_name=level_name,
            level_seed=level.level_seed,
            created_at=datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
            rooms=[PlacedRoomRecord.from_room(r) for r in level.rooms],
            corridors=[c.to_dict() for c in level.corridors],
            generator_params=dict(generator_params or {}),
        )

    def to_level_data(self) -> LevelData:
        """Rebuild a LevelData shell; room grids are not restored."""
        return LevelData(
            level_seed=self.level_seed,
            rooms=[record.to_room() for record in self.rooms],
            corridors=[CorridorSegment.from_dict(c) for c in self.corridors],
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to JSON-serializable dictionary."""
        return {
            "level_name": self.level_name,
            "level_seed": self.level_seed,
            "created_at": self.created_at,
            "rooms": [vars(r).copy() for r in self.rooms],
            "corridors": list(self.corridors),
            "generator_params": self.generator_params,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelLayout":
        """Create from dictionary."""
        try:
            rooms = [PlacedRoomRecord(**r) for r in data.get("rooms", [])]
        except TypeError as exc:
            raise ConfigError(f"Malformed room record in layout: {exc}") from exc
        return cls(
            level_name=data.get("level_name", "NewLevel"),
            level_seed=data.get("level_seed", ""),
            created_at=data.get("created_at", ""),
            rooms=rooms,
            corridors=list(data.get("corridors", [])),
            generator_params=dict(data.get("generator_params", {})),
        )

    def save_to_json(self, filepath: str) -> None:
        """Save layout to JSON file."""
        directory = os.path.dirname(filepath)
        if directory:
            os.makedirs(directory, exist_ok=True)
        with open(filepath, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)

    @classmethod
    def load_from_json(cls, filepath: str) -> "LevelLayout":
        """Load layout from JSON file."""
        try:
            with open(filepath, 'r') as f:
                data = json.load(f)
        except json.JSONDecodeError as exc:
            raise ConfigError(f"Layout file {filepath} is not valid JSON: {exc}") from exc
        return cls.from_dict(data)
