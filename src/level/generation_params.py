"""Generation parameters for single rooms and multi-room levels.

Parameters are plain dataclasses. ``validate()`` clamps every field into its
legal range and swaps inverted ranges; it never raises.
"""

from dataclasses import dataclass, field, asdict, fields
from enum import Enum
from typing import Any, Dict, Optional, Tuple
import logging

logger = logging.getLogger(__name__)


class RoomType(Enum):
    """Role of a room inside a multi-room level."""
    ENTRANCE = "entrance"
    COMBAT = "combat"
    BOSS = "boss"


def _clamp(value, low, high):
    return max(low, min(high, value))


@dataclass
class RoomGenerationParams:
    """Configuration for generating a single room."""
    room_type: RoomType = RoomType.COMBAT

    # Grid dimensions
    room_width: int = 40
    room_height: int = 25

    # Determinism
    seed: Optional[str] = None
    use_random_seed: bool = False

    # Entrance/exit rows, -1 means random
    entrance_y: int = -1
    exit_y: int = -1
    edge_padding: int = 2
    entrance_clear_depth: int = 5

    # BSP
    target_room_count: int = 4
    min_leaf_size: int = 8
    max_bsp_depth: int = 6
    split_ratio_range: Tuple[float, float] = (0.35, 0.65)
    room_fill_ratio: float = 0.65
    room_padding: int = 2

    # Graph and corridors
    extra_edge_ratio: float = 0.2
    corridor_width: int = 3
    l_shape_corridor_chance: float = 0.7

    # Connectivity walk
    walk_brush_size: int = 3
    horizontal_bias: float = 0.7

    # Movement envelope and platforms
    max_jump_height: int = 5
    max_jump_distance: int = 7
    has_double_jump: bool = True
    max_platforms: int = 6
    min_platform_width: int = 3
    max_platform_width: int = 6
    platform_exclusion_radius: int = 4
    max_horizontal_jump: int = 5

    # Spawns
    min_ground_span: int = 4
    min_air_height: int = 4
    max_enemies: int = 5
    min_spawn_distance: int = 6

    def validate(self) -> "RoomGenerationParams":
        """Clamp all fields into legal ranges. Returns self for chaining."""
        self.min_leaf_size = _clamp(self.min_leaf_size, 6, 16)
        self.room_width = _clamp(self.room_width, 20, 100)
        self.room_height = _clamp(self.room_height, 15, 60)
        # Each axis must fit two minimum leaves
        min_side = self.min_leaf_size * 2
        if self.room_width < min_side or self.room_height < min_side:
            logger.debug("Room %dx%d raised to at least %d per side for min_leaf_size %d",
                         self.room_width, self.room_height, min_side, self.min_leaf_size)
            self.room_width = max(self.room_width, min_side)
            self.room_height = max(self.room_height, min_side)

        self.edge_padding = _clamp(self.edge_padding, 1, 5)
        self.entrance_clear_depth = _clamp(self.entrance_clear_depth, 2, 10)
        self.target_room_count = _clamp(self.target_room_count, 2, 12)
        self.max_bsp_depth = _clamp(self.max_bsp_depth, 2, 10)

        low, high = self.split_ratio_range
        if low > high:
            low, high = high, low
        self.split_ratio_range = (_clamp(low, 0.2, 0.5), _clamp(high, 0.5, 0.8))
        self.room_fill_ratio = _clamp(self.room_fill_ratio, 0.4, 0.9)
        self.room_padding = _clamp(self.room_padding, 1, 4)

        self.extra_edge_ratio = _clamp(self.extra_edge_ratio, 0.0, 0.5)
        self.corridor_width = max(_clamp(self.corridor_width, 2, 5), 3)
        self.l_shape_corridor_chance = _clamp(self.l_shape_corridor_chance, 0.0, 1.0)

        self.walk_brush_size = max(_clamp(self.walk_brush_size, 2, 5), 3)
        self.horizontal_bias = _clamp(self.horizontal_bias, 0.5, 0.9)

        self.max_jump_height = _clamp(self.max_jump_height, 3, 8)
        self.max_jump_distance = _clamp(self.max_jump_distance, 4, 12)
        self.max_platforms = _clamp(self.max_platforms, 0, 15)
        if self.min_platform_width > self.max_platform_width:
            self.min_platform_width, self.max_platform_width = self.max_platform_width, self.min_platform_width
        self.min_platform_width = _clamp(self.min_platform_width, 2, 5)
        self.max_platform_width = _clamp(self.max_platform_width, self.min_platform_width, 10)
        self.platform_exclusion_radius = _clamp(self.platform_exclusion_radius, 2, 8)
        self.max_horizontal_jump = _clamp(self.max_horizontal_jump, 3, 10)

        self.min_ground_span = _clamp(self.min_ground_span, 2, 10)
        self.min_air_height = _clamp(self.min_air_height, 2, 10)
        self.max_enemies = _clamp(self.max_enemies, 0, 20)
        self.min_spawn_distance = _clamp(self.min_spawn_distance, 3, 15)

        # Entrance/exit rows must sit inside the usable band
        for name in ("entrance_y", "exit_y"):
            value = getattr(self, name)
            if value >= 0:
                setattr(self, name, self.clamp_door_row(value))
        return self

    def door_row_range(self) -> Tuple[int, int]:
        """Inclusive (low, high) band of rows an entrance/exit may use."""
        low = self.edge_padding + 2
        high = max(low, self.room_height - self.edge_padding - 4)
        return low, high

    def clamp_door_row(self, row: int) -> int:
        low, high = self.door_row_range()
        return _clamp(row, low, high)

    def clone(self) -> "RoomGenerationParams":
        return RoomGenerationParams.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["room_type"] = self.room_type.value
        data["split_ratio_range"] = list(self.split_ratio_range)
        return data

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "RoomGenerationParams":
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            if key not in known:
                logger.warning("Ignoring unknown room parameter: %s", key)
                continue
            kwargs[key] = value
        if "room_type" in kwargs:
            kwargs["room_type"] = RoomType(kwargs["room_type"])
        if "split_ratio_range" in kwargs:
            kwargs["split_ratio_range"] = tuple(kwargs["split_ratio_range"])
        return cls(**kwargs)


def default_entrance_params() -> RoomGenerationParams:
    return RoomGenerationParams(room_type=RoomType.ENTRANCE, room_width=20, room_height=15, max_enemies=0)


def default_combat_params() -> RoomGenerationParams:
    return RoomGenerationParams(room_type=RoomType.COMBAT, room_width=40, room_height=25)


def default_boss_params() -> RoomGenerationParams:
    return RoomGenerationParams(room_type=RoomType.BOSS, room_width=80, room_height=50)


@dataclass
class LevelGenerationParams:
    """Configuration for assembling a linear multi-room level."""
    combat_room_count: int = 5
    room_spacing: int = 20
    corridor_width: int = 5
    corridor_height: int = 3
    corridor_platform_spacing: int = 4
    level_seed: Optional[str] = None
    use_random_seed: bool = False
    y_offset_range: Tuple[int, int] = (-15, 15)
    # Minimum |next entrance y - previous exit y|; None means corridor_width
    min_height_difference: Optional[int] = None

    entrance_room_params: RoomGenerationParams = field(default_factory=default_entrance_params)
    combat_room_params: RoomGenerationParams = field(default_factory=default_combat_params)
    boss_room_params: RoomGenerationParams = field(default_factory=default_boss_params)

    def validate(self) -> "LevelGenerationParams":
        self.combat_room_count = _clamp(self.combat_room_count, 1, 10)
        self.room_spacing = max(self.room_spacing, 20)
        self.corridor_width = _clamp(self.corridor_width, 3, max(3, self.room_spacing // 2))
        self.corridor_height = max(self.corridor_height, 3)
        self.corridor_platform_spacing = max(self.corridor_platform_spacing, 1)
        low, high = self.y_offset_range
        if low > high:
            low, high = high, low
        self.y_offset_range = (low, high)
        if self.min_height_difference is not None:
            self.min_height_difference = max(self.min_height_difference, 0)

        self.entrance_room_params.room_type = RoomType.ENTRANCE
        self.combat_room_params.room_type = RoomType.COMBAT
        self.boss_room_params.room_type = RoomType.BOSS
        for room_params in (self.entrance_room_params, self.combat_room_params, self.boss_room_params):
            room_params.validate()
        return self

    @property
    def required_height_difference(self) -> int:
        if self.min_height_difference is None:
            return self.corridor_width
        return self.min_height_difference

    def params_for(self, room_type: RoomType) -> RoomGenerationParams:
        if room_type == RoomType.ENTRANCE:
            return self.entrance_room_params
        if room_type == RoomType.BOSS:
            return self.boss_room_params
        return self.combat_room_params

    def clone(self) -> "LevelGenerationParams":
        return LevelGenerationParams.from_dict(self.to_dict())

    def to_dict(self) -> Dict[str, Any]:
        return {
            "combat_room_count": self.combat_room_count,
            "room_spacing": self.room_spacing,
            "corridor_width": self.corridor_width,
            "corridor_height": self.corridor_height,
            "corridor_platform_spacing": self.corridor_platform_spacing,
            "level_seed": self.level_seed,
            "use_random_seed": self.use_random_seed,
            "y_offset_range": list(self.y_offset_range),
            "min_height_difference": self.min_height_difference,
            "entrance_room_params": self.entrance_room_params.to_dict(),
            "combat_room_params": self.combat_room_params.to_dict(),
            "boss_room_params": self.boss_room_params.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LevelGenerationParams":
        params = cls()
        for key, value in data.items():
            if key == "y_offset_range":
                params.y_offset_range = tuple(value)
            elif key.endswith("_room_params"):
                room_params = RoomGenerationParams.from_dict(value)
                setattr(params, key, room_params)
            elif hasattr(params, key):
                setattr(params, key, value)
            else:
                logger.warning("Ignoring unknown level parameter: %s", key)
        return params
