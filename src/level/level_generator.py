"""
Level Generator - Main orchestrator for linear multi-room levels.

An entrance room, ``combat_room_count`` combat rooms drawn from a seed pool
and a boss room are placed left to right and joined by corridors.
"""

from typing import Any, Dict, List, Optional, Tuple
import logging
import random
import time

from src.level.errors import GenerationError
from src.level.generation_params import LevelGenerationParams, RoomType
from src.level.geometry import Point
from src.level.level_data import CorridorSegment, LevelData, LevelLayout, PlacedRoom
from src.level.platform_injector import effective_jump_height, plan_platform_levels
from src.level.room_data import RoomData
from src.level.room_generator import generate_room
from src.level.room_seed_pool import RoomSeedPool
from src.level.seed_manager import SeedManager, random_seed_string

logger = logging.getLogger(__name__)


def choose_y_offset(prev_exit_y: int, next_entrance_local_y: int,
                    params: LevelGenerationParams, rng: random.Random) -> int:
    """
    Pick a vertical offset for the next room.

    Every offset in ``params.y_offset_range`` is tried; those that put the
    next entrance at least ``required_height_difference`` rows away from the
    previous exit are kept and one is chosen at random. When none qualifies
    the offset with the largest difference is used instead.

    Args:
        prev_exit_y: World row of the previous room's exit
        next_entrance_local_y: Entrance row inside the next room
        params: Validated level parameters
        rng: Level random source

    Returns:
        World row of the next room's top edge
    """
    low, high = params.y_offset_range
    required = params.required_height_difference

    def difference(offset: int) -> int:
        return abs(offset + next_entrance_local_y - prev_exit_y)

    valid = [offset for offset in range(low, high + 1) if difference(offset) >= required]
    if valid:
        offset = valid[rng.randrange(len(valid))]
        logger.debug("Y offset %d (height difference %d >= %d)", offset, difference(offset), required)
        return offset

    best = max(range(low, high + 1), key=difference)
    logger.warning("Y offset range %s cannot reach height difference %d; using %d (difference %d)",
                   params.y_offset_range, required, best, difference(best))
    return best


def build_corridor(corridor_id: int, from_room: PlacedRoom, to_room: PlacedRoom,
                   params: LevelGenerationParams) -> CorridorSegment:
    """
    Corridor from ``from_room``'s exit to ``to_room``'s entrance.

    Straight when both doors share a row, otherwise L-shaped with the shaft at
    the horizontal midpoint. Platforms are stacked in the shaft when the rise
    is beyond the effective jump height.
    """
    start = from_room.world_exit
    end = to_room.world_entrance
    is_straight = start[1] == end[1]
    corner = ((start[0] + end[0]) // 2, start[1])

    platforms: List[Point] = []
    if not is_straight:
        combat = params.combat_room_params
        effective = effective_jump_height(combat.max_jump_height, combat.has_double_jump)
        if abs(end[1] - start[1]) > effective:
            step = max(1, min(effective, params.corridor_platform_spacing))
            # Supports are the solid rows under each door
            lower = max(start[1], end[1]) + 1
            upper = min(start[1], end[1]) + 1
            platforms = [(corner[0], level) for level in plan_platform_levels(lower, upper, step)]

    return CorridorSegment(
        id=corridor_id,
        from_room_id=from_room.id,
        to_room_id=to_room.id,
        start=start,
        end=end,
        corner=corner,
        width=params.corridor_width,
        height=params.corridor_height,
        is_straight=is_straight,
        platforms=platforms,
    )


class LevelGenerator:
    """Main level generation orchestrator"""

    def __init__(self, params: Optional[LevelGenerationParams] = None):
        self.params = (params or LevelGenerationParams()).clone().validate()
        self.seed_manager: Optional[SeedManager] = None

        # Performance tracking
        self.generation_time_ms = 0.0
        self.rooms_generated = 0

    def _resolve_level_seed(self, params: LevelGenerationParams) -> str:
        if params.use_random_seed or not params.level_seed:
            return random_seed_string("Level")
        return str(params.level_seed)

    def _generate_room(self, room_type: RoomType, seed: Optional[str]) -> RoomData:
        self.rooms_generated += 1
        return generate_room(self.params.params_for(room_type), seed)

    def generate(self, params: Optional[LevelGenerationParams] = None) -> LevelData:
        """
        Generate a complete level.

        Args:
            params: Level parameters; defaults to the generator's own.
                A validated copy is used.

        Returns:
            LevelData with rooms, corridors and any corridor/room conflicts
        """
        start_time = time.time()
        if params is not None:
            self.params = params.clone().validate()
        p = self.params
        self.rooms_generated = 0

        level_seed = self._resolve_level_seed(p)
        self.seed_manager = SeedManager(level_seed)
        rng = self.seed_manager.get_random("layout")

        pool = RoomSeedPool(self.seed_manager)
        pool.generate(p.combat_room_count)

        level = LevelData(level_seed=level_seed)
        entrance_seed = f"Entrance_{self.seed_manager.derive_seed('entrance')}"
        entrance = PlacedRoom(id=0, room_type=RoomType.ENTRANCE, seed=entrance_seed, world_position=(0, 0),
                              room_data=self._generate_room(RoomType.ENTRANCE, entrance_seed))
        level.add_room(entrance)

        current_x = entrance.width + p.room_spacing
        previous = entrance
        plan: List[Tuple[RoomType, str]] = []
        for _ in range(p.combat_room_count):
            drawn = pool.draw_seed(rng)
            plan.append((RoomType.COMBAT, drawn.seed if drawn else random_seed_string("Combat")))
        plan.append((RoomType.BOSS, f"Boss_{self.seed_manager.derive_seed('boss')}"))

        for room_type, seed in plan:
            data = self._generate_room(room_type, seed)
            y_offset = choose_y_offset(previous.world_exit[1], data.entrance[1], p, rng)
            room = PlacedRoom(id=len(level.rooms), room_type=room_type, seed=seed,
                              world_position=(current_x, y_offset), room_data=data)
            level.add_room(room)
            current_x += room.width + p.room_spacing
            previous = room

        self.build_corridors(level)

        self.generation_time_ms = (time.time() - start_time) * 1000
        logger.info("Generated %s in %.1f ms", level, self.generation_time_ms)
        return level

    def build_corridors(self, level: LevelData) -> List[CorridorSegment]:
        """Rebuild every corridor between adjacent rooms and record overlaps."""
        level.corridors = [build_corridor(i, a, b, self.params)
                           for i, (a, b) in enumerate(zip(level.rooms, level.rooms[1:]))]
        level.conflicts = level.get_corridor_overlaps()
        for corridor_id, room_id in level.conflicts:
            logger.warning("Corridor %d overlaps room %d", corridor_id, room_id)
        return level.corridors

    def regenerate_room(self, level: LevelData, room_id: int, seed: Optional[str] = None) -> PlacedRoom:
        """
        Regenerate one room in place, keeping its world position.

        Raises:
            GenerationError: If ``room_id`` is not part of the level
        """
        room = level.get_room(room_id)
        if room is None:
            raise GenerationError(f"Level has no room with id {room_id}")
        new_seed = seed or random_seed_string(room.room_type.value.capitalize())
        room.set_room_data(self._generate_room(room.room_type, new_seed))
        self.build_corridors(level)
        logger.info("Regenerated room %d with seed %s", room_id, new_seed)
        return room

    def update_room_position(self, level: LevelData, room_id: int, position: Point) -> PlacedRoom:
        room = level.get_room(room_id)
        if room is None:
            raise GenerationError(f"Level has no room with id {room_id}")
        room.world_position = (int(position[0]), int(position[1]))
        self.build_corridors(level)
        return room

    def save_layout(self, level: LevelData, filepath: str, level_name: str = "NewLevel") -> LevelLayout:
        layout = LevelLayout.from_level(level, self.params.to_dict(), level_name)
        layout.save_to_json(filepath)
        logger.info("Saved layout %s to %s", level_name, filepath)
        return layout

    def load_layout(self, layout: LevelLayout) -> LevelData:
        """
        Rebuild a level from a saved layout by replaying each room's seed.

        Stored positions are kept; corridors are rebuilt from the regenerated
        rooms.
        """
        if layout.generator_params:
            self.params = LevelGenerationParams.from_dict(layout.generator_params).validate()
        level = layout.to_level_data()
        for room in level.rooms:
            room.set_room_data(self._generate_room(room.room_type, room.seed))
        self.build_corridors(level)
        logger.info("Loaded layout %s: %s", layout.level_name, level)
        return level

    def get_generation_stats(self) -> Dict[str, Any]:
        """Get statistics about last generation"""
        return {
            'generation_time_ms': self.generation_time_ms,
            'rooms_generated': self.rooms_generated,
            'seed_info': self.seed_manager.get_seed_info() if self.seed_manager else {},
        }


def generate_level(params: Optional[LevelGenerationParams] = None) -> LevelData:
    """Convenience function for one-shot level generation."""
    return LevelGenerator(params).generate()
