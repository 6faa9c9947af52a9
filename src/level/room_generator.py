"""Single-room generation pipeline.

``generate_room(params, seed)`` is a pure function: the same parameters and
seed always produce an identical ``RoomData``.
"""

from typing import Optional, Tuple
import logging

from src.level.bsp_partitioner import partition
from src.level.connectivity import ensure_connectivity, remove_disconnected_islands, verify_connectivity
from src.level.corridor_carver import carve_corridors
from src.level.generation_params import RoomGenerationParams, RoomType
from src.level.geometry import Point, manhattan
from src.level.platform_injector import ENTRANCE_EXCLUSION_RADIUS, inject_platforms
from src.level.room_data import RoomData
from src.level.room_graph import RoomGraph, build_room_graph
from src.level.room_placer import assign_region_types, mark_entrance_exit, place_rooms
from src.level.seed_manager import make_random, random_seed_string
from src.level.spawn_extractor import SAFE_ZONE_MARGIN, extract_spawns
from src.level.tile_grid import TileGrid
from src.level.triangulation import triangulate
from src.tiles.tile_types import TileType

logger = logging.getLogger(__name__)

PAD_ROWS = 3


def resolve_seed(params: RoomGenerationParams, seed: Optional[str]) -> str:
    if seed is not None:
        return str(seed)
    if params.use_random_seed or params.seed is None:
        return random_seed_string("Room")
    return str(params.seed)


def clear_entrance_exit_area(grid: TileGrid, entrance: Point, exit_pos: Point, depth: int) -> None:
    """Open a landing pad at each door: ``depth + 1`` columns by 3 rows of FLOOR
    ending on the door row, with a solid row underneath the first ``depth`` columns."""
    ex, ey = entrance
    grid.dig_rect(ex, ey - PAD_ROWS + 1, depth + 1, PAD_ROWS)
    for x in range(ex, ex + depth):
        grid.set_tile(x, ey + 1, TileType.WALL)

    xx, xy = exit_pos
    grid.dig_rect(xx - depth, xy - PAD_ROWS + 1, depth + 1, PAD_ROWS)
    for x in range(xx - depth + 1, xx + 1):
        grid.set_tile(x, xy + 1, TileType.WALL)


def walk_endpoints(grid: TileGrid, entrance: Point, exit_pos: Point, depth: int) -> Tuple[Point, Point]:
    """Points just beyond the landing pads where the connectivity walk starts and ends."""
    return (entrance[0] + depth + 2, entrance[1]), (exit_pos[0] - depth - 2, exit_pos[1])


def door_protect_radius(params: RoomGenerationParams) -> int:
    """Half-size of the platform-free zone kept around each door."""
    return max(ENTRANCE_EXCLUSION_RADIUS, params.entrance_clear_depth + 1)


def find_boss_spawn(room: RoomData, params: RoomGenerationParams) -> Optional[Point]:
    """Rightmost standing cell outside the exit safe zone."""
    safe_radius = params.entrance_clear_depth + SAFE_ZONE_MARGIN
    options = [p for p in room.floor_tiles()
               if manhattan(p, room.exit) > safe_radius and manhattan(p, room.entrance) > safe_radius
               and room.grid.is_solid(p[0], p[1] + 1)]
    if not options:
        return None
    return max(options, key=lambda p: (p[0], p[1]))


def generate_room(params: RoomGenerationParams, seed: Optional[str] = None) -> RoomData:
    """
    Generate one traversable room.

    Args:
        params: Room parameters; a validated copy is used, the caller's
            object is never modified
        seed: Seed string; overrides ``params.seed``

    Returns:
        Finished room. Connectivity failures are logged and reflected in
        ``RoomData.connected``, never raised.
    """
    p = params.clone().validate()
    seed = resolve_seed(p, seed)
    rng = make_random(seed)

    # Phase 1: grid and door rows
    grid = TileGrid(p.room_width, p.room_height, TileType.WALL)
    low, high = p.door_row_range()
    entrance_y = p.entrance_y if p.entrance_y >= 0 else rng.randint(low, high)
    exit_y = p.exit_y if p.exit_y >= 0 else rng.randint(low, high)
    entrance = (0, entrance_y)
    exit_pos = (p.room_width - 1, exit_y)

    # Phase 2-3: partition and rooms
    tree = partition(p, rng)
    rooms = place_rooms(grid, tree, p, rng)
    mark_entrance_exit(rooms, entrance, exit_pos)
    assign_region_types(rooms, p)

    # Phase 4-5: graph and corridors
    if len(rooms) >= 2:
        edges = triangulate(rooms)
        graph = build_room_graph(rooms, edges, p.extra_edge_ratio, rng)
        carve_corridors(grid, rooms, graph, p, rng)
    else:
        logger.warning("Only %d room(s) placed for seed %s; skipping graph and corridors", len(rooms), seed)
        graph = RoomGraph(room_ids=[room.id for room in rooms])

    # Phase 6: landing pads, then the connectivity backstop between them
    depth = p.entrance_clear_depth
    clear_entrance_exit_area(grid, entrance, exit_pos, depth)
    walk_start, walk_end = walk_endpoints(grid, entrance, exit_pos, depth)
    ensure_connectivity(grid, walk_start, walk_end, p, rng)

    # Phase 7: platforms
    platforms = inject_platforms(grid, p, rng, entrance, exit_pos, rooms,
                                 protect_radius=door_protect_radius(p))

    # Phase 8: post-process
    remove_disconnected_islands(grid, entrance)
    # Platforms inside filled islands are gone
    platforms = [(x, y) for x, y in platforms if grid.get_tile(x, y) == TileType.PLATFORM]
    connected = verify_connectivity(grid, entrance, exit_pos)
    if not connected:
        logger.warning("Room %s: entrance %s cannot reach exit %s", seed, entrance, exit_pos)

    room = RoomData(
        seed=seed,
        room_type=p.room_type,
        grid=grid,
        entrance=entrance,
        exit=exit_pos,
        bsp=tree,
        rooms=rooms,
        graph=graph,
        platforms=platforms,
        needs_door_at_exit=p.room_type == RoomType.BOSS,
        connected=connected,
    )

    # Phase 9: spawns
    if p.room_type == RoomType.ENTRANCE or p.max_enemies == 0:
        room.spawns = []
    else:
        boss_spawn = find_boss_spawn(room, p) if p.room_type == RoomType.BOSS else None
        if p.room_type == RoomType.BOSS and boss_spawn is None:
            logger.warning("Boss room %s has no valid boss spawn", seed)
        room.spawns = extract_spawns(grid, entrance, exit_pos, p, rng, boss_spawn=boss_spawn)

    logger.info("Generated %s", room.summary())
    return room
