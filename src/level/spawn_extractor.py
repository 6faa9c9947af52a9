"""Find, filter and label enemy spawn candidates on a finished grid."""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional
import logging
import random

from src.level.generation_params import RoomGenerationParams
from src.level.geometry import Point, euclidean, manhattan
from src.level.tile_grid import TileGrid

logger = logging.getLogger(__name__)

AIR_ACCEPT_CHANCE = 0.15
AIR_CLEARANCE_RADIUS = 2
SAFE_ZONE_MARGIN = 2


class SpawnType(Enum):
    GROUND = "ground"
    AIR = "air"
    BOSS = "boss"


class EnemyType(Enum):
    # Candidate not yet given an enemy; boss candidates use COMPOSITE_GUARDIAN
    UNASSIGNED = "unassigned"
    TRIANGLE_SHARPSHOOTER = "triangle_sharpshooter"
    TRIANGLE_SHIELDBEARER = "triangle_shieldbearer"
    TRIANGLE_MOTH = "triangle_moth"
    COMPOSITE_GUARDIAN = "composite_guardian"


@dataclass
class SpawnCandidate:
    position: Point
    spawn_type: SpawnType
    enemy_type: EnemyType = EnemyType.UNASSIGNED
    ground_span: int = 0
    height_above_ground: int = 0
    is_used: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "position": list(self.position),
            "spawn_type": self.spawn_type.value,
            "enemy_type": self.enemy_type.value,
            "ground_span": self.ground_span,
            "height_above_ground": self.height_above_ground,
            "is_used": self.is_used,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SpawnCandidate":
        return cls(
            position=tuple(data["position"]),
            spawn_type=SpawnType(data["spawn_type"]),
            enemy_type=EnemyType(data.get("enemy_type", EnemyType.UNASSIGNED.value)),
            ground_span=data.get("ground_span", 0),
            height_above_ground=data.get("height_above_ground", 0),
            is_used=data.get("is_used", False),
        )


def _inside_padding(grid: TileGrid, x: int, y: int, padding: int) -> bool:
    return padding <= x < grid.width - padding and padding <= y < grid.height - padding


def find_ground_candidates(grid: TileGrid, params: RoomGenerationParams) -> List[SpawnCandidate]:
    """
    Scan rows for maximal standing runs and keep the midpoint of long ones.

    A cell belongs to a run when it is FLOOR, the cell below is solid and
    the two cells above are FLOOR.
    """
    candidates: List[SpawnCandidate] = []

    def can_stand(x: int, y: int) -> bool:
        return (grid.is_floor(x, y) and grid.is_solid(x, y + 1)
                and grid.is_floor(x, y - 1) and grid.is_floor(x, y - 2))

    for y in range(1, grid.height - 1):
        x = 0
        while x < grid.width:
            if not can_stand(x, y):
                x += 1
                continue
            start = x
            while x < grid.width and can_stand(x, y):
                x += 1
            end = x - 1
            span = end - start + 1
            if span < params.min_ground_span:
                continue
            mid = (start + end) // 2
            if _inside_padding(grid, mid, y, params.edge_padding):
                candidates.append(SpawnCandidate((mid, y), SpawnType.GROUND, ground_span=span))
    return candidates


def _distance_to_ground(grid: TileGrid, x: int, y: int) -> int:
    distance = 0
    yy = y + 1
    while yy < grid.height and not grid.is_solid(x, yy):
        distance += 1
        yy += 1
    return distance + 1


def find_air_candidates(grid: TileGrid, params: RoomGenerationParams,
                        rng: random.Random) -> List[SpawnCandidate]:
    """
    Sample open interior cells high enough above the ground for flyers.

    Each qualifying cell is kept with a fixed low probability so large open
    rooms do not flood the candidate list.
    """
    candidates: List[SpawnCandidate] = []
    padding = max(params.edge_padding, 4)
    r = AIR_CLEARANCE_RADIUS
    for y in range(padding, grid.height - padding):
        for x in range(padding, grid.width - padding):
            if not grid.is_floor(x, y):
                continue
            if not all(grid.is_floor(nx, ny) for nx, ny in ((x + 1, y), (x - 1, y), (x, y + 1), (x, y - 1))):
                continue
            if not all(grid.is_floor(x + dx, y + dy) for dx in range(-r, r + 1) for dy in range(-r, r + 1)):
                continue
            height = _distance_to_ground(grid, x, y)
            if height < params.min_air_height:
                continue
            if rng.random() < AIR_ACCEPT_CHANCE:
                candidates.append(SpawnCandidate((x, y), SpawnType.AIR, height_above_ground=height))
    return candidates


def filter_candidates(candidates: List[SpawnCandidate], entrance: Point, exit_pos: Point,
                      params: RoomGenerationParams, rng: random.Random) -> List[SpawnCandidate]:
    """
    Apply the safe zone, shuffle with the seeded rng and greedily space out.

    Args:
        candidates: Raw ground and air candidates
        entrance: Entrance cell
        exit_pos: Exit cell
        params: Validated room parameters
        rng: Seeded random source

    Returns:
        At most ``max_enemies`` candidates, pairwise at least
        ``min_spawn_distance`` apart
    """
    safe_radius = params.entrance_clear_depth + SAFE_ZONE_MARGIN
    pool = [c for c in candidates
            if manhattan(c.position, entrance) > safe_radius and manhattan(c.position, exit_pos) > safe_radius]

    # Fisher-Yates with the generation rng
    for i in range(len(pool) - 1, 0, -1):
        j = rng.randint(0, i)
        pool[i], pool[j] = pool[j], pool[i]

    accepted: List[SpawnCandidate] = []
    for candidate in pool:
        if len(accepted) >= params.max_enemies:
            break
        if all(euclidean(candidate.position, other.position) >= params.min_spawn_distance for other in accepted):
            accepted.append(candidate)
    return accepted


def assign_enemy_types(candidates: List[SpawnCandidate], rng: random.Random) -> None:
    """Label candidates: a shieldbearer wave and sharpshooters on the ground, moths in the air."""
    ground = [c for c in candidates if c.spawn_type == SpawnType.GROUND]
    air = [c for c in candidates if c.spawn_type == SpawnType.AIR]
    for candidate in candidates:
        if candidate.spawn_type == SpawnType.BOSS:
            candidate.enemy_type = EnemyType.COMPOSITE_GUARDIAN

    shieldbearers = rng.randint(1, 2)
    sharpshooters = rng.randint(2, 3)
    for index, candidate in enumerate(ground):
        if index < shieldbearers:
            candidate.enemy_type = EnemyType.TRIANGLE_SHIELDBEARER
        elif index < shieldbearers + sharpshooters:
            candidate.enemy_type = EnemyType.TRIANGLE_SHARPSHOOTER

    moths = rng.randint(1, 2)
    for candidate in air[:moths]:
        candidate.enemy_type = EnemyType.TRIANGLE_MOTH


def extract_spawns(grid: TileGrid, entrance: Point, exit_pos: Point, params: RoomGenerationParams,
                   rng: random.Random, boss_spawn: Optional[Point] = None) -> List[SpawnCandidate]:
    """Run the full spawn extraction for one room."""
    ground = find_ground_candidates(grid, params)
    air = find_air_candidates(grid, params, rng)
    spawns = filter_candidates(ground + air, entrance, exit_pos, params, rng)
    if boss_spawn is not None:
        spawns = [c for c in spawns if euclidean(c.position, boss_spawn) >= params.min_spawn_distance]
        spawns.append(SpawnCandidate(boss_spawn, SpawnType.BOSS))
    assign_enemy_types(spawns, rng)
    logger.debug("Spawns: %d ground, %d air candidates -> %d accepted", len(ground), len(air), len(spawns))
    return spawns
