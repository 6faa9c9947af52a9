"""Insert one-way platforms so every vertical hop fits the jump envelope.

Heights are measured between "support rows": a standable cell whose top
the player can stand on. Within one vertical shaft of open cells the
supports are the shaft floor, any platform inside the shaft and any ledge
in a neighbouring column that opens into the shaft.
"""

from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Sequence, Tuple
import logging
import math
import random

from src.level.generation_params import RoomGenerationParams
from src.level.geometry import Point
from src.level.room_placer import RoomRegion
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType

logger = logging.getLogger(__name__)

ENTRANCE_EXCLUSION_RADIUS = 6
HEADROOM = 2


def effective_jump_height(max_jump_height: int, has_double_jump: bool) -> int:
    """Highest rise clearable in one go; a double jump doubles it minus the overlap."""
    if has_double_jump:
        return max_jump_height * 2 - 2
    return max_jump_height


def plan_platform_levels(from_y: int, to_y: int, effective: int) -> List[int]:
    """
    Intermediate support rows needed to climb from ``from_y`` to ``to_y``.

    For a span ``s`` greater than ``effective`` this returns
    ``ceil(s / effective) - 1`` rows spaced evenly, ordered from ``from_y``
    toward ``to_y``, so no hop exceeds ``effective``.

    Args:
        from_y: Starting support row
        to_y: Target support row
        effective: Effective jump height (must be positive)

    Returns:
        Rows strictly between the two supports
    """
    span = abs(to_y - from_y)
    if effective <= 0 or span <= effective:
        return []
    count = math.ceil(span / effective) - 1
    direction = -1 if to_y < from_y else 1
    return [from_y + direction * math.ceil(span * i / (count + 1)) for i in range(1, count + 1)]


@dataclass
class ExclusionZones:
    """Square zones in which no platform may be placed."""
    zones: List[Tuple[Point, int]] = field(default_factory=list)

    def add(self, center: Point, radius: int) -> None:
        self.zones.append((center, radius))

    def contains(self, x: int, y: int) -> bool:
        return any(abs(x - cx) <= r and abs(y - cy) <= r for (cx, cy), r in self.zones)


def _column_shafts(grid: TileGrid, x: int) -> Iterator[Tuple[int, int]]:
    """Yield (top, bottom) row ranges of non-solid runs in column x."""
    y = 0
    while y < grid.height:
        if grid.is_solid(x, y):
            y += 1
            continue
        top = y
        while y < grid.height and not grid.is_solid(x, y):
            y += 1
        yield top, y - 1


def _is_support(grid: TileGrid, x: int, y: int) -> bool:
    return grid.is_standable(x, y) and not grid.is_solid(x, y - 1)


def shaft_supports(grid: TileGrid, x: int, top: int, bottom: int) -> List[int]:
    """Support rows reachable inside a shaft, sorted bottom-up (descending y)."""
    supports = set()
    if bottom + 1 >= grid.height or grid.is_solid(x, bottom + 1):
        supports.add(bottom + 1)
    for y in range(top + 1, bottom + 1):
        if grid.get_tile(x, y) == TileType.PLATFORM and not grid.is_solid(x, y - 1):
            supports.add(y)
    for nx in (x - 1, x + 1):
        for y in range(top + 1, bottom + 2):
            if _is_support(grid, nx, y):
                supports.add(y)
    return sorted(supports, reverse=True)


def vertical_gaps(grid: TileGrid, x: int) -> List[Tuple[int, int]]:
    """Pairs of consecutive (lower, upper) support rows in column x."""
    gaps = []
    for top, bottom in _column_shafts(grid, x):
        supports = shaft_supports(grid, x, top, bottom)
        gaps.extend(zip(supports, supports[1:]))
    return gaps


def max_vertical_hop(grid: TileGrid, columns: Optional[Sequence[int]] = None) -> int:
    """Largest rise between consecutive supports over the given columns.

    Climbs that no platform can shorten (door zones, missing headroom) are
    included; ``unbridged_gaps`` lists only the ones a repair could still fix.
    """
    xs = columns if columns is not None else range(grid.width)
    hop = 0
    for x in xs:
        for lower, upper in vertical_gaps(grid, x):
            hop = max(hop, lower - upper)
    return hop


def can_place_platform(grid: TileGrid, x: int, y: int) -> bool:
    if grid.get_tile(x, y) != TileType.FLOOR:
        return False
    return all(grid.get_tile(x, y - dy) == TileType.FLOOR for dy in range(1, HEADROOM + 1))


def unbridged_gaps(grid: TileGrid, effective: int,
                   protected: Optional[ExclusionZones] = None) -> List[Tuple[int, int, int]]:
    """
    Climbs above ``effective`` that a repair platform could still shorten.

    A climb is listed when at least one of its planned platform rows is
    outside every protected zone and has headroom. Once the repair pass has
    run this is empty; climbs whose rows are all blocked are left out.

    Returns:
        (x, lower, upper) per climb
    """
    found = []
    for x in range(grid.width):
        for lower, upper in vertical_gaps(grid, x):
            if lower - upper <= effective:
                continue
            levels = plan_platform_levels(lower, upper, effective)
            if any((protected is None or not protected.contains(x, level)) and can_place_platform(grid, x, level)
                   for level in levels):
                found.append((x, lower, upper))
    return found


def place_platform(grid: TileGrid, x: int, y: int, width: int) -> int:
    """Write a platform row centred on x, only over FLOOR cells with headroom.

    Returns:
        Number of platform cells written
    """
    written = 0
    start = x - width // 2
    for xx in range(start, start + width):
        if can_place_platform(grid, xx, y):
            grid.set_tile(xx, y, TileType.PLATFORM)
            written += 1
    return written


class PlatformInjector:
    """Repairs vertical reachability and adds traversal platforms to a room."""

    def __init__(self, grid: TileGrid, params: RoomGenerationParams, rng: random.Random):
        self.grid = grid
        self.params = params
        self.rng = rng
        self.effective = effective_jump_height(params.max_jump_height, params.has_double_jump)
        self.protected = ExclusionZones()
        self.spacing = ExclusionZones()
        self.placed: List[Point] = []
        self.optional_placed = 0

    def protect(self, center: Point, radius: int = ENTRANCE_EXCLUSION_RADIUS) -> None:
        self.protected.add(center, radius)

    def _platform_width(self) -> int:
        if self.rng.random() < 0.3:
            return self.rng.randint(self.params.min_platform_width, self.params.max_platform_width)
        return self.params.min_platform_width

    def _try_place(self, x: int, y: int, respect_spacing: bool) -> bool:
        if self.protected.contains(x, y):
            return False
        if respect_spacing and self.spacing.contains(x, y):
            return False
        if not can_place_platform(self.grid, x, y):
            return False
        if place_platform(self.grid, x, y, self._platform_width()) == 0:
            return False
        self.placed.append((x, y))
        self.spacing.add((x, y), self.params.platform_exclusion_radius)
        return True

    def repair_vertical_gaps(self) -> int:
        """Bridge every support-to-support rise above the effective jump height.

        A platform written into one column can open a new gap in a column
        already scanned, so whole passes repeat until one places nothing.
        """
        repaired = 0
        passes = 0
        while True:
            passes += 1
            placed = self._repair_pass()
            repaired += placed
            if placed == 0:
                break
        logger.debug("Vertical repair placed %d platforms in %d passes", repaired, passes)
        return repaired

    def _repair_pass(self) -> int:
        placed = 0
        for x in range(self.grid.width):
            for lower, upper in vertical_gaps(self.grid, x):
                if lower - upper <= self.effective:
                    continue
                for level in plan_platform_levels(lower, upper, self.effective):
                    if self._try_place(x, level, respect_spacing=False):
                        placed += 1
        return placed

    def bridge_horizontal_gaps(self) -> int:
        """Drop a platform into pits wider than the horizontal jump reach."""
        bridged = 0
        for y in range(1, self.grid.height):
            last_support = None
            x = 0
            while x < self.grid.width:
                if _is_support(self.grid, x, y):
                    if last_support is not None:
                        gap = x - last_support - 1
                        if gap > self.params.max_horizontal_jump and self._is_open_pit(last_support + 1, x, y):
                            if self._budget_left() and self._try_place((last_support + x) // 2, y, respect_spacing=True):
                                self.optional_placed += 1
                                bridged += 1
                    last_support = x
                elif self.grid.is_solid(x, y - 1):
                    last_support = None
                x += 1
        return bridged

    def _is_open_pit(self, x1: int, x2: int, y: int) -> bool:
        return all(self.grid.get_tile(x, y) == TileType.FLOOR and self.grid.get_tile(x, y - 1) == TileType.FLOOR
                   for x in range(x1, x2))

    def _budget_left(self) -> bool:
        return self.optional_placed < self.params.max_platforms

    def add_room_platforms(self, rooms: List[RoomRegion]) -> int:
        """Zigzag platforms up the inside of tall rooms, within the platform budget."""
        added = 0
        step = max(2, self.params.max_jump_height - 1)
        for room in rooms:
            bounds = room.bounds
            if bounds.height <= self.params.max_jump_height * 2:
                continue
            left_x = bounds.x + bounds.width // 4
            right_x = bounds.x + (bounds.width * 3) // 4
            use_left = self.rng.random() < 0.5
            y = bounds.bottom - 1 - step
            while y > bounds.y + HEADROOM and self._budget_left():
                x = left_x if use_left else right_x
                if self._try_place(x, y, respect_spacing=True):
                    self.optional_placed += 1
                    added += 1
                use_left = not use_left
                y -= step
        return added

    def run(self, rooms: Optional[List[RoomRegion]] = None) -> List[Point]:
        """Room platforms first, then horizontal bridges, then the vertical repair pass."""
        if rooms:
            self.add_room_platforms(rooms)
        self.bridge_horizontal_gaps()
        repaired = self.repair_vertical_gaps()
        logger.debug("Placed %d platforms (%d vertical repairs, effective jump %d)",
                     len(self.placed), repaired, self.effective)
        return list(self.placed)


def inject_platforms(grid: TileGrid, params: RoomGenerationParams, rng: random.Random,
                     entrance: Optional[Point] = None, exit_pos: Optional[Point] = None,
                     rooms: Optional[List[RoomRegion]] = None,
                     protect_radius: int = ENTRANCE_EXCLUSION_RADIUS) -> List[Point]:
    """
    Insert platforms into a carved room grid.

    Args:
        grid: Grid to modify in place
        params: Validated room parameters
        rng: Seeded random source
        entrance: Entrance cell; a zone around it stays platform-free
        exit_pos: Exit cell; a zone around it stays platform-free
        rooms: Room regions used for in-room platforms
        protect_radius: Half-size of the platform-free zone around each door

    Returns:
        Anchor cell of every placed platform
    """
    injector = PlatformInjector(grid, params, rng)
    for point in (entrance, exit_pos):
        if point is not None:
            injector.protect(point, protect_radius)
    return injector.run(rooms)
