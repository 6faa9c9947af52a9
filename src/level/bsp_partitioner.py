"""Binary space partitioning of a room's usable bounds.

Nodes live in a flat list owned by ``BspTree``; children are referenced by
index so the tree can be walked and serialised without recursion through
object ownership.
"""

from dataclasses import dataclass, field
from typing import List, Optional
import logging
import random

from src.level.geometry import Rect
from src.level.generation_params import RoomGenerationParams

logger = logging.getLogger(__name__)

# Stop splitting with this probability once enough leaves exist
EARLY_STOP_CHANCE = 0.7


@dataclass
class BspNode:
    index: int
    bounds: Rect
    depth: int
    left: Optional[int] = None
    right: Optional[int] = None
    split_horizontal: bool = False
    split_position: int = -1

    @property
    def is_leaf(self) -> bool:
        return self.left is None and self.right is None


@dataclass
class BspTree:
    nodes: List[BspNode] = field(default_factory=list)

    @property
    def root(self) -> Optional[BspNode]:
        return self.nodes[0] if self.nodes else None

    def add_node(self, bounds: Rect, depth: int) -> BspNode:
        node = BspNode(index=len(self.nodes), bounds=bounds, depth=depth)
        self.nodes.append(node)
        return node

    def children(self, node: BspNode) -> List[BspNode]:
        return [self.nodes[i] for i in (node.left, node.right) if i is not None]

    def leaves(self) -> List[BspNode]:
        """Return leaf nodes in depth-first, left-to-right order."""
        if not self.nodes:
            return []
        result = []
        stack = [0]
        while stack:
            node = self.nodes[stack.pop()]
            if node.is_leaf:
                result.append(node)
                continue
            # right pushed first so left is visited first
            if node.right is not None:
                stack.append(node.right)
            if node.left is not None:
                stack.append(node.left)
        return result

    @property
    def leaf_count(self) -> int:
        return sum(1 for node in self.nodes if node.is_leaf)

    @property
    def max_depth(self) -> int:
        return max((node.depth for node in self.nodes), default=0)


def root_bounds(params: RoomGenerationParams) -> Rect:
    pad = params.edge_padding
    return Rect(pad, pad, params.room_width - pad * 2, params.room_height - pad * 2)


def _choose_horizontal(bounds: Rect, min_size: int, rng: random.Random) -> Optional[bool]:
    """Pick the cut axis. True = horizontal cut (top/bottom children).

    Returns None when neither axis can hold two minimum-sized children.
    """
    can_cut_width = bounds.width >= min_size * 2
    can_cut_height = bounds.height >= min_size * 2
    if not can_cut_width and not can_cut_height:
        return None

    aspect = bounds.width / bounds.height
    if aspect > 1.25:
        horizontal = False
    elif aspect < 0.8:
        horizontal = True
    else:
        horizontal = rng.random() < 0.5

    if horizontal and not can_cut_height:
        horizontal = False
    elif not horizontal and not can_cut_width:
        horizontal = True
    return horizontal


def _split(tree: BspTree, node: BspNode, params: RoomGenerationParams, rng: random.Random) -> bool:
    min_size = params.min_leaf_size
    bounds = node.bounds

    if node.depth >= params.max_bsp_depth:
        return False
    if tree.leaf_count >= params.target_room_count and rng.random() < EARLY_STOP_CHANCE:
        return False

    horizontal = _choose_horizontal(bounds, min_size, rng)
    if horizontal is None:
        return False

    ratio = rng.uniform(*params.split_ratio_range)
    if horizontal:
        start, size = bounds.y, bounds.height
    else:
        start, size = bounds.x, bounds.width
    low, high = start + min_size, start + size - min_size
    if low > high:
        return False
    position = min(max(start + round(size * ratio), low), high)

    if horizontal:
        first = Rect(bounds.x, bounds.y, bounds.width, position - bounds.y)
        second = Rect(bounds.x, position, bounds.width, bounds.bottom - position)
    else:
        first = Rect(bounds.x, bounds.y, position - bounds.x, bounds.height)
        second = Rect(position, bounds.y, bounds.right - position, bounds.height)

    node.split_horizontal = horizontal
    node.split_position = position
    node.left = tree.add_node(first, node.depth + 1).index
    node.right = tree.add_node(second, node.depth + 1).index
    return True


def partition(params: RoomGenerationParams, rng: random.Random, bounds: Optional[Rect] = None) -> BspTree:
    """
    Recursively split the room bounds into leaf regions.

    Args:
        params: Validated room parameters
        rng: Seeded random source
        bounds: Region to split; defaults to the padded room bounds

    Returns:
        Tree whose leaves exactly tile ``bounds``
    """
    tree = BspTree()
    tree.add_node(bounds or root_bounds(params), 0)

    # Breadth-first so shallow nodes split before the early-stop check kicks in
    queue = [0]
    while queue:
        node = tree.nodes[queue.pop(0)]
        if _split(tree, node, params, rng):
            queue.extend([node.left, node.right])

    logger.debug("BSP produced %d leaves (max depth %d)", tree.leaf_count, tree.max_depth)
    return tree
