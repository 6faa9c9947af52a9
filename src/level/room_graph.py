"""Room adjacency graph: Kruskal spanning tree plus sampled loop edges."""

from collections import deque
from dataclasses import dataclass, field
from typing import Dict, Iterable, List, Set, Tuple
import logging
import random

logger = logging.getLogger(__name__)


@dataclass
class RoomEdge:
    """Undirected edge between two rooms; ``room_a`` is always the smaller id."""
    room_a: int
    room_b: int
    distance: float
    is_spanning_tree: bool = False

    @classmethod
    def between(cls, a: int, b: int, distance: float) -> "RoomEdge":
        if a > b:
            a, b = b, a
        return cls(room_a=a, room_b=b, distance=distance)

    @property
    def key(self) -> Tuple[int, int]:
        return self.room_a, self.room_b

    def other(self, room_id: int) -> int:
        return self.room_b if room_id == self.room_a else self.room_a

    def to_dict(self) -> Dict[str, object]:
        return {
            "room_a": self.room_a,
            "room_b": self.room_b,
            "distance": round(self.distance, 4),
            "is_spanning_tree": self.is_spanning_tree,
        }


class UnionFind:
    """Disjoint-set forest with path compression and union by rank."""

    def __init__(self, items: Iterable[int]):
        self.parent = {item: item for item in items}
        self.rank = {item: 0 for item in self.parent}

    def find(self, item: int) -> int:
        root = item
        while self.parent[root] != root:
            root = self.parent[root]
        while self.parent[item] != root:
            self.parent[item], item = root, self.parent[item]
        return root

    def union(self, a: int, b: int) -> bool:
        """Merge the sets of a and b. Returns False if already joined."""
        root_a, root_b = self.find(a), self.find(b)
        if root_a == root_b:
            return False
        if self.rank[root_a] < self.rank[root_b]:
            root_a, root_b = root_b, root_a
        self.parent[root_b] = root_a
        if self.rank[root_a] == self.rank[root_b]:
            self.rank[root_a] += 1
        return True


@dataclass
class RoomGraph:
    room_ids: List[int] = field(default_factory=list)
    all_edges: List[RoomEdge] = field(default_factory=list)
    mst_edges: List[RoomEdge] = field(default_factory=list)
    extra_edges: List[RoomEdge] = field(default_factory=list)

    @property
    def final_edges(self) -> List[RoomEdge]:
        return self.mst_edges + self.extra_edges

    def neighbours(self, room_id: int) -> Set[int]:
        return {e.other(room_id) for e in self.final_edges if room_id in e.key}

    def is_connected(self) -> bool:
        return is_connected(self.room_ids, self.final_edges)

    def to_dict(self) -> Dict[str, object]:
        return {
            "room_ids": list(self.room_ids),
            "mst_edges": [e.to_dict() for e in self.mst_edges],
            "extra_edges": [e.to_dict() for e in self.extra_edges],
            "candidate_edge_count": len(self.all_edges),
        }


def is_connected(room_ids: List[int], edges: List[RoomEdge]) -> bool:
    """BFS over the undirected edge set. An empty or single-room graph is connected."""
    if len(room_ids) <= 1:
        return True
    adjacency: Dict[int, List[int]] = {room_id: [] for room_id in room_ids}
    for edge in edges:
        adjacency.setdefault(edge.room_a, []).append(edge.room_b)
        adjacency.setdefault(edge.room_b, []).append(edge.room_a)

    visited = {room_ids[0]}
    queue = deque([room_ids[0]])
    while queue:
        current = queue.popleft()
        for neighbour in adjacency[current]:
            if neighbour not in visited:
                visited.add(neighbour)
                queue.append(neighbour)
    return all(room_id in visited for room_id in room_ids)


def kruskal_mst(room_ids: List[int], edges: List[RoomEdge]) -> List[RoomEdge]:
    """
    Minimum spanning tree (forest, if the candidates are disconnected).

    Args:
        room_ids: Graph nodes
        edges: Candidate edges

    Returns:
        Tree edges, each flagged ``is_spanning_tree``
    """
    forest = UnionFind(room_ids)
    tree: List[RoomEdge] = []
    for edge in sorted(edges, key=lambda e: (e.distance, e.key)):
        if len(tree) >= len(room_ids) - 1:
            break
        if forest.union(edge.room_a, edge.room_b):
            edge.is_spanning_tree = True
            tree.append(edge)
    return tree


def select_extra_edges(all_edges: List[RoomEdge], mst_edges: List[RoomEdge], ratio: float,
                       rng: random.Random) -> List[RoomEdge]:
    """Sample ``round(len(mst) * ratio)`` non-tree edges uniformly without replacement."""
    tree_keys = {e.key for e in mst_edges}
    remaining = [e for e in all_edges if e.key not in tree_keys]
    count = min(round(len(mst_edges) * ratio), len(remaining))
    if count <= 0:
        return []
    return rng.sample(remaining, count)


def build_room_graph(rooms, candidate_edges: List[RoomEdge], extra_edge_ratio: float,
                     rng: random.Random) -> RoomGraph:
    """
    Reduce candidate edges to a spanning tree and re-add a fraction as loops.

    Args:
        rooms: Room regions (only their ids are used)
        candidate_edges: Triangulation output
        extra_edge_ratio: Fraction of tree size re-added as extra edges
        rng: Seeded random source

    Returns:
        Room graph; disconnection is logged, never raised
    """
    room_ids = [room.id for room in rooms]
    graph = RoomGraph(room_ids=room_ids, all_edges=list(candidate_edges))
    graph.mst_edges = kruskal_mst(room_ids, graph.all_edges)
    graph.extra_edges = select_extra_edges(graph.all_edges, graph.mst_edges, extra_edge_ratio, rng)

    if not graph.is_connected():
        logger.warning("Room graph is disconnected (%d rooms, %d edges); relying on connectivity walk",
                       len(room_ids), len(graph.final_edges))
    logger.debug("Room graph: %d candidates, %d tree edges, %d extra edges",
                 len(graph.all_edges), len(graph.mst_edges), len(graph.extra_edges))
    return graph
