import random

from src.level.geometry import Rect
from src.level.room_graph import RoomEdge, UnionFind, build_room_graph, is_connected, kruskal_mst, select_extra_edges
from src.level.room_placer import RoomRegion
from src.level.triangulation import bowyer_watson, in_circumcircle, triangulate


def region(room_id, cx, cy, size=4):
    """Room whose center is exactly (cx, cy)."""
    return RoomRegion(room_id, Rect(cx - size // 2, cy - size // 2, size, size))


class TestTriangulation:
    """Test the Delaunay candidate graph."""

    def test_two_rooms_give_one_edge(self):
        """Two rooms produce exactly one candidate edge"""
        rooms = [region(0, 5, 5), region(1, 20, 8)]
        edges = triangulate(rooms)
        assert len(edges) == 1
        assert edges[0].key == (0, 1)

    def test_fewer_than_two_rooms(self):
        assert triangulate([]) == []
        assert triangulate([region(0, 5, 5)]) == []

    def test_center_room_links_to_all_corners(self):
        """A room in the middle of four others is adjacent to each of them"""
        rooms = [region(0, 0, 0), region(1, 20, 0), region(2, 0, 20), region(3, 20, 20), region(4, 10, 10)]
        keys = {e.key for e in triangulate(rooms)}
        assert {(0, 4), (1, 4), (2, 4), (3, 4)} <= keys

    def test_edges_are_deduplicated_and_ordered(self):
        rooms = [region(i, x, y) for i, (x, y) in enumerate([(0, 0), (15, 3), (7, 14), (25, 12), (30, 0)])]
        edges = triangulate(rooms)
        keys = [e.key for e in edges]
        assert len(keys) == len(set(keys))
        assert all(a < b for a, b in keys)

    def test_collinear_centers_are_chained(self):
        rooms = [region(0, 0, 5), region(1, 10, 5), region(2, 20, 5)]
        edges = triangulate(rooms)
        assert {e.key for e in edges} == {(0, 1), (1, 2)}

    def test_circumcircle_predicate(self):
        a, b, c = (0.0, 0.0), (4.0, 0.0), (0.0, 4.0)
        assert in_circumcircle((1.0, 1.0), a, b, c)
        assert not in_circumcircle((10.0, 10.0), a, b, c)

    def test_no_triangles_for_two_points(self):
        assert bowyer_watson([(0.0, 0.0), (1.0, 1.0)]) == []


class TestSpanningTree:
    """Test Kruskal selection and extra edges."""

    def test_two_room_tree_keeps_the_edge(self):
        """The single candidate edge becomes the tree and final graph"""
        rooms = [region(0, 5, 5), region(1, 20, 8)]
        graph = build_room_graph(rooms, triangulate(rooms), 0.2, random.Random(1))
        assert [e.key for e in graph.mst_edges] == [(0, 1)]
        assert graph.extra_edges == []
        assert len(graph.final_edges) == 1

    def test_tree_has_n_minus_one_edges(self):
        rooms = [region(i, x, y) for i, (x, y) in enumerate([(0, 0), (15, 3), (7, 14), (25, 12), (30, 0)])]
        edges = triangulate(rooms)
        tree = kruskal_mst([r.id for r in rooms], edges)
        assert len(tree) == len(rooms) - 1
        assert all(e.is_spanning_tree for e in tree)
        assert is_connected([r.id for r in rooms], tree)

    def test_tree_prefers_short_edges(self):
        edges = [RoomEdge.between(0, 1, 1.0), RoomEdge.between(1, 2, 2.0), RoomEdge.between(0, 2, 10.0)]
        tree = kruskal_mst([0, 1, 2], edges)
        assert {e.key for e in tree} == {(0, 1), (1, 2)}

    def test_extra_edge_count(self):
        """round(tree size * ratio) non-tree edges are re-added"""
        edges = [RoomEdge.between(a, b, float(a + b)) for a in range(5) for b in range(a + 1, 5)]
        tree = kruskal_mst(list(range(5)), edges)
        extra = select_extra_edges(edges, tree, 0.5, random.Random(3))
        assert len(extra) == 2
        tree_keys = {e.key for e in tree}
        assert all(e.key not in tree_keys for e in extra)

    def test_zero_ratio_adds_nothing(self):
        edges = [RoomEdge.between(0, 1, 1.0), RoomEdge.between(1, 2, 1.0), RoomEdge.between(0, 2, 1.0)]
        tree = kruskal_mst([0, 1, 2], edges)
        assert select_extra_edges(edges, tree, 0.0, random.Random(3)) == []

    def test_disconnected_candidates_are_reported(self):
        rooms = [region(0, 0, 0), region(1, 10, 0), region(2, 50, 50)]
        graph = build_room_graph(rooms, [RoomEdge.between(0, 1, 10.0)], 0.2, random.Random(1))
        assert not graph.is_connected()

    def test_neighbours_follow_final_edges(self):
        rooms = [region(0, 5, 5), region(1, 20, 8)]
        graph = build_room_graph(rooms, triangulate(rooms), 0.0, random.Random(1))
        assert graph.neighbours(0) == {1}
        assert graph.neighbours(1) == {0}
        assert graph.neighbours(7) == set()


class TestUnionFind:
    def test_union_and_find(self):
        forest = UnionFind(range(4))
        assert forest.union(0, 1)
        assert forest.union(2, 3)
        assert not forest.union(1, 0)
        assert forest.find(0) == forest.find(1)
        assert forest.find(0) != forest.find(3)
