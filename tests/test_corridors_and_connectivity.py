import random

from src.level.connectivity import (
    ensure_connectivity,
    find_regions,
    flood_fill,
    random_walk,
    remove_disconnected_islands,
    verify_connectivity,
)
from src.level.corridor_carver import carve_corridors, carve_edge, corridor_endpoints
from src.level.geometry import Rect
from src.level.room_graph import RoomEdge, RoomGraph
from src.level.room_placer import RoomRegion
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType


def dug_grid(width, height, *rooms):
    grid = TileGrid(width, height)
    for room in rooms:
        b = room.bounds
        grid.dig_rect(b.x, b.y, b.width, b.height)
    return grid


class TestCorridorCarver:
    """Test straight and L-shaped corridors."""

    def test_endpoints_face_each_other(self):
        a = RoomRegion(0, Rect(2, 5, 6, 6))
        b = RoomRegion(1, Rect(20, 5, 6, 6))
        assert corridor_endpoints(a, b) == ((7, 8), (20, 8))

    def test_aligned_rooms_get_straight_corridor(self, params, rng):
        """Rooms on the same rows are joined by a corridor_width band"""
        a = RoomRegion(0, Rect(2, 5, 6, 6))
        b = RoomRegion(1, Rect(20, 5, 6, 6))
        grid = dug_grid(30, 16, a, b)
        assert carve_edge(grid, a, b, params, rng) is True
        for y in (7, 8, 9):
            assert grid.get_tile(14, y) == TileType.FLOOR
        assert grid.get_tile(14, 6) == TileType.WALL
        assert grid.get_tile(14, 10) == TileType.WALL

    def test_diagonal_rooms_get_l_corridor(self, params, rng):
        a = RoomRegion(0, Rect(2, 2, 6, 6))
        b = RoomRegion(1, Rect(20, 20, 6, 6))
        grid = dug_grid(30, 30, a, b)
        assert carve_edge(grid, a, b, params, rng) is False
        assert verify_connectivity(grid, a.center, b.center)

    def test_carving_keeps_platforms(self, params, rng):
        """Corridors only convert walls"""
        a = RoomRegion(0, Rect(2, 5, 6, 6))
        b = RoomRegion(1, Rect(20, 5, 6, 6))
        grid = dug_grid(30, 16, a, b)
        grid.set_tile(12, 8, TileType.PLATFORM)
        carve_edge(grid, a, b, params, rng)
        assert grid.get_tile(12, 8) == TileType.PLATFORM

    def test_one_corridor_per_final_edge(self, params, rng):
        rooms = [RoomRegion(0, Rect(2, 2, 6, 6)), RoomRegion(1, Rect(20, 2, 6, 6)), RoomRegion(2, Rect(20, 20, 6, 6))]
        graph = RoomGraph(room_ids=[0, 1, 2],
                          mst_edges=[RoomEdge.between(0, 1, 18.0), RoomEdge.between(1, 2, 18.0)],
                          extra_edges=[RoomEdge.between(0, 2, 25.0)])
        grid = dug_grid(30, 30, *rooms)
        assert carve_corridors(grid, rooms, graph, params, rng) == 3
        assert verify_connectivity(grid, rooms[0].center, rooms[2].center)


class TestFloodFill:
    """Test region queries."""

    def test_fill_from_wall_is_empty(self, grid_from):
        grid = grid_from("###", "#.#", "###")
        assert flood_fill(grid, (0, 0)) == set()

    def test_platforms_are_passable(self, grid_from):
        grid = grid_from("#####", "#.=.#", "#####")
        assert flood_fill(grid, (1, 1)) == {(1, 1), (2, 1), (3, 1)}

    def test_find_regions(self, grid_from):
        grid = grid_from("#####", "#.#.#", "#####")
        regions = find_regions(grid)
        assert sorted(len(r) for r in regions) == [1, 1]

    def test_verify_accepts_adjacent_end(self, grid_from):
        """Reaching within one cell of the end counts as connected"""
        grid = grid_from("######", "#...##", "######")
        assert verify_connectivity(grid, (1, 1), (3, 1))
        assert not verify_connectivity(grid, (1, 1), (4, 1))


class TestConnectivityGuarantor:
    """Test the random-walk backstop."""

    def test_walk_connects_solid_grid(self, params):
        grid = TileGrid(40, 20)
        assert ensure_connectivity(grid, (5, 10), (34, 10), params, random.Random(9))
        assert verify_connectivity(grid, (5, 10), (34, 10))

    def test_walk_reaches_border_target(self, params):
        """Targets outside the clamp band are still dug out"""
        grid = TileGrid(20, 10)
        assert random_walk(grid, (6, 5), (0, 5), params, random.Random(2), prefer_right=False)
        assert grid.get_tile(0, 5) == TileType.FLOOR
        assert verify_connectivity(grid, (6, 5), (0, 5))

    def test_walk_only_carves_walls(self, params):
        grid = TileGrid(30, 12)
        grid.set_tile(10, 6, TileType.PLATFORM)
        random_walk(grid, (3, 6), (26, 6), params, random.Random(4))
        assert grid.get_tile(10, 6) == TileType.PLATFORM

    def test_islands_are_filled(self, grid_from):
        grid = grid_from("#######", "#..#..#", "#######")
        filled = remove_disconnected_islands(grid, (1, 1))
        assert filled == 2
        assert grid.get_tile(4, 1) == TileType.WALL
        assert grid.get_tile(1, 1) == TileType.FLOOR
