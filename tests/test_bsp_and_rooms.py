import random

import pytest

from src.level.bsp_partitioner import partition, root_bounds
from src.level.generation_params import RoomGenerationParams
from src.level.geometry import Rect
from src.level.room_placer import RegionType, RoomRegion, assign_region_types, mark_entrance_exit, place_rooms
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType


class TestBspPartition:
    """Test the space partitioner."""

    @pytest.mark.parametrize("seed", [1, 7, 42, 99, 2024])
    def test_leaves_tile_bounds_exactly(self, params, seed):
        """Every cell of the root bounds belongs to exactly one leaf"""
        tree = partition(params, random.Random(seed))
        bounds = root_bounds(params)
        covered = {}
        for leaf in tree.leaves():
            for cell in leaf.bounds.tiles():
                covered[cell] = covered.get(cell, 0) + 1
        assert set(covered) == set(bounds.tiles())
        assert all(count == 1 for count in covered.values())

    @pytest.mark.parametrize("seed", [3, 11, 58])
    def test_leaves_respect_minimum_size(self, params, seed):
        tree = partition(params, random.Random(seed))
        for leaf in tree.leaves():
            assert leaf.bounds.width >= params.min_leaf_size
            assert leaf.bounds.height >= params.min_leaf_size

    def test_depth_is_capped(self):
        params = RoomGenerationParams(room_width=100, room_height=60, min_leaf_size=6,
                                      max_bsp_depth=3, target_room_count=12).validate()
        tree = partition(params, random.Random(5))
        assert tree.max_depth <= 3

    def test_children_reference_arena_indices(self, params, rng):
        tree = partition(params, rng)
        for node in tree.nodes:
            for child in tree.children(node):
                assert child.depth == node.depth + 1
                assert tree.nodes[child.index] is child

    def test_same_seed_same_tree(self, params):
        a = partition(params, random.Random(77))
        b = partition(params, random.Random(77))
        assert [n.bounds for n in a.nodes] == [n.bounds for n in b.nodes]


class TestRoomPlacer:
    """Test per-leaf room carving."""

    def test_rooms_sit_inside_padded_leaves(self, params, rng):
        """Each room lies inside some leaf shrunk by the room padding"""
        tree = partition(params, rng)
        grid = TileGrid(params.room_width, params.room_height)
        rooms = place_rooms(grid, tree, params, rng)
        assert rooms
        shrunk = [leaf.bounds.expanded(-params.room_padding) for leaf in tree.leaves()]
        for room in rooms:
            b = room.bounds
            assert any(s.x <= b.x and b.right <= s.right and s.y <= b.y and b.bottom <= s.bottom for s in shrunk)

    def test_rooms_are_carved_and_disjoint(self, params, rng):
        tree = partition(params, rng)
        grid = TileGrid(params.room_width, params.room_height)
        rooms = place_rooms(grid, tree, params, rng)
        for i, a in enumerate(rooms):
            assert all(grid.get_tile(x, y) == TileType.FLOOR for x, y in a.bounds.tiles())
            for b in rooms[i + 1:]:
                assert not a.bounds.overlaps(b.bounds)

    def test_room_ids_are_sequential(self, params, rng):
        tree = partition(params, rng)
        rooms = place_rooms(TileGrid(params.room_width, params.room_height), tree, params, rng)
        assert [r.id for r in rooms] == list(range(len(rooms)))

    def test_minimum_room_dimension(self, params, rng):
        tree = partition(params, rng)
        rooms = place_rooms(TileGrid(params.room_width, params.room_height), tree, params, rng)
        for room in rooms:
            assert room.bounds.width >= params.corridor_width + 3
            assert room.bounds.height >= params.corridor_width + 3


class TestRegionTagging:
    """Test entrance/exit marking and region types."""

    def _rooms(self):
        return [
            RoomRegion(0, Rect(2, 10, 6, 6)),
            RoomRegion(1, Rect(15, 3, 10, 10)),
            RoomRegion(2, Rect(30, 12, 6, 6)),
        ]

    def test_nearest_rooms_marked(self):
        rooms = self._rooms()
        mark_entrance_exit(rooms, (0, 12), (39, 14))
        assert rooms[0].is_entrance and rooms[0].region_type == RegionType.ENTRANCE
        assert rooms[2].is_exit and rooms[2].region_type == RegionType.EXIT
        assert not rooms[1].is_entrance and not rooms[1].is_exit

    def test_assign_keeps_door_regions(self, params):
        rooms = self._rooms()
        mark_entrance_exit(rooms, (0, 12), (39, 14))
        assign_region_types(rooms, params)
        assert rooms[0].region_type == RegionType.ENTRANCE
        assert rooms[2].region_type == RegionType.EXIT
        assert rooms[1].region_type in (RegionType.COMBAT, RegionType.REST, RegionType.CONNECTOR)

    def test_mark_handles_no_rooms(self):
        mark_entrance_exit([], (0, 0), (10, 0))
