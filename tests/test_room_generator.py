import json
import logging

import pytest

from src.level.generation_params import RoomGenerationParams, RoomType, default_boss_params, default_entrance_params
from src.level.platform_injector import ExclusionZones, effective_jump_height, unbridged_gaps
from src.level.room_generator import clear_entrance_exit_area, door_protect_radius, generate_room
from src.level.spawn_extractor import SpawnType
from src.level.tile_grid import TileGrid
from src.tiles.tile_types import TileType


@pytest.fixture
def wide_params():
    return RoomGenerationParams(room_width=60, room_height=30, edge_padding=3)


class TestDeterminism:
    """Same parameters and seed give the same room."""

    def test_seed_reproduces_room(self, wide_params):
        first = generate_room(wide_params, "abc")
        second = generate_room(wide_params, "abc")
        assert first.grid == second.grid
        assert first.entrance == second.entrance
        assert first.exit == second.exit
        assert [s.position for s in first.spawns] == [s.position for s in second.spawns]
        assert [s.enemy_type for s in first.spawns] == [s.enemy_type for s in second.spawns]

    def test_different_seeds_differ(self, wide_params):
        assert generate_room(wide_params, "abc").grid != generate_room(wide_params, "xyz").grid

    def test_caller_params_untouched(self):
        params = RoomGenerationParams(room_width=500)
        generate_room(params, "abc")
        assert params.room_width == 500

    def test_random_seed_is_recorded(self):
        room = generate_room(RoomGenerationParams(use_random_seed=True))
        replay = generate_room(RoomGenerationParams(), room.seed)
        assert room.grid == replay.grid


class TestRoomShape:
    """Doors, pads and connectivity."""

    def test_doors_on_side_columns(self, wide_params):
        room = generate_room(wide_params, "abc")
        low, high = wide_params.clone().validate().door_row_range()
        assert room.entrance[0] == 0
        assert room.exit[0] == 59
        assert low <= room.entrance[1] <= high
        assert low <= room.exit[1] <= high

    @pytest.mark.parametrize("seed", ["abc", "s1", "s2", "s3"])
    def test_entrance_reaches_exit(self, wide_params, seed):
        room = generate_room(wide_params, seed)
        assert room.connected

    def test_landing_pads(self, wide_params):
        room = generate_room(wide_params, "abc")
        depth = wide_params.entrance_clear_depth
        ex, ey = room.entrance
        assert room.grid.get_tile(ex, ey) == TileType.FLOOR
        assert all(room.grid.is_solid(x, ey + 1) for x in range(depth))
        xx, xy = room.exit
        assert room.grid.get_tile(xx, xy) == TileType.FLOOR
        assert all(room.grid.is_solid(x, xy + 1) for x in range(xx - depth + 1, xx + 1))

    def test_clear_area_dimensions(self):
        grid = TileGrid(20, 12)
        clear_entrance_exit_area(grid, (0, 6), (19, 8), 3)
        assert all(grid.get_tile(x, y) == TileType.FLOOR for x in range(4) for y in (4, 5, 6))
        assert grid.get_tile(4, 6) == TileType.WALL
        assert grid.get_tile(0, 3) == TileType.WALL
        assert all(grid.get_tile(x, y) == TileType.FLOOR for x in range(16, 20) for y in (6, 7, 8))

    def test_stats(self, wide_params):
        room = generate_room(wide_params, "abc")
        assert 0.0 < room.openness < 1.0
        assert sum(room.tile_counts().values()) == 60 * 30
        assert room.platform_count == room.grid.count(TileType.PLATFORM)
        json.dumps(room.to_dict())


class TestPlatforms:
    """Platforms in finished rooms."""

    ROOM_SHAPES = [
        RoomGenerationParams(room_width=40, room_height=25),
        RoomGenerationParams(room_width=30, room_height=45, has_double_jump=False),
        RoomGenerationParams(room_width=50, room_height=30, max_jump_height=3, has_double_jump=False),
    ]

    @pytest.mark.parametrize("shape", range(len(ROOM_SHAPES)))
    @pytest.mark.parametrize("seed", ["p1", "p2", "p3", "p4", "p5"])
    def test_no_fixable_climb_left(self, shape, seed):
        """Every climb above the jump height is bridged unless a door zone or a ceiling blocks it"""
        params = self.ROOM_SHAPES[shape]
        room = generate_room(params, seed)
        p = params.clone().validate()
        zones = ExclusionZones()
        zones.add(room.entrance, door_protect_radius(p))
        zones.add(room.exit, door_protect_radius(p))
        effective = effective_jump_height(p.max_jump_height, p.has_double_jump)
        assert unbridged_gaps(room.grid, effective, zones) == []

    @pytest.mark.parametrize("seed", ["p1", "p2", "p3", "p4", "p5", "p6"])
    def test_platform_anchors_survive_island_removal(self, wide_params, seed):
        room = generate_room(wide_params, seed)
        assert all(room.grid.get_tile(x, y) == TileType.PLATFORM for x, y in room.platforms)

    def test_door_zone_covers_landing_pad(self):
        params = RoomGenerationParams(entrance_clear_depth=9).validate()
        assert door_protect_radius(params) == 10
        assert door_protect_radius(RoomGenerationParams().validate()) == 6


class TestRoomTypes:
    """Entrance and boss specifics."""

    def test_entrance_room_has_no_spawns(self):
        room = generate_room(default_entrance_params(), "entry")
        assert room.room_type == RoomType.ENTRANCE
        assert room.spawns == []
        assert not room.needs_door_at_exit

    def test_boss_room_gets_boss_spawn(self):
        params = default_boss_params()
        params.room_width, params.room_height = 50, 30
        room = generate_room(params, "boss")
        assert room.needs_door_at_exit
        bosses = [s for s in room.spawns if s.spawn_type == SpawnType.BOSS]
        assert len(bosses) == 1

    def test_spawn_bookkeeping(self, wide_params):
        room = generate_room(wide_params, "abc")
        if not room.spawns:
            pytest.skip("seed produced no spawns")
        spawn = room.spawns[0]
        assert room.mark_spawn_used(spawn.position)
        assert not room.mark_spawn_used(spawn.position)
        assert spawn not in room.get_unused_spawns()

    def test_small_entrance_room_is_raised_to_fit_leaves(self, caplog):
        """Two 8-cell leaves need 16 rows, so the 20x15 entrance grows to 20x16"""
        with caplog.at_level(logging.DEBUG, logger="src.level.generation_params"):
            room = generate_room(default_entrance_params(), "entry")
        assert (room.grid.width, room.grid.height) == (20, 16)
        assert "raised" in caplog.text
