import json
import logging

import pytest

from src.level.config_loader import load_level_params, load_room_params, save_params
from src.level.errors import ConfigError
from src.level.generation_params import LevelGenerationParams, RoomGenerationParams, RoomType
from src.level.seed_manager import SeedManager, seed_to_int


class TestRoomParams:
    """Clamping and serialization of single-room parameters."""

    def test_out_of_range_values_are_clamped(self):
        params = RoomGenerationParams(room_width=500, room_height=2, max_enemies=-3, corridor_width=1).validate()
        assert params.room_width == 100
        assert params.room_height == 16
        assert params.max_enemies == 0
        assert params.corridor_width == 3

    def test_inverted_ranges_are_swapped(self):
        params = RoomGenerationParams(split_ratio_range=(0.7, 0.3),
                                      min_platform_width=6, max_platform_width=3).validate()
        assert params.split_ratio_range == (0.3, 0.7)
        assert params.min_platform_width <= params.max_platform_width

    def test_fixed_door_rows_are_clamped(self):
        params = RoomGenerationParams(room_height=25, edge_padding=2, entrance_y=0, exit_y=99).validate()
        assert params.door_row_range() == (4, 19)
        assert (params.entrance_y, params.exit_y) == (4, 19)

    def test_validate_is_idempotent(self):
        once = RoomGenerationParams(room_width=7, walk_brush_size=9).validate()
        assert once.clone().validate() == once

    def test_dict_round_trip(self):
        params = RoomGenerationParams(room_type=RoomType.BOSS, seed="abc", split_ratio_range=(0.4, 0.6))
        assert RoomGenerationParams.from_dict(json.loads(json.dumps(params.to_dict()))) == params

    def test_unknown_keys_are_ignored(self, caplog):
        with caplog.at_level(logging.WARNING):
            params = RoomGenerationParams.from_dict({"room_width": 30, "gravity": 9.8})
        assert params.room_width == 30
        assert "gravity" in caplog.text


class TestLevelParams:
    def test_room_types_are_forced(self):
        params = LevelGenerationParams(boss_room_params=RoomGenerationParams()).validate()
        assert params.boss_room_params.room_type == RoomType.BOSS
        assert params.params_for(RoomType.ENTRANCE) is params.entrance_room_params

    def test_corridor_width_fits_spacing(self):
        params = LevelGenerationParams(corridor_width=40, room_spacing=20).validate()
        assert params.corridor_width == 10
        assert LevelGenerationParams(combat_room_count=50).validate().combat_room_count == 10

    def test_offset_range_is_ordered(self):
        params = LevelGenerationParams(y_offset_range=(10, -10)).validate()
        assert params.y_offset_range == (-10, 10)

    def test_clone_is_independent(self):
        params = LevelGenerationParams(level_seed="x")
        copy = params.clone()
        copy.combat_room_params.room_width = 99
        assert params.combat_room_params.room_width == 40
        assert copy.level_seed == "x"


class TestConfigLoader:
    """Reading generation parameters from JSON files."""

    def test_missing_file_gives_defaults(self, tmp_path, caplog):
        with caplog.at_level(logging.WARNING):
            params = load_room_params(tmp_path / "absent.json")
        assert params == RoomGenerationParams().validate()
        assert "not found" in caplog.text

    def test_sections_are_loaded(self, tmp_path):
        path = tmp_path / "generation.json"
        path.write_text(json.dumps({
            "room": {"room_width": 55, "room_type": "boss"},
            "level": {"combat_room_count": 2, "combat_room_params": {"room_width": 30}},
        }))
        room = load_room_params(path)
        level = load_level_params(path)
        assert room.room_width == 55
        assert room.room_type == RoomType.BOSS
        assert level.combat_room_count == 2
        assert level.combat_room_params.room_width == 30
        assert level.combat_room_params.room_type == RoomType.COMBAT

    def test_malformed_json(self, tmp_path):
        path = tmp_path / "broken.json"
        path.write_text("{\"room\": ")
        with pytest.raises(ConfigError):
            load_room_params(path)

    def test_bad_values(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text(json.dumps({"room": {"room_type": "dungeon"}, "level": []}))
        with pytest.raises(ConfigError):
            load_room_params(path)
        with pytest.raises(ConfigError):
            load_level_params(path)

    def test_save_then_load(self, tmp_path):
        path = tmp_path / "nested" / "generation.json"
        room = RoomGenerationParams(room_width=33).validate()
        level = LevelGenerationParams(combat_room_count=4).validate()
        save_params(path, room, level)
        assert load_room_params(path) == room
        assert load_level_params(path).combat_room_count == 4


class TestSeeds:
    def test_string_seeds_are_stable(self):
        assert seed_to_int("abc") == seed_to_int("abc")
        assert seed_to_int("abc") != seed_to_int("abd")

    def test_derived_seeds(self):
        manager = SeedManager("lvl")
        assert manager.derive_seed("boss") == SeedManager("lvl").derive_seed("boss")
        assert manager.derive_seed("boss") != manager.derive_seed("entrance")
        assert len(manager.derive_seed("boss")) == 12
        assert manager.get_random("layout") is manager.get_random("layout")
