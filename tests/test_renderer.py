import pygame
import pytest

from src.level.generation_params import RoomType
from src.level.level_data import LevelData, PlacedRoom
from src.level.room_data import RoomData
from src.level.spawn_extractor import SpawnCandidate, SpawnType
from src.systems.camera import Camera
from src.tiles.tile_renderer import TileRenderer
from src.tiles.tile_theme import TileTheme, TileVisual, default_theme
from src.tiles.tile_types import TileType


@pytest.fixture
def surface():
    return pygame.Surface((200, 200))


@pytest.fixture
def box(grid_from):
    """4x3 ring of ten walls around two floor cells."""
    return grid_from("####", "#..#", "####")


class TestTileRenderer:
    """Drawing grids with the default theme."""

    def test_only_walls_are_drawn(self, surface, box):
        renderer = TileRenderer(tile_size=8)
        assert renderer.render_grid(surface, box) == 10
        assert tuple(surface.get_at((4, 4)))[:3] == (54, 60, 78)
        # Floor cell keeps the cleared background
        assert tuple(surface.get_at((12, 12)))[:3] == (0, 0, 0)

    def test_offscreen_tiles_are_culled(self, surface, box):
        renderer = TileRenderer(tile_size=8)
        assert renderer.render_grid(surface, box, camera_offset=(400, 400)) == 0

    def test_grid_offset_moves_tiles(self, surface, box):
        renderer = TileRenderer(tile_size=8)
        renderer.render_grid(surface, box, offset=(10, 10))
        assert tuple(surface.get_at((84, 84)))[:3] == (54, 60, 78)
        assert tuple(surface.get_at((4, 4)))[:3] == (0, 0, 0)

    def test_level_is_baked_once(self, surface, box):
        data = RoomData(seed="r", room_type=RoomType.ENTRANCE, grid=box, entrance=(0, 1), exit=(3, 1))
        level = LevelData(level_seed="cached",
                          rooms=[PlacedRoom(id=0, room_type=RoomType.ENTRANCE, seed="r", room_data=data)])
        renderer = TileRenderer(tile_size=8)
        assert renderer.render_level(surface, level) == 10
        assert "cached" in renderer.level_cache
        renderer.invalidate("cached")
        assert renderer.level_cache == {}


class TestTheme:
    """Tile visuals and sprite fallbacks."""

    def test_missing_sprite_without_colour_is_skipped(self, surface, box, tmp_path):
        theme = TileTheme("sprites")
        theme.register(TileType.WALL, TileVisual(sprite_path=str(tmp_path / "missing.png")))
        renderer = TileRenderer(tile_size=8, theme=theme)
        assert renderer.render_grid(surface, box) == 0

    def test_missing_sprite_falls_back_to_colour(self, surface, box, tmp_path):
        theme = TileTheme("sprites")
        theme.register(TileType.WALL, TileVisual(base_color=(200, 10, 10), sprite_path=str(tmp_path / "missing.png")))
        renderer = TileRenderer(tile_size=8, theme=theme)
        assert renderer.render_grid(surface, box) == 10

    def test_surfaces_are_cached_per_size(self):
        theme = default_theme()
        assert theme.surface_for(TileType.WALL, 16) is theme.surface_for(TileType.WALL, 16)
        assert theme.surface_for(TileType.WALL, 16).get_size() == (16, 16)
        assert theme.surface_for(TileType.FLOOR, 16) is None

    def test_register_replaces_cached_surface(self):
        theme = default_theme()
        first = theme.surface_for(TileType.WALL, 16)
        theme.register(TileType.WALL, TileVisual(base_color=(1, 2, 3)))
        assert theme.surface_for(TileType.WALL, 16) is not first

    def test_default_theme_leaves_floor_undrawn(self):
        theme = default_theme()
        assert theme.get_visual(TileType.FLOOR) is None
        assert theme.get_visual(TileType.PLATFORM).thickness == 6


class TestSpawnMarkers:
    def test_used_spawns_are_hidden(self, surface):
        spawns = [SpawnCandidate((2, 2), SpawnType.GROUND), SpawnCandidate((5, 5), SpawnType.AIR, is_used=True)]
        renderer = TileRenderer(tile_size=8)
        assert renderer.render_spawns(surface, spawns) == 1
        assert tuple(surface.get_at((20, 20)))[:3] == (0, 220, 220)


class TestCamera:
    def test_pan_and_zoom(self):
        camera = Camera()
        x, y = camera.offset
        camera.pan(10, -5)
        assert camera.offset == (x + 10, y - 5)
        labels = set()
        for _ in range(3):
            camera.toggle_zoom()
            labels.add(camera.get_zoom_label())
        assert len(labels) == 3
