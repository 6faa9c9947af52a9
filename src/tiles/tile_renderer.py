import pygame
from typing import Dict, Iterable, Optional, Tuple

from .tile_types import TileType
from .tile_theme import TileTheme, default_theme
from src.level.geometry import Point
from src.level.level_data import LevelData
from src.level.room_baker import bake_level
from src.level.spawn_extractor import SpawnCandidate, SpawnType
from src.level.tile_grid import TileGrid

SPAWN_COLORS = {
    SpawnType.GROUND: (0, 220, 220),
    SpawnType.AIR: (220, 0, 220),
    SpawnType.BOSS: (240, 220, 40),
}


class TileRenderer:
    """Draws room grids, baked levels and spawn markers onto pygame surfaces."""

    def __init__(self, tile_size: Optional[int] = None, theme: Optional[TileTheme] = None):
        from config import TILE
        # Use provided tile_size or fall back to configured TILE constant
        self.tile_size = tile_size if tile_size is not None else TILE
        self.theme = theme if theme is not None else default_theme()
        # Baked level tile maps keyed by level seed
        self.level_cache: Dict[str, Dict[Point, TileType]] = {}

    def _screen_pos(self, tx: int, ty: int, camera_offset: Tuple[float, float], zoom: float) -> Tuple[int, int]:
        return (int((tx * self.tile_size - camera_offset[0]) * zoom),
                int((ty * self.tile_size - camera_offset[1]) * zoom))

    def _visible_tiles(self, surface: pygame.Surface, camera_offset: Tuple[float, float],
                       zoom: float) -> Tuple[int, int, int, int]:
        """World tile bounds [x0, x1) x [y0, y1) covered by the surface."""
        rect = surface.get_rect()
        buffer_tiles = 1
        x0 = int(camera_offset[0] // self.tile_size) - buffer_tiles
        y0 = int(camera_offset[1] // self.tile_size) - buffer_tiles
        x1 = int((camera_offset[0] + rect.width / zoom) // self.tile_size) + buffer_tiles + 1
        y1 = int((camera_offset[1] + rect.height / zoom) // self.tile_size) + buffer_tiles + 1
        return x0, y0, x1, y1

    def render_tile(self, surface: pygame.Surface, tile_type: TileType, tx: int, ty: int,
                    camera_offset: Tuple[float, float] = (0, 0), zoom: float = 1.0) -> bool:
        """Render a single tile at a world tile position. Returns False if skipped."""
        size = max(1, int(self.tile_size * zoom))
        tile_surface = self.theme.surface_for(tile_type, size)
        if tile_surface is None:
            return False
        surface.blit(tile_surface, self._screen_pos(tx, ty, camera_offset, zoom))
        return True

    def render_grid(self, surface: pygame.Surface, grid: TileGrid, offset: Point = (0, 0),
                    camera_offset: Tuple[float, float] = (0, 0), zoom: float = 1.0) -> int:
        """
        Render a room grid.

        Args:
            surface: Target surface
            grid: Room grid
            offset: World tile position of the grid's top-left cell
            camera_offset: Camera position in world pixels
            zoom: Zoom factor

        Returns:
            Number of tiles drawn
        """
        x0, y0, x1, y1 = self._visible_tiles(surface, camera_offset, zoom)
        drawn = 0
        for y in range(max(0, y0 - offset[1]), min(grid.height, y1 - offset[1])):
            for x in range(max(0, x0 - offset[0]), min(grid.width, x1 - offset[0])):
                tile = grid.get_tile(x, y)
                if self.render_tile(surface, tile, offset[0] + x, offset[1] + y, camera_offset, zoom):
                    drawn += 1
        return drawn

    def render_tiles(self, surface: pygame.Surface, tiles: Dict[Point, TileType],
                     camera_offset: Tuple[float, float] = (0, 0), zoom: float = 1.0) -> int:
        x0, y0, x1, y1 = self._visible_tiles(surface, camera_offset, zoom)
        drawn = 0
        for (x, y), tile in tiles.items():
            if x0 <= x < x1 and y0 <= y < y1:
                if self.render_tile(surface, tile, x, y, camera_offset, zoom):
                    drawn += 1
        return drawn

    def render_level(self, surface: pygame.Surface, level: LevelData,
                     camera_offset: Tuple[float, float] = (0, 0), zoom: float = 1.0) -> int:
        """Render every room and corridor of a level, baking it once per seed."""
        key = level.level_seed
        if key not in self.level_cache:
            self.level_cache[key] = bake_level(level)
        return self.render_tiles(surface, self.level_cache[key], camera_offset, zoom)

    def invalidate(self, level_seed: Optional[str] = None) -> None:
        if level_seed is None:
            self.level_cache.clear()
        else:
            self.level_cache.pop(level_seed, None)

    def render_spawns(self, surface: pygame.Surface, spawns: Iterable[SpawnCandidate], offset: Point = (0, 0),
                      camera_offset: Tuple[float, float] = (0, 0), zoom: float = 1.0) -> int:
        """Draw a marker square for each unused spawn candidate."""
        size = max(2, int(self.tile_size * zoom * 0.8))
        inset = (int(self.tile_size * zoom) - size) // 2
        drawn = 0
        for spawn in spawns:
            if spawn.is_used:
                continue
            sx, sy = self._screen_pos(offset[0] + spawn.position[0], offset[1] + spawn.position[1],
                                      camera_offset, zoom)
            rect = pygame.Rect(sx + inset, sy + inset, size, size)
            pygame.draw.rect(surface, SPAWN_COLORS.get(spawn.spawn_type, (255, 255, 255)), rect)
            pygame.draw.rect(surface, (255, 255, 255), rect, 1)
            drawn += 1
        return drawn

    def render_level_spawns(self, surface: pygame.Surface, level: LevelData,
                            camera_offset: Tuple[float, float] = (0, 0), zoom: float = 1.0) -> int:
        drawn = 0
        for room in level.rooms:
            if room.room_data is not None:
                drawn += self.render_spawns(surface, room.room_data.spawns, room.world_position,
                                            camera_offset, zoom)
        return drawn
