from dataclasses import dataclass
from typing import Dict, Optional, Tuple
import logging

import pygame

from .tile_types import TileType

logger = logging.getLogger(__name__)

Color = Tuple[int, ...]


@dataclass
class TileVisual:
    """How one tile kind is drawn.

    A tile with neither a colour nor a loadable sprite is not drawn at all.
    """
    base_color: Optional[Color] = None
    border_color: Optional[Color] = None
    border_radius: int = 0
    sprite_path: Optional[str] = None
    # Platforms are drawn as a thin slab at the top of the cell
    thickness: Optional[int] = None


class TileTheme:
    """Maps tile kinds to visuals and builds cached surfaces for them."""

    def __init__(self, name: str = "default"):
        self.name = name
        self._visuals: Dict[TileType, TileVisual] = {}
        self._surfaces: Dict[Tuple[TileType, int], Optional[pygame.Surface]] = {}

    def register(self, tile_type: TileType, visual: TileVisual) -> None:
        self._visuals[tile_type] = visual
        for key in [k for k in self._surfaces if k[0] == tile_type]:
            del self._surfaces[key]

    def get_visual(self, tile_type: TileType) -> Optional[TileVisual]:
        return self._visuals.get(tile_type)

    def surface_for(self, tile_type: TileType, tile_size: int) -> Optional[pygame.Surface]:
        """Cached surface for a tile kind at a size, or None when it has no visual."""
        key = (tile_type, tile_size)
        if key not in self._surfaces:
            self._surfaces[key] = self._create_surface(tile_type, tile_size)
        return self._surfaces[key]

    def _load_sprite(self, path: str, tile_size: int) -> Optional[pygame.Surface]:
        try:
            sprite = pygame.image.load(path)
        except (pygame.error, FileNotFoundError):
            logger.debug("Tile sprite %s not available", path)
            return None
        return pygame.transform.scale(sprite, (tile_size, tile_size))

    def _create_surface(self, tile_type: TileType, tile_size: int) -> Optional[pygame.Surface]:
        visual = self._visuals.get(tile_type)
        if visual is None:
            return None

        sprite = self._load_sprite(visual.sprite_path, tile_size) if visual.sprite_path else None
        if sprite is None and visual.base_color is None:
            return None

        surface = pygame.Surface((tile_size, tile_size), pygame.SRCALPHA)
        if visual.base_color is not None:
            height = visual.thickness if visual.thickness else tile_size
            rect = pygame.Rect(0, 0, tile_size, min(height, tile_size))
            pygame.draw.rect(surface, visual.base_color, rect, border_radius=visual.border_radius)
            if visual.border_color:
                pygame.draw.rect(surface, visual.border_color, rect, 2, border_radius=visual.border_radius)
        if sprite is not None:
            surface.blit(sprite, (0, 0))
        return surface


def default_theme() -> TileTheme:
    """Flat-colour theme; FLOOR is left undrawn so the background shows."""
    theme = TileTheme("default")
    theme.register(TileType.WALL, TileVisual(base_color=(54, 60, 78), border_radius=4))
    theme.register(TileType.PLATFORM, TileVisual(base_color=(139, 90, 43), border_radius=2, thickness=6))
    return theme
