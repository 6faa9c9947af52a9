from .tile_types import TileType
from .tile_theme import TileTheme, TileVisual

__all__ = [
    'TileType',
    'TileTheme',
    'TileVisual',
]
