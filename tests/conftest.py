import os
import random

import pytest

# Headless pygame for renderer tests
os.environ.setdefault("SDL_VIDEODRIVER", "dummy")

from src.level.generation_params import RoomGenerationParams
from src.level.tile_grid import TileGrid


@pytest.fixture
def params():
    """Validated default combat room parameters."""
    return RoomGenerationParams().validate()


@pytest.fixture
def rng():
    return random.Random(1234)


@pytest.fixture
def grid_from():
    """Build a grid from ASCII rows ('#' wall, '.' floor, '=' platform)."""
    def build(*rows):
        return TileGrid.from_ascii("\n".join(rows))
    return build
