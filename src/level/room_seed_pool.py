"""Pool of pre-generated combat room seeds, drawn without replacement."""

from dataclasses import dataclass
from typing import List, Optional
import logging
import random

from src.level.generation_params import RoomType
from src.level.seed_manager import SeedManager

logger = logging.getLogger(__name__)


@dataclass
class RoomSeed:
    seed: str
    room_type: RoomType = RoomType.COMBAT

    def __str__(self) -> str:
        return f"RoomSeed(seed={self.seed}, type={self.room_type.value})"


class RoomSeedPool:
    """Holds combat room seeds derived from a level seed."""

    def __init__(self, seed_manager: SeedManager):
        self.seed_manager = seed_manager
        self._seeds: List[RoomSeed] = []

    @property
    def remaining(self) -> int:
        return len(self._seeds)

    @property
    def is_empty(self) -> bool:
        return not self._seeds

    def generate(self, count: int) -> None:
        self._seeds = [RoomSeed(seed=f"Combat_{self.seed_manager.derive_seed(f'combat_{index}')}")
                       for index in range(count)]
        logger.debug("Seed pool holds %d combat seeds", len(self._seeds))

    def draw_seed(self, rng: random.Random) -> Optional[RoomSeed]:
        """Remove and return a random seed, or None when the pool is empty."""
        if self.is_empty:
            logger.warning("Seed pool is empty")
            return None
        return self._seeds.pop(rng.randrange(len(self._seeds)))
