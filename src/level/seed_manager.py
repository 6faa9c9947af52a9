"""
Seed Manager - Handles deterministic seed management for procedural generation
"""

import hashlib
import random
import time
from typing import Dict, Optional, Union

Seed = Union[str, int]


def seed_to_int(seed: Seed) -> int:
    """
    Convert a seed string (or int) to a stable 32-bit integer.

    Python's built-in ``hash`` is salted per process, so strings are hashed
    with md5 to keep generation reproducible across runs.

    Args:
        seed: Seed string or integer

    Returns:
        Deterministic integer seed
    """
    seed_hash = hashlib.md5(str(seed).encode()).hexdigest()
    return int(seed_hash[:8], 16)


def make_random(seed: Seed) -> random.Random:
    """Create a Random instance seeded from a seed string."""
    return random.Random(seed_to_int(seed))


def random_seed_string(prefix: str = "Room") -> str:
    """Generate a fresh, non-deterministic seed string."""
    return f"{prefix}_{time.time_ns()}_{random.randint(1000, 9999)}"


class SeedManager:
    """Manages deterministic seeds derived from one level seed"""

    def __init__(self, level_seed: Optional[Seed] = None):
        """
        Initialize seed manager with optional level seed

        Args:
            level_seed: Master seed for the whole level. If None, generates a random seed.
        """
        self.level_seed = str(level_seed) if level_seed is not None else random_seed_string("Level")
        self.sub_seeds: Dict[str, str] = {}
        self._rng_instances: Dict[str, random.Random] = {}

    def derive_seed(self, component: str) -> str:
        """
        Derive a deterministic seed string for a named component

        Args:
            component: Component name ('layout', 'seed_pool', 'combat_0', ...)

        Returns:
            Seed string unique to this level seed and component
        """
        if component not in self.sub_seeds:
            seed_string = f"{self.level_seed}_{component}"
            seed_hash = hashlib.md5(seed_string.encode()).hexdigest()
            self.sub_seeds[component] = seed_hash[:12]
        return self.sub_seeds[component]

    def get_random(self, component: str) -> random.Random:
        """
        Get deterministic random instance for specific component

        Args:
            component: Component name

        Returns:
            Random instance seeded for this component
        """
        if component not in self._rng_instances:
            self._rng_instances[component] = make_random(self.derive_seed(component))
        return self._rng_instances[component]

    def get_seed_info(self) -> Dict[str, object]:
        """Get information about current seeds"""
        return {
            'level_seed': self.level_seed,
            'sub_seeds': self.sub_seeds.copy()
        }
