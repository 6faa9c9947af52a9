from enum import IntEnum


class TileType(IntEnum):
    """Enumeration of all tile kinds a generated grid can hold."""

    # Empty, traversable space
    FLOOR = 0
    WALL = 1

    # One-way platform the player can jump through from below
    PLATFORM = 2

    @property
    def is_solid(self) -> bool:
        """Return True if tile blocks movement completely."""
        return self == TileType.WALL

    @property
    def is_platform(self) -> bool:
        """Return True if tile is a jump-through platform."""
        return self == TileType.PLATFORM

    @property
    def is_standable(self) -> bool:
        """Return True if an entity can stand on top of this tile."""
        return self in (TileType.WALL, TileType.PLATFORM)

    @property
    def has_collision(self) -> bool:
        """Return True if tile has any collision."""
        return self != TileType.FLOOR

    @property
    def display_name(self) -> str:
        """Return human-readable name."""
        return {
            TileType.FLOOR: "Floor",
            TileType.WALL: "Wall",
            TileType.PLATFORM: "Platform",
        }.get(self, f"Tile_{self.value}")

    @property
    def symbol(self) -> str:
        return {
            TileType.FLOOR: ".",
            TileType.WALL: "#",
            TileType.PLATFORM: "=",
        }[self]

    @classmethod
    def from_symbol(cls, symbol: str) -> "TileType":
        for tile in cls:
            if tile.symbol == symbol:
                return tile
        raise ValueError(f"Unknown tile symbol: {symbol!r}")
