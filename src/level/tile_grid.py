"""Mutable tile grid shared by every generation stage."""

from typing import Iterator, List, Sequence, Tuple

from src.tiles.tile_types import TileType

Cell = Tuple[int, int]


class TileGrid:
    """Width x height grid of TileType values.

    Cells are addressed ``(x, y)`` with ``y`` growing downward. Queries
    outside the grid return WALL and writes outside the grid are ignored.
    """

    def __init__(self, width: int, height: int, fill: TileType = TileType.WALL):
        if width <= 0 or height <= 0:
            raise ValueError(f"Grid dimensions must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self._cells: List[List[TileType]] = [[fill] * width for _ in range(height)]

    def __repr__(self) -> str:
        return f"TileGrid({self.width}x{self.height})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, TileGrid):
            return NotImplemented
        return self.width == other.width and self.height == other.height and self._cells == other._cells

    @property
    def size(self) -> Tuple[int, int]:
        return self.width, self.height

    def is_in_bounds(self, x: int, y: int) -> bool:
        return 0 <= x < self.width and 0 <= y < self.height

    def get_tile(self, x: int, y: int) -> TileType:
        if not self.is_in_bounds(x, y):
            return TileType.WALL
        return self._cells[y][x]

    def set_tile(self, x: int, y: int, tile: TileType) -> None:
        if self.is_in_bounds(x, y):
            self._cells[y][x] = tile

    def is_solid(self, x: int, y: int) -> bool:
        return self.get_tile(x, y).is_solid

    def is_standable(self, x: int, y: int) -> bool:
        return self.get_tile(x, y).is_standable

    def is_floor(self, x: int, y: int) -> bool:
        return self.get_tile(x, y) == TileType.FLOOR

    def fill(self, tile: TileType) -> None:
        for row in self._cells:
            for x in range(self.width):
                row[x] = tile

    def dig_rect(self, x: int, y: int, w: int, h: int, tile: TileType = TileType.FLOOR) -> int:
        """Set every in-bounds cell of the rectangle to ``tile``.

        Returns:
            Number of cells written
        """
        written = 0
        for yy in range(max(0, y), min(self.height, y + h)):
            row = self._cells[yy]
            for xx in range(max(0, x), min(self.width, x + w)):
                row[xx] = tile
                written += 1
        return written

    def dig_rect_walls_only(self, x: int, y: int, w: int, h: int) -> int:
        """Turn WALL cells of the rectangle into FLOOR, leaving others alone.

        Returns:
            Number of cells carved
        """
        carved = 0
        for yy in range(max(0, y), min(self.height, y + h)):
            row = self._cells[yy]
            for xx in range(max(0, x), min(self.width, x + w)):
                if row[xx] == TileType.WALL:
                    row[xx] = TileType.FLOOR
                    carved += 1
        return carved

    def count(self, tile: TileType) -> int:
        return sum(row.count(tile) for row in self._cells)

    def cells(self) -> Iterator[Tuple[int, int, TileType]]:
        """Iterate ``(x, y, tile)`` row by row."""
        for y, row in enumerate(self._cells):
            for x, tile in enumerate(row):
                yield x, y, tile

    def neighbours4(self, x: int, y: int) -> Iterator[Cell]:
        for dx, dy in ((0, 1), (0, -1), (1, 0), (-1, 0)):
            nx, ny = x + dx, y + dy
            if self.is_in_bounds(nx, ny):
                yield nx, ny

    def copy(self) -> "TileGrid":
        clone = TileGrid(self.width, self.height)
        clone._cells = [list(row) for row in self._cells]
        return clone

    def to_rows(self) -> List[List[int]]:
        return [[int(tile) for tile in row] for row in self._cells]

    @classmethod
    def from_rows(cls, rows: Sequence[Sequence[int]]) -> "TileGrid":
        grid = cls(len(rows[0]), len(rows))
        grid._cells = [[TileType(value) for value in row] for row in rows]
        return grid

    def to_ascii(self) -> str:
        return "\n".join("".join(tile.symbol for tile in row) for row in self._cells)

    @classmethod
    def from_ascii(cls, text: str) -> "TileGrid":
        lines = [line for line in text.strip("\n").splitlines()]
        grid = cls(len(lines[0]), len(lines))
        grid._cells = [[TileType.from_symbol(ch) for ch in line] for line in lines]
        return grid
