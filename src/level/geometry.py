"""Integer rectangle and point helpers shared by the generators."""

from dataclasses import dataclass
from typing import List, Tuple
import math

Point = Tuple[int, int]


def euclidean(a: Tuple[float, float], b: Tuple[float, float]) -> float:
    return math.hypot(a[0] - b[0], a[1] - b[1])


def manhattan(a: Point, b: Point) -> int:
    return abs(a[0] - b[0]) + abs(a[1] - b[1])


@dataclass(frozen=True)
class Rect:
    x: int
    y: int
    width: int
    height: int

    @property
    def right(self) -> int:
        """Exclusive right edge."""
        return self.x + self.width

    @property
    def bottom(self) -> int:
        """Exclusive bottom edge."""
        return self.y + self.height

    @property
    def area(self) -> int:
        return self.width * self.height

    @property
    def center(self) -> Point:
        return self.x + self.width // 2, self.y + self.height // 2

    def contains(self, x: int, y: int) -> bool:
        return self.x <= x < self.right and self.y <= y < self.bottom

    def expanded(self, padding: int) -> "Rect":
        return Rect(self.x - padding, self.y - padding, self.width + padding * 2, self.height + padding * 2)

    def overlaps(self, other: "Rect", padding: int = 0) -> bool:
        a = self.expanded(padding) if padding else self
        return a.x < other.right and other.x < a.right and a.y < other.bottom and other.y < a.bottom

    def union(self, other: "Rect") -> "Rect":
        x = min(self.x, other.x)
        y = min(self.y, other.y)
        return Rect(x, y, max(self.right, other.right) - x, max(self.bottom, other.bottom) - y)

    def closest_point_to(self, target: Point) -> Point:
        """Clamp ``target`` into this rectangle."""
        return (
            min(max(target[0], self.x), self.right - 1),
            min(max(target[1], self.y), self.bottom - 1),
        )

    def tiles(self) -> List[Point]:
        tiles: List[Point] = []
        for yy in range(self.y, self.bottom):
            for xx in range(self.x, self.right):
                tiles.append((xx, yy))
        return tiles

    def to_dict(self):
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}
