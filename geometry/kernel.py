from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterator, Tuple, Union


def _narrow(value: float) -> int:
    # Truncate toward zero, saturating below at 0 like an unsigned cast.
    if value != value or value <= 0:
        return 0
    if math.isinf(value):
        raise OverflowError("cannot narrow an infinite coordinate")
    return int(value)


@dataclass(frozen=True)
class Vector2:
    """A point or displacement in meters."""

    x: float
    y: float

    def __add__(self, other: Vector2) -> Vector2:
        return Vector2(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2) -> Vector2:
        return Vector2(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Union[Vector2, float]) -> Vector2:
        if isinstance(other, Vector2):
            return Vector2(self.x * other.x, self.y * other.y)
        return Vector2(self.x * other, self.y * other)

    __rmul__ = __mul__

    def __neg__(self) -> Vector2:
        return Vector2(-self.x, -self.y)

    def mag_squared(self) -> float:
        return self.x ** 2 + self.y ** 2

    def mag(self) -> float:
        return math.sqrt(self.mag_squared())

    def north_of(self, point: Vector2) -> bool:
        return self.y > point.y

    def south_of(self, point: Vector2) -> bool:
        return self.y < point.y

    def east_of(self, point: Vector2) -> bool:
        return self.x > point.x

    def west_of(self, point: Vector2) -> bool:
        return self.x < point.x

    def truncate(self) -> Vector2i:
        return Vector2i(_narrow(self.x), _narrow(self.y))

    def as_tuple(self) -> Tuple[float, float]:
        return (self.x, self.y)


@dataclass(frozen=True)
class Vector2i:
    """A pixel coordinate."""

    x: int
    y: int

    def __post_init__(self) -> None:
        if self.x < 0 or self.y < 0:
            raise ValueError(f"pixel coordinates must be non-negative, got ({self.x}, {self.y})")

    def __add__(self, other: Vector2i) -> Vector2i:
        return Vector2i(self.x + other.x, self.y + other.y)

    def __sub__(self, other: Vector2i) -> Vector2i:
        return Vector2i(self.x - other.x, self.y - other.y)

    def __mul__(self, other: Vector2i) -> Vector2i:
        return Vector2i(self.x * other.x, self.y * other.y)

    def mag_squared(self) -> int:
        return self.x ** 2 + self.y ** 2

    def mag(self) -> float:
        return math.sqrt(self.mag_squared())

    def widen(self) -> Vector2:
        return Vector2(float(self.x), float(self.y))


class Rectangle:
    """Axis-aligned rectangle with ``start <= end`` on both axes.

    Corners may be supplied in any order; they are normalized on construction.
    """

    __slots__ = ("_start", "_end")

    def __init__(self, a: Vector2, b: Vector2) -> None:
        self._start = Vector2(min(a.x, b.x), min(a.y, b.y))
        self._end = Vector2(max(a.x, b.x), max(a.y, b.y))

    @classmethod
    def from_bounds(cls, x0: float, y0: float, x1: float, y1: float) -> Rectangle:
        return cls(Vector2(x0, y0), Vector2(x1, y1))

    @property
    def start(self) -> Vector2:
        return self._start

    @property
    def end(self) -> Vector2:
        return self._end

    @property
    def width(self) -> float:
        return self._end.x - self._start.x

    @property
    def height(self) -> float:
        return self._end.y - self._start.y

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        return (self._start.x, self._start.y, self._end.x, self._end.y)

    def dimensions(self) -> Vector2:
        return self._end - self._start

    def area(self) -> float:
        return self.width * self.height

    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0

    def scale(self, by: Vector2) -> Rectangle:
        return Rectangle(self._start * by, self._end * by)

    def translate(self, by: Vector2) -> Rectangle:
        return Rectangle(self._start + by, self._end + by)

    def inset(self, breadth: float) -> Rectangle:
        """Shrink every side by ``breadth``.

        An axis narrower than ``2 * breadth`` collapses to a zero-length span
        at its midpoint instead of inverting.
        """
        x0, x1 = _inset_span(self._start.x, self._end.x, breadth)
        y0, y1 = _inset_span(self._start.y, self._end.y, breadth)
        return Rectangle.from_bounds(x0, y0, x1, y1)

    def contains(self, point: Vector2) -> bool:
        # Strict on every side: boundary points are outside.
        return (
            point.east_of(self._start)
            and point.west_of(self._end)
            and point.north_of(self._start)
            and point.south_of(self._end)
        )

    def int_bounds(self) -> Tuple[int, int, int, int]:
        """Truncated half-open pixel box ``(x0, y0, x1, y1)``."""
        return (
            _narrow(self._start.x),
            _narrow(self._start.y),
            _narrow(self._end.x),
            _narrow(self._end.y),
        )

    def interior_int_coords(self) -> Iterator[Vector2i]:
        x0, y0, x1, y1 = self.int_bounds()
        for x in range(x0, x1):
            for y in range(y0, y1):
                yield Vector2i(x, y)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Rectangle):
            return NotImplemented
        return self._start == other._start and self._end == other._end

    def __hash__(self) -> int:
        return hash((self._start, self._end))

    def __repr__(self) -> str:
        return f"Rectangle({self._start.x}, {self._start.y}, {self._end.x}, {self._end.y})"


def _inset_span(lo: float, hi: float, breadth: float) -> Tuple[float, float]:
    new_lo = lo + breadth
    new_hi = hi - breadth
    if new_lo > new_hi:
        mid = (lo + hi) / 2.0
        return mid, mid
    return new_lo, new_hi
