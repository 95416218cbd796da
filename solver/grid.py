"""Partition a rectangular plane into road lines and block cells.

Each axis is walked independently. Candidate line centres are placed by
accumulating pitch deltas; every candidate consumes one breadth from a stream
shared by both axes (x axis first, then y). A candidate is kept only when its
full breadth lies strictly inside the space left after the previous line and
before the far edge of the plane; a negative breadth is never kept. Dropped
candidates are never clamped.

Lines plus cells tile ``[0, width] x [0, height]`` exactly.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator, List, Tuple

from geometry.kernel import Rectangle

Span = Tuple[float, float]


@dataclass
class AxisPartition:
    lines: List[Span] = field(default_factory=list)
    cells: List[Span] = field(default_factory=list)


@dataclass
class Grid:
    lines: List[Rectangle]
    cells: List[Rectangle]


def partition_axis(pitches: Iterable[float], breadths: Iterable[float], bound: float) -> AxisPartition:
    """Walk one axis of length ``bound``.

    ``breadths`` is consumed one item per candidate; pass an iterator to share
    it with another axis. The walk ends when either stream runs out.
    """
    out = AxisPartition()
    offset = 0.0
    cell_start = 0.0
    for delta, breadth in zip(pitches, breadths):
        offset += delta
        outset = breadth / 2.0
        lo = offset - outset
        hi = offset + outset
        if outset < 0 or not (cell_start < lo and hi < bound):
            continue
        out.lines.append((lo, hi))
        out.cells.append((cell_start, lo))
        cell_start = hi
    out.cells.append((cell_start, bound))
    return out


def partition_grid(
    x_pitches: Iterable[float],
    y_pitches: Iterable[float],
    breadths: Iterable[float],
    width: float,
    height: float,
) -> Grid:
    shared: Iterator[float] = iter(breadths)
    xs = partition_axis(x_pitches, shared, width)
    ys = partition_axis(y_pitches, shared, height)

    lines: List[Rectangle] = []
    # x-axis lines run the full height, y-axis lines the full width.
    for lo, hi in xs.lines:
        lines.append(Rectangle.from_bounds(lo, 0.0, hi, height))
    for lo, hi in ys.lines:
        lines.append(Rectangle.from_bounds(0.0, lo, width, hi))

    cells = [
        Rectangle.from_bounds(x0, y0, x1, y1)
        for x0, x1 in xs.cells
        for y0, y1 in ys.cells
    ]
    return Grid(lines=lines, cells=cells)
