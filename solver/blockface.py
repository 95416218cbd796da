"""Ring a block's buildable interior with buildings.

The four edges are walked clockwise from the top-left corner (screen
coordinates, y grows downward). Along each edge alleys are placed at
accumulated pitch offsets and the spans between them become buildings,
extruded inward by a stepback depth that is capped by the interior's
cross-dimension. All streams are shared across the whole ring, so the order
in which edges consume them is fixed: top, right, bottom, left.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Tuple

from geometry.kernel import Rectangle, Vector2

Span = Tuple[float, float]


@dataclass(frozen=True)
class Blockface:
    index: int
    start: Vector2
    direction: Vector2
    normal: Vector2
    length: float
    depth_limit: float


@dataclass(frozen=True)
class Placement:
    footprint: Rectangle
    edge: int


def blockfaces(interior: Rectangle) -> List[Blockface]:
    x0, y0, x1, y1 = interior.bounds
    w, h = interior.width, interior.height
    return [
        Blockface(0, Vector2(x0, y0), Vector2(1.0, 0.0), Vector2(0.0, 1.0), w, h),
        Blockface(1, Vector2(x1, y0), Vector2(0.0, 1.0), Vector2(-1.0, 0.0), h, w),
        Blockface(2, Vector2(x1, y1), Vector2(-1.0, 0.0), Vector2(0.0, -1.0), w, h),
        Blockface(3, Vector2(x0, y1), Vector2(0.0, -1.0), Vector2(1.0, 0.0), h, w),
    ]


def face_spans(pitches: Iterator[float], spacings: Iterator[float], length: float) -> List[Span]:
    """Building spans along one edge, the last one always ending at ``length``."""
    starts = [0.0]
    ends: List[float] = []
    offset = 0.0
    for delta in pitches:
        spacing = next(spacings, None)
        if spacing is None:
            break
        offset += delta
        half = spacing / 2.0
        lo, hi = offset - half, offset + half
        if hi >= length:
            # No room left for another alley on this edge.
            break
        if half < 0 or lo <= starts[-1]:
            # The alley would swallow the building before it, or is inverted.
            continue
        ends.append(lo)
        starts.append(hi)
    ends.append(length)
    return list(zip(starts, ends))


def place_buildings(
    interior: Rectangle,
    x_pitches: Iterable[float],
    y_pitches: Iterable[float],
    spacings: Iterable[float],
    depths: Iterable[float],
) -> List[Placement]:
    x_iter = iter(x_pitches)
    y_iter = iter(y_pitches)
    spacing_iter = iter(spacings)
    depth_iter = iter(depths)

    placed: List[Placement] = []
    for face in blockfaces(interior):
        pitch_iter = x_iter if face.index % 2 == 0 else y_iter
        # Depths are drawn per emitted span only; skipped alleys consume none.
        for start, end in face_spans(pitch_iter, spacing_iter, face.length):
            depth = next(depth_iter, None)
            if depth is None:
                return placed
            depth = max(0.0, min(depth, face.depth_limit))
            near = face.start + face.direction * start
            far = face.start + face.direction * end + face.normal * depth
            placed.append(Placement(Rectangle(near, far), face.index))
    return placed
