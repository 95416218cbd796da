"""City model: roads, blocks and the buildings ringing each block.

Every drawable entity implements ``Renderable.paint``. Geometry is
translated by ``offset`` then scaled into pixels; later paints overwrite
earlier ones.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Protocol, Tuple

from Generate.constants import ASPHALT_COLOR, CONCRETE_COLOR, ROOF_EDGE_COLOR
from geometry.kernel import Rectangle, Vector2, Vector2i

Color = Tuple[int, int, int, int]


class Surface(Protocol):
    def fill(self, region: Rectangle, color: Color) -> None:
        ...


class Renderable(Protocol):
    def paint(self, surface: Surface, offset: Vector2, scale: Vector2) -> None:
        ...


def _rect_dict(rect: Rectangle) -> Dict[str, float]:
    return {"x": rect.start.x, "y": rect.start.y, "width": rect.width, "height": rect.height}


@dataclass(frozen=True)
class Road:
    asphalt: Rectangle

    def paint(self, surface: Surface, offset: Vector2, scale: Vector2) -> None:
        surface.fill(self.asphalt.translate(offset).scale(scale), ASPHALT_COLOR)

    def to_dict(self) -> Dict[str, Any]:
        return _rect_dict(self.asphalt)


@dataclass(frozen=True)
class Building:
    footprint: Rectangle
    roof_edge_breadth: float
    height: float
    roof_color: Color

    def paint(self, surface: Surface, offset: Vector2, scale: Vector2) -> None:
        placed = self.footprint.translate(offset)
        surface.fill(placed.scale(scale), ROOF_EDGE_COLOR)
        surface.fill(placed.inset(self.roof_edge_breadth).scale(scale), self.roof_color)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = _rect_dict(self.footprint)
        out["roof_edge_breadth"] = self.roof_edge_breadth
        out["height"] = self.height
        out["roof_color"] = list(self.roof_color)
        return out


@dataclass(frozen=True)
class Block:
    footprint: Rectangle
    sidewalk_breadth: float
    buildings: Tuple[Building, ...] = ()

    def buildings_boundary(self) -> Rectangle:
        return self.footprint.inset(self.sidewalk_breadth)

    def paint(self, surface: Surface, offset: Vector2, scale: Vector2) -> None:
        surface.fill(self.footprint.translate(offset).scale(scale), CONCRETE_COLOR)
        # Building footprints are already in city coordinates.
        for building in self.buildings:
            building.paint(surface, offset, scale)

    def to_dict(self) -> Dict[str, Any]:
        out: Dict[str, Any] = _rect_dict(self.footprint)
        out["sidewalk_breadth"] = self.sidewalk_breadth
        out["buildings"] = [b.to_dict() for b in self.buildings]
        return out


@dataclass(frozen=True)
class City:
    size: Vector2
    image_size: Vector2i
    roads: Tuple[Road, ...]
    blocks: Tuple[Block, ...]

    @property
    def buildings(self) -> Tuple[Building, ...]:
        return tuple(b for block in self.blocks for b in block.buildings)

    def pixel_scale(self) -> Vector2:
        return Vector2(self.image_size.x / self.size.x, self.image_size.y / self.size.y)

    def paint(self, surface: Surface, offset: Vector2 = Vector2(0.0, 0.0)) -> None:
        scale = self.pixel_scale()
        for road in self.roads:
            road.paint(surface, offset, scale)
        for block in self.blocks:
            block.paint(surface, offset, scale)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "size": {"width": self.size.x, "height": self.size.y},
            "image": {"width": self.image_size.x, "height": self.image_size.y},
            "roads": [r.to_dict() for r in self.roads],
            "blocks": [b.to_dict() for b in self.blocks],
        }
