import svgwrite

from Generate.city import City
from Generate.constants import ASPHALT_COLOR, CONCRETE_COLOR, ROOF_EDGE_COLOR


def _hex(color):
    r, g, b = color[:3]
    return f"#{r:02x}{g:02x}{b:02x}"


def render_city_svg(city: City, svg_path, scale=None, title=None):
    """Write the city as a vector drawing.

    - One rect per road, block, building and roof, in paint order.
    - ``scale`` defaults to the city's raster scale, so the SVG matches the
      raster output pixel for pixel.
    - Roof borders are drawn as a stroke-free inner rect, like the raster.
    """
    if scale is None:
        sx, sy = city.pixel_scale().as_tuple()
    else:
        sx = sy = float(scale)
    max_x = city.size.x * sx
    max_y = city.size.y * sy

    dwg = svgwrite.Drawing(str(svg_path), profile="tiny", size=(max_x, max_y))
    dwg.add(dwg.rect(insert=(0, 0), size=(max_x, max_y), fill="#000000"))

    def add_rect(rect, fill, group):
        x0, y0, x1, y1 = rect.bounds
        group.add(dwg.rect(
            insert=(x0 * sx, y0 * sy),
            size=((x1 - x0) * sx, (y1 - y0) * sy),
            fill=fill,
            stroke="none",
        ))

    roads = dwg.g(id="roads")
    for road in city.roads:
        add_rect(road.asphalt, _hex(ASPHALT_COLOR), roads)
    dwg.add(roads)

    blocks = dwg.g(id="blocks")
    for block in city.blocks:
        add_rect(block.footprint, _hex(CONCRETE_COLOR), blocks)
        for building in block.buildings:
            add_rect(building.footprint, _hex(ROOF_EDGE_COLOR), blocks)
            roof = building.footprint.inset(building.roof_edge_breadth)
            if not roof.is_empty():
                add_rect(roof, _hex(building.roof_color), blocks)
    dwg.add(blocks)

    if title:
        font_size = max(10, int(max_y * 0.02))
        dwg.add(dwg.text(title, insert=(font_size, font_size * 1.5),
                         font_size=font_size, font_family="Arial", fill="#ffffff"))

    dwg.save()
    return dwg
