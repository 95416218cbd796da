from __future__ import annotations

import io
from typing import Tuple

from PIL import Image

from Generate.city import City, Color
from Generate.constants import BACKGROUND_COLOR, JPEG_QUALITY
from geometry.kernel import Rectangle


class RasterSurface:
    """Pillow-backed paint target.

    Regions are filled over their truncated pixel box. Anything falling
    outside the image is skipped silently.
    """

    def __init__(self, width: int, height: int, background: Color = BACKGROUND_COLOR) -> None:
        self.image = Image.new("RGBA", (width, height), background)

    @property
    def size(self) -> Tuple[int, int]:
        return self.image.size

    def put_pixel(self, x: int, y: int, color: Color) -> None:
        w, h = self.image.size
        if 0 <= x < w and 0 <= y < h:
            self.image.putpixel((x, y), color)

    def fill(self, region: Rectangle, color: Color) -> None:
        w, h = self.image.size
        x0, y0, x1, y1 = region.int_bounds()
        x1, y1 = min(x1, w), min(y1, h)
        if x0 >= x1 or y0 >= y1:
            return
        self.image.paste(color, (x0, y0, x1, y1))


def render_city(city: City) -> Image.Image:
    surface = RasterSurface(city.image_size.x, city.image_size.y)
    city.paint(surface)
    return surface.image


def encode_image(image: Image.Image, fmt: str = "JPEG") -> bytes:
    buf = io.BytesIO()
    if fmt.upper() == "JPEG":
        image.convert("RGB").save(buf, format="JPEG", quality=JPEG_QUALITY)
    else:
        image.save(buf, format=fmt.upper())
    return buf.getvalue()
