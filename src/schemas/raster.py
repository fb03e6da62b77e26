"""Raster domain object."""

from dataclasses import dataclass, field

from PIL import Image


@dataclass(frozen=True, eq=False)
class Raster:
    """An immutable RGBA pixel buffer captured from a rendered region.

    Rasters are produced once by a band capture and only read afterwards.
    Equality is identity, so a raster can key per-document caches.

    Attributes:
        width: Width in pixels
        height: Height in pixels
        pixels: Raw RGBA bytes, row-major, 4 bytes per pixel
    """

    width: int
    height: int
    pixels: bytes = field(repr=False)

    def __post_init__(self):
        if self.width < 0 or self.height < 0:
            raise ValueError(f"Raster dimensions must be non-negative: {self.width}x{self.height}")
        expected = self.width * self.height * 4
        if len(self.pixels) != expected:
            raise ValueError(
                f"Raster of {self.width}x{self.height} needs {expected} bytes, got {len(self.pixels)}"
            )

    @classmethod
    def from_image(cls, image: Image.Image) -> "Raster":
        rgba = image if image.mode == "RGBA" else image.convert("RGBA")
        return cls(width=rgba.width, height=rgba.height, pixels=rgba.tobytes())

    @property
    def size(self) -> tuple[int, int]:
        return self.width, self.height

    def to_image(self) -> Image.Image:
        """Return a new Pillow image holding a copy of the pixels."""
        return Image.frombytes("RGBA", self.size, self.pixels)

    def crop_rows(self, top: int, height: int) -> Image.Image:
        """Copy the full-width rows ``[top, top + height)`` into a new image.

        Raises:
            ValueError: If the row range falls outside the raster
        """
        if top < 0 or height < 0 or top + height > self.height:
            raise ValueError(
                f"Rows [{top}, {top + height}) outside raster of height {self.height}"
            )
        row_bytes = self.width * 4
        chunk = self.pixels[top * row_bytes:(top + height) * row_bytes]
        return Image.frombytes("RGBA", (self.width, height), chunk)
