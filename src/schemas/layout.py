"""Page layout domain objects.

Two coordinate systems meet here: raster pixels (captures, bands) and PDF
points (1/72 inch, page placement). ``px_per_pt`` converts between them.
"""

from dataclasses import dataclass

from .raster import Raster


@dataclass(frozen=True)
class PageGeometry:
    """Resolved page geometry for one export.

    Attributes:
        page_width_pt: Page width in points
        page_height_pt: Page height in points
        px_per_pt: Body raster pixels per page point
        header_height_pt: Height of the header band on the page
        footer_height_pt: Height of the footer band on the page
        usable_height_pt: Height left for body content
        usable_height_px: Body content rows per page (always >= 1)
    """

    page_width_pt: float
    page_height_pt: float
    px_per_pt: float
    header_height_pt: float
    footer_height_pt: float
    usable_height_pt: float
    usable_height_px: int

    def to_points(self, pixels: float) -> float:
        return pixels / self.px_per_pt


@dataclass(frozen=True)
class ContentRange:
    """Rows of the body raster that hold scrolling content.

    The top rows repeat the header band and the bottom rows repeat the footer
    band, so both are excluded.
    """

    start_px: int
    end_px: int

    def __post_init__(self):
        if self.start_px < 0:
            raise ValueError(f"start_px must be >= 0, got {self.start_px}")

    @property
    def total_px(self) -> int:
        return max(0, self.end_px - self.start_px)

    @classmethod
    def for_rasters(
        cls,
        body: Raster,
        header: Raster | None = None,
        footer: Raster | None = None,
    ) -> "ContentRange":
        start = header.height if header is not None else 0
        end = body.height - (footer.height if footer is not None else 0)
        return cls(start_px=start, end_px=end)


@dataclass(frozen=True)
class PageBand:
    """One page worth of body rows.

    Attributes:
        source_y: First row in the body raster
        height_px: Number of rows
    """

    source_y: int
    height_px: int

    @property
    def end_y(self) -> int:
        return self.source_y + self.height_px


@dataclass(frozen=True)
class Placement:
    """A raster drawn into a rectangle of the page, in points.

    Attributes:
        raster: Pixels to draw
        rect: (x0, y0, x1, y1) in page points, origin top-left
        shared: True when the same raster is drawn on every page
    """

    raster: Raster
    rect: tuple[float, float, float, float]
    shared: bool = False


@dataclass(frozen=True)
class OutputPage:
    """A composed page: optional header, optional body band, optional footer."""

    page_number: int
    width_pt: float
    height_pt: float
    band: PageBand | None = None
    header: Placement | None = None
    body: Placement | None = None
    footer: Placement | None = None

    @property
    def placements(self) -> list[Placement]:
        return [p for p in (self.header, self.body, self.footer) if p is not None]
