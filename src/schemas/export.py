"""Export result schemas.

An ExportResult describes a finished PDF export: where the file went, the
page geometry that was used, and which body rows landed on which page.
Nothing is persisted between exports; the result is returned to the caller.
"""

from pydantic import BaseModel


class ExportedPage(BaseModel):
    """A page of an exported document.

    Attributes:
        page_number: 1-based page number
        source_y: First body raster row on this page (None for a bands-only page)
        height_px: Number of body raster rows on this page
    """

    page_number: int
    source_y: int | None = None
    height_px: int = 0


class ExportResult(BaseModel):
    """Outcome of a PDF export.

    Attributes:
        file_name: File name chosen by the caller
        output_path: Absolute path of the written PDF
        page_width_pt: Page width in points
        page_height_pt: Page height in points
        px_per_pt: Body raster pixels per point
        body_width_px: Body raster width
        body_height_px: Body raster height
        header_height_px: Header band raster height (0 if absent)
        footer_height_px: Footer band raster height (0 if absent)
        pages: Emitted pages, in order
    """

    file_name: str
    output_path: str
    page_width_pt: float
    page_height_pt: float
    px_per_pt: float
    body_width_px: int
    body_height_px: int
    header_height_px: int = 0
    footer_height_px: int = 0
    pages: list[ExportedPage] = []

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def band_boundaries(self) -> list[tuple[int, int]]:
        return [
            (p.source_y, p.source_y + p.height_px)
            for p in self.pages
            if p.source_y is not None
        ]
