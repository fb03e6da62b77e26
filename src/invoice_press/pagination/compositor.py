"""Page composition and PDF writing.

compose_page() is a pure function from one band plus the shared header and
footer rasters to an OutputPage. PdfDocumentWriter draws OutputPages into a
PyMuPDF document; header and footer images are embedded once and referenced
from every page.
"""

import io
import logging

import fitz  # PyMuPDF
from PIL import Image

from schemas.layout import OutputPage, PageBand, PageGeometry, Placement
from schemas.raster import Raster

logger = logging.getLogger(__name__)

DEFAULT_PAGE_FORMAT = "a4"


def page_size(page_format: str = DEFAULT_PAGE_FORMAT) -> tuple[float, float]:
    """Return the portrait (width, height) in points of a named paper format.

    Raises:
        ValueError: If the format is unknown
    """
    width, height = fitz.paper_size(page_format)
    if width <= 0 or height <= 0:
        raise ValueError(f"Unknown page format: {page_format}")
    return float(min(width, height)), float(max(width, height))


def compose_page(
    page_number: int,
    band: PageBand | None,
    body: Raster,
    geometry: PageGeometry,
    header: Raster | None = None,
    footer: Raster | None = None,
    background: str | None = "#ffffff",
) -> OutputPage:
    """Compose one output page.

    The band's rows are copied out of the body raster onto a solid
    background and placed directly below the header band. Header and footer
    are stamped at the top and bottom of every page.

    Args:
        page_number: 1-based page number
        band: Body rows for this page, or None for a header/footer-only page
        body: Captured body raster
        geometry: Resolved page geometry
        header: Header band raster, if any
        footer: Footer band raster, if any
        background: Fill colour under the body band, or None for none

    Returns:
        OutputPage ready to be drawn
    """
    page_width = geometry.page_width_pt
    page_height = geometry.page_height_pt

    header_placement = None
    if header is not None and geometry.header_height_pt > 0:
        header_placement = Placement(
            raster=header,
            rect=(0.0, 0.0, page_width, geometry.header_height_pt),
            shared=True,
        )

    footer_placement = None
    if footer is not None and geometry.footer_height_pt > 0:
        footer_placement = Placement(
            raster=footer,
            rect=(
                0.0,
                page_height - geometry.footer_height_pt,
                page_width,
                page_height,
            ),
            shared=True,
        )

    body_placement = None
    if band is not None:
        top = geometry.header_height_pt
        body_placement = Placement(
            raster=_band_raster(body, band, background),
            rect=(0.0, top, page_width, top + geometry.to_points(band.height_px)),
        )

    return OutputPage(
        page_number=page_number,
        width_pt=page_width,
        height_pt=page_height,
        band=band,
        header=header_placement,
        body=body_placement,
        footer=footer_placement,
    )


def _band_raster(body: Raster, band: PageBand, background: str | None) -> Raster:
    """Copy a band's rows out of the body raster onto a solid background."""
    rows = body.crop_rows(band.source_y, band.height_px)
    if background is None:
        return Raster.from_image(rows)
    canvas = Image.new("RGBA", rows.size, background)
    canvas.alpha_composite(rows)
    return Raster.from_image(canvas)


def encode_png(raster: Raster) -> bytes:
    """Encode a raster as PNG, dropping the alpha channel when fully opaque."""
    image = raster.to_image()
    if image.getextrema()[3] == (255, 255):
        image = image.convert("RGB")
    buffer = io.BytesIO()
    image.save(buffer, format="PNG")
    return buffer.getvalue()


class PdfDocumentWriter:
    """Accumulate composed pages into a PDF document.

    Attributes:
        page_count: Number of pages added so far
    """

    def __init__(self):
        self._doc = fitz.open()
        self._shared_xrefs: dict[Raster, int] = {}

    @property
    def page_count(self) -> int:
        return 0 if self._doc is None else len(self._doc)

    def add_page(self, output_page: OutputPage) -> None:
        """Append a new page and draw the composed placements onto it."""
        if self._doc is None:
            raise RuntimeError("Document already finalized")

        page = self._doc.new_page(
            width=output_page.width_pt, height=output_page.height_pt
        )
        for placement in output_page.placements:
            self._draw(page, placement)

        logger.debug(
            f"Added page {output_page.page_number}"
            + (
                f" with rows {output_page.band.source_y}-{output_page.band.end_y}"
                if output_page.band
                else " without body content"
            )
        )

    def _draw(self, page, placement: Placement) -> None:
        rect = fitz.Rect(*placement.rect)
        xref = self._shared_xrefs.get(placement.raster) if placement.shared else None
        if xref:
            page.insert_image(rect, xref=xref, keep_proportion=False)
            return

        xref = page.insert_image(
            rect, stream=encode_png(placement.raster), keep_proportion=False
        )
        if placement.shared:
            self._shared_xrefs[placement.raster] = xref

    def finalize(self) -> bytes:
        """Serialize the document and release it.

        Returns:
            PDF bytes
        """
        if self._doc is None:
            raise RuntimeError("Document already finalized")
        try:
            return self._doc.tobytes(garbage=3, deflate=True)
        finally:
            self.close()

    def close(self) -> None:
        if self._doc is not None:
            self._doc.close()
            self._doc = None
