"""Band capture backed by WeasyPrint and PyMuPDF.

The region is laid out by WeasyPrint on a single page as wide as the capture
viewport and tall enough for any invoice, measured from the positions of two
marker elements, then rasterized with PyMuPDF at the supersampling scale and
clipped to the measured box.

A region is nested in childless copies of its ancestors, so inherited styles
(font, colour, line height) and descendant selectors apply to it as they do
in the preview. The copies keep their horizontal box but lose their vertical
margins, borders, padding and fixed heights, which leaves the region at the
top of the capture and sized by its own content.
"""

import copy
import io
import logging

import fitz  # PyMuPDF
from lxml import etree
from lxml import html as lxml_html
from PIL import Image
from weasyprint import HTML

from invoice_press.exceptions import CaptureError
from schemas.raster import Raster

from .band_capture import BandCapture, CaptureConfig, CaptureRegion

logger = logging.getLogger(__name__)

# WeasyPrint lays out in CSS pixels (1/96 inch); PDF user space is in points.
CSS_PX_TO_PT = 72 / 96

CAPTURE_ROOT_ID = "invoice-press-capture-root"
CAPTURE_END_ID = "invoice-press-capture-end"
ANCESTOR_ATTR = "data-capture-ancestor"

CAPTURE_CSS = """
@page {{ size: {width}px {height}px; margin: 0; }}
html, body {{
    margin: 0 !important;
    padding: 0 !important;
    background: transparent !important;
}}
#{root_id} {{ display: flow-root; width: {width}px; margin: 0; padding: 0; }}
#{end_id} {{ height: 0; margin: 0; padding: 0; }}
[{ancestor_attr}] {{
    margin-top: 0 !important;
    margin-bottom: 0 !important;
    padding-top: 0 !important;
    padding-bottom: 0 !important;
    border-top-width: 0 !important;
    border-bottom-width: 0 !important;
    height: auto !important;
    min-height: 0 !important;
    max-height: none !important;
}}
"""


class WeasyPrintCapture(BandCapture):
    """Capture regions by rendering them with WeasyPrint.

    The WeasyPrintCapture:
    1. Builds a standalone document from the region, its ancestors and its
       document head
    2. Lays it out on one page of the configured viewport width
    3. Measures the region's height from marker anchors
    4. Rasterizes the page with PyMuPDF at ``scale`` and clips to the region
    5. Flattens onto the configured background colour, if any
    """

    def capture(self, region: CaptureRegion, config: CaptureConfig) -> Raster:
        """Capture a region as a raster.

        Args:
            region: Region to capture
            config: Capture settings

        Returns:
            RGBA raster of ``width * scale`` by ``height * scale`` pixels

        Raises:
            CaptureError: If the region renders empty, overflows
                          ``max_height_px``, or rendering fails
        """
        try:
            raster = self._capture(region, config)
        except CaptureError:
            raise
        except Exception as e:
            raise CaptureError(f"Failed to capture {region.label}: {e}") from e

        logger.debug(
            f"Captured {region.label} at {raster.width}x{raster.height}px "
            f"(scale {config.scale})"
        )
        return raster

    def _capture(self, region: CaptureRegion, config: CaptureConfig) -> Raster:
        document = HTML(
            string=self._build_document(region, config),
            base_url=region.base_url,
        ).render()

        if len(document.pages) != 1:
            raise CaptureError(
                f"Region {region.label} is taller than {config.max_height_px}px"
            )

        width_css = float(config.viewport_width_px)
        height_css = self._measure_height(document.pages[0], region.label)

        image = self._rasterize(document.write_pdf(), width_css, height_css, config.scale)

        if config.background is not None:
            flattened = Image.new("RGBA", image.size, config.background)
            flattened.alpha_composite(image)
            image = flattened

        return Raster.from_image(image)

    def _build_document(self, region: CaptureRegion, config: CaptureConfig) -> str:
        """Wrap the region in a standalone HTML document sized for capture."""
        document = lxml_html.Element("html")
        head = etree.SubElement(document, "head")
        if region.head is not None:
            for child in region.head:
                head.append(copy.deepcopy(child))

        style = etree.SubElement(head, "style")
        style.text = CAPTURE_CSS.format(
            width=config.viewport_width_px,
            height=config.max_height_px,
            root_id=CAPTURE_ROOT_ID,
            end_id=CAPTURE_END_ID,
            ancestor_attr=ANCESTOR_ATTR,
        )

        body = etree.SubElement(document, "body")
        ancestors = list(region.ancestors)
        if ancestors and ancestors[0].tag == "body":
            for name, value in ancestors.pop(0).attrib.items():
                body.set(name, value)

        wrapper = etree.SubElement(body, "div", id=CAPTURE_ROOT_ID)
        parent = wrapper
        for ancestor in ancestors:
            shell = etree.SubElement(parent, ancestor.tag, attrib=dict(ancestor.attrib))
            shell.set(ANCESTOR_ATTR, "")
            parent = shell

        element = copy.deepcopy(region.element)
        element.tail = None
        parent.append(element)
        etree.SubElement(body, "div", id=CAPTURE_END_ID)

        return lxml_html.tostring(
            document, encoding="unicode", method="html", doctype="<!DOCTYPE html>"
        )

    def _measure_height(self, page, label: str) -> float:
        """Return the rendered height of the capture root in CSS pixels.

        Raises:
            CaptureError: If the region has no rendered height
        """
        anchors = page.anchors
        if CAPTURE_ROOT_ID not in anchors or CAPTURE_END_ID not in anchors:
            raise CaptureError(f"Region {label} was not rendered")

        height = anchors[CAPTURE_END_ID][1] - anchors[CAPTURE_ROOT_ID][1]
        if height <= 0:
            raise CaptureError(f"Region {label} has zero size")
        return height

    def _rasterize(
        self, pdf_bytes: bytes, width_css: float, height_css: float, scale: float
    ) -> Image.Image:
        """Rasterize the top-left ``width_css x height_css`` box of the page.

        Args:
            pdf_bytes: Single-page PDF produced by WeasyPrint
            width_css: Box width in CSS pixels
            height_css: Box height in CSS pixels
            scale: Output pixels per CSS pixel

        Returns:
            RGBA image of exactly ``round(width_css * scale)`` by
            ``round(height_css * scale)`` pixels
        """
        zoom = scale / CSS_PX_TO_PT
        clip = fitz.Rect(0, 0, width_css * CSS_PX_TO_PT, height_css * CSS_PX_TO_PT)

        doc = fitz.open(stream=pdf_bytes, filetype="pdf")
        try:
            pix = doc[0].get_pixmap(
                matrix=fitz.Matrix(zoom, zoom), clip=clip, alpha=True
            )
            image = Image.open(io.BytesIO(pix.tobytes("png")))
            image.load()
        finally:
            doc.close()

        expected = (round(width_css * scale), round(height_css * scale))
        if expected[1] < 1:
            raise CaptureError("Region rasterizes to zero rows")
        if image.size != expected:
            image = image.resize(expected, Image.Resampling.LANCZOS)
        return image.convert("RGBA")
