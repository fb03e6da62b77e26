"""PDF Transformer for exporting invoice previews as paginated PDFs.

The preview is captured as one tall raster and sliced into A4 pages. The
header and footer brand bars are captured on their own and stamped onto
every page, so only the body content flows across page boundaries.
"""

import logging
import os
import tempfile
from dataclasses import replace
from pathlib import Path

from invoice_press.capture import (
    BandCapture,
    CaptureConfig,
    ImageResolver,
    OffscreenClone,
    WeasyPrintCapture,
)
from invoice_press.pagination import (
    PdfDocumentWriter,
    compose_page,
    page_size,
    resolve_geometry,
    slice_bands,
)
from invoice_press.preview import PreviewDocument
from schemas.export import ExportedPage, ExportResult
from schemas.layout import ContentRange, PageGeometry
from schemas.raster import Raster

from .transformer import DocumentTransformer

logger = logging.getLogger(__name__)

DEFAULT_FILE_NAME = "invoice.pdf"
DEFAULT_TARGET_SELECTOR = "#invoice-preview"
DEFAULT_HEADER_SELECTOR = ".top-brand-bar"
DEFAULT_FOOTER_SELECTOR = ".bottom-brand-bar"
DEFAULT_MAX_HEIGHT_PX = 20000


class PDFTransformer(DocumentTransformer):
    """Export a rendered invoice preview as a paginated PDF.

    The PDFTransformer:
    1. Clones the target element off-screen and stages its images
    2. Captures the whole target as the body raster
    3. Captures the header and footer bands, if present in the target
    4. Resolves the page geometry from the captured sizes
    5. Slices the body rows between header and footer into page bands
    6. Composes one page per band, with header and footer on each
    7. Writes the PDF atomically and removes the staging clone

    Capture and geometry failures abort before any page is composed, and no
    file is written unless the whole document was assembled.

    Attributes:
        capture: Capture backend
        target_selector: Selector of the element to export
        header_selector: Selector of the header band inside the target
        footer_selector: Selector of the footer band inside the target
        page_format: Paper format name understood by PyMuPDF
        body_config: Capture settings for the body
        band_config: Capture settings for header and footer bands
    """

    def __init__(
        self,
        capture: BandCapture | None = None,
        image_resolver: ImageResolver | None = None,
        target_selector: str = DEFAULT_TARGET_SELECTOR,
        header_selector: str | None = DEFAULT_HEADER_SELECTOR,
        footer_selector: str | None = DEFAULT_FOOTER_SELECTOR,
        page_format: str = "a4",
        scale: float = 2.0,
        background: str | None = "#ffffff",
        cross_origin: str = "anonymous",
        viewport_width_px: int = 794,
        max_height_px: int = DEFAULT_MAX_HEIGHT_PX,
        staging_dir: Path | None = None,
    ):
        """Initialize the PDF transformer.

        Args:
            capture: Capture backend (default: WeasyPrintCapture)
            image_resolver: Resolver for preview images (default: one owned
                            per export)
            target_selector: Selector of the element to export
            header_selector: Selector of the header band, or None for no header
            footer_selector: Selector of the footer band, or None for no footer
            page_format: Paper format name (default: "a4")
            scale: Supersampling factor for captures
            background: Fill colour under the body, or None for transparent
            cross_origin: crossorigin value written to cloned images
            viewport_width_px: CSS width the preview is laid out at
            max_height_px: Tallest preview (in CSS pixels) that can be exported
            staging_dir: Parent directory for staging clones (default: system temp)

        Raises:
            ValueError: If the page format is unknown or a capture setting is invalid
        """
        self.capture = capture or WeasyPrintCapture()
        self._resolver = image_resolver
        self.target_selector = target_selector
        self.header_selector = header_selector
        self.footer_selector = footer_selector
        self.page_format = page_format
        self.page_width_pt, self.page_height_pt = page_size(page_format)
        self.staging_dir = staging_dir

        self.body_config = CaptureConfig(
            scale=scale,
            background=background,
            cross_origin=cross_origin,
            viewport_width_px=viewport_width_px,
            max_height_px=max_height_px,
        )
        self.band_config = replace(self.body_config, background=None)

    def transform(
        self,
        preview: PreviewDocument,
        output_dir: Path,
        file_name: str = DEFAULT_FILE_NAME,
    ) -> ExportResult:
        """Export a preview to a paginated PDF.

        Args:
            preview: Rendered preview
            output_dir: Directory to write the PDF into
            file_name: Name of the PDF file

        Returns:
            ExportResult describing the written PDF

        Raises:
            ValueError: If file_name is empty or contains a path separator
            CaptureError: If the target or a band cannot be captured
            LayoutOverflowError: If header and footer leave no room for content
        """
        self._check_file_name(file_name)
        logger.info(f"Exporting {self.target_selector} to {file_name}")

        resolver = self._resolver or ImageResolver()
        try:
            with OffscreenClone(
                preview,
                self.target_selector,
                resolver,
                cross_origin=self.body_config.cross_origin,
                staging_root=self.staging_dir,
            ) as clone:
                body = self.capture.capture(clone.region(), self.body_config)
                header = self._capture_band(clone, self.header_selector)
                footer = self._capture_band(clone, self.footer_selector)

                geometry = resolve_geometry(
                    body_width_px=body.width,
                    page_width_pt=self.page_width_pt,
                    page_height_pt=self.page_height_pt,
                    header_height_px=header.height if header else 0,
                    footer_height_px=footer.height if footer else 0,
                )
                content = ContentRange.for_rasters(body, header, footer)

                pdf_bytes, pages = self._assemble(body, header, footer, geometry, content)
                output_path = self._save(pdf_bytes, output_dir, file_name)
        finally:
            if self._resolver is None:
                resolver.close()

        logger.info(f"Wrote {len(pages)} page(s) to {output_path}")

        return ExportResult(
            file_name=file_name,
            output_path=str(output_path),
            page_width_pt=geometry.page_width_pt,
            page_height_pt=geometry.page_height_pt,
            px_per_pt=geometry.px_per_pt,
            body_width_px=body.width,
            body_height_px=body.height,
            header_height_px=header.height if header else 0,
            footer_height_px=footer.height if footer else 0,
            pages=pages,
        )

    def _check_file_name(self, file_name: str) -> None:
        """Reject file names that would escape the output directory."""
        if not file_name or file_name in (".", ".."):
            raise ValueError(f"Invalid file name: {file_name!r}")
        if "/" in file_name or "\\" in file_name:
            raise ValueError(f"File name must not contain a path separator: {file_name!r}")

    def _capture_band(self, clone: OffscreenClone, selector: str | None) -> Raster | None:
        """Capture a header or footer band, or return None if the target has none."""
        if selector is None:
            return None
        region = clone.region(selector)
        if region is None:
            logger.debug(f"No {selector} band in {self.target_selector}")
            return None
        return self.capture.capture(region, self.band_config)

    def _assemble(
        self,
        body: Raster,
        header: Raster | None,
        footer: Raster | None,
        geometry: PageGeometry,
        content: ContentRange,
    ) -> tuple[bytes, list[ExportedPage]]:
        """Compose one page per body band and serialize the document.

        A content range with no rows still produces one page carrying the
        header and footer.

        Returns:
            Tuple of (PDF bytes, emitted pages in order)
        """
        background = self.body_config.background
        writer = PdfDocumentWriter()
        try:
            pages = []
            bands = slice_bands(content, geometry.usable_height_px)
            for page_number, band in enumerate(bands, start=1):
                writer.add_page(
                    compose_page(page_number, band, body, geometry, header, footer, background)
                )
                pages.append(
                    ExportedPage(
                        page_number=page_number,
                        source_y=band.source_y,
                        height_px=band.height_px,
                    )
                )

            if not pages:
                writer.add_page(
                    compose_page(1, None, body, geometry, header, footer, background)
                )
                pages.append(ExportedPage(page_number=1))

            return writer.finalize(), pages
        finally:
            writer.close()

    def _save(self, pdf_bytes: bytes, output_dir: Path, file_name: str) -> Path:
        """Write the PDF to a temporary sibling and rename it into place.

        Returns:
            Absolute path of the written PDF
        """
        output_dir.mkdir(parents=True, exist_ok=True)
        output_path = (output_dir / file_name).resolve()

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{file_name}.", suffix=".tmp", dir=output_path.parent
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(pdf_bytes)
            os.replace(tmp_name, output_path)
        except Exception:
            Path(tmp_name).unlink(missing_ok=True)
            raise

        logger.debug(f"Saved {len(pdf_bytes)} bytes to {output_path}")
        return output_path
