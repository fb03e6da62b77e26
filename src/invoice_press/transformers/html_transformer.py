"""HTML Transformer for rendering invoice records as a styled preview.

Renders an InvoiceData record through a Jinja2 template into a preview
directory holding the HTML, its stylesheet, and local copies of the
branding images.
"""

import logging
import shutil
from pathlib import Path

from jinja2 import Environment, FileSystemLoader

from invoice_press.preview import PreviewDocument
from invoice_press.totals import calc_totals
from schemas.invoice import Branding, InvoiceData

from .filters import FILTERS
from .transformer import PreviewTransformer

logger = logging.getLogger(__name__)

# Resolve the project root (4 levels up from this file):
#   html_transformer.py → transformers/ → invoice_press/ → src/ → project root
# If this file is ever moved, the chain of .parent calls must be updated.
PACKAGE_ROOT = Path(__file__).parent.parent.parent.parent
TEMPLATES_DIR = PACKAGE_ROOT / "resources" / "templates"
STYLESHEETS_DIR = PACKAGE_ROOT / "resources" / "stylesheets"
IMAGES_DIR = PACKAGE_ROOT / "resources" / "images"

PREVIEW_NAME = "invoice.html"
ASSETS_DIRNAME = "assets"


def default_branding() -> Branding:
    """Return the branding shipped with the package (logo and status stamps)."""
    return Branding(
        logo=str(IMAGES_DIR / "logo.svg"),
        status_images={
            status: str(IMAGES_DIR / f"status-{status.lower()}.svg")
            for status in ("Rejected", "Completed", "Pending", "Approved")
        },
    )


class HTMLTransformer(PreviewTransformer):
    """Render invoice records into styled HTML previews.

    The HTMLTransformer:
    1. Creates the preview directory
    2. Copies the stylesheet
    3. Copies local branding images into the preview's assets directory
    4. Computes the invoice totals
    5. Renders the invoice through a Jinja2 template

    Remote branding images (http/https URLs) are left as references; they
    are fetched when the preview is captured.

    Attributes:
        template_name: Name of the Jinja2 template file
        stylesheet_name: Name of the CSS stylesheet file
        branding: Branding printed in the header and footer bands
    """

    def __init__(
        self,
        template_name: str = "invoice.html.j2",
        stylesheet_name: str = "invoice.css",
        templates_dir: Path | None = None,
        stylesheets_dir: Path | None = None,
        branding: Branding | None = None,
        assets_dir: Path | None = None,
    ):
        """Initialize the HTML transformer.

        Args:
            template_name: Name of the Jinja2 template file
            stylesheet_name: Name of the CSS stylesheet file
            templates_dir: Directory containing templates (default: resources/templates)
            stylesheets_dir: Directory containing stylesheets (default: resources/stylesheets)
            branding: Branding to print (default: package logo and status stamps)
            assets_dir: Directory relative branding image paths resolve against
                        (default: current working directory)
        """
        self.template_name = template_name
        self.stylesheet_name = stylesheet_name
        self.templates_dir = templates_dir or TEMPLATES_DIR
        self.stylesheets_dir = stylesheets_dir or STYLESHEETS_DIR
        self.branding = branding or default_branding()
        self.assets_dir = assets_dir or Path.cwd()

        self._env = Environment(
            loader=FileSystemLoader(str(self.templates_dir)),
            autoescape=True,
        )
        for name, func in FILTERS.items():
            self._env.filters[name] = func

    def transform(self, invoice: InvoiceData, preview_dir: Path) -> PreviewDocument:
        """Render an invoice into an HTML preview.

        Args:
            invoice: Validated invoice record
            preview_dir: Directory to write the preview into

        Returns:
            PreviewDocument for the written preview
        """
        logger.info(f"Rendering preview for invoice {invoice.invoice_number}")

        preview_dir.mkdir(parents=True, exist_ok=True)
        self._copy_stylesheet(preview_dir)

        logo_path = self._stage_asset(self.branding.logo, preview_dir)
        status_image_path = None
        if invoice.status:
            status_image_path = self._stage_asset(
                self.branding.status_images.get(invoice.status), preview_dir
            )

        template = self._env.get_template(self.template_name)
        html_content = template.render(
            invoice=invoice,
            totals=calc_totals(invoice),
            branding=self.branding,
            stylesheet_path=self.stylesheet_name,
            logo_path=logo_path,
            status_image_path=status_image_path,
        )

        html_path = preview_dir / PREVIEW_NAME
        html_path.write_text(html_content, encoding="utf-8")
        logger.debug(f"Wrote preview to {html_path}")

        return PreviewDocument.from_file(html_path)

    def _copy_stylesheet(self, preview_dir: Path) -> None:
        """Copy the stylesheet to the preview directory."""
        src = self.stylesheets_dir / self.stylesheet_name
        dst = preview_dir / self.stylesheet_name
        if src.exists():
            shutil.copy2(src, dst)
            logger.debug(f"Copied stylesheet to {dst}")
        else:
            logger.warning(f"Stylesheet {self.stylesheet_name} not found")

    def _stage_asset(self, reference: str | None, preview_dir: Path) -> str | None:
        """Make a branding image reachable from the preview.

        Args:
            reference: Local path or http(s) URL of the image
            preview_dir: Preview directory

        Returns:
            Reference to use in the template, or None if the image is missing
        """
        if not reference:
            return None
        if reference.startswith(("http://", "https://", "data:")):
            return reference

        src_path = Path(reference)
        if not src_path.is_absolute():
            src_path = self.assets_dir / src_path
        if not src_path.exists():
            logger.warning(f"Branding image not found: {src_path}")
            return None

        assets = preview_dir / ASSETS_DIRNAME
        assets.mkdir(exist_ok=True)
        shutil.copy2(src_path, assets / src_path.name)
        logger.debug(f"Copied branding image {src_path.name}")
        return f"{ASSETS_DIRNAME}/{src_path.name}"
