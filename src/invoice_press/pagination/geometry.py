"""Page geometry resolution.

Converts captured pixel measurements into PDF points. The body raster spans
the full page width, which fixes the pixels-per-point ratio; header and
footer bands are converted with the same ratio so they occupy the same
page-width-proportional height regardless of how they were captured.
"""

import logging
import math

from invoice_press.exceptions import LayoutOverflowError
from schemas.layout import PageGeometry

logger = logging.getLogger(__name__)


def resolve_geometry(
    body_width_px: int,
    page_width_pt: float,
    page_height_pt: float,
    header_height_px: int = 0,
    footer_height_px: int = 0,
) -> PageGeometry:
    """Resolve the page geometry for an export.

    Args:
        body_width_px: Width of the captured body raster
        page_width_pt: Page width in points
        page_height_pt: Page height in points
        header_height_px: Height of the header raster (0 if none)
        footer_height_px: Height of the footer raster (0 if none)

    Returns:
        PageGeometry with at least one usable body row per page

    Raises:
        ValueError: If a width or page dimension is not positive
        LayoutOverflowError: If the header and footer leave no body area

    Examples:
        A 1190px body on a 595pt page gives 2 px/pt, so a 100px header is
        50pt tall.
    """
    if body_width_px <= 0:
        raise ValueError(f"body_width_px must be positive, got {body_width_px}")
    if page_width_pt <= 0 or page_height_pt <= 0:
        raise ValueError(
            f"Page size must be positive, got {page_width_pt}x{page_height_pt}pt"
        )

    px_per_pt = body_width_px / page_width_pt
    header_height_pt = header_height_px / px_per_pt
    footer_height_pt = footer_height_px / px_per_pt
    usable_height_pt = page_height_pt - header_height_pt - footer_height_pt

    if usable_height_pt <= 0:
        raise LayoutOverflowError(
            f"Header ({header_height_pt:.1f}pt) and footer ({footer_height_pt:.1f}pt) "
            f"leave no room on a {page_height_pt:.1f}pt page",
            header_height_pt=header_height_pt,
            footer_height_pt=footer_height_pt,
            page_height_pt=page_height_pt,
        )

    usable_height_px = max(1, math.floor(usable_height_pt * px_per_pt + 0.5))

    logger.debug(
        f"Resolved geometry: {px_per_pt:.4f} px/pt, "
        f"header {header_height_pt:.2f}pt, footer {footer_height_pt:.2f}pt, "
        f"{usable_height_px}px of body per page"
    )

    return PageGeometry(
        page_width_pt=page_width_pt,
        page_height_pt=page_height_pt,
        px_per_pt=px_per_pt,
        header_height_pt=header_height_pt,
        footer_height_pt=footer_height_pt,
        usable_height_pt=usable_height_pt,
        usable_height_px=usable_height_px,
    )
