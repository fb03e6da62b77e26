"""Base classes for band capture.

A band capture turns a region of a rendered preview into a Raster. The
pagination code only ever sees Rasters, so capture backends can be swapped
(WeasyPrint today, a headless browser or native renderer tomorrow).
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass

from lxml.html import HtmlElement

from schemas.raster import Raster


@dataclass(frozen=True)
class CaptureConfig:
    """Settings for a single capture.

    Attributes:
        scale: Supersampling factor; output pixels per CSS pixel
        background: Fill colour under the region, or None to keep transparency
        cross_origin: crossorigin attribute written to cloned images
        viewport_width_px: CSS width the region is laid out at
        max_height_px: Tallest region (in CSS pixels) a capture accepts
    """

    scale: float = 2.0
    background: str | None = "#ffffff"
    cross_origin: str = "anonymous"
    viewport_width_px: int = 794
    max_height_px: int = 20000

    def __post_init__(self):
        if self.scale <= 0:
            raise ValueError(f"scale must be positive, got {self.scale}")
        if self.viewport_width_px <= 0:
            raise ValueError(
                f"viewport_width_px must be positive, got {self.viewport_width_px}"
            )
        if self.max_height_px <= 0:
            raise ValueError(f"max_height_px must be positive, got {self.max_height_px}")


@dataclass(frozen=True)
class CaptureRegion:
    """A region of a preview to capture.

    A region is rendered inside shallow copies of its ancestors, so it keeps
    the styles it inherits and the descendant selectors that match it in
    the preview.

    Attributes:
        element: Root element of the region (part of a staged clone)
        head: Document head carrying the region's stylesheets
        base_url: URL relative references resolve against
        label: Human-readable name for log and error messages
        ancestors: Childless copies of the region's ancestors, outermost
                   first, starting at <body> when the preview has one
    """

    element: HtmlElement
    head: HtmlElement | None
    base_url: str
    label: str
    ancestors: tuple[HtmlElement, ...] = ()


class BandCapture(ABC):
    """Abstract base class for capture backends."""

    @abstractmethod
    def capture(self, region: CaptureRegion, config: CaptureConfig) -> Raster:
        """Capture a region as a raster.

        Args:
            region: Region to capture
            config: Capture settings

        Returns:
            Raster of the region's rendered box at ``config.scale``

        Raises:
            CaptureError: If the region cannot be captured
        """
        pass
