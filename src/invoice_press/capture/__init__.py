"""Band capture: rendered preview regions to rasters."""

from .band_capture import BandCapture, CaptureConfig, CaptureRegion
from .image_resolver import ImageResolver
from .staging import OffscreenClone
from .weasyprint_capture import WeasyPrintCapture

__all__ = [
    "BandCapture",
    "CaptureConfig",
    "CaptureRegion",
    "ImageResolver",
    "OffscreenClone",
    "WeasyPrintCapture",
]
