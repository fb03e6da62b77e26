"""Pagination: page geometry, body slicing and page composition."""

from .compositor import PdfDocumentWriter, compose_page, page_size
from .geometry import resolve_geometry
from .slicer import slice_bands

__all__ = [
    "PdfDocumentWriter",
    "compose_page",
    "page_size",
    "resolve_geometry",
    "slice_bands",
]
