"""Schema definitions for Invoice Press."""

from .export import ExportedPage, ExportResult
from .invoice import (
    Branding,
    InvoiceData,
    InvoiceItem,
    InvoiceStatus,
    Party,
    PaymentInfo,
    ProjectDetails,
)
from .layout import ContentRange, OutputPage, PageBand, PageGeometry, Placement
from .raster import Raster

__all__ = [
    "Branding",
    "ContentRange",
    "ExportedPage",
    "ExportResult",
    "InvoiceData",
    "InvoiceItem",
    "InvoiceStatus",
    "OutputPage",
    "PageBand",
    "PageGeometry",
    "Party",
    "PaymentInfo",
    "Placement",
    "ProjectDetails",
    "Raster",
]
