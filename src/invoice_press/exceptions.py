"""Custom exceptions for invoice export."""


class ExportError(Exception):
    """Base exception for all export errors."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class CaptureError(ExportError):
    """Raised when a region cannot be captured as a raster.

    Covers missing, detached, zero-size, and over-tall regions as well as
    images that cannot be fetched or decoded.
    """

    pass


class LayoutOverflowError(ExportError):
    """Raised when the header and footer bands leave no room for body content."""

    def __init__(
        self,
        message: str,
        header_height_pt: float,
        footer_height_pt: float,
        page_height_pt: float,
        *args,
        **kwargs,
    ):
        self.header_height_pt = header_height_pt
        self.footer_height_pt = footer_height_pt
        self.page_height_pt = page_height_pt
        super().__init__(message, *args, **kwargs)


class InvoiceDataError(ExportError):
    """Raised when invoice data cannot be read or fails schema validation."""

    def __init__(self, message: str, errors: list | None = None, *args, **kwargs):
        self.errors = errors or []
        super().__init__(message, *args, **kwargs)
