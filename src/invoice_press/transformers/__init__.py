"""Transformers for rendering and exporting invoices."""

from .html_transformer import HTMLTransformer
from .pdf_transformer import PDFTransformer
from .transformer import DocumentTransformer, PreviewTransformer

__all__ = [
    "DocumentTransformer",
    "HTMLTransformer",
    "PDFTransformer",
    "PreviewTransformer",
]
