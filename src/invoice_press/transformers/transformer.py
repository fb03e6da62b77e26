"""Base classes for transformers.

Transformers move an invoice between representations. There are two types:

- PreviewTransformer: Renders an invoice record into a preview (e.g., HTMLTransformer)
- DocumentTransformer: Exports a rendered preview as a document (e.g., PDFTransformer)
"""

from abc import ABC, abstractmethod
from pathlib import Path

from invoice_press.preview import PreviewDocument
from schemas.export import ExportResult
from schemas.invoice import InvoiceData


class PreviewTransformer(ABC):
    """Abstract base class for record-to-preview transformers."""

    @abstractmethod
    def transform(self, invoice: InvoiceData, preview_dir: Path) -> PreviewDocument:
        """Render an invoice record into a preview.

        Args:
            invoice: Validated invoice record
            preview_dir: Directory to write the preview into

        Returns:
            PreviewDocument for the rendered preview
        """
        pass


class DocumentTransformer(ABC):
    """Abstract base class for preview-to-document transformers."""

    @abstractmethod
    def transform(
        self, preview: PreviewDocument, output_dir: Path, file_name: str
    ) -> ExportResult:
        """Export a rendered preview as a document.

        Args:
            preview: Rendered preview
            output_dir: Directory to write the document into
            file_name: Name of the document file

        Returns:
            ExportResult describing the written document
        """
        pass
