"""Command-line interface for invoice-press."""

import argparse
import logging
import re
import sys
import tempfile
from pathlib import Path

from invoice_press.exceptions import InvoiceDataError
from invoice_press.loader import dump_invoice, load_invoice, sample_invoice
from invoice_press.preview import PreviewDocument
from invoice_press.totals import calc_totals, format_inr
from invoice_press.transformers import HTMLTransformer, PDFTransformer
from invoice_press.transformers.pdf_transformer import DEFAULT_MAX_HEIGHT_PX

DEFAULT_INVOICE_PATH = Path("./invoice.json")
DEFAULT_PREVIEW_DIR = Path("./workspace/preview")
DEFAULT_OUTPUT_DIR = Path("./workspace/pdf")


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the CLI."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def default_file_name(invoice_number: str) -> str:
    """Build the default PDF file name for an invoice number.

    Path separators and other characters unsafe in file names are replaced
    with hyphens.

    Examples:
        >>> default_file_name("WP/2025/011")
        'invoice-WP-2025-011.pdf'
    """
    safe = re.sub(r'[\\/:*?"<>|\s]+', "-", invoice_number).strip("-.")
    return f"invoice-{safe or 'draft'}.pdf"


def _log_invoice_errors(logger: logging.Logger, error: InvoiceDataError) -> None:
    logger.error(error.message)
    for detail in error.errors:
        location = ".".join(str(part) for part in detail.get("loc", ()))
        logger.error(f"    - {location}: {detail.get('msg')}")


def init_invoice(args: argparse.Namespace) -> int:
    """Execute the init-invoice command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    output = args.output
    if output.exists() and not args.force:
        logger.error(f"{output} already exists (use --force to overwrite)")
        return 1

    try:
        invoice = sample_invoice()
        dump_invoice(invoice, output)
        logger.info(f"Wrote sample invoice {invoice.invoice_number} to {output}")
        return 0

    except Exception as e:
        logger.error(f"Failed to write sample invoice: {e}")
        return 1


def render_preview(args: argparse.Namespace) -> int:
    """Execute the render-preview command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        invoice = load_invoice(args.invoice)
    except InvoiceDataError as e:
        _log_invoice_errors(logger, e)
        return 1

    try:
        transformer = HTMLTransformer()
        preview = transformer.transform(invoice, args.output)

        logger.info(f"Rendered preview for invoice {invoice.invoice_number}")
        logger.info(f"  Output: {preview.base_dir / 'invoice.html'}")
        return 0

    except Exception as e:
        logger.error(f"Failed to render preview: {e}")
        return 1


def show_totals(args: argparse.Namespace) -> int:
    """Execute the show-totals command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        invoice = load_invoice(args.invoice)
    except InvoiceDataError as e:
        _log_invoice_errors(logger, e)
        return 1

    totals = calc_totals(invoice)
    rows = [
        ("Gross", totals.gross),
        ("Advance", invoice.advance),
        ("Subtotal", totals.net_subtotal),
        ("GST", totals.gst),
        ("TDS", totals.tds),
        ("Total Payable", totals.total_payable),
    ]
    print(f"Invoice {invoice.invoice_number}")
    for label, amount in rows:
        print(f"  {label + ':':<16}{format_inr(amount, with_decimals=args.decimals):>16}")
    return 0


def export_pdf(args: argparse.Namespace) -> int:
    """Execute the export-pdf command.

    Renders the invoice preview (into --preview-dir, or a temporary
    directory) and exports it as a paginated PDF.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    try:
        invoice = load_invoice(args.invoice)
    except InvoiceDataError as e:
        _log_invoice_errors(logger, e)
        return 1

    file_name = args.file_name or default_file_name(invoice.invoice_number)

    try:
        pdf_transformer = PDFTransformer(scale=args.scale, max_height_px=args.max_height)
        if args.preview_dir is not None:
            preview = HTMLTransformer().transform(invoice, args.preview_dir)
            result = pdf_transformer.transform(preview, args.output, file_name)
        else:
            with tempfile.TemporaryDirectory(prefix="invoice-preview-") as tmp:
                preview = HTMLTransformer().transform(invoice, Path(tmp))
                result = pdf_transformer.transform(preview, args.output, file_name)

        logger.info(f"Exported invoice {invoice.invoice_number}")
        logger.info(f"  Pages: {result.page_count}")
        logger.info(f"  Output: {result.output_path}")
        return 0

    except Exception as e:
        logger.error(f"Failed to export PDF: {e}")
        return 1


def export_html(args: argparse.Namespace) -> int:
    """Execute the export-html command.

    Exports an existing preview HTML file as a paginated PDF.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code (0 for success, non-zero for errors)
    """
    setup_logging(args.verbose)
    logger = logging.getLogger(__name__)

    html_path = args.html.resolve()
    if not html_path.exists():
        logger.error(f"Preview not found: {html_path}")
        return 1

    try:
        preview = PreviewDocument.from_file(html_path)
        transformer = PDFTransformer(scale=args.scale, max_height_px=args.max_height)
        result = transformer.transform(preview, args.output, args.file_name)

        logger.info(f"Exported {html_path.name}")
        logger.info(f"  Pages: {result.page_count}")
        logger.info(f"  Output: {result.output_path}")
        return 0

    except Exception as e:
        logger.error(f"Failed to export PDF: {e}")
        return 1


def main(argv: list[str] | None = None) -> int:
    """Main entry point for the CLI.

    Args:
        argv: Command-line arguments (defaults to sys.argv[1:])

    Returns:
        Exit code
    """
    parser = argparse.ArgumentParser(
        prog="invoice-press",
        description="Render invoices and export them as paginated A4 PDFs",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose output",
    )

    subparsers = parser.add_subparsers(
        title="commands",
        description="Available commands",
        dest="command",
    )

    init_parser = subparsers.add_parser(
        "init-invoice",
        help="Write a sample invoice JSON file",
        description="Write the sample invoice a new invoice starts from, as camelCase JSON.",
    )
    init_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_INVOICE_PATH,
        help=f"Path of the invoice file to write (default: {DEFAULT_INVOICE_PATH})",
    )
    init_parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite an existing file",
    )
    init_parser.set_defaults(func=init_invoice)

    preview_parser = subparsers.add_parser(
        "render-preview",
        help="Render an invoice as an HTML preview",
        description="Validate an invoice JSON file and render it as a styled HTML preview.",
    )
    preview_parser.add_argument(
        "--invoice",
        type=Path,
        required=True,
        help="Path to the invoice JSON file",
    )
    preview_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_PREVIEW_DIR,
        help=f"Output directory for the preview (default: {DEFAULT_PREVIEW_DIR})",
    )
    preview_parser.set_defaults(func=render_preview)

    totals_parser = subparsers.add_parser(
        "show-totals",
        help="Print the computed totals of an invoice",
        description="Validate an invoice JSON file and print its gross, subtotal, GST, TDS and total payable.",
    )
    totals_parser.add_argument(
        "--invoice",
        type=Path,
        required=True,
        help="Path to the invoice JSON file",
    )
    totals_parser.add_argument(
        "--decimals",
        action="store_true",
        help="Show amounts with two decimal places",
    )
    totals_parser.set_defaults(func=show_totals)

    export_parser = subparsers.add_parser(
        "export-pdf",
        help="Export an invoice as a paginated PDF",
        description="Render an invoice and export the preview as an A4 PDF with the brand bars repeated on every page.",
    )
    export_parser.add_argument(
        "--invoice",
        type=Path,
        required=True,
        help="Path to the invoice JSON file",
    )
    export_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for the PDF (default: {DEFAULT_OUTPUT_DIR})",
    )
    export_parser.add_argument(
        "--file-name",
        type=str,
        default=None,
        help="PDF file name (default: invoice-<invoice number>.pdf)",
    )
    export_parser.add_argument(
        "--preview-dir",
        type=Path,
        default=None,
        help="Keep the rendered preview in this directory (default: a temporary directory)",
    )
    export_parser.add_argument(
        "--scale",
        type=float,
        default=2.0,
        help="Capture supersampling factor (default: 2.0)",
    )
    export_parser.add_argument(
        "--max-height",
        type=int,
        default=DEFAULT_MAX_HEIGHT_PX,
        help=f"Tallest preview in CSS pixels that can be exported (default: {DEFAULT_MAX_HEIGHT_PX})",
    )
    export_parser.set_defaults(func=export_pdf)

    html_parser = subparsers.add_parser(
        "export-html",
        help="Export an existing HTML preview as a paginated PDF",
        description="Export a previously rendered invoice preview as an A4 PDF with the brand bars repeated on every page.",
    )
    html_parser.add_argument(
        "--html",
        type=Path,
        required=True,
        help="Path to the preview HTML file",
    )
    html_parser.add_argument(
        "--output",
        type=Path,
        default=DEFAULT_OUTPUT_DIR,
        help=f"Output directory for the PDF (default: {DEFAULT_OUTPUT_DIR})",
    )
    html_parser.add_argument(
        "--file-name",
        type=str,
        default="invoice.pdf",
        help="PDF file name (default: invoice.pdf)",
    )
    html_parser.add_argument(
        "--scale",
        type=float,
        default=2.0,
        help="Capture supersampling factor (default: 2.0)",
    )
    html_parser.add_argument(
        "--max-height",
        type=int,
        default=DEFAULT_MAX_HEIGHT_PX,
        help=f"Tallest preview in CSS pixels that can be exported (default: {DEFAULT_MAX_HEIGHT_PX})",
    )
    html_parser.set_defaults(func=export_html)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
