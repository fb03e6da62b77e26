"""Tests for the CLI module."""

import json
import logging
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest

from invoice_press.cli import default_file_name, main
from schemas.export import ExportedPage, ExportResult


@pytest.fixture
def invoice_file(tmp_path, sample_invoice_record):
    """The sample invoice written as a JSON file."""
    path = tmp_path / "invoice.json"
    path.write_text(json.dumps(sample_invoice_record), encoding="utf-8")
    return path


def make_export_result(output_dir: Path, file_name: str, pages: int = 2) -> ExportResult:
    return ExportResult(
        file_name=file_name,
        output_path=str(output_dir / file_name),
        page_width_pt=595,
        page_height_pt=842,
        px_per_pt=2.0,
        body_width_px=1190,
        body_height_px=3000,
        pages=[ExportedPage(page_number=i + 1, source_y=i * 100, height_px=100) for i in range(pages)],
    )


class TestDefaultFileName:
    """Tests for default_file_name."""

    def test_replaces_path_separators(self):
        """Slashes in invoice numbers become hyphens."""
        assert default_file_name("WP/2025/011") == "invoice-WP-2025-011.pdf"

    def test_replaces_unsafe_characters(self):
        """Characters that are unsafe in file names are collapsed to one hyphen."""
        assert default_file_name('A: B*"C"') == "invoice-A-B-C.pdf"

    def test_empty_number(self):
        """An invoice number with nothing usable falls back to draft."""
        assert default_file_name("//") == "invoice-draft.pdf"


class TestCLIInitInvoice:
    """Tests for the init-invoice command."""

    def test_init_invoice_writes_sample(self, tmp_path):
        """init-invoice writes the sample invoice as camelCase JSON."""
        output = tmp_path / "invoice.json"

        result = main(["init-invoice", "--output", str(output)])

        assert result == 0
        data = json.loads(output.read_text(encoding="utf-8"))
        assert data["invoiceNumber"] == "WP/2025/011"
        assert data["issuedTo"]["name"] == "PREYFOX TECHNOLOGY PRIVATE LIMITED"
        assert len(data["items"]) == 3

    def test_init_invoice_refuses_to_overwrite(self, tmp_path, caplog):
        """init-invoice leaves an existing file alone without --force."""
        output = tmp_path / "invoice.json"
        output.write_text("{}")

        result = main(["init-invoice", "--output", str(output)])

        assert result == 1
        assert "already exists" in caplog.text
        assert output.read_text() == "{}"

    def test_init_invoice_force(self, tmp_path):
        """init-invoice overwrites an existing file with --force."""
        output = tmp_path / "invoice.json"
        output.write_text("{}")

        result = main(["init-invoice", "--output", str(output), "--force"])

        assert result == 0
        assert json.loads(output.read_text(encoding="utf-8"))["invoiceNumber"] == "WP/2025/011"


class TestCLIShowTotals:
    """Tests for the show-totals command."""

    def test_show_totals_requires_invoice_argument(self):
        """show-totals fails without --invoice argument."""
        with pytest.raises(SystemExit) as exc_info:
            main(["show-totals"])
        assert exc_info.value.code != 0

    def test_show_totals_prints_breakdown(self, invoice_file, capsys):
        """show-totals prints every total in Indian grouping."""
        result = main(["show-totals", "--invoice", str(invoice_file)])

        assert result == 0
        out = capsys.readouterr().out
        assert "Invoice WP/2025/011" in out
        assert "₹5,40,000" in out
        assert "₹1,50,000" in out
        assert "₹3,90,000" in out
        assert "₹70,200" in out
        assert "₹46,020" in out
        assert "₹4,14,180" in out

    def test_show_totals_decimals(self, invoice_file, capsys):
        """show-totals --decimals prints two decimal places."""
        result = main(["show-totals", "--invoice", str(invoice_file), "--decimals"])

        assert result == 0
        assert "₹4,14,180.00" in capsys.readouterr().out

    def test_show_totals_missing_file(self, tmp_path, caplog):
        """show-totals returns error when the invoice file does not exist."""
        result = main(["show-totals", "--invoice", str(tmp_path / "missing.json")])

        assert result == 1
        assert "Cannot read invoice" in caplog.text

    def test_show_totals_invalid_json(self, tmp_path, caplog):
        """show-totals returns error for a file that is not JSON."""
        path = tmp_path / "invoice.json"
        path.write_text("not json")

        result = main(["show-totals", "--invoice", str(path)])

        assert result == 1
        assert "is not valid JSON" in caplog.text

    def test_show_totals_reports_validation_errors(
        self, tmp_path, sample_invoice_record, caplog
    ):
        """show-totals logs each field that fails validation."""
        sample_invoice_record["issuedTo"]["gstin"] = "not-a-gstin"
        path = tmp_path / "invoice.json"
        path.write_text(json.dumps(sample_invoice_record), encoding="utf-8")

        result = main(["show-totals", "--invoice", str(path)])

        assert result == 1
        assert "failed validation" in caplog.text
        assert "issuedTo.gstin" in caplog.text


class TestCLIRenderPreview:
    """Tests for the render-preview command."""

    def test_render_preview_writes_html(self, invoice_file, tmp_path):
        """render-preview writes the preview HTML and stylesheet."""
        output = tmp_path / "preview"

        result = main(["render-preview", "--invoice", str(invoice_file), "--output", str(output)])

        assert result == 0
        assert (output / "invoice.html").exists()
        assert (output / "invoice.css").exists()
        assert "WP/2025/011" in (output / "invoice.html").read_text(encoding="utf-8")

    def test_render_preview_missing_file(self, tmp_path, caplog):
        """render-preview returns error when the invoice file does not exist."""
        result = main([
            "render-preview",
            "--invoice", str(tmp_path / "missing.json"),
            "--output", str(tmp_path / "preview"),
        ])

        assert result == 1
        assert "Cannot read invoice" in caplog.text
        assert not (tmp_path / "preview").exists()

    @patch("invoice_press.cli.HTMLTransformer")
    def test_render_preview_handles_exception(
        self, mock_transformer_class, invoice_file, tmp_path, caplog
    ):
        """render-preview returns error code on unexpected exception."""
        mock_transformer = MagicMock()
        mock_transformer.transform.side_effect = Exception("unexpected error")
        mock_transformer_class.return_value = mock_transformer

        result = main([
            "render-preview", "--invoice", str(invoice_file), "--output", str(tmp_path / "preview"),
        ])

        assert result == 1
        assert "Failed to render preview" in caplog.text


class TestCLIExportPDF:
    """Tests for the export-pdf command."""

    @patch("invoice_press.cli.PDFTransformer")
    def test_export_pdf_success(self, mock_transformer_class, invoice_file, tmp_path, caplog):
        """export-pdf renders the preview and exports it under the default name."""
        caplog.set_level(logging.INFO)
        output = tmp_path / "pdf"
        mock_transformer = MagicMock()
        mock_transformer.transform.return_value = make_export_result(
            output, "invoice-WP-2025-011.pdf", pages=2
        )
        mock_transformer_class.return_value = mock_transformer

        result = main(["export-pdf", "--invoice", str(invoice_file), "--output", str(output)])

        assert result == 0
        mock_transformer_class.assert_called_once_with(scale=2.0, max_height_px=20000)
        preview, output_dir, file_name = mock_transformer.transform.call_args.args
        assert output_dir == output
        assert file_name == "invoice-WP-2025-011.pdf"
        assert preview.find("#invoice-preview") is not None
        assert "Pages: 2" in caplog.text

    @patch("invoice_press.cli.PDFTransformer")
    def test_export_pdf_keeps_preview(self, mock_transformer_class, invoice_file, tmp_path):
        """export-pdf --preview-dir keeps the rendered preview."""
        output = tmp_path / "pdf"
        preview_dir = tmp_path / "preview"
        mock_transformer = MagicMock()
        mock_transformer.transform.return_value = make_export_result(output, "custom.pdf")
        mock_transformer_class.return_value = mock_transformer

        result = main([
            "export-pdf",
            "--invoice", str(invoice_file),
            "--output", str(output),
            "--file-name", "custom.pdf",
            "--preview-dir", str(preview_dir),
            "--scale", "3",
            "--max-height", "50000",
        ])

        assert result == 0
        mock_transformer_class.assert_called_once_with(scale=3.0, max_height_px=50000)
        assert mock_transformer.transform.call_args.args[2] == "custom.pdf"
        assert (preview_dir / "invoice.html").exists()

    @patch("invoice_press.cli.PDFTransformer")
    def test_export_pdf_handles_exception(
        self, mock_transformer_class, invoice_file, tmp_path, caplog
    ):
        """export-pdf returns error code when the export fails."""
        mock_transformer = MagicMock()
        mock_transformer.transform.side_effect = Exception("unexpected error")
        mock_transformer_class.return_value = mock_transformer

        result = main([
            "export-pdf", "--invoice", str(invoice_file), "--output", str(tmp_path / "pdf"),
        ])

        assert result == 1
        assert "Failed to export PDF: unexpected error" in caplog.text

    def test_export_pdf_invalid_invoice(self, tmp_path, caplog):
        """export-pdf returns error for an unreadable invoice before exporting."""
        result = main([
            "export-pdf",
            "--invoice", str(tmp_path / "missing.json"),
            "--output", str(tmp_path / "pdf"),
        ])

        assert result == 1
        assert "Cannot read invoice" in caplog.text
        assert not (tmp_path / "pdf").exists()

    def test_export_pdf_writes_document(self, invoice_file, tmp_path):
        """export-pdf writes a PDF for the sample invoice."""
        output = tmp_path / "pdf"

        result = main([
            "export-pdf", "--invoice", str(invoice_file), "--output", str(output), "--scale", "1",
        ])

        assert result == 0
        pdf_path = output / "invoice-WP-2025-011.pdf"
        assert pdf_path.read_bytes().startswith(b"%PDF")


class TestCLIExportHTML:
    """Tests for the export-html command."""

    def test_export_html_requires_html_argument(self):
        """export-html fails without --html argument."""
        with pytest.raises(SystemExit) as exc_info:
            main(["export-html"])
        assert exc_info.value.code != 0

    def test_export_html_missing_file(self, tmp_path, caplog):
        """export-html returns error when the preview does not exist."""
        result = main(["export-html", "--html", str(tmp_path / "missing.html")])

        assert result == 1
        assert "Preview not found" in caplog.text

    @patch("invoice_press.cli.PDFTransformer")
    def test_export_html_success(self, mock_transformer_class, simple_preview, tmp_path):
        """export-html exports an existing preview under the given name."""
        output = tmp_path / "pdf"
        mock_transformer = MagicMock()
        mock_transformer.transform.return_value = make_export_result(output, "invoice.pdf")
        mock_transformer_class.return_value = mock_transformer

        result = main([
            "export-html",
            "--html", str(simple_preview.base_dir / "invoice.html"),
            "--output", str(output),
            "--max-height", "40000",
        ])

        assert result == 0
        mock_transformer_class.assert_called_once_with(scale=2.0, max_height_px=40000)
        preview, output_dir, file_name = mock_transformer.transform.call_args.args
        assert preview.find("#invoice-preview") is not None
        assert output_dir == output
        assert file_name == "invoice.pdf"

    @patch("invoice_press.cli.PDFTransformer")
    def test_export_html_handles_exception(
        self, mock_transformer_class, simple_preview, tmp_path, caplog
    ):
        """export-html returns error code when the export fails."""
        mock_transformer = MagicMock()
        mock_transformer.transform.side_effect = Exception("unexpected error")
        mock_transformer_class.return_value = mock_transformer

        result = main([
            "export-html",
            "--html", str(simple_preview.base_dir / "invoice.html"),
            "--output", str(tmp_path / "pdf"),
        ])

        assert result == 1
        assert "Failed to export PDF" in caplog.text


class TestCLIMain:
    """Tests for CLI main entry point."""

    def test_no_command_shows_help(self, capsys):
        """Running with no command shows help."""
        result = main([])

        assert result == 0
        captured = capsys.readouterr()
        assert "usage:" in captured.out
        assert "export-pdf" in captured.out

    def test_help_flag(self, capsys):
        """Running with --help shows help."""
        with pytest.raises(SystemExit) as exc_info:
            main(["--help"])

        assert exc_info.value.code == 0

    def test_verbose_flag_accepted(self, tmp_path, caplog):
        """Verbose flag is accepted."""
        result = main(["-v", "show-totals", "--invoice", str(tmp_path / "missing.json")])

        assert result == 1  # Fails due to missing file, but -v was accepted
