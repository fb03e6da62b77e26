"""Pytest fixtures for Invoice Press tests."""

import copy
import io

import pytest
from PIL import Image

from invoice_press.capture import BandCapture, CaptureConfig, CaptureRegion
from invoice_press.loader import SAMPLE_INVOICE
from invoice_press.preview import PreviewDocument
from schemas.invoice import InvoiceData
from schemas.raster import Raster


def striped_raster(width: int, height: int) -> Raster:
    """Build an opaque raster whose row y is filled with colour (y % 256, y // 256, 0)."""
    rows = bytearray()
    for y in range(height):
        rows += bytes((y % 256, (y // 256) % 256, 0, 255)) * width
    return Raster(width=width, height=height, pixels=bytes(rows))


def solid_raster(width: int, height: int, rgba=(0, 0, 255, 255)) -> Raster:
    """Build a raster filled with a single colour."""
    return Raster(width=width, height=height, pixels=bytes(rgba) * (width * height))


def png_bytes(size=(4, 4), color=(255, 0, 0)) -> bytes:
    """Encode a small solid PNG."""
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class FakeCapture(BandCapture):
    """Capture backend returning preset rasters keyed by region label."""

    def __init__(self, rasters: dict[str, Raster], error: Exception | None = None):
        self.rasters = rasters
        self.error = error
        self.calls: list[tuple[str, CaptureConfig]] = []

    def capture(self, region: CaptureRegion, config: CaptureConfig) -> Raster:
        self.calls.append((region.label, config))
        if self.error is not None:
            raise self.error
        return self.rasters[region.label]


@pytest.fixture
def sample_invoice_record():
    """Sample invoice record as the form emits it (camelCase keys)."""
    return copy.deepcopy(SAMPLE_INVOICE)


@pytest.fixture
def sample_invoice(sample_invoice_record):
    """Validated sample invoice."""
    return InvoiceData.model_validate(sample_invoice_record)


@pytest.fixture
def simple_preview(tmp_path):
    """A minimal preview with a target element and both brand bars."""
    preview_dir = tmp_path / "preview"
    preview_dir.mkdir()
    html_path = preview_dir / "invoice.html"
    html_path.write_text(
        """<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <style>
        .bar { height: 20px; background: #336699; }
        .content { height: 100px; }
    </style>
</head>
<body>
    <div id="invoice-preview">
        <div class="top-brand-bar bar">Header</div>
        <div class="content">Body</div>
        <div class="bottom-brand-bar bar">Footer</div>
    </div>
</body>
</html>
"""
    )
    return PreviewDocument.from_file(html_path)


@pytest.fixture
def make_striped_raster():
    """Factory for rasters whose rows are individually identifiable."""
    return striped_raster


@pytest.fixture
def make_solid_raster():
    """Factory for single-colour rasters."""
    return solid_raster


@pytest.fixture
def make_png():
    """Factory for small PNG payloads."""
    return png_bytes


@pytest.fixture
def fake_capture_class():
    """The FakeCapture backend class."""
    return FakeCapture
