"""Tests for the ImageResolver."""

import base64
from unittest.mock import MagicMock

import httpx
import pytest

from invoice_press.capture import ImageResolver
from invoice_press.exceptions import CaptureError


@pytest.fixture
def mock_http_client():
    """Create a mock HTTP client."""
    return MagicMock(spec=httpx.Client)


@pytest.fixture
def staging_dir(tmp_path):
    """Staging directory for resolved images."""
    return tmp_path / "staging"


class TestImageResolverInit:
    """Tests for ImageResolver initialization and client ownership."""

    def test_init_without_client(self):
        """The HTTP client is created lazily."""
        resolver = ImageResolver()

        assert resolver._client is None
        assert resolver._owns_client is True

    def test_creates_client_with_timeout(self):
        """An owned client uses the configured timeout."""
        resolver = ImageResolver(timeout=5.0)
        try:
            client = resolver._get_client()
            assert isinstance(client, httpx.Client)
            assert client.timeout.read == 5.0
        finally:
            resolver.close()

    def test_does_not_close_external_client(self, mock_http_client):
        """A client passed in is left open."""
        with ImageResolver(http_client=mock_http_client):
            pass

        mock_http_client.close.assert_not_called()


class TestImageResolverLocal:
    """Tests for resolving local images."""

    def test_relative_path(self, tmp_path, staging_dir, make_png):
        """Relative paths resolve against the base directory."""
        (tmp_path / "assets").mkdir()
        (tmp_path / "assets" / "logo.png").write_bytes(make_png())

        staged = ImageResolver().resolve("assets/logo.png", tmp_path, staging_dir)

        assert staged.parent == staging_dir
        assert staged.suffix == ".png"
        assert staged.read_bytes() == make_png()

    def test_file_uri(self, tmp_path, staging_dir, make_png):
        """file:// URIs are copied from their absolute location."""
        source = tmp_path / "logo.png"
        source.write_bytes(make_png())

        staged = ImageResolver().resolve(source.as_uri(), tmp_path / "other", staging_dir)

        assert staged.exists()

    def test_svg(self, tmp_path, staging_dir):
        """SVG images are verified by parsing them."""
        (tmp_path / "stamp.svg").write_text(
            '<svg xmlns="http://www.w3.org/2000/svg" width="10" height="10"/>'
        )

        staged = ImageResolver().resolve("stamp.svg", tmp_path, staging_dir)

        assert staged.suffix == ".svg"

    def test_same_source_stages_same_file(self, tmp_path, staging_dir, make_png):
        """Staged names are derived from the source reference."""
        (tmp_path / "logo.png").write_bytes(make_png())
        resolver = ImageResolver()

        first = resolver.resolve("logo.png", tmp_path, staging_dir)
        second = resolver.resolve("logo.png", tmp_path, staging_dir)

        assert first == second

    def test_missing_file(self, tmp_path, staging_dir):
        """A missing local image fails the capture."""
        with pytest.raises(CaptureError, match="Image not found"):
            ImageResolver().resolve("missing.png", tmp_path, staging_dir)

    def test_corrupt_image(self, tmp_path, staging_dir):
        """An image that does not decode fails the capture."""
        (tmp_path / "broken.png").write_bytes(b"not a png")

        with pytest.raises(CaptureError, match="could not be decoded"):
            ImageResolver().resolve("broken.png", tmp_path, staging_dir)

    def test_invalid_svg(self, tmp_path, staging_dir):
        """An SVG that does not parse fails the capture."""
        (tmp_path / "broken.svg").write_text("<svg")

        with pytest.raises(CaptureError, match="not valid SVG"):
            ImageResolver().resolve("broken.svg", tmp_path, staging_dir)

    def test_unsupported_scheme(self, tmp_path, staging_dir):
        """Only http, https, data and file references are supported."""
        with pytest.raises(CaptureError, match="Unsupported image URL scheme"):
            ImageResolver().resolve("ftp://example.com/logo.png", tmp_path, staging_dir)


class TestImageResolverDataUri:
    """Tests for resolving data URIs."""

    def test_base64_png(self, tmp_path, staging_dir, make_png):
        """Base64 data URIs are decoded into a staged file."""
        uri = "data:image/png;base64," + base64.b64encode(make_png()).decode("ascii")

        staged = ImageResolver().resolve(uri, tmp_path, staging_dir)

        assert staged.suffix == ".png"
        assert staged.read_bytes() == make_png()

    def test_url_encoded_svg(self, tmp_path, staging_dir):
        """Percent-encoded data URIs are decoded."""
        uri = (
            "data:image/svg+xml,"
            "%3Csvg%20xmlns%3D%22http%3A%2F%2Fwww.w3.org%2F2000%2Fsvg%22%2F%3E"
        )

        staged = ImageResolver().resolve(uri, tmp_path, staging_dir)

        assert staged.suffix == ".svg"

    def test_malformed_data_uri(self, tmp_path, staging_dir):
        """A data URI without a payload separator fails the capture."""
        with pytest.raises(CaptureError, match="Malformed data URI"):
            ImageResolver().resolve("data:image/png;base64", tmp_path, staging_dir)

    def test_bad_base64(self, tmp_path, staging_dir):
        """Invalid base64 fails the capture."""
        with pytest.raises(CaptureError, match="Malformed data URI"):
            ImageResolver().resolve("data:image/png;base64,***", tmp_path, staging_dir)


class TestImageResolverRemote:
    """Tests for resolving remote images."""

    def test_download(self, mock_http_client, tmp_path, staging_dir, make_png):
        """Remote images are downloaded through the HTTP client."""
        mock_response = MagicMock()
        mock_response.content = make_png()
        mock_response.headers = {"content-type": "image/png"}
        mock_http_client.get.return_value = mock_response

        resolver = ImageResolver(http_client=mock_http_client)
        staged = resolver.resolve("https://cdn.example.com/logo", tmp_path, staging_dir)

        mock_http_client.get.assert_called_once_with("https://cdn.example.com/logo")
        assert staged.suffix == ".png"
        assert staged.read_bytes() == make_png()

    def test_extension_from_url(self, mock_http_client, tmp_path, staging_dir, make_png):
        """Without a known content type the URL's extension is kept."""
        mock_response = MagicMock()
        mock_response.content = make_png()
        mock_response.headers = {}
        mock_http_client.get.return_value = mock_response

        resolver = ImageResolver(http_client=mock_http_client)
        staged = resolver.resolve("https://cdn.example.com/logo.png", tmp_path, staging_dir)

        assert staged.suffix == ".png"

    def test_http_error(self, mock_http_client, tmp_path, staging_dir):
        """HTTP error responses fail the capture."""
        mock_response = MagicMock()
        mock_response.status_code = 404
        mock_response.raise_for_status.side_effect = httpx.HTTPStatusError(
            "Not Found", request=MagicMock(), response=mock_response
        )
        mock_http_client.get.return_value = mock_response

        resolver = ImageResolver(http_client=mock_http_client)
        with pytest.raises(CaptureError, match="HTTP 404"):
            resolver.resolve("https://cdn.example.com/logo.png", tmp_path, staging_dir)

    def test_connection_error(self, mock_http_client, tmp_path, staging_dir):
        """Network failures fail the capture without retrying."""
        mock_http_client.get.side_effect = httpx.ConnectError("Connection refused")

        resolver = ImageResolver(http_client=mock_http_client)
        with pytest.raises(CaptureError, match="Connection refused"):
            resolver.resolve("https://cdn.example.com/logo.png", tmp_path, staging_dir)

        assert mock_http_client.get.call_count == 1
