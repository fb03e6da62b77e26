"""Image resolution for capture staging.

Every image referenced by a region must be fetched and decoded before the
region is captured, otherwise it renders as a blank box. The ImageResolver
turns each ``<img src>`` (remote URL, data URI, or local path) into a
verified local file inside the staging directory.
"""

import base64
import hashlib
import logging
import shutil
from pathlib import Path
from urllib.parse import unquote, urlparse
from urllib.request import url2pathname

import httpx
from lxml import etree
from PIL import Image

from invoice_press.exceptions import CaptureError

logger = logging.getLogger(__name__)

EXTENSIONS_BY_MEDIA_TYPE = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}


class ImageResolver:
    """Fetches, stages and decodes images referenced by a preview.

    Remote images are downloaded with httpx, data URIs are decoded, and local
    files are copied. Each staged file is decoded once (Pillow for raster
    formats, lxml for SVG) so a broken image fails the capture up front.
    No retries are attempted.

    Example:
        with ImageResolver() as resolver:
            staged = resolver.resolve("images/logo.png", preview_dir, staging_dir)
    """

    def __init__(self, http_client: httpx.Client | None = None, timeout: float = 30.0):
        """Initialize the image resolver.

        Args:
            http_client: Optional HTTP client for downloading remote images.
                         If not provided, one will be created internally.
            timeout: Request timeout in seconds for an internally created client
        """
        self._client = http_client
        self._owns_client = http_client is None
        self.timeout = timeout

    def _get_client(self) -> httpx.Client:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, follow_redirects=True)
        return self._client

    def close(self) -> None:
        """Close the HTTP client if we own it."""
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> "ImageResolver":
        """Enter context manager."""
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit context manager."""
        self.close()

    def resolve(self, src: str, base_dir: Path, staging_dir: Path) -> Path:
        """Stage the image behind *src* and verify it decodes.

        Args:
            src: Value of the ``src`` attribute
            base_dir: Directory relative paths resolve against
            staging_dir: Directory to write the staged copy into

        Returns:
            Path of the staged, decoded image

        Raises:
            CaptureError: If the image cannot be fetched, found, or decoded
        """
        staging_dir.mkdir(parents=True, exist_ok=True)
        digest = hashlib.sha256(src.encode("utf-8")).hexdigest()[:16]

        scheme = urlparse(src).scheme.lower()
        if scheme in ("http", "https"):
            staged = self._download(src, staging_dir, digest)
        elif scheme == "data":
            staged = self._decode_data_uri(src, staging_dir, digest)
        else:
            staged = self._copy_local(src, base_dir, staging_dir, digest)

        self._verify(staged, src)
        logger.debug(f"Staged image {src} as {staged.name}")
        return staged

    def _download(self, url: str, staging_dir: Path, digest: str) -> Path:
        """Download a remote image into the staging directory."""
        client = self._get_client()
        try:
            response = client.get(url)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise CaptureError(
                f"Failed to fetch image {url}: HTTP {e.response.status_code}"
            ) from e
        except httpx.RequestError as e:
            raise CaptureError(f"Failed to fetch image {url}: {e}") from e

        media_type = response.headers.get("content-type", "").split(";")[0].strip()
        suffix = Path(urlparse(url).path).suffix.lower()
        suffix = EXTENSIONS_BY_MEDIA_TYPE.get(media_type, suffix or ".img")
        destination = staging_dir / f"{digest}{suffix}"
        destination.write_bytes(response.content)
        return destination

    def _decode_data_uri(self, uri: str, staging_dir: Path, digest: str) -> Path:
        """Write the payload of a ``data:`` URI to the staging directory."""
        header, sep, payload = uri.partition(",")
        if not sep:
            raise CaptureError("Malformed data URI image")

        params = header[len("data:"):].split(";")
        media_type = params[0] or "text/plain"
        try:
            if "base64" in params[1:]:
                content = base64.b64decode(payload, validate=True)
            else:
                content = unquote(payload).encode("utf-8")
        except ValueError as e:
            raise CaptureError(f"Malformed data URI image: {e}") from e

        suffix = EXTENSIONS_BY_MEDIA_TYPE.get(media_type, ".img")
        destination = staging_dir / f"{digest}{suffix}"
        destination.write_bytes(content)
        return destination

    def _copy_local(
        self, src: str, base_dir: Path, staging_dir: Path, digest: str
    ) -> Path:
        """Copy a local image (relative path or file:// URI) into staging."""
        parsed = urlparse(src)
        if parsed.scheme == "file":
            source = Path(url2pathname(parsed.path))
        elif parsed.scheme:
            raise CaptureError(f"Unsupported image URL scheme: {src}")
        else:
            source = base_dir / unquote(parsed.path)

        if not source.is_file():
            raise CaptureError(f"Image not found: {source}")

        destination = staging_dir / f"{digest}{source.suffix.lower()}"
        shutil.copy2(source, destination)
        return destination

    def _verify(self, path: Path, src: str) -> None:
        """Decode the staged image fully.

        Raises:
            CaptureError: If the file is not a decodable image
        """
        if path.suffix == ".svg":
            try:
                etree.parse(str(path))
            except etree.XMLSyntaxError as e:
                raise CaptureError(f"Image {src} is not valid SVG: {e}") from e
            return

        try:
            with Image.open(path) as image:
                image.load()
        except (OSError, Image.DecompressionBombError) as e:
            raise CaptureError(f"Image {src} could not be decoded: {e}") from e
