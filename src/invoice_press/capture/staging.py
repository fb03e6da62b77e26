"""Off-screen capture staging.

Capture never works on the live preview. OffscreenClone deep-copies the
target subtree, stages every image it references into a private temporary
directory, and hands out capture regions over the copy. The directory is
removed when the context exits, whatever the outcome.
"""

import copy
import logging
import shutil
import tempfile
from pathlib import Path

from lxml import html as lxml_html
from lxml.html import HtmlElement

from invoice_press.exceptions import CaptureError
from invoice_press.preview import PreviewDocument, css_select

from .band_capture import CaptureRegion
from .image_resolver import ImageResolver

logger = logging.getLogger(__name__)

SNAPSHOT_NAME = "clone.html"


class OffscreenClone:
    """A detached, image-resolved copy of a preview subtree.

    Usage:
        with OffscreenClone(preview, "#invoice-preview", resolver) as clone:
            body_region = clone.region()
            header_region = clone.region(".top-brand-bar")

    Attributes:
        preview: Source preview (never modified)
        selector: Selector of the subtree to clone
        cross_origin: Value written to each cloned image's crossorigin attribute
        path: Staging directory while mounted, None otherwise
    """

    def __init__(
        self,
        preview: PreviewDocument,
        selector: str,
        resolver: ImageResolver,
        cross_origin: str = "anonymous",
        staging_root: Path | None = None,
    ):
        self.preview = preview
        self.selector = selector
        self.resolver = resolver
        self.cross_origin = cross_origin
        self.staging_root = staging_root
        self.path: Path | None = None
        self._root: HtmlElement | None = None
        self._head: HtmlElement | None = None
        self._ancestors: tuple[HtmlElement, ...] = ()

    def __enter__(self) -> "OffscreenClone":
        self.mount()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> bool:
        self.close()
        return False

    @property
    def root(self) -> HtmlElement:
        if self._root is None:
            raise CaptureError("Clone is not mounted")
        return self._root

    def mount(self) -> None:
        """Clone the target subtree and stage its images.

        Raises:
            CaptureError: If the target is missing or an image cannot be staged
        """
        tree = self.preview.parse()
        matches = css_select(tree, self.selector)
        if not matches:
            raise CaptureError(f"Target element {self.selector} not found in preview")

        if self.staging_root is not None:
            self.staging_root.mkdir(parents=True, exist_ok=True)
        self.path = Path(
            tempfile.mkdtemp(prefix="invoice-press-", dir=self.staging_root)
        )
        logger.debug(f"Mounted clone of {self.selector} at {self.path}")

        try:
            self._root = copy.deepcopy(matches[0])
            self._ancestors = tuple(
                _shallow_copy(ancestor)
                for ancestor in reversed(list(matches[0].iterancestors()))
                if ancestor.tag != "html"
            )
            head = tree.find("head")
            self._head = copy.deepcopy(head) if head is not None else None
            self._stage_images()
            self._write_snapshot()
        except Exception:
            self.close()
            raise

    def close(self) -> None:
        """Remove the staging directory.

        Removal failures are logged and suppressed so they never replace
        the outcome of the capture that used the clone.
        """
        if self.path is None:
            return
        try:
            shutil.rmtree(self.path)
            logger.debug(f"Removed clone staging directory {self.path}")
        except OSError as e:
            logger.warning(f"Failed to remove staging directory {self.path}: {e}")
        finally:
            self.path = None
            self._root = None
            self._head = None
            self._ancestors = ()

    def region(self, selector: str | None = None) -> CaptureRegion | None:
        """Return a capture region over the clone.

        Args:
            selector: Descendant to capture; None captures the clone root

        Returns:
            CaptureRegion, or None when the descendant is not in the clone
        """
        if selector is None:
            element = self.root
            label = self.selector
            ancestors = self._ancestors
        else:
            matches = [m for m in css_select(self.root, selector) if m is not self.root]
            if not matches:
                return None
            element = matches[0]
            label = selector
            # The clone root is the outermost ancestor inside the clone
            inner = reversed(list(element.iterancestors()))
            ancestors = self._ancestors + tuple(_shallow_copy(a) for a in inner)

        return CaptureRegion(
            element=element,
            head=self._head,
            base_url=self.preview.base_url,
            label=label,
            ancestors=ancestors,
        )

    def _stage_images(self) -> None:
        """Resolve every image in the clone to a verified local copy."""
        images_dir = self.path / "images"
        for img in self.root.iter("img"):
            img.set("crossorigin", self.cross_origin)
            src = (img.get("src") or "").strip()
            if not src:
                continue
            staged = self.resolver.resolve(src, self.preview.base_dir, images_dir)
            img.set("src", staged.resolve().as_uri())

    def _write_snapshot(self) -> None:
        """Write the staged clone to disk for inspection while mounted."""
        snapshot = self.path / SNAPSHOT_NAME
        snapshot.write_text(
            lxml_html.tostring(self.root, encoding="unicode", method="html")
        )


def _shallow_copy(element: HtmlElement) -> HtmlElement:
    """Copy an element's tag and attributes without its children or text."""
    return lxml_html.Element(element.tag, attrib=dict(element.attrib))
