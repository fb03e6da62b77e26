"""Rendered invoice previews.

A PreviewDocument is the on-screen preview: an HTML document plus the
directory its relative references (stylesheet, images) resolve against.
Capture never touches it; it works on clones of the parsed tree.
"""

from dataclasses import dataclass
from pathlib import Path

from cssselect import SelectorError
from lxml import html as lxml_html
from lxml.html import HtmlElement


def css_select(element: HtmlElement, selector: str) -> list[HtmlElement]:
    """Return the elements matching a CSS selector, in document order.

    The search covers *element* and its descendants.

    Args:
        element: Element to search from
        selector: CSS selector, e.g. ``#invoice-preview`` or
                  ``.invoice-preview > .top-brand-bar``

    Returns:
        Matching elements

    Raises:
        ValueError: If the selector cannot be parsed
    """
    try:
        return element.cssselect(selector, translator="html")
    except SelectorError as e:
        raise ValueError(f"Invalid selector {selector!r}: {e}") from e


@dataclass(frozen=True)
class PreviewDocument:
    """An HTML invoice preview.

    Attributes:
        html: Full HTML document
        base_dir: Directory that relative references resolve against
    """

    html: str
    base_dir: Path

    @classmethod
    def from_file(cls, html_path: Path) -> "PreviewDocument":
        """Load a preview from an HTML file on disk."""
        return cls(html=html_path.read_text(encoding="utf-8"), base_dir=html_path.parent)

    @property
    def base_url(self) -> str:
        return self.base_dir.resolve().as_uri() + "/"

    def parse(self) -> HtmlElement:
        """Parse the preview into a fresh element tree."""
        return lxml_html.document_fromstring(self.html)

    def find(self, selector: str) -> HtmlElement | None:
        """Return the first element matching *selector* in a fresh parse."""
        matches = css_select(self.parse(), selector)
        return matches[0] if matches else None
