"""Body raster slicing."""

from collections.abc import Iterator

from schemas.layout import ContentRange, PageBand


def slice_bands(content: ContentRange, usable_height_px: int) -> Iterator[PageBand]:
    """Partition a content range into page-sized bands.

    Bands are yielded lazily, front to back. Every band but the last is
    exactly ``usable_height_px`` rows; the last holds the remainder. The
    cursor advances by the fixed slice height, so the loop runs
    ``ceil(total / usable_height_px)`` times and the bands cover the range
    exactly once with no gap or overlap.

    Args:
        content: Rows of the body raster to paginate
        usable_height_px: Body rows per page

    Yields:
        PageBand for each page, in order

    Raises:
        ValueError: If usable_height_px is less than 1

    Examples:
        >>> [b.height_px for b in slice_bands(ContentRange(200, 2800), 600)]
        [600, 600, 600, 600, 200]
    """
    if usable_height_px < 1:
        raise ValueError(f"usable_height_px must be >= 1, got {usable_height_px}")

    total = content.total_px
    drawn = 0
    while drawn < total:
        height = min(usable_height_px, total - drawn)
        yield PageBand(source_y=content.start_px + drawn, height_px=height)
        drawn += usable_height_px
