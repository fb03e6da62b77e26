"""Jinja2 filters for HTML template rendering.

These filters are used in invoice.html.j2 to format invoice data.
"""

from datetime import date

from invoice_press.totals import format_inr


def format_date(date_string: str) -> str:
    """Format an ISO date string as it is printed on the invoice.

    Args:
        date_string: Date string in format "YYYY-MM-DD"

    Returns:
        Formatted date string like "06/08/2025"

    Examples:
        >>> format_date("2025-08-06")
        '06/08/2025'
    """
    if not date_string:
        return ""
    try:
        return date.fromisoformat(date_string[:10]).strftime("%d/%m/%Y")
    except ValueError:
        return date_string


def format_number(value: float) -> str:
    """Format a number without a trailing ".0" for whole values.

    Examples:
        >>> format_number(15.0)
        '15'
        >>> format_number(2.5)
        '2.5'
    """
    if value is None:
        return ""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def format_percent(value: float) -> str:
    """Format a rate as a percentage.

    Examples:
        >>> format_percent(11.8)
        '11.8%'
    """
    return f"{format_number(value)}%"


def split_lines(text: str) -> list[str]:
    """Split multi-line text (such as an address) into non-empty lines.

    Examples:
        >>> split_lines("125/4 MMR COMPLEX,\\nSALEM, 636008")
        ['125/4 MMR COMPLEX,', 'SALEM, 636008']
    """
    if not text:
        return []
    return [line.strip() for line in text.splitlines() if line.strip()]


# Registry of all filters for easy registration with Jinja2
FILTERS = {
    "format_inr": format_inr,
    "format_date": format_date,
    "format_number": format_number,
    "format_percent": format_percent,
    "split_lines": split_lines,
}
