"""Invoice arithmetic and currency formatting."""

import math
import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from schemas.invoice import InvoiceData

RUPEE = "₹"

_NUMBER_PREFIX = re.compile(r"-?(\d+\.?\d*|\.\d+)")


@dataclass(frozen=True)
class InvoiceTotals:
    """Derived amounts for an invoice, in rupees.

    Attributes:
        gross: Sum of qty * unit price over all items
        net_subtotal: Gross less the advance, floored at zero
        gst: GST on the net subtotal, rounded to whole rupees
        tds: TDS on the net subtotal, rounded to whole rupees
        total_payable: Net subtotal plus GST less TDS, floored at zero
    """

    gross: float
    net_subtotal: float
    gst: int
    tds: int
    total_payable: float


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves toward positive infinity.

    Examples:
        >>> round_half_up(2.5)
        3
        >>> round_half_up(-2.5)
        -2
    """
    return int(math.floor(value + 0.5))


def calc_totals(data: InvoiceData) -> InvoiceTotals:
    """Compute the derived totals for an invoice.

    Args:
        data: Validated invoice record

    Returns:
        InvoiceTotals for the record

    Examples:
        Three items of 15 x 12000 with a 150000 advance, 18% GST and
        11.8% TDS give a gross of 540000 and 414180 payable.
    """
    gross = sum(item.qty * item.unit_price for item in data.items)
    net_subtotal = max(gross - data.advance, 0)
    gst = round_half_up(net_subtotal * data.gst_percent / 100)
    tds = round_half_up(net_subtotal * data.tds_percent / 100)
    total_payable = max(net_subtotal + gst - tds, 0)
    return InvoiceTotals(
        gross=gross,
        net_subtotal=net_subtotal,
        gst=gst,
        tds=tds,
        total_payable=total_payable,
    )


def _group_indian(digits: str) -> str:
    """Insert Indian digit-group separators (3 then 2s) into a digit string."""
    if len(digits) <= 3:
        return digits
    head, tail = digits[:-3], digits[-3:]
    pairs = []
    while len(head) > 2:
        pairs.insert(0, head[-2:])
        head = head[:-2]
    if head:
        pairs.insert(0, head)
    return ",".join(pairs + [tail])


def format_inr(amount: float | None, with_decimals: bool = False) -> str:
    """Format an amount as Indian rupees.

    Args:
        amount: Amount in rupees; None or NaN format as zero
        with_decimals: Show two decimal places

    Returns:
        Formatted amount such as "₹5,40,000"

    Examples:
        >>> format_inr(540000)
        '₹5,40,000'
        >>> format_inr(1234.5, with_decimals=True)
        '₹1,234.50'
    """
    if amount is None or (isinstance(amount, float) and math.isnan(amount)):
        amount = 0
    places = 2 if with_decimals else 0
    quantum = Decimal(1).scaleb(-places)
    value = Decimal(str(amount)).quantize(quantum, rounding=ROUND_HALF_UP)
    sign = "-" if value < 0 else ""
    whole, _, fraction = f"{abs(value):.{places}f}".partition(".")
    formatted = f"{sign}{RUPEE}{_group_indian(whole)}"
    if fraction:
        formatted += f".{fraction}"
    return formatted


def parse_number(value: str | float | int) -> float:
    """Parse a loosely formatted number, ignoring currency symbols and separators.

    Returns 0 when no number can be read.

    Examples:
        >>> parse_number("₹1,20,000")
        120000.0
        >>> parse_number("n/a")
        0
    """
    if isinstance(value, (int, float)):
        return value
    cleaned = re.sub(r"[^0-9.\-]", "", value)
    match = _NUMBER_PREFIX.match(cleaned)
    if not match:
        return 0
    return float(match.group(0))
