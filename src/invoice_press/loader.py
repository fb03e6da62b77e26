"""Loading and saving invoice records."""

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from invoice_press.exceptions import InvoiceDataError
from schemas.invoice import InvoiceData

logger = logging.getLogger(__name__)

SAMPLE_INVOICE = {
    "companyName": "ENKONIX SOFTWARE SERVICES PVT LTD",
    "serviceTitle": "SERVICE INVOICE",
    "invoiceNumber": "WP/2025/011",
    "dateISO": "2025-08-06",
    "status": "Pending",
    "issuedFrom": {
        "name": "ENKONIX SOFTWARE SERVICES PVT LTD",
        "address": "1st Floor, MSR PARK, NOVEL OFFICE\nMARATHAHALLI, BENGALORE, KARNATAKA, 560036.",
        "gstin": "29ABCDE1234F1Z5",
        "pan": "ABCDE1234F",
    },
    "issuedTo": {
        "name": "PREYFOX TECHNOLOGY PRIVATE LIMITED",
        "address": "125/4 MMR COMPLEX,\nCHINNATHIRUPATHI,RAMANATHAPURAM,SALEM,636008",
        "gstin": "33AANCP5973H1ZZ",
        "pan": "AANCP5973H",
    },
    "project": {
        "project": "WordPress Website Development (3 Slots)",
        "delivery": "45 WordPress Websites",
        "ratePerSite": 12000,
        "totalSites": 45,
    },
    "items": [
        {"id": "1", "description": "WordPress - Slot 1 (15 sites)", "qty": 15, "unitPrice": 12000},
        {"id": "2", "description": "WordPress - Slot 2 (15 sites)", "qty": 15, "unitPrice": 12000},
        {"id": "3", "description": "WordPress - Slot 3 (15 sites)", "qty": 15, "unitPrice": 12000},
    ],
    "advance": 150000,
    "gstPercent": 18,
    "tdsPercent": 11.8,
    "payment": {
        "bankName": "HDFC BANK Account",
        "accountName": "ENKONIX SOFTWARE SERVICES PVT LTD",
        "accountNumber": "50200099397088",
        "ifsc": "HDFC0001234",
        "branch": "JP Nagar",
    },
    "terms": (
        "Please send payment within 30 days of receiving this invoice. "
        "There will be 10% interest charge per month on late invoice."
    ),
}


def sample_invoice() -> InvoiceData:
    """Return the sample invoice a new invoice starts from."""
    return InvoiceData.model_validate(SAMPLE_INVOICE)


def load_invoice(path: Path) -> InvoiceData:
    """Load and validate an invoice record from a JSON file.

    Args:
        path: Path to the invoice JSON file

    Returns:
        Validated InvoiceData

    Raises:
        InvoiceDataError: If the file cannot be read, is not JSON, or fails
                          validation
    """
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except OSError as e:
        raise InvoiceDataError(f"Cannot read invoice {path}: {e}") from e
    except json.JSONDecodeError as e:
        raise InvoiceDataError(f"Invoice {path} is not valid JSON: {e}") from e

    try:
        invoice = InvoiceData.model_validate(data)
    except ValidationError as e:
        raise InvoiceDataError(
            f"Invoice {path} failed validation with {e.error_count()} error(s)",
            errors=e.errors(include_url=False),
        ) from e

    logger.debug(f"Loaded invoice {invoice.invoice_number} from {path}")
    return invoice


def dump_invoice(invoice: InvoiceData, path: Path) -> None:
    """Write an invoice record as camelCase JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(invoice.model_dump_json(indent=2, by_alias=True), encoding="utf-8")
    logger.debug(f"Wrote invoice {invoice.invoice_number} to {path}")
