"""Invoice document schemas.

These models describe the invoice record produced by the data-entry form.
JSON keys are camelCase (as the form emits them); Python attributes are
snake_case. The field constraints mirror the form's validation rules, so a
record that loads here has already passed field-level validation.
"""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

GSTIN_PATTERN = r"^[0-9]{2}[A-Z]{5}[0-9]{4}[A-Z]{1}[1-9A-Z]{1}Z[0-9A-Z]{1}$"
PAN_PATTERN = r"^[A-Z]{5}[0-9]{4}[A-Z]{1}$"
IFSC_PATTERN = r"^[A-Z]{4}0[A-Z0-9]{6}$"
ACCOUNT_NUMBER_PATTERN = r"^[0-9]{9,18}$"

InvoiceStatus = Literal["Rejected", "Completed", "Pending", "Approved"]


class Party(BaseModel):
    """A party on the invoice (issuer or recipient).

    Attributes:
        name: Legal name
        address: Postal address, may span several lines
        gstin: Goods and Services Tax identification number (optional)
        pan: Permanent Account Number (optional)
    """

    name: str = Field(min_length=1, max_length=100)
    address: str = Field(min_length=1, max_length=500)
    gstin: str | None = Field(default=None, pattern=GSTIN_PATTERN)
    pan: str | None = Field(default=None, pattern=PAN_PATTERN)

    @field_validator("gstin", "pan", mode="before")
    @classmethod
    def _blank_as_missing(cls, value):
        if isinstance(value, str) and not value.strip():
            return None
        return value


class ProjectDetails(BaseModel):
    """Project the invoice bills for."""

    project: str = Field(min_length=1, max_length=200)
    delivery: str = Field(min_length=1, max_length=200)
    rate_per_site: float = Field(ge=0, le=1_000_000, alias="ratePerSite")
    total_sites: int = Field(ge=1, le=10_000, alias="totalSites")

    model_config = {"populate_by_name": True}


class InvoiceItem(BaseModel):
    """A single line item.

    Attributes:
        id: Form-assigned row identifier
        description: What is being billed
        qty: Quantity (strictly positive)
        unit_price: Price per unit in rupees
    """

    id: str
    description: str = Field(min_length=1, max_length=200)
    qty: float = Field(ge=0.01, le=10_000)
    unit_price: float = Field(ge=0, le=1_000_000, alias="unitPrice")

    model_config = {"populate_by_name": True}

    @property
    def amount(self) -> float:
        return self.qty * self.unit_price


class PaymentInfo(BaseModel):
    """Bank routing details printed on the invoice."""

    bank_name: str = Field(min_length=1, max_length=100, alias="bankName")
    account_name: str = Field(min_length=1, max_length=100, alias="accountName")
    account_number: str = Field(pattern=ACCOUNT_NUMBER_PATTERN, alias="accountNumber")
    ifsc: str = Field(pattern=IFSC_PATTERN)
    branch: str = Field(min_length=1, max_length=100)

    model_config = {"populate_by_name": True}


class InvoiceData(BaseModel):
    """A complete invoice record.

    Attributes:
        company_name: Issuing company name
        service_title: Title printed above the invoice number
        invoice_number: Invoice identifier (e.g., "WP/2025/011")
        date_iso: Invoice date as an ISO string ("YYYY-MM-DD")
        status: Workflow status; selects the stamp shown on the preview
        issued_from: Issuing party
        issued_to: Billed party
        project: Project details
        items: Ordered line items (at least one)
        advance: Advance already received, deducted before tax
        gst_percent: GST rate in percent
        tds_percent: TDS rate in percent
        payment: Bank routing details
        terms: Free-text payment terms
    """

    company_name: str = Field(min_length=1, max_length=100, alias="companyName")
    service_title: str = Field(min_length=1, max_length=50, alias="serviceTitle")
    invoice_number: str = Field(min_length=1, max_length=50, alias="invoiceNumber")
    date_iso: str = Field(min_length=1, alias="dateISO")
    status: InvoiceStatus | None = None
    issued_from: Party = Field(alias="issuedFrom")
    issued_to: Party = Field(alias="issuedTo")
    project: ProjectDetails
    items: list[InvoiceItem] = Field(min_length=1)
    advance: float = Field(default=0, ge=0, le=10_000_000)
    gst_percent: float = Field(default=0, ge=0, le=100, alias="gstPercent")
    tds_percent: float = Field(default=0, ge=0, le=100, alias="tdsPercent")
    payment: PaymentInfo
    terms: str = Field(min_length=1, max_length=1000)

    model_config = {"populate_by_name": True}


class Branding(BaseModel):
    """Static branding printed in the preview's header and footer bands.

    Image references may be local paths (relative to the preview directory)
    or http(s) URLs; they are resolved before capture.

    Attributes:
        company_name: Name shown in both brand bars and the "From" block
        address_line: Single-line address shown in the footer bar
        email: Contact address shown in the "From" block
        logo: Logo image shown in the header bar
        status_images: Stamp image per invoice status
    """

    company_name: str = "ENKONIX SOFTWARE SERVICES PVT LTD"
    address_line: str = (
        "1st Floor, MSR Tech Park, Novel Office, Marathahalli, "
        "Bangalore, Karnataka, 560036."
    )
    email: str = "info@enkonixsoft.com"
    logo: str | None = None
    status_images: dict[str, str] = {}
