"""
Invoice data model.

`InvoiceRecord` is the single decode step between the model's JSON reply and
the rest of the service: every field comes out with a concrete value, `null`
and blank strings fall back to the documented defaults, and values of the
wrong shape are rejected instead of being silently replaced.
"""

import math
import re
from datetime import datetime, UTC
from typing import Annotated, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field, field_validator

CONFIDENCE = "high"
DEFAULT_CURRENCY = "INR"

Number = int | float


# Currency marker at either end of a numeric string: "₹118", "INR 1,234.50", "Rs. 100", "90 INR"
_CURRENCY_AFFIX = re.compile(r"^(?:₹|\$|INR|Rs\.?)\s*|\s*(?:₹|INR)$", re.IGNORECASE)

# Placeholders invoices print for a nil amount
_NIL_AMOUNTS = {"-", "--", "\u2013", "\u2014", "nil"}


def _finite(number, original):
    if isinstance(number, float) and not math.isfinite(number):
        raise ValueError(f"not a finite number: {original!r}")
    return number


def _coerce_number(value):
    if value is None:
        return 0
    if isinstance(value, bool) or isinstance(value, (dict, list)):
        raise ValueError(f"expected a number, got {type(value).__name__}")
    if isinstance(value, str):
        cleaned = _CURRENCY_AFFIX.sub("", value.strip().replace(",", "")).strip()
        if not cleaned or cleaned.lower() in _NIL_AMOUNTS:
            return 0
        try:
            return int(cleaned)
        except ValueError:
            pass
        try:
            return _finite(float(cleaned), value)
        except ValueError:
            raise ValueError(f"not a number: {value!r}")
    return _finite(value, value)


def _text(default: str):
    def coerce(value):
        if value is None:
            return default
        if isinstance(value, (dict, list)):
            raise ValueError(f"expected a string, got {type(value).__name__}")
        if isinstance(value, float) and value.is_integer():
            value = int(value)
        return str(value).strip() or default

    return coerce


def _line_items(value):
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"lineItems must be a list, got {type(value).__name__}")
    return [item for item in value if item is not None]


Amount = Annotated[Number, BeforeValidator(_coerce_number)]
LabelText = Annotated[str, BeforeValidator(_text("N/A"))]
OptionalText = Annotated[str, BeforeValidator(_text(""))]


class LineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    description: OptionalText = ""
    quantity: Amount = 0
    rate: Amount = 0
    amount: Amount = 0


class InvoiceRecord(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    invoice_number: LabelText = Field("N/A", alias="invoiceNumber")
    invoice_date: LabelText = Field("N/A", alias="invoiceDate")
    vendor_name: LabelText = Field("N/A", alias="vendorName")
    vendor_address: OptionalText = Field("", alias="vendorAddress")
    vendor_gstin: OptionalText = Field("", alias="vendorGSTIN")
    customer_name: OptionalText = Field("", alias="customerName")
    line_items: Annotated[list[LineItem], BeforeValidator(_line_items)] = Field(
        default_factory=list, alias="lineItems"
    )
    subtotal: Amount = 0
    cgst: Amount = 0
    sgst: Amount = 0
    igst: Amount = 0
    total_amount: Amount = Field(0, alias="totalAmount")
    currency: Annotated[str, BeforeValidator(_text(DEFAULT_CURRENCY))] = DEFAULT_CURRENCY
    confidence: str = CONFIDENCE

    @field_validator("confidence", mode="before")
    @classmethod
    def _fixed_confidence(cls, value):
        # Not derived from the model reply
        return CONFIDENCE

    @classmethod
    def decode(cls, payload) -> "InvoiceRecord":
        """Build a fully defaulted record from parsed model output.

        Raises pydantic.ValidationError when the payload is not an object or
        a field has the wrong shape.
        """
        return cls.model_validate(payload)

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True)


def utc_timestamp() -> str:
    return datetime.now(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


class LogEntry(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    action: Literal["upload", "extraction", "export"]
    status: Literal["processing", "success", "failed"]
    file_name: str = Field(alias="fileName")
    timestamp: str = Field(default_factory=utc_timestamp)
    data: InvoiceRecord | None = None
    error: str | None = None
    format: Literal["excel", "csv"] | None = None

    def to_payload(self) -> dict:
        return self.model_dump(by_alias=True, exclude_none=True)


class ExportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: InvoiceRecord
    file_name: str | None = Field(default=None, alias="fileName")
