from enum import Enum

from pydantic import Field

from invoicing.schemas.adjustment import Adjustment
from invoicing.schemas.base import StorageModel


class InvoiceStatus(str, Enum):
    OPEN = "Open"
    REVIEWED = "Reviewed"
    APPROVED = "Approved"
    PAID = "Paid"
    CANCELLED = "Cancelled"


class Invoice(StorageModel):
    id: str | None = None
    folio_invoice_no: str | None = None
    vendor_invoice_no: str | None = None
    status: InvoiceStatus = InvoiceStatus.OPEN
    currency: str = Field(default="USD", min_length=3, max_length=3)
    exchange_rate: float | None = None
    sub_total: float | None = None
    adjustments_total: float | None = None
    total: float | None = None
    adjustments: list[Adjustment] = Field(default_factory=list)
    acq_unit_ids: list[str] = Field(default_factory=list)


class InvoiceCollection(StorageModel):
    invoices: list[Invoice] = Field(default_factory=list)
    total_records: int = 0
