from pydantic import Field, field_validator

from invoicing.schemas.adjustment import Adjustment
from invoicing.schemas.base import StorageModel


class InvoiceLine(StorageModel):
    id: str | None = None
    invoice_id: str = Field(..., description="Parent invoice; fixed once the line exists")
    invoice_line_number: str | None = Field(
        None, description="Generated on creation as {folioInvoiceNo}-{sequence}"
    )
    description: str | None = None
    po_line_id: str | None = None
    product_id: str | None = None
    product_id_type: str | None = None
    unit_price: float = Field(default=0.0, description="Price of one unit; negative for credits")
    quantity: int = Field(default=0, ge=0, description="Number of units")
    sub_total: float | None = None
    adjustments_total: float | None = None
    total: float | None = None
    adjustments: list[Adjustment] = Field(default_factory=list)
    subscription_info: str | None = None
    subscription_start: str | None = None
    subscription_end: str | None = None


class InvoiceLineCollection(StorageModel):
    invoice_lines: list[InvoiceLine] = Field(default_factory=list)
    total_records: int = 0


class SequenceNumber(StorageModel):
    sequence_number: str

    @field_validator("sequence_number", mode="before")
    @classmethod
    def number_to_str(cls, v):
        """Storage may send the counter as a JSON number."""
        if isinstance(v, int):
            return str(v)
        return v
