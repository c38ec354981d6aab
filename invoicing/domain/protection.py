from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from invoicing.errors import ProtectedFieldViolationError
from invoicing.schemas.invoice import Invoice, InvoiceStatus
from invoicing.schemas.invoice_line import InvoiceLine

# Once an invoice reaches one of these statuses it has been approved.
POST_APPROVAL_STATUSES = frozenset(
    {InvoiceStatus.APPROVED, InvoiceStatus.PAID, InvoiceStatus.CANCELLED}
)


@dataclass(frozen=True, slots=True)
class ProtectedField:
    """A field locked after approval, with the accessor reading it from a record.

    ``name`` is the wire (camelCase) name reported back to API consumers.
    """

    name: str
    accessor: Callable[[Any], Any]


INVOICE_LINE_PROTECTED_FIELDS: tuple[ProtectedField, ...] = (
    ProtectedField("adjustments", lambda line: line.adjustments),
    ProtectedField("invoiceId", lambda line: line.invoice_id),
    ProtectedField("poLineId", lambda line: line.po_line_id),
    ProtectedField("productId", lambda line: line.product_id),
    ProtectedField("productIdType", lambda line: line.product_id_type),
    ProtectedField("quantity", lambda line: line.quantity),
    ProtectedField("subscriptionInfo", lambda line: line.subscription_info),
    ProtectedField("subscriptionStart", lambda line: line.subscription_start),
    ProtectedField("subscriptionEnd", lambda line: line.subscription_end),
    ProtectedField("unitPrice", lambda line: line.unit_price),
)


def is_post_approval(invoice: Invoice) -> bool:
    return invoice.status in POST_APPROVAL_STATUSES


def find_changed_protected_fields(
    proposed: Any, stored: Any, protected_fields: Iterable[ProtectedField]
) -> set[str]:
    """Names of the protected fields whose value differs between the two records."""
    return {
        field.name
        for field in protected_fields
        if field.accessor(proposed) != field.accessor(stored)
    }


def verify_protected_fields_unchanged(fields: set[str]) -> None:
    """
    Raise if any protected field was changed.

    Raises:
        ProtectedFieldViolationError: listing every changed field
    """
    if fields:
        raise ProtectedFieldViolationError(fields)


def validate_invoice_line_protection(
    invoice: Invoice, proposed: InvoiceLine, stored: InvoiceLine
) -> None:
    """Reject changes to locked line fields when the parent invoice is approved."""
    if is_post_approval(invoice):
        fields = find_changed_protected_fields(proposed, stored, INVOICE_LINE_PROTECTED_FIELDS)
        verify_protected_fields_unchanged(fields)
