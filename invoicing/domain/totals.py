from __future__ import annotations

from decimal import ROUND_HALF_EVEN, Decimal
from typing import Iterable, NamedTuple

from invoicing.schemas.adjustment import Adjustment, AdjustmentRelation, AdjustmentType
from invoicing.schemas.invoice import Invoice
from invoicing.schemas.invoice_line import InvoiceLine

# ISO 4217 currencies whose minor unit is not cents.
ZERO_DECIMAL_CURRENCIES = frozenset(
    {"BIF", "CLP", "DJF", "GNF", "ISK", "JPY", "KMF", "KRW", "PYG", "RWF", "UGX", "UYI", "VND", "VUV", "XAF", "XOF", "XPF"}
)
THREE_DECIMAL_CURRENCIES = frozenset({"BHD", "IQD", "JOD", "KWD", "LYD", "OMR", "TND"})

HUNDRED = Decimal(100)


class InvoiceLineTotals(NamedTuple):
    sub_total: float
    adjustments_total: float
    total: float


class InvoiceTotals(NamedTuple):
    sub_total: float
    adjustments_total: float
    total: float


def currency_quantum(currency: str) -> Decimal:
    """Smallest representable amount for the currency (1, 0.01 or 0.001)."""
    code = currency.upper()
    if code in ZERO_DECIMAL_CURRENCIES:
        return Decimal(1)
    if code in THREE_DECIMAL_CURRENCIES:
        return Decimal("0.001")
    return Decimal("0.01")


def _money(value: float | int | None) -> Decimal:
    # str() keeps 0.1 as 0.1 instead of its binary expansion
    return Decimal(str(value or 0))


def _round(amount: Decimal, quantum: Decimal) -> Decimal:
    return amount.quantize(quantum, rounding=ROUND_HALF_EVEN)


def calculate_adjustments_total(
    adjustments: Iterable[Adjustment], sub_total: Decimal, quantum: Decimal
) -> Decimal:
    """
    Sum the adjustments that are charged on top of the subtotal.

    Adjustments "Included in" the price or kept "Separate from" the total do
    not contribute. Percentage adjustments are taken from the subtotal.
    """
    total = Decimal(0)
    for adjustment in adjustments:
        if adjustment.relation_to_total != AdjustmentRelation.IN_ADDITION_TO:
            continue
        if adjustment.type == AdjustmentType.PERCENTAGE:
            amount = sub_total * _money(adjustment.value) / HUNDRED
        else:
            amount = _money(adjustment.value)
        total += _round(amount, quantum)
    return total


def calculate_invoice_line_totals(line: InvoiceLine, invoice: Invoice) -> InvoiceLineTotals:
    """
    Compute subtotal, adjustments total and total of a line.

    Pure and deterministic; amounts are rounded half-even to the minor unit of
    the invoice currency, and ``total`` is always ``sub_total + adjustments_total``.
    """
    quantum = currency_quantum(invoice.currency)
    sub_total = _round(_money(line.unit_price) * line.quantity, quantum)
    adjustments_total = calculate_adjustments_total(line.adjustments, sub_total, quantum)
    total = sub_total + adjustments_total
    return InvoiceLineTotals(float(sub_total), float(adjustments_total), float(total))


def calculate_invoice_totals(invoice: Invoice, lines: Iterable[InvoiceLine]) -> InvoiceTotals:
    """Aggregate line totals and apply invoice-level adjustments on the summed subtotal."""
    quantum = currency_quantum(invoice.currency)
    sub_total = Decimal(0)
    adjustments_total = Decimal(0)
    for line in lines:
        line_totals = calculate_invoice_line_totals(line, invoice)
        sub_total += _money(line_totals.sub_total)
        adjustments_total += _money(line_totals.adjustments_total)
    adjustments_total += calculate_adjustments_total(invoice.adjustments, sub_total, quantum)
    total = sub_total + adjustments_total
    return InvoiceTotals(float(sub_total), float(adjustments_total), float(total))


def totals_changed(record: InvoiceLine | Invoice, totals: InvoiceLineTotals | InvoiceTotals) -> bool:
    """True when the stored totals of the record differ from the computed ones."""
    return (
        record.sub_total != totals.sub_total
        or record.adjustments_total != totals.adjustments_total
        or record.total != totals.total
    )


def with_totals(line: InvoiceLine, totals: InvoiceLineTotals) -> InvoiceLine:
    """Return a copy of the line carrying the given totals."""
    return line.model_copy(update=totals._asdict())
