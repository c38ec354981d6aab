import pytest

from invoicing.domain.totals import (
    calculate_invoice_line_totals,
    calculate_invoice_totals,
    currency_quantum,
    totals_changed,
    with_totals,
)
from invoicing.schemas.invoice import Invoice
from invoicing.schemas.invoice_line import InvoiceLine
from tests.factories import invoice_json, line_json


def make_line(**overrides) -> InvoiceLine:
    return InvoiceLine.model_validate(line_json(**overrides))


def make_invoice(**overrides) -> Invoice:
    return Invoice.model_validate(invoice_json(**overrides))


# ============================================================================
# INVOICE LINE TOTALS
# ============================================================================


def test_line_totals_with_amount_adjustment():
    """unitPrice=5, quantity=4, adjustments=[+2] gives 20 / 2 / 22."""
    line = make_line(adjustments=[{"type": "Amount", "value": 2, "relationToTotal": "In addition to"}])

    totals = calculate_invoice_line_totals(line, make_invoice())

    assert totals.sub_total == 20.0
    assert totals.adjustments_total == 2.0
    assert totals.total == 22.0


def test_line_totals_without_adjustments():
    totals = calculate_invoice_line_totals(make_line(unitPrice=10, quantity=2), make_invoice())

    assert totals == (20.0, 0.0, 20.0)


def test_percentage_adjustment_is_taken_from_subtotal():
    line = make_line(
        unitPrice=12.5,
        quantity=2,
        adjustments=[{"type": "Percentage", "value": 10, "relationToTotal": "In addition to"}],
    )

    totals = calculate_invoice_line_totals(line, make_invoice())

    assert totals.sub_total == 25.0
    assert totals.adjustments_total == 2.5
    assert totals.total == 27.5


def test_adjustments_not_in_addition_to_total_are_ignored():
    line = make_line(
        adjustments=[
            {"type": "Amount", "value": 3, "relationToTotal": "Included in"},
            {"type": "Amount", "value": 7, "relationToTotal": "Separate from"},
            {"type": "Amount", "value": 1.5, "relationToTotal": "In addition to"},
        ]
    )

    totals = calculate_invoice_line_totals(line, make_invoice())

    assert totals.adjustments_total == 1.5
    assert totals.total == 21.5


def test_negative_adjustment_reduces_total():
    line = make_line(adjustments=[{"type": "Amount", "value": -4}])

    totals = calculate_invoice_line_totals(line, make_invoice())

    assert totals.adjustments_total == -4.0
    assert totals.total == 16.0


def test_amounts_are_rounded_to_currency_minor_unit():
    line = make_line(
        unitPrice=0.333,
        quantity=3,
        adjustments=[{"type": "Percentage", "value": 33.333}],
    )

    usd = calculate_invoice_line_totals(line, make_invoice(currency="USD"))
    jpy = calculate_invoice_line_totals(line.model_copy(update={"unit_price": 333.3}), make_invoice(currency="JPY"))

    assert usd.sub_total == 1.0
    assert usd.adjustments_total == 0.33
    assert jpy.sub_total == 1000.0
    assert jpy.adjustments_total == 333.0


@pytest.mark.parametrize(
    "currency, quantum",
    [("USD", "0.01"), ("eur", "0.01"), ("JPY", "1"), ("KWD", "0.001")],
)
def test_currency_quantum(currency, quantum):
    assert str(currency_quantum(currency)) == quantum


def test_total_is_sum_of_subtotal_and_adjustments():
    line = make_line(
        unitPrice=19.99,
        quantity=7,
        adjustments=[
            {"type": "Percentage", "value": 8.25},
            {"type": "Amount", "value": 4.1},
        ],
    )

    totals = calculate_invoice_line_totals(line, make_invoice())

    assert totals.total == pytest.approx(totals.sub_total + totals.adjustments_total)


def test_recalculation_is_idempotent():
    line = make_line(unitPrice=3.3, quantity=3, adjustments=[{"type": "Percentage", "value": 15}])
    invoice = make_invoice()

    first = calculate_invoice_line_totals(line, invoice)
    updated = with_totals(line, first)
    second = calculate_invoice_line_totals(updated, invoice)

    assert first == second
    assert totals_changed(updated, second) is False


def test_totals_changed_detects_drift():
    line = make_line(unitPrice=6, quantity=3, subTotal=15.0, total=15.0)

    totals = calculate_invoice_line_totals(line, make_invoice())

    assert totals.total == 18.0
    assert totals_changed(line, totals) is True


def test_missing_stored_totals_count_as_drift():
    line = make_line(subTotal=None, adjustmentsTotal=None, total=None)

    assert totals_changed(line, calculate_invoice_line_totals(line, make_invoice())) is True


# ============================================================================
# INVOICE TOTALS
# ============================================================================


def test_invoice_totals_sum_lines_and_invoice_adjustments():
    invoice = make_invoice(adjustments=[{"type": "Percentage", "value": 10}])
    lines = [
        make_line(unitPrice=5, quantity=4, adjustments=[{"value": 2}]),
        make_line(unitPrice=10, quantity=1),
    ]

    totals = calculate_invoice_totals(invoice, lines)

    assert totals.sub_total == 30.0
    assert totals.adjustments_total == 5.0
    assert totals.total == 35.0


def test_invoice_without_lines_has_zero_totals():
    totals = calculate_invoice_totals(make_invoice(), [])

    assert totals == (0.0, 0.0, 0.0)
