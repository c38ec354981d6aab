"""Signals that an invoice's totals need to be recalculated.

Both functions return immediately; delivery problems are logged and never
reach the operation that triggered the signal.
"""

import logging

from invoicing.core.context import RequestContext
from invoicing.events.bus import EventBus, MessageAddress
from invoicing.schemas.invoice import Invoice

logger = logging.getLogger(__name__)

INVOICE = "invoice"
INVOICE_ID = "invoiceId"


def update_invoice_totals(bus: EventBus, ctx: RequestContext, invoice: Invoice) -> None:
    """Publish the invoice snapshot so listeners can skip re-reading it."""
    _send(bus, ctx, {INVOICE: invoice.to_json()})


def update_invoice_totals_by_id(bus: EventBus, ctx: RequestContext, invoice_id: str) -> None:
    _send(bus, ctx, {INVOICE_ID: invoice_id})


def _send(bus: EventBus, ctx: RequestContext, body: dict) -> None:
    try:
        bus.publish(MessageAddress.INVOICE_TOTALS, body, ctx.okapi_headers)
    except Exception as e:
        logger.error("Failed to publish invoice totals event: %s", e)
