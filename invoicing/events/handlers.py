import logging

import invoicing.repositories.invoice as invoice_repo
import invoicing.repositories.invoice_line as invoice_line_repo
from invoicing.core.config import settings
from invoicing.core.context import RequestContext
from invoicing.domain.totals import calculate_invoice_totals, totals_changed
from invoicing.events.bus import EventBus, Message, MessageAddress
from invoicing.events.notifier import INVOICE, INVOICE_ID
from invoicing.schemas.invoice import Invoice

logger = logging.getLogger(__name__)


async def recalculate_invoice_totals(message: Message) -> None:
    """
    Recalculate an invoice's totals from its lines and persist them if they drifted.

    The message body carries either the invoice snapshot (``invoice``) or only
    its id (``invoiceId``), in which case the invoice is read from storage.
    """
    ctx = RequestContext(okapi_headers=message.headers)

    if INVOICE in message.body:
        invoice = Invoice.model_validate(message.body[INVOICE])
    elif INVOICE_ID in message.body:
        invoice = await invoice_repo.get_invoice_by_id(ctx, message.body[INVOICE_ID])
    else:
        logger.warning("Invoice totals event without invoice or invoiceId: %s", message.body)
        return

    lines = await invoice_line_repo.get_invoice_lines_by_invoice_id(
        ctx, invoice.id, settings.invoice_lines_limit
    )
    totals = calculate_invoice_totals(invoice, lines.invoice_lines)
    if not totals_changed(invoice, totals):
        logger.debug("Invoice %s totals are up to date", invoice.id)
        return

    await invoice_repo.update_invoice(ctx, invoice.model_copy(update=totals._asdict()))
    logger.info("Invoice %s totals updated: total=%s", invoice.id, totals.total)


def register_handlers(bus: EventBus) -> None:
    bus.subscribe(MessageAddress.INVOICE_TOTALS, recalculate_invoice_totals)
