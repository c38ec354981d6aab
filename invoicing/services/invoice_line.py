import logging

import invoicing.repositories.invoice as invoice_repo
import invoicing.repositories.invoice_line as invoice_line_repo
import invoicing.repositories.sequence as sequence_repo
from invoicing.core.context import RequestContext
from invoicing.domain.acquisitions_units import ProtectedOperation
from invoicing.domain.identifiers import generate_id, validate_uuid
from invoicing.domain.protection import is_post_approval, validate_invoice_line_protection
from invoicing.domain.totals import calculate_invoice_line_totals, totals_changed, with_totals
from invoicing.errors import DomainValidationError, InvoiceLineCreationProhibitedError
from invoicing.events.bus import EventBus
from invoicing.events.notifier import update_invoice_totals, update_invoice_totals_by_id
from invoicing.schemas.invoice import Invoice
from invoicing.schemas.invoice_line import InvoiceLine, InvoiceLineCollection
from invoicing.services.acquisitions_units import verify_user_has_access

logger = logging.getLogger(__name__)


async def get_invoice_lines(
    ctx: RequestContext,
    limit: int = 10,
    offset: int = 0,
    query: str | None = None,
) -> InvoiceLineCollection:
    """Search invoice lines. Totals are returned as stored."""
    lines = await invoice_line_repo.get_invoice_lines(ctx, query=query, offset=offset, limit=limit)
    logger.info("Successfully retrieved %s invoice lines", len(lines.invoice_lines))
    return lines


async def get_invoice_line(ctx: RequestContext, bus: EventBus, line_id: str) -> InvoiceLine:
    """
    Get an invoice line with freshly computed totals.

    If the stored totals drifted from the computed ones, the corrected line is
    written back and the invoice notified in the background; the caller gets
    the computed values without waiting for that write.

    Raises:
        DomainValidationError: If line_id is not a UUID.
        NotFoundError: If the line or its invoice does not exist.
        AcqUnitsNotFoundError, UserHasNoPermissionsError: If the invoice units deny access.
    """
    validate_uuid(line_id)
    stored = await invoice_line_repo.get_invoice_line_by_id(ctx, line_id)
    invoice = await invoice_repo.get_invoice_by_id(ctx, stored.invoice_id)
    await verify_user_has_access(ctx, invoice.acq_unit_ids, ProtectedOperation.READ)

    totals = calculate_invoice_line_totals(stored, invoice)
    if not totals_changed(stored, totals):
        return stored

    line = with_totals(stored, totals)
    bus.spawn(_persist_out_of_sync_line(ctx, bus, line, invoice))
    return line


async def _persist_out_of_sync_line(
    ctx: RequestContext, bus: EventBus, line: InvoiceLine, invoice: Invoice
) -> None:
    logger.info("Invoice line with id=%s is out of date in storage and going to be updated", line.id)
    await invoice_line_repo.update_invoice_line(ctx, line)
    update_invoice_totals(bus, ctx, invoice)


async def create_invoice_line(ctx: RequestContext, bus: EventBus, line: InvoiceLine) -> InvoiceLine:
    """
    Create an invoice line with business logic validation.

    - Validates the parent invoice exists, the user may add lines to it and it is not approved yet
    - Generates the line id and its number ({folioInvoiceNo}-{sequence})
    - Computes totals, persists the line and notifies the invoice

    Raises:
        DomainValidationError: If invoiceId is not a UUID or the invoice has no folioInvoiceNo.
        NotFoundError: If the parent invoice does not exist.
        AcqUnitsNotFoundError, UserHasNoPermissionsError: If the invoice units deny access.
        InvoiceLineCreationProhibitedError: If the invoice is past approval.
    """
    validate_uuid(line.invoice_id, "invoiceId")
    invoice = await invoice_repo.get_invoice_by_id(ctx, line.invoice_id)
    await verify_user_has_access(ctx, invoice.acq_unit_ids, ProtectedOperation.CREATE)
    if is_post_approval(invoice):
        raise InvoiceLineCreationProhibitedError()
    if not invoice.folio_invoice_no:
        raise DomainValidationError(f"Invoice {invoice.id} has no folioInvoiceNo to number its lines with")

    sequence = await sequence_repo.get_next_invoice_line_number(ctx, invoice.id)
    line_number = build_invoice_line_number(invoice.folio_invoice_no, sequence.sequence_number)

    new_line = with_totals(
        line.model_copy(
            update={
                "id": generate_id(),
                "invoice_id": invoice.id,
                "invoice_line_number": line_number,
            }
        ),
        calculate_invoice_line_totals(line, invoice),
    )

    try:
        created = await invoice_line_repo.create_invoice_line(ctx, new_line)
    except Exception:
        # The sequence number is gone for good; report it and let the error propagate.
        logger.warning(
            "Invoice line number %s of invoice %s was consumed but the line was not created",
            line_number,
            invoice.id,
        )
        raise

    update_invoice_totals(bus, ctx, invoice)
    return created


def build_invoice_line_number(folio_invoice_no: str, sequence: str) -> str:
    return f"{folio_invoice_no}-{sequence}"


async def update_invoice_line(ctx: RequestContext, bus: EventBus, line: InvoiceLine) -> None:
    """
    Update an invoice line with business logic validation.

    - Rejects changes to protected fields once the invoice is approved
    - Rejects moving the line to another invoice
    - Keeps the stored line number
    - Recomputes totals and notifies the invoice only if they changed

    Nothing is written when a validation fails.

    Raises:
        DomainValidationError: If the id is malformed or invoiceId changes.
        NotFoundError: If the line or its invoice does not exist.
        AcqUnitsNotFoundError, UserHasNoPermissionsError: If the invoice units deny access.
        ProtectedFieldViolationError: If protected fields change after approval.
    """
    validate_uuid(line.id)
    stored = await invoice_line_repo.get_invoice_line_by_id(ctx, line.id)
    invoice = await invoice_repo.get_invoice_by_id(ctx, stored.invoice_id)
    await verify_user_has_access(ctx, invoice.acq_unit_ids, ProtectedOperation.UPDATE)

    validate_invoice_line_protection(invoice, line, stored)
    if line.invoice_id != stored.invoice_id:
        raise DomainValidationError("invoiceId of an existing invoice line can't be changed")

    totals = calculate_invoice_line_totals(line, invoice)
    is_total_out_of_sync = totals_changed(stored, totals)
    updated = with_totals(
        line.model_copy(update={"invoice_line_number": stored.invoice_line_number}),
        totals,
    )

    await invoice_line_repo.update_invoice_line(ctx, updated)

    if is_total_out_of_sync:
        update_invoice_totals(bus, ctx, invoice)


async def delete_invoice_line(ctx: RequestContext, bus: EventBus, line_id: str) -> None:
    """
    Delete an invoice line and notify its invoice.

    Raises:
        DomainValidationError: If line_id is not a UUID.
        NotFoundError: If the line does not exist (no delete is attempted).
        AcqUnitsNotFoundError, UserHasNoPermissionsError: If the invoice units deny access.
    """
    validate_uuid(line_id)
    line = await invoice_line_repo.get_invoice_line_by_id(ctx, line_id)
    invoice = await invoice_repo.get_invoice_by_id(ctx, line.invoice_id)
    await verify_user_has_access(ctx, invoice.acq_unit_ids, ProtectedOperation.DELETE)
    await invoice_line_repo.delete_invoice_line(ctx, line_id)
    update_invoice_totals_by_id(bus, ctx, line.invoice_id)
