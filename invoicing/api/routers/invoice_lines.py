from fastapi import APIRouter, Depends, Query, status

from invoicing.api.deps import get_event_bus, get_request_context
from invoicing.core.context import RequestContext
from invoicing.errors import DomainValidationError
from invoicing.events.bus import EventBus
from invoicing.schemas.invoice_line import InvoiceLine, InvoiceLineCollection
from invoicing.services.invoice_line import (
    create_invoice_line,
    delete_invoice_line,
    get_invoice_line,
    get_invoice_lines,
    update_invoice_line,
)

router = APIRouter(prefix="/invoice/invoice-lines", tags=["invoice-lines"])


@router.get("", response_model=InvoiceLineCollection, response_model_exclude_none=True)
async def get_all_invoice_lines(
    limit: int = Query(10, ge=0, description="Maximum number of records to return"),
    offset: int = Query(0, ge=0, description="Number of records to skip"),
    query: str | None = Query(None, description="Storage search query"),
    ctx: RequestContext = Depends(get_request_context),
):
    """
    Search invoice lines.

    Totals are returned as stored; fetch a single line to get them recomputed.
    """
    return await get_invoice_lines(ctx, limit=limit, offset=offset, query=query)


@router.post(
    "",
    response_model=InvoiceLine,
    response_model_exclude_none=True,
    status_code=status.HTTP_201_CREATED,
)
async def create_new_invoice_line(
    line: InvoiceLine,
    ctx: RequestContext = Depends(get_request_context),
    bus: EventBus = Depends(get_event_bus),
):
    """
    Create an invoice line on an invoice that is not approved yet.

    The id, line number and totals are generated; values sent for them are ignored.
    """
    return await create_invoice_line(ctx, bus, line)


@router.get("/{line_id}", response_model=InvoiceLine, response_model_exclude_none=True)
async def get_invoice_line_by_id(
    line_id: str,
    ctx: RequestContext = Depends(get_request_context),
    bus: EventBus = Depends(get_event_bus),
):
    """Get an invoice line with recomputed totals."""
    return await get_invoice_line(ctx, bus, line_id)


@router.put("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def update_invoice_line_by_id(
    line_id: str,
    line: InvoiceLine,
    ctx: RequestContext = Depends(get_request_context),
    bus: EventBus = Depends(get_event_bus),
):
    """
    Replace an invoice line.

    Once the invoice is approved, protected fields (quantity, unit price,
    adjustments, ...) can't be changed.
    """
    if line.id is not None and line.id != line_id:
        raise DomainValidationError("Mismatch between id in path and request body")
    await update_invoice_line(ctx, bus, line.model_copy(update={"id": line_id}))


@router.delete("/{line_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_invoice_line_by_id(
    line_id: str,
    ctx: RequestContext = Depends(get_request_context),
    bus: EventBus = Depends(get_event_bus),
):
    """Delete an invoice line. Its invoice totals are recalculated afterwards."""
    await delete_invoice_line(ctx, bus, line_id)
