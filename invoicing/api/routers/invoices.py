from fastapi import APIRouter, Depends, Query

from invoicing.api.deps import get_request_context
from invoicing.core.context import RequestContext
from invoicing.schemas.invoice import Invoice, InvoiceCollection
from invoicing.services.invoice import get_invoice, get_invoices

router = APIRouter(prefix="/invoice/invoices", tags=["invoices"])


@router.get("", response_model=InvoiceCollection, response_model_exclude_none=True)
async def get_all_invoices(
    limit: int = Query(10, ge=0, description="Maximum number of records to return"),
    offset: int = Query(0, ge=0, description="Number of records to skip"),
    query: str | None = Query(None, description="Storage search query"),
    ctx: RequestContext = Depends(get_request_context),
):
    return await get_invoices(ctx, limit=limit, offset=offset, query=query)


@router.get("/{invoice_id}", response_model=Invoice, response_model_exclude_none=True)
async def get_invoice_by_id(
    invoice_id: str,
    ctx: RequestContext = Depends(get_request_context),
):
    return await get_invoice(ctx, invoice_id)
