from invoicing.clients.storage import RestClient
from invoicing.core.context import RequestContext
from invoicing.schemas.invoice import Invoice, InvoiceCollection

INVOICES_ENDPOINT = "/invoice-storage/invoices"

_client = RestClient(INVOICES_ENDPOINT)


async def get_invoices(
    ctx: RequestContext,
    query: str | None = None,
    offset: int = 0,
    limit: int = 10,
) -> InvoiceCollection:
    """Search invoices in storage."""
    return await _client.get(ctx, InvoiceCollection, query=query, offset=offset, limit=limit)


async def get_invoice_by_id(ctx: RequestContext, invoice_id: str) -> Invoice:
    """Get an invoice by ID. Raises NotFoundError if storage has no such record."""
    return await _client.get_by_id(ctx, invoice_id, Invoice)


async def update_invoice(ctx: RequestContext, invoice: Invoice) -> None:
    """Replace the stored invoice with the given one. Pure data access - no business logic."""
    await _client.update(ctx, invoice.id, invoice)
