from invoicing.clients.storage import RestClient
from invoicing.core.context import RequestContext
from invoicing.schemas.invoice_line import InvoiceLine, InvoiceLineCollection

INVOICE_LINES_ENDPOINT = "/invoice-storage/invoice-lines"

_client = RestClient(INVOICE_LINES_ENDPOINT)


async def get_invoice_lines(
    ctx: RequestContext,
    query: str | None = None,
    offset: int = 0,
    limit: int = 10,
) -> InvoiceLineCollection:
    """Search invoice lines in storage."""
    return await _client.get(
        ctx, InvoiceLineCollection, query=query, offset=offset, limit=limit
    )


async def get_invoice_lines_by_invoice_id(
    ctx: RequestContext, invoice_id: str, limit: int
) -> InvoiceLineCollection:
    """Get every line of one invoice."""
    return await get_invoice_lines(ctx, query=f"invoiceId=={invoice_id}", limit=limit)


async def get_invoice_line_by_id(ctx: RequestContext, line_id: str) -> InvoiceLine:
    """Get an invoice line by ID. Raises NotFoundError if storage has no such record."""
    return await _client.get_by_id(ctx, line_id, InvoiceLine)


async def create_invoice_line(ctx: RequestContext, line: InvoiceLine) -> InvoiceLine:
    """Create a new invoice line in storage. Pure data access - no business logic."""
    return await _client.save(ctx, line, InvoiceLine)


async def update_invoice_line(ctx: RequestContext, line: InvoiceLine) -> None:
    """Replace the stored invoice line with the given one."""
    await _client.update(ctx, line.id, line)


async def delete_invoice_line(ctx: RequestContext, line_id: str) -> None:
    await _client.delete(ctx, line_id)
