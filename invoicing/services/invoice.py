import invoicing.repositories.invoice as invoice_repo
from invoicing.core.context import RequestContext
from invoicing.domain.identifiers import validate_uuid
from invoicing.schemas.invoice import Invoice, InvoiceCollection


async def get_invoices(
    ctx: RequestContext,
    limit: int = 10,
    offset: int = 0,
    query: str | None = None,
) -> InvoiceCollection:
    return await invoice_repo.get_invoices(ctx, query=query, offset=offset, limit=limit)


async def get_invoice(ctx: RequestContext, invoice_id: str) -> Invoice:
    """
    Get an invoice by ID.

    Raises:
        DomainValidationError: If invoice_id is not a UUID.
        NotFoundError: If the invoice does not exist.
    """
    validate_uuid(invoice_id)
    return await invoice_repo.get_invoice_by_id(ctx, invoice_id)
