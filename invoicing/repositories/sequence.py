from invoicing.clients.storage import RestClient
from invoicing.core.context import RequestContext
from invoicing.schemas.invoice_line import SequenceNumber

INVOICE_LINE_NUMBER_ENDPOINT = "/invoice-storage/invoice-line-number"

_client = RestClient(INVOICE_LINE_NUMBER_ENDPOINT)


async def get_next_invoice_line_number(ctx: RequestContext, invoice_id: str) -> SequenceNumber:
    """
    Take the next line sequence token for an invoice.

    Every call consumes a token on the storage side, whether or not a line is
    eventually created with it.
    """
    return await _client.get_with_params(ctx, {"invoiceId": invoice_id}, SequenceNumber)
