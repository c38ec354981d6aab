from fastapi import Request

from invoicing.core.context import RequestContext
from invoicing.events.bus import EventBus


def get_request_context(request: Request) -> RequestContext:
    """Capture the tenant headers of the inbound request."""
    return RequestContext.from_headers(request.headers)


def get_event_bus(request: Request) -> EventBus:
    return request.app.state.event_bus
