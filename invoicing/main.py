import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI

from invoicing.api.exception_handlers import register_exception_handlers
from invoicing.api.v1.router import api_router
from invoicing.core.config import settings
from invoicing.events.bus import EventBus
from invoicing.events.handlers import register_handlers

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    bus = EventBus(maxsize=settings.event_queue_size)
    register_handlers(bus)
    await bus.start()
    app.state.event_bus = bus
    try:
        yield
    finally:
        await bus.stop()


app = FastAPI(lifespan=lifespan)

register_exception_handlers(app)
app.include_router(api_router)


@app.get("/health")
def health():
    return {"status": "ok"}
