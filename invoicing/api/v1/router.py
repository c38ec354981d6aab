from fastapi import APIRouter

from invoicing.api.routers import invoice_lines, invoices

api_router = APIRouter()

api_router.include_router(invoice_lines.router)
api_router.include_router(invoices.router)
