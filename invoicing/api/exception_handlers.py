"""Global exception handlers that map domain exceptions to HTTP responses."""

from fastapi import Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from invoicing.errors import (
    ACQ_UNITS_NOT_FOUND,
    GENERIC_ERROR_CODE,
    NOT_FOUND,
    PROHIBITED_FIELD_CHANGING,
    PROHIBITED_INVOICE_LINE_CREATION,
    USER_HAS_NO_PERMISSIONS,
    AcqUnitsNotFoundError,
    DomainValidationError,
    InvoiceLineCreationProhibitedError,
    NotFoundError,
    ProtectedFieldViolationError,
    StorageError,
    UserHasNoPermissionsError,
)
from invoicing.schemas.error import ErrorResponse


def _error_response(
    status_code: int, detail: str, code: str, protected_fields: list[str] | None = None
) -> JSONResponse:
    """Return a standardized error response with detail and machine-readable code."""
    body = ErrorResponse(detail=detail, code=code, protected_fields=protected_fields)
    return JSONResponse(
        status_code=status_code,
        content=body.model_dump(by_alias=True, exclude_none=True),
    )


def domain_validation_error_handler(
    _request: Request, exc: DomainValidationError
) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        str(exc),
        GENERIC_ERROR_CODE,
    )


def request_validation_error_handler(
    _request: Request, exc: RequestValidationError
) -> JSONResponse:
    # Malformed bodies and query parameters share the generic code.
    messages = [
        f"{'.'.join(str(part) for part in error['loc'])}: {error['msg']}"
        for error in exc.errors()
    ]
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        "; ".join(messages),
        GENERIC_ERROR_CODE,
    )


def not_found_error_handler(_request: Request, exc: NotFoundError) -> JSONResponse:
    return _error_response(
        status.HTTP_404_NOT_FOUND,
        str(exc),
        NOT_FOUND,
    )


def protected_field_violation_handler(
    _request: Request, exc: ProtectedFieldViolationError
) -> JSONResponse:
    return _error_response(
        status.HTTP_400_BAD_REQUEST,
        str(exc),
        PROHIBITED_FIELD_CHANGING,
        protected_fields=exc.fields,
    )


def invoice_line_creation_prohibited_handler(
    _request: Request, exc: InvoiceLineCreationProhibitedError
) -> JSONResponse:
    return _error_response(
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        str(exc),
        PROHIBITED_INVOICE_LINE_CREATION,
    )


def acq_units_not_found_handler(_request: Request, exc: AcqUnitsNotFoundError) -> JSONResponse:
    return _error_response(
        422,
        str(exc),
        ACQ_UNITS_NOT_FOUND,
    )


def user_has_no_permissions_handler(
    _request: Request, exc: UserHasNoPermissionsError
) -> JSONResponse:
    return _error_response(
        status.HTTP_403_FORBIDDEN,
        str(exc),
        USER_HAS_NO_PERMISSIONS,
    )


def storage_error_handler(_request: Request, exc: StorageError) -> JSONResponse:
    # Client errors reported by storage keep their status; anything else is ours to own.
    status_code = exc.status_code
    if not 400 <= status_code < 500:
        status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    return _error_response(status_code, exc.body, GENERIC_ERROR_CODE)


def register_exception_handlers(app):
    """Register domain exception handlers on the FastAPI app."""
    app.add_exception_handler(DomainValidationError, domain_validation_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
    app.add_exception_handler(NotFoundError, not_found_error_handler)
    app.add_exception_handler(ProtectedFieldViolationError, protected_field_violation_handler)
    app.add_exception_handler(
        InvoiceLineCreationProhibitedError, invoice_line_creation_prohibited_handler
    )
    app.add_exception_handler(AcqUnitsNotFoundError, acq_units_not_found_handler)
    app.add_exception_handler(UserHasNoPermissionsError, user_has_no_permissions_handler)
    app.add_exception_handler(StorageError, storage_error_handler)
