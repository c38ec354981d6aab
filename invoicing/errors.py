"""Custom domain exceptions for the application."""

# Stable, machine-readable error codes for API consumers.
GENERIC_ERROR_CODE = "genericError"
NOT_FOUND = "notFound"
PROHIBITED_FIELD_CHANGING = "protectedFieldChanging"
PROHIBITED_INVOICE_LINE_CREATION = "prohibitedInvoiceLineCreation"
ACQ_UNITS_NOT_FOUND = "acqUnitsNotFound"
USER_HAS_NO_PERMISSIONS = "userHasNoPermission"


class DomainError(Exception):
    """Base exception for domain/business logic errors."""

    pass


class NotFoundError(DomainError):
    """Raised when a requested resource does not exist."""

    pass


class DomainValidationError(DomainError):
    """Raised when input fails validation (e.g. malformed id, mismatched path and body)."""

    pass


class StorageError(DomainError):
    """Raised when the storage service answers with a non-2xx status or cannot be reached."""

    def __init__(self, status_code: int, body: str):
        super().__init__(body)
        self.status_code = status_code
        self.body = body


class InvoiceLineCreationProhibitedError(DomainError):
    """Raised when a line is added to an invoice that is already approved."""

    def __init__(self, message: str = "It is not allowed to add invoice line to the invoice that has been approved"):
        super().__init__(message)


class ProtectedFieldViolationError(DomainError):
    """Raised when an update touches fields that are locked after approval."""

    def __init__(self, fields):
        self.fields = sorted(fields)
        super().__init__(f"Field can't be modified: {', '.join(self.fields)}")


class AcqUnitsNotFoundError(DomainError):
    """Raised when a record refers to acquisitions units that don't exist."""

    def __init__(self, unit_ids):
        self.unit_ids = sorted(unit_ids)
        super().__init__(f"Acquisitions units assigned to the record not found: {', '.join(self.unit_ids)}")


class UserHasNoPermissionsError(DomainError):
    """Raised when the units of a record protect the operation and the user is not a member of any of them."""

    def __init__(self, message: str = "User does not have permissions - operation is restricted"):
        super().__init__(message)
