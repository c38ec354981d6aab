import uuid

from invoicing.errors import DomainValidationError


def validate_uuid(value: str, field: str = "id") -> str:
    """Return the value unchanged if it is UUID-shaped, raise DomainValidationError otherwise."""
    try:
        uuid.UUID(value)
    except (TypeError, ValueError):
        raise DomainValidationError(f"Invalid {field}: '{value}' is not a valid UUID")
    return value


def generate_id() -> str:
    return str(uuid.uuid4())
