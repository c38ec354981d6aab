"""
Access rules that acquisitions units put on the records they own.

An invoice lists its owning units in ``acqUnitIds``; its lines inherit them.
Each unit says which operations it protects. When at least one owning unit
protects an operation, only members of one of the owning units may run it.
"""

from enum import Enum

from invoicing.domain.identifiers import validate_uuid
from invoicing.errors import AcqUnitsNotFoundError, UserHasNoPermissionsError
from invoicing.schemas.acquisitions_unit import AcquisitionsUnit


class ProtectedOperation(str, Enum):
    READ = "protect_read"
    CREATE = "protect_create"
    UPDATE = "protect_update"
    DELETE = "protect_delete"


def validate_unit_ids(unit_ids: list[str]) -> list[str]:
    """Reject malformed unit ids and return them without duplicates, in order."""
    for unit_id in unit_ids:
        validate_uuid(unit_id, "acqUnitIds")
    return list(dict.fromkeys(unit_ids))


def verify_all_units_exist(unit_ids: list[str], units: list[AcquisitionsUnit]) -> None:
    missing = set(unit_ids) - {unit.id for unit in units}
    if missing:
        raise AcqUnitsNotFoundError(missing)


def is_operation_restricted(units: list[AcquisitionsUnit], operation: ProtectedOperation) -> bool:
    return any(getattr(unit, operation.value) for unit in units)


def verify_user_is_member(user_id: str | None, membership_count: int) -> None:
    if not user_id or membership_count == 0:
        raise UserHasNoPermissionsError()
