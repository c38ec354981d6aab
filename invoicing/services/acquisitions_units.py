import logging

import invoicing.repositories.acquisitions_unit as acq_unit_repo
from invoicing.core.context import RequestContext
from invoicing.domain.acquisitions_units import (
    ProtectedOperation,
    is_operation_restricted,
    validate_unit_ids,
    verify_all_units_exist,
    verify_user_is_member,
)

logger = logging.getLogger(__name__)


async def verify_user_has_access(
    ctx: RequestContext, acq_unit_ids: list[str], operation: ProtectedOperation
) -> None:
    """
    Check that the current user may run an operation on a record owned by the given units.

    - Records without units are open to everybody
    - Malformed unit ids are rejected before storage is asked
    - Every unit must exist and not be deleted
    - Membership is only looked up when some unit protects the operation

    Raises:
        DomainValidationError: If a unit id is not a UUID.
        AcqUnitsNotFoundError: If some units don't exist.
        UserHasNoPermissionsError: If the operation is protected and the user
            is not a member of any of the units.
    """
    unit_ids = validate_unit_ids(acq_unit_ids)
    if not unit_ids:
        return

    units = await acq_unit_repo.get_active_units(ctx, unit_ids)
    verify_all_units_exist(unit_ids, units.acquisitions_units)
    if not is_operation_restricted(units.acquisitions_units, operation):
        return

    membership_count = 0
    if ctx.user_id:
        memberships = await acq_unit_repo.get_user_memberships(ctx, ctx.user_id, unit_ids)
        membership_count = memberships.total_records
    if membership_count == 0:
        logger.info("User %s is not a member of units %s, %s denied", ctx.user_id, unit_ids, operation.name)
    verify_user_is_member(ctx.user_id, membership_count)
