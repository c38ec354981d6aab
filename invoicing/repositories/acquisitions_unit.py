from invoicing.clients.storage import RestClient
from invoicing.core.context import RequestContext
from invoicing.schemas.acquisitions_unit import (
    AcquisitionsUnitCollection,
    AcquisitionsUnitMembershipCollection,
)

ACQUISITIONS_UNITS_ENDPOINT = "/acquisitions-units-storage/units"
ACQUISITIONS_MEMBERSHIPS_ENDPOINT = "/acquisitions-units-storage/memberships"

_units_client = RestClient(ACQUISITIONS_UNITS_ENDPOINT)
_memberships_client = RestClient(ACQUISITIONS_MEMBERSHIPS_ENDPOINT)


def _any_of(ids) -> str:
    return "(" + " or ".join(ids) + ")"


async def get_active_units(ctx: RequestContext, unit_ids: list[str]) -> AcquisitionsUnitCollection:
    """Get the units with the given ids that are not deleted."""
    query = f"isDeleted==false and id=={_any_of(unit_ids)}"
    return await _units_client.get(ctx, AcquisitionsUnitCollection, query=query, limit=len(unit_ids))


async def get_user_memberships(
    ctx: RequestContext, user_id: str, unit_ids: list[str]
) -> AcquisitionsUnitMembershipCollection:
    """Get the memberships of a user in any of the given units."""
    query = f"userId=={user_id} and acquisitionsUnitId=={_any_of(unit_ids)}"
    return await _memberships_client.get(
        ctx, AcquisitionsUnitMembershipCollection, query=query, limit=len(unit_ids)
    )
