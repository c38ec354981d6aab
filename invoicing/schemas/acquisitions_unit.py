from pydantic import Field

from invoicing.schemas.base import StorageModel


class AcquisitionsUnit(StorageModel):
    id: str
    name: str | None = None
    is_deleted: bool = False
    protect_read: bool = False
    protect_create: bool = True
    protect_update: bool = True
    protect_delete: bool = True


class AcquisitionsUnitCollection(StorageModel):
    acquisitions_units: list[AcquisitionsUnit] = Field(default_factory=list)
    total_records: int = 0


class AcquisitionsUnitMembership(StorageModel):
    id: str | None = None
    user_id: str
    acquisitions_unit_id: str


class AcquisitionsUnitMembershipCollection(StorageModel):
    acquisitions_unit_memberships: list[AcquisitionsUnitMembership] = Field(default_factory=list)
    total_records: int = 0
