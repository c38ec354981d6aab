from enum import Enum

from pydantic import Field

from invoicing.schemas.base import StorageModel


class AdjustmentType(str, Enum):
    AMOUNT = "Amount"
    PERCENTAGE = "Percentage"


class AdjustmentRelation(str, Enum):
    IN_ADDITION_TO = "In addition to"
    INCLUDED_IN = "Included in"
    SEPARATE_FROM = "Separate from"


class Adjustment(StorageModel):
    description: str | None = None
    type: AdjustmentType = AdjustmentType.AMOUNT
    value: float = Field(default=0.0, description="Amount, or percent of the subtotal")
    relation_to_total: AdjustmentRelation = AdjustmentRelation.IN_ADDITION_TO
    prorate: str | None = None
