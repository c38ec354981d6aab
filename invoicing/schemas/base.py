from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class StorageModel(BaseModel):
    """Base for records exchanged with storage.

    Records are camelCase on the wire. Fields this service does not know about
    are kept so that a fetch-modify-save cycle never drops them.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="allow",
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)
