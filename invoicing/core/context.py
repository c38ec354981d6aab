from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

OKAPI_HEADER_PREFIX = "x-okapi-"
OKAPI_URL = "x-okapi-url"
OKAPI_USER_ID = "x-okapi-user-id"


@dataclass(frozen=True, slots=True)
class RequestContext:
    """Tenant/auth headers captured from the inbound request.

    The headers are opaque to the business logic: they are forwarded on every
    storage call and attached to every published event so that listeners talk
    to the same tenant's storage.
    """

    okapi_headers: Mapping[str, str] = field(default_factory=dict)

    @classmethod
    def from_headers(cls, headers: Mapping[str, str]) -> RequestContext:
        return cls(
            okapi_headers={
                key.lower(): value
                for key, value in headers.items()
                if key.lower().startswith(OKAPI_HEADER_PREFIX)
            }
        )

    @property
    def user_id(self) -> str | None:
        return self.okapi_headers.get(OKAPI_USER_ID)

    @property
    def storage_url(self) -> str | None:
        return self.okapi_headers.get(OKAPI_URL)
