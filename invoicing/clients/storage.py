import logging
from typing import TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from invoicing.core.config import settings
from invoicing.core.context import RequestContext
from invoicing.errors import NotFoundError, StorageError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

DEFAULT_HEADERS = {"Accept": "application/json, text/plain"}


class RestClient:
    """
    Async CRUD client for one resource collection of the storage service.

    Every call opens its own httpx.AsyncClient inside ``async with`` so the
    connection is released exactly once, on success and on failure alike.

    Non-2xx answers raise StorageError carrying the upstream status and body,
    except 404 which raises NotFoundError. Transport failures (connection
    errors, timeouts) and 2xx bodies that don't map to the expected model
    raise StorageError with status 500.
    """

    def __init__(self, endpoint: str):
        self.endpoint = endpoint

    def _endpoint_by_id(self, entity_id: str) -> str:
        return f"{self.endpoint}/{entity_id}"

    async def get(
        self,
        ctx: RequestContext,
        response_type: type[T],
        query: str | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> T:
        params: dict[str, str | int] = {"limit": limit, "offset": offset}
        if query:
            params["query"] = query
        response = await self._request(ctx, "GET", self.endpoint, params=params)
        return self._parse(response, response_type)

    async def get_by_id(self, ctx: RequestContext, entity_id: str, response_type: type[T]) -> T:
        response = await self._request(ctx, "GET", self._endpoint_by_id(entity_id))
        return self._parse(response, response_type)

    async def get_with_params(
        self, ctx: RequestContext, params: dict[str, str], response_type: type[T]
    ) -> T:
        """GET the collection endpoint with arbitrary query parameters."""
        response = await self._request(ctx, "GET", self.endpoint, params=params)
        return self._parse(response, response_type)

    async def save(self, ctx: RequestContext, entity: T, response_type: type[T]) -> T:
        body = entity.model_dump(mode="json", by_alias=True, exclude_none=True)
        logger.debug("Sending 'POST %s' with body: %s", self.endpoint, body)
        response = await self._request(ctx, "POST", self.endpoint, json=body)
        return self._parse(response, response_type)

    async def update(self, ctx: RequestContext, entity_id: str, entity: BaseModel) -> None:
        body = entity.model_dump(mode="json", by_alias=True, exclude_none=True)
        endpoint = self._endpoint_by_id(entity_id)
        logger.debug("Sending 'PUT %s' with body: %s", endpoint, body)
        await self._request(ctx, "PUT", endpoint, json=body)

    async def delete(self, ctx: RequestContext, entity_id: str) -> None:
        await self._request(ctx, "DELETE", self._endpoint_by_id(entity_id))

    def _parse(self, response: httpx.Response, response_type: type[T]) -> T:
        # JSONDecodeError is a ValueError
        try:
            return response_type.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            logger.error("Unexpected response from %s: %s", response.request.url, e)
            raise StorageError(500, f"Storage returned an unprocessable {response_type.__name__}: {e}") from e

    def _client(self, ctx: RequestContext) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=ctx.storage_url or settings.storage_url,
            headers={**DEFAULT_HEADERS, **ctx.okapi_headers},
            timeout=settings.storage_timeout,
        )

    async def _request(
        self,
        ctx: RequestContext,
        method: str,
        endpoint: str,
        params: dict | None = None,
        json: dict | None = None,
    ) -> httpx.Response:
        logger.debug("Sending %s %s", method, endpoint)
        try:
            async with self._client(ctx) as client:
                response = await client.request(method, endpoint, params=params, json=json)
        except httpx.RequestError as e:
            logger.error("Exception calling %s %s: %s", method, endpoint, e)
            raise StorageError(500, f"Storage request failed: {e}") from e

        if response.status_code == 404:
            raise NotFoundError(response.text or f"{endpoint} not found")
        if not response.is_success:
            logger.error(
                "'%s %s' request failed with status %s: %s",
                method,
                endpoint,
                response.status_code,
                response.text,
            )
            raise StorageError(response.status_code, response.text)
        return response
