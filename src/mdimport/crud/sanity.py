"""Sanity HTTP API store (assets, GROQ queries, mutations) over httpx"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

import httpx

from mdimport.core.errors import ConfigurationError, FatalWriteError, TransientNetworkError
from mdimport.crud.store import ContentStore


logger = logging.getLogger(__name__)

_FIELD_RE = re.compile(r'^[A-Za-z_][A-Za-z0-9_]*$')

# Connection reset/refused, DNS failure, timeouts, socket closed mid-response
TRANSIENT_ERRORS = (httpx.TimeoutException, httpx.NetworkError, httpx.RemoteProtocolError)


class SanityStore(ContentStore):
    """
    Async client for one Sanity project dataset.

    Uses httpx with bearer-token auth. Transport failures and 5xx responses
    raise TransientNetworkError so callers can retry; any other error status
    raises FatalWriteError.
    """

    def __init__(
        self,
        project_id: str,
        dataset: str,
        token: str,
        api_version: str = "2025-12-14",
        timeout: Optional[float] = 30.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not project_id or not dataset or not token:
            raise ConfigurationError("Sanity store needs project id, dataset and token")
        self.project_id = project_id
        self.dataset = dataset
        self.token = token
        self.api_version = api_version.lstrip("v")
        self.timeout = timeout
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    @property
    def base_url(self) -> str:
        return f"https://{self.project_id}.api.sanity.io/v{self.api_version}"

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client (lazy init)."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                headers={"Authorization": f"Bearer {self.token}"},
                transport=self._transport,
            )
        return self._client

    async def close(self) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def _request(self, method: str, url: str, **kwargs) -> dict[str, Any]:
        client = await self._get_client()
        logger.debug(f"{method} {url}")
        try:
            response = await client.request(method, url, **kwargs)
        except TRANSIENT_ERRORS as e:
            raise TransientNetworkError(f"{method} {url} failed: {e!r}") from e
        except httpx.HTTPError as e:
            raise FatalWriteError(f"{method} {url} failed: {e!r}") from e

        if response.status_code >= 500:
            raise TransientNetworkError(
                f"{method} {url} -> {response.status_code}", status_code=response.status_code
            )
        if response.is_error:
            raise FatalWriteError(
                f"{method} {url} -> {response.status_code}: {response.text[:200]}",
                status_code=response.status_code,
            )
        try:
            return response.json()
        except ValueError as e:
            raise FatalWriteError(f"{method} {url}: response is not JSON") from e

    async def _query(self, groq: str, params: dict[str, Any]) -> Any:
        query_params = {"query": groq}
        query_params.update({f"${k}": json.dumps(v) for k, v in params.items()})
        data = await self._request("GET", f"/data/query/{self.dataset}", params=query_params)
        return data.get("result")

    async def _mutate(self, mutation: dict[str, Any]) -> dict[str, Any]:
        return await self._request(
            "POST",
            f"/data/mutate/{self.dataset}",
            params={"returnIds": "true"},
            json={"mutations": [mutation]},
        )

    async def upload_image(self, data: bytes, filename: str, content_type: str) -> str:
        result = await self._request(
            "POST",
            f"/assets/images/{self.dataset}",
            params={"filename": filename},
            content=data,
            headers={"Content-Type": content_type},
        )
        try:
            return result["document"]["_id"]
        except (KeyError, TypeError) as e:
            raise FatalWriteError(f"Asset upload for {filename} returned no document id") from e

    async def get_document(self, doc_id: str) -> dict[str, Any] | None:
        return await self._query("*[_id == $id][0]{_id}", {"id": doc_id})

    async def find_document(self, doc_type: str, field: str, value: Any) -> dict[str, Any] | None:
        if not _FIELD_RE.match(field):
            raise ValueError(f"Invalid field name: {field!r}")
        return await self._query(
            f"*[_type == $type && {field} == $value][0]{{_id}}",
            {"type": doc_type, "value": value},
        )

    async def create_if_not_exists(self, doc: dict[str, Any]) -> dict[str, Any]:
        await self._mutate({"createIfNotExists": doc})
        return doc

    async def create_or_replace(self, doc: dict[str, Any]) -> dict[str, Any]:
        await self._mutate({"createOrReplace": doc})
        return doc
