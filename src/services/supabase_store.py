"""Record store client for a hosted Supabase (PostgREST) project."""

import logging
from typing import Any

import httpx

from src.config import get_settings
from src.services.errors import StoreError

logger = logging.getLogger(__name__)

Record = dict[str, Any]
Records = list[Record]


class SupabaseRecordStore:
    """Single-record operations over the PostgREST HTTP interface."""

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        settings = get_settings()
        self.base_url = (base_url or settings.supabase_url or "").rstrip("/")
        self.api_key = api_key or settings.supabase_key or ""
        self.timeout = timeout if timeout is not None else settings.store_timeout_seconds
        self._client = httpx.Client(
            base_url=f"{self.base_url}/rest/v1",
            headers={
                "apikey": self.api_key,
                "Authorization": f"Bearer {self.api_key}",
            },
            timeout=self.timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            response = self._client.request(method, path, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            message = _error_message(e.response)
            logger.error(f"Supabase {method} {path} failed: {message}")
            raise StoreError(message) from e
        except httpx.HTTPError as e:
            logger.error(f"HTTP error calling Supabase: {e}")
            raise StoreError(str(e)) from e
        return response

    def list(self, collection: str, order_by: str | None = None) -> Records:
        params = {"select": "*"}
        if order_by:
            params["order"] = f"{order_by}.asc"
        return self._request("GET", f"/{collection}", params=params).json()

    def get(self, collection: str, record_id: str) -> Record | None:
        rows = self.query(collection, {"id": record_id}, limit=1)
        return rows[0] if rows else None

    def insert(self, collection: str, fields: Record) -> Record:
        response = self._request(
            "POST",
            f"/{collection}",
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        rows = response.json()
        return rows[0] if isinstance(rows, list) else rows

    def update(self, collection: str, record_id: str, fields: Record) -> None:
        response = self._request(
            "PATCH",
            f"/{collection}",
            params={"id": f"eq.{record_id}"},
            json=fields,
            headers={"Prefer": "return=representation"},
        )
        if not response.json():
            raise StoreError(f"{collection} record {record_id} not found")

    def delete(self, collection: str, record_id: str) -> None:
        response = self._request(
            "DELETE",
            f"/{collection}",
            params={"id": f"eq.{record_id}"},
            headers={"Prefer": "return=representation"},
        )
        if not response.json():
            raise StoreError(f"{collection} record {record_id} not found")

    def query(self, collection: str, filters: Record, limit: int | None = None) -> Records:
        params = {"select": "*"}
        params.update({key: f"eq.{value}" for key, value in filters.items()})
        if limit is not None:
            params["limit"] = str(limit)
        return self._request("GET", f"/{collection}", params=params).json()


def _error_message(response: httpx.Response) -> str:
    """Pull the PostgREST error message out of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return f"HTTP {response.status_code}"
    if isinstance(body, dict) and body.get("message"):
        return str(body["message"])
    return f"HTTP {response.status_code}"
