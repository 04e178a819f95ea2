"""HTTP store over the hosted platform's PostgREST endpoint."""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional

import httpx

from ..core.errors import RequestNotFound, StoreError
from ..core.logging import get_logger
from .base import Row

logger = get_logger(__name__)

# Request model field -> database column
FIELD_COLUMNS = {
    "creator_id": "user_id",
    "assignee_id": "assigned_to",
}
COLUMN_FIELDS = {column: field for field, column in FIELD_COLUMNS.items()}


def _to_wire(value: Any) -> Any:
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, Enum):
        return value.value
    return value


def to_columns(values: Row) -> Row:
    return {FIELD_COLUMNS.get(k, k): _to_wire(v) for k, v in values.items()}


def to_fields(row: Row) -> Row:
    return {COLUMN_FIELDS.get(k, k): v for k, v in row.items()}


def _in_list(values: Iterable[str]) -> str:
    return "(" + ",".join(str(_to_wire(v)) for v in values) + ")"


def _parse_count(content_range: Optional[str]) -> int:
    # "0-4/5" or "*/0"
    if not content_range or "/" not in content_range:
        return 0
    total = content_range.rsplit("/", 1)[1]
    return int(total) if total.isdigit() else 0


class RestRequestStore:
    """
    RequestStore backed by `{platform}/rest/v1`.

    No timeout is configured beyond httpx's default and no request is
    retried.
    """

    def __init__(
        self,
        *,
        base_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token or api_key
        self.transport = transport

    def _headers(self) -> Dict[str, str]:
        return {
            "apikey": self.api_key,
            "Authorization": f"Bearer {self.access_token}",
            "Content-Type": "application/json",
        }

    async def _send(
        self,
        method: str,
        path: str,
        *,
        params: Optional[Dict[str, str]] = None,
        json: Any = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.Response:
        logger.debug("store.request method=%s path=%s params=%s", method, path, params)
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                headers=self._headers(),
                transport=self.transport,
            ) as client:
                response = await client.request(
                    method, path, params=params, json=json, headers=headers
                )
                response.raise_for_status()
                return response
        except httpx.HTTPError as exc:
            raise StoreError(f"{method} {path} failed: {exc}") from exc

    async def get(self, collection: str, request_id: str) -> Row:
        response = await self._send(
            "GET", f"/{collection}", params={"select": "*", "id": f"eq.{request_id}"}
        )
        rows = response.json()
        if not rows:
            raise RequestNotFound(collection, request_id)
        return to_fields(rows[0])

    async def update(self, collection: str, request_id: str, values: Row) -> None:
        await self._send(
            "PATCH",
            f"/{collection}",
            params={"id": f"eq.{request_id}"},
            json=to_columns(values),
            headers={"Prefer": "return=minimal"},
        )

    async def list_reference(self, table: str) -> List[Row]:
        response = await self._send(
            "GET",
            f"/{table}",
            params={"select": "id,name", "is_active": "eq.true", "order": "name"},
        )
        return response.json()

    async def list_user_ids_with_roles(self, roles: Iterable[str]) -> List[str]:
        response = await self._send(
            "GET",
            "/user_roles",
            params={"select": "user_id,role", "role": f"in.{_in_list(roles)}"},
        )
        return [row["user_id"] for row in response.json()]

    async def get_profiles(self, user_ids: Iterable[str]) -> List[Row]:
        ids = list(user_ids)
        if not ids:
            return []
        response = await self._send(
            "GET",
            "/profiles",
            params={"select": "id,full_name,email", "id": f"in.{_in_list(ids)}"},
        )
        return response.json()

    async def count_active_assigned(
        self,
        collection: str,
        user_id: str,
        inactive: Iterable[str],
    ) -> int:
        response = await self._send(
            "HEAD",
            f"/{collection}",
            params={
                "select": "*",
                FIELD_COLUMNS["assignee_id"]: f"eq.{user_id}",
                "status": f"not.in.{_in_list(inactive)}",
            },
            headers={"Prefer": "count=exact"},
        )
        return _parse_count(response.headers.get("content-range"))

    async def add_status_history(self, table: str, entry: Row) -> None:
        await self._send(
            "POST",
            f"/{table}",
            json=to_columns(entry),
            headers={"Prefer": "return=minimal"},
        )
