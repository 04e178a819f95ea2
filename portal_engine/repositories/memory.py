"""In-process store used for local development and tests."""

from copy import deepcopy
from typing import Dict, Iterable, List, Optional, Tuple

from ..core.errors import RequestNotFound
from .base import Row


class InMemoryRequestStore:
    """
    Dict-backed implementation of RequestStore.

    Writes are last-write-wins; every update is appended to `writes` so
    callers can inspect what was sent.
    """

    def __init__(
        self,
        requests: Optional[Dict[str, List[Row]]] = None,
        reference: Optional[Dict[str, List[Row]]] = None,
        user_roles: Optional[List[Tuple[str, str]]] = None,
        profiles: Optional[List[Row]] = None,
    ):
        self.collections: Dict[str, Dict[str, Row]] = {}
        for collection, rows in (requests or {}).items():
            for row in rows:
                self.add_request(collection, row)
        self.reference: Dict[str, List[Row]] = {
            table: [dict(r) for r in rows] for table, rows in (reference or {}).items()
        }
        self.user_roles: List[Tuple[str, str]] = list(user_roles or [])
        self.profiles: Dict[str, Row] = {p["id"]: dict(p) for p in (profiles or [])}
        self.status_history: Dict[str, List[Row]] = {}
        self.writes: List[Tuple[str, str, Row]] = []

    def add_request(self, collection: str, row: Row) -> None:
        self.collections.setdefault(collection, {})[row["id"]] = dict(row)

    async def get(self, collection: str, request_id: str) -> Row:
        row = self.collections.get(collection, {}).get(request_id)
        if row is None:
            raise RequestNotFound(collection, request_id)
        return deepcopy(row)

    async def update(self, collection: str, request_id: str, values: Row) -> None:
        row = self.collections.get(collection, {}).get(request_id)
        if row is None:
            raise RequestNotFound(collection, request_id)
        self.writes.append((collection, request_id, dict(values)))
        row.update(values)

    async def list_reference(self, table: str) -> List[Row]:
        rows = [r for r in self.reference.get(table, []) if r.get("is_active", True)]
        return sorted((dict(r) for r in rows), key=lambda r: r["name"])

    async def list_user_ids_with_roles(self, roles: Iterable[str]) -> List[str]:
        wanted = {str(r) for r in roles}
        return [user_id for user_id, role in self.user_roles if role in wanted]

    async def get_profiles(self, user_ids: Iterable[str]) -> List[Row]:
        return [dict(self.profiles[i]) for i in user_ids if i in self.profiles]

    async def count_active_assigned(
        self,
        collection: str,
        user_id: str,
        inactive: Iterable[str],
    ) -> int:
        excluded = set(inactive)
        return sum(
            1
            for row in self.collections.get(collection, {}).values()
            if row.get("assignee_id") == user_id and row.get("status") not in excluded
        )

    async def add_status_history(self, table: str, entry: Row) -> None:
        self.status_history.setdefault(table, []).append(dict(entry))
