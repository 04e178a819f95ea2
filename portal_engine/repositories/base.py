"""
Store protocol.

Every method maps to one network call against the hosted database.
Rows are plain dicts keyed by the Request model's field names; adapters
translate to their own column names.
"""

from typing import Any, Dict, Iterable, List, Protocol


Row = Dict[str, Any]


class RequestStore(Protocol):

    async def get(self, collection: str, request_id: str) -> Row:
        """Fetch one request row. Raises RequestNotFound."""
        ...

    async def update(self, collection: str, request_id: str, values: Row) -> None:
        """`update(values) where id = request_id`. Raises StoreError."""
        ...

    async def list_reference(self, table: str) -> List[Row]:
        """Active rows of a reference table ordered by name."""
        ...

    async def list_user_ids_with_roles(self, roles: Iterable[str]) -> List[str]:
        ...

    async def get_profiles(self, user_ids: Iterable[str]) -> List[Row]:
        ...

    async def count_active_assigned(
        self,
        collection: str,
        user_id: str,
        inactive: Iterable[str],
    ) -> int:
        """Count rows assigned to user_id whose status is not in `inactive`."""
        ...

    async def add_status_history(self, table: str, entry: Row) -> None:
        """Insert one audit row into `table`."""
        ...
