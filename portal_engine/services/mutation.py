"""
Single-field request mutation.

Every changer follows the same cycle:
- target equals current value: nothing is sent
- otherwise one `update({field, updated_at}) where id` call
- store failure: one error notification, caller's request untouched, no retry
"""

from enum import Enum
from typing import Any, Optional

from ..core.errors import StoreError
from ..core.logging import get_logger
from ..core.time import utcnow
from ..models.request import MutationOutcome, MutationResult, Request
from ..repositories.base import RequestStore
from .notifications import LoggingNotifier, Notifier

logger = get_logger(__name__)


class FieldChanger:
    """Base class for the status, priority, classification and assignment changers."""

    def __init__(self, store: RequestStore, notifier: Optional[Notifier] = None):
        self.store = store
        self.notifier = notifier or LoggingNotifier()

    async def _apply(
        self,
        request: Request,
        field: str,
        value: Any,
        *,
        success_title: str,
        success_description: str,
        failure_description: str,
    ) -> MutationResult:
        if getattr(request, field) == value:
            return MutationResult(outcome=MutationOutcome.UNCHANGED, request=request)

        now = utcnow()
        wire_value = value.value if isinstance(value, Enum) else value
        try:
            await self.store.update(
                request.collection,
                request.id,
                {field: wire_value, "updated_at": now},
            )
        except StoreError:
            logger.exception(
                "Failed to update %s",
                field,
                extra={"request_id": request.id, "collection": request.collection, "field": field},
            )
            note = self.notifier.error("Error", failure_description)
            return MutationResult(
                outcome=MutationOutcome.FAILED,
                request=request,
                notifications=[note],
            )

        updated = request.model_copy(update={field: value, "updated_at": now})
        note = self.notifier.success(success_title, success_description)
        return MutationResult(
            outcome=MutationOutcome.UPDATED,
            request=updated,
            notifications=[note],
        )
