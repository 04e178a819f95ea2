"""
Status Changer

Applies status transitions permitted by the request guard and records
a status-history entry afterwards.

The history write is a second, independent call made only for kinds with a
history table. If it fails the status change stands and the failure is
only logged.
"""

from typing import List, Optional

from ..core.errors import StoreError
from ..core.logging import get_logger
from ..models.access import ActorContext
from ..models.request import (
    MutationResult,
    Request,
    RequestStatus,
    StatusHistoryEntry,
)
from ..repositories.base import RequestStore
from .guards import RequestGuard
from .mutation import FieldChanger
from .notifications import Notifier

logger = get_logger(__name__)


def status_label(status: RequestStatus) -> str:
    return status.value.replace("_", " ")


class StatusChanger(FieldChanger):
    """
    Status transitions.

    Manager-tier: open / in_progress / completed from anywhere.
    Creator: completed only, until completed.
    Everyone else: no control.
    """

    def __init__(
        self,
        store: RequestStore,
        notifier: Optional[Notifier] = None,
        guard: Optional[RequestGuard] = None,
    ):
        super().__init__(store, notifier)
        self.guard = guard or RequestGuard()

    def options(self, request: Request, actor: ActorContext) -> List[RequestStatus]:
        return self.guard.status_options(request, actor)

    def can_render(self, request: Request, actor: ActorContext) -> bool:
        return bool(self.options(request, actor))

    async def change(
        self,
        request: Request,
        actor: ActorContext,
        target: RequestStatus,
        notes: Optional[str] = None,
    ) -> MutationResult:
        self.guard.require_status_target(request, actor, target)

        result = await self._apply(
            request,
            "status",
            target,
            success_title="Status Updated",
            success_description=f"Request status changed to {status_label(target)}",
            failure_description="Failed to update request status",
        )
        if result.changed:
            await self._record_history(result.request, actor, notes)
        return result

    async def _record_history(
        self,
        request: Request,
        actor: ActorContext,
        notes: Optional[str],
    ) -> None:
        table = request.kind.history_table
        if table is None:
            return

        entry = StatusHistoryEntry(
            request_id=request.id,
            status=request.status,
            changed_by=actor.effective_user_id,
            notes=notes or f"Status changed to {request.status.value}",
        )
        try:
            await self.store.add_status_history(table, entry.model_dump(mode="json"))
        except StoreError:
            logger.warning(
                "Status changed but history entry was not recorded",
                exc_info=True,
                extra={"request_id": request.id, "actor_id": actor.effective_user_id},
            )
