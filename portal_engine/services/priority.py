"""
Priority Changer

Same cycle as the status changer with a fixed option set:
low / medium / high / urgent.

Gate: manager-tier OR the request creator. A completed request can still
be re-prioritized.
"""

from typing import List, Optional

from ..models.access import ActorContext
from ..models.request import MutationResult, Priority, Request
from ..repositories.base import RequestStore
from .guards import RequestGuard
from .mutation import FieldChanger
from .notifications import Notifier


class PriorityChanger(FieldChanger):

    def __init__(
        self,
        store: RequestStore,
        notifier: Optional[Notifier] = None,
        guard: Optional[RequestGuard] = None,
    ):
        super().__init__(store, notifier)
        self.guard = guard or RequestGuard()

    def options(self, request: Request, actor: ActorContext) -> List[Priority]:
        return self.guard.priority_options(request, actor)

    def can_render(self, request: Request, actor: ActorContext) -> bool:
        return bool(self.options(request, actor))

    async def change(
        self,
        request: Request,
        actor: ActorContext,
        target: Priority,
    ) -> MutationResult:
        self.guard.require_priority_access(request, actor)
        return await self._apply(
            request,
            "priority",
            target,
            success_title="Priority Updated",
            success_description=f"Request priority changed to {target.value}",
            failure_description="Failed to update request priority",
        )
