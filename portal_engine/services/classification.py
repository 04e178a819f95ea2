"""
Category and request-type changers.

Manager-tier only. Each loads its active reference list, ordered by name,
before it is offered.
"""

from typing import List, Optional

from ..models.access import ActorContext
from ..models.request import Category, MutationResult, Request, RequestType
from ..repositories.base import RequestStore
from .guards import RequestGuard
from .mutation import FieldChanger
from .notifications import Notifier

CATEGORY_TABLE = "request_categories"
REQUEST_TYPE_TABLE = "request_types"


class _ManagerOnlyChanger(FieldChanger):

    def __init__(
        self,
        store: RequestStore,
        notifier: Optional[Notifier] = None,
        guard: Optional[RequestGuard] = None,
    ):
        super().__init__(store, notifier)
        self.guard = guard or RequestGuard()

    def can_render(self, actor: ActorContext) -> bool:
        return actor.is_manager


class CategoryChanger(_ManagerOnlyChanger):

    async def options(self, actor: ActorContext) -> List[Category]:
        self.guard.require_manager(actor, "view request categories")
        rows = await self.store.list_reference(CATEGORY_TABLE)
        return [Category(**row) for row in rows]

    async def change(
        self,
        request: Request,
        actor: ActorContext,
        category_id: Optional[str],
    ) -> MutationResult:
        self.guard.require_manager(actor, "change the request category")
        return await self._apply(
            request,
            "category_id",
            category_id,
            success_title="Category Updated",
            success_description="Request category has been changed successfully",
            failure_description="Failed to update request category",
        )


class RequestTypeChanger(_ManagerOnlyChanger):

    async def options(self, actor: ActorContext) -> List[RequestType]:
        self.guard.require_manager(actor, "view request types")
        rows = await self.store.list_reference(REQUEST_TYPE_TABLE)
        return [RequestType(**row) for row in rows]

    async def change(
        self,
        request: Request,
        actor: ActorContext,
        request_type_id: Optional[str],
    ) -> MutationResult:
        self.guard.require_manager(actor, "change the request type")
        return await self._apply(
            request,
            "request_type_id",
            request_type_id,
            success_title="Request Type Updated",
            success_description="Request type has been changed successfully",
            failure_description="Failed to update request type",
        )
