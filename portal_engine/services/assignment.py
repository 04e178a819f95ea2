"""
Assignment Changer

Offers manager-tier users as assignees, ranked by how many non-terminal
requests each already holds (fewest first). The ranking is advisory:
nothing is auto-assigned and any listed user may be picked.
"""

import asyncio
from typing import List, Optional

from ..models.access import MANAGER_TIER, ActorContext
from ..models.request import (
    INACTIVE_STATUSES,
    AssigneeCandidate,
    MutationResult,
    Request,
    RequestKind,
    UserProfile,
)
from ..repositories.base import RequestStore
from .guards import RequestGuard
from .mutation import FieldChanger
from .notifications import Notifier


def rank_by_workload(candidates: List[AssigneeCandidate]) -> List[AssigneeCandidate]:
    """Ascending by workload; ties keep their incoming order."""
    return sorted(candidates, key=lambda c: c.workload)


class AssignmentChanger(FieldChanger):

    def __init__(
        self,
        store: RequestStore,
        notifier: Optional[Notifier] = None,
        guard: Optional[RequestGuard] = None,
        workload_collection: str = RequestKind.TICKET.collection,
    ):
        super().__init__(store, notifier)
        self.guard = guard or RequestGuard()
        self.workload_collection = workload_collection

    def can_render(self, actor: ActorContext) -> bool:
        return actor.is_manager

    async def candidates(self, actor: ActorContext) -> List[AssigneeCandidate]:
        """
        Load manager-tier users with their live workload.

        One role lookup, one profile lookup, then one count per user.
        """
        self.guard.require_manager(actor, "view assignees")

        roles = sorted(role.value for role in MANAGER_TIER)
        user_ids = list(dict.fromkeys(await self.store.list_user_ids_with_roles(roles)))
        if not user_ids:
            return []

        profiles = [UserProfile(**row) for row in await self.store.get_profiles(user_ids)]
        workloads = await asyncio.gather(*(
            self.store.count_active_assigned(
                self.workload_collection, profile.id, INACTIVE_STATUSES
            )
            for profile in profiles
        ))

        return rank_by_workload([
            AssigneeCandidate(profile=profile, workload=workload)
            for profile, workload in zip(profiles, workloads)
        ])

    async def change(
        self,
        request: Request,
        actor: ActorContext,
        assignee_id: Optional[str],
    ) -> MutationResult:
        self.guard.require_manager(actor, "assign requests")
        return await self._apply(
            request,
            "assignee_id",
            assignee_id,
            success_title="Request Assigned",
            success_description="Request assigned successfully",
            failure_description="Failed to assign request. Please try again",
        )
