"""
Request Guards

Who may change what on a request.

Rules:
1. Manager-tier roles may set status to open / in_progress / completed
   from any current status (no forward-only constraint)
2. A non-manager creator may only mark their own request completed,
   and never once it already is
3. Priority: manager-tier OR creator, any value, no terminal restriction
4. Category, request type and assignee: manager-tier only

Guards take the role and creator relationship explicitly; nothing is read
from ambient state.
"""

from typing import List, Optional

from ..core.errors import PermissionDenied
from ..models.access import ActorContext, Role, is_manager_tier
from ..models.request import Priority, Request, RequestStatus


MANAGER_STATUS_OPTIONS = [
    RequestStatus.OPEN,
    RequestStatus.IN_PROGRESS,
    RequestStatus.COMPLETED,
]

PRIORITY_OPTIONS = [Priority.LOW, Priority.MEDIUM, Priority.HIGH, Priority.URGENT]


def allowed_statuses(
    current: RequestStatus,
    role: Optional[Role],
    is_creator: bool,
) -> List[RequestStatus]:
    """Statuses the actor may pick. Empty means the control is not offered."""
    if is_manager_tier(role):
        return list(MANAGER_STATUS_OPTIONS)
    if is_creator and current != RequestStatus.COMPLETED:
        return [RequestStatus.COMPLETED]
    return []


def allowed_priorities(role: Optional[Role], is_creator: bool) -> List[Priority]:
    if is_manager_tier(role) or is_creator:
        return list(PRIORITY_OPTIONS)
    return []


def can_reclassify(role: Optional[Role]) -> bool:
    """Category, request type and assignee changes."""
    return is_manager_tier(role)


class RequestGuard:
    """
    Resolves an ActorContext against a Request and raises on violations.

    Use before any mutation:
    - Changing status or priority
    - Reclassifying (category / request type)
    - Assigning
    """

    def status_options(self, request: Request, actor: ActorContext) -> List[RequestStatus]:
        return allowed_statuses(
            request.status,
            actor.effective_role,
            request.is_created_by(actor.effective_user_id),
        )

    def priority_options(self, request: Request, actor: ActorContext) -> List[Priority]:
        return allowed_priorities(
            actor.effective_role,
            request.is_created_by(actor.effective_user_id),
        )

    def require_status_access(self, request: Request, actor: ActorContext) -> List[RequestStatus]:
        options = self.status_options(request, actor)
        if not options:
            raise PermissionDenied(
                f"Role {actor.effective_role.value} cannot change the status "
                f"of request {request.id}."
            )
        return options

    def require_status_target(
        self,
        request: Request,
        actor: ActorContext,
        target: RequestStatus,
    ) -> None:
        options = self.require_status_access(request, actor)
        if target != request.status and target not in options:
            raise PermissionDenied(
                f"Cannot move request {request.id} to {target.value}. "
                f"Allowed: {', '.join(s.value for s in options)}."
            )

    def require_priority_access(self, request: Request, actor: ActorContext) -> None:
        if not self.priority_options(request, actor):
            raise PermissionDenied(
                "Only managers or the request creator can change priority."
            )

    def require_manager(self, actor: ActorContext, action: str) -> None:
        if not can_reclassify(actor.effective_role):
            raise PermissionDenied(f"Only managers can {action}.")
