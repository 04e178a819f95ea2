"""
Portal Request Engine Models
"""

from .access import (
    Role,
    MANAGER_TIER,
    is_manager_tier,
    Impersonation,
    ActorContext,
    PermissionTrace,
    PermissionCheckRequest,
    PermissionCheckResult,
)
from .request import (
    # Enums
    RequestStatus,
    Priority,
    RequestKind,
    MutationOutcome,
    LEGACY_STATUSES,
    INACTIVE_STATUSES,
    COLLECTIONS,
    HISTORY_TABLES,

    # Core models
    Request,
    StatusHistoryEntry,
    Notification,
    MutationResult,

    # Reference data
    Category,
    RequestType,
    UserProfile,
    AssigneeCandidate,
)

__all__ = [
    "Role", "MANAGER_TIER", "is_manager_tier", "Impersonation", "ActorContext",
    "PermissionTrace", "PermissionCheckRequest", "PermissionCheckResult",
    "RequestStatus", "Priority", "RequestKind", "MutationOutcome",
    "LEGACY_STATUSES", "INACTIVE_STATUSES", "COLLECTIONS", "HISTORY_TABLES",
    "Request", "StatusHistoryEntry", "Notification", "MutationResult",
    "Category", "RequestType", "UserProfile", "AssigneeCandidate",
]
