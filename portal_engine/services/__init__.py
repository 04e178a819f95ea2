"""
Portal Request Engine Services

Guarded mutations over requests plus the permission gate.
"""

from .guards import RequestGuard, allowed_statuses, allowed_priorities, can_reclassify
from .notifications import Notifier, LoggingNotifier, CollectingNotifier
from .mutation import FieldChanger
from .status import StatusChanger
from .priority import PriorityChanger
from .classification import CategoryChanger, RequestTypeChanger
from .assignment import AssignmentChanger, rank_by_workload
from .permissions import (
    PolicyEvaluator,
    HttpPolicyEvaluator,
    PermissionChecker,
    PermissionGate,
    GateState,
    GateRender,
    GateDecision,
)

__all__ = [
    # Guards
    "RequestGuard", "allowed_statuses", "allowed_priorities", "can_reclassify",

    # Notifications (toast equivalent)
    "Notifier", "LoggingNotifier", "CollectingNotifier",

    # Changers
    "FieldChanger", "StatusChanger", "PriorityChanger",
    "CategoryChanger", "RequestTypeChanger",
    "AssignmentChanger", "rank_by_workload",

    # Permission gate
    "PolicyEvaluator", "HttpPolicyEvaluator", "PermissionChecker",
    "PermissionGate", "GateState", "GateRender", "GateDecision",
]
