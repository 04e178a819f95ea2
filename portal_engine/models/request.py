"""
Request Model

Generalizes the portal's hardware, toner, department and ticket records
into a single Request entity.

Core principles:
1. creator_id is set at submission and never changes
2. status / priority are mutable by manager-tier roles or the creator
3. category, request type and assignee are mutable by manager-tier roles only
4. completed is terminal for everyone except manager-tier roles
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import uuid4

from pydantic import BaseModel, Field, field_validator

from ..core.time import utcnow


# =============================================================================
# ENUMS
# =============================================================================

class RequestStatus(str, Enum):
    SUBMITTED = "submitted"      # Initial value on creation
    OPEN = "open"                # Offered to managers by the status changer
    IN_PROGRESS = "in_progress"
    COMPLETED = "completed"      # Terminal for non-managers


# Values from an older badge component; never written by the mutation logic.
LEGACY_STATUSES = frozenset({"draft", "approved", "declined", "ordered"})

# Statuses excluded when counting an assignee's open workload.
INACTIVE_STATUSES = ("completed", "closed", "cancelled")


class Priority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class RequestKind(str, Enum):
    TICKET = "ticket"
    HARDWARE = "hardware"
    TONER = "toner"
    DEPARTMENT = "department"

    @property
    def collection(self) -> str:
        return COLLECTIONS[self]

    @property
    def history_table(self) -> Optional[str]:
        return HISTORY_TABLES.get(self)


COLLECTIONS = {
    RequestKind.TICKET: "tickets",
    RequestKind.HARDWARE: "hardware_requests",
    RequestKind.TONER: "toner_requests",
    RequestKind.DEPARTMENT: "tickets",
}

# Only hardware requests carry a status-history table; its request_id
# references hardware_requests.
HISTORY_TABLES = {
    RequestKind.HARDWARE: "request_status_history",
}


class MutationOutcome(str, Enum):
    UNCHANGED = "unchanged"  # Target equals current value, nothing sent
    UPDATED = "updated"
    FAILED = "failed"        # Store rejected the write


# =============================================================================
# CORE MODELS
# =============================================================================

class Request(BaseModel):
    """
    A submitted request (hardware, toner, department service or ticket).

    The same shape is used for every collection; `kind` decides which
    collection writes go to.
    """
    id: str = Field(default_factory=lambda: str(uuid4()))
    kind: RequestKind = RequestKind.TICKET
    title: Optional[str] = None

    status: RequestStatus = RequestStatus.SUBMITTED
    priority: Priority = Priority.MEDIUM

    creator_id: str
    assignee_id: Optional[str] = None

    category_id: Optional[str] = None
    request_type_id: Optional[str] = None

    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @field_validator("status", mode="before")
    @classmethod
    def _reject_legacy_status(cls, value):
        if isinstance(value, str) and value in LEGACY_STATUSES:
            raise ValueError(
                f"Legacy status '{value}' is not part of the request lifecycle"
            )
        return value

    @property
    def collection(self) -> str:
        return self.kind.collection

    def is_created_by(self, user_id: Optional[str]) -> bool:
        return user_id is not None and user_id == self.creator_id


class StatusHistoryEntry(BaseModel):
    """Audit record written after a successful status change."""
    id: str = Field(default_factory=lambda: str(uuid4()))
    request_id: str
    status: RequestStatus
    changed_by: str
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)


class Notification(BaseModel):
    """User-facing message produced by a mutation (toast equivalent)."""
    level: str  # success, error
    title: str
    description: str


class MutationResult(BaseModel):
    """What a changer returns to its caller."""
    outcome: MutationOutcome
    request: Request
    notifications: List[Notification] = Field(default_factory=list)

    @property
    def changed(self) -> bool:
        return self.outcome == MutationOutcome.UPDATED


# =============================================================================
# REFERENCE DATA
# =============================================================================

class Category(BaseModel):
    id: str
    name: str
    is_active: bool = True


class RequestType(BaseModel):
    id: str
    name: str
    is_active: bool = True


class UserProfile(BaseModel):
    id: str
    full_name: Optional[str] = None
    email: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.full_name or self.email or self.id


class AssigneeCandidate(BaseModel):
    """A manager-tier user with their count of open assigned requests."""
    profile: UserProfile
    workload: int = 0
