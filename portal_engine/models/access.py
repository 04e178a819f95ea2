"""
Access Model

Roles, the manager tier, the explicit actor context (including
impersonation) and the policy-check wire shapes.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Role(str, Enum):
    REQUESTER = "requester"
    MARKETING = "marketing"
    MANAGER = "manager"
    MARKETING_MANAGER = "marketing_manager"
    TENANT_ADMIN = "tenant_admin"
    SUPER_ADMIN = "super_admin"


# Treated as equivalent for every guard in the request workflow.
MANAGER_TIER = frozenset({
    Role.MANAGER,
    Role.MARKETING_MANAGER,
    Role.TENANT_ADMIN,
    Role.SUPER_ADMIN,
})


def is_manager_tier(role: Optional[Role]) -> bool:
    return role in MANAGER_TIER


class Impersonation(BaseModel):
    """Who the actor is acting as. Either field may be left unset."""
    model_config = ConfigDict(frozen=True)

    role: Optional[Role] = None
    user_id: Optional[str] = None


class ActorContext(BaseModel):
    """
    The caller of a guarded operation.

    Passed explicitly to every guard. When `acting_as` is set, the
    effective role / user id are the impersonated ones.
    """
    model_config = ConfigDict(frozen=True)

    user_id: str
    role: Role = Role.REQUESTER
    acting_as: Optional[Impersonation] = None

    @property
    def effective_role(self) -> Role:
        if self.acting_as and self.acting_as.role is not None:
            return self.acting_as.role
        return self.role

    @property
    def effective_user_id(self) -> str:
        if self.acting_as and self.acting_as.user_id is not None:
            return self.acting_as.user_id
        return self.user_id

    @property
    def is_manager(self) -> bool:
        return is_manager_tier(self.effective_role)


# =============================================================================
# POLICY CHECK WIRE SHAPES
# =============================================================================

class PermissionTrace(BaseModel):
    step: str
    result: str  # allow, deny, skip
    reason: str


class PermissionCheckRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    resource: str
    action: str
    user_id: Optional[str] = Field(default=None, alias="userId")
    include_trace: bool = Field(default=False, alias="includeTrace")

    def to_wire(self) -> dict:
        body = {
            "resource": self.resource,
            "action": self.action,
            "includeTrace": self.include_trace,
        }
        if self.user_id is not None:
            body["userId"] = self.user_id
        return body


class PermissionCheckResult(BaseModel):
    allowed: bool = False
    trace: Optional[List[PermissionTrace]] = None

    @classmethod
    def denied(cls) -> "PermissionCheckResult":
        return cls(allowed=False)
