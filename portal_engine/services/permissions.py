"""
Permission Checks

The policy itself is evaluated by a platform-hosted function; this module
only calls it and turns the answer into render decisions.

Failure model:
- Any evaluator error means `allowed = False` (fail closed)
- "Denied" and "evaluator unreachable" look the same to the caller
- No caching: every evaluation issues a fresh check
- No timeout beyond the HTTP client default
"""

import asyncio
from enum import Enum
from typing import Any, Dict, Iterable, Optional, Protocol, Tuple

import httpx
from pydantic import BaseModel

from ..core.config import get_settings
from ..core.errors import PolicyCheckError
from ..core.logging import get_logger
from ..models.access import PermissionCheckRequest, PermissionCheckResult

logger = get_logger(__name__)


# =============================================================================
# EVALUATORS
# =============================================================================

class PolicyEvaluator(Protocol):

    async def evaluate(self, check: PermissionCheckRequest) -> PermissionCheckResult:
        ...


class HttpPolicyEvaluator:
    """Invokes the platform's `rbac-check-permission` function."""

    def __init__(
        self,
        *,
        functions_url: str,
        api_key: str,
        access_token: Optional[str] = None,
        function_name: str = "rbac-check-permission",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.functions_url = functions_url.rstrip("/")
        self.api_key = api_key
        self.access_token = access_token or api_key
        self.function_name = function_name
        self.transport = transport

    async def evaluate(self, check: PermissionCheckRequest) -> PermissionCheckResult:
        try:
            async with httpx.AsyncClient(
                base_url=self.functions_url,
                headers={
                    "apikey": self.api_key,
                    "Authorization": f"Bearer {self.access_token}",
                    "Content-Type": "application/json",
                },
                transport=self.transport,
            ) as client:
                response = await client.post(f"/{self.function_name}", json=check.to_wire())
                response.raise_for_status()
                payload = response.json()
        except (httpx.HTTPError, ValueError) as exc:
            raise PolicyCheckError(
                f"Permission check {check.resource}:{check.action} failed: {exc}"
            ) from exc

        if not isinstance(payload, dict):
            raise PolicyCheckError("Permission check returned a non-object body")
        return PermissionCheckResult.model_validate(payload)


# =============================================================================
# CHECKER
# =============================================================================

class PermissionChecker:
    """Fail-closed wrapper around a PolicyEvaluator."""

    def __init__(self, evaluator: PolicyEvaluator):
        self.evaluator = evaluator

    async def check(
        self,
        resource: str,
        action: str,
        user_id: Optional[str] = None,
        include_trace: bool = False,
    ) -> PermissionCheckResult:
        request = PermissionCheckRequest(
            resource=resource,
            action=action,
            user_id=user_id,
            include_trace=include_trace,
        )
        try:
            return await self.evaluator.evaluate(request)
        except Exception:
            logger.exception(
                "Permission check error",
                extra={"resource": resource, "action": action},
            )
            return PermissionCheckResult.denied()

    async def check_many(
        self,
        checks: Iterable[Tuple[str, str]],
        user_id: Optional[str] = None,
    ) -> Dict[str, bool]:
        """Check several resource:action pairs concurrently."""
        pairs = list(checks)
        results = await asyncio.gather(*(
            self.check(resource, action, user_id=user_id) for resource, action in pairs
        ))
        return {
            f"{resource}:{action}": result.allowed
            for (resource, action), result in zip(pairs, results)
        }


# =============================================================================
# GATE
# =============================================================================

class GateState(str, Enum):
    PENDING = "pending"
    ALLOWED = "allowed"
    DENIED = "denied"


class GateRender(str, Enum):
    LOADING = "loading"      # Placeholder while the check is in flight
    CHILDREN = "children"
    FALLBACK = "fallback"
    REDIRECT = "redirect"


class GateDecision(BaseModel):
    state: GateState
    render: GateRender
    redirect_to: Optional[str] = None
    fallback: Any = None


class PermissionGate:
    """
    Wraps protected content in an asynchronous capability check.

    pending -> allowed | denied, and back to pending whenever the
    resource or action changes. A result that arrives after the inputs
    changed is discarded.
    """

    def __init__(
        self,
        checker: PermissionChecker,
        resource: str,
        action: str,
        *,
        user_id: Optional[str] = None,
        fallback: Any = None,
        show_fallback: bool = False,
        redirect_to: Optional[str] = None,
    ):
        self.checker = checker
        self.resource = resource
        self.action = action
        self.user_id = user_id
        self.fallback = fallback
        self.show_fallback = show_fallback
        self.redirect_to = redirect_to or get_settings().default_redirect
        self.state = GateState.PENDING
        self._generation = 0

    def decision(self) -> GateDecision:
        if self.state == GateState.PENDING:
            return GateDecision(state=self.state, render=GateRender.LOADING)
        if self.state == GateState.ALLOWED:
            return GateDecision(state=self.state, render=GateRender.CHILDREN)
        if self.show_fallback:
            return GateDecision(
                state=self.state,
                render=GateRender.FALLBACK,
                fallback=self.fallback,
            )
        return GateDecision(
            state=self.state,
            render=GateRender.REDIRECT,
            redirect_to=self.redirect_to,
        )

    async def evaluate(self) -> GateDecision:
        self._generation += 1
        generation = self._generation
        self.state = GateState.PENDING

        result = await self.checker.check(self.resource, self.action, user_id=self.user_id)

        if generation == self._generation:
            self.state = GateState.ALLOWED if result.allowed else GateState.DENIED
        return self.decision()

    async def update(self, resource: str, action: str) -> GateDecision:
        """Re-issue the check if the inputs changed."""
        if (resource, action) == (self.resource, self.action):
            return self.decision()
        self.resource = resource
        self.action = action
        return await self.evaluate()
