"""
Portal Request Engine API

FastAPI application with:
- Request fetch and guarded status / priority changes
- Manager-only category, type and assignment changes
- Workload-ranked assignee list
- Permission check pass-through and gate decisions (fail closed)

The caller identifies itself with X-Actor-Id / X-Actor-Role headers and may
act as another role or user via X-Acting-As-Role / X-Acting-As-User.
"""

from functools import lru_cache
from typing import List, Optional

from fastapi import Depends, FastAPI, Header, Request as HttpRequest, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ValidationError

from .. import __version__
from ..core.config import get_settings
from ..core.errors import PermissionDenied, RequestNotFound, StoreError, UnsupportedRequest
from ..core.logging import configure_logging, get_logger
from ..models import (
    ActorContext,
    AssigneeCandidate,
    Category,
    Impersonation,
    MutationResult,
    PermissionCheckRequest,
    PermissionCheckResult,
    Priority,
    Request,
    RequestKind,
    RequestStatus,
    RequestType,
    Role,
)
from ..repositories import InMemoryRequestStore, RequestStore, RestRequestStore
from ..services import (
    AssignmentChanger,
    CategoryChanger,
    CollectingNotifier,
    GateDecision,
    HttpPolicyEvaluator,
    PermissionChecker,
    PermissionGate,
    PolicyEvaluator,
    PriorityChanger,
    RequestTypeChanger,
    StatusChanger,
)

logger = get_logger(__name__)


# =============================================================================
# DEPENDENCIES
# =============================================================================

@lru_cache
def get_store() -> RequestStore:
    settings = get_settings()
    if settings.store_backend == "rest":
        return RestRequestStore(base_url=settings.rest_url, api_key=settings.platform_api_key)
    return InMemoryRequestStore()


@lru_cache
def get_evaluator() -> PolicyEvaluator:
    settings = get_settings()
    return HttpPolicyEvaluator(
        functions_url=settings.functions_url,
        api_key=settings.platform_api_key,
        function_name=settings.policy_function,
    )


def get_notifier() -> CollectingNotifier:
    return CollectingNotifier()


def get_actor(
    x_actor_id: str = Header(...),
    x_actor_role: Role = Header(Role.REQUESTER),
    x_acting_as_role: Optional[Role] = Header(None),
    x_acting_as_user: Optional[str] = Header(None),
) -> ActorContext:
    acting_as = None
    if x_acting_as_role is not None or x_acting_as_user is not None:
        acting_as = Impersonation(role=x_acting_as_role, user_id=x_acting_as_user)
    return ActorContext(user_id=x_actor_id, role=x_actor_role, acting_as=acting_as)


async def load_request(
    kind: RequestKind,
    request_id: str,
    store: RequestStore = Depends(get_store),
) -> Request:
    row = await store.get(kind.collection, request_id)
    try:
        return Request.model_validate({**row, "kind": kind})
    except ValidationError as exc:
        detail = ", ".join(
            f"{'.'.join(str(part) for part in error['loc'])}={error.get('input')!r}"
            for error in exc.errors()
        )
        raise UnsupportedRequest(kind.collection, request_id, detail) from exc


# =============================================================================
# REQUEST/RESPONSE MODELS
# =============================================================================

class StatusChangeRequest(BaseModel):
    status: RequestStatus
    notes: Optional[str] = None


class PriorityChangeRequest(BaseModel):
    priority: Priority


class CategoryChangeRequest(BaseModel):
    category_id: Optional[str] = None


class RequestTypeChangeRequest(BaseModel):
    request_type_id: Optional[str] = None


class AssigneeChangeRequest(BaseModel):
    assignee_id: Optional[str] = None


class GateRequest(BaseModel):
    resource: str
    action: str
    redirect_to: Optional[str] = None
    show_fallback: bool = False


class OptionsResponse(BaseModel):
    current: str
    options: List[str]
    can_render: bool


# =============================================================================
# APP SETUP
# =============================================================================

def create_app() -> FastAPI:
    settings = get_settings()
    configure_logging(settings.log_level, settings.log_json)

    app = FastAPI(
        title="Portal Request Engine",
        description="Role-gated request lifecycle for the intranet helpdesk portal",
        version=__version__,
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(PermissionDenied)
    async def _permission_denied(_: HttpRequest, exc: PermissionDenied):
        return JSONResponse(status_code=status.HTTP_403_FORBIDDEN, content={"detail": str(exc)})

    @app.exception_handler(RequestNotFound)
    async def _not_found(_: HttpRequest, exc: RequestNotFound):
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content={"detail": str(exc)})

    @app.exception_handler(UnsupportedRequest)
    async def _unsupported(_: HttpRequest, exc: UnsupportedRequest):
        logger.warning("Unsupported stored request: %s", exc, extra={"request_id": exc.request_id})
        return JSONResponse(status_code=status.HTTP_409_CONFLICT, content={"detail": str(exc)})

    @app.exception_handler(StoreError)
    async def _store_error(_: HttpRequest, exc: StoreError):
        logger.warning("Store error: %s", exc)
        return JSONResponse(status_code=status.HTTP_502_BAD_GATEWAY, content={"detail": str(exc)})

    _register_routes(app)
    return app


def _register_routes(app: FastAPI) -> None:

    # -------------------------------------------------------------------------
    # Health
    # -------------------------------------------------------------------------

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": "portal-request-engine",
            "version": __version__,
        }

    # -------------------------------------------------------------------------
    # Requests
    # -------------------------------------------------------------------------

    @app.get("/requests/{kind}/{request_id}", response_model=Request)
    async def get_request(request: Request = Depends(load_request)):
        return request

    @app.get("/requests/{kind}/{request_id}/status-options", response_model=OptionsResponse)
    async def get_status_options(
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
    ):
        options = StatusChanger(store).options(request, actor)
        return OptionsResponse(
            current=request.status.value,
            options=[s.value for s in options],
            can_render=bool(options),
        )

    @app.post("/requests/{kind}/{request_id}/status", response_model=MutationResult)
    async def change_status(
        body: StatusChangeRequest,
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
        notifier: CollectingNotifier = Depends(get_notifier),
    ):
        return await StatusChanger(store, notifier).change(request, actor, body.status, body.notes)

    @app.get("/requests/{kind}/{request_id}/priority-options", response_model=OptionsResponse)
    async def get_priority_options(
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
    ):
        options = PriorityChanger(store).options(request, actor)
        return OptionsResponse(
            current=request.priority.value,
            options=[p.value for p in options],
            can_render=bool(options),
        )

    @app.post("/requests/{kind}/{request_id}/priority", response_model=MutationResult)
    async def change_priority(
        body: PriorityChangeRequest,
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
        notifier: CollectingNotifier = Depends(get_notifier),
    ):
        return await PriorityChanger(store, notifier).change(request, actor, body.priority)

    @app.post("/requests/{kind}/{request_id}/category", response_model=MutationResult)
    async def change_category(
        body: CategoryChangeRequest,
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
        notifier: CollectingNotifier = Depends(get_notifier),
    ):
        return await CategoryChanger(store, notifier).change(request, actor, body.category_id)

    @app.post("/requests/{kind}/{request_id}/request-type", response_model=MutationResult)
    async def change_request_type(
        body: RequestTypeChangeRequest,
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
        notifier: CollectingNotifier = Depends(get_notifier),
    ):
        return await RequestTypeChanger(store, notifier).change(
            request, actor, body.request_type_id
        )

    @app.post("/requests/{kind}/{request_id}/assignee", response_model=MutationResult)
    async def change_assignee(
        body: AssigneeChangeRequest,
        request: Request = Depends(load_request),
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
        notifier: CollectingNotifier = Depends(get_notifier),
    ):
        return await AssignmentChanger(store, notifier).change(request, actor, body.assignee_id)

    # -------------------------------------------------------------------------
    # Reference lists (manager-tier)
    # -------------------------------------------------------------------------

    @app.get("/categories", response_model=List[Category])
    async def list_categories(
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
    ):
        return await CategoryChanger(store).options(actor)

    @app.get("/request-types", response_model=List[RequestType])
    async def list_request_types(
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
    ):
        return await RequestTypeChanger(store).options(actor)

    @app.get("/assignees", response_model=List[AssigneeCandidate])
    async def list_assignees(
        actor: ActorContext = Depends(get_actor),
        store: RequestStore = Depends(get_store),
    ):
        return await AssignmentChanger(store).candidates(actor)

    # -------------------------------------------------------------------------
    # Permissions
    # -------------------------------------------------------------------------

    @app.post(
        "/permissions/check",
        response_model=PermissionCheckResult,
        response_model_exclude_none=True,
    )
    async def check_permission(
        body: PermissionCheckRequest,
        evaluator: PolicyEvaluator = Depends(get_evaluator),
    ):
        return await PermissionChecker(evaluator).check(
            body.resource,
            body.action,
            user_id=body.user_id,
            include_trace=body.include_trace,
        )

    @app.post("/permissions/gate", response_model=GateDecision, response_model_exclude_none=True)
    async def evaluate_gate(
        body: GateRequest,
        actor: ActorContext = Depends(get_actor),
        evaluator: PolicyEvaluator = Depends(get_evaluator),
    ):
        gate = PermissionGate(
            PermissionChecker(evaluator),
            body.resource,
            body.action,
            user_id=actor.effective_user_id,
            show_fallback=body.show_fallback,
            redirect_to=body.redirect_to,
        )
        return await gate.evaluate()


app = create_app()


# =============================================================================
# RUN
# =============================================================================

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
