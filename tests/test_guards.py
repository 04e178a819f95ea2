# ruff: noqa: S101
from __future__ import annotations

import pytest

from _support import CREATOR_ID, make_request
from portal_engine.core.errors import PermissionDenied
from portal_engine.models import (
    ActorContext,
    Impersonation,
    MANAGER_TIER,
    Priority,
    RequestStatus,
    Role,
)
from portal_engine.services import RequestGuard, allowed_priorities, allowed_statuses, can_reclassify

MANAGER_OPTIONS = [RequestStatus.OPEN, RequestStatus.IN_PROGRESS, RequestStatus.COMPLETED]
NON_MANAGERS = [Role.REQUESTER, Role.MARKETING]


@pytest.mark.parametrize("role", sorted(MANAGER_TIER))
@pytest.mark.parametrize("current", list(RequestStatus))
def test_manager_tier_gets_all_three_statuses_from_any_status(role: Role, current: RequestStatus) -> None:
    assert allowed_statuses(current, role, is_creator=False) == MANAGER_OPTIONS
    assert allowed_statuses(current, role, is_creator=True) == MANAGER_OPTIONS


@pytest.mark.parametrize("role", NON_MANAGERS)
@pytest.mark.parametrize(
    "current",
    [RequestStatus.SUBMITTED, RequestStatus.OPEN, RequestStatus.IN_PROGRESS],
)
def test_creator_can_only_complete_open_request(role: Role, current: RequestStatus) -> None:
    assert allowed_statuses(current, role, is_creator=True) == [RequestStatus.COMPLETED]


@pytest.mark.parametrize("role", NON_MANAGERS)
def test_creator_cannot_reopen_completed_request(role: Role) -> None:
    assert allowed_statuses(RequestStatus.COMPLETED, role, is_creator=True) == []


@pytest.mark.parametrize("role", NON_MANAGERS)
@pytest.mark.parametrize("current", list(RequestStatus))
def test_non_manager_non_creator_gets_nothing(role: Role, current: RequestStatus) -> None:
    assert allowed_statuses(current, role, is_creator=False) == []


def test_missing_role_is_not_manager_tier() -> None:
    assert allowed_statuses(RequestStatus.OPEN, None, is_creator=False) == []
    assert not can_reclassify(None)


def test_priority_open_to_manager_or_creator_only() -> None:
    assert allowed_priorities(Role.TENANT_ADMIN, is_creator=False) == list(Priority)
    assert allowed_priorities(Role.REQUESTER, is_creator=True) == list(Priority)
    assert allowed_priorities(Role.MARKETING, is_creator=False) == []


def test_reclassify_is_manager_tier_only() -> None:
    assert all(can_reclassify(role) for role in MANAGER_TIER)
    assert not can_reclassify(Role.REQUESTER)
    assert not can_reclassify(Role.MARKETING)


def test_guard_resolves_creator_through_actor_context(creator: ActorContext) -> None:
    guard = RequestGuard()
    request = make_request()

    assert guard.status_options(request, creator) == [RequestStatus.COMPLETED]
    guard.require_status_target(request, creator, RequestStatus.COMPLETED)

    with pytest.raises(PermissionDenied):
        guard.require_status_target(request, creator, RequestStatus.IN_PROGRESS)


def test_guard_denies_bystander_any_status_change(bystander: ActorContext) -> None:
    with pytest.raises(PermissionDenied):
        RequestGuard().require_status_target(make_request(), bystander, RequestStatus.COMPLETED)


def test_guard_uses_impersonated_role() -> None:
    admin_as_requester = ActorContext(
        user_id="admin-1",
        role=Role.SUPER_ADMIN,
        acting_as=Impersonation(role=Role.REQUESTER),
    )
    guard = RequestGuard()
    request = make_request()

    assert guard.status_options(request, admin_as_requester) == []
    with pytest.raises(PermissionDenied):
        guard.require_manager(admin_as_requester, "assign requests")


def test_guard_uses_impersonated_user_for_creator_check() -> None:
    admin_as_creator = ActorContext(
        user_id="admin-1",
        role=Role.REQUESTER,
        acting_as=Impersonation(user_id=CREATOR_ID),
    )
    assert RequestGuard().status_options(make_request(), admin_as_creator) == [
        RequestStatus.COMPLETED
    ]
