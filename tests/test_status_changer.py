# ruff: noqa: S101
from __future__ import annotations

import logging

import pytest

from _support import STALE, FailingStore, HistoryFailingStore, make_request, make_row
from portal_engine.core.errors import PermissionDenied
from portal_engine.models import ActorContext, MutationOutcome, Request, RequestKind, RequestStatus
from portal_engine.repositories import InMemoryRequestStore
from portal_engine.services import CollectingNotifier, StatusChanger


@pytest.mark.asyncio
async def test_manager_completes_submitted_request(
    store: InMemoryRequestStore,
    manager: ActorContext,
) -> None:
    notifier = CollectingNotifier()
    changer = StatusChanger(store, notifier)
    request = make_request()

    assert changer.options(request, manager) == [
        RequestStatus.OPEN,
        RequestStatus.IN_PROGRESS,
        RequestStatus.COMPLETED,
    ]

    result = await changer.change(request, manager, RequestStatus.COMPLETED)

    assert result.outcome == MutationOutcome.UPDATED
    assert len(store.writes) == 1
    collection, request_id, values = store.writes[0]
    assert (collection, request_id) == ("tickets", "req-1")
    assert values["status"] == "completed"
    assert values["updated_at"] > STALE

    refetched = Request.model_validate(await store.get("tickets", "req-1"))
    assert refetched.status == RequestStatus.COMPLETED
    assert [n.title for n in notifier.notifications] == ["Status Updated"]
    assert notifier.notifications[0].description == "Request status changed to completed"


@pytest.mark.asyncio
async def test_selecting_current_status_sends_nothing(
    store: InMemoryRequestStore,
    manager: ActorContext,
) -> None:
    notifier = CollectingNotifier()
    request = make_request(status="in_progress")

    result = await StatusChanger(store, notifier).change(request, manager, RequestStatus.IN_PROGRESS)

    assert result.outcome == MutationOutcome.UNCHANGED
    assert result.request is request
    assert store.writes == []
    assert store.status_history == {}
    assert notifier.notifications == []


@pytest.mark.asyncio
async def test_manager_can_move_backwards(store: InMemoryRequestStore, manager: ActorContext) -> None:
    store.add_request("tickets", make_row(status="completed"))
    request = make_request(status="completed")

    result = await StatusChanger(store).change(request, manager, RequestStatus.OPEN)

    assert result.request.status == RequestStatus.OPEN
    assert store.writes[0][2]["status"] == "open"


@pytest.mark.asyncio
async def test_creator_marks_own_request_completed(
    store: InMemoryRequestStore,
    creator: ActorContext,
) -> None:
    result = await StatusChanger(store).change(make_request(), creator, RequestStatus.COMPLETED)

    assert result.changed
    assert result.request.status == RequestStatus.COMPLETED


@pytest.mark.asyncio
async def test_creator_cannot_pick_other_statuses(
    store: InMemoryRequestStore,
    creator: ActorContext,
) -> None:
    with pytest.raises(PermissionDenied):
        await StatusChanger(store).change(make_request(), creator, RequestStatus.IN_PROGRESS)
    assert store.writes == []


@pytest.mark.asyncio
async def test_completed_request_has_no_control_for_creator(
    store: InMemoryRequestStore,
    creator: ActorContext,
) -> None:
    changer = StatusChanger(store)
    request = make_request(status="completed")

    assert not changer.can_render(request, creator)
    with pytest.raises(PermissionDenied):
        await changer.change(request, creator, RequestStatus.COMPLETED)
    assert store.writes == []


@pytest.mark.asyncio
async def test_bystander_has_no_control(store: InMemoryRequestStore, bystander: ActorContext) -> None:
    changer = StatusChanger(store)

    assert not changer.can_render(make_request(), bystander)
    with pytest.raises(PermissionDenied):
        await changer.change(make_request(), bystander, RequestStatus.COMPLETED)


@pytest.mark.asyncio
async def test_store_failure_keeps_status_and_notifies_once(manager: ActorContext) -> None:
    store = FailingStore(requests={"tickets": [make_row()]})
    notifier = CollectingNotifier()
    request = make_request()

    result = await StatusChanger(store, notifier).change(request, manager, RequestStatus.COMPLETED)

    assert result.outcome == MutationOutcome.FAILED
    assert result.request.status == RequestStatus.SUBMITTED
    assert request.status == RequestStatus.SUBMITTED
    assert request.updated_at == STALE
    assert store.attempts == 1
    assert len(notifier.errors) == 1
    assert notifier.errors[0].description == "Failed to update request status"
    assert len(notifier.notifications) == 1
    assert store.status_history == {}


@pytest.mark.asyncio
async def test_hardware_status_change_records_history(manager: ActorContext) -> None:
    store = InMemoryRequestStore(requests={"hardware_requests": [make_row()]})

    await StatusChanger(store).change(
        make_request(RequestKind.HARDWARE), manager, RequestStatus.IN_PROGRESS, notes="Picked up"
    )

    entries = store.status_history["request_status_history"]
    assert len(entries) == 1
    assert entries[0]["request_id"] == "req-1"
    assert entries[0]["status"] == "in_progress"
    assert entries[0]["changed_by"] == manager.user_id
    assert entries[0]["notes"] == "Picked up"


@pytest.mark.asyncio
async def test_history_note_defaults_to_new_status(manager: ActorContext) -> None:
    store = InMemoryRequestStore(requests={"hardware_requests": [make_row()]})

    await StatusChanger(store).change(
        make_request(RequestKind.HARDWARE), manager, RequestStatus.COMPLETED
    )

    entry = store.status_history["request_status_history"][0]
    assert entry["notes"] == "Status changed to completed"


@pytest.mark.asyncio
async def test_ticket_status_change_writes_no_history(
    store: InMemoryRequestStore,
    manager: ActorContext,
) -> None:
    result = await StatusChanger(store).change(make_request(), manager, RequestStatus.IN_PROGRESS)

    assert result.outcome == MutationOutcome.UPDATED
    assert len(store.writes) == 1
    assert store.status_history == {}


@pytest.mark.asyncio
async def test_history_failure_leaves_status_change_in_place(
    manager: ActorContext,
    caplog: pytest.LogCaptureFixture,
) -> None:
    store = HistoryFailingStore(requests={"hardware_requests": [make_row()]})
    notifier = CollectingNotifier()

    with caplog.at_level(logging.WARNING):
        result = await StatusChanger(store, notifier).change(
            make_request(RequestKind.HARDWARE), manager, RequestStatus.COMPLETED
        )

    assert result.outcome == MutationOutcome.UPDATED
    assert (await store.get("hardware_requests", "req-1"))["status"] == "completed"
    assert notifier.errors == []
    assert "history entry was not recorded" in caplog.text
