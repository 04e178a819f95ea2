from __future__ import annotations

import pytest

from _support import CREATOR_ID, MANAGER_ID, OTHER_ID, make_row
from portal_engine.models import ActorContext, Role
from portal_engine.repositories import InMemoryRequestStore


@pytest.fixture
def store() -> InMemoryRequestStore:
    return InMemoryRequestStore(requests={"tickets": [make_row()]})


@pytest.fixture
def manager() -> ActorContext:
    return ActorContext(user_id=MANAGER_ID, role=Role.MANAGER)


@pytest.fixture
def creator() -> ActorContext:
    return ActorContext(user_id=CREATOR_ID, role=Role.REQUESTER)


@pytest.fixture
def bystander() -> ActorContext:
    return ActorContext(user_id=OTHER_ID, role=Role.MARKETING)
