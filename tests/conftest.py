"""Shared fixtures: an engine over an in-memory store with a fixed clock."""

import itertools
from datetime import datetime, timezone

import pytest

from fleet import FleetEngine, MemoryStore

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda prefix: f"{prefix}_{next(counter)}"


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def engine(store, sequential_ids):
    return FleetEngine(
        store,
        key="farm",
        identity=lambda: "collab_admin",
        id_factory=sequential_ids,
        clock=lambda: NOW,
        allow_negative_stock=False,
        alert_threshold=50,
        default_usage_rate=4,
        due_soon_hours=50,
    )
