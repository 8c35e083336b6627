# tests/conftest.py
"""Shared test fixtures.

Execution tests run against real SQL stores on an in-memory SQLite
database and a FakeActionClient, so every executor path that touches the
registry is exercised without a network.

Hypothesis Configuration:
- "ci" profile: Fast tests for CI (100 examples) - default
- "nightly" profile: Thorough tests (1000 examples)
- "debug" profile: Minimal tests with verbose output (10 examples)

Set profile via environment variable:
    HYPOTHESIS_PROFILE=nightly pytest tests/property/
"""

from __future__ import annotations

import os
import random
from collections.abc import Callable, Iterator
from typing import Any

import pytest
from hypothesis import Phase, Verbosity, settings

from guildflow.contracts import ProgressUpdate, SessionRecord
from guildflow.core.registry import RegistryDB, SqlResourceStore, SqlSessionStore
from guildflow.engine.executors import ExecutionContext, SessionContext
from tests.fixtures.factories import GUILD_ID, fixed_clock
from tests.fixtures.fakes import FakeActionClient


@pytest.fixture
def registry_db() -> Iterator[RegistryDB]:
    db = RegistryDB.in_memory()
    yield db
    db.close()


@pytest.fixture
def resource_store(registry_db: RegistryDB) -> SqlResourceStore:
    return SqlResourceStore(registry_db)


@pytest.fixture
def session_store(registry_db: RegistryDB) -> SqlSessionStore:
    return SqlSessionStore(registry_db, clock=fixed_clock)


@pytest.fixture
def session(session_store: SqlSessionStore) -> SessionRecord:
    return session_store.create_session("Night 1", GUILD_ID)


@pytest.fixture
def fake_client() -> FakeActionClient:
    return FakeActionClient()


@pytest.fixture
def progress_updates() -> list[ProgressUpdate]:
    return []


@pytest.fixture
def make_ctx(
    session: SessionRecord,
    fake_client: FakeActionClient,
    resource_store: SqlResourceStore,
    session_store: SqlSessionStore,
    progress_updates: list[ProgressUpdate],
) -> Callable[..., ExecutionContext]:
    """Factory for an ExecutionContext bound to the test session; keyword overrides replace fields."""

    def factory(**overrides: Any) -> ExecutionContext:
        fields: dict[str, Any] = {
            "session": SessionContext(session_id=session.id, session_name=session.name, guild_id=session.guild_id),
            "client": fake_client,
            "resources": resource_store,
            "sessions": session_store,
            "rng": random.Random(1234),
            "clock": fixed_clock,
            "on_progress": progress_updates.append,
        }
        fields.update(overrides)
        return ExecutionContext(**fields)

    return factory


@pytest.fixture
def ctx(make_ctx: Callable[..., ExecutionContext]) -> ExecutionContext:
    return make_ctx()


# =============================================================================
# Hypothesis Configuration
# =============================================================================

# CI profile: Fast tests for continuous integration
settings.register_profile(
    "ci",
    max_examples=100,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,  # Disable deadline for CI (timing varies)
)

# Nightly profile: Thorough testing for scheduled runs
settings.register_profile(
    "nightly",
    max_examples=1000,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Debug profile: Minimal examples with verbose output for debugging
settings.register_profile(
    "debug",
    max_examples=10,
    verbosity=Verbosity.verbose,
    phases=[Phase.explicit, Phase.reuse, Phase.generate, Phase.shrink],
    deadline=None,
)

# Load profile from environment, default to "ci"
settings.load_profile(os.getenv("HYPOTHESIS_PROFILE", "ci"))
