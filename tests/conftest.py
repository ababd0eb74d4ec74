"""
Name: Pytest Configuration and Shared Fixtures

Responsibilities:
  - Configure test environment (no .env, no durable audit file by default)
  - Provide reusable fixtures (clock instants, cards, audit logger, settings)
  - Setup small test data factories

Collaborators:
  - pytest: Test framework
  - access_engine.domain / access_engine.application

Notes:
  - Fixtures are auto-discovered by pytest
  - All engine timestamps are timezone-aware (UTC here)
  - 2025-01-06 is a Monday
"""

import hashlib
import os
import sys
from datetime import datetime, timedelta, timezone
from pathlib import Path

import pytest

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("AUDIT_LOG_PATH", "")
os.environ.setdefault("LOG_JSON", "false")

from access_engine.crosscutting import config as app_config  # noqa: E402

app_config.Settings.model_config["env_file"] = None

from access_engine.application.audit_logger import InMemoryAuditLogger  # noqa: E402
from access_engine.domain.cards import AccessCard  # noqa: E402
from access_engine.domain.floors import Floor  # noqa: E402
from access_engine.domain.permissions import (  # noqa: E402
    SimplePermission,
    TimeLimitedPermission,
)
from access_engine.identity.facade_ids import derive_facade_ids  # noqa: E402

UTC = timezone.utc

CARD_CREATED_AT = datetime(2025, 1, 1, 0, 0, tzinfo=UTC)
MONDAY_10AM = datetime(2025, 1, 6, 10, 0, tzinfo=UTC)


def pytest_configure(config) -> None:
    config.addinivalue_line(
        "markers", "unit: Unit tests (fast, no external dependencies)"
    )


# ============================================================================
# Factories
# ============================================================================


def make_card(
    floors=(Floor.LOW,),
    rooms=(),
    *,
    real_id: str = "ACM-001-20250101",
    permission=None,
    created_at: datetime = CARD_CREATED_AT,
    facade_count: int = 1,
) -> AccessCard:
    """R: Build a card directly (no factory, no audit)."""
    permission = permission or SimplePermission(frozenset(floors), frozenset(rooms))
    return AccessCard(
        real_id,
        derive_facade_ids(real_id, facade_count),
        permission,
        created_at=created_at,
    )


def make_time_limited(
    floors, rooms, valid_from: datetime, valid_until: datetime
) -> TimeLimitedPermission:
    return TimeLimitedPermission(
        frozenset(floors), frozenset(rooms), valid_from, valid_until
    )


class FakeClock:
    """R: Mutable clock for deterministic time-dependent tests."""

    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now = self.now + timedelta(**kwargs)


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def monday_10am() -> datetime:
    return MONDAY_10AM


@pytest.fixture
def audit_logger() -> InMemoryAuditLogger:
    return InMemoryAuditLogger()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock(MONDAY_10AM)


@pytest.fixture
def settings() -> app_config.Settings:
    return app_config.Settings(
        app_env="test",
        audit_log_path="",
        token_secret="test-token-secret",
        site_timezone="UTC",
    )


@pytest.fixture
def sha256_unavailable(monkeypatch):
    """Make hashlib reject sha256 while leaving other digests working."""
    real_new = hashlib.new

    def _new(name, *args, **kwargs):
        if name.lower() == "sha256":
            raise ValueError(f"unsupported hash type {name}")
        return real_new(name, *args, **kwargs)

    monkeypatch.setattr(hashlib, "new", _new)
