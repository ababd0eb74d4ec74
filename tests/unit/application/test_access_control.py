"""
Name: Access Control (Decision API) Unit Tests

Responsibilities:
  - Boundary validation (invalid floor is an error, not a denial)
  - Denials at the boundary: unknown card, bad token, room not permitted
  - Decisions always use the engine clock (expiry cannot be sidestepped)
  - End-to-end lifecycle: issue, decide, revoke, time-limited visitor
"""

from datetime import datetime, timedelta, timezone

import pytest

from access_engine.application.access_control import AccessControlService
from access_engine.application.card_factory import CardFactory
from access_engine.application.card_management import CardManagementService
from access_engine.application.floor_access import FloorAccessService
from access_engine.crosscutting.exceptions import InvalidFloorError, InvalidTimeError
from access_engine.domain.audit import AuditEventType
from access_engine.domain.cards import CardIdentifier
from access_engine.domain.floors import Floor
from access_engine.domain.permissions import SimplePermission, TimeLimitedPermission
from access_engine.identity.tokens import TokenService
from access_engine.infrastructure.repositories import InMemoryCardRepository
from tests.conftest import MONDAY_10AM

UTC = timezone.utc
ISSUED = datetime(2025, 1, 1, tzinfo=UTC)


class Engine:
    """Small wiring of the decision path for tests."""

    def __init__(self, audit_logger, clock):
        self.audit = audit_logger
        self.clock = clock
        self.cards = CardManagementService(
            InMemoryCardRepository(), CardFactory(audit_logger), audit_logger, clock=clock
        )
        self.tokens = TokenService("unit-secret", clock=clock)
        self.floor_access = FloorAccessService(audit_logger, clock=clock)
        self.access = AccessControlService(
            self.cards, self.tokens, self.floor_access, audit_logger, clock=clock
        )

    def issue(self, serial, permission):
        card = self.cards.issue_card(CardIdentifier("ACME", serial, ISSUED), permission)
        return card, self.tokens.generate_token(card.real_id)


@pytest.fixture
def engine(audit_logger, clock) -> Engine:
    return Engine(audit_logger, clock)


def _last_attempt(audit_logger, card_id):
    attempts = [
        r
        for r in audit_logger.get_access_history(card_id)
        if r.event_type is AuditEventType.ACCESS_ATTEMPT
    ]
    return attempts[-1]


@pytest.mark.unit
class TestGrantAccess:
    def test_granted(self, engine):
        card, token = engine.issue("001", SimplePermission(frozenset({Floor.LOW})))

        assert engine.access.grant_access(card.primary_facade_id, "LOW", None, token)

    def test_unknown_card_is_denied_and_audited(self, engine, audit_logger):
        assert not engine.access.grant_access("ghost-facade", Floor.LOW, None, "t")

        record = _last_attempt(audit_logger, "ghost-facade")
        assert record.outcome is False
        assert record.location == "Floor: LOW"
        assert record.details["reason"] == "unknown_card"

    def test_invalid_token_is_denied(self, engine, audit_logger):
        card, _ = engine.issue("001", SimplePermission(frozenset({Floor.LOW})))

        assert not engine.access.grant_access(
            card.primary_facade_id, Floor.LOW, None, "forged"
        )
        assert _last_attempt(audit_logger, card.real_id).details["reason"] == (
            "invalid_token"
        )

    def test_expired_token_is_denied(self, engine, clock):
        card, token = engine.issue("001", SimplePermission(frozenset({Floor.LOW})))

        clock.advance(minutes=6)

        assert not engine.access.grant_access(
            card.primary_facade_id, Floor.LOW, None, token
        )

    def test_room_not_permitted(self, engine, audit_logger):
        card, token = engine.issue(
            "001", SimplePermission(frozenset({Floor.LOW}), frozenset({"101"}))
        )

        assert engine.access.grant_access(card.primary_facade_id, Floor.LOW, "101", token)
        assert not engine.access.grant_access(
            card.primary_facade_id, Floor.LOW, "102", token
        )
        record = _last_attempt(audit_logger, card.real_id)
        assert record.details == {"reason": "room_not_permitted", "room": "102"}

    def test_invalid_floor_raises_without_audit(self, engine, audit_logger):
        card, token = engine.issue("001", SimplePermission(frozenset({Floor.LOW})))

        with pytest.raises(InvalidFloorError):
            engine.access.grant_access(card.primary_facade_id, "PENTHOUSE", None, token)

        assert [
            r.event_type for r in audit_logger.get_access_history(card.real_id)
        ] == [AuditEventType.CARD_CREATION]

    def test_every_attempt_audited_once(self, engine, audit_logger):
        card, token = engine.issue("001", SimplePermission(frozenset({Floor.LOW})))

        engine.access.grant_access(card.primary_facade_id, Floor.LOW, None, token)
        engine.access.grant_access(card.primary_facade_id, Floor.HIGH, None, token)

        attempts = [
            r
            for r in audit_logger.get_access_history(card.real_id)
            if r.event_type is AuditEventType.ACCESS_ATTEMPT
        ]
        assert [r.outcome for r in attempts] == [True, False]

    def test_expired_permission_is_denied_at_engine_clock(self, engine, clock):
        permission = TimeLimitedPermission(
            frozenset({Floor.LOW}),
            frozenset(),
            MONDAY_10AM,
            MONDAY_10AM + timedelta(hours=1),
        )
        card, _ = engine.issue("001", permission)

        clock.advance(hours=2)
        token = engine.tokens.generate_token(card.real_id)

        assert not engine.access.grant_access(
            card.primary_facade_id, Floor.LOW, None, token
        )
        assert card.last_used_at == MONDAY_10AM

    def test_naive_clock_is_invalid_time(self, engine, audit_logger, clock):
        card, token = engine.issue("001", SimplePermission(frozenset({Floor.LOW})))
        clock.now = clock.now.replace(tzinfo=None)

        with pytest.raises(InvalidTimeError):
            engine.access.grant_access(card.primary_facade_id, Floor.LOW, None, token)

        assert [
            r.event_type for r in audit_logger.get_access_history(card.real_id)
        ] == [AuditEventType.CARD_CREATION]


@pytest.mark.unit
class TestLifecycleScenario:
    def test_admin_and_visitor(self, engine, audit_logger, clock):
        start = clock.now
        assert start.weekday() == 0

        admin, admin_token = engine.issue(
            "001", SimplePermission(frozenset(Floor), frozenset())
        )
        visitor_perm = TimeLimitedPermission(
            frozenset({Floor.LOW}), frozenset({"101"}), start, start + timedelta(days=1)
        )
        visitor, visitor_token = engine.issue("002", visitor_perm)

        # Admin on HIGH at 10:00 on a Monday
        assert engine.access.grant_access(
            admin.primary_facade_id, Floor.HIGH, None, admin_token
        )

        engine.cards.revoke_card(admin.real_id, revoked_by="security")
        assert not engine.access.grant_access(
            admin.primary_facade_id, Floor.HIGH, None, admin_token
        )

        # Visitor: wrong floor, a valid LOW visit, then expired
        assert not engine.access.grant_access(
            visitor.primary_facade_id, Floor.MEDIUM, None, visitor_token
        )

        clock.advance(hours=1)
        visitor_token = engine.tokens.generate_token(visitor.real_id)
        assert engine.access.grant_access(
            visitor.primary_facade_id, Floor.LOW, "101", visitor_token
        )
        assert visitor.last_used_at == start + timedelta(hours=1)

        clock.advance(days=2)
        visitor_token = engine.tokens.generate_token(visitor.real_id)
        assert not engine.access.grant_access(
            visitor.primary_facade_id, Floor.LOW, "101", visitor_token
        )
        assert visitor.last_used_at == start + timedelta(hours=1)

        high_attempts = audit_logger.get_location_history(
            "Floor: HIGH", start, start + timedelta(days=3)
        )
        assert [r.outcome for r in high_attempts] == [True, False]
