"""
Name: Access Card Unit Tests

Responsibilities:
  - CardIdentifier identity (real id format, equality/ordering)
  - AccessCard.validate_access conjunction and last-used bookkeeping
  - Facade id validation (membership + daily key) and repr hygiene
"""

from datetime import datetime, timedelta, timezone

import pytest

from access_engine.domain.cards import AccessCard, CardIdentifier
from access_engine.domain.floors import Floor
from access_engine.domain.permissions import SimplePermission
from access_engine.identity.facade_ids import encrypt_id
from tests.conftest import CARD_CREATED_AT, MONDAY_10AM, make_card, make_time_limited

UTC = timezone.utc


@pytest.mark.unit
class TestCardIdentifier:
    def test_real_id_format(self):
        ident = CardIdentifier("acme", "001", datetime(2025, 3, 4, tzinfo=UTC))

        assert ident.to_card_id() == "ACM-001-20250304"

    def test_short_issuer_is_not_padded(self):
        ident = CardIdentifier("ab", "42", datetime(2025, 1, 1, tzinfo=UTC))

        assert ident.to_card_id() == "AB-42-20250101"

    def test_equality_ignores_issue_date(self):
        a = CardIdentifier("ACME", "001", datetime(2025, 1, 1, tzinfo=UTC))
        b = CardIdentifier("ACME", "001", datetime(2030, 6, 1, tzinfo=UTC))

        assert a == b
        assert hash(a) == hash(b)

    def test_ordering_by_issuer_then_serial(self):
        day = datetime(2025, 1, 1, tzinfo=UTC)
        items = [
            CardIdentifier("B", "1", day),
            CardIdentifier("A", "2", day),
            CardIdentifier("A", "1", day),
        ]

        assert [(i.issuer_id, i.serial_number) for i in sorted(items)] == [
            ("A", "1"),
            ("A", "2"),
            ("B", "1"),
        ]

    def test_str(self):
        ident = CardIdentifier("ACME", "001", datetime(2025, 3, 4, 12, tzinfo=UTC))

        assert str(ident) == "Card[001, Issuer:ACME, Issued:2025-03-04]"


@pytest.mark.unit
class TestValidateAccess:
    def test_granted_updates_last_used(self):
        card = make_card([Floor.LOW])

        assert card.validate_access(Floor.LOW, MONDAY_10AM)
        assert card.last_used_at == MONDAY_10AM

    def test_wrong_floor_leaves_last_used(self):
        card = make_card([Floor.LOW])

        assert not card.validate_access(Floor.HIGH, MONDAY_10AM)
        assert card.last_used_at == CARD_CREATED_AT

    def test_inactive_card_is_denied(self):
        card = make_card([Floor.LOW])
        card.set_active(False)

        assert not card.validate_access(Floor.LOW, MONDAY_10AM)
        assert not card.has_floor_permission(Floor.LOW)
        assert card.last_used_at == CARD_CREATED_AT

    def test_expired_permission_is_denied(self):
        perm = make_time_limited(
            [Floor.LOW], [], MONDAY_10AM, MONDAY_10AM + timedelta(hours=1)
        )
        card = make_card(permission=perm)

        assert not card.validate_access(Floor.LOW, MONDAY_10AM + timedelta(hours=2))
        assert card.validate_access(Floor.LOW, MONDAY_10AM + timedelta(minutes=30))

    def test_last_used_never_precedes_creation(self):
        card = make_card([Floor.LOW])

        assert card.validate_access(Floor.LOW, CARD_CREATED_AT - timedelta(days=3))
        assert card.last_used_at == CARD_CREATED_AT

    def test_room_permission(self):
        card = make_card([Floor.LOW], ["101"])

        assert card.has_room_permission("101")
        assert not card.has_room_permission("999")


@pytest.mark.unit
class TestCardLifecycle:
    def test_requires_a_facade_id(self):
        with pytest.raises(ValueError):
            AccessCard("ACM-001-20250101", (), SimplePermission())

    def test_with_permission_keeps_identity_and_state(self):
        card = make_card([Floor.LOW], facade_count=2)
        card.validate_access(Floor.LOW, MONDAY_10AM)
        card.set_active(False)

        updated = card.with_permission(SimplePermission(frozenset({Floor.HIGH})))

        assert updated is not card
        assert updated.real_id == card.real_id
        assert updated.facade_ids == card.facade_ids
        assert updated.created_at == card.created_at
        assert updated.last_used_at == MONDAY_10AM
        assert updated.active is False
        assert updated.permission.can_access_floor(Floor.HIGH)
        assert not card.permission.can_access_floor(Floor.HIGH)

    def test_repr_hides_real_id(self):
        card = make_card([Floor.LOW])

        assert card.real_id not in repr(card)


@pytest.mark.unit
class TestFacadeValidation:
    def test_member_digest_is_valid(self):
        card = make_card([Floor.LOW])

        assert card.validate_facade_id(card.primary_facade_id, MONDAY_10AM)

    def test_non_member_is_invalid(self):
        card = make_card([Floor.LOW])

        assert not card.validate_facade_id("deadbeef", MONDAY_10AM)

    def test_pseudo_encrypted_member_must_match_day(self):
        stored = encrypt_id("ACM-001-20250101", MONDAY_10AM, nonce="abcd1234")
        card = AccessCard(
            "ACM-001-20250101",
            (stored,),
            SimplePermission(frozenset({Floor.LOW})),
            created_at=CARD_CREATED_AT,
        )

        assert card.validate_facade_id(stored, MONDAY_10AM + timedelta(hours=5))
        assert not card.validate_facade_id(stored, MONDAY_10AM + timedelta(days=1))

    def test_unparseable_day_key_falls_back_to_membership(self):
        stored = "weird_id_notadate"
        card = AccessCard(
            "ACM-001-20250101",
            (stored,),
            SimplePermission(),
            created_at=CARD_CREATED_AT,
        )

        assert card.validate_facade_id(stored, MONDAY_10AM)

    def test_external_fresh_encryption_does_not_match(self):
        card = make_card([Floor.LOW])
        other = card.encrypt_id(MONDAY_10AM)

        # Random suffix differs, and it is not a stored facade id.
        assert not card.verify_external_facade_id(other, MONDAY_10AM)

    def test_external_falls_back_to_stored_facade(self):
        card = make_card([Floor.LOW])

        assert card.verify_external_facade_id(card.primary_facade_id, MONDAY_10AM)

    def test_encrypt_id_embeds_day_key(self):
        card = make_card([Floor.LOW])

        encrypted = card.encrypt_id(MONDAY_10AM)

        assert encrypted.startswith(card.real_id + "_0a00_0062025_")
