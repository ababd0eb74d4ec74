"""
Name: Token Service Unit Tests

Responsibilities:
  - Token issuance bound to a card id (one live token per card)
  - Validation: unknown card, mismatch, expiry (now >= expires_at)
  - Reuse until expiry
"""

from datetime import timedelta

import pytest

from access_engine.identity.tokens import DEFAULT_TOKEN_TTL, TokenService
from tests.conftest import MONDAY_10AM, FakeClock


@pytest.fixture
def token_clock() -> FakeClock:
    return FakeClock(MONDAY_10AM)


@pytest.fixture
def tokens(token_clock) -> TokenService:
    return TokenService("unit-secret", clock=token_clock)


@pytest.mark.unit
class TestTokenIssuance:
    def test_default_ttl_is_five_minutes(self):
        assert DEFAULT_TOKEN_TTL == timedelta(minutes=5)

    def test_issued_record(self, tokens):
        value = tokens.generate_token("card-1")

        issued = tokens.get_token("card-1")
        assert issued is not None
        assert issued.value == value
        assert issued.card_id == "card-1"
        assert issued.issued_at == MONDAY_10AM
        assert issued.expires_at == MONDAY_10AM + DEFAULT_TOKEN_TTL

    def test_reissue_overwrites(self, tokens):
        first = tokens.generate_token("card-1")
        second = tokens.generate_token("card-1")

        assert first != second
        assert not tokens.is_valid_token("card-1", first)
        assert tokens.is_valid_token("card-1", second)

    def test_requires_secret(self):
        with pytest.raises(ValueError):
            TokenService("")

    def test_requires_positive_ttl(self):
        with pytest.raises(ValueError):
            TokenService("s", ttl=timedelta(0))


@pytest.mark.unit
class TestTokenValidation:
    def test_unknown_card(self, tokens):
        assert not tokens.is_valid_token("nobody", "whatever")

    def test_mismatch(self, tokens):
        tokens.generate_token("card-1")

        assert not tokens.is_valid_token("card-1", "not-the-token")
        assert not tokens.is_valid_token("card-1", "")

    def test_bound_to_card(self, tokens):
        value = tokens.generate_token("card-1")
        tokens.generate_token("card-2")

        assert not tokens.is_valid_token("card-2", value)

    def test_reusable_until_expiry(self, tokens, token_clock):
        value = tokens.generate_token("card-1")

        assert tokens.is_valid_token("card-1", value)
        token_clock.advance(minutes=4, seconds=59)
        assert tokens.is_valid_token("card-1", value)

    def test_expires_at_boundary(self, tokens, token_clock):
        value = tokens.generate_token("card-1")

        token_clock.advance(minutes=5)
        assert not tokens.is_valid_token("card-1", value)

    def test_custom_ttl(self, token_clock):
        service = TokenService("s", ttl=timedelta(seconds=30), clock=token_clock)
        value = service.generate_token("card-1")

        token_clock.advance(seconds=31)
        assert not service.is_valid_token("card-1", value)
