"""
Tests for VerificationCodeStore with an injected clock.

No test sleeps: expiry is driven by advancing a fake monotonic clock.
"""

import pytest

from codeshare.exceptions import InvalidVerificationCodeError
from codeshare.verification import VerificationCodeStore, generate_code


# ---------------------------------------------------------------------------
# Code generation
# ---------------------------------------------------------------------------

class TestGenerateCode:

    def test_six_digits(self):
        """Generated codes are six decimal digits."""
        for _ in range(50):
            code = generate_code()
            assert len(code) == 6
            assert code.isdigit()


# ---------------------------------------------------------------------------
# Code store
# ---------------------------------------------------------------------------

class TestVerificationCodeStore:

    def test_verify_consumes_code(self, clock):
        """A verified code is removed from the store."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        store.save("a@example.com", "123456")

        store.verify("a@example.com", "123456")
        assert len(store) == 0
        with pytest.raises(InvalidVerificationCodeError):
            store.verify("a@example.com", "123456")

    def test_valid_until_just_before_expiry(self, clock):
        """A code still works one second before it expires."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        store.save("a@example.com", "123456")
        clock.advance(299)
        store.verify("a@example.com", "123456")

    def test_expired_code_is_removed(self, clock):
        """An expired code is rejected and dropped."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        expires_at = store.save("a@example.com", "123456")
        assert expires_at == clock.now + 300

        clock.advance(300)
        with pytest.raises(InvalidVerificationCodeError, match="expired"):
            store.verify("a@example.com", "123456")
        assert len(store) == 0

    def test_wrong_code_keeps_entry(self, clock):
        """A wrong guess does not burn the real code."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        store.save("a@example.com", "123456")

        with pytest.raises(InvalidVerificationCodeError):
            store.verify("a@example.com", "654321")
        store.verify("a@example.com", "123456")

    def test_new_code_replaces_old(self, clock):
        """Requesting a new code invalidates the previous one."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        store.save("a@example.com", "111111")
        store.save("a@example.com", "222222")

        with pytest.raises(InvalidVerificationCodeError):
            store.verify("a@example.com", "111111")
        store.verify("a@example.com", "222222")

    def test_unknown_email(self, clock):
        """Verifying for an email with no code fails."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        with pytest.raises(InvalidVerificationCodeError):
            store.verify("nobody@example.com", "123456")

    def test_purge_expired(self, clock):
        """purge_expired drops only the entries past their expiry."""
        store = VerificationCodeStore(ttl_seconds=300, clock=clock)
        store.save("old@example.com", "111111")
        clock.advance(200)
        store.save("new@example.com", "222222")
        clock.advance(150)

        assert store.purge_expired() == 1
        assert len(store) == 1
        store.verify("new@example.com", "222222")
