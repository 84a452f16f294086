"""
Email verification codes for passwordless login.

VerificationCodeStore is an explicit keyed store: email -> (code, expires_at).
Time comes from an injected clock (time.monotonic by default) so expiry is
testable without sleeping. The app creates one store at startup and hands
it to routes through a dependency; nothing here is a module-level singleton.

Mail delivery is pluggable. LoggingMailer only writes the code to the log,
which is what local development and tests use.
"""

import logging
import secrets
import threading
import time
from dataclasses import dataclass
from typing import Callable, Protocol

from codeshare.exceptions import InvalidVerificationCodeError

logger = logging.getLogger(__name__)

CODE_LENGTH = 6


def generate_code(length: int = CODE_LENGTH) -> str:
    """Random numeric code from a CSPRNG, e.g. "042917"."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


@dataclass
class _Entry:
    code: str
    expires_at: float


class VerificationCodeStore:
    """
    Codes keyed by email, each with an absolute expiry time.

    Saving a code for an email replaces any previous one. A code is
    single-use: verify() removes it on success. Expired entries are dropped
    whenever they are looked at, and purge_expired() sweeps the rest.
    """

    def __init__(self, ttl_seconds: float, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, _Entry] = {}
        self._lock = threading.Lock()

    def save(self, email: str, code: str) -> float:
        """Store code for email; returns the expiry timestamp."""
        expires_at = self._clock() + self.ttl_seconds
        with self._lock:
            self._entries[email] = _Entry(code=code, expires_at=expires_at)
        return expires_at

    def verify(self, email: str, code: str) -> None:
        """
        Check and consume a code.

        Raises:
            InvalidVerificationCodeError: If no code exists, it expired, or
                it does not match. A wrong code does not consume the entry.
        """
        now = self._clock()
        with self._lock:
            entry = self._entries.get(email)
            if entry is None:
                raise InvalidVerificationCodeError()
            if now >= entry.expires_at:
                del self._entries[email]
                raise InvalidVerificationCodeError("Verification code has expired")
            if not secrets.compare_digest(entry.code, code):
                raise InvalidVerificationCodeError()
            del self._entries[email]

    def purge_expired(self) -> int:
        """Drop every expired entry; returns how many were removed."""
        now = self._clock()
        with self._lock:
            expired = [email for email, entry in self._entries.items() if now >= entry.expires_at]
            for email in expired:
                del self._entries[email]
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)


class Mailer(Protocol):
    async def send_verification_code(self, email: str, code: str, ttl_seconds: float) -> None:
        ...


class LoggingMailer:
    """Mailer that logs instead of sending. No SMTP is configured anywhere."""

    async def send_verification_code(self, email: str, code: str, ttl_seconds: float) -> None:
        logger.info(
            "Verification code for %s: %s (valid %d minutes)",
            email,
            code,
            int(ttl_seconds // 60),
        )
