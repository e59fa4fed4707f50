"""Reset token generation and expiry rules."""

import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum

from reset_api.models.account import Account

# 32 bytes = 256 bits of entropy, 64 hex characters on the wire
RESET_TOKEN_BYTES = 32
RESET_TOKEN_TTL = timedelta(hours=2)


class TokenState(str, Enum):
    NO_TOKEN = "no_token"
    PENDING = "pending"
    EXPIRED = "expired"


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def ensure_utc(value: datetime) -> datetime:
    """
    Return ``value`` as an aware UTC datetime.

    SQLite drops the timezone on round-trip, so naive values read back from the
    database are interpreted as UTC.
    """
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def generate_reset_token() -> str:
    """
    Generate a new opaque reset token.

    Returns:
        str: 64 lowercase hexadecimal characters drawn from the OS CSPRNG.
    """
    return secrets.token_bytes(RESET_TOKEN_BYTES).hex()


def compute_expiry(
    issued_at: datetime | None = None, ttl: timedelta = RESET_TOKEN_TTL
) -> datetime:
    return ensure_utc(issued_at or utcnow()) + ttl


def is_expired(expires_at: datetime, now: datetime | None = None) -> bool:
    """A token is rejected from the exact expiry instant onwards."""
    return ensure_utc(now or utcnow()) >= ensure_utc(expires_at)


def token_state(account: Account, now: datetime | None = None) -> TokenState:
    """
    Classify the reset state of an account.

    A consumed token is cleared from the record, so it reads as NO_TOKEN.
    """
    if account.reset_token is None or account.token_expiry is None:
        return TokenState.NO_TOKEN
    if is_expired(account.token_expiry, now):
        return TokenState.EXPIRED
    return TokenState.PENDING
