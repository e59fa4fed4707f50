"""Password reset orchestration.

Both operations take their collaborators as arguments: an AccountStore for
persistence and, for completion, a PasswordHasher. Email delivery is left to
the caller so that it can run after the response is sent.
"""

from datetime import datetime, timedelta

from loguru import logger

from reset_api.core.password import PasswordHasher
from reset_api.core.tokens import (
    RESET_TOKEN_TTL,
    compute_expiry,
    generate_reset_token,
    is_expired,
    utcnow,
)
from reset_api.exceptions import (
    AppException,
    InvalidTokenError,
    NotFoundError,
    PersistenceError,
    TokenExpiredError,
)
from reset_api.models.account import Account
from reset_api.models.password_reset import normalize_email
from reset_api.services.account_store import AccountStore
from reset_api.utils.logger import mask_email


def _account_id(account: Account) -> int:
    if account.id is None:
        raise AppException("Account ID is missing")
    return account.id


def issue_reset_token(
    store: AccountStore,
    account: Account,
    *,
    ttl: timedelta = RESET_TOKEN_TTL,
    now: datetime | None = None,
) -> tuple[str, datetime]:
    """
    Mint a reset token for an existing account and persist it with its expiry.

    Any pending token on the account is overwritten. The write is keyed by
    account id, not email.

    Args:
        store: Account datastore.
        account: Account resolved by a previous lookup.
        ttl: Token lifetime.
        now: Issue time; defaults to the current UTC time.

    Returns:
        tuple[str, datetime]: The plain token and its expiry.

    Raises:
        PersistenceError: If the token could not be stored, including when the
            account disappeared before the write. Nothing should be emailed in that case.
    """
    account_id = _account_id(account)
    token = generate_reset_token()
    expiry = compute_expiry(now or utcnow(), ttl)

    try:
        store.update_fields(account_id, {"reset_token": token, "token_expiry": expiry})
    except (NotFoundError, PersistenceError) as e:
        raise PersistenceError("Error updating reset token") from e

    return token, expiry


def request_reset(
    store: AccountStore,
    email: str,
    *,
    ttl: timedelta = RESET_TOKEN_TTL,
    now: datetime | None = None,
) -> tuple[Account, str]:
    """
    Look up an account by email and issue a reset token for it.

    Args:
        store: Account datastore.
        email: Address as submitted; trimmed and lowercased before lookup.

    Returns:
        tuple[Account, str]: The account and the plain token to send by email.

    Raises:
        NotFoundError: If no account has this email.
        PersistenceError: If the token could not be stored.
    """
    normalized = normalize_email(email)
    account = store.find_by_email(normalized)
    if account is None:
        raise NotFoundError("Account", normalized, message="User not found")

    token, expiry = issue_reset_token(store, account, ttl=ttl, now=now)
    logger.info(
        f"Reset token issued for {mask_email(normalized)}, expires {expiry.isoformat()}"
    )
    return account, token


def validate_token(
    store: AccountStore, token: str, *, now: datetime | None = None
) -> Account:
    """
    Resolve the account holding a pending, unexpired reset token.

    Expired tokens are left on the account; they keep being rejected until a
    new reset request overwrites them.

    Raises:
        InvalidTokenError: If no account carries this token.
        TokenExpiredError: If the token's expiry is at or before ``now``.
    """
    if not token:
        raise InvalidTokenError()

    account = store.find_by_token(token)
    if account is None or account.token_expiry is None:
        raise InvalidTokenError()

    if is_expired(account.token_expiry, now):
        raise TokenExpiredError()

    return account


def complete_reset(
    store: AccountStore,
    hasher: PasswordHasher,
    token: str,
    new_password: str,
    *,
    now: datetime | None = None,
) -> Account:
    """
    Set a new password using a reset token, consuming the token.

    The password digest and both token fields are written in one update. If
    that write fails the token stays valid, so the client can resubmit.

    Returns:
        Account: The updated account.

    Raises:
        InvalidTokenError: If the token is unknown or already consumed.
        TokenExpiredError: If the token has expired.
        PersistenceError: If the update could not be stored.
    """
    account = validate_token(store, token, now=now)
    account_id = _account_id(account)
    password_hash = hasher.hash(new_password)

    try:
        updated = store.update_fields(
            account_id,
            {"password_hash": password_hash, "reset_token": None, "token_expiry": None},
        )
    except (NotFoundError, PersistenceError) as e:
        # Also covers the row vanishing between lookup and update
        raise PersistenceError("Failed to reset password") from e

    logger.info(f"Password reset completed for account {account_id}")
    return updated
