"""Password hashing strategies.

The default strategy reproduces the digest stored by existing accounts: a single
unsalted SHA-256 pass rendered as lowercase hex. It has no salt and no work
factor, so identical passwords share a digest and offline guessing is cheap.
Deployments that can migrate stored digests should switch
``PASSWORD_HASH_SCHEME`` to ``argon2``.
"""

import hashlib
import hmac
from functools import lru_cache
from typing import Protocol

from pwdlib import PasswordHash

from reset_api.core.config import Settings, get_settings


class PasswordHasher(Protocol):
    """Capability used by the reset flow to turn a plaintext password into a stored digest."""

    scheme: str

    def hash(self, password: str) -> str: ...

    def verify(self, password: str, hashed_password: str) -> bool: ...


class Sha256PasswordHasher:
    """Unsalted single-pass SHA-256, hex encoded (64 characters)."""

    scheme = "sha256"

    def hash(self, password: str) -> str:
        """
        Hash a plaintext password with SHA-256.

        Parameters:
            password (str): Plaintext password, encoded as UTF-8 before hashing.

        Returns:
            str: The 64-character lowercase hex digest.
        """
        return hashlib.sha256(password.encode("utf-8")).hexdigest()

    def verify(self, password: str, hashed_password: str) -> bool:
        return hmac.compare_digest(self.hash(password), hashed_password)


class Argon2PasswordHasher:
    """Salted Argon2 hashing through pwdlib."""

    scheme = "argon2"

    def __init__(self) -> None:
        # pwdlib is the modern, recommended way (Argon2 by default)
        self._password_hash = PasswordHash.recommended()

    def hash(self, password: str) -> str:
        return self._password_hash.hash(password)

    def verify(self, password: str, hashed_password: str) -> bool:
        return self._password_hash.verify(password, hashed_password)


HASHERS: dict[str, type[Sha256PasswordHasher] | type[Argon2PasswordHasher]] = {
    Sha256PasswordHasher.scheme: Sha256PasswordHasher,
    Argon2PasswordHasher.scheme: Argon2PasswordHasher,
}


def build_password_hasher(settings: Settings) -> PasswordHasher:
    """
    Instantiate the hashing strategy selected by ``PASSWORD_HASH_SCHEME``.

    Raises:
        ValueError: If the configured scheme is unknown.
    """
    try:
        hasher_cls = HASHERS[settings.PASSWORD_HASH_SCHEME]
    except KeyError:
        raise ValueError(
            f"Unknown password hash scheme: {settings.PASSWORD_HASH_SCHEME}"
        ) from None
    return hasher_cls()


@lru_cache()
def get_password_hasher() -> PasswordHasher:
    """FastAPI dependency returning the configured hasher."""
    return build_password_hasher(get_settings())
