"""Account datastore collaborator.

The reset flow only needs three operations from storage: lookup by email,
lookup by reset token, and a single-row partial update keyed by id.
"""

from typing import Any, Protocol

from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from sqlmodel import Session, select

from reset_api.models.account import Account
from reset_api.exceptions import NotFoundError, PersistenceError

UPDATABLE_FIELDS = frozenset({"password_hash", "reset_token", "token_expiry"})


class AccountStore(Protocol):
    def find_by_email(self, email: str) -> Account | None: ...

    def find_by_token(self, token: str) -> Account | None: ...

    def update_fields(self, account_id: int, fields: dict[str, Any]) -> Account: ...


class SqlAccountStore:
    """AccountStore backed by a SQLModel session."""

    def __init__(self, session: Session):
        self.session = session

    def find_by_email(self, email: str) -> Account | None:
        """
        Retrieve an account by its normalized email.

        Args:
            email: Email already trimmed and lowercased by the caller.

        Returns:
            Account | None: The matching account, or None.
        """
        return self.session.exec(select(Account).where(Account.email == email)).first()

    def find_by_token(self, token: str) -> Account | None:
        """Retrieve the account whose pending reset token equals ``token`` exactly."""
        return self.session.exec(
            select(Account).where(Account.reset_token == token)
        ).first()

    def update_fields(self, account_id: int, fields: dict[str, Any]) -> Account:
        """
        Apply a partial update to one account and commit it as a single transaction.

        Args:
            account_id: Primary key of the account to update.
            fields: Column values to set; only password and reset columns are accepted.

        Returns:
            Account: The refreshed account.

        Raises:
            ValueError: If ``fields`` names a column outside the reset flow.
            NotFoundError: If no account has this id.
            PersistenceError: If the write or commit fails; the transaction is rolled back.
        """
        unknown = set(fields) - UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update fields: {sorted(unknown)}")

        account = self.session.get(Account, account_id)
        if account is None:
            raise NotFoundError("Account", account_id)

        for name, value in fields.items():
            setattr(account, name, value)

        try:
            self.session.add(account)
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            logger.error(f"Update of account {account_id} failed: {e}")
            raise PersistenceError() from e

        self.session.refresh(account)
        return account
