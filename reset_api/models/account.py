from datetime import datetime
from sqlalchemy import CheckConstraint, Column, DateTime
from sqlmodel import SQLModel, Field


class Account(SQLModel, table=True):
    __tablename__ = "users"  # type: ignore[assignment]
    # Token and expiry are written together or not at all
    __table_args__ = (
        CheckConstraint(
            "(reset_token IS NULL) = (token_expiry IS NULL)",
            name="ck_users_reset_token_pair",
        ),
    )

    id: int | None = Field(default=None, primary_key=True)
    # Stored trimmed and lowercased
    email: str = Field(unique=True, index=True)
    password_hash: str
    reset_token: str | None = Field(default=None, index=True)
    token_expiry: datetime | None = Field(
        default=None, sa_column=Column(DateTime(timezone=True), nullable=True)
    )
