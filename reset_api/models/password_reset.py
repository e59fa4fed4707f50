"""Password reset request and response models."""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def normalize_email(email: str) -> str:
    """Trim surrounding whitespace and lowercase an email address."""
    return email.strip().lower()


class ForgotPasswordRequest(BaseModel):
    """Request model for initiating password reset."""

    email: EmailStr

    @field_validator("email", mode="before")
    @classmethod
    def _normalize(cls, value):
        if isinstance(value, str):
            return normalize_email(value)
        return value


class ResetPasswordRequest(BaseModel):
    """Request model for confirming password reset with token."""

    model_config = ConfigDict(populate_by_name=True)

    token: str = Field(min_length=1)
    new_password: str = Field(alias="newPassword", min_length=1)


class MessageResponse(BaseModel):
    """Response model for password reset operations."""

    message: str
