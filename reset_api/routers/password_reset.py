from datetime import timedelta

from fastapi import APIRouter, BackgroundTasks

from reset_api.core.dependencies import (
    AccountStoreDep,
    MailerDep,
    PasswordHasherDep,
    SettingsDep,
)
from reset_api.models.password_reset import (
    ForgotPasswordRequest,
    MessageResponse,
    ResetPasswordRequest,
)
from reset_api.services import password_reset as password_reset_service
from reset_api.services.email import send_password_reset_email

router = APIRouter(tags=["password-reset"])


@router.post("/forgot-password", response_model=MessageResponse)
async def forgot_password(
    request_data: ForgotPasswordRequest,
    background_tasks: BackgroundTasks,
    store: AccountStoreDep,
    mailer: MailerDep,
    settings: SettingsDep,
):
    """
    Issue a reset token for the account and email the reset link.

    The email is sent after the response; a delivery failure is only logged.
    Responds 404 when no account has this email.
    """
    account, token = password_reset_service.request_reset(
        store,
        request_data.email,
        ttl=timedelta(minutes=settings.PASSWORD_RESET_TOKEN_EXPIRE_MINUTES),
    )
    background_tasks.add_task(
        send_password_reset_email, mailer, settings, account.email, token
    )
    return MessageResponse(message="Password reset email sent")


@router.post("/reset-password", response_model=MessageResponse)
async def reset_password(
    request_data: ResetPasswordRequest,
    store: AccountStoreDep,
    hasher: PasswordHasherDep,
):
    password_reset_service.complete_reset(
        store, hasher, request_data.token, request_data.new_password
    )
    return MessageResponse(message="Password reset successful")
