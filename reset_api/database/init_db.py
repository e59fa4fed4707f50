from sqlmodel import Session, select
from loguru import logger

from reset_api.core.config import Settings, get_settings
from reset_api.core.password import build_password_hasher
from reset_api.models.account import Account
from reset_api.models.password_reset import normalize_email
from reset_api.utils.logger import mask_email


def init_db(session: Session, settings: Settings | None = None) -> Account | None:
    """
    Ensure the configured first account exists in the database.

    If FIRST_ACCOUNT_EMAIL or FIRST_ACCOUNT_PASSWORD is not set, a warning is logged and nothing changes.
    An existing account with that email is left untouched.

    Parameters:
        session (Session): Database session used to look up and persist the account.
        settings (Settings | None): Settings to read; defaults to the cached application settings.

    Returns:
        Account | None: The existing or newly created account, or None when not configured.
    """
    settings = settings or get_settings()
    if not settings.FIRST_ACCOUNT_EMAIL or not settings.FIRST_ACCOUNT_PASSWORD:
        logger.warning("First account not configured. Skipping creation.")
        return None

    email = normalize_email(settings.FIRST_ACCOUNT_EMAIL)
    account = session.exec(select(Account).where(Account.email == email)).first()
    if account:
        return account

    hasher = build_password_hasher(settings)
    account = Account(
        email=email,
        password_hash=hasher.hash(settings.FIRST_ACCOUNT_PASSWORD.get_secret_value()),
    )
    session.add(account)
    session.commit()
    session.refresh(account)
    logger.info(f"Created first account {mask_email(email)}")
    return account
