from typing import Annotated

from fastapi import Depends
from sqlmodel import Session

from reset_api.core.config import Settings, get_settings
from reset_api.core.password import PasswordHasher, get_password_hasher
from reset_api.database.database import get_session
from reset_api.services.account_store import AccountStore, SqlAccountStore
from reset_api.services.email import Mailer, get_mailer


def get_account_store(
    session: Annotated[Session, Depends(get_session)],
) -> AccountStore:
    """
    Wrap the request-scoped session in the account datastore interface.

    Returns:
        AccountStore: A SqlAccountStore bound to the current session.
    """
    return SqlAccountStore(session)


AccountStoreDep = Annotated[AccountStore, Depends(get_account_store)]
MailerDep = Annotated[Mailer, Depends(get_mailer)]
PasswordHasherDep = Annotated[PasswordHasher, Depends(get_password_hasher)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
