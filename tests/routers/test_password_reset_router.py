"""Tests for the /forgot-password and /reset-password endpoints."""

from datetime import datetime, timedelta, timezone
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlmodel import Session

from reset_api.core.password import Sha256PasswordHasher
from reset_api.core.tokens import ensure_utc
from reset_api.exceptions import NotFoundError, PersistenceError
from reset_api.main import app
from reset_api.models.account import Account
from reset_api.services.account_store import SqlAccountStore

NEW_PASSWORD = "NewPassword456"


class TestForgotPassword:
    def test_existing_account(
        self, session: Session, client: TestClient, account: Account, mailer
    ):
        before = datetime.now(timezone.utc)
        response = client.post("/forgot-password", json={"email": "user@example.com"})

        assert response.status_code == 200
        assert response.json() == {"message": "Password reset email sent"}

        session.refresh(account)
        assert account.reset_token is not None
        assert len(account.reset_token) == 64
        assert account.token_expiry is not None
        expiry = ensure_utc(account.token_expiry)
        assert before + timedelta(hours=2) <= expiry
        assert expiry <= datetime.now(timezone.utc) + timedelta(hours=2)

        assert len(mailer.sent) == 1
        to_address, _, body = mailer.sent[0]
        assert to_address == "user@example.com"
        assert (
            f"https://app.example.com/reset-password?token={account.reset_token}"
            in body
        )

    def test_unknown_account(self, client: TestClient, account: Account, mailer):
        response = client.post("/forgot-password", json={"email": "ghost@example.com"})

        assert response.status_code == 404
        assert response.json() == {"message": "User not found"}
        assert mailer.sent == []

    def test_email_is_normalized(
        self, session: Session, client: TestClient, account: Account
    ):
        response = client.post(
            "/forgot-password", json={"email": "  User@Example.COM  "}
        )

        assert response.status_code == 200
        session.refresh(account)
        assert account.reset_token is not None

    def test_second_request_replaces_token(
        self, session: Session, client: TestClient, account: Account
    ):
        client.post("/forgot-password", json={"email": account.email})
        session.refresh(account)
        first = account.reset_token

        client.post("/forgot-password", json={"email": account.email})
        session.refresh(account)

        assert account.reset_token is not None
        assert account.reset_token != first

    @pytest.mark.parametrize(
        "payload",
        [{}, {"email": ""}, {"email": "   "}, {"email": 42}, {"email": "not-an-email"}],
    )
    def test_invalid_email(self, client: TestClient, payload):
        response = client.post("/forgot-password", json=payload)

        assert response.status_code == 400
        assert response.json() == {"message": "Valid email is required"}

    @pytest.mark.parametrize(
        "request_kwargs",
        [
            {},
            {"json": ["user@example.com"]},
            {"json": "user@example.com"},
            {"content": b"not json"},
        ],
    )
    def test_missing_or_non_object_body(self, client: TestClient, request_kwargs):
        response = client.post("/forgot-password", **request_kwargs)

        assert response.status_code == 400
        assert response.json() == {"message": "Valid email is required"}

    def test_mail_failure_still_reports_success(
        self, session: Session, client: TestClient, account: Account, mailer
    ):
        mailer.fail = True

        response = client.post("/forgot-password", json={"email": account.email})

        assert response.status_code == 200
        assert response.json() == {"message": "Password reset email sent"}
        # The token stays stored even though delivery failed
        session.refresh(account)
        assert account.reset_token is not None

    def test_write_failure_skips_email(
        self, client: TestClient, account: Account, mailer
    ):
        with patch.object(
            SqlAccountStore, "update_fields", side_effect=PersistenceError()
        ):
            response = client.post("/forgot-password", json={"email": account.email})

        assert response.status_code == 500
        assert response.json() == {"message": "Error updating reset token"}
        assert mailer.sent == []

    def test_unexpected_error(self, client: TestClient, account: Account):
        failing_client = TestClient(app, raise_server_exceptions=False)
        with patch(
            "reset_api.services.password_reset.request_reset",
            side_effect=RuntimeError("boom"),
        ):
            response = failing_client.post(
                "/forgot-password", json={"email": account.email}
            )

        assert response.status_code == 500
        assert response.json() == {"message": "Internal server error"}


class TestResetPassword:
    def test_full_flow(
        self, session: Session, client: TestClient, account: Account, mailer
    ):
        client.post("/forgot-password", json={"email": account.email})
        session.refresh(account)
        token = account.reset_token

        response = client.post(
            "/reset-password", json={"token": token, "newPassword": NEW_PASSWORD}
        )

        assert response.status_code == 200
        assert response.json() == {"message": "Password reset successful"}
        session.refresh(account)
        assert account.password_hash == Sha256PasswordHasher().hash(NEW_PASSWORD)
        assert account.reset_token is None
        assert account.token_expiry is None

    def test_token_cannot_be_reused(
        self, client: TestClient, account_factory
    ):
        account_factory(
            reset_token="validtoken",
            token_expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        )
        payload = {"token": "validtoken", "newPassword": NEW_PASSWORD}

        assert client.post("/reset-password", json=payload).status_code == 200
        response = client.post("/reset-password", json=payload)

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid or expired token"}

    def test_expired_token(self, session: Session, client: TestClient, account_factory):
        account = account_factory(
            reset_token="expiredtoken",
            token_expiry=datetime.now(timezone.utc) - timedelta(minutes=1),
        )
        original_hash = account.password_hash

        response = client.post(
            "/reset-password",
            json={"token": "expiredtoken", "newPassword": NEW_PASSWORD},
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Token has expired"}
        session.refresh(account)
        assert account.password_hash == original_hash
        assert account.reset_token == "expiredtoken"

    def test_unknown_token(self, client: TestClient, account: Account):
        response = client.post(
            "/reset-password", json={"token": "garbage", "newPassword": NEW_PASSWORD}
        )

        assert response.status_code == 400
        assert response.json() == {"message": "Invalid or expired token"}

    @pytest.mark.parametrize(
        "payload",
        [
            {},
            {"token": "abc"},
            {"newPassword": NEW_PASSWORD},
            {"token": "", "newPassword": NEW_PASSWORD},
            {"token": "abc", "newPassword": ""},
        ],
    )
    def test_missing_fields(self, client: TestClient, payload):
        response = client.post("/reset-password", json=payload)

        assert response.status_code == 400
        assert response.json() == {"message": "Token and new password are required"}

    @pytest.mark.parametrize(
        "request_kwargs",
        [
            {},
            {"json": ["abc", NEW_PASSWORD]},
            {"json": "abc"},
            {"content": b"not json"},
        ],
    )
    def test_missing_or_non_object_body(self, client: TestClient, request_kwargs):
        response = client.post("/reset-password", **request_kwargs)

        assert response.status_code == 400
        assert response.json() == {"message": "Token and new password are required"}

    def test_write_failure(self, session: Session, client: TestClient, account_factory):
        account = account_factory(
            reset_token="validtoken",
            token_expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        )

        with patch.object(
            SqlAccountStore, "update_fields", side_effect=PersistenceError()
        ):
            response = client.post(
                "/reset-password",
                json={"token": "validtoken", "newPassword": NEW_PASSWORD},
            )

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to reset password"}
        session.refresh(account)
        assert account.reset_token == "validtoken"

    def test_account_removed_during_reset(
        self, client: TestClient, account_factory
    ):
        account_factory(
            reset_token="validtoken",
            token_expiry=datetime.now(timezone.utc) + timedelta(hours=1),
        )

        with patch.object(
            SqlAccountStore,
            "update_fields",
            side_effect=NotFoundError("Account", 1),
        ):
            response = client.post(
                "/reset-password",
                json={"token": "validtoken", "newPassword": NEW_PASSWORD},
            )

        assert response.status_code == 500
        assert response.json() == {"message": "Failed to reset password"}
