from unittest.mock import AsyncMock, patch
from urllib.parse import urlsplit

import pytest
from sqlalchemy import select, func

from app.models import User
from app.services.auth_service import (
    create_access_token,
    create_email_verification_token,
    hash_password,
    verify_password,
)
from app.services.email_service import EmailDeliveryError, build_verification_link
from conftest import PASSWORD, login, signup


async def count_users(session) -> int:
    return (await session.execute(select(func.count(User.id)))).scalar()


class TestSignUp:
    async def test_signup_creates_unverified_user(self, client, session):
        res = await signup(client, "Jane@Example.com", role="client", name="Jane", phone="555-0100")

        assert res.status_code == 201
        body = res.json()
        assert body["next_step"] == "verify_email"
        assert body["user"]["email"] == "jane@example.com"
        assert body["user"]["role"] == "client"
        assert body["user"]["phone"] == "555-0100"
        assert body["user"]["email_verified"] is False
        assert "password_hash" not in body["user"]
        assert await count_users(session) == 1

    async def test_mismatched_passwords_create_nothing(self, client, session):
        res = await client.post(
            "/auth/signup",
            json={
                "name": "Jane",
                "email": "jane@example.com",
                "password": "secret123",
                "confirm_password": "secret124",
                "role": "client",
            },
        )

        assert res.status_code == 400
        assert res.json()["detail"] == "Passwords do not match"
        assert await count_users(session) == 0

    @pytest.mark.parametrize(
        "overrides, detail",
        [
            ({"name": "  "}, "Please fill in all required fields"),
            ({"role": ""}, "Please fill in all required fields"),
            ({"password": "abc", "confirm_password": "abc"}, "Password must be at least 6 characters"),
            ({"role": "admin"}, "Role must be 'client' or 'therapist'"),
            ({"email": "not-an-email"}, "Please enter a valid email address"),
        ],
    )
    async def test_form_errors(self, client, session, overrides, detail):
        payload = {
            "name": "Jane",
            "email": "jane@example.com",
            "password": PASSWORD,
            "confirm_password": PASSWORD,
            "role": "client",
            **overrides,
        }
        res = await client.post("/auth/signup", json=payload)

        assert res.status_code == 400
        assert res.json()["detail"] == detail
        assert await count_users(session) == 0

    async def test_duplicate_email_is_conflict(self, client, session):
        assert (await signup(client, "jane@example.com")).status_code == 201
        res = await signup(client, "JANE@example.com")

        assert res.status_code == 409
        assert await count_users(session) == 1

    async def test_email_failure_does_not_block_signup(self, client, session):
        with patch(
            "app.api.routers.auth.send_verification_email",
            new=AsyncMock(side_effect=EmailDeliveryError("down")),
        ):
            res = await signup(client, "jane@example.com")

        assert res.status_code == 201
        assert await count_users(session) == 1


class TestLogin:
    async def test_login_returns_token_and_setup_flag(self, client):
        await signup(client, "jane@example.com")
        res = await login(client, "jane@example.com")

        assert res.status_code == 200
        body = res.json()
        assert body["token_type"] == "bearer"
        assert body["access_token"]
        # no location yet
        assert body["needs_profile_setup"] is True

    async def test_wrong_password(self, client):
        await signup(client, "jane@example.com")
        res = await login(client, "jane@example.com", "wrong-password")

        assert res.status_code == 401
        assert res.json()["detail"] == "Incorrect email or password"

    async def test_unknown_email(self, client):
        res = await login(client, "nobody@example.com")
        assert res.status_code == 401

    async def test_me_requires_token(self, client):
        res = await client.get("/auth/me")
        assert res.status_code == 401

    async def test_me_and_logout(self, client, make_user):
        user, headers = await make_user("jane@example.com", name="Jane")

        me = await client.get("/auth/me", headers=headers)
        assert me.status_code == 200
        assert me.json()["id"] == user["id"]

        out = await client.post("/auth/logout", headers=headers)
        assert out.status_code == 204

    async def test_token_for_deleted_user_is_rejected(self, client):
        token = create_access_token({"sub": "999"})
        res = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401


class TestEmailVerification:
    async def test_verify_email(self, client, make_user):
        user, headers = await make_user("jane@example.com")
        token = create_email_verification_token(user["id"], user["email"])

        res = await client.post("/auth/verify-email", json={"token": token})

        assert res.status_code == 200
        assert res.json()["email_verified"] is True
        me = await client.get("/auth/me", headers=headers)
        assert me.json()["email_verified"] is True

    async def test_link_in_email_verifies_account(self, client):
        sender = AsyncMock()
        with patch("app.api.routers.auth.send_verification_email", new=sender):
            user = (await signup(client, "jane@example.com")).json()["user"]

        to, _, token = sender.await_args.args
        assert to == "jane@example.com"
        link = urlsplit(build_verification_link(token))

        res = await client.get(f"{link.path}?{link.query}")

        assert res.status_code == 200
        assert res.json()["id"] == user["id"]
        assert res.json()["email_verified"] is True

    async def test_link_with_bad_token(self, client):
        res = await client.get("/auth/verify-email", params={"token": "not-a-token"})
        assert res.status_code == 400

    async def test_access_token_is_not_a_verification_token(self, client, make_user):
        user, headers = await make_user("jane@example.com")
        access = headers["Authorization"].split(" ", 1)[1]

        res = await client.post("/auth/verify-email", json={"token": access})
        assert res.status_code == 400

    async def test_verification_token_is_not_an_access_token(self, client, make_user):
        user, _ = await make_user("jane@example.com")
        token = create_email_verification_token(user["id"], user["email"])

        res = await client.get("/auth/me", headers={"Authorization": f"Bearer {token}"})
        assert res.status_code == 401

    async def test_stale_email_in_token(self, client, make_user):
        user, _ = await make_user("jane@example.com")
        token = create_email_verification_token(user["id"], "old@example.com")

        res = await client.post("/auth/verify-email", json={"token": token})
        assert res.status_code == 400

    async def test_resend_verification(self, client, make_user):
        user, headers = await make_user("jane@example.com")

        res = await client.post("/auth/resend-verification", headers=headers)
        assert res.status_code == 200

        token = create_email_verification_token(user["id"], user["email"])
        await client.post("/auth/verify-email", json={"token": token})
        again = await client.post("/auth/resend-verification", headers=headers)
        assert again.status_code == 400

    async def test_resend_reports_delivery_failure(self, client, make_user):
        _, headers = await make_user("jane@example.com")
        with patch(
            "app.api.routers.auth.send_verification_email",
            new=AsyncMock(side_effect=EmailDeliveryError("down")),
        ):
            res = await client.post("/auth/resend-verification", headers=headers)
        assert res.status_code == 502


def test_password_hashing():
    hashed = hash_password("secret123")
    assert hashed != "secret123"
    assert verify_password("secret123", hashed)
    assert not verify_password("secret124", hashed)
