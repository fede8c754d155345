import pytest
from unittest.mock import patch

from campus_connect.core.config import settings
from campus_connect.core.exceptions import ApprovalPendingError, AuthError, NotFoundError, ValidationError
from campus_connect.models.account import Account
from campus_connect.models.enums import IdentityRole
from campus_connect.models.identity import Identity
from campus_connect.services import auth_service, identity_service

DEFAULT_PASSWORD = "secret123"


# ------------------------------------------------------------
# SERVICE LEVEL
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_super_admin_lands_on_head_dashboard(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CCS")

    context = await identity_service.establish_session(db_session, head.email, DEFAULT_PASSWORD)

    assert context.identity.id == head.id
    assert context.role == IdentityRole.SuperAdmin
    assert context.redirect_to == "/super-admin-dashboard"
    assert await auth_service.get_session(db_session, context.token) is not None


@pytest.mark.asyncio
async def test_approved_admin_lands_on_dashboard(db_session, make_identity):
    admin = await make_identity(IdentityRole.Admin, "COE")
    context = await identity_service.establish_session(db_session, admin.email, DEFAULT_PASSWORD)
    assert context.redirect_to == "/dashboard"


@pytest.mark.asyncio
async def test_pending_admin_is_refused_and_signed_out(db_session, make_identity):
    admin = await make_identity(IdentityRole.Admin, "CCS", approved=False)
    account = await db_session.get(Account, admin.id)
    version_before = account.token_version

    with pytest.raises(ApprovalPendingError, match="pending approval"):
        await identity_service.establish_session(db_session, admin.email, DEFAULT_PASSWORD)

    await db_session.refresh(account)
    assert account.token_version == version_before + 1

    profile = await db_session.get(Identity, admin.id)
    assert profile.is_approved is False


@pytest.mark.asyncio
async def test_account_without_profile_is_refused(db_session):
    account = auth_service.sign_up(db_session, "ghost@example.com", DEFAULT_PASSWORD)
    await db_session.commit()

    with pytest.raises(NotFoundError, match="sign up first"):
        await identity_service.establish_session(db_session, "ghost@example.com", DEFAULT_PASSWORD)

    await db_session.refresh(account)
    assert account.token_version == 1


@pytest.mark.asyncio
async def test_wrong_password(db_session, make_identity):
    user = await make_identity(IdentityRole.User)
    with pytest.raises(AuthError, match="Invalid login credentials"):
        await identity_service.establish_session(db_session, user.email, "not-the-password")


@pytest.mark.asyncio
async def test_blank_credentials(db_session):
    with pytest.raises(ValidationError):
        await identity_service.establish_session(db_session, "  ", "")


@pytest.mark.asyncio
async def test_resolution_is_deterministic(db_session, make_identity):
    user = await make_identity(IdentityRole.User, "CAS")
    first = await identity_service.resolve_identity(db_session, user.id)
    second = await identity_service.resolve_identity(db_session, str(user.id))
    assert first.id == second.id == user.id
    assert first.role == second.role == IdentityRole.User


@pytest.mark.asyncio
async def test_unverified_email_blocks_login(db_session):
    with patch.object(settings, "REQUIRE_EMAIL_VERIFICATION", True):
        account = auth_service.sign_up(db_session, "new@example.com", DEFAULT_PASSWORD)
        await db_session.commit()

        with pytest.raises(AuthError, match="Email not confirmed"):
            await auth_service.sign_in_with_password(db_session, "new@example.com", DEFAULT_PASSWORD)

        token = auth_service.issue_email_verification_token(account)
        await auth_service.verify_email(db_session, token)

        verified, session_token = await auth_service.sign_in_with_password(
            db_session, "new@example.com", DEFAULT_PASSWORD
        )
        assert verified.email_verified_at is not None
        assert session_token


@pytest.mark.asyncio
async def test_session_token_cannot_verify_email(db_session, make_identity):
    user = await make_identity(IdentityRole.User)
    account = await db_session.get(Account, user.id)
    with pytest.raises(AuthError, match="invalid or has expired"):
        await auth_service.verify_email(db_session, auth_service.issue_session_token(account))


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_login_endpoint_returns_tier_and_route(client, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CBAA")

    response = await client.post("/api/auth/login", json={"email": head.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == 200
    body = response.json()
    assert body["role"] == "super_admin"
    assert body["redirect_to"] == "/super-admin-dashboard"
    assert body["token_type"] == "bearer"
    assert body["identity"]["department"] == "CBAA"


@pytest.mark.asyncio
async def test_login_endpoint_pending(client, make_identity):
    admin = await make_identity(IdentityRole.Admin, "CCS", approved=False)

    response = await client.post("/api/auth/login", json={"email": admin.email, "password": DEFAULT_PASSWORD})

    assert response.status_code == 403
    assert response.json()["code"] == "ApprovalPendingError"


@pytest.mark.asyncio
async def test_session_endpoint_and_logout(client, make_identity, auth_headers):
    user = await make_identity(IdentityRole.User, "COC")
    headers = await auth_headers(user)

    response = await client.get("/api/auth/session", headers=headers)
    assert response.status_code == 200
    assert response.json()["identity"]["id"] == str(user.id)

    response = await client.post("/api/auth/logout", headers=headers)
    assert response.status_code == 200

    # Old token is dead after sign-out
    response = await client.get("/api/auth/session", headers=headers)
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_revoked_profile_loses_live_session(client, db_session, make_identity, auth_headers):
    admin = await make_identity(IdentityRole.Admin, "CED")
    headers = await auth_headers(admin)

    assert (await client.get("/api/auth/session", headers=headers)).status_code == 200

    admin.is_approved = False
    db_session.add(admin)
    await db_session.commit()

    response = await client.get("/api/posts", headers=headers)
    assert response.status_code == 403
    assert response.json()["code"] == "ApprovalPendingError"

    # Gate signed the account out, so even re-approval does not revive the token
    admin.is_approved = True
    db_session.add(admin)
    await db_session.commit()
    assert (await client.get("/api/auth/session", headers=headers)).status_code == 401


@pytest.mark.asyncio
async def test_missing_token(client):
    response = await client.get("/api/auth/session")
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_signup_endpoint(client):
    with patch("campus_connect.api.endpoints.auth.send_verification_email") as mock_send:
        response = await client.post(
            "/api/auth/signup",
            json={
                "name": "CCS Pres",
                "email": "ccs-admin@spc.edu",
                "password": "secret123",
                "confirm_password": "secret123",
                "role": "admin",
                "department": "CCS",
            },
        )

    assert response.status_code == 201
    body = response.json()
    assert body["identity"]["approval_state"] == "pending"
    assert "pending approval" in body["message"]
    mock_send.assert_called_once()

    duplicate = await client.post(
        "/api/auth/signup",
        json={
            "name": "Impostor",
            "email": "ccs-admin@spc.edu",
            "password": "secret123",
            "confirm_password": "secret123",
            "role": "admin",
            "department": "CCS",
        },
    )
    assert duplicate.status_code == 409
    assert duplicate.json()["detail"] == "An Admin for CCS already exists"


@pytest.mark.asyncio
async def test_signup_endpoint_convention(client):
    response = await client.post(
        "/api/auth/signup",
        json={
            "name": "Head",
            "email": "me@spc.edu",
            "password": "secret123",
            "confirm_password": "secret123",
            "role": "super_admin",
            "department": "CAS",
        },
    )
    assert response.status_code == 400
    assert response.json()["detail"] == "Program Head email must be cas-head@spc.edu for CAS department"


@pytest.mark.asyncio
async def test_verify_email_endpoint(client, db_session):
    with patch.object(settings, "REQUIRE_EMAIL_VERIFICATION", True):
        account = auth_service.sign_up(db_session, "verify@example.com", DEFAULT_PASSWORD)
        await db_session.commit()
        token = auth_service.issue_email_verification_token(account)

        response = await client.get("/api/auth/verify-email", params={"token": token})
        assert response.status_code == 200

        bad = await client.get("/api/auth/verify-email", params={"token": "garbage"})
        assert bad.status_code == 401
