import pytest
import uuid
from unittest.mock import patch
from sqlmodel import select

from campus_connect.core.exceptions import ScopeError, ValidationError
from campus_connect.models.account import Account
from campus_connect.models.comment import Comment
from campus_connect.models.enums import IdentityRole, PostType
from campus_connect.models.identity import Identity
from campus_connect.models.post import Post
from campus_connect.services import approval_service
from campus_connect.services.audit_service import list_actions_for


# ------------------------------------------------------------
# SERVICE LEVEL
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_approve_then_revoke_round_trip(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CCS")
    admin = await make_identity(IdentityRole.Admin, "CCS", approved=False)

    result = await approval_service.approve(db_session, head, admin.id)
    assert result.outcome == "approved"
    assert result.identity.is_approved is True
    assert result.identity.approved_by == head.id
    assert result.identity.approved_at is not None

    again = await approval_service.approve(db_session, head, admin.id)
    assert again.outcome == "already_approved"

    revoked = await approval_service.revoke(db_session, head, admin.id)
    assert revoked.outcome == "revoked"
    assert revoked.identity.is_approved is False
    assert revoked.identity.approved_by is None
    assert revoked.identity.approved_at is None

    noop = await approval_service.revoke(db_session, head, admin.id)
    assert noop.outcome == "already_pending"


@pytest.mark.asyncio
async def test_cross_department_is_out_of_scope(db_session, make_identity):
    ccs_head = await make_identity(IdentityRole.SuperAdmin, "CCS")
    coe_user = await make_identity(IdentityRole.User, "COE", approved=False)

    with pytest.raises(ScopeError):
        await approval_service.approve(db_session, ccs_head, coe_user.id)

    await db_session.refresh(coe_user)
    assert coe_user.is_approved is False


@pytest.mark.asyncio
async def test_only_program_heads_manage_approvals(db_session, make_identity):
    admin = await make_identity(IdentityRole.Admin, "CCS")
    user = await make_identity(IdentityRole.User, "CCS", approved=False)

    with pytest.raises(ScopeError):
        await approval_service.approve(db_session, admin, user.id)
    with pytest.raises(ScopeError):
        await approval_service.list_profiles(db_session, admin, approved=False)


@pytest.mark.asyncio
async def test_program_heads_are_not_approvable(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CAS")
    with pytest.raises(ValidationError):
        await approval_service.revoke(db_session, head, head.id)


@pytest.mark.asyncio
async def test_reject_removes_everything_and_is_retry_safe(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "COC")
    target = await make_identity(IdentityRole.User, "COC", approved=False)

    result = await approval_service.reject(db_session, head, target.id)
    assert result.outcome == "rejected"

    assert await db_session.get(Identity, target.id) is None
    assert await db_session.get(Account, target.id) is None

    retry = await approval_service.reject(db_session, head, target.id)
    assert retry.outcome == "already_gone"


@pytest.mark.asyncio
async def test_reject_cascades_to_content(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CED")
    admin = await make_identity(IdentityRole.Admin, "CED")
    other = await make_identity(IdentityRole.User, "CED")

    post = Post(
        title="Orientation", content="Gym, 9am", type=PostType.Announcement,
        department=admin.department, author_id=admin.id,
    )
    db_session.add(post)
    await db_session.flush()
    db_session.add(Comment(post_id=post.id, user_id=other.id, content="See you"))
    await db_session.commit()

    await approval_service.revoke(db_session, head, admin.id)
    await approval_service.reject(db_session, head, admin.id)

    assert (await db_session.execute(select(Post))).scalars().all() == []
    assert (await db_session.execute(select(Comment))).scalars().all() == []
    assert await db_session.get(Identity, other.id) is not None


@pytest.mark.asyncio
async def test_reject_requires_pending(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CBAA")
    user = await make_identity(IdentityRole.User, "CBAA", approved=True)

    with pytest.raises(ValidationError, match="Revoke approval"):
        await approval_service.reject(db_session, head, user.id)


@pytest.mark.asyncio
async def test_listing_is_department_scoped(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CCS")
    pending_admin = await make_identity(IdentityRole.Admin, "CCS", approved=False)
    pending_user = await make_identity(IdentityRole.User, "CCS", approved=False)
    await make_identity(IdentityRole.User, "COE", approved=False)
    approved_user = await make_identity(IdentityRole.User, "CCS", approved=True)

    pending = await approval_service.list_profiles(db_session, head, approved=False)
    assert {p.id for p in pending} == {pending_admin.id, pending_user.id}

    only_admins = await approval_service.list_profiles(db_session, head, approved=False, role=IdentityRole.Admin)
    assert [p.id for p in only_admins] == [pending_admin.id]

    approved = await approval_service.list_profiles(db_session, head, approved=True)
    assert [p.id for p in approved] == [approved_user.id]


@pytest.mark.asyncio
async def test_transitions_are_audited(db_session, make_identity):
    head = await make_identity(IdentityRole.SuperAdmin, "CAS", name="Dean Cruz")
    user = await make_identity(IdentityRole.User, "CAS", approved=False)

    await approval_service.approve(db_session, head, user.id)
    await approval_service.approve(db_session, head, user.id)  # no-op, not audited
    await approval_service.revoke(db_session, head, user.id)

    entries = await list_actions_for(db_session, user.id)
    assert [e.action for e in entries] == ["approve", "revoke"]
    assert entries[0].actor_name == "Dean Cruz"
    assert entries[0].details["department"] == "CAS"


# ------------------------------------------------------------
# HTTP
# ------------------------------------------------------------
@pytest.mark.asyncio
async def test_approval_endpoints(client, make_identity, auth_headers):
    head = await make_identity(IdentityRole.SuperAdmin, "CCS")
    user = await make_identity(IdentityRole.User, "CCS", approved=False)
    headers = await auth_headers(head)

    response = await client.get("/api/approvals/pending", headers=headers)
    assert response.status_code == 200
    assert [p["id"] for p in response.json()] == [str(user.id)]
    assert response.json()[0]["approval_state"] == "pending"

    with patch("campus_connect.api.endpoints.approvals.send_account_approved_email") as mock_send:
        response = await client.post(f"/api/approvals/{user.id}/approve", headers=headers)
        assert response.status_code == 200
        assert response.json()["outcome"] == "approved"
        mock_send.assert_called_once()

        response = await client.post(f"/api/approvals/{user.id}/approve", headers=headers)
        assert response.json()["outcome"] == "already_approved"
        mock_send.assert_called_once()

    response = await client.get("/api/approvals/approved", headers=headers)
    assert [p["id"] for p in response.json()] == [str(user.id)]


@pytest.mark.asyncio
async def test_reject_endpoint_twice(client, make_identity, auth_headers):
    head = await make_identity(IdentityRole.SuperAdmin, "COE")
    user = await make_identity(IdentityRole.User, "COE", approved=False)
    headers = await auth_headers(head)

    first = await client.post(f"/api/approvals/{user.id}/reject", headers=headers)
    assert first.json()["outcome"] == "rejected"

    second = await client.post(f"/api/approvals/{user.id}/reject", headers=headers)
    assert second.status_code == 200
    assert second.json()["outcome"] == "already_gone"


@pytest.mark.asyncio
async def test_approve_unknown_profile(client, make_identity, auth_headers):
    head = await make_identity(IdentityRole.SuperAdmin, "COE")
    response = await client.post(f"/api/approvals/{uuid.uuid4()}/approve", headers=await auth_headers(head))
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_cross_department_endpoint(client, make_identity, auth_headers):
    head = await make_identity(IdentityRole.SuperAdmin, "CCS")
    user = await make_identity(IdentityRole.User, "COC", approved=False)

    response = await client.post(f"/api/approvals/{user.id}/approve", headers=await auth_headers(head))
    assert response.status_code == 403
    assert response.json()["code"] == "ScopeError"


@pytest.mark.asyncio
async def test_admins_cannot_reach_approvals(client, make_identity, auth_headers):
    admin = await make_identity(IdentityRole.Admin, "CCS")
    response = await client.get("/api/approvals/pending", headers=await auth_headers(admin))
    assert response.status_code == 403


@pytest.mark.asyncio
async def test_history_outlives_rejection(client, make_identity, auth_headers):
    head = await make_identity(IdentityRole.SuperAdmin, "CAS", name="Dean Cruz")
    user = await make_identity(IdentityRole.User, "CAS", approved=False)
    headers = await auth_headers(head)

    with patch("campus_connect.api.endpoints.approvals.send_account_approved_email"):
        await client.post(f"/api/approvals/{user.id}/approve", headers=headers)
    await client.post(f"/api/approvals/{user.id}/revoke", headers=headers)
    await client.post(f"/api/approvals/{user.id}/reject", headers=headers)

    response = await client.get(f"/api/approvals/{user.id}/history", headers=headers)
    assert response.status_code == 200
    entries = response.json()
    assert [e["action"] for e in entries] == ["approve", "revoke", "reject"]
    assert all(e["actor_name"] == "Dean Cruz" for e in entries)


@pytest.mark.asyncio
async def test_history_is_department_scoped(db_session, client, make_identity, auth_headers):
    ccs_head = await make_identity(IdentityRole.SuperAdmin, "CCS")
    coe_head = await make_identity(IdentityRole.SuperAdmin, "COE")
    user = await make_identity(IdentityRole.User, "COE", approved=False)
    await approval_service.approve(db_session, coe_head, user.id)

    response = await client.get(f"/api/approvals/{user.id}/history", headers=await auth_headers(ccs_head))
    assert response.status_code == 403

    await approval_service.revoke(db_session, coe_head, user.id)
    await approval_service.reject(db_session, coe_head, user.id)

    # Once the profile is gone, other departments still see nothing
    response = await client.get(f"/api/approvals/{user.id}/history", headers=await auth_headers(ccs_head))
    assert response.json() == []
    assert len(await approval_service.profile_history(db_session, coe_head, user.id)) == 3
