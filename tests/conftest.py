import os
import uuid
import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport

# ------------------------------------------------------------------
# FORCE TESTING MODE
# Must be set BEFORE importing campus_connect so settings and the
# engine pick up the in-memory database.
# ------------------------------------------------------------------
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["SECRET_KEY"] = "test-secret-key-with-enough-length-for-hs256"
os.environ["REQUIRE_EMAIL_VERIFICATION"] = "false"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["ENV"] = "test"
for key in ("SMTP_HOST", "SUPABASE_URL", "SUPABASE_KEY", "REDIS_URL"):
    os.environ.pop(key, None)

from campus_connect.main import app  # noqa: E402
from campus_connect.core.database import AsyncSessionLocal, drop_db, engine, init_db  # noqa: E402
from campus_connect.core.constants import Department  # noqa: E402
from campus_connect.core.security import hash_password  # noqa: E402
from campus_connect.models.account import Account, utcnow  # noqa: E402
from campus_connect.models.enums import IdentityRole  # noqa: E402
from campus_connect.models.identity import Identity  # noqa: E402
from campus_connect.services.auth_service import issue_session_token  # noqa: E402

DEFAULT_PASSWORD = "secret123"


@pytest_asyncio.fixture(autouse=True)
async def fresh_database():
    await init_db()
    yield
    await drop_db()
    await engine.dispose()


@pytest_asyncio.fixture
async def db_session():
    async with AsyncSessionLocal() as session:
        yield session


@pytest_asyncio.fixture
async def client():
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as ac:
        yield ac


@pytest.fixture
def make_identity(db_session):
    """
    Inserts an account + profile directly, bypassing sign-up rules.
    Head roles get the conventional email unless one is given.
    """

    async def _make(
        role: IdentityRole = IdentityRole.User,
        department: str = "CCS",
        email: str | None = None,
        approved: bool = True,
        name: str | None = None,
    ) -> Identity:
        if email is None:
            suffix = {IdentityRole.Admin: "admin", IdentityRole.SuperAdmin: "head"}.get(role)
            if suffix:
                email = f"{department.lower()}-{suffix}@spc.edu"
            else:
                email = f"student-{uuid.uuid4().hex[:8]}@example.com"

        account = Account(
            email=email,
            password_hash=hash_password(DEFAULT_PASSWORD),
            email_verified_at=utcnow(),
        )
        db_session.add(account)
        await db_session.flush()

        identity = Identity(
            id=account.id,
            name=name or f"{role.value} {department}",
            email=email,
            department=Department(department),
            role=role,
            is_approved=None if role == IdentityRole.SuperAdmin else approved,
        )
        db_session.add(identity)
        await db_session.commit()
        await db_session.refresh(identity)
        return identity

    return _make


@pytest.fixture
def auth_headers(db_session):
    async def _headers(identity: Identity) -> dict:
        account = await db_session.get(Account, identity.id)
        await db_session.refresh(account)
        return {"Authorization": f"Bearer {issue_session_token(account)}"}

    return _headers
