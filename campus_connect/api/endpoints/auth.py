# campus_connect/api/endpoints/auth.py

from typing import Optional

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from campus_connect.api.deps import bearer_scheme, get_db_session, get_session_context
from campus_connect.core.rate_limiter import limiter
from campus_connect.models.enums import IdentityRole
from campus_connect.schemas.auth import LoginRequest, SessionRead, SignUpRequest, SignUpResponse
from campus_connect.schemas.identity import IdentityRead
from campus_connect.services import auth_service
from campus_connect.services.email_service import send_verification_email
from campus_connect.services.identity_service import (
    SessionContext,
    establish_session,
    session_expires_in,
)
from campus_connect.services.registration_service import register

router = APIRouter(prefix="/api/auth", tags=["Auth"])


def to_session_read(context: SessionContext) -> SessionRead:
    return SessionRead(
        access_token=context.token,
        expires_in=session_expires_in(),
        account_id=context.account_id,
        role=context.role,
        redirect_to=context.redirect_to,
        identity=IdentityRead.model_validate(context.identity),
    )


# -------------------------------------------------------------------
# SIGN UP (public)
# -------------------------------------------------------------------
@router.post("/signup", response_model=SignUpResponse, status_code=status.HTTP_201_CREATED)
@limiter.limit("5/minute")
async def signup(
    request: Request,
    data: SignUpRequest,
    background_tasks: BackgroundTasks,
    session: AsyncSession = Depends(get_db_session),
):
    registration = await register(session, data)
    identity = registration.identity

    # Plain dict so the task does not depend on the closed DB session
    background_tasks.add_task(send_verification_email, {
        "name": identity.name,
        "email": identity.email,
        "role": identity.role.value,
        "department": identity.department.value,
        "token": registration.verification_token,
    })

    if identity.role == IdentityRole.SuperAdmin:
        message = "Program Head account created! Please verify your email."
    else:
        message = "Account created successfully! Your account is pending approval from your Program Head."

    return SignUpResponse(identity=IdentityRead.model_validate(identity), message=message)


# -------------------------------------------------------------------
# LOGIN
# -------------------------------------------------------------------
@router.post("/login", response_model=SessionRead)
@limiter.limit("10/minute")
async def login(
    request: Request,
    payload: LoginRequest,
    session: AsyncSession = Depends(get_db_session),
):
    context = await establish_session(session, payload.email, payload.password)
    return to_session_read(context)


# -------------------------------------------------------------------
# LOGOUT (works for any live token, approved or not)
# -------------------------------------------------------------------
@router.post("/logout")
async def logout(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    session: AsyncSession = Depends(get_db_session),
):
    account = await auth_service.get_session(session, credentials.credentials if credentials else None)
    if account is None:
        raise HTTPException(status.HTTP_401_UNAUTHORIZED, "Not authenticated")

    await auth_service.sign_out(session, account)
    return {"detail": "Logged out successfully"}


# -------------------------------------------------------------------
# CURRENT SESSION
# -------------------------------------------------------------------
@router.get("/session", response_model=SessionRead)
async def current(context: SessionContext = Depends(get_session_context)):
    return to_session_read(context)


# -------------------------------------------------------------------
# EMAIL VERIFICATION LINK
# -------------------------------------------------------------------
@router.get("/verify-email")
async def verify_email(
    token: str = Query(...),
    session: AsyncSession = Depends(get_db_session),
):
    await auth_service.verify_email(session, token)
    return {"detail": "Email verified. You can now log in."}
