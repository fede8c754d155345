from pydantic import BaseModel
from typing import Optional
from uuid import UUID

from campus_connect.models.enums import IdentityRole
from campus_connect.schemas.identity import IdentityRead


# -------------------------------------------------------------------
# SIGN UP REQUEST
# -------------------------------------------------------------------
class SignUpRequest(BaseModel):
    # Plain strings: emptiness and conventions are checked by the
    # registration validator so the caller gets one error taxonomy.
    name: str = ""
    email: str = ""
    password: str = ""
    confirm_password: str = ""
    role: IdentityRole = IdentityRole.User
    department: str = "CCS"

    class Config:
        json_schema_extra = {
            "examples": [
                {
                    "name": "Juan Dela Cruz",
                    "email": "juan@example.com",
                    "password": "secret123",
                    "confirm_password": "secret123",
                    "role": "user",
                    "department": "CCS"
                },
                {
                    "name": "CCS President",
                    "email": "ccs-admin@spc.edu",
                    "password": "secret123",
                    "confirm_password": "secret123",
                    "role": "admin",
                    "department": "CCS"
                },
                {
                    "name": "CCS Program Head",
                    "email": "ccs-head@spc.edu",
                    "password": "secret123",
                    "confirm_password": "secret123",
                    "role": "super_admin",
                    "department": "CCS"
                }
            ]
        }


class SignUpResponse(BaseModel):
    identity: IdentityRead
    message: str


# -------------------------------------------------------------------
# LOGIN REQUEST
# -------------------------------------------------------------------
class LoginRequest(BaseModel):
    email: str = ""
    password: str = ""


# -------------------------------------------------------------------
# SESSION RESPONSE (login + /session)
# -------------------------------------------------------------------
class SessionRead(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None
    account_id: UUID
    role: IdentityRole
    redirect_to: str
    identity: IdentityRead


# -------------------------------------------------------------------
# PASSWORD CHANGE
# -------------------------------------------------------------------
class ChangePasswordRequest(BaseModel):
    new_password: str
    confirm_password: str
