# campus_connect/core/security.py
import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any, Optional, Union

import jwt
from passlib.context import CryptContext
from campus_connect.core.config import settings

# 1. Configuration
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
ALGORITHM = "HS256"

ACCESS_PURPOSE = "access"
VERIFY_EMAIL_PURPOSE = "verify_email"


# 2. Password Handling
def _pre_hash_password(password: str) -> str:
    """
    Handle the 'bcrypt 72-byte limit' safely.
    Passwords longer than 72 bytes are SHA-256 hashed first so the
    entire password matters, regardless of length.
    """
    if len(password.encode('utf-8')) <= 72:
        return password

    # SHA-256 hexdigest is 64 chars, which fits inside 72 bytes.
    return hashlib.sha256(password.encode('utf-8')).hexdigest()


def hash_password(password: str) -> str:
    return pwd_context.hash(_pre_hash_password(password))


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(_pre_hash_password(plain_password), hashed_password)


# 3. Token Creation
def create_access_token(
    subject: Union[str, Any],
    expires_delta: Optional[timedelta] = None,
    data: Optional[dict] = None
) -> str:
    now = datetime.now(timezone.utc)
    if expires_delta:
        expire = now + expires_delta
    else:
        expire = now + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)

    to_encode = {
        "sub": str(subject),
        "purpose": ACCESS_PURPOSE,
        "exp": expire,
        "iat": now,
        "nbf": now,
    }

    if data:
        to_encode.update(data)

    return jwt.encode(to_encode, settings.SECRET_KEY, algorithm=ALGORITHM)


def create_email_verification_token(subject: Union[str, Any]) -> str:
    return create_access_token(
        subject,
        expires_delta=timedelta(hours=settings.EMAIL_VERIFY_EXPIRE_HOURS),
        data={"purpose": VERIFY_EMAIL_PURPOSE},
    )


# 4. Decoding
def decode_token(token: str, purpose: str = ACCESS_PURPOSE) -> dict:
    """
    Raises jwt.InvalidTokenError (including ExpiredSignatureError)
    when the token is malformed, expired or minted for another purpose.
    """
    payload = jwt.decode(
        token,
        settings.SECRET_KEY,
        algorithms=[ALGORITHM],
        options={"verify_exp": True}
    )
    if payload.get("purpose") != purpose:
        raise jwt.InvalidTokenError(f"Token is not valid for '{purpose}'")
    return payload
