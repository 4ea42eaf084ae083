"""
Admin accounts: salted password hashes and bearer tokens.

A token carries only the account id in `sub`. The API compares that id with
League.admin_id to decide who may change a league; nothing else is trusted
from the token.
"""
from __future__ import annotations

from datetime import datetime, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext

from leaguehub.config import jwt_secret_key, token_ttl

# bcrypt's startup self-test rejects >72-byte inputs, so stick to pbkdf2
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")
TOKEN_ALGORITHM = "HS256"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain: str, hashed: str | None) -> bool:
    """False for accounts without a stored hash."""
    return bool(hashed) and pwd_context.verify(plain, hashed)


def issue_token(user_id: str, now: datetime | None = None) -> str:
    issued = now or datetime.now(timezone.utc)
    claims = {"sub": user_id, "iat": issued, "exp": issued + token_ttl()}
    return jwt.encode(claims, jwt_secret_key(), algorithm=TOKEN_ALGORITHM)


def user_id_from_token(token: str) -> str | None:
    """Account id of a valid, unexpired token; None for anything else."""
    try:
        claims = jwt.decode(token, jwt_secret_key(), algorithms=[TOKEN_ALGORITHM])
    except JWTError:
        return None
    return claims.get("sub") or None
