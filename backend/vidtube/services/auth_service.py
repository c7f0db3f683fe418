"""Password hashing and the access/refresh token pair."""
import logging
import uuid
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt
from passlib.context import CryptContext
from starlette.concurrency import run_in_threadpool

from vidtube.config import Settings
from vidtube.models.user import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

ACCESS_TOKEN_TYPE = "access"
REFRESH_TOKEN_TYPE = "refresh"


async def hash_password(password: str) -> str:
    # bcrypt is CPU bound; keep it off the event loop
    return await run_in_threadpool(pwd_context.hash, password)


async def verify_password(password: str, hashed: str) -> bool:
    try:
        return await run_in_threadpool(pwd_context.verify, password, hashed)
    except ValueError:
        # Malformed hash in the database
        logger.warning("Stored password hash could not be parsed")
        return False


def _encode(claims: dict, secret: str, algorithm: str, expires_minutes: int) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "iat": now,
        "exp": now + timedelta(minutes=expires_minutes),
        # Unique per token so rotation never reissues an identical value
        "jti": uuid.uuid4().hex,
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def create_access_token(user: User, settings: Settings) -> str:
    claims = {
        "sub": str(user.id),
        "type": ACCESS_TOKEN_TYPE,
        "email": user.email,
        "username": user.username,
        "full_name": user.full_name,
    }
    return _encode(
        claims, settings.access_token_secret, settings.algorithm, settings.access_token_expire_minutes
    )


def create_refresh_token(user: User, settings: Settings) -> str:
    claims = {"sub": str(user.id), "type": REFRESH_TOKEN_TYPE}
    return _encode(
        claims, settings.refresh_token_secret, settings.algorithm, settings.refresh_token_expire_minutes
    )


def _decode(token: str, secret: str, algorithm: str, token_type: str) -> dict | None:
    try:
        payload = jwt.decode(token, secret, algorithms=[algorithm])
    except JWTError as e:
        logger.info(f"Rejected {token_type} token: {e}")
        return None
    if payload.get("type") != token_type or "sub" not in payload:
        return None
    return payload


def decode_access_token(token: str, settings: Settings) -> dict | None:
    return _decode(token, settings.access_token_secret, settings.algorithm, ACCESS_TOKEN_TYPE)


def decode_refresh_token(token: str, settings: Settings) -> dict | None:
    return _decode(token, settings.refresh_token_secret, settings.algorithm, REFRESH_TOKEN_TYPE)


def parse_subject(payload: dict) -> uuid.UUID | None:
    try:
        return uuid.UUID(payload["sub"])
    except (KeyError, ValueError, TypeError):
        return None
