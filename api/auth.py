"""Authentication utilities: password hashing, JWT tokens and the caller's identity."""

from __future__ import annotations

import os
from datetime import UTC, datetime, timedelta

import structlog
from bson import ObjectId
from bson.errors import InvalidId
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from motor.motor_asyncio import AsyncIOMotorCollection
from opentelemetry import trace
from passlib.context import CryptContext

from .database import get_db
from .errors import UnauthenticatedError

# Initialize logger
logger = structlog.get_logger(__name__)


# JWT Configuration
SECRET_KEY = os.getenv("JWT_SECRET_KEY", "jhonote-secret-change-in-production")
ALGORITHM = os.getenv("JWT_ALGORITHM", "HS256")
EXPIRATION_DAYS = int(os.getenv("JWT_EXPIRATION_DAYS", "7"))

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

# auto_error=False so a missing header is reported as 401, like a bad token
security = HTTPBearer(auto_error=False)


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def get_users_collection() -> AsyncIOMotorCollection:
    """Dependency returning the users collection."""
    return get_db().users


def create_access_token(user_id: str, email: str) -> str:
    """
    Create a JWT access token for a user.

    Args:
        user_id: The user's ID
        email: The user's email

    Returns:
        Encoded JWT token
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("create_access_token") as span:
        span.set_attribute("user.id", user_id)

        expire = datetime.now(UTC) + timedelta(days=EXPIRATION_DAYS)
        to_encode = {
            "sub": user_id,
            "email": email,
            "exp": expire,
        }
        encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)

        logger.debug("jwt_token_created", user_id=user_id)

        return encoded_jwt


def decode_access_token(token: str) -> dict | None:
    """Decode and verify a JWT token; None if it is invalid or expired."""
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("decode_access_token") as span:
        try:
            payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM])
        except JWTError as e:
            logger.warning("jwt_token_decode_failed", error=str(e), error_type=type(e).__name__)
            span.set_attribute("error", True)
            span.set_attribute("error.type", type(e).__name__)
            return None

        span.set_attribute("user.id", str(payload.get("sub")))
        return payload


async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(security),
    users: AsyncIOMotorCollection = Depends(get_users_collection),
) -> dict:
    """
    Dependency to get the current authenticated user.

    Raises UnauthenticatedError when the token is missing or invalid, or the
    user no longer exists; 403 when the account is disabled.
    """
    tracer = trace.get_tracer(__name__)

    with tracer.start_as_current_span("get_current_user") as span:
        if credentials is None:
            logger.warning("auth_failed_missing_token")
            raise UnauthenticatedError("Not authenticated")

        payload = decode_access_token(credentials.credentials)
        if payload is None:
            logger.warning("auth_failed_invalid_token")
            raise UnauthenticatedError()

        user_id = payload.get("sub")
        if user_id is None:
            logger.warning("auth_failed_missing_user_id")
            raise UnauthenticatedError()

        span.set_attribute("user.id", user_id)

        try:
            user_obj_id = ObjectId(user_id)
        except (InvalidId, TypeError):
            logger.warning("auth_failed_invalid_user_id", user_id=user_id)
            raise UnauthenticatedError("Invalid user ID")

        user = await users.find_one({"_id": user_obj_id})
        if user is None:
            logger.warning("auth_failed_user_not_found", user_id=user_id)
            raise UnauthenticatedError("User not found")

        if user.get("status") != "active":
            logger.warning("auth_failed_account_disabled", user_id=user_id)
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN, detail="User account is disabled"
            )

        logger.debug("auth_user_authenticated", user_id=user_id)

        return user


async def get_current_owner_id(current_user: dict = Depends(get_current_user)) -> str:
    """Owner id of the authenticated caller, used to scope every note operation."""
    return str(current_user["_id"])
