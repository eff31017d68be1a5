"""Authentication endpoints."""

from datetime import UTC, datetime

import structlog
from fastapi import APIRouter, Depends, HTTPException
from motor.motor_asyncio import AsyncIOMotorCollection

from ..auth import (
    create_access_token,
    get_current_user,
    get_users_collection,
    hash_password,
    verify_password,
)
from ..models import AuthResponse, LoginRequest, UserCreate, UserResponse
from ..observability import get_app_metrics, get_tracer

# Initialize logger
logger = structlog.get_logger(__name__)

# Get tracer and metrics
tracer = get_tracer(__name__)
metrics = get_app_metrics()

router = APIRouter(prefix="/auth", tags=["authentication"])


def _user_response(user: dict) -> UserResponse:
    return UserResponse(
        id=str(user["_id"]),
        email=user["email"],
        name=user.get("name"),
        status=user["status"],
        created_at=user["created_at"],
    )


@router.post("/register", response_model=AuthResponse, status_code=201)
async def register_user(
    user: UserCreate, users: AsyncIOMotorCollection = Depends(get_users_collection)
):
    """
    Register a new user and return JWT token.

    Email must be unique. The password is stored as a bcrypt hash.
    """
    with tracer.start_as_current_span("register_user") as span:
        span.set_attribute("user.email", user.email)

        logger.info("user_registration_attempt", email=user.email)

        existing_user = await users.find_one({"email": user.email})
        if existing_user:
            logger.warning("registration_failed_duplicate_email", email=user.email)
            metrics.auth_failures.add(1, {"reason": "duplicate_email"})
            raise HTTPException(status_code=409, detail="Email already registered")

        user_doc = {
            "email": user.email,
            "name": user.name or None,
            "password_hash": hash_password(user.password),
            "created_at": datetime.now(UTC),
            "status": "active",
        }

        result = await users.insert_one(user_doc)
        user_doc["_id"] = result.inserted_id
        user_id = str(result.inserted_id)

        span.set_attribute("user.id", user_id)

        access_token = create_access_token(user_id=user_id, email=user.email)

        logger.info("user_registered_successfully", user_id=user_id, email=user.email)
        metrics.user_registrations.add(1)

        return AuthResponse(
            access_token=access_token, token_type="bearer", user=_user_response(user_doc)
        )


@router.post("/login", response_model=AuthResponse)
async def login_user(
    login: LoginRequest, users: AsyncIOMotorCollection = Depends(get_users_collection)
):
    """
    Login with email and password and return JWT token.

    Unknown email and wrong password get the same 401 response.
    """
    with tracer.start_as_current_span("login_user") as span:
        span.set_attribute("user.email", login.email)

        logger.info("user_login_attempt", email=login.email)

        user = await users.find_one({"email": login.email})
        password_hash = user.get("password_hash") if user else None
        if not password_hash or not verify_password(login.password, password_hash):
            logger.warning("login_failed_invalid_credentials", email=login.email)
            metrics.auth_failures.add(1, {"reason": "invalid_credentials"})
            raise HTTPException(status_code=401, detail="Invalid credentials")

        if user.get("status") != "active":
            logger.warning("login_failed_account_disabled", email=login.email)
            metrics.auth_failures.add(1, {"reason": "account_disabled"})
            raise HTTPException(status_code=403, detail="User account is disabled")

        user_id = str(user["_id"])
        span.set_attribute("user.id", user_id)

        access_token = create_access_token(user_id=user_id, email=user["email"])

        logger.info("user_logged_in_successfully", user_id=user_id, email=login.email)
        metrics.user_logins.add(1)

        return AuthResponse(
            access_token=access_token, token_type="bearer", user=_user_response(user)
        )


@router.get("/me", response_model=UserResponse)
async def read_current_user(current_user: dict = Depends(get_current_user)):
    """Return the authenticated user."""
    return _user_response(current_user)
