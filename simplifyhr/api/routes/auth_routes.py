"""
Authentication Routes

POST /auth/register - Register new user (candidate or client)
POST /auth/login - Login and get JWT token
GET /auth/me - Get current user info
"""

import logging

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text

from simplifyhr.core.auth import create_access_token, get_current_user, hash_password, verify_password
from simplifyhr.db.postgres import get_db_session
from simplifyhr.schemas.schemas import (
    LoginRequest, MessageResponse, RegisterRequest, TokenResponse, UserResponse, UserRole
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Authentication"])

# Other roles are created by admins through /users
SELF_REGISTER_ROLES = {UserRole.candidate, UserRole.client}


@router.post("/register", response_model=MessageResponse, status_code=201)
async def register(request: RegisterRequest):
    """
    Register a new user account.

    Candidates get an empty candidate profile straight away.
    """
    if request.role not in SELF_REGISTER_ROLES:
        raise HTTPException(status_code=403, detail="This role cannot self-register")

    with get_db_session() as db:
        # Check email exists
        result = db.execute(
            text("SELECT user_id FROM users WHERE LOWER(email) = LOWER(:email)"),
            {"email": request.email}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Email already registered")

        result = db.execute(
            text("""
                INSERT INTO users (email, password_hash, role, first_name, last_name, company_name)
                VALUES (:email, :password_hash, :role, :first_name, :last_name, :company_name)
                RETURNING user_id
            """),
            {
                "email": request.email,
                "password_hash": hash_password(request.password),
                "role": request.role.value,
                "first_name": request.first_name,
                "last_name": request.last_name,
                "company_name": request.company_name
            }
        )
        user_id = result.fetchone()[0]

        if request.role == UserRole.candidate:
            db.execute(text("INSERT INTO candidates (user_id) VALUES (:uid)"), {"uid": user_id})

    logger.info("Registered user %d as %s", user_id, request.role.value)
    return MessageResponse(message=f"Registered successfully as {request.role.value}. Please login.")


@router.post("/login", response_model=TokenResponse)
async def login(request: LoginRequest):
    """
    Login and receive JWT access token.

    Include token in requests: Authorization: Bearer <token>
    """
    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id, password_hash, role, is_active FROM users WHERE LOWER(email) = LOWER(:email)"),
            {"email": request.email}
        )
        user = result.fetchone()

    if not user:
        raise HTTPException(status_code=401, detail="Invalid email or password")

    user_id, password_hash, role, is_active = user

    if not verify_password(request.password, password_hash):
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not is_active:
        raise HTTPException(status_code=403, detail="Account deactivated")

    token = create_access_token(data={"sub": str(user_id), "role": role})

    return TokenResponse(access_token=token, user_id=user_id, role=role)


@router.get("/me", response_model=UserResponse)
async def get_me(user: dict = Depends(get_current_user)):
    """Get current authenticated user's info."""
    with get_db_session() as db:
        result = db.execute(
            text("""
                SELECT user_id, email, role, first_name, last_name, phone, company_name, is_active, created_at
                FROM users WHERE user_id = :id
            """),
            {"id": user["user_id"]}
        )
        row = result.fetchone()

    return UserResponse(
        user_id=row[0], email=row[1], role=row[2], first_name=row[3], last_name=row[4],
        phone=row[5], company_name=row[6], is_active=row[7], created_at=row[8]
    )
