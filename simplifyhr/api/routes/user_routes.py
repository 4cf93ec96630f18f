"""
User Management Routes (admins)

POST /users - Create user with any role
GET /users - List users (filter by role / active)
GET /users/interviewers - Users who can be assigned to interview rounds
PUT /users/{user_id} - Update profile, role or active flag
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from simplifyhr.core.auth import ADMIN_ROLES, HIRING_ROLES, hash_password, require_roles
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    InterviewerResponse, MessageResponse, UserCreate, UserResponse, UserRole, UserUpdate
)

router = APIRouter(prefix="/users", tags=["Users"])

USER_COLUMNS = "user_id, email, role, first_name, last_name, phone, company_name, is_active, created_at"


@router.post("", response_model=UserResponse, status_code=201)
async def create_user(data: UserCreate, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    """Create a user account. Only super admins can create other super admins."""
    if data.role == UserRole.super_admin and admin["role"] != "super_admin":
        raise HTTPException(status_code=403, detail="Only super admins can create super admins")

    with get_db_session() as db:
        result = db.execute(
            text("SELECT user_id FROM users WHERE LOWER(email) = LOWER(:email)"),
            {"email": data.email}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Email already registered")

        result = db.execute(
            text(f"""
                INSERT INTO users (email, password_hash, role, first_name, last_name, phone, company_name)
                VALUES (:email, :password_hash, :role, :first_name, :last_name, :phone, :company_name)
                RETURNING {USER_COLUMNS}
            """),
            {
                "email": data.email,
                "password_hash": hash_password(data.password),
                "role": data.role.value,
                "first_name": data.first_name,
                "last_name": data.last_name,
                "phone": data.phone,
                "company_name": data.company_name
            }
        )
        row = result.fetchone()

        if data.role == UserRole.candidate:
            db.execute(text("INSERT INTO candidates (user_id) VALUES (:uid)"), {"uid": row[0]})

    return UserResponse(
        user_id=row[0], email=row[1], role=row[2], first_name=row[3], last_name=row[4],
        phone=row[5], company_name=row[6], is_active=row[7], created_at=row[8]
    )


@router.get("", response_model=List[UserResponse])
async def list_users(
    role: Optional[UserRole] = Query(None),
    is_active: Optional[bool] = Query(None),
    admin: dict = Depends(require_roles(*ADMIN_ROLES))
):
    """List all users, newest first."""
    sql = f"SELECT {USER_COLUMNS} FROM users WHERE 1=1"
    params = {}

    if role:
        sql += " AND role = :role"
        params["role"] = role.value
    if is_active is not None:
        sql += " AND is_active = :is_active"
        params["is_active"] = is_active

    sql += " ORDER BY created_at DESC"
    return [UserResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/interviewers", response_model=List[InterviewerResponse])
async def list_interviewers(user: dict = Depends(require_roles(*HIRING_ROLES))):
    """Active users that can be assigned to human interview rounds."""
    results = execute_raw_sql("""
        SELECT user_id, first_name, last_name, email, role
        FROM users
        WHERE is_active = TRUE AND role IN ('interviewer', 'admin', 'super_admin')
        ORDER BY first_name, last_name
    """)
    return [InterviewerResponse(**r) for r in results]


@router.put("/{user_id}", response_model=MessageResponse)
async def update_user(user_id: int, data: UserUpdate, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    """Update a user's profile fields, role or active flag."""
    updates = []
    params = {"id": user_id}

    for field in ["first_name", "last_name", "phone", "company_name", "is_active"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value
    if data.role:
        if data.role == UserRole.super_admin and admin["role"] != "super_admin":
            raise HTTPException(status_code=403, detail="Only super admins can grant super admin")
        updates.append("role = :role")
        params["role"] = data.role.value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        result = db.execute(
            text(f"UPDATE users SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :id"),
            params
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="User not found")

    return MessageResponse(message="User updated successfully")
