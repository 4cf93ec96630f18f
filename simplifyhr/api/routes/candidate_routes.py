"""
Candidate Routes

GET /candidates/me - Get own profile
PUT /candidates/me - Update profile
PUT /candidates/me/free-slots - Replace availability windows
"""

import json

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text

from simplifyhr.core.auth import get_current_candidate
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import (
    CandidateProfileResponse, CandidateProfileUpdate, FreeSlotsUpdate, MessageResponse, dedupe_list
)

router = APIRouter(prefix="/candidates", tags=["Candidates"])


@router.get("/me", response_model=CandidateProfileResponse)
async def get_profile(candidate: dict = Depends(get_current_candidate)):
    results = execute_raw_sql("""
        SELECT ca.candidate_id, ca.user_id, u.first_name, u.last_name, u.email, u.phone,
               ca.experience_years, ca.expected_salary, ca.currency, ca.current_location,
               ca.skills, ca.free_slots
        FROM candidates ca JOIN users u ON ca.user_id = u.user_id
        WHERE ca.candidate_id = :id
    """, {"id": candidate["candidate_id"]})
    return CandidateProfileResponse(**results[0])


@router.put("/me", response_model=MessageResponse)
async def update_profile(data: CandidateProfileUpdate, candidate: dict = Depends(get_current_candidate)):
    """Update profile fields; name and phone live on the user row."""
    user_updates = []
    user_params = {"uid": candidate["user_id"]}
    for field in ["first_name", "last_name", "phone"]:
        value = getattr(data, field)
        if value is not None:
            user_updates.append(f"{field} = :{field}")
            user_params[field] = value

    candidate_updates = []
    candidate_params = {"cid": candidate["candidate_id"]}
    for field in ["experience_years", "expected_salary", "currency", "current_location"]:
        value = getattr(data, field)
        if value is not None:
            candidate_updates.append(f"{field} = :{field}")
            candidate_params[field] = value
    if data.skills is not None:
        candidate_updates.append("skills = CAST(:skills AS JSONB)")
        candidate_params["skills"] = json.dumps(dedupe_list(data.skills))

    if not user_updates and not candidate_updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        if user_updates:
            db.execute(
                text(f"UPDATE users SET {', '.join(user_updates)}, updated_at = CURRENT_TIMESTAMP WHERE user_id = :uid"),
                user_params
            )
        if candidate_updates:
            db.execute(
                text(f"UPDATE candidates SET {', '.join(candidate_updates)}, updated_at = CURRENT_TIMESTAMP "
                     "WHERE candidate_id = :cid"),
                candidate_params
            )

    return MessageResponse(message="Profile updated successfully")


@router.put("/me/free-slots", response_model=MessageResponse)
async def update_free_slots(data: FreeSlotsUpdate, candidate: dict = Depends(get_current_candidate)):
    """Replace the candidate's free time windows (shown alongside scheduling slots)."""
    slots = sorted(data.slots, key=lambda s: s.start)
    payload = [{"start": s.start.isoformat(), "end": s.end.isoformat()} for s in slots]

    with get_db_session() as db:
        db.execute(
            text("UPDATE candidates SET free_slots = CAST(:slots AS JSONB), updated_at = CURRENT_TIMESTAMP "
                 "WHERE candidate_id = :cid"),
            {"slots": json.dumps(payload), "cid": candidate["candidate_id"]}
        )

    return MessageResponse(message=f"Saved {len(payload)} availability window(s)")
