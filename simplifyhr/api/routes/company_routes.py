"""
Company Routes

POST /companies - Create company (admin)
GET /companies - List companies
GET /companies/{company_id} - Get company
PUT /companies/{company_id} - Update company (admin)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from simplifyhr.core.auth import ADMIN_ROLES, get_current_user, require_roles
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import CompanyCreate, CompanyResponse, CompanyUpdate, MessageResponse

router = APIRouter(prefix="/companies", tags=["Companies"])

COMPANY_COLUMNS = "company_id, name, industry, country, website, description, is_active, created_at"


@router.post("", response_model=CompanyResponse, status_code=201)
async def create_company(data: CompanyCreate, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    """Create a company. Names are unique regardless of case."""
    name = data.name.strip()
    with get_db_session() as db:
        result = db.execute(
            text("SELECT company_id FROM companies WHERE LOWER(name) = LOWER(:name)"),
            {"name": name}
        )
        if result.fetchone():
            raise HTTPException(status_code=400, detail="Company already exists")

        result = db.execute(
            text(f"""
                INSERT INTO companies (name, industry, country, website, description, is_active)
                VALUES (:name, :industry, :country, :website, :description, TRUE)
                RETURNING {COMPANY_COLUMNS}
            """),
            {
                "name": name,
                "industry": data.industry,
                "country": data.country,
                "website": data.website,
                "description": data.description
            }
        )
        row = result.fetchone()

    return CompanyResponse(
        company_id=row[0], name=row[1], industry=row[2], country=row[3], website=row[4],
        description=row[5], is_active=row[6], created_at=row[7]
    )


@router.get("", response_model=List[CompanyResponse])
async def list_companies(
    search: Optional[str] = Query(None, description="Search in name"),
    active_only: bool = Query(False),
    user: dict = Depends(get_current_user)
):
    sql = f"SELECT {COMPANY_COLUMNS} FROM companies WHERE 1=1"
    params = {}
    if search:
        sql += " AND name ILIKE :search"
        params["search"] = f"%{search}%"
    if active_only:
        sql += " AND is_active = TRUE"
    sql += " ORDER BY name"
    return [CompanyResponse(**r) for r in execute_raw_sql(sql, params)]


@router.get("/{company_id}", response_model=CompanyResponse)
async def get_company(company_id: int, user: dict = Depends(get_current_user)):
    results = execute_raw_sql(
        f"SELECT {COMPANY_COLUMNS} FROM companies WHERE company_id = :id",
        {"id": company_id}
    )
    if not results:
        raise HTTPException(status_code=404, detail="Company not found")
    return CompanyResponse(**results[0])


@router.put("/{company_id}", response_model=MessageResponse)
async def update_company(company_id: int, data: CompanyUpdate, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    updates = []
    params = {"id": company_id}

    for field in ["name", "industry", "country", "website", "description", "is_active"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value.strip() if field == "name" else value

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        result = db.execute(
            text(f"UPDATE companies SET {', '.join(updates)} WHERE company_id = :id"),
            params
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Company not found")

    return MessageResponse(message="Company updated successfully")
