"""
Vendor Routes (recruitment agencies, admin only)

POST /vendors - Create vendor
GET /vendors - List vendors
GET /vendors/{vendor_id} - Get vendor
PUT /vendors/{vendor_id} - Update vendor
DELETE /vendors/{vendor_id} - Deactivate vendor
"""

import json
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy import text

from simplifyhr.core.auth import ADMIN_ROLES, require_roles
from simplifyhr.db.postgres import execute_raw_sql, get_db_session
from simplifyhr.schemas.schemas import MessageResponse, VendorCreate, VendorResponse, VendorUpdate

router = APIRouter(prefix="/vendors", tags=["Vendors"])

VENDOR_SELECT = """
    SELECT v.vendor_id, v.vendor_name, v.spoc_name, v.spoc_email, v.spoc_phone, v.company_id,
           c.name AS company_name, v.commission_rate, v.specialization, v.success_rate,
           v.average_time_to_fill, v.is_active, v.created_at
    FROM vendors v LEFT JOIN companies c ON v.company_id = c.company_id
"""


@router.post("", response_model=VendorResponse, status_code=201)
async def create_vendor(data: VendorCreate, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    with get_db_session() as db:
        result = db.execute(
            text("""
                INSERT INTO vendors (vendor_name, spoc_name, spoc_email, spoc_phone, company_id,
                    commission_rate, specialization, success_rate, average_time_to_fill, is_active)
                VALUES (:vendor_name, :spoc_name, :spoc_email, :spoc_phone, :company_id,
                    :commission_rate, CAST(:specialization AS JSONB), :success_rate, :average_time_to_fill, TRUE)
                RETURNING vendor_id
            """),
            {
                "vendor_name": data.vendor_name.strip(),
                "spoc_name": data.spoc_name.strip(),
                "spoc_email": data.spoc_email,
                "spoc_phone": data.spoc_phone,
                "company_id": data.company_id,
                "commission_rate": data.commission_rate,
                "specialization": json.dumps(data.specialization),
                "success_rate": data.success_rate,
                "average_time_to_fill": data.average_time_to_fill
            }
        )
        vendor_id = result.fetchone()[0]

    return _get_vendor_or_404(vendor_id)


@router.get("", response_model=List[VendorResponse])
async def list_vendors(
    active_only: bool = Query(False),
    admin: dict = Depends(require_roles(*ADMIN_ROLES))
):
    sql = VENDOR_SELECT + " WHERE 1=1"
    if active_only:
        sql += " AND v.is_active = TRUE"
    sql += " ORDER BY v.vendor_name"
    return [VendorResponse(**r) for r in execute_raw_sql(sql)]


def _get_vendor_or_404(vendor_id: int) -> VendorResponse:
    results = execute_raw_sql(VENDOR_SELECT + " WHERE v.vendor_id = :id", {"id": vendor_id})
    if not results:
        raise HTTPException(status_code=404, detail="Vendor not found")
    return VendorResponse(**results[0])


@router.get("/{vendor_id}", response_model=VendorResponse)
async def get_vendor(vendor_id: int, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    return _get_vendor_or_404(vendor_id)


@router.put("/{vendor_id}", response_model=MessageResponse)
async def update_vendor(vendor_id: int, data: VendorUpdate, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    updates = []
    params = {"id": vendor_id}

    for field in ["vendor_name", "spoc_name", "spoc_email", "spoc_phone", "company_id",
                  "commission_rate", "success_rate", "average_time_to_fill", "is_active"]:
        value = getattr(data, field)
        if value is not None:
            updates.append(f"{field} = :{field}")
            params[field] = value
    if data.specialization is not None:
        updates.append("specialization = CAST(:specialization AS JSONB)")
        params["specialization"] = json.dumps(data.specialization)

    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    with get_db_session() as db:
        result = db.execute(
            text(f"UPDATE vendors SET {', '.join(updates)}, updated_at = CURRENT_TIMESTAMP WHERE vendor_id = :id"),
            params
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Vendor not found")

    return MessageResponse(message="Vendor updated successfully")


@router.delete("/{vendor_id}", response_model=MessageResponse)
async def deactivate_vendor(vendor_id: int, admin: dict = Depends(require_roles(*ADMIN_ROLES))):
    """Soft delete: the row stays, marked inactive."""
    with get_db_session() as db:
        result = db.execute(
            text("UPDATE vendors SET is_active = FALSE, updated_at = CURRENT_TIMESTAMP WHERE vendor_id = :id"),
            {"id": vendor_id}
        )
        if result.rowcount == 0:
            raise HTTPException(status_code=404, detail="Vendor not found")

    return MessageResponse(message="Vendor deactivated")
