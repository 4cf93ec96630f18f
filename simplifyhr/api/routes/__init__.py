"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from simplifyhr.api.routes.auth_routes import router as auth_router
from simplifyhr.api.routes.user_routes import router as user_router
from simplifyhr.api.routes.company_routes import router as company_router
from simplifyhr.api.routes.vendor_routes import router as vendor_router
from simplifyhr.api.routes.job_routes import router as job_router
from simplifyhr.api.routes.application_routes import router as application_router
from simplifyhr.api.routes.candidate_routes import router as candidate_router
from simplifyhr.api.routes.scheduling_routes import router as scheduling_router
from simplifyhr.api.routes.interview_routes import router as interview_router
from simplifyhr.api.routes.offer_routes import router as offer_router
from simplifyhr.api.routes.analytics_routes import router as analytics_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(auth_router)
api_router.include_router(user_router)
api_router.include_router(company_router)
api_router.include_router(vendor_router)
api_router.include_router(job_router)
api_router.include_router(application_router)
api_router.include_router(candidate_router)
api_router.include_router(scheduling_router)
api_router.include_router(interview_router)
api_router.include_router(offer_router)
api_router.include_router(analytics_router)
