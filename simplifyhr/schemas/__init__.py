"""
Schemas module - Request/Response schemas for API endpoints.

All schemas live in ``simplifyhr.schemas.schemas``.
"""
