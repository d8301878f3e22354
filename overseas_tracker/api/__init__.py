# API endpoints and routers

from .health_endpoints import router as health_router
from .auth_endpoints import router as auth_router
from .trips_endpoints import router as trips_router
from .company_endpoints import router as company_router
from .admin_endpoints import router as admin_router
from .jobs_endpoints import router as jobs_router

__all__ = [
    "health_router",
    "auth_router",
    "trips_router",
    "company_router",
    "admin_router",
    "jobs_router",
]
