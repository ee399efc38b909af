"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from jobboard.api.routes.org_routes import router as org_router
from jobboard.api.routes.user_routes import router as user_router
from jobboard.api.routes.password_routes import user_reset_router, admin_reset_router
from jobboard.api.routes.job_routes import router as job_router
from jobboard.api.routes.candidate_routes import router as candidate_router
from jobboard.api.routes.profile_routes import router as profile_router
from jobboard.api.routes.template_routes import router as template_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(org_router)
api_router.include_router(user_router)
api_router.include_router(user_reset_router)
api_router.include_router(admin_reset_router)
api_router.include_router(job_router)
api_router.include_router(candidate_router)
api_router.include_router(profile_router)
api_router.include_router(template_router)
