"""
API Routes - Combines all route modules into single router.
"""

from fastapi import APIRouter

from placipy.api.routes.assessment_routes import router as assessment_router
from placipy.api.routes.code_evaluation_routes import router as code_evaluation_router
from placipy.api.routes.notification_routes import router as notification_router
from placipy.api.routes.pto_routes import router as pto_router

# Main API router
api_router = APIRouter()

# Include all sub-routers
api_router.include_router(assessment_router)
api_router.include_router(code_evaluation_router)
api_router.include_router(notification_router)
api_router.include_router(pto_router)
