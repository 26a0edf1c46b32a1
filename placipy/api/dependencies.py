"""
Service dependencies for route handlers.

Clients are created once by create_app() and kept on app.state; services
are cheap wrappers built per request from those clients.
"""

from fastapi import Depends, Request

from placipy.core.auth import caller_email, get_current_user
from placipy.core.config import Settings
from placipy.services.assessment_service import AssessmentService
from placipy.services.judge0_client import Judge0Client
from placipy.services.mongo_service import DocumentTable
from placipy.services.notification_service import NotificationService
from placipy.services.pto_service import PTOService
from placipy.utils.keys import domain_from_email


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


def _table(request: Request, name: str) -> DocumentTable:
    return DocumentTable(request.app.state.mongo_db[name])


def get_assessment_service(request: Request) -> AssessmentService:
    settings = request.app.state.settings
    return AssessmentService(
        settings,
        assessments=_table(request, settings.assessments_table),
        legacy_questions=_table(request, settings.questions_table),
        counters=_table(request, settings.main_table),
    )


def get_notification_service(request: Request) -> NotificationService:
    settings = request.app.state.settings
    return NotificationService(settings, _table(request, settings.main_table))


def get_pto_service(request: Request) -> PTOService:
    settings = request.app.state.settings
    return PTOService(
        settings,
        _table(request, settings.main_table),
        _table(request, settings.assessments_table),
    )


def get_judge_client(request: Request) -> Judge0Client:
    return request.app.state.judge_client


async def get_tenant_domain(
    user: dict = Depends(get_current_user),
    settings: Settings = Depends(get_app_settings)
) -> str:
    """Tenant of the caller, from the email in their token."""
    return domain_from_email(caller_email(user), settings.default_client_domain)
