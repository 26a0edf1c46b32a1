"""
Notification Routes

Notifications are delivered but not stored, so the inbox is always empty.

GET /student/notifications - Inbox (always empty)
POST /student/notifications/{notification_id}/read - Mark one read (no-op)
POST /student/notifications/mark-all - Mark all read (no-op)
POST /student/notifications/reminders - Remind targeted students about an assessment
"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from placipy.api.dependencies import (
    get_assessment_service, get_notification_service, get_tenant_domain
)
from placipy.core.auth import get_current_user, caller_email
from placipy.services.assessment_service import AssessmentService
from placipy.services.notification_service import NotificationService
from placipy.schemas.schemas import DataResponse, MessageResponse, ReminderRequest

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/student/notifications", tags=["Notifications"])


def require_email(user: dict) -> str:
    email = caller_email(user)
    if not email:
        raise HTTPException(status_code=400, detail="User email not found. Please log in again.")
    return email


@router.get("")
async def get_notifications(
    user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    """Notifications for the caller (none are stored)."""
    result = service.get_notifications_for_user(require_email(user))
    return {"success": True, "data": result["items"], "lastKey": result["lastKey"]}


# Registered before /{notification_id}/read so "mark-all" is never taken as an id
@router.post("/mark-all", response_model=MessageResponse)
async def mark_all_read(
    user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    count = service.mark_all_as_read(require_email(user))
    return MessageResponse(message="Marked all notifications as read", count=count)


@router.post("/reminders", response_model=DataResponse)
async def send_reminders(
    request: ReminderRequest,
    domain: str = Depends(get_tenant_domain),
    assessments: AssessmentService = Depends(get_assessment_service),
    service: NotificationService = Depends(get_notification_service)
):
    """
    Remind every student of the targeted departments in the caller's tenant.
    Students who already received this reminder type are skipped.
    """
    assessment = assessments.get_assessment(request.assessment_id)
    if not assessment:
        raise HTTPException(status_code=404, detail="Assessment not found")

    departments = [d for d in (assessment.get("target") or {}).get("departments") or [] if d]
    if departments:
        recipients = []
        for department in departments:
            for email in service.get_students_by_department(domain, department):
                if email not in recipients:
                    recipients.append(email)
    else:
        recipients = service.get_students_by_domain(domain)

    sent = 0
    for email in recipients:
        if service.send_assessment_reminder(assessment, email, request.reminder_type):
            sent += 1

    logger.info("Reminders for %s: %d sent, %d skipped", request.assessment_id, sent, len(recipients) - sent)
    return DataResponse(data={"sent": sent, "skipped": len(recipients) - sent})


@router.post("/{notification_id}/read", response_model=MessageResponse)
async def mark_read(
    notification_id: str,
    user: dict = Depends(get_current_user),
    service: NotificationService = Depends(get_notification_service)
):
    service.mark_as_read(notification_id, require_email(user))
    return MessageResponse(message="Notification marked as read")
