"""
Notification Service - notification boundary of the platform.

Notifications are built and "sent" (logged) but never stored, so reading,
marking read and cleanup are no-ops. The only thing persisted is a
reminder marker per (assessment, student, reminder type), which stops the
same reminder from going out twice.

Marker record (main table):
- PK: CLIENT#<domain>
- SK: REMINDER#<assessmentId>#<email>#<reminderType>
"""

import logging
import uuid
from typing import Optional, List, Dict, Any

from placipy.core.config import Settings
from placipy.core.errors import StoreError
from placipy.schemas.schemas import NotificationPriority, NotificationType
from placipy.services.mongo_service import DocumentTable
from placipy.utils.keys import (
    NOTIFICATION_PREFIX,
    STUDENT_PREFIX,
    client_key,
    domain_from_email,
    reminder_key,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class NotificationService:
    """
    Builds notifications and tracks sent reminders.
    """

    def __init__(self, settings: Settings, table: DocumentTable):
        self.settings = settings
        self.table = table

    def _domain(self, email: str) -> str:
        return domain_from_email(email.lower(), self.settings.default_client_domain)

    # ------------------------------------------------------------
    # Sending (not stored)
    # ------------------------------------------------------------

    def create_notification_for_user(
        self,
        user_id: str,
        email: str,
        notification_type: str,
        title: str,
        message: str,
        link: str,
        priority: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> dict:
        """Build and send one notification. The record is returned, not stored."""
        notification = {
            "PK": client_key(self._domain(email)),
            "SK": f"{NOTIFICATION_PREFIX}{uuid.uuid4()}",
            "userId": user_id,
            "email": email.lower(),
            "type": notification_type,
            "title": title,
            "message": message,
            "link": link,
            "priority": priority,
            "isRead": False,
            "createdAt": utc_now_iso(),
        }
        if metadata:
            notification["metadata"] = metadata

        logger.info("Notification sent (not stored): %s for user %s", notification["SK"], notification["email"])
        return notification

    def create_notifications_for_students(
        self,
        student_emails: List[str],
        notification_type: str,
        title: str,
        message: str,
        link: str,
        priority: str,
        metadata: Optional[Dict[str, Any]] = None
    ) -> List[dict]:
        """One notification per student; the lowercased email doubles as userId."""
        notifications = []
        for email in student_emails:
            address = email.lower()
            notifications.append(self.create_notification_for_user(
                address, address, notification_type, title, message, link, priority, metadata
            ))
        return notifications

    # ------------------------------------------------------------
    # Reading and housekeeping (no-ops)
    # ------------------------------------------------------------

    def get_notifications_for_user(self, email: str, limit: int = 50, last_key: Optional[dict] = None) -> dict:
        logger.debug("Returning empty notifications for %s (notifications are not stored)", email)
        return {"items": [], "lastKey": None}

    def mark_as_read(self, notification_id: str, email: str) -> dict:
        logger.debug("Marking notification %s as read (no store operation)", notification_id)
        return {"success": True}

    def mark_all_as_read(self, email: str) -> int:
        logger.debug("Marking all notifications as read for %s (no store operation)", email)
        return 0

    def delete_old_notifications(self, days_old: int = 60) -> int:
        logger.debug("Deleting notifications older than %d days (no store operation)", days_old)
        return 0

    # ------------------------------------------------------------
    # Reminder markers (stored)
    # ------------------------------------------------------------

    def has_reminder_been_sent(self, assessment_id: str, email: str, reminder_type: str) -> bool:
        try:
            marker = self.table.get(
                client_key(self._domain(email)),
                reminder_key(assessment_id, email, reminder_type)
            )
        except StoreError as e:
            logger.error("Error checking if reminder was sent: %s", e)
            return False  # Assume not sent
        return marker is not None

    def mark_reminder_as_sent(self, assessment_id: str, email: str, reminder_type: str) -> None:
        try:
            self.table.put({
                "PK": client_key(self._domain(email)),
                "SK": reminder_key(assessment_id, email, reminder_type),
                "email": email.lower(),
                "assessmentId": assessment_id,
                "reminderType": reminder_type,
                "createdAt": utc_now_iso(),
            })
        except StoreError as e:
            raise StoreError(f"Failed to mark reminder as sent: {e}") from e

    def send_assessment_reminder(
        self,
        assessment: dict,
        email: str,
        reminder_type: str
    ) -> bool:
        """
        Send a reminder unless this student already got this one.
        Returns True if a reminder went out.
        """
        assessment_id = assessment["assessmentId"]
        if self.has_reminder_been_sent(assessment_id, email, reminder_type):
            return False

        self.create_notification_for_user(
            email.lower(),
            email,
            NotificationType.reminder.value,
            f"Reminder: {assessment.get('title')}",
            f"{assessment.get('title')} is scheduled to start {(assessment.get('scheduling') or {}).get('startDate') or 'soon'}.",
            f"/student/assessments/{assessment_id}",
            NotificationPriority.high.value,
            {"assessmentId": assessment_id, "reminderType": reminder_type},
        )
        self.mark_reminder_as_sent(assessment_id, email, reminder_type)
        return True

    # ------------------------------------------------------------
    # Recipients
    # ------------------------------------------------------------

    def get_students_by_domain(self, domain: str) -> List[str]:
        students = self.table.query(client_key(domain), sk_prefix=STUDENT_PREFIX)
        return [s["email"].lower() for s in students if s.get("email")]

    def get_students_by_department(self, domain: str, department: str) -> List[str]:
        students = self.table.query(
            client_key(domain),
            sk_prefix=STUDENT_PREFIX,
            filters={"department": department}
        )
        return [s["email"].lower() for s in students if s.get("email")]
