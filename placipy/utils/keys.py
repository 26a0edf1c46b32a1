"""
Key conventions shared by every table.

These prefixes are load-bearing: every scan and query depends on them, and
existing data uses exactly these shapes.
"""

from datetime import datetime, timezone
from typing import Optional

ASSESSMENT_PREFIX = "ASSESSMENT#"
ASSESSMENT_ID_PREFIX = "ASSESS_"
CLIENT_PREFIX = "CLIENT#"
COUNTER_PK = "COUNTER#ASSESSMENT"
DEPARTMENT_PREFIX = "DEPARTMENT#"
STAFF_PREFIX = "STAFF#"
STUDENT_PREFIX = "STUDENT#"
NOTIFICATION_PREFIX = "NOTIF#"
REMINDER_PREFIX = "REMINDER#"


def domain_from_email(email: Optional[str], default: str) -> str:
    """Tenant domain of an email address, or `default` when there is none."""
    if not email or "@" not in email:
        return default
    return email.split("@", 1)[1]


def client_key(domain: str) -> str:
    return f"{CLIENT_PREFIX}{domain}"


def assessment_key(assessment_id: str) -> str:
    return f"{ASSESSMENT_PREFIX}{assessment_id}"


def counter_key(dept_code: str) -> str:
    return f"{DEPARTMENT_PREFIX}{dept_code}"


def reminder_key(assessment_id: str, email: str, reminder_type: str) -> str:
    return f"{REMINDER_PREFIX}{assessment_id}#{email}#{reminder_type}"


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")
