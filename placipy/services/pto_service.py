"""
PTO Service - department, staff and student administration for one tenant.

All records live in the main table under the tenant partition:
- PK: CLIENT#<domain>
- SK: DEPARTMENT#<code> | STAFF#<id> | STUDENT#<email>
"""

import logging
import uuid
from typing import List, Dict, Any

from placipy.core.config import Settings
from placipy.core.errors import NotFoundError
from placipy.services.assessment_service import department_code
from placipy.services.mongo_service import DocumentTable
from placipy.utils.keys import (
    ASSESSMENT_PREFIX,
    DEPARTMENT_PREFIX,
    STAFF_PREFIX,
    STUDENT_PREFIX,
    client_key,
    utc_now_iso,
)

logger = logging.getLogger(__name__)


class PTOService:
    """
    Placement-training-officer operations, scoped by tenant domain.
    """

    def __init__(self, settings: Settings, table: DocumentTable, assessments: DocumentTable):
        self.settings = settings
        self.table = table
        self.assessments = assessments

    # ============================================================
    # DEPARTMENTS
    # ============================================================

    def get_departments(self, domain: str) -> List[dict]:
        return self.table.query(client_key(domain), sk_prefix=DEPARTMENT_PREFIX)

    def get_department_catalog(self, domain: str) -> List[dict]:
        """Code/name pairs for pickers."""
        return [
            {"code": d["code"], "name": d["name"]}
            for d in self.get_departments(domain)
        ]

    def get_department(self, domain: str, code: str) -> dict:
        department = self.table.get(client_key(domain), f"{DEPARTMENT_PREFIX}{code}")
        if not department:
            raise NotFoundError(f"Department {code} not found")
        return department

    def create_department(self, domain: str, data: Dict[str, Any]) -> dict:
        code = (data.get("code") or department_code(data["name"])).upper()
        now = utc_now_iso()
        item = {
            "PK": client_key(domain),
            "SK": f"{DEPARTMENT_PREFIX}{code}",
            "code": code,
            "name": data["name"],
            "staffMembers": [],
            "createdAt": now,
            "updatedAt": now,
        }
        self.table.put(item)
        logger.info("Created department %s for %s", code, domain)
        return item

    def update_department(self, domain: str, code: str, data: Dict[str, Any]) -> dict:
        self.get_department(domain, code)
        return self.table.update(
            client_key(domain),
            f"{DEPARTMENT_PREFIX}{code}",
            {"name": data["name"], "updatedAt": utc_now_iso()}
        )

    def delete_department(self, domain: str, code: str) -> None:
        if not self.table.delete(client_key(domain), f"{DEPARTMENT_PREFIX}{code}"):
            raise NotFoundError(f"Department {code} not found")

    def assign_staff_to_department(self, domain: str, code: str, staff_id: str) -> dict:
        department = self.get_department(domain, code)
        self.get_staff_member(domain, staff_id)
        members = list(department.get("staffMembers") or [])
        if staff_id not in members:
            members.append(staff_id)
        return self.table.update(
            client_key(domain),
            department["SK"],
            {"staffMembers": members, "updatedAt": utc_now_iso()}
        )

    def unassign_staff_from_department(self, domain: str, code: str, staff_id: str) -> dict:
        department = self.get_department(domain, code)
        members = [m for m in department.get("staffMembers") or [] if m != staff_id]
        return self.table.update(
            client_key(domain),
            department["SK"],
            {"staffMembers": members, "updatedAt": utc_now_iso()}
        )

    # ============================================================
    # STAFF
    # ============================================================

    def get_staff(self, domain: str) -> List[dict]:
        return self.table.query(client_key(domain), sk_prefix=STAFF_PREFIX)

    def get_staff_member(self, domain: str, staff_id: str) -> dict:
        staff = self.table.get(client_key(domain), f"{STAFF_PREFIX}{staff_id}")
        if not staff:
            raise NotFoundError(f"Staff member {staff_id} not found")
        return staff

    def create_staff(self, domain: str, data: Dict[str, Any]) -> dict:
        staff_id = uuid.uuid4().hex
        now = utc_now_iso()
        item = {
            "PK": client_key(domain),
            "SK": f"{STAFF_PREFIX}{staff_id}",
            "id": staff_id,
            "name": data["name"],
            "email": data["email"].lower(),
            "phone": data.get("phone"),
            "designation": data.get("designation"),
            "department": data.get("department"),
            "createdAt": now,
            "updatedAt": now,
        }
        self.table.put(item)
        return item

    def update_staff(self, domain: str, staff_id: str, data: Dict[str, Any]) -> dict:
        self.get_staff_member(domain, staff_id)
        fields = {k: v for k, v in data.items() if v is not None}
        if "email" in fields:
            fields["email"] = fields["email"].lower()
        fields["updatedAt"] = utc_now_iso()
        return self.table.update(client_key(domain), f"{STAFF_PREFIX}{staff_id}", fields)

    def delete_staff(self, domain: str, staff_id: str) -> None:
        if not self.table.delete(client_key(domain), f"{STAFF_PREFIX}{staff_id}"):
            raise NotFoundError(f"Staff member {staff_id} not found")

    # ============================================================
    # STUDENTS & DASHBOARD
    # ============================================================

    def get_students(self, domain: str) -> List[dict]:
        return self.table.query(client_key(domain), sk_prefix=STUDENT_PREFIX)

    def get_assessments(self, domain: str) -> List[dict]:
        items, _ = self.assessments.scan(pk_prefix=ASSESSMENT_PREFIX, sk=client_key(domain))
        return items

    def get_dashboard(self, domain: str) -> dict:
        """Tenant totals plus per-department student/staff/assessment counts."""
        departments = self.get_departments(domain)
        staff = self.get_staff(domain)
        students = self.get_students(domain)
        assessments = self.get_assessments(domain)

        breakdown = []
        for department in departments:
            name = department["name"]
            breakdown.append({
                "code": department["code"],
                "name": name,
                "students": sum(1 for s in students if s.get("department") == name),
                "staff": len(department.get("staffMembers") or []),
                "assessments": sum(
                    1 for a in assessments
                    if a.get("departmentCode") == department["code"] or a.get("department") == name
                ),
            })

        return {
            "totalDepartments": len(departments),
            "totalStaff": len(staff),
            "totalStudents": len(students),
            "totalAssessments": len(assessments),
            "activeAssessments": sum(1 for a in assessments if a.get("status") == "ACTIVE"),
            "departments": breakdown,
        }
