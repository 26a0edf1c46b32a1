"""
Assessment Service - persistence of assessments with embedded questions.

RECORD SHAPE:
- PK: ASSESSMENT#ASSESS_<NNN>_<DEPT>   (NNN is per-department, zero padded)
- SK: CLIENT#<domain>                  (tenant, from the creator's email)
- questions are embedded in the record; the legacy questions table is only
  read as a fallback and cleaned up on delete

IDENTIFIER ALLOCATION:
The next number for a department is the highest number already used by
stored assessments, pushed through an atomic per-department counter so
concurrent creations never share a number. Store failures here fall back
to 001 (logged) rather than failing the creation.
"""

import logging
from typing import Optional, List, Dict, Any

from placipy.core.config import Settings
from placipy.core.errors import NotFoundError, StoreError
from placipy.services.mongo_service import DocumentTable
from placipy.services.question_builder import (
    build_questions,
    derive_category,
    plan_batches,
    question_id as numbered_question_id,
)
from placipy.utils.keys import (
    ASSESSMENT_ID_PREFIX,
    ASSESSMENT_PREFIX,
    CLIENT_PREFIX,
    COUNTER_PK,
    assessment_key,
    client_key,
    counter_key,
    domain_from_email,
    utc_now_iso,
)

logger = logging.getLogger(__name__)

DEFAULT_DEPARTMENT_CODE = "GEN"

DEPARTMENT_CODES = {
    "Computer Science": "CSE",
    "Information Technology": "IT",
    "Electronics": "ECE",
    "Mechanical": "ME",
    "Civil": "CE",
}


def department_code(department: Optional[str]) -> str:
    """Short department code used inside assessment ids."""
    if not department:
        return DEFAULT_DEPARTMENT_CODE
    if department in DEPARTMENT_CODES:
        return DEPARTMENT_CODES[department]
    return department[:3].upper()


def assessment_number(pk: str) -> Optional[int]:
    """Numeric segment of ASSESSMENT#ASSESS_<NNN>_<DEPT>, or None."""
    parts = pk.split("_")
    if len(parts) < 3:
        return None
    try:
        return int(parts[1])
    except ValueError:
        return None


def belongs_to(pk: str, assessment_id: str) -> bool:
    """True for ASSESSMENT#<id> and suffixed keys ASSESSMENT#<id>_..., not ASSESSMENT#<id>X."""
    key = assessment_key(assessment_id)
    return pk == key or pk.startswith(key + "_")


class AssessmentService:
    """
    Creates, reads, updates and deletes assessment records.
    """

    def __init__(
        self,
        settings: Settings,
        assessments: DocumentTable,
        legacy_questions: DocumentTable,
        counters: DocumentTable
    ):
        self.settings = settings
        self.assessments = assessments
        self.legacy_questions = legacy_questions
        self.counters = counters

    # ------------------------------------------------------------
    # Identifier allocation
    # ------------------------------------------------------------

    def highest_assessment_number(self, dept_code: str) -> int:
        """Largest number used by stored assessments of a department (0 if none)."""
        items, _ = self.assessments.scan(
            pk_prefix=ASSESSMENT_PREFIX + ASSESSMENT_ID_PREFIX,
            sk_prefix=CLIENT_PREFIX
        )
        highest = 0
        for item in items:
            pk = item.get("PK") or ""
            if not pk.endswith(f"_{dept_code}"):
                continue
            number = assessment_number(pk)
            if number is not None and number > highest:
                highest = number
        return highest

    def next_assessment_number(self, dept_code: str) -> str:
        """Next zero-padded number for a department, e.g. '006'."""
        try:
            floor = self.highest_assessment_number(dept_code)
            number = self.counters.increment(COUNTER_PK, counter_key(dept_code), floor=floor)
        except StoreError as e:
            logger.error("Error getting next assessment number for %s: %s", dept_code, e)
            return "001"
        return str(number).zfill(3)

    # ------------------------------------------------------------
    # Create
    # ------------------------------------------------------------

    def create_assessment(self, data: Dict[str, Any], created_by: str) -> dict:
        """
        Build and store an assessment record.

        Args:
            data: authored assessment (camelCase keys, questions already validated)
            created_by: creator's email or username

        Returns:
            The stored record, questions included.
        """
        dept_code = department_code(data.get("department"))
        assessment_id = f"{ASSESSMENT_ID_PREFIX}{self.next_assessment_number(dept_code)}_{dept_code}"
        created_at = utc_now_iso()
        domain = domain_from_email(created_by, self.settings.default_client_domain)

        authored = data.get("questions") or []
        questions = build_questions(authored, data.get("difficulty"))
        scheduling = data.get("scheduling") or {}

        assessment = {
            "PK": assessment_key(assessment_id),
            "SK": client_key(domain),
            "assessmentId": assessment_id,
            "title": data.get("title"),
            "description": data.get("description") or "",
            "department": data.get("department"),
            "departmentCode": dept_code,
            "difficulty": data.get("difficulty") or "MEDIUM",
            "category": data.get("category") or derive_category(authored),
            "type": "DEPARTMENT_WISE",
            "domain": domain,
            "configuration": {
                "duration": data.get("duration") or 60,
                "maxAttempts": data.get("maxAttempts") or 1,
                "passingScore": data.get("passingScore") or 50,
                "randomizeQuestions": data.get("randomizeQuestions") or False,
                "totalQuestions": data.get("totalQuestions") or len(questions),
            },
            "scheduling": {
                "startDate": scheduling.get("startDate"),
                "endDate": scheduling.get("endDate"),
                "timezone": scheduling.get("timezone") or "Asia/Kolkata",
            },
            "target": {
                "departments": data.get("targetDepartments") or ([data["department"]] if data.get("department") else []),
                "years": data.get("targetYears") or [],
            },
            "questions": questions,
            "entities": plan_batches(authored),
            "stats": {
                "avgScore": 0,
                "completed": 0,
                "highestScore": 0,
                "totalParticipants": 0,
            },
            "status": data.get("status") or "ACTIVE",
            "isPublished": bool(data.get("isPublished")),
            "createdBy": created_by,
            "createdByName": data.get("createdByName") or created_by,
            "createdAt": created_at,
            "updatedAt": created_at,
        }
        if assessment["isPublished"]:
            assessment["publishedAt"] = data.get("publishedAt") or created_at

        try:
            self.assessments.put(assessment)
        except StoreError as e:
            logger.error("Failed to store assessment %s: %s", assessment_id, e)
            raise StoreError(f"Failed to store assessment in database: {e}") from e

        logger.info("Created assessment %s (%d questions) for %s", assessment_id, len(questions), domain)
        return assessment

    # ------------------------------------------------------------
    # Read
    # ------------------------------------------------------------

    def get_assessment(self, assessment_id: str) -> Optional[dict]:
        """
        Find an assessment by id in any tenant.
        Records stored with a suffixed PK (ASSESSMENT#<id>_...) also match.
        """
        pk = assessment_key(assessment_id)
        items, _ = self.assessments.scan(pk_prefix=pk, sk_prefix=CLIENT_PREFIX)
        matches = [i for i in items if belongs_to(i["PK"], assessment_id)]
        if not matches:
            return None
        # Exact key wins over suffixed legacy keys
        matches.sort(key=lambda i: i["PK"] != pk)
        return matches[0]

    def list_assessments(
        self,
        department: Optional[str] = None,
        status: Optional[str] = None,
        limit: int = 50,
        last_key: Optional[dict] = None
    ) -> dict:
        """One page of assessments plus the continuation key for the next."""
        filters = {}
        if department:
            filters["department"] = department
        if status:
            filters["status"] = status

        items, next_key = self.assessments.scan(
            pk_prefix=ASSESSMENT_PREFIX,
            sk_prefix=CLIENT_PREFIX,
            filters=filters,
            limit=limit,
            start_key=last_key
        )
        return {"items": items, "lastKey": next_key, "hasMore": next_key is not None}

    def find_question(self, assessment_id: str, question_ref: Any) -> Optional[dict]:
        """
        Locate a question by any of the id forms clients send:
        'Q_002', '2', or '<assessmentId>_Q2'.
        """
        ref = str(question_ref)
        candidates = {ref, f"{assessment_id}_Q{ref}"}
        if ref.isdigit():
            candidates.add(numbered_question_id(int(ref)))

        assessment = self.get_assessment(assessment_id)
        if assessment:
            for question in assessment.get("questions") or []:
                if question.get("questionId") in candidates:
                    return question

        for question in self.legacy_question_records(assessment_id):
            if question.get("questionId") in candidates:
                return question
        return None

    def legacy_question_records(self, assessment_id: str, sk: Optional[str] = None) -> List[dict]:
        """Per-question records of this assessment only (ASSESS_001_IT never matches ASSESS_001_ITA)."""
        items, _ = self.legacy_questions.scan(pk_prefix=assessment_key(assessment_id), sk=sk)
        return [i for i in items if belongs_to(i["PK"], assessment_id)]

    def get_tenant_assessment(self, assessment_id: str, domain: Optional[str]) -> dict:
        """
        Assessment by id, restricted to one tenant when `domain` is given.
        Records of other tenants are reported as not found.
        """
        assessment = self.get_assessment(assessment_id)
        if not assessment or (domain and assessment["SK"] != client_key(domain)):
            raise NotFoundError("Assessment not found")
        return assessment

    # ------------------------------------------------------------
    # Update
    # ------------------------------------------------------------

    def update_assessment(
        self,
        assessment_id: str,
        updates: Dict[str, Any],
        updated_by: Optional[str] = None,
        updated_by_name: Optional[str] = None,
        domain: Optional[str] = None
    ) -> dict:
        """
        Overwrite the given attributes. Last write wins.

        Raises:
            NotFoundError: no assessment has this id, or it belongs to
                another tenant than `domain` (nothing is written)
        """
        current = self.get_tenant_assessment(assessment_id, domain)

        fields = dict(updates)
        if "questions" in fields:
            authored = fields["questions"] or []
            fields["questions"] = build_questions(authored, fields.get("difficulty") or current.get("difficulty"))
            fields["entities"] = plan_batches(authored)

        fields["updatedAt"] = utc_now_iso()
        if updated_by:
            fields["updatedBy"] = updated_by
            if updated_by_name:
                fields["updatedByName"] = updated_by_name

        updated = self.assessments.update(current["PK"], current["SK"], fields)
        if updated is None:
            # Deleted between the lookup and the write
            raise NotFoundError("Assessment not found")
        return updated

    # ------------------------------------------------------------
    # Delete
    # ------------------------------------------------------------

    def delete_assessment(self, assessment_id: str, domain: Optional[str] = None) -> int:
        """
        Delete an assessment and any legacy per-question records.
        Returns the number of legacy question records removed.
        """
        assessment = self.get_tenant_assessment(assessment_id, domain)

        self.assessments.delete(assessment["PK"], assessment["SK"])

        legacy = self.legacy_question_records(assessment_id, sk=assessment["SK"])
        for question in legacy:
            self.legacy_questions.delete(question["PK"], question["SK"])

        logger.info("Deleted assessment %s (%d legacy question records)", assessment_id, len(legacy))
        return len(legacy)
