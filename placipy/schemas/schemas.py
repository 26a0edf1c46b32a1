"""
Pydantic Schemas - Request/Response Validation

All API request and response schemas in one file for simplicity.
Field names on the wire are camelCase, matching the stored records.
"""

from pydantic import BaseModel, ConfigDict, EmailStr, Field, model_validator
from pydantic.alias_generators import to_camel
from typing import Optional, List, Any, Dict, Union
from enum import Enum

from placipy.services.question_builder import classify_question


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ============================================================
# ENUMS
# ============================================================

class AssessmentStatus(str, Enum):
    draft = "DRAFT"
    active = "ACTIVE"
    scheduled = "SCHEDULED"
    completed = "COMPLETED"
    archived = "ARCHIVED"


class NotificationType(str, Enum):
    assessment_published = "assessment_published"
    result_published = "result_published"
    reminder = "reminder"
    announcement = "announcement"


class NotificationPriority(str, Enum):
    high = "high"
    medium = "medium"
    low = "low"


# ============================================================
# ASSESSMENT SCHEMAS
# ============================================================

class ProgramTestCase(CamelModel):
    input: Optional[str] = None
    expected_output: str
    marks: float = Field(1, ge=0)


class QuestionIn(CamelModel):
    """
    One authored question. Exactly one variant must be populated:
    options (multiple choice) or starterCode (programming).
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    text: Optional[str] = None
    question: Optional[str] = None
    marks: Optional[float] = Field(None, ge=0)
    points: Optional[float] = Field(None, ge=0)
    difficulty: Optional[str] = None
    subcategory: Optional[str] = None
    options: Optional[List[Union[str, Dict[str, Any]]]] = None
    correct_answer: Optional[Union[str, List[str]]] = None
    starter_code: Optional[str] = None
    test_cases: Optional[List[ProgramTestCase]] = None

    @model_validator(mode="after")
    def require_variant(self):
        if classify_question(self.model_dump(by_alias=True)) is None:
            raise ValueError(
                "Each question needs options with text (multiple choice) or starterCode (programming)"
            )
        return self


class Scheduling(CamelModel):
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    timezone: str = "Asia/Kolkata"


class Configuration(CamelModel):
    duration: int = Field(60, ge=1)
    max_attempts: int = Field(1, ge=1)
    passing_score: float = Field(50, ge=0, le=100)
    randomize_questions: bool = False
    total_questions: Optional[int] = Field(None, ge=0)


class Target(CamelModel):
    departments: List[str] = []
    years: List[Union[int, str]] = []


class Stats(CamelModel):
    avg_score: float = 0
    completed: int = 0
    highest_score: float = 0
    total_participants: int = 0


class AssessmentCreate(CamelModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: Optional[str] = ""
    department: Optional[str] = None
    difficulty: Optional[str] = None
    category: Optional[str] = None
    duration: Optional[int] = Field(None, ge=1)
    max_attempts: Optional[int] = Field(None, ge=1)
    passing_score: Optional[float] = Field(None, ge=0, le=100)
    randomize_questions: bool = False
    total_questions: Optional[int] = Field(None, ge=0)
    scheduling: Optional[Scheduling] = None
    target_departments: Optional[List[str]] = None
    target_years: Optional[List[Union[int, str]]] = None
    status: Optional[AssessmentStatus] = None
    is_published: bool = False
    published_at: Optional[str] = None
    created_by_name: Optional[str] = None
    questions: List[QuestionIn] = []


NULLABLE_UPDATE_FIELDS = {"published_at"}


class AssessmentUpdate(CamelModel):
    """
    The attributes a client may overwrite. Keys, identifiers and audit
    fields are not listed, so they cannot be changed through an update.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = None
    department: Optional[str] = None
    difficulty: Optional[str] = None
    category: Optional[str] = None
    status: Optional[AssessmentStatus] = None
    is_published: Optional[bool] = None
    published_at: Optional[str] = None
    configuration: Optional[Configuration] = None
    scheduling: Optional[Scheduling] = None
    target: Optional[Target] = None
    questions: Optional[List[QuestionIn]] = None
    stats: Optional[Stats] = None
    updated_by_name: Optional[str] = None

    @model_validator(mode="after")
    def reject_nulls(self):
        # Fields may be omitted, but a provided field must carry a value
        nulled = sorted(
            type(self).model_fields[name].alias or name
            for name in self.model_fields_set
            if getattr(self, name) is None and name not in NULLABLE_UPDATE_FIELDS
        )
        if nulled:
            raise ValueError(f"These fields cannot be null: {', '.join(nulled)}")
        return self


class AssessmentResponse(BaseModel):
    success: bool = True
    data: Dict[str, Any]


class AssessmentListResponse(BaseModel):
    success: bool = True
    data: List[Dict[str, Any]]
    lastKey: Optional[Dict[str, Any]] = None
    hasMore: bool = False


# ============================================================
# CODE EVALUATION SCHEMAS
# ============================================================

class CodeEvaluationRequest(CamelModel):
    # Presence is checked in the route so a missing field is a 400
    assessment_id: Optional[str] = None
    question_id: Optional[Union[str, int]] = None
    code: Optional[str] = None
    language: Optional[str] = None


class ProgramTestCaseResult(CamelModel):
    # Stored test data may hold numbers as well as strings
    input: Any = None
    expected_output: Any = None
    actual_output: str = ""
    passed: bool
    status: Optional[str] = None
    marks: float
    obtained_marks: float


class CodeEvaluationResult(CamelModel):
    assessment_id: str
    question_id: str
    student_id: str
    language: str
    test_cases: List[ProgramTestCaseResult]
    total_marks: float
    obtained_marks: float
    accuracy: float
    passed_count: int
    total_count: int
    timestamp: str


class CodeEvaluationResponse(BaseModel):
    success: bool = True
    data: CodeEvaluationResult


# ============================================================
# NOTIFICATION SCHEMAS
# ============================================================

class ReminderRequest(CamelModel):
    assessment_id: str
    reminder_type: str = "upcoming"


# ============================================================
# PTO SCHEMAS
# ============================================================

class DepartmentCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    code: Optional[str] = Field(None, min_length=1, max_length=10)


class DepartmentUpdate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)


class StaffAssignment(CamelModel):
    staff_id: str


class StaffCreate(CamelModel):
    name: str = Field(..., min_length=2, max_length=100)
    email: EmailStr
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None


class StaffUpdate(CamelModel):
    name: Optional[str] = Field(None, min_length=2, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    designation: Optional[str] = None
    department: Optional[str] = None


# ============================================================
# GENERIC SCHEMAS
# ============================================================

class DataResponse(BaseModel):
    success: bool = True
    data: Any = None


class MessageResponse(BaseModel):
    message: str
    success: bool = True
    count: Optional[int] = None


class ErrorResponse(BaseModel):
    success: bool = False
    message: str
