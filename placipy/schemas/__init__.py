"""
Schemas module - Request/Response schemas for API endpoints.

Wire names are camelCase; Python attributes are snake_case.
"""

from placipy.schemas.schemas import (
    AssessmentCreate,
    AssessmentUpdate,
    AssessmentResponse,
    AssessmentListResponse,
    CodeEvaluationRequest,
    CodeEvaluationResponse,
    DataResponse,
    MessageResponse,
    ErrorResponse,
)

__all__ = [
    "AssessmentCreate",
    "AssessmentUpdate",
    "AssessmentResponse",
    "AssessmentListResponse",
    "CodeEvaluationRequest",
    "CodeEvaluationResponse",
    "DataResponse",
    "MessageResponse",
    "ErrorResponse",
]
