"""
Assessment Routes

POST /assessments - Create assessment (questions embedded)
GET /assessments - List assessments (department/status filters, lastKey paging)
GET /assessments/{assessment_id} - Get one assessment
PUT /assessments/{assessment_id} - Update listed attributes
DELETE /assessments/{assessment_id} - Delete assessment
"""

import json
import logging
from fastapi import APIRouter, HTTPException, Depends, Query
from typing import Optional

from placipy.api.dependencies import get_assessment_service
from placipy.core.auth import get_current_user, caller_email, caller_id
from placipy.services.assessment_service import AssessmentService
from placipy.schemas.schemas import (
    AssessmentCreate, AssessmentUpdate, AssessmentResponse,
    AssessmentListResponse, MessageResponse
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/assessments", tags=["Assessments"])


@router.post("", response_model=AssessmentResponse, status_code=201)
async def create_assessment(
    assessment: AssessmentCreate,
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service)
):
    """Create an assessment. The id and per-department number are assigned here."""
    data = assessment.model_dump(by_alias=True, exclude_none=True, mode="json")
    created_by = caller_email(user) or caller_id(user)
    record = service.create_assessment(data, created_by)
    return AssessmentResponse(data=record)


@router.get("", response_model=AssessmentListResponse)
async def list_assessments(
    department: Optional[str] = Query(None),
    status: Optional[str] = Query(None),
    limit: int = Query(50, ge=1, le=200),
    lastKey: Optional[str] = Query(None, description="Continuation key from the previous page (JSON)"),
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service)
):
    """List assessments across tenants, one page at a time."""
    last_key = None
    if lastKey:
        try:
            last_key = json.loads(lastKey)
        except json.JSONDecodeError:
            raise HTTPException(status_code=400, detail="lastKey must be the JSON key returned by the previous page")
        if not isinstance(last_key, dict) or "PK" not in last_key or "SK" not in last_key:
            raise HTTPException(status_code=400, detail="lastKey must contain PK and SK")

    result = service.list_assessments(department, status, limit, last_key)
    return AssessmentListResponse(data=result["items"], lastKey=result["lastKey"], hasMore=result["hasMore"])


@router.get("/{assessment_id}", response_model=AssessmentResponse)
async def get_assessment(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service)
):
    """Get one assessment with its questions."""
    record = service.get_assessment(assessment_id)
    if not record:
        raise HTTPException(status_code=404, detail="Assessment not found")
    return AssessmentResponse(data=record)


@router.put("/{assessment_id}", response_model=AssessmentResponse)
async def update_assessment(
    assessment_id: str,
    update: AssessmentUpdate,
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service)
):
    """Overwrite the provided attributes. Nested objects are replaced whole."""
    updates = update.model_dump(by_alias=True, mode="json", include=update.model_fields_set)
    updated_by_name = updates.pop("updatedByName", None)
    record = service.update_assessment(
        assessment_id,
        updates,
        updated_by=caller_email(user) or caller_id(user),
        updated_by_name=updated_by_name
    )
    return AssessmentResponse(data=record)


@router.delete("/{assessment_id}", response_model=MessageResponse)
async def delete_assessment(
    assessment_id: str,
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service)
):
    """Delete an assessment and any legacy per-question records."""
    service.delete_assessment(assessment_id)
    return MessageResponse(message="Assessment deleted successfully")
