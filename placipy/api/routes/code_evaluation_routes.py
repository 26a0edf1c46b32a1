"""
Code Evaluation Routes

POST /code-evaluation/evaluate - Run a student's code against a question's test cases
"""

import logging
from fastapi import APIRouter, HTTPException, Depends

from placipy.api.dependencies import get_assessment_service, get_judge_client
from placipy.core.auth import get_current_user
from placipy.services.assessment_service import AssessmentService
from placipy.services.judge0_client import Judge0Client
from placipy.utils.keys import utc_now_iso
from placipy.schemas.schemas import CodeEvaluationRequest, CodeEvaluationResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/code-evaluation", tags=["Code Evaluation"])


def student_identifier(user: dict) -> str:
    return user.get("username") or user.get("sub") or user.get("email") or "unknown_student"


@router.post("/evaluate", response_model=CodeEvaluationResponse)
async def evaluate_code(
    request: CodeEvaluationRequest,
    user: dict = Depends(get_current_user),
    service: AssessmentService = Depends(get_assessment_service),
    judge: Judge0Client = Depends(get_judge_client)
):
    """
    Evaluate code against every test case of a programming question.

    Test cases run sequentially on the judge; one failed call fails the
    whole evaluation.
    """
    if not request.assessment_id or request.question_id in (None, "") or not request.code or not request.language:
        raise HTTPException(
            status_code=400,
            detail="Missing required fields: assessmentId, questionId, code, language"
        )

    student_id = student_identifier(user)
    logger.info(
        "Code evaluation: assessment=%s question=%s student=%s language=%s code_length=%d",
        request.assessment_id, request.question_id, student_id, request.language, len(request.code)
    )

    question = service.find_question(request.assessment_id, request.question_id)
    if not question:
        raise HTTPException(status_code=404, detail="Question not found")

    test_cases = question.get("testCases") or []
    if not test_cases:
        raise HTTPException(status_code=400, detail="No test cases found for this question")

    result = await judge.execute_with_test_cases(request.code, request.language, test_cases)

    logger.info(
        "Code evaluation completed: %s/%s test cases passed (%.2f%%)",
        result["passedCount"], result["totalCount"], result["accuracy"]
    )

    return CodeEvaluationResponse(data={
        "assessmentId": request.assessment_id,
        "questionId": str(request.question_id),
        "studentId": student_id,
        "language": request.language,
        **result,
        "timestamp": utc_now_iso(),
    })
