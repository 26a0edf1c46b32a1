"""
Judge0 API Client

Judge0 compiles and runs one source submission against one stdin and
reports a status. We call it with wait=true so each request blocks until
the judge has a terminal result (no polling).

EVALUATION RULES:
- Test cases run one at a time, in list order
- A case passes only if status is Accepted (3) AND trimmed stdout
  equals the trimmed expected output
- Any transport or API error aborts the whole evaluation (no retry)
"""
import logging
from typing import Any, Dict, List, Optional

import httpx

from placipy.core.config import Settings
from placipy.core.errors import JudgeError
from placipy.services.question_builder import case_stdin

logger = logging.getLogger(__name__)

ACCEPTED_STATUS_ID = 3
DEFAULT_LANGUAGE_ID = 63  # JavaScript (Node.js)

LANGUAGE_IDS = {
    "python": 71,
    "javascript": 63,
    "java": 62,
    "cpp": 54,
    "c": 50,
}


def language_id(language: Optional[str]) -> int:
    """Judge0 language id; unknown or missing names fall back to JavaScript."""
    if not language:
        return DEFAULT_LANGUAGE_ID
    return LANGUAGE_IDS.get(language.lower(), DEFAULT_LANGUAGE_ID)


def case_marks(case: Dict[str, Any]) -> float:
    marks = case.get("marks")
    return marks if marks is not None else 1


class Judge0Client:
    """
    Wrapper for the Judge0 submissions API.
    """

    def __init__(self, settings: Settings, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = settings.judge0_api_url.rstrip("/")
        self.headers = {
            "Content-Type": "application/json",
            "X-RapidAPI-Key": settings.judge0_api_key,
            "X-RapidAPI-Host": settings.judge0_api_host,
        }
        self.timeout = settings.judge0_timeout_seconds
        # Tests inject an httpx.MockTransport here
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self.headers,
            timeout=self.timeout,
            transport=self.transport,
        )

    async def submit(
        self,
        client: httpx.AsyncClient,
        source_code: str,
        language_id: int,
        stdin: Optional[str],
        expected_output: Optional[str]
    ) -> dict:
        """Run one submission synchronously on the judge and return its JSON."""
        submission = {
            "source_code": source_code,
            "language_id": language_id,
            "stdin": stdin,
            "expected_output": expected_output,
        }
        response = await client.post(
            "/submissions/",
            params={"base64_encoded": "false", "wait": "true"},
            json=submission,
        )
        response.raise_for_status()
        return response.json()

    async def execute_with_test_cases(
        self,
        source_code: str,
        language: Optional[str],
        test_cases: List[Dict[str, Any]]
    ) -> dict:
        """
        Execute code against every test case and score it.

        Returns:
            {
              "testCases": [{input, expectedOutput, actualOutput, passed,
                             status, marks, obtainedMarks}, ...],
              "totalMarks", "obtainedMarks", "accuracy",
              "passedCount", "totalCount"
            }
        """
        lang_id = language_id(language)
        results = []
        total_marks = 0
        obtained_marks = 0

        try:
            async with self._client() as client:
                for case in test_cases:
                    marks = case_marks(case)
                    expected = str(case.get("expectedOutput") or "")
                    stdin = case_stdin(case)
                    total_marks += marks

                    result = await self.submit(client, source_code, lang_id, stdin, expected.strip())

                    status = result.get("status") or {}
                    stdout = result.get("stdout")
                    passed = (
                        status.get("id") == ACCEPTED_STATUS_ID
                        and stdout is not None
                        and stdout.strip() == expected.strip()
                    )
                    if passed:
                        obtained_marks += marks

                    results.append({
                        "input": stdin,
                        "expectedOutput": case.get("expectedOutput"),
                        "actualOutput": stdout or "",
                        "passed": passed,
                        "status": status.get("description"),
                        "marks": marks,
                        "obtainedMarks": marks if passed else 0,
                    })
        except (httpx.HTTPError, ValueError) as e:
            logger.error("Judge0 execution error: %s", e)
            raise JudgeError("Failed to execute code with Judge0") from e

        accuracy = (obtained_marks / total_marks) * 100 if total_marks > 0 else 0

        return {
            "testCases": results,
            "totalMarks": total_marks,
            "obtainedMarks": obtained_marks,
            "accuracy": round(accuracy, 2),
            "passedCount": sum(1 for r in results if r["passed"]),
            "totalCount": len(results),
        }
