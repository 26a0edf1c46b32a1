import asyncio

import httpx
import pytest

from placipy.core.errors import JudgeError
from placipy.services.judge0_client import Judge0Client, language_id


def run(coro):
    return asyncio.run(coro)


@pytest.fixture
def judge_client(settings, judge):
    return Judge0Client(settings, transport=httpx.MockTransport(judge))


def cases():
    return [
        {"inputs": {"input": "1"}, "expectedOutput": "1", "marks": 2},
        {"inputs": {"input": "2"}, "expectedOutput": "2", "marks": 2},
        {"inputs": {"input": "3"}, "expectedOutput": "3", "marks": 1},
    ]


def test_language_ids():
    assert language_id("python") == 71
    assert language_id("Python") == 71
    assert language_id("java") == 62
    assert language_id("cpp") == 54
    assert language_id("c") == 50
    assert language_id("javascript") == 63
    assert language_id("rust") == 63
    assert language_id(None) == 63


def test_scores_by_marks(judge_client, judge):
    judge.responses["2"] = {"stdout": "wrong\n", "status": {"id": 4, "description": "Wrong Answer"}}

    result = run(judge_client.execute_with_test_cases("print(input())", "python", cases()))

    assert [c["passed"] for c in result["testCases"]] == [True, False, True]
    assert result["totalMarks"] == 5
    assert result["obtainedMarks"] == 3
    assert result["accuracy"] == 60.0
    assert result["passedCount"] == 2
    assert result["totalCount"] == 3
    assert result["testCases"][1] == {
        "input": "2",
        "expectedOutput": "2",
        "actualOutput": "wrong\n",
        "passed": False,
        "status": "Wrong Answer",
        "marks": 2,
        "obtainedMarks": 0,
    }


def test_submissions_are_sequential_and_synchronous(judge_client, judge):
    run(judge_client.execute_with_test_cases("code", "java", cases()))

    assert [s["stdin"] for s in judge.submissions] == ["1", "2", "3"]
    assert all(s["language_id"] == 62 for s in judge.submissions)
    assert all(s["source_code"] == "code" for s in judge.submissions)


def test_request_shape(settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json={"stdout": "ok", "status": {"id": 3, "description": "Accepted"}})

    client = Judge0Client(settings, transport=httpx.MockTransport(handler))
    run(client.execute_with_test_cases("x", "python", [{"input": "a", "expectedOutput": " ok \n"}]))

    request = seen[0]
    assert request.url.path == "/submissions/"
    assert request.url.params["base64_encoded"] == "false"
    assert request.url.params["wait"] == "true"
    assert request.headers["X-RapidAPI-Key"] == "test-key"
    assert request.headers["X-RapidAPI-Host"] == settings.judge0_api_host


def test_accepted_requires_matching_output(judge_client, judge):
    # Internal whitespace matters, surrounding whitespace does not
    judge.responses["1"] = {"stdout": "1 2\n", "status": {"id": 3, "description": "Accepted"}}
    judge.responses["2"] = {"stdout": "  12  \n", "status": {"id": 3, "description": "Accepted"}}
    test_cases = [
        {"inputs": {"input": "1"}, "expectedOutput": "12"},
        {"inputs": {"input": "2"}, "expectedOutput": "12"},
    ]

    result = run(judge_client.execute_with_test_cases("code", "c", test_cases))

    assert [c["passed"] for c in result["testCases"]] == [False, True]
    assert result["totalMarks"] == 2
    assert result["accuracy"] == 50.0


def test_non_accepted_status_fails_even_with_matching_output(judge_client, judge):
    judge.responses["1"] = {"stdout": "1", "status": {"id": 5, "description": "Time Limit Exceeded"}}
    result = run(judge_client.execute_with_test_cases("code", "python", [{"input": "1", "expectedOutput": "1"}]))
    assert result["testCases"][0]["passed"] is False
    assert result["testCases"][0]["status"] == "Time Limit Exceeded"


def test_missing_stdout(judge_client, judge):
    judge.responses["1"] = {"stdout": None, "status": {"id": 6, "description": "Compilation Error"}}
    result = run(judge_client.execute_with_test_cases("code", "python", [{"input": "1", "expectedOutput": "1"}]))
    assert result["testCases"][0]["actualOutput"] == ""
    assert result["obtainedMarks"] == 0


def test_empty_test_cases(judge_client):
    result = run(judge_client.execute_with_test_cases("code", "python", []))
    assert result == {
        "testCases": [],
        "totalMarks": 0,
        "obtainedMarks": 0,
        "accuracy": 0,
        "passedCount": 0,
        "totalCount": 0,
    }


def test_transport_error_aborts(judge_client, judge):
    judge.fail = True
    with pytest.raises(JudgeError, match="Failed to execute code with Judge0"):
        run(judge_client.execute_with_test_cases("code", "python", cases()))


def test_http_error_status_aborts(settings):
    client = Judge0Client(settings, transport=httpx.MockTransport(lambda request: httpx.Response(429)))
    with pytest.raises(JudgeError):
        run(client.execute_with_test_cases("code", "python", cases()))
