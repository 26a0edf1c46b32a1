import json

import mongomock
import pytest
import httpx
from fastapi.testclient import TestClient

from placipy.core.auth import create_access_token
from placipy.core.config import Settings
from placipy.main import create_app
from placipy.services.mongo_service import DocumentTable


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        mongodb_uri="mongodb://localhost:27017",
        mongodb_db="placipy_test",
        judge0_api_url="https://judge.test",
        judge0_api_key="test-key",
        jwt_secret_key="test-secret",
        log_level="WARNING",
    )


@pytest.fixture
def mongo_client():
    return mongomock.MongoClient()


@pytest.fixture
def mongo_db(mongo_client, settings):
    return mongo_client[settings.mongodb_db]


@pytest.fixture
def assessments_table(mongo_db, settings):
    return DocumentTable(mongo_db[settings.assessments_table])


@pytest.fixture
def questions_table(mongo_db, settings):
    return DocumentTable(mongo_db[settings.questions_table])


@pytest.fixture
def main_table(mongo_db, settings):
    return DocumentTable(mongo_db[settings.main_table])


class FakeJudge:
    """
    Stands in for Judge0: answers each submission with stdout = stdin
    unless an override for that stdin is registered.
    """

    def __init__(self):
        self.submissions = []
        self.responses = {}
        self.fail = False

    def __call__(self, request: httpx.Request) -> httpx.Response:
        if self.fail:
            raise httpx.ConnectError("judge unreachable", request=request)
        submission = json.loads(request.content)
        self.submissions.append(submission)
        stdin = submission.get("stdin")
        if stdin in self.responses:
            return httpx.Response(200, json=self.responses[stdin])
        return httpx.Response(200, json={
            "stdout": f"{stdin}\n" if stdin is not None else None,
            "status": {"id": 3, "description": "Accepted"},
        })


@pytest.fixture
def judge():
    return FakeJudge()


@pytest.fixture
def app(settings, mongo_client, judge):
    return create_app(settings=settings, mongo_client=mongo_client, judge_transport=httpx.MockTransport(judge))


@pytest.fixture
def client(app):
    return TestClient(app)


def bearer(settings, **claims):
    token = create_access_token(settings, claims)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def pto_headers(settings):
    return bearer(settings, sub="pto-1", email="pto@ksrce.ac.in", username="pto@ksrce.ac.in")


@pytest.fixture
def student_headers(settings):
    return bearer(settings, sub="student-7", username="student7", email="student7@ksrce.ac.in")


@pytest.fixture
def make_headers(settings):
    def _make(**claims):
        return bearer(settings, **claims)
    return _make
