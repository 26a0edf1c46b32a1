import pytest

from placipy.core.errors import NotFoundError, StoreError
from placipy.services.assessment_service import (
    AssessmentService,
    assessment_number,
    department_code,
)


@pytest.fixture
def service(settings, assessments_table, questions_table, main_table):
    return AssessmentService(settings, assessments_table, questions_table, main_table)


def authored(**overrides):
    data = {
        "title": "Aptitude Round 1",
        "department": "Computer Science",
        "difficulty": "medium",
        "duration": 45,
        "questions": [
            {"text": "2 + 2?", "options": ["3", "4"], "correctAnswer": "B", "subcategory": "aptitude"},
            {"text": "Echo", "starterCode": "print(input())",
             "testCases": [{"input": "1", "expectedOutput": "1", "marks": 2}]},
        ],
    }
    data.update(overrides)
    return data


def seed_assessment(table, assessment_id, domain="ksrce.ac.in", **fields):
    record = {"PK": f"ASSESSMENT#{assessment_id}", "SK": f"CLIENT#{domain}", "assessmentId": assessment_id}
    record.update(fields)
    table.put(record)
    return record


def test_department_code():
    assert department_code("Computer Science") == "CSE"
    assert department_code("Information Technology") == "IT"
    assert department_code("Electronics") == "ECE"
    assert department_code("Mechanical") == "ME"
    assert department_code("Civil") == "CE"
    assert department_code("Biotech") == "BIO"
    assert department_code("ai") == "AI"
    assert department_code(None) == "GEN"
    assert department_code("") == "GEN"


def test_assessment_number():
    assert assessment_number("ASSESSMENT#ASSESS_007_CSE") == 7
    assert assessment_number("ASSESSMENT#ASSESS_X_CSE") is None
    assert assessment_number("ASSESSMENT#OTHER") is None


def test_first_number_is_001(service):
    assert service.next_assessment_number("CSE") == "001"


def test_next_number_follows_highest_in_department(service, assessments_table):
    for assessment_id in ("ASSESS_001_CSE", "ASSESS_002_CSE", "ASSESS_005_CSE"):
        seed_assessment(assessments_table, assessment_id)
    seed_assessment(assessments_table, "ASSESS_009_IT", domain="other.edu")

    assert service.next_assessment_number("CSE") == "006"
    assert service.next_assessment_number("IT") == "010"
    assert service.next_assessment_number("ECE") == "001"


def test_consecutive_allocations_are_distinct(service):
    numbers = [service.next_assessment_number("CSE") for _ in range(3)]
    assert numbers == ["001", "002", "003"]


def test_allocation_store_failure_falls_back_to_001(settings, assessments_table, questions_table):
    class FailingCounters:
        def increment(self, *args, **kwargs):
            raise StoreError("throttled")

    service = AssessmentService(settings, assessments_table, questions_table, FailingCounters())
    assert service.next_assessment_number("CSE") == "001"


def test_create_assessment_builds_full_record(service, assessments_table):
    record = service.create_assessment(authored(), "PTO@ksrce.ac.in")

    assert record["assessmentId"] == "ASSESS_001_CSE"
    assert record["PK"] == "ASSESSMENT#ASSESS_001_CSE"
    assert record["SK"] == "CLIENT#ksrce.ac.in"
    assert record["departmentCode"] == "CSE"
    assert record["category"] == "MIXED"
    assert record["status"] == "ACTIVE"
    assert record["configuration"]["duration"] == 45
    assert record["configuration"]["totalQuestions"] == 2
    assert record["target"]["departments"] == ["Computer Science"]
    assert record["stats"] == {"avgScore": 0, "completed": 0, "highestScore": 0, "totalParticipants": 0}
    assert record["createdAt"] == record["updatedAt"]
    assert record["createdAt"].endswith("Z")
    assert [q["questionId"] for q in record["questions"]] == ["Q_001", "Q_002"]
    assert [e["batch"] for e in record["entities"]] == ["mcq_batch_1", "programming_batch_1"]
    assert "publishedAt" not in record

    stored = assessments_table.get("ASSESSMENT#ASSESS_001_CSE", "CLIENT#ksrce.ac.in")
    assert stored["questions"] == record["questions"]


def test_create_without_department_uses_gen(service):
    record = service.create_assessment(authored(department=None), "someone")
    assert record["assessmentId"] == "ASSESS_001_GEN"
    # No email domain: default tenant
    assert record["SK"] == "CLIENT#ksrce.ac.in"


def test_create_published_sets_published_at(service):
    record = service.create_assessment(authored(isPublished=True), "pto@college.edu")
    assert record["isPublished"] is True
    assert record["publishedAt"] == record["createdAt"]
    assert record["SK"] == "CLIENT#college.edu"


def test_get_assessment_matches_any_tenant_and_prefers_exact_key(service, assessments_table):
    seed_assessment(assessments_table, "ASSESS_003_IT_MCQ_BATCH_1", domain="a.edu", title="legacy")
    assert service.get_assessment("ASSESS_003_IT")["title"] == "legacy"

    seed_assessment(assessments_table, "ASSESS_003_IT", domain="b.edu", title="current")
    assert service.get_assessment("ASSESS_003_IT")["title"] == "current"

    assert service.get_assessment("ASSESS_404_IT") is None


def test_list_assessments_filters_and_pages(service, assessments_table):
    for i in range(1, 6):
        seed_assessment(assessments_table, f"ASSESS_00{i}_CSE", department="Computer Science",
                        status="ACTIVE" if i % 2 else "DRAFT")
    seed_assessment(assessments_table, "ASSESS_001_IT", department="Information Technology", status="ACTIVE")

    page = service.list_assessments(limit=4)
    assert len(page["items"]) == 4
    assert page["hasMore"] is True
    rest = service.list_assessments(limit=4, last_key=page["lastKey"])
    assert len(rest["items"]) == 2
    assert rest["hasMore"] is False

    active_cse = service.list_assessments(department="Computer Science", status="ACTIVE")
    assert [a["assessmentId"] for a in active_cse["items"]] == ["ASSESS_001_CSE", "ASSESS_003_CSE", "ASSESS_005_CSE"]


def test_find_question_accepts_id_forms(service, questions_table):
    record = service.create_assessment(authored(), "pto@ksrce.ac.in")
    assessment_id = record["assessmentId"]

    assert service.find_question(assessment_id, "Q_002")["entityType"] == "coding"
    assert service.find_question(assessment_id, 2)["questionId"] == "Q_002"
    assert service.find_question(assessment_id, "1")["questionId"] == "Q_001"
    assert service.find_question(assessment_id, "Q_009") is None

    questions_table.put({
        "PK": f"ASSESSMENT#{assessment_id}_QUESTION#7",
        "SK": "CLIENT#ksrce.ac.in",
        "questionId": f"{assessment_id}_Q7",
        "testCases": [{"inputs": {"input": "x"}, "expectedOutput": "x"}],
    })
    assert service.find_question(assessment_id, "7")["questionId"] == f"{assessment_id}_Q7"


def test_update_missing_assessment_writes_nothing(service, assessments_table):
    with pytest.raises(NotFoundError):
        service.update_assessment("ASSESS_001_CSE", {"title": "x"})
    items, _ = assessments_table.scan()
    assert items == []


def test_update_overwrites_fields_and_stamps_audit(service):
    record = service.create_assessment(authored(), "pto@ksrce.ac.in")
    updated = service.update_assessment(
        record["assessmentId"],
        {"title": "Renamed", "configuration": {"duration": 90}},
        updated_by="staff@ksrce.ac.in",
        updated_by_name="Staff One",
    )
    assert updated["title"] == "Renamed"
    # Nested objects are replaced whole
    assert updated["configuration"] == {"duration": 90}
    assert updated["updatedBy"] == "staff@ksrce.ac.in"
    assert updated["updatedByName"] == "Staff One"
    assert updated["createdAt"] == record["createdAt"]
    assert updated["PK"] == record["PK"]


def test_update_is_repeatable(service):
    record = service.create_assessment(authored(), "pto@ksrce.ac.in")
    first = service.update_assessment(record["assessmentId"], {"status": "ARCHIVED"})
    second = service.update_assessment(record["assessmentId"], {"status": "ARCHIVED"})
    first.pop("updatedAt")
    second.pop("updatedAt")
    assert first == second


def test_update_questions_rebuilds_batches(service):
    record = service.create_assessment(authored(), "pto@ksrce.ac.in")
    updated = service.update_assessment(
        record["assessmentId"],
        {"questions": [{"text": "Only", "starterCode": "pass"}]},
    )
    assert [q["questionId"] for q in updated["questions"]] == ["Q_001"]
    assert updated["entities"] == [
        {"type": "Coding", "description": "Programming questions", "batch": "programming_batch_1"}
    ]


def test_delete_removes_record_and_legacy_questions(service, assessments_table, questions_table):
    record = service.create_assessment(authored(), "pto@ksrce.ac.in")
    assessment_id = record["assessmentId"]
    for n in (1, 2):
        questions_table.put({"PK": f"ASSESSMENT#{assessment_id}_Q{n}", "SK": record["SK"]})
    questions_table.put({"PK": f"ASSESSMENT#{assessment_id}_Q3", "SK": "CLIENT#other.edu"})

    assert service.delete_assessment(assessment_id) == 2
    assert service.get_assessment(assessment_id) is None
    remaining, _ = questions_table.scan()
    assert [q["SK"] for q in remaining] == ["CLIENT#other.edu"]


def test_delete_missing_assessment(service):
    with pytest.raises(NotFoundError):
        service.delete_assessment("ASSESS_001_CSE")


def test_legacy_records_of_similar_ids_are_left_alone(service, questions_table):
    it = service.create_assessment(authored(department="Information Technology"), "pto@ksrce.ac.in")
    italian = service.create_assessment(authored(department="Italian"), "pto@ksrce.ac.in")
    assert (it["assessmentId"], italian["assessmentId"]) == ("ASSESS_001_IT", "ASSESS_001_ITA")

    questions_table.put({
        "PK": "ASSESSMENT#ASSESS_001_ITA", "SK": "CLIENT#ksrce.ac.in",
        "questionId": "ASSESS_001_ITA_Q7", "testCases": [],
    })
    questions_table.put({
        "PK": "ASSESSMENT#ASSESS_001_ITA_Q8", "SK": "CLIENT#ksrce.ac.in", "questionId": "Q_008",
    })

    assert service.find_question("ASSESS_001_IT", "8") is None
    assert service.delete_assessment("ASSESS_001_IT") == 0
    assert questions_table.get("ASSESSMENT#ASSESS_001_ITA", "CLIENT#ksrce.ac.in") is not None
    assert questions_table.get("ASSESSMENT#ASSESS_001_ITA_Q8", "CLIENT#ksrce.ac.in") is not None
    assert service.find_question("ASSESS_001_ITA", "8")["questionId"] == "Q_008"


def test_tenant_scoped_update_and_delete(service):
    record = service.create_assessment(authored(), "pto@ksrce.ac.in")
    assessment_id = record["assessmentId"]

    with pytest.raises(NotFoundError):
        service.update_assessment(assessment_id, {"title": "x"}, domain="other.edu")
    with pytest.raises(NotFoundError):
        service.delete_assessment(assessment_id, domain="other.edu")

    assert service.update_assessment(assessment_id, {"title": "x"}, domain="ksrce.ac.in")["title"] == "x"
    service.delete_assessment(assessment_id, domain="ksrce.ac.in")
    assert service.get_assessment(assessment_id) is None
