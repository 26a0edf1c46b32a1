"""
Question Builder - classification, normalisation and batch planning.

A question is one of two variants, decided by which fields are populated:
1. Multiple choice: at least one option with non-blank text
2. Programming: non-blank starter code
Options are checked first, so a question carrying both is multiple choice.

Questions that are neither are rejected when an assessment is authored
(see schemas.QuestionIn), which keeps the persisted list and the batch
plan in agreement.
"""

import math
import string
from typing import Any, Dict, List, Optional

MCQ = "mcq"
CODING = "coding"

MCQ_BATCH_SIZE = 50
DEFAULT_SUBCATEGORY = "technical"
DEFAULT_DIFFICULTY = "MEDIUM"


# ============================================================
# CLASSIFICATION
# ============================================================

def option_text(option: Any) -> str:
    """Text of an option, whether authored as a string or an {id, text} object."""
    if isinstance(option, str):
        return option
    if isinstance(option, dict):
        return str(option.get("text") or "")
    return ""


def classify_question(question: Dict[str, Any]) -> Optional[str]:
    """Return MCQ, CODING, or None when the question is neither."""
    options = question.get("options") or []
    if options and any(option_text(o).strip() for o in options):
        return MCQ

    starter_code = question.get("starterCode")
    if isinstance(starter_code, str) and starter_code.strip():
        return CODING

    return None


# ============================================================
# NORMALISATION
# ============================================================

def option_letter(index: int) -> str:
    """0 -> A, 25 -> Z, 26 -> AA, 27 -> AB..."""
    letters = ""
    index += 1
    while index > 0:
        index, remainder = divmod(index - 1, 26)
        letters = string.ascii_uppercase[remainder] + letters
    return letters


def normalize_options(options: List[Any]) -> List[Any]:
    """String options become {id, text} pairs lettered A, B, C... by position."""
    normalized = []
    for index, option in enumerate(options):
        if isinstance(option, str):
            normalized.append({"id": option_letter(index), "text": option})
        else:
            normalized.append(option)
    return normalized


def normalize_correct_answer(value: Any) -> List[str]:
    """Correct answer is always stored as a list of option ids."""
    if isinstance(value, list):
        return [str(v) for v in value]
    if isinstance(value, str):
        return [value]
    return []


def case_stdin(case: Dict[str, Any]) -> Any:
    """Stdin of a test case in either the flat or the nested stored shape."""
    inputs = case.get("inputs")
    if isinstance(inputs, dict):
        return inputs.get("input")
    return case.get("input")


def normalize_test_cases(cases: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Reshape {input, expectedOutput, marks} into the stored form:
    {"inputs": {"input": ...}, "expectedOutput": ..., "marks": ...}
    """
    return [
        {
            "inputs": {"input": case_stdin(case)},
            "expectedOutput": case.get("expectedOutput"),
            "marks": case.get("marks") if case.get("marks") is not None else 1,
        }
        for case in cases
    ]


def question_id(number: int) -> str:
    return f"Q_{number:03d}"


def build_question(question: Dict[str, Any], number: int, default_difficulty: Optional[str] = None) -> Dict[str, Any]:
    """Build the persisted shape of one authored question (number is 1-based)."""
    built = {
        "questionId": question_id(number),
        "questionNumber": number,
        "question": question.get("text") or question.get("question"),
        "points": question.get("marks") or question.get("points") or 1,
        "difficulty": (question.get("difficulty") or default_difficulty or DEFAULT_DIFFICULTY).upper(),
        "subcategory": question.get("subcategory") or DEFAULT_SUBCATEGORY,
    }

    kind = classify_question(question)
    if kind == MCQ:
        built["entityType"] = MCQ
        built["category"] = "MCQ"
        built["options"] = normalize_options(question.get("options") or [])
        built["correctAnswer"] = normalize_correct_answer(question.get("correctAnswer"))
    elif kind == CODING:
        built["entityType"] = CODING
        built["category"] = "PROGRAMMING"
        built["starterCode"] = question.get("starterCode")
        if question.get("testCases"):
            built["testCases"] = normalize_test_cases(question["testCases"])

    return built


def build_questions(questions: List[Dict[str, Any]], default_difficulty: Optional[str] = None) -> List[Dict[str, Any]]:
    return [
        build_question(question, index + 1, default_difficulty)
        for index, question in enumerate(questions)
    ]


# ============================================================
# BATCH PLANNING
# ============================================================

def plan_batches(questions: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """
    Group questions the way the downstream batching convention expects:
    multiple choice in batches of 50 (every batch lists all subcategories
    seen), programming always in a single batch.
    """
    subcategories: List[str] = []
    mcq_count = 0
    has_coding = False

    for question in questions:
        kind = classify_question(question)
        if kind == MCQ:
            mcq_count += 1
            subcategory = question.get("subcategory") or DEFAULT_SUBCATEGORY
            if subcategory not in subcategories:
                subcategories.append(subcategory)
        elif kind == CODING:
            has_coding = True

    entities = []
    for i in range(1, math.ceil(mcq_count / MCQ_BATCH_SIZE) + 1):
        entities.append({
            "type": "MCQ",
            "subcategories": list(subcategories),
            "batch": f"mcq_batch_{i}",
        })

    if has_coding:
        entities.append({
            "type": "Coding",
            "description": "Programming questions",
            "batch": "programming_batch_1",
        })

    return entities


def derive_category(questions: List[Dict[str, Any]]) -> str:
    """Assessment-level category from the variants present."""
    kinds = {classify_question(q) for q in questions} - {None}
    if kinds == {CODING}:
        return "PROGRAMMING"
    if kinds == {MCQ, CODING}:
        return "MIXED"
    return "MCQ"
