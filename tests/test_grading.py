import pytest

from conftest import make_question
from question_bank.models.session_state import ExamAnswer, ExamQuestion
from question_bank.services import grading


@pytest.fixture
def multi():
    return make_question("m", "alg", "multiple", ["A", "C"])


@pytest.mark.parametrize("submitted,expected", [
    (["C", "A"], True),
    (["A", "C"], True),
    (["a", " c "], True),
    (["A"], False),
    (["A", "C", "D"], False),
    ("AC", False),
    (None, False),
])
def test_multiple_choice_is_order_independent(multi, submitted, expected):
    assert grading.is_correct(multi, submitted) is expected


def test_scalar_answer_ignores_case_and_whitespace():
    fill = make_question("f", "alg", "fill", "Pythagoras")
    assert grading.is_correct(fill, "  pythagoras ")
    assert not grading.is_correct(fill, "pythagora")
    assert not grading.is_correct(fill, ["Pythagoras"])


def test_single_choice_answer():
    single = make_question("s", "alg", "single", "b")
    assert single.answer == "B"
    assert grading.is_correct(single, "b")
    assert not grading.is_correct(single, "C")


def test_subjective_uses_exact_string_rule():
    essay = make_question("j", "geo", "subjective", "a² + b² = c²")
    assert grading.is_correct(essay, "A² + B² = C² ")
    assert not grading.is_correct(essay, "a^2 + b^2 = c^2")


def test_score_uses_exam_score_not_base_score():
    bank = {
        "s1": make_question("s1", "alg", "single", "A", score=100),
        "s2": make_question("s2", "alg", "single", "B", score=100),
        "f1": make_question("f1", "alg", "fill", "50", score=100),
    }
    eqs = [
        ExamQuestion(exam_id="e", submission_id="x", question_id="s1", order=1, score=5),
        ExamQuestion(exam_id="e", submission_id="x", question_id="s2", order=2, score=5),
        ExamQuestion(exam_id="e", submission_id="x", question_id="f1", order=3, score=3),
    ]
    answers = {
        "s1": ExamAnswer(submission_id="x", question_id="s1", answer="A"),
        "s2": ExamAnswer(submission_id="x", question_id="s2", answer="C"),
    }
    results = grading.grade_questions(eqs, bank, answers)

    assert [r["is_correct"] for r in results] == [True, False, False]
    assert grading.calculate_score(results) == 5
    assert grading.max_score(eqs) == 13
    assert grading.get_incorrect_question_ids(results) == ["s2"]

    by_type = {t["type"]: t for t in grading.calculate_type_scores(results)}
    assert by_type["single"]["correct"] == 1
    assert by_type["single"]["incorrect"] == 1
    assert by_type["fill"]["unanswered"] == 1
    assert by_type["fill"]["max_score"] == 3
