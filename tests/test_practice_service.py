from datetime import timedelta

import pytest

from conftest import START
from question_bank.models.session_state import PracticeStatus
from question_bank.services import practice_service, wrongbook_service
from question_bank.services.errors import InvalidState, NotFound, ValidationError

USER = "u-student"


def test_start_requires_topics_and_count(store):
    with pytest.raises(ValidationError):
        practice_service.start_practice(store, USER, [], 5, START)
    with pytest.raises(ValidationError):
        practice_service.start_practice(store, USER, ["alg"], 0, START)


def test_serves_each_question_once_then_completes(store, rng):
    # 物理 → 力学 챕터 하나, 문제 1개
    session = practice_service.start_practice(store, USER, ["phys"], 5, START)

    served = practice_service.next_question(store, session.id, USER, START, rng)
    assert served["question"]["id"] == "s6"
    assert "answer" not in served["question"]

    with pytest.raises(NotFound):
        practice_service.next_question(store, session.id, USER, START, rng)
    assert session.status == PracticeStatus.COMPLETED
    assert session.end_time == START


def test_no_repeats_within_session(store, rng):
    session = practice_service.start_practice(store, USER, ["alg"], 5, START)
    ids = [practice_service.next_question(store, session.id, USER, START, rng)["question"]["id"] for _ in range(5)]
    assert sorted(ids) == ["f1", "m1", "s1", "s2", "s3"]


def test_stops_after_requested_count(store, rng):
    session = practice_service.start_practice(store, USER, ["math"], 2, START)
    practice_service.next_question(store, session.id, USER, START, rng)
    practice_service.next_question(store, session.id, USER, START, rng)
    with pytest.raises(NotFound):
        practice_service.next_question(store, session.id, USER, START, rng)


def test_submit_grades_upserts_and_records_wrong(store):
    session = practice_service.start_practice(store, USER, ["alg"], 5, START)

    out = practice_service.submit_answers(store, session.id, USER, [
        {"question_id": "s1", "user_answer": "A"},
        {"question_id": "m1", "user_answer": ["A"]},
    ], False, START)
    assert out["correct_count"] == 1
    assert out["total_count"] == 2

    out = practice_service.submit_answers(store, session.id, USER, [
        {"question_id": "m1", "user_answer": ["C", "A"]},
    ], True, START + timedelta(minutes=3))
    assert out["correct_count"] == 1
    assert out["total_count"] == 2
    assert session.correct_count == 2
    assert session.status == PracticeStatus.COMPLETED

    wrong = wrongbook_service.list_wrong(store, USER)
    assert [w["question_id"] for w in wrong["wrong_questions"]] == ["m1"]

    result = practice_service.get_result(store, session.id, USER)
    assert result["correct"] == 2
    assert result["accuracy"] == 100.0
    assert result["results"][1]["correct_answer"] == ["A", "C"]


def test_bad_batch_is_not_partially_applied(store):
    session = practice_service.start_practice(store, USER, ["alg"], 5, START)
    with pytest.raises(NotFound):
        practice_service.submit_answers(store, session.id, USER, [
            {"question_id": "s1", "user_answer": "A"},
            {"question_id": "missing", "user_answer": "A"},
        ], False, START)
    assert session.answers == {}


def test_abandon_and_ownership(store, rng):
    session = practice_service.start_practice(store, USER, ["alg"], 3, START)
    with pytest.raises(NotFound):
        practice_service.abandon_practice(store, session.id, "someone-else", START)

    practice_service.abandon_practice(store, session.id, USER, START)
    assert session.status == PracticeStatus.ABANDONED
    with pytest.raises(InvalidState):
        practice_service.next_question(store, session.id, USER, START, rng)


def test_learning_stats(store):
    session = practice_service.start_practice(store, USER, ["alg"], 5, START)
    practice_service.submit_answers(store, session.id, USER, [
        {"question_id": "s1", "user_answer": "A"},
        {"question_id": "s2", "user_answer": "A"},
    ], True, START)
    wrongbook_service.mark_mastered(store, USER, "s2", START)

    stats = wrongbook_service.learning_stats(store, USER)
    assert stats["practice_answered"] == 2
    assert stats["practice_accuracy"] == 50.0
    assert stats["total_wrong_questions"] == 1
    assert stats["mastery_rate"] == 100.0
    assert stats["exams_completed"] == 0
