import pytest

from question_bank.models.exam_model import ExamRule, TypeSpec
from question_bank.models.question_model import QuestionType
from question_bank.services.rule_resolver import normalize_type, resolve_rules


@pytest.mark.parametrize("label,expected", [
    ("single", QuestionType.SINGLE),
    (" Single_Choice ", QuestionType.SINGLE),
    ("单选题", QuestionType.SINGLE),
    ("MCQ", QuestionType.MULTIPLE),
    ("多选", QuestionType.MULTIPLE),
    ("blank", QuestionType.FILL),
    ("填空", QuestionType.FILL),
    ("essay", QuestionType.SUBJECTIVE),
    ("主观题", QuestionType.SUBJECTIVE),
    ("true_false", None),
    ("", None),
    (None, None),
])
def test_normalize_type(label, expected):
    assert normalize_type(label) == expected


def test_merge_takes_max_count_and_last_score(store):
    rules = [
        ExamRule(chapter_ids=["alg"], question_types=[TypeSpec(type="single", count=3, score=2)]),
        ExamRule(chapter_ids=["geo"], question_types=[TypeSpec(type="单选", count=5, score=4)]),
        ExamRule(chapter_ids=["geo"], question_types=[TypeSpec(type="single_choice", count=1, score=6)]),
    ]
    resolved = resolve_rules(rules, store.topics)

    assert resolved.chapter_ids == {"alg", "geo"}
    spec = resolved.specs[QuestionType.SINGLE]
    assert spec.count == 5
    assert spec.score == 6


def test_subject_selector_expands_to_child_chapters(store):
    rules = [ExamRule(subject_ids=["math"], question_types=[TypeSpec(type="fill", count=1, score=3)])]
    resolved = resolve_rules(rules, store.topics)
    assert resolved.chapter_ids == {"alg", "geo"}


def test_subject_id_given_as_chapter_is_expanded(store):
    rules = [ExamRule(chapter_ids=["phys", "alg"], question_types=[])]
    assert resolve_rules(rules, store.topics).chapter_ids == {"mech", "alg"}


def test_unknown_type_labels_are_dropped(store):
    rules = [ExamRule(chapter_ids=["alg"], question_types=[
        TypeSpec(type="judgement", count=2, score=1),
        TypeSpec(type="fill", count=1, score=3),
    ])]
    resolved = resolve_rules(rules, store.topics)
    assert list(resolved.specs) == [QuestionType.FILL]


def test_empty_rules_yield_empty_plan(store):
    resolved = resolve_rules([], store.topics)
    assert resolved.chapter_ids == set()
    assert resolved.specs == {}
