import pytest
from pydantic import ValidationError

from conftest import OPTIONS
from question_bank.models.question_model import Question, QuestionOption, QuestionType


def _multiple(answer, options=OPTIONS):
    return Question(
        topic_id="alg",
        type=QuestionType.MULTIPLE,
        content="해당하는 것을 모두 고르시오",
        options=options,
        answer=answer,
        score=4,
    )


@pytest.mark.parametrize("answer,expected", [
    ("A,C", ["A", "C"]),
    ("C；A", ["A", "C"]),
    ("a、c", ["A", "C"]),
    ("C A", ["A", "C"]),
    ("CA", ["A", "C"]),
    (["c", "A", "C"], ["A", "C"]),
])
def test_multiple_answer_is_normalized(answer, expected):
    assert _multiple(answer).answer == expected


def test_multi_character_option_ids_in_string_answer():
    options = [QuestionOption(id=i, content=f"보기 {i}") for i in ("A1", "A2", "B1")]
    assert _multiple("A1, B1", options).answer == ["A1", "B1"]
    assert _multiple("A2", options).answer == ["A2"]


def test_multiple_answer_must_name_existing_options():
    with pytest.raises(ValidationError):
        _multiple("A,E")
    with pytest.raises(ValidationError):
        _multiple("AE")
