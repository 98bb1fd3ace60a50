from conftest import START, build_bank
from question_bank.services import exam_service
from question_bank.services.store import Store


def test_snapshot_survives_restart(tmp_path, rng):
    path = str(tmp_path / "data" / "store.json")
    store = build_bank(Store(path))
    exam = exam_service.create_exam(store, {
        "name": "기말고사",
        "rules": [{"chapter_ids": ["alg"], "question_types": [{"type": "multiple", "count": 1, "score": 8}]}],
    }, "u-teacher", START)
    sub = exam_service.start_exam(store, exam.id, "u-student", START, rng)
    exam_service.submit_answer(store, sub.id, "u-student", "m1", ["C", "A"], True, START)

    reloaded = Store(path)
    assert reloaded.load() is True
    assert set(reloaded.questions) == set(store.questions)
    assert reloaded.questions["m1"].answer == ["A", "C"]
    restored = reloaded.submissions[sub.id]
    assert restored.status.value == "completed"
    assert restored.score == 8
    assert restored.answers["m1"].answer == ["C", "A"]
    assert restored.end_time == sub.end_time


def test_missing_or_broken_file_starts_empty(tmp_path):
    assert Store(str(tmp_path / "absent.json")).load() is False

    broken = tmp_path / "broken.json"
    broken.write_text("{not json", encoding="utf-8")
    store = Store(str(broken))
    assert store.load() is False
    assert store.questions == {}


def test_in_memory_store_never_writes(tmp_path):
    store = build_bank(Store())
    store.save()
    assert list(tmp_path.iterdir()) == []
