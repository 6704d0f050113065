import json

import pytest

from errors import InvalidInput
from models.progress import DEFAULT_AVATAR
from progress_store import (
    ATTEMPTS_KEY,
    STUDENTS_KEY,
    InMemoryStorage,
    JsonFileStorage,
    ProgressStore,
)


@pytest.fixture
def store():
    return ProgressStore(InMemoryStorage())


def test_update_skipped_without_current_student(store):
    assert store.update_student_rp(100) is None
    assert store.students() == []


def test_first_update_creates_aggregate(store):
    store.set_current_student({"username": "asha", "class": "7"})
    aggregate = store.update_student_rp(160)

    assert aggregate.username == "asha"
    assert aggregate.class_ == "7"
    assert aggregate.rp == 160
    assert aggregate.quizzes == 1
    assert aggregate.tier == "Silver"
    assert aggregate.avatar == DEFAULT_AVATAR


def test_aggregate_defaults_class_and_keeps_avatar(store):
    store.set_current_student({"username": "ravi", "avatar": "https://example.com/ravi.png"})
    aggregate = store.update_student_rp(10)
    assert aggregate.class_ == 5
    assert aggregate.avatar == "https://example.com/ravi.png"


def test_repeated_updates_accumulate_and_retier(store):
    store.set_current_student({"username": "asha", "class": "7"})
    for _ in range(3):
        store.update_student_rp(200)

    [aggregate] = store.students()
    assert aggregate.rp == 600
    assert aggregate.quizzes == 3
    assert aggregate.tier == "Gold"


def test_updates_only_touch_current_student(store):
    store.set_current_student({"username": "asha"})
    store.update_student_rp(50)
    store.set_current_student({"username": "ravi"})
    store.update_student_rp(1200)

    by_name = {s.username: s for s in store.students()}
    assert by_name["asha"].rp == 50
    assert by_name["ravi"].tier == "Platinum"
    assert [s.username for s in store.leaderboard()] == ["ravi", "asha"]
    assert [s.username for s in store.leaderboard(limit=1)] == ["ravi"]


def test_aggregates_persist_with_browser_field_names(store):
    store.set_current_student({"username": "asha", "class": "7"})
    store.update_student_rp(20)
    raw = store.storage.get(STUDENTS_KEY)
    assert raw == [{
        "username": "asha",
        "class": "7",
        "rp": 20,
        "quizzes": 1,
        "tier": "Silver",
        "avatar": DEFAULT_AVATAR,
    }]


def test_quiz_attempts_are_append_only(store):
    store.save_quiz_attempt("Fractions", 8, 10, 160, "hard")
    store.save_quiz_attempt("Decimals", 3, 5, 60)

    attempts = store.attempts()
    assert [a.quiz for a in attempts] == ["Fractions", "Decimals"]
    assert attempts[0].difficulty == "hard"
    assert attempts[1].difficulty == "medium"
    assert attempts[0].totalQ == 10
    assert attempts[0].rp == 160
    assert attempts[0].ts


def test_complete_quiz_records_attempt_and_rp(store):
    store.set_current_student({"username": "asha"})
    earned = store.complete_quiz("Fractions", 8, 10, "hard")

    assert earned == 160
    assert store.attempts()[0].rp == 160
    assert store.students()[0].rp == 160


def test_complete_quiz_rejects_empty_quiz(store):
    store.set_current_student({"username": "asha"})
    with pytest.raises(InvalidInput):
        store.complete_quiz("Empty", 0, 0)
    assert store.attempts() == []
    assert store.students() == []


def test_clearing_current_student(store):
    store.set_current_student({"username": "asha"})
    store.set_current_student(None)
    assert store.current_student() is None


def test_json_file_storage_survives_reopen(tmp_path):
    path = tmp_path / "progress" / "state.json"
    first = ProgressStore(JsonFileStorage(path))
    first.set_current_student({"username": "asha", "class": "7"})
    first.complete_quiz("Fractions", 10, 10, "easy")

    second = ProgressStore(JsonFileStorage(path))
    assert second.current_student().username == "asha"
    assert second.students()[0].rp == 50
    assert len(second.attempts()) == 1

    on_disk = json.loads(path.read_text())
    assert set(on_disk) == {"current-student", STUDENTS_KEY, ATTEMPTS_KEY}
