# progress_store.py
"""Per-student quiz progress kept on the client side of the app.

The browser keeps three JSON values in local storage: the list of student
aggregates, the identity of the signed-in student and the log of quiz
attempts. ``ProgressStore`` manipulates those values through a small storage
interface, so the same logic runs against a dict in tests or a JSON file on
disk.
"""
import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from models.progress import CurrentStudent, LocalStudentAggregate, QuizAttempt, DEFAULT_AVATAR
from ranking import calculate_rp, get_tier, DEFAULT_DIFFICULTY

logger = logging.getLogger(__name__)

STUDENTS_KEY = "vikas-students"
CURRENT_STUDENT_KEY = "current-student"
ATTEMPTS_KEY = "quizAttempts"


class InMemoryStorage:
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Any:
        raw = self._items.get(key)
        return json.loads(raw) if raw is not None else None

    def set(self, key: str, value: Any) -> None:
        self._items[key] = json.dumps(value)

    def remove(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage:
    """All keys live in one JSON object written back on every change."""

    def __init__(self, path):
        self.path = Path(path)

    def _load(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        with self.path.open("r", encoding="utf-8") as fh:
            content = fh.read()
        return json.loads(content) if content.strip() else {}

    def _dump(self, items: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self.path.with_suffix(self.path.suffix + ".tmp")
        with tmp_path.open("w", encoding="utf-8") as fh:
            json.dump(items, fh, indent=2)
        tmp_path.replace(self.path)

    def get(self, key: str) -> Any:
        return self._load().get(key)

    def set(self, key: str, value: Any) -> None:
        items = self._load()
        items[key] = value
        self._dump(items)

    def remove(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._dump(items)


class ProgressStore:
    def __init__(self, storage):
        self.storage = storage

    def set_current_student(self, identity: Optional[dict]) -> None:
        if identity is None:
            self.storage.remove(CURRENT_STUDENT_KEY)
            return
        current = CurrentStudent.model_validate(identity)
        self.storage.set(CURRENT_STUDENT_KEY, current.model_dump(by_alias=True, exclude_none=True))

    def current_student(self) -> Optional[CurrentStudent]:
        raw = self.storage.get(CURRENT_STUDENT_KEY)
        return CurrentStudent.model_validate(raw) if raw else None

    def students(self) -> List[LocalStudentAggregate]:
        return [LocalStudentAggregate.model_validate(s) for s in self.storage.get(STUDENTS_KEY) or []]

    def attempts(self) -> List[QuizAttempt]:
        return [QuizAttempt.model_validate(a) for a in self.storage.get(ATTEMPTS_KEY) or []]

    def leaderboard(self, limit: int = 10) -> List[LocalStudentAggregate]:
        return sorted(self.students(), key=lambda s: s.rp, reverse=True)[:limit]

    def update_student_rp(self, rp_earned: int) -> Optional[LocalStudentAggregate]:
        current = self.current_student()
        if current is None:
            logger.info("No current student, skipping RP update")
            return None

        students = self.students()
        found = next((s for s in students if s.username == current.username), None)
        if found:
            found.rp += rp_earned
            found.quizzes += 1
            found.tier = get_tier(found.rp)
        else:
            found = LocalStudentAggregate(
                username=current.username,
                class_=current.class_ or 5,
                rp=rp_earned,
                quizzes=1,
                tier=get_tier(rp_earned),
                avatar=current.avatar or DEFAULT_AVATAR,
            )
            students.append(found)

        self.storage.set(STUDENTS_KEY, [s.model_dump(by_alias=True) for s in students])
        logger.info(f"Student {found.username} now has {found.rp} RP ({found.tier})")
        return found

    def save_quiz_attempt(self, quiz_name: str, score: int, total_questions: int, rp_earned: int,
                          difficulty: str = DEFAULT_DIFFICULTY) -> QuizAttempt:
        attempt = QuizAttempt(
            quiz=quiz_name,
            score=score,
            totalQ=total_questions,
            rp=rp_earned,
            difficulty=difficulty,
            ts=datetime.now().strftime("%m/%d/%Y, %I:%M:%S %p"),
        )
        attempts = self.storage.get(ATTEMPTS_KEY) or []
        attempts.append(attempt.model_dump())
        self.storage.set(ATTEMPTS_KEY, attempts)
        return attempt

    def complete_quiz(self, quiz_name: str, score: int, total_questions: int,
                      difficulty: str = DEFAULT_DIFFICULTY) -> int:
        rp_earned = calculate_rp(score, total_questions, difficulty)
        self.save_quiz_attempt(quiz_name, score, total_questions, rp_earned, difficulty)
        self.update_student_rp(rp_earned)
        return rp_earned
