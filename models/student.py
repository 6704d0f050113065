# models/student.py
from pydantic import BaseModel, Field, field_validator
from datetime import datetime, timezone
from typing import List, Optional
from ranking import DEFAULT_TIER


def _now():
    return datetime.now(timezone.utc)


class StudentRecord(BaseModel):
    firstName: str
    lastName: str
    email: str
    username: str
    password: str  # bcrypt hash, never the plain password
    class_: str = Field(alias="class")
    registrationDate: datetime = Field(default_factory=_now)
    rp: int = 0
    tier: str = DEFAULT_TIER
    completedQuizzes: List[str] = []
    watchedVideos: List[str] = []
    profilePicture: Optional[str] = None

    model_config = {"populate_by_name": True}

    def to_document(self) -> dict:
        return self.model_dump(by_alias=True)


class RegisterRequest(BaseModel):
    firstName: str = Field(min_length=1)
    lastName: str = Field(min_length=1)
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)
    class_: str = Field(alias="class", min_length=1)

    model_config = {"populate_by_name": True}

    @field_validator("class_", mode="before")
    @classmethod
    def class_as_string(cls, value):
        # The quiz client sends the class as a number
        if isinstance(value, int) and not isinstance(value, bool):
            return str(value)
        return value


class LoginRequest(BaseModel):
    username: str = Field(min_length=1)
    password: str = Field(min_length=1)


class QuizCompletionRequest(BaseModel):
    quizId: str = Field(min_length=1)
    score: int = Field(ge=0)
    totalQuestions: int = Field(gt=0)
    difficulty: str = "medium"


class WatchedVideoRequest(BaseModel):
    videoId: str = Field(min_length=1)


class AvatarRequest(BaseModel):
    profilePicture: str = Field(min_length=1)


def public_profile(student: dict) -> dict:
    """Response projection of a stored student; the password hash never leaves the server."""
    return {
        "id": str(student["_id"]) if student.get("_id") is not None else None,
        "username": student["username"],
        "firstName": student.get("firstName"),
        "lastName": student.get("lastName"),
        "email": student.get("email"),
        "class": student.get("class"),
        "rp": student.get("rp", 0),
        "tier": student.get("tier", DEFAULT_TIER),
        "avatar": student.get("profilePicture"),
        "completedQuizzes": student.get("completedQuizzes", []),
        "watchedVideos": student.get("watchedVideos", []),
    }
