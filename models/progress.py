# models/progress.py
from pydantic import BaseModel, Field
from typing import Optional, Union

DEFAULT_AVATAR = "https://static.photos/people/200x200/default"


class CurrentStudent(BaseModel):
    username: str
    class_: Optional[Union[str, int]] = Field(default=None, alias="class")
    avatar: Optional[str] = None

    model_config = {"populate_by_name": True, "extra": "allow"}


class LocalStudentAggregate(BaseModel):
    username: str
    class_: Union[str, int] = Field(default=5, alias="class")
    rp: int = 0
    quizzes: int = 0
    tier: str
    avatar: str = DEFAULT_AVATAR

    model_config = {"populate_by_name": True}


class QuizAttempt(BaseModel):
    quiz: str
    score: int
    totalQ: int
    rp: int
    difficulty: str = "medium"
    ts: str
