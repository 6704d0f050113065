# routes/students.py
from fastapi import APIRouter, Depends, Query
import logging

from database import get_db
from errors import NotFound
from models.student import AvatarRequest, QuizCompletionRequest, WatchedVideoRequest, public_profile
from ranking import calculate_rp
from .auth import get_current_student
from . import student_directory

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/students", tags=["students"])


async def _load_current(db, current_student: dict):
    student = await student_directory.find_by_id(db, current_student["id"])
    if not student:
        raise NotFound("Student not found")
    return student


@router.get("/leaderboard")
async def leaderboard(limit: int = Query(10, ge=1, le=100), db=Depends(get_db),
                      current_student: dict = Depends(get_current_student)):
    students = await student_directory.top_students(db, limit)
    return {"success": True, "students": [public_profile(s) for s in students]}


@router.get("/me")
async def get_me(db=Depends(get_db), current_student: dict = Depends(get_current_student)):
    student = await _load_current(db, current_student)
    return {"success": True, "user": public_profile(student)}


@router.post("/me/quiz-completions")
async def complete_quiz(request: QuizCompletionRequest, db=Depends(get_db),
                        current_student: dict = Depends(get_current_student)):
    student = await _load_current(db, current_student)
    rp_earned = calculate_rp(request.score, request.totalQuestions, request.difficulty)
    logger.info(f"Student {student['username']} completed {request.quizId}: "
                f"{request.score}/{request.totalQuestions} ({request.difficulty}), +{rp_earned} RP")

    updated = await student_directory.record_quiz_completion(db, student["_id"], request.quizId, rp_earned)
    if not updated:
        raise NotFound("Student not found")
    return {
        "success": True,
        "rpEarned": rp_earned,
        "rp": updated["rp"],
        "tier": updated["tier"],
        "quizzes": len(updated.get("completedQuizzes", [])),
    }


@router.post("/me/watched-videos")
async def watched_video(request: WatchedVideoRequest, db=Depends(get_db),
                        current_student: dict = Depends(get_current_student)):
    student = await _load_current(db, current_student)
    updated = await student_directory.add_watched_video(db, student["_id"], request.videoId)
    if not updated:
        raise NotFound("Student not found")
    return {"success": True, "watchedVideos": updated.get("watchedVideos", [])}


@router.put("/me/avatar")
async def update_avatar(request: AvatarRequest, db=Depends(get_db),
                        current_student: dict = Depends(get_current_student)):
    student = await _load_current(db, current_student)
    updated = await student_directory.set_profile_picture(db, student["_id"], request.profilePicture)
    if not updated:
        raise NotFound("Student not found")
    return {"success": True, "user": public_profile(updated)}
