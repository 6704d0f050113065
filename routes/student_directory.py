# routes/student_directory.py
import logging
from bson import ObjectId
from bson.errors import InvalidId
from pymongo import ReturnDocument
from ranking import get_tier

logger = logging.getLogger(__name__)


def _students(db):
    return db.students


async def find_by_username(db, username: str):
    return await _students(db).find_one({"username": username})


async def find_by_identity(db, username: str, email: str):
    return await _students(db).find_one({"$or": [{"username": username}, {"email": email}]})


async def find_by_id(db, student_id: str):
    try:
        oid = ObjectId(student_id)
    except (InvalidId, TypeError):
        logger.warning(f"Malformed student id: {student_id}")
        return None
    return await _students(db).find_one({"_id": oid})


async def insert_student(db, document: dict) -> str:
    """Insert a new student; a DuplicateKeyError from the unique indexes propagates."""
    result = await _students(db).insert_one(document)
    return str(result.inserted_id)


async def record_quiz_completion(db, student_id, quiz_id: str, rp_earned: int):
    student = await _students(db).find_one_and_update(
        {"_id": student_id},
        {"$inc": {"rp": rp_earned}, "$push": {"completedQuizzes": quiz_id}},
        return_document=ReturnDocument.AFTER,
    )
    if student is None:
        return None
    tier = get_tier(student["rp"])
    if tier != student.get("tier"):
        # Only applies while rp is unchanged; a later completion writes the tier for its own total
        result = await _students(db).update_one(
            {"_id": student_id, "rp": student["rp"]},
            {"$set": {"tier": tier}},
        )
        if result.matched_count:
            logger.info(f"Student {student['username']} moved from {student.get('tier')} to {tier}")
        else:
            logger.info(f"Skipped stale tier write for {student['username']} at {student['rp']} RP")
        student["tier"] = tier
    return student


async def add_watched_video(db, student_id, video_id: str):
    return await _students(db).find_one_and_update(
        {"_id": student_id},
        {"$addToSet": {"watchedVideos": video_id}},
        return_document=ReturnDocument.AFTER,
    )


async def set_profile_picture(db, student_id, picture: str):
    return await _students(db).find_one_and_update(
        {"_id": student_id},
        {"$set": {"profilePicture": picture}},
        return_document=ReturnDocument.AFTER,
    )


async def top_students(db, limit: int = 10):
    return await _students(db).find({}).sort("rp", -1).limit(limit).to_list(None)
