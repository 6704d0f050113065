# routes/auth.py
from datetime import datetime, timedelta, timezone
from fastapi import APIRouter, Depends
from fastapi.concurrency import run_in_threadpool
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from pymongo.errors import DuplicateKeyError
from typing import Optional
import logging

import config
from database import get_db
from errors import DuplicateIdentity, InvalidCredential, NotFound, Unauthorized
from models.student import LoginRequest, RegisterRequest, StudentRecord, public_profile
from . import student_directory

logger = logging.getLogger(__name__)

logging.getLogger("passlib").setLevel(logging.ERROR)
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer_scheme = HTTPBearer(auto_error=False)

router = APIRouter(tags=["auth"])


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def create_access_token(student: dict, expires_delta: Optional[timedelta] = None) -> str:
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or timedelta(minutes=config.JWT_EXPIRES_MINUTES))
    claims = {
        "id": str(student["_id"]),
        "username": student["username"],
        "iat": now,
        "exp": expire,
    }
    return jwt.encode(claims, config.JWT_SECRET, algorithm=config.JWT_ALGORITHM)


def decode_access_token(token: str) -> dict:
    try:
        payload = jwt.decode(token, config.JWT_SECRET, algorithms=[config.JWT_ALGORITHM])
    except JWTError as e:
        logger.warning(f"JWTError: {str(e)}")
        raise Unauthorized("Invalid/Expired token")
    student_id = payload.get("id")
    username = payload.get("username")
    if not student_id or not username:
        logger.warning("Invalid token: missing id or username")
        raise Unauthorized("Invalid/Expired token")
    return {"id": student_id, "username": username}


async def get_current_student(credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme)):
    if credentials is None or not credentials.credentials:
        raise Unauthorized("No token")
    return decode_access_token(credentials.credentials)


@router.post("/register")
async def register(request: RegisterRequest, db=Depends(get_db)):
    logger.info(f"Registration attempt for username: {request.username}")

    existing = await student_directory.find_by_identity(db, request.username, request.email)
    if existing:
        logger.info(f"Registration rejected, identity taken: {request.username}")
        raise DuplicateIdentity("Username or email already exists")

    hashed_password = await run_in_threadpool(hash_password, request.password)
    student = StudentRecord(
        firstName=request.firstName,
        lastName=request.lastName,
        email=request.email,
        username=request.username,
        password=hashed_password,
        class_=request.class_,
    )
    try:
        student_id = await student_directory.insert_student(db, student.to_document())
    except DuplicateKeyError as e:
        # Another registration with the same identity won the race
        logger.info(f"Duplicate key on insert for {request.username}: {str(e)}")
        raise DuplicateIdentity("Username or email already exists")

    logger.info(f"Registered student {request.username} with id {student_id}")
    return {"success": True, "message": "Registration successful"}


@router.post("/login")
async def login(request: LoginRequest, db=Depends(get_db)):
    logger.info(f"Login attempt for username: {request.username}")

    student = await student_directory.find_by_username(db, request.username)
    if not student:
        raise NotFound("User not found")

    if not await run_in_threadpool(verify_password, request.password, student["password"]):
        raise InvalidCredential("Invalid password")

    token = create_access_token(student)
    return {
        "success": True,
        "token": token,
        "user": public_profile(student),
    }


@router.get("/dashboard-data")
async def dashboard_data(current_student: dict = Depends(get_current_student)):
    return {"success": True, "message": f"Welcome, {current_student['username']}!"}
