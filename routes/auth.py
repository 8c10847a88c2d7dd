import sqlite3

import structlog
from fastapi import APIRouter, Depends

from db.database import get_db, transaction
from db.users import email_exists, get_user_by_username, insert_user, username_exists
from models.user import AuthResponse, LoginRequest, SignupRequest
from utils.auth import create_access_token, hash_password, verify_password
from utils.errors import AlreadyExistsError, AuthenticationError

router = APIRouter()
logger = structlog.get_logger()

@router.post("/signup", response_model=AuthResponse)
async def signup(request: SignupRequest, conn = Depends(get_db)):
    """Create a user and return a bearer token for it."""
    if username_exists(conn, request.username):
        raise AlreadyExistsError(f"Username already exists: {request.username}")
    if email_exists(conn, request.email):
        raise AlreadyExistsError(f"Email already exists: {request.email}")
    try:
        with transaction(conn):
            user_id = insert_user(conn, request.username, request.email, hash_password(request.password))
    except sqlite3.IntegrityError:
        raise AlreadyExistsError(f"Username or email already exists: {request.username}")
    logger.info("user_signed_up", user_id=user_id, username=request.username)
    return AuthResponse(
        token=create_access_token(request.username),
        username=request.username,
        email=request.email,
    )

@router.post("/login", response_model=AuthResponse)
async def login(request: LoginRequest, conn = Depends(get_db)):
    user = get_user_by_username(conn, request.username.strip())
    if not user or not verify_password(request.password, user["password_hash"]):
        raise AuthenticationError("Invalid username or password")
    return AuthResponse(
        token=create_access_token(user["username"]),
        username=user["username"],
        email=user["email"],
    )
