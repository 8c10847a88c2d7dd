import re

from pydantic import BaseModel, field_validator

_EMAIL_RE = re.compile(r"^[^@\s]+@[^@\s]+\.[^@\s]+$")

class LoginRequest(BaseModel):
    username: str
    password: str

class SignupRequest(LoginRequest):
    email: str

    @field_validator('username')
    @classmethod
    def validate_username(cls, v):
        username = v.strip()
        if len(username) < 3:
            raise ValueError("Username must be at least 3 characters")
        return username

    @field_validator('email')
    @classmethod
    def validate_email(cls, v):
        email = v.strip().lower()
        if not _EMAIL_RE.match(email):
            raise ValueError("Invalid email address")
        return email

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if len(v) < 8:
            raise ValueError("Password must be at least 8 characters")
        return v

class AuthResponse(BaseModel):
    token: str
    token_type: str = "Bearer"
    username: str
    email: str
