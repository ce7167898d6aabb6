# quickcare/schemas/auth.py
from pydantic import BaseModel, Field
from typing import Optional


class SignupRequest(BaseModel):
    name: Optional[str] = Field(None, max_length=100, description="User's full name")
    email: Optional[str] = Field(None, max_length=255)
    password: Optional[str] = Field(None, max_length=128)
    phone: Optional[str] = Field(None, max_length=20)


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None


class GoogleAuthRequest(BaseModel):
    credential: Optional[str] = Field(None, description="Google Sign-In ID token")


class UserResponse(BaseModel):
    id: str
    name: str
    email: str
    phone: Optional[str] = None
    role: str
    avatar: Optional[str] = None
