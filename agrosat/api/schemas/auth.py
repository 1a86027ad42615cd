from pydantic import BaseModel, EmailStr, Field, ConfigDict
from typing import Optional, Dict, Any
from datetime import datetime
from uuid import UUID


class RegisterRequest(BaseModel):
    """Schema for user registration"""
    email: EmailStr
    password: str = Field(..., min_length=6, max_length=100)
    name: Optional[str] = Field(None, max_length=200)


class LoginRequest(BaseModel):
    """Schema for user login"""
    email: EmailStr
    password: str


class RegisterResponse(BaseModel):
    user: Optional[Dict[str, Any]] = None
    session: Optional[Dict[str, Any]] = None


class LoginResponse(BaseModel):
    token: str
    user: Dict[str, Any]


class SettingsUpdate(BaseModel):
    """Schema for updating profile settings"""
    name: Optional[str] = Field(None, max_length=200)
    email: Optional[EmailStr] = None  # changing email is left to the auth provider
    settings: Optional[Dict[str, Any]] = None


class ProfileResponse(BaseModel):
    """Schema for profile response"""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None
    settings: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
