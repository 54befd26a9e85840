"""User profile models"""

from pydantic import BaseModel
from typing import Optional
from datetime import datetime
from enum import Enum


class UserRole(str, Enum):
    CUSTOMER = "customer"
    ADMIN = "admin"
    SUPERUSER = "superuser"


class User(BaseModel):
    """Row of the users profile table"""
    id: str
    email: str
    full_name: str = ""
    phone: Optional[str] = None
    address: Optional[str] = None
    facebook_link: Optional[str] = None
    facebook_name: Optional[str] = None
    birthday: Optional[str] = None
    role: UserRole = UserRole.CUSTOMER
    created_at: Optional[datetime] = None


class UserSummary(BaseModel):
    """Embedded customer fields on admin listings"""
    full_name: Optional[str] = None
    email: Optional[str] = None


class RegisterRequest(BaseModel):
    email: str
    password: str
    full_name: str


class LoginRequest(BaseModel):
    email: str
    password: str


class AccountUpdate(BaseModel):
    """Editable profile fields; blank strings are stored as null"""
    full_name: str
    phone: Optional[str] = None
    facebook_link: Optional[str] = None
    facebook_name: Optional[str] = None
    birthday: Optional[str] = None
    address: Optional[str] = None


class RoleUpdate(BaseModel):
    role: UserRole


class MeResponse(BaseModel):
    """Current identity and role flags"""
    authenticated: bool
    user: Optional[User] = None
    is_customer: bool = False
    is_admin: bool = False
    is_superuser: bool = False
