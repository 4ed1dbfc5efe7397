from pydantic import BaseModel, field_validator
from typing import Optional


def _strip(v):
    return v.strip() if isinstance(v, str) else v


class SignupRequest(BaseModel):
    # Required fields are checked by the validation layer so the client gets one envelope message
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    bio: Optional[str] = None
    phone: Optional[str] = None
    birth_date: Optional[str] = None
    location: Optional[str] = None

    @field_validator('name', 'email', 'phone', 'location')
    @classmethod
    def strip_whitespace(cls, v):
        return _strip(v)

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if v is not None and len(v.encode()) > 72:
            raise ValueError('Password must be at most 72 bytes long')
        return v


class LoginRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None

    @field_validator('email')
    @classmethod
    def strip_email(cls, v):
        return _strip(v)
