from pydantic import BaseModel, field_validator
from typing import Optional


class UserUpdate(BaseModel):
    user_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[str] = None
    password: Optional[str] = None
    bio: Optional[str] = None

    @field_validator('name', 'email')
    @classmethod
    def strip_whitespace(cls, v):
        return v.strip() if isinstance(v, str) else v

    @field_validator('password')
    @classmethod
    def validate_password(cls, v):
        if v and len(v.encode()) > 72:
            raise ValueError('Password must be at most 72 bytes long')
        return v
