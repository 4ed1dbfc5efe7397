from pydantic import BaseModel, field_validator
from typing import Optional


class LikeRequest(BaseModel):
    post_id: Optional[int] = None
    user_id: Optional[int] = None


class CommentCreate(BaseModel):
    post_id: Optional[int] = None
    user_id: Optional[int] = None
    text: Optional[str] = None

    @field_validator('text')
    @classmethod
    def validate_text(cls, v):
        if v is not None and len(v) > 1000:
            raise ValueError('Comment must be at most 1000 characters long')
        return v


class DeleteRequest(BaseModel):
    user_id: Optional[int] = None
