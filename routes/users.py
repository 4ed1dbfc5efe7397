from fastapi import APIRouter, File, Form, UploadFile
from typing import Optional

from file_utils import PROFILES, delete_upload, save_upload
from repositories import users
from schemas.users import UserUpdate
from utils.route_helpers import has_file, ok
from utils.validation import parse_id, require_fields

router = APIRouter(prefix="/api/users", tags=["users"])


@router.put("/update")
def update_user(req: UserUpdate):
    require_fields("User ID, name and email are required", user_id=req.user_id, name=req.name, email=req.email)
    updated = users.update(parse_id(req.user_id, "user id"), req.name, req.email, password=req.password, bio=req.bio)
    return ok("Profile updated successfully!", updated)


@router.post("/upload-avatar")
def upload_avatar(
    user_id: Optional[str] = Form(None),
    avatar: Optional[UploadFile] = File(None),
):
    if not has_file(avatar):
        avatar = None
    require_fields("User and file are required", user_id=user_id, avatar=avatar)
    uid = parse_id(user_id, "user id")
    avatar_path = save_upload(avatar.file, avatar.filename, avatar.content_type, PROFILES)
    try:
        users.set_avatar(uid, avatar_path)
    except Exception:
        delete_upload(avatar_path)
        raise
    return ok("Profile picture updated successfully!", {"avatar_path": avatar_path})


@router.get("/{user_id}")
def get_user(user_id: str):
    profile = users.get_profile(parse_id(user_id, "user id"))
    return ok("", profile)
