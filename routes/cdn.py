from fastapi import APIRouter, HTTPException
from fastapi.responses import FileResponse

from errors import NotFoundError, ValidationError
from file_utils import POSTS, PROFILES, resolve_upload

router = APIRouter(prefix="/uploads", tags=["uploads"])


def _serve(purpose: str, filename: str):
    try:
        file_path = resolve_upload(purpose, filename)
    except (NotFoundError, ValidationError):
        raise HTTPException(status_code=404, detail="File not found")
    return FileResponse(file_path)


@router.get("/posts/{filename}")
def serve_post_image(filename: str):
    """Serve post image files"""
    return _serve(POSTS, filename)


@router.get("/profiles/{filename}")
def serve_profile_picture(filename: str):
    """Serve profile picture files"""
    return _serve(PROFILES, filename)
