from fastapi import APIRouter, Body, File, Form, Query, UploadFile
from typing import Optional

from file_utils import POSTS, delete_upload, save_upload
from repositories import comments, likes, posts
from repositories.posts import FEED_MAX_POSTS
from schemas.posts import CommentCreate, DeleteRequest, LikeRequest
from utils.route_helpers import has_file, ok
from utils.validation import parse_id, require_fields, require_text_or_image

router = APIRouter(prefix="/api/posts", tags=["posts"])


@router.post("/postar")
def create_post(
    user_id: Optional[str] = Form(None),
    text: Optional[str] = Form(None),
    photo: Optional[UploadFile] = File(None),
):
    if not has_file(photo):
        photo = None
    require_fields("User and text (or image) are required", user_id=user_id)
    require_text_or_image(text, photo)
    author_id = parse_id(user_id, "user id")

    image_path = None
    if photo is not None:
        image_path = save_upload(photo.file, photo.filename, photo.content_type, POSTS)
    try:
        post = posts.create(author_id, text, image_path)
    except Exception:
        # Don't leave an orphaned file behind when the insert fails
        delete_upload(image_path)
        raise
    return ok("Post created successfully!", post)


@router.get("/feed")
def get_feed(limit: int = Query(FEED_MAX_POSTS, ge=1, le=FEED_MAX_POSTS)):
    return ok("", posts.list_feed(limit))


@router.post("/curtir")
def toggle_like(req: LikeRequest):
    require_fields("Post and user are required", post_id=req.post_id, user_id=req.user_id)
    post_id = parse_id(req.post_id, "post id")
    user_id = parse_id(req.user_id, "user id")
    result = likes.toggle(post_id, user_id)
    return ok(f"Post {result['action']} successfully!", {"post_id": post_id, "user_id": user_id, **result})


@router.post("/comentar")
def add_comment(req: CommentCreate):
    require_fields("Post, user and text are required", post_id=req.post_id, user_id=req.user_id, text=req.text)
    comment = comments.add(parse_id(req.post_id, "post id"), parse_id(req.user_id, "user id"), req.text)
    return ok("Comment added successfully!", comment)


@router.delete("/deletar/{post_id}")
def delete_post(post_id: str, req: Optional[DeleteRequest] = Body(None)):
    user_id = req.user_id if req else None
    require_fields("Post ID and user are required", post_id=post_id, user_id=user_id)
    result = posts.delete(parse_id(post_id, "post id"), parse_id(user_id, "user id"))
    return ok("Post deleted successfully!", {"post_id": result["post_id"]})
