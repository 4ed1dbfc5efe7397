import logging
from typing import Optional

from database import execute, fetch_one, get_db, transaction
from errors import NotFoundError
from repositories import comments, likes
from repositories.users import require_user
from utils.validation import ensure_can_delete_post, require_text_or_image

logger = logging.getLogger(__name__)

FEED_MAX_POSTS = 20

POST_WITH_AUTHOR = """
    SELECT p.id, p.content, p.image_path, p.like_count, p.comment_count, p.active, p.created_at,
           u.id AS user_id, u.name AS user_name, u.email AS user_email, u.avatar_path
    FROM posts p
    LEFT JOIN users u ON p.user_id = u.id
"""


def get_by_id(post_id: int, conn=None) -> Optional[dict]:
    return fetch_one("SELECT * FROM posts WHERE id = ?", (post_id,), conn=conn)


def create(author_id: int, text: str = None, image_path: str = None) -> dict:
    require_text_or_image(text, image_path)
    with transaction() as conn:
        require_user(author_id, conn=conn)
        result = execute(
            "INSERT INTO posts (user_id, content, image_path) VALUES (?, ?, ?)",
            (author_id, text or "", image_path),
            conn=conn,
        )
    logger.info("Post %s created by user %s", result["insert_id"], author_id)
    return {"id": result["insert_id"], "user_id": author_id, "content": text or "", "image_path": image_path}


def list_feed(limit: int = FEED_MAX_POSTS) -> list:
    """Newest active posts, each with a preview of its oldest comments.

    Comments are fetched with one query per post, so the fan-out is bounded
    by ``FEED_MAX_POSTS`` queries of at most ``FEED_COMMENT_PREVIEW`` rows.
    """
    limit = max(1, min(limit, FEED_MAX_POSTS))
    with get_db() as conn:
        posts = execute(
            POST_WITH_AUTHOR + """
            WHERE p.active = 1
            ORDER BY p.created_at DESC, p.id DESC
            LIMIT ?
            """,
            (limit,),
            conn=conn,
        )
        for post in posts:
            post["active"] = bool(post["active"])
            post["comments"] = comments.preview(post["id"], conn=conn)
    return posts


def purge(post_id: int) -> dict:
    """Physically remove a post with its comments and likes, all or nothing."""
    with transaction() as conn:
        if not get_by_id(post_id, conn=conn):
            raise NotFoundError("Post not found")
        removed_comments = comments.delete_for_post(post_id, conn)
        removed_likes = likes.delete_for_post(post_id, conn)
        execute("DELETE FROM posts WHERE id = ?", (post_id,), conn=conn)
    logger.info("Post %s deleted with %s comments and %s likes", post_id, removed_comments, removed_likes)
    return {"post_id": post_id, "comments": removed_comments, "likes": removed_likes}


def delete(post_id: int, requesting_user_id: int) -> dict:
    post = get_by_id(post_id)
    if not post:
        raise NotFoundError("Post not found")
    user = require_user(requesting_user_id)
    ensure_can_delete_post(post, user)
    result = purge(post_id)
    logger.info("Post %s deleted by user %s", post_id, requesting_user_id)
    return result


def list_all(include_inactive: bool = True) -> list:
    where = "" if include_inactive else "WHERE p.active = 1"
    return execute(POST_WITH_AUTHOR + where + " ORDER BY p.created_at DESC, p.id DESC")


def search(pattern: str, include_inactive: bool = True) -> list:
    """Posts whose text contains ``pattern``, newest first"""
    escaped = pattern.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    active = "" if include_inactive else "AND p.active = 1"
    return execute(
        POST_WITH_AUTHOR + f"""
        WHERE p.content LIKE ? ESCAPE '\\' {active}
        ORDER BY p.created_at DESC, p.id DESC
        """,
        (f"%{escaped}%",),
    )
