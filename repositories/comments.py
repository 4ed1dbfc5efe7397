import logging

from database import execute, fetch_one, transaction
from errors import NotFoundError
from repositories.users import require_user
from utils.validation import require_fields

logger = logging.getLogger(__name__)

FEED_COMMENT_PREVIEW = 3


def recount(post_id: int, conn) -> int:
    """Rewrite posts.comment_count from the comment rows themselves."""
    total = fetch_one(
        "SELECT COUNT(*) AS count FROM comments WHERE post_id = ? AND active = 1", (post_id,), conn=conn
    )["count"]
    execute("UPDATE posts SET comment_count = ? WHERE id = ?", (total, post_id), conn=conn)
    return total


def add(post_id: int, user_id: int, text: str) -> dict:
    require_fields("Post, user and text are required", post_id=post_id, user_id=user_id, text=text)
    with transaction() as conn:
        if not fetch_one("SELECT id FROM posts WHERE id = ? AND active = 1", (post_id,), conn=conn):
            raise NotFoundError("Post not found")
        require_user(user_id, conn=conn)
        result = execute(
            "INSERT INTO comments (post_id, user_id, content) VALUES (?, ?, ?)",
            (post_id, user_id, text),
            conn=conn,
        )
        total = recount(post_id, conn)
    logger.info("Comment %s added to post %s", result["insert_id"], post_id)
    return {
        "id": result["insert_id"],
        "post_id": post_id,
        "user_id": user_id,
        "content": text,
        "total_comments": total,
    }


def preview(post_id: int, limit: int = FEED_COMMENT_PREVIEW, conn=None) -> list:
    """Oldest active comments of a post, with their authors"""
    return execute(
        """
        SELECT c.id, c.content, c.created_at,
               u.id AS user_id, u.name AS user_name, u.avatar_path
        FROM comments c
        JOIN users u ON c.user_id = u.id
        WHERE c.post_id = ? AND c.active = 1
        ORDER BY c.created_at ASC, c.id ASC
        LIMIT ?
        """,
        (post_id, min(limit, FEED_COMMENT_PREVIEW)),
        conn=conn,
    )


def delete_for_post(post_id: int, conn) -> int:
    return execute("DELETE FROM comments WHERE post_id = ?", (post_id,), conn=conn)["affected_rows"]
