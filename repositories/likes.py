import logging

from database import execute, fetch_one, transaction
from errors import NotFoundError
from repositories.users import require_user

logger = logging.getLogger(__name__)

LIKED = "liked"
UNLIKED = "unliked"


def recount(post_id: int, conn) -> int:
    """Rewrite posts.like_count from the like rows themselves."""
    total = fetch_one("SELECT COUNT(*) AS count FROM likes WHERE post_id = ?", (post_id,), conn=conn)["count"]
    execute("UPDATE posts SET like_count = ? WHERE id = ?", (total, post_id), conn=conn)
    return total


def toggle(post_id: int, user_id: int) -> dict:
    """Like the post if the user has not liked it yet, otherwise remove the like."""
    with transaction() as conn:
        if not fetch_one("SELECT id FROM posts WHERE id = ? AND active = 1", (post_id,), conn=conn):
            raise NotFoundError("Post not found")
        require_user(user_id, conn=conn)
        existing = fetch_one(
            "SELECT post_id FROM likes WHERE post_id = ? AND user_id = ?", (post_id, user_id), conn=conn
        )
        if existing:
            execute("DELETE FROM likes WHERE post_id = ? AND user_id = ?", (post_id, user_id), conn=conn)
            action = UNLIKED
        else:
            execute("INSERT INTO likes (post_id, user_id) VALUES (?, ?)", (post_id, user_id), conn=conn)
            action = LIKED
        total = recount(post_id, conn)
    logger.info("Post %s %s by user %s (total=%s)", post_id, action, user_id, total)
    return {"action": action, "total_likes": total}


def delete_for_post(post_id: int, conn) -> int:
    return execute("DELETE FROM likes WHERE post_id = ?", (post_id,), conn=conn)["affected_rows"]
