import logging
from typing import Optional

import config
from auth import hash_password, verify_password
from database import execute, fetch_one, get_db, transaction
from errors import AuthError, ConflictError, IntegrityViolation, NotFoundError
from utils.validation import require_fields

logger = logging.getLogger(__name__)

# Never includes password_hash
PUBLIC_USER_COLUMNS = "id, name, email, bio, phone, birth_date, location, avatar_path, is_admin, created_at"
PROFILE_POSTS_LIMIT = 10


def _public(row: Optional[dict]) -> Optional[dict]:
    if row is None:
        return None
    user = dict(row)
    user.pop("password_hash", None)
    user["is_admin"] = bool(user.get("is_admin"))
    return user


def get_by_id(user_id: int, conn=None) -> Optional[dict]:
    row = fetch_one(f"SELECT {PUBLIC_USER_COLUMNS} FROM users WHERE id = ?", (user_id,), conn=conn)
    return _public(row)


def get_by_email(email: str, conn=None) -> Optional[dict]:
    row = fetch_one(f"SELECT {PUBLIC_USER_COLUMNS} FROM users WHERE email = ?", (email,), conn=conn)
    return _public(row)


def require_user(user_id: int, conn=None) -> dict:
    user = get_by_id(user_id, conn=conn)
    if user is None:
        raise NotFoundError("User not found")
    return user


def email_taken_by_other(email: str, user_id: int, conn=None) -> bool:
    return fetch_one("SELECT id FROM users WHERE email = ? AND id != ?", (email, user_id), conn=conn) is not None


def create(name: str, email: str, password: str, bio: str = None, phone: str = None,
           birth_date: str = None, location: str = None) -> dict:
    require_fields("Name, email and password are required", name=name, email=email, password=password)
    if get_by_email(email):
        raise ConflictError("This email is already registered")

    is_admin = email.lower() in config.ADMIN_EMAILS
    try:
        result = execute(
            """
            INSERT INTO users (name, email, password_hash, bio, phone, birth_date, location, is_admin)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (name, email, hash_password(password), bio or None, phone or None,
             birth_date or None, location or None, int(is_admin)),
        )
    except IntegrityViolation:
        # Lost a race with a concurrent signup for the same email
        raise ConflictError("This email is already registered")

    logger.info("User registered: id=%s email=%s", result["insert_id"], email)
    return {"id": result["insert_id"], "name": name, "email": email}


def authenticate(email: str, password: str) -> dict:
    require_fields("Email and password are required", email=email, password=password)
    row = fetch_one("SELECT * FROM users WHERE email = ?", (email,))
    if not row or not verify_password(password, row["password_hash"]):
        logger.warning("Login failed for %s", email)
        raise AuthError("Incorrect email or password")
    logger.info("Login succeeded: id=%s", row["id"])
    return _public(row)


def update(user_id: int, name: str, email: str, password: str = None, bio: str = None) -> dict:
    require_fields("User ID, name and email are required", user_id=user_id, name=name, email=email)

    fields = ["name = ?", "email = ?"]
    params = [name, email]
    if bio is not None:
        fields.append("bio = ?")
        params.append(bio)
    if password:
        fields.append("password_hash = ?")
        params.append(hash_password(password))
    params.append(user_id)

    try:
        with transaction() as conn:
            require_user(user_id, conn=conn)
            if email_taken_by_other(email, user_id, conn=conn):
                raise ConflictError("This email is already used by another user")
            execute(f"UPDATE users SET {', '.join(fields)} WHERE id = ?", params, conn=conn)
            user = get_by_id(user_id, conn=conn)
    except IntegrityViolation:
        raise ConflictError("This email is already used by another user")

    logger.info("User updated: id=%s", user_id)
    return {"id": user["id"], "name": user["name"], "email": user["email"], "bio": user["bio"]}


def set_avatar(user_id: int, image_path: str):
    execute("UPDATE users SET avatar_path = ? WHERE id = ?", (image_path, user_id))
    logger.info("Avatar updated for user %s", user_id)


def set_admin(email: str, is_admin: bool = True) -> dict:
    result = execute("UPDATE users SET is_admin = ? WHERE email = ?", (int(is_admin), email))
    if result["affected_rows"] == 0:
        raise NotFoundError("User not found")
    logger.info("Admin capability %s for %s", "granted" if is_admin else "revoked", email)
    return get_by_email(email)


def get_profile(user_id: int) -> dict:
    with get_db() as conn:
        user = require_user(user_id, conn=conn)
        posts = execute(
            """
            SELECT id, content, image_path, like_count, comment_count, created_at
            FROM posts
            WHERE user_id = ? AND active = 1
            ORDER BY created_at DESC, id DESC
            LIMIT ?
            """,
            (user_id, PROFILE_POSTS_LIMIT),
            conn=conn,
        )
        total = fetch_one(
            "SELECT COUNT(*) AS count FROM posts WHERE user_id = ? AND active = 1", (user_id,), conn=conn
        )
    return {"user": user, "posts": posts, "stats": {"total_posts": total["count"]}}
