from errors import AuthError, ValidationError


def is_blank(value) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def require_fields(message: str = None, **fields):
    """Raise ValidationError if any of the named fields is missing or blank."""
    missing = [name for name, value in fields.items() if is_blank(value)]
    if missing:
        raise ValidationError(message or f"Missing required fields: {', '.join(missing)}")


def require_text_or_image(text, image):
    if is_blank(text) and not image:
        raise ValidationError("A post needs text or an image")


def parse_id(value, label: str = "id") -> int:
    try:
        parsed = int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"Invalid {label}")
    if parsed <= 0:
        raise ValidationError(f"Invalid {label}")
    return parsed


def can_delete_post(post: dict, user: dict) -> bool:
    """Authors may delete their own posts; admins may delete any post."""
    return post["user_id"] == user["id"] or bool(user.get("is_admin"))


def ensure_can_delete_post(post: dict, user: dict):
    if not can_delete_post(post, user):
        raise AuthError("You do not have permission to delete this post")
