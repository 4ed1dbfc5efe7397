import logging
import os
import time
import uuid
from pathlib import Path
from typing import BinaryIO, Optional

import config
from errors import NotFoundError, PayloadTooLargeError, UnsupportedMediaError, ValidationError

logger = logging.getLogger(__name__)

# Configuration
UPLOAD_FOLDER = config.UPLOAD_FOLDER
POSTS = "posts"
PROFILES = "profiles"

MAX_FILE_SIZES = {
    POSTS: 5 * 1024 * 1024,  # 5MB
    PROFILES: 2 * 1024 * 1024,  # 2MB
}
FILENAME_PREFIXES = {POSTS: "post", PROFILES: "profile"}
MAX_EXTENSION_LENGTH = 10
CHUNK_SIZE = 64 * 1024


def upload_dir(purpose: str) -> str:
    if purpose not in MAX_FILE_SIZES:
        raise ValueError(f"Unknown upload purpose: {purpose}")
    return os.path.join(UPLOAD_FOLDER, purpose)


def ensure_upload_directory(purpose: str) -> str:
    """Ensure the upload directory for ``purpose`` exists"""
    path = upload_dir(purpose)
    Path(path).mkdir(parents=True, exist_ok=True)
    return path


def _extension(original_filename: Optional[str]) -> str:
    ext = Path(original_filename or "").suffix.lower()
    if len(ext) > MAX_EXTENSION_LENGTH or not ext[1:].isalnum():
        return ""
    return ext


def generate_filename(purpose: str, original_filename: Optional[str]) -> str:
    """Timestamp plus random suffix, keeping the original extension"""
    millis = int(time.time() * 1000)
    return f"{FILENAME_PREFIXES[purpose]}-{millis}-{uuid.uuid4().hex[:12]}{_extension(original_filename)}"


def web_path(purpose: str, filename: str) -> str:
    return f"/uploads/{purpose}/{filename}"


def validate_upload(content_type: Optional[str]):
    if not content_type or not content_type.startswith("image/"):
        raise UnsupportedMediaError("Only image files are allowed")


def read_upload(stream: BinaryIO, purpose: str) -> bytes:
    """Read an upload stream, stopping as soon as it crosses the size limit"""
    limit = MAX_FILE_SIZES[purpose]
    chunks = []
    size = 0
    while True:
        chunk = stream.read(min(CHUNK_SIZE, limit + 1 - size))
        if not chunk:
            break
        size += len(chunk)
        if size > limit:
            raise PayloadTooLargeError(f"File exceeds the {limit // (1024 * 1024)}MB limit")
        chunks.append(chunk)
    return b"".join(chunks)


def save_upload(stream: BinaryIO, filename: Optional[str], content_type: Optional[str], purpose: str) -> str:
    """Validate and store an uploaded image, returning its web path."""
    validate_upload(content_type)
    content = read_upload(stream, purpose)
    directory = ensure_upload_directory(purpose)
    stored_name = generate_filename(purpose, filename)
    with open(os.path.join(directory, stored_name), 'wb') as f:
        f.write(content)
    logger.info("Stored %s upload %s (%d bytes)", purpose, stored_name, len(content))
    return web_path(purpose, stored_name)


def resolve_upload(purpose: str, filename: str) -> str:
    """Map a served filename back to its file on disk"""
    if purpose not in MAX_FILE_SIZES:
        raise NotFoundError("File not found")
    if not filename or filename != os.path.basename(filename) or filename.startswith("."):
        raise ValidationError("Invalid file name")
    file_path = os.path.join(upload_dir(purpose), filename)
    if not os.path.isfile(file_path):
        raise NotFoundError("File not found")
    return file_path


def delete_upload(path: Optional[str]) -> bool:
    """Delete a stored upload by its web path"""
    if not path:
        return False
    parts = path.strip("/").split("/")
    if len(parts) != 3 or parts[0] != "uploads":
        return False
    try:
        file_path = resolve_upload(parts[1], parts[2])
    except (NotFoundError, ValidationError):
        return False
    os.remove(file_path)
    return True
