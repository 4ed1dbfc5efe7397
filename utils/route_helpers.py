from typing import Any, Optional

from fastapi import UploadFile


def envelope(success: bool, message: str = "", data: Any = None) -> dict:
    """Response body shared by every endpoint"""
    body = {"success": success, "message": message}
    if data is not None:
        body["data"] = data
    return body


def ok(message: str = "", data: Any = None) -> dict:
    return envelope(True, message, data)


def fail(message: str) -> dict:
    return envelope(False, message)


def has_file(file: Optional[UploadFile]) -> bool:
    # Browsers send an empty part with no filename when no file was picked
    return file is not None and bool(file.filename)
