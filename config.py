import os
from dotenv import load_dotenv

# Load environment variables from .env file
load_dotenv()


def _split(value: str):
    return [item.strip() for item in value.split(",") if item.strip()]


DB_NAME = os.getenv("DB_NAME", "db.sqlite3")
UPLOAD_FOLDER = os.getenv("UPLOAD_FOLDER", "uploads")

SECRET_KEY = os.getenv("SECRET_KEY", "change-me-in-production")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", 60 * 24 * 7))  # 7 days

# Accounts created with one of these emails get the admin capability
ADMIN_EMAILS = [email.lower() for email in _split(os.getenv("ADMIN_EMAILS", ""))]

CORS_ORIGINS = _split(os.getenv("CORS_ORIGINS", "*"))
REQUEST_TIMEOUT_SECONDS = float(os.getenv("REQUEST_TIMEOUT_SECONDS", 15))
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOGIN_REDIRECT = os.getenv("LOGIN_REDIRECT", "/feed")
PORT = int(os.getenv("PORT", 3002))
