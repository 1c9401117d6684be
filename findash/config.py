import os

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env


def _csv_env(name: str) -> list[str]:
    raw = os.getenv(name, "") or ""
    return [item.strip() for item in raw.split(",") if item.strip()]


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./findash.db")

SECRET_KEY = os.getenv("SECRET_KEY")
if not SECRET_KEY:
    raise RuntimeError("SECRET_KEY environment variable is not set")

ALGORITHM = "HS256"
ACCESS_TOKEN_EXPIRE_DAYS = int(os.getenv("ACCESS_TOKEN_EXPIRE_DAYS", "7"))
BCRYPT_ROUNDS = int(os.getenv("BCRYPT_ROUNDS", "12"))

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()

API_URL = os.getenv("API_URL", "http://localhost:8000/api")


def cors_origins() -> list[str]:
    """Return allowed CORS origins, falling back to the local dashboard dev server."""
    return _csv_env("CORS_ORIGINS") or ["http://localhost:3000"]


def admin_emails() -> set[str]:
    """Return the lower-cased emails allowed to run administrative endpoints."""
    return {email.lower() for email in _csv_env("ADMIN_EMAILS")}
