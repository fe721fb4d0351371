# sheetsync/config.py

import os
from dotenv import load_dotenv

load_dotenv()


def _getenv_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in ("1", "true", "yes", "on")


DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./sheetsync.db")

# Token signing key, must be overridden through .env outside development
SECRET_KEY = os.getenv("SECRET_KEY", "change-me")
ALGORITHM = os.getenv("ALGORITHM", "HS256")
ACCESS_TOKEN_EXPIRE_MINUTES = int(os.getenv("ACCESS_TOKEN_EXPIRE_MINUTES", "15"))
REFRESH_TOKEN_EXPIRE_DAYS = int(os.getenv("REFRESH_TOKEN_EXPIRE_DAYS", "7"))

# How long the server waits for the client's reply to authReq, in seconds
AUTH_REPLY_TIMEOUT = float(os.getenv("AUTH_REPLY_TIMEOUT", "5.0"))

# Whether a cell edit is echoed back to its author
BROADCAST_INCLUDE_ORIGIN = _getenv_bool("BROADCAST_INCLUDE_ORIGIN", False)

CORS_ORIGINS = [origin.strip() for origin in os.getenv("CORS_ORIGINS", "*").split(",") if origin.strip()]

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
