"""
config.py

Single source of truth for:
- Environment variable reads
- CORS allow-list
- Logging setup

Nothing here should contain route handlers or business logic beyond config resolution.
"""

import logging
import os
from typing import List, Optional

from dotenv import load_dotenv

load_dotenv()


# =====================================================================
# SECTION: ENV VARS
# =====================================================================

DATABASE_URL = os.getenv("DATABASE_URL")

# Used when DATABASE_URL does not name a database itself
DB_NAME = os.getenv("DB_NAME", "skyPrice")


def resolve_alerts_table() -> str:
    """ALERTS_TABLE, else the older COLLECTION name, else flight_alerts."""
    return os.getenv("ALERTS_TABLE") or os.getenv("COLLECTION") or "flight_alerts"


ALERTS_TABLE = resolve_alerts_table()

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper().strip()
PORT = int(os.getenv("PORT", "3000"))


# =====================================================================
# SECTION: CORS
# =====================================================================

DEFAULT_ALLOWED_ORIGINS = [
    "http://localhost:5173",
    "http://localhost:8080",
    "http://localhost:3000",
]


def _parse_origins(raw: Optional[str]) -> List[str]:
    if not raw:
        return list(DEFAULT_ALLOWED_ORIGINS)
    return [o.strip().rstrip("/") for o in raw.split(",") if o.strip()]


CORS_ALLOWED_ORIGINS = _parse_origins(os.getenv("CORS_ALLOWED_ORIGINS"))


# =====================================================================
# SECTION: HELPERS
# =====================================================================

def require_database_url() -> str:
    """Return DATABASE_URL or refuse to start."""
    value = os.getenv("DATABASE_URL") or DATABASE_URL
    if not value:
        raise RuntimeError("DATABASE_URL environment variable is not set")
    return value


def configure_logging(level: Optional[str] = None) -> None:
    logging.basicConfig(
        level=getattr(logging, level or LOG_LEVEL, logging.INFO),
        format="%(asctime)s - %(levelname)s - [%(name)s] - %(message)s",
    )
