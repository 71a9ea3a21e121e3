import os
from typing import List, Optional

from dotenv import load_dotenv

# Load .env from project root
load_dotenv()


def _get_float(name: str, default: float) -> float:
    try:
        return float(os.getenv(name, default))
    except (TypeError, ValueError):
        return default


def _get_optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return None
    try:
        value = int(raw)
    except ValueError:
        return None
    return value if value >= 0 else None


def _get_list(name: str, default: str) -> List[str]:
    return [item.strip() for item in os.getenv(name, default).split(",") if item.strip()]


# -------------------------
# LLM (upstream concept producer)
# -------------------------
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.deepseek.com/v1")
LLM_MODEL = os.getenv("LLM_MODEL", "deepseek-chat")
LLM_API_KEY = os.getenv("LLM_API_KEY", "")
LLM_TEMPERATURE = _get_float("LLM_TEMPERATURE", 0.2)
LLM_TIMEOUT = _get_float("LLM_TIMEOUT", 120.0)

# -------------------------
# Persistence
# -------------------------
DATABASE_URL = os.getenv("DATABASE_URL", "sqlite:///./conceptmap.db")

# -------------------------
# Service
# -------------------------
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
if LOG_LEVEL not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
    LOG_LEVEL = "INFO"
CORS_ORIGINS = _get_list("CORS_ORIGINS", "http://localhost:3000")

# -------------------------
# Diagram policy
# -------------------------
DIAGRAM_DIRECTION = os.getenv("DIAGRAM_DIRECTION", "TD").strip().upper()
if DIAGRAM_DIRECTION not in {"TD", "TB", "LR", "RL", "BT"}:
    DIAGRAM_DIRECTION = "TD"

# Product policy, not a grammar rule: None means no cap.
MAX_CONNECTIONS_PER_CONCEPT = _get_optional_int("MAX_CONNECTIONS_PER_CONCEPT")
