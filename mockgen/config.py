from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

load_dotenv()


def _env_flag(name: str, default: bool = False) -> bool:
    raw = (os.getenv(name) or "").strip().lower()
    if not raw:
        return default
    return raw in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = (os.getenv(name) or "").strip()
    try:
        return int(raw) if raw else default
    except ValueError:
        return default


TOOL_NAME = os.getenv("MOCKGEN_TOOL_NAME", "swift-mock-gen")
SERVICE_HOST = os.getenv("MOCKGEN_HOST", "127.0.0.1")
SERVICE_PORT = _env_int("MOCKGEN_PORT", 7100)
SERVICE_URL = os.getenv("MOCKGEN_SERVICE_URL", f"http://{SERVICE_HOST}:{SERVICE_PORT}")

# Result-wrapped generation for async + throwing + non-void members
USE_RESULT = _env_flag("MOCKGEN_USE_RESULT")
VERBOSE = _env_flag("MOCKGEN_VERBOSE")

MAX_WORKERS = max(1, _env_int("MOCKGEN_MAX_WORKERS", 4))

# How many lines above a declaration may hold its marker comment
SCAN_WINDOW = max(1, _env_int("MOCKGEN_SCAN_WINDOW", 10))

SENDABLE_MARKER = os.getenv("MOCKGEN_SENDABLE_MARKER", "Sendable")

SWIFT_EXTENSION = ".swift"
BASE_DIR = Path(__file__).resolve().parent
