# hotzones/utils.py
# Small helpers shared across modules: clock, id and token generation

import secrets
import time
from typing import Callable

Clock = Callable[[], int]


def now_ms() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def generate_id(prefix: str) -> str:
    return f"{prefix}-{now_ms()}-{secrets.token_hex(5)[:9]}"


def generate_token() -> str:
    return secrets.token_urlsafe(16)
