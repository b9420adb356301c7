from __future__ import annotations

import secrets
import string
import time

_BASE36 = string.digits + string.ascii_lowercase


def now_ms() -> int:
    return int(time.time() * 1000)


def random_base36(length: int = 7) -> str:
    return "".join(secrets.choice(_BASE36) for _ in range(length))


def annotation_id(prefix: str = "anno") -> str:
    """Time-based id with a random suffix, e.g. ``anno-1718000000000-k3j9x0a``."""
    return f"{prefix}-{now_ms()}-{random_base36()}"


def import_annotation_id() -> str:
    return annotation_id("import")
