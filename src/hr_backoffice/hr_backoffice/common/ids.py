from __future__ import annotations

import secrets
import string
import time

_ALPHABET = string.ascii_lowercase + string.digits


def generate_id(prefix: str = "") -> str:
    """Row id in the form `<prefix>_<millis>_<7 random chars>`."""
    millis = int(time.time() * 1000)
    suffix = "".join(secrets.choice(_ALPHABET) for _ in range(7))
    return f"{prefix}_{millis}_{suffix}" if prefix else f"{millis}_{suffix}"
