import time
import uuid


def generate_id(prefix: str) -> str:
    """Return `<prefix>_<epoch millis>_<random>`; unique, not a format contract."""
    return f"{prefix}_{time.time_ns() // 1_000_000}_{uuid.uuid4().hex[:9]}"
