import uuid
from datetime import datetime, timezone


def generate_id() -> str:
    """生成短唯一ID"""
    return f"snap_{uuid.uuid4().hex[:12]}"


def generate_timestamp() -> str:
    """UTC ISO-8601 timestamp with microseconds, sortable as text."""
    return datetime.now(timezone.utc).isoformat(timespec="microseconds")
