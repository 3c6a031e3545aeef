"""Object key generation."""

import time
from typing import Optional
from uuid import uuid4


def file_extension(filename: str) -> str:
    """Lower-cased text after the last dot, or '' when there is none."""
    if "." not in filename:
        return ""
    return filename.rsplit(".", 1)[-1].lower()


def generate_object_key(original_name: str, now_ms: Optional[int] = None) -> str:
    """
    Build a unique key: ``<epoch-ms>-<uuid4>.<ext>``.

    The original filename never becomes part of the key, so user input
    can't introduce path separators or collide with existing objects.
    Names without an extension get no suffix.
    """
    timestamp = now_ms if now_ms is not None else int(time.time() * 1000)
    key = f"{timestamp}-{uuid4()}"
    ext = file_extension(original_name)
    if ext:
        key = f"{key}.{ext}"
    return key
