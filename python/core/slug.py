"""
Slug utilities for object names and static page URLs.
"""

import re
import time
import secrets

def generate_slug(text: str, max_length: int = 200) -> str:
    """
    Generate a URL-friendly slug from text.

    Args:
        text: Source text
        max_length: Maximum slug length

    Returns:
        URL-safe slug
    """
    if not text:
        return ""

    # Lowercase and replace non-alphanumeric with hyphens
    slug = re.sub(r'[^a-z0-9]+', '-', text.lower())

    # Remove leading/trailing hyphens
    slug = slug.strip('-')

    # Remove consecutive hyphens
    slug = re.sub(r'-+', '-', slug)

    # Truncate to max length
    return slug[:max_length].rstrip('-')


def unique_object_name(filename: str, folder: str = "uploads") -> str:
    """
    Build a collision-free storage key: folder/<ms>-<rand>-<slug>.<ext>
    """
    stem, dot, ext = (filename or "file").rpartition(".")
    if not dot:
        stem, ext = ext, ""
    slug = generate_slug(stem, max_length=60) or "file"
    suffix = f".{ext.lower()}" if ext else ""
    stamp = int(time.time() * 1000)
    return f"{folder}/{stamp}-{secrets.token_hex(4)}-{slug}{suffix}"
