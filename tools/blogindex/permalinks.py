from __future__ import annotations

from datetime import datetime, timezone
from urllib.parse import urlsplit

from .utils import slugify, source_stem


def slug_for(source_name: str) -> str:
    """``posts/2023-12-11-Serializing Tables.html`` -> ``serializing-tables``."""
    return slugify(source_stem(source_name))


def permalink_for(date: datetime, slug: str) -> str:
    d = date.astimezone(timezone.utc) if date.tzinfo else date
    return f"/{d.year:04d}/{d.month:02d}/{d.day:02d}/{slug}"


def resolve_permalink(date: datetime, source_name: str) -> str:
    return permalink_for(date, slug_for(source_name))


def normalize_reference(ref: str) -> str:
    """Reduce a URL or path to the form permalinks are stored in.

    ``https://blog.example/2024/01/01/a/index.html#top`` -> ``/2024/01/01/a``.
    Bare identifiers (no slash) come back unchanged apart from whitespace.
    """
    ref = ref.strip()
    parts = urlsplit(ref)
    path = parts.path
    for suffix in ("/index.html", "/index.htm", ".html", ".htm"):
        if path.endswith(suffix):
            path = path[: -len(suffix)]
            break
    path = path.rstrip("/")
    if parts.netloc and not path.startswith("/"):
        path = "/" + path
    return path
