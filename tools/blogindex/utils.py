from __future__ import annotations

import pathlib
import re
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Tuple

import yaml

from .config import (
    DATE_PREFIX_RE,
    FRONT_MATTER_DELIMITER,
    SLUG_RE,
    SPACES_EOL,
)


def slugify(s: str) -> str:
    return re.sub(r"-{2,}", "-", SLUG_RE.sub("-", s.lower()).strip("-"))


def source_stem(name: str) -> str:
    """Base name without directories, extension or a ``YYYY-MM-DD-`` prefix."""
    stem = pathlib.PurePosixPath(name.replace("\\", "/")).stem
    return DATE_PREFIX_RE.sub("", stem)


def natural_key(s: str):
    return [int(t) if t.isdigit() else t for t in re.split(r'(\d+)', s.lower())]


def read_yaml(path: pathlib.Path) -> Dict[str, Any]:
    if path.exists():
        return yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    return {}


def _norm_text(s: str) -> str:
    return s.replace('\r\n', '\n').replace('\r', '\n').lstrip('\ufeff')


def format_utc(dt: datetime) -> str:
    """``YYYY-MM-DD HH:MM:SS[.ffffff] UTC``, the inverse of ``parse_date``."""
    dt = dt.astimezone(timezone.utc)
    stamp = f"{dt.year:04d}-{dt.month:02d}-{dt.day:02d} {dt:%H:%M:%S}"
    if dt.microsecond:
        stamp += f".{dt.microsecond:06d}"
    return f"{stamp} UTC"


def yaml_frontmatter_block(data: Dict[str, Any]) -> str:
    dumped = yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
    ).rstrip()
    return f"{FRONT_MATTER_DELIMITER}\n{dumped}\n{FRONT_MATTER_DELIMITER}\n"


def split_frontmatter(text: str) -> Tuple[Optional[str], Optional[str]]:
    """Split ``text`` into (raw front matter, body).

    Returns ``(None, None)`` when there is no opening delimiter and
    ``(raw, None)`` when the block is never closed.
    """
    lines = text.splitlines(keepends=True)
    start = 0
    while start < len(lines) and lines[start].strip() == "":
        start += 1
    if start == len(lines) or lines[start].rstrip() != FRONT_MATTER_DELIMITER:
        return None, None

    for i in range(start + 1, len(lines)):
        if lines[i].rstrip() == FRONT_MATTER_DELIMITER:
            return "".join(lines[start + 1 : i]), "".join(lines[i + 1 :])
    return "".join(lines[start + 1 :]), None


def normalize_markdown_light(md: str) -> str:
    md = SPACES_EOL.sub("", md)
    md = re.sub(r'\n{3,}', '\n\n', md)
    return md
