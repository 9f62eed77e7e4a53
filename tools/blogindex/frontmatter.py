"""Front-matter parsing.

A post source is a ``---`` delimited YAML block followed by the body::

    ---
    layout: post
    title: "Serializing restaurant tables in Haskell"
    date: 2023-12-11 7:00 UTC
    tags: [Haskell, Serialization]
    ---
    <div id="post">...

``title`` and ``date`` are required. ``description``, ``tags``, ``layout`` and
``next`` are understood; anything else is kept in ``extra`` untouched.
"""

from __future__ import annotations

import logging
from datetime import date, datetime, timezone, timedelta
from typing import Any, Dict, Optional, Tuple

import yaml
from pydantic import ValidationError

from .config import DATE_RE, KNOWN_FIELDS, NEXT_LINK_RE, REQUIRED_FIELDS
from .errors import InvalidDate, MalformedFrontMatter
from .models import FrontMatter, Post, UnresolvedRef
from .permalinks import slug_for
from .utils import (
    _norm_text,
    format_utc,
    slugify,
    split_frontmatter,
    yaml_frontmatter_block,
)

logger = logging.getLogger(__name__)


class _BadTimestamp(str):
    """A scalar that looks like a YAML timestamp but is not a real date."""


class _FrontMatterLoader(yaml.SafeLoader):
    pass


def _construct_timestamp(loader: yaml.SafeLoader, node: yaml.Node) -> Any:
    try:
        return yaml.SafeLoader.construct_yaml_timestamp(loader, node)
    except ValueError:
        return _BadTimestamp(loader.construct_scalar(node))


_FrontMatterLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp)


def _load_front_matter(raw: str, source: str) -> Dict[str, Any]:
    try:
        fm = yaml.load(raw, Loader=_FrontMatterLoader)
    except yaml.YAMLError as e:
        raise MalformedFrontMatter(f"front matter is not valid YAML: {e}", source) from e
    if not isinstance(fm, dict):
        raise MalformedFrontMatter("front matter is not a mapping", source)

    fm = {str(k): v for k, v in fm.items()}
    for key, value in fm.items():
        if key != "date" and isinstance(value, _BadTimestamp):
            raise MalformedFrontMatter(f"{key}: {value!r} is not a valid timestamp", source)
    return fm


def _parse_zone(zone: Optional[str]) -> timezone:
    if zone is None or zone.upper() in ("UTC", "GMT", "Z"):
        return timezone.utc
    sign = -1 if zone[0] == "-" else 1
    digits = zone[1:].replace(":", "")
    offset = timedelta(hours=int(digits[:2]), minutes=int(digits[2:]))
    return timezone(sign * offset)


def parse_date(value: Any, source: Optional[str] = None) -> datetime:
    """Coerce a front-matter ``date`` into an aware UTC datetime."""
    if isinstance(value, datetime):
        dt = value
    elif isinstance(value, date):
        dt = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        m = DATE_RE.match(value.strip().strip('"').strip("'"))
        if not m:
            raise InvalidDate(f"cannot parse date {value!r}", source)
        try:
            day = date.fromisoformat(m.group("date"))
            fraction = (m.group("fraction") or "").ljust(6, "0")
            dt = datetime(
                day.year,
                day.month,
                day.day,
                int(m.group("hour") or 0),
                int(m.group("minute") or 0),
                int(m.group("second") or 0),
                int(fraction),
                tzinfo=_parse_zone(m.group("zone")),
            )
        except ValueError as e:
            raise InvalidDate(f"cannot parse date {value!r}: {e}", source) from e
    else:
        raise InvalidDate(f"cannot parse date {value!r}", source)

    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _coerce_tags(value: Any, source: str) -> Tuple[str, ...]:
    if value is None:
        return ()
    if isinstance(value, str):
        value = [t for t in value.split(",")]
    if not isinstance(value, (list, tuple)):
        raise MalformedFrontMatter(
            f"tags must be a list of strings, got {type(value).__name__}", source
        )
    tags = []
    for t in value:
        if isinstance(t, (dict, list)) or t is None:
            raise MalformedFrontMatter(f"invalid tag {t!r}", source)
        t = str(t).strip()
        if t and t not in tags:
            tags.append(t)
    return tuple(tags)


def _coerce_scalar(fm: Dict[str, Any], key: str, source: str) -> Optional[str]:
    value = fm.get(key)
    if value is None:
        return None
    if isinstance(value, (dict, list)):
        raise MalformedFrontMatter(f"{key} must be a scalar", source)
    return str(value)


def parse_front_matter(text: str, source: str = "<string>") -> Tuple[FrontMatter, str]:
    """Split ``text`` into a validated ``FrontMatter`` and the untouched body."""
    raw, body = split_frontmatter(_norm_text(text))
    if raw is None:
        raise MalformedFrontMatter("no front matter block", source)
    if body is None:
        raise MalformedFrontMatter("front matter block is not terminated", source)

    fm = _load_front_matter(raw, source)
    for key in REQUIRED_FIELDS:
        if fm.get(key) in (None, ""):
            raise MalformedFrontMatter(f"missing required field {key!r}", source)

    try:
        record = FrontMatter(
            title=_coerce_scalar(fm, "title", source),
            date=parse_date(fm["date"], source),
            description=_coerce_scalar(fm, "description", source) or "",
            tags=_coerce_tags(fm.get("tags"), source),
            layout=_coerce_scalar(fm, "layout", source),
            next=_coerce_scalar(fm, "next", source),
            extra={k: v for k, v in fm.items() if k not in KNOWN_FIELDS},
        )
    except ValidationError as e:
        raise MalformedFrontMatter(str(e), source) from e
    return record, body


def dump_front_matter(record: FrontMatter, body: str = "") -> str:
    data: Dict[str, Any] = {}
    if record.layout is not None:
        data["layout"] = record.layout
    data["title"] = record.title
    data["date"] = format_utc(record.date)
    if record.description:
        data["description"] = record.description
    if record.tags:
        data["tags"] = list(record.tags)
    if record.next is not None:
        data["next"] = record.next
    data.update(record.extra)
    return yaml_frontmatter_block(data) + body


def extract_next_link(body: str) -> Optional[str]:
    """Find the first ``Next: <link>`` in a post body."""
    m = NEXT_LINK_RE.search(body)
    if not m:
        return None
    return m.group("href") or m.group("url")


def parse_post(
    text: str,
    source: str,
    extract_body_links: bool = True,
) -> Post:
    record, body = parse_front_matter(text, source)

    slug = slug_for(source) or slugify(record.title)
    if not slug:
        raise MalformedFrontMatter("cannot derive a slug from name or title", source)

    target = record.next
    if target is None and extract_body_links:
        target = extract_next_link(body)
        if target:
            logger.debug("%s: next %s taken from body", source, target)

    return Post(
        source=source,
        slug=slug,
        body=body,
        **record.model_dump(exclude={"next"}),
        next=UnresolvedRef(target=target) if target else None,
    )
