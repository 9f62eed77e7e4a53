#!/usr/bin/env python3
from __future__ import annotations

import pathlib
import re
from typing import Optional, Tuple

import yaml
from pydantic import BaseModel, ConfigDict, ValidationError

from .errors import ConfigError

# ---------- Defaults

CONFIG_FILE_NAME = "site.yml"
DEFAULT_OUTPUT_DIR = "_site"
SOURCE_SUFFIXES = (".md", ".markdown", ".html", ".ipynb")
INCLUDE_DIRS = ("_posts",)
SITE_JSON = "site.json"

# ---------- Config

FRONT_MATTER_DELIMITER = "---"
KNOWN_FIELDS = ("title", "date", "description", "tags", "layout", "next")
REQUIRED_FIELDS = ("title", "date")

# Some shared regexes

SLUG_RE = re.compile(r"[^a-z0-9]+")
DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")
DATE_RE = re.compile(
    r"^(?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:[ T](?P<hour>\d{1,2}):(?P<minute>\d{2})"
    r"(?::(?P<second>\d{2})(?:\.(?P<fraction>\d{1,6}))?)?)?"
    r"\s*(?P<zone>UTC|GMT|Z|[+-]\d{2}:?\d{2})?$",
    re.IGNORECASE,
)
NEXT_LINK_RE = re.compile(
    r"\bNext:\s*(?:</?[a-z]+[^>]*>\s*|\*\*\s*|__\s*)*"
    r"(?:<a\s[^>]*?href\s*=\s*([\'\"])(?P<href>[^\'\"]+)\1"
    r"|\[[^\]]*\]\((?P<url>[^)\s]+)(?:\s+\"[^\"]*\")?\))",
    re.IGNORECASE,
)
PERMALINK_RE = re.compile(r"^/\d{4}/\d{2}/\d{2}/[a-z0-9-]+$")
SPACES_EOL = re.compile(r"[ \t]+$", re.MULTILINE)


class BuildConfig(BaseModel):
    model_config = ConfigDict(extra="forbid", frozen=True)

    content_dir: Optional[pathlib.Path] = None
    output_dir: pathlib.Path = pathlib.Path(DEFAULT_OUTPUT_DIR)
    suffixes: Tuple[str, ...] = SOURCE_SUFFIXES
    include_dirs: Tuple[str, ...] = INCLUDE_DIRS
    workers: Optional[int] = None
    extract_body_links: bool = True
    base_url: str = ""


def load_config(
    content_dir: pathlib.Path,
    config_path: Optional[pathlib.Path] = None,
    **overrides,
) -> BuildConfig:
    """Read ``site.yml`` (or ``config_path``) and apply non-None overrides.

    Relative ``output_dir`` values in the file, and the default ``_site``,
    are taken relative to the content directory.
    """
    from .utils import read_yaml

    path = config_path or (content_dir / CONFIG_FILE_NAME)
    try:
        data = read_yaml(path)
    except yaml.YAMLError as e:
        raise ConfigError(f"{path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"{path}: expected a mapping, got {type(data).__name__}")

    data = dict(data)
    data["content_dir"] = content_dir
    if "output_dir" in data:
        out = pathlib.Path(data["output_dir"])
        data["output_dir"] = out if out.is_absolute() else content_dir / out
    if "suffixes" in data:
        data["suffixes"] = tuple(
            s if s.startswith(".") else f".{s}" for s in data["suffixes"] or ()
        )
    data.update({k: v for k, v in overrides.items() if v is not None})
    data.setdefault("output_dir", content_dir / DEFAULT_OUTPUT_DIR)

    try:
        config = BuildConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"{path}: {e}") from e
    check_output_dir(config.output_dir, content_dir)
    return config


def check_output_dir(output_dir: pathlib.Path, content_dir: pathlib.Path) -> None:
    """Refuse an output directory that would replace the sources."""
    out = output_dir.resolve()
    src = content_dir.resolve()
    if out == src or out in src.parents:
        raise ConfigError(
            f"output directory {output_dir} would overwrite the content directory {content_dir}"
        )
