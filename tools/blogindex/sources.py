"""Finding, reading and parsing post sources.

Reading and parsing are independent per source, so both run on a thread
pool. Workers share nothing; each returns either a value or the error for its
source, and the caller collects them in source order.
"""

from __future__ import annotations

import logging
import pathlib
from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable, List, NamedTuple, Optional, Sequence, Tuple, TypeVar

import yaml
from nbformat import ValidationError as NotebookInvalid

from .config import CONFIG_FILE_NAME, INCLUDE_DIRS, SOURCE_SUFFIXES
from .errors import BuildError, UnreadableSource
from .frontmatter import parse_post
from .models import Post
from .notebooks import notebook_to_source
from .utils import natural_key

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class RawSource(NamedTuple):
    path: str
    text: str


def discover_sources(
    content_dir: pathlib.Path,
    suffixes: Sequence[str] = SOURCE_SUFFIXES,
    exclude: Sequence[pathlib.Path] = (),
    include_dirs: Sequence[str] = INCLUDE_DIRS,
) -> List[pathlib.Path]:
    """Source files under ``content_dir`` in natural path order.

    Anything under a directory or file starting with ``_`` or ``.`` (drafts,
    includes, build output) is skipped, except directories named in
    ``include_dirs`` such as Jekyll's ``_posts``.
    """
    wanted = {s.lower() for s in suffixes}
    skip = [p.resolve() for p in exclude]
    found = []
    for p in content_dir.rglob("*"):
        if not p.is_file() or p.suffix.lower() not in wanted:
            continue
        rel = p.relative_to(content_dir)
        if any(
            part.startswith(("_", ".")) and part not in include_dirs
            for part in rel.parts
        ):
            continue
        if rel.name == CONFIG_FILE_NAME:
            continue
        if any(s == p.resolve() or s in p.resolve().parents for s in skip):
            continue
        found.append(p)
    return sorted(found, key=lambda p: natural_key(p.relative_to(content_dir).as_posix()))


def read_source(path: pathlib.Path, content_dir: pathlib.Path) -> RawSource:
    rel = path.relative_to(content_dir).as_posix()
    try:
        if path.suffix.lower() == ".ipynb":
            text = notebook_to_source(path)
        else:
            text = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError, ValueError, NotebookInvalid, yaml.YAMLError) as e:
        raise UnreadableSource(str(e), rel) from e
    return RawSource(rel, text)


def _run_all(
    fn: Callable[[T], R],
    items: Sequence[T],
    workers: Optional[int],
) -> Tuple[List[R], List[BuildError]]:
    results: List[R] = []
    errors: List[BuildError] = []
    with ThreadPoolExecutor(max_workers=workers) as executor:
        futures = [executor.submit(fn, item) for item in items]
        for future in futures:
            try:
                results.append(future.result())
            except BuildError as e:
                errors.append(e)
    return results, errors


def read_sources(
    paths: Sequence[pathlib.Path],
    content_dir: pathlib.Path,
    workers: Optional[int] = None,
) -> Tuple[List[RawSource], List[BuildError]]:
    sources, errors = _run_all(lambda p: read_source(p, content_dir), paths, workers)
    logger.info("read %d source(s), %d unreadable", len(sources), len(errors))
    return sources, errors


def parse_sources(
    sources: Iterable[RawSource],
    extract_body_links: bool = True,
    workers: Optional[int] = None,
) -> Tuple[List[Post], List[BuildError]]:
    """Parse every source, returning posts and per-source errors.

    Both lists follow natural source path order, whichever worker finished
    first.
    """
    ordered = sorted(sources, key=lambda s: natural_key(s.path))
    posts, errors = _run_all(
        lambda s: parse_post(s.text, s.path, extract_body_links),
        ordered,
        workers,
    )
    logger.info("parsed %d post(s), %d failed", len(posts), len(errors))
    return posts, errors
