"""Site assembly: sources in, a finished ``SiteModel`` out.

A build is all-or-nothing. Each stage collects every error it meets and the
build stops with ``BuildFailed`` before the next stage starts, so no
partially linked site is ever returned.
"""

from __future__ import annotations

import logging
import pathlib
from typing import Iterable, List, Optional

from .config import BuildConfig, load_config
from .errors import BuildError, BuildFailed, DuplicatePermalink
from .models import Post, SiteModel
from .repository import PostRepository
from .series import link_series
from .sources import RawSource, discover_sources, parse_sources, read_sources
from .tags import build_tag_index, tag_permalinks

logger = logging.getLogger(__name__)


def ingest(posts: Iterable[Post]) -> PostRepository:
    repository = PostRepository()
    errors: List[BuildError] = []
    for post in posts:
        try:
            repository.add_post(post)
        except DuplicatePermalink as e:
            errors.append(e)
    if errors:
        raise BuildFailed(errors)
    return repository.freeze()


def index(repository: PostRepository) -> SiteModel:
    try:
        graph = link_series(repository)
    except BuildFailed:
        raise
    except BuildError as e:
        raise BuildFailed([e]) from e

    tags = build_tag_index(repository.all())
    site = SiteModel(
        posts=tuple(repository.chronological()),
        tags=tag_permalinks(tags),
        series=graph.links,
    )
    logger.info(
        "assembled %d post(s), %d tag(s), %d series", len(site), len(tags), len(graph.chains())
    )
    return site


def assemble(
    sources: Iterable[RawSource],
    config: Optional[BuildConfig] = None,
) -> SiteModel:
    config = config or BuildConfig()
    posts, errors = parse_sources(sources, config.extract_body_links, config.workers)
    if errors:
        raise BuildFailed(errors)
    return index(ingest(posts))


def build_site(
    content_dir: pathlib.Path,
    config: Optional[BuildConfig] = None,
) -> SiteModel:
    """Read every source under ``content_dir`` and assemble the site."""
    config = config or load_config(content_dir)
    paths = discover_sources(
        content_dir, config.suffixes, exclude=[config.output_dir], include_dirs=config.include_dirs
    )
    logger.info("found %d source(s) in %s", len(paths), content_dir)

    sources, errors = read_sources(paths, content_dir, config.workers)
    posts, parse_errors = parse_sources(sources, config.extract_body_links, config.workers)
    errors.extend(parse_errors)
    if errors:
        raise BuildFailed(errors)
    return index(ingest(posts))
