"""Series linking.

Authors chain posts into a series with a ``next`` reference, either in front
matter or as a ``Next:`` link at the end of the body. This module turns those
references into validated edges: every target exists, no post has two
predecessors, and following ``next`` from any post always ends.
"""

from __future__ import annotations

import logging
from typing import Dict, List, Optional, Tuple

from .errors import (
    BuildError,
    CyclicSeries,
    DanglingReference,
    MultiplePredecessors,
    raise_collected,
)
from .models import Post, ResolvedRef, SeriesLink, UnresolvedRef
from .permalinks import normalize_reference, slug_for
from .repository import PostRepository

logger = logging.getLogger(__name__)


class SeriesGraph:
    def __init__(self, links: Tuple[SeriesLink, ...] = ()):
        self.links = links
        self._next: Dict[str, ResolvedRef] = {}
        self._previous: Dict[str, ResolvedRef] = {}
        for link in links:
            self._next[link.source] = ResolvedRef(permalink=link.target)
            self._previous[link.target] = ResolvedRef(permalink=link.source)

    def next(self, permalink: str) -> Optional[ResolvedRef]:
        return self._next.get(permalink)

    def previous(self, permalink: str) -> Optional[ResolvedRef]:
        return self._previous.get(permalink)

    def chains(self) -> List[List[str]]:
        heads = sorted(s for s in self._next if s not in self._previous)
        out = []
        for head in heads:
            chain = [head]
            ref = self._next.get(head)
            while ref is not None:
                chain.append(ref.permalink)
                ref = self._next.get(ref.permalink)
            out.append(chain)
        return out

    def __len__(self) -> int:
        return len(self.links)


def resolve_reference(
    ref: UnresolvedRef, repository: PostRepository, source: str
) -> ResolvedRef:
    """Look a ``next`` target up by permalink, source path, then slug."""
    target = normalize_reference(ref.target)
    if not target:
        raise DanglingReference(ref.target, source, "empty reference")
    for candidate in (target, "/" + target.lstrip("/")):
        if candidate in repository:
            return ResolvedRef(permalink=candidate)

    post = repository.by_source(ref.target.strip())
    if post is not None:
        return ResolvedRef(permalink=post.permalink)

    if "/" not in target:
        matches = repository.by_slug(slug_for(target))
        if len(matches) == 1:
            return ResolvedRef(permalink=matches[0].permalink)
        if len(matches) > 1:
            raise DanglingReference(
                ref.target,
                source,
                "ambiguous, matches "
                + ", ".join(p.permalink for p in matches),
            )
    raise DanglingReference(ref.target, source)


def _find_cycles(edges: Dict[str, str], order: List[str]) -> List[List[str]]:
    cycles = []
    done = set()
    for start in order:
        path: List[str] = []
        on_path: Dict[str, int] = {}
        link: Optional[str] = start
        while link is not None and link not in done:
            if link in on_path:
                cycles.append(path[on_path[link]:])
                break
            on_path[link] = len(path)
            path.append(link)
            link = edges.get(link)
        done.update(path)
    return cycles


def link_series(repository: PostRepository) -> SeriesGraph:
    """Resolve every post's ``next`` reference into a validated graph.

    Raises the single error found, or ``BuildFailed`` listing all of them.
    """
    posts: List[Post] = repository.chronological()
    errors: List[BuildError] = []

    edges: Dict[str, str] = {}
    claims: Dict[str, List[str]] = {}
    for post in posts:
        if post.next is None:
            continue
        try:
            target = resolve_reference(post.next, repository, post.source)
        except DanglingReference as e:
            errors.append(e)
            continue
        edges[post.permalink] = target.permalink
        claims.setdefault(target.permalink, []).append(post.permalink)

    for target, sources in claims.items():
        if len(sources) > 1:
            errors.append(MultiplePredecessors(target, sources))

    for cycle in _find_cycles(edges, [p.permalink for p in posts]):
        errors.append(CyclicSeries(cycle))

    raise_collected(errors)

    links = tuple(
        SeriesLink(source=p.permalink, target=edges[p.permalink])
        for p in posts
        if p.permalink in edges
    )
    logger.info("linked %d series edge(s)", len(links))
    return SeriesGraph(links)
