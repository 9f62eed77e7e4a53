from __future__ import annotations

import logging
import threading
from typing import Dict, Iterable, Iterator, List, Optional, Tuple

from .errors import DuplicatePermalink, NotFound, RepositoryFrozen
from .models import Post

logger = logging.getLogger(__name__)


class PostRepository:
    """The canonical set of posts for one build, keyed by permalink.

    Posts are added by a single writer during ingestion; ``freeze()`` ends
    ingestion and everything after that only reads.
    """

    def __init__(self, posts: Optional[Iterable[Post]] = None):
        self._posts: Dict[str, Post] = {}
        self._sources: Dict[str, Post] = {}
        self._slugs: Dict[str, List[Post]] = {}
        self._lock = threading.Lock()
        self._frozen = False
        self._ordered: Optional[Tuple[Post, ...]] = None
        for post in posts or ():
            self.add_post(post)

    def add_post(self, post: Post) -> None:
        link = post.permalink
        with self._lock:
            if self._frozen:
                raise RepositoryFrozen("repository is frozen", post.source)
            existing = self._posts.get(link)
            if existing is not None:
                raise DuplicatePermalink(link, post.source, existing.source)
            self._posts[link] = post
            self._sources[post.source] = post
            self._slugs.setdefault(post.slug, []).append(post)
            self._ordered = None
        logger.debug("added %s as %s", post.source, link)

    def freeze(self) -> "PostRepository":
        with self._lock:
            self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _sorted(self) -> Tuple[Post, ...]:
        if self._ordered is None:
            self._ordered = tuple(
                sorted(self._posts.values(), key=lambda p: p.sort_key())
            )
        return self._ordered

    def all(self) -> Iterator[Post]:
        """Newest first, ties broken by permalink. A new iterator per call."""
        for post in self._sorted():
            yield post

    def chronological(self) -> List[Post]:
        """Oldest first, ties broken by permalink."""
        return sorted(self._posts.values(), key=lambda p: (p.date, p.permalink))

    def by_permalink(self, link: str) -> Post:
        try:
            return self._posts[link]
        except KeyError:
            raise NotFound(link) from None

    def by_slug(self, slug: str) -> List[Post]:
        return sorted(self._slugs.get(slug, ()), key=lambda p: p.sort_key())

    def by_source(self, source: str) -> Optional[Post]:
        return self._sources.get(source)

    def __len__(self) -> int:
        return len(self._posts)

    def __contains__(self, link: object) -> bool:
        return link in self._posts
