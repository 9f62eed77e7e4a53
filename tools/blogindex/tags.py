from __future__ import annotations

from typing import Dict, Iterable, List, Tuple

from .models import Post


def build_tag_index(posts: Iterable[Post]) -> Dict[str, Tuple[Post, ...]]:
    """Map every tag in use to its posts, newest first.

    Buckets are sorted here so callers may pass posts in any order. Keys come
    back sorted; a tag no post carries never appears.
    """
    buckets: Dict[str, List[Post]] = {}
    for post in posts:
        for tag in post.tags:
            buckets.setdefault(tag, []).append(post)
    return {
        tag: tuple(sorted(buckets[tag], key=lambda p: p.sort_key()))
        for tag in sorted(buckets)
    }


def tag_permalinks(index: Dict[str, Tuple[Post, ...]]) -> Dict[str, Tuple[str, ...]]:
    return {tag: tuple(p.permalink for p in posts) for tag, posts in index.items()}
