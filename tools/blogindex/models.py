"""Immutable values passed between the build stages.

A ``Post`` is created once by the front-matter parser and never mutated.
``SiteModel`` is the finished aggregate handed to renderers; it is rebuilt
wholesale on every build and can be round-tripped through JSON.
"""

from __future__ import annotations

from datetime import datetime, timezone
from types import MappingProxyType
from typing import Annotated, Any, Dict, Iterator, List, Literal, Optional, Tuple, Union

from pydantic import (
    AfterValidator,
    BaseModel,
    ConfigDict,
    Field,
    PlainSerializer,
    PrivateAttr,
    computed_field,
    field_validator,
)

from .errors import NotFound
from .permalinks import permalink_for


class _Frozen(BaseModel):
    model_config = ConfigDict(frozen=True)


# Read-only mappings: stored as MappingProxyType, dumped as plain dicts.
ExtraFields = Annotated[
    Dict[str, Any],
    AfterValidator(MappingProxyType),
    PlainSerializer(dict, return_type=Dict[str, Any]),
]
TagMap = Annotated[
    Dict[str, Tuple[str, ...]],
    AfterValidator(MappingProxyType),
    PlainSerializer(dict, return_type=Dict[str, Tuple[str, ...]]),
]


# --- References

class UnresolvedRef(_Frozen):
    """A ``next`` target exactly as the author wrote it."""

    kind: Literal["unresolved"] = "unresolved"
    target: str


class ResolvedRef(_Frozen):
    kind: Literal["resolved"] = "resolved"
    permalink: str


Reference = Union[UnresolvedRef, ResolvedRef]


# --- Posts

class FrontMatter(_Frozen):
    title: str
    date: datetime
    description: str = ""
    tags: Tuple[str, ...] = ()
    layout: Optional[str] = None
    next: Optional[str] = None
    extra: ExtraFields = Field(default_factory=dict, validate_default=True)

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("title must not be empty")
        return v

    @field_validator("date")
    @classmethod
    def _utc(cls, v: datetime) -> datetime:
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class Post(FrontMatter):
    source: str
    slug: str
    body: str = ""
    next: Optional[UnresolvedRef] = None

    @computed_field
    @property
    def permalink(self) -> str:
        return permalink_for(self.date, self.slug)

    def sort_key(self) -> Tuple[float, str]:
        """Newest first, ties broken by permalink."""
        return (-self.date.timestamp(), self.permalink)


# --- Series

class SeriesLink(_Frozen):
    source: str
    target: str


class Page(_Frozen):
    """One post plus everything needed to render its navigation."""

    post: Post
    previous: Optional[ResolvedRef] = None
    next: Optional[ResolvedRef] = None
    older: Optional[ResolvedRef] = None
    newer: Optional[ResolvedRef] = None


# --- Site

class SiteModel(_Frozen):
    """The finished site.

    ``posts`` are chronological (oldest first). ``tags`` maps each tag to
    permalinks, newest first. ``series`` holds validated ``next`` edges.
    """

    posts: Tuple[Post, ...] = ()
    tags: TagMap = Field(default_factory=dict, validate_default=True)
    series: Tuple[SeriesLink, ...] = ()

    _by_permalink: Dict[str, Post] = PrivateAttr(default_factory=dict)
    _next: Dict[str, str] = PrivateAttr(default_factory=dict)
    _previous: Dict[str, str] = PrivateAttr(default_factory=dict)

    def model_post_init(self, __context: Any) -> None:
        self._by_permalink = {p.permalink: p for p in self.posts}
        self._next = {link.source: link.target for link in self.series}
        self._previous = {link.target: link.source for link in self.series}

    def __len__(self) -> int:
        return len(self.posts)

    def post(self, permalink: str) -> Post:
        try:
            return self._by_permalink[permalink]
        except KeyError:
            raise NotFound(permalink) from None

    def latest(self) -> List[Post]:
        return list(reversed(self.posts))

    def tagged(self, tag: str) -> List[Post]:
        return [self._by_permalink[link] for link in self.tags.get(tag, ())]

    def next_of(self, permalink: str) -> Optional[Post]:
        target = self._next.get(self.post(permalink).permalink)
        return self._by_permalink[target] if target else None

    def previous_of(self, permalink: str) -> Optional[Post]:
        source = self._previous.get(self.post(permalink).permalink)
        return self._by_permalink[source] if source else None

    def chains(self) -> List[List[str]]:
        """Every series as a list of permalinks, from its first post."""
        out = []
        for post in self.posts:
            link = post.permalink
            if link in self._previous or link not in self._next:
                continue
            chain = [link]
            while link in self._next:
                link = self._next[link]
                chain.append(link)
            out.append(chain)
        return out

    def pages(self) -> Iterator[Page]:
        def _ref(link: Optional[str]) -> Optional[ResolvedRef]:
            return ResolvedRef(permalink=link) if link else None

        for i, post in enumerate(self.posts):
            link = post.permalink
            yield Page(
                post=post,
                previous=_ref(self._previous.get(link)),
                next=_ref(self._next.get(link)),
                older=_ref(self.posts[i - 1].permalink if i > 0 else None),
                newer=_ref(
                    self.posts[i + 1].permalink
                    if i < len(self.posts) - 1
                    else None
                ),
            )

    def to_json(self, indent: Optional[int] = 2) -> str:
        return self.model_dump_json(indent=indent)

    @classmethod
    def from_json(cls, text: str) -> "SiteModel":
        return cls.model_validate_json(text)
