from datetime import datetime, timezone

import pytest
import yaml

from blogindex.models import Post, UnresolvedRef
from blogindex.permalinks import slug_for


@pytest.fixture
def make_post():
    def _make(source="a.md", title=None, date=None, tags=(), next=None, **fields):
        return Post(
            source=source,
            slug=slug_for(source),
            title=title or slug_for(source).title() or "Untitled",
            date=date or datetime(2024, 1, 1, 10, 0, tzinfo=timezone.utc),
            tags=tuple(tags),
            next=UnresolvedRef(target=next) if next else None,
            **fields,
        )

    return _make


@pytest.fixture
def source_text():
    """Render a post source from front-matter fields and a body."""

    def _text(body="Body.\n", **fields):
        fields.setdefault("title", "A")
        fields.setdefault("date", "2024-01-01 10:00 UTC")
        dumped = yaml.safe_dump(fields, sort_keys=False, allow_unicode=True)
        return f"---\n{dumped}---\n{body}"

    return _text


@pytest.fixture
def content_dir(tmp_path, source_text):
    """A small blog: a two-part series, tags, a draft and an include."""
    root = tmp_path / "content"
    (root / "posts").mkdir(parents=True)
    (root / "_drafts").mkdir()
    (root / "_includes").mkdir()

    (root / "posts" / "2023-12-11-serializing-restaurant-tables-in-haskell.html").write_text(
        source_text(
            title="Serializing restaurant tables in Haskell",
            date="2023-12-11 7:00 UTC",
            tags=["Haskell", "Serialization"],
            layout="post",
            body=(
                '<div id="post"><p>Tables.</p>\n'
                '<p><strong>Next:</strong> '
                '<a href="/2023/12/18/serializing-restaurant-tables-in-f">F#</a>.</p></div>\n'
            ),
        ),
        encoding="utf-8",
    )
    (root / "posts" / "2023-12-18-serializing-restaurant-tables-in-f.html").write_text(
        source_text(
            title="Serializing restaurant tables in F#",
            date="2023-12-18 8:39 UTC",
            tags=["F#", "Serialization"],
            description="Using F# and explicit DTOs.",
        ),
        encoding="utf-8",
    )
    (root / "posts" / "property-based-testing.md").write_text(
        source_text(title="Property-based testing", date="2024-01-01 10:00 UTC"),
        encoding="utf-8",
    )
    (root / "_drafts" / "unfinished.md").write_text("no front matter", encoding="utf-8")
    (root / "_includes" / "footer.html").write_text("<footer/>", encoding="utf-8")
    return root
