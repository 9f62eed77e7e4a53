from datetime import datetime, timezone

from blogindex.tags import build_tag_index, tag_permalinks

UTC = timezone.utc


def test_tag_index(make_post):
    haskell = make_post("haskell.md", date=datetime(2023, 12, 11, tzinfo=UTC), tags=["Haskell", "Serialization"])
    fsharp = make_post("fsharp.md", date=datetime(2023, 12, 18, tzinfo=UTC), tags=["F#", "Serialization"])
    untagged = make_post("misc.md")

    index = build_tag_index([haskell, untagged, fsharp])

    assert list(index) == ["F#", "Haskell", "Serialization"]
    assert index["Serialization"] == (fsharp, haskell)
    assert index["Haskell"] == (haskell,)
    assert all(untagged not in bucket for bucket in index.values())


def test_ties_break_by_permalink(make_post):
    day = datetime(2024, 1, 1, tzinfo=UTC)
    posts = [make_post(name, date=day, tags=["t"]) for name in ("c.md", "a.md", "b.md")]
    assert [p.slug for p in build_tag_index(posts)["t"]] == ["a", "b", "c"]


def test_no_posts_no_tags(make_post):
    assert build_tag_index([]) == {}
    assert build_tag_index([make_post("a.md")]) == {}


def test_tag_permalinks(make_post):
    post = make_post("a.md", tags=["x"])
    assert tag_permalinks(build_tag_index([post])) == {"x": ("/2024/01/01/a",)}
