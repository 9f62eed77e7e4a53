import json

import pytest
import yaml

from blogindex.errors import ConfigError
from blogindex.site import build_site
from blogindex.utils import split_frontmatter
from blogindex.writer import write_site


def _front_matter(path):
    raw, body = split_frontmatter(path.read_text(encoding="utf-8"))
    return yaml.safe_load(raw), body


def test_write_site(content_dir, tmp_path):
    site = build_site(content_dir)
    out = write_site(site, tmp_path / "out")

    data = json.loads((out / "site.json").read_text(encoding="utf-8"))
    assert [p["permalink"] for p in data["posts"]] == [p.permalink for p in site.posts]
    assert data["series"] == [
        {
            "source": "/2023/12/11/serializing-restaurant-tables-in-haskell",
            "target": "/2023/12/18/serializing-restaurant-tables-in-f",
        }
    ]
    assert data["posts"][0]["date"].startswith("2023-12-11T07:00:00")

    fm, body = _front_matter(out / "2023/12/11/serializing-restaurant-tables-in-haskell/index.md")
    assert fm["permalink"] == "/2023/12/11/serializing-restaurant-tables-in-haskell"
    assert fm["date"] == "2023-12-11 07:00:00 UTC"
    assert fm["layout"] == "post"
    assert fm["next"] == {
        "title": "Serializing restaurant tables in F#",
        "url": "/2023/12/18/serializing-restaurant-tables-in-f",
    }
    assert fm["newer"]["url"] == "/2023/12/18/serializing-restaurant-tables-in-f"
    assert "prev" not in fm and "older" not in fm
    assert body.startswith('<div id="post">')

    fm, _ = _front_matter(out / "2023/12/18/serializing-restaurant-tables-in-f/index.md")
    assert fm["prev"]["url"] == "/2023/12/11/serializing-restaurant-tables-in-haskell"
    assert fm["description"] == "Using F# and explicit DTOs."
    assert fm["tags"] == ["F#", "Serialization"]


def test_write_site_replaces_previous_build(content_dir, tmp_path):
    out = tmp_path / "out"
    (out / "stale").mkdir(parents=True)
    (out / "stale" / "index.md").write_text("old", encoding="utf-8")

    write_site(build_site(content_dir), out)

    assert not (out / "stale").exists()
    assert (out / "site.json").exists()
    assert not [p for p in tmp_path.iterdir() if p.name.startswith(".")]


def test_write_site_refuses_content_dir(content_dir):
    site = build_site(content_dir)
    for out in (content_dir, content_dir.parent):
        with pytest.raises(ConfigError):
            write_site(site, out, content_dir)
    assert (content_dir / "posts" / "property-based-testing.md").exists()
