from datetime import datetime, timezone

import pytest

from blogindex.errors import (
    BuildFailed,
    CyclicSeries,
    DanglingReference,
    MultiplePredecessors,
)
from blogindex.models import UnresolvedRef
from blogindex.repository import PostRepository
from blogindex.series import link_series, resolve_reference

UTC = timezone.utc


def _day(n):
    return datetime(2024, 1, n, 10, 0, tzinfo=UTC)


def _repo(*posts):
    return PostRepository(posts).freeze()


def test_chain_links_both_ways(make_post):
    repo = _repo(
        make_post("a.md", date=_day(1), next="/2024/01/02/b"),
        make_post("b.md", date=_day(2), next="c"),
        make_post("c.md", date=_day(3)),
        make_post("d.md", date=_day(4)),
    )

    graph = link_series(repo)

    assert [(l.source, l.target) for l in graph.links] == [
        ("/2024/01/01/a", "/2024/01/02/b"),
        ("/2024/01/02/b", "/2024/01/03/c"),
    ]
    assert graph.next("/2024/01/01/a").permalink == "/2024/01/02/b"
    assert graph.previous("/2024/01/03/c").permalink == "/2024/01/02/b"
    assert graph.previous("/2024/01/01/a") is None
    assert graph.next("/2024/01/04/d") is None
    assert graph.chains() == [["/2024/01/01/a", "/2024/01/02/b", "/2024/01/03/c"]]
    assert len(graph) == 2


def test_no_references_no_links(make_post):
    assert len(link_series(_repo(make_post("a.md")))) == 0


def test_multiple_predecessors_scenario(make_post):
    repo = _repo(
        make_post("x.md", date=_day(1), next="y"),
        make_post("z.md", date=_day(2), next="y"),
        make_post("y.md", date=_day(3)),
    )
    with pytest.raises(MultiplePredecessors) as excinfo:
        link_series(repo)
    assert excinfo.value.target == "/2024/01/03/y"
    assert excinfo.value.sources == ("/2024/01/01/x", "/2024/01/02/z")


def test_cyclic_series_scenario(make_post):
    repo = _repo(
        make_post("a.md", date=_day(1), next="b"),
        make_post("b.md", date=_day(2), next="a"),
    )
    with pytest.raises(CyclicSeries) as excinfo:
        link_series(repo)
    assert set(excinfo.value.cycle) == {"/2024/01/01/a", "/2024/01/02/b"}


def test_self_reference_is_a_cycle(make_post):
    repo = _repo(make_post("a.md", next="/2024/01/01/a"))
    with pytest.raises(CyclicSeries):
        link_series(repo)


def test_dangling_reference_scenario(make_post):
    repo = _repo(make_post("a.md", next="/2099/01/01/nonexistent-permalink"))
    with pytest.raises(DanglingReference) as excinfo:
        link_series(repo)
    assert excinfo.value.source == "a.md"
    assert excinfo.value.target == "/2099/01/01/nonexistent-permalink"


def test_several_errors_are_reported_together(make_post):
    repo = _repo(
        make_post("a.md", date=_day(1), next="missing"),
        make_post("b.md", date=_day(2), next="c"),
        make_post("c.md", date=_day(3), next="b"),
    )
    with pytest.raises(BuildFailed) as excinfo:
        link_series(repo)
    kinds = sorted(type(e).__name__ for e in excinfo.value.errors)
    assert kinds == ["CyclicSeries", "DanglingReference"]


@pytest.mark.parametrize(
    "target",
    [
        "/2024/01/02/b",
        "/2024/01/02/b/",
        "2024/01/02/b",
        "https://blog.example.com/2024/01/02/b.html",
        "b",
        "2024-01-02-b",
        "posts/b.md",
    ],
)
def test_reference_forms(make_post, target):
    repo = _repo(make_post("posts/b.md", date=_day(2)))
    ref = resolve_reference(UnresolvedRef(target=target), repo, "a.md")
    assert ref.permalink == "/2024/01/02/b"


def test_ambiguous_identifier(make_post):
    repo = _repo(
        make_post("2023/b.md", date=_day(2)),
        make_post("2024/b.md", date=_day(3)),
    )
    with pytest.raises(DanglingReference) as excinfo:
        resolve_reference(UnresolvedRef(target="b"), repo, "a.md")
    assert "ambiguous" in str(excinfo.value)


def test_source_path_lookup_does_not_walk_the_repository(make_post, monkeypatch):
    repo = _repo(*(make_post(f"posts/p{i}.md", date=_day(i + 1)) for i in range(20)))
    monkeypatch.setattr(PostRepository, "all", lambda self: pytest.fail("scanned every post"))

    ref = resolve_reference(UnresolvedRef(target="posts/p7.md"), repo, "x.md")
    assert ref.permalink == "/2024/01/08/p7"
