from __future__ import annotations

import logging
import pathlib
import shutil
import tempfile
from typing import Any, Dict, Optional

from .config import SITE_JSON, check_output_dir
from .models import Page, ResolvedRef, SiteModel
from .utils import format_utc, yaml_frontmatter_block

logger = logging.getLogger(__name__)


def _nav(model: SiteModel, ref: Optional[ResolvedRef]) -> Optional[Dict[str, str]]:
    if ref is None:
        return None
    return {"title": model.post(ref.permalink).title, "url": ref.permalink}


def page_front_matter(model: SiteModel, page: Page) -> Dict[str, Any]:
    post = page.post
    fm: Dict[str, Any] = {
        "title": post.title,
        "date": format_utc(post.date),
        "permalink": post.permalink,
        "source": post.source,
    }
    if post.layout is not None:
        fm["layout"] = post.layout
    if post.description:
        fm["description"] = post.description
    if post.tags:
        fm["tags"] = list(post.tags)
    for key, ref in (
        ("prev", page.previous),
        ("next", page.next),
        ("older", page.older),
        ("newer", page.newer),
    ):
        nav = _nav(model, ref)
        if nav is not None:
            fm[key] = nav
    for key, value in post.extra.items():
        fm.setdefault(key, value)
    return fm


def _write_tree(model: SiteModel, root: pathlib.Path) -> None:
    (root / SITE_JSON).write_text(model.to_json(), encoding="utf-8")
    for page in model.pages():
        out_dir = root / page.post.permalink.lstrip("/")
        out_dir.mkdir(parents=True, exist_ok=True)
        (out_dir / "index.md").write_text(
            yaml_frontmatter_block(page_front_matter(model, page)) + page.post.body,
            encoding="utf-8",
        )


def write_site(
    model: SiteModel,
    out_dir: pathlib.Path,
    content_dir: Optional[pathlib.Path] = None,
) -> pathlib.Path:
    """Write ``site.json`` and one ``<permalink>/index.md`` per post.

    Everything is written to a sibling temporary directory first and swapped
    in at the end, so ``out_dir`` only ever holds a complete build. With
    ``content_dir`` given, an ``out_dir`` that would replace it raises
    ``ConfigError``.
    """
    if content_dir is not None:
        check_output_dir(out_dir, content_dir)
    out_dir = out_dir.resolve()
    out_dir.parent.mkdir(parents=True, exist_ok=True)
    tmp = pathlib.Path(tempfile.mkdtemp(prefix=f".{out_dir.name}.", dir=out_dir.parent))
    try:
        _write_tree(model, tmp)
    except BaseException:
        shutil.rmtree(tmp, ignore_errors=True)
        raise

    old = None
    if out_dir.exists():
        old = out_dir.with_name(f"{tmp.name}.old")
        out_dir.rename(old)
    tmp.rename(out_dir)
    if old is not None:
        shutil.rmtree(old, ignore_errors=True)

    logger.info("wrote %d page(s) to %s", len(model), out_dir)
    return out_dir
