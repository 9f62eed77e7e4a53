from __future__ import annotations

import copy
import pathlib
from typing import Any, Dict, Optional

import nbformat
import yaml
from nbconvert import MarkdownExporter
from nbformat import NotebookNode
from nbformat.validator import validate

from .config import KNOWN_FIELDS
from .utils import (
    _norm_text,
    normalize_markdown_light,
    split_frontmatter,
    yaml_frontmatter_block,
)

_REMOVE_CELL_TAGS = {"remove-cell", "hide-cell", "remove_cell", "hide_cell"}
_REMOVE_INPUT_TAGS = {"remove-input", "hide-input", "remove_input", "hide_input"}
_REMOVE_OUTPUT_TAGS = {"remove-output", "hide-output", "remove_output", "hide_output"}


def _tags(cell: NotebookNode) -> set:
    md = cell.get("metadata") or {}
    return set(md.get("tags") or [])


def _visible(cell: NotebookNode) -> Optional[NotebookNode]:
    tags = _tags(cell)
    if tags & _REMOVE_CELL_TAGS:
        return None

    c = copy.deepcopy(cell)
    jup = (c.get("metadata") or {}).get("jupyter") or {}
    if tags & _REMOVE_INPUT_TAGS or jup.get("source_hidden"):
        if c.get("cell_type") != "code":
            return None
        c["source"] = ""
    if c.get("cell_type") == "code" and (
        tags & _REMOVE_OUTPUT_TAGS or jup.get("outputs_hidden")
    ):
        c["outputs"] = []
        c["execution_count"] = None

    if not _norm_text(c.get("source", "")).strip() and not c.get("outputs"):
        return None
    return c


def _front_matter_from_raw_cell(nb: NotebookNode) -> Optional[Dict[str, Any]]:
    """Pop a leading raw cell holding a ``---`` block and return its data."""
    if not nb.cells or nb.cells[0].get("cell_type") != "raw":
        return None
    raw, rest = split_frontmatter(_norm_text(nb.cells[0].get("source", "")))
    if raw is None or rest is None:
        return None
    data = yaml.safe_load(raw)
    if not isinstance(data, dict):
        return None
    nb.cells = nb.cells[1:]
    return data


def _front_matter_from_metadata(nb: NotebookNode) -> Dict[str, Any]:
    md = nb.get("metadata") or {}
    data = {k: md[k] for k in KNOWN_FIELDS if k in md}
    data.update(md.get("blog") or {})
    return data


def notebook_to_source(path: pathlib.Path) -> str:
    """Render a notebook as a post source: front matter plus Markdown body.

    Front matter comes from a leading raw ``---`` cell, or failing that from
    the notebook metadata. A notebook with neither yields a source without
    front matter, which the parser rejects.
    """
    nb = nbformat.read(str(path), as_version=4)
    validate(nb)

    fm = _front_matter_from_raw_cell(nb)
    if fm is None:
        fm = _front_matter_from_metadata(nb)

    nb.cells = [c for c in (_visible(cell) for cell in nb.cells) if c is not None]

    body, _ = MarkdownExporter().from_notebook_node(nb)
    body = normalize_markdown_light(_norm_text(body)).lstrip("\n")

    if not fm:
        return body
    return yaml_frontmatter_block(fm) + body
