#!/usr/bin/env python3
"""
Command line driver.

- build CONTENT_DIR -> <out>/site.json + <out>/<yyyy>/<mm>/<dd>/<slug>/index.md
  frontmatter: title, date, permalink, source, tags?, prev?, next?, older?, newer?
- check CONTENT_DIR -> validate only, write nothing

Every error found is printed, one per line, and the exit status is 1.
"""

import pathlib
import sys
from typing import Optional, Tuple

import typer

from .config import BuildConfig, load_config
from .errors import BuildError, BuildFailed
from .log import setup_logging
from .models import SiteModel
from .site import build_site
from .writer import write_site

app = typer.Typer(name="blogindex", help="Index blog post sources into a navigable site model.")


def _report(e: BuildError) -> None:
    errors = e.errors if isinstance(e, BuildFailed) else [e]
    for err in errors:
        print(f"ERROR: {err}", file=sys.stderr)
    print(f"✗ {len(errors)} error(s), nothing written", file=sys.stderr)


def _load(
    content_dir: pathlib.Path,
    config_path: Optional[pathlib.Path],
    log_level: str,
    **overrides,
) -> Tuple[BuildConfig, SiteModel]:
    setup_logging(log_level)
    try:
        config = load_config(content_dir, config_path, **overrides)
        return config, build_site(content_dir, config)
    except BuildError as e:
        _report(e)
        raise typer.Exit(code=1)


@app.command()
def build(
    content_dir: pathlib.Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of post sources."),
    out: Optional[pathlib.Path] = typer.Option(None, "--out", "-o", help="Output directory (default: <content>/_site)."),
    config_path: Optional[pathlib.Path] = typer.Option(None, "--config", "-c", help="Config file (default: <content>/site.yml)."),
    workers: Optional[int] = typer.Option(None, help="Parser threads."),
    log_level: str = typer.Option("WARNING", "--log-level"),
):
    """Build the site model and export it."""
    config, site = _load(content_dir, config_path, log_level, output_dir=out, workers=workers)
    out_dir = write_site(site, config.output_dir, content_dir)
    print(f"✓ built {len(site)} posts, {len(site.tags)} tags, {len(site.series)} series links -> {out_dir}")


@app.command()
def check(
    content_dir: pathlib.Path = typer.Argument(..., exists=True, file_okay=False, help="Directory of post sources."),
    config_path: Optional[pathlib.Path] = typer.Option(None, "--config", "-c"),
    log_level: str = typer.Option("WARNING", "--log-level"),
):
    """Validate sources without writing anything."""
    _, site = _load(content_dir, config_path, log_level)
    print(f"✓ {len(site)} posts ok")


def main():
    app()


if __name__ == "__main__":
    main()
