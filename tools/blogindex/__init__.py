"""Static blog-post indexing: front matter in, a navigable site model out."""

from .config import BuildConfig, load_config
from .errors import (
    BuildError,
    BuildFailed,
    CyclicSeries,
    DanglingReference,
    DuplicatePermalink,
    InvalidDate,
    MalformedFrontMatter,
    MultiplePredecessors,
    NotFound,
)
from .models import Post, SiteModel
from .site import assemble, build_site
from .sources import RawSource

__version__ = "0.1.0"
