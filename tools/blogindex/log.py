from __future__ import annotations

import logging
import sys

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def setup_logging(log_level: str = "WARNING") -> None:
    """Configures logging for the command line."""
    logging.basicConfig(
        level=log_level.upper(),
        format=LOG_FORMAT,
        handlers=[logging.StreamHandler(sys.stderr)],
    )

    # nbconvert and traitlets are chatty at INFO
    logging.getLogger("traitlets").setLevel(logging.WARNING)
    logging.getLogger("nbconvert").setLevel(logging.WARNING)
