# Licensed under the Apache License, Version 2.0
import logging
import os

PACKAGE_LOGGER = "docstore"
LEVEL_ENV = "DOCSTORE_LOG_LEVEL"


def env_level(default: int = logging.INFO) -> int:
    """Level named by DOCSTORE_LOG_LEVEL; unknown names fall back to `default`."""
    level = getattr(logging, os.getenv(LEVEL_ENV, "").upper(), None)
    return level if isinstance(level, int) else default


def setup_logging(verbose: bool = False) -> None:
    fmt = "%(asctime)s %(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=env_level(), format=fmt)
    # --verbose only opens up our own loggers, not third-party ones
    if verbose:
        logging.getLogger(PACKAGE_LOGGER).setLevel(logging.DEBUG)
