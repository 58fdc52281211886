"""
Configuration for the decoder tools.

- Logging: coloredlogs on the root logger, level from LOG_LEVEL.
- Schema path: explicit override, then ELPIS_SCHEMA_PATH, then the sample
  schema bundled with the package. A configured path is never replaced.
"""

from __future__ import annotations

import importlib.resources
import logging
import os
from pathlib import Path
from typing import Optional

import coloredlogs

module_logger = logging.getLogger(__name__)

SCHEMA_PATH_ENV = "ELPIS_SCHEMA_PATH"
LOG_LEVEL_ENV = "LOG_LEVEL"
LOG_FORMAT = "%(asctime)s %(name)s[%(process)d] %(levelname)s %(message)s"


def configure_logger(level: Optional[str] = None) -> logging.Logger:
    root_logger = logging.getLogger()
    log_level_str = (level or os.getenv(LOG_LEVEL_ENV, "INFO")).upper()

    log_level_int = getattr(logging, log_level_str, None)
    if not isinstance(log_level_int, int):
        module_logger.warning(f"Invalid log level '{log_level_str}'. Defaulting to INFO.")
        log_level_int = logging.INFO

    root_logger.setLevel(log_level_int)

    # Drop existing handlers so repeated calls do not duplicate output
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    coloredlogs.install(
        level=log_level_int,
        fmt=LOG_FORMAT,
        logger=root_logger,
        reconfigure=True,
    )
    return root_logger


def default_schema_path() -> Path:
    """Path of the sample schema shipped inside the package."""
    return Path(str(importlib.resources.files("elpis_decoder") / "data" / "messages.json"))


def _readable(path: str) -> bool:
    return os.path.isfile(path) and os.access(path, os.R_OK)


def get_schema_path(override: Optional[str] = None) -> Path:
    """Resolve which schema file to load.

    A configured path is returned as given even when it does not exist, so
    loading it fails instead of decoding against a different schema. The
    bundled schema is used only when nothing was configured.
    """
    if override:
        if not _readable(override):
            module_logger.warning(f"Schema override path not found/readable: {override}")
        else:
            module_logger.info(f"Using schema override: {override}")
        return Path(override)

    env_path = os.getenv(SCHEMA_PATH_ENV)
    if env_path:
        if not _readable(env_path):
            module_logger.warning(f"{SCHEMA_PATH_ENV} is set but not readable: {env_path}")
        else:
            module_logger.info(f"Using schema from {SCHEMA_PATH_ENV}: {env_path}")
        return Path(env_path)

    path = default_schema_path()
    module_logger.info(f"Using bundled schema: {path}")
    return path
