# SPDX-FileCopyrightText: Copyright (c) 2025-2026 NVIDIA CORPORATION & AFFILIATES. All rights reserved.
# SPDX-License-Identifier: Apache-2.0

"""Logging setup shared by every domainscaler component.

The log level is read from ``DSCALE_LOG`` (default ``INFO``). Calling
:func:`configure_domainscaler_logging` more than once is harmless, so service
modules call it at import time.
"""

import logging
import os
from typing import Optional, Union

LOG_LEVEL_ENV = "DSCALE_LOG"
LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
ROOT_LOGGER_NAME = "domainscaler"

_HANDLER_MARKER = "_domainscaler_handler"


def _resolve_level(level: Optional[Union[str, int]]) -> int:
    if level is None:
        level = os.environ.get(LOG_LEVEL_ENV, "INFO")
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.strip().upper())
    if not isinstance(resolved, int):
        raise ValueError(f"Unknown log level '{level}' (from {LOG_LEVEL_ENV})")
    return resolved


def configure_domainscaler_logging(level: Optional[Union[str, int]] = None) -> None:
    """Attach a single stream handler to the ``domainscaler`` logger.

    Args:
        level: Explicit level name or number. Falls back to ``DSCALE_LOG``.
    """
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(_resolve_level(level))

    for handler in root.handlers:
        if getattr(handler, _HANDLER_MARKER, False):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    setattr(handler, _HANDLER_MARKER, True)
    root.addHandler(handler)
    root.propagate = False
