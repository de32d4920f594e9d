"""
Logging utilities for the Invoice Editor.

Every module obtains its logger through logger(__file__) so output shares a
single format and the level can be tuned with the LOG_LEVEL variable.
"""

import logging
import os
from pathlib import Path

_LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"


def logger(name: str) -> logging.Logger:
    """
    Return a configured logger for a module.

    Args:
        name: Logger name or a module __file__ path. Paths are reduced to
              the module stem, so "src/invoice_editor/editor.py" becomes
              "editor".

    Returns:
        logging.Logger with a single stream handler attached.
    """
    if "/" in name or "\\" in name:
        name = Path(name).stem

    log = logging.getLogger(f"invoice_editor.{name}")
    if not log.handlers:
        log.setLevel(getattr(logging, _LOG_LEVEL, logging.INFO))
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(_FORMAT, datefmt=_DATE_FORMAT))
        log.addHandler(handler)
        log.propagate = False
    return log
