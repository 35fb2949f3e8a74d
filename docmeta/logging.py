"""Logging utilities for docmeta.

Every module logs under the ``docmeta`` hierarchy. The processor reports each
failed directive at WARNING while it carries on with the rest of the class;
registry population and per-annotation expansion are logged at DEBUG, which
``-v`` or ``logging.verbose`` in .docmeta.yml turns on.
"""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "docmeta"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docmeta hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the docmeta logger with console output and an optional file sink.

    Console output goes to stderr so that the JSON printed by ``parse`` and
    ``expand`` stays clean on stdout. ``log_file`` comes from
    ``logging.file`` in .docmeta.yml, resolved against the config root.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # main() may run several times in one process; handlers must not stack.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[docmeta] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["configure_logging", "get_logger"]
