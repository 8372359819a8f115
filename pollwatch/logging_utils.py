from __future__ import annotations

import logging

from rich.console import Console
from rich.logging import RichHandler


ROOT_LOGGER_NAME = "pollwatch"


def configure_logging(verbose: bool = False, *, console: Console | None = None) -> logging.Logger:
    """Attach a Rich handler on stderr to the ``pollwatch`` logger (once)."""
    root = logging.getLogger(ROOT_LOGGER_NAME)
    root.setLevel(logging.DEBUG if verbose else logging.WARNING)

    if any(isinstance(handler, RichHandler) for handler in root.handlers):
        return root

    handler = RichHandler(
        console=console or Console(stderr=True),
        show_path=False,
        markup=False,
        rich_tracebacks=True,
    )
    handler.setFormatter(logging.Formatter("%(name)s: %(message)s"))
    root.addHandler(handler)
    return root


def get_logger(name: str) -> logging.Logger:
    if name == ROOT_LOGGER_NAME or name.startswith(f"{ROOT_LOGGER_NAME}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")
