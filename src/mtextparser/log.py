"""Logger factory for mtextparser.

Example:
    >>> from mtextparser.log import get_logger
    >>> logger = get_logger(__name__)
    >>> logger.debug("unknown command")
"""

from __future__ import annotations

import logging


def get_logger(name: str) -> logging.Logger:
    """Return a standard library logger under the "mtextparser." namespace.

    The library never installs handlers; applications (and the CLI with
    ``--verbose``) decide where records go.

    Example:
        >>> get_logger("scanner").name
        'mtextparser.scanner'
    """
    if not (name == "mtextparser" or name.startswith("mtextparser.")):
        name = f"mtextparser.{name}"
    return logging.getLogger(name)
