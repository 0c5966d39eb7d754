"""
Strict mode — promote runtime warnings to exceptions for one run.

    with strict_mode():
        orchestrator.run(packages)

Inside the block every ``warnings.warn`` raises, so a partially applied
step surfaces as a package failure instead of a line on stderr. The
previous warning filters are restored on every exit path.
"""

from __future__ import annotations

import logging
import warnings
from collections.abc import Iterator
from contextlib import contextmanager

logger = logging.getLogger(__name__)


@contextmanager
def strict_mode() -> Iterator[None]:
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        logger.debug("Strict mode on")
        try:
            yield
        finally:
            logger.debug("Strict mode off")
