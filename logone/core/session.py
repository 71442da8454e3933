"""The read loop: feed input lines to a router until end of input.

Clean end of input shuts the router down (flushing open units in verbose
mode).  An exception raised by the input iterable is a read error: it
propagates immediately and nothing is flushed.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable

from logone.routing.router import Router

logger = logging.getLogger(__name__)


def run_stream(lines: Iterable[str], router: Router) -> int:
    """Route every line of *lines*; return the number of lines read."""
    count = 0
    for line in lines:
        count += 1
        router.route_line(line)
    logger.debug("End of input after %d lines", count)
    router.shutdown()
    return count
