# src/remark_mongo/utils/concurrency.py
"""Fan-out helper for independent blocking steps."""

from __future__ import annotations

import logging
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Any

logger = logging.getLogger(__name__)


def run_concurrently(*steps: Callable[[], Any]) -> list[Any]:
    """Run ``steps`` on a short-lived thread pool and wait for all of them.

    Every step runs to completion even when another one fails; the first
    failure (in argument order) is then re-raised so partial state is never
    reported as success.

    Args:
        *steps: Zero-argument callables; each must be safe to retry.

    Returns:
        The step results, in argument order.

    Raises:
        Exception: The first exception raised by any step.
    """
    if not steps:
        return []

    with ThreadPoolExecutor(max_workers=len(steps)) as executor:
        futures = [executor.submit(step) for step in steps]
        wait(futures)

    errors = [future.exception() for future in futures if future.exception() is not None]
    for extra in errors[1:]:
        logger.error("Concurrent step failed: %s", extra)
    if errors:
        raise errors[0]  # type: ignore[misc]
    return [future.result() for future in futures]
