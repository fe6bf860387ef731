"""Retry connector — obtain one outbound TCP connection within a time budget.

A wait budget of zero means a single attempt.  A budget smaller than one
retry interval also permits only the initial attempt.  Otherwise failed
attempts are retried every ``retry_interval`` until one succeeds or the
elapsed time exceeds the budget.
"""

from __future__ import annotations

import logging
import socket
import time
from collections.abc import Callable
from datetime import timedelta

logger = logging.getLogger(__name__)

Target = tuple[str, int]


class ConnectError(ConnectionError):
    """Raised when no connection could be made within the budget."""

    def __init__(self, target: Target, attempts: int, cause: OSError | None) -> None:
        host, port = target
        super().__init__(
            f"could not connect to {host}:{port} after {attempts} attempt(s): {cause}"
        )
        self.target = target
        self.attempts = attempts


def _dial_tcp(target: Target) -> socket.socket:
    return socket.create_connection(target)


def connect(
    target: Target,
    wait_budget: timedelta = timedelta(0),
    retry_interval: timedelta = timedelta(seconds=1),
    *,
    dial: Callable[[Target], socket.socket] = _dial_tcp,
    clock: Callable[[], float] = time.monotonic,
    sleep: Callable[[float], None] = time.sleep,
) -> socket.socket:
    """Connect to *target*, retrying on failure until *wait_budget* is spent.

    Parameters
    ----------
    target:
        ``(host, port)`` to dial.
    wait_budget:
        Total time retries may take.  Zero means try exactly once.
    retry_interval:
        Sleep between failed attempts.
    dial, clock, sleep:
        Injection points for tests.

    Returns
    -------
    socket.socket
        The connected socket.

    Raises
    ------
    ConnectError
        The last attempt failed and no further retry is allowed.
    """
    budget = wait_budget.total_seconds()
    interval = retry_interval.total_seconds()
    start = clock()
    attempts = 0

    if budget > 0:
        logger.warning("Trying to connect to server for %f seconds", budget)

    while True:
        attempts += 1
        conn: socket.socket | None = None
        error: OSError | None = None
        try:
            conn = dial(target)
        except OSError as exc:
            error = exc

        if (
            conn is not None
            or budget == 0
            or clock() - start > budget
            or budget < interval
        ):
            break

        logger.warning("Connection attempt %d failed: %s", attempts, error)
        logger.warning("Waiting for %f seconds", interval)
        sleep(interval)

    if conn is None:
        raise ConnectError(target, attempts, error) from error

    logger.debug("Connected to %s:%d after %d attempt(s)", target[0], target[1], attempts)
    return conn
