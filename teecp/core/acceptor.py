"""Acceptor loop — registers every inbound TCP peer as a remote sink.

Runs on its own thread next to the hub's broadcast loop.  Cancellation is
cooperative: the stop event is checked before each accept, and the
listening socket's timeout bounds how long a single accept can block.
An accept error ends the loop; the hub keeps broadcasting to the sinks it
already has and no relisten is attempted.
"""

from __future__ import annotations

import logging
import socket
import threading
from collections.abc import Callable

from teecp.routing.registry import BroadcastRegistry
from teecp.routing.sinks import Sink
from teecp.routing.sinks.remote import RemoteSink

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.5


class AcceptorLoop:
    """Accepts peers on *listener* and attaches them to *registry*.

    Parameters
    ----------
    listener:
        A bound, listening TCP socket.  The caller keeps ownership and
        closes it.
    registry:
        Where new sinks are attached.
    poll_interval:
        Maximum seconds a single accept blocks before the stop event is
        checked again.
    sink_factory:
        Builds a sink from ``(conn, addr)``.  Defaults to ``RemoteSink``.
    """

    def __init__(
        self,
        listener: socket.socket,
        registry: BroadcastRegistry,
        *,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        sink_factory: Callable[[socket.socket, tuple], Sink] = RemoteSink,
    ) -> None:
        self._listener = listener
        self._registry = registry
        self._sink_factory = sink_factory
        self._listener.settimeout(poll_interval)
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None
        self._accepted = 0

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def accepted(self) -> int:
        """Number of peers attached so far."""
        return self._accepted

    @property
    def cancelled(self) -> bool:
        return self._stop.is_set()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Run the loop on a daemon thread."""
        if self._thread is not None:
            raise RuntimeError("AcceptorLoop already started")
        self._thread = threading.Thread(
            target=self.run, name="teecp-acceptor", daemon=True
        )
        self._thread.start()

    def stop(self, timeout: float | None = None) -> None:
        """Signal cancellation and wait for the thread to finish."""
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)

    def run(self) -> None:
        """Accept peers until cancelled or the listening socket fails."""
        while not self._stop.is_set():
            try:
                conn, addr = self._listener.accept()
            except socket.timeout:
                continue
            except OSError as exc:
                if self._stop.is_set():
                    break
                logger.error("tried to connect but failed: %s", exc)
                return

            if self._stop.is_set():
                conn.close()
                break
            conn.setblocking(True)
            self._registry.attach(self._sink_factory(conn, addr))
            self._accepted += 1

        logger.debug("Acceptor stopped after %d peers", self._accepted)
