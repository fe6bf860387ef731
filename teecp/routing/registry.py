"""BroadcastRegistry — delivers every line to ALL live sinks.

The acceptor thread attaches new sinks while the hub's main thread
broadcasts.  A sink that fails is pruned during the pass in which it
failed and never receives another line.  Sink failures are logged but
never raised to the broadcaster.
"""

from __future__ import annotations

import logging
import threading
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from teecp.routing.sinks import Sink

logger = logging.getLogger(__name__)


class BroadcastRegistry:
    """The live set of sinks, safe for concurrent attach and broadcast.

    ``_lock`` guards the list itself and is only held while copying,
    appending or removing, never during a write to a sink.
    ``_broadcast_lock`` serializes broadcast passes, so a sink seen
    failing by one pass is gone before the next pass snapshots the list.

    Usage
    -----
    >>> import sys
    >>> from teecp.routing.sinks.local_echo import LocalEchoSink
    >>> registry = BroadcastRegistry()
    >>> registry.attach(LocalEchoSink(sys.stdout))
    >>> registry.broadcast("hello\\n")
    hello
    0
    """

    def __init__(self) -> None:
        self._sinks: list[Sink] = []
        self._lock = threading.Lock()
        self._broadcast_lock = threading.Lock()
        self._closed = False

    # ------------------------------------------------------------------
    # Sink management
    # ------------------------------------------------------------------

    def attach(self, sink: Sink) -> None:
        """Add a sink to the live set.

        A sink attached while a broadcast is in flight receives lines from
        the next broadcast on.  A sink attached after ``close()`` is
        closed immediately instead.
        """
        with self._lock:
            closed = self._closed
            if not closed:
                self._sinks.append(sink)
            total = len(self._sinks)
        if closed:
            logger.warning("Registry closed; releasing late sink %s", sink.sink_name)
            self._release(sink)
            return
        logger.info("Attached sink %s (%d live)", sink.sink_name, total)

    @property
    def live_sinks(self) -> list[Sink]:
        """Return a copy of the live sink list."""
        with self._lock:
            return list(self._sinks)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sinks)

    # ------------------------------------------------------------------
    # Broadcast
    # ------------------------------------------------------------------

    def broadcast(self, line: str) -> int:
        """Deliver *line* to every live sink, in registry order.

        Returns the number of sinks pruned by this pass.  A sink is pruned
        when ``deliver`` returns ``False`` or raises; the exception is
        logged and delivery continues with the remaining sinks.
        """
        with self._broadcast_lock:
            with self._lock:
                snapshot = list(self._sinks)

            failed: list[Sink] = []
            for sink in snapshot:
                try:
                    delivered = sink.deliver(line)
                except Exception as exc:  # noqa: BLE001
                    logger.error("Sink %s failed: %s", sink.sink_name, exc)
                    delivered = False
                if not delivered:
                    failed.append(sink)

            if failed:
                self._prune(failed)
            return len(failed)

    def _prune(self, failed: list[Sink]) -> None:
        with self._lock:
            # Compared by identity.
            dead = {id(sink) for sink in failed}
            self._sinks = [s for s in self._sinks if id(s) not in dead]
            remaining = len(self._sinks)
        for sink in failed:
            self._release(sink)
            logger.info("Dropped sink %s (%d remaining)", sink.sink_name, remaining)

    @staticmethod
    def _release(sink: Sink) -> None:
        close = getattr(sink, "close", None)
        if not callable(close):
            return
        try:
            close()
        except OSError as exc:
            logger.warning("Closing sink %s failed: %s", sink.sink_name, exc)

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    @property
    def closed(self) -> bool:
        return self._closed

    def close(self) -> None:
        """Remove every sink, closing those that hold a resource.

        Sinks attached afterwards are released on arrival.
        """
        with self._lock:
            self._closed = True
            sinks, self._sinks = self._sinks, []
        for sink in sinks:
            self._release(sink)
        logger.debug("Registry closed (%d sinks released)", len(sinks))
