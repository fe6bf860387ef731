"""Hub driver — read local input, broadcast each line to every sink.

The hub always attaches a local echo sink first, so the operator sees the
same feed the peers get.  Peers are accepted on a background thread while
the main thread reads input.  End of input is a normal stop.
"""

from __future__ import annotations

import logging
import socket
import threading
from typing import TextIO

from pydantic import BaseModel, ConfigDict

from teecp.core.acceptor import DEFAULT_POLL_INTERVAL, AcceptorLoop
from teecp.routing.registry import BroadcastRegistry
from teecp.routing.sinks.local_echo import LocalEchoSink

logger = logging.getLogger(__name__)


class HubError(RuntimeError):
    """Raised when the hub cannot listen or its input stream fails."""


class HubStats(BaseModel):
    """Counters reported when a hub run ends."""

    model_config = ConfigDict(frozen=True)

    lines: int = 0
    peers_accepted: int = 0
    sinks_dropped: int = 0


class HubDriver:
    """Runs the hub role.

    Parameters
    ----------
    port:
        TCP port to listen on.  ``0`` picks a free port; see ``bound_port``.
    input_stream:
        Text stream the lines are read from (normally ``sys.stdin``).
    echo_stream:
        Text stream for the local echo (normally ``sys.stdout``).
    host:
        Interface to bind.  Empty string means all interfaces.
    poll_interval:
        Forwarded to the ``AcceptorLoop``.
    """

    def __init__(
        self,
        port: int,
        input_stream: TextIO,
        echo_stream: TextIO,
        *,
        host: str = "",
        poll_interval: float = DEFAULT_POLL_INTERVAL,
    ) -> None:
        self._port = port
        self._host = host
        self._input = input_stream
        self._poll_interval = poll_interval
        self._registry = BroadcastRegistry()
        self._registry.attach(LocalEchoSink(echo_stream))
        self._bound_port: int | None = None
        self._listening = threading.Event()

    @property
    def registry(self) -> BroadcastRegistry:
        return self._registry

    @property
    def bound_port(self) -> int | None:
        """The port actually bound, once listening."""
        return self._bound_port

    def wait_until_listening(self, timeout: float | None = None) -> bool:
        """Block until the listening socket is bound (or *timeout* expires)."""
        return self._listening.wait(timeout)

    def run(self) -> HubStats:
        """Listen, accept and broadcast until end of input.

        Raises
        ------
        HubError
            The port cannot be bound, or reading input fails.
        """
        try:
            listener = socket.create_server((self._host, self._port))
        except OSError as exc:
            raise HubError(f"could not open socket to port {self._port}: {exc}") from exc

        self._bound_port = listener.getsockname()[1]
        acceptor = AcceptorLoop(
            listener, self._registry, poll_interval=self._poll_interval
        )
        lines = 0
        dropped = 0
        try:
            acceptor.start()
            self._listening.set()
            logger.info("Hub listening on port %d", self._bound_port)

            while True:
                try:
                    line = self._input.readline()
                except (OSError, ValueError) as exc:
                    raise HubError(f"error reading from input: {exc}") from exc
                if not line.endswith("\n"):
                    # EOF, possibly after an unterminated fragment
                    break
                dropped += self._registry.broadcast(line)
                lines += 1
        finally:
            acceptor.stop(timeout=self._poll_interval * 4)
            listener.close()
            if acceptor.is_running:
                logger.warning("Acceptor did not stop in time; late peers will be released")
            self._registry.close()

        stats = HubStats(
            lines=lines, peers_accepted=acceptor.accepted, sinks_dropped=dropped
        )
        logger.info(
            "Input closed after %d lines (%d peers accepted, %d dropped)",
            stats.lines,
            stats.peers_accepted,
            stats.sinks_dropped,
        )
        return stats
