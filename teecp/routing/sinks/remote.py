"""Remote sink — one accepted TCP peer.

Lines are sent UTF-8 encoded with no framing beyond the newline the line
already carries.  Surrogate escapes from undecodable input are turned back
into the original bytes, so the peer sees the input byte-for-byte.  The
first write error closes the socket and the sink reports failure from
then on.
"""

from __future__ import annotations

import logging
import socket

logger = logging.getLogger(__name__)


class RemoteSink:
    """Delivers lines to one connected TCP peer.

    Parameters
    ----------
    conn:
        A connected, blocking socket.  The sink owns it from now on.
    peer:
        The peer address, used for the sink name.  Read from the socket
        when omitted.
    """

    def __init__(self, conn: socket.socket, peer: tuple | None = None) -> None:
        self._conn = conn
        self._closed = False
        if peer is None:
            try:
                peer = conn.getpeername()
            except OSError:
                peer = ("?", 0)
        self._peer = peer

    @property
    def sink_name(self) -> str:
        host, port = self._peer[0], self._peer[1]
        return f"remote:{host}:{port}"

    @property
    def closed(self) -> bool:
        return self._closed

    def deliver(self, line: str) -> bool:
        """Send *line* to the peer; close and return ``False`` on error."""
        if self._closed:
            return False
        try:
            self._conn.sendall(line.encode("utf-8", "surrogateescape"))
        except OSError as exc:
            logger.debug("RemoteSink %s: write failed: %s", self.sink_name, exc)
            self.close()
            return False
        return True

    def close(self) -> None:
        """Close the underlying socket.  Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        try:
            self._conn.close()
        except OSError:
            pass

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"RemoteSink({self.sink_name!r}, {state})"
