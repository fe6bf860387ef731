"""Listener driver — connect to a hub and print every line it sends."""

from __future__ import annotations

import logging
from typing import TextIO

from teecp.core.connector import ConnectError, Target, connect
from teecp.models.role import ConfigurationError, RoleConfig

logger = logging.getLogger(__name__)


class ListenerError(RuntimeError):
    """Raised when the listener cannot connect or its stream fails."""


class ListenerDriver:
    """Runs the listener role.

    Parameters
    ----------
    target:
        ``(host, port)`` of the hub.
    role_config:
        Must be a listener configuration; supplies the retry budgets.
    output_stream:
        Text stream every received line is written to.
    """

    def __init__(
        self, target: Target, role_config: RoleConfig, output_stream: TextIO
    ) -> None:
        if not role_config.is_listener:
            raise ConfigurationError(
                f"ListenerDriver needs a client configuration, got {role_config.role.value!r}"
            )
        self._target = target
        self._config = role_config
        self._output = output_stream

    def run(self) -> int:
        """Connect, then copy lines to the output until the hub hangs up.

        Returns the number of lines received.

        Raises
        ------
        ListenerError
            No connection within the budget, or the stream failed.
        """
        try:
            conn = connect(
                self._target,
                self._config.wait_connection,
                self._config.retry_interval,
            )
        except ConnectError as exc:
            raise ListenerError(
                f"could not open socket to port {self._target[1]}: {exc}"
            ) from exc

        lines = 0
        with conn, conn.makefile("rb") as reader:
            while True:
                try:
                    raw = reader.readline()
                except OSError as exc:
                    raise ListenerError(f"error reading stream: {exc}") from exc
                if not raw.endswith(b"\n"):
                    break
                self._write(raw)
                lines += 1

        logger.info("Hub closed the connection after %d lines", lines)
        return lines

    def _write(self, raw: bytes) -> None:
        """Write one line, byte-for-byte when the output has a binary buffer."""
        buffer = getattr(self._output, "buffer", None)
        if buffer is None:
            self._output.write(raw.decode("utf-8", "replace"))
            self._output.flush()
            return
        self._output.flush()
        buffer.write(raw)
        buffer.flush()
