"""Local echo sink — the hub operator's own view of the feed."""

from __future__ import annotations

import logging
from typing import TextIO

logger = logging.getLogger(__name__)


class LocalEchoSink:
    """Writes every line verbatim to a local text stream.

    Never fails: write errors on the local stream are logged and
    swallowed, so the echo stays attached for the life of the hub.
    Undecodable input bytes (carried as surrogate escapes) are written
    back out unchanged when the stream exposes a binary ``buffer``.
    """

    def __init__(self, stream: TextIO) -> None:
        self._stream = stream

    @property
    def sink_name(self) -> str:
        return "local_echo"

    def deliver(self, line: str) -> bool:
        try:
            try:
                self._stream.write(line)
            except UnicodeEncodeError:
                self._write_raw(line)
            self._stream.flush()
        except (OSError, ValueError) as exc:
            logger.debug("LocalEchoSink: write failed: %s", exc)
        return True

    def _write_raw(self, line: str) -> None:
        raw = line.encode("utf-8", "surrogateescape")
        buffer = getattr(self._stream, "buffer", None)
        if buffer is None:
            self._stream.write(raw.decode("utf-8", "replace"))
            return
        self._stream.flush()
        buffer.write(raw)
        buffer.flush()
