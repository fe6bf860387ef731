"""Sink protocol for teecp line routing.

All sinks implement the ``Sink`` protocol: a ``sink_name`` property and a
``deliver(line)`` method.  The registry calls ``deliver`` on every live
sink for every broadcast line.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class Sink(Protocol):
    """Protocol that every teecp sink must implement.

    Attributes
    ----------
    sink_name : str
        A human-readable identifier used in log messages
        (e.g. ``"local_echo"``, ``"remote:127.0.0.1:51234"``).
    """

    @property
    def sink_name(self) -> str:
        """Return the name of this sink."""
        ...

    def deliver(self, line: str) -> bool:
        """Deliver one line.

        Returns ``True`` when the line was written and ``False`` when the
        sink has failed permanently.  A sink that returned ``False`` is
        never called again.
        """
        ...
