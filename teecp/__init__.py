"""teecp: a line-oriented network tee.

A hub reads lines from stdin and fans each one out to every connected TCP
subscriber while echoing locally.  A listener connects to a hub (optionally
retrying until a deadline) and prints every received line.
"""

__version__ = "0.2.0"
__description__ = "Line-oriented network tee: fan stdin out to TCP subscribers"

from teecp.routing.registry import BroadcastRegistry
from teecp.core.connector import connect
from teecp.core.hub import HubDriver
from teecp.core.listener import ListenerDriver

__all__ = ["BroadcastRegistry", "HubDriver", "ListenerDriver", "connect", "__version__"]
