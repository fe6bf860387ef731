"""teecp line routing — fans every broadcast line out to all live sinks.

Sinks are delivery targets: the hub operator's own terminal (local echo)
and one remote sink per connected TCP peer.  The BroadcastRegistry
delivers each line to every live sink and drops the ones that fail.
"""
