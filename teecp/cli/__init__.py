"""teecp CLI — Typer-based command-line interface.

Provides the ``teecp`` command: ``--server`` runs the hub, ``--client``
runs the listener.  Diagnostics go to stderr through Rich; stdout carries
only the data stream.
"""
