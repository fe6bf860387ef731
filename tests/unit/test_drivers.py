"""Tests for HubDriver and ListenerDriver in isolation."""

from __future__ import annotations

import io
import socket
import threading
from datetime import timedelta

import pytest

from teecp.core.hub import HubDriver, HubError, HubStats
from teecp.core.listener import ListenerDriver, ListenerError
from teecp.models.role import ConfigurationError, Role, RoleConfig

LISTENER_CONFIG = RoleConfig(role=Role.LISTENER)


class _BrokenInput:
    def readline(self) -> str:
        raise OSError("input device vanished")


def _serve_once(listener: socket.socket, payload: bytes) -> threading.Thread:
    """Accept one peer on *listener*, send *payload*, hang up."""

    def _run() -> None:
        conn, _ = listener.accept()
        with conn:
            conn.sendall(payload)

    thread = threading.Thread(target=_run, daemon=True)
    thread.start()
    return thread


# ---------------------------------------------------------------------------
# Test: HubDriver
# ---------------------------------------------------------------------------


class TestHubDriver:
    def test_echoes_every_line_locally(self):
        echo = io.StringIO()
        hub = HubDriver(0, io.StringIO("one\ntwo\n"), echo, host="127.0.0.1", poll_interval=0.05)

        stats = hub.run()

        assert echo.getvalue() == "one\ntwo\n"
        assert stats == HubStats(lines=2, peers_accepted=0, sinks_dropped=0)

    def test_unterminated_fragment_is_not_broadcast(self):
        echo = io.StringIO()
        hub = HubDriver(0, io.StringIO("a\nb"), echo, host="127.0.0.1", poll_interval=0.05)

        assert hub.run().lines == 1
        assert echo.getvalue() == "a\n"

    def test_bound_port_reported(self):
        hub = HubDriver(0, io.StringIO(""), io.StringIO(), host="127.0.0.1", poll_interval=0.05)
        assert hub.bound_port is None
        hub.run()
        assert hub.bound_port and hub.bound_port > 0
        assert hub.wait_until_listening(0)

    def test_port_in_use_raises(self, tcp_listener):
        port = tcp_listener.getsockname()[1]
        hub = HubDriver(port, io.StringIO("x\n"), io.StringIO(), host="127.0.0.1")

        with pytest.raises(HubError, match=f"could not open socket to port {port}"):
            hub.run()

    def test_read_error_raises_and_cleans_up(self):
        hub = HubDriver(0, _BrokenInput(), io.StringIO(), host="127.0.0.1", poll_interval=0.05)

        with pytest.raises(HubError, match="error reading from input"):
            hub.run()
        assert len(hub.registry) == 0


# ---------------------------------------------------------------------------
# Test: ListenerDriver
# ---------------------------------------------------------------------------


class TestListenerDriver:
    def test_prints_lines_until_hub_hangs_up(self, tcp_listener):
        thread = _serve_once(tcp_listener, b"alpha\nbeta\n")
        out = io.StringIO()

        count = ListenerDriver(tcp_listener.getsockname(), LISTENER_CONFIG, out).run()
        thread.join(timeout=5)

        assert count == 2
        assert out.getvalue() == "alpha\nbeta\n"

    def test_carriage_returns_preserved(self, tcp_listener):
        thread = _serve_once(tcp_listener, b"dos line\r\n")
        out = io.StringIO()

        ListenerDriver(tcp_listener.getsockname(), LISTENER_CONFIG, out).run()
        thread.join(timeout=5)

        assert out.getvalue() == "dos line\r\n"

    def test_trailing_fragment_dropped(self, tcp_listener):
        thread = _serve_once(tcp_listener, b"whole\npart")
        out = io.StringIO()

        assert ListenerDriver(tcp_listener.getsockname(), LISTENER_CONFIG, out).run() == 1
        thread.join(timeout=5)
        assert out.getvalue() == "whole\n"

    def test_no_hub_raises(self, free_port):
        driver = ListenerDriver(("127.0.0.1", free_port), LISTENER_CONFIG, io.StringIO())
        with pytest.raises(ListenerError, match=f"could not open socket to port {free_port}"):
            driver.run()

    def test_hub_config_rejected(self):
        with pytest.raises(ConfigurationError):
            ListenerDriver(("127.0.0.1", 1), RoleConfig(role=Role.HUB), io.StringIO())

    def test_waits_for_late_hub(self, free_port):
        """wait=3s, retry=0.2s; the hub only starts listening after ~0.6s."""
        config = RoleConfig(
            role=Role.LISTENER,
            wait_connection=timedelta(seconds=3),
            retry_interval=timedelta(milliseconds=200),
        )
        servers: list[socket.socket] = []

        def _late_hub() -> None:
            threading.Event().wait(0.6)
            server = socket.create_server(("127.0.0.1", free_port))
            servers.append(server)
            conn, _ = server.accept()
            with conn:
                conn.sendall(b"finally\n")

        thread = threading.Thread(target=_late_hub, daemon=True)
        thread.start()
        out = io.StringIO()
        try:
            count = ListenerDriver(("127.0.0.1", free_port), config, out).run()
        finally:
            thread.join(timeout=5)
            for server in servers:
                server.close()

        assert count == 1
        assert out.getvalue() == "finally\n"
