"""Shared test fixtures for teecp."""

from __future__ import annotations

import socket
import time
from collections.abc import Callable, Iterator

import pytest


@pytest.fixture
def free_port() -> int:
    """Provide a loopback TCP port that nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        return sock.getsockname()[1]


@pytest.fixture
def tcp_listener() -> Iterator[socket.socket]:
    """Provide a listening loopback socket on an ephemeral port."""
    listener = socket.create_server(("127.0.0.1", 0))
    try:
        yield listener
    finally:
        listener.close()


@pytest.fixture
def make_tcp_pair(
    tcp_listener: socket.socket,
) -> Iterator[Callable[[], tuple[socket.socket, socket.socket]]]:
    """Factory fixture: build connected ``(hub_side, peer_side)`` socket pairs."""
    opened: list[socket.socket] = []

    def _factory() -> tuple[socket.socket, socket.socket]:
        peer = socket.create_connection(tcp_listener.getsockname())
        hub_side, _ = tcp_listener.accept()
        peer.settimeout(5.0)
        opened.extend([hub_side, peer])
        return hub_side, peer

    yield _factory
    for sock in opened:
        sock.close()


@pytest.fixture
def wait_for() -> Callable[..., bool]:
    """Poll a predicate until it holds or the timeout expires."""

    def _wait(predicate: Callable[[], bool], timeout: float = 5.0) -> bool:
        deadline = time.monotonic() + timeout
        while time.monotonic() < deadline:
            if predicate():
                return True
            time.sleep(0.01)
        return predicate()

    return _wait


@pytest.fixture
def recv_lines() -> Callable[..., list[str]]:
    """Read exactly *count* newline-terminated lines from a socket."""

    def _recv(sock: socket.socket, count: int, timeout: float = 5.0) -> list[str]:
        buf = b""
        lines: list[str] = []
        deadline = time.monotonic() + timeout
        while len(lines) < count and time.monotonic() < deadline:
            sock.settimeout(max(deadline - time.monotonic(), 0.01))
            try:
                chunk = sock.recv(65536)
            except socket.timeout:
                break
            if not chunk:
                break
            buf += chunk
            while b"\n" in buf and len(lines) < count:
                line, buf = buf.split(b"\n", 1)
                lines.append(line.decode("utf-8") + "\n")
        return lines

    return _recv
