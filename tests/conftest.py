import socket
import threading
import time

import pytest

from connscan.models import ProbeResult


class FakeProbe:
    """Stands in for probe_port; records calls and in-flight count."""

    def __init__(self, open_ports=(), delay=0.0, barrier=None):
        self.open_ports = set(open_ports)
        self.delay = delay
        self.barrier = barrier
        self.calls = []
        self.in_flight = 0
        self.peak = 0
        self._lock = threading.Lock()

    def __call__(self, address, port, timeout_s, family):
        with self._lock:
            self.calls.append(port)
            self.in_flight += 1
            self.peak = max(self.peak, self.in_flight)
        try:
            if self.barrier is not None:
                self.barrier.wait(timeout=5)
            if self.delay:
                time.sleep(self.delay)
            return ProbeResult(port=port, is_open=port in self.open_ports, elapsed_s=self.delay)
        finally:
            with self._lock:
                self.in_flight -= 1


@pytest.fixture
def fake_probe():
    return FakeProbe


@pytest.fixture
def listener():
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    sock.bind(("127.0.0.1", 0))
    sock.listen(16)
    try:
        yield sock.getsockname()[1]
    finally:
        sock.close()


@pytest.fixture
def closed_port_near():
    """Binds (without listening) a given port so connects are refused."""
    held = []

    def _hold(port):
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            sock.bind(("127.0.0.1", port))
        except OSError:
            sock.close()
            pytest.skip(f"port {port} is busy on this machine")
        held.append(sock)
        return port

    yield _hold
    for sock in held:
        sock.close()
