from __future__ import annotations

import errno
import logging
import socket
import threading
import time
from concurrent.futures import ThreadPoolExecutor, wait
from typing import Callable, Dict, List, Optional, Tuple

from .models import ProbeResult, ScanSpec
from .validation import validate_spec

logger = logging.getLogger(__name__)

ProbeFunc = Callable[[str, int, float, int], ProbeResult]
ResultCallback = Callable[[int, bool], None]

# Running out of descriptors is a per-port "closed", not a fatal error.
_EXHAUSTION_ERRNOS = (errno.EMFILE, errno.ENFILE)


class ScanError(RuntimeError):
    """Fatal platform/transport failure that stops a scan before it runs."""


def probe_port(address: str, port: int, timeout_s: float, family: int = socket.AF_INET) -> ProbeResult:
    """
    One TCP connect attempt. settimeout() bounds connect, send and recv alike.
    Any OSError (refused, timeout, unreachable, no socket) means closed.
    """
    start = time.perf_counter()
    sock: Optional[socket.socket] = None
    is_open = False
    try:
        sock = socket.socket(family, socket.SOCK_STREAM)
        sock.settimeout(timeout_s)
        sock.connect(_sockaddr(address, port, family))
        is_open = True
    except OSError as e:
        logger.debug("Port %d closed: %s", port, e)
    finally:
        if sock is not None:
            sock.close()
    return ProbeResult(port=port, is_open=is_open, elapsed_s=round(time.perf_counter() - start, 4))


def _sockaddr(address: str, port: int, family: int) -> tuple:
    if family == socket.AF_INET6:
        # numeric parse only; fills in flowinfo and the %scope id
        return socket.getaddrinfo(address, port, family, socket.SOCK_STREAM, 0, socket.AI_NUMERICHOST)[0][4]
    return (address, port)


class ScanEngine:
    """
    Fixed-size worker pool over a shared port iterator.

    Each worker claims the next port under a lock, probes it, keeps the
    result in its own buffer and notifies the observer. Buffers are merged
    once every worker has returned.
    """

    def __init__(
        self,
        host: str,
        start_port: int,
        end_port: int,
        timeout_ms: int,
        concurrency: int,
        verbose: bool = False,
        *,
        probe: Optional[ProbeFunc] = None,
    ):
        self._spec = ScanSpec(
            host=host,
            start_port=start_port,
            end_port=end_port,
            timeout_ms=timeout_ms,
            concurrency=concurrency,
            verbose=verbose,
        )
        self._family, self._address = validate_spec(self._spec)
        self._probe: ProbeFunc = probe or probe_port
        self._results: Dict[int, ProbeResult] = {}
        self._open_ports: Tuple[int, ...] = ()

    @property
    def spec(self) -> ScanSpec:
        return self._spec

    @property
    def address(self) -> str:
        return self._address

    @property
    def family(self) -> int:
        return self._family

    def open_ports(self) -> Tuple[int, ...]:
        return self._open_ports

    def results(self) -> List[ProbeResult]:
        return [self._results[p] for p in sorted(self._results)]

    def _check_network(self) -> None:
        try:
            socket.socket(self._family, socket.SOCK_STREAM).close()
        except OSError as e:
            if e.errno in _EXHAUSTION_ERRNOS:
                logger.warning("Socket descriptors exhausted before scan: %s", e)
                return
            raise ScanError(f"Cannot create TCP sockets for {self._address}: {e}") from e

    def scan(self, on_result: Optional[ResultCallback] = None) -> None:
        spec = self._spec
        self._check_network()

        ports = iter(range(spec.start_port, spec.end_port + 1))
        claim_lock = threading.Lock()
        stop = threading.Event()

        def claim() -> Optional[int]:
            with claim_lock:
                if stop.is_set():
                    return None
                return next(ports, None)

        def worker() -> List[ProbeResult]:
            local: List[ProbeResult] = []
            while True:
                port = claim()
                if port is None:
                    break
                r = self._probe(self._address, port, spec.timeout_s, self._family)
                local.append(r)
                logger.debug("Port %d %s (%.4fs)", r.port, "open" if r.is_open else "closed", r.elapsed_s)
                if on_result is not None:
                    on_result(r.port, r.is_open)
            logger.debug("%s done after %d ports", threading.current_thread().name, len(local))
            return local

        logger.info(
            "Scanning %s (%s) ports %d-%d with %d workers, timeout %dms",
            spec.host, self._address, spec.start_port, spec.end_port, spec.concurrency, spec.timeout_ms,
        )
        start_all = time.perf_counter()

        with ThreadPoolExecutor(max_workers=spec.concurrency, thread_name_prefix="connscan") as pool:
            futures = []
            try:
                for _ in range(spec.concurrency):
                    futures.append(pool.submit(worker))
                wait(futures)
            except RuntimeError as e:
                stop.set()
                raise ScanError(f"Could not start worker threads: {e}") from e
            except BaseException:
                # Ctrl-C: stop claiming, let in-flight probes finish
                stop.set()
                logger.warning("Scan interrupted, waiting for in-flight probes")
                raise

        results: Dict[int, ProbeResult] = {}
        for fut in futures:
            for r in fut.result():
                results[r.port] = r

        self._results = results
        self._open_ports = tuple(sorted(p for p, r in results.items() if r.is_open))

        logger.info(
            "Scan finished: %d ports, %d open, %.2fs",
            len(results), len(self._open_ports), time.perf_counter() - start_all,
        )
