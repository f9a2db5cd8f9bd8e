from __future__ import annotations

import ipaddress
import logging
import socket
from typing import Tuple

from .models import ScanSpec

logger = logging.getLogger(__name__)

MIN_PORT = 1
MAX_PORT = 65535
MAX_PORT_RANGE = 10000
MAX_CONCURRENCY = 500


class ValidationError(ValueError):
    """
    Raised when a ScanSpec breaks one of the construction rules.
    `reason` is a short stable code; str(err) is the readable message.
    """

    def __init__(self, reason: str, message: str):
        super().__init__(message)
        self.reason = reason


def _is_int(value) -> bool:
    # bool is an int subclass; True is not a port
    return isinstance(value, int) and not isinstance(value, bool)


def resolve_host(host: str) -> Tuple[int, str]:
    """
    Returns (address family, address) for an IPv4 literal or a resolvable name.
    IPv4 literals are returned as-is without touching DNS.
    """
    if not isinstance(host, str) or not host.strip():
        raise ValidationError("invalid host", "Host must be a non-empty hostname or IP")
    host = host.strip()

    try:
        ip = ipaddress.IPv4Address(host)
        return socket.AF_INET, str(ip)
    except ValueError:
        pass

    try:
        infos = socket.getaddrinfo(host, None, socket.AF_UNSPEC, socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as e:
        raise ValidationError("invalid host", f"Invalid host or IP: {host}") from e
    if not infos:
        raise ValidationError("invalid host", f"Invalid host or IP: {host}")

    family, _, _, _, sockaddr = infos[0]
    address = sockaddr[0]
    if family == socket.AF_INET6 and len(sockaddr) > 3 and sockaddr[3] and "%" not in address:
        # link-local: keep the interface scope
        address = f"{address}%{sockaddr[3]}"
    logger.debug("Resolved %s -> %s", host, address)
    return family, address


def validate_spec(spec: ScanSpec) -> Tuple[int, str]:
    """
    Checks the rules in order and raises on the first violation:
    - start <= end
    - ports within 1-65535
    - at most MAX_PORT_RANGE ports
    - 1 <= concurrency <= MAX_CONCURRENCY
    - timeout >= 1 ms
    - host resolves
    Returns the resolved (family, address) on success.
    """
    if not (_is_int(spec.start_port) and _is_int(spec.end_port)):
        raise ValidationError("port out of range", "Ports must be integers 1-65535")
    if spec.start_port > spec.end_port:
        raise ValidationError("start > end", "Start port must be <= end port")
    if spec.start_port < MIN_PORT or spec.end_port > MAX_PORT:
        raise ValidationError("port out of range", f"Ports must be {MIN_PORT}-{MAX_PORT}")
    if spec.port_count > MAX_PORT_RANGE:
        raise ValidationError("range too large", f"Port range too large (max {MAX_PORT_RANGE})")
    if not _is_int(spec.concurrency) or not 1 <= spec.concurrency <= MAX_CONCURRENCY:
        raise ValidationError("concurrency out of bounds", f"Concurrency must be 1-{MAX_CONCURRENCY}")
    if not _is_int(spec.timeout_ms) or spec.timeout_ms < 1:
        raise ValidationError("timeout must be positive", "Timeout must be > 0")

    return resolve_host(spec.host)
