"""Free TCP port discovery from the host socket table."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable

import psutil

from devman.errors import PortAllocationError

logger = logging.getLogger(__name__)

MAX_PORT = 65535

type ListeningPortsProbe = Callable[[], Iterable[int]]


def listening_ports() -> set[int]:
    """Return every local port with a socket in LISTEN state."""
    try:
        connections = psutil.net_connections(kind="inet")
    except psutil.AccessDenied as exc:
        msg = "Permission denied while reading the listening socket table"
        raise PortAllocationError(msg) from exc

    return {
        conn.laddr.port
        for conn in connections
        if conn.status == psutil.CONN_LISTEN and conn.laddr
    }


class PortAllocator:
    """Pick the lowest unbound port at or above a base port.

    The port is not reserved: anything may bind it between allocation and
    the container's first start.
    """

    def __init__(self, probe: ListeningPortsProbe = listening_ports) -> None:
        self._probe = probe

    def allocate(self, base: int, *, reserved: Iterable[int] = ()) -> int:
        if not 1 <= base <= MAX_PORT:
            msg = f"Base port out of range: {base}"
            raise PortAllocationError(msg)

        taken = set(self._probe())
        taken.update(reserved)
        port = base
        while port in taken:
            port += 1
            if port > MAX_PORT:
                msg = f"No free port available at or above {base}"
                raise PortAllocationError(msg)

        logger.debug("Allocated port %d (base %d)", port, base)
        return port
