"""Connectivity probes consulted before every request."""

import threading
from typing import Protocol


class ConnectivityProbe(Protocol):
    """Externally maintained signal telling whether the device is online."""

    @property
    def is_online(self) -> bool:
        """Whether network requests can currently be attempted."""
        ...


class StaticConnectivity:
    """Connectivity flag flipped by whoever observes the network.

    Thread-safe; the owning platform layer calls ``set_online`` from its
    reachability callback.
    """

    def __init__(self, online: bool = True) -> None:
        self._online = online
        self._lock = threading.Lock()

    @property
    def is_online(self) -> bool:
        with self._lock:
            return self._online

    def set_online(self, online: bool) -> None:
        with self._lock:
            self._online = online
