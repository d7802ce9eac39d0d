"""
Base collector interface.

A collector is anything the prometheus_client registry can call on
each scrape. describe() must not touch the network, so the endpoint
keeps advertising its series while the upstream is down.
"""

from abc import ABC, abstractmethod
from typing import Iterable

from prometheus_client.core import Metric


class ExporterCollector(ABC):
    """Interface for all scrape-time collectors."""

    @abstractmethod
    def collect(self) -> Iterable[Metric]:
        """Fetch upstream state and yield metric families for one scrape."""
        ...

    @abstractmethod
    def describe(self) -> Iterable[Metric]:
        """Yield empty families for every series this collector can emit."""
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...
