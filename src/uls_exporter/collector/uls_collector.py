"""
Collector for a ULS license server. On every scrape it pulls the
active leases from /v1/admin/lease and reports two gauges: whether the
fetch worked (uls_up) and how many leases came back (uls_leases).

A failed fetch yields uls_up 0 and no uls_leases sample at all, so a
broken upstream never looks like an idle one.
"""

from __future__ import annotations

import logging
from typing import Iterator, List, Optional

import httpx
from prometheus_client.core import Metric

from uls_exporter.collector.base import ExporterCollector
from uls_exporter.collector.errors import (
    LeaseDecodeError,
    LeaseFetchError,
    LeaseStatusError,
)
from uls_exporter.leases import LeaseRecord, decode_leases
from uls_exporter.metrics import LEASES, UP, MetricDescriptor

log = logging.getLogger(__name__)

LEASE_PATH = "/v1/admin/lease"
MAX_REDIRECTS = 10


class ULSCollector(ExporterCollector):

    def __init__(
        self,
        base_url: str,
        timeout_seconds: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        up: MetricDescriptor = UP,
        leases: MetricDescriptor = LEASES,
    ):
        try:
            url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            raise ValueError(f"invalid upstream URI {base_url!r}: {e}") from e
        if url.scheme not in ("http", "https") or not url.host:
            raise ValueError(f"upstream URI {base_url!r} needs an http(s) scheme and a host")

        self._base_url = url
        self._up = up
        self._leases = leases
        # No timeout unless asked for; a hung upstream holds the scrape.
        self._client = httpx.Client(
            timeout=timeout_seconds,
            transport=transport,
            follow_redirects=True,
            max_redirects=MAX_REDIRECTS,
        )

    @property
    def base_url(self) -> str:
        return str(self._base_url)

    def fetch_leases(self) -> List[LeaseRecord]:
        """GET the lease list. Raises LeaseFetchError on any failure."""
        try:
            lease_url = self._base_url.join(LEASE_PATH)
        except httpx.InvalidURL as e:
            raise LeaseFetchError(f"cannot resolve {LEASE_PATH} against {self._base_url}: {e}") from e

        url = str(lease_url)
        log.debug("Fetching leases from %s", url)

        try:
            response = self._client.get(lease_url)
        except httpx.HTTPError as e:
            raise LeaseFetchError(f"GET {url}: {e}", url=url) from e

        if response.status_code != httpx.codes.OK:
            raise LeaseStatusError(response.status_code, response.reason_phrase, url=url)

        # json raises RecursionError on very deeply nested bodies
        try:
            leases = decode_leases(response.json())
        except (ValueError, RecursionError) as e:
            raise LeaseDecodeError(f"GET {url}: bad lease payload: {e}", url=url) from e

        log.debug("Got %d leases from %s", len(leases), url)
        return leases

    def collect(self) -> Iterator[Metric]:
        try:
            leases = self.fetch_leases()
        except LeaseFetchError as e:
            log.error("Lease fetch failed: %s", e)
            yield self._up.sample(0)
            return

        yield self._up.sample(1)
        yield self._leases.sample(len(leases))

    def describe(self) -> Iterator[Metric]:
        yield self._up.family()
        yield self._leases.family()

    def name(self) -> str:
        return f"ULS ({self._base_url})"

    def close(self):
        self._client.close()
