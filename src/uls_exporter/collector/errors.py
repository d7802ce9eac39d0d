"""Errors raised while fetching leases from the ULS admin API."""

from __future__ import annotations


class LeaseFetchError(Exception):
    """The lease list could not be fetched or decoded. No partial result."""

    def __init__(self, message: str, url: str = ""):
        super().__init__(message)
        self.url = url


class LeaseStatusError(LeaseFetchError):
    """The server answered with something other than 200 OK."""

    def __init__(self, status_code: int, reason: str, url: str = ""):
        super().__init__(f"{status_code} {reason}", url=url)
        self.status_code = status_code
        self.reason = reason


class LeaseDecodeError(LeaseFetchError):
    """The response body is not a JSON array of leases."""
