"""Prometheus exporter for ULS floating-license leases."""

__version__ = "0.1.0"
