"""
Metric definitions for the ULS exporter.

Both gauges are created once at import time and shared by every
collector instance. They carry no labels.
"""

from dataclasses import dataclass

from prometheus_client.core import GaugeMetricFamily

NAMESPACE = "uls"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """Join the non-empty parts with underscores, e.g. ("uls", "", "up") -> "uls_up"."""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Name and help text for a label-less gauge."""

    name: str
    documentation: str

    def family(self) -> GaugeMetricFamily:
        """An empty gauge family, as advertised during describe()."""
        return GaugeMetricFamily(self.name, self.documentation)

    def sample(self, value: float) -> GaugeMetricFamily:
        """A gauge family holding a single unlabelled sample."""
        return GaugeMetricFamily(self.name, self.documentation, value=value)


UP = MetricDescriptor(
    name=build_fq_name(NAMESPACE, "", "up"),
    documentation="ULS is up and running",
)

LEASES = MetricDescriptor(
    name=build_fq_name(NAMESPACE, "", "leases"),
    documentation="Number of active ULS leases",
)
