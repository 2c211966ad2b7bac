"""Resource quantities for the driver container."""

from __future__ import annotations

from dataclasses import dataclass

from kubernetes_asyncio.client import V1ResourceRequirements

__all__ = ["DriverResources"]


@dataclass(frozen=True)
class DriverResources:
    """Resource requests and limits for the driver container.

    All quantities are Kubernetes quantity strings.
    """

    request_cpu: str
    """CPU request, exactly as configured."""

    request_memory: str
    """Memory request, the configured driver memory."""

    limit_memory: str
    """Memory limit, the driver memory plus overhead."""

    limit_cpu: str | None = None
    """CPU limit, or `None` if the driver's CPU is not capped."""

    def to_kubernetes(self) -> V1ResourceRequirements:
        """Convert to the Kubernetes object representation."""
        limits = {"memory": self.limit_memory}
        if self.limit_cpu is not None:
            limits["cpu"] = self.limit_cpu
        return V1ResourceRequirements(
            limits=limits,
            requests={"cpu": self.request_cpu, "memory": self.request_memory},
        )
