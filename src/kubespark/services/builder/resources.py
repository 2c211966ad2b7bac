"""Calculation of driver container resource quantities."""

from __future__ import annotations

import math

from ...constants import MEMORY_OVERHEAD_FACTOR, MEMORY_OVERHEAD_MIN_MIB
from ...models.resources import DriverResources
from ...units import format_mebibytes

__all__ = ["compute_driver_resources", "compute_memory_overhead"]


def compute_memory_overhead(
    driver_memory_mib: int,
    override: int | None = None,
    factor: float = MEMORY_OVERHEAD_FACTOR,
    minimum: int = MEMORY_OVERHEAD_MIN_MIB,
) -> int:
    """Determine the memory reserved on top of the driver heap.

    Parameters
    ----------
    driver_memory_mib
        Driver memory in MiB.
    override
        Explicitly configured overhead in MiB. If given, it is used as-is.
    factor
        Fraction of the driver memory to reserve.
    minimum
        Smallest computed overhead in MiB.

    Returns
    -------
    int
        Overhead in MiB.
    """
    if override is not None:
        return override
    return max(math.floor(factor * driver_memory_mib), minimum)


def compute_driver_resources(
    driver_memory_mib: int,
    overhead_override: int | None,
    overhead_factor: float,
    overhead_min_mib: int,
    cpu_cores: str,
    cpu_limit: str | None = None,
) -> DriverResources:
    """Compute the requests and limits of the driver container.

    Memory is requested at the configured driver memory and limited at the
    driver memory plus overhead. The CPU request is the configured core
    count, unchanged. A CPU limit is only set if one was configured.

    Parameters
    ----------
    driver_memory_mib
        Driver memory in MiB.
    overhead_override
        Explicitly configured overhead in MiB, if any.
    overhead_factor
        Fraction of the driver memory to reserve as overhead.
    overhead_min_mib
        Smallest computed overhead in MiB.
    cpu_cores
        CPU request as a Kubernetes quantity.
    cpu_limit
        CPU limit as a Kubernetes quantity, if any.

    Returns
    -------
    DriverResources
        Resource quantities for the driver container.
    """
    overhead = compute_memory_overhead(
        driver_memory_mib, overhead_override, overhead_factor, overhead_min_mib
    )
    return DriverResources(
        request_cpu=cpu_cores,
        request_memory=format_mebibytes(driver_memory_mib),
        limit_memory=format_mebibytes(driver_memory_mib + overhead),
        limit_cpu=cpu_limit,
    )
