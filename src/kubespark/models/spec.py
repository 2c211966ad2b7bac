"""The driver specification threaded through the configuration steps."""

from __future__ import annotations

import copy
from dataclasses import dataclass
from typing import Self

from kubernetes_asyncio.client import V1Container, V1Pod, V1PodSpec

from ..config import SparkConf

__all__ = ["DriverSpecification"]


@dataclass(frozen=True)
class DriverSpecification:
    """Partially-built driver pod, driver container, and Spark configuration.

    Each configuration step receives one of these and returns a new one.
    The Kubernetes models held here are mutable objects, so steps must copy
    them before making changes rather than editing them in place.
    """

    pod: V1Pod
    """Pod metadata and pod-level spec fields accumulated so far."""

    container: V1Container
    """Driver container fields accumulated so far."""

    conf: SparkConf
    """Spark configuration as seen by later steps."""

    @classmethod
    def initial(cls, conf: SparkConf) -> Self:
        """Create the specification that starts the step pipeline.

        Parameters
        ----------
        conf
            Spark configuration for the application.

        Returns
        -------
        DriverSpecification
            Specification with empty pod and container templates.
        """
        # Kubernetes models reject a container with no name at all.
        return cls(pod=V1Pod(), container=V1Container(name=""), conf=conf)

    def build_pod(self) -> V1Pod:
        """Combine the pod and container templates into a complete pod.

        The driver container is placed first in the pod's container list,
        ahead of any sidecars added by other steps. Neither template is
        modified.

        Returns
        -------
        kubernetes_asyncio.client.V1Pod
            Pod ready to submit to Kubernetes.
        """
        pod = copy.deepcopy(self.pod)
        pod.api_version = pod.api_version or "v1"
        pod.kind = pod.kind or "Pod"
        container = copy.deepcopy(self.container)
        if pod.spec is None:
            pod.spec = V1PodSpec(containers=[])
        pod.spec.containers = [container, *(pod.spec.containers or [])]
        return pod
