"""Data types for interacting with Kubernetes."""

from __future__ import annotations

from enum import Enum
from typing import Any, Protocol

__all__ = [
    "KubernetesModel",
    "PullPolicy",
]


class KubernetesModel(Protocol):
    """Protocol for kubernetes-asyncio object models.

    The models carry no type information of their own. Pods, containers, and
    their nested objects can all be serialized with ``to_dict``.
    """

    def to_dict(self, *, serialize: bool = False) -> dict[str, Any]: ...


class PullPolicy(Enum):
    """Pull policy for Docker images in Kubernetes."""

    ALWAYS = "Always"
    IF_NOT_PRESENT = "IfNotPresent"
    NEVER = "Never"
