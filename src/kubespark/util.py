"""General utility functions."""

from __future__ import annotations

import re
from typing import Any

from .models.kubernetes import KubernetesModel

__all__ = [
    "object_to_dict",
    "sanitize_resource_name",
]


def object_to_dict(obj: KubernetesModel) -> dict[str, Any]:
    """Return the serialized form of a Kubernetes object.

    Parameters
    ----------
    obj
        A kubernetes-asyncio model object.

    Returns
    -------
    dict
        Representation using the Kubernetes API field names, with unset
        fields omitted, suitable for dumping as YAML or JSON.
    """
    return _drop_none(obj.to_dict(serialize=True))


def sanitize_resource_name(name: str) -> str:
    """Turn an arbitrary string into a valid Kubernetes name prefix.

    Parameters
    ----------
    name
        Name to convert, such as an application display name.

    Returns
    -------
    str
        Lowercase name containing only alphanumerics and dashes, neither
        starting nor ending with a dash.
    """
    name = re.sub(r"[^a-z0-9]+", "-", name.lower())
    return name.strip("-") or "spark"


def _drop_none(data: Any) -> Any:
    if isinstance(data, dict):
        return {k: _drop_none(v) for k, v in data.items() if v is not None}
    if isinstance(data, list):
        return [_drop_none(v) for v in data]
    return data
