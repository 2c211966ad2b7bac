"""Unit conversions for Spark resource settings."""

from __future__ import annotations

import re
from typing import Any

import bitmath

__all__ = ["format_mebibytes", "memory_to_mib", "validate_cpu"]


def memory_to_mib(memory: Any) -> int:
    """Convert a Spark memory setting to a whole number of mebibytes.

    Spark memory settings follow the JVM convention: a bare number is in
    mebibytes and single-letter suffixes are binary, so ``1g`` is one gibibyte
    rather than one gigabyte.

    Parameters
    ----------
    memory
        Amount of memory, such as ``512m``, ``2g``, or ``1024``.

    Returns
    -------
    int
        Equivalent number of mebibytes, rounded down.

    Raises
    ------
    ValueError
        Raised if the input is not a valid memory specification.
    """
    memory = str(memory).strip()
    if re.fullmatch(r"\d+", memory):
        return int(memory)
    if not re.fullmatch(r"\d+(\.\d+)?[a-zA-Z]{1,3}", memory):
        raise ValueError(f"Invalid memory amount {memory!r}")
    try:
        amount = bitmath.parse_string_unsafe(memory, system=bitmath.NIST)
    except (KeyError, ValueError) as exc:
        raise ValueError(f"Invalid memory amount {memory!r}") from exc
    return int(amount.to_MiB().value)


def format_mebibytes(mib: int) -> str:
    """Format a number of mebibytes as a Kubernetes quantity.

    Parameters
    ----------
    mib
        Number of mebibytes.

    Returns
    -------
    str
        Quantity with a binary suffix, like ``896Mi``.
    """
    return f"{int(mib)}Mi"


def validate_cpu(cpu: Any) -> str:
    """Check that a CPU setting is a legal Kubernetes CPU quantity.

    https://kubernetes.io/docs/concepts/configuration/manage-resources-containers/#meaning-of-cpu

    The value is returned unmodified so that the quantity sent to Kubernetes
    is exactly what was configured.

    Parameters
    ----------
    cpu
        Kubernetes CPU resource value.

    Returns
    -------
    str
        The same value as a string.

    Raises
    ------
    ValueError
        If the input string is not a valid Kubernetes CPU resource value.
    """
    cpu = str(cpu)
    msg = (
        "CPU must be specified as a whole number of milli-cores, like 500m, or"
        " a decimal number with no more than three places of precision, like"
        " 1.234"
    )
    # Specified in milli-cores, like 500m. No decimals allowed.
    if re.fullmatch(r"\d+m", cpu):
        if int(cpu[:-1]) <= 0:
            raise ValueError(msg)
        return cpu

    # Specified in whole cores. More than three decimal places is not allowed.
    if not re.fullmatch(r"\d+(\.\d{1,3})?|\.\d{1,3}", cpu):
        raise ValueError(msg)
    if float(cpu) <= 0:
        raise ValueError(msg)
    return cpu
