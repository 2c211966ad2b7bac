"""Sequential application of driver configuration steps."""

from __future__ import annotations

from collections.abc import Iterable
from typing import Protocol

from structlog.stdlib import BoundLogger

from ..models.spec import DriverSpecification

__all__ = ["DriverConfigurationStep", "DriverStepPipeline"]


class DriverConfigurationStep(Protocol):
    """One transformation of the driver specification.

    A step must treat the specification it receives as read-only and return
    a new one. Any failure must be raised rather than returning a partially
    configured specification.
    """

    def configure_driver(
        self, spec: DriverSpecification
    ) -> DriverSpecification: ...


class DriverStepPipeline:
    """Apply a fixed sequence of configuration steps to a specification.

    Steps run one at a time, in order, since later steps may depend on
    values an earlier step records in the Spark configuration. An exception
    from any step aborts the pipeline.

    Parameters
    ----------
    steps
        Steps to apply, in order.
    logger
        Logger to use.
    """

    def __init__(
        self, steps: Iterable[DriverConfigurationStep], logger: BoundLogger
    ) -> None:
        self._steps = list(steps)
        self._logger = logger

    def run(self, spec: DriverSpecification) -> DriverSpecification:
        """Run every step.

        Parameters
        ----------
        spec
            Initial specification, normally from
            `DriverSpecification.initial`.

        Returns
        -------
        DriverSpecification
            Specification produced by the last step.
        """
        for step in self._steps:
            name = type(step).__name__
            self._logger.debug("Applying driver step", step=name)
            spec = step.configure_driver(spec)
        self._logger.info(
            "Built driver specification",
            pod=spec.pod.metadata.name if spec.pod.metadata else None,
            steps=len(self._steps),
        )
        return spec
