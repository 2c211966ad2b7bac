"""Test fixtures for kubespark tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest
import structlog
from structlog.stdlib import BoundLogger

from kubespark.config import SparkConf
from kubespark.constants import ROOT_LOGGER
from kubespark.models.identity import Identity, UserGroup
from kubespark.models.kubernetes import PullPolicy
from kubespark.services.builder.driver import BasicDriverConfigurationStep
from kubespark.services.identity import StaticIdentityResolver

TEST_IMAGE = "registry.example.com/spark/spark-py:3.5.1"
"""Driver image used by the standard test configuration."""


@pytest.fixture
def spark_conf() -> SparkConf:
    """Minimal Spark configuration that the driver step accepts."""
    return SparkConf(
        {
            "spark.app.name": "spark-pi",
            "spark.kubernetes.container.image": TEST_IMAGE,
        }
    )


@pytest.fixture
def identity() -> Identity:
    return Identity(
        username="u",
        uid="1000",
        groups=[UserGroup(name="u", id="1000")],
    )


@pytest.fixture
def logger() -> BoundLogger:
    return structlog.get_logger(ROOT_LOGGER)


@pytest.fixture
def make_step(
    identity: Identity, logger: BoundLogger
) -> Callable[..., BasicDriverConfigurationStep]:
    """Return a factory for driver steps with overridable arguments."""

    def factory(**kwargs: Any) -> BasicDriverConfigurationStep:
        arguments: dict[str, Any] = {
            "kubernetes_app_id": "spark-0123456789abcdef",
            "resource_name_prefix": "spark-pi-89abcdef",
            "driver_labels": {
                "spark-app-selector": "spark-0123456789abcdef",
                "spark-role": "driver",
            },
            "image_pull_policy": PullPolicy.IF_NOT_PRESENT,
            "app_name": "spark-pi",
            "main_class": "App",
            "app_args": ["x", "y"],
            "identity_resolver": StaticIdentityResolver(identity),
            "logger": logger,
        }
        arguments.update(kwargs)
        return BasicDriverConfigurationStep(**arguments)

    return factory
