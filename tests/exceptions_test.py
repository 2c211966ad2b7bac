"""Tests for exception reporting."""

from __future__ import annotations

from safir.slack.blockkit import SlackTextField

from kubespark.exceptions import (
    IdentityResolutionError,
    InvalidConfigurationError,
    MissingRequiredConfigurationError,
    ReservedKeyCollisionError,
)


def test_missing_required() -> None:
    exc = MissingRequiredConfigurationError(
        "spark.kubernetes.driver.container.image", "driver container image"
    )
    assert str(exc) == (
        "Must specify the driver container image"
        " (spark.kubernetes.driver.container.image)"
    )

    message = exc.to_slack()
    assert SlackTextField(
        heading="Key", text="spark.kubernetes.driver.container.image"
    ) in message.fields

    info = exc.to_sentry()
    assert info.tags["key"] == "spark.kubernetes.driver.container.image"

    exc = MissingRequiredConfigurationError("spark.some.key")
    assert str(exc) == "Must specify the spark.some.key (spark.some.key)"


def test_invalid_configuration() -> None:
    exc = InvalidConfigurationError("spark.driver.cores", "lots", "bad CPU")
    assert str(exc) == "Invalid value 'lots' for spark.driver.cores: bad CPU"
    assert exc.key == "spark.driver.cores"
    assert exc.value == "lots"


def test_reserved_key() -> None:
    exc = ReservedKeyCollisionError("spark-app-name")
    assert str(exc) == (
        "Annotation with key spark-app-name is not allowed as it is reserved"
        " for Spark bookkeeping operations"
    )
    assert exc.to_sentry().tags["key"] == "spark-app-name"


def test_identity_resolution() -> None:
    exc = IdentityResolutionError("someuser")
    assert str(exc) == "Error getting uid/gid for user=someuser"
    assert exc.user == "someuser"
