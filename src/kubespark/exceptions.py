"""Exceptions for the Spark driver configuration step."""

from __future__ import annotations

from typing import override

from safir.slack.blockkit import SlackException, SlackMessage, SlackTextField
from safir.slack.sentry import SentryEventInfo

__all__ = [
    "ConfigurationKeyError",
    "IdentityResolutionError",
    "InvalidConfigurationError",
    "KubesparkError",
    "MissingRequiredConfigurationError",
    "ReservedKeyCollisionError",
]


class KubesparkError(SlackException):
    """Base class for fatal errors building the driver specification.

    Any of these errors aborts the whole step. No partial specification is
    ever returned.
    """


class ConfigurationKeyError(KubesparkError):
    """A configuration error attributable to a single Spark key.

    Parameters
    ----------
    message
        Human-readable error message.
    key
        Spark configuration key at fault.
    """

    def __init__(self, message: str, key: str) -> None:
        super().__init__(message)
        self.key = key

    @override
    def to_slack(self) -> SlackMessage:
        message = super().to_slack()
        message.fields.append(SlackTextField(heading="Key", text=self.key))
        return message

    @override
    def to_sentry(self) -> SentryEventInfo:
        info = super().to_sentry()
        info.tags["key"] = self.key
        return info


class MissingRequiredConfigurationError(ConfigurationKeyError):
    """A required configuration setting was not provided."""

    def __init__(self, key: str, description: str | None = None) -> None:
        what = description or key
        super().__init__(f"Must specify the {what} ({key})", key)


class InvalidConfigurationError(ConfigurationKeyError):
    """A configuration setting has a value that cannot be used."""

    def __init__(self, key: str, value: str, reason: str) -> None:
        msg = f"Invalid value {value!r} for {key}: {reason}"
        super().__init__(msg, key)
        self.value = value


class ReservedKeyCollisionError(ConfigurationKeyError):
    """A user-supplied annotation uses a key reserved for Spark."""

    def __init__(self, key: str) -> None:
        msg = (
            f"Annotation with key {key} is not allowed as it is reserved for"
            " Spark bookkeeping operations"
        )
        super().__init__(msg, key)


class IdentityResolutionError(KubesparkError):
    """The uid or group ids of the submitting user could not be determined.

    Parameters
    ----------
    username
        Resolved user name whose uid or groups were missing.
    """

    def __init__(self, username: str) -> None:
        msg = f"Error getting uid/gid for user={username}"
        super().__init__(msg, username)
