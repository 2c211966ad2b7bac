"""Spark configuration snapshots and the driver configuration schema."""

from __future__ import annotations

import re
from collections.abc import Iterator, Mapping
from pathlib import Path
from typing import Annotated, Any, Self

import yaml
from pydantic import (
    AfterValidator,
    AliasChoices,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    ValidationError,
)
from pydantic_settings import (
    BaseSettings,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)
from safir.logging import LogLevel, Profile, configure_logging

from .constants import (
    CLUSTER_CONFIGMAP_KEY,
    CLUSTER_USER_SECRETS_KEY,
    CONTAINER_IMAGE_KEY,
    CONTAINER_USER_ID_KEY,
    CONTAINER_USER_NAME_KEY,
    DRIVER_CLASS_PATH_KEY,
    DRIVER_CONTAINER_IMAGE_KEY,
    DRIVER_CORES_KEY,
    DRIVER_LIMIT_CORES_KEY,
    DRIVER_MEMORY_KEY,
    DRIVER_MEMORY_OVERHEAD_KEY,
    DRIVER_POD_NAME_KEY,
    ENV_PREFIX,
    IMAGE_PULL_SECRETS_KEY,
    MEMORY_OVERHEAD_FACTOR,
    MEMORY_OVERHEAD_FACTOR_KEY,
    ROOT_LOGGER,
    SSL_SECRET_PREFIX_KEY,
    TICKET_SECRET_KEY_KEY,
    TICKET_SECRET_PREFIX_KEY,
)
from .exceptions import (
    InvalidConfigurationError,
    MissingRequiredConfigurationError,
)
from .models.kubernetes import PullPolicy
from .units import memory_to_mib, validate_cpu

__all__ = [
    "Config",
    "DriverConfig",
    "SparkConf",
]


class SparkConf(Mapping[str, str]):
    """Immutable snapshot of Spark configuration properties.

    Modifying methods return a new snapshot and leave the original untouched,
    so a configuration handed to a pipeline step is never changed behind the
    caller's back.

    Parameters
    ----------
    settings
        Initial configuration properties. Values are converted to strings.
    """

    def __init__(self, settings: Mapping[str, Any] | None = None) -> None:
        self._settings = {k: str(v) for k, v in (settings or {}).items()}

    def __getitem__(self, key: str) -> str:
        return self._settings[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._settings)

    def __len__(self) -> int:
        return len(self._settings)

    def __repr__(self) -> str:
        return f"SparkConf({self._settings!r})"

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Load configuration from a file.

        Files ending in ``.yaml`` or ``.yml`` must contain a flat mapping of
        property names to values. Anything else is parsed in the format of
        :file:`spark-defaults.conf`: one property per line, with the name and
        value separated by whitespace or ``=``, and ``#`` starting a comment.

        Parameters
        ----------
        path
            Path to the configuration file.

        Returns
        -------
        SparkConf
            The corresponding configuration.

        Raises
        ------
        ValueError
            Raised if the file is not in a recognized format.
        """
        if path.suffix in (".yaml", ".yml"):
            with path.open("r") as f:
                data = yaml.safe_load(f) or {}
            if not isinstance(data, dict):
                raise ValueError(f"{path} does not contain a mapping")
            return cls(data)

        settings = {}
        for line in path.read_text().splitlines():
            line = line.strip()
            if not line or line.startswith("#"):
                continue
            if match := re.match(r"(\S+?)(?:\s*=\s*|\s+)(.*)$", line):
                settings[match.group(1)] = match.group(2).strip()
            else:
                settings[line] = ""
        return cls(settings)

    def clone(self) -> SparkConf:
        """Return an independent copy of this configuration."""
        return SparkConf(self._settings)

    def get_all_with_prefix(self, prefix: str) -> list[tuple[str, str]]:
        """Find all properties whose names start with a prefix.

        Results are sorted by property name so that the output does not
        depend on the order in which properties were loaded.

        Parameters
        ----------
        prefix
            Prefix to match.

        Returns
        -------
        list of tuple
            Pairs of the property name with the prefix stripped and the
            property value.
        """
        return sorted(
            (k.removeprefix(prefix), v)
            for k, v in self._settings.items()
            if k.startswith(prefix)
        )

    def set(self, key: str, value: str) -> SparkConf:
        """Return a copy of the configuration with a property set."""
        settings = self._settings.copy()
        settings[key] = str(value)
        return SparkConf(settings)

    def set_if_missing(self, key: str, value: str) -> SparkConf:
        """Return a copy of the configuration with a property defaulted."""
        if key in self._settings:
            return self.clone()
        return self.set(key, value)

    def to_dict(self) -> dict[str, str]:
        """Return the properties as a new dictionary."""
        return self._settings.copy()


def _split_pull_secrets(v: Any) -> Any:
    """Pydantic validator that splits a comma-separated secret list."""
    if isinstance(v, str):
        return [s.strip() for s in v.split(",") if s.strip()]
    return v


def _validate_memory(v: str) -> str:
    """Pydantic validator for Spark memory strings."""
    if memory_to_mib(v) <= 0:
        raise ValueError("Memory must be positive")
    return v


class DriverConfig(BaseModel):
    """Every Spark setting consumed by the basic driver step.

    Each field is aliased to its Spark property name, so this model is the
    single place that records which settings are required, which are
    optional, and what the defaults are. Construct it with `from_spark_conf`
    rather than directly so that errors are reported against Spark keys.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    pod_name: Annotated[
        str | None,
        Field(
            title="Driver pod name",
            description="If not set, derived from the resource name prefix",
            alias=DRIVER_POD_NAME_KEY,
        ),
    ] = None

    image: Annotated[
        str,
        Field(
            title="Driver container image",
            description=(
                f"Falls back to {CONTAINER_IMAGE_KEY} if not set. There is no"
                " default."
            ),
            examples=["docker.io/apache/spark:3.5.1"],
            alias=DRIVER_CONTAINER_IMAGE_KEY,
            min_length=1,
        ),
    ]

    image_pull_secrets: Annotated[
        list[str],
        Field(
            title="Image pull secrets",
            description="Comma-separated names of Kubernetes pull secrets",
            alias=IMAGE_PULL_SECRETS_KEY,
        ),
        BeforeValidator(_split_pull_secrets),
    ] = []

    cores: Annotated[
        str,
        Field(
            title="Driver CPU request",
            description="Kubernetes CPU quantity, passed through unmodified",
            examples=["1", "0.5", "500m"],
            alias=DRIVER_CORES_KEY,
        ),
        AfterValidator(validate_cpu),
    ] = "1"

    limit_cores: Annotated[
        str | None,
        Field(
            title="Driver CPU limit",
            description="If not set, no CPU limit is imposed",
            alias=DRIVER_LIMIT_CORES_KEY,
        ),
        AfterValidator(lambda v: None if v is None else validate_cpu(v)),
    ] = None

    memory: Annotated[
        str,
        Field(
            title="Driver memory",
            description="JVM-style memory string, such as 512m or 2g",
            examples=["1g"],
            alias=DRIVER_MEMORY_KEY,
        ),
        AfterValidator(_validate_memory),
    ] = "1g"

    memory_overhead_mib: Annotated[
        int | None,
        Field(
            title="Driver memory overhead",
            description=(
                "Used verbatim if set. Otherwise computed from the driver"
                " memory and the overhead factor."
            ),
            alias=DRIVER_MEMORY_OVERHEAD_KEY,
            ge=0,
        ),
        BeforeValidator(lambda v: None if v is None else memory_to_mib(v)),
    ] = None

    memory_overhead_factor: Annotated[
        float,
        Field(
            title="Memory overhead factor",
            description="Fraction of driver memory reserved as overhead",
            alias=MEMORY_OVERHEAD_FACTOR_KEY,
            ge=0,
        ),
    ] = MEMORY_OVERHEAD_FACTOR

    extra_class_path: Annotated[
        str | None,
        Field(
            title="Extra driver class path",
            alias=DRIVER_CLASS_PATH_KEY,
        ),
    ] = None

    cluster_config_map: Annotated[
        str,
        Field(
            title="Cluster ConfigMap",
            description="Imported in full into the driver environment",
            alias=CLUSTER_CONFIGMAP_KEY,
        ),
    ] = "mapr-cluster-configmap"

    cluster_user_secrets: Annotated[
        str,
        Field(
            title="Cluster user Secret",
            description="Imported in full into the driver environment",
            alias=CLUSTER_USER_SECRETS_KEY,
        ),
    ] = "mapr-user-secrets"

    ticket_secret_name: Annotated[
        str,
        Field(
            title="Ticket secret name",
            description="Name of the driver secret holding the user ticket",
            alias=TICKET_SECRET_PREFIX_KEY,
        ),
    ] = "mapr-ticket-secret"

    ticket_file_name: Annotated[
        str,
        Field(
            title="Ticket file name",
            description="File within the ticket secret mount",
            alias=TICKET_SECRET_KEY_KEY,
        ),
    ] = "CONTAINER_TICKET"

    ssl_secret_name: Annotated[
        str,
        Field(
            title="SSL secret name",
            description="Name of the driver secret holding SSL material",
            alias=SSL_SECRET_PREFIX_KEY,
        ),
    ] = "mapr-ssl-secret"

    user_name: Annotated[
        str | None,
        Field(
            title="Container user name",
            description="Overrides the name of the submitting user",
            alias=CONTAINER_USER_NAME_KEY,
        ),
    ] = None

    user_id: Annotated[
        str | None,
        Field(
            title="Container user ID",
            description="Overrides the UID of the submitting user",
            alias=CONTAINER_USER_ID_KEY,
        ),
    ] = None

    @classmethod
    def from_spark_conf(cls, conf: SparkConf) -> Self:
        """Resolve the driver settings from a Spark configuration.

        Parameters
        ----------
        conf
            Spark configuration.

        Returns
        -------
        DriverConfig
            Resolved driver settings.

        Raises
        ------
        InvalidConfigurationError
            Raised if a setting has an unusable value.
        MissingRequiredConfigurationError
            Raised if no driver container image is configured.
        """
        data = conf.to_dict()
        if DRIVER_CONTAINER_IMAGE_KEY not in data:
            if not data.get(CONTAINER_IMAGE_KEY):
                raise MissingRequiredConfigurationError(
                    DRIVER_CONTAINER_IMAGE_KEY, "driver container image"
                )
            data[DRIVER_CONTAINER_IMAGE_KEY] = data[CONTAINER_IMAGE_KEY]
        elif not data[DRIVER_CONTAINER_IMAGE_KEY]:
            raise MissingRequiredConfigurationError(
                DRIVER_CONTAINER_IMAGE_KEY, "driver container image"
            )
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            error = e.errors()[0]
            key = str(error["loc"][0]) if error["loc"] else "unknown"
            value = data.get(key, "")
            raise InvalidConfigurationError(key, value, error["msg"]) from e

    @property
    def memory_mib(self) -> int:
        """Configured driver memory in MiB."""
        return memory_to_mib(self.memory)


class EnvFirstSettings(BaseSettings):
    """Base class for Pydantic settings with environment overrides.

    Classes that inherit from this base class will prioritize environment
    variables over arguments to the class constructor.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX, extra="forbid", validate_by_name=True
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,
        file_secret_settings: PydanticBaseSettingsSource,
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        """Override the sources of settings.

        Deactivate :file:`.env` and secret file support. Allow environment
        variables to override init parameters, since init parameters come
        from the YAML configuration file and we want environment variables to
        take precedence.
        """
        return (env_settings, init_settings)


class Config(EnvFirstSettings):
    """Settings for the kubespark tooling itself."""

    debug: Annotated[
        bool,
        Field(
            title="Show debug output and log style",
            description=(
                "If True, then log level will be set to debug and output"
                " will be non-structured and human-readable."
            ),
        ),
    ] = False

    image_pull_policy: Annotated[
        PullPolicy,
        Field(
            title="Driver image pull policy",
            validation_alias=AliasChoices(
                ENV_PREFIX + "IMAGE_PULL_POLICY", "imagePullPolicy"
            ),
        ),
    ] = PullPolicy.IF_NOT_PRESENT

    log_profile: Annotated[
        Profile,
        Field(
            title="Logging profile",
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_PROFILE", "logProfile"
            ),
        ),
    ] = Profile.production

    log_level: Annotated[
        LogLevel,
        Field(
            title="Log level",
            validation_alias=AliasChoices(
                ENV_PREFIX + "LOG_LEVEL", "logLevel"
            ),
        ),
    ] = LogLevel.INFO

    @classmethod
    def from_file(cls, path: Path) -> Self:
        """Construct the configuration from a YAML file.

        Parameters
        ----------
        path
            Path to the configuration file in YAML.

        Returns
        -------
        Config
            The corresponding configuration.
        """
        with path.open("r") as f:
            return cls.model_validate(yaml.safe_load(f) or {})

    def configure_logging(self) -> None:
        """Configure logging based on the tool configuration."""
        if self.debug:
            log_level = LogLevel.DEBUG
            log_profile = Profile.development
        else:
            log_level = self.log_level
            log_profile = self.log_profile
        configure_logging(
            profile=log_profile, log_level=log_level, name=ROOT_LOGGER
        )
