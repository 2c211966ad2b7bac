"""Construction of the driver environment, annotations, and node selector."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from kubernetes_asyncio.client import (
    V1ConfigMapEnvSource,
    V1EnvFromSource,
    V1EnvVar,
    V1EnvVarSource,
    V1ObjectFieldSelector,
    V1SecretEnvSource,
)

from ...config import DriverConfig, SparkConf
from ...constants import (
    CLUSTER_ENV_PREFIX,
    DRIVER_ANNOTATION_PREFIX,
    DRIVER_BIND_ADDRESS_FIELD,
    DRIVER_ENV_PREFIX,
    DRIVER_SECRETS_PREFIX,
    ENV_CLASSPATH,
    ENV_CURRENT_USER,
    ENV_CURRENT_USER_ID,
    ENV_DRIVER_ARGS,
    ENV_DRIVER_BIND_ADDRESS,
    ENV_DRIVER_MAIN_CLASS,
    ENV_DRIVER_MEMORY,
    ENV_SSL_LOCATION,
    ENV_TICKETFILE_LOCATION,
    ENV_USER_GROUPS,
    ENV_USER_GROUPS_IDS,
    NODE_SELECTOR_PREFIX,
    SPARK_APP_NAME_ANNOTATION,
)
from ...exceptions import ReservedKeyCollisionError
from ...models.identity import Identity

__all__ = [
    "DEFAULT_SECRET_ENV_PROVIDERS",
    "DriverEnvironment",
    "EnvironmentAssembler",
    "SecretEnvProvider",
]


@dataclass(frozen=True)
class SecretEnvProvider:
    """Derives an environment variable from a mounted driver secret.

    Driver secrets are configured as
    :samp:`spark.kubernetes.driver.secrets.{name}={mount-path}`. For every
    configured secret whose name starts with the provider's secret name, the
    provider emits one variable whose value is computed from the mount path.
    """

    env_name: str
    """Name of the environment variable to set."""

    secret_name: Callable[[DriverConfig], str]
    """Returns the secret name to look for, given the driver settings."""

    value: Callable[[str, DriverConfig], str]
    """Returns the variable value, given the mount path and settings."""

    def build(self, conf: SparkConf, config: DriverConfig) -> list[V1EnvVar]:
        """Construct the environment variables for this secret.

        Parameters
        ----------
        conf
            Spark configuration holding the driver secret mounts.
        config
            Resolved driver settings.

        Returns
        -------
        list of kubernetes_asyncio.client.V1EnvVar
            One variable per matching secret mount, possibly none.
        """
        prefix = DRIVER_SECRETS_PREFIX + self.secret_name(config)
        return [
            V1EnvVar(name=self.env_name, value=self.value(path, config))
            for _, path in conf.get_all_with_prefix(prefix)
        ]


DEFAULT_SECRET_ENV_PROVIDERS = (
    SecretEnvProvider(
        env_name=ENV_TICKETFILE_LOCATION,
        secret_name=lambda c: c.ticket_secret_name,
        value=lambda path, c: f"{path}/{c.ticket_file_name}",
    ),
    SecretEnvProvider(
        env_name=ENV_SSL_LOCATION,
        secret_name=lambda c: c.ssl_secret_name,
        value=lambda path, c: path,
    ),
)
"""Secret-derived variables added to every driver, in order."""


@dataclass
class DriverEnvironment:
    """Everything the driver step derives from configuration and identity."""

    env: list[V1EnvVar]
    """Environment variables, in the order they must appear."""

    env_from: list[V1EnvFromSource]
    """Whole ConfigMaps and Secrets imported into the environment."""

    labels: dict[str, str]
    """Labels to add to the driver pod."""

    annotations: dict[str, str]
    """Annotations to add to the driver pod."""

    node_selector: dict[str, str]
    """Node selector for the driver pod."""


class EnvironmentAssembler:
    """Build the driver environment from its several sources.

    Variables are only ever appended. If two sources set a variable of the
    same name, both entries are kept and which one wins is up to the
    container runtime.

    Parameters
    ----------
    secret_providers
        Providers of secret-derived environment variables, in order.
    """

    def __init__(
        self,
        secret_providers: tuple[SecretEnvProvider, ...] = (
            DEFAULT_SECRET_ENV_PROVIDERS
        ),
    ) -> None:
        self._secret_providers = secret_providers

    def assemble(
        self,
        conf: SparkConf,
        config: DriverConfig,
        identity: Identity,
        *,
        app_name: str,
        main_class: str,
        app_args: list[str],
        labels: dict[str, str],
    ) -> DriverEnvironment:
        """Assemble the environment and pod metadata for the driver.

        Parameters
        ----------
        conf
            Spark configuration.
        config
            Resolved driver settings.
        identity
            Validated identity of the submitting user.
        app_name
            Application display name, stored in a reserved annotation.
        main_class
            Main class of the application.
        app_args
            Arguments to the application.
        labels
            Labels for the driver pod, passed through unchanged.

        Returns
        -------
        DriverEnvironment
            Derived environment and metadata.

        Raises
        ------
        ReservedKeyCollisionError
            Raised if a user-supplied annotation uses the reserved
            application name key.
        """
        annotations = self.build_annotations(conf, app_name)
        return DriverEnvironment(
            env=self.build_env(conf, config, identity, main_class, app_args),
            env_from=self.build_env_from(config),
            labels=dict(labels),
            annotations=annotations,
            node_selector=dict(conf.get_all_with_prefix(NODE_SELECTOR_PREFIX)),
        )

    def build_annotations(
        self, conf: SparkConf, app_name: str
    ) -> dict[str, str]:
        """Build the driver pod annotations.

        Raises
        ------
        ReservedKeyCollisionError
            Raised if a user-supplied annotation uses the reserved
            application name key.
        """
        annotations = dict(conf.get_all_with_prefix(DRIVER_ANNOTATION_PREFIX))
        if SPARK_APP_NAME_ANNOTATION in annotations:
            raise ReservedKeyCollisionError(SPARK_APP_NAME_ANNOTATION)
        annotations[SPARK_APP_NAME_ANNOTATION] = app_name
        return annotations

    def build_env(
        self,
        conf: SparkConf,
        config: DriverConfig,
        identity: Identity,
        main_class: str,
        app_args: list[str],
    ) -> list[V1EnvVar]:
        """Build the ordered list of driver environment variables."""
        env = []
        if config.extra_class_path:
            classpath = config.extra_class_path
            env.append(V1EnvVar(name=ENV_CLASSPATH, value=classpath))
        env.extend(
            V1EnvVar(name=k, value=v)
            for k, v in conf.get_all_with_prefix(DRIVER_ENV_PREFIX)
        )
        env.extend(
            V1EnvVar(name=k, value=v)
            for k, v in conf.get_all_with_prefix(CLUSTER_ENV_PREFIX)
        )
        for provider in self._secret_providers:
            env.extend(provider.build(conf, config))

        groups = " ".join(identity.group_names)
        group_ids = " ".join(identity.group_ids)
        env.extend(
            [
                V1EnvVar(name=ENV_CURRENT_USER, value=identity.username),
                V1EnvVar(name=ENV_USER_GROUPS, value=groups),
                V1EnvVar(name=ENV_CURRENT_USER_ID, value=identity.uid),
                V1EnvVar(name=ENV_USER_GROUPS_IDS, value=group_ids),
                V1EnvVar(name=ENV_DRIVER_MEMORY, value=config.memory),
                V1EnvVar(name=ENV_DRIVER_MAIN_CLASS, value=main_class),
                V1EnvVar(name=ENV_DRIVER_ARGS, value=" ".join(app_args)),
                V1EnvVar(
                    name=ENV_DRIVER_BIND_ADDRESS,
                    value_from=V1EnvVarSource(
                        field_ref=V1ObjectFieldSelector(
                            api_version="v1",
                            field_path=DRIVER_BIND_ADDRESS_FIELD,
                        )
                    ),
                ),
            ]
        )
        return env

    def build_env_from(self, config: DriverConfig) -> list[V1EnvFromSource]:
        """Build the bulk imports of the cluster ConfigMap and Secret."""
        return [
            V1EnvFromSource(
                config_map_ref=V1ConfigMapEnvSource(
                    name=config.cluster_config_map
                )
            ),
            V1EnvFromSource(
                secret_ref=V1SecretEnvSource(name=config.cluster_user_secrets)
            ),
        ]
