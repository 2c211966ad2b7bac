"""Basic configuration of the Spark driver pod and container."""

from __future__ import annotations

import copy

from kubernetes_asyncio.client import (
    V1Container,
    V1LocalObjectReference,
    V1ObjectMeta,
    V1Pod,
    V1PodSpec,
)
from structlog.stdlib import BoundLogger

from ...config import DriverConfig, SparkConf
from ...constants import (
    APP_ID_KEY,
    DRIVER_ARGUMENT,
    DRIVER_CONTAINER_NAME,
    DRIVER_POD_NAME_KEY,
    DRIVER_RESTART_POLICY,
    EXECUTOR_POD_NAME_PREFIX_KEY,
    MEMORY_OVERHEAD_MIN_MIB,
)
from ...models.kubernetes import PullPolicy
from ...models.resources import DriverResources
from ...models.spec import DriverSpecification
from ..identity import IdentityResolver, validate_identity
from .environment import DriverEnvironment, EnvironmentAssembler
from .resources import compute_driver_resources

__all__ = ["BasicDriverConfigurationStep"]


class BasicDriverConfigurationStep:
    """Performs basic configuration of the driver pod.

    Sets the driver container's name, image, environment, and resources, and
    the pod's name, metadata, and scheduling hints. Everything else already
    present in the pod and container templates is preserved.

    The step is not idempotent. Applying it twice appends the environment
    variables, imports, and role argument a second time.

    Parameters
    ----------
    kubernetes_app_id
        Unique ID of the application, stored as ``spark.app.id``.
    resource_name_prefix
        Prefix for the names of Kubernetes resources of this application.
    driver_labels
        Labels to add to the driver pod.
    image_pull_policy
        Pull policy for the driver image.
    app_name
        Display name of the application.
    main_class
        Main class of the application.
    app_args
        Arguments to pass to the application.
    identity_resolver
        Source of the identity of the submitting user.
    logger
        Logger to use.
    environment
        Assembler for the environment, or `None` to use the default secret
        providers.
    """

    def __init__(
        self,
        *,
        kubernetes_app_id: str,
        resource_name_prefix: str,
        driver_labels: dict[str, str],
        image_pull_policy: PullPolicy,
        app_name: str,
        main_class: str,
        app_args: list[str],
        identity_resolver: IdentityResolver,
        logger: BoundLogger,
        environment: EnvironmentAssembler | None = None,
    ) -> None:
        self._app_id = kubernetes_app_id
        self._resource_name_prefix = resource_name_prefix
        self._driver_labels = dict(driver_labels)
        self._image_pull_policy = image_pull_policy
        self._app_name = app_name
        self._main_class = main_class
        self._app_args = list(app_args)
        self._identity_resolver = identity_resolver
        self._environment = environment or EnvironmentAssembler()
        self._logger = logger.bind(step="basic-driver", app_id=self._app_id)

    def configure_driver(
        self, spec: DriverSpecification
    ) -> DriverSpecification:
        """Apply the basic driver configuration.

        Parameters
        ----------
        spec
            Specification produced by the previous steps. It is not modified.

        Returns
        -------
        DriverSpecification
            New specification with the driver configuration applied.

        Raises
        ------
        IdentityResolutionError
            Raised if the UID or group IDs of the user could not be found.
        InvalidConfigurationError
            Raised if a driver setting has an unusable value.
        MissingRequiredConfigurationError
            Raised if no driver container image is configured.
        ReservedKeyCollisionError
            Raised if a user-supplied annotation uses a reserved key.
        """
        config = DriverConfig.from_spark_conf(spec.conf)

        # Reject reserved annotations before asking anything of the
        # identity resolver.
        self._environment.build_annotations(spec.conf, self._app_name)
        identity = self._identity_resolver.resolve(config)
        validate_identity(identity)
        environment = self._environment.assemble(
            spec.conf,
            config,
            identity,
            app_name=self._app_name,
            main_class=self._main_class,
            app_args=self._app_args,
            labels=self._driver_labels,
        )
        resources = compute_driver_resources(
            driver_memory_mib=config.memory_mib,
            overhead_override=config.memory_overhead_mib,
            overhead_factor=config.memory_overhead_factor,
            overhead_min_mib=MEMORY_OVERHEAD_MIN_MIB,
            cpu_cores=config.cores,
            cpu_limit=config.limit_cores,
        )
        pod_name = config.pod_name or f"{self._resource_name_prefix}-driver"

        container = self._build_container(
            spec.container, config, environment, resources
        )
        pod = self._build_pod(spec.pod, pod_name, config, environment)
        conf = self._build_conf(spec.conf, pod_name)
        self._logger.debug(
            "Configured driver",
            pod=pod_name,
            image=config.image,
            user=identity.username,
            cpu=resources.request_cpu,
            memory=resources.request_memory,
            memory_limit=resources.limit_memory,
        )
        return DriverSpecification(pod=pod, container=container, conf=conf)

    def _build_container(
        self,
        template: V1Container,
        config: DriverConfig,
        environment: DriverEnvironment,
        resources: DriverResources,
    ) -> V1Container:
        """Patch the driver container template."""
        container = copy.deepcopy(template)
        container.name = DRIVER_CONTAINER_NAME
        container.image = config.image
        container.image_pull_policy = self._image_pull_policy.value
        container.env = [*(container.env or []), *environment.env]
        container.env_from = [
            *(container.env_from or []),
            *environment.env_from,
        ]
        container.resources = resources.to_kubernetes()
        container.args = [*(container.args or []), DRIVER_ARGUMENT]
        return container

    def _build_pod(
        self,
        template: V1Pod,
        pod_name: str,
        config: DriverConfig,
        environment: DriverEnvironment,
    ) -> V1Pod:
        """Patch the driver pod template."""
        pod = copy.deepcopy(template)
        if pod.metadata is None:
            pod.metadata = V1ObjectMeta()
        pod.metadata.name = pod_name
        pod.metadata.labels = {
            **(pod.metadata.labels or {}),
            **environment.labels,
        }
        pod.metadata.annotations = {
            **(pod.metadata.annotations or {}),
            **environment.annotations,
        }

        if pod.spec is None:
            pod.spec = V1PodSpec(containers=[])
        pod.spec.restart_policy = DRIVER_RESTART_POLICY
        pod.spec.node_selector = environment.node_selector
        pod.spec.image_pull_secrets = [
            V1LocalObjectReference(name=s) for s in config.image_pull_secrets
        ]
        return pod

    def _build_conf(self, conf: SparkConf, pod_name: str) -> SparkConf:
        """Record settings later steps need in the configuration."""
        return (
            conf.set_if_missing(DRIVER_POD_NAME_KEY, pod_name)
            .set(APP_ID_KEY, self._app_id)
            .set(EXECUTOR_POD_NAME_PREFIX_KEY, self._resource_name_prefix)
        )
