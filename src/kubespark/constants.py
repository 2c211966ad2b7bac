"""Global constants."""

__all__ = [
    "APP_ID_KEY",
    "APP_NAME_KEY",
    "CLUSTER_CONFIGMAP_KEY",
    "CLUSTER_ENV_PREFIX",
    "CLUSTER_USER_SECRETS_KEY",
    "CONTAINER_IMAGE_KEY",
    "CONTAINER_USER_ID_KEY",
    "CONTAINER_USER_NAME_KEY",
    "DRIVER_ANNOTATION_PREFIX",
    "DRIVER_ARGUMENT",
    "DRIVER_BIND_ADDRESS_FIELD",
    "DRIVER_CLASS_PATH_KEY",
    "DRIVER_CONTAINER_IMAGE_KEY",
    "DRIVER_CONTAINER_NAME",
    "DRIVER_CORES_KEY",
    "DRIVER_ENV_PREFIX",
    "DRIVER_LIMIT_CORES_KEY",
    "DRIVER_MEMORY_KEY",
    "DRIVER_MEMORY_OVERHEAD_KEY",
    "DRIVER_POD_NAME_KEY",
    "DRIVER_RESTART_POLICY",
    "DRIVER_SECRETS_PREFIX",
    "ENV_CLASSPATH",
    "ENV_CURRENT_USER",
    "ENV_CURRENT_USER_ID",
    "ENV_DRIVER_ARGS",
    "ENV_DRIVER_BIND_ADDRESS",
    "ENV_DRIVER_MAIN_CLASS",
    "ENV_DRIVER_MEMORY",
    "ENV_PREFIX",
    "ENV_SSL_LOCATION",
    "ENV_TICKETFILE_LOCATION",
    "ENV_USER_GROUPS",
    "ENV_USER_GROUPS_IDS",
    "EXECUTOR_POD_NAME_PREFIX_KEY",
    "IMAGE_PULL_SECRETS_KEY",
    "MEMORY_OVERHEAD_FACTOR",
    "MEMORY_OVERHEAD_FACTOR_KEY",
    "MEMORY_OVERHEAD_MIN_MIB",
    "NODE_SELECTOR_PREFIX",
    "ROOT_LOGGER",
    "SPARK_APP_ID_LABEL",
    "SPARK_APP_NAME_ANNOTATION",
    "SPARK_ROLE_LABEL",
    "SSL_SECRET_PREFIX_KEY",
    "TICKET_SECRET_KEY_KEY",
    "TICKET_SECRET_PREFIX_KEY",
]

ENV_PREFIX = "KUBESPARK_"
"""Prefix for environment variables that override tool settings."""

ROOT_LOGGER = "kubespark"
"""Name of the logger used throughout the package."""

# Spark configuration keys read by the driver step.

APP_ID_KEY = "spark.app.id"
APP_NAME_KEY = "spark.app.name"
CLUSTER_CONFIGMAP_KEY = "spark.mapr.cluster.configMap"
CLUSTER_ENV_PREFIX = "spark.kubernetes.clusterEnv."
CLUSTER_USER_SECRETS_KEY = "spark.mapr.cluster.userSecrets"
CONTAINER_IMAGE_KEY = "spark.kubernetes.container.image"
CONTAINER_USER_ID_KEY = "spark.mapr.user.id"
CONTAINER_USER_NAME_KEY = "spark.mapr.user.name"
DRIVER_ANNOTATION_PREFIX = "spark.kubernetes.driver.annotation."
DRIVER_CLASS_PATH_KEY = "spark.driver.extraClassPath"
DRIVER_CONTAINER_IMAGE_KEY = "spark.kubernetes.driver.container.image"
DRIVER_CORES_KEY = "spark.driver.cores"
DRIVER_ENV_PREFIX = "spark.kubernetes.driverEnv."
DRIVER_LIMIT_CORES_KEY = "spark.kubernetes.driver.limit.cores"
DRIVER_MEMORY_KEY = "spark.driver.memory"
DRIVER_MEMORY_OVERHEAD_KEY = "spark.driver.memoryOverhead"
DRIVER_POD_NAME_KEY = "spark.kubernetes.driver.pod.name"
DRIVER_SECRETS_PREFIX = "spark.kubernetes.driver.secrets."
EXECUTOR_POD_NAME_PREFIX_KEY = "spark.kubernetes.executor.podNamePrefix"
IMAGE_PULL_SECRETS_KEY = "spark.kubernetes.container.image.pullSecrets"
MEMORY_OVERHEAD_FACTOR_KEY = "spark.kubernetes.memoryOverheadFactor"
NODE_SELECTOR_PREFIX = "spark.kubernetes.node.selector."
SSL_SECRET_PREFIX_KEY = "spark.mapr.ssl.secret.prefix"
TICKET_SECRET_KEY_KEY = "spark.mapr.user.secret.key"
TICKET_SECRET_PREFIX_KEY = "spark.mapr.user.secret"

# Environment variables set in the driver container.

ENV_CLASSPATH = "SPARK_CLASSPATH"
ENV_CURRENT_USER = "SPARK_USER"
ENV_CURRENT_USER_ID = "SPARK_USER_ID"
ENV_DRIVER_ARGS = "SPARK_DRIVER_ARGS"
ENV_DRIVER_BIND_ADDRESS = "SPARK_DRIVER_BIND_ADDRESS"
ENV_DRIVER_MAIN_CLASS = "SPARK_DRIVER_CLASS"
ENV_DRIVER_MEMORY = "SPARK_DRIVER_MEMORY"
ENV_SSL_LOCATION = "MAPR_SSL_LOCATION"
ENV_TICKETFILE_LOCATION = "MAPR_TICKETFILE_LOCATION"
ENV_USER_GROUPS = "SPARK_USER_GROUPS"
ENV_USER_GROUPS_IDS = "SPARK_USER_GROUPS_IDS"

DRIVER_ARGUMENT = "driver"
"""Positional argument telling the container entrypoint to run a driver."""

DRIVER_BIND_ADDRESS_FIELD = "status.podIP"
"""Downward API field the driver binds its RPC endpoint to."""

DRIVER_CONTAINER_NAME = "spark-kubernetes-driver"
"""Name of the driver container within the driver pod."""

DRIVER_RESTART_POLICY = "Never"
"""Restart policy of the driver pod.

The driver runs to completion exactly once. A failed driver is reported to
the submitter rather than restarted in place.
"""

MEMORY_OVERHEAD_FACTOR = 0.10
"""Default fraction of driver memory reserved as non-heap overhead."""

MEMORY_OVERHEAD_MIN_MIB = 384
"""Floor for the computed memory overhead, in MiB."""

SPARK_APP_NAME_ANNOTATION = "spark-app-name"
"""Annotation holding the application display name.

Only the driver step may set this key. User-supplied driver annotations
containing it are rejected.
"""

SPARK_APP_ID_LABEL = "spark-app-selector"
"""Label holding the application ID on every pod of the application."""

SPARK_ROLE_LABEL = "spark-role"
"""Label distinguishing the driver pod from executor pods."""
