"""Construction of Spark driver pods for Kubernetes."""

from importlib.metadata import PackageNotFoundError, version

from .config import DriverConfig, SparkConf
from .models.spec import DriverSpecification
from .services.builder.driver import BasicDriverConfigurationStep

__all__ = [
    "BasicDriverConfigurationStep",
    "DriverConfig",
    "DriverSpecification",
    "SparkConf",
    "__version__",
]


__version__: str
"""The application version string (PEP 440 / SemVer compatible)."""

try:
    __version__ = version(__name__)
except PackageNotFoundError:
    # package is not installed
    __version__ = "0.0.0"
