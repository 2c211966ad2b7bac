"""Tests for Spark configuration handling and the driver settings schema."""

from __future__ import annotations

from pathlib import Path

import pytest
from safir.logging import LogLevel

from kubespark.config import Config, DriverConfig, SparkConf
from kubespark.exceptions import (
    InvalidConfigurationError,
    MissingRequiredConfigurationError,
)
from kubespark.models.kubernetes import PullPolicy


def test_spark_conf_copy_on_write() -> None:
    conf = SparkConf({"a": "1", "b": 2})
    assert conf["b"] == "2"

    updated = conf.set("a", "changed")
    assert updated["a"] == "changed"
    assert conf["a"] == "1"

    defaulted = conf.set_if_missing("a", "other").set_if_missing("c", "3")
    assert defaulted.to_dict() == {"a": "1", "b": "2", "c": "3"}
    assert "c" not in conf

    clone = conf.clone()
    assert clone == conf
    assert clone is not conf


def test_get_all_with_prefix() -> None:
    conf = SparkConf(
        {
            "spark.kubernetes.driverEnv.ZED": "z",
            "spark.kubernetes.driverEnv.ALPHA": "a",
            "spark.kubernetes.executorEnv.OTHER": "o",
        }
    )
    assert conf.get_all_with_prefix("spark.kubernetes.driverEnv.") == [
        ("ALPHA", "a"),
        ("ZED", "z"),
    ]
    assert conf.get_all_with_prefix("spark.nothing.") == []


def test_spark_conf_from_properties(tmp_path: Path) -> None:
    path = tmp_path / "spark-defaults.conf"
    path.write_text(
        "# Driver settings\n"
        "spark.driver.memory     2g\n"
        "spark.driver.cores=2\n"
        "\n"
        "spark.driver.extraJavaOptions -Dkey=value -Dother=1\n"
        "spark.kubernetes.driverEnv.EMPTY\n"
    )
    conf = SparkConf.from_file(path)
    assert conf.to_dict() == {
        "spark.driver.memory": "2g",
        "spark.driver.cores": "2",
        "spark.driver.extraJavaOptions": "-Dkey=value -Dother=1",
        "spark.kubernetes.driverEnv.EMPTY": "",
    }


def test_spark_conf_from_yaml(tmp_path: Path) -> None:
    path = tmp_path / "spark.yaml"
    path.write_text("spark.driver.memory: 2g\nspark.driver.cores: 2\n")
    conf = SparkConf.from_file(path)
    assert conf.to_dict() == {
        "spark.driver.memory": "2g",
        "spark.driver.cores": "2",
    }

    path.write_text("- not\n- a mapping\n")
    with pytest.raises(ValueError, match="mapping"):
        SparkConf.from_file(path)


def test_driver_config_defaults(spark_conf: SparkConf) -> None:
    config = DriverConfig.from_spark_conf(spark_conf)
    assert config.image == "registry.example.com/spark/spark-py:3.5.1"
    assert config.pod_name is None
    assert config.image_pull_secrets == []
    assert config.cores == "1"
    assert config.limit_cores is None
    assert config.memory == "1g"
    assert config.memory_mib == 1024
    assert config.memory_overhead_mib is None
    assert config.memory_overhead_factor == 0.1
    assert config.extra_class_path is None
    assert config.cluster_config_map == "mapr-cluster-configmap"
    assert config.cluster_user_secrets == "mapr-user-secrets"
    assert config.user_name is None
    assert config.user_id is None


def test_driver_config_settings(spark_conf: SparkConf) -> None:
    conf = (
        spark_conf.set("spark.kubernetes.driver.container.image", "driver")
        .set("spark.kubernetes.container.image.pullSecrets", "one, two,,")
        .set("spark.driver.cores", "500m")
        .set("spark.kubernetes.driver.limit.cores", "2")
        .set("spark.driver.memory", "4g")
        .set("spark.driver.memoryOverhead", "1g")
        .set("spark.mapr.user.name", "mapr")
    )
    config = DriverConfig.from_spark_conf(conf)
    assert config.image == "driver"
    assert config.image_pull_secrets == ["one", "two"]
    assert config.cores == "500m"
    assert config.limit_cores == "2"
    assert config.memory_mib == 4096
    assert config.memory_overhead_mib == 1024
    assert config.user_name == "mapr"


def test_missing_image() -> None:
    with pytest.raises(MissingRequiredConfigurationError) as excinfo:
        DriverConfig.from_spark_conf(SparkConf({"spark.driver.cores": "1"}))
    assert excinfo.value.key == "spark.kubernetes.driver.container.image"
    assert "driver container image" in str(excinfo.value)

    conf = SparkConf({"spark.kubernetes.driver.container.image": ""})
    with pytest.raises(MissingRequiredConfigurationError):
        DriverConfig.from_spark_conf(conf)


def test_invalid_settings(spark_conf: SparkConf) -> None:
    conf = spark_conf.set("spark.driver.cores", "lots")
    with pytest.raises(InvalidConfigurationError) as excinfo:
        DriverConfig.from_spark_conf(conf)
    assert excinfo.value.key == "spark.driver.cores"
    assert excinfo.value.value == "lots"

    conf = spark_conf.set("spark.driver.memory", "0")
    with pytest.raises(InvalidConfigurationError) as excinfo:
        DriverConfig.from_spark_conf(conf)
    assert excinfo.value.key == "spark.driver.memory"

    conf = spark_conf.set("spark.driver.memoryOverhead", "big")
    with pytest.raises(InvalidConfigurationError) as excinfo:
        DriverConfig.from_spark_conf(conf)
    assert excinfo.value.key == "spark.driver.memoryOverhead"


def test_config_env_override(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    path = tmp_path / "config.yaml"
    path.write_text("imagePullPolicy: Always\nlogLevel: WARNING\n")
    config = Config.from_file(path)
    assert config.image_pull_policy == PullPolicy.ALWAYS
    assert config.log_level == LogLevel.WARNING
    assert not config.debug

    monkeypatch.setenv("KUBESPARK_IMAGE_PULL_POLICY", "Never")
    monkeypatch.setenv("KUBESPARK_DEBUG", "true")
    config = Config.from_file(path)
    assert config.image_pull_policy == PullPolicy.NEVER
    assert config.debug


def test_bare_field_names_ignored(spark_conf: SparkConf) -> None:
    conf = (
        spark_conf.set("cores", "lots")
        .set("memory", "0")
        .set("image", "other")
        .set("user_id", "42")
    )
    config = DriverConfig.from_spark_conf(conf)
    assert config.cores == "1"
    assert config.memory == "1g"
    assert config.image == "registry.example.com/spark/spark-py:3.5.1"
    assert config.user_id is None
