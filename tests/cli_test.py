"""Tests for the command-line interface."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml
from click.testing import CliRunner

from kubespark import cli
from kubespark.models.identity import Identity
from kubespark.services.identity import StaticIdentityResolver


@pytest.fixture(autouse=True)
def static_identity(
    identity: Identity, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(
        cli, "SystemIdentityResolver", lambda: StaticIdentityResolver(identity)
    )
    monkeypatch.setenv("KUBESPARK_LOG_LEVEL", "WARNING")


def test_driver_pod(tmp_path: Path) -> None:
    conf_path = tmp_path / "spark-defaults.conf"
    conf_path.write_text(
        "spark.app.name  Spark Pi\n"
        "spark.kubernetes.container.image  example/spark:3.5.1\n"
        "spark.driver.memory  512m\n"
    )
    runner = CliRunner()
    result = runner.invoke(
        cli.main,
        [
            "driver-pod",
            "-c",
            str(conf_path),
            "--main-class",
            "org.apache.spark.examples.SparkPi",
            "--app-id",
            "spark-0123456789abcdef",
            "--label",
            "team=data",
            "100",
        ],
        catch_exceptions=False,
    )
    assert result.exit_code == 0

    pod = yaml.safe_load(result.stdout)
    assert pod["apiVersion"] == "v1"
    assert pod["kind"] == "Pod"
    assert pod["metadata"]["name"] == "spark-pi-89abcdef-driver"
    assert pod["metadata"]["labels"] == {
        "team": "data",
        "spark-app-selector": "spark-0123456789abcdef",
        "spark-role": "driver",
    }
    assert pod["metadata"]["annotations"] == {"spark-app-name": "Spark Pi"}
    assert pod["spec"]["restartPolicy"] == "Never"

    container = pod["spec"]["containers"][0]
    assert container["name"] == "spark-kubernetes-driver"
    assert container["image"] == "example/spark:3.5.1"
    assert container["imagePullPolicy"] == "IfNotPresent"
    assert container["args"] == ["driver"]
    assert container["resources"] == {
        "limits": {"memory": "896Mi"},
        "requests": {"cpu": "1", "memory": "512Mi"},
    }
    env = {e["name"]: e for e in container["env"]}
    assert env["SPARK_DRIVER_CLASS"]["value"] == (
        "org.apache.spark.examples.SparkPi"
    )
    assert env["SPARK_DRIVER_ARGS"]["value"] == "100"
    assert env["SPARK_DRIVER_BIND_ADDRESS"] == {
        "name": "SPARK_DRIVER_BIND_ADDRESS",
        "valueFrom": {
            "fieldRef": {"apiVersion": "v1", "fieldPath": "status.podIP"}
        },
    }


def test_pull_policy_config(tmp_path: Path) -> None:
    conf_path = tmp_path / "spark.yaml"
    conf_path.write_text("spark.kubernetes.container.image: example/spark\n")
    config_path = tmp_path / "config.yaml"
    config_path.write_text("imagePullPolicy: Always\n")
    runner = CliRunner()
    result = runner.invoke(
        cli.main,
        [
            "driver-pod",
            "-c",
            str(conf_path),
            "--config-file",
            str(config_path),
            "--main-class",
            "App",
        ],
        catch_exceptions=False,
    )
    assert result.exit_code == 0
    pod = yaml.safe_load(result.stdout)
    container = pod["spec"]["containers"][0]
    assert container["imagePullPolicy"] == "Always"
    assert pod["metadata"]["annotations"] == {"spark-app-name": "App"}
    assert pod["metadata"]["name"].startswith("app-")


def test_missing_image(tmp_path: Path) -> None:
    conf_path = tmp_path / "spark-defaults.conf"
    conf_path.write_text("spark.app.name spark-pi\n")
    runner = CliRunner()
    result = runner.invoke(
        cli.main,
        ["driver-pod", "-c", str(conf_path), "--main-class", "App"],
    )
    assert result.exit_code == 1
    assert "spark.kubernetes.driver.container.image" in result.output


def test_bad_label(tmp_path: Path) -> None:
    conf_path = tmp_path / "spark-defaults.conf"
    conf_path.write_text("spark.kubernetes.container.image example\n")
    runner = CliRunner()
    result = runner.invoke(
        cli.main,
        [
            "driver-pod",
            "-c",
            str(conf_path),
            "--main-class",
            "App",
            "--label",
            "novalue",
        ],
    )
    assert result.exit_code == 2
    assert "key=value" in result.output


def test_bad_spark_conf(tmp_path: Path) -> None:
    runner = CliRunner()
    conf_path = tmp_path / "spark.yaml"
    for content in ("- not\n- a mapping\n", "key: [unclosed\n"):
        conf_path.write_text(content)
        result = runner.invoke(
            cli.main,
            ["driver-pod", "-c", str(conf_path), "--main-class", "App"],
        )
        assert result.exit_code == 1
        assert "Cannot load Spark configuration" in result.output
        assert not isinstance(result.exception, (ValueError, TypeError))
