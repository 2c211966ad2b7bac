"""Command-line interface for building Spark driver pods."""

from __future__ import annotations

import uuid
from pathlib import Path

import click
import yaml
from safir.click import display_help
from structlog.stdlib import get_logger

from .config import Config, SparkConf
from .constants import (
    APP_NAME_KEY,
    ROOT_LOGGER,
    SPARK_APP_ID_LABEL,
    SPARK_ROLE_LABEL,
)
from .exceptions import KubesparkError
from .models.spec import DriverSpecification
from .services.builder.driver import BasicDriverConfigurationStep
from .services.identity import SystemIdentityResolver
from .services.steps import DriverStepPipeline
from .util import object_to_dict, sanitize_resource_name

__all__ = ["main"]


def _parse_labels(
    ctx: click.Context, param: click.Parameter, values: tuple[str, ...]
) -> dict[str, str]:
    """Parse repeated ``key=value`` label options."""
    labels = {}
    for value in values:
        key, sep, label = value.partition("=")
        if not sep or not key:
            raise click.BadParameter(f"{value!r} is not of the form key=value")
        labels[key] = label
    return labels


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(message="%(version)s")
def main() -> None:
    """Spark on Kubernetes driver pod builder."""


@main.command()
@click.argument("topic", default=None, required=False, nargs=1)
@click.argument("subtopic", default=None, required=False, nargs=1)
@click.pass_context
def help(ctx: click.Context, topic: str | None, subtopic: str | None) -> None:
    """Show help for any command."""
    display_help(main, ctx, topic, subtopic)


@main.command("driver-pod")
@click.option(
    "--spark-conf",
    "-c",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    required=True,
    help="Spark properties file (spark-defaults.conf format or YAML)",
)
@click.option(
    "--config-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Tool configuration file",
)
@click.option("--main-class", required=True, help="Application main class")
@click.option("--app-name", default=None, help="Application display name")
@click.option("--app-id", default=None, help="Application ID")
@click.option(
    "--label",
    "labels",
    multiple=True,
    callback=_parse_labels,
    help="Extra driver pod label as key=value (may be repeated)",
)
@click.option("--debug", "-d", is_flag=True, help="Enable debug logging")
@click.argument("app_args", nargs=-1)
def driver_pod(
    *,
    spark_conf: Path,
    config_file: Path | None,
    main_class: str,
    app_name: str | None,
    app_id: str | None,
    labels: dict[str, str],
    debug: bool,
    app_args: tuple[str, ...],
) -> None:
    """Print the driver pod for a Spark application as YAML."""
    config = Config.from_file(config_file) if config_file else Config()
    if debug:
        config.debug = debug
    config.configure_logging()
    logger = get_logger(ROOT_LOGGER)

    try:
        conf = SparkConf.from_file(spark_conf)
    except (ValueError, yaml.YAMLError) as e:
        msg = f"Cannot load Spark configuration from {spark_conf}: {e}"
        raise click.ClickException(msg) from e
    app_name = app_name or conf.get(APP_NAME_KEY) or main_class
    app_id = app_id or f"spark-{uuid.uuid4().hex}"
    prefix = f"{sanitize_resource_name(app_name)}-{app_id[-8:]}"
    driver_labels = {
        **labels,
        SPARK_APP_ID_LABEL: app_id,
        SPARK_ROLE_LABEL: "driver",
    }

    step = BasicDriverConfigurationStep(
        kubernetes_app_id=app_id,
        resource_name_prefix=prefix,
        driver_labels=driver_labels,
        image_pull_policy=config.image_pull_policy,
        app_name=app_name,
        main_class=main_class,
        app_args=list(app_args),
        identity_resolver=SystemIdentityResolver(),
        logger=logger,
    )
    pipeline = DriverStepPipeline([step], logger)
    try:
        spec = pipeline.run(DriverSpecification.initial(conf))
    except KubesparkError as e:
        raise click.ClickException(str(e)) from e
    pod = object_to_dict(spec.build_pod())
    click.echo(yaml.safe_dump(pod, sort_keys=False), nl=False)
