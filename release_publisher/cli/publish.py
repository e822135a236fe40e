"""
Publish CLI command.

Runs the full release pipeline for the current CI build.
"""

from pathlib import Path
from typing import Optional

import click

from release_publisher.config import PublisherConfig
from release_publisher.errors import ConfigError
from release_publisher.main import run_publisher


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a YAML configuration file",
)
@click.option(
    "--skip-package",
    is_flag=True,
    default=False,
    help="Publish the artifacts already in the dist directory",
)
@click.option(
    "--dry-run",
    is_flag=True,
    default=False,
    help="List the assets that would be published without uploading",
)
@click.pass_context
def publish(
    ctx: click.Context,
    config_path: Optional[Path],
    skip_package: bool,
    dry_run: bool,
) -> None:
    """
    Publish the current build as a release.

    Exits successfully without publishing when the build is not on a
    publishable channel or its commit is not the release commit.

    Example:

        release-publisher publish
        release-publisher publish --skip-package --dry-run
    """
    try:
        config = PublisherConfig(config_path=config_path)
    except ConfigError as e:
        click.echo(
            click.style("Error: ", fg="red", bold=True) + str(e),
            err=True,
        )
        ctx.exit(1)

    exit_code = run_publisher(config, skip_package=skip_package, dry_run=dry_run)
    ctx.exit(exit_code)
