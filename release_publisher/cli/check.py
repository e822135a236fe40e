"""
Check CLI command.

Evaluates the release gate without packaging or uploading anything.
"""

from pathlib import Path
from typing import Optional

import click

from release_publisher.config import PublisherConfig
from release_publisher.dist_info import ReleaseInfo
from release_publisher.errors import ConfigError
from release_publisher.release_gate import check_release_gate


@click.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Path to a YAML configuration file",
)
@click.pass_context
def check(ctx: click.Context, config_path: Optional[Path]) -> None:
    """
    Check whether the current build would be published.

    Prints the release gate decision. A closed gate is not an error.

    Example:

        release-publisher check
    """
    try:
        config = PublisherConfig(config_path=config_path)
        config.require_supported_platform()
        info = ReleaseInfo(config)
        decision = check_release_gate(info)
    except ConfigError as e:
        click.echo(
            click.style("Error: ", fg="red", bold=True) + str(e),
            err=True,
        )
        ctx.exit(1)

    click.echo(f"Platform: {config.host_platform}")
    click.echo(f"Channel: {info.channel or '(none)'}")
    click.echo(f"Branch: {info.branch_name or '(none)'}")
    click.echo(f"Current SHA: {info.current_sha or '(none)'}")
    click.echo(f"Release SHA: {info.release_sha or '(none)'}")
    click.echo()

    if decision.publish:
        click.echo(click.style("Publishable: ", fg="green", bold=True) + decision.reason)
    else:
        click.echo(click.style("Not publishable: ", fg="yellow", bold=True) + decision.reason)
