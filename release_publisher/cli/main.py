"""
Publisher CLI entry point.

Main command group for the release publisher CLI.
"""

import click

from release_publisher import __version__


@click.group()
@click.version_option(version=__version__, prog_name="release-publisher")
@click.pass_context
def cli(ctx: click.Context) -> None:
    """
    Release Publisher - CI release publishing.

    Decides whether the current CI build is an authorized release point,
    then packages the installers, uploads them to S3, and notifies the
    deployment endpoint.

    Use 'release-publisher COMMAND --help' for more information on a command.
    """
    ctx.ensure_object(dict)


# Import and register subcommands
from release_publisher.cli.check import check  # noqa: E402
from release_publisher.cli.publish import publish  # noqa: E402

cli.add_command(check)
cli.add_command(publish)


def main() -> None:
    """Main entry point for CLI."""
    cli()


if __name__ == "__main__":
    main()
