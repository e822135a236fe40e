"""
Release publisher pipeline.

Runs the release gate, packaging, asset upload, and deploy notification in
order and maps the outcome to a process exit code.
"""

import asyncio
import logging
from typing import Callable, Optional

import click

from release_publisher import __version__
from release_publisher.config import PublisherConfig
from release_publisher.deploy_client import DeployNotifier, build_payload
from release_publisher.dist_info import ReleaseInfo
from release_publisher.errors import PublishError
from release_publisher.packager import run_packager
from release_publisher.release_gate import check_release_gate
from release_publisher.storage import S3Storage
from release_publisher.uploader import build_object_key, upload_assets


EXIT_SUCCESS = 0
EXIT_FAILURE = 1


# ============================================================================
# Logging Setup
# ============================================================================


def setup_logging(level: str = "INFO") -> logging.Logger:
    """
    Setup logging for the publisher.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)

    Returns:
        Configured logger
    """
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    return logging.getLogger("release_publisher")


# ============================================================================
# Publisher Runner
# ============================================================================


class ReleasePublisher:
    """
    Release pipeline runner.

    Stages only run after the previous one succeeded. Every fatal error is a
    PublishError and is translated to EXIT_FAILURE here; a closed release
    gate is a successful no-op.

    Attributes:
        config: Publisher configuration
        info: Release metadata
        logger: Logger instance
    """

    def __init__(
        self,
        config: PublisherConfig,
        info: Optional[ReleaseInfo] = None,
        storage_factory: Callable[[PublisherConfig], S3Storage] = S3Storage.from_config,
        notifier_factory: Optional[Callable[[PublisherConfig], DeployNotifier]] = None,
        packager: Callable[..., None] = run_packager,
        skip_package: bool = False,
        dry_run: bool = False,
    ):
        """
        Initialize the publisher.

        Args:
            config: Publisher configuration
            info: Release metadata (built from config if omitted)
            storage_factory: Creates the object storage for uploads
            notifier_factory: Creates the deploy webhook client
            packager: Runs the packaging command
            skip_package: Publish the artifacts already in the dist directory
            dry_run: Stop after listing the assets that would be published
        """
        self.config = config
        self.info = info or ReleaseInfo(config)
        self.logger = logging.getLogger("release_publisher")
        self._storage_factory = storage_factory
        self._notifier_factory = notifier_factory or _default_notifier
        self._packager = packager
        self._skip_package = skip_package
        self._dry_run = dry_run

    async def run(self) -> int:
        """
        Run the release pipeline.

        Returns:
            Exit code (0 for published or skipped, 1 for any failure)
        """
        try:
            return await self._publish()
        except PublishError as e:
            self.logger.error(f"Release publishing failed: {e}")
            return EXIT_FAILURE

    async def _publish(self) -> int:
        self.config.require_supported_platform()

        decision = check_release_gate(self.info)
        if not decision.publish:
            click.echo(f"Skipping publish: {decision.reason}")
            return EXIT_SUCCESS

        self.logger.info(f"Release Publisher v{__version__}")
        self.logger.info(decision.reason)

        # Dry runs need no credentials
        if not self._dry_run:
            self.config.validate()

        if self._skip_package:
            self.logger.info("Skipping packaging step")
        else:
            self._packager(self.config.package_command, cwd=self.config.root_dir)

        version = self.info.version
        sha = self.info.current_sha
        assets = self.info.release_assets()
        bundle_sizes = self.info.bundle_sizes()

        if self._dry_run:
            for asset in assets:
                click.echo(f"Would upload {asset.path} -> {build_object_key(version, sha, asset.name)}")
            return EXIT_SUCCESS

        self.logger.info(f"Uploading {len(assets)} assets for {self.config.host_platform}")
        storage = self._storage_factory(self.config)
        artifacts = await upload_assets(storage, assets, version, sha)

        payload = build_payload(
            self.config.host_platform,
            self.info.branch_name,
            artifacts,
            bundle_sizes,
        )
        notifier = self._notifier_factory(self.config)
        try:
            await notifier.notify(payload)
        finally:
            await notifier.close()

        click.echo(f"Published {version} ({self.info.short_sha}) for {self.config.host_platform}")
        return EXIT_SUCCESS


def _default_notifier(config: PublisherConfig) -> DeployNotifier:
    return DeployNotifier(
        config.deploy_url,
        config.deployment_secret,
        timeout=config.request_timeout,
    )


def run_publisher(
    config: PublisherConfig,
    skip_package: bool = False,
    dry_run: bool = False,
) -> int:
    """
    Run the release pipeline to completion.

    Args:
        config: Publisher configuration
        skip_package: Publish the artifacts already in the dist directory
        dry_run: Stop after listing the assets that would be published

    Returns:
        Exit code
    """
    setup_logging(config.log_level)
    publisher = ReleasePublisher(config, skip_package=skip_package, dry_run=dry_run)
    return asyncio.run(publisher.run())
