"""
Release metadata resolution.

Resolves the version, release channel, commit SHAs, bundle sizes, and the
per-platform list of release assets from the application manifest and
the CI environment captured in PublisherConfig.
"""

import json
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from release_publisher.config import PublisherConfig
from release_publisher.errors import ConfigError


logger = logging.getLogger("release_publisher.dist_info")

RELEASE_BRANCH_PREFIX = "__release"
SHORT_SHA_LENGTH = 8
DELTA_CHANNELS = frozenset({"production", "beta"})


@dataclass(frozen=True)
class ReleaseAsset:
    """
    A file produced by the packager that gets published.

    Attributes:
        name: Display name of the asset (may contain spaces)
        path: Location of the file on disk
    """
    name: str
    path: Path


@dataclass(frozen=True)
class BundleSizes:
    """Byte sizes of the compiled application bundles."""
    renderer: int
    main: int


def parse_release_sha(branch_name: str) -> str:
    """
    Extract the release SHA from a release branch name.

    Release branches are named ``__release/<channel>/<sha>``.

    Args:
        branch_name: CI branch name

    Returns:
        The SHA segment, or an empty string if the branch is not a release branch
    """
    pieces = branch_name.split("/")
    if len(pieces) < 3 or pieces[0] != RELEASE_BRANCH_PREFIX:
        return ""
    return pieces[2]


class ReleaseInfo:
    """
    Read-only release metadata for the current build.

    Usage:
        >>> info = ReleaseInfo(config)
        >>> info.version, info.short_sha
        ('1.2.3', 'abcdef12')
        >>> [a.name for a in info.release_assets()]
        ['GitHub Desktop.zip']
    """

    def __init__(self, config: PublisherConfig):
        self._config = config
        self._manifest: Optional[dict] = None

    def _load_manifest(self) -> dict:
        if self._manifest is None:
            manifest_path = self._config.app_dir / "package.json"
            try:
                with open(manifest_path, encoding="utf-8") as f:
                    self._manifest = json.load(f)
            except FileNotFoundError:
                raise ConfigError(f"Application manifest not found: {manifest_path}")
            except json.JSONDecodeError as e:
                raise ConfigError(f"Failed to parse {manifest_path}: {e}")
        return self._manifest

    def _manifest_field(self, key: str) -> str:
        value = self._load_manifest().get(key)
        if not value:
            raise ConfigError(f"Application manifest is missing '{key}'")
        return str(value)

    # -------------------------------------------------------------------------
    # Metadata
    # -------------------------------------------------------------------------

    @property
    def host_platform(self) -> str:
        return self._config.host_platform

    @property
    def version(self) -> str:
        """Application version from package.json."""
        return self._manifest_field("version")

    @property
    def product_name(self) -> str:
        """Application product name from package.json."""
        return self._manifest_field("productName")

    @property
    def channel(self) -> str:
        return self._config.release_channel

    @property
    def branch_name(self) -> str:
        return self._config.branch_name

    @property
    def current_sha(self) -> str:
        return self._config.current_sha

    @property
    def short_sha(self) -> str:
        return self.current_sha[:SHORT_SHA_LENGTH]

    @property
    def release_sha(self) -> str:
        """
        SHA of the commit authorized for release.

        RELEASE_SHA takes precedence over the SHA encoded in the branch name.
        """
        return self._config.release_sha_override or parse_release_sha(self.branch_name)

    # -------------------------------------------------------------------------
    # Assets
    # -------------------------------------------------------------------------

    def _installer_dir(self) -> Path:
        return self._config.dist_dir / "installer"

    def _file_product_name(self) -> str:
        return self.product_name.replace(" ", "")

    def delta_package_path(self) -> Path:
        return self._installer_dir() / f"{self._file_product_name()}-{self.version}-delta.nupkg"

    @property
    def should_make_delta(self) -> bool:
        """Delta packages ship on production and beta when the packager built one."""
        return self.channel in DELTA_CHANNELS and self.delta_package_path().exists()

    def release_assets(self) -> list[ReleaseAsset]:
        """
        List the assets to publish for the host platform.

        Returns:
            Assets in upload order

        Raises:
            UnsupportedPlatformError: If the host platform is not supported
        """
        self._config.require_supported_platform()

        product = self.product_name
        if self.host_platform == "darwin":
            name = f"{product}.zip"
            return [ReleaseAsset(name, self._config.dist_dir / name)]

        file_product = self._file_product_name()
        installer_dir = self._installer_dir()
        assets = [
            ReleaseAsset(f"{product}Setup.msi", installer_dir / f"{file_product}Setup.msi"),
            ReleaseAsset(f"{product}Setup.exe", installer_dir / f"{file_product}Setup.exe"),
            ReleaseAsset(
                f"{product}-{self.version}-full.nupkg",
                installer_dir / f"{file_product}-{self.version}-full.nupkg",
            ),
        ]
        if self.should_make_delta:
            assets.append(
                ReleaseAsset(f"{product}-{self.version}-delta.nupkg", self.delta_package_path())
            )
        elif self.channel in DELTA_CHANNELS:
            logger.warning(
                f"Channel '{self.channel}' ships a delta package but "
                f"{self.delta_package_path()} was not built; publishing without it"
            )
        else:
            logger.info(f"Channel '{self.channel}' does not ship delta packages")
        return assets

    def bundle_sizes(self) -> BundleSizes:
        """
        Measure the compiled renderer and main bundles.

        Raises:
            ConfigError: If a bundle file is missing
        """
        out_dir = self._config.out_dir
        try:
            return BundleSizes(
                renderer=(out_dir / "renderer.js").stat().st_size,
                main=(out_dir / "main.js").stat().st_size,
            )
        except FileNotFoundError as e:
            raise ConfigError(f"Bundle not found: {e.filename}")
