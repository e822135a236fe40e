"""
Publisher configuration module.

Manages publisher configuration including object storage credentials,
the deployment endpoint, and packaging settings. Configuration is
constructed explicitly and passed into each pipeline stage so that
tests never need to mutate the process environment.
"""

import os
import sys
from pathlib import Path
from typing import Mapping, Optional

import yaml

from release_publisher.errors import (
    ConfigError,
    ConfigValidationError,
    UnsupportedPlatformError,
)


# ============================================================================
# Constants
# ============================================================================

# Environment variable names
ENV_CONFIG_PATH = "RELEASE_PUBLISHER_CONFIG"
ENV_LOG_LEVEL = "RELEASE_PUBLISHER_LOG_LEVEL"
ENV_S3_KEY = "S3_KEY"
ENV_S3_SECRET = "S3_SECRET"
ENV_S3_BUCKET = "S3_BUCKET"
ENV_S3_REGION = "S3_REGION"
ENV_DEPLOYMENT_SECRET = "DEPLOYMENT_SECRET"
ENV_DEPLOY_HOST = "DEPLOY_HOST"
ENV_RELEASE_CHANNEL = "RELEASE_CHANNEL"
ENV_RELEASE_SHA = "RELEASE_SHA"

# CI variables holding the commit SHA and branch name, per host platform
CI_COMMIT_VARS = {
    "darwin": "CIRCLE_SHA1",
    "win32": "APPVEYOR_REPO_COMMIT",
}
CI_BRANCH_VARS = {
    "darwin": "CIRCLE_BRANCH",
    "win32": "APPVEYOR_REPO_BRANCH",
}
SUPPORTED_PLATFORMS = tuple(CI_COMMIT_VARS)

# Default values
DEFAULT_S3_REGION = "us-east-1"
DEFAULT_DEPLOY_HOST = "central.github.com"
DEFAULT_PACKAGE_COMMAND = "yarn run package"
DEFAULT_APP_DIR = "app"
DEFAULT_DIST_DIR = "dist"
DEFAULT_OUT_DIR = "out"
DEFAULT_LOG_LEVEL = "INFO"
DEFAULT_REQUEST_TIMEOUT = 30.0  # seconds


# ============================================================================
# PublisherConfig Class
# ============================================================================


class PublisherConfig:
    """
    Publisher configuration.

    Configuration sources (in priority order):
    1. Environment variables (the injected mapping, or os.environ)
    2. Configuration file (YAML)
    3. Default values

    Credentials and the deployment secret are read from the environment
    only and are never loaded from the configuration file.

    Attributes:
        host_platform: Platform the release is built on (darwin, win32)
        s3_key: Object storage access key id
        s3_secret: Object storage secret access key
        s3_bucket: Bucket receiving the release assets
        deployment_secret: Shared secret used to sign the deploy webhook
        deploy_host: Host of the deployment endpoint
        package_command: Command that builds the release artifacts
    """

    def __init__(
        self,
        config_path: Optional[Path] = None,
        environ: Optional[Mapping[str, str]] = None,
        host_platform: Optional[str] = None,
        root_dir: Optional[Path] = None,
    ):
        """
        Initialize publisher configuration.

        Args:
            config_path: Explicit path to a YAML config file
            environ: Environment mapping (defaults to os.environ)
            host_platform: Host platform override (defaults to sys.platform)
            root_dir: Repository root that relative directories resolve against
        """
        self._environ: Mapping[str, str] = (
            dict(os.environ) if environ is None else dict(environ)
        )
        self._host_platform = host_platform or sys.platform
        self._root_dir = Path(root_dir) if root_dir else Path.cwd()

        if config_path:
            self._config_path: Optional[Path] = Path(config_path)
        elif self._environ.get(ENV_CONFIG_PATH):
            self._config_path = Path(self._environ[ENV_CONFIG_PATH])
        else:
            self._config_path = None

        # Initialize with defaults
        self._s3_region: str = DEFAULT_S3_REGION
        self._s3_bucket: str = ""
        self._deploy_host: str = DEFAULT_DEPLOY_HOST
        self._package_command: str = DEFAULT_PACKAGE_COMMAND
        self._app_dir: str = DEFAULT_APP_DIR
        self._dist_dir: str = DEFAULT_DIST_DIR
        self._out_dir: str = DEFAULT_OUT_DIR
        self._log_level: str = DEFAULT_LOG_LEVEL
        self._request_timeout: float = DEFAULT_REQUEST_TIMEOUT

        self._load()

    @property
    def config_path(self) -> Optional[Path]:
        """Get the configuration file path."""
        return self._config_path

    @property
    def environ(self) -> Mapping[str, str]:
        """Get the environment mapping this configuration reads from."""
        return self._environ

    # -------------------------------------------------------------------------
    # Configuration Properties
    # -------------------------------------------------------------------------

    @property
    def host_platform(self) -> str:
        """Get the host platform identifier."""
        return self._host_platform

    @property
    def s3_key(self) -> str:
        """Get the object storage access key id."""
        return self._environ.get(ENV_S3_KEY, "")

    @property
    def s3_secret(self) -> str:
        """Get the object storage secret access key."""
        return self._environ.get(ENV_S3_SECRET, "")

    @property
    def s3_bucket(self) -> str:
        """Get the release bucket name."""
        return self._environ.get(ENV_S3_BUCKET, self._s3_bucket)

    @property
    def s3_region(self) -> str:
        """Get the object storage region."""
        return self._environ.get(ENV_S3_REGION, self._s3_region)

    @property
    def deployment_secret(self) -> str:
        """Get the webhook signing secret."""
        return self._environ.get(ENV_DEPLOYMENT_SECRET, "")

    @property
    def deploy_host(self) -> str:
        """Get the deployment endpoint host."""
        return self._environ.get(ENV_DEPLOY_HOST, self._deploy_host)

    @property
    def deploy_url(self) -> str:
        """Get the full deployment webhook URL."""
        return f"https://{self.deploy_host}/api/deploy_built"

    @property
    def package_command(self) -> str:
        """Get the packaging command line."""
        return self._package_command

    @property
    def root_dir(self) -> Path:
        """Get the repository root directory."""
        return self._root_dir

    @property
    def app_dir(self) -> Path:
        """Get the directory holding the application package.json."""
        return self._root_dir / self._app_dir

    @property
    def dist_dir(self) -> Path:
        """Get the directory the packager writes release artifacts to."""
        return self._root_dir / self._dist_dir

    @property
    def out_dir(self) -> Path:
        """Get the directory holding the compiled bundles."""
        return self._root_dir / self._out_dir

    @property
    def log_level(self) -> str:
        """Get the log level."""
        return self._environ.get(ENV_LOG_LEVEL, self._log_level)

    @property
    def request_timeout(self) -> float:
        """Get the webhook request timeout in seconds."""
        return self._request_timeout

    # -------------------------------------------------------------------------
    # CI Environment
    # -------------------------------------------------------------------------

    @property
    def release_channel(self) -> str:
        """Get the release channel of this build."""
        return self._environ.get(ENV_RELEASE_CHANNEL, "")

    @property
    def release_sha_override(self) -> str:
        """Get the explicitly configured release SHA, if any."""
        return self._environ.get(ENV_RELEASE_SHA, "")

    @property
    def current_sha(self) -> str:
        """Get the commit SHA being built, from the platform's CI variable."""
        var = CI_COMMIT_VARS.get(self._host_platform)
        return self._environ.get(var, "") if var else ""

    @property
    def branch_name(self) -> str:
        """Get the branch being built, from the platform's CI variable."""
        var = CI_BRANCH_VARS.get(self._host_platform)
        return self._environ.get(var, "") if var else ""

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def is_supported_platform(self) -> bool:
        """Check if the host platform has a release asset layout."""
        return self._host_platform in SUPPORTED_PLATFORMS

    # -------------------------------------------------------------------------
    # Configuration Management
    # -------------------------------------------------------------------------

    def _load(self) -> None:
        """Load configuration from file."""
        if self._config_path is None:
            return

        if not self._config_path.exists():
            raise ConfigError(f"Config file not found: {self._config_path}")

        try:
            with open(self._config_path) as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigError(f"Failed to parse config file: {e}")

        if not isinstance(data, dict):
            raise ConfigError(
                f"Config file must contain a mapping: {self._config_path}"
            )

        self._s3_region = data.get("s3_region", DEFAULT_S3_REGION)
        self._s3_bucket = data.get("s3_bucket", "")
        self._deploy_host = data.get("deploy_host", DEFAULT_DEPLOY_HOST)
        self._package_command = data.get("package_command", DEFAULT_PACKAGE_COMMAND)
        self._app_dir = data.get("app_dir", DEFAULT_APP_DIR)
        self._dist_dir = data.get("dist_dir", DEFAULT_DIST_DIR)
        self._out_dir = data.get("out_dir", DEFAULT_OUT_DIR)
        self._log_level = data.get("log_level", DEFAULT_LOG_LEVEL)
        timeout = data.get("request_timeout", DEFAULT_REQUEST_TIMEOUT)
        try:
            self._request_timeout = float(timeout)
        except (TypeError, ValueError):
            raise ConfigError(
                f"request_timeout must be a number, got: {timeout!r}"
            )

    def require_supported_platform(self) -> None:
        """
        Ensure the host platform can be published.

        Raises:
            UnsupportedPlatformError: If the platform is not darwin or win32
        """
        if not self.is_supported_platform:
            raise UnsupportedPlatformError(self._host_platform)

    def validate(self) -> None:
        """
        Validate the settings needed to upload and notify.

        Raises:
            ConfigValidationError: If any required setting is missing
        """
        missing = []
        if not self.s3_key:
            missing.append(ENV_S3_KEY)
        if not self.s3_secret:
            missing.append(ENV_S3_SECRET)
        if not self.s3_bucket:
            missing.append(ENV_S3_BUCKET)
        if not self.deployment_secret:
            missing.append(ENV_DEPLOYMENT_SECRET)
        if not self.deploy_host.strip():
            missing.append(ENV_DEPLOY_HOST)

        if missing:
            raise ConfigValidationError(
                f"Missing required settings: {', '.join(missing)}"
            )

        if not self.package_command.strip():
            raise ConfigValidationError("package_command must not be empty")

        if self.request_timeout <= 0:
            raise ConfigValidationError(
                f"request_timeout must be positive, got: {self.request_timeout}"
            )
