"""
Release Publisher - CI-time release publishing pipeline.

This package decides whether the current CI commit is an authorized
release point, packages the platform installers, uploads them to S3 and
notifies the deployment endpoint with a signed webhook.

Key modules:
- main: Pipeline runner and logging setup
- config: Publisher configuration management
- dist_info: Release metadata (version, channel, SHAs, assets)
- release_gate: Publishable-commit check
- packager: Packaging command invocation
- storage: S3 object storage wrapper
- uploader: Concurrent asset upload and checksumming
- signer: HMAC-SHA1 webhook signing
- deploy_client: Deployment webhook client
"""

import os
from importlib.metadata import PackageNotFoundError, version


def _get_version() -> str:
    """
    Get version with priority: RELEASE_PUBLISHER_VERSION env var > package metadata > fallback.
    """
    env_version = os.environ.get("RELEASE_PUBLISHER_VERSION")
    if env_version:
        return env_version

    try:
        return version("release-publisher")
    except PackageNotFoundError:
        pass

    return "0.0.0-dev+unknown"


__version__ = _get_version()
