"""
Exception hierarchy for the release publisher.

Every fatal condition raised by a pipeline stage derives from PublishError
so the runner can translate it into exit code 1 in a single place.
Skip conditions are not exceptions (see release_gate.GateDecision).
"""

from typing import Optional


class PublishError(Exception):
    """Base exception for fatal publishing errors."""

    pass


class ConfigError(PublishError):
    """Base exception for configuration errors."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    pass


class UnsupportedPlatformError(ConfigError):
    """Raised when the host platform has no release asset layout."""

    def __init__(self, platform: str):
        super().__init__(f"Unsupported host platform: {platform}")
        self.platform = platform


class PackagingError(PublishError):
    """Raised when the packaging command fails."""

    def __init__(self, message: str, returncode: Optional[int] = None):
        super().__init__(message)
        self.returncode = returncode


class UploadError(PublishError):
    """Raised when an asset upload fails."""

    def __init__(self, message: str, asset_name: Optional[str] = None):
        super().__init__(message)
        self.asset_name = asset_name


class ApiError(PublishError):
    """Base exception for deployment API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class ConnectionError(ApiError):
    """Raised when connection to the deployment endpoint fails."""

    pass


class DeployError(ApiError):
    """Raised when the deployment endpoint rejects the notification."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        response_body: Optional[str] = None,
    ):
        super().__init__(message, status_code=status_code)
        self.response_body = response_body
