"""
Deployment webhook client.

Builds the deploy notification payload describing the uploaded artifacts,
signs it, and POSTs it to the deployment endpoint. The request is not
retried; anything but HTTP 200 fails the release.
"""

import json
import logging
from typing import Any, Optional, Sequence

import httpx

from release_publisher import __version__
from release_publisher.dist_info import BundleSizes
from release_publisher.errors import ConnectionError, DeployError
from release_publisher.signer import SIGNATURE_HEADER, WebhookSigner
from release_publisher.uploader import Artifact

logger = logging.getLogger("release_publisher.deploy_client")


# ============================================================================
# Constants
# ============================================================================

DEPLOY_PATH = "/api/deploy_built"
DEFAULT_TIMEOUT = 30.0  # seconds
USER_AGENT = f"Release-Publisher/{__version__}"


# ============================================================================
# Payload
# ============================================================================


def build_payload(
    host_platform: str,
    branch_name: str,
    artifacts: Sequence[Artifact],
    bundle_sizes: BundleSizes,
) -> dict[str, Any]:
    """
    Build the deploy notification payload.

    Args:
        host_platform: Platform the artifacts were built on
        branch_name: Branch that was built
        artifacts: Uploaded artifacts
        bundle_sizes: Compiled bundle sizes

    Returns:
        Payload dictionary ready for serialization
    """
    return {
        "context": host_platform,
        "branch_name": branch_name,
        "artifacts": [artifact.to_dict() for artifact in artifacts],
        "stats": {
            "platform": host_platform,
            "rendererBundleSize": bundle_sizes.renderer,
            "mainBundleSize": bundle_sizes.main,
        },
    }


def serialize_payload(payload: dict[str, Any]) -> bytes:
    """Serialize a payload to the compact JSON bytes that are signed and sent."""
    return json.dumps(payload, separators=(",", ":")).encode("utf-8")


# ============================================================================
# DeployNotifier Class
# ============================================================================


class DeployNotifier:
    """
    HTTP client for the deployment webhook.

    Usage:
        >>> notifier = DeployNotifier(config.deploy_url, config.deployment_secret)
        >>> await notifier.notify(payload)
        >>> await notifier.close()
    """

    def __init__(
        self,
        deploy_url: str,
        secret: str,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the notifier.

        Args:
            deploy_url: Full URL of the deploy webhook
            secret: Shared deployment secret for signing
            timeout: Request timeout in seconds

        Raises:
            ValueError: If deploy_url or secret is empty
        """
        if not deploy_url:
            raise ValueError("deploy_url is required")

        self._deploy_url = deploy_url
        self._signer = WebhookSigner(secret)
        self._client = httpx.AsyncClient(
            headers={
                "User-Agent": USER_AGENT,
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    @property
    def deploy_url(self) -> str:
        """Get the webhook URL."""
        return self._deploy_url

    async def notify(self, payload: dict[str, Any]) -> None:
        """
        Send a signed deploy notification.

        Args:
            payload: Payload from build_payload()

        Raises:
            DeployError: If the endpoint answers with a status other than 200
            ConnectionError: If the request cannot be delivered
        """
        body = serialize_payload(payload)
        headers = {SIGNATURE_HEADER: self._signer.sign(body)}

        logger.info(
            f"Notifying {self._deploy_url} of {len(payload.get('artifacts', []))} artifacts"
        )

        try:
            response = await self._client.post(
                self._deploy_url,
                content=body,
                headers=headers,
            )
        except httpx.TimeoutException as e:
            raise ConnectionError(f"Deploy notification timed out: {e}")
        except httpx.TransportError as e:
            raise ConnectionError(f"Failed to connect to deploy endpoint: {e}")
        except httpx.RequestError as e:
            raise ConnectionError(f"Deploy notification request failed: {e}")

        if response.status_code == 200:
            logger.info("Deploy notification accepted")
            return

        response_body = _response_text(response)
        message = f"Deploy notification failed with status {response.status_code}"
        if response_body:
            message = f"{message}: {response_body}"
        raise DeployError(
            message,
            status_code=response.status_code,
            response_body=response_body,
        )

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def __aenter__(self) -> "DeployNotifier":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()


def _response_text(response: httpx.Response) -> Optional[str]:
    try:
        text = response.text
    except (UnicodeDecodeError, httpx.ResponseNotRead):
        return None
    return text.strip() or None
