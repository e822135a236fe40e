"""
HMAC webhook signing for deployment notifications.

Signs the exact bytes of the webhook body using HMAC-SHA1 with the shared
deployment secret, in the ``X-Hub-Signature`` format the deployment
endpoint verifies.
"""

import hashlib
import hmac

SIGNATURE_HEADER = "X-Hub-Signature"
SIGNATURE_PREFIX = "sha1="


class WebhookSigner:
    """
    HMAC-SHA1 signer for webhook bodies.

    The body is signed byte-for-byte as sent; callers must serialize the
    payload once and send exactly the bytes that were signed.

    Attributes:
        secret: Shared deployment secret
    """

    def __init__(self, secret: str):
        """
        Initialize the webhook signer.

        Args:
            secret: Shared deployment secret

        Raises:
            ValueError: If secret is empty
        """
        if not secret:
            raise ValueError("secret is required")
        self._secret_bytes = secret.encode("utf-8")

    def digest(self, body: bytes) -> str:
        """
        Compute the hex HMAC-SHA1 of a body.

        Args:
            body: Exact request body bytes

        Returns:
            Hex-encoded HMAC-SHA1 (40 characters)
        """
        return hmac.new(self._secret_bytes, body, hashlib.sha1).hexdigest()

    def sign(self, body: bytes) -> str:
        """
        Build the signature header value for a body.

        Args:
            body: Exact request body bytes

        Returns:
            Header value in the form ``sha1=<hex>``
        """
        return f"{SIGNATURE_PREFIX}{self.digest(body)}"

    def verify(self, body: bytes, signature: str) -> bool:
        """
        Verify a signature header value against a body.

        Args:
            body: Request body bytes
            signature: Header value to verify

        Returns:
            True if signature is valid
        """
        return hmac.compare_digest(self.sign(body), signature)
