"""
Amazon S3 release storage.

Uploads release assets to an S3 bucket using boto3 and builds their public
URLs. Uploads are not retried: a failed upload fails the release.
"""

import logging
from pathlib import Path
from typing import Any, Optional

import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import BotoCoreError, ClientError, NoCredentialsError

from release_publisher.config import PublisherConfig
from release_publisher.errors import UploadError


logger = logging.getLogger("release_publisher.storage")

PUBLIC_READ_ACL = "public-read"
PUBLIC_URL_BASE = "https://s3.amazonaws.com"


class S3Storage:
    """
    S3 bucket that receives release assets.

    Usage:
        >>> storage = S3Storage.from_config(config)
        >>> storage.upload_file(Path("dist/App.zip"), "releases/1.2.3-abcdef12/App.zip")
        >>> storage.object_url("releases/1.2.3-abcdef12/App.zip")
        'https://s3.amazonaws.com/my-bucket/releases/1.2.3-abcdef12/App.zip'
    """

    def __init__(self, bucket: str, client: Any):
        """
        Initialize storage with a bucket and a boto3 S3 client.

        Args:
            bucket: Bucket name
            client: boto3 S3 client (or a compatible test double)

        Raises:
            ValueError: If bucket is empty
        """
        if not bucket:
            raise ValueError("bucket is required")
        self._bucket = bucket
        self._client = client

    @classmethod
    def from_config(cls, config: PublisherConfig) -> "S3Storage":
        """
        Create storage from publisher configuration.

        Args:
            config: Validated publisher configuration

        Returns:
            S3Storage bound to the configured bucket
        """
        client = boto3.client(
            "s3",
            aws_access_key_id=config.s3_key,
            aws_secret_access_key=config.s3_secret,
            region_name=config.s3_region,
        )
        return cls(config.s3_bucket, client)

    @property
    def bucket(self) -> str:
        """Get the bucket name."""
        return self._bucket

    def object_url(self, key: str) -> str:
        """Public URL of an object in the bucket."""
        return f"{PUBLIC_URL_BASE}/{self._bucket}/{key}"

    def upload_file(self, path: Path, key: str, asset_name: Optional[str] = None) -> None:
        """
        Upload a file as a publicly readable object.

        This call blocks; run it in an executor from async code.

        Args:
            path: Local file to upload
            key: Object key
            asset_name: Asset name used in error messages

        Raises:
            UploadError: If the upload fails for any reason
        """
        name = asset_name or path.name
        logger.info(f"Uploading {name} to s3://{self._bucket}/{key}")

        try:
            self._client.upload_file(
                str(path),
                self._bucket,
                key,
                ExtraArgs={"ACL": PUBLIC_READ_ACL},
            )
        except FileNotFoundError:
            raise UploadError(f"Asset file not found: {path}", asset_name=name)
        except NoCredentialsError as e:
            raise UploadError(f"No S3 credentials available: {e}", asset_name=name)
        except ClientError as e:
            error_code = e.response.get("Error", {}).get("Code", "Unknown")
            raise UploadError(
                f"S3 rejected upload of {name} to bucket '{self._bucket}': {error_code}",
                asset_name=name,
            )
        except (S3UploadFailedError, BotoCoreError) as e:
            raise UploadError(f"Failed to upload {name}: {e}", asset_name=name)
        except OSError as e:
            raise UploadError(f"Failed to read {path} for upload: {e}", asset_name=name)

        logger.info(f"Uploaded {name}")
