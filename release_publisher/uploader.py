"""
Release asset uploader.

Uploads the platform's release assets to object storage and checksums each
file while its upload is in flight. All uploads of a batch run concurrently
and the batch fails fast on the first failed upload.
"""

import asyncio
import hashlib
import logging
import os
import re
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence

from release_publisher.dist_info import SHORT_SHA_LENGTH, ReleaseAsset
from release_publisher.errors import UploadError
from release_publisher.storage import S3Storage


logger = logging.getLogger("release_publisher.uploader")

HASH_ALGORITHM = "sha1"
HASH_CHUNK_SIZE = 64 * 1024

_WHITESPACE = re.compile(r"\s+")


@dataclass(frozen=True)
class Artifact:
    """
    A published release asset.

    Attributes:
        name: Asset name as shown to users
        url: Public URL of the uploaded object
        size: File size in bytes
        sha: Hex-encoded SHA-1 of the file contents
    """
    name: str
    url: str
    size: int
    sha: str

    def to_dict(self) -> dict:
        return {"name": self.name, "url": self.url, "size": self.size, "sha": self.sha}


def build_object_key(version: str, sha: str, asset_name: str) -> str:
    """
    Build the object key of a release asset.

    Format: ``releases/<version>-<short sha>/<asset name without whitespace>``

    Example:
        >>> build_object_key("1.2.3", "abcdef1234567890", "My App.zip")
        'releases/1.2.3-abcdef12/MyApp.zip'
    """
    short_sha = sha[:SHORT_SHA_LENGTH]
    return f"releases/{version}-{short_sha}/{_WHITESPACE.sub('', asset_name)}"


def hash_file(path: Path, asset_name: Optional[str] = None) -> str:
    """
    Compute the SHA-1 of a file.

    Args:
        path: File to hash
        asset_name: Asset name attached to errors

    Returns:
        40-character lowercase hex string

    Raises:
        UploadError: If the file cannot be read
    """
    hasher = hashlib.new(HASH_ALGORITHM)

    try:
        with open(path, "rb") as f:
            for chunk in iter(lambda: f.read(HASH_CHUNK_SIZE), b""):
                hasher.update(chunk)
    except OSError as e:
        raise UploadError(
            f"Failed to read {path} for hashing: {e}",
            asset_name=asset_name or path.name,
        )

    return hasher.hexdigest()


def _file_signature(stat_result: os.stat_result) -> tuple[int, int]:
    return stat_result.st_size, stat_result.st_mtime_ns


async def upload_asset(
    storage: S3Storage,
    asset: ReleaseAsset,
    version: str,
    sha: str,
) -> Artifact:
    """
    Upload one asset and checksum it concurrently.

    The upload and the hash read the file independently. The file's size and
    modification time are compared before and after, so a file rewritten
    mid-upload fails the upload instead of publishing a mismatched hash.

    Args:
        storage: Destination storage
        asset: Asset to upload
        version: Release version
        sha: Full commit SHA of the build

    Returns:
        Artifact describing the uploaded object

    Raises:
        UploadError: If the file is missing, changes, or fails to upload
    """
    try:
        before = asset.path.stat()
    except FileNotFoundError:
        raise UploadError(f"Asset file not found: {asset.path}", asset_name=asset.name)

    key = build_object_key(version, sha, asset.name)
    loop = asyncio.get_running_loop()

    upload = loop.run_in_executor(None, storage.upload_file, asset.path, key, asset.name)
    digest = loop.run_in_executor(None, hash_file, asset.path, asset.name)
    _, sha_hex = await asyncio.gather(upload, digest)

    try:
        after = asset.path.stat()
    except FileNotFoundError:
        raise UploadError(f"Asset file disappeared during upload: {asset.path}", asset_name=asset.name)

    if _file_signature(before) != _file_signature(after):
        raise UploadError(
            f"Asset {asset.name} changed while it was being uploaded",
            asset_name=asset.name,
        )

    artifact = Artifact(
        name=asset.name,
        url=storage.object_url(key),
        size=before.st_size,
        sha=sha_hex,
    )
    logger.info(f"Published {artifact.name} ({artifact.size} bytes, sha1={artifact.sha})")
    return artifact


async def upload_assets(
    storage: S3Storage,
    assets: Sequence[ReleaseAsset],
    version: str,
    sha: str,
) -> list[Artifact]:
    """
    Upload all assets concurrently.

    The first failure cancels the uploads still pending and is re-raised.
    Objects that were already uploaded are left in place.

    Args:
        storage: Destination storage
        assets: Assets to upload
        version: Release version
        sha: Full commit SHA of the build

    Returns:
        Artifacts in the same order as assets

    Raises:
        UploadError: From the first upload that failed
    """
    if not assets:
        return []

    tasks = [
        asyncio.ensure_future(upload_asset(storage, asset, version, sha))
        for asset in assets
    ]
    done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)

    if pending:
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

    for task in tasks:
        if task in done and task.exception() is not None:
            error = task.exception()
            logger.error(f"Upload batch failed: {error}")
            raise error

    return [task.result() for task in tasks]
