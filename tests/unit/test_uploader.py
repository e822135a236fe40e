"""
Unit tests for the release asset uploader.

Tests object key format, checksumming, artifact descriptors, and
fail-fast batch behavior.
"""

import hashlib

import pytest
from botocore.exceptions import ClientError

from release_publisher.dist_info import ReleaseAsset
from release_publisher.errors import UploadError
from release_publisher.storage import S3Storage
from release_publisher.uploader import (
    Artifact,
    build_object_key,
    hash_file,
    upload_asset,
    upload_assets,
)


SHA = "abcdef1234567890abcdef1234567890abcdef12"


@pytest.fixture
def storage(mock_s3_client):
    """Storage bound to a mock client."""
    return S3Storage("releases-bucket", mock_s3_client)


@pytest.fixture
def asset(tmp_path):
    """A single asset file on disk."""
    path = tmp_path / "My App.zip"
    path.write_bytes(b"release archive bytes")
    return ReleaseAsset("My App.zip", path)


class TestBuildObjectKey:
    """Tests for build_object_key."""

    def test_key_format(self):
        """Keys combine version, short SHA, and the asset name without spaces."""
        assert build_object_key("1.2.3", "abcdef12", "My App.zip") == "releases/1.2.3-abcdef12/MyApp.zip"

    def test_full_sha_is_truncated(self):
        """Only the first eight SHA characters appear in the key."""
        assert build_object_key("1.2.3", SHA, "My App.zip") == "releases/1.2.3-abcdef12/MyApp.zip"

    def test_all_whitespace_removed(self):
        """Tabs and repeated spaces are stripped as well."""
        assert build_object_key("2.0.0", SHA, "My  Big\tApp Setup.exe") == (
            "releases/2.0.0-abcdef12/MyBigAppSetup.exe"
        )


class TestHashFile:
    """Tests for hash_file."""

    def test_sha1_hex(self, tmp_path):
        """hash_file returns the hex SHA-1 of the contents."""
        path = tmp_path / "data.bin"
        content = b"x" * 200_000
        path.write_bytes(content)

        assert hash_file(path) == hashlib.sha1(content).hexdigest()

    def test_empty_file(self, tmp_path):
        """Empty files hash to the SHA-1 of no bytes."""
        path = tmp_path / "empty.bin"
        path.write_bytes(b"")

        assert hash_file(path) == "da39a3ee5e6b4b0d3255bfef95601890afd80709"

    def test_unreadable_file(self, tmp_path):
        """A missing file raises UploadError."""
        with pytest.raises(UploadError, match="hashing") as exc_info:
            hash_file(tmp_path / "missing.bin", asset_name="Missing App.bin")

        assert exc_info.value.asset_name == "Missing App.bin"

    def test_unreadable_file_defaults_to_file_name(self, tmp_path):
        """Without an asset name the error names the file."""
        with pytest.raises(UploadError) as exc_info:
            hash_file(tmp_path / "missing.bin")

        assert exc_info.value.asset_name == "missing.bin"


class TestUploadAsset:
    """Tests for upload_asset."""

    @pytest.mark.asyncio
    async def test_returns_artifact(self, storage, asset, mock_s3_client):
        """A successful upload yields a complete artifact descriptor."""
        artifact = await upload_asset(storage, asset, "1.2.3", SHA)

        content = asset.path.read_bytes()
        assert artifact == Artifact(
            name="My App.zip",
            url="https://s3.amazonaws.com/releases-bucket/releases/1.2.3-abcdef12/MyApp.zip",
            size=len(content),
            sha=hashlib.sha1(content).hexdigest(),
        )
        mock_s3_client.upload_file.assert_called_once_with(
            str(asset.path),
            "releases-bucket",
            "releases/1.2.3-abcdef12/MyApp.zip",
            ExtraArgs={"ACL": "public-read"},
        )

    @pytest.mark.asyncio
    async def test_artifact_to_dict(self, storage, asset):
        """Artifacts serialize to name, url, size, and sha."""
        artifact = await upload_asset(storage, asset, "1.2.3", SHA)

        assert set(artifact.to_dict()) == {"name", "url", "size", "sha"}

    @pytest.mark.asyncio
    async def test_missing_file(self, storage, tmp_path, mock_s3_client):
        """A missing asset fails before anything is uploaded."""
        missing = ReleaseAsset("Gone.zip", tmp_path / "Gone.zip")

        with pytest.raises(UploadError, match="not found"):
            await upload_asset(storage, missing, "1.2.3", SHA)

        mock_s3_client.upload_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_file_changed_during_upload(self, storage, asset, mock_s3_client):
        """A file rewritten while uploading fails instead of publishing a stale hash."""
        def rewrite(filename, bucket, key, ExtraArgs=None):
            with open(filename, "ab") as f:
                f.write(b"appended while uploading")

        mock_s3_client.upload_file.side_effect = rewrite

        with pytest.raises(UploadError, match="changed"):
            await upload_asset(storage, asset, "1.2.3", SHA)


class TestUploadAssets:
    """Tests for concurrent batch uploads."""

    @pytest.fixture
    def assets(self, tmp_path):
        """Three installer assets."""
        result = []
        for name in ("App Setup.msi", "App Setup.exe", "App-1.0.0-full.nupkg"):
            path = tmp_path / name.replace(" ", "")
            path.write_bytes(name.encode("utf-8") * 100)
            result.append(ReleaseAsset(name, path))
        return result

    @pytest.mark.asyncio
    async def test_uploads_every_asset_in_order(self, storage, assets, mock_s3_client):
        """Every asset is uploaded and artifacts keep the asset order."""
        artifacts = await upload_assets(storage, assets, "1.0.0", SHA)

        assert [a.name for a in artifacts] == [a.name for a in assets]
        assert mock_s3_client.upload_file.call_count == 3
        for artifact, asset in zip(artifacts, assets):
            assert artifact.sha == hashlib.sha1(asset.path.read_bytes()).hexdigest()
            assert artifact.size == asset.path.stat().st_size

    @pytest.mark.asyncio
    async def test_empty_batch(self, storage, mock_s3_client):
        """An empty batch uploads nothing."""
        assert await upload_assets(storage, [], "1.0.0", SHA) == []
        mock_s3_client.upload_file.assert_not_called()

    @pytest.mark.asyncio
    async def test_single_failure_fails_batch(self, storage, assets, mock_s3_client):
        """One rejected upload fails the whole batch."""
        def upload(filename, bucket, key, ExtraArgs=None):
            if key.endswith(".exe"):
                raise ClientError({"Error": {"Code": "AccessDenied"}}, "PutObject")

        mock_s3_client.upload_file.side_effect = upload

        with pytest.raises(UploadError) as exc_info:
            await upload_assets(storage, assets, "1.0.0", SHA)

        assert exc_info.value.asset_name == "App Setup.exe"

    @pytest.mark.asyncio
    async def test_missing_asset_fails_batch(self, storage, assets):
        """A missing asset file fails the batch."""
        assets[1].path.unlink()

        with pytest.raises(UploadError, match="not found"):
            await upload_assets(storage, assets, "1.0.0", SHA)
