"""Tests for core.storage_service module."""

import re
from unittest.mock import MagicMock

import pytest

from core.errors import BackendError
from core.storage_service import LeafImageStorage

PUBLIC_BASE = "https://abc.supabase.co/storage/v1/object/public/leaf-images/"


@pytest.fixture
def client():
    client = MagicMock()
    bucket = client.storage.from_.return_value
    bucket.get_public_url.side_effect = lambda path: PUBLIC_BASE + path
    return client


@pytest.fixture
def bucket(client):
    return client.storage.from_.return_value


class TestUpload:
    def test_upload_returns_public_url(self, client, bucket, leaf_image):
        storage = LeafImageStorage(client)
        url = storage.upload(leaf_image, "user-1")

        client.storage.from_.assert_called_with("leaf-images")
        kwargs = bucket.upload.call_args.kwargs
        assert re.fullmatch(r"user-1/\d{13}\.jpg", kwargs["path"])
        assert kwargs["file_options"]["content-type"] == "image/jpeg"
        with open(leaf_image, "rb") as f:
            assert kwargs["file"] == f.read()
        assert url == PUBLIC_BASE + kwargs["path"]

    def test_guest_folder(self, client, bucket, second_leaf_image):
        LeafImageStorage(client).upload(second_leaf_image)
        path = bucket.upload.call_args.kwargs["path"]
        assert path.startswith("guest/")
        assert path.endswith(".png")

    def test_custom_bucket(self, client, leaf_image):
        storage = LeafImageStorage(client, bucket="scans")
        storage.upload(leaf_image, "user-1")
        client.storage.from_.assert_called_with("scans")
        assert storage.bucket == "scans"

    def test_missing_file(self, client, bucket):
        with pytest.raises(BackendError):
            LeafImageStorage(client).upload("/nonexistent/leaf.jpg", "user-1")
        bucket.upload.assert_not_called()

    def test_upload_failure(self, client, bucket, leaf_image):
        bucket.upload.side_effect = RuntimeError("Bucket not found")
        with pytest.raises(BackendError, match="Bucket not found"):
            LeafImageStorage(client).upload(leaf_image, "user-1")


class TestObjectPath:
    def test_from_public_url(self, client):
        storage = LeafImageStorage(client)
        assert storage.object_path_from_url(PUBLIC_BASE + "user-1/1700000000000.jpg") == "user-1/1700000000000.jpg"

    def test_url_encoded(self, client):
        storage = LeafImageStorage(client)
        assert storage.object_path_from_url(PUBLIC_BASE + "user%201/a.jpg") == "user 1/a.jpg"

    def test_other_bucket_or_local_path(self, client):
        storage = LeafImageStorage(client)
        assert storage.object_path_from_url("https://cdn.example.com/other/a.jpg") is None
        assert storage.object_path_from_url("/home/me/leaf.jpg") is None
        assert storage.object_path_from_url("") is None


class TestDelete:
    def test_removes_object(self, client, bucket):
        bucket.remove.return_value = [{"name": "user-1/a.jpg"}]
        assert LeafImageStorage(client).delete(PUBLIC_BASE + "user-1/a.jpg")
        bucket.remove.assert_called_once_with(["user-1/a.jpg"])

    def test_nothing_removed(self, client, bucket):
        bucket.remove.return_value = []
        assert not LeafImageStorage(client).delete(PUBLIC_BASE + "user-1/a.jpg")

    def test_failure_is_reported_not_raised(self, client, bucket):
        bucket.remove.side_effect = RuntimeError("network down")
        assert not LeafImageStorage(client).delete(PUBLIC_BASE + "user-1/a.jpg")

    def test_foreign_url_skipped(self, client, bucket):
        assert not LeafImageStorage(client).delete("https://cdn.example.com/a.jpg")
        bucket.remove.assert_not_called()
