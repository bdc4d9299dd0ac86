# tests/services/test_asset_store.py
"""Tests for the Cloudinary asset store."""

from unittest.mock import patch

import pytest
from cloudinary.exceptions import Error as CloudinaryError

from qa_forum.core.errors import DependencyFailureError, ValidationFailedError
from qa_forum.services.assets import AssetConfig, CloudinaryAssetStore

CONFIG = AssetConfig(
    cloud_name="demo",
    api_key="key",
    api_secret="secret",
    folder="qa-forum",
    upload_prefix="https://api.cloudinary.test",
    timeout_seconds=1.0,
    max_bytes=16,
)


def test_upload_returns_asset_reference() -> None:
    payload = {
        "secure_url": "https://res.cloudinary.test/x.png",
        "public_id": "qa-forum/x",
        "width": 10,
        "height": 20,
        "format": "png",
        "bytes": 4,
    }
    with patch("cloudinary.uploader.upload", return_value=payload) as upload:
        asset = CloudinaryAssetStore(config=CONFIG).upload(b"\x89PNG", "x.png", "image/png")

    assert asset.public_id == "qa-forum/x"
    assert asset.as_dict()["url"] == "https://res.cloudinary.test/x.png"
    args, kwargs = upload.call_args
    assert args == (("x.png", b"\x89PNG"),)
    assert kwargs["folder"] == "qa-forum"
    assert "png" in kwargs["allowed_formats"]


def test_upload_rejects_non_images() -> None:
    store = CloudinaryAssetStore(config=CONFIG)

    with patch("cloudinary.uploader.upload") as upload:
        with pytest.raises(ValidationFailedError):
            store.upload(b"hello", "notes.txt", "text/plain")
        with pytest.raises(ValidationFailedError):
            store.upload(b"x" * 17, "big.png", "image/png")

    upload.assert_not_called()
    assert store.read_limit == 17


def test_upload_failure_is_dependency_failure() -> None:
    with patch("cloudinary.uploader.upload", side_effect=CloudinaryError("boom")):
        with pytest.raises(DependencyFailureError):
            CloudinaryAssetStore(config=CONFIG).upload(b"\x89PNG", "x.png", "image/png")


def test_unconfigured_store_refuses_calls() -> None:
    config = AssetConfig(
        cloud_name=None,
        api_key=None,
        api_secret=None,
        folder="qa-forum",
        upload_prefix="https://api.cloudinary.test",
        timeout_seconds=1.0,
        max_bytes=16,
    )
    store = CloudinaryAssetStore(config=config)

    assert store.enabled is False
    with patch("cloudinary.uploader.destroy") as destroy:
        with pytest.raises(DependencyFailureError):
            store.destroy("qa-forum/x")
    destroy.assert_not_called()


def test_destroy_treats_missing_image_as_gone() -> None:
    with patch("cloudinary.uploader.destroy", return_value={"result": "not found"}):
        CloudinaryAssetStore(config=CONFIG).destroy("qa-forum/x")


def test_discard_continues_past_failures() -> None:
    def destroy(public_id, **options):
        if public_id == "qa-forum/bad":
            raise CloudinaryError("boom")
        if public_id == "qa-forum/odd":
            return {"result": "error"}
        return {"result": "ok"}

    with patch("cloudinary.uploader.destroy", side_effect=destroy) as mocked:
        leftovers = CloudinaryAssetStore(config=CONFIG).discard(
            [
                {"public_id": "qa-forum/a"},
                {"public_id": "qa-forum/bad"},
                {"url": "https://res.cloudinary.test/no-id.png"},
                {"public_id": "qa-forum/odd"},
            ]
        )

    assert [call.args[0] for call in mocked.call_args_list] == [
        "qa-forum/a",
        "qa-forum/bad",
        "qa-forum/odd",
    ]
    assert leftovers == ["qa-forum/bad", "qa-forum/odd"]
