# tests/v1/test_social_api.py
"""Tests for notification, follow and upload endpoints."""

from fastapi import status

from qa_forum.api.v1.dependencies import get_asset_store_dep
from qa_forum.services.assets import AssetConfig, CloudinaryAssetStore, StoredAsset


def test_root_and_health(client) -> None:
    assert client.get("/health").json() == {"status": "ok"}
    assert client.get("/").status_code == status.HTTP_200_OK


def test_follow_flow_with_notifications(client, auth_headers, alice, bob) -> None:
    response = client.post("/api/v1/follow/", json={"userId": bob.id}, headers=auth_headers(alice))
    assert response.json() == {"message": "Successfully followed user", "status": "following"}

    graph = client.get("/api/v1/follow/", headers=auth_headers(bob)).json()
    assert graph["followers"] == [alice.id]

    listing = client.get("/api/v1/notifications/", headers=auth_headers(bob)).json()
    assert listing["unread"] == 1
    assert listing["notifications"][0]["type"] == "follow"
    assert listing["notifications"][0]["relatedUser"] == alice.id

    notification_id = listing["notifications"][0]["id"]
    read = client.put(
        f"/api/v1/notifications/{notification_id}/read", headers=auth_headers(bob)
    )
    assert read.json()["isRead"] is True

    response = client.delete(
        "/api/v1/follow/", params={"userId": bob.id}, headers=auth_headers(alice)
    )
    assert response.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/follow/", headers=auth_headers(bob)).json()["followers"] == []


def test_private_follow_request(client, auth_headers, alice, make_account) -> None:
    private = make_account(is_private=True)

    response = client.post(
        "/api/v1/follow/", json={"userId": private.id}, headers=auth_headers(alice)
    )
    assert response.json()["status"] == "pending"
    graph = client.get("/api/v1/follow/", headers=auth_headers(private)).json()
    assert graph["pendingRequests"] == [alice.id]

    accepted = client.post(
        "/api/v1/follow-requests/",
        json={"requesterId": alice.id},
        headers=auth_headers(private),
    )
    assert accepted.status_code == status.HTTP_200_OK
    assert client.get("/api/v1/follow/", headers=auth_headers(alice)).json()["following"] == [
        private.id
    ]


def test_follow_self_is_rejected(client, auth_headers, alice) -> None:
    response = client.post("/api/v1/follow/", json={"userId": alice.id}, headers=auth_headers(alice))

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert response.json() == {"error": "Cannot follow yourself"}


def test_mark_all_read(client, auth_headers, alice, bob, carol) -> None:
    client.post("/api/v1/follow/", json={"userId": alice.id}, headers=auth_headers(bob))
    client.post("/api/v1/follow/", json={"userId": alice.id}, headers=auth_headers(carol))

    response = client.put("/api/v1/notifications/read-all", headers=auth_headers(alice))

    assert response.json() == {"message": "Marked 2 notifications as read"}
    assert client.get("/api/v1/notifications/", headers=auth_headers(alice)).json()["unread"] == 0


def test_notifications_require_session(client) -> None:
    response = client.get("/api/v1/notifications/")

    assert response.status_code == status.HTTP_401_UNAUTHORIZED


class _UploadingStore(CloudinaryAssetStore):
    def __init__(self, max_bytes: int = 1024) -> None:
        super().__init__(
            config=AssetConfig(
                cloud_name="demo",
                api_key="key",
                api_secret="secret",
                folder="qa-forum",
                upload_prefix="https://api.cloudinary.test",
                timeout_seconds=1.0,
                max_bytes=max_bytes,
            )
        )
        self.received: list[tuple[str, str | None, int]] = []

    def upload(self, data: bytes, filename: str, content_type: str | None) -> StoredAsset:
        self.received.append((filename, content_type, len(data)))
        self.validate_upload(data, content_type)
        return StoredAsset(
            url="https://res.cloudinary.test/qa-forum/pic.png",
            public_id="qa-forum/pic",
            width=1,
            height=1,
            format="png",
            bytes=len(data),
        )


def test_upload_image(app, client, auth_headers, alice) -> None:
    store = _UploadingStore()
    app.dependency_overrides[get_asset_store_dep] = lambda: store
    try:
        response = client.post(
            "/api/v1/uploads/",
            files={"file": ("pic.png", b"\x89PNG....", "image/png")},
            headers=auth_headers(alice),
        )
    finally:
        app.dependency_overrides.pop(get_asset_store_dep, None)

    assert response.status_code == status.HTTP_201_CREATED
    assert response.json()["publicId"] == "qa-forum/pic"
    assert store.received == [("pic.png", "image/png", 8)]


def test_upload_without_configuration(client, auth_headers, alice) -> None:
    response = client.post(
        "/api/v1/uploads/",
        files={"file": ("pic.png", b"\x89PNG", "image/png")},
        headers=auth_headers(alice),
    )

    assert response.status_code == status.HTTP_502_BAD_GATEWAY


def test_upload_reads_no_further_than_the_size_limit(app, client, auth_headers, alice) -> None:
    store = _UploadingStore(max_bytes=16)
    app.dependency_overrides[get_asset_store_dep] = lambda: store
    try:
        response = client.post(
            "/api/v1/uploads/",
            files={"file": ("big.png", b"x" * 4096, "image/png")},
            headers=auth_headers(alice),
        )
    finally:
        app.dependency_overrides.pop(get_asset_store_dep, None)

    assert response.status_code == status.HTTP_400_BAD_REQUEST
    assert store.received == [("big.png", "image/png", 17)]
