"""
Upload API tests - multipart uploads and public retrieval headers.
"""

import pytest
from httpx import AsyncClient

from marketplace.core.security import create_identity_token
from marketplace.services.media_store import owner_scope

ALICE_SCOPE = owner_scope("uid-alice")


def _images(count: int, size: int = 16, name: str = "photo.jpg") -> list:
    return [("images", (name, b"\x89PNG" + b"0" * size, "image/jpeg")) for _ in range(count)]


@pytest.mark.asyncio
async def test_upload_requires_auth(client: AsyncClient):
    response = await client.post("/api/v1/uploads", files=_images(1))
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_upload_and_fetch(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/v1/uploads", headers=auth_headers, files=_images(2))
    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Files uploaded successfully"
    assert len(body["urls"]) == 2
    assert all(url.startswith(f"http://test/api/v1/uploads/{ALICE_SCOPE}/") for url in body["urls"])

    path = body["urls"][0].removeprefix("http://test")
    fetched = await client.get(path)
    assert fetched.status_code == 200
    assert fetched.content == b"\x89PNG" + b"0" * 16
    assert fetched.headers["access-control-allow-origin"] == "*"
    assert fetched.headers["access-control-allow-methods"] == "GET"
    assert fetched.headers["cross-origin-resource-policy"] == "cross-origin"
    assert fetched.headers["cross-origin-embedder-policy"] == "credentialless"


@pytest.mark.asyncio
async def test_upload_six_files_is_rejected(client: AsyncClient, auth_headers: dict, media_store):
    response = await client.post("/api/v1/uploads", headers=auth_headers, files=_images(6))
    assert response.status_code == 400
    assert response.json()["message"] == "At most 5 files can be uploaded at once"
    assert not (media_store.root / ALICE_SCOPE).exists()


@pytest.mark.asyncio
async def test_upload_oversized_file(client: AsyncClient, auth_headers: dict, media_store):
    response = await client.post(
        "/api/v1/uploads", headers=auth_headers, files=_images(1, size=media_store.max_bytes)
    )
    assert response.status_code == 413


@pytest.mark.asyncio
async def test_upload_without_files(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/v1/uploads", headers=auth_headers, data={"note": "nothing"})
    assert response.status_code == 400
    assert response.json()["errors"][0]["message"] == "No files uploaded"


@pytest.mark.asyncio
async def test_same_name_uploads_get_distinct_urls(client: AsyncClient, auth_headers: dict):
    first = await client.post("/api/v1/uploads", headers=auth_headers, files=_images(1, name="apple.jpg"))
    second = await client.post("/api/v1/uploads", headers=auth_headers, files=_images(1, name="apple.jpg"))
    first_url, second_url = first.json()["urls"][0], second.json()["urls"][0]
    assert first_url != second_url
    for url in (first_url, second_url):
        assert (await client.get(url.removeprefix("http://test"))).status_code == 200


@pytest.mark.asyncio
async def test_fetch_missing_file(client: AsyncClient):
    response = await client.get(f"/api/v1/uploads/{ALICE_SCOPE}/nothing.jpg")
    assert response.status_code == 404
    assert response.json() == {"message": "File not found"}


@pytest.mark.asyncio
@pytest.mark.parametrize("subject", ["auth0|abc123", "carol@example.com", "x" * 300])
async def test_upload_for_any_identity_subject(client: AsyncClient, subject: str):
    headers = {"Authorization": f"Bearer {create_identity_token(subject)}"}
    response = await client.post("/api/v1/uploads", headers=headers, files=_images(1))
    assert response.status_code == 200, response.text
    url = response.json()["urls"][0]
    assert url.startswith(f"http://test/api/v1/uploads/{owner_scope(subject)}/")

    fetched = await client.get(url.removeprefix("http://test"))
    assert fetched.status_code == 200
    assert fetched.content == b"\x89PNG" + b"0" * 16


@pytest.mark.asyncio
async def test_fetch_sets_content_type_from_extension(client: AsyncClient, auth_headers: dict):
    response = await client.post("/api/v1/uploads", headers=auth_headers, files=_images(1, name="apple.png"))
    fetched = await client.get(response.json()["urls"][0].removeprefix("http://test"))
    assert fetched.headers["content-type"] == "image/png"
