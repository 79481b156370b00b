"""
Feed Backend — Feed API Tests
===============================

What:  End-to-end HTTP tests for /feed, /auth, /images and /health.
How:   HTTPX AsyncClient against create_app() with an in-memory SQLite store.

What we test:
    ✅ List/create contract and the 201/422 envelopes
    ✅ Validation failures never reach the store
    ✅ Image intake: PNG stored with timestamp name, GIF dropped or rejected
    ✅ Store failure → 500 envelope, nothing created
    ✅ CORS and X-Request-ID headers on every response
"""

from datetime import datetime
from pathlib import Path
from unittest.mock import AsyncMock

import pytest
from sqlalchemy.exc import OperationalError

from feed_backend.config import settings
from feed_backend.services.feed_service import get_feed_service
from feed_backend.services.post_store import PostStore, get_post_store

CORS_HEADERS = {
    "access-control-allow-origin": "*",
    "access-control-allow-methods": "GET, POST, PUT, PATCH, DELETE, OPTIONS",
    "access-control-allow-headers": "Content-Type, Authorization",
}


async def _create(client, title, content):
    return await client.post("/feed/post", json={"title": title, "content": content})


class TestListPosts:

    @pytest.mark.asyncio
    async def test_empty_store_returns_empty_list(self, test_client):
        response = await test_client.get("/feed/posts")

        assert response.status_code == 200
        assert response.json() == {"posts": []}

    @pytest.mark.asyncio
    async def test_lists_all_posts_in_creation_order(self, test_client):
        for i in range(3):
            assert (await _create(test_client, f"Post {i}", f"Content {i}")).status_code == 201

        first = await test_client.get("/feed/posts")
        second = await test_client.get("/feed/posts")

        titles = [post["title"] for post in first.json()["posts"]]
        assert titles == ["Post 0", "Post 1", "Post 2"]
        ids = [post["id"] for post in first.json()["posts"]]
        assert len(set(ids)) == 3
        # Idempotent without writes in between
        assert first.json() == second.json()


class TestCreatePost:

    @pytest.mark.asyncio
    async def test_valid_post_returns_201(self, test_client):
        response = await _create(test_client, "Hi", "Short")

        assert response.status_code == 201
        body = response.json()
        assert body["message"] == "Post created successfully"
        post = body["post"]
        assert post["title"] == "Hi"
        assert post["content"] == "Short"
        assert post["imageUrl"] == settings.default_image_url
        assert post["creator"] == {"name": settings.default_creator_name}
        assert post["id"]
        assert post["createdAt"]

    @pytest.mark.asyncio
    async def test_created_post_is_listed(self, test_client):
        created = (await _create(test_client, "Hello", "World!")).json()["post"]

        listed = (await test_client.get("/feed/posts")).json()["posts"]

        assert [post["id"] for post in listed] == [created["id"]]

    @pytest.mark.asyncio
    async def test_created_at_matches_listing(self, test_client):
        created = (await _create(test_client, "Hello", "World!")).json()["post"]

        (listed,) = (await test_client.get("/feed/posts")).json()["posts"]

        assert listed["createdAt"] == created["createdAt"]

    @pytest.mark.asyncio
    async def test_long_title_is_accepted(self, test_client):
        title = "T" * 300

        response = await _create(test_client, title, "No upper limit on titles")

        assert response.status_code == 201
        listed = (await test_client.get("/feed/posts")).json()["posts"]
        assert listed[0]["title"] == title

    @pytest.mark.asyncio
    async def test_invalid_fields_return_422(self, test_client):
        response = await _create(test_client, "", "x")

        assert response.status_code == 422
        body = response.json()
        assert body["message"] == "Validation failed, entered data is incorrect."
        paths = {error["path"] for error in body["errors"]}
        assert paths == {"title", "content"}
        assert all(error["location"] == "body" for error in body["errors"])

    @pytest.mark.asyncio
    async def test_invalid_fields_do_not_touch_store(self, test_app, test_client, mock_db_session):
        test_app.dependency_overrides[get_post_store] = lambda: PostStore(mock_db_session)

        response = await _create(test_client, "   ", "x")

        assert response.status_code == 422
        mock_db_session.add.assert_not_called()
        mock_db_session.commit.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_missing_fields_return_422(self, test_client):
        response = await test_client.post("/feed/post", json={})

        assert response.status_code == 422
        paths = {error["path"] for error in response.json()["errors"]}
        assert paths == {"title", "content"}

    @pytest.mark.asyncio
    async def test_malformed_json_returns_422(self, test_client):
        response = await test_client.post(
            "/feed/post",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )

        assert response.status_code == 422
        assert response.json()["errors"][0]["path"] == "body"

    @pytest.mark.asyncio
    async def test_form_fields_are_accepted(self, test_client):
        response = await test_client.post(
            "/feed/post",
            data={"title": "Form post", "content": "Sent as a form"},
        )

        assert response.status_code == 201
        assert response.json()["post"]["title"] == "Form post"


class TestImageUpload:

    @pytest.mark.asyncio
    async def test_png_is_stored_with_timestamp_name(self, test_client, image_service, sample_png_bytes):
        response = await test_client.post(
            "/feed/post",
            data={"title": "With image", "content": "Look at this"},
            files={"image": ("photo.png", sample_png_bytes, "image/png")},
        )

        assert response.status_code == 201
        image_url = response.json()["post"]["imageUrl"]
        assert image_url.startswith("images/")

        stored_name = image_url[len("images/"):]
        timestamp, original = stored_name[:24], stored_name[24:]
        # e.g. 2026-10-18T09:15:02.481Z
        datetime.fromisoformat(timestamp.replace("Z", "+00:00"))
        assert original == "-photo.png"

        stored = Path(image_service.images_dir) / stored_name
        assert stored.read_bytes() == sample_png_bytes

    @pytest.mark.asyncio
    async def test_stored_image_is_served(self, test_client, sample_png_bytes):
        created = await test_client.post(
            "/feed/post",
            data={"title": "Served", "content": "Fetch me back"},
            files={"image": ("served.png", sample_png_bytes, "image/png")},
        )
        image_url = created.json()["post"]["imageUrl"]

        response = await test_client.get(f"/{image_url}")

        assert response.status_code == 200
        assert response.content == sample_png_bytes

    @pytest.mark.asyncio
    @pytest.mark.parametrize("filename", ["my pic#1.png", "100% real?.png", "with space.jpg"])
    async def test_image_with_url_characters_is_served(self, test_client, sample_png_bytes, filename):
        created = await test_client.post(
            "/feed/post",
            data={"title": "Odd name", "content": "Fetch me back"},
            files={"image": (filename, sample_png_bytes, "image/png")},
        )
        image_url = created.json()["post"]["imageUrl"]

        response = await test_client.get(f"/{image_url}")

        assert response.status_code == 200
        assert response.content == sample_png_bytes

    @pytest.mark.asyncio
    async def test_long_filename_is_shortened(self, test_client, image_service, sample_png_bytes):
        response = await test_client.post(
            "/feed/post",
            data={"title": "Long name", "content": "Still an image"},
            files={"image": ("a" * 240 + ".png", sample_png_bytes, "image/png")},
        )

        assert response.status_code == 201
        image_url = response.json()["post"]["imageUrl"]
        stored_name = image_url[len("images/"):]
        assert len(stored_name.encode()) <= 255
        assert stored_name.endswith("a.png")
        assert (Path(image_service.images_dir) / stored_name).read_bytes() == sample_png_bytes
        assert (await test_client.get(f"/{image_url}")).status_code == 200

    @pytest.mark.asyncio
    async def test_gif_is_dropped_and_default_url_kept(self, test_client):
        response = await test_client.post(
            "/feed/post",
            data={"title": "Animated", "content": "Not accepted"},
            files={"image": ("anim.gif", b"GIF89a\x01\x00\x01\x00", "image/gif")},
        )

        assert response.status_code == 201
        assert response.json()["post"]["imageUrl"] == settings.default_image_url

    @pytest.mark.asyncio
    async def test_gif_rejected_in_strict_mode(self, test_client, monkeypatch):
        monkeypatch.setattr(settings, "image_reject_unsupported", True)

        response = await test_client.post(
            "/feed/post",
            data={"title": "Animated", "content": "Not accepted"},
            files={"image": ("anim.gif", b"GIF89a\x01\x00\x01\x00", "image/gif")},
        )

        assert response.status_code == 415
        assert response.json()["data"]["contentType"] == "image/gif"
        assert (await test_client.get("/feed/posts")).json() == {"posts": []}

    @pytest.mark.asyncio
    async def test_missing_image_file_returns_404_envelope(self, test_client):
        response = await test_client.get("/images/does-not-exist.png")

        assert response.status_code == 404
        assert "message" in response.json()


class TestErrors:

    @pytest.mark.asyncio
    async def test_store_failure_returns_500_and_creates_nothing(self, test_app, test_client, session_factory):
        async def failing_store():
            async with session_factory() as session:
                session.commit = AsyncMock(
                    side_effect=OperationalError("INSERT INTO posts", {}, Exception("connection lost"))
                )
                yield PostStore(session)

        test_app.dependency_overrides[get_post_store] = failing_store

        response = await _create(test_client, "Doomed", "Never stored")

        assert response.status_code == 500
        assert response.json()["message"] == "connection lost"

        del test_app.dependency_overrides[get_post_store]
        assert (await test_client.get("/feed/posts")).json() == {"posts": []}

    @pytest.mark.asyncio
    async def test_unhandled_error_returns_500_envelope(self, test_app, test_client):
        class BrokenService:
            async def list_posts(self):
                raise RuntimeError("boom")

        test_app.dependency_overrides[get_feed_service] = lambda: BrokenService()

        response = await test_client.get("/feed/posts")

        assert response.status_code == 500
        assert response.json() == {"message": "boom"}
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_unknown_route_returns_404_envelope(self, test_client):
        response = await test_client.get("/nope")

        assert response.status_code == 404
        assert response.json() == {"message": "Not Found"}


class TestGateway:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("path", ["/feed/posts", "/nope", "/health"])
    async def test_cors_headers_on_every_response(self, test_client, path):
        response = await test_client.get(path)

        for header, value in CORS_HEADERS.items():
            assert response.headers[header] == value

    @pytest.mark.asyncio
    async def test_preflight_is_answered(self, test_client):
        response = await test_client.options(
            "/feed/post",
            headers={"Origin": "http://localhost:3000", "Access-Control-Request-Method": "POST"},
        )

        assert response.status_code == 200
        assert response.headers["access-control-allow-origin"] == "*"

    @pytest.mark.asyncio
    async def test_request_id_is_echoed(self, test_client):
        response = await test_client.get("/feed/posts", headers={"X-Request-ID": "abc123"})
        assert response.headers["x-request-id"] == "abc123"

        generated = await test_client.get("/feed/posts")
        assert len(generated.headers["x-request-id"]) == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("client_id", ["x" * 65, "abc def", "id\"<script>"])
    async def test_unsafe_request_id_is_replaced(self, test_client, client_id):
        response = await test_client.get("/feed/posts", headers={"X-Request-ID": client_id})

        assert response.headers["x-request-id"] != client_id
        assert len(response.headers["x-request-id"]) == 8

    @pytest.mark.asyncio
    @pytest.mark.parametrize("method, path", [("PUT", "/auth/signup"), ("POST", "/auth/login")])
    async def test_auth_routes_are_placeholders(self, test_client, method, path):
        response = await test_client.request(method, path)

        assert response.status_code == 501
        assert "not available" in response.json()["message"]

    @pytest.mark.asyncio
    async def test_health_reports_store(self, test_client):
        response = await test_client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "healthy"
        assert body["database"] == "connected"
