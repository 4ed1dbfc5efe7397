import asyncio
import logging

from fastapi.testclient import TestClient

import config
from auth import decode_access_token
from errors import QueryError
from main import create_app
from repositories import posts

PNG = b"\x89PNG\r\n\x1a\n" + b"0" * 64


def signup(client, name="Ana", email="ana@x.com", password="p1", **extra):
    return client.post("/api/auth/cadastro", json={"name": name, "email": email, "password": password, **extra}).json()


def test_full_post_lifecycle(client):
    body = signup(client)
    assert body == {"success": True, "message": "User registered successfully!",
                    "data": {"id": 1, "name": "Ana", "email": "ana@x.com"}}

    again = signup(client)
    assert again["success"] is False
    assert "already registered" in again["message"]

    login = client.post("/api/auth/login", json={"email": "ana@x.com", "password": "p1"}).json()
    assert login["success"] is True
    assert login["data"]["user"]["id"] == 1
    assert "password" not in login["data"]["user"]
    assert "password_hash" not in login["data"]["user"]
    assert login["data"]["redirect_to"] == config.LOGIN_REDIRECT

    created = client.post("/api/posts/postar", data={"user_id": "1", "text": "bom dia"}).json()
    assert created["success"] is True
    post_id = created["data"]["id"]

    liked = client.post("/api/posts/curtir", json={"post_id": post_id, "user_id": 1}).json()
    assert liked["data"]["action"] == "liked"
    assert liked["data"]["total_likes"] == 1
    unliked = client.post("/api/posts/curtir", json={"post_id": post_id, "user_id": 1}).json()
    assert unliked["data"]["action"] == "unliked"
    assert unliked["data"]["total_likes"] == 0

    deleted = client.request("DELETE", f"/api/posts/deletar/{post_id}", json={"user_id": 1}).json()
    assert deleted == {"success": True, "message": "Post deleted successfully!", "data": {"post_id": post_id}}

    feed = client.get("/api/posts/feed").json()
    assert feed["success"] is True
    assert all(p["id"] != post_id for p in feed["data"])


def test_login_issues_a_token_for_the_user(client):
    signup(client)
    data = client.post("/api/auth/login", json={"email": "ana@x.com", "password": "p1"}).json()["data"]
    payload = decode_access_token(data["access_token"])
    assert payload["sub"] == "1"
    assert data["token_type"] == "bearer"
    assert decode_access_token("not-a-token") is None


def test_errors_are_reported_in_band_with_status_200(client):
    signup(client)
    wrong = client.post("/api/auth/login", json={"email": "ana@x.com", "password": "nope"})
    assert wrong.status_code == 200
    assert wrong.json() == {"success": False, "message": "Incorrect email or password"}

    missing = client.post("/api/auth/cadastro", json={"email": "x@x.com"})
    assert missing.status_code == 200
    assert missing.json()["success"] is False

    malformed = client.post("/api/posts/curtir", json={"post_id": "abc", "user_id": 1})
    assert malformed.status_code == 200
    assert malformed.json()["success"] is False
    assert "post_id" in malformed.json()["message"]


def test_unknown_api_route_is_a_404_envelope(client):
    response = client.get("/api/nope")
    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Endpoint not found"}


def test_wrong_method_on_known_route_is_a_404_envelope(client):
    for response in (client.get("/api/posts/postar"), client.post("/api/posts/feed"),
                     client.delete("/api/users/update")):
        assert response.status_code == 404
        assert response.json() == {"success": False, "message": "Endpoint not found"}


def test_update_user_route(client):
    signup(client)
    signup(client, name="Bia", email="bia@x.com")

    updated = client.put("/api/users/update", json={"user_id": 1, "name": "Ana M", "email": "ana@x.com", "bio": "oi"}).json()
    assert updated["data"] == {"id": 1, "name": "Ana M", "email": "ana@x.com", "bio": "oi"}

    conflict = client.put("/api/users/update", json={"user_id": 1, "name": "Ana", "email": "bia@x.com"}).json()
    assert conflict["success"] is False

    ghost = client.put("/api/users/update", json={"user_id": 9, "name": "G", "email": "g@x.com"}).json()
    assert ghost == {"success": False, "message": "User not found"}


def test_post_with_photo_and_avatar_upload_are_served(client):
    signup(client)

    created = client.post(
        "/api/posts/postar",
        data={"user_id": "1"},
        files={"photo": ("pic.png", PNG, "image/png")},
    ).json()
    image_path = created["data"]["image_path"]
    assert image_path.startswith("/uploads/posts/")
    served = client.get(image_path)
    assert served.status_code == 200
    assert served.content == PNG

    avatar = client.post(
        "/api/users/upload-avatar",
        data={"user_id": "1"},
        files={"avatar": ("me.jpg", PNG, "image/jpeg")},
    ).json()
    avatar_path = avatar["data"]["avatar_path"]
    assert avatar_path.startswith("/uploads/profiles/")
    assert client.get(avatar_path).status_code == 200

    profile = client.get("/api/users/1").json()["data"]
    assert profile["user"]["avatar_path"] == avatar_path
    assert profile["stats"]["total_posts"] == 1

    assert client.get("/uploads/posts/missing.png").status_code == 404


def test_upload_rejections(client):
    signup(client)

    text_file = client.post(
        "/api/posts/postar",
        data={"user_id": "1"},
        files={"photo": ("notes.txt", b"hello", "text/plain")},
    ).json()
    assert text_file == {"success": False, "message": "Only image files are allowed"}

    big_avatar = client.post(
        "/api/users/upload-avatar",
        data={"user_id": "1"},
        files={"avatar": ("me.png", b"0" * (2 * 1024 * 1024 + 1), "image/png")},
    ).json()
    assert big_avatar["success"] is False
    assert "2MB" in big_avatar["message"]

    empty_post = client.post("/api/posts/postar", data={"user_id": "1"}).json()
    assert empty_post["success"] is False

    no_file = client.post("/api/users/upload-avatar", data={"user_id": "1"}).json()
    assert no_file == {"success": False, "message": "User and file are required"}


def test_failed_post_insert_cleans_up_the_image(client, isolated_storage):
    created = client.post(
        "/api/posts/postar",
        data={"user_id": "7"},
        files={"photo": ("pic.png", PNG, "image/png")},
    ).json()
    assert created == {"success": False, "message": "User not found"}
    posts_dir = isolated_storage / "uploads" / "posts"
    assert not posts_dir.exists() or list(posts_dir.iterdir()) == []


def test_comment_and_feed_routes(client):
    signup(client)
    client.post("/api/posts/postar", data={"user_id": "1", "text": "bom dia"})
    for i in range(4):
        comment = client.post("/api/posts/comentar", json={"post_id": 1, "user_id": 1, "text": f"c{i}"}).json()
        assert comment["success"] is True

    blank = client.post("/api/posts/comentar", json={"post_id": 1, "user_id": 1, "text": ""}).json()
    assert blank["success"] is False

    feed = client.get("/api/posts/feed").json()["data"]
    assert len(feed) == 1
    assert feed[0]["comment_count"] == 4
    assert [c["content"] for c in feed[0]["comments"]] == ["c0", "c1", "c2"]

    too_many = client.get("/api/posts/feed?limit=50").json()
    assert too_many["success"] is False


def test_delete_requires_owner_or_admin(client, monkeypatch):
    monkeypatch.setattr(config, "ADMIN_EMAILS", ["admin@x.com"])
    signup(client)
    signup(client, name="Bia", email="bia@x.com")
    signup(client, name="Admin", email="admin@x.com")
    client.post("/api/posts/postar", data={"user_id": "1", "text": "bom dia"})

    refused = client.request("DELETE", "/api/posts/deletar/1", json={"user_id": 2}).json()
    assert refused == {"success": False, "message": "You do not have permission to delete this post"}

    missing_user = client.request("DELETE", "/api/posts/deletar/1").json()
    assert missing_user["success"] is False

    allowed = client.request("DELETE", "/api/posts/deletar/1", json={"user_id": 3}).json()
    assert allowed["success"] is True


def test_profile_of_unknown_user(client):
    assert client.get("/api/users/5").json() == {"success": False, "message": "User not found"}
    assert client.get("/api/users/abc").json() == {"success": False, "message": "Invalid user id"}


def test_storage_errors_are_logged_with_traceback_and_hidden_from_clients(client, monkeypatch, caplog):
    def broken_feed(limit):
        raise QueryError(detail="disk I/O error")

    monkeypatch.setattr(posts, "list_feed", broken_feed)
    with caplog.at_level(logging.ERROR, logger="main"):
        body = client.get("/api/posts/feed").json()

    assert body == {"success": False, "message": "Internal server error"}
    record = next(r for r in caplog.records if r.name == "main" and r.levelno == logging.ERROR)
    assert "disk I/O error" in record.getMessage()
    assert record.exc_info is not None


def test_api_info(client):
    body = client.get("/api").json()
    assert body["success"] is True
    assert "GET /api/posts/feed" in body["data"]["endpoints"]


def test_slow_requests_time_out(monkeypatch):
    monkeypatch.setattr(config, "REQUEST_TIMEOUT_SECONDS", 0.05)
    app = create_app()

    @app.get("/api/slow")
    async def slow():
        await asyncio.sleep(1)
        return {"success": True}

    with TestClient(app) as client:
        response = client.get("/api/slow")
    assert response.status_code == 504
    assert response.json() == {"success": False, "message": "Request timed out"}
