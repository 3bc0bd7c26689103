"""Tests for server.py — the dev server routes."""

import threading
from http.server import HTTPServer

import httpx
import pytest

from blog.preview import PREVIEW_COOKIE, PreviewData
from blog.server import BlogServer

from conftest import PREVIEW_REF, make_post


def get(url, **kwargs):
    # Skip proxy settings from the environment for loopback requests
    return httpx.get(url, trust_env=False, **kwargs)


@pytest.fixture
def server_url(cms_client, monkeypatch):
    monkeypatch.setattr(BlogServer, "client", cms_client)
    monkeypatch.setattr(BlogServer, "home_page_size", 2)
    httpd = HTTPServer(("127.0.0.1", 0), BlogServer)
    thread = threading.Thread(target=httpd.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{httpd.server_address[1]}"
    httpd.shutdown()
    httpd.server_close()


class TestRoutes:

    def test_index(self, server_url):
        response = get(f"{server_url}/api/posts")
        assert response.status_code == 200
        data = response.json()
        assert [p["slug"] for p in data["posts"]] == ["third-post", "second-post"]
        assert data["has_more"] is True

    def test_post(self, server_url):
        data = get(f"{server_url}/api/post/second-post").json()
        assert data["title"] == "Second post"
        assert data["prev_post"]["slug"] == "first-post"
        assert data["preview"] is False

    def test_missing_post(self, server_url):
        response = get(f"{server_url}/api/post/missing")
        assert response.status_code == 404

    def test_unknown_route(self, server_url):
        assert get(f"{server_url}/nope").status_code == 404

    def test_more_with_unreachable_cursor(self, server_url):
        response = get(f"{server_url}/api/posts/more", params={"cursor": "http://127.0.0.1:1/p2"})
        assert response.status_code == 502

    def test_more_without_cursor(self, server_url):
        data = get(f"{server_url}/api/posts/more").json()
        assert data == {"posts": [], "next_page": None, "has_more": False}


class TestPreviewRoutes:

    def test_enter_preview(self, server_url, fake_cms):
        fake_cms.preview_documents = [make_post("draft", None, title="Draft")]
        response = get(f"{server_url}/api/preview", params={"token": PREVIEW_REF, "documentId": "id-draft"})
        assert response.status_code == 200
        assert "/post/draft" in response.text
        assert response.headers["set-cookie"].startswith(f"{PREVIEW_COOKIE}=")

    def test_invalid_token(self, server_url):
        response = get(f"{server_url}/api/preview", params={"token": ""})
        assert response.status_code == 401
        assert response.json() == {"message": "Invalid token"}

    def test_preview_cookie_used_for_post(self, server_url, fake_cms):
        fake_cms.preview_documents = [make_post("draft", None, title="Draft")]
        cookie = PreviewData(ref=PREVIEW_REF).to_cookie()
        response = get(f"{server_url}/api/post/draft", headers={"Cookie": f"{PREVIEW_COOKIE}={cookie}"})
        assert response.status_code == 200
        data = response.json()
        assert data["title"] == "Draft"
        assert data["preview"] is True

    def test_preview_index_lists_drafts(self, server_url, fake_cms):
        fake_cms.preview_documents = [make_post("draft", None, title="Draft")]
        cookie = PreviewData(ref=PREVIEW_REF).to_cookie()
        response = get(f"{server_url}/api/posts", headers={"Cookie": f"{PREVIEW_COOKIE}={cookie}"})
        assert response.status_code == 200
        first = response.json()["posts"][0]
        assert first["slug"] == "draft"
        assert first["date"] is None

    def test_exit_preview(self, server_url):
        response = get(f"{server_url}/api/exit-preview")
        assert "Max-Age=0" in response.headers["set-cookie"]
