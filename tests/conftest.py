"""
Pytest configuration and shared fixtures
"""

import re
import sys
from contextlib import asynccontextmanager
from pathlib import Path

import httpx
import pytest
from aiohttp import test_utils, web

# Add the package source directory to the Python path for imports
REPO_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from blog.prismic import PrismicClient  # noqa: E402

API_ENDPOINT = "https://blog.cdn.prismic.io/api/v2"
MASTER_REF = "master-ref"
PREVIEW_REF = "https://blog.prismic.io/previews/preview-ref"

PREDICATE_RE = re.compile(r'\[(at|date\.after|date\.before)\(([\w.]+), "(.*)"\)\]')


def make_post(uid, published, title=None, subtitle="", author="Ana", content=None, **extra):
    """A post document as the CMS returns it."""
    doc = {
        "id": f"id-{uid}",
        "uid": uid,
        "type": "post",
        "first_publication_date": published,
        "last_publication_date": extra.pop("last_published", published),
        "data": {
            "title": title or uid.replace("-", " ").title(),
            "subtitle": subtitle,
            "author": author,
            "banner": {"url": extra.pop("banner_url", None)},
            "content": content or [],
        },
    }
    doc.update(extra)
    return doc


class FakeCms:
    """In-memory stand-in for the CMS search API, served via httpx.MockTransport."""

    def __init__(self, documents, preview_documents=None):
        self.documents = list(documents)
        self.preview_documents = list(preview_documents or [])
        self.requests = []

    def _field(self, doc, path):
        if path == "document.type":
            return doc.get("type")
        if path == "document.id":
            return doc.get("id")
        if path == "document.first_publication_date":
            return doc.get("first_publication_date")
        if path.startswith("my.") and path.endswith(".uid"):
            return doc.get("uid")
        raise AssertionError(f"Unsupported predicate path {path}")

    def _matches(self, doc, predicate):
        match = PREDICATE_RE.fullmatch(predicate)
        assert match, f"Malformed predicate {predicate}"
        op, path, value = match.groups()
        actual = self._field(doc, path)
        if op == "at":
            return actual == value
        if actual is None:
            return False
        if op == "date.after":
            return actual > value
        return actual < value

    def search(self, request):
        params = request.url.params
        ref = params.get("ref")
        docs = self.documents
        if ref == PREVIEW_REF:
            docs = self.preview_documents + docs
        elif ref != MASTER_REF:
            return httpx.Response(400, json={"error": "unknown ref"})

        results = [d for d in docs if all(self._matches(d, p) for p in params.get_list("q"))]

        orderings = params.get("orderings")
        if orderings:
            descending = orderings.endswith(" desc]")
            results.sort(key=lambda d: d.get("first_publication_date") or "", reverse=descending)

        page_size = int(params.get("pageSize", 20))
        page = int(params.get("page", 1))
        start = (page - 1) * page_size
        chunk = results[start:start + page_size]

        next_page = None
        if start + page_size < len(results):
            next_page = str(request.url.copy_merge_params({"page": page + 1}))

        return httpx.Response(200, json={
            "page": page,
            "results_per_page": page_size,
            "total_results_size": len(results),
            "next_page": next_page,
            "results": chunk,
        })

    def handler(self, request):
        self.requests.append(request)
        path = request.url.path
        if path == "/api/v2":
            return httpx.Response(200, json={
                "refs": [
                    {"id": "master", "ref": MASTER_REF, "label": "Master", "isMasterRef": True},
                ],
            })
        if path == "/api/v2/documents/search":
            return self.search(request)
        if path == "/previews/preview-ref":
            docs = self.preview_documents
            return httpx.Response(200, json={"mainDocument": docs[0]["id"] if docs else None})
        return httpx.Response(404, json={"error": "not found"})

    def search_requests(self):
        return [r for r in self.requests if r.url.path.endswith("/documents/search")]


@pytest.fixture
def posts():
    """Three posts, newest first (the CMS default order for these tests)."""
    return [
        make_post("third-post", "2021-03-27T10:00:00+0000", title="Third post"),
        make_post("second-post", "2021-03-26T10:00:00+0000", title="Second post"),
        make_post("first-post", "2021-03-25T10:00:00+0000", title="First post"),
    ]


@pytest.fixture
def fake_cms(posts):
    return FakeCms(posts)


@pytest.fixture
def cms_client(fake_cms):
    """PrismicClient talking to the fake CMS."""
    http = httpx.Client(transport=httpx.MockTransport(fake_cms.handler))
    yield PrismicClient(API_ENDPOINT, client=http)
    http.close()


@pytest.fixture
def cursor_server():
    """
    Factory for a local HTTP server answering cursor URLs.

    `responses` maps a path to (status, body). A dict body is sent as JSON;
    a `next_page` starting with "/" is made absolute against the server.
    """
    @asynccontextmanager
    async def serve(responses):
        calls = []

        async def handler(request):
            calls.append(request.path)
            status, body = responses[request.path]
            if isinstance(body, dict):
                body = dict(body)
                next_page = body.get("next_page")
                if isinstance(next_page, str) and next_page.startswith("/"):
                    body["next_page"] = str(request.url.origin()) + next_page
                return web.json_response(body, status=status)
            return web.Response(status=status, text=body, content_type="application/json")

        app = web.Application()
        app.router.add_get("/{tail:.*}", handler)
        async with test_utils.TestServer(app) as server:
            server.calls = calls
            yield server

    return serve
