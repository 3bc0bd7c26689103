"""Tests for preview.py — preview tokens, redirects and the preview cookie."""

import pytest

from blog.errors import InvalidPreviewToken
from blog.preview import PreviewData, link_resolver, redirect_html, resolve_preview

from conftest import PREVIEW_REF, make_post


class TestLinkResolver:

    def test_post(self):
        assert link_resolver({"type": "post", "uid": "hello"}) == "/post/hello"

    def test_other_types_go_home(self):
        assert link_resolver({"type": "page", "uid": "about"}) == "/"

    def test_post_without_uid(self):
        assert link_resolver({"type": "post", "uid": None}) == "/"


class TestResolvePreview:

    def test_with_document_id(self, cms_client, fake_cms):
        fake_cms.preview_documents = [make_post("draft", None)]
        assert resolve_preview(cms_client, PREVIEW_REF, "id-draft") == "/post/draft"

    def test_main_document_from_session(self, cms_client, fake_cms):
        fake_cms.preview_documents = [make_post("draft", None)]
        assert resolve_preview(cms_client, PREVIEW_REF) == "/post/draft"

    def test_session_without_main_document(self, cms_client):
        assert resolve_preview(cms_client, PREVIEW_REF, default_url="/home") == "/home"

    def test_missing_token(self, cms_client):
        with pytest.raises(InvalidPreviewToken):
            resolve_preview(cms_client, "")

    def test_unknown_document(self, cms_client):
        with pytest.raises(InvalidPreviewToken):
            resolve_preview(cms_client, PREVIEW_REF, "id-nope")

    def test_bad_token(self, cms_client):
        # The fake CMS rejects unknown refs with a 400
        with pytest.raises(InvalidPreviewToken):
            resolve_preview(cms_client, "https://blog.prismic.io/previews/bogus", "id-first-post")


class TestRedirectHtml:

    def test_contains_url(self):
        page = redirect_html("/post/hello")
        assert 'content="0; url=/post/hello"' in page
        assert 'window.location.href = "/post/hello"' in page

    def test_url_escaped(self):
        page = redirect_html('/post/"><script>x</script>')
        assert "<script>x</script>" not in page


class TestPreviewData:

    def test_cookie_round_trip(self):
        data = PreviewData(ref=PREVIEW_REF)
        assert PreviewData.from_cookie(data.to_cookie()) == data

    @pytest.mark.parametrize("value", [None, "", "%7Bnot-json", "%5B%5D", "%7B%7D"])
    def test_unreadable_cookie(self, value):
        assert PreviewData.from_cookie(value) is None
