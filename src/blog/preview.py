"""
Preview mode: turn a CMS preview token into a redirect to the previewed post.

The CMS "Preview" button calls /api/preview?token=...&documentId=... The
token doubles as the content ref for every query made while previewing; it
is carried between requests in the preview cookie (PreviewData).
"""

import html
import json
from dataclasses import dataclass
from typing import Optional
from urllib.parse import quote, unquote

from .errors import FetchFailure, InvalidPreviewToken

POST_TYPE = 'post'
PREVIEW_COOKIE = 'blog_preview'


def link_resolver(doc: dict) -> str:
    """URL of a document (or document link) on the site."""
    if doc.get('type') == POST_TYPE and doc.get('uid'):
        return f"/post/{doc['uid']}"
    return '/'


@dataclass(frozen=True)
class PreviewData:
    """What the preview cookie carries between requests."""
    ref: str

    def to_cookie(self) -> str:
        return quote(json.dumps({'ref': self.ref}), safe='')

    @classmethod
    def from_cookie(cls, value: Optional[str]) -> Optional['PreviewData']:
        """Parse a cookie value; None when absent or unreadable."""
        if not value:
            return None
        try:
            data = json.loads(unquote(value))
        except ValueError:
            return None
        if not isinstance(data, dict) or not data.get('ref'):
            return None
        return cls(ref=data['ref'])


def resolve_preview(client, token: str, document_id: Optional[str] = None, default_url: str = '/') -> str:
    """
    Resolve a preview token to the URL of the previewed document.

    Args:
        client: PrismicClient
        token: Preview token (a URL) from the CMS
        document_id: Document being previewed, when the CMS passes it
        default_url: Where to go if the session has no main document

    Returns:
        Site URL to redirect to

    Raises:
        InvalidPreviewToken: the token or document can't be resolved
    """
    if not token:
        raise InvalidPreviewToken("Missing preview token")

    try:
        if not document_id:
            session = client.preview_session(token)
            document_id = session.get('mainDocument')
            if not document_id:
                return default_url

        doc = client.get_by_id(document_id, ref=token)
    except FetchFailure as e:
        raise InvalidPreviewToken(f"Could not resolve preview token: {e}") from e

    if doc is None:
        raise InvalidPreviewToken(f"Previewed document {document_id} not found")
    return link_resolver(doc)


def redirect_html(url: str) -> str:
    """Page that sends the browser on to `url`."""
    attr = html.escape(url, quote=True)
    script_url = json.dumps(url).replace('<', '\\u003c')
    return (
        '<!DOCTYPE html><html><head>'
        f'<meta http-equiv="Refresh" content="0; url={attr}" />'
        f'<script>window.location.href = {script_url}</script>'
        '</head></html>'
    )
