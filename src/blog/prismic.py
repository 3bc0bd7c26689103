"""
Minimal client for the Prismic REST API (v2).

Only the calls the blog needs:
- GET {endpoint}                     -> API info, including the master ref
- GET {endpoint}/documents/search    -> predicate queries (paginated)
- GET {preview token URL}            -> preview session (main document id)

Usage:
    client = PrismicClient("https://my-repo.cdn.prismic.io/api/v2")
    body = client.query([Predicates.at("document.type", "post")], page_size=1)
"""

import json
from typing import Optional

import httpx

from .errors import FetchFailure

DEFAULT_TIMEOUT = 30.0


def _quote(value) -> str:
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return json.dumps(str(value))


class Predicates:
    """Builders for Prismic query predicates."""

    @staticmethod
    def at(path: str, value) -> str:
        return f'[at({path}, {_quote(value)})]'

    @staticmethod
    def date_after(path: str, value) -> str:
        return f'[date.after({path}, {_quote(value)})]'

    @staticmethod
    def date_before(path: str, value) -> str:
        return f'[date.before({path}, {_quote(value)})]'


def order_by(*fields: str) -> str:
    """Prismic orderings parameter, e.g. order_by('document.first_publication_date desc')."""
    return '[' + ','.join(fields) + ']'


class PrismicClient:
    """Synchronous Prismic API client backed by httpx."""

    def __init__(
        self,
        endpoint: str,
        access_token: Optional[str] = None,
        client: Optional[httpx.Client] = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self.endpoint = endpoint.rstrip('/')
        self.access_token = access_token
        self.client = client
        self.timeout = timeout
        self._master_ref: Optional[str] = None
        self._owns_client = False

    def __enter__(self) -> 'PrismicClient':
        if self.client is None:
            self.client = httpx.Client(timeout=self.timeout)
            self._owns_client = True
        return self

    def __exit__(self, *exc_info) -> None:
        if self._owns_client:
            self.client.close()
            self.client = None
            self._owns_client = False

    def _get(self, url: str, params: Optional[list] = None) -> dict:
        """GET a JSON object, raising FetchFailure on any failure."""
        params = list(params or [])
        if self.access_token:
            params.append(('access_token', self.access_token))

        try:
            if self.client is not None:
                response = self.client.get(url, params=params)
            else:
                response = httpx.get(url, params=params, timeout=self.timeout)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            if status == 401:
                raise FetchFailure(f"Unauthorized (check the access token): {url}", url=url, status=status) from e
            raise FetchFailure(f"HTTP {status} for {url}", url=url, status=status) from e
        except httpx.HTTPError as e:
            raise FetchFailure(f"Request to {url} failed: {e}", url=url) from e

        try:
            body = response.json()
        except ValueError as e:
            raise FetchFailure(f"Malformed JSON from {url}", url=url, status=response.status_code) from e

        if not isinstance(body, dict):
            raise FetchFailure(f"Expected a JSON object from {url}", url=url, status=response.status_code)
        return body

    def api_info(self) -> dict:
        return self._get(self.endpoint)

    def master_ref(self) -> str:
        """Ref of the published content; cached after the first lookup."""
        if self._master_ref is None:
            info = self.api_info()
            for ref in info.get('refs', []):
                if ref.get('isMasterRef'):
                    self._master_ref = ref['ref']
                    break
            else:
                raise FetchFailure(f"No master ref in API info from {self.endpoint}", url=self.endpoint)
        return self._master_ref

    def query(
        self,
        predicates: list[str],
        page_size: int = 20,
        fetch: Optional[list[str]] = None,
        orderings: Optional[str] = None,
        ref: Optional[str] = None,
        page: int = 1,
    ) -> dict:
        """
        Run a predicate query.

        Args:
            predicates: Predicate strings from Predicates
            page_size: Results per page
            fetch: Restrict returned fields, e.g. ['post.title']
            orderings: Orderings string from order_by()
            ref: Content ref; the master ref when omitted
            page: 1-based page number

        Returns:
            The search response: {page, next_page, results, ...}
        """
        params = [('ref', ref or self.master_ref())]
        params.extend(('q', predicate) for predicate in predicates)
        params.append(('pageSize', page_size))
        if page != 1:
            params.append(('page', page))
        if fetch:
            params.append(('fetch', ','.join(fetch)))
        if orderings:
            params.append(('orderings', orderings))

        return self._get(f"{self.endpoint}/documents/search", params)

    def get_by_uid(self, doc_type: str, uid: str, ref: Optional[str] = None) -> Optional[dict]:
        """Single document by its UID, or None."""
        body = self.query([Predicates.at(f'my.{doc_type}.uid', uid)], page_size=1, ref=ref)
        results = body.get('results') or []
        return results[0] if results else None

    def get_by_id(self, document_id: str, ref: Optional[str] = None) -> Optional[dict]:
        body = self.query([Predicates.at('document.id', document_id)], page_size=1, ref=ref)
        results = body.get('results') or []
        return results[0] if results else None

    def preview_session(self, token: str) -> dict:
        """Fetch the preview session a preview token URL points to."""
        return self._get(token)
