"""
Props for the statically generated pages.

- get_home_props: first page of the post index
- get_post_paths: which post pages to pre-render
- get_post_props: one post, with links to its previous and next posts

Neighbours are found with two queries around the post's first publication
date, one page each.
"""

from typing import Optional

from .errors import FetchFailure, PostNotFound
from .models import NeighborLink, Page, PostDetail
from .prismic import PrismicClient, Predicates, order_by

POST_TYPE = 'post'
SUMMARY_FIELDS = ['post.title', 'post.subtitle', 'post.author']
PUBLICATION_DATE = 'document.first_publication_date'

HOME_PAGE_SIZE = 1
PATHS_PAGE_SIZE = 20

# How long a generated page may be served before regenerating
HOME_REVALIDATE_SECONDS = 60 * 60 * 24
POST_REVALIDATE_SECONDS = 60 * 30


def get_home_props(client: PrismicClient, ref: Optional[str] = None, page_size: int = HOME_PAGE_SIZE) -> Page:
    """First page of posts plus the cursor for "load more"."""
    body = client.query(
        [Predicates.at('document.type', POST_TYPE)],
        page_size=page_size,
        fetch=SUMMARY_FIELDS,
        ref=ref,
    )
    try:
        return Page.from_response(body)
    except ValueError as e:
        raise FetchFailure(f"Unexpected post listing from the CMS: {e}") from e


def get_post_paths(client: PrismicClient, page_size: int = PATHS_PAGE_SIZE) -> list[str]:
    """Slugs of the posts to pre-render. Posts without a UID are skipped."""
    body = client.query(
        [Predicates.at('document.type', POST_TYPE)],
        page_size=page_size,
        fetch=SUMMARY_FIELDS,
    )
    return [doc['uid'] for doc in body.get('results') or [] if doc.get('uid')]


def neighbor_from_response(body: dict) -> NeighborLink:
    """Link to the first result of a neighbour query, or an empty link."""
    results = body.get('results') or []
    if not results:
        return NeighborLink()
    doc = results[0]
    data = doc.get('data') or {}
    return NeighborLink(title=data.get('title') or None, slug=doc.get('uid') or None)


def _neighbor(client: PrismicClient, date_predicate: str, ordering: str, ref: Optional[str]) -> NeighborLink:
    body = client.query(
        [Predicates.at('document.type', POST_TYPE), date_predicate],
        page_size=1,
        fetch=['post.title'],
        orderings=order_by(ordering),
        ref=ref,
    )
    return neighbor_from_response(body)


def get_post_props(client: PrismicClient, slug: str, ref: Optional[str] = None) -> PostDetail:
    """
    Full props of one post page.

    Args:
        client: PrismicClient
        slug: Post UID
        ref: Preview ref, or None for published content

    Returns:
        PostDetail with prev_post / next_post filled in

    Raises:
        PostNotFound: no post has this UID
    """
    doc = client.get_by_uid(POST_TYPE, slug, ref=ref)
    if doc is None:
        raise PostNotFound(slug)

    published = doc.get('first_publication_date')
    if published:
        # Nearest neighbours: oldest of the newer posts, newest of the older ones
        next_post = _neighbor(
            client, Predicates.date_after(PUBLICATION_DATE, published), PUBLICATION_DATE, ref,
        )
        prev_post = _neighbor(
            client, Predicates.date_before(PUBLICATION_DATE, published), f'{PUBLICATION_DATE} desc', ref,
        )
    else:
        # Never published (preview of a draft): nothing to compare against
        next_post = prev_post = NeighborLink()

    return PostDetail.from_document(doc, prev_post=prev_post, next_post=next_post)
