"""
Data model for posts fetched from the CMS.

- ContentItem: a post summary as shown on the index page
- Page: one page of a paginated listing plus the cursor to the next one
- ListState: what the index page has loaded so far
- PostDetail: everything the single-post page needs, neighbours included

All of these are immutable; the listing only grows by building new states.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class ContentItem:
    """A post summary."""
    id: str  # Document UID, or the raw document id when the post has no UID
    published_at: Optional[str]  # first_publication_date, ISO-8601
    title: str
    subtitle: str = ''
    author: str = ''

    @classmethod
    def from_document(cls, doc: dict) -> 'ContentItem':
        """Build from a CMS document (a `results` entry)."""
        if not isinstance(doc, dict):
            raise ValueError(f"Expected a document object, got {type(doc).__name__}")

        data = doc.get('data') or {}
        item_id = doc.get('uid') or doc.get('id')
        if not item_id:
            raise ValueError("Document has neither 'uid' nor 'id'")

        return cls(
            id=item_id,
            published_at=doc.get('first_publication_date'),
            title=data.get('title') or '',
            subtitle=data.get('subtitle') or '',
            author=data.get('author') or '',
        )

    def to_dict(self) -> dict:
        """Serialize in the same shape the CMS returns summaries."""
        return {
            'uid': self.id,
            'first_publication_date': self.published_at,
            'data': {
                'title': self.title,
                'subtitle': self.subtitle,
                'author': self.author,
            },
        }


def _normalize_cursor(cursor) -> Optional[str]:
    # An empty string means "no more pages", same as null
    if not cursor:
        return None
    if not isinstance(cursor, str):
        raise ValueError(f"next_page must be a string or null, got {type(cursor).__name__}")
    return cursor


@dataclass(frozen=True)
class Page:
    """One page of a listing, in server order."""
    items: tuple[ContentItem, ...] = ()
    next_cursor: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))
        object.__setattr__(self, 'next_cursor', _normalize_cursor(self.next_cursor))

    @classmethod
    def from_response(cls, body) -> 'Page':
        """Parse a `{next_page, results}` response body.

        Raises ValueError when the body is not Page-shaped.
        """
        if not isinstance(body, dict):
            raise ValueError(f"Expected a JSON object, got {type(body).__name__}")

        results = body.get('results')
        if not isinstance(results, list):
            raise ValueError("Response has no 'results' list")

        return cls(
            items=tuple(ContentItem.from_document(doc) for doc in results),
            next_cursor=_normalize_cursor(body.get('next_page')),
        )

    def to_dict(self) -> dict:
        return {
            'next_page': self.next_cursor,
            'results': [item.to_dict() for item in self.items],
        }


@dataclass(frozen=True)
class ListState:
    """Items loaded so far on the index page and the cursor to the next page.

    `cursor` is None iff there is nothing left to load.
    """
    items: tuple[ContentItem, ...] = ()
    cursor: Optional[str] = None

    def __post_init__(self):
        object.__setattr__(self, 'items', tuple(self.items))
        object.__setattr__(self, 'cursor', _normalize_cursor(self.cursor))


@dataclass(frozen=True)
class ContentSection:
    """One section of a post body: a heading and its rich-text blocks."""
    heading: str
    body: tuple[dict, ...] = ()

    @classmethod
    def from_dict(cls, data: dict) -> 'ContentSection':
        return cls(
            heading=data.get('heading') or '',
            body=tuple(data.get('body') or ()),
        )

    def to_dict(self) -> dict:
        return {'heading': self.heading, 'body': list(self.body)}


@dataclass(frozen=True)
class NeighborLink:
    """Link to the previous or next post; both fields are None at the ends."""
    title: Optional[str] = None
    slug: Optional[str] = None

    def to_dict(self) -> dict:
        return {'title': self.title, 'slug': self.slug}


@dataclass(frozen=True)
class PostDetail:
    """Props of a single post page."""
    slug: Optional[str]
    first_publication_date: Optional[str]
    last_publication_date: Optional[str]
    title: str
    subtitle: str = ''
    author: str = ''
    banner_url: Optional[str] = None
    content: tuple[ContentSection, ...] = ()
    prev_post: NeighborLink = field(default_factory=NeighborLink)
    next_post: NeighborLink = field(default_factory=NeighborLink)

    @classmethod
    def from_document(
        cls,
        doc: dict,
        prev_post: Optional[NeighborLink] = None,
        next_post: Optional[NeighborLink] = None,
    ) -> 'PostDetail':
        """Build from a full CMS document plus its neighbour links."""
        data = doc.get('data') or {}

        # Older posts used `image` before the field was renamed to `banner`
        banner = data.get('banner') or {}
        image = data.get('image') or {}
        banner_url = banner.get('url') or image.get('url') or None

        return cls(
            slug=doc.get('uid') or None,
            first_publication_date=doc.get('first_publication_date'),
            last_publication_date=doc.get('last_publication_date'),
            title=data.get('title') or '',
            subtitle=data.get('subtitle') or '',
            author=data.get('author') or '',
            banner_url=banner_url,
            content=tuple(ContentSection.from_dict(s) for s in data.get('content') or ()),
            prev_post=prev_post or NeighborLink(),
            next_post=next_post or NeighborLink(),
        )

    def to_dict(self) -> dict:
        return {
            'uid': self.slug,
            'first_publication_date': self.first_publication_date,
            'last_publication_date': self.last_publication_date,
            'prev_page': self.prev_post.to_dict(),
            'next_page': self.next_post.to_dict(),
            'data': {
                'title': self.title,
                'subtitle': self.subtitle,
                'author': self.author,
                'banner': {'url': self.banner_url},
                'content': [section.to_dict() for section in self.content],
            },
        }
