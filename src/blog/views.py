"""
Display-ready dicts for the rendering layer.

Turns models into the strings the index and post templates show: formatted
dates, reading time and rendered post sections.
"""

from .formatting import format_date, format_updated_at, reading_time_minutes
from .models import ContentItem, ListState, PostDetail
from .pagination import has_more
from .richtext import as_html


def item_view(item: ContentItem) -> dict:
    """One entry of the post index."""
    return {
        'slug': item.id,
        'href': f'/post/{item.id}',
        'title': item.title,
        'subtitle': item.subtitle,
        'author': item.author,
        'date': format_date(item.published_at) if item.published_at else None,
    }


def index_view(state: ListState) -> dict:
    """The whole index page; `has_more` drives the "load more" button."""
    return {
        'posts': [item_view(item) for item in state.items],
        'next_page': state.cursor,
        'has_more': has_more(state),
    }


def post_view(post: PostDetail, preview: bool = False) -> dict:
    """A single post page."""
    return {
        'slug': post.slug,
        'title': post.title,
        'subtitle': post.subtitle,
        'author': post.author,
        'banner_url': post.banner_url,
        # Drafts opened in preview have no publication date yet
        'date': format_date(post.first_publication_date) if post.first_publication_date else None,
        'updated_at': format_updated_at(post.last_publication_date),
        'reading_time': reading_time_minutes(post.content),
        'sections': [
            {'heading': section.heading, 'html': as_html(section.body)}
            for section in post.content
        ],
        'prev_post': post.prev_post.to_dict() if post.prev_post.slug else None,
        'next_post': post.next_post.to_dict() if post.next_post.slug else None,
        'preview': preview,
    }
