"""
Blog - data layer for a statically generated blog backed by a headless CMS

Modules:
- prismic: CMS API client and query predicates
- posts: props for the index and post pages, previous/next neighbours
- pagination: "load more" for the post index
- formatting: dates and reading time
- richtext: CMS rich text to text / HTML
- preview: preview tokens and cookie
"""

from .errors import (
    BlogError,
    ConfigError,
    FetchFailure,
    InvalidDate,
    InvalidPreviewToken,
    PostNotFound,
)
from .models import (
    ContentItem,
    ContentSection,
    ListState,
    NeighborLink,
    Page,
    PostDetail,
)
from .formatting import (
    format_date,
    format_relative_date,
    format_updated_at,
    reading_time_minutes,
)
from .pagination import has_more, initialize, load_all, load_more
from .posts import get_home_props, get_post_paths, get_post_props
from .prismic import PrismicClient, Predicates

__version__ = "0.1.0"

__all__ = [
    # Errors
    'BlogError',
    'ConfigError',
    'FetchFailure',
    'InvalidDate',
    'InvalidPreviewToken',
    'PostNotFound',
    # Data structures
    'ContentItem',
    'ContentSection',
    'ListState',
    'NeighborLink',
    'Page',
    'PostDetail',
    # Formatting
    'format_date',
    'format_relative_date',
    'format_updated_at',
    'reading_time_minutes',
    # Pagination
    'initialize',
    'has_more',
    'load_more',
    'load_all',
    # CMS
    'PrismicClient',
    'Predicates',
    'get_home_props',
    'get_post_paths',
    'get_post_props',
]
