"""
"Load more" pagination for the post index page.

The first page comes from static generation (see posts.get_home_props).
After that the page keeps a ListState and calls load_more() when the reader
asks for more posts:

    state = initialize(page)
    while has_more(state):
        state = await load_more(state)

Callers must not start a second load_more() while one is outstanding; the
returned state would be based on a stale snapshot.
"""

import asyncio
from typing import Optional

import aiohttp

from .errors import FetchFailure
from .models import ListState, Page

REQUEST_TIMEOUT = 30  # seconds


def initialize(page: Page) -> ListState:
    """State for a freshly rendered index page."""
    return ListState(items=page.items, cursor=page.next_cursor)


def has_more(state: ListState) -> bool:
    return bool(state.cursor)


async def fetch_page(session: aiohttp.ClientSession, url: str) -> Page:
    """GET a cursor URL and parse the body as a Page.

    Raises FetchFailure on transport errors, non-2xx statuses and bodies that
    aren't Page-shaped.
    """
    try:
        async with session.get(url, timeout=aiohttp.ClientTimeout(total=REQUEST_TIMEOUT)) as resp:
            if resp.status < 200 or resp.status >= 300:
                raise FetchFailure(f"HTTP {resp.status} for {url}", url=url, status=resp.status)
            try:
                body = await resp.json(content_type=None)
            except ValueError as e:
                raise FetchFailure(f"Malformed JSON from {url}", url=url, status=resp.status) from e
            status = resp.status
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise FetchFailure(f"Request to {url} failed: {e}", url=url) from e

    try:
        return Page.from_response(body)
    except ValueError as e:
        raise FetchFailure(f"Unexpected response from {url}: {e}", url=url, status=status) from e


async def load_more(state: ListState, session: Optional[aiohttp.ClientSession] = None) -> ListState:
    """
    Fetch the next page and append it to the loaded items.

    Args:
        state: Current state; never modified
        session: Optional aiohttp session for connection reuse

    Returns:
        A new state with the next page's items appended in server order, or
        `state` itself when there is nothing left to load.
    """
    if not has_more(state):
        return state

    if session is None:
        async with aiohttp.ClientSession() as own_session:
            page = await fetch_page(own_session, state.cursor)
    else:
        page = await fetch_page(session, state.cursor)

    return ListState(items=state.items + page.items, cursor=page.next_cursor)


async def load_all(
    state: ListState,
    session: Optional[aiohttp.ClientSession] = None,
    max_pages: Optional[int] = None,
) -> ListState:
    """Keep loading until the listing is exhausted or max_pages were fetched."""
    if session is None:
        async with aiohttp.ClientSession() as own_session:
            return await load_all(state, own_session, max_pages)

    pages = 0
    while has_more(state) and (max_pages is None or pages < max_pages):
        state = await load_more(state, session)
        pages += 1
    return state
