#!/usr/bin/env python3
"""
Command line interface for the blog tools.

Usage:
    blog home                  # First index page as JSON
    blog more <cursor> [--all] # Follow a "next_page" cursor
    blog paths                 # Post slugs to pre-render
    blog post <slug>           # One post page with reading time and neighbours
    blog serve [--port 8000]   # Dev server with preview mode

JSON goes to stdout, progress and errors to stderr.
"""

import argparse
import asyncio
import json
import sys
from pathlib import Path

from .config import load_config
from .errors import BlogError
from .models import ListState
from .pagination import load_all, load_more
from .posts import (
    HOME_REVALIDATE_SECONDS,
    POST_REVALIDATE_SECONDS,
    get_home_props,
    get_post_paths,
    get_post_props,
)
from .views import index_view, post_view


def cmd_home(args, config) -> dict:
    with config.client() as client:
        page = get_home_props(client, ref=args.ref, page_size=config.home_page_size)
    print(f"Loaded {len(page.items)} posts", file=sys.stderr)
    return {
        'props': {'postsPagination': page.to_dict(), 'preview': bool(args.ref)},
        'revalidate': HOME_REVALIDATE_SECONDS,
    }


def cmd_more(args, config) -> dict:
    state = ListState(cursor=args.cursor)
    if args.all:
        state = asyncio.run(load_all(state, max_pages=args.max_pages))
    else:
        state = asyncio.run(load_more(state))
    print(f"Loaded {len(state.items)} posts", file=sys.stderr)
    return index_view(state)


def cmd_paths(args, config) -> dict:
    with config.client() as client:
        slugs = get_post_paths(client, page_size=config.paths_page_size)
    print(f"{len(slugs)} post paths", file=sys.stderr)
    return {
        'paths': [{'params': {'slug': slug}} for slug in slugs],
        'fallback': True,
    }


def cmd_post(args, config) -> dict:
    with config.client() as client:
        post = get_post_props(client, args.slug, ref=args.ref)
    if args.raw:
        props = {'post': post.to_dict(), 'preview': bool(args.ref)}
    else:
        props = post_view(post, preview=bool(args.ref))
    return {'props': props, 'revalidate': POST_REVALIDATE_SECONDS}


def cmd_serve(args, config) -> None:
    from .server import run_server
    run_server(config, port=args.port)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='blog',
        description='Fetch and prepare blog content from the headless CMS'
    )
    parser.add_argument('--config', type=Path, help='YAML config file (default: ./blog.yaml)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    home = subparsers.add_parser('home', help='First page of the post index')
    home.add_argument('--ref', help='Content ref (preview token)')
    home.set_defaults(func=cmd_home)

    more = subparsers.add_parser('more', help='Load the page a next_page cursor points to')
    more.add_argument('cursor', help='next_page URL from a previous page')
    more.add_argument('--all', action='store_true', help='Keep loading until the last page')
    more.add_argument('--max-pages', type=int, help='Stop after this many pages (with --all)')
    more.set_defaults(func=cmd_more)

    paths = subparsers.add_parser('paths', help='Post slugs to pre-render')
    paths.set_defaults(func=cmd_paths)

    post = subparsers.add_parser('post', help='Props of a single post page')
    post.add_argument('slug', help='Post UID')
    post.add_argument('--ref', help='Content ref (preview token)')
    post.add_argument('--raw', action='store_true', help='Print the props without display formatting')
    post.set_defaults(func=cmd_post)

    serve = subparsers.add_parser('serve', help='Run the dev server')
    serve.add_argument('--port', type=int, default=8000, help='Port to run server on (default: 8000)')
    serve.set_defaults(func=cmd_serve)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    try:
        config = load_config(args.config)
        result = args.func(args, config)
    except BlogError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if result is not None:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
