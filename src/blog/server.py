"""
Development server for the blog data API and preview mode.

Routes:
    GET /api/posts                  first page of the index
    GET /api/posts/more?cursor=URL  next page of the index
    GET /api/post/<slug>            one post page
    GET /api/preview?token=&documentId=   enter preview mode, redirect
    GET /api/exit-preview           leave preview mode, redirect to /
"""

import asyncio
import json
import sys
from http.cookies import SimpleCookie
from http.server import HTTPServer, BaseHTTPRequestHandler
from urllib.parse import urlparse, parse_qs, unquote

from .errors import BlogError, FetchFailure, InvalidPreviewToken, PostNotFound
from .models import ListState
from .pagination import initialize, load_more
from .posts import get_home_props, get_post_props, HOME_PAGE_SIZE
from .preview import PREVIEW_COOKIE, PreviewData, redirect_html, resolve_preview
from .views import index_view, post_view


class BlogServer(BaseHTTPRequestHandler):
    """HTTP handler; `client` is set by run_server()."""

    client = None
    home_page_size = HOME_PAGE_SIZE

    def do_GET(self):
        parsed_path = urlparse(self.path)
        path = parsed_path.path
        query = parse_qs(parsed_path.query)

        try:
            if path == '/api/posts':
                self.serve_index()

            elif path == '/api/posts/more':
                self.serve_more(query.get('cursor', [''])[0])

            elif path.startswith('/api/post/'):
                slug = unquote(path[len('/api/post/'):]).strip('/')
                self.serve_post(slug)

            elif path == '/api/preview':
                self.serve_preview(
                    query.get('token', [''])[0],
                    query.get('documentId', [None])[0],
                )

            elif path == '/api/exit-preview':
                self.serve_exit_preview()

            else:
                self.send_json_response({'error': 'Not found'}, status=404)

        except PostNotFound as e:
            self.send_json_response({'error': str(e)}, status=404)
        except InvalidPreviewToken:
            self.send_json_response({'message': 'Invalid token'}, status=401)
        except FetchFailure as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            self.send_json_response({'error': str(e)}, status=502)
        except BlogError as e:
            print(f"[ERROR] {e}", file=sys.stderr)
            self.send_json_response({'error': str(e)}, status=500)

    def preview_data(self):
        """Preview cookie of the current request, if any."""
        cookie = SimpleCookie(self.headers.get('Cookie', ''))
        morsel = cookie.get(PREVIEW_COOKIE)
        return PreviewData.from_cookie(morsel.value if morsel else None)

    def serve_index(self):
        preview = self.preview_data()
        page = get_home_props(
            self.client,
            ref=preview.ref if preview else None,
            page_size=self.home_page_size,
        )
        self.send_json_response(index_view(initialize(page)))

    def serve_more(self, cursor):
        """Only the newly loaded posts; the page appends them itself."""
        state = asyncio.run(load_more(ListState(cursor=cursor or None)))
        self.send_json_response(index_view(state))

    def serve_post(self, slug):
        preview = self.preview_data()
        post = get_post_props(self.client, slug, ref=preview.ref if preview else None)
        self.send_json_response(post_view(post, preview=preview is not None))

    def serve_preview(self, token, document_id):
        url = resolve_preview(self.client, token, document_id)
        cookie = f"{PREVIEW_COOKIE}={PreviewData(ref=token).to_cookie()}; Path=/; HttpOnly; SameSite=Lax"
        self.send_html_response(redirect_html(url), cookie=cookie)

    def serve_exit_preview(self):
        cookie = f"{PREVIEW_COOKIE}=; Path=/; Max-Age=0"
        self.send_html_response(redirect_html('/'), cookie=cookie)

    def send_html_response(self, content, cookie=None):
        self.send_response(200)
        self.send_header('Content-Type', 'text/html; charset=utf-8')
        if cookie:
            self.send_header('Set-Cookie', cookie)
        self.end_headers()
        self.wfile.write(content.encode('utf-8'))

    def send_json_response(self, data, status=200):
        """Send JSON response"""
        self.send_response(status)
        self.send_header('Content-Type', 'application/json')
        self.send_header('Access-Control-Allow-Origin', '*')
        self.end_headers()
        self.wfile.write(json.dumps(data).encode())

    def log_message(self, format, *args):
        print(f"[{self.log_date_time_string()}] {format % args}", file=sys.stderr)


def run_server(config, port=8000):
    """Serve until Ctrl+C."""
    BlogServer.client = config.client()
    BlogServer.home_page_size = config.home_page_size
    httpd = HTTPServer(('', port), BlogServer)

    print(f"Blog dev server on http://localhost:{port}/api/posts", file=sys.stderr)
    print(f"CMS endpoint: {config.api_endpoint}", file=sys.stderr)
    print("Press Ctrl+C to stop", file=sys.stderr)

    try:
        httpd.serve_forever()
    except KeyboardInterrupt:
        print("\nServer stopped.", file=sys.stderr)
        httpd.server_close()
