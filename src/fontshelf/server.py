"""HTTP server for the font manager.

Extends SimpleHTTPRequestHandler to add:
- GET    /api/fonts?dir=test|release: List font folders of a tree
- POST   /api/upload: Store a font under public/test and subset it
- POST   /api/release: Promote a test font into dist/ and publish it
- DELETE /api/fonts/<id>?dir=test|release: Remove a font folder
- GET    /api/cdn/<path>: Serve a file from dist/ with open CORS

All other GET/HEAD requests are served as static files from public/.
"""

from __future__ import annotations

import functools
import logging
import sys
from collections.abc import Callable
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from urllib.parse import unquote

from fontshelf.auth import require_auth
from fontshelf.cdn import CDN_HEADERS, CDN_PREFIX, read_cdn_file, split_slug
from fontshelf.config import DEFAULT_PORT, TREE_RELEASE, TREE_TEST, Settings
from fontshelf.exceptions import FontShelfError
from fontshelf.listing import list_fonts
from fontshelf.release import delete_font, release_font
from fontshelf.runner import CommandRunner, SubprocessRunner
from fontshelf.server_utils import (
    cors_headers,
    json_error,
    json_response,
    query_param,
    read_json_body,
    read_upload,
    route_path,
    send_bytes,
)
from fontshelf.upload import upload_font

logger = logging.getLogger("fontshelf.server")

FONTS_ROUTE = "/api/fonts"


def _tree_param(path: str) -> str:
    return TREE_RELEASE if query_param(path, "dir") == TREE_RELEASE else TREE_TEST


class FontShelfHandler(SimpleHTTPRequestHandler):
    """HTTP handler with font upload, listing, release, delete and CDN routes."""

    def __init__(self, *args, settings: Settings, runner: CommandRunner, **kwargs):
        self.settings = settings
        self.runner = runner
        super().__init__(*args, directory=str(settings.public_dir), **kwargs)

    def list_directory(self, path):
        self.send_error(403, "Directory listing not allowed")
        return None

    def end_headers(self):
        self.send_header("X-Content-Type-Options", "nosniff")
        self.send_header("X-Frame-Options", "SAMEORIGIN")
        self.send_header("Referrer-Policy", "strict-origin-when-cross-origin")
        super().end_headers()

    # -- dispatch ----------------------------------------------------------

    def _cors(self) -> dict[str, str]:
        return cors_headers(self.headers.get("Origin", ""), self.settings.allowed_origins)

    def _run(self, action: Callable[[], None], failure: str = "Internal server error") -> None:
        try:
            action()
        except FontShelfError as e:
            if e.status >= 500:
                logger.error("%s %s failed: %s", self.command, self.path, e)
            json_error(self, str(e), e.status, self._cors())
        except Exception:
            logger.exception("Unhandled error for %s %s", self.command, self.path)
            json_error(self, failure, 500, self._cors())

    def do_GET(self):
        path = route_path(self.path)
        if path == FONTS_ROUTE:
            self._run(self._handle_list_fonts, "Failed to fetch fonts")
        elif path.startswith(CDN_PREFIX):
            self._handle_cdn()
        else:
            super().do_GET()

    def do_HEAD(self):
        if route_path(self.path).startswith(CDN_PREFIX):
            self._handle_cdn()
        else:
            super().do_HEAD()

    def do_POST(self):
        path = route_path(self.path)
        if path == "/api/upload":
            self._run(self._handle_upload)
        elif path == "/api/release":
            self._run(self._handle_release, "Failed to release font")
        else:
            json_error(self, "Not Found", 404)

    def do_DELETE(self):
        path = route_path(self.path)
        if path.startswith(FONTS_ROUTE + "/"):
            self._run(self._handle_delete, "Failed to delete font")
        else:
            json_error(self, "Not Found", 404)

    def do_OPTIONS(self):
        """Handle CORS preflight requests."""
        self.send_response(204)
        for k, v in self._cors().items():
            self.send_header(k, v)
        self.send_header("Access-Control-Allow-Methods", "GET, POST, DELETE, OPTIONS")
        self.send_header("Access-Control-Allow-Headers", "Content-Type, Authorization, X-Filename")
        self.end_headers()

    # -- routes ------------------------------------------------------------

    def _handle_list_fonts(self):
        fonts = list_fonts(self.settings, _tree_param(self.path))
        json_response(self, {"fonts": [f.to_json_dict() for f in fonts]}, headers=self._cors())

    def _handle_upload(self):
        filename, data = read_upload(self)
        require_auth(self, self.settings)
        result = upload_font(self.settings, filename, data, self.runner)
        self.log_message("Uploaded font: %s", result.font_family)
        json_response(self, result.to_json_dict(), headers=self._cors())

    def _handle_release(self):
        body = read_json_body(self)
        require_auth(self, self.settings)
        result = release_font(self.settings, body.get("id"), body.get("fontFamily"), self.runner)
        self.log_message(
            "Released font: %s (%d sync warning(s))", body.get("id"), len(result.sync_warnings)
        )
        json_response(self, result.to_json_dict(), headers=self._cors())

    def _handle_delete(self):
        require_auth(self, self.settings)
        font_id = unquote(route_path(self.path)[len(FONTS_ROUTE) + 1 :])
        tree = _tree_param(self.path)
        result = delete_font(self.settings, font_id, tree, self.runner)
        self.log_message("Deleted font: %s from %s", font_id, tree)
        json_response(self, result.to_json_dict(), headers=self._cors())

    def _handle_cdn(self):
        try:
            body, content_type = read_cdn_file(self.settings.dist_root, split_slug(self.path))
        except FontShelfError:
            send_bytes(self, b"File not found", "text/plain", 404, CDN_HEADERS)
            return
        except OSError:
            logger.exception("Failed to read CDN file %s", self.path)
            send_bytes(self, b"Internal server error", "text/plain", 500, CDN_HEADERS)
            return
        send_bytes(self, body, content_type, headers=CDN_HEADERS)

    def log_message(self, fmt, *args):
        sys.stderr.write(f"[serve] {fmt % args}\n")


def make_server(
    settings: Settings,
    host: str = "127.0.0.1",
    port: int = DEFAULT_PORT,
    runner: CommandRunner | None = None,
) -> ThreadingHTTPServer:
    runner = runner or SubprocessRunner(timeout=settings.command_timeout)
    handler = functools.partial(FontShelfHandler, settings=settings, runner=runner)
    return ThreadingHTTPServer((host, port), handler)


def run_server(settings: Settings, host: str = "127.0.0.1", port: int = DEFAULT_PORT) -> None:
    server = make_server(settings, host, port)
    print(f"fontshelf server on http://{host}:{server.server_address[1]}")
    print(f"Project root: {settings.root}")
    print(f"Test fonts:   {settings.test_root}/")
    print(f"Releases:     {settings.dist_root}/")
    print("Press Ctrl+C to stop\n")

    try:
        server.serve_forever()
    except KeyboardInterrupt:
        print("\nShutting down.")
    finally:
        server.server_close()
