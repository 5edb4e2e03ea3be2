"""HTTP helpers shared by the font routes.

JSON body reading, multipart upload parsing, and JSON/bytes responses with
CORS headers. Everything works with any BaseHTTPRequestHandler subclass.
"""

from __future__ import annotations

import json
import logging
from email.parser import BytesParser
from email.policy import HTTP
from http.server import BaseHTTPRequestHandler
from typing import Any
from urllib.parse import parse_qs, urlsplit

from fontshelf.config import MAX_JSON_BODY_SIZE, MAX_UPLOAD_SIZE
from fontshelf.exceptions import ValidationError

logger = logging.getLogger("fontshelf.server")


# ---------------------------------------------------------------------------
# Request parsing
# ---------------------------------------------------------------------------


def query_param(path: str, name: str, default: str | None = None) -> str | None:
    values = parse_qs(urlsplit(path).query).get(name)
    return values[0] if values else default


def route_path(path: str) -> str:
    return urlsplit(path).path


def _read_raw_body(handler: BaseHTTPRequestHandler, max_size: int) -> bytes:
    try:
        length = int(handler.headers.get("Content-Length", 0))
    except ValueError as e:
        raise ValidationError("Invalid Content-Length") from e
    if length > max_size or length < 0:
        logger.warning(
            "Rejected request from %s: payload too large (%d bytes)",
            handler.client_address[0],
            length,
        )
        raise ValidationError("Payload too large")
    return handler.rfile.read(length) if length else b""


def read_json_body(handler: BaseHTTPRequestHandler, max_size: int = MAX_JSON_BODY_SIZE) -> dict:
    """Read and parse a JSON object body; raises ValidationError otherwise."""
    raw = _read_raw_body(handler, max_size)
    if not raw:
        raise ValidationError("Empty body")
    try:
        body = json.loads(raw)
    except json.JSONDecodeError as e:
        logger.warning("Rejected request from %s: invalid JSON body", handler.client_address[0])
        raise ValidationError("Invalid JSON") from e
    if not isinstance(body, dict):
        raise ValidationError("JSON body must be an object")
    return body


def parse_multipart_file(
    content_type: str, body: bytes, field: str = "file"
) -> tuple[str | None, bytes | None]:
    """Pull one file field out of a multipart/form-data body.

    Returns (filename, data), or (None, None) when the field is absent.
    """
    header = f"Content-Type: {content_type}\r\nMIME-Version: 1.0\r\n\r\n".encode("latin-1")
    message = BytesParser(policy=HTTP).parsebytes(header + body)
    if not message.is_multipart():
        raise ValidationError("Malformed multipart body")

    for part in message.iter_parts():
        if part.get_param("name", header="content-disposition") != field:
            continue
        data = part.get_payload(decode=True)
        return part.get_filename(), data if data is not None else b""
    return None, None


def read_upload(handler: BaseHTTPRequestHandler) -> tuple[str | None, bytes | None]:
    """Read an uploaded font from a multipart form or a raw body.

    Raw bodies take their file name from ``?filename=`` or ``X-Filename``.
    """
    content_type = handler.headers.get("Content-Type", "")
    body = _read_raw_body(handler, MAX_UPLOAD_SIZE + 64 * 1024)
    if not body:
        return None, None
    if content_type.lower().startswith("multipart/form-data"):
        return parse_multipart_file(content_type, body)
    filename = query_param(handler.path, "filename") or handler.headers.get("X-Filename")
    return filename, body


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


def cors_headers(origin: str, allowed_origins: tuple[str, ...] | set[str]) -> dict[str, str]:
    """CORS headers for an allowed origin, empty otherwise."""
    if origin and origin in allowed_origins:
        return {"Access-Control-Allow-Origin": origin, "Vary": "Origin"}
    return {}


def send_bytes(
    handler: BaseHTTPRequestHandler,
    body: bytes,
    content_type: str,
    status: int = 200,
    headers: dict[str, str] | None = None,
) -> None:
    handler.send_response(status)
    handler.send_header("Content-Type", content_type)
    handler.send_header("Content-Length", str(len(body)))
    for k, v in (headers or {}).items():
        handler.send_header(k, v)
    handler.end_headers()
    if handler.command != "HEAD":
        handler.wfile.write(body)


def json_response(
    handler: BaseHTTPRequestHandler,
    data: Any,
    status: int = 200,
    headers: dict[str, str] | None = None,
) -> None:
    """Send a JSON response with optional extra headers."""
    body = json.dumps(data).encode("utf-8")
    send_bytes(handler, body, "application/json", status, headers)


def json_error(
    handler: BaseHTTPRequestHandler,
    message: str,
    status: int = 400,
    headers: dict[str, str] | None = None,
) -> None:
    """Send a JSON error response."""
    json_response(handler, {"error": message}, status, headers)
