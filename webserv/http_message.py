"""HTTP/1.1 request parsing and response serialisation."""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_ATOI_RE = re.compile(rb"[ \t\n\v\f\r]*([+-]?\d+)")


class RequestParseError(ValueError):
    """Raised when raw request data is not a well-formed HTTP request."""


@dataclass
class HTTPRequest:
    """A parsed HTTP request."""

    method: str = ""
    uri: str = ""
    version: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""


def _atoi(text: bytes) -> int:
    match = _ATOI_RE.match(text)
    return int(match.group(1)) if match else 0


def _getline(data: bytes, pos: int) -> tuple[bytes, int] | None:
    """Return the line starting at ``pos`` and the position after it."""
    if pos >= len(data):
        return None
    newline = data.find(b"\n", pos)
    if newline == -1:
        return data[pos:], len(data)
    return data[pos:newline], newline + 1


def _strip_cr(line: bytes) -> bytes:
    return line[:-1] if line.endswith(b"\r") else line


def parse_request(raw_request: bytes | str) -> HTTPRequest:
    """Parse a raw request; raise RequestParseError if it is malformed.

    The method is upper-cased. The body is read only when a
    ``Content-Length`` header is present; missing bytes are filled with NULs.
    """
    data = raw_request.encode("utf-8") if isinstance(raw_request, str) else bytes(raw_request)
    request = HTTPRequest()

    first = _getline(data, 0)
    if first is None:
        raise RequestParseError("empty request")
    line, pos = first
    words = _strip_cr(line).split()
    if len(words) < 3:
        raise RequestParseError("malformed request line")
    request.method = words[0].decode("latin-1").upper()
    request.uri = words[1].decode("latin-1")
    request.version = words[2].decode("latin-1")

    while True:
        result = _getline(data, pos)
        if result is None:
            break
        line, pos = result
        if line == b"\r" or not line:
            break
        text = _strip_cr(line).decode("latin-1")
        key, colon, value = text.partition(":")
        if not colon:
            raise RequestParseError(f"malformed header line: {text!r}")
        trimmed = value.strip(" \t")
        request.headers[key] = trimmed if trimmed else value

    length_text = request.headers.get("Content-Length")
    if length_text is not None:
        length = _atoi(length_text.encode("latin-1"))
        if length > 0:
            request.body = data[pos:pos + length].ljust(length, b"\0")
    return request


@dataclass
class HTTPResponse:
    """An HTTP response; headers are written sorted by name."""

    status_code: int = 0
    reason_phrase: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: bytes = b""

    def set_header(self, key: str, value: str) -> None:
        """Set a header, replacing any previous value."""
        self.headers[key] = value

    def set_body(self, body: bytes | str) -> None:
        """Set the body and its ``Content-Length`` header."""
        self.body = body.encode("utf-8") if isinstance(body, str) else bytes(body)
        self.set_header("Content-Length", str(len(self.body)))

    def to_bytes(self) -> bytes:
        """Serialise the response; the head is encoded as Latin-1."""
        head = f"HTTP/1.1 {self.status_code} {self.reason_phrase}\r\n"
        head += "".join(f"{key}: {value}\r\n" for key, value in sorted(self.headers.items()))
        head += "\r\n"
        return head.encode("latin-1") + self.body