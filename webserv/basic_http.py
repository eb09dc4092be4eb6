"""Minimal HTTP request parsing and response generation."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BasicRequest:
    """A parsed HTTP request: method, path, headers and body."""

    method: str = ""
    path: str = ""
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""

    def header(self, name: str) -> str:
        """Return the value of header ``name``, or an empty string."""
        return self.headers.get(name, "")


def _lines(text: str) -> list[str]:
    if not text:
        return []
    lines = text.split("\n")
    if text.endswith("\n"):
        lines.pop()
    return lines


def parse_basic_request(request: str) -> BasicRequest:
    """Parse a request whose lines are separated by ``\\n``.

    Header values keep everything after the character that follows the
    colon. A header line without a value raises ValueError.
    """
    result = BasicRequest()
    lines = iter(_lines(request))
    first = next(lines, None)
    if first is None:
        return result
    words = first.split()
    if words:
        result.method = words[0]
    if len(words) > 1:
        result.path = words[1]

    for line in lines:
        if line == "":
            break
        name, _, value = line.partition(":")
        if not value:
            raise ValueError(f"header line without value: {line!r}")
        result.headers[name] = value[1:]

    result.body = "".join(line + "\n" for line in lines)
    return result


@dataclass
class BasicResponse:
    """An HTTP response with a status code, headers and a body."""

    status_code: int = 200
    body: str = ""
    headers: dict[str, str] = field(default_factory=lambda: {"Content-Type": "text/html"})

    def set_header(self, name: str, value: str) -> None:
        """Set a header, replacing any previous value."""
        self.headers[name] = value

    def generate(self) -> str:
        """Return the full response text, headers sorted by name."""
        head = f"HTTP/1.1 {self.status_code} OK\r\n"
        head += "".join(f"{name}: {value}\r\n" for name, value in sorted(self.headers.items()))
        return head + "\r\n" + self.body