import pytest

from webserv.http_message import (
    HTTPRequest,
    HTTPResponse,
    RequestParseError,
    parse_request,
)


def test_request_line_is_split_and_method_upper_cased():
    request = parse_request(b"get /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
    assert request.method == "GET"
    assert request.uri == "/index.html"
    assert request.version == "HTTP/1.1"
    assert request.headers == {"Host": "localhost"}
    assert request.body == b""


def test_header_values_are_trimmed():
    request = parse_request(b"GET / HTTP/1.1\r\nX-Name: \t spaced out \t\r\n\r\n")
    assert request.headers["X-Name"] == "spaced out"


def test_body_read_up_to_content_length():
    raw = b"POST /data HTTP/1.1\r\nContent-Length: 5\r\n\r\nhelloEXTRA"
    request = parse_request(raw)
    assert request.body == b"hello"


def test_short_body_is_padded_to_content_length():
    raw = b"POST /data HTTP/1.1\r\nContent-Length: 8\r\n\r\nabc"
    request = parse_request(raw)
    assert len(request.body) == 8
    assert request.body.startswith(b"abc")
    assert request.body[3:] == b"\0" * 5


def test_body_ignored_without_content_length():
    request = parse_request(b"POST / HTTP/1.1\r\nHost: a\r\n\r\nignored")
    assert request.body == b""


def test_str_input_is_accepted():
    request = parse_request("delete /file HTTP/1.0\n\n")
    assert request.method == "DELETE"
    assert request.uri == "/file"


def test_header_without_colon_is_rejected():
    with pytest.raises(RequestParseError):
        parse_request(b"GET / HTTP/1.1\r\nbroken header\r\n\r\n")


def test_incomplete_request_line_is_rejected():
    with pytest.raises(RequestParseError):
        parse_request(b"GET /\r\n\r\n")


def test_empty_request_is_rejected():
    with pytest.raises(RequestParseError):
        parse_request(b"")


def test_default_response_has_no_status():
    response = HTTPResponse()
    assert response.status_code == 0
    assert response.headers == {}


def test_set_body_sets_content_length():
    response = HTTPResponse(200, "OK")
    response.set_body("payload")
    assert response.body == b"payload"
    assert response.headers["Content-Length"] == str(len(b"payload"))


def test_to_bytes_layout():
    response = HTTPResponse(404, "Not Found")
    response.set_header("Content-Type", "text/html")
    response.set_body(b"<p>x</p>")
    wire = response.to_bytes()
    head, _, body = wire.partition(b"\r\n\r\n")
    lines = head.split(b"\r\n")
    assert lines[0] == b"HTTP/1.1 404 Not Found"
    assert lines[1:] == [b"Content-Length: 8", b"Content-Type: text/html"]
    assert body == b"<p>x</p>"


def test_set_header_replaces_value():
    response = HTTPResponse()
    response.set_header("X", "1")
    response.set_header("X", "2")
    assert response.headers == {"X": "2"}


def test_request_dataclass_defaults():
    request = HTTPRequest(method="GET", uri="/")
    assert request.headers == {}
    assert request.body == b""