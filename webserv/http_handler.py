"""Request handling: static files, CGI scripts, echo, uploads and deletion."""

from __future__ import annotations

import os
import subprocess

from webserv.http_message import HTTPRequest, HTTPResponse

_DISPOSITION_PREFIX = b'Content-Disposition: form-data; name="'
_FILENAME_PREFIX = b'filename="'


def convert_line_endings(data: bytes) -> bytes:
    """Replace every ``\\n`` with ``\\r\\n``."""
    return data.replace(b"\n", b"\r\n")


def _content_type(file_path: str) -> str:
    if ".html" in file_path:
        return "text/html"
    if ".jpg" in file_path or ".jpeg" in file_path:
        return "image/jpeg"
    if ".png" in file_path:
        return "image/png"
    if ".css" in file_path:
        return "text/css"
    if ".js" in file_path:
        return "application/javascript"
    return "text/plain"


def _ok(content_type: str, body: bytes | str) -> HTTPResponse:
    response = HTTPResponse(200, "OK")
    response.set_header("Content-Type", content_type)
    response.set_body(body)
    return response


class HTTPHandler:
    """Turn parsed requests into responses, serving files below ``root``."""

    def __init__(self, root: str = ".") -> None:
        self.root = root

    def handle_request(self, request: HTTPRequest) -> HTTPResponse:
        """Dispatch on the request method; unknown methods get 501."""
        handlers = {
            "GET": self.handle_get,
            "POST": self.handle_post,
            "DELETE": self.handle_delete,
        }
        handler = handlers.get(request.method)
        if handler is None:
            return self.generate_error_response(501, "Not Implemented")
        return handler(request)

    def handle_get(self, request: HTTPRequest) -> HTTPResponse:
        """Run a CGI script or serve a file."""
        cgi_response = self._detect_cgi(request)
        if cgi_response is not None:
            return cgi_response

        uri = request.uri.partition("?")[0]
        file_path = f"{self.root}{uri}"
        if not os.path.exists(file_path):
            return self.generate_error_response(404, "Not Found")
        if os.path.isdir(file_path):
            index_path = file_path + "www/index.html"
            if not os.path.exists(index_path):
                return self.generate_error_response(403, "Forbidden")
            file_path = index_path

        try:
            with open(file_path, "rb") as handle:
                body = handle.read()
        except OSError:
            return self.generate_error_response(500, "Internal Server Error")
        return _ok(_content_type(file_path), body)

    def handle_post(self, request: HTTPRequest) -> HTTPResponse:
        """Handle uploads under ``/upload``; echo the body otherwise."""
        if request.uri.startswith("/upload"):
            return self._handle_file_upload(request)
        return _ok("text/plain", request.body)

    def handle_delete(self, request: HTTPRequest) -> HTTPResponse:
        """Delete the file named by the URI."""
        try:
            os.unlink(f"{self.root}{request.uri}")
        except OSError:
            return self.generate_error_response(404, "Not Found")
        return _ok("text/plain", "File deleted successfully.")

    def generate_error_response(self, code: int, message: str) -> HTTPResponse:
        """Build an HTML error page with the given status."""
        response = HTTPResponse(code, message)
        response.set_header("Content-Type", "text/html")
        response.set_body(f"<html><body><h1>{code} {message}</h1></body></html>")
        return response

    # -- CGI ---------------------------------------------------------------

    def _detect_cgi(self, request: HTTPRequest) -> HTTPResponse | None:
        uri = request.uri
        cgi_pos = uri.find("/cgi-bin/")
        if cgi_pos == -1:
            return None
        script_path = f"{self.root}{uri[cgi_pos:]}"
        query_string = ""
        query_pos = uri.find("?")
        if query_pos != -1:
            query_string = uri[query_pos + 1:]
            script_path = uri[:query_pos]
        return self._execute_cgi(script_path, query_string)

    def _execute_cgi(self, script_path: str, query_string: str) -> HTTPResponse:
        env = dict(
            os.environ,
            REQUEST_METHOD="GET",
            QUERY_STRING=query_string,
            SCRIPT_NAME=script_path,
        )
        try:
            completed = subprocess.run(
                [script_path], stdout=subprocess.PIPE, env=env, check=False
            )
            output = completed.stdout
        except OSError:
            output = b""

        output = convert_line_endings(output)
        head, separator, body = output.partition(b"\r\n\r\n")
        if not separator:
            return _ok("text/plain", output)

        response = HTTPResponse()
        for raw_line in head.split(b"\n"):
            line = raw_line[:-1] if raw_line.endswith(b"\r") else raw_line
            key, colon, value = line.decode("latin-1").partition(":")
            if not colon:
                continue
            trimmed = value.strip(" \t")
            response.set_header(key, trimmed if trimmed else value)
        response.status_code = 200
        response.reason_phrase = "OK"
        response.set_body(body)
        return response

    # -- uploads -------------------------------------------------------------

    def _handle_file_upload(self, request: HTTPRequest) -> HTTPResponse:
        content_type = request.headers.get("Content-Type")
        if content_type is None:
            return self.generate_error_response(400, "Bad Request")
        _, found, boundary_text = content_type.partition("boundary=")
        if not found:
            return self.generate_error_response(400, "Bad Request")
        boundary = b"--" + boundary_text.encode("latin-1")

        body = request.body
        pos = body.find(boundary)
        while pos != -1:
            start = pos + len(boundary)
            end = body.find(boundary, start)
            if end == -1:
                break
            pos = end
            part = body[start:end]
            part_headers, separator, part_body = part.partition(b"\r\n\r\n")
            if not separator:
                pos = body.find(boundary, pos)
                continue
            filename = self._upload_filename(part_headers)
            if filename is None:
                pos = body.find(boundary, pos)
                continue

            upload_dir = os.path.join(self.root, "uploads")
            if not os.path.exists(upload_dir):
                try:
                    os.mkdir(upload_dir, 0o755)
                except OSError:
                    pass
            try:
                with open(os.path.join(upload_dir, filename), "wb") as handle:
                    handle.write(part_body)
            except OSError:
                return self.generate_error_response(500, "Internal Server Error")
            return _ok("text/plain", "File uploaded successfully.")

        return self.generate_error_response(400, "Bad Request")

    @staticmethod
    def _upload_filename(part_headers: bytes) -> str | None:
        """Return the file name of a ``file`` form field, or None."""
        name_start = part_headers.find(_DISPOSITION_PREFIX)
        if name_start == -1:
            return None
        name_start += len(_DISPOSITION_PREFIX)
        name_end = part_headers.find(b'"', name_start)
        if name_end == -1 or part_headers[name_start:name_end] != b"file":
            return None
        filename_start = part_headers.find(_FILENAME_PREFIX, name_end)
        if filename_start == -1:
            return None
        filename_start += len(_FILENAME_PREFIX)
        filename_end = part_headers.find(b'"', filename_start)
        if filename_end == -1:
            return None
        return part_headers[filename_start:filename_end].decode("latin-1")