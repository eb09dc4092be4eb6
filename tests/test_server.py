import socket
import threading
import time

import pytest

from webserv.http_handler import HTTPHandler
from webserv.server import PollServer, is_valid_config_path, main


def _exchange(port, *chunks):
    with socket.create_connection(("127.0.0.1", port), timeout=5) as client:
        for chunk in chunks:
            client.sendall(chunk)
            time.sleep(0.05)
        received = bytearray()
        while True:
            data = client.recv(4096)
            if not data:
                return bytes(received)
            received += data


@pytest.fixture
def running_server(tmp_path):
    server = PollServer(port=0, handler=HTTPHandler(root=str(tmp_path)))
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server, tmp_path
    server.close()
    thread.join(timeout=5)


@pytest.mark.parametrize(
    ("path", "expected"),
    [
        ("a.conf", True),
        ("config_files/default.conf", True),
        (".conf", False),
        ("file.txt", False),
        ("noextension", False),
        ("dir.d/file", False),
    ],
)
def test_is_valid_config_path(path, expected):
    assert is_valid_config_path(path) is expected


def test_main_too_many_arguments(capsys):
    assert main(["a.conf", "b.conf"]) == 0
    assert "Usage" in capsys.readouterr().err


def test_main_bad_extension(capsys):
    assert main(["settings.txt"]) == 0
    assert "Usage" in capsys.readouterr().err


def test_main_missing_file(tmp_path, capsys):
    assert main([str(tmp_path / "missing.conf")]) == 1
    assert "Erreur de parsing" in capsys.readouterr().err


def test_main_invalid_config(tmp_path, capsys):
    path = tmp_path / "bad.conf"
    path.write_text("listen 80;\n")
    assert main([str(path)]) == 1
    assert "Directive en dehors de tout bloc." in capsys.readouterr().err


def test_main_default_config_missing(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)
    assert main([]) == 1
    assert "Erreur de parsing" in capsys.readouterr().err


def test_serves_file(running_server):
    server, root = running_server
    (root / "hello.txt").write_bytes(b"hello world")
    response = _exchange(server.port, b"GET /hello.txt HTTP/1.1\r\nHost: x\r\n\r\n")
    assert response.startswith(b"HTTP/1.1 200 OK\r\n")
    assert b"Content-Length: 11\r\n" in response
    assert response.endswith(b"\r\n\r\nhello world")


def test_request_split_across_reads(running_server):
    server, root = running_server
    (root / "page.txt").write_bytes(b"content")
    response = _exchange(server.port, b"GET /page.txt HTTP/1.1\r\n", b"Host: x\r\n\r\n")
    assert response.startswith(b"HTTP/1.1 200 OK\r\n")
    assert response.endswith(b"content")


def test_missing_file_is_404(running_server):
    server, _ = running_server
    response = _exchange(server.port, b"GET /absent HTTP/1.1\r\n\r\n")
    assert response.startswith(b"HTTP/1.1 404 Not Found\r\n")


def test_malformed_request_is_400(running_server):
    server, _ = running_server
    response = _exchange(server.port, b"BAD\r\n\r\n")
    assert response.startswith(b"HTTP/1.1 400 Bad Request\r\n")


def test_unknown_method_is_501(running_server):
    server, _ = running_server
    response = _exchange(server.port, b"PUT /x HTTP/1.1\r\n\r\n")
    assert response.startswith(b"HTTP/1.1 501 Not Implemented\r\n")


def test_delete_removes_file(running_server):
    server, root = running_server
    target = root / "gone.txt"
    target.write_bytes(b"x")
    response = _exchange(server.port, b"DELETE /gone.txt HTTP/1.1\r\n\r\n")
    assert response.endswith(b"File deleted successfully.")
    assert not target.exists()


def test_close_stops_serving(tmp_path):
    server = PollServer(port=0, handler=HTTPHandler(root=str(tmp_path)))
    port = server.port
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    _exchange(port, b"GET / HTTP/1.1\r\n\r\n")
    server.close()
    thread.join(timeout=5)
    assert not thread.is_alive()
    with pytest.raises(OSError):
        socket.create_connection(("127.0.0.1", port), timeout=1).close()


def test_serve_after_close_raises(tmp_path):
    server = PollServer(port=0, handler=HTTPHandler(root=str(tmp_path)))
    server.close()
    with pytest.raises(RuntimeError):
        server.serve_forever()