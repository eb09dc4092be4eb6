"""Configuration-checked HTTP server with a readiness loop per connection."""

from __future__ import annotations

import selectors
import socket
import sys
import threading
from collections.abc import Sequence

from webserv.block_config import ConfigError, ConfigParser
from webserv.http_handler import HTTPHandler
from webserv.http_message import RequestParseError, parse_request

PORT = 8080
BUFFER_SIZE = 4096
DEFAULT_CONFIG = "config_files/default.conf"
_USAGE = "Usage: ./webserv [path to configuration file]"


def is_valid_config_path(path: str) -> bool:
    """Return whether ``path`` names a ``.conf`` file with a non-empty stem."""
    dot = path.rfind(".")
    return dot != -1 and path[dot:] == ".conf" and len(path) > 5


def _configure_socket(sock: socket.socket) -> None:
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_KEEPALIVE, 1)
    sock.setblocking(False)


class PollServer:
    """Accept connections, gather each request and answer it with a handler."""

    def __init__(
        self, port: int = PORT, handler: HTTPHandler | None = None, host: str = ""
    ) -> None:
        self.handler = handler if handler is not None else HTTPHandler()
        self._listener = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        try:
            _configure_socket(self._listener)
            self._listener.bind((host, port))
            self._listener.listen(10)
        except OSError:
            self._listener.close()
            raise
        self._wake_r, self._wake_w = socket.socketpair()
        self._wake_r.setblocking(False)
        self._selector = selectors.DefaultSelector()
        self._selector.register(self._listener, selectors.EVENT_READ)
        self._selector.register(self._wake_r, selectors.EVENT_READ)
        self._buffers: dict[socket.socket, bytearray] = {}
        self._lock = threading.Lock()
        self._closed = False
        self._running = False

    @property
    def port(self) -> int:
        """The port the server listens on."""
        return self._listener.getsockname()[1]

    def serve_forever(self) -> None:
        """Serve until :meth:`close` is called or the process is interrupted."""
        with self._lock:
            if self._closed:
                raise RuntimeError("server is closed")
            self._running = True
        try:
            while True:
                for key, _ in self._selector.select():
                    sock = key.fileobj
                    if sock is self._wake_r:
                        return
                    if sock is self._listener:
                        self._accept_all()
                    else:
                        self._handle_client(sock)  # type: ignore[arg-type]
        except KeyboardInterrupt:
            print("\nArrêt du serveur...")
            print("Socket fermé.")
        finally:
            self._release()

    def close(self) -> None:
        """Stop serving and close every socket; safe to call from any thread."""
        with self._lock:
            if self._closed:
                return
            self._closed = True
            running = self._running
        if running:
            try:
                self._wake_w.send(b"\0")
            except OSError:
                pass
        else:
            self._release()

    def _release(self) -> None:
        with self._lock:
            self._closed = True
            self._running = False
            try:
                registered = list(self._selector.get_map().values())
            except RuntimeError:
                return
            for key in registered:
                key.fileobj.close()  # type: ignore[union-attr]
            self._selector.close()
            self._wake_w.close()
            self._buffers.clear()

    def _drop(self, client: socket.socket) -> None:
        self._selector.unregister(client)
        self._buffers.pop(client, None)
        client.close()

    def _accept_all(self) -> None:
        while True:
            try:
                client, _ = self._listener.accept()
            except BlockingIOError:
                return
            except OSError as error:
                print(f"accept: {error}", file=sys.stderr)
                return
            try:
                _configure_socket(client)
                client.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
            except OSError as error:
                print(f"setsockopt: {error}", file=sys.stderr)
                client.close()
                continue
            self._selector.register(client, selectors.EVENT_READ)
            print(f"Nouvelle connexion acceptée : {client.fileno()}")

    def _handle_client(self, client: socket.socket) -> None:
        fd = client.fileno()
        try:
            data = client.recv(BUFFER_SIZE)
        except BlockingIOError:
            return
        except OSError as error:
            print(f"read: {error}", file=sys.stderr)
            self._drop(client)
            return
        if not data:
            print(f"Connexion fermée : {fd}")
            self._drop(client)
            return

        buffer = self._buffers.setdefault(client, bytearray())
        buffer += data
        if b"\r\n\r\n" not in buffer:
            return

        try:
            request = parse_request(bytes(buffer))
        except RequestParseError:
            print(f"Erreur de parsing de la requête du client : {fd}", file=sys.stderr)
            response = self.handler.generate_error_response(400, "Bad Request")
        else:
            response = self.handler.handle_request(request)

        try:
            client.setblocking(True)
            client.sendall(response.to_bytes())
        except BrokenPipeError:
            print(f"Tentative d'écriture sur un socket fermé : {fd}", file=sys.stderr)
        except OSError as error:
            print(f"send: {error}", file=sys.stderr)
        finally:
            self._drop(client)


def main(argv: Sequence[str] | None = None) -> int:
    """Check the configuration file, then serve on port 8080."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) > 1:
        print(_USAGE, file=sys.stderr)
        return 0
    if args:
        path = args[0]
        if not is_valid_config_path(path):
            print(_USAGE, file=sys.stderr)
            return 0
    else:
        path = DEFAULT_CONFIG

    try:
        ConfigParser(path).parse()
    except ConfigError as error:
        print(f"Erreur de parsing : {error}", file=sys.stderr)
        return 1

    try:
        server = PollServer(PORT)
    except OSError as error:
        print(f"socket: {error}", file=sys.stderr)
        return 1
    print(f"Serveur en écoute sur le port {PORT}...")
    try:
        server.serve_forever()
    finally:
        server.close()
    return 0