"""Line-oriented server configuration with routes and size units."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from os import PathLike

_WHITESPACE = " \t\r\n"
_SIZE_RE = re.compile(r"\s*\+?(\d+)\s*(\S)?")
_INT_RE = re.compile(r"\s*([+-]?\d+)")
_UNITS = {"k": 1024, "m": 1024 * 1024, "g": 1024 * 1024 * 1024}


def parse_size(size_str: str) -> int:
    """Parse a size such as ``10M`` into bytes; unparsable input gives 0."""
    match = _SIZE_RE.match(size_str)
    if not match:
        return 0
    size = int(match.group(1))
    unit = match.group(2)
    return size * _UNITS.get(unit.lower(), 1) if unit else size


def _string_to_int(text: str) -> int:
    match = _INT_RE.match(text)
    if not match:
        raise ValueError("Conversion d'entier échouée")
    return int(match.group(1))


@dataclass
class RouteConfig:
    """Settings attached to one route."""

    allowed_methods: list[str] = field(default_factory=list)
    redirect_url: str = ""
    file_path: str = ""
    directory_listing: bool = False
    default_file: str = "index.html"

    def is_method_allowed(self, method: str) -> bool:
        """Return whether ``method`` is among the allowed methods."""
        return method in self.allowed_methods


@dataclass
class ServerConfig:
    """Settings of one virtual server."""

    host: str = ""
    port: int = 80
    server_names: list[str] = field(default_factory=list)
    routes: dict[str, RouteConfig] = field(default_factory=dict)
    max_body_size: int = 1024 * 1024
    default_error_page: str = "404.html"

    def parse_config(self, config_block: str) -> None:
        """Read whitespace-separated key/value pairs from ``config_block``.

        Raises ValueError on an unknown key or a non-numeric integer value.
        """
        tokens = iter(config_block.split())
        for key, value in zip(tokens, tokens):
            if key == "host":
                self.host = value
            elif key == "port":
                self.port = _string_to_int(value)
            elif key == "server_name":
                self.server_names.append(value)
            elif key == "error_page":
                self.default_error_page = value
            elif key == "max_body_size":
                self.max_body_size = _string_to_int(value)
            else:
                raise ValueError("Clé de configuration inconnue : " + key)

    def is_route_matching(self, route: str) -> bool:
        """Return whether a route is configured."""
        return route in self.routes

    def route(self, route: str) -> RouteConfig:
        """Return the configuration of ``route``; KeyError if absent."""
        try:
            return self.routes[route]
        except KeyError:
            raise KeyError("Route non trouvée : " + route) from None


@dataclass
class GlobalConfig:
    """General directives and the server blocks of a configuration file."""

    client_max_body_size: int = 0
    error_pages: list[str] = field(default_factory=list)
    servers: list[ServerConfig] = field(default_factory=list)

    def parse_configuration(self, config_file: str | PathLike[str]) -> None:
        """Load and parse a configuration file."""
        block: list[str] = []
        inside_server = False
        brace_count = 0
        with open(config_file, encoding="utf-8") as handle:
            for raw_line in handle:
                line = raw_line.strip(_WHITESPACE)
                if not line or line.startswith("#"):
                    continue
                if "{" in line:
                    brace_count += 1
                    if "server" in line and not inside_server:
                        inside_server = True
                        block = []
                if "}" in line:
                    brace_count -= 1
                    if inside_server and brace_count == 0:
                        inside_server = False
                        server = ServerConfig()
                        server.parse_config("".join(block))
                        self.servers.append(server)
                        block = []
                        continue
                if inside_server:
                    block.append(line + "\n")
                else:
                    self._parse_general_directive(line)

    def _parse_general_directive(self, line: str) -> None:
        words = line.split()
        if not words:
            return
        directive, args = words[0], words[1:]
        if directive == "client_max_body_size":
            self.client_max_body_size = parse_size(args[0] if args else "")
        elif directive == "error_page" and len(args) >= 2:
            self.error_pages.append(f"{args[0]} {args[1]}")