"""Line-oriented parser for block-structured server configuration files."""

from __future__ import annotations

import re
import sys
from collections.abc import Sequence
from dataclasses import dataclass, field
from enum import Enum
from os import PathLike

_WHITESPACE = " \t\r\n"
_ATOI_RE = re.compile(r"[ \t\n\v\f\r]*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _ATOI_RE.match(text)
    return int(match.group(1)) if match else 0


class ConfigError(Exception):
    """Raised when a configuration file cannot be parsed."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def __str__(self) -> str:
        return self.message


@dataclass
class Location:
    """Directives of a ``location`` block."""

    path: str = ""
    methods: list[str] = field(default_factory=list)
    autoindex: bool = False
    index: str = ""
    upload_dir: str = ""
    cgi: bool = False
    redirect: str = ""
    root: str = ""


@dataclass
class Server:
    """Directives of a ``server`` block."""

    listen_ip: str = ""
    listen_port: int = 80
    server_names: list[str] = field(default_factory=list)
    is_default_server: bool = False
    root: str = ""
    client_max_body_size: int = 0
    error_pages: dict[int, str] = field(default_factory=dict)
    locations: list[Location] = field(default_factory=list)


@dataclass
class Config:
    """All server blocks read from a configuration file."""

    servers: list[Server] = field(default_factory=list)

    def add_server(self, server: Server) -> None:
        """Append a server block."""
        self.servers.append(server)


class _Context(Enum):
    SERVER = "server"
    LOCATION = "location"


def _on_off(value: str, name: str) -> bool:
    if value == "on":
        return True
    if value == "off":
        return False
    raise ConfigError(f"Valeur invalide pour {name}.")


def _parse_size(size_str: str) -> int:
    if size_str[-1:] in ("M", "m"):
        return _atoi(size_str[:-1]) * 1024 * 1024
    if size_str[-1:] in ("K", "k"):
        return _atoi(size_str[:-1]) * 1024
    return _atoi(size_str)


class ConfigParser:
    """Parse a block-structured configuration file into a :class:`Config`."""

    def __init__(self, filepath: str | PathLike[str]) -> None:
        self.filepath = filepath

    def parse(self) -> Config:
        """Read and parse the file; raise ConfigError on any problem."""
        try:
            with open(self.filepath, encoding="utf-8", newline="") as handle:
                content = handle.read()
        except OSError:
            raise ConfigError("Impossible d'ouvrir le fichier de configuration.") from None

        config = Config()
        contexts: list[_Context] = []
        server = Server()
        location = Location()
        in_server = False

        for raw_line in content.split("\n"):
            line = raw_line.split("#", 1)[0].strip(_WHITESPACE)
            if not line:
                continue

            if "server {" in line:
                if in_server:
                    raise ConfigError("Nesting de blocs server non supporté.")
                in_server = True
                server = Server()
                contexts.append(_Context.SERVER)
                continue

            if "location" in line and "{" in line:
                if not in_server:
                    raise ConfigError("Bloc location en dehors d'un bloc server.")
                start = line.find("location") + len("location")
                end = line.find("{", start)
                if end == -1:
                    raise ConfigError("Syntaxe invalide pour le bloc location.")
                location = Location(path=line[start:end].strip(_WHITESPACE))
                contexts.append(_Context.LOCATION)
                continue

            if "}" in line:
                if not contexts:
                    raise ConfigError("Fermeture de bloc inattendue.")
                closed = contexts.pop()
                if closed is _Context.LOCATION:
                    server.locations.append(location)
                else:
                    config.add_server(server)
                    in_server = False
                continue

            semicolon = line.find(";")
            if semicolon == -1:
                raise ConfigError("Directive sans point-virgule.")
            words = line[:semicolon].split()
            directive = words[0] if words else ""
            args = words[1:]

            if not contexts:
                raise ConfigError("Directive en dehors de tout bloc.")
            if contexts[-1] is _Context.SERVER:
                self._server_directive(server, directive, args)
            else:
                self._location_directive(location, directive, args)

        if contexts:
            raise ConfigError("Fermeture de blocs manquante.")
        return config

    @staticmethod
    def _parse_listen(server: Server, args: list[str]) -> None:
        address_port = args[0] if args else ""
        is_default = False
        for option in args[1:]:
            if option == "default_server":
                is_default = True
            else:
                raise ConfigError("Option inconnue dans listen directive: " + option)
        ip, colon, port = address_port.partition(":")
        if colon:
            server.listen_ip = ip
            server.listen_port = _atoi(port)
        else:
            server.listen_ip = "0.0.0.0"
            server.listen_port = _atoi(address_port)
        server.is_default_server = is_default

    def _server_directive(self, server: Server, directive: str, args: list[str]) -> None:
        if directive == "listen":
            self._parse_listen(server, args)
        elif directive == "server_name":
            server.server_names.extend(args)
        elif directive == "root":
            if args:
                server.root = args[0]
        elif directive == "client_max_body_size":
            server.client_max_body_size = _parse_size(args[0] if args else "")
        elif directive == "error_page":
            code = _atoi(args[0] if args else "")
            server.error_pages[code] = args[1] if len(args) > 1 else ""
        else:
            raise ConfigError("Directive inconnue dans le bloc server : " + directive)

    @staticmethod
    def _location_directive(location: Location, directive: str, args: list[str]) -> None:
        first = args[0] if args else ""
        if directive == "methods":
            location.methods.extend(args)
        elif directive == "autoindex":
            location.autoindex = _on_off(first, "autoindex")
        elif directive == "index":
            if args:
                location.index = first
        elif directive == "upload_dir":
            if args:
                location.upload_dir = first
        elif directive == "cgi":
            location.cgi = _on_off(first, "cgi")
        elif directive == "redirect":
            location.redirect = first
        elif directive == "root":
            if args:
                location.root = first
        else:
            raise ConfigError("Directive inconnue dans le bloc location : " + directive)


def _flag(value: bool) -> str:
    return "on" if value else "off"


def describe_config(config: Config) -> str:
    """Render a parsed configuration as a human-readable report."""
    lines: list[str] = []
    for number, server in enumerate(config.servers, start=1):
        lines.append(f"Serveur {number} :")
        lines.append(f"  Listen : {server.listen_ip}:{server.listen_port}")
        lines.append("  Server Names : " + "".join(name + " " for name in server.server_names))
        lines.append(f"  Root : {server.root}")
        lines.append(f"  Client Max Body Size : {server.client_max_body_size} bytes")
        lines.extend(
            f"  Error Page {code} : {path}" for code, path in sorted(server.error_pages.items())
        )
        for location in server.locations:
            lines.append(f"  Location {location.path} :")
            lines.append("    Methods : " + "".join(m + " " for m in location.methods))
            lines.append(f"    Autoindex : {_flag(location.autoindex)}")
            lines.append(f"    Index : {location.index}")
            lines.append(f"    Upload Dir : {location.upload_dir}")
            lines.append(f"    CGI : {_flag(location.cgi)}")
            lines.append(f"    Redirect : {location.redirect}")
            lines.append(f"    Root : {location.root}")
        lines.append("")
    return "".join(line + "\n" for line in lines)


def main(argv: Sequence[str] | None = None) -> int:
    """Parse the configuration file named on the command line and print it."""
    args = list(sys.argv[1:] if argv is None else argv)
    if len(args) != 1:
        print("Usage: block_config <config_file>", file=sys.stderr)
        return 1
    try:
        config = ConfigParser(args[0]).parse()
    except ConfigError as error:
        print(f"Erreur de parsing : {error}", file=sys.stderr)
        return 1
    print(describe_config(config), end="")
    return 0