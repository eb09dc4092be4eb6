"""Data model produced by the nginx-style configuration parser."""

from __future__ import annotations

from dataclasses import dataclass, field


class ParsingError(Exception):
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
    allowed_methods: list[str] = field(default_factory=list)
    redirection: str = ""
    root: str = ""
    auto_index: bool = False
    index: str = ""
    cgi_extension: str = ""
    upload_enable: bool = False
    upload_store: str = ""


@dataclass
class Server:
    """Directives of a ``server`` block."""

    listen: str = ""
    server_names: list[str] = field(default_factory=list)
    root: str = ""
    index: str = ""
    error_pages: dict[int, str] = field(default_factory=dict)
    client_max_body_size: int = 0
    locations: list[Location] = field(default_factory=list)

    def add_server_name(self, name: str) -> None:
        """Append a server name."""
        self.server_names.append(name)

    def add_error_page(self, status_code: int, uri: str) -> None:
        """Map a status code to an error page, replacing any previous one."""
        self.error_pages[status_code] = uri

    def add_location(self, location: Location) -> None:
        """Append a location block."""
        self.locations.append(location)


@dataclass
class Config:
    """Global directives and the list of servers."""

    client_max_body_size: int = 0
    error_pages: dict[int, str] = field(default_factory=dict)
    servers: list[Server] = field(default_factory=list)

    def add_error_page(self, status_code: int, uri: str) -> None:
        """Map a status code to an error page, replacing any previous one."""
        self.error_pages[status_code] = uri

    def add_server(self, server: Server) -> None:
        """Append a server block."""
        self.servers.append(server)