"""An HTTP/1.1 server with static files, CGI, uploads and configuration parsing."""

__version__ = "0.1.0"