# webserv

A small HTTP/1.1 server together with the pieces it is made of: a parser
for block-structured server configuration files, HTTP request and
response types, and a request handler for `GET`, `POST` and `DELETE`
with static file serving, CGI execution and file uploads.

It needs nothing beyond the standard library and runs on POSIX systems.

## Installation

```
pip install .
```

For running the tests:

```
pip install ".[test]"
pytest
```

## Commands

### `webserv`

The server. It takes an optional path to a configuration file, which
must end in `.conf`:

```
webserv my_site.conf
```

Without an argument it reads `config_files/default.conf`. The file is
parsed with `webserv.block_config`; if it is invalid, the error is printed
and the command exits with status 1. The server then listens on port 8080
on all interfaces (the configured `listen` values are not used for
binding). It buffers each client's data until the request headers are
complete, parses the request, answers it and closes the connection:

- `GET` serves files relative to the current directory, and runs scripts
  found under `/cgi-bin/` as CGI programs (with `REQUEST_METHOD`,
  `QUERY_STRING` and `SCRIPT_NAME` set). For a directory it serves
  `www/index.html` inside it, or answers `403 Forbidden`;
- `POST` to a path beginning with `/upload` stores a `multipart/form-data`
  field named `file` into `./uploads`; other `POST` requests echo the
  body back;
- `DELETE` removes the named file;
- any other method is answered with `501 Not Implemented`;
- a request that cannot be parsed gets `400 Bad Request`.

Stop it with Ctrl-C.

### `webserv-blocks`

Parses a block configuration file and prints each server and its
locations:

```
webserv-blocks site.conf
```

A syntax error is reported with its message and exit status 1.

## Configuration format

Read by `webserv` and `webserv-blocks`. Each directive sits on its own
line and ends with `;`; `#` starts a comment. `server` blocks accept
`listen` (`PORT` or `IP:PORT`, optionally followed by `default_server`),
`server_name`, `root`, `client_max_body_size` (with an optional `K` or `M`
suffix) and `error_page`. `location` blocks accept `methods`, `autoindex`
(`on`/`off`), `index`, `upload_dir`, `cgi` (`on`/`off`), `redirect` and
`root`.

```
server {
    listen 127.0.0.1:8080 default_server;
    server_name example.com www.example.com;
    root /var/www;
    client_max_body_size 1M;
    error_page 404 /404.html;

    location /images {
        methods GET;
        root /var/www/images;
        autoindex on;
    }

    location /cgi-bin {
        methods GET POST;
        cgi on;
    }
}
```

## Using the library

Parsing a configuration:

```python
from webserv.block_config import ConfigError, ConfigParser, describe_config

try:
    config = ConfigParser("site.conf").parse()
except ConfigError as error:
    print("invalid configuration:", error)
else:
    print(describe_config(config))
```

Handling a raw request:

```python
from webserv.http_message import parse_request
from webserv.http_handler import HTTPHandler

request = parse_request(b"GET /index.html HTTP/1.1\r\nHost: localhost\r\n\r\n")
response = HTTPHandler(root=".").handle_request(request)
wire_bytes = response.to_bytes()
```

Running the server from code:

```python
from webserv.server import PollServer

server = PollServer(port=8080)
try:
    server.serve_forever()
finally:
    server.close()
```

Other modules:

- `webserv.route_config` reads a simpler line-oriented format:
  `GlobalConfig.parse_configuration` collects general
  `client_max_body_size` and `error_page` directives and `server` blocks
  of `host`, `port`, `server_name`, `error_page` and `max_body_size`
  pairs into `ServerConfig` objects; `parse_size("10M")` converts sizes
  with `K`, `M` or `G` units to bytes.
- `webserv.basic_http` offers `parse_basic_request` and `BasicResponse`,
  a minimal request/response pair for `\n`-separated text.
- `webserv.nginx_model` holds data classes (`Config`, `Server`,
  `Location`) and `ParsingError` for an nginx-style configuration.

## What it does not do

- There is no parser for the nginx-style format described by
  `webserv.nginx_model`; the module only provides the data model.
- The server does not bind to the addresses in its configuration, does
  not apply `server_name`, `root`, `location` or size limits, and does
  not keep connections alive.