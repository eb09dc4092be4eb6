[build-system]
requires = ["setuptools>=64"]
build-backend = "setuptools.build_meta"

[project]
name = "webserv"
version = "0.1.0"
description = "A small HTTP/1.1 server with static files, CGI, uploads and server-block configuration parsing"
requires-python = ">=3.10"
dependencies = []
keywords = ["http", "server", "cgi", "configuration", "selectors"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
webserv = "webserv.server:main"
webserv-blocks = "webserv.block_config:main"

[tool.setuptools.packages.find]
include = ["webserv*"]

[tool.pytest.ini_options]
addopts = "-ra"
