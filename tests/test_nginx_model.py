import pytest

from webserv.nginx_model import Config, Location, ParsingError, Server


def test_parsing_error_message():
    err = ParsingError("'{' attendu après 'server'")
    assert str(err) == "'{' attendu après 'server'"
    assert err.message == "'{' attendu après 'server'"
    with pytest.raises(ParsingError):
        raise err


def test_location_defaults():
    loc = Location("/images")
    assert loc.path == "/images"
    assert loc.auto_index is False
    assert loc.upload_enable is False
    assert loc.allowed_methods == []
    assert loc.cgi_extension == ""


def test_location_lists_are_independent():
    a = Location()
    b = Location()
    a.allowed_methods.append("GET")
    assert b.allowed_methods == []


def test_server_defaults():
    server = Server()
    assert server.client_max_body_size == 0
    assert server.listen == ""
    assert server.locations == []
    assert server.error_pages == {}


def test_server_names_keep_order():
    server = Server()
    server.add_server_name("example.com")
    server.add_server_name("www.example.com")
    assert server.server_names == ["example.com", "www.example.com"]


def test_server_error_page_overwrites():
    server = Server()
    server.add_error_page(404, "/404.html")
    server.add_error_page(404, "/other.html")
    server.add_error_page(500, "/50x.html")
    assert server.error_pages == {404: "/other.html", 500: "/50x.html"}


def test_server_locations_keep_order():
    server = Server()
    first, second = Location("/"), Location("/upload")
    server.add_location(first)
    server.add_location(second)
    assert [loc.path for loc in server.locations] == ["/", "/upload"]


def test_config_collects_servers_and_error_pages():
    config = Config()
    server = Server(listen="8080")
    config.add_server(server)
    config.add_error_page(404, "/404.html")
    assert config.servers == [server]
    assert config.error_pages[404] == "/404.html"
    assert config.client_max_body_size == 0