import io
import queue
import socket

import pytest

from fzfcore.actions import ActionType
from fzfcore.keys import OptionError
from fzfcore.server import (
    GetParams,
    HttpServer,
    ListenAddress,
    parse_get_params,
    parse_listen_address,
)

OK = "HTTP/1.1 200 OK\r\n\r\n"


def _server(api_key=""):
    return HttpServer(queue.Queue(), queue.Queue(), api_key=api_key, response_timeout=0.05)


def _post(body, headers=None):
    raw = body.encode()
    lines = ["POST / HTTP/1.1", f"Content-Length: {len(raw)}"] + (headers or [])
    return io.BytesIO(("\r\n".join(lines) + "\r\n\r\n").encode() + raw)


def test_parse_listen_address_port_only():
    assert parse_listen_address("6266") == ListenAddress("localhost", 6266)


def test_parse_listen_address_with_host():
    assert parse_listen_address("0.0.0.0:6266") == ListenAddress("0.0.0.0", 6266)
    assert parse_listen_address(":6266").host == "localhost"


@pytest.mark.parametrize("address", ["a:b:c", "65536", "-1", "host:port"])
def test_parse_listen_address_invalid(address):
    with pytest.raises(OptionError):
        parse_listen_address(address)


def test_is_local():
    assert ListenAddress("localhost", 0).is_local()
    assert ListenAddress("127.0.0.1", 0).is_local()
    assert not ListenAddress("0.0.0.0", 0).is_local()


def test_parse_get_params():
    assert parse_get_params("") == GetParams(100, 0)
    assert parse_get_params("limit=5&offset=3") == GetParams(5, 3)
    assert parse_get_params("limit=x&offset") == GetParams(100, 0)


def test_post_actions():
    server = _server()
    assert server.handle_request(_post("up+down")) == OK
    actions = server.action_queue.get_nowait()
    assert [a.type for a in actions] == [ActionType.UP, ActionType.DOWN]


def test_post_strips_newlines():
    server = _server()
    assert server.handle_request(_post("change-query(foo)\r\n")) == OK
    (action,) = server.action_queue.get_nowait()
    assert (action.type, action.arg) == (ActionType.CHANGE_QUERY, "foo")


def test_invalid_method():
    response = _server().handle_request(io.BytesIO(b"PUT / HTTP/1.1\r\n\r\n"))
    assert response.startswith("HTTP/1.1 400 Bad Request")
    assert response.endswith("invalid request method\n")


def test_missing_content_length():
    response = _server().handle_request(io.BytesIO(b"POST / HTTP/1.1\r\n\r\nup"))
    assert response.endswith("content-length header missing\n")


def test_invalid_content_length():
    stream = io.BytesIO(b"POST / HTTP/1.1\r\nContent-Length: 0\r\n\r\n")
    assert _server().handle_request(stream).endswith("invalid content length\n")


def test_incomplete_request():
    stream = io.BytesIO(b"POST / HTTP/1.1\r\nContent-Length: 10\r\n\r\nup")
    assert _server().handle_request(stream).endswith("incomplete request\n")


def test_unknown_action():
    response = _server().handle_request(_post("foo"))
    assert response.startswith("HTTP/1.1 400 Bad Request")
    assert response.endswith("unknown action: foo\n")


def test_no_action():
    assert _server().handle_request(_post("\r\n")).endswith("no action specified\n")


def test_api_key_required():
    api_key = "placeholder"
    server = _server(api_key)
    response = server.handle_request(_post("up"))
    assert response.startswith("HTTP/1.1 401 Unauthorized")
    assert server.action_queue.empty()
    assert server.handle_request(_post("up", [f"X-API-Key: {api_key}"])) == OK


def test_get_returns_response():
    server = _server()
    server.response_queue.put('{"query":""}')
    response = server.handle_request(io.BytesIO(b"GET /?limit=5 HTTP/1.1\r\n\r\n"))
    assert response.startswith("HTTP/1.1 200 OK\r\nContent-Type: application/json\r\n")
    assert response.endswith('{"query":""}\n')
    (action,) = server.action_queue.get_nowait()
    assert (action.type, action.arg) == (ActionType.RESPONSE, "limit=5")


def test_get_timeout():
    response = _server().handle_request(io.BytesIO(b"GET / HTTP/1.1\r\n\r\n"))
    assert response.startswith("HTTP/1.1 503 Service Unavailable")
    assert response.endswith('{"error":"timeout"}\n')


def test_remote_address_requires_api_key():
    with pytest.raises(ValueError):
        _server().start(ListenAddress("0.0.0.0", 0))


def test_start_and_serve():
    server = _server()
    port = server.start(ListenAddress("localhost", 0))
    try:
        assert port > 0
        with socket.create_connection(("localhost", port), timeout=5) as conn:
            conn.sendall(b"POST / HTTP/1.1\r\nContent-Length: 6\r\n\r\naccept")
            chunks = []
            while True:
                data = conn.recv(4096)
                if not data:
                    break
                chunks.append(data)
        assert b"".join(chunks).decode() == OK
        actions = server.action_queue.get(timeout=5)
        assert [a.type for a in actions] == [ActionType.ACCEPT]
    finally:
        server.close()