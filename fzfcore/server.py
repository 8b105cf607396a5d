"""A minimal HTTP server that receives actions for the finder."""

from __future__ import annotations

import hmac
import os
import queue
import re
import socket
import threading
from dataclasses import dataclass
from typing import BinaryIO

from fzfcore.actions import Action, ActionType, parse_single_action_list
from fzfcore.keys import OptionError

CRLF = "\r\n"
HTTP_OK = "HTTP/1.1 200 OK" + CRLF
HTTP_BAD_REQUEST = "HTTP/1.1 400 Bad Request" + CRLF
HTTP_UNAUTHORIZED = "HTTP/1.1 401 Unauthorized" + CRLF
HTTP_UNAVAILABLE = "HTTP/1.1 503 Service Unavailable" + CRLF
JSON_CONTENT_TYPE = "Content-Type: application/json" + CRLF
HTTP_READ_TIMEOUT = 10.0
MAX_CONTENT_LENGTH = 1024 * 1024

_GET_RE = re.compile(r"^GET /(?:\?([a-z0-9=&]+))? HTTP")
_INT_RE = re.compile(r"[+-]?[0-9]+")


@dataclass(frozen=True)
class ListenAddress:
    """Host and port the server listens on; port 0 picks a free port."""

    host: str = "localhost"
    port: int = 0

    def is_local(self) -> bool:
        """Whether the address is only reachable from this machine."""
        return self.host in ("localhost", "127.0.0.1")


@dataclass(frozen=True)
class GetParams:
    """Paging parameters of a GET request."""

    limit: int = 100
    offset: int = 0


def parse_listen_address(address: str) -> ListenAddress:
    """Parse ``[HOST:]PORT``; raises OptionError when it is invalid."""
    parts = address.split(":", 2)
    if len(parts) == 1:
        parts = ["localhost", parts[0]]
    if len(parts) != 2:
        raise OptionError(f"invalid listen address: {address}")
    host, port_text = parts
    if not _INT_RE.fullmatch(port_text) or not 0 <= int(port_text) <= 65535:
        raise OptionError(f"invalid listen port: {port_text}")
    return ListenAddress(host or "localhost", int(port_text))


def parse_get_params(query: str) -> GetParams:
    """Read ``limit`` and ``offset`` from a query string; bad values are ignored."""
    values = {"limit": 100, "offset": 0}
    for pair in query.split("&"):
        name, sep, value = pair.partition("=")
        if sep and name in values and _INT_RE.fullmatch(value):
            values[name] = int(value)
    return GetParams(**values)


def _answer(code: str, message: str) -> str:
    message += "\n"
    return f"{code}Content-Length: {len(message.encode('utf-8'))}{CRLF}{CRLF}{message}"


def _bad(message: str) -> str:
    return _answer(HTTP_BAD_REQUEST, message)


class HttpServer:
    """Accepts POSTed action lists and answers GET requests with the state.

    Parsed actions are put on ``action_queue``; the reply to a GET request
    is taken from ``response_queue``.
    """

    def __init__(
        self,
        action_queue: queue.Queue,
        response_queue: queue.Queue,
        api_key: str | None = None,
        response_timeout: float = 2.0,
    ) -> None:
        self.action_queue = action_queue
        self.response_queue = response_queue
        self.api_key = os.environ.get("FZF_API_KEY", "") if api_key is None else api_key
        self.response_timeout = response_timeout
        self._listener: socket.socket | None = None
        self._thread: threading.Thread | None = None

    def _respond_get(self, query: str) -> str:
        self.action_queue.put([Action(ActionType.RESPONSE, query)])
        try:
            response = self.response_queue.get(timeout=self.response_timeout)
        except queue.Empty:
            threading.Thread(target=self.response_queue.get, daemon=True).start()
            return _answer(HTTP_UNAVAILABLE + JSON_CONTENT_TYPE, '{"error":"timeout"}')
        return _answer(HTTP_OK + JSON_CONTENT_TYPE, response)

    def handle_request(self, stream: BinaryIO) -> str:
        """Read one request from ``stream`` and return the full response."""
        content_length = 0
        client_key = ""
        body = b""
        try:
            request_line = stream.readline()
            if request_line:
                text = request_line.decode("utf-8", "replace")
                match = _GET_RE.match(text)
                if match:
                    return self._respond_get(match.group(1) or "")
                if not text.startswith("POST / HTTP"):
                    return _bad("invalid request method")
                while True:
                    line = stream.readline()
                    if not line:
                        break
                    if line == CRLF.encode():
                        if content_length == 0:
                            return _bad("content-length header missing")
                        body = stream.read(content_length) or b""
                        break
                    name, sep, value = line.decode("utf-8", "replace").partition(":")
                    if not sep:
                        continue
                    name = name.lower()
                    value = value.strip()
                    if name == "content-length":
                        if not _INT_RE.fullmatch(value):
                            return _bad("invalid content length")
                        length = int(value)
                        if length <= 0 or length > MAX_CONTENT_LENGTH:
                            return _bad("invalid content length")
                        content_length = length
                    elif name == "x-api-key":
                        client_key = value
        except OSError:
            pass

        if self.api_key and not hmac.compare_digest(
            client_key.encode("utf-8"), self.api_key.encode("utf-8")
        ):
            return _answer(HTTP_UNAUTHORIZED, "invalid api key")

        if len(body) < content_length:
            return _bad("incomplete request")
        text = body[:content_length].decode("utf-8", "replace").strip("\r\n")

        try:
            actions = parse_single_action_list(text)
        except OptionError as error:
            return _bad(str(error))
        if not actions:
            return _bad("no action specified")

        self.action_queue.put(actions)
        return HTTP_OK + CRLF

    def _serve(self, listener: socket.socket) -> None:
        while True:
            try:
                conn, _ = listener.accept()
            except OSError:
                if self._listener is None:
                    break
                continue
            with conn:
                conn.settimeout(HTTP_READ_TIMEOUT)
                try:
                    with conn.makefile("rb") as stream:
                        response = self.handle_request(stream)
                    conn.sendall(response.encode("utf-8"))
                except OSError:
                    pass

    def start(self, address: ListenAddress) -> int:
        """Start serving in the background and return the port in use.

        Raises ValueError when a remote address is given without an API
        key, and OSError when the address cannot be bound.
        """
        if not address.is_local() and not self.api_key:
            raise ValueError("FZF_API_KEY is required to allow remote access")
        addr = f"{address.host}:{address.port}"
        try:
            listener = socket.create_server((address.host, address.port))
        except OSError as error:
            raise OSError(f"failed to listen on {addr}") from error
        self._listener = listener
        port = listener.getsockname()[1]
        self._thread = threading.Thread(target=self._serve, args=(listener,), daemon=True)
        self._thread.start()
        return port

    def close(self) -> None:
        """Stop accepting connections."""
        listener, self._listener = self._listener, None
        if listener is not None:
            try:
                listener.shutdown(socket.SHUT_RDWR)
            except OSError:
                pass
            listener.close()
        if self._thread is not None:
            self._thread.join(timeout=2)
            self._thread = None