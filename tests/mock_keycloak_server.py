"""Mock Keycloak server for exercising the admin client over real HTTP.

Runs ``http.server`` in a background thread. Responses are scripted per
(method, path): each call to ``route`` queues replies that are served in
order, and the last reply keeps being served once the queue is drained.
Unrouted requests get a 404.

Every request is recorded (method, decoded path, query, headers, body) so
tests can assert exactly what the client sent.

The token endpoint answers ``{"access_token": "<token>"}`` by default;
``token_status`` / ``token_body`` override it.

Usage::

    with MockKeycloakServer() as server:
        server.route("GET", "/auth/admin/realms", Reply(200, [{"realm": "demo"}]))
        client = AdminAPIClient(server.base_url, token="dummy")
        client.realms.list_realms()
        assert server.paths() == ["/auth/admin/realms"]
"""
from __future__ import annotations
import json
import threading
from dataclasses import dataclass, field
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import parse_qs, unquote, urlsplit

TOKEN_PATH = "/auth/realms/master/protocol/openid-connect/token"


@dataclass
class Reply:
    """Scripted response. ``body`` is JSON-encoded unless it is ``bytes``."""
    status: int = 200
    body: Any = None
    headers: Dict[str, str] = field(default_factory=dict)

    def encoded(self) -> bytes:
        if self.body is None:
            return b""
        if isinstance(self.body, bytes):
            return self.body
        return json.dumps(self.body).encode()


@dataclass
class RecordedRequest:
    method: str
    path: str
    query: Dict[str, List[str]]
    headers: Dict[str, str]
    body: bytes

    def json(self) -> Any:
        return json.loads(self.body) if self.body else None

    def form(self) -> Dict[str, List[str]]:
        return parse_qs(self.body.decode())


class MockKeycloakHandler(BaseHTTPRequestHandler):
    """Serves scripted replies; state lives on the server instance."""

    def log_message(self, format, *args):
        """Suppress request logging during tests to keep output clean."""
        pass

    def _dispatch(self):
        split = urlsplit(self.path)
        path = unquote(split.path)
        length = int(self.headers.get("Content-Length") or 0)
        body = self.rfile.read(length) if length else b""

        self.server.mock.record(RecordedRequest(
            method=self.command,
            path=path,
            query=parse_qs(split.query),
            headers={k: v for k, v in self.headers.items()},
            body=body,
        ))
        reply = self.server.mock.next_reply(self.command, path)

        payload = reply.encoded()
        self.send_response(reply.status)
        if payload:
            self.send_header("Content-Type", "application/json")
        for name, value in reply.headers.items():
            self.send_header(name, value)
        self.send_header("Content-Length", str(len(payload)))
        self.end_headers()
        if payload:
            self.wfile.write(payload)

    do_GET = _dispatch
    do_POST = _dispatch
    do_PUT = _dispatch
    do_DELETE = _dispatch


class MockKeycloakServer:
    """In-process Keycloak stand-in bound to an ephemeral localhost port."""

    def __init__(self, port: int = 0, token: str = "fresh-token"):
        self.server = ThreadingHTTPServer(("127.0.0.1", port), MockKeycloakHandler)
        self.server.mock = self
        self.requests: List[RecordedRequest] = []
        self._routes: Dict[Tuple[str, str], List[Reply]] = {}
        self._lock = threading.Lock()
        self._thread: Optional[threading.Thread] = None
        self.route("POST", TOKEN_PATH, Reply(200, {"access_token": token, "token_type": "Bearer"}))

    @property
    def base_url(self) -> str:
        """The base URL of the running server (e.g. ``http://127.0.0.1:54321``)."""
        host, port = self.server.server_address[:2]
        return f"http://{host}:{port}"

    def route(self, method: str, path: str, *replies: Reply) -> None:
        """Replace the scripted replies for ``method path``."""
        with self._lock:
            self._routes[(method, path)] = list(replies)

    def record(self, request: RecordedRequest) -> None:
        with self._lock:
            self.requests.append(request)

    def next_reply(self, method: str, path: str) -> Reply:
        with self._lock:
            queue = self._routes.get((method, path))
            if not queue:
                return Reply(404, {"error": "not routed"})
            if len(queue) > 1:
                return queue.pop(0)
            return queue[0]

    def paths(self, method: Optional[str] = None) -> List[str]:
        """Paths requested so far, token endpoint excluded."""
        return [
            r.path for r in self.requests
            if r.path != TOKEN_PATH and (method is None or r.method == method)
        ]

    def calls(self, method: str, path: str) -> List[RecordedRequest]:
        return [r for r in self.requests if r.method == method and r.path == path]

    def start(self):
        """Start the server in a daemon thread."""
        self._thread = threading.Thread(target=self.server.serve_forever, daemon=True)
        self._thread.start()

    def stop(self):
        """Shut down the server and join the thread."""
        self.server.shutdown()
        self.server.server_close()
        if self._thread:
            self._thread.join(timeout=5)

    def __enter__(self):
        self.start()
        return self

    def __exit__(self, *args):
        self.stop()
