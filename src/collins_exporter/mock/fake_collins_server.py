"""
Fake Collins /api/assets server for testing without a real Collins.

    python -m collins_exporter.mock.fake_collins_server
    printf 'host: http://127.0.0.1:9137\\nusername: blake\\npassword: admin:first\\n' > fake.yml
    collins-exporter --collins-config fake.yml
"""

from __future__ import annotations

import base64
import json
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Optional, Set
from urllib.parse import parse_qs, urlparse

from collins_exporter.mock.generator import MockInventory

DEFAULT_USERNAME = "blake"
DEFAULT_PASSWORD = "admin:first"


class FakeCollinsServer(ThreadingHTTPServer):
    """Serves pages from a MockInventory. `fail_pages` answer HTTP 500."""

    daemon_threads = True

    def __init__(
        self,
        address=("127.0.0.1", 0),
        inventory: Optional[MockInventory] = None,
        username: str = DEFAULT_USERNAME,
        password: str = DEFAULT_PASSWORD,
        fail_pages: Optional[Set[int]] = None,
    ):
        super().__init__(address, _AssetsHandler)
        self.inventory = inventory or MockInventory()
        self.username = username
        self.password = password
        self.fail_pages = set(fail_pages or ())
        self.requests_seen = 0

    @property
    def url(self) -> str:
        host, port = self.server_address[:2]
        return f"http://{host}:{port}"


class _AssetsHandler(BaseHTTPRequestHandler):
    server: FakeCollinsServer

    def do_GET(self):
        self.server.requests_seen += 1
        parsed = urlparse(self.path)

        if parsed.path.rstrip("/") != "/api/assets":
            self._send_json(404, {"status": "error", "data": {"message": "Not found"}})
            return

        if not self._authorized():
            self._send_json(401, {"status": "error", "data": {"message": "Invalid username or password"}})
            return

        params = parse_qs(parsed.query)
        try:
            page = int(params.get("page", ["0"])[0])
            size = int(params.get("size", ["25"])[0])
        except ValueError:
            self._send_json(400, {"status": "error", "data": {"message": "bad page options"}})
            return

        if page in self.server.fail_pages:
            self._send_json(500, {"status": "error", "data": {"message": "Internal error"}})
            return

        self._send_json(200, self.server.inventory.page(page, max(1, size)))

    def _authorized(self) -> bool:
        header = self.headers.get("Authorization", "")
        if not header.startswith("Basic "):
            return False
        try:
            decoded = base64.b64decode(header[6:]).decode()
        except ValueError:
            return False
        username, _, password = decoded.partition(":")
        return username == self.server.username and password == self.server.password

    def _send_json(self, code: int, payload: dict):
        body = json.dumps(payload).encode()
        self.send_response(code)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress request logging noise


def run_fake_server(host: str = "127.0.0.1", port: int = 9137):
    server = FakeCollinsServer((host, port))
    print(f"Fake Collins running at {server.url}/api/assets")
    print(f"Credentials: {DEFAULT_USERNAME} / {DEFAULT_PASSWORD}")
    print("Press Ctrl+C to stop.\n")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    server.server_close()
    print("\nServer stopped.")


if __name__ == "__main__":
    run_fake_server()
