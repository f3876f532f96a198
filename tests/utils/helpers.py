"""
Test Helpers
============

Helper functions and a throwaway static file server for integration tests.
"""

import functools
import threading
from http.server import SimpleHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import List, Optional
from urllib.parse import unquote

SITE_DIR = Path(__file__).resolve().parent.parent / "data" / "site"


class _RecordingHandler(SimpleHTTPRequestHandler):
    """Serves files and records every requested path."""

    def __init__(self, *args, requests: List[str], **kwargs):
        self._requests = requests
        super().__init__(*args, **kwargs)

    def do_GET(self) -> None:
        self._requests.append(unquote(self.path))
        super().do_GET()

    def log_message(self, format: str, *args) -> None:
        pass


class StaticSiteServer:
    """Static file server on an ephemeral port, run in a background thread."""

    def __init__(self, directory: Path = SITE_DIR, host: str = "127.0.0.1"):
        self.directory = directory
        self.host = host
        self.requests: List[str] = []
        self._httpd: Optional[ThreadingHTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    @property
    def port(self) -> int:
        assert self._httpd is not None, "server not started"
        return self._httpd.server_address[1]

    def start(self) -> "StaticSiteServer":
        handler = functools.partial(
            _RecordingHandler, requests=self.requests, directory=str(self.directory)
        )
        self._httpd = ThreadingHTTPServer((self.host, 0), handler)
        self._thread = threading.Thread(target=self._httpd.serve_forever, daemon=True)
        self._thread.start()
        return self

    def stop(self) -> None:
        if self._httpd is not None:
            self._httpd.shutdown()
            self._httpd.server_close()
            self._httpd = None

    def clear(self) -> None:
        self.requests.clear()
