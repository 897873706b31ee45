# Copyright 2026 Justin Cook
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""
Live preview server.

A watcher thread polls the data file's mtime and regenerates the HTML when
it advances; the HTTP side serves the last generated document with a small
script that reloads the page whenever /_reload returns a new token.
"""

import logging
import mimetypes
import os
import signal
import threading
from contextlib import contextmanager
from datetime import datetime
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from pathlib import Path
from typing import Optional
from urllib.parse import unquote, urlparse

from resumectl.config import DEFAULT_LANG
from resumectl.generator import ResumeGenerator
from resumectl.themes import DEFAULT_THEME

logger = logging.getLogger(__name__)

HTML_NAME = "cv.html"
RELOAD_PATH = "/_reload"
DEFAULT_PORT = 8080
POLL_INTERVAL = 0.5

LIVE_RELOAD_SCRIPT = """<script>
(function() {
    let lastModified = '';
    setInterval(function() {
        fetch('/_reload')
            .then(r => r.text())
            .then(t => {
                if (lastModified && lastModified !== t) {
                    location.reload();
                }
                lastModified = t;
            })
            .catch(() => {});
    }, 500);
})();
</script>"""


def inject_live_reload(html: str) -> str:
    """Inserts the reload script before the last </body>, or appends it."""
    idx = html.rfind("</body>")
    if idx == -1:
        return html + LIVE_RELOAD_SCRIPT
    return html[:idx] + LIVE_RELOAD_SCRIPT + "\n" + html[idx:]


class ReadWriteLock:
    """Many readers or one writer."""

    def __init__(self):
        self._cond = threading.Condition(threading.Lock())
        self._readers = 0
        self._writing = False

    @contextmanager
    def read_locked(self):
        with self._cond:
            while self._writing:
                self._cond.wait()
            self._readers += 1
        try:
            yield
        finally:
            with self._cond:
                self._readers -= 1
                if not self._readers:
                    self._cond.notify_all()

    @contextmanager
    def write_locked(self):
        with self._cond:
            while self._writing or self._readers:
                self._cond.wait()
            self._writing = True
        try:
            yield
        finally:
            with self._cond:
                self._writing = False
                self._cond.notify_all()


class _PreviewHTTPServer(ThreadingHTTPServer):
    # Non-daemon handler threads are joined by server_close()
    daemon_threads = False
    block_on_close = True
    allow_reuse_address = True


class LivePreviewServer:
    def __init__(self, data_path, output_dir, theme: str = DEFAULT_THEME, color: Optional[str] = None,
                 lang: str = DEFAULT_LANG, poll_interval: float = POLL_INTERVAL,
                 log: Optional[logging.Logger] = None):
        self.data_path = Path(data_path)
        self.output_dir = Path(output_dir)
        self.theme = theme
        self.color = color
        self.lang = lang
        self.poll_interval = poll_interval
        self.log = log or logger

        self._lock = ReadWriteLock()
        self._token = ""
        self._last_mtime: Optional[int] = None
        self.generations = 0

    @property
    def html_path(self) -> Path:
        return self.output_dir / HTML_NAME

    @property
    def reload_token(self) -> str:
        with self._lock.read_locked():
            return self._token

    def regenerate(self) -> None:
        """Rebuilds cv.html from the data file; errors propagate."""
        generator = ResumeGenerator.from_file(self.data_path, theme=self.theme, color=self.color, lang=self.lang)
        generator.generate_html(self.html_path)
        with self._lock.write_locked():
            self._token = datetime.now().isoformat(timespec="microseconds")
            self.generations += 1

    def _data_mtime(self) -> Optional[int]:
        try:
            return os.stat(self.data_path).st_mtime_ns
        except OSError:
            return None

    def check_for_changes(self) -> bool:
        """
        Regenerates when the data file's mtime advanced. A failed
        regeneration is logged and the previous output stays served.
        """
        mtime = self._data_mtime()
        if mtime is None:
            return False
        if self._last_mtime is not None and mtime <= self._last_mtime:
            return False

        self._last_mtime = mtime
        self.log.info(f"File changed, regenerating... ({self.data_path})")
        try:
            self.regenerate()
        except Exception as e:
            self.log.error(f"Error regenerating: {e}")
            return False
        self.log.info("CV regenerated successfully")
        return True

    def watch(self, stop_event: threading.Event) -> None:
        while not stop_event.wait(self.poll_interval):
            self.check_for_changes()

    def read_document(self) -> Optional[bytes]:
        try:
            html = self.html_path.read_text(encoding="utf-8")
        except OSError:
            return None
        return inject_live_reload(html).encode("utf-8")

    def resolve_static(self, url_path: str) -> Optional[Path]:
        """Maps a request path to a file inside the output directory, or None."""
        root = self.output_dir.resolve()
        candidate = (root / unquote(url_path).lstrip("/")).resolve()
        if candidate != root and root not in candidate.parents:
            return None
        return candidate if candidate.is_file() else None

    def make_handler(self):
        preview = self

        class PreviewHandler(BaseHTTPRequestHandler):
            def do_GET(self):
                path = urlparse(self.path).path
                if path == RELOAD_PATH:
                    self._send(200, "text/plain", preview.reload_token.encode("utf-8"))
                    return
                if path != "/":
                    static = preview.resolve_static(path)
                    if static is not None:
                        content_type = mimetypes.guess_type(str(static))[0] or "application/octet-stream"
                        self._send(200, content_type, static.read_bytes())
                        return
                self._send_cv()

            def _send_cv(self):
                body = preview.read_document()
                if body is None:
                    self._send(404, "text/plain; charset=utf-8", b"CV not found\n")
                    return
                self._send(200, "text/html; charset=utf-8", body)

            def _send(self, status: int, content_type: str, body: bytes):
                self.send_response(status)
                self.send_header("Content-Type", content_type)
                self.send_header("Content-Length", str(len(body)))
                self.send_header("Cache-Control", "no-store")
                self.end_headers()
                self.wfile.write(body)

            def log_message(self, format, *args):
                preview.log.debug("%s - %s" % (self.address_string(), format % args))

        return PreviewHandler

    def create_http_server(self, port: int = DEFAULT_PORT, host: str = "localhost") -> ThreadingHTTPServer:
        return _PreviewHTTPServer((host, port), self.make_handler())

    def serve_forever(self, port: int = DEFAULT_PORT, host: str = "localhost") -> None:
        """
        Blocks until SIGINT or SIGTERM, then drains in-flight requests.

        Raises:
            ResumectlError: the initial generation failed
        """
        self.output_dir.mkdir(parents=True, exist_ok=True)
        self.log.info("Generating initial CV...")
        self._last_mtime = self._data_mtime()
        self.regenerate()

        httpd = self.create_http_server(port, host)
        stop = threading.Event()

        def _request_stop(signum, frame):
            stop.set()

        previous = {sig: signal.signal(sig, _request_stop) for sig in (signal.SIGINT, signal.SIGTERM)}
        watcher = threading.Thread(target=self.watch, args=(stop,), name="resumectl-watch", daemon=True)
        http_thread = threading.Thread(target=httpd.serve_forever, name="resumectl-http")
        watcher.start()
        http_thread.start()

        url = f"http://localhost:{httpd.server_address[1]}"
        self.log.info(f"Starting live preview server: {url}")
        self.log.info(f"Watching for changes: {self.data_path}")
        self.log.info("Press Ctrl+C to stop")

        try:
            while not stop.wait(0.5):
                pass
        finally:
            self.log.info("Shutting down server...")
            stop.set()
            httpd.shutdown()
            http_thread.join()
            httpd.server_close()
            watcher.join(timeout=self.poll_interval * 2)
            for sig, handler in previous.items():
                signal.signal(sig, handler)
