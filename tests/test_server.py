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

import unittest
from unittest.mock import patch
import os
import shutil
import signal
import tempfile
import threading
import time
from pathlib import Path

import requests

from resumectl import server
from resumectl.models import empty_resume
from resumectl.store import save_resume


class TestInjectLiveReload(unittest.TestCase):
    def test_before_last_body(self):
        html = "<html><body><p>&lt;/body&gt;</p></body></html>"
        injected = server.inject_live_reload(html)
        self.assertTrue(injected.endswith("</body></html>"))
        self.assertEqual(injected.count(server.RELOAD_PATH), 1)
        self.assertLess(injected.index("<script>"), injected.rindex("</body>"))

    def test_appended_without_body(self):
        injected = server.inject_live_reload("<p>fragment</p>")
        self.assertTrue(injected.startswith("<p>fragment</p>"))
        self.assertTrue(injected.endswith("</script>"))


class TestReadWriteLock(unittest.TestCase):
    def test_writer_waits_for_readers(self):
        lock = server.ReadWriteLock()
        written = threading.Event()

        def writer():
            with lock.write_locked():
                written.set()

        with lock.read_locked():
            with lock.read_locked():
                t = threading.Thread(target=writer)
                t.start()
                self.assertFalse(written.wait(0.1))
        self.assertTrue(written.wait(2))
        t.join()


class PreviewTestCase(unittest.TestCase):
    def setUp(self):
        self.test_dir = tempfile.mkdtemp()
        self.data_path = os.path.join(self.test_dir, "cv.yaml")
        self.output_dir = Path(self.test_dir) / "output"
        save_resume(empty_resume(), self.data_path)
        self.preview = server.LivePreviewServer(self.data_path, self.output_dir, poll_interval=0.05)

    def tearDown(self):
        shutil.rmtree(self.test_dir)

    def _touch_later(self):
        stat = os.stat(self.data_path)
        os.utime(self.data_path, ns=(stat.st_atime_ns, stat.st_mtime_ns + 2_000_000_000))


class TestRegeneration(PreviewTestCase):
    def test_regenerate_updates_token(self):
        self.assertEqual(self.preview.reload_token, "")
        self.preview.regenerate()
        first = self.preview.reload_token
        self.assertTrue(first)
        self.assertTrue(self.preview.html_path.is_file())

        time.sleep(0.001)
        self.preview.regenerate()
        self.assertNotEqual(self.preview.reload_token, first)
        self.assertEqual(self.preview.generations, 2)

    def test_check_for_changes_follows_mtime(self):
        self.assertTrue(self.preview.check_for_changes())
        self.assertFalse(self.preview.check_for_changes())
        self.assertEqual(self.preview.generations, 1)

        self._touch_later()
        self.assertTrue(self.preview.check_for_changes())
        self.assertEqual(self.preview.generations, 2)

    def test_failed_regeneration_keeps_previous_output(self):
        self.preview.check_for_changes()
        token = self.preview.reload_token
        before = self.preview.html_path.read_text(encoding="utf-8")

        with open(self.data_path, "w", encoding="utf-8") as f:
            f.write("personal: [unclosed\n")
        self._touch_later()

        with self.assertLogs("resumectl.server", level="ERROR"):
            self.assertFalse(self.preview.check_for_changes())
        self.assertEqual(self.preview.reload_token, token)
        self.assertEqual(self.preview.html_path.read_text(encoding="utf-8"), before)
        # Not retried until the file changes again
        self.assertFalse(self.preview.check_for_changes())

    def test_missing_data_file(self):
        os.remove(self.data_path)
        self.assertFalse(self.preview.check_for_changes())

    def test_watch_stops(self):
        stop = threading.Event()
        t = threading.Thread(target=self.preview.watch, args=(stop,))
        t.start()
        deadline = time.time() + 5
        while self.preview.generations == 0 and time.time() < deadline:
            time.sleep(0.01)
        stop.set()
        t.join(2)
        self.assertFalse(t.is_alive())
        self.assertEqual(self.preview.generations, 1)

    def test_resolve_static_is_confined(self):
        self.output_dir.mkdir()
        (self.output_dir / "photo.png").write_bytes(b"png")
        self.assertEqual(self.preview.resolve_static("/photo.png"), (self.output_dir / "photo.png").resolve())
        self.assertIsNone(self.preview.resolve_static("/../cv.yaml"))
        self.assertIsNone(self.preview.resolve_static("/%2e%2e/cv.yaml"))
        self.assertIsNone(self.preview.resolve_static("/missing.png"))


class TestHttpServer(PreviewTestCase):
    def setUp(self):
        super().setUp()
        self.httpd = self.preview.create_http_server(0)
        self.base = f"http://localhost:{self.httpd.server_address[1]}"
        self.thread = threading.Thread(target=self.httpd.serve_forever)
        self.thread.start()
        self.http = requests.Session()
        self.http.trust_env = False

    def tearDown(self):
        self.http.close()
        self.httpd.shutdown()
        self.thread.join()
        self.httpd.server_close()
        super().tearDown()

    def test_not_generated_yet(self):
        resp = self.http.get(f"{self.base}/", timeout=5)
        self.assertEqual(resp.status_code, 404)
        self.assertIn("CV not found", resp.text)

    def test_serves_cv_with_reload_script(self):
        self.preview.regenerate()
        resp = self.http.get(f"{self.base}/", timeout=5)
        self.assertEqual(resp.status_code, 200)
        self.assertTrue(resp.headers["Content-Type"].startswith("text/html"))
        self.assertIn("John Doe", resp.text)
        self.assertIn("fetch('/_reload')", resp.text)

        # Unknown paths fall back to the CV
        self.assertIn("John Doe", self.http.get(f"{self.base}/anything", timeout=5).text)

    def test_reload_token(self):
        self.preview.regenerate()
        resp = self.http.get(f"{self.base}/_reload", timeout=5)
        self.assertEqual(resp.status_code, 200)
        self.assertEqual(resp.text, self.preview.reload_token)

    def test_static_file(self):
        self.preview.regenerate()
        (self.output_dir / "photo.png").write_bytes(b"\x89PNG")
        resp = self.http.get(f"{self.base}/photo.png", timeout=5)
        self.assertEqual(resp.content, b"\x89PNG")
        self.assertEqual(resp.headers["Content-Type"], "image/png")

    def test_concurrent_reads_during_regeneration(self):
        self.preview.regenerate()
        bodies, errors = [], []
        stop = threading.Event()

        def reader():
            session = requests.Session()
            session.trust_env = False
            with session:
                while True:
                    try:
                        resp = session.get(f"{self.base}/", timeout=5)
                    except requests.exceptions.RequestException as e:
                        errors.append(e)
                        return
                    bodies.append((resp.status_code, resp.text))
                    if stop.is_set():
                        return

        readers = [threading.Thread(target=reader) for _ in range(4)]
        for t in readers:
            t.start()
        for _ in range(25):
            self.preview.regenerate()
        stop.set()
        for t in readers:
            t.join()

        self.assertEqual(errors, [])
        self.assertGreaterEqual(len(bodies), len(readers))
        for status, body in bodies:
            self.assertEqual(status, 200)
            self.assertIn("John Doe", body)
            self.assertIn("</html>", body)
        self.assertEqual(self.preview.generations, 26)


class TestServeForever(PreviewTestCase):
    def test_stops_on_signal(self):
        handlers = {}

        def fake_signal(sig, handler):
            previous = handlers.get(sig, signal.SIG_DFL)
            handlers[sig] = handler
            return previous

        def send_sigterm():
            deadline = time.time() + 5
            while signal.SIGTERM not in handlers and time.time() < deadline:
                time.sleep(0.01)
            handlers[signal.SIGTERM](signal.SIGTERM, None)

        with patch('resumectl.server.signal.signal', side_effect=fake_signal):
            trigger = threading.Thread(target=send_sigterm)
            trigger.start()
            self.preview.serve_forever(port=0)
            trigger.join()

        self.assertTrue(self.preview.html_path.is_file())
        self.assertEqual(self.preview.generations, 1)
        # Previous handlers restored
        self.assertEqual(handlers[signal.SIGTERM], signal.SIG_DFL)


if __name__ == '__main__':
    unittest.main()
