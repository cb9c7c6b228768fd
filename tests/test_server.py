"""
Kanban Test Suite — HTTP API
==============================
Exercises the FastAPI app end to end against a temporary project root.

Usage:
    python -m pytest tests/test_server.py -v
"""
import sys
import os
import tempfile
import unittest
from unittest import mock

sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient

from kanban.config import KanbanConfig
from kanban.server import create_app, run_server


class ServerTestCase(unittest.TestCase):

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = self._tmp.name
        self.app = create_app(self.root)
        self.dirs = self.app.state.dirs
        self.client = TestClient(self.app)

    def tearDown(self):
        self.client.close()
        self._tmp.cleanup()

    def write(self, directory, name, content=""):
        with open(os.path.join(directory, name), "w", encoding="utf-8") as f:
            f.write(content)

    def listing(self):
        return sorted(os.listdir(self.dirs.pending)), sorted(os.listdir(self.dirs.done))


class TestStartup(ServerTestCase):

    def test_directories_created(self):
        self.assertTrue(os.path.isdir(os.path.join(self.root, ".planning", "todos", "pending")))
        self.assertTrue(os.path.isdir(os.path.join(self.root, ".planning", "todos", "done")))

    def test_second_app_same_root(self):
        self.write(self.dirs.pending, "keep.md")
        create_app(self.root)
        self.assertEqual(self.listing(), (["keep.md"], []))


class TestPages(ServerTestCase):

    def test_index(self):
        res = self.client.get("/")
        self.assertEqual(res.status_code, 200)
        self.assertTrue(res.headers["content-type"].startswith("text/html"))
        self.assertEqual(res.headers["cache-control"], "no-store")
        self.assertIn('id="lane-pending"', res.text)
        self.assertIn('id="lane-done"', res.text)
        self.assertIn("/api/move", res.text)

    def test_unknown_path(self):
        res = self.client.get("/nope")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.text, "Not found\n")
        self.assertTrue(res.headers["content-type"].startswith("text/plain"))
        self.assertEqual(res.headers["cache-control"], "no-store")

    def test_wrong_method_is_not_found(self):
        res = self.client.get("/api/move")
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.text, "Not found\n")

    def test_docs_disabled(self):
        self.assertEqual(self.client.get("/docs").status_code, 404)
        self.assertEqual(self.client.get("/openapi.json").status_code, 404)


class TestTodosEndpoint(ServerTestCase):

    def test_empty_board(self):
        res = self.client.get("/api/todos")
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"pending": [], "done": []})
        self.assertEqual(res.headers["cache-control"], "no-store")

    def test_item_shape(self):
        self.write(self.dirs.pending, "a1.md",
                   "---\ntitle: Fix bug\narea: api\ncreated: 2026-01-04\nfiles:\n  - src/x.py\n---\n")
        [item] = self.client.get("/api/todos").json()["pending"]
        self.assertEqual(item, {
            "id": "a1.md",
            "status": "pending",
            "title": "Fix bug",
            "area": "api",
            "created": "2026-01-04",
            "files": ["src/x.py"],
            "path": os.path.join(self.dirs.pending, "a1.md"),
        })

    def test_listing_idempotent(self):
        self.write(self.dirs.pending, "a.md", "---\ntitle: A\n---\n")
        self.write(self.dirs.done, "b.md")
        first = self.client.get("/api/todos").json()
        second = self.client.get("/api/todos").json()
        self.assertEqual(first, second)
        self.assertEqual(self.listing(), (["a.md"], ["b.md"]))

    def test_unexpected_error_is_json_500(self):
        with mock.patch("kanban.server.list_todos", side_effect=RuntimeError("disk on fire")):
            res = self.client.get("/api/todos")
        self.assertEqual(res.status_code, 500)
        self.assertEqual(res.json(), {"error": "disk on fire"})
        # Server keeps serving
        self.assertEqual(self.client.get("/api/todos").status_code, 200)


class TestMoveEndpoint(ServerTestCase):

    def test_move_scenario(self):
        self.write(self.dirs.pending, "a1.md", "---\ntitle: Fix bug\n---\n")

        board = self.client.get("/api/todos").json()
        self.assertEqual([t["title"] for t in board["pending"]], ["Fix bug"])

        res = self.client.post("/api/move", json={"id": "a1.md", "to": "done"})
        self.assertEqual(res.status_code, 200)
        self.assertEqual(res.json(), {"ok": True})
        self.assertEqual(res.headers["cache-control"], "no-store")

        board = self.client.get("/api/todos").json()
        self.assertEqual(board["pending"], [])
        self.assertEqual([t["id"] for t in board["done"]], ["a1.md"])
        self.assertEqual(board["done"][0]["status"], "done")

    def test_round_trip(self):
        self.write(self.dirs.pending, "a1.md", "content")
        self.client.post("/api/move", json={"id": "a1.md", "to": "done"})
        self.client.post("/api/move", json={"id": "a1.md", "to": "pending"})
        self.assertEqual(self.listing(), (["a1.md"], []))

    def test_traversal_rejected(self):
        outside = os.path.join(self.root, "secret.md")
        self.write(self.root, "secret.md", "keep out")
        res = self.client.post("/api/move", json={"id": "../../../secret.md", "to": "done"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Invalid id"})
        self.assertTrue(os.path.exists(outside))
        self.assertEqual(self.listing(), ([], []))

    def test_etc_passwd(self):
        res = self.client.post("/api/move", json={"id": "../../etc/passwd", "to": "done"})
        self.assertEqual(res.status_code, 400)

    def test_trailing_newline_id_rejected(self):
        self.write(self.dirs.pending, "a.md")
        res = self.client.post("/api/move", json={"id": "a.md\n", "to": "done"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Invalid id"})
        self.assertEqual(self.listing(), (["a.md"], []))

    def test_wrong_extension(self):
        self.write(self.dirs.pending, "notes.txt")
        res = self.client.post("/api/move", json={"id": "notes.txt", "to": "done"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(self.listing(), (["notes.txt"], []))

    def test_missing(self):
        res = self.client.post("/api/move", json={"id": "missing.md", "to": "pending"})
        self.assertEqual(res.status_code, 404)
        self.assertEqual(res.json(), {"error": "Not found: missing.md"})

    def test_invalid_destination(self):
        self.write(self.dirs.pending, "a1.md")
        res = self.client.post("/api/move", json={"id": "a1.md", "to": "archived"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Invalid destination"})

    def test_body_not_json(self):
        res = self.client.post("/api/move", content=b"{nope",
                               headers={"content-type": "application/json"})
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Body must be JSON"})

    def test_body_not_object(self):
        res = self.client.post("/api/move", json=["a1.md", "done"])
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Invalid request body"})

    def test_non_string_fields(self):
        res = self.client.post("/api/move", json={"id": 7, "to": "done"})
        self.assertEqual(res.status_code, 400)

    def test_empty_body(self):
        res = self.client.post("/api/move")
        self.assertEqual(res.status_code, 400)
        self.assertEqual(res.json(), {"error": "Invalid id"})

    def test_collision_is_500(self):
        self.write(self.dirs.pending, "a1.md")
        self.write(self.dirs.done, "a1.md")
        res = self.client.post("/api/move", json={"id": "a1.md", "to": "done"})
        self.assertEqual(res.status_code, 500)
        self.assertIn("error", res.json())
        self.assertEqual(self.listing(), (["a1.md"], ["a1.md"]))

    def test_second_mover_loses(self):
        self.write(self.dirs.pending, "a1.md")
        first = self.client.post("/api/move", json={"id": "a1.md", "to": "done"})
        second = self.client.post("/api/move", json={"id": "a1.md", "to": "done"})
        self.assertEqual(first.status_code, 200)
        self.assertEqual(second.status_code, 404)


class TestRunServer(unittest.TestCase):

    def test_runs_uvicorn_with_config(self):
        with tempfile.TemporaryDirectory() as root:
            config = KanbanConfig(host="127.0.0.1", port=4555, open_browser=False, cwd=root)
            with mock.patch("uvicorn.run") as run, \
                    mock.patch("kanban.server.webbrowser.open") as browser:
                run_server(config)
            run.assert_called_once()
            _, kwargs = run.call_args
            self.assertEqual(kwargs["host"], "127.0.0.1")
            self.assertEqual(kwargs["port"], 4555)
            browser.assert_not_called()
            self.assertTrue(os.path.isdir(os.path.join(root, ".planning", "todos", "done")))

    def test_opens_browser_when_asked(self):
        with tempfile.TemporaryDirectory() as root:
            config = KanbanConfig(port=4556, open_browser=True, cwd=root)
            with mock.patch("uvicorn.run"), \
                    mock.patch("kanban.server._open_later") as open_later:
                run_server(config)
            open_later.assert_called_once_with("http://127.0.0.1:4556/")


if __name__ == "__main__":
    unittest.main()
