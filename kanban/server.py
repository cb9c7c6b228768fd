"""
Kanban Board Server — Web Interface for the Todo Directories
==============================================================
FastAPI application that serves the board page and a tiny JSON API
over ``.planning/todos/{pending,done}``.

Launch:
    python -m kanban                # Via CLI
    python -m kanban --no-open -p 4000

Endpoints:
    GET  /                          → Board SPA
    GET  /api/todos                 → {pending: [...], done: [...]}
    POST /api/move                  → Move a card: {id, to}
"""

from __future__ import annotations

import json
import logging
import os
import threading
import webbrowser
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import FileResponse, JSONResponse, PlainTextResponse
from pydantic import BaseModel, ValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from kanban import __version__
from kanban.config import KanbanConfig
from kanban.move_engine import InvalidMoveError, MoveError, move_todo
from kanban.todo_store import ensure_todo_dirs, list_todos


logger = logging.getLogger(__name__)

STATIC_DIR = os.path.join(os.path.dirname(__file__), "static")


# ─────────────────────────────────────────────────────────────
#  Request Models
# ─────────────────────────────────────────────────────────────

class MoveRequest(BaseModel):
    id: Optional[str] = None
    to: Optional[str] = None


# ─────────────────────────────────────────────────────────────
#  App Setup
# ─────────────────────────────────────────────────────────────

def create_app(root: str) -> FastAPI:
    """Build the board app for a project root.

    Both status directories are created here, so the app is ready to
    serve as soon as it is returned.
    """
    app = FastAPI(
        title="Todo Kanban",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.dirs = ensure_todo_dirs(root)

    # ─── Middleware & Error Handlers ──────────────────────

    @app.middleware("http")
    async def no_store(request: Request, call_next):
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception("Unhandled error on %s %s", request.method, request.url.path)
            response = JSONResponse({"error": str(e) or "Internal error"}, status_code=500)
        response.headers["Cache-Control"] = "no-store"
        return response

    @app.exception_handler(MoveError)
    async def move_error(request: Request, exc: MoveError):
        return JSONResponse({"error": exc.reason}, status_code=exc.status_code)

    @app.exception_handler(StarletteHTTPException)
    async def http_error(request: Request, exc: StarletteHTTPException):
        # Unknown paths and wrong methods on known ones both read as "not found"
        if exc.status_code in (404, 405):
            return PlainTextResponse("Not found\n", status_code=404)
        return JSONResponse({"error": str(exc.detail)}, status_code=exc.status_code)

    # ─── Routes — Pages ───────────────────────────────────

    @app.get("/")
    async def index():
        """Serve the board SPA."""
        return FileResponse(
            os.path.join(STATIC_DIR, "index.html"),
            media_type="text/html; charset=utf-8",
        )

    # ─── Routes — REST API ────────────────────────────────

    @app.get("/api/todos")
    async def api_todos(request: Request):
        """Return both lanes, read fresh from disk."""
        lanes = list_todos(request.app.state.dirs)
        return JSONResponse({
            status: [todo.to_dict() for todo in todos]
            for status, todos in lanes.items()
        })

    @app.post("/api/move")
    async def api_move(request: Request):
        """Move one card to the other lane."""
        raw = await request.body()
        try:
            data = json.loads(raw.decode("utf-8") or "{}")
        except ValueError:
            raise InvalidMoveError("Body must be JSON")

        try:
            req = MoveRequest.model_validate(data)
        except ValidationError:
            raise InvalidMoveError("Invalid request body")

        move_todo(request.app.state.dirs, req.id, req.to)
        return JSONResponse({"ok": True})

    return app


# ─────────────────────────────────────────────────────────────
#  Startup
# ─────────────────────────────────────────────────────────────

def _open_later(url: str, delay: float = 1.0):
    def _open():
        import time
        time.sleep(delay)
        try:
            webbrowser.open(url)
        except webbrowser.Error as e:
            logger.warning("Could not open browser: %s", e)
    threading.Thread(target=_open, daemon=True).start()


def run_server(config: Optional[KanbanConfig] = None):
    """Launch the board server and block until it stops."""
    import uvicorn

    config = config or KanbanConfig()
    app = create_app(config.root)
    dirs = app.state.dirs

    if config.open_browser:
        _open_later(config.url)

    print(f"\n▦ ─── Todo Kanban ───")
    print(f"  {config.url}")
    print()
    print("  Todos:")
    print(f"    {dirs.pending}")
    print(f"    {dirs.done}")
    print(f"  Press Ctrl+C to stop\n")

    uvicorn.run(app, host=config.host, port=config.port, log_level=config.log_level.lower())
