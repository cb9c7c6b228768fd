"""
Todo Store — File-Backed Lanes for the Kanban Board
=====================================================
Reads todo cards from two sibling directories:

    <root>/.planning/todos/pending/*.md
    <root>/.planning/todos/done/*.md

A card's status is the directory that holds its file; it is never stored
inside the file. Each file may open with a small metadata block:

    ---
    title: Fix bug
    area: api
    created: 2026-01-04
    files:
      - src/server.py
      - tests/test_server.py
    ---

Every call re-reads the directories. Nothing is cached in-process.
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any


logger = logging.getLogger(__name__)

TODO_EXTENSION = ".md"
DEFAULT_AREA = "general"
FRONTMATTER_MARKER = "---"
TODO_SUBDIR = (".planning", "todos")

_KEY_RE = re.compile(r"^([a-zA-Z0-9_-]+):\s*(.*)$")
_LIST_ITEM_RE = re.compile(r"^\s*-\s*(.*)$")


# ─────────────────────────────────────────────────────────────
#  Types
# ─────────────────────────────────────────────────────────────

class TodoStatus(str, Enum):
    """Which lane a card sits in — one per status directory."""

    PENDING = "pending"
    DONE = "done"

    def other(self) -> TodoStatus:
        return TodoStatus.DONE if self is TodoStatus.PENDING else TodoStatus.PENDING


@dataclass
class TodoItem:
    """One todo file, as seen by the board."""

    id: str                       # File name, unique within its directory
    status: TodoStatus            # Derived from the containing directory
    title: str
    area: str = DEFAULT_AREA
    created: str = ""             # Free text, display only
    files: list[str] = field(default_factory=list)
    path: str = ""                # Absolute path; not a stable identifier

    def to_dict(self) -> dict:
        """Serialize to the JSON shape served by /api/todos."""
        return {
            "id": self.id,
            "status": self.status.value,
            "title": self.title,
            "area": self.area,
            "created": self.created,
            "files": list(self.files),
            "path": self.path,
        }


@dataclass
class TodoDirs:
    """The directory pair that partitions todos by status."""

    root: str
    pending: str
    done: str

    def for_status(self, status: TodoStatus) -> str:
        return self.pending if TodoStatus(status) is TodoStatus.PENDING else self.done


# ─────────────────────────────────────────────────────────────
#  Directories
# ─────────────────────────────────────────────────────────────

def todo_dirs(root: str) -> TodoDirs:
    """Resolve the pending/done directories under a project root."""
    root = os.path.abspath(root)
    base = os.path.join(root, *TODO_SUBDIR)
    return TodoDirs(
        root=root,
        pending=os.path.join(base, TodoStatus.PENDING.value),
        done=os.path.join(base, TodoStatus.DONE.value),
    )


def ensure_todo_dirs(root: str) -> TodoDirs:
    """Create both status directories if they are missing. Safe to repeat."""
    dirs = todo_dirs(root)
    os.makedirs(dirs.pending, exist_ok=True)
    os.makedirs(dirs.done, exist_ok=True)
    return dirs


# ─────────────────────────────────────────────────────────────
#  Metadata
# ─────────────────────────────────────────────────────────────

def parse_frontmatter(text: str) -> tuple[dict[str, Any], str]:
    """Split a leading ``---`` metadata block from the body.

    Scalar lines (``key: value``) become strings. A key with an empty value
    starts a list that following ``- item`` lines append to. Anything else
    is ignored, and a missing or unterminated block yields ``{}``.

    Returns:
        (metadata, body)
    """
    if not text.startswith(FRONTMATTER_MARKER):
        return {}, text

    closing = "\n" + FRONTMATTER_MARKER
    end = text.find(closing, len(FRONTMATTER_MARKER))
    if end == -1:
        return {}, text

    raw = text[len(FRONTMATTER_MARKER):end].strip()
    body = text[end + len(closing):]

    metadata: dict[str, Any] = {}
    current_key = None

    for line in raw.split("\n"):
        line = line.rstrip("\r")
        match = _KEY_RE.match(line)
        if match:
            current_key = match.group(1)
            value = match.group(2)
            metadata[current_key] = value if value != "" else []
            continue

        item = _LIST_ITEM_RE.match(line)
        if item and current_key and isinstance(metadata.get(current_key), list):
            metadata[current_key].append(item.group(1))

    return metadata, body


def _scalar(metadata: dict[str, Any], key: str) -> str:
    value = metadata.get(key)
    if value is None or isinstance(value, list):
        return ""
    return str(value).strip()


# ─────────────────────────────────────────────────────────────
#  Reading
# ─────────────────────────────────────────────────────────────

def _read_text(path: str) -> str:
    try:
        # Bad bytes become U+FFFD so the metadata block survives
        with open(path, "r", encoding="utf-8", errors="replace") as f:
            return f.read()
    except OSError as e:
        # Still listed, with fallback metadata
        logger.warning("Could not read todo %s: %s", path, e)
        return ""


def todo_from_file(path: str, status: TodoStatus) -> TodoItem:
    """Build a TodoItem for one file, falling back to defaults on bad input."""
    filename = os.path.basename(path)
    metadata, _ = parse_frontmatter(_read_text(path))
    files = metadata.get("files")

    return TodoItem(
        id=filename,
        status=TodoStatus(status),
        title=_scalar(metadata, "title") or filename[: -len(TODO_EXTENSION)],
        area=_scalar(metadata, "area") or DEFAULT_AREA,
        created=_scalar(metadata, "created"),
        files=list(files) if isinstance(files, list) else [],
        path=path,
    )


def read_todos(directory: str, status: TodoStatus) -> list[TodoItem]:
    """List every todo file in a directory, sorted by file name.

    A missing directory is an empty lane, not an error.
    """
    if not os.path.isdir(directory):
        return []

    try:
        names = sorted(n for n in os.listdir(directory) if n.endswith(TODO_EXTENSION))
    except FileNotFoundError:
        return []

    return [todo_from_file(os.path.join(directory, name), status) for name in names]


def list_todos(dirs: TodoDirs) -> dict[str, list[TodoItem]]:
    """Read both lanes fresh from disk."""
    return {
        status.value: read_todos(dirs.for_status(status), status)
        for status in TodoStatus
    }
