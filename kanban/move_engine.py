"""
Move Engine — Status Transitions by Rename
============================================
Moving a card IS renaming its file into the other status directory.
The engine never needs to know where a card is: moving "to done" means
the file must currently be in pending/, and vice versa.

The id comes straight from the browser, so it is validated before any
filesystem access. A single ``os.rename`` keeps the file in exactly one
directory at every instant.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Any, Optional

from kanban.todo_store import TodoDirs, TodoStatus


logger = logging.getLogger(__name__)

_SAFE_NAME_RE = re.compile(r"[a-zA-Z0-9._-]+\.md")


# ─────────────────────────────────────────────────────────────
#  Errors
# ─────────────────────────────────────────────────────────────

class MoveError(Exception):
    """Base for move failures. Carries the HTTP status it maps to."""

    status_code = 500

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class InvalidMoveError(MoveError):
    """Bad id, bad destination, or unparsable request. Nothing was touched."""

    status_code = 400


class TodoNotFoundError(MoveError):
    """The file is not in the inferred source directory (stale view or race)."""

    status_code = 404


class MoveFailedError(MoveError):
    """The rename itself failed."""

    status_code = 500


# ─────────────────────────────────────────────────────────────
#  Validation
# ─────────────────────────────────────────────────────────────

def safe_basename(name: str) -> Optional[str]:
    """Return ``name`` if it is a plain ``*.md`` file name, else None."""
    if not name or "/" in name or "\\" in name:
        return None
    if os.path.basename(name) != name:
        return None
    if not _SAFE_NAME_RE.fullmatch(name):
        return None
    return name


def parse_status(value: Any) -> TodoStatus:
    """Accept exactly "pending" or "done"."""
    for status in TodoStatus:
        if value == status.value:
            return status
    raise InvalidMoveError("Invalid destination")


# ─────────────────────────────────────────────────────────────
#  Move
# ─────────────────────────────────────────────────────────────

def move_todo(dirs: TodoDirs, todo_id: Any, to: Any) -> str:
    """Move a todo file into the directory for ``to``.

    Args:
        dirs: The pending/done directory pair.
        todo_id: Untrusted file name from the client.
        to: Target status label.

    Returns:
        The file's new absolute path.

    Raises:
        InvalidMoveError: id or destination rejected.
        TodoNotFoundError: the file is not in the source directory.
        MoveFailedError: the destination is occupied or the rename failed.
    """
    name = safe_basename("" if todo_id is None else str(todo_id))
    if name is None:
        raise InvalidMoveError("Invalid id")
    destination = parse_status(to)

    src = os.path.join(dirs.for_status(destination.other()), name)
    dst = os.path.join(dirs.for_status(destination), name)

    if not os.path.exists(src):
        raise TodoNotFoundError(f"Not found: {name}")
    if os.path.exists(dst):
        raise MoveFailedError(f"Already exists: {name}")

    try:
        os.rename(src, dst)
    except OSError as e:
        logger.exception("Move of %s to %s failed", name, destination.value)
        raise MoveFailedError(str(e) or "Move failed") from e

    logger.info("Moved %s -> %s", name, destination.value)
    return dst
