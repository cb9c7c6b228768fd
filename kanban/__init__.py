"""
Todo Kanban — Visual Board for Planning Todos
===============================================
A local board over ``.planning/todos/{pending,done}/*.md``.

Architecture:
    Todo Store   — Reads both status directories, parses metadata blocks
    Move Engine  — Validated single-rename status transitions
    Server       — FastAPI app: board page + /api/todos + /api/move
    CLI          — Launcher (host, port, browser, project root)
"""

__version__ = "0.1.0"

from kanban.todo_store import (
    TodoItem, TodoStatus, TodoDirs,
    todo_dirs, ensure_todo_dirs, parse_frontmatter, read_todos, list_todos,
)
from kanban.move_engine import (
    MoveError, InvalidMoveError, TodoNotFoundError, MoveFailedError,
    safe_basename, move_todo,
)

__all__ = [
    "TodoItem", "TodoStatus", "TodoDirs",
    "todo_dirs", "ensure_todo_dirs", "parse_frontmatter", "read_todos", "list_todos",
    "MoveError", "InvalidMoveError", "TodoNotFoundError", "MoveFailedError",
    "safe_basename", "move_todo",
]
