"""
Kanban Configuration
=====================
Launcher settings. Precedence: command-line flags, then ``KANBAN_*``
environment variables, then the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Mapping, Optional


DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 3333

_FALSEY = {"0", "false", "no", "off"}


def parse_port(value) -> int:
    """Validate a TCP port given as a string or int."""
    try:
        port = int(value)
    except (TypeError, ValueError):
        raise ValueError(f"Invalid port: {value}")
    if port <= 0 or port > 65535:
        raise ValueError(f"Invalid port: {value}")
    return port


@dataclass
class KanbanConfig:
    """Settings for one board server."""

    host: str = DEFAULT_HOST      # Loopback by default; no auth is provided
    port: int = DEFAULT_PORT
    open_browser: bool = True
    cwd: str = field(default_factory=os.getcwd)  # Project root holding .planning/
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> KanbanConfig:
        """Build a config from ``KANBAN_*`` variables, defaulting the rest."""
        env = os.environ if environ is None else environ
        config = cls()
        config.host = env.get("KANBAN_HOST", config.host)
        if env.get("KANBAN_PORT"):
            config.port = parse_port(env["KANBAN_PORT"])
        if "KANBAN_OPEN" in env:
            config.open_browser = env["KANBAN_OPEN"].strip().lower() not in _FALSEY
        config.cwd = env.get("KANBAN_CWD", config.cwd)
        config.log_level = env.get("KANBAN_LOG_LEVEL", config.log_level).upper()
        return config

    @property
    def root(self) -> str:
        return os.path.abspath(self.cwd)

    @property
    def url(self) -> str:
        return f"http://{self.host}:{self.port}/"
