"""Diagnostic logging setup and session transcript logging."""

import json
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

get_logger = structlog.get_logger


def configure_logging(verbose: bool = False) -> None:
    """Route structlog output to stderr so it never mixes with the REPL.

    Args:
        verbose: Emit debug events instead of warnings and errors only
    """
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=False),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )


class SessionLogger:
    """Writes an NDJSON transcript for an Atlas session."""

    def __init__(self, log_root: Path, run_id: Optional[str] = None):
        """Initialize session logger.

        Args:
            log_root: Directory that holds the runs/ folder
            run_id: Optional run ID (generated if not provided)
        """
        self.run_id = run_id or datetime.now().strftime("%Y%m%d_%H%M%S")

        self.log_dir = log_root / "runs" / self.run_id
        self.log_dir.mkdir(parents=True, exist_ok=True)

        self.transcript_path = self.log_dir / "transcript.ndjson"
        self.events_path = self.log_dir / "events.ndjson"

    def log_message(
        self,
        role: str,
        content: str,
        agent: Optional[str] = None,
        workflow: Optional[list[str]] = None,
    ) -> None:
        """Log a conversation message.

        Args:
            role: Message role (user, assistant)
            content: Message content
            agent: Agent label the message is tagged with
            workflow: Agent workflow announced for the turn
        """
        entry: dict[str, Any] = {
            "ts": datetime.now().isoformat(),
            "role": role,
            "content": content,
        }

        if agent:
            entry["agent"] = agent
        if workflow:
            entry["workflow"] = workflow

        self._append(self.transcript_path, entry)

    def log_event(self, event: str, **data: Any) -> None:
        """Log a session event such as an import result."""
        self._append(self.events_path, {"ts": datetime.now().isoformat(), "event": event, **data})

    def get_log_path(self) -> str:
        """Get the path to the log directory."""
        return str(self.log_dir.absolute())

    def _append(self, path: Path, entry: dict[str, Any]) -> None:
        with open(path, "a") as f:
            f.write(json.dumps(entry) + "\n")
