from __future__ import annotations

import json
import traceback
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from ..config.paths import QuillPaths

LOG_LEVELS = ("error", "warn", "info", "debug")
LOG_LEVEL_PRIORITY = {level: idx for idx, level in enumerate(LOG_LEVELS)}
LOG_TYPE_SESSION = "session"

_FALSE_WORDS = {"", "none", "null", "off", "false", "0", "no", "n"}
_TRUE_WORDS = {"true", "1", "yes", "y", "on", "all"}


@dataclass(frozen=True)
class LogSelection:
    enabled_types: frozenset[str]
    enabled_levels: frozenset[str]


def resolve_debug_config(raw: Any) -> LogSelection:
    """Translate the ``debug`` setting into enabled log types and levels.

    Accepts a bool, a single token (``"session"``, a level name, ``"all"``)
    or a list of tokens. A level enables itself and every more severe level.
    """
    types: set[str] = set()
    levels: set[str] = set()

    def apply(token: str) -> None:
        if token in _TRUE_WORDS:
            types.add(LOG_TYPE_SESSION)
            levels.update(LOG_LEVELS)
        elif token == LOG_TYPE_SESSION:
            types.add(LOG_TYPE_SESSION)
        elif token in LOG_LEVEL_PRIORITY:
            levels.update(LOG_LEVELS[: LOG_LEVEL_PRIORITY[token] + 1])

    if raw is True:
        apply("all")
    elif isinstance(raw, str):
        cleaned = raw.strip().lower()
        if cleaned not in _FALSE_WORDS:
            apply(cleaned)
    elif isinstance(raw, (list, tuple, set)):
        for item in raw:
            if isinstance(item, str) and item.strip().lower() not in _FALSE_WORDS:
                apply(item.strip().lower())
    return LogSelection(frozenset(types), frozenset(levels))


class SessionLogger:
    """Write Markdown debug logs, newest entry first."""

    def __init__(self, paths: QuillPaths, debug_config: Any) -> None:
        self.paths = paths
        self._session_id = datetime.now().strftime("%Y%m%d_%H%M%S")
        self._started_at = datetime.now(timezone.utc)
        self._path: Path | None = None
        self._header = ""
        self.enabled = False
        self._enabled_types: set[str] = set()
        self._enabled_levels: set[str] = set()
        self.configure(debug_config)

    @property
    def path(self) -> Path | None:
        return self._path

    def configure(self, debug_config: Any) -> None:
        selection = resolve_debug_config(debug_config)
        self._enabled_types = set(selection.enabled_types)
        self._enabled_levels = set(selection.enabled_levels)
        self.enabled = bool(self._enabled_types or self._enabled_levels)

    def close(self) -> None:
        self.enabled = False

    def log_prompt(self, source: str, event: str, content: Any | None = None) -> None:
        if not self._session_enabled():
            return
        self._write(
            {
                "source": source,
                "event": event,
                "type": LOG_TYPE_SESSION,
                "content": content,
            }
        )

    def log_level(self, source: str, level: str, event: str, content: Any | None = None) -> None:
        if not self._level_enabled(level):
            return
        self._write(
            {
                "source": source,
                "event": event,
                "level": level,
                "content": content,
            }
        )

    def log_exception(self, source: str, exc: BaseException) -> None:
        if not self._level_enabled("error"):
            return
        location = None
        if exc.__traceback__ is not None:
            frames = traceback.extract_tb(exc.__traceback__)
            if frames:
                last = frames[-1]
                location = f"{last.filename}:{last.lineno} in {last.name}"
        self.log_level(
            source,
            "error",
            "exception",
            {
                "type": type(exc).__name__,
                "message": str(exc),
                "location": location,
                "traceback": "".join(
                    traceback.format_exception(type(exc), exc, exc.__traceback__)
                ),
            },
        )

    def _session_enabled(self) -> bool:
        return self.enabled and LOG_TYPE_SESSION in self._enabled_types

    def _level_enabled(self, level: str) -> bool:
        return self.enabled and level in self._enabled_levels

    def _ensure_path(self) -> None:
        if self._path is not None:
            return
        self.paths.logs_dir.mkdir(parents=True, exist_ok=True)
        self._path = self.paths.logs_dir / f"quill_session_{self._session_id}.md"
        self._header = (
            "# Quill Session Log\n\n"
            f"- Session: {self._session_id}\n"
            f"- Started: {self._started_at.isoformat()}\n\n"
            "---\n\n"
        )
        if not self._path.exists():
            self._path.write_text(self._header, encoding="utf-8")

    def _write(self, payload: dict[str, Any]) -> None:
        try:
            self._ensure_path()
            if self._path is None:
                return
            timestamp = datetime.now(timezone.utc).isoformat()
            kind = payload.get("type") or payload.get("level") or LOG_TYPE_SESSION
            header = f"## {timestamp} · {kind}/{payload['source']} · {payload['event']}\n"
            entry = f"{header}{self._format_content_block(payload.get('content'))}\n\n"
            existing = self._path.read_text(encoding="utf-8")
            tail = existing[len(self._header) :] if existing.startswith(self._header) else existing
            self._path.write_text(f"{self._header}{entry}{tail}", encoding="utf-8")
        except OSError:
            self.close()

    def _format_content_block(self, content: Any) -> str:
        if isinstance(content, (dict, list)):
            body = json.dumps(content, indent=2, ensure_ascii=False)
            language = "json"
        else:
            body = "" if content is None else str(content)
            language = "text"
        return f"```{language}\n{body.rstrip()}\n```"


_ACTIVE_LOGGER: SessionLogger | None = None


def set_active_logger(logger: SessionLogger | None) -> None:
    global _ACTIVE_LOGGER
    _ACTIVE_LOGGER = logger


def get_active_logger() -> SessionLogger | None:
    return _ACTIVE_LOGGER


def log_prompt(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_prompt(source, event, content)


def log_exception(source: str, exc: BaseException) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_exception(source, exc)


def log_error(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "error", event, content)


def log_info(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "info", event, content)


def log_debug(source: str, event: str, content: Any | None = None) -> None:
    logger = _ACTIVE_LOGGER
    if logger is not None:
        logger.log_level(source, "debug", event, content)
