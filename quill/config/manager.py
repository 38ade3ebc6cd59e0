from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from rich.console import Console

from .paths import QuillPaths


DEFAULT_CONFIG: Dict[str, Any] = {
    "message_log_limit": 1000,
    "message_log_trim": 10,
    "enable_recursive_minibuffers": False,
    "debug": None,
}


@dataclass
class QuillSettings:
    message_log_limit: int = 1000
    message_log_trim: int = 10
    enable_recursive_minibuffers: bool = False
    debug: Any = None


class ConfigManager:
    """Loads Quill settings from the global and workspace quill.json files."""

    def __init__(self, paths: QuillPaths, console: Optional[Console] = None) -> None:
        self.paths = paths
        self.console = console or Console()

    def create_config_template(self) -> None:
        """Create or update .quill/quill.json without overwriting existing user settings."""
        self.paths.quill_dir.mkdir(parents=True, exist_ok=True)
        current = self._read_json(self.paths.config_file)
        merged = self._merge_dicts(DEFAULT_CONFIG, current)
        self.paths.config_file.write_text(
            json.dumps(merged, indent=2, ensure_ascii=False) + "\n",
            encoding="utf-8",
        )

    def load_project_config(self) -> Dict[str, Any]:
        """Merge defaults, the global config and the workspace config."""
        merged = self._merge_dicts(DEFAULT_CONFIG, self._read_json(self.paths.global_config_file))
        return self._merge_dicts(merged, self._read_json(self.paths.config_file))

    def load_settings(self) -> QuillSettings:
        """Merge config files and environment variables."""
        config = self.load_project_config()
        env_cfg = self._env_settings()
        for key, value in env_cfg.items():
            if value is not None:
                config[key] = value
        return QuillSettings(
            message_log_limit=self._positive_int(
                config.get("message_log_limit"), DEFAULT_CONFIG["message_log_limit"]
            ),
            message_log_trim=self._positive_int(
                config.get("message_log_trim"), DEFAULT_CONFIG["message_log_trim"]
            ),
            enable_recursive_minibuffers=bool(config.get("enable_recursive_minibuffers")),
            debug=config.get("debug"),
        )

    def _merge_dicts(self, base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
        if not override:
            return dict(base)
        merged: Dict[str, Any] = dict(base)
        for key, value in override.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                merged[key] = self._merge_dicts(merged[key], value)  # type: ignore[arg-type]
            else:
                merged[key] = value
        return merged

    def _env_settings(self) -> Dict[str, Any]:
        recursive = os.getenv("QUILL_RECURSIVE_MINIBUFFERS")
        return {
            "debug": os.getenv("QUILL_DEBUG"),
            "enable_recursive_minibuffers": (
                self._to_bool(recursive) if recursive is not None else None
            ),
            "message_log_limit": self._to_int(os.getenv("QUILL_MESSAGE_LOG_LIMIT")),
        }

    def _read_json(self, path: Path) -> Dict[str, Any]:
        if not path.exists():
            return {}
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            self.console.print(
                f"[red]Failed to parse JSON config at {path}. Using defaults.[/red]"
            )
            return {}
        if not isinstance(data, dict):
            self.console.print(
                f"[yellow]Ignoring {path}: expected an object.[/yellow]"
            )
            return {}
        return data

    def _positive_int(self, value: Any, fallback: int) -> int:
        if isinstance(value, bool):
            return fallback
        if isinstance(value, str):
            value = self._to_int(value)
        if isinstance(value, int) and value > 0:
            return value
        return fallback

    def _to_bool(self, value: Optional[str]) -> bool:
        if value is None:
            return False
        return value.lower() in {"1", "true", "yes", "y"}

    def _to_int(self, value: Optional[str]) -> Optional[int]:
        if value is None:
            return None
        try:
            return int(value)
        except ValueError:
            return None
