"""Configuration package."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .manager import ConfigManager, QuillSettings
    from .paths import QuillPaths

__all__ = ["ConfigManager", "QuillSettings", "QuillPaths"]


def __getattr__(name: str) -> Any:
    if name in {"ConfigManager", "QuillSettings"}:
        from .manager import ConfigManager, QuillSettings

        return {"ConfigManager": ConfigManager, "QuillSettings": QuillSettings}[name]
    if name == "QuillPaths":
        from .paths import QuillPaths

        return QuillPaths
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
