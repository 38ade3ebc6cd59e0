"""
Named hook lists for editor extension points.

Callbacks take no arguments. The newest callback runs first.
"""

from __future__ import annotations

from collections import defaultdict
from typing import Callable, Dict, List, Tuple

from .session_log import log_debug, log_exception

Hook = Callable[[], object]

PRE_COMMAND_HOOK = "pre_command_hook"
POST_COMMAND_HOOK = "post_command_hook"


class HookRegistry:
    """Ordered, named lists of callbacks."""

    def __init__(self) -> None:
        self._hooks: Dict[str, List[Hook]] = defaultdict(list)

    def hooks(self, name: str) -> Tuple[Hook, ...]:
        """Return the callbacks registered under ``name``, newest first."""
        return tuple(self._hooks.get(name, ()))

    def add_hook(self, name: str, func: Hook) -> None:
        self._hooks[name].insert(0, func)

    def remove_hook(self, name: str, func: Hook) -> None:
        callbacks = self._hooks.get(name)
        if callbacks and func in callbacks:
            callbacks.remove(func)

    def run_hooks(self, name: str, *, remove_on_error: bool = False) -> None:
        """Call every callback under ``name`` in list order.

        A failing callback either propagates, leaving the list untouched and
        later callbacks uncalled, or with ``remove_on_error`` is dropped from
        the list while the remaining callbacks still run. ``SystemExit`` and
        ``KeyboardInterrupt`` always propagate.
        """
        for func in self.hooks(name):
            if func not in self._hooks.get(name, ()):
                # Removed by an earlier callback in this run.
                continue
            try:
                func()
            except Exception as exc:
                if not remove_on_error:
                    raise
                self.remove_hook(name, func)
                log_exception("hooks", exc)
                log_debug(
                    "hooks",
                    "hook.removed",
                    {"hook": name, "callback": getattr(func, "__qualname__", repr(func))},
                )
