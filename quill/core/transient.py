from __future__ import annotations

from typing import TYPE_CHECKING

from .hooks import PRE_COMMAND_HOOK
from .keymap import Keymap

if TYPE_CHECKING:
    from .editor import Editor


def set_transient_map(editor: "Editor", keymap: Keymap) -> None:
    """Make ``keymap`` the overriding map for the next command only.

    The next key lookup sees ``keymap``; the pre-command hook then puts the
    previous overriding map back and unregisters itself before that command
    runs.
    """
    controller = editor.controller
    previous = controller.overriding_map

    def restore() -> None:
        controller.overriding_map = previous
        editor.hooks.remove_hook(PRE_COMMAND_HOOK, restore)

    editor.hooks.add_hook(PRE_COMMAND_HOOK, restore)
    controller.overriding_map = keymap
