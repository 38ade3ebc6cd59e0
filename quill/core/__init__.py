"""Editor model and minibuffer prompts."""

from .completion import complete, file_name_completion
from .controller import Controller, ScriptedKeys
from .editor import Editor
from .errors import EditorError, ExitRecursiveEdit, Quit, ReentrancyError
from .hooks import HookRegistry
from .keymap import Keymap
from .minibuffer import (
    read_buffer,
    read_command_name,
    read_file_name,
    read_from_minibuffer,
    y_or_n,
    yes_or_no,
)
from .transient import set_transient_map

__all__ = [
    "Controller",
    "Editor",
    "EditorError",
    "ExitRecursiveEdit",
    "HookRegistry",
    "Keymap",
    "Quit",
    "ReentrancyError",
    "ScriptedKeys",
    "complete",
    "file_name_completion",
    "read_buffer",
    "read_command_name",
    "read_file_name",
    "read_from_minibuffer",
    "set_transient_map",
    "y_or_n",
    "yes_or_no",
]
