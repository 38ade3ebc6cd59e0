from __future__ import annotations

import os
from pathlib import Path
from typing import TYPE_CHECKING

from .commands import CommandRegistry
from .controller import prefix_numeric_value
from .errors import EditorError, Quit
from .messages import message
from .minibuffer import (
    read_buffer,
    read_command_name,
    read_file_name,
    register_minibuffer_commands,
    y_or_n,
    yes_or_no,
)

if TYPE_CHECKING:
    from .editor import Editor

FILE_NAME_SLOT = "file_name"


def self_insert_command(editor: "Editor") -> None:
    keys = editor.controller.this_command_keys
    if not keys:
        return
    count = prefix_numeric_value(editor.controller.current_prefix_arg)
    editor.current_buffer.insert(keys[-1] * max(count, 0))


def delete_backward_char(editor: "Editor") -> None:
    count = prefix_numeric_value(editor.controller.current_prefix_arg)
    editor.current_buffer.backward_delete_char(count)


def universal_argument(editor: "Editor") -> None:
    current = editor.controller.current_prefix_arg
    if isinstance(current, list):
        editor.controller.prefix_arg = [current[0] * 4]
    else:
        editor.controller.prefix_arg = [4]
    editor.echo_area.show(f"C-u {editor.controller.prefix_arg[0]}-")


def keyboard_quit(editor: "Editor") -> None:
    raise Quit()


def execute_command(editor: "Editor") -> None:
    name = read_command_name(editor, "M-x ")
    command = editor.commands.get(name)
    if command is None:
        raise EditorError(f"Undefined command: {name}")
    editor.controller.this_command = command.name
    command.handler(editor)


def find_file(editor: "Editor") -> None:
    visit_file(editor, read_file_name(editor, "Find file: "))


def visit_file(editor: "Editor", file_name: str) -> None:
    file_name = os.path.abspath(os.path.expanduser(file_name))
    path = Path(file_name)
    for buffer in editor.buffers:
        if buffer[FILE_NAME_SLOT] == file_name:
            editor.switch_to_buffer(buffer)
            return
    if path.exists() and not path.is_file():
        raise EditorError(f"{file_name} is not a regular file")
    buffer = editor.buffers.new_buffer(path.name or file_name)
    buffer[FILE_NAME_SLOT] = file_name
    if path.is_file():
        buffer.insert(path.read_text(encoding="utf-8", errors="replace"))
        buffer.beginning_of_buffer()
    else:
        message(editor, "(New file)")
    buffer.modified = False
    editor.switch_to_buffer(buffer)


def switch_to_buffer(editor: "Editor") -> None:
    name = read_buffer(editor, "Switch to buffer: ")
    buffer = editor.buffers.find_or_new(name)
    editor.switch_to_buffer(buffer)


def kill_buffer(editor: "Editor") -> None:
    name = read_buffer(editor, "Kill buffer: ", default=editor.current_buffer.name)
    buffer = editor.buffers.get(name)
    if buffer is None:
        raise EditorError(f"No such buffer: {name}")
    if buffer.modified and buffer[FILE_NAME_SLOT]:
        if not yes_or_no(editor, f"Buffer {name} modified; kill anyway?"):
            return
    editor.kill_buffer(buffer)


def exit_editor(editor: "Editor") -> None:
    modified = [b for b in editor.buffers if b.modified and b[FILE_NAME_SLOT]]
    if modified and not y_or_n(editor, "Modified buffers exist; exit anyway?"):
        return
    raise SystemExit(0)


def save_buffer(editor: "Editor") -> None:
    buffer = editor.current_buffer
    file_name = buffer[FILE_NAME_SLOT]
    if not file_name:
        file_name = read_file_name(editor, "File to save in: ")
        buffer[FILE_NAME_SLOT] = file_name
    elif os.path.exists(file_name) and not os.access(file_name, os.W_OK):
        raise EditorError(f"{file_name} is read-only")
    Path(file_name).write_text(buffer.to_string(), encoding="utf-8")
    buffer.modified = False
    message(editor, f"Wrote {file_name}")


def register_builtin_commands(registry: CommandRegistry) -> None:
    registry.register("self_insert_command", self_insert_command, "Insert the typed character")
    registry.register("delete_backward_char", delete_backward_char, "Delete the previous character")
    registry.register("universal_argument", universal_argument, "Begin a numeric prefix argument")
    registry.register("keyboard_quit", keyboard_quit, "Cancel the current command")
    registry.register("execute_command", execute_command, "Run a command by name")
    registry.register("find_file", find_file, "Visit a file")
    registry.register("switch_to_buffer", switch_to_buffer, "Select another buffer")
    registry.register("kill_buffer", kill_buffer, "Remove a buffer")
    registry.register("save_buffer", save_buffer, "Write the current buffer to its file")
    registry.register("exit_editor", exit_editor, "Leave the editor")
    register_minibuffer_commands(registry)
