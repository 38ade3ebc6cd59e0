"""
Minibuffer prompts.

A prompt suspends normal editing by running a nested command loop with the
echo area focused. Everything the prompt changes is captured in a
:class:`SavedContext` first and put back in a ``finally`` block, so nested
prompts unwind in call-stack order whether they are accepted, aborted or
interrupted.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Optional

from prompt_toolkit.keys import Keys

from .buffer import Buffer
from .commands import CommandRegistry
from .completion import CompletionFn, candidates_completion, complete, file_name_completion
from .errors import Quit, ReentrancyError
from .keymap import Keymap
from .messages import message
from .session_log import log_prompt
from .window import Window

if TYPE_CHECKING:
    from .editor import Editor

COMPLETION_SLOT = "completion_fn"


@dataclass(frozen=True)
class SavedContext:
    window: Window
    buffer: Buffer
    completion_fn: Optional[CompletionFn]
    prefix_arg: Any
    keymap: Optional[Keymap]
    minibuffer_text: str
    prompt: str
    active: bool

    @classmethod
    def capture(cls, editor: "Editor") -> "SavedContext":
        minibuffer = editor.minibuffer
        return cls(
            window=editor.current_window,
            buffer=editor.current_buffer,
            completion_fn=minibuffer[COMPLETION_SLOT],
            prefix_arg=editor.controller.current_prefix_arg,
            keymap=minibuffer.keymap,
            minibuffer_text=minibuffer.to_string(),
            prompt=editor.echo_area.prompt,
            active=editor.echo_area.active,
        )

    def restore(self, editor: "Editor") -> None:
        echo_area = editor.echo_area
        minibuffer = editor.minibuffer
        echo_area.clear()
        if self.active:
            # Back into an enclosing prompt.
            minibuffer.insert(self.minibuffer_text)
            echo_area.prompt = self.prompt
        echo_area.active = self.active
        editor.restore_focus(self.window, self.buffer)
        minibuffer[COMPLETION_SLOT] = self.completion_fn
        minibuffer.keymap = self.keymap
        editor.controller.current_prefix_arg = self.prefix_arg
        editor.redisplay()


def read_from_minibuffer(
    editor: "Editor",
    prompt: str,
    *,
    completion_fn: Optional[CompletionFn] = None,
    default: Optional[str] = None,
    keymap: Optional[Keymap] = None,
) -> str:
    """Read a line of input in the echo area.

    Returns the text with trailing whitespace removed, or ``default`` when
    the text is empty. Raises :class:`ReentrancyError` if a prompt is already
    open and recursive minibuffers are disabled, and re-raises :class:`Quit`
    when the user aborts.
    """
    echo_area = editor.echo_area
    if echo_area.active and not editor.settings.enable_recursive_minibuffers:
        raise ReentrancyError("Command attempted to use minibuffer while in minibuffer")
    saved = SavedContext.capture(editor)
    minibuffer = editor.minibuffer
    depth = editor.controller.recursive_edit_level + 1
    try:
        minibuffer.keymap = keymap or editor.minibuffer_map
        minibuffer[COMPLETION_SLOT] = completion_fn
        echo_area.active = True
        minibuffer.clear()
        editor.select_window(echo_area)
        if default is not None:
            prompt = prompt.replace(":", f" (default {default}):", 1)
        echo_area.prompt = prompt
        log_prompt("minibuffer", "prompt.open", {"prompt": prompt, "depth": depth})
        editor.redisplay()
        editor.controller.recursive_edit()
        text = minibuffer.to_string().rstrip()
    except Quit:
        log_prompt("minibuffer", "prompt.cancel", {"prompt": prompt, "depth": depth})
        raise
    finally:
        saved.restore(editor)
    log_prompt("minibuffer", "prompt.accept", {"prompt": prompt, "depth": depth, "text": text})
    if default is not None and not text:
        return default
    return text


def read_file_name(editor: "Editor", prompt: str, *, default: Optional[str] = None) -> str:
    file = read_from_minibuffer(
        editor, prompt, completion_fn=file_name_completion, default=default
    )
    return os.path.abspath(os.path.expanduser(file))


def read_buffer(editor: "Editor", prompt: str, *, default: Optional[str] = None) -> str:
    if default is None:
        buffer = editor.buffers.last or editor.buffers.current
        default = buffer.name if buffer is not None else None
    return read_from_minibuffer(
        editor,
        prompt,
        completion_fn=candidates_completion(editor.buffers.names),
        default=default,
    )


def read_command_name(editor: "Editor", prompt: str) -> str:
    def completion_fn(partial: str) -> Optional[str]:
        return complete(partial.replace("-", "_"), editor.commands.names())

    return read_from_minibuffer(editor, prompt, completion_fn=completion_fn)


def yes_or_no(editor: "Editor", prompt: str) -> bool:
    while True:
        answer = read_from_minibuffer(editor, prompt + " (yes or no) ")
        if answer == "yes":
            return True
        if answer == "no":
            return False
        message(editor, "Please answer yes or no.")


def _please_answer_y_or_n(editor: "Editor") -> None:
    message(editor, "Please answer y or n: ")


def y_or_n_map() -> Keymap:
    return Keymap.build(
        {
            "y": "y_and_exit_minibuffer",
            "n": "n_and_exit_minibuffer",
            Keys.ControlG: "abort_recursive_edit",
        },
        fallback=lambda key: _please_answer_y_or_n,
        name="y-or-n",
    )


def y_or_n(editor: "Editor", prompt: str) -> bool:
    return read_from_minibuffer(editor, prompt + " (y or n) ", keymap=y_or_n_map()) == "y"


def exit_recursive_edit(editor: "Editor") -> None:
    editor.controller.exit_recursive_edit()


def abort_recursive_edit(editor: "Editor") -> None:
    editor.controller.abort_recursive_edit()


def y_and_exit_minibuffer(editor: "Editor") -> None:
    editor.current_buffer.insert("y")
    editor.controller.exit_recursive_edit()


def n_and_exit_minibuffer(editor: "Editor") -> None:
    editor.current_buffer.insert("n")
    editor.controller.exit_recursive_edit()


def complete_minibuffer(editor: "Editor") -> None:
    minibuffer = editor.minibuffer
    completion_fn = minibuffer[COMPLETION_SLOT]
    if completion_fn is None:
        return
    text = minibuffer.to_string()
    completed = completion_fn(text)
    if completed is None:
        message(editor, "[No match]", log=False)
    elif completed != text:
        minibuffer.clear()
        minibuffer.insert(completed)


def register_minibuffer_commands(registry: CommandRegistry) -> None:
    registry.register("exit_recursive_edit", exit_recursive_edit, "Accept the current prompt")
    registry.register("abort_recursive_edit", abort_recursive_edit, "Abort the current prompt")
    registry.register("complete_minibuffer", complete_minibuffer, "Complete the prompt input")
    registry.register("y_and_exit_minibuffer", y_and_exit_minibuffer, "Answer y")
    registry.register("n_and_exit_minibuffer", n_and_exit_minibuffer, "Answer n")
