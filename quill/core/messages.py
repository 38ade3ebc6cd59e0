from __future__ import annotations

import traceback
from typing import TYPE_CHECKING, Any, Iterable

from .session_log import log_exception

if TYPE_CHECKING:
    from .editor import Editor

MESSAGES_BUFFER = "*Messages*"
BACKTRACE_BUFFER = "*Backtrace*"
OUTPUT_BUFFER = "*output*"


def message(editor: "Editor", msg: str, *, log: bool = True) -> None:
    """Show ``msg`` on the status line and append it to ``*Messages*``.

    Once the log passes ``message_log_limit`` lines, the oldest
    ``message_log_trim`` lines are dropped in one chunk.
    """
    if log:
        buffer = editor.buffers.find_or_new(MESSAGES_BUFFER)
        buffer.end_of_buffer()
        buffer.insert(msg + "\n")
        if buffer.current_line > editor.settings.message_log_limit:
            buffer.beginning_of_buffer()
            for _ in range(editor.settings.message_log_trim):
                buffer.next_line()
            buffer.delete_region(buffer.point_min, buffer.point)
            buffer.end_of_buffer()
        buffer.modified = False
    editor.echo_area.show(msg)


def handle_exception(editor: "Editor", exc: BaseException) -> None:
    """Report an unexpected command failure without leaving the command loop."""
    if isinstance(exc, SystemExit):
        raise exc
    log_exception("command", exc)
    buffer = editor.buffers.find_or_new(BACKTRACE_BUFFER)
    buffer.clear()
    buffer.insert(f"{type(exc).__name__}: {exc}\n")
    for line in traceback.format_tb(exc.__traceback__):
        buffer.insert(line if line.endswith("\n") else line + "\n")
    buffer.beginning_of_buffer()
    buffer.modified = False
    message(editor, str(exc).rstrip("\n"))
    editor.beep()


class DefaultOutput:
    """File-like sink that inserts written text into an editor buffer.

    Writes go to ``*output*`` while an output window is showing it, and to
    the current buffer otherwise.
    """

    def __init__(self, editor: "Editor") -> None:
        self.editor = editor

    def write(self, *args: Any) -> int:
        text = "".join(str(arg) for arg in args)
        window = self.editor.output_window
        if window is not None and not self.editor.is_deleted(window):
            target = window.buffer
        else:
            target = self.editor.current_buffer
        target.insert(text)
        return len(text)

    def writelines(self, lines: Iterable[str]) -> None:
        self.write(*lines)

    def print(self, *args: Any, sep: str = " ", end: str = "\n") -> None:
        self.write(sep.join(str(arg) for arg in args), end)

    def printf(self, fmt: str, *args: Any) -> None:
        self.write(fmt % args)

    def flush(self) -> None:
        pass

    def isatty(self) -> bool:
        return False
