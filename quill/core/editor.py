from __future__ import annotations

import sys
from typing import List, Optional

from rich.console import Console

from ..config.manager import QuillSettings
from .buffer import Buffer, BufferList
from .builtins import register_builtin_commands
from .commands import CommandRegistry
from .controller import Controller, KeySource
from .errors import EditorError
from .hooks import HookRegistry
from .keymap import global_map, minibuffer_local_map
from .messages import OUTPUT_BUFFER, DefaultOutput, message
from .window import EchoArea, Window

SCRATCH_BUFFER = "*scratch*"


class Editor:
    """Owns the buffers, windows, key maps, hooks and command loop of one session."""

    def __init__(
        self,
        keys: KeySource,
        *,
        console: Optional[Console] = None,
        settings: Optional[QuillSettings] = None,
    ) -> None:
        self.console = console or Console(file=sys.stdout)
        self.settings = settings or QuillSettings()
        self.hooks = HookRegistry()
        self.commands = CommandRegistry()
        register_builtin_commands(self.commands)
        self.global_map = global_map()
        self.minibuffer_map = minibuffer_local_map()
        self.minibuffer = Buffer(" *Minibuf*", keymap=self.minibuffer_map)
        self.echo_area = EchoArea(self.minibuffer, self.console)
        self.buffers = BufferList()
        scratch = self.buffers.new_buffer(SCRATCH_BUFFER)
        self.buffers.current = scratch
        self.windows: List[Window] = [Window(scratch)]
        self.output_window: Optional[Window] = None
        self._current_window: Window = self.windows[0]
        self.controller = Controller(self, keys)
        self.output = DefaultOutput(self)

    @property
    def current_window(self) -> Window:
        return self._current_window

    @property
    def current_buffer(self) -> Buffer:
        return self._current_window.buffer

    def is_deleted(self, window: Window) -> bool:
        return window is not self.echo_area and window not in self.windows

    def select_window(self, window: Window) -> None:
        if self.is_deleted(window):
            raise EditorError("Attempt to select a deleted window")
        self._current_window = window
        self.buffers.current = window.buffer

    def restore_focus(self, window: Window, buffer: Buffer) -> None:
        """Reselect ``window`` showing ``buffer`` after a prompt.

        Falls back to the first window when ``window`` was deleted, and keeps
        the window's own buffer when ``buffer`` was killed meanwhile.
        """
        if self.is_deleted(window):
            window = self.windows[0]
        if buffer is self.minibuffer or buffer in self.buffers:
            window.buffer = buffer
        self.select_window(window)

    def switch_to_buffer(self, buffer: Buffer) -> None:
        self._current_window.buffer = buffer
        self.buffers.current = buffer

    def kill_buffer(self, buffer: Buffer) -> None:
        if self.output_window is not None and self.output_window.buffer is buffer:
            self.delete_window(self.output_window)
        self.buffers.remove(buffer)
        replacement = next(iter(self.buffers), None) or self.buffers.find_or_new(SCRATCH_BUFFER)
        for window in self.windows:
            if window.buffer is buffer:
                window.buffer = replacement
        self.buffers.current = self.current_buffer

    def open_output_window(self) -> Window:
        if self.output_window is None or self.is_deleted(self.output_window):
            self.output_window = Window(self.buffers.find_or_new(OUTPUT_BUFFER))
            self.windows.append(self.output_window)
        return self.output_window

    def delete_window(self, window: Window) -> None:
        if window not in self.windows:
            return
        if len(self.windows) == 1:
            raise EditorError("Attempt to delete the sole window")
        self.windows.remove(window)
        if self._current_window is window:
            self.select_window(self.windows[0])

    def message(self, msg: str, *, log: bool = True) -> None:
        message(self, msg, log=log)

    def beep(self) -> None:
        self.echo_area.beep()

    def redisplay(self) -> None:
        self.echo_area.redisplay()

    def run(self) -> None:
        """Run the top-level command loop until input ends or the editor exits."""
        try:
            self.controller.command_loop()
        except EOFError:
            return
