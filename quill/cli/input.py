from __future__ import annotations

import select
from collections import deque
from typing import List, Optional

from prompt_toolkit.input import Input, create_input
from prompt_toolkit.key_binding.key_processor import KeyPress
from prompt_toolkit.keys import Keys

from ..core.keymap import key_name

# Seconds to wait after a lone escape before treating it as the Escape key.
ESCAPE_TIMEOUT = 0.05

_IGNORED_KEYS = {Keys.Ignore, Keys.CPRResponse, Keys.Vt100MouseEvent, Keys.WindowsMouseEvent}


def normalize_key_press(key_press: KeyPress) -> List[str]:
    """Translate a prompt_toolkit key press into editor key names."""
    key = key_press.key
    if key in _IGNORED_KEYS:
        return []
    if key == Keys.BracketedPaste:
        return list(key_press.data.replace("\r\n", "\r").replace("\n", "\r"))
    return [key_name(key)]


class TerminalKeySource:
    """Reads key presses from the terminal with prompt_toolkit's input parser.

    Use as a context manager so the terminal is in raw mode while keys are
    read and restored afterwards.
    """

    def __init__(self, terminal_input: Optional[Input] = None) -> None:
        self._input = terminal_input or create_input()
        self._pending: deque[str] = deque()
        self._raw_mode = None

    def __enter__(self) -> "TerminalKeySource":
        self._raw_mode = self._input.raw_mode()
        self._raw_mode.__enter__()
        return self

    def __exit__(self, *exc_info: object) -> None:
        if self._raw_mode is not None:
            self._raw_mode.__exit__(*exc_info)
            self._raw_mode = None

    def read_key(self) -> str:
        while not self._pending:
            if self._input.closed:
                raise EOFError("terminal input closed")
            ready, _, _ = select.select([self._input.fileno()], [], [], ESCAPE_TIMEOUT)
            key_presses = self._input.read_keys() if ready else self._input.flush_keys()
            for key_press in key_presses:
                self._pending.extend(normalize_key_press(key_press))
        return self._pending.popleft()
