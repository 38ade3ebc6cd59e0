from __future__ import annotations

from typing import Optional

from rich.console import Console
from rich.control import Control
from rich.segment import ControlType
from rich.text import Text

from .buffer import Buffer


class Window:
    """A focusable view onto a buffer."""

    def __init__(self, buffer: Buffer) -> None:
        self.buffer = buffer

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.buffer.name!r})"


class EchoArea(Window):
    """Bottom line that shows status messages or the active prompt.

    While ``active`` it displays ``prompt`` followed by the minibuffer text;
    otherwise it displays the last message, if any.
    """

    def __init__(self, minibuffer: Buffer, console: Console) -> None:
        super().__init__(minibuffer)
        self.console = console
        self.prompt = ""
        self.active = False
        self.message: Optional[str] = None

    def show(self, text: str) -> None:
        self.message = text

    def clear(self) -> None:
        self.message = None
        self.prompt = ""
        self.buffer.clear()

    def clear_message(self) -> None:
        self.message = None

    def render(self) -> Text:
        if self.message is not None:
            # A message temporarily covers the prompt until the next key.
            return Text(self.message)
        if self.active:
            line = Text(self.prompt, style="bold cyan")
            line.append(self.buffer.to_string())
            return line
        return Text("")

    def redisplay(self) -> None:
        self.console.control(
            Control(ControlType.CARRIAGE_RETURN, (ControlType.ERASE_IN_LINE, 2))
        )
        self.console.print(self.render(), end="")

    def beep(self) -> None:
        self.console.bell()
