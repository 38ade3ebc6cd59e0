from __future__ import annotations


class EditorError(Exception):
    """A failure the command loop reports on the status line."""


class ReentrancyError(EditorError):
    pass


class Quit(EditorError):
    """Raised when the user aborts the innermost recursive edit."""

    def __init__(self, message: str = "Quit") -> None:
        super().__init__(message)


class ExitRecursiveEdit(Exception):
    """Unwinds the innermost command loop back to its ``recursive_edit`` frame."""

    def __init__(self, *, aborted: bool = False) -> None:
        super().__init__("abort" if aborted else "exit")
        self.aborted = aborted
