"""Terminal front-end for Quill."""

from .app import QuillCLI, main
from .input import TerminalKeySource, normalize_key_press

__all__ = ["QuillCLI", "TerminalKeySource", "main", "normalize_key_press"]
