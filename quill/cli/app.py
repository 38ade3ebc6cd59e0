from __future__ import annotations

import argparse
import errno
import sys
from contextlib import nullcontext, redirect_stdout
from pathlib import Path
from typing import ContextManager, Iterable, Optional

from rich.console import Console

from ..config.manager import ConfigManager
from ..config.paths import QuillPaths
from ..core.builtins import visit_file
from ..core.controller import KeySource
from ..core.editor import Editor
from ..core.errors import EditorError
from ..core.session_log import SessionLogger, log_exception, set_active_logger
from .input import TerminalKeySource


class QuillCLI:
    """Terminal front-end: loads settings, wires logging and runs the editor."""

    def __init__(
        self,
        root: Path | None = None,
        console: Console | None = None,
        *,
        keys: KeySource | None = None,
        debug: object = None,
    ) -> None:
        # Bound now so redirecting stdout to the editor never captures redisplay.
        self.console = console or Console(file=sys.stdout)
        self.root = root or Path.cwd()
        self.paths = QuillPaths(self.root)
        self.config_manager = ConfigManager(self.paths, console=self.console)
        self.settings = self.config_manager.load_settings()
        if debug is not None:
            self.settings.debug = debug
        self.session_logger = SessionLogger(self.paths, self.settings.debug)
        set_active_logger(self.session_logger)
        self.keys = keys or TerminalKeySource()
        self.editor = Editor(self.keys, console=self.console, settings=self.settings)

    def open_files(self, files: Iterable[str]) -> None:
        for file_name in files:
            try:
                visit_file(self.editor, str(self.root / Path(file_name).expanduser()))
            except EditorError as exc:
                self.editor.message(str(exc))

    def run(self, files: Iterable[str] = ()) -> int:
        """Run until the input ends or a command exits; returns the exit code."""
        self.open_files(files)
        terminal: ContextManager[object] = (
            self.keys if isinstance(self.keys, TerminalKeySource) else nullcontext()
        )
        code = 0
        try:
            with terminal, redirect_stdout(self.editor.output):
                self.editor.redisplay()
                self.editor.run()
        except SystemExit as exc:
            code = exc.code if isinstance(exc.code, int) else 0
        finally:
            self.console.print()
            self.session_logger.close()
            set_active_logger(None)
        return code


def main(argv: Optional[list[str]] = None) -> None:
    parser = argparse.ArgumentParser(description="Quill - terminal editor with minibuffer prompts")
    parser.add_argument("files", nargs="*", help="Files to visit on startup")
    parser.add_argument("-v", "--version", action="store_true", help="Show version and exit")
    parser.add_argument("--root", type=Path, default=None, help="Workspace root (defaults to cwd)")
    parser.add_argument(
        "--debug",
        default=None,
        help="Debug log selection: session, error, warn, info, debug or all",
    )
    args = parser.parse_args(argv)
    if args.version:
        from quill import __version__

        print(f"quill {__version__}")
        return
    try:
        code = QuillCLI(root=args.root, debug=args.debug).run(args.files)
        raise SystemExit(code)
    except KeyboardInterrupt:
        return
    except OSError as exc:
        if exc.errno == errno.EPIPE:
            return
        log_exception("cli", exc)
        raise
