from __future__ import annotations

from collections import deque
from typing import TYPE_CHECKING, Any, Iterable, List, Optional, Protocol, Sequence, Tuple, Union

from prompt_toolkit.keys import Keys

from .errors import EditorError, ExitRecursiveEdit, Quit
from .hooks import POST_COMMAND_HOOK, PRE_COMMAND_HOOK
from .keymap import Binding, Keymap, key_name
from .messages import handle_exception, message

if TYPE_CHECKING:
    from .editor import Editor


class KeySource(Protocol):
    def read_key(self) -> Union[str, Keys]: ...


class ScriptedKeys:
    """Key source that replays a fixed sequence, then reports end of input."""

    def __init__(self, keys: Iterable[Union[str, Keys]] = ()) -> None:
        self._keys: deque[str] = deque(key_name(key) for key in keys)

    def push(self, *keys: Union[str, Keys]) -> None:
        self._keys.extend(key_name(key) for key in keys)

    def type_text(self, text: str) -> None:
        self._keys.extend(text)

    @property
    def pending(self) -> int:
        return len(self._keys)

    def read_key(self) -> str:
        if not self._keys:
            raise EOFError("no more keys")
        return self._keys.popleft()


def prefix_numeric_value(arg: Any) -> int:
    if arg is None:
        return 1
    if arg == "-":
        return -1
    if isinstance(arg, list):
        return arg[0]
    return int(arg)


class Controller:
    """Reads keys, resolves them through the active maps and runs commands."""

    def __init__(self, editor: "Editor", keys: KeySource) -> None:
        self.editor = editor
        self.keys = keys
        self.prefix_arg: Any = None
        self.current_prefix_arg: Any = None
        self.overriding_map: Optional[Keymap] = None
        self.this_command: Optional[str] = None
        self.last_command: Optional[str] = None
        self.this_command_keys: Tuple[str, ...] = ()
        self.recursive_edit_level = 0

    def read_key(self) -> str:
        return key_name(self.keys.read_key())

    def active_maps(self) -> List[Keymap]:
        maps: List[Keymap] = []
        if self.overriding_map is not None:
            maps.append(self.overriding_map)
        buffer_map = self.editor.current_buffer.keymap
        if buffer_map is not None:
            maps.append(buffer_map)
        maps.append(self.editor.global_map)
        return maps

    def key_binding(self, key_sequence: Sequence[str]) -> Optional[Binding]:
        for keymap in self.active_maps():
            binding = keymap.lookup(key_sequence)
            if binding is not None:
                return binding
        return None

    def read_key_sequence(self) -> Tuple[Tuple[str, ...], Optional[Binding]]:
        """Read keys until they name a command or cannot name one."""
        key_sequence: List[str] = []
        while True:
            key_sequence.append(self.read_key())
            binding = self.key_binding(key_sequence)
            if not isinstance(binding, Keymap):
                return tuple(key_sequence), binding
            self.editor.echo_area.show(" ".join(key_sequence) + "-")
            self.editor.redisplay()

    def command_loop(self) -> None:
        """Dispatch commands until a recursive-edit exit unwinds this frame.

        Command failures are reported and the loop continues. End of input
        and ``SystemExit`` propagate to the caller.
        """
        while True:
            key_sequence, binding = self.read_key_sequence()
            self.editor.echo_area.clear_message()
            try:
                if binding is None:
                    raise EditorError(f"{' '.join(key_sequence)} is undefined")
                self.dispatch(binding, key_sequence)
            except ExitRecursiveEdit:
                raise
            except EditorError as exc:
                message(self.editor, str(exc))
                self.editor.beep()
            except Exception as exc:
                handle_exception(self.editor, exc)
            self.editor.redisplay()

    def dispatch(self, binding: Binding, key_sequence: Sequence[str] = ()) -> None:
        if isinstance(binding, str):
            command = self.editor.commands.get(binding)
            if command is None:
                raise EditorError(f"Undefined command: {binding}")
            name, handler = command.name, command.handler
        elif callable(binding):
            name, handler = getattr(binding, "__name__", repr(binding)), binding
        else:
            raise EditorError(f"{' '.join(key_sequence)} is a prefix key")
        self.this_command = name
        self.this_command_keys = tuple(key_sequence)
        self.current_prefix_arg, self.prefix_arg = self.prefix_arg, None
        self.editor.hooks.run_hooks(PRE_COMMAND_HOOK, remove_on_error=True)
        handler(self.editor)
        self.editor.hooks.run_hooks(POST_COMMAND_HOOK, remove_on_error=True)
        self.last_command = name

    def recursive_edit(self) -> None:
        """Run a nested command loop until ``exit_recursive_edit`` or abort.

        An abort surfaces as :class:`Quit` to the caller.
        """
        self.recursive_edit_level += 1
        try:
            self.command_loop()
        except ExitRecursiveEdit as exc:
            if exc.aborted:
                raise Quit() from None
        finally:
            self.recursive_edit_level -= 1

    def exit_recursive_edit(self) -> None:
        if self.recursive_edit_level == 0:
            raise EditorError("No recursive edit is in progress")
        raise ExitRecursiveEdit()

    def abort_recursive_edit(self) -> None:
        if self.recursive_edit_level == 0:
            raise EditorError("No recursive edit is in progress")
        raise ExitRecursiveEdit(aborted=True)
