from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence, Union

from prompt_toolkit.keys import Keys

if TYPE_CHECKING:
    from .editor import Editor

CommandHandler = Callable[["Editor"], Any]
Binding = Union[str, CommandHandler, "Keymap"]
FallbackHandler = Callable[[str], Optional[Binding]]


def key_name(key: Union[Keys, str]) -> str:
    """Normalize a prompt_toolkit key to its plain string name ("c-g", "x")."""
    if isinstance(key, Keys):
        return key.value
    return key


def parse_key_sequence(spec: str) -> tuple[str, ...]:
    """Split ``"c-x c-f"`` into ``("c-x", "c-f")``; a lone space is the space key."""
    if spec == " ":
        return (" ",)
    return tuple(spec.split())


def is_printable(key: str) -> bool:
    return len(key) == 1 and key.isprintable()


@dataclass(frozen=True, eq=False)
class Keymap:
    """Key lookup table plus an optional fallback for keys it does not bind.

    Values are command names, command handlers (called with the editor) or
    nested key maps for prefix keys. Instances never change after
    construction; build a new map instead of redefining keys.
    """

    bindings: Mapping[str, Binding] = field(default_factory=dict)
    fallback: Optional[FallbackHandler] = None
    name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "bindings", MappingProxyType(dict(self.bindings)))

    @classmethod
    def build(
        cls,
        definitions: Mapping[Union[str, Keys, Sequence[Union[str, Keys]]], Binding],
        *,
        fallback: Optional[FallbackHandler] = None,
        name: str = "",
    ) -> "Keymap":
        """Build a map from key specs such as ``"c-x c-f"`` or ``(Keys.Escape, "x")``."""
        tree: Dict[str, Any] = {}
        for spec, binding in definitions.items():
            if isinstance(spec, str) and not isinstance(spec, Keys):
                keys = parse_key_sequence(spec)
            elif isinstance(spec, Keys):
                keys = (spec.value,)
            else:
                keys = tuple(key_name(k) for k in spec)
            if not keys:
                raise ValueError("empty key sequence")
            node = tree
            for key in keys[:-1]:
                child = node.setdefault(key, {})
                if not isinstance(child, dict):
                    raise ValueError(f"{' '.join(keys)}: {key} is already bound")
                node = child
            node[keys[-1]] = binding
        return cls._from_tree(tree, fallback=fallback, name=name)

    @classmethod
    def _from_tree(
        cls, tree: Dict[str, Any], *, fallback: Optional[FallbackHandler], name: str
    ) -> "Keymap":
        bindings: Dict[str, Binding] = {}
        for key, value in tree.items():
            if isinstance(value, dict):
                bindings[key] = cls._from_tree(value, fallback=None, name=f"{name} {key}".strip())
            else:
                bindings[key] = value
        return cls(bindings=bindings, fallback=fallback, name=name)

    def lookup(self, key_sequence: Sequence[Union[str, Keys]]) -> Optional[Binding]:
        binding: Optional[Binding] = self
        for key in key_sequence:
            if not isinstance(binding, Keymap):
                return None
            name = key_name(key)
            found = binding.bindings.get(name)
            if found is None and binding.fallback is not None:
                found = binding.fallback(name)
            binding = found
            if binding is None:
                return None
        return binding


def _self_insert_printable(key: str) -> Optional[Binding]:
    if is_printable(key):
        return "self_insert_command"
    return None


def global_map() -> Keymap:
    return Keymap.build(
        {
            Keys.ControlH: "delete_backward_char",
            Keys.ControlG: "keyboard_quit",
            Keys.ControlU: "universal_argument",
            (Keys.Escape, "x"): "execute_command",
            "c-x c-f": "find_file",
            "c-x b": "switch_to_buffer",
            "c-x k": "kill_buffer",
            "c-x c-s": "save_buffer",
            "c-x c-c": "exit_editor",
        },
        fallback=_self_insert_printable,
        name="global",
    )


def minibuffer_local_map() -> Keymap:
    return Keymap.build(
        {
            Keys.Enter: "exit_recursive_edit",
            Keys.Tab: "complete_minibuffer",
            Keys.ControlG: "abort_recursive_edit",
        },
        name="minibuffer",
    )
