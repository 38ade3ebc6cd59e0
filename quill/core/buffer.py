from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Iterator, List, Optional

if TYPE_CHECKING:
    from .keymap import Keymap


class Buffer:
    """In-memory text with a point, a key map and named metadata slots."""

    def __init__(self, name: str, *, keymap: Optional["Keymap"] = None) -> None:
        self.name = name
        self.keymap = keymap
        self.modified = False
        self._text = ""
        self._point = 0
        self._slots: Dict[str, Any] = {}

    def __getitem__(self, key: str) -> Any:
        return self._slots.get(key)

    def __setitem__(self, key: str, value: Any) -> None:
        self._slots[key] = value

    def __str__(self) -> str:
        return self._text

    def __repr__(self) -> str:
        return f"Buffer({self.name!r})"

    def to_string(self) -> str:
        return self._text

    @property
    def point(self) -> int:
        return self._point

    @property
    def point_min(self) -> int:
        return 0

    @property
    def point_max(self) -> int:
        return len(self._text)

    def goto_char(self, pos: int) -> None:
        self._point = max(self.point_min, min(pos, self.point_max))

    def beginning_of_buffer(self) -> None:
        self._point = self.point_min

    def end_of_buffer(self) -> None:
        self._point = self.point_max

    @property
    def current_line(self) -> int:
        """1-based line number of point."""
        return self._text.count("\n", 0, self._point) + 1

    def next_line(self) -> None:
        newline = self._text.find("\n", self._point)
        self._point = self.point_max if newline == -1 else newline + 1

    def insert(self, text: str) -> None:
        if not text:
            return
        self._text = self._text[: self._point] + text + self._text[self._point :]
        self._point += len(text)
        self.modified = True

    def delete_region(self, start: int, end: int) -> None:
        start, end = sorted((start, end))
        start = max(start, self.point_min)
        end = min(end, self.point_max)
        if start == end:
            return
        self._text = self._text[:start] + self._text[end:]
        if self._point > end:
            self._point -= end - start
        elif self._point > start:
            self._point = start
        self.modified = True

    def backward_delete_char(self, count: int = 1) -> None:
        self.delete_region(self._point - count, self._point)

    def clear(self) -> None:
        self.delete_region(self.point_min, self.point_max)


class BufferList:
    """Named buffers in most-recently-selected order."""

    def __init__(self) -> None:
        self._buffers: List[Buffer] = []
        self._current: Optional[Buffer] = None

    def __iter__(self) -> Iterator[Buffer]:
        return iter(self._buffers)

    def __contains__(self, buffer: object) -> bool:
        return buffer in self._buffers

    def get(self, name: str) -> Optional[Buffer]:
        for buffer in self._buffers:
            if buffer.name == name:
                return buffer
        return None

    def names(self) -> List[str]:
        return [buffer.name for buffer in self._buffers]

    def new_buffer(self, name: str, **kwargs: Any) -> Buffer:
        buffer = Buffer(self._unique_name(name), **kwargs)
        self._buffers.append(buffer)
        return buffer

    def find_or_new(self, name: str, **kwargs: Any) -> Buffer:
        return self.get(name) or self.new_buffer(name, **kwargs)

    def remove(self, buffer: Buffer) -> None:
        if buffer in self._buffers:
            self._buffers.remove(buffer)
        if self._current is buffer:
            self._current = self._buffers[0] if self._buffers else None

    @property
    def current(self) -> Optional[Buffer]:
        return self._current

    @current.setter
    def current(self, buffer: Optional[Buffer]) -> None:
        self._current = buffer
        if buffer is not None and buffer in self._buffers:
            self._buffers.remove(buffer)
            self._buffers.insert(0, buffer)

    @property
    def last(self) -> Optional[Buffer]:
        """The most recently selected buffer other than the current one."""
        for buffer in self._buffers:
            if buffer is not self._current:
                return buffer
        return None

    def _unique_name(self, name: str) -> str:
        if self.get(name) is None:
            return name
        index = 2
        while self.get(f"{name}<{index}>") is not None:
            index += 1
        return f"{name}<{index}>"
