from __future__ import annotations

import glob
import os
from typing import Callable, Iterable, Optional

CompletionFn = Callable[[str], Optional[str]]


def complete(partial: str, candidates: Iterable[str]) -> Optional[str]:
    """Extend ``partial`` to the longest prefix shared by every matching candidate.

    Returns None when no candidate starts with ``partial``. Otherwise the first
    match is shortened one character at a time until every other match starts
    with it, so the result is never shorter than ``partial``.
    """
    matches = [candidate for candidate in candidates if candidate.startswith(partial)]
    if not matches:
        return None
    first, *rest = matches
    for size in range(len(first), len(partial) - 1, -1):
        prefix = first[:size]
        if all(other.startswith(prefix) for other in rest):
            return prefix
    return partial


def file_name_completion(partial: str) -> Optional[str]:
    """Complete a path against the filesystem.

    A leading ``~`` is expanded first. When exactly one entry matches and it
    is a directory, a trailing separator is added to invite the next level.
    """
    if partial.startswith("~"):
        partial = os.path.expanduser(partial)
    matches = glob.glob(glob.escape(partial) + "*")
    if not matches:
        return None
    # glob collapses repeated separators; keep the directory part as typed.
    directory = partial[: len(partial) - len(os.path.basename(partial))]
    files = sorted(directory + os.path.basename(match) for match in matches)
    file = complete(partial, files)
    if (
        file
        and len(files) == 1
        and os.path.isdir(file)
        and not file.endswith(os.sep)
    ):
        return file + os.sep
    return file


def candidates_completion(provider: Callable[[], Iterable[str]]) -> CompletionFn:
    """Build a completion function over a candidate list read at call time."""

    def completion_fn(partial: str) -> Optional[str]:
        return complete(partial, provider())

    return completion_fn
