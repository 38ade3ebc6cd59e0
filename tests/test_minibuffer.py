import os
import tempfile
import unittest
from pathlib import Path

from prompt_toolkit.keys import Keys
from rich.console import Console

from quill.config.manager import QuillSettings
from quill.core.completion import candidates_completion
from quill.core.controller import ScriptedKeys
from quill.core.editor import Editor
from quill.core.errors import Quit, ReentrancyError
from quill.core.keymap import Keymap
from quill.core.minibuffer import (
    COMPLETION_SLOT,
    read_buffer,
    read_command_name,
    read_file_name,
    read_from_minibuffer,
)


def make_editor(*keys, **settings) -> Editor:
    console = Console(record=True, force_terminal=False, color_system=None, width=100)
    return Editor(ScriptedKeys(keys), console=console, settings=QuillSettings(**settings))


def snapshot(editor: Editor) -> dict:
    return {
        "prompt": editor.echo_area.prompt,
        "active": editor.echo_area.active,
        "text": editor.minibuffer.to_string(),
        "keymap": editor.minibuffer.keymap,
        "completion_fn": editor.minibuffer[COMPLETION_SLOT],
        "window": editor.current_window,
        "buffer": editor.current_buffer,
        "prefix_arg": editor.controller.current_prefix_arg,
    }


class ReadFromMinibufferTests(unittest.TestCase):
    def assert_idle(self, editor: Editor) -> None:
        self.assertFalse(editor.echo_area.active)
        self.assertEqual(editor.echo_area.prompt, "")
        self.assertEqual(editor.minibuffer.to_string(), "")
        self.assertIs(editor.current_window, editor.windows[0])
        self.assertIs(editor.minibuffer.keymap, editor.minibuffer_map)
        self.assertIsNone(editor.minibuffer[COMPLETION_SLOT])
        self.assertEqual(editor.controller.recursive_edit_level, 0)

    def test_accept_returns_text_without_trailing_whitespace(self) -> None:
        editor = make_editor("h", "i", " ", " ", Keys.Enter)
        self.assertEqual(read_from_minibuffer(editor, "Name: "), "hi")
        self.assert_idle(editor)

    def test_empty_input_returns_default(self) -> None:
        editor = make_editor(Keys.Enter)
        self.assertEqual(read_from_minibuffer(editor, "Name: ", default="draft"), "draft")
        self.assert_idle(editor)

    def test_typed_input_wins_over_default(self) -> None:
        editor = make_editor("x", Keys.Enter)
        self.assertEqual(read_from_minibuffer(editor, "Name: ", default="draft"), "x")

    def test_empty_input_without_default_is_empty(self) -> None:
        editor = make_editor(Keys.Enter)
        self.assertEqual(read_from_minibuffer(editor, "Name: "), "")

    def test_default_is_shown_in_prompt(self) -> None:
        seen: list[str] = []

        def record_and_exit(editor: Editor) -> None:
            seen.append(editor.echo_area.prompt)
            editor.controller.exit_recursive_edit()

        editor = make_editor(Keys.Enter)
        keymap = Keymap.build({Keys.Enter: record_and_exit})
        read_from_minibuffer(editor, "Buffer: ", default="notes", keymap=keymap)
        self.assertEqual(seen, ["Buffer (default notes): "])

    def test_prompt_without_colon_is_unchanged_by_default(self) -> None:
        seen: list[str] = []

        def record_and_exit(editor: Editor) -> None:
            seen.append(editor.echo_area.prompt)
            editor.controller.exit_recursive_edit()

        editor = make_editor(Keys.Enter)
        keymap = Keymap.build({Keys.Enter: record_and_exit})
        read_from_minibuffer(editor, "Go ", default="x", keymap=keymap)
        self.assertEqual(seen, ["Go "])

    def test_backspace_edits_input(self) -> None:
        editor = make_editor("a", "b", Keys.Backspace, "c", Keys.Enter)
        self.assertEqual(read_from_minibuffer(editor, "Name: "), "ac")

    def test_abort_raises_quit_and_restores_state(self) -> None:
        editor = make_editor("a", "b", Keys.ControlG)
        with self.assertRaises(Quit):
            read_from_minibuffer(editor, "Name: ")
        self.assert_idle(editor)

    def test_end_of_input_restores_state(self) -> None:
        editor = make_editor("a")
        with self.assertRaises(EOFError):
            read_from_minibuffer(editor, "Name: ")
        self.assert_idle(editor)

    def test_system_exit_restores_state(self) -> None:
        def leave(editor: Editor) -> None:
            raise SystemExit(0)

        editor = make_editor("a", "q")
        keymap = Keymap.build({"q": leave})
        with self.assertRaises(SystemExit):
            read_from_minibuffer(editor, "Name: ", keymap=keymap)
        self.assert_idle(editor)

    def test_command_failure_is_reported_and_prompt_stays_open(self) -> None:
        def explode(editor: Editor) -> None:
            raise ValueError("kaboom")

        editor = make_editor("a", "!", "b", Keys.Enter)
        keymap = Keymap.build(
            {"!": explode, Keys.Enter: "exit_recursive_edit", Keys.ControlG: "abort_recursive_edit"}
        )
        self.assertEqual(read_from_minibuffer(editor, "Name: ", keymap=keymap), "ab")
        backtrace = editor.buffers.get("*Backtrace*")
        self.assertIsNotNone(backtrace)
        assert backtrace
        self.assertTrue(backtrace.to_string().startswith("ValueError: kaboom\n"))
        self.assert_idle(editor)

    def test_restores_focus_buffer_and_prefix_arg(self) -> None:
        editor = make_editor("a", Keys.Enter)
        notes = editor.buffers.new_buffer("notes")
        editor.switch_to_buffer(notes)
        editor.controller.current_prefix_arg = [4]
        read_from_minibuffer(editor, "Name: ")
        self.assertIs(editor.current_buffer, notes)
        self.assertIs(editor.buffers.current, notes)
        self.assertEqual(editor.controller.current_prefix_arg, [4])

    def test_completion_function_is_installed_while_open(self) -> None:
        seen: list[object] = []

        def completion_fn(partial: str):
            return None

        def record_and_exit(editor: Editor) -> None:
            seen.append(editor.minibuffer[COMPLETION_SLOT])
            editor.controller.exit_recursive_edit()

        editor = make_editor(Keys.Enter)
        read_from_minibuffer(
            editor,
            "Name: ",
            completion_fn=completion_fn,
            keymap=Keymap.build({Keys.Enter: record_and_exit}),
        )
        self.assertEqual(seen, [completion_fn])
        self.assertIsNone(editor.minibuffer[COMPLETION_SLOT])

    def test_tab_completes_input(self) -> None:
        editor = make_editor("d", Keys.Tab, Keys.Enter)
        completion_fn = candidates_completion(lambda: ["dog", "dog2"])
        self.assertEqual(read_from_minibuffer(editor, "Pet: ", completion_fn=completion_fn), "dog")

    def test_tab_without_match_keeps_input(self) -> None:
        editor = make_editor("x", Keys.Tab, Keys.Enter)
        completion_fn = candidates_completion(lambda: ["dog"])
        self.assertEqual(read_from_minibuffer(editor, "Pet: ", completion_fn=completion_fn), "x")
        self.assertIn("[No match]", editor.console.export_text())
        messages = editor.buffers.get("*Messages*")
        self.assertTrue(messages is None or "[No match]" not in messages.to_string())


class ReentrancyTests(unittest.TestCase):
    def test_second_prompt_fails_and_leaves_first_untouched(self) -> None:
        outcome: dict = {}

        def nested(editor: Editor) -> None:
            before = snapshot(editor)
            try:
                read_from_minibuffer(editor, "Inner: ")
            except ReentrancyError as exc:
                outcome["error"] = str(exc)
            outcome["unchanged"] = snapshot(editor) == before

        editor = make_editor("a", "?", "b", Keys.Enter)
        keymap = Keymap.build({"?": nested, Keys.Enter: "exit_recursive_edit"})
        self.assertEqual(read_from_minibuffer(editor, "Outer: ", keymap=keymap), "ab")
        self.assertEqual(outcome["error"], "Command attempted to use minibuffer while in minibuffer")
        self.assertTrue(outcome["unchanged"])

    def test_reentrancy_error_is_shown_on_status_line(self) -> None:
        def nested(editor: Editor) -> None:
            read_from_minibuffer(editor, "Inner: ")

        editor = make_editor("?", "z", Keys.Enter)
        keymap = Keymap.build({"?": nested, Keys.Enter: "exit_recursive_edit"})
        self.assertEqual(read_from_minibuffer(editor, "Outer: ", keymap=keymap), "z")
        messages = editor.buffers.get("*Messages*")
        assert messages is not None
        self.assertIn("Command attempted to use minibuffer while in minibuffer", messages.to_string())


class NestedPromptTests(unittest.TestCase):
    def _outer_keymap(self, handler) -> Keymap:
        return Keymap.build(
            {
                "c-o": handler,
                Keys.Enter: "exit_recursive_edit",
                Keys.ControlG: "abort_recursive_edit",
            }
        )

    def test_inner_accept_restores_outer_prompt(self) -> None:
        outcome: dict = {}

        def open_inner(editor: Editor) -> None:
            before = snapshot(editor)
            outcome["inner"] = read_from_minibuffer(editor, "Inner: ")
            outcome["restored"] = snapshot(editor) == before
            outcome["level"] = editor.controller.recursive_edit_level

        editor = make_editor("a", "c-o", "b", Keys.Enter, "c", Keys.Enter, enable_recursive_minibuffers=True)
        keymap = self._outer_keymap(open_inner)
        self.assertEqual(read_from_minibuffer(editor, "Outer: ", keymap=keymap), "ac")
        self.assertEqual(outcome["inner"], "b")
        self.assertTrue(outcome["restored"])
        self.assertEqual(outcome["level"], 1)
        self.assertFalse(editor.echo_area.active)
        self.assertIs(editor.current_window, editor.windows[0])
        self.assertIs(editor.minibuffer.keymap, editor.minibuffer_map)

    def test_inner_abort_restores_outer_prompt(self) -> None:
        outcome: dict = {}

        def open_inner(editor: Editor) -> None:
            before = snapshot(editor)
            try:
                read_from_minibuffer(editor, "Inner: ")
            finally:
                outcome["restored"] = snapshot(editor) == before

        editor = make_editor(
            "a", "c-o", "b", Keys.ControlG, "c", Keys.Enter, enable_recursive_minibuffers=True
        )
        keymap = self._outer_keymap(open_inner)
        self.assertEqual(read_from_minibuffer(editor, "Outer: ", keymap=keymap), "ac")
        self.assertTrue(outcome["restored"])
        messages = editor.buffers.get("*Messages*")
        assert messages is not None
        self.assertIn("Quit", messages.to_string())
        self.assertFalse(editor.echo_area.active)

    def test_outer_abort_after_inner_accept(self) -> None:
        def open_inner(editor: Editor) -> None:
            read_from_minibuffer(editor, "Inner: ")

        editor = make_editor("c-o", "b", Keys.Enter, Keys.ControlG, enable_recursive_minibuffers=True)
        with self.assertRaises(Quit):
            read_from_minibuffer(editor, "Outer: ", keymap=self._outer_keymap(open_inner))
        self.assertFalse(editor.echo_area.active)
        self.assertEqual(editor.minibuffer.to_string(), "")


class SpecializedReaderTests(unittest.TestCase):
    def test_read_command_name_completes_with_dashes(self) -> None:
        editor = make_editor(*"find-f", Keys.Tab, Keys.Enter)
        self.assertEqual(read_command_name(editor, "M-x "), "find_file")

    def test_read_buffer_defaults_to_last_buffer(self) -> None:
        editor = make_editor(Keys.Enter)
        editor.buffers.new_buffer("notes")
        self.assertEqual(read_buffer(editor, "Buffer: "), "notes")

    def test_read_buffer_completes_names(self) -> None:
        editor = make_editor("n", Keys.Tab, Keys.Enter)
        editor.buffers.new_buffer("notes")
        self.assertEqual(read_buffer(editor, "Buffer: "), "notes")

    def test_read_file_name_returns_absolute_path(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            root = Path(tmp)
            (root / "report.txt").write_text("", encoding="utf-8")
            editor = make_editor(*(str(root) + os.sep + "rep"), Keys.Tab, Keys.Enter)
            self.assertEqual(read_file_name(editor, "Find file: "), str(root / "report.txt"))


if __name__ == "__main__":
    unittest.main()
