"""Scrollable viewer for the agent loop's activity log."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from typing import Any

from pygments import highlight
from pygments.formatters import Terminal256Formatter
from pygments.lexers import TextLexer, get_lexer_by_name, get_lexer_for_filename
from pygments.styles import get_style_by_name
from pygments.util import ClassNotFound

from chieftui.states import Event, EventType
from chieftui.styles import (
    ERROR_COLOR,
    MUTED_COLOR,
    PRIMARY_COLOR,
    SUCCESS_COLOR,
    TEXT_COLOR,
    WARNING_COLOR,
    Style,
    wrap_text,
)

_DISPLAYED_EVENTS = frozenset(
    {
        EventType.ASSISTANT_TEXT,
        EventType.TOOL_START,
        EventType.TOOL_RESULT,
        EventType.STORY_STARTED,
        EventType.COMPLETE,
        EventType.ERROR,
        EventType.RETRYING,
    }
)

_TOOL_ICONS = {
    "Read": "📖",
    "Edit": "✏️",
    "Write": "📝",
    "Bash": "🔨",
    "Glob": "🔍",
    "Grep": "🔎",
    "Task": "🤖",
    "WebFetch": "🌐",
    "WebSearch": "🌐",
}
_DEFAULT_ICON = "⚙️"

# Which input keys hold a tool's main argument, in order of preference.
_TOOL_ARGUMENT_KEYS = {
    "Read": ("file_path",),
    "Edit": ("file_path",),
    "Write": ("file_path",),
    "Bash": ("command",),
    "Glob": ("pattern",),
    "Grep": ("pattern",),
    "WebFetch": ("url", "query"),
    "WebSearch": ("url", "query"),
    "Task": ("description",),
}

_MAX_HIGHLIGHTED_LINES = 20
_HIGHLIGHT_STYLE = "tokyonight-night"
_FALLBACK_HIGHLIGHT_STYLE = "monokai"

_TEXT_STYLE = Style(foreground=TEXT_COLOR)
_MUTED_STYLE = Style(foreground=MUTED_COLOR)
_CHECK_STYLE = Style(foreground=SUCCESS_COLOR)
_TOOL_NAME_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
_CURSOR_STYLE = Style(foreground=PRIMARY_COLOR, blink=True)
_EMPTY_STYLE = Style(foreground=MUTED_COLOR, padding=(1, 2))
_STORY_STYLE = Style(foreground=PRIMARY_COLOR, bold=True, padding=(0, 1))
_STORY_DIVIDER_STYLE = Style(foreground=PRIMARY_COLOR)
_COMPLETE_STYLE = Style(foreground=SUCCESS_COLOR, bold=True, padding=(0, 1))
_COMPLETE_DIVIDER_STYLE = Style(foreground=SUCCESS_COLOR)
_ERROR_STYLE = Style(foreground=ERROR_COLOR, bold=True)
_RETRY_STYLE = Style(foreground=WARNING_COLOR, bold=True)


def get_tool_icon(tool_name: str) -> str:
    """Return the icon shown for a tool."""
    return _TOOL_ICONS.get(tool_name, _DEFAULT_ICON)


def get_tool_argument(tool_name: str, tool_input: dict[str, Any] | None) -> str:
    """Return the main argument of a tool call, for display."""
    if not tool_input:
        return ""
    for key in _TOOL_ARGUMENT_KEYS.get(tool_name, ()):
        value = tool_input.get(key)
        if isinstance(value, str):
            if tool_name == "Bash" and len(value) > 60:
                return value[:57] + "..."
            return value
    return ""


def _strip_line_number(line: str) -> str:
    positions = [pos for pos in (line.find("→"), line.find("\t")) if pos != -1]
    if not positions:
        return line
    idx = min(positions)
    if not 0 < idx < 10:
        return line
    prefix = line[:idx]
    if all(ch == " " or ch.isdigit() for ch in prefix) and any(ch.isdigit() for ch in prefix):
        return line[idx + 1 :]
    return line


def strip_line_numbers(code: str) -> str:
    """Remove the line-number prefixes that Read tool output carries."""
    return "\n".join(_strip_line_number(line) for line in code.split("\n"))


def _lexer_for(file_path: str):
    try:
        return get_lexer_for_filename(file_path, ensurenl=False)
    except ClassNotFound:
        pass
    ext = os.path.splitext(file_path)[1].lstrip(".")
    if ext:
        try:
            return get_lexer_by_name(ext, ensurenl=False)
        except ClassNotFound:
            pass
    return TextLexer(ensurenl=False)


def _highlight_style():
    try:
        return get_style_by_name(_HIGHLIGHT_STYLE)
    except ClassNotFound:
        return get_style_by_name(_FALLBACK_HIGHLIGHT_STYLE)


def _highlight_code(code: str, file_path: str) -> str:
    code = strip_line_numbers(code)
    try:
        result = highlight(code, _lexer_for(file_path), Terminal256Formatter(style=_highlight_style()))
    except Exception:  # noqa: BLE001 - any highlighting failure falls back to plain text
        return ""
    if result.endswith("\n") and not code.endswith("\n"):
        result = result[:-1]
    return result


@dataclass
class LogEntry:
    """A single entry shown in the log viewer."""

    type: EventType
    text: str = ""
    tool: str = ""
    tool_input: dict[str, Any] | None = None
    story_id: str = ""
    file_path: str = ""


@dataclass
class LogViewer:
    """Scrollable log of loop events with optional auto-scroll."""

    entries: list[LogEntry] = field(default_factory=list)
    scroll_pos: int = 0
    height: int = 0
    width: int = 0
    auto_scroll: bool = True
    last_read_file_path: str = ""

    def add_event(self, event: Event) -> None:
        """Add a loop event, skipping kinds that are not displayed."""
        entry = LogEntry(
            type=event.type,
            text=event.text,
            tool=event.tool,
            tool_input=event.tool_input,
            story_id=event.story_id,
        )

        if event.type is EventType.TOOL_START and event.tool == "Read":
            file_path = (event.tool_input or {}).get("file_path")
            if isinstance(file_path, str):
                self.last_read_file_path = file_path

        if event.type is EventType.TOOL_RESULT and self.last_read_file_path:
            entry.file_path = self.last_read_file_path
            self.last_read_file_path = ""

        if event.type not in _DISPLAYED_EVENTS:
            return
        self.entries.append(entry)

        if self.auto_scroll and self.height > 0:
            self.scroll_to_bottom()

    def set_size(self, width: int, height: int) -> None:
        """Set the viewport size."""
        self.width = width
        self.height = height

    def scroll_up(self) -> None:
        """Scroll up one line, turning auto-scroll off."""
        if self.scroll_pos > 0:
            self.scroll_pos -= 1
            self.auto_scroll = False

    def scroll_down(self) -> None:
        """Scroll down one line; auto-scroll resumes at the bottom."""
        max_scroll = self._max_scroll_pos()
        if self.scroll_pos < max_scroll:
            self.scroll_pos += 1
        if self.scroll_pos >= max_scroll:
            self.auto_scroll = True

    def page_up(self) -> None:
        """Scroll up half a page."""
        self.scroll_pos = max(0, self.scroll_pos - self._half_page())
        self.auto_scroll = False

    def page_down(self) -> None:
        """Scroll down half a page; auto-scroll resumes at the bottom."""
        max_scroll = self._max_scroll_pos()
        self.scroll_pos = min(self.scroll_pos + self._half_page(), max_scroll)
        if self.scroll_pos >= max_scroll:
            self.auto_scroll = True

    def scroll_to_top(self) -> None:
        """Jump to the first line."""
        self.scroll_pos = 0
        self.auto_scroll = False

    def scroll_to_bottom(self) -> None:
        """Jump to the last line and resume auto-scroll."""
        self.scroll_pos = self._max_scroll_pos()
        self.auto_scroll = True

    def clear(self) -> None:
        """Remove every entry."""
        self.entries = []
        self.scroll_pos = 0
        self.auto_scroll = True

    def _half_page(self) -> int:
        return max(1, self.height // 2)

    def _max_scroll_pos(self) -> int:
        return max(0, self._total_lines() - self.height)

    def _total_lines(self) -> int:
        if self.width <= 0:
            return len(self.entries)
        return sum(self._entry_height(entry) for entry in self.entries)

    def _entry_height(self, entry: LogEntry) -> int:
        if entry.type in (EventType.TOOL_START, EventType.TOOL_RESULT):
            return 1
        if not entry.text:
            return 1
        return wrap_text(entry.text, self.width - 4).count("\n") + 1

    def render(self) -> str:
        """Render the visible part of the log."""
        if not self.entries:
            return _EMPTY_STYLE.render(
                "No log entries yet. Start the loop to see the agent's activity."
            )

        all_lines = [line for entry in self.entries for line in self._render_entry(entry)]

        start = max(0, self.scroll_pos)
        if start >= len(all_lines):
            start = max(0, len(all_lines) - 1)
        end = min(start + self.height, len(all_lines))

        content = "\n".join(all_lines[start:end])
        if self.auto_scroll and self.entries[-1].type in (
            EventType.ASSISTANT_TEXT,
            EventType.TOOL_START,
        ):
            content += "\n" + _CURSOR_STYLE.render("▌")
        return content

    def _render_entry(self, entry: LogEntry) -> list[str]:
        renderers = {
            EventType.TOOL_START: self._render_tool_card,
            EventType.TOOL_RESULT: self._render_tool_result,
            EventType.STORY_STARTED: self._render_story_started,
            EventType.COMPLETE: self._render_complete,
            EventType.ERROR: self._render_error,
            EventType.RETRYING: self._render_retrying,
        }
        return renderers.get(entry.type, self._render_text)(entry)

    def _render_text(self, entry: LogEntry) -> list[str]:
        if not entry.text:
            return []
        wrapped = wrap_text(entry.text, self.width - 4)
        return [_TEXT_STYLE.render(line) for line in wrapped.split("\n")]

    def _render_tool_card(self, entry: LogEntry) -> list[str]:
        tool_name = entry.tool or "unknown"
        icon = get_tool_icon(tool_name)
        arg = get_tool_argument(tool_name, entry.tool_input)
        name = _TOOL_NAME_STYLE.render(tool_name)
        if not arg:
            return [f"{icon} {name}"]
        max_arg_len = self.width - len(tool_name) - 8
        if 0 < max_arg_len < len(arg):
            arg = arg[: max(0, max_arg_len - 3)] + "..."
        return [f"{icon} {name} {_TEXT_STYLE.render(arg)}"]

    def _render_tool_result(self, entry: LogEntry) -> list[str]:
        marker = _CHECK_STYLE.render("  ↳ ")
        text = entry.text
        if not text:
            return [_MUTED_STYLE.render(marker + "(no output)")]

        if entry.file_path:
            highlighted = _highlight_code(text, entry.file_path)
            if highlighted:
                lines = highlighted.split("\n")
                result = [marker]
                result.extend("    " + line for line in lines[:_MAX_HIGHLIGHTED_LINES])
                if len(lines) > _MAX_HIGHLIGHTED_LINES:
                    hidden = len(lines) - _MAX_HIGHLIGHTED_LINES
                    result.append(_MUTED_STYLE.render(f"    ... ({hidden} more lines)"))
                return result

        max_len = max(20, self.width - 8)
        if len(text) > max_len:
            text = text[: max_len - 3] + "..."
        return [_MUTED_STYLE.render(marker + text)]

    def _render_story_started(self, entry: LogEntry) -> list[str]:
        divider = _STORY_DIVIDER_STYLE.render("─" * (self.width - 4))
        return [
            "",
            divider,
            _STORY_STYLE.render(f"▶ Working on: {entry.story_id}"),
            divider,
            "",
        ]

    def _render_complete(self, entry: LogEntry) -> list[str]:
        divider = _COMPLETE_DIVIDER_STYLE.render("═" * (self.width - 4))
        return ["", divider, _COMPLETE_STYLE.render("✓ All stories complete!"), divider]

    def _render_error(self, entry: LogEntry) -> list[str]:
        return [_ERROR_STYLE.render("✗ Error: " + (entry.text or "An error occurred"))]

    def _render_retrying(self, entry: LogEntry) -> list[str]:
        return [_RETRY_STYLE.render("🔄 " + (entry.text or "Retrying..."))]