"""Terminal styling: colours, boxes, text measuring and layout helpers."""

from __future__ import annotations

import re
from dataclasses import dataclass
from itertools import zip_longest

from wcwidth import wcwidth

from chieftui.states import AppState

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")
_TOKEN_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]|.", re.DOTALL)
_RESET = "\x1b[0m"

# Colour palette
PRIMARY_COLOR = "#00D7FF"
SUCCESS_COLOR = "#5AF78E"
WARNING_COLOR = "#F3F99D"
ERROR_COLOR = "#FF5C57"
MUTED_COLOR = "#6C7086"
BORDER_COLOR = "#45475A"

TEXT_COLOR = "#CDD6F4"
TEXT_MUTED_COLOR = "#6C7086"
TEXT_BRIGHT_COLOR = "#FFFFFF"

BG_COLOR = "#1E1E2E"
BG_SELECTED_COLOR = "#313244"
BG_HIGHLIGHT_COLOR = "#45475A"

# Status icons
ICON_PASSED = "✓"
ICON_IN_PROGRESS = "●"
ICON_PENDING = "○"
ICON_FAILED = "✗"
ICON_PAUSED = "◐"


def _char_width(ch: str) -> int:
    return max(wcwidth(ch), 0)


def _is_escape(token: str) -> bool:
    return len(token) > 1


def strip_ansi(text: str) -> str:
    """Remove ANSI escape sequences from text."""
    return _ANSI_RE.sub("", text)


def visible_width(text: str) -> int:
    """Return the display width of the widest line, ignoring ANSI codes."""
    return max(
        (sum(_char_width(ch) for ch in strip_ansi(line)) for line in text.split("\n")),
        default=0,
    )


def _split_prefix(text: str, width: int) -> tuple[str, str]:
    tokens = _TOKEN_RE.findall(text)
    head: list[str] = []
    used = 0
    cut = len(tokens)
    for index, token in enumerate(tokens):
        cw = 0 if _is_escape(token) else _char_width(token)
        if used + cw > width and used > 0:
            cut = index
            break
        head.append(token)
        used += cw
    return "".join(head), "".join(tokens[cut:])


def _wrap_line(line: str, width: int) -> list[str]:
    if visible_width(line) <= width:
        return [line]

    words: list[tuple[str, int]] = []
    buf: list[str] = []
    buf_width = 0
    for token in _TOKEN_RE.findall(line):
        if token == " ":
            words.append(("".join(buf), buf_width))
            buf, buf_width = [], 0
        else:
            buf.append(token)
            if not _is_escape(token):
                buf_width += _char_width(token)
    words.append(("".join(buf), buf_width))

    out: list[str] = []
    current: str | None = None
    current_width = 0
    for text, text_width in words:
        if current is not None and current_width + 1 + text_width <= width:
            current += " " + text
            current_width += 1 + text_width
            continue
        if current is not None:
            out.append(current)
        while text_width > width:
            head, text = _split_prefix(text, width)
            out.append(head)
            text_width = visible_width(text)
        current, current_width = text, text_width
    out.append(current if current is not None else "")
    return out


def wrap_text(text: str, width: int) -> str:
    """Word-wrap text to the given width, keeping existing line breaks."""
    if width <= 0:
        return text
    return "\n".join(piece for line in text.split("\n") for piece in _wrap_line(line, width))


def _hex_rgb(color: str) -> tuple[int, int, int]:
    value = color.lstrip("#")
    return int(value[0:2], 16), int(value[2:4], 16), int(value[4:6], 16)


def _paint(text: str, codes: str) -> str:
    if not text or not codes:
        return text
    return f"\x1b[{codes}m{text}{_RESET}"


@dataclass(frozen=True)
class Style:
    """An immutable text style: colours, attributes, padding, border and size.

    ``padding`` is (vertical, horizontal). ``width`` includes padding but not
    the border; ``height`` is a minimum height including padding.
    """

    foreground: str | None = None
    background: str | None = None
    bold: bool = False
    blink: bool = False
    padding: tuple[int, int] = (0, 0)
    border: bool = False
    border_foreground: str | None = None
    width: int | None = None
    height: int | None = None

    def _text_codes(self) -> str:
        parts = []
        if self.bold:
            parts.append("1")
        if self.blink:
            parts.append("5")
        if self.foreground:
            parts.append("38;2;%d;%d;%d" % _hex_rgb(self.foreground))
        if self.background:
            parts.append("48;2;%d;%d;%d" % _hex_rgb(self.background))
        return ";".join(parts)

    def _background_codes(self) -> str:
        if not self.background:
            return ""
        return "48;2;%d;%d;%d" % _hex_rgb(self.background)

    def render(self, text: str) -> str:
        """Render text with this style."""
        vpad, hpad = self.padding
        lines = text.replace("\r\n", "\n").replace("\t", "    ").split("\n")

        if self.width is not None:
            wrap_at = self.width - 2 * hpad
            if wrap_at > 0:
                lines = [piece for line in lines for piece in _wrap_line(line, wrap_at)]

        inner = max((visible_width(line) for line in lines), default=0)
        if self.width is not None:
            inner = max(inner, self.width - 2 * hpad)

        codes = self._text_codes()
        bg = self._background_codes()
        side = _paint(" " * hpad, bg)
        full_width = inner + 2 * hpad
        blank = _paint(" " * full_width, bg)

        rows = [blank] * vpad
        for line in lines:
            filler = " " * (inner - visible_width(line))
            rows.append(side + _paint(line, codes) + _paint(filler, bg) + side)
        rows.extend([blank] * vpad)

        if self.height is not None and len(rows) < self.height:
            rows.extend([blank] * (self.height - len(rows)))

        if self.border:
            border_codes = (
                "38;2;%d;%d;%d" % _hex_rgb(self.border_foreground)
                if self.border_foreground
                else ""
            )
            left = _paint("│", border_codes)
            right = _paint("│", border_codes)
            top = _paint("╭" + "─" * full_width + "╮", border_codes)
            bottom = _paint("╰" + "─" * full_width + "╯", border_codes)
            rows = [top, *(left + row + right for row in rows), bottom]

        return "\n".join(rows)


def join_horizontal(*blocks: str) -> str:
    """Place text blocks side by side, aligned to the top."""
    if not blocks:
        return ""
    split = [block.split("\n") for block in blocks]
    widths = [visible_width(block) for block in blocks]
    rows = []
    for row in zip_longest(*split, fillvalue=""):
        rows.append(
            "".join(cell + " " * (width - visible_width(cell)) for cell, width in zip(row, widths))
        )
    return "\n".join(rows)


def center_modal(modal: str, width: int, height: int) -> str:
    """Centre a rendered modal within a screen of the given size."""
    lines = modal.split("\n")
    top = max(0, (height - len(lines)) // 2)
    left = max(0, (width - visible_width(modal)) // 2)
    pad = " " * left
    return "\n" * top + "".join(f"{pad}{line}\n" for line in lines)


# Header styles
HEADER_STYLE = Style(bold=True, foreground=PRIMARY_COLOR, padding=(0, 1))
HEADER_BORDER_STYLE = Style(foreground=BORDER_COLOR)

# Footer styles
FOOTER_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))
SHORTCUT_KEY_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
SHORTCUT_DESC_STYLE = Style(foreground=MUTED_COLOR)

# Panel styles
PANEL_STYLE = Style(border=True, border_foreground=BORDER_COLOR, padding=(0, 1))
PANEL_ACTIVE_STYLE = Style(border=True, border_foreground=PRIMARY_COLOR, padding=(0, 1))
PANEL_TITLE_STYLE = Style(bold=True, foreground=PRIMARY_COLOR)

# Selection styles
SELECTED_STYLE = Style(background=BG_SELECTED_COLOR, foreground=TEXT_COLOR)
UNSELECTED_STYLE = Style(foreground=TEXT_COLOR)

# Story status styles
STATUS_PASSED_STYLE = Style(foreground=SUCCESS_COLOR)
STATUS_IN_PROGRESS_STYLE = Style(foreground=PRIMARY_COLOR)
STATUS_PENDING_STYLE = Style(foreground=MUTED_COLOR)
STATUS_FAILED_STYLE = Style(foreground=ERROR_COLOR)
STATUS_PAUSED_STYLE = Style(foreground=WARNING_COLOR)

# State badge styles
STATE_READY_STYLE = Style(bold=True, foreground=MUTED_COLOR)
STATE_RUNNING_STYLE = Style(bold=True, foreground=PRIMARY_COLOR)
STATE_PAUSED_STYLE = Style(bold=True, foreground=WARNING_COLOR)
STATE_STOPPED_STYLE = Style(bold=True, foreground=MUTED_COLOR)
STATE_COMPLETE_STYLE = Style(bold=True, foreground=SUCCESS_COLOR)
STATE_ERROR_STYLE = Style(bold=True, foreground=ERROR_COLOR)

# Title and label styles
TITLE_STYLE = Style(bold=True, foreground=TEXT_COLOR)
LABEL_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
SUBTITLE_STYLE = Style(foreground=MUTED_COLOR)
DESCRIPTION_STYLE = Style(foreground=TEXT_COLOR)

# Progress bar styles
PROGRESS_BAR_FILL_STYLE = Style(foreground=SUCCESS_COLOR)
PROGRESS_BAR_EMPTY_STYLE = Style(foreground=MUTED_COLOR)
PROGRESS_PERCENT_STYLE = Style(foreground=MUTED_COLOR)

# Activity line styles
ACTIVITY_RUNNING_STYLE = Style(foreground=PRIMARY_COLOR, padding=(0, 1))
ACTIVITY_ERROR_STYLE = Style(foreground=ERROR_COLOR, padding=(0, 1))
ACTIVITY_COMPLETE_STYLE = Style(foreground=SUCCESS_COLOR, padding=(0, 1))
ACTIVITY_MUTED_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))

# Divider styles
DIVIDER_STYLE = Style(foreground=BORDER_COLOR)
THICK_DIVIDER_STYLE = Style(foreground=BORDER_COLOR, bold=True)

# Tab bar styles
TAB_STYLE = Style(border=True, border_foreground=BORDER_COLOR, padding=(0, 1))
TAB_ACTIVE_STYLE = Style(
    border=True,
    border_foreground=PRIMARY_COLOR,
    background=BG_SELECTED_COLOR,
    bold=True,
    padding=(0, 1),
)
TAB_RUNNING_STYLE = Style(border=True, border_foreground=PRIMARY_COLOR, padding=(0, 1))
TAB_ERROR_STYLE = Style(border=True, border_foreground=ERROR_COLOR, padding=(0, 1))
TAB_NEW_STYLE = Style(
    border=True, border_foreground=MUTED_COLOR, foreground=MUTED_COLOR, padding=(0, 1)
)

_STATE_STYLES = {
    AppState.RUNNING: STATE_RUNNING_STYLE,
    AppState.PAUSED: STATE_PAUSED_STYLE,
    AppState.COMPLETE: STATE_COMPLETE_STYLE,
    AppState.ERROR: STATE_ERROR_STYLE,
    AppState.STOPPED: STATE_STOPPED_STYLE,
}

_ACTIVITY_STYLES = {
    AppState.RUNNING: ACTIVITY_RUNNING_STYLE,
    AppState.ERROR: ACTIVITY_ERROR_STYLE,
    AppState.COMPLETE: ACTIVITY_COMPLETE_STYLE,
}


def get_status_icon(passed: bool, in_progress: bool) -> str:
    """Return the styled icon for a story's status."""
    if passed:
        return STATUS_PASSED_STYLE.render(ICON_PASSED)
    if in_progress:
        return STATUS_IN_PROGRESS_STYLE.render(ICON_IN_PROGRESS)
    return STATUS_PENDING_STYLE.render(ICON_PENDING)


def get_state_style(state: AppState) -> Style:
    """Return the header badge style for an application state."""
    return _STATE_STYLES.get(state, STATE_READY_STYLE)


def get_activity_style(state: AppState) -> Style:
    """Return the activity line style for an application state."""
    return _ACTIVITY_STYLES.get(state, ACTIVITY_MUTED_STYLE)