"""Keyboard shortcut help overlay."""

from __future__ import annotations

from dataclasses import dataclass
from itertools import zip_longest

from chieftui.states import ViewMode
from chieftui.styles import (
    DIVIDER_STYLE,
    MUTED_COLOR,
    PRIMARY_COLOR,
    TEXT_BRIGHT_COLOR,
    TEXT_COLOR,
    Style,
    center_modal,
    visible_width,
)


@dataclass(frozen=True)
class Shortcut:
    """A single keyboard shortcut."""

    key: str
    description: str


@dataclass(frozen=True)
class ShortcutCategory:
    """A named group of keyboard shortcuts."""

    name: str
    shortcuts: tuple[Shortcut, ...]


def _category(name: str, *pairs: tuple[str, str]) -> ShortcutCategory:
    return ShortcutCategory(name, tuple(Shortcut(key, desc) for key, desc in pairs))


_LOOP_CONTROL = _category(
    "Loop Control",
    ("s", "Start loop"),
    ("p", "Pause (after iteration)"),
    ("x", "Stop immediately"),
    ("+/-", "Adjust max iterations"),
)

_VIEWS = _category(
    "Views",
    ("t", "Toggle log view"),
    ("d", "Toggle diff view"),
    ("?", "Help overlay"),
)

_PRD_CONTROL = _category(
    "PRD Control",
    ("1-9", "Switch to PRD"),
    ("e", "Edit current PRD"),
    ("n", "Create new PRD"),
    ("l", "List/manage PRDs"),
)

_GENERAL = _category(
    "General",
    ("q", "Quit"),
    ("Ctrl+C", "Quit"),
    ("Esc", "Close overlay/modal"),
)

_SCROLLING = _category(
    "Scrolling",
    ("j / ↓", "Scroll down"),
    ("k / ↑", "Scroll up"),
    ("Ctrl+D", "Page down"),
    ("Ctrl+U", "Page up"),
    ("g", "Go to top"),
    ("G", "Go to bottom"),
)

_PICKER_NAVIGATION = _category(
    "Navigation",
    ("Enter", "Create PRD"),
    ("Esc", "Cancel"),
)

_DASHBOARD_NAVIGATION = _category(
    "Navigation",
    ("j / ↓", "Next story"),
    ("k / ↑", "Previous story"),
    ("D", "Delete selected story"),
)

_CATEGORY_STYLE = Style(bold=True, foreground=PRIMARY_COLOR)
_KEY_STYLE = Style(foreground=TEXT_BRIGHT_COLOR, bold=True)
_DESC_STYLE = Style(foreground=TEXT_COLOR)
_TITLE_STYLE = Style(bold=True, foreground=PRIMARY_COLOR, padding=(0, 1))
_FOOTER_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))


def _render_category(category: ShortcutCategory) -> str:
    parts = [_CATEGORY_STYLE.render(category.name), "\n"]
    for shortcut in category.shortcuts:
        key = _KEY_STYLE.render(shortcut.key)
        padding = max(1, 10 - visible_width(key))
        parts.append(f"  {key}{' ' * padding}{_DESC_STYLE.render(shortcut.description)}\n")
    parts.append("\n")
    return "".join(parts)


class HelpOverlay:
    """Overlay listing the keyboard shortcuts for the current view."""

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.view_mode = ViewMode.DASHBOARD

    def set_size(self, width: int, height: int) -> None:
        """Set the screen size the overlay is centred in."""
        self.width = width
        self.height = height

    def set_view_mode(self, mode: ViewMode) -> None:
        """Set the view whose shortcuts are shown."""
        self.view_mode = mode

    def get_categories(self) -> list[ShortcutCategory]:
        """Return the shortcut categories for the current view."""
        if self.view_mode in (ViewMode.LOG, ViewMode.DIFF):
            return [_LOOP_CONTROL, _PRD_CONTROL, _VIEWS, _SCROLLING, _GENERAL]
        if self.view_mode is ViewMode.PICKER:
            return [_PICKER_NAVIGATION, _GENERAL]
        return [_LOOP_CONTROL, _PRD_CONTROL, _VIEWS, _DASHBOARD_NAVIGATION, _GENERAL]

    def render(self) -> str:
        """Render the overlay centred on the screen."""
        modal_width = max(40, min(70, self.width - 10))
        modal_height = max(14, min(24, self.height - 6))

        divider = DIVIDER_STYLE.render("─" * (modal_width - 4))
        categories = self.get_categories()
        col_width = (modal_width - 8) // 2
        split = (len(categories) + 1) // 2

        left_lines = "".join(_render_category(c) for c in categories[:split]).split("\n")
        right_lines = "".join(_render_category(c) for c in categories[split:]).split("\n")

        rows = []
        for left, right in zip_longest(left_lines, right_lines, fillvalue=""):
            padding = max(0, col_width - visible_width(left))
            rows.append(left + " " * (padding + 4) + right)

        content = "\n".join(
            [
                _TITLE_STYLE.render("Keyboard Shortcuts"),
                divider,
                "",
                *rows,
                "",
                divider,
                _FOOTER_STYLE.render("Press ? or Esc to close"),
            ]
        )

        modal = Style(
            border=True,
            border_foreground=PRIMARY_COLOR,
            padding=(1, 2),
            width=modal_width,
            height=modal_height,
        ).render(content)
        return center_modal(modal, self.width, self.height)