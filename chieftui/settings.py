"""Settings overlay for editing the project configuration."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from chieftui.styles import (
    DIVIDER_STYLE,
    ERROR_COLOR,
    MUTED_COLOR,
    PRIMARY_COLOR,
    SUCCESS_COLOR,
    TEXT_BRIGHT_COLOR,
    TEXT_COLOR,
    Style,
    center_modal,
    visible_width,
)

KEY_WORKTREE_SETUP = "worktree.setup"
KEY_PUSH = "onComplete.push"
KEY_CREATE_PR = "onComplete.createPR"

_TITLE_STYLE = Style(bold=True, foreground=PRIMARY_COLOR)
_PATH_STYLE = Style(foreground=MUTED_COLOR)
_FOOTER_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))
_SECTION_STYLE = Style(bold=True, foreground=PRIMARY_COLOR, padding=(0, 1))
_LABEL_STYLE = Style(foreground=TEXT_COLOR)
_SELECTED_LABEL_STYLE = Style(foreground=TEXT_BRIGHT_COLOR, bold=True)
_VALUE_STYLE = Style(foreground=SUCCESS_COLOR)
_VALUE_OFF_STYLE = Style(foreground=MUTED_COLOR)
_CURSOR_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
_EDIT_STYLE = Style(foreground=TEXT_BRIGHT_COLOR)
_EDIT_CURSOR_STYLE = Style(foreground=PRIMARY_COLOR)
_ERROR_HEADER_STYLE = Style(bold=True, foreground=ERROR_COLOR, padding=(0, 1))
_ERROR_MSG_STYLE = Style(foreground=TEXT_COLOR, padding=(0, 1))
_HINT_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))


class SettingsItemType(Enum):
    """Kind of value a setting holds."""

    BOOL = "bool"
    STRING = "string"


@dataclass
class SettingsItem:
    """A single editable setting."""

    section: str
    label: str
    key: str
    type: SettingsItemType
    bool_val: bool = False
    string_val: str = ""


@dataclass
class WorktreeConfig:
    """Worktree settings."""

    setup: str = ""


@dataclass
class OnCompleteConfig:
    """What to do when a PRD completes."""

    push: bool = False
    create_pr: bool = False


@dataclass
class Config:
    """Project configuration edited by the settings overlay."""

    worktree: WorktreeConfig = field(default_factory=WorktreeConfig)
    on_complete: OnCompleteConfig = field(default_factory=OnCompleteConfig)

    @classmethod
    def default(cls) -> Config:
        """Return a configuration with default values."""
        return cls()


class SettingsOverlay:
    """Modal overlay listing editable settings."""

    def __init__(self) -> None:
        self.width = 0
        self.height = 0
        self.items: list[SettingsItem] = []
        self.selected_index = 0
        self.editing = False
        self.edit_buffer = ""
        self.gh_error = ""
        self._show_gh_error = False

    def set_size(self, width: int, height: int) -> None:
        """Set the screen size the overlay is centred in."""
        self.width = width
        self.height = height

    def load_from_config(self, cfg: Config) -> None:
        """Fill the settings items from a configuration."""
        self.items = [
            SettingsItem(
                "Worktree",
                "Setup command",
                KEY_WORKTREE_SETUP,
                SettingsItemType.STRING,
                string_val=cfg.worktree.setup,
            ),
            SettingsItem(
                "On Complete",
                "Push to remote",
                KEY_PUSH,
                SettingsItemType.BOOL,
                bool_val=cfg.on_complete.push,
            ),
            SettingsItem(
                "On Complete",
                "Create pull request",
                KEY_CREATE_PR,
                SettingsItemType.BOOL,
                bool_val=cfg.on_complete.create_pr,
            ),
        ]
        self.selected_index = 0
        self.editing = False
        self.edit_buffer = ""
        self.gh_error = ""
        self._show_gh_error = False

    def apply_to_config(self, cfg: Config) -> None:
        """Write the current values back into a configuration."""
        for item in self.items:
            if item.key == KEY_WORKTREE_SETUP:
                cfg.worktree.setup = item.string_val
            elif item.key == KEY_PUSH:
                cfg.on_complete.push = item.bool_val
            elif item.key == KEY_CREATE_PR:
                cfg.on_complete.create_pr = item.bool_val

    @property
    def selected_item(self) -> SettingsItem | None:
        """The currently selected item, if any."""
        if 0 <= self.selected_index < len(self.items):
            return self.items[self.selected_index]
        return None

    def move_up(self) -> None:
        """Move the selection up."""
        if self.selected_index > 0:
            self.selected_index -= 1

    def move_down(self) -> None:
        """Move the selection down."""
        if self.selected_index < len(self.items) - 1:
            self.selected_index += 1

    def start_editing(self) -> None:
        """Begin editing the selected string value."""
        item = self.selected_item
        if item is not None and item.type is SettingsItemType.STRING:
            self.editing = True
            self.edit_buffer = item.string_val

    def confirm_edit(self) -> None:
        """Store the edit buffer in the selected item."""
        item = self.selected_item
        if self.editing and item is not None:
            item.string_val = self.edit_buffer
            self.editing = False
            self.edit_buffer = ""

    def cancel_edit(self) -> None:
        """Discard the edit buffer."""
        self.editing = False
        self.edit_buffer = ""

    def add_edit_char(self, ch: str) -> None:
        """Append a character to the edit buffer."""
        self.edit_buffer += ch

    def delete_edit_char(self) -> None:
        """Remove the last character from the edit buffer."""
        self.edit_buffer = self.edit_buffer[:-1]

    def toggle_bool(self) -> tuple[str, bool]:
        """Toggle the selected boolean; return its key and new value.

        Returns ``("", False)`` when the selected item is not a boolean.
        """
        item = self.selected_item
        if item is not None and item.type is SettingsItemType.BOOL:
            item.bool_val = not item.bool_val
            return item.key, item.bool_val
        return "", False

    def revert_toggle(self) -> None:
        """Undo the last toggle of the selected boolean."""
        item = self.selected_item
        if item is not None and item.type is SettingsItemType.BOOL:
            item.bool_val = not item.bool_val

    def set_gh_error(self, message: str) -> None:
        """Show a GitHub CLI error."""
        self.gh_error = message
        self._show_gh_error = True

    @property
    def has_gh_error(self) -> bool:
        """Whether a GitHub CLI error is being shown."""
        return self._show_gh_error

    def dismiss_gh_error(self) -> None:
        """Hide the GitHub CLI error."""
        self._show_gh_error = False
        self.gh_error = ""

    def render(self) -> str:
        """Render the overlay centred on the screen."""
        modal_width = max(40, min(60, self.width - 10))
        modal_height = max(12, min(18, self.height - 6))

        title = _TITLE_STYLE.render("Settings")
        path = _PATH_STYLE.render(".chief/config.yaml")
        title_padding = max(1, modal_width - 4 - visible_width(title) - visible_width(path))
        divider = DIVIDER_STYLE.render("─" * (modal_width - 4))

        if self._show_gh_error:
            body = self._render_gh_error()
            footer = "Press any key to dismiss"
        else:
            body = self._render_items(modal_width)
            footer = "Enter: save  │  Esc: cancel" if self.editing else (
                "Enter: toggle/edit  │  j/k: navigate  │  Esc: close"
            )

        content = (
            f" {title}{' ' * title_padding}{path}\n"
            f"{divider}\n\n"
            f"{body}\n"
            f"{divider}\n"
            f"{_FOOTER_STYLE.render(footer)}"
        )

        modal = Style(
            border=True,
            border_foreground=PRIMARY_COLOR,
            padding=(1, 2),
            width=modal_width,
            height=modal_height,
        ).render(content)
        return center_modal(modal, self.width, self.height)

    def _render_value(self, item: SettingsItem, selected: bool, modal_width: int) -> str:
        if item.type is SettingsItemType.BOOL:
            return _VALUE_STYLE.render("Yes") if item.bool_val else _VALUE_OFF_STYLE.render("No")
        if selected and self.editing:
            cursor = _EDIT_CURSOR_STYLE.render("█")
            return _EDIT_STYLE.render(self.edit_buffer or "(empty)") + cursor
        if not item.string_val:
            return _VALUE_OFF_STYLE.render("(not set)")
        value = item.string_val
        max_width = max(10, modal_width - 12 - len(item.label))
        if len(value) > max_width:
            value = value[: max_width - 1] + "…"
        return _VALUE_STYLE.render(value)

    def _render_items(self, modal_width: int) -> str:
        parts: list[str] = []
        current_section = ""
        for index, item in enumerate(self.items):
            if item.section != current_section:
                if current_section:
                    parts.append("\n")
                parts.append(_SECTION_STYLE.render(item.section) + "\n")
                current_section = item.section

            selected = index == self.selected_index
            cursor = _CURSOR_STYLE.render("  > ") if selected else "    "
            label_style = _SELECTED_LABEL_STYLE if selected else _LABEL_STYLE
            value = self._render_value(item, selected, modal_width)

            label_width = visible_width(item.label) + 4
            padding = max(2, modal_width - 4 - label_width - visible_width(value) - 2)
            parts.append(f"{cursor}{label_style.render(item.label)}{' ' * padding}{value}\n")
        return "".join(parts)

    def _render_gh_error(self) -> str:
        return (
            f"{_ERROR_HEADER_STYLE.render('GitHub CLI Error')}\n\n"
            f"{_ERROR_MSG_STYLE.render(self.gh_error)}\n\n"
            f"{_HINT_STYLE.render('Install: https://cli.github.com')}\n"
            f"{_HINT_STYLE.render('PR creation has been disabled.')}"
        )