"""Data and rendering pieces of the PRD picker: entries, rows and dialogs."""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from enum import IntEnum
from typing import Mapping

from chieftui.states import LoopState
from chieftui.styles import (
    DIVIDER_STYLE,
    ERROR_COLOR,
    MUTED_COLOR,
    PRIMARY_COLOR,
    PROGRESS_BAR_EMPTY_STYLE,
    PROGRESS_BAR_FILL_STYLE,
    SELECTED_STYLE,
    SUCCESS_COLOR,
    TEXT_BRIGHT_COLOR,
    TEXT_COLOR,
    WARNING_COLOR,
    Style,
)

CURRENT_DIRECTORY_LABEL = "(current directory)"

_NAME_WIDTH = 12
_PROGRESS_WIDTH = 8

_CURRENT_STYLE = Style(foreground=SUCCESS_COLOR)
_NAME_STYLE = Style(foreground=TEXT_COLOR)
_SELECTED_NAME_STYLE = Style(foreground=TEXT_BRIGHT_COLOR, bold=True)
_ORPHANED_STYLE = Style(foreground=WARNING_COLOR)
_MUTED_STYLE = Style(foreground=MUTED_COLOR)
_ERROR_TEXT_STYLE = Style(foreground=ERROR_COLOR)
_PRIMARY_TEXT_STYLE = Style(foreground=PRIMARY_COLOR)

_RUNNING_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
_PAUSED_STYLE = Style(foreground=WARNING_COLOR)
_COMPLETE_STYLE = Style(foreground=SUCCESS_COLOR)
_STOPPED_STYLE = Style(foreground=MUTED_COLOR)

_FOOTER_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))
_MESSAGE_STYLE = Style(foreground=TEXT_COLOR, padding=(0, 1))
_HINT_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))
_CONFLICT_HEADER_STYLE = Style(bold=True, foreground=WARNING_COLOR, padding=(0, 1))
_CONFLICT_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 2))
_OPTION_HINT_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 2))
_OPTION_STYLE = Style(foreground=TEXT_COLOR)
_SELECTED_OPTION_STYLE = Style(foreground=TEXT_BRIGHT_COLOR, bold=True)

_CLEAN_OPTIONS = (
    (
        "Remove worktree + delete branch (Recommended)",
        "Removes worktree directory and deletes the local branch",
    ),
    (
        "Remove worktree only (keep branch)",
        "Removes worktree directory but keeps the branch for later use",
    ),
    ("Cancel", ""),
)


@dataclass
class PRDEntry:
    """A PRD listed in the picker."""

    name: str
    path: str = ""
    load_error: str | None = None
    completed: int = 0
    total: int = 0
    in_progress: bool = False
    loop_state: LoopState = LoopState.READY
    iteration: int = 0
    branch: str = ""
    worktree_dir: str = ""
    orphaned: bool = False

    @property
    def all_passed(self) -> bool:
        """Whether every story of a non-empty PRD passes."""
        return self.total > 0 and self.completed == self.total


@dataclass
class MergeResult:
    """Outcome of merging a PRD branch."""

    success: bool
    message: str
    conflicts: list[str] = field(default_factory=list)
    branch: str = ""


class CleanOption(IntEnum):
    """Choice made in the clean confirmation dialog."""

    REMOVE_ALL = 0
    WORKTREE_ONLY = 1
    CANCEL = 2


@dataclass
class CleanConfirmation:
    """State of the clean confirmation dialog."""

    entry_name: str
    branch: str = ""
    worktree_dir: str = ""
    selected_idx: int = 0


@dataclass
class CleanResult:
    """Outcome of cleaning a worktree."""

    success: bool
    message: str


@dataclass
class CreationStatus:
    """Progress of a PRD being created in the background."""

    prd_name: str
    status: str = "pending"
    message: str = ""
    error: str = ""


def worktree_display_path(base_path: str, entry: PRDEntry) -> str:
    """Return the worktree path relative to the project, for display."""
    if not entry.worktree_dir:
        return CURRENT_DIRECTORY_LABEL
    try:
        rel = os.path.relpath(entry.worktree_dir, base_path or os.curdir)
    except ValueError:
        return entry.worktree_dir
    return rel + "/"


def format_branch_path(branch: str, path: str, max_width: int) -> str:
    """Format "  <branch>  <path>" so that it fits in max_width characters."""
    prefix = "  "
    separator = "  "

    if len(prefix) + len(branch) + len(separator) + len(path) <= max_width:
        return prefix + branch + separator + path

    avail_for_path = max_width - len(prefix) - len(branch) - len(separator)
    if avail_for_path > 5:
        if len(path) > avail_for_path:
            keep = avail_for_path - 1
            path = "…" + path[len(path) - keep :]
        return prefix + branch + separator + path

    avail_for_branch = max_width - len(prefix)
    if avail_for_branch > 3 and len(branch) > avail_for_branch:
        branch = branch[: avail_for_branch - 1] + "…"
    return prefix + branch


def render_loop_state_indicator(entry: PRDEntry) -> str:
    """Return the styled indicator for an entry's loop state."""
    state = entry.loop_state
    if state is LoopState.RUNNING:
        return _RUNNING_STYLE.render(f"▶ {entry.iteration}")
    if state is LoopState.PAUSED:
        return _PAUSED_STYLE.render("⏸")
    if state is LoopState.COMPLETE:
        return _COMPLETE_STYLE.render("✓")
    if state is LoopState.ERROR:
        return _ERROR_TEXT_STYLE.render("✗")
    if state is LoopState.STOPPED:
        return _STOPPED_STYLE.render("■")
    if entry.in_progress:
        return _PRIMARY_TEXT_STYLE.render("●")
    if entry.all_passed:
        return _COMPLETE_STYLE.render("✓")
    return ""


def _progress_bar(entry: PRDEntry) -> str:
    percentage = entry.completed / entry.total * 100 if entry.total > 0 else 0.0
    filled = int(_PROGRESS_WIDTH * percentage / 100)
    return PROGRESS_BAR_FILL_STYLE.render("█" * filled) + PROGRESS_BAR_EMPTY_STYLE.render(
        "░" * (_PROGRESS_WIDTH - filled)
    )


def render_entry(
    entry: PRDEntry,
    selected: bool,
    width: int,
    current_prd: str = "",
    base_path: str = "",
    creation_tasks: Mapping[str, CreationStatus] | None = None,
) -> str:
    """Render one row of the picker list."""
    parts: list[str] = [_CURRENT_STYLE.render("● ") if entry.name == current_prd else "  "]

    name = entry.name
    if len(name) > _NAME_WIDTH:
        name = name[: _NAME_WIDTH - 2] + ".."
    name_style = _SELECTED_NAME_STYLE if selected else _NAME_STYLE
    parts.append(name_style.render(f"{name:<{_NAME_WIDTH}}"))
    parts.append(" ")

    task = (creation_tasks or {}).get(entry.name)

    if entry.orphaned and entry.load_error is not None:
        parts.append(_ORPHANED_STYLE.render("[orphaned worktree]"))
        remaining = width - 32 - 18
        if remaining > 10 and entry.worktree_dir:
            parts.append(_MUTED_STYLE.render("  " + worktree_display_path(base_path, entry)))
    elif task is not None and task.status != "complete":
        if task.status == "error":
            parts.append(_ERROR_TEXT_STYLE.render(f"[error: {task.message}]"))
        else:
            label = task.status or "creating"
            parts.append(_PRIMARY_TEXT_STYLE.render(f"[{label}...]"))
    elif entry.load_error is not None:
        parts.append(_ERROR_TEXT_STYLE.render("[error]"))
    else:
        parts.append(_progress_bar(entry))
        parts.append(" ")
        parts.append(_MUTED_STYLE.render(f"{entry.completed}/{entry.total}"))
        parts.append(" ")
        parts.append(render_loop_state_indicator(entry))
        if entry.orphaned:
            parts.append(" ")
            parts.append(_ORPHANED_STYLE.render("[orphaned]"))
        if entry.branch:
            remaining = width - 32
            if remaining > 10:
                info = format_branch_path(
                    entry.branch, worktree_display_path(base_path, entry), remaining
                )
                parts.append(_MUTED_STYLE.render(info))

    result = "".join(parts)
    if selected:
        result = replace(SELECTED_STYLE, width=width).render(result)
    return result


def _divider(modal_width: int) -> str:
    return DIVIDER_STYLE.render("─" * (modal_width - 4))


def _modal(content: str, border_color: str, modal_width: int, modal_height: int) -> str:
    return Style(
        border=True,
        border_foreground=border_color,
        padding=(1, 2),
        width=modal_width,
        height=modal_height,
    ).render(content)


def render_merge_result(result: MergeResult, modal_width: int, modal_height: int) -> str:
    """Render the merge result dialog (not centred)."""
    parts: list[str] = []
    if result.success:
        title = Style(bold=True, foreground=SUCCESS_COLOR, padding=(0, 1))
        parts += [title.render("Merge Successful"), "\n", _divider(modal_width), "\n\n"]
        parts += [_MESSAGE_STYLE.render(result.message), "\n"]
    else:
        title = Style(bold=True, foreground=ERROR_COLOR, padding=(0, 1))
        parts += [title.render("Merge Conflict"), "\n", _divider(modal_width), "\n\n"]
        parts += [_MESSAGE_STYLE.render(result.message), "\n\n"]

        if result.conflicts:
            parts += [_CONFLICT_HEADER_STYLE.render("Conflicting files:"), "\n"]
            max_files = max(3, modal_height - 12)
            for index, path in enumerate(result.conflicts):
                if index >= max_files:
                    hidden = len(result.conflicts) - max_files
                    parts += [_CONFLICT_STYLE.render(f"  ... and {hidden} more"), "\n"]
                    break
                parts += [_CONFLICT_STYLE.render("  " + path), "\n"]

            parts.append("\n")
            for hint in (
                "To resolve manually:",
                "  cd <project-root>",
                f"  git merge {result.branch}",
                "  # resolve conflicts, then git commit",
            ):
                parts += [_HINT_STYLE.render(hint), "\n"]

    parts += [_divider(modal_width), "\n", _FOOTER_STYLE.render("Press any key to continue")]
    return _modal("".join(parts), PRIMARY_COLOR, modal_width, modal_height)


def render_clean_confirmation(
    confirmation: CleanConfirmation, modal_width: int, modal_height: int
) -> str:
    """Render the clean confirmation dialog (not centred)."""
    title = Style(bold=True, foreground=WARNING_COLOR, padding=(0, 1))
    parts: list[str] = [title.render("Clean Worktree"), "\n", _divider(modal_width), "\n\n"]

    parts += [_MESSAGE_STYLE.render(f"PRD: {confirmation.entry_name}"), "\n"]
    parts += [_MESSAGE_STYLE.render(f"Worktree: {confirmation.worktree_dir}"), "\n"]
    if confirmation.branch:
        parts += [_MESSAGE_STYLE.render(f"Branch: {confirmation.branch}"), "\n"]
    parts.append("\n")

    for index, (label, hint) in enumerate(_CLEAN_OPTIONS):
        is_selected = index == confirmation.selected_idx
        style = _SELECTED_OPTION_STYLE if is_selected else _OPTION_STYLE
        prefix = "▸ " if is_selected else "  "
        parts += [style.render(prefix + label), "\n"]
        if hint and is_selected:
            parts += [_OPTION_HINT_STYLE.render("  " + hint), "\n"]

    parts += [
        "\n",
        _divider(modal_width),
        "\n",
        _FOOTER_STYLE.render("↑/k ↓/j: nav  │  Enter: confirm  │  Esc: cancel"),
    ]
    return _modal("".join(parts), WARNING_COLOR, modal_width, modal_height)


def render_clean_result(result: CleanResult, modal_width: int, modal_height: int) -> str:
    """Render the clean result dialog (not centred)."""
    color = SUCCESS_COLOR if result.success else ERROR_COLOR
    title = Style(bold=True, foreground=color, padding=(0, 1))
    heading = "Clean Successful" if result.success else "Clean Failed"
    content = (
        f"{title.render(heading)}\n"
        f"{_divider(modal_width)}\n\n"
        f"{_MESSAGE_STYLE.render(result.message)}\n"
        "\n"
        f"{_divider(modal_width)}\n"
        f"{_FOOTER_STYLE.render('Press any key to continue')}"
    )
    return _modal(content, color, modal_width, modal_height)