"""PRD picker modal: lists PRDs and drives creation, merge and clean actions."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Callable, Mapping

from chieftui.picker_view import (
    CleanConfirmation,
    CleanOption,
    CleanResult,
    CreationStatus,
    MergeResult,
    PRDEntry,
    render_clean_confirmation,
    render_clean_result,
    render_entry,
    render_merge_result,
    worktree_display_path,
)
from chieftui.states import LoopManager, LoopState
from chieftui.styles import (
    DIVIDER_STYLE,
    MUTED_COLOR,
    PRIMARY_COLOR,
    Style,
    center_modal,
)
from chieftui.tabbar import load_story_progress

WorktreeDetector = Callable[[str], Mapping[str, str]]

_TITLE_STYLE = Style(bold=True, foreground=PRIMARY_COLOR, padding=(0, 1))
_EMPTY_STYLE = Style(foreground=MUTED_COLOR, padding=(1, 2))
_FOOTER_STYLE = Style(foreground=MUTED_COLOR, padding=(0, 1))
_LABEL_STYLE = Style(foreground=PRIMARY_COLOR, bold=True)
_MUTED_STYLE = Style(foreground=MUTED_COLOR)
_CURSOR_STYLE = Style(foreground=PRIMARY_COLOR, blink=True)

_START_STATES = (LoopState.READY, LoopState.PAUSED, LoopState.STOPPED, LoopState.ERROR)


class PickerInputStep(Enum):
    """Step of the new-PRD input flow."""

    NAME = "name"
    DESCRIPTION = "description"


def _is_name_char(ch: str) -> bool:
    return ch.isascii() and (ch.isalnum() or ch in "-_")


class PRDPicker:
    """Modal listing the PRDs under ``.chief/prds/``.

    ``worktree_detector`` maps a base path to the worktrees found on disk,
    as PRD name to absolute path; worktrees not tracked by the manager are
    shown as orphaned.
    """

    def __init__(
        self,
        base_path: str | Path = "",
        current_prd: str = "",
        manager: LoopManager | None = None,
        worktree_detector: WorktreeDetector | None = None,
    ) -> None:
        self.entries: list[PRDEntry] = []
        self.selected_index = 0
        self.width = 0
        self.height = 0
        self.base_path = str(base_path)
        self.current_prd = current_prd
        self.manager = manager
        self.worktree_detector = worktree_detector
        self.input_mode = False
        self.input_step = PickerInputStep.NAME
        self.input_value = ""
        self.input_desc = ""
        self.merge_result: MergeResult | None = None
        self.clean_confirmation: CleanConfirmation | None = None
        self.clean_result: CleanResult | None = None
        self.creation_tasks: dict[str, CreationStatus] = {}
        self.refresh()

    # Loading -----------------------------------------------------------

    def refresh(self) -> None:
        """Reload the PRD list from disk."""
        self.entries = []
        chief_dir = Path(self.base_path) / ".chief"
        prds_dir = chief_dir / "prds"

        try:
            children = sorted((p for p in prds_dir.iterdir() if p.is_dir()), key=lambda p: p.name)
        except OSError:
            children = []

        added: set[str] = set()
        for child in children:
            self.entries.append(self._load_entry(child.name, child / "prd.json"))
            added.add(child.name)

        legacy = chief_dir / "prd.json"
        if legacy.exists() and "main" not in added:
            self.entries.append(self._load_entry("main", legacy))
            added.add("main")

        self._mark_orphans(prds_dir)

        for name in self.creation_tasks:
            if name not in added:
                self.entries.append(PRDEntry(name=name, path=str(prds_dir / name / "prd.json")))

        if self.selected_index >= len(self.entries):
            self.selected_index = max(0, len(self.entries) - 1)

    def _mark_orphans(self, prds_dir: Path) -> None:
        if self.worktree_detector is None:
            return
        disk_worktrees = self.worktree_detector(self.base_path)
        if not disk_worktrees:
            return
        tracked = set()
        if self.manager is not None:
            tracked = {
                inst.worktree_dir for inst in self.manager.get_all_instances() if inst.worktree_dir
            }

        by_name = {entry.name: entry for entry in self.entries}
        for prd_name, abs_path in sorted(disk_worktrees.items()):
            if abs_path in tracked:
                continue
            entry = by_name.get(prd_name)
            if entry is not None:
                entry.orphaned = True
                if not entry.worktree_dir:
                    entry.worktree_dir = abs_path
            else:
                self.entries.append(
                    PRDEntry(
                        name=prd_name,
                        path=str(prds_dir / prd_name / "prd.json"),
                        worktree_dir=abs_path,
                        orphaned=True,
                        load_error="orphaned worktree (no prd.json)",
                    )
                )

    def _load_entry(self, name: str, prd_path: Path) -> PRDEntry:
        entry = PRDEntry(name=name, path=str(prd_path))
        try:
            progress = load_story_progress(prd_path)
        except (OSError, ValueError) as exc:
            entry.load_error = str(exc)
        else:
            entry.total = progress.total
            entry.completed = progress.completed
            entry.in_progress = progress.in_progress

        if self.manager is not None:
            entry.loop_state, entry.iteration = self.manager.get_state(name)
            instance = self.manager.get_instance(name)
            if instance is not None:
                entry.branch = instance.branch
                entry.worktree_dir = instance.worktree_dir
        return entry

    # Selection ---------------------------------------------------------

    def set_size(self, width: int, height: int) -> None:
        """Set the screen size the modal is centred in."""
        self.width = width
        self.height = height

    def move_up(self) -> None:
        """Move the selection up (ignored while typing)."""
        if not self.input_mode and self.selected_index > 0:
            self.selected_index -= 1

    def move_down(self) -> None:
        """Move the selection down (ignored while typing)."""
        if not self.input_mode and self.selected_index < len(self.entries) - 1:
            self.selected_index += 1

    @property
    def selected_entry(self) -> PRDEntry | None:
        """The selected entry, if any."""
        if 0 <= self.selected_index < len(self.entries):
            return self.entries[self.selected_index]
        return None

    @property
    def is_empty(self) -> bool:
        """Whether there are no PRDs to list."""
        return not self.entries

    # Input mode --------------------------------------------------------

    def start_input_mode(self) -> None:
        """Begin entering a new PRD."""
        self.input_mode = True
        self.input_step = PickerInputStep.NAME
        self.input_value = ""
        self.input_desc = ""

    def next_input_step(self) -> bool:
        """Advance to the next step; return True when the flow is finished."""
        if self.input_step is PickerInputStep.NAME:
            if self.input_value.strip():
                self.input_step = PickerInputStep.DESCRIPTION
            return False
        return True

    def previous_input_step(self) -> bool:
        """Go back a step; return True when input mode was cancelled."""
        if self.input_step is PickerInputStep.DESCRIPTION:
            self.input_step = PickerInputStep.NAME
            return False
        self.cancel_input_mode()
        return True

    def cancel_input_mode(self) -> None:
        """Leave input mode without creating a PRD."""
        self.input_mode = False
        self.input_value = ""
        self.input_desc = ""

    def set_creation_task(self, status: CreationStatus) -> None:
        """Record the progress of a background PRD creation."""
        self.creation_tasks[status.prd_name] = status
        self.refresh()

    def add_input_char(self, ch: str) -> None:
        """Type a character; names accept only letters, digits, '-' and '_'."""
        if self.input_step is PickerInputStep.NAME:
            if _is_name_char(ch):
                self.input_value += ch
        else:
            self.input_desc += ch

    def delete_input_char(self) -> None:
        """Delete the last typed character."""
        if self.input_step is PickerInputStep.NAME:
            self.input_value = self.input_value[:-1]
        else:
            self.input_desc = self.input_desc[:-1]

    # Merge and clean ---------------------------------------------------

    def can_merge(self) -> bool:
        """Whether the selected entry is a completed PRD with a branch."""
        entry = self.selected_entry
        if entry is None or not entry.branch:
            return False
        return entry.loop_state is LoopState.COMPLETE or entry.all_passed

    def can_clean(self) -> bool:
        """Whether the selected entry has a worktree and is not running."""
        entry = self.selected_entry
        if entry is None or not entry.worktree_dir:
            return False
        return entry.loop_state is not LoopState.RUNNING

    def start_clean_confirmation(self) -> None:
        """Open the clean confirmation dialog for the selected entry."""
        entry = self.selected_entry
        if entry is None:
            return
        self.clean_confirmation = CleanConfirmation(
            entry_name=entry.name,
            branch=entry.branch,
            worktree_dir=worktree_display_path(self.base_path, entry),
        )

    def cancel_clean_confirmation(self) -> None:
        """Close the clean confirmation dialog."""
        self.clean_confirmation = None

    def clean_confirm_move_up(self) -> None:
        """Move up in the clean confirmation dialog."""
        if self.clean_confirmation is not None and self.clean_confirmation.selected_idx > 0:
            self.clean_confirmation.selected_idx -= 1

    def clean_confirm_move_down(self) -> None:
        """Move down in the clean confirmation dialog."""
        if self.clean_confirmation is not None and self.clean_confirmation.selected_idx < 2:
            self.clean_confirmation.selected_idx += 1

    def clean_option(self) -> CleanOption:
        """Return the option chosen in the clean confirmation dialog."""
        if self.clean_confirmation is None:
            return CleanOption.CANCEL
        try:
            return CleanOption(self.clean_confirmation.selected_idx)
        except ValueError:
            return CleanOption.CANCEL

    # Rendering ---------------------------------------------------------

    def build_footer_shortcuts(self) -> str:
        """Return the footer shortcuts for the selected entry's state."""
        entry = self.selected_entry
        if entry is None:
            return "↑/k ↓/j: nav  │  n: new  │  Esc/l: close"

        base = "Enter: select  │  n: new  │  e: edit  │  Esc/l: close"
        merge_hint = "m: merge  │  " if self.can_merge() else ""
        clean_hint = "c: clean  │  " if self.can_clean() else ""

        if entry.loop_state is LoopState.RUNNING:
            return "p: pause  │  x: stop  │  " + base
        if entry.loop_state is LoopState.COMPLETE:
            return merge_hint + clean_hint + base
        return "s: start  │  " + merge_hint + clean_hint + base

    def render(self) -> str:
        """Render the modal centred on the screen."""
        modal_width = max(30, min(60, self.width - 10))
        modal_height = max(10, min(20, self.height - 6))

        if self.clean_result is not None:
            modal = render_clean_result(self.clean_result, modal_width, modal_height)
        elif self.clean_confirmation is not None:
            modal = render_clean_confirmation(self.clean_confirmation, modal_width, modal_height)
        elif self.merge_result is not None:
            modal = render_merge_result(self.merge_result, modal_width, modal_height)
        else:
            modal = self._render_list(modal_width, modal_height)
        return center_modal(modal, self.width, self.height)

    def _render_list(self, modal_width: int, modal_height: int) -> str:
        divider = DIVIDER_STYLE.render("─" * (modal_width - 4))
        parts: list[str] = [_TITLE_STYLE.render("Select PRD"), "\n", divider, "\n"]

        if self.input_mode:
            parts.append(self._render_input_mode(modal_width - 4))
        elif self.is_empty:
            parts += [
                _EMPTY_STYLE.render("No PRDs found in .chief/prds/"),
                "\n",
                _EMPTY_STYLE.render("Press 'n' to create a new PRD"),
            ]
        else:
            list_height = modal_height - 7
            start = self.selected_index - list_height + 1 if self.selected_index >= list_height else 0
            visible = self.entries[start : start + list_height]
            for offset, entry in enumerate(visible):
                row = render_entry(
                    entry,
                    start + offset == self.selected_index,
                    modal_width - 6,
                    current_prd=self.current_prd,
                    base_path=self.base_path,
                    creation_tasks=self.creation_tasks,
                )
                parts += [row, "\n"]
            parts.append("\n" * max(0, list_height - len(visible)))

        shortcuts = (
            "Enter: create  │  Esc: cancel" if self.input_mode else self.build_footer_shortcuts()
        )
        parts += [divider, "\n", _FOOTER_STYLE.render(shortcuts)]

        return Style(
            border=True,
            border_foreground=PRIMARY_COLOR,
            padding=(1, 2),
            width=modal_width,
            height=modal_height,
        ).render("".join(parts))

    def _render_input_mode(self, width: int) -> str:
        cursor = _CURSOR_STYLE.render("▌")
        if self.input_step is PickerInputStep.NAME:
            box = Style(border=True, border_foreground=PRIMARY_COLOR, padding=(0, 1), width=width - 4)
            if self.input_value:
                value = self.input_value + cursor
            else:
                value = cursor + _MUTED_STYLE.render("(type a name...)")
            return (
                f"{_LABEL_STYLE.render('New PRD name:')}\n\n"
                f"{box.render(value)}\n\n"
                f"{_MUTED_STYLE.render('Only letters, numbers, - and _ allowed')}"
            )

        box = Style(
            border=True,
            border_foreground=PRIMARY_COLOR,
            padding=(0, 1),
            width=width - 4,
            height=5,
        )
        desc = self.input_desc or "\n" + _MUTED_STYLE.render(
            "(Enter a description... Chief will generate the specification)"
        )
        return (
            f"{_LABEL_STYLE.render('Describe your feature/product:')}\n\n"
            f"{box.render(desc + cursor)}\n\n"
            f"{_MUTED_STYLE.render('Enter: Confirm & Generate  │  Esc: Back')}"
        )