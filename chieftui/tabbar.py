"""Always-visible tab bar listing the project's PRDs."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path

from chieftui.states import LoopManager, LoopState
from chieftui.styles import (
    ERROR_COLOR,
    PRIMARY_COLOR,
    SUCCESS_COLOR,
    TAB_ACTIVE_STYLE,
    TAB_ERROR_STYLE,
    TAB_NEW_STYLE,
    TAB_RUNNING_STYLE,
    TAB_STYLE,
    TEXT_BRIGHT_COLOR,
    TEXT_COLOR,
    WARNING_COLOR,
    Style,
    join_horizontal,
)

_STATE_TEXT_STYLES = {
    LoopState.RUNNING: Style(foreground=PRIMARY_COLOR),
    LoopState.PAUSED: Style(foreground=WARNING_COLOR),
    LoopState.COMPLETE: Style(foreground=SUCCESS_COLOR),
    LoopState.ERROR: Style(foreground=ERROR_COLOR),
}
_ACTIVE_TEXT_STYLE = Style(foreground=TEXT_BRIGHT_COLOR)
_TEXT_STYLE = Style(foreground=TEXT_COLOR)

_COMPACT_INDICATORS = {
    LoopState.RUNNING: "▶",
    LoopState.PAUSED: "⏸",
    LoopState.COMPLETE: "✓",
    LoopState.ERROR: "✗",
}


@dataclass(frozen=True)
class StoryProgress:
    """Story counts read from a prd.json file."""

    completed: int = 0
    total: int = 0
    in_progress: bool = False


def load_story_progress(path: str | Path) -> StoryProgress:
    """Read story progress from a prd.json file.

    Raises OSError if the file cannot be read and ValueError if it is not a
    valid PRD document.
    """
    with open(path, encoding="utf-8") as handle:
        data = json.load(handle)
    if not isinstance(data, dict):
        raise ValueError(f"{path}: PRD document must be a JSON object")
    stories = data.get("userStories") or []
    if not isinstance(stories, list):
        raise ValueError(f"{path}: userStories must be a list")
    stories = [story for story in stories if isinstance(story, dict)]
    return StoryProgress(
        completed=sum(1 for story in stories if story.get("passes") is True),
        total=len(stories),
        in_progress=any(story.get("inProgress") is True for story in stories),
    )


@dataclass
class TabEntry:
    """A PRD shown as a tab."""

    name: str
    path: str = ""
    branch: str = ""
    loop_state: LoopState = LoopState.READY
    completed: int = 0
    total: int = 0
    iteration: int = 0
    is_active: bool = False


def _tab_style(entry: TabEntry) -> Style:
    if entry.is_active:
        return TAB_ACTIVE_STYLE
    if entry.loop_state is LoopState.RUNNING:
        return TAB_RUNNING_STYLE
    if entry.loop_state is LoopState.ERROR:
        return TAB_ERROR_STYLE
    return TAB_STYLE


class TabBar:
    """Tab bar of PRDs found under ``.chief/prds/``."""

    def __init__(
        self,
        base_dir: str | Path = "",
        current_prd: str = "",
        manager: LoopManager | None = None,
    ) -> None:
        self.entries: list[TabEntry] = []
        self.active_index = 0
        self.width = 0
        self.base_dir = str(base_dir)
        self.manager = manager
        self.current_prd = current_prd
        self.refresh()

    def __len__(self) -> int:
        return len(self.entries)

    def refresh(self) -> None:
        """Reload the PRD list from disk."""
        self.entries = []
        chief_dir = Path(self.base_dir) / ".chief"
        prds_dir = chief_dir / "prds"

        try:
            children = sorted((p for p in prds_dir.iterdir() if p.is_dir()), key=lambda p: p.name)
        except OSError:
            children = []

        added = set()
        for child in children:
            self.entries.append(self._load_entry(child.name, child / "prd.json"))
            added.add(child.name)

        legacy = chief_dir / "prd.json"
        if legacy.exists() and "main" not in added:
            self.entries.append(self._load_entry("main", legacy))

        for index, entry in enumerate(self.entries):
            if entry.name == self.current_prd:
                self.active_index = index
                entry.is_active = True

    def _load_entry(self, name: str, prd_path: Path) -> TabEntry:
        entry = TabEntry(name=name, path=str(prd_path), is_active=name == self.current_prd)
        try:
            progress = load_story_progress(prd_path)
        except (OSError, ValueError):
            pass
        else:
            entry.total = progress.total
            entry.completed = progress.completed

        if self.manager is not None:
            entry.loop_state, entry.iteration = self.manager.get_state(name)
            instance = self.manager.get_instance(name)
            if instance is not None:
                entry.branch = instance.branch
        return entry

    def set_active_by_name(self, name: str) -> None:
        """Mark the tab with this name as the active one."""
        self.current_prd = name
        for index, entry in enumerate(self.entries):
            entry.is_active = entry.name == name
            if entry.is_active:
                self.active_index = index

    def get_entry(self, index: int) -> TabEntry | None:
        """Return the entry at a 0-based index, or None when out of range."""
        if 0 <= index < len(self.entries):
            return self.entries[index]
        return None

    def set_size(self, width: int) -> None:
        """Set the width available to the tab bar."""
        self.width = width

    def render(self) -> str:
        """Render the full tab bar with a trailing "+ New" tab."""
        new_tab = TAB_NEW_STYLE.render("+ New")
        if not self.entries:
            return new_tab
        return join_horizontal(*(self.render_tab(entry) for entry in self.entries), new_tab)

    def render_tab(self, entry: TabEntry) -> str:
        """Render one tab with name, branch and state."""
        name = entry.name if len(entry.name) <= 8 else entry.name[:7] + "."

        if entry.loop_state is LoopState.RUNNING:
            indicator = f" ▶ {entry.iteration}"
        elif entry.loop_state is LoopState.PAUSED:
            indicator = " ⏸"
        elif entry.loop_state is LoopState.COMPLETE:
            indicator = " ✓"
        elif entry.loop_state is LoopState.ERROR:
            indicator = " ✗"
        elif entry.total > 0:
            indicator = f" [{entry.completed}/{entry.total}]"
            if entry.completed == entry.total:
                indicator += " ✓"
        else:
            indicator = ""

        parts = ["◉ " if entry.is_active else "", name]
        if entry.branch:
            branch = entry.branch if len(entry.branch) <= 20 else entry.branch[:19] + "…"
            parts.append(f" [{branch}]")
        parts.append(indicator)
        content = "".join(parts)

        text_style = _STATE_TEXT_STYLES.get(entry.loop_state)
        if text_style is None:
            text_style = _ACTIVE_TEXT_STYLE if entry.is_active else _TEXT_STYLE
        return _tab_style(entry).render(text_style.render(content))

    def render_compact(self) -> str:
        """Render a narrow version of the tab bar."""
        new_tab = TAB_NEW_STYLE.render("+")
        if not self.entries:
            return new_tab
        return join_horizontal(
            *(self.render_compact_tab(entry) for entry in self.entries), new_tab
        )

    def render_compact_tab(self, entry: TabEntry) -> str:
        """Render one tab in compact form, without the branch."""
        name = entry.name if len(entry.name) <= 5 else entry.name[:4] + "."
        content = ("◉" if entry.is_active else "") + name + _COMPACT_INDICATORS.get(
            entry.loop_state, ""
        )
        return _tab_style(entry).render(content)