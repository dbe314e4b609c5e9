# chieftui

Terminal interface components for supervising PRD-driven agent loops. Each
component keeps its own state and renders to a plain string with ANSI colour
codes, so it can be embedded in any terminal application or event loop.

## Components

- `chieftui.log.LogViewer`: a scrolling view of agent events (`Event` from
  `chieftui.states`). It shows tool calls with icons and their main argument,
  gives `Read` results syntax highlighting (via Pygments, at most 20 lines),
  and follows new output automatically until you scroll up. Helpers
  `get_tool_icon`, `get_tool_argument` and `strip_line_numbers` are public.
- `chieftui.picker.PRDPicker`: a modal listing the PRDs found under
  `.chief/prds/` (plus a legacy `.chief/prd.json` as `main`), with progress
  bars, loop state, branch and worktree path. It handles the two-step input
  for a new PRD (name, then description), shows background creation progress
  (`set_creation_task`), decides whether the selected PRD can be merged or
  cleaned, and drives the clean confirmation dialog (`clean_option`). Pass a
  `worktree_detector` callable (base path → mapping of PRD name to absolute
  worktree path) to have untracked worktrees flagged as orphaned. Set
  `merge_result` or `clean_result` to a `MergeResult` / `CleanResult` to show
  the outcome of an operation.
- `chieftui.picker_view`: the entry and dialog data classes (`PRDEntry`,
  `MergeResult`, `CleanOption`, `CleanConfirmation`, `CleanResult`,
  `CreationStatus`) and the row and dialog renderers the picker uses.
- `chieftui.tabbar.TabBar`: a row of PRD tabs with progress and loop state,
  in a full (`render`) and a compact (`render_compact`) form.
  `load_story_progress` reads story counts from a `prd.json` file.
- `chieftui.settings.SettingsOverlay`: an editor for a `Config` (worktree
  setup command, push and pull-request options), with inline text editing,
  boolean toggles that can be reverted, and a GitHub CLI error panel.
- `chieftui.help.HelpOverlay`: a keyboard-shortcut reference whose contents
  depend on the current `ViewMode`.
- `chieftui.states`: `LoopState`, `EventType`, `AppState`, `ViewMode`,
  `Event`, and `LoopManager`, a plain registry of `LoopInstance` records that
  the picker and tab bar read loop state, branch and worktree from.
- `chieftui.styles`: the colour palette, the immutable `Style`, and helpers
  `strip_ansi`, `visible_width`, `wrap_text`, `join_horizontal`,
  `center_modal`, `get_status_icon`, `get_state_style` and
  `get_activity_style`.

## Installation

```
pip install .
```

To install the test dependencies as well:

```
pip install ".[test]"
```

## Example

```python
from chieftui.log import LogViewer
from chieftui.states import Event, EventType

viewer = LogViewer()
viewer.set_size(80, 20)
viewer.add_event(Event(type=EventType.TOOL_START, tool="Bash",
                       tool_input={"command": "pytest -q"}))
print(viewer.render())
```

```python
from chieftui.settings import Config, SettingsOverlay

overlay = SettingsOverlay()
overlay.load_from_config(Config.default())
overlay.set_size(80, 24)
overlay.move_down()
key, value = overlay.toggle_bool()   # ("onComplete.push", True)
print(overlay.render())
```

## What this package does not do

These are rendering and state components only. The package has no
application or command to run, reads no keyboard input, and runs no agent
loop: `LoopManager` only holds the state you put in it. It performs no git
operations (merging, removing worktrees, deleting branches), does not detect
worktrees on its own, and does not create PRDs; the caller does these things
and reports results to the components. `Config` is an in-memory object:
nothing reads or writes `.chief/config.yaml`, whose path the settings overlay
only displays. There is no first-time setup flow.

## Running the tests

```
pytest
```