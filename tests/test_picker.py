import json

import pytest

from chieftui.picker import PickerInputStep, PRDPicker
from chieftui.picker_view import (
    CleanOption,
    CleanResult,
    CreationStatus,
    MergeResult,
    PRDEntry,
)
from chieftui.states import LoopInstance, LoopManager, LoopState
from chieftui.styles import strip_ansi


def make_picker(*entries, width=0, height=0):
    picker = PRDPicker(base_path="/project")
    picker.entries = list(entries)
    picker.selected_index = 0
    picker.set_size(width, height)
    return picker


def write_prd(path, stories):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps({"userStories": stories}), encoding="utf-8")


def test_can_merge_completed_with_branch():
    picker = make_picker(
        PRDEntry("auth", completed=8, total=8, loop_state=LoopState.COMPLETE, branch="chief/auth")
    )
    assert picker.can_merge() is True


def test_can_merge_no_branch():
    picker = make_picker(PRDEntry("auth", completed=8, total=8, loop_state=LoopState.COMPLETE))
    assert picker.can_merge() is False


def test_can_merge_running():
    picker = make_picker(
        PRDEntry("auth", completed=3, total=8, loop_state=LoopState.RUNNING, branch="chief/auth")
    )
    assert picker.can_merge() is False


def test_can_merge_all_passed_ready_state():
    picker = make_picker(
        PRDEntry("auth", completed=5, total=5, loop_state=LoopState.READY, branch="chief/auth")
    )
    assert picker.can_merge() is True


def test_merge_result_success_rendering():
    picker = make_picker(PRDEntry("auth", branch="chief/auth"), width=80, height=24)
    picker.merge_result = MergeResult(True, "Merged chief/auth into main", branch="chief/auth")
    text = strip_ansi(picker.render())
    assert "Merge Successful" in text
    assert "Merged chief/auth into main" in text
    assert "Press any key to continue" in text


def test_merge_result_conflict_rendering():
    picker = make_picker(PRDEntry("auth", branch="chief/auth"), width=80, height=24)
    picker.merge_result = MergeResult(
        False,
        "Failed to merge chief/auth into current branch",
        conflicts=["src/auth.go", "src/handler.go"],
        branch="chief/auth",
    )
    text = strip_ansi(picker.render())
    assert "Merge Conflict" in text
    assert "src/auth.go" in text
    assert "src/handler.go" in text
    assert "git merge chief/auth" in text


def test_footer_shows_merge_hint_for_completed():
    picker = make_picker(
        PRDEntry("auth", completed=8, total=8, loop_state=LoopState.COMPLETE, branch="chief/auth")
    )
    assert "m: merge" in picker.build_footer_shortcuts()


def test_footer_hides_merge_hint_for_running():
    picker = make_picker(
        PRDEntry(
            "auth", completed=3, total=8, loop_state=LoopState.RUNNING, iteration=2, branch="chief/auth"
        )
    )
    shortcuts = picker.build_footer_shortcuts()
    assert "m: merge" not in shortcuts
    assert shortcuts.startswith("p: pause")


WORKTREE = "/project/.chief/worktrees/auth"


@pytest.mark.parametrize(
    "state,worktree,expected",
    [
        (LoopState.COMPLETE, WORKTREE, True),
        (LoopState.RUNNING, WORKTREE, False),
        (LoopState.COMPLETE, "", False),
        (LoopState.STOPPED, WORKTREE, True),
        (LoopState.READY, WORKTREE, True),
    ],
)
def test_can_clean(state, worktree, expected):
    picker = make_picker(
        PRDEntry("auth", loop_state=state, branch="chief/auth", worktree_dir=worktree)
    )
    assert picker.can_clean() is expected


def test_can_clean_orphaned_without_prd():
    picker = make_picker(
        PRDEntry(
            "stale",
            worktree_dir="/project/.chief/worktrees/stale",
            orphaned=True,
            load_error="orphaned worktree (no prd.json)",
        )
    )
    assert picker.can_clean() is True


def test_clean_confirmation_dialog():
    picker = make_picker(
        PRDEntry(
            "auth",
            completed=8,
            total=8,
            loop_state=LoopState.COMPLETE,
            branch="chief/auth",
            worktree_dir=WORKTREE,
        )
    )
    picker.start_clean_confirmation()
    cc = picker.clean_confirmation
    assert cc is not None
    assert cc.entry_name == "auth"
    assert cc.branch == "chief/auth"
    assert cc.worktree_dir == ".chief/worktrees/auth/"
    assert cc.selected_idx == 0
    assert picker.clean_option() is CleanOption.REMOVE_ALL


def test_clean_confirmation_navigation():
    picker = make_picker(PRDEntry("auth", branch="chief/auth", worktree_dir=WORKTREE))
    picker.start_clean_confirmation()
    picker.clean_confirm_move_down()
    assert picker.clean_option() is CleanOption.WORKTREE_ONLY
    picker.clean_confirm_move_down()
    assert picker.clean_option() is CleanOption.CANCEL
    picker.clean_confirm_move_down()
    assert picker.clean_option() is CleanOption.CANCEL
    picker.clean_confirm_move_up()
    assert picker.clean_option() is CleanOption.WORKTREE_ONLY


def test_clean_confirmation_cancel():
    picker = make_picker(PRDEntry("auth", branch="chief/auth", worktree_dir=WORKTREE))
    picker.start_clean_confirmation()
    assert picker.clean_confirmation is not None
    picker.cancel_clean_confirmation()
    assert picker.clean_confirmation is None
    assert picker.clean_option() is CleanOption.CANCEL


def test_clean_confirmation_rendering():
    picker = make_picker(
        PRDEntry(
            "auth",
            completed=8,
            total=8,
            loop_state=LoopState.COMPLETE,
            branch="chief/auth",
            worktree_dir=WORKTREE,
        ),
        width=80,
        height=24,
    )
    picker.start_clean_confirmation()
    text = strip_ansi(picker.render())
    assert "Clean Worktree" in text
    assert "auth" in text
    assert "chief/auth" in text
    assert "Remove worktree + delete branch" in text
    assert "Remove worktree only" in text
    assert "Cancel" in text


def test_clean_result_success_rendering():
    picker = make_picker(PRDEntry("auth"), width=80, height=24)
    picker.clean_result = CleanResult(True, "Removed worktree and deleted branch chief/auth")
    text = strip_ansi(picker.render())
    assert "Clean Successful" in text
    assert "Removed worktree and deleted branch chief/auth" in text
    assert "Press any key to continue" in text


def test_clean_result_error_rendering():
    picker = make_picker(PRDEntry("auth"), width=80, height=24)
    picker.clean_result = CleanResult(False, "Failed to remove worktree: permission denied")
    text = strip_ansi(picker.render())
    assert "Clean Failed" in text
    assert "permission denied" in text


def test_footer_clean_hints():
    with_worktree = make_picker(
        PRDEntry(
            "auth",
            completed=8,
            total=8,
            loop_state=LoopState.COMPLETE,
            branch="chief/auth",
            worktree_dir=WORKTREE,
        )
    )
    assert "c: clean" in with_worktree.build_footer_shortcuts()

    running = make_picker(
        PRDEntry("auth", loop_state=LoopState.RUNNING, branch="chief/auth", worktree_dir=WORKTREE)
    )
    assert "c: clean" not in running.build_footer_shortcuts()

    no_worktree = make_picker(
        PRDEntry("auth", completed=8, total=8, loop_state=LoopState.COMPLETE, branch="chief/auth")
    )
    assert "c: clean" not in no_worktree.build_footer_shortcuts()


def test_footer_without_entries():
    picker = make_picker()
    assert picker.build_footer_shortcuts() == "↑/k ↓/j: nav  │  n: new  │  Esc/l: close"


def test_navigation_clamps_and_blocks_in_input_mode():
    picker = make_picker(PRDEntry("a"), PRDEntry("b"))
    picker.move_up()
    assert picker.selected_index == 0
    picker.move_down()
    picker.move_down()
    assert picker.selected_index == 1
    picker.start_input_mode()
    picker.move_up()
    assert picker.selected_index == 1


def test_input_flow():
    picker = make_picker()
    picker.start_input_mode()
    assert picker.next_input_step() is False
    assert picker.input_step is PickerInputStep.NAME
    for ch in "my feat!é_1":
        picker.add_input_char(ch)
    assert picker.input_value == "myfeat_1"
    picker.delete_input_char()
    assert picker.input_value == "myfeat_"
    assert picker.next_input_step() is False
    assert picker.input_step is PickerInputStep.DESCRIPTION
    picker.add_input_char("A")
    picker.add_input_char(" ")
    assert picker.input_desc == "A "
    assert picker.next_input_step() is True
    assert picker.previous_input_step() is False
    assert picker.input_step is PickerInputStep.NAME
    assert picker.previous_input_step() is True
    assert picker.input_mode is False
    assert picker.input_value == ""


def test_render_input_mode():
    picker = make_picker(width=80, height=24)
    picker.start_input_mode()
    text = strip_ansi(picker.render())
    assert "New PRD name:" in text
    assert "(type a name...)" in text
    assert "Enter: create  │  Esc: cancel" in text
    picker.add_input_char("x")
    picker.add_input_char("y")
    picker.next_input_step()
    text = strip_ansi(picker.render())
    assert "Describe your feature/product:" in text


def test_render_empty_and_list():
    empty = make_picker(width=80, height=24)
    assert "No PRDs found in .chief/prds/" in strip_ansi(empty.render())

    listed = make_picker(PRDEntry("auth", completed=3, total=8), width=80, height=24)
    text = strip_ansi(listed.render())
    assert "Select PRD" in text
    assert "3/8" in text


def test_refresh_loads_prds(tmp_path):
    write_prd(
        tmp_path / ".chief" / "prds" / "auth" / "prd.json",
        [{"passes": True}, {"passes": False, "inProgress": True}],
    )
    (tmp_path / ".chief" / "prds" / "broken").mkdir(parents=True)
    write_prd(tmp_path / ".chief" / "prd.json", [{"passes": True}])

    manager = LoopManager(
        {"auth": LoopInstance("auth", LoopState.RUNNING, 4, "chief/auth", str(tmp_path / "wt"))}
    )
    picker = PRDPicker(tmp_path, "auth", manager)
    names = [entry.name for entry in picker.entries]
    assert names == ["auth", "broken", "main"]

    auth = picker.entries[0]
    assert (auth.completed, auth.total, auth.in_progress) == (1, 2, True)
    assert (auth.loop_state, auth.iteration, auth.branch) == (LoopState.RUNNING, 4, "chief/auth")
    assert picker.entries[1].load_error is not None
    assert picker.entries[2].completed == 1


def test_refresh_marks_orphaned_worktrees(tmp_path):
    write_prd(tmp_path / ".chief" / "prds" / "auth" / "prd.json", [])
    orphan_paths = {"auth": "/wt/auth", "stale": "/wt/stale", "tracked": "/wt/tracked"}
    manager = LoopManager({"tracked": LoopInstance("tracked", worktree_dir="/wt/tracked")})
    picker = PRDPicker(tmp_path, manager=manager, worktree_detector=lambda base: orphan_paths)

    by_name = {entry.name: entry for entry in picker.entries}
    assert set(by_name) == {"auth", "stale"}
    assert by_name["auth"].orphaned is True
    assert by_name["auth"].worktree_dir == "/wt/auth"
    assert by_name["stale"].orphaned is True
    assert by_name["stale"].load_error == "orphaned worktree (no prd.json)"


def test_creation_task_adds_entry(tmp_path):
    picker = PRDPicker(tmp_path)
    assert picker.is_empty
    picker.set_size(80, 24)
    picker.set_creation_task(CreationStatus("newfeat", status="generating"))
    assert [entry.name for entry in picker.entries] == ["newfeat"]
    assert "[generating...]" in strip_ansi(picker.render())


def test_refresh_clamps_selection(tmp_path):
    picker = PRDPicker(tmp_path)
    picker.selected_index = 5
    picker.refresh()
    assert picker.selected_index == 0
    assert picker.selected_entry is None