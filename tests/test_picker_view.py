import pytest

from chieftui.picker_view import (
    CleanConfirmation,
    CleanOption,
    CleanResult,
    CreationStatus,
    MergeResult,
    PRDEntry,
    format_branch_path,
    render_clean_confirmation,
    render_clean_result,
    render_entry,
    render_loop_state_indicator,
    render_merge_result,
    worktree_display_path,
)
from chieftui.states import LoopState
from chieftui.styles import strip_ansi, visible_width

BASE = "/project"


def _text(rendered: str) -> str:
    return strip_ansi(rendered)


def _auth_complete(**overrides) -> PRDEntry:
    values = dict(
        name="auth",
        completed=8,
        total=8,
        loop_state=LoopState.COMPLETE,
        branch="chief/auth",
        worktree_dir="/project/.chief/worktrees/auth",
    )
    values.update(overrides)
    return PRDEntry(**values)


def test_render_entry_with_branch_and_worktree():
    result = _text(render_entry(_auth_complete(), False, 80, "", BASE))
    assert "chief/auth" in result
    assert ".chief/worktrees/auth/" in result


def test_render_entry_no_branch():
    entry = PRDEntry(
        name="auth", completed=3, total=8, loop_state=LoopState.RUNNING, iteration=2
    )
    result = _text(render_entry(entry, False, 80, "", BASE))
    assert "chief/" not in result
    assert "3/8" in result


def test_render_entry_no_branch_omits_current_directory_label():
    entry = PRDEntry(name="legacy", completed=5, total=5, loop_state=LoopState.COMPLETE)
    result = _text(render_entry(entry, False, 80, "", BASE))
    assert "(current directory)" not in result


def test_render_entry_narrow_terminal_omits_branch_path():
    result = _text(render_entry(_auth_complete(), False, 35, "", BASE))
    assert "auth" in result
    assert "chief/auth" not in result


def test_render_entry_with_load_error():
    entry = PRDEntry(
        name="broken",
        load_error="parse error",
        branch="chief/broken",
        worktree_dir="/project/.chief/worktrees/broken",
    )
    result = _text(render_entry(entry, False, 80, "", BASE))
    assert "[error]" in result
    assert "chief/broken" not in result


def test_render_entry_orphaned_with_prd():
    result = _text(render_entry(_auth_complete(orphaned=True), False, 80, "", BASE))
    assert "[orphaned]" in result
    assert "8/8" in result


def test_render_entry_orphaned_without_prd():
    entry = PRDEntry(
        name="stale-project",
        worktree_dir="/project/.chief/worktrees/stale-project",
        orphaned=True,
        load_error="orphaned worktree (no prd.json)",
    )
    result = _text(render_entry(entry, False, 80, "", BASE))
    assert "[orphaned worktree]" in result


def test_render_entry_current_indicator_and_name_truncation():
    entry = PRDEntry(name="a-very-long-prd-name", completed=1, total=2)
    result = _text(render_entry(entry, False, 80, "a-very-long-prd-name", BASE))
    assert result.startswith("● ")
    assert "a-very-lon.." in result
    assert "a-very-long-prd-name" not in result


def test_render_entry_progress_bar_half():
    entry = PRDEntry(name="x", completed=4, total=8)
    result = _text(render_entry(entry, False, 80, "", BASE))
    assert "████░░░░ 4/8" in result


def test_render_entry_selected_fills_width():
    result = render_entry(_auth_complete(), True, 80, "", BASE)
    assert visible_width(result) == 80


@pytest.mark.parametrize(
    "status, expected",
    [
        (CreationStatus("auth", status="generating"), "[generating...]"),
        (CreationStatus("auth", status=""), "[creating...]"),
        (CreationStatus("auth", status="error", message="boom"), "[error: boom]"),
    ],
)
def test_render_entry_creation_status(status, expected):
    entry = PRDEntry(name="auth")
    result = _text(render_entry(entry, False, 80, "", BASE, {"auth": status}))
    assert expected in result


def test_render_entry_complete_creation_shows_progress():
    entry = PRDEntry(name="auth", completed=2, total=4)
    tasks = {"auth": CreationStatus("auth", status="complete")}
    result = _text(render_entry(entry, False, 80, "", BASE, tasks))
    assert "2/4" in result


def test_format_branch_path_full():
    result = format_branch_path("chief/auth", ".chief/worktrees/auth/", 50)
    assert result == "  chief/auth  .chief/worktrees/auth/"


def test_format_branch_path_truncates_path():
    result = format_branch_path("chief/auth", ".chief/worktrees/auth/", 30)
    assert "chief/auth" in result
    assert len(result) <= 30
    assert "…" in result


def test_format_branch_path_truncates_branch():
    result = format_branch_path("chief/very-long-branch-name", ".chief/worktrees/auth/", 15)
    assert len(result) <= 15
    assert result == "  chief/very-l…"


def test_worktree_display_path_with_worktree():
    entry = PRDEntry(name="auth", worktree_dir="/project/.chief/worktrees/auth")
    assert worktree_display_path(BASE, entry) == ".chief/worktrees/auth/"


def test_worktree_display_path_without_worktree():
    entry = PRDEntry(name="auth", worktree_dir="")
    assert worktree_display_path(BASE, entry) == "(current directory)"


@pytest.mark.parametrize(
    "entry, expected",
    [
        (PRDEntry(name="a", loop_state=LoopState.RUNNING, iteration=3), "▶ 3"),
        (PRDEntry(name="a", loop_state=LoopState.PAUSED), "⏸"),
        (PRDEntry(name="a", loop_state=LoopState.COMPLETE), "✓"),
        (PRDEntry(name="a", loop_state=LoopState.ERROR), "✗"),
        (PRDEntry(name="a", loop_state=LoopState.STOPPED), "■"),
        (PRDEntry(name="a", in_progress=True, total=3), "●"),
        (PRDEntry(name="a", completed=3, total=3), "✓"),
        (PRDEntry(name="a", completed=1, total=3), ""),
    ],
)
def test_render_loop_state_indicator(entry, expected):
    assert _text(render_loop_state_indicator(entry)) == expected


def test_merge_result_success_rendering():
    result = MergeResult(success=True, message="Merged chief/auth into main", branch="chief/auth")
    text = _text(render_merge_result(result, 60, 18))
    assert "Merge Successful" in text
    assert "Merged chief/auth into main" in text
    assert "Press any key to continue" in text


def test_merge_result_conflict_rendering():
    result = MergeResult(
        success=False,
        message="Failed to merge chief/auth into current branch",
        conflicts=["src/auth.go", "src/handler.go"],
        branch="chief/auth",
    )
    text = _text(render_merge_result(result, 60, 18))
    assert "Merge Conflict" in text
    assert "src/auth.go" in text
    assert "src/handler.go" in text
    assert "git merge chief/auth" in text


def test_merge_result_conflict_list_is_limited():
    conflicts = [f"file{i}.go" for i in range(10)]
    result = MergeResult(success=False, message="Failed", conflicts=conflicts, branch="b")
    text = _text(render_merge_result(result, 60, 18))
    assert "file5.go" in text
    assert "file6.go" not in text
    assert "... and 4 more" in text


def test_clean_confirmation_rendering():
    confirmation = CleanConfirmation(
        entry_name="auth", branch="chief/auth", worktree_dir=".chief/worktrees/auth/"
    )
    text = _text(render_clean_confirmation(confirmation, 60, 18))
    assert "Clean Worktree" in text
    assert "PRD: auth" in text
    assert "Branch: chief/auth" in text
    assert "Remove worktree + delete branch" in text
    assert "Remove worktree only" in text
    assert "Cancel" in text
    assert "▸ Remove worktree + delete branch" in text


def test_clean_confirmation_marks_selected_option():
    confirmation = CleanConfirmation(entry_name="auth", selected_idx=CleanOption.CANCEL)
    text = _text(render_clean_confirmation(confirmation, 60, 18))
    assert "▸ Cancel" in text
    assert "Branch:" not in text


def test_clean_result_success_rendering():
    result = CleanResult(success=True, message="Removed worktree and deleted branch chief/auth")
    text = _text(render_clean_result(result, 60, 18))
    assert "Clean Successful" in text
    assert "Removed worktree and deleted branch chief/auth" in text
    assert "Press any key to continue" in text


def test_clean_result_error_rendering():
    result = CleanResult(success=False, message="Failed to remove worktree: permission denied")
    text = _text(render_clean_result(result, 60, 18))
    assert "Clean Failed" in text
    assert "permission denied" in text


def test_clean_option_values():
    assert [CleanOption(i) for i in range(3)] == [
        CleanOption.REMOVE_ALL,
        CleanOption.WORKTREE_ONLY,
        CleanOption.CANCEL,
    ]