"""Loop, event and view states shared by the interface components."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, IntEnum
from typing import Any


class LoopState(IntEnum):
    """State of an agent loop for one PRD."""

    READY = 0
    RUNNING = 1
    PAUSED = 2
    STOPPED = 3
    COMPLETE = 4
    ERROR = 5


class EventType(Enum):
    """Kinds of events emitted by an agent loop."""

    ITERATION_START = "iteration_start"
    ASSISTANT_TEXT = "assistant_text"
    TOOL_START = "tool_start"
    TOOL_RESULT = "tool_result"
    STORY_STARTED = "story_started"
    COMPLETE = "complete"
    ERROR = "error"
    RETRYING = "retrying"
    UNKNOWN = "unknown"


class AppState(Enum):
    """Overall state of the application as shown in headers."""

    READY = "ready"
    RUNNING = "running"
    PAUSED = "paused"
    STOPPED = "stopped"
    COMPLETE = "complete"
    ERROR = "error"


class ViewMode(Enum):
    """Which main view is on screen."""

    DASHBOARD = "dashboard"
    LOG = "log"
    DIFF = "diff"
    PICKER = "picker"


@dataclass
class Event:
    """A single event produced by an agent loop."""

    type: EventType
    text: str = ""
    tool: str = ""
    tool_input: dict[str, Any] | None = None
    story_id: str = ""


@dataclass
class LoopInstance:
    """A registered loop for one PRD."""

    name: str
    state: LoopState = LoopState.READY
    iteration: int = 0
    branch: str = ""
    worktree_dir: str = ""


@dataclass
class LoopManager:
    """Registry of loop instances, keyed by PRD name."""

    instances: dict[str, LoopInstance] = field(default_factory=dict)

    def get_state(self, name: str) -> tuple[LoopState, int]:
        """Return the loop state and iteration for a PRD."""
        instance = self.instances.get(name)
        if instance is None:
            return LoopState.READY, 0
        return instance.state, instance.iteration

    def get_instance(self, name: str) -> LoopInstance | None:
        """Return the instance registered under a name, if any."""
        return self.instances.get(name)

    def get_all_instances(self) -> list[LoopInstance]:
        """Return every registered instance."""
        return list(self.instances.values())