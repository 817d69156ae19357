"""Domain models for step execution."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any

from agent_core.execution.cancellation import CancellationSignal
from agent_core.execution.retry import RetryConfig
from agent_core.storage.common import utc_now


class ExecutionState(str, Enum):
    """Run lifecycle states. ``completed``, ``error`` and ``cancelled`` are terminal."""

    IDLE = "idle"
    INITIALIZING = "initializing"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ERROR = "error"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset(
    {ExecutionState.COMPLETED, ExecutionState.ERROR, ExecutionState.CANCELLED},
)


@dataclass(frozen=True, slots=True)
class Step:
    """One named unit of work in a sequential pipeline."""

    id: str
    name: str
    execute: Callable[[ExecutionContext], Awaitable[Any]]
    required: bool = True
    retry_config: RetryConfig | None = None
    validate: Callable[[Any], bool] | None = None


@dataclass(slots=True)
class StepHistoryEntry:
    """Timing and outcome of one processed step."""

    step: str
    started_at: datetime
    finished_at: datetime
    success: bool


@dataclass(slots=True)
class StepErrorEntry:
    step: str
    error: Exception


@dataclass(slots=True)
class ExecutionContext:
    """Run-scoped mutable state; owned by exactly one run."""

    inputs: dict[str, Any] = field(default_factory=dict)
    state: ExecutionState = ExecutionState.IDLE
    results: dict[str, Any] = field(default_factory=dict)
    progress: int = 0
    current_step: str | None = None
    started_at: datetime = field(default_factory=utc_now)
    history: list[StepHistoryEntry] = field(default_factory=list)
    errors: list[StepErrorEntry] = field(default_factory=list)
    cancellation: CancellationSignal = field(default_factory=CancellationSignal)


@dataclass(slots=True)
class StepObservers:
    """Optional synchronous callbacks fired by the executor."""

    on_state_change: Callable[[ExecutionState], None] | None = None
    on_progress: Callable[[int, str | None], None] | None = None
    on_step_complete: Callable[[str, Any], None] | None = None
    on_error: Callable[[str, Exception], None] | None = None
