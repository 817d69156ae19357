"""Agent lifecycle base class built on the step executor."""

from __future__ import annotations

import logging
import time
from collections.abc import Callable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from agent_core.errors import AgentCancelledError, AgentCoreError, AgentInputError
from agent_core.execution import (
    ExecutionContext,
    ExecutionState,
    RetryConfig,
    Step,
    StepExecutor,
    StepObservers,
)

logger = logging.getLogger(__name__)

INPUT_TYPES = frozenset({"string", "number", "array", "object", "boolean"})


class AgentEvent(str, Enum):
    """Events an agent publishes to its listeners."""

    STATE_CHANGE = "state_change"
    PROGRESS = "progress"
    STEP_COMPLETE = "step_complete"
    ERROR = "error"
    COMPLETE = "complete"
    CANCELLED = "cancelled"


@dataclass(slots=True)
class AgentInputSchema:
    """Declared shape of one agent input."""

    type: str
    required: bool = False
    description: str = ""
    default: Any = None
    validation: Callable[[Any], bool] | None = None

    def __post_init__(self) -> None:
        if self.type not in INPUT_TYPES:
            raise ValueError(f"Unsupported input type: {self.type!r}")


@dataclass(slots=True)
class AgentConfig:
    """Static description of an agent."""

    id: str
    name: str
    description: str
    version: str
    inputs: dict[str, AgentInputSchema] = field(default_factory=dict)
    output_format: str = "text"
    icon: str | None = None
    required_apis: tuple[str, ...] = ()


@dataclass(slots=True)
class AgentResult:
    """Outcome of one agent run."""

    success: bool
    data: Any
    errors: list[Exception] = field(default_factory=list)
    execution_time_ms: int = 0
    steps_completed: int = 0
    steps_total: int = 100
    cache_hit: bool = False

    def to_payload(self) -> dict[str, Any]:
        """JSON-friendly form used for caching; errors become their messages."""

        return {
            "success": self.success,
            "data": self.data,
            "errors": [str(error) for error in self.errors],
            "execution_time_ms": self.execution_time_ms,
            "steps_completed": self.steps_completed,
            "steps_total": self.steps_total,
        }

    @classmethod
    def from_payload(cls, payload: Mapping[str, Any], *, cache_hit: bool = False) -> AgentResult:
        return cls(
            success=bool(payload["success"]),
            data=payload.get("data"),
            errors=[AgentCoreError(message) for message in payload.get("errors", [])],
            execution_time_ms=int(payload.get("execution_time_ms", 0)),
            steps_completed=int(payload.get("steps_completed", 0)),
            steps_total=int(payload.get("steps_total", 100)),
            cache_hit=cache_hit,
        )


class Agent:
    """Base class for agents.

    Subclasses implement :meth:`initialize` and :meth:`execute`; ``execute``
    normally builds a list of :class:`Step` objects and hands them to
    :meth:`run_steps`. :meth:`run` never raises for execution failures, it
    returns an unsuccessful :class:`AgentResult` instead.
    """

    def __init__(self, config: AgentConfig, *, retry_config: RetryConfig | None = None) -> None:
        self.config = config
        self.retry_config = retry_config
        self.state = ExecutionState.IDLE
        self.context: ExecutionContext | None = None
        self._listeners: dict[AgentEvent, list[Callable[..., None]]] = {}

    async def run(self, inputs: Mapping[str, Any]) -> AgentResult:
        started = time.monotonic()
        self.state = ExecutionState.IDLE
        self.context = None
        try:
            prepared = self._validate_inputs(inputs)
            self.context = ExecutionContext(inputs=prepared)
            await self.initialize()
            data = await self.execute()
            if self.context.state is ExecutionState.CANCELLED:
                raise AgentCancelledError()

            result = AgentResult(
                success=True,
                data=data,
                execution_time_ms=_elapsed_ms(started),
                steps_completed=self.context.progress,
            )
            await self.on_complete(result)
            self._emit(AgentEvent.COMPLETE, result)
            return result
        except Exception as error:
            logger.warning("Agent %s failed: %s", self.config.id, error)
            result = AgentResult(
                success=False,
                data=None,
                errors=[error],
                execution_time_ms=_elapsed_ms(started),
                steps_completed=self.context.progress if self.context else 0,
            )
            await self.on_error(error)
            self._emit(AgentEvent.ERROR, error)
            return result

    def cancel(self) -> None:
        """Request cooperative cancellation of the current run.

        The step in flight finishes; the executor moves the run to
        ``cancelled`` before the next step starts. Runs that already ended are
        left untouched.
        """

        context = self.context
        if context is None or context.state.is_terminal or context.cancellation.is_cancelled():
            return
        context.cancellation.cancel()
        self._emit(AgentEvent.CANCELLED)

    async def initialize(self) -> None:
        raise NotImplementedError

    async def execute(self) -> Any:
        raise NotImplementedError

    async def on_complete(self, result: AgentResult) -> None:  # noqa: ARG002
        self.set_state(ExecutionState.COMPLETED)

    async def on_error(self, error: Exception) -> None:  # noqa: ARG002
        cancelled = self.context is not None and self.context.cancellation.is_cancelled()
        self.set_state(ExecutionState.CANCELLED if cancelled else ExecutionState.ERROR)

    async def run_steps(self, steps: Sequence[Step]) -> None:
        """Execute ``steps`` against the current context, relaying executor events."""

        context = self._require_context()
        await StepExecutor.execute_steps(
            steps,
            context,
            StepObservers(
                on_state_change=self.set_state,
                on_progress=self.update_progress,
                on_step_complete=lambda step, result: self._emit(
                    AgentEvent.STEP_COMPLETE,
                    step,
                    result,
                ),
                on_error=lambda _step, error: self._emit(AgentEvent.ERROR, error),
            ),
            default_retry_config=self.retry_config,
        )

    def set_state(self, state: ExecutionState) -> None:
        """Move to ``state``; a run that reached a terminal state stays there."""

        if self.state.is_terminal:
            if state is not self.state:
                logger.debug("Ignoring %s after terminal state %s", state.value, self.state.value)
            return
        self.state = state
        if self.context is not None:
            self.context.state = state
        self._emit(AgentEvent.STATE_CHANGE, state)

    def update_progress(self, percent: int, step: str | None = None) -> None:
        if self.context is None:
            return
        self.context.progress = min(100, max(0, percent))
        if step:
            self.context.current_step = step
        self._emit(AgentEvent.PROGRESS, self.context.progress, step)

    def check_cancellation(self) -> None:
        """Raise inside long-running step code once cancellation was requested."""

        if self.context is not None and self.context.cancellation.is_cancelled():
            raise AgentCancelledError()

    def on(self, event: AgentEvent, listener: Callable[..., None]) -> None:
        self._listeners.setdefault(event, []).append(listener)

    def off(self, event: AgentEvent, listener: Callable[..., None]) -> None:
        listeners = self._listeners.get(event)
        if listeners and listener in listeners:
            listeners.remove(listener)

    def _emit(self, event: AgentEvent, *args: Any) -> None:
        for listener in list(self._listeners.get(event, ())):
            try:
                listener(*args)
            except Exception:
                logger.exception("Error in %s event listener", event.value)

    def _require_context(self) -> ExecutionContext:
        if self.context is None:
            raise AgentCoreError("Agent context not initialized")
        return self.context

    def _validate_inputs(self, inputs: Mapping[str, Any]) -> dict[str, Any]:
        prepared = dict(inputs)
        for key, schema in self.config.inputs.items():
            value = prepared.get(key)
            if value is None and schema.default is not None:
                value = prepared[key] = schema.default

            if value is None:
                if schema.required:
                    raise AgentInputError(key, f"Required input '{key}' is missing")
                continue

            actual_type = _input_type(value)
            if actual_type != schema.type:
                raise AgentInputError(
                    key,
                    f"Input '{key}' has invalid type. Expected {schema.type}, got {actual_type}",
                )
            if schema.validation is not None and not schema.validation(value):
                raise AgentInputError(key, f"Input '{key}' failed validation")
        return prepared


def _input_type(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list | tuple):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
