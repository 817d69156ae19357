from __future__ import annotations

from typing import Any

import allure
import pytest

from agent_core.errors import InvalidStepError, StepValidationError
from agent_core.execution import (
    ExecutionContext,
    ExecutionState,
    RetryConfig,
    Step,
    StepExecutor,
    StepObservers,
)

pytestmark = [
    allure.epic("Execution Core"),
    allure.feature("Step Executor"),
]

NO_RETRY = RetryConfig(max_retries=0, delays=(0.0,))


class Recorder:
    """Collects every observer notification in call order."""

    def __init__(self) -> None:
        self.events: list[tuple[Any, ...]] = []
        self.executed: list[str] = []

    @property
    def states(self) -> list[ExecutionState]:
        return [event[1] for event in self.events if event[0] == "state"]

    def observers(self, **overrides: Any) -> StepObservers:
        observers = StepObservers(
            on_state_change=lambda state: self.events.append(("state", state)),
            on_progress=lambda percent, step: self.events.append(("progress", percent, step)),
            on_step_complete=lambda step, result: self.events.append(("complete", step, result)),
            on_error=lambda step, error: self.events.append(("error", step, error)),
        )
        for name, callback in overrides.items():
            setattr(observers, name, callback)
        return observers

    def step(
        self,
        step_id: str,
        *,
        result: Any = None,
        error: Exception | None = None,
        required: bool = True,
        validate: Any = None,
        retry_config: RetryConfig | None = NO_RETRY,
    ) -> Step:
        async def _execute(_context: ExecutionContext) -> Any:
            self.executed.append(step_id)
            if error is not None:
                raise error
            return step_id if result is None else result

        return Step(
            id=step_id,
            name=step_id.upper(),
            execute=_execute,
            required=required,
            retry_config=retry_config,
            validate=validate,
        )


@pytest.mark.asyncio
async def test_empty_pipeline_is_a_no_op() -> None:
    recorder = Recorder()
    context = ExecutionContext()

    await StepExecutor.execute_steps([], context, recorder.observers())

    assert context.state is ExecutionState.IDLE
    assert recorder.events == []


@pytest.mark.asyncio
async def test_successful_pipeline_records_results_history_and_progress() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    steps = [recorder.step("a"), recorder.step("b"), recorder.step("c")]

    await StepExecutor.execute_steps(steps, context, recorder.observers())

    assert context.state is ExecutionState.COMPLETED
    assert context.results == {"a": "a", "b": "b", "c": "c"}
    assert context.progress == 100
    assert [entry.step for entry in context.history] == ["A", "B", "C"]
    assert all(entry.success for entry in context.history)
    assert all(entry.finished_at >= entry.started_at for entry in context.history)
    assert recorder.events == [
        ("state", ExecutionState.EXECUTING),
        ("progress", 33, "A"),
        ("complete", "A", "a"),
        ("progress", 67, "B"),
        ("complete", "B", "b"),
        ("progress", 100, "C"),
        ("complete", "C", "c"),
        ("state", ExecutionState.COMPLETED),
    ]


@pytest.mark.asyncio
async def test_progress_rounds_half_percentages_up() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    steps = [recorder.step(f"s{index}") for index in range(8)]

    await StepExecutor.execute_steps(steps, context, recorder.observers())

    reported = [event[1] for event in recorder.events if event[0] == "progress"]
    assert reported == [13, 25, 38, 50, 63, 75, 88, 100]


@pytest.mark.asyncio
async def test_cancel_from_first_completion_stops_remaining_steps() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    steps = [recorder.step("one"), recorder.step("two"), recorder.step("three")]

    def _cancel_after_first(step: str, result: Any) -> None:
        recorder.events.append(("complete", step, result))
        context.cancellation.cancel()

    await StepExecutor.execute_steps(
        steps,
        context,
        recorder.observers(on_step_complete=_cancel_after_first),
    )

    assert recorder.executed == ["one"]
    assert context.state is ExecutionState.CANCELLED
    assert context.results == {"one": "one"}
    assert recorder.states == [ExecutionState.EXECUTING, ExecutionState.CANCELLED]


@pytest.mark.asyncio
async def test_cancelled_before_start_runs_nothing() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    context.cancellation.cancel()

    await StepExecutor.execute_steps([recorder.step("a")], context, recorder.observers())

    assert recorder.executed == []
    assert context.state is ExecutionState.CANCELLED


@pytest.mark.asyncio
async def test_required_failure_halts_pipeline_and_propagates() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    failure = RuntimeError("required step broke")
    steps = [recorder.step("a", error=failure), recorder.step("b", required=False)]

    with pytest.raises(RuntimeError) as excinfo:
        await StepExecutor.execute_steps(steps, context, recorder.observers())

    assert excinfo.value is failure
    assert recorder.executed == ["a"]
    assert context.state is ExecutionState.ERROR
    assert [(entry.step, entry.error) for entry in context.errors] == [("A", failure)]
    assert [entry.success for entry in context.history] == [False]
    assert ("error", "A", failure) in recorder.events
    assert recorder.states == [ExecutionState.EXECUTING, ExecutionState.ERROR]


@pytest.mark.asyncio
async def test_optional_failure_is_recorded_and_pipeline_continues() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    steps = [
        recorder.step("a", error=RuntimeError("optional broke"), required=False),
        recorder.step("b"),
    ]

    await StepExecutor.execute_steps(steps, context, recorder.observers())

    assert context.state is ExecutionState.COMPLETED
    assert [entry.step for entry in context.errors] == ["A"]
    assert context.results == {"b": "b"}
    assert [entry.success for entry in context.history] == [False, True]
    assert context.progress == 100


@pytest.mark.asyncio
async def test_rejected_result_is_a_failure_evaluated_once() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    steps = [
        recorder.step(
            "a",
            result=42,
            validate=lambda output: isinstance(output, str),
            retry_config=RetryConfig(max_retries=3, delays=(0.0,)),
        ),
    ]

    with pytest.raises(StepValidationError, match="Validation failed for step 'A'"):
        await StepExecutor.execute_steps(steps, context, recorder.observers())

    assert recorder.executed == ["a"]
    assert context.results == {}
    assert context.state is ExecutionState.ERROR


@pytest.mark.asyncio
async def test_transient_failures_are_retried_per_step_config() -> None:
    context = ExecutionContext()
    calls = 0

    async def _flaky(_context: ExecutionContext) -> str:
        nonlocal calls
        calls += 1
        if calls < 3:
            raise ConnectionError("try again")
        return "stable"

    step = Step(
        id="flaky",
        name="Flaky",
        execute=_flaky,
        retry_config=RetryConfig(max_retries=2, delays=(0.0,)),
    )

    await StepExecutor.execute_steps([step], context)

    assert calls == 3
    assert context.results == {"flaky": "stable"}
    assert len(context.history) == 1
    assert context.errors == []


@pytest.mark.asyncio
async def test_default_retry_config_applies_to_steps_without_one() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    step = recorder.step("a", error=RuntimeError("down"), required=False, retry_config=None)

    await StepExecutor.execute_steps(
        [step],
        context,
        default_retry_config=RetryConfig(max_retries=2, delays=(0.0,)),
    )

    assert recorder.executed == ["a", "a", "a"]


@pytest.mark.asyncio
async def test_malformed_step_aborts_without_recording() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    broken = Step(id="broken", name="Broken", execute=None)  # type: ignore[arg-type]

    with pytest.raises(InvalidStepError, match="Invalid step at index 1"):
        await StepExecutor.execute_steps(
            [recorder.step("a"), broken, recorder.step("c")],
            context,
        )

    assert recorder.executed == ["a"]
    assert context.results == {"a": "a"}
    assert [entry.step for entry in context.history] == ["A"]
    assert context.errors == []


@pytest.mark.asyncio
async def test_later_result_for_same_identity_overwrites() -> None:
    recorder = Recorder()
    context = ExecutionContext()
    steps = [recorder.step("dup", result="first"), recorder.step("dup", result="second")]

    await StepExecutor.execute_steps(steps, context)

    assert context.results == {"dup": "second"}
    assert len(context.history) == 2


@pytest.mark.asyncio
async def test_steps_see_previous_results_through_context() -> None:
    context = ExecutionContext(inputs={"n": 2})

    async def _double(ctx: ExecutionContext) -> int:
        return ctx.inputs["n"] * 2

    async def _add_one(ctx: ExecutionContext) -> int:
        return ctx.results["double"] + 1

    await StepExecutor.execute_steps(
        [
            Step(id="double", name="Double", execute=_double),
            Step(id="add", name="Add one", execute=_add_one),
        ],
        context,
    )

    assert context.results["add"] == 5
    assert context.current_step == "Add one"
