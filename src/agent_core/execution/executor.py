"""Sequential step executor driving steps through the retry policy."""

from __future__ import annotations

import logging
import math
from collections.abc import Sequence
from datetime import datetime
from typing import Any

from agent_core.errors import InvalidStepError, StepValidationError
from agent_core.execution.models import (
    ExecutionContext,
    ExecutionState,
    Step,
    StepErrorEntry,
    StepHistoryEntry,
    StepObservers,
)
from agent_core.execution.retry import RetryConfig, with_retries
from agent_core.storage.common import utc_now

logger = logging.getLogger(__name__)


def _ignore_retry(_attempt: int, _error: Exception) -> None:
    """Retry hook placeholder; attempts are already logged by the retry policy."""


class StepExecutor:
    """Runs an ordered list of steps against one execution context.

    Steps run strictly one after another. Cancellation is checked before each
    step starts; a step in flight is never interrupted. A failing required
    step moves the context to ``error`` and re-raises; a failing optional
    step is recorded and skipped.
    """

    @staticmethod
    async def execute_steps(
        steps: Sequence[Step],
        context: ExecutionContext,
        observers: StepObservers | None = None,
        *,
        default_retry_config: RetryConfig | None = None,
    ) -> None:
        if not steps:
            return

        opts = observers or StepObservers()
        _set_state(context, ExecutionState.EXECUTING, opts)

        total = len(steps)
        for index, step in enumerate(steps):
            if step is None or not callable(getattr(step, "execute", None)):
                raise InvalidStepError(index)

            if context.cancellation.is_cancelled():
                logger.info("Run cancelled before step %d/%d", index + 1, total)
                _set_state(context, ExecutionState.CANCELLED, opts)
                return

            started_at = utc_now()
            context.current_step = step.name
            logger.debug("Starting step %s (%s)", step.id, step.name)

            try:
                result = await with_retries(
                    lambda step=step: step.execute(context),
                    step.retry_config or default_retry_config,
                    _ignore_retry,
                )
                if step.validate is not None and not step.validate(result):
                    raise StepValidationError(step.name)
            except Exception as error:
                _record_failure(context, step, error, started_at, opts)
                if step.required:
                    logger.warning("Required step %s failed: %s", step.name, error)
                    _set_state(context, ExecutionState.ERROR, opts)
                    raise
                logger.warning("Optional step %s failed, continuing: %s", step.name, error)
                continue

            _record_success(context, step, result, started_at)
            context.progress = max(context.progress, _percent_done(index + 1, total))
            if opts.on_progress is not None:
                opts.on_progress(context.progress, step.name)
            if opts.on_step_complete is not None:
                opts.on_step_complete(step.name, result)

        _set_state(context, ExecutionState.COMPLETED, opts)


def _percent_done(done: int, total: int) -> int:
    # halves round up: 1 of 8 steps is 13%
    return math.floor(done * 100 / total + 0.5)


def _set_state(context: ExecutionContext, state: ExecutionState, opts: StepObservers) -> None:
    context.state = state
    if opts.on_state_change is not None:
        opts.on_state_change(state)


def _record_success(
    context: ExecutionContext,
    step: Step,
    result: Any,
    started_at: datetime,
) -> None:
    context.results[step.id] = result
    context.history.append(
        StepHistoryEntry(
            step=step.name,
            started_at=started_at,
            finished_at=utc_now(),
            success=True,
        ),
    )
    logger.debug("Step %s completed", step.name)


def _record_failure(
    context: ExecutionContext,
    step: Step,
    error: Exception,
    started_at: datetime,
    opts: StepObservers,
) -> None:
    context.errors.append(StepErrorEntry(step=step.name, error=error))
    context.history.append(
        StepHistoryEntry(
            step=step.name,
            started_at=started_at,
            finished_at=utc_now(),
            success=False,
        ),
    )
    if opts.on_error is not None:
        opts.on_error(step.name, error)
