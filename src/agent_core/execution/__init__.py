"""Sequential step execution with bounded retries and cooperative cancellation."""

from agent_core.execution.cancellation import CancellationSignal
from agent_core.execution.executor import StepExecutor
from agent_core.execution.models import (
    ExecutionContext,
    ExecutionState,
    Step,
    StepErrorEntry,
    StepHistoryEntry,
    StepObservers,
)
from agent_core.execution.retry import DEFAULT_RETRY_CONFIG, RetryConfig, with_retries

__all__ = [
    "DEFAULT_RETRY_CONFIG",
    "CancellationSignal",
    "ExecutionContext",
    "ExecutionState",
    "RetryConfig",
    "Step",
    "StepErrorEntry",
    "StepExecutor",
    "StepHistoryEntry",
    "StepObservers",
    "with_retries",
]
