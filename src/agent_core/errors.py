"""Exception hierarchy shared by the execution core and agent layer."""

from __future__ import annotations


class AgentCoreError(RuntimeError):
    """Base class for errors raised by agent_core itself."""


class InvalidStepError(AgentCoreError):
    """Malformed step definition; aborts a run without retrying."""

    def __init__(self, index: int) -> None:
        super().__init__(f"Invalid step at index {index}")
        self.index = index


class StepValidationError(AgentCoreError):
    """A step produced a result rejected by its own validator."""

    def __init__(self, step: str) -> None:
        super().__init__(f"Validation failed for step '{step}'")
        self.step = step


class AgentInputError(AgentCoreError):
    """Agent inputs do not match the declared input schema."""

    def __init__(self, key: str, message: str) -> None:
        super().__init__(message)
        self.key = key


class AgentCancelledError(AgentCoreError):
    """Agent run stopped at a step boundary because it was cancelled."""

    def __init__(self) -> None:
        super().__init__("Agent execution was cancelled")


class AgentRegistryError(AgentCoreError):
    """Invalid registry operation."""


class AgentNotRegisteredError(AgentRegistryError):
    """Requested agent id is unknown to the registry."""

    def __init__(self, agent_id: str) -> None:
        super().__init__(f"Agent '{agent_id}' is not registered")
        self.agent_id = agent_id
