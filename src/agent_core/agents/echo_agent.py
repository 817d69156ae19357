"""Reference agent that validates and echoes its ``text`` input."""

from __future__ import annotations

from typing import Any

from agent_core.agents.base import Agent, AgentConfig, AgentInputSchema
from agent_core.agents.registry import AgentRegistry
from agent_core.execution import ExecutionContext, ExecutionState, RetryConfig, Step

ECHO_AGENT_ID = "echo"
ECHO_AGENT_VERSION = "1.0.0"


class EchoAgent(Agent):
    async def initialize(self) -> None:
        self.set_state(ExecutionState.INITIALIZING)

    async def execute(self) -> Any:
        context = self._require_context()
        await self.run_steps(
            [
                Step(id="validate", name="Validate input", execute=_validate_text),
                Step(
                    id="echo",
                    name="Echo",
                    execute=_echo_text,
                    validate=lambda output: isinstance(output, str),
                ),
            ],
        )
        return context.results.get("echo")


async def _validate_text(context: ExecutionContext) -> bool:
    text = context.inputs.get("text")
    if not isinstance(text, str) or not text:
        raise ValueError("Missing required input: text")
    return True


async def _echo_text(context: ExecutionContext) -> Any:
    return context.inputs.get("text")


def register_echo_agent(
    registry: AgentRegistry,
    *,
    retry_config: RetryConfig | None = None,
) -> AgentConfig:
    return registry.register(
        ECHO_AGENT_ID,
        lambda config: EchoAgent(config, retry_config=retry_config),
        name="Echo",
        description="Echo agent",
        version=ECHO_AGENT_VERSION,
        inputs={
            "text": AgentInputSchema(type="string", required=True, description="Text to echo"),
        },
    )


def build_default_registry(*, retry_config: RetryConfig | None = None) -> AgentRegistry:
    """Registry with the built-in agents."""

    registry = AgentRegistry()
    register_echo_agent(registry, retry_config=retry_config)
    return registry
