"""Registry of agent factories."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from agent_core.agents.base import Agent, AgentConfig, AgentInputSchema
from agent_core.errors import AgentRegistryError

AgentFactory = Callable[[AgentConfig], Agent]
ApiProbe = Callable[[tuple[str, ...]], bool]


@dataclass(slots=True)
class AgentDescriptor:
    """Listing entry for a registered agent."""

    id: str
    name: str
    description: str
    version: str
    inputs: dict[str, AgentInputSchema]
    output_format: str
    icon: str | None
    required_apis: tuple[str, ...]
    available: bool


def no_external_apis(required_apis: tuple[str, ...]) -> bool:
    """Default probe: agents that need external APIs are reported unavailable."""

    return not required_apis


@dataclass(slots=True)
class _Registration:
    factory: AgentFactory
    config: AgentConfig


class AgentRegistry:
    """Maps agent ids to factories; construct one per application or test."""

    def __init__(self, *, api_probe: ApiProbe = no_external_apis) -> None:
        self._agents: dict[str, _Registration] = {}
        self._api_probe = api_probe

    def register(  # noqa: PLR0913
        self,
        agent_id: str,
        factory: AgentFactory,
        *,
        name: str,
        description: str,
        version: str,
        inputs: dict[str, AgentInputSchema] | None = None,
        output_format: str = "text",
        icon: str | None = None,
        required_apis: tuple[str, ...] = (),
    ) -> AgentConfig:
        if agent_id in self._agents:
            raise AgentRegistryError(f"Agent with id '{agent_id}' already registered")
        config = AgentConfig(
            id=agent_id,
            name=name,
            description=description,
            version=version,
            inputs=dict(inputs or {}),
            output_format=output_format,
            icon=icon,
            required_apis=tuple(required_apis),
        )
        self._agents[agent_id] = _Registration(factory=factory, config=config)
        return config

    def unregister(self, agent_id: str) -> None:
        self._agents.pop(agent_id, None)

    def get_agent(self, agent_id: str) -> Agent | None:
        """Fresh agent instance for ``agent_id``, or ``None`` if unknown."""

        registration = self._agents.get(agent_id)
        if registration is None:
            return None
        return registration.factory(registration.config)

    def list_agents(self) -> list[AgentDescriptor]:
        return [
            AgentDescriptor(
                id=config.id,
                name=config.name,
                description=config.description,
                version=config.version,
                inputs=config.inputs,
                output_format=config.output_format,
                icon=config.icon,
                required_apis=config.required_apis,
                available=self._api_probe(config.required_apis),
            )
            for config in (registration.config for registration in self._agents.values())
        ]
