"""Use-case service: run registered agents behind the result cache."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any

from agent_core.agents.base import Agent, AgentEvent, AgentResult
from agent_core.agents.registry import AgentRegistry
from agent_core.cache.keys import cache_key_digest, create_cache_key
from agent_core.cache.result_cache import ResultCache
from agent_core.errors import AgentNotRegisteredError
from agent_core.execution import ExecutionState

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class AgentRunHooks:
    """Optional listeners attached to the agent for one run."""

    on_state_change: Callable[[ExecutionState], None] | None = None
    on_progress: Callable[[int, str | None], None] | None = None
    on_step_complete: Callable[[str, Any], None] | None = None
    on_error: Callable[[Exception], None] | None = None
    on_complete: Callable[[AgentResult], None] | None = None
    on_cancelled: Callable[[], None] | None = None

    def attach(self, agent: Agent) -> None:
        pairs = (
            (AgentEvent.STATE_CHANGE, self.on_state_change),
            (AgentEvent.PROGRESS, self.on_progress),
            (AgentEvent.STEP_COMPLETE, self.on_step_complete),
            (AgentEvent.ERROR, self.on_error),
            (AgentEvent.COMPLETE, self.on_complete),
            (AgentEvent.CANCELLED, self.on_cancelled),
        )
        for event, listener in pairs:
            if listener is not None:
                agent.on(event, listener)


@dataclass(slots=True)
class AgentRun:
    """Handle for a run started in the background."""

    task: asyncio.Task[AgentResult]
    cancel: Callable[[], None]


class AgentService:
    """Looks up agents, consults the cache and caches successful results."""

    def __init__(
        self,
        *,
        registry: AgentRegistry,
        cache: ResultCache | None = None,
        ttl_seconds: float | None = None,
        max_entries: int | None = None,
    ) -> None:
        self.registry = registry
        self.cache = cache
        self.ttl_seconds = ttl_seconds
        self.max_entries = max_entries

    async def run_agent(
        self,
        agent_id: str,
        inputs: Mapping[str, Any],
        hooks: AgentRunHooks | None = None,
    ) -> AgentResult:
        agent = self._prepare(agent_id, hooks)
        return await self._run_cached(agent, inputs)

    def start_agent(
        self,
        agent_id: str,
        inputs: Mapping[str, Any],
        hooks: AgentRunHooks | None = None,
    ) -> AgentRun:
        """Schedule a run on the running event loop and return a cancel handle."""

        agent = self._prepare(agent_id, hooks)
        task = asyncio.create_task(self._run_cached(agent, inputs))
        return AgentRun(task=task, cancel=agent.cancel)

    def _prepare(self, agent_id: str, hooks: AgentRunHooks | None) -> Agent:
        agent = self.registry.get_agent(agent_id)
        if agent is None:
            raise AgentNotRegisteredError(agent_id)
        if hooks is not None:
            hooks.attach(agent)
        return agent

    async def _run_cached(self, agent: Agent, inputs: Mapping[str, Any]) -> AgentResult:
        config = agent.config
        cache_key = create_cache_key(config.id, config.version, inputs)
        if self.cache is not None:
            cached = self.cache.get(cache_key)
            if cached is not None:
                logger.info("Cache hit for agent %s (%s)", config.id, cache_key_digest(cache_key))
                return AgentResult.from_payload(cached, cache_hit=True)

        result = await agent.run(inputs)

        if result.success and self.cache is not None:
            self.cache.set(
                config.id,
                cache_key,
                result.to_payload(),
                ttl_seconds=self.ttl_seconds,
                max_entries=self.max_entries,
            )
        return result
