"""Agent lifecycle, registry and cache-aware run service."""

from agent_core.agents.base import (
    Agent,
    AgentConfig,
    AgentEvent,
    AgentInputSchema,
    AgentResult,
)
from agent_core.agents.registry import AgentDescriptor, AgentRegistry
from agent_core.agents.service import AgentRun, AgentRunHooks, AgentService

__all__ = [
    "Agent",
    "AgentConfig",
    "AgentDescriptor",
    "AgentEvent",
    "AgentInputSchema",
    "AgentRegistry",
    "AgentResult",
    "AgentRun",
    "AgentRunHooks",
    "AgentService",
]
