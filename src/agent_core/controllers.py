"""Controllers for agent-core CLI commands."""

from __future__ import annotations

import asyncio
import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path

from agent_core.agents.echo_agent import build_default_registry
from agent_core.agents.service import AgentRunHooks, AgentService
from agent_core.cache.repository import SqliteCacheStore
from agent_core.cache.result_cache import ResultCache
from agent_core.config import Settings


@dataclass(slots=True)
class CacheStatsCommand:
    """CLI input for cache statistics."""

    db_path: Path | None


@dataclass(slots=True)
class CacheClearCommand:
    """CLI input for cache clearing; ``owner_id=None`` wipes everything."""

    db_path: Path | None
    owner_id: str | None


@dataclass(slots=True)
class AgentRunCommand:
    """CLI input for a single agent run."""

    db_path: Path | None
    agent_id: str
    inputs: dict[str, object]
    use_cache: bool


@dataclass(slots=True)
class AgentRunOutcome:
    lines: list[str]
    success: bool


class AgentCoreCliController:
    """Glue between CLI arguments and the cache / agent services."""

    def cache_stats(self, command: CacheStatsCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _cache(settings) as cache:
            stats = cache.get_cache_stats()
        return [f"Cache entries: total={stats.total} expired={stats.expired}"]

    def cache_clear(self, command: CacheClearCommand) -> list[str]:
        settings = _settings(command.db_path)
        with _cache(settings) as cache:
            if command.owner_id is None:
                cache.clear_all_cache()
                return ["Cache cleared."]
            removed = cache.clear_cache(command.owner_id)
        return [f"Removed {removed} cache entries for {command.owner_id}."]

    def list_agents(self) -> list[str]:
        registry = build_default_registry()
        lines: list[str] = []
        for descriptor in registry.list_agents():
            inputs = ", ".join(
                f"{name}:{schema.type}{'' if schema.required else '?'}"
                for name, schema in descriptor.inputs.items()
            )
            lines.append(
                f"{descriptor.id} v{descriptor.version} "
                f"available={'yes' if descriptor.available else 'no'} "
                f"inputs=[{inputs}] - {descriptor.description}",
            )
        return lines or ["No agents registered."]

    def run_agent(self, command: AgentRunCommand) -> AgentRunOutcome:
        settings = _settings(command.db_path)
        registry = build_default_registry(retry_config=settings.retry.to_retry_config())
        lines: list[str] = []
        hooks = AgentRunHooks(
            on_progress=lambda percent, step: lines.append(f"[{percent:3d}%] {step or '-'}"),
        )

        use_cache = command.use_cache and settings.cache.enabled
        if use_cache:
            with _cache(settings) as cache:
                service = AgentService(
                    registry=registry,
                    cache=cache,
                    ttl_seconds=settings.cache.ttl_seconds,
                    max_entries=settings.cache.max_entries,
                )
                result = asyncio.run(service.run_agent(command.agent_id, command.inputs, hooks))
        else:
            service = AgentService(registry=registry)
            result = asyncio.run(service.run_agent(command.agent_id, command.inputs, hooks))

        if result.success:
            lines.append(f"Result: {json.dumps(result.data, ensure_ascii=False)}")
        for error in result.errors:
            lines.append(f"Error: {error}")
        lines.append(
            f"success={'yes' if result.success else 'no'} "
            f"cache_hit={'yes' if result.cache_hit else 'no'} "
            f"time_ms={result.execution_time_ms}",
        )
        return AgentRunOutcome(lines=lines, success=result.success)


def parse_input_pairs(pairs: tuple[str, ...]) -> dict[str, object]:
    """Parse ``key=value`` pairs; values are JSON when they parse, text otherwise."""

    inputs: dict[str, object] = {}
    for pair in pairs:
        if "=" not in pair:
            raise ValueError(f"Invalid input {pair!r}. Expected format 'key=value'.")
        key, raw = pair.split("=", 1)
        key = key.strip()
        if not key:
            raise ValueError(f"Invalid input {pair!r}. Key must not be empty.")
        try:
            inputs[key] = json.loads(raw)
        except json.JSONDecodeError:
            inputs[key] = raw
    return inputs


def _settings(db_path: Path | None) -> Settings:
    settings = Settings.from_env(db_path=db_path)
    settings.validate()
    return settings


@contextmanager
def _cache(settings: Settings) -> Iterator[ResultCache]:
    store = SqliteCacheStore(
        settings.db_path,
        sqlite_busy_timeout_ms=settings.sqlite_busy_timeout_ms,
    )
    store.init_schema()
    try:
        yield ResultCache(
            store,
            default_ttl_seconds=settings.cache.ttl_seconds,
            default_max_entries=settings.cache.max_entries,
        )
    finally:
        store.close()
