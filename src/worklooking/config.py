"""Application configuration loaded from config.yaml."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import yaml


@dataclass(frozen=True)
class LLMConfig:
    model: str = "claude-sonnet-4-5-20250929"
    max_tokens: int = 4096
    timeout: int = 60


@dataclass(frozen=True)
class AgentConfig:
    max_rounds: int = 20
    default_theme: str = "modern-sidebar"


@dataclass(frozen=True)
class SandboxConfig:
    data_dir: str = "~/.worklooking"

    @property
    def resolved_data_dir(self) -> Path:
        return Path(self.data_dir).expanduser().resolve()


@dataclass(frozen=True)
class FetchConfig:
    selector_timeout_ms: int = 30000
    navigation_timeout_ms: int = 30000
    max_content_chars: int = 50000
    profile_dir: str = "~/.worklooking/browser-profile"

    @property
    def resolved_profile_dir(self) -> Path:
        return Path(self.profile_dir).expanduser()


@dataclass(frozen=True)
class UsageConfig:
    db_path: str = "~/.worklooking/usage.db"

    @property
    def resolved_db_path(self) -> Path:
        return Path(self.db_path).expanduser()


@dataclass(frozen=True)
class AppConfig:
    llm: LLMConfig = field(default_factory=LLMConfig)
    agent: AgentConfig = field(default_factory=AgentConfig)
    sandbox: SandboxConfig = field(default_factory=SandboxConfig)
    fetch: FetchConfig = field(default_factory=FetchConfig)
    usage: UsageConfig = field(default_factory=UsageConfig)


def load_config(path: str | Path | None = None) -> AppConfig:
    """Load config from YAML file, falling back to defaults."""
    if path is None:
        candidate = Path.cwd() / "config.yaml"
        if candidate.exists():
            path = candidate

    raw: dict = {}
    if path is not None:
        p = Path(path)
        if p.exists():
            raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    return AppConfig(
        llm=LLMConfig(**raw.get("llm", {})),
        agent=AgentConfig(**raw.get("agent", {})),
        sandbox=SandboxConfig(**raw.get("sandbox", {})),
        fetch=FetchConfig(**raw.get("fetch", {})),
        usage=UsageConfig(**raw.get("usage", {})),
    )
