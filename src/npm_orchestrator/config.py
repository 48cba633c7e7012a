"""
Configuration models for npm-orchestrator.

The client configuration can be read from the monorepo tool's own
``lerna.json`` (camelCase keys), from a YAML file, or constructed
programmatically.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from npm_orchestrator.models import DEFAULT_CLIENT

CONFIG_FILENAMES = ("npm-orchestrator.yaml", "lerna.json")
USER_CONFIG_PATH = Path.home() / ".config" / "npm-orchestrator" / "config.yaml"


@dataclass
class ClientConfig:
    """
    Which package-manager client to drive and how.

    Example YAML:
        npm_client: yarn
        npm_client_args:
          - --pure-lockfile
        mutex: file:/tmp/.yarn-mutex
        registry: https://registry.example.com/

    The same keys are accepted in camelCase (``npmClient``,
    ``npmClientArgs``), so an existing ``lerna.json`` works unchanged.
    """

    npm_client: str = DEFAULT_CLIENT
    npm_client_args: list[str] = field(default_factory=list)
    mutex: str | None = None  # Only meaningful for yarn
    registry: str | None = None  # Exported as npm_config_registry

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ClientConfig:
        """Create config from a dictionary."""

        def pick(snake: str, camel: str, default: Any = None) -> Any:
            if snake in data:
                return data[snake]
            return data.get(camel, default)

        client_args = pick("npm_client_args", "npmClientArgs") or []
        if isinstance(client_args, str):
            client_args = [client_args]

        return cls(
            npm_client=pick("npm_client", "npmClient") or DEFAULT_CLIENT,
            npm_client_args=list(client_args),
            mutex=data.get("mutex"),
            registry=data.get("registry"),
        )

    @classmethod
    def from_yaml(cls, path: Path) -> ClientConfig:
        """Load config from a YAML (or JSON) file."""
        with open(path) as f:
            data = yaml.safe_load(f)
        return cls.from_dict(data or {})

    @classmethod
    def from_yaml_string(cls, content: str) -> ClientConfig:
        """Load config from a YAML string."""
        data = yaml.safe_load(content)
        return cls.from_dict(data or {})

    def to_dict(self) -> dict[str, Any]:
        """Convert config to a dictionary."""
        return {
            "npm_client": self.npm_client,
            "npm_client_args": list(self.npm_client_args),
            "mutex": self.mutex,
            "registry": self.registry,
        }


@dataclass
class InstallOptions:
    """Per-call install switches."""

    global_style: bool = False  # npm --global-style; forces the npm client


def config_search_paths(cwd: Path | None = None) -> list[Path]:
    """Config file locations in priority order (high to low)."""
    base = cwd or Path.cwd()
    return [base / name for name in CONFIG_FILENAMES] + [USER_CONFIG_PATH]


def find_config(cwd: Path | None = None) -> Path | None:
    """Return the first existing config file, if any."""
    for path in config_search_paths(cwd):
        if path.is_file():
            return path
    return None


def load_config(path: Path | None = None, cwd: Path | None = None) -> ClientConfig:
    """Load *path*, or the first discovered config file, or defaults."""
    if path is None:
        path = find_config(cwd)
    if path is None:
        return ClientConfig()
    return ClientConfig.from_yaml(path)
