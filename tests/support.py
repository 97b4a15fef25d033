"""Shared test helpers: a throw-away configuration directory with a factory."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from lib_config_vault import ConfigFactory
from lib_config_vault.application.ports import ResourceSeeder


@dataclass
class ConfigSandbox:
    """Directory plus the factory rooted at it."""

    directory: Path
    factory: ConfigFactory

    def write(self, name: str, content: str) -> Path:
        """Create *name* below the sandbox with *content* and return its path."""

        path = self.directory / name
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content, encoding="utf-8")
        return path

    def read(self, name: str) -> str:
        return (self.directory / name).read_text(encoding="utf-8")


def create_config_sandbox(tmp_path: Path, *, resources: ResourceSeeder | None = None) -> ConfigSandbox:
    """Return a sandbox whose factory owns ``tmp_path / "config"``."""

    directory = tmp_path / "config"
    return ConfigSandbox(directory=directory, factory=ConfigFactory(directory, resources=resources))
