"""Data models shared by the command builder, swap manager and facade."""
from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_CLIENT = "npm"
ALTERNATE_CLIENT = "yarn"

MANIFEST_FILENAME = "package.json"

# "foo@^1.0.0" -> ("foo", "^1.0.0"); the scope's leading "@" stays in the name.
_DEPENDENCY_RE = re.compile(r"^(@?[^@]+)(?:@(.+))?")


@dataclass(frozen=True)
class DependencySpec:
    """One requested dependency, e.g. ``@scope/pkg@^1.2.0``."""

    name: str
    version_range: str | None = None
    is_dev: bool = False

    @classmethod
    def parse(cls, dependency: str, dev: bool = False) -> DependencySpec:
        """Parse a ``name@range`` string into a DependencySpec.

        Supported formats:
        - ``"name"`` -> range absent
        - ``"name@range"``
        - ``"@scope/name"`` and ``"@scope/name@range"``
        """
        match = _DEPENDENCY_RE.match(dependency)
        if match is None:
            raise ValueError(f"Invalid dependency: {dependency!r}")
        name, version_range = match.group(1), match.group(2)
        return cls(name=name, version_range=version_range, is_dev=dev)

    @property
    def materialized_range(self) -> str:
        """The range written into a manifest; ``"*"`` when none was given."""
        return self.version_range or "*"

    def __str__(self) -> str:
        if self.version_range:
            return f"{self.name}@{self.version_range}"
        return self.name


@dataclass
class PackageDescriptor:
    """A package on disk, used to label streamed output."""

    name: str
    location: Path
    version: str = ""

    @classmethod
    def from_directory(cls, directory: str | Path) -> PackageDescriptor:
        """Describe the package whose ``package.json`` lives in *directory*.

        Falls back to the directory name when the manifest has no name.
        """
        location = Path(directory)
        with open(location / MANIFEST_FILENAME, encoding="utf-8") as f:
            data = json.load(f)
        return cls(
            name=data.get("name") or location.name,
            location=location,
            version=data.get("version", ""),
        )


@dataclass
class ExecutionOptions:
    """Where and with which environment a package-manager process runs.

    ``env`` is ``None`` when the child should simply inherit the current
    environment.
    """

    cwd: Path
    env: dict[str, str] | None = None


@dataclass
class Command:
    """An executable plus its argument vector."""

    executable: str
    args: list[str] = field(default_factory=list)

    @property
    def argv(self) -> list[str]:
        return [self.executable, *self.args]

    def __str__(self) -> str:
        return " ".join(self.argv)
