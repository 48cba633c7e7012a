"""Shared pytest fixtures for npm-orchestrator tests."""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from npm_orchestrator.errors import ExecutionError
from npm_orchestrator.models import ExecutionOptions
from npm_orchestrator.runtime import ExecutionResult, OutputCallback, ProcessRuntime

ORIGINAL_MANIFEST = {
    "name": "@acme/widget",
    "version": "1.4.2",
    "description": "Widgets for everyone",
    "main": "lib/index.js",
    "scripts": {"test": "jest", "build": "tsc"},
    "dependencies": {"left-pad": "^1.3.0"},
    "devDependencies": {"jest": "^29.0.0"},
    "private": False,
}


@dataclass
class RecordedCall:
    """One call captured by :class:`RecordingRuntime`."""

    mode: str  # "sync", "async", "stream"
    executable: str
    args: list[str]
    options: ExecutionOptions
    label: str | None = None


@dataclass
class RecordingRuntime(ProcessRuntime):
    """Runtime double that records calls and replays canned output."""

    output: str = ""
    exit_code: int = 0
    stream_lines: list[str] = field(default_factory=list)
    calls: list[RecordedCall] = field(default_factory=list)

    def _finish(self, executable: str, args: Sequence[str]) -> ExecutionResult:
        argv = [executable, *args]
        if self.exit_code != 0:
            raise ExecutionError(argv, self.exit_code, self.output, "boom")
        return ExecutionResult.success_result(output=self.output, command=argv)

    def exec_sync(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
    ) -> str:
        self.calls.append(RecordedCall("sync", executable, list(args), options))
        return self._finish(executable, args).output

    async def exec_async(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
    ) -> ExecutionResult:
        self.calls.append(RecordedCall("async", executable, list(args), options))
        return self._finish(executable, args)

    async def spawn_streaming(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
        label: str,
        on_output: OutputCallback | None = None,
    ) -> ExecutionResult:
        self.calls.append(RecordedCall("stream", executable, list(args), options, label))
        for line in self.stream_lines:
            if on_output:
                on_output(f"{label}: {line}")
        return self._finish(executable, args)


@pytest.fixture
def runtime() -> RecordingRuntime:
    """A runtime that records every invocation."""
    return RecordingRuntime()


@pytest.fixture
def package_dir(tmp_path: Path) -> Path:
    """A package directory with a realistic ``package.json``."""
    directory = tmp_path / "packages" / "widget"
    directory.mkdir(parents=True)
    # Deliberately not the canonical serialization, so byte equality matters.
    (directory / "package.json").write_text(
        json.dumps(ORIGINAL_MANIFEST, indent=4, sort_keys=True) + "\n\n"
    )
    return directory
