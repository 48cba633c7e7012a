"""
Base process runtime interface.
"""

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

from npm_orchestrator.errors import ExecutionError
from npm_orchestrator.models import ExecutionOptions


@dataclass
class ExecutionResult:
    """Result of a package-manager invocation."""

    success: bool
    output: str = ""
    error: str = ""
    exit_code: int = 0
    duration_ms: float = 0.0
    command: list[str] = field(default_factory=list)

    @classmethod
    def success_result(
        cls,
        output: str = "",
        error: str = "",
        duration_ms: float = 0.0,
        command: list[str] | None = None,
    ) -> ExecutionResult:
        """Create a successful result."""
        return cls(
            success=True,
            output=output,
            error=error,
            duration_ms=duration_ms,
            command=command or [],
        )

    @classmethod
    def error_result(
        cls,
        error: str,
        exit_code: int = 1,
        output: str = "",
        duration_ms: float = 0.0,
        command: list[str] | None = None,
    ) -> ExecutionResult:
        """Create an error result."""
        return cls(
            success=False,
            output=output,
            error=error,
            exit_code=exit_code,
            duration_ms=duration_ms,
            command=command or [],
        )

    def check(self) -> ExecutionResult:
        """Return self, or raise :class:`ExecutionError` if the run failed."""
        if not self.success:
            raise ExecutionError(self.command, self.exit_code, self.output, self.error)
        return self


# Callback type for streamed output lines
OutputCallback = Callable[[str], None]


class ProcessRuntime(ABC):
    """
    Abstract base class for running package-manager processes.

    Implementations raise :class:`ExecutionError` for a nonzero exit or a
    process that could not be started. No retries and no timeouts: callers
    wrap the coroutines in ``asyncio.wait_for`` if they need one.
    """

    @abstractmethod
    def exec_sync(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
    ) -> str:
        """
        Run a command to completion, blocking the caller.

        Returns:
            Captured standard output
        """
        pass

    @abstractmethod
    async def exec_async(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
    ) -> ExecutionResult:
        """Run a command without blocking the event loop."""
        pass

    @abstractmethod
    async def spawn_streaming(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
        label: str,
        on_output: OutputCallback | None = None,
    ) -> ExecutionResult:
        """
        Run a command, forwarding each output line as it arrives.

        Args:
            executable: Program to run
            args: Argument vector (without the program)
            options: Working directory and environment
            label: Prefix for every forwarded line (usually a package name)
            on_output: Receives ``"<label>: <line>"``; defaults to stdout
        """
        pass

    def _timer(self) -> _Timer:
        """Create a timer for measuring execution duration."""
        return _Timer()


class _Timer:
    """Simple timer for measuring execution duration."""

    def __init__(self) -> None:
        self.start_time = time.perf_counter()

    def elapsed_ms(self) -> float:
        """Get elapsed time in milliseconds."""
        return (time.perf_counter() - self.start_time) * 1000
