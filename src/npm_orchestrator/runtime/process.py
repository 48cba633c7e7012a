"""
Subprocess runtime with blocking, asyncio and streaming execution.
"""

from __future__ import annotations

import asyncio
import subprocess
import sys
from collections.abc import Sequence

from npm_orchestrator.errors import ExecutionError
from npm_orchestrator.logging import SILLY, get_logger
from npm_orchestrator.models import ExecutionOptions
from npm_orchestrator.runtime.base import ExecutionResult, OutputCallback, ProcessRuntime

logger = get_logger(__name__)

_CHUNK_SIZE = 64 * 1024


def _write_stdout(line: str) -> None:
    sys.stdout.write(line + "\n")
    sys.stdout.flush()


class SubprocessRuntime(ProcessRuntime):
    """
    Runs commands directly (no shell) with ``subprocess`` / ``asyncio``.

    When ``options.env`` is ``None`` the child inherits this process's
    environment.
    """

    def exec_sync(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
    ) -> str:
        """Run to completion and return stdout."""
        argv = [executable, *args]
        timer = self._timer()
        logger.log(SILLY, "exec_sync: %s (cwd=%s)", argv, options.cwd)

        try:
            completed = subprocess.run(
                argv,
                cwd=options.cwd,
                env=options.env,
                capture_output=True,
                check=False,
            )
        except OSError as e:
            logger.error("Failed to start %s: %s", executable, e)
            raise ExecutionError(argv, -1, stderr=str(e)) from e

        result = self._result(
            argv,
            completed.returncode,
            self._decode_output(completed.stdout),
            self._decode_output(completed.stderr),
            timer.elapsed_ms(),
        )
        return self._checked(result).output

    async def exec_async(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
    ) -> ExecutionResult:
        """Run without blocking the event loop, capturing all output."""
        argv = [executable, *args]
        timer = self._timer()
        logger.log(SILLY, "exec_async: %s (cwd=%s)", argv, options.cwd)

        process = await self._start(argv, options)
        try:
            stdout, stderr = await process.communicate()
        except (asyncio.CancelledError, Exception):
            await self._terminate(process)
            raise

        result = self._result(
            argv,
            process.returncode,
            self._decode_output(stdout),
            self._decode_output(stderr),
            timer.elapsed_ms(),
        )
        return self._checked(result)

    async def spawn_streaming(
        self,
        executable: str,
        args: Sequence[str],
        options: ExecutionOptions,
        label: str,
        on_output: OutputCallback | None = None,
    ) -> ExecutionResult:
        """
        Run while forwarding stdout and stderr line by line.

        Every line is passed to ``on_output`` as ``"<label>: <line>"`` as soon
        as it is read. Both streams are also collected into the result.
        """
        argv = [executable, *args]
        timer = self._timer()
        callback = on_output or _write_stdout
        logger.log(SILLY, "spawn_streaming: %s (cwd=%s, label=%s)", argv, options.cwd, label)

        process = await self._start(argv, options)

        stdout_lines: list[str] = []
        stderr_lines: list[str] = []

        def _emit(raw: bytes, lines: list[str]) -> None:
            decoded = self._decode_output(raw)
            lines.append(decoded)
            text = decoded.rstrip("\r\n")
            callback(f"{label}: {text}")

        async def _read_stream(
            stream: asyncio.StreamReader | None,
            lines: list[str],
        ) -> None:
            # Chunked reads; readline() fails on lines longer than the reader limit.
            if stream is None:
                return
            pending = b""
            while True:
                chunk = await stream.read(_CHUNK_SIZE)
                if not chunk:
                    break
                pending += chunk
                *complete, pending = pending.split(b"\n")
                for raw in complete:
                    _emit(raw + b"\n", lines)
            if pending:
                _emit(pending, lines)

        try:
            await asyncio.gather(
                _read_stream(process.stdout, stdout_lines),
                _read_stream(process.stderr, stderr_lines),
            )
            await process.wait()
        except (asyncio.CancelledError, Exception):
            await self._terminate(process)
            raise

        result = self._result(
            argv,
            process.returncode,
            "".join(stdout_lines),
            "".join(stderr_lines),
            timer.elapsed_ms(),
        )
        return self._checked(result)

    async def _start(
        self,
        argv: list[str],
        options: ExecutionOptions,
    ) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                *argv,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
                cwd=options.cwd,
                env=options.env,
            )
        except OSError as e:
            logger.error("Failed to start %s: %s", argv[0], e)
            raise ExecutionError(argv, -1, stderr=str(e)) from e

    async def _terminate(self, process: asyncio.subprocess.Process) -> None:
        """Kill a child left behind by cancellation or a failed reader."""
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass
        await process.wait()

    def _result(
        self,
        argv: list[str],
        returncode: int | None,
        stdout: str,
        stderr: str,
        duration_ms: float,
    ) -> ExecutionResult:
        if returncode == 0:
            return ExecutionResult.success_result(
                output=stdout,
                error=stderr,
                duration_ms=duration_ms,
                command=argv,
            )
        return ExecutionResult.error_result(
            error=stderr,
            exit_code=returncode if returncode is not None else -1,
            output=stdout,
            duration_ms=duration_ms,
            command=argv,
        )

    def _checked(self, result: ExecutionResult) -> ExecutionResult:
        if not result.success:
            logger.error(
                "%s exited with code %s", " ".join(result.command), result.exit_code
            )
        return result.check()

    def _decode_output(self, data: bytes) -> str:
        return data.decode("utf-8", errors="replace")
