"""
Exceptions raised by npm-orchestrator.

None of these are retried or handled inside the library; they always reach
the immediate caller.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from npm_orchestrator.manifest.swap import ManifestBackup


class NpmOrchestratorError(Exception):
    """Base class for all npm-orchestrator errors."""

    pass


class BackupError(NpmOrchestratorError):
    """Raised when a manifest could not be moved to its backup path.

    Nothing on disk has changed when this is raised.
    """

    pass


class WriteError(NpmOrchestratorError):
    """Raised when the temporary manifest could not be written.

    The original manifest is still sitting at ``backup.backup_path``; call
    :func:`~npm_orchestrator.manifest.swap.restore_manifest` with
    ``backup`` to put it back.
    """

    def __init__(self, message: str, backup: ManifestBackup) -> None:
        super().__init__(message)
        self.backup = backup


class NoBackupError(NpmOrchestratorError):
    """Raised when a restore is attempted with nothing to restore."""

    pass


class ExecutionError(NpmOrchestratorError):
    """Raised when a package-manager process exits nonzero or fails to spawn."""

    def __init__(
        self,
        command: list[str],
        exit_code: int,
        stdout: str = "",
        stderr: str = "",
    ) -> None:
        self.command = command
        self.exit_code = exit_code
        self.stdout = stdout
        self.stderr = stderr
        detail = stderr.strip() or stdout.strip()
        message = f"Command failed with exit code {exit_code}: {' '.join(command)}"
        if detail:
            message = f"{message}\n{detail}"
        super().__init__(message)
