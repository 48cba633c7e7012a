"""
Temporary manifest substitution.

Installing an explicit subset of dependencies into a package directory is
done by moving the real ``package.json`` aside, writing a minimal manifest
that lists only the requested dependencies, running the install, and then
moving the real manifest back.

Each swap returns a :class:`ManifestBackup` handle; restoring requires that
handle. A directory with a backup already on disk refuses a second swap.
"""

from __future__ import annotations

import atexit
from collections.abc import AsyncIterator, Iterator, Sequence
from contextlib import asynccontextmanager, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from npm_orchestrator.errors import BackupError, NoBackupError, WriteError
from npm_orchestrator.logging import SILLY, get_logger
from npm_orchestrator.manifest.io import (
    read_manifest,
    rename,
    rename_sync,
    write_manifest,
    write_manifest_async,
)
from npm_orchestrator.models import MANIFEST_FILENAME, DependencySpec

logger = get_logger(__name__)

BACKUP_SUFFIX = ".backup"


@dataclass(eq=False)
class ManifestBackup:
    """Handle for one in-progress manifest swap."""

    directory: Path
    manifest_path: Path
    backup_path: Path
    restored: bool = False

    @classmethod
    def for_directory(cls, directory: str | Path) -> ManifestBackup:
        directory = Path(directory)
        manifest_path = directory / MANIFEST_FILENAME
        return cls(
            directory=directory,
            manifest_path=manifest_path,
            backup_path=manifest_path.with_name(manifest_path.name + BACKUP_SUFFIX),
        )

    def restore_if_pending(self) -> None:
        """Restore unless already done; used from interpreter shutdown."""
        if not self.restored and self.backup_path.exists():
            restore_manifest(self)


def build_synthetic_manifest(
    original: dict[str, Any],
    dependencies: Sequence[DependencySpec],
) -> dict[str, Any]:
    """Build the minimal manifest installed in place of *original*.

    Only ``name`` and ``version`` are carried over. Each dependency lands in
    exactly one of ``dependencies`` / ``devDependencies``.
    """
    deps: dict[str, str] = {}
    dev_deps: dict[str, str] = {}
    for spec in dependencies:
        target = dev_deps if spec.is_dev else deps
        target[spec.name] = spec.materialized_range

    return {
        "name": original.get("name"),
        "version": original.get("version"),
        "dependencies": deps,
        "devDependencies": dev_deps,
    }


def _prepare(directory: str | Path) -> tuple[ManifestBackup, dict[str, Any]]:
    backup = ManifestBackup.for_directory(directory)
    if backup.backup_path.exists():
        logger.error("Backup already exists: %s", backup.backup_path)
        raise BackupError(f"Manifest backup already exists: {backup.backup_path}")
    try:
        original = read_manifest(backup.manifest_path)
    except (OSError, ValueError) as e:
        logger.error("Problem reading %s: %s", backup.manifest_path, e)
        raise BackupError(f"Cannot read manifest {backup.manifest_path}: {e}") from e
    if not isinstance(original, dict):
        logger.error("Manifest %s is not a JSON object", backup.manifest_path)
        raise BackupError(f"Manifest {backup.manifest_path} is not a JSON object")
    return backup, original


def write_temporary_manifest(
    directory: str | Path,
    dependencies: Sequence[DependencySpec],
) -> ManifestBackup:
    """Swap *directory*'s manifest for one listing only *dependencies*.

    Raises:
        BackupError: the manifest could not be read or moved aside; nothing
            on disk changed.
        WriteError: the temporary manifest could not be written; the
            original stays at the backup path (see ``WriteError.backup``).
    """
    backup, original = _prepare(directory)

    logger.log(SILLY, "Backing up %s", backup.manifest_path)
    try:
        rename_sync(backup.manifest_path, backup.backup_path)
    except OSError as e:
        logger.error("Problem backing up %s: %s", backup.manifest_path, e)
        raise BackupError(f"Cannot back up {backup.manifest_path}: {e}") from e

    temp_manifest = build_synthetic_manifest(original, dependencies)
    logger.log(SILLY, "Writing temporary manifest %s", temp_manifest)
    try:
        write_manifest(backup.manifest_path, temp_manifest)
    except (OSError, TypeError, ValueError) as e:
        logger.error("Problem writing temporary manifest in %s: %s", backup.directory, e)
        raise WriteError(f"Cannot write temporary manifest: {e}", backup) from e

    return backup


async def write_temporary_manifest_async(
    directory: str | Path,
    dependencies: Sequence[DependencySpec],
) -> ManifestBackup:
    """Asyncio variant of :func:`write_temporary_manifest`."""
    backup, original = _prepare(directory)

    logger.log(SILLY, "Backing up %s", backup.manifest_path)
    try:
        await rename(backup.manifest_path, backup.backup_path)
    except OSError as e:
        logger.error("Problem backing up %s: %s", backup.manifest_path, e)
        raise BackupError(f"Cannot back up {backup.manifest_path}: {e}") from e

    temp_manifest = build_synthetic_manifest(original, dependencies)
    logger.log(SILLY, "Writing temporary manifest %s", temp_manifest)
    try:
        await write_manifest_async(backup.manifest_path, temp_manifest)
    except (OSError, TypeError, ValueError) as e:
        logger.error("Problem writing temporary manifest in %s: %s", backup.directory, e)
        raise WriteError(f"Cannot write temporary manifest: {e}", backup) from e

    return backup


def restore_manifest(backup: ManifestBackup) -> None:
    """Move the original manifest back into place.

    Always blocking, so it is safe to call while the interpreter exits.

    Raises:
        NoBackupError: the handle was already restored or its backup file
            is gone.
    """
    if backup.restored:
        raise NoBackupError(f"Manifest already restored: {backup.manifest_path}")
    if not backup.backup_path.exists():
        raise NoBackupError(f"No manifest backup to restore: {backup.backup_path}")

    logger.log(SILLY, "Restoring %s", backup.manifest_path)
    rename_sync(backup.backup_path, backup.manifest_path)
    backup.restored = True


@contextmanager
def temporary_manifest(
    directory: str | Path,
    dependencies: Sequence[DependencySpec],
) -> Iterator[ManifestBackup]:
    """Swap the manifest for the duration of the ``with`` block.

    The original is restored when the block exits, including on error and
    on interpreter shutdown.
    """
    backup = write_temporary_manifest(directory, dependencies)
    atexit.register(backup.restore_if_pending)
    try:
        yield backup
    finally:
        atexit.unregister(backup.restore_if_pending)
        backup.restore_if_pending()


@asynccontextmanager
async def temporary_manifest_async(
    directory: str | Path,
    dependencies: Sequence[DependencySpec],
) -> AsyncIterator[ManifestBackup]:
    """Asyncio variant of :func:`temporary_manifest`."""
    backup = await write_temporary_manifest_async(directory, dependencies)
    atexit.register(backup.restore_if_pending)
    try:
        yield backup
    finally:
        atexit.unregister(backup.restore_if_pending)
        backup.restore_if_pending()
