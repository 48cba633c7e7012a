"""Manifest I/O and temporary manifest swapping."""
from __future__ import annotations

from npm_orchestrator.manifest.io import read_manifest, write_manifest
from npm_orchestrator.manifest.swap import (
    BACKUP_SUFFIX,
    ManifestBackup,
    build_synthetic_manifest,
    restore_manifest,
    temporary_manifest,
    temporary_manifest_async,
    write_temporary_manifest,
    write_temporary_manifest_async,
)

__all__ = [
    "BACKUP_SUFFIX",
    "ManifestBackup",
    "build_synthetic_manifest",
    "read_manifest",
    "restore_manifest",
    "temporary_manifest",
    "temporary_manifest_async",
    "write_manifest",
    "write_temporary_manifest",
    "write_temporary_manifest_async",
]
