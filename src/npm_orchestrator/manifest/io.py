"""
Manifest and filesystem primitives used by the swap manager.

Blocking and asyncio variants are both provided; the async ones run the
blocking call in a worker thread.
"""

from __future__ import annotations

import asyncio
import json
import os
from pathlib import Path
from typing import Any


def read_manifest(path: Path) -> dict[str, Any]:
    """Read a ``package.json`` exactly as written (no normalization)."""
    with open(path, encoding="utf-8") as f:
        return json.load(f)


def write_manifest(path: Path, document: dict[str, Any]) -> None:
    """Write *document* as two-space indented JSON with a trailing newline."""
    content = json.dumps(document, indent=2) + "\n"
    with open(path, "w", encoding="utf-8") as f:
        f.write(content)


async def write_manifest_async(path: Path, document: dict[str, Any]) -> None:
    await asyncio.to_thread(write_manifest, path, document)


def rename_sync(old: Path, new: Path) -> None:
    os.rename(old, new)


async def rename(old: Path, new: Path) -> None:
    await asyncio.to_thread(rename_sync, old, new)
