"""
npm-orchestrator - drive npm and yarn on behalf of a monorepo tool.

This library builds client-specific package-manager commands (install,
run-script, publish, dist-tag), runs them in blocking, asyncio or streaming
mode, and can temporarily swap a package's ``package.json`` so that only an
explicit subset of dependencies gets installed.

Example:
    from npm_orchestrator import (
        ClientConfig,
        DependencySpec,
        NpmClient,
        temporary_manifest_async,
    )

    client = NpmClient()
    config = ClientConfig(npm_client="yarn", mutex="network:42424")
    specs = [
        DependencySpec.parse("lodash@^4.17.0"),
        DependencySpec.parse("@types/node", dev=True),
    ]

    async with temporary_manifest_async("packages/app", specs):
        await client.install_dependencies("packages/app", specs, config)
"""

from npm_orchestrator.commands import (
    INSTALL_POLICY,
    build_dist_tag_command,
    build_execution_options,
    build_install_command,
    build_publish_command,
    build_run_script_command,
)
from npm_orchestrator.config import ClientConfig, InstallOptions, load_config
from npm_orchestrator.errors import (
    BackupError,
    ExecutionError,
    NoBackupError,
    NpmOrchestratorError,
    WriteError,
)
from npm_orchestrator.manifest import (
    ManifestBackup,
    restore_manifest,
    temporary_manifest,
    temporary_manifest_async,
    write_temporary_manifest,
    write_temporary_manifest_async,
)
from npm_orchestrator.models import (
    ALTERNATE_CLIENT,
    DEFAULT_CLIENT,
    Command,
    DependencySpec,
    ExecutionOptions,
    PackageDescriptor,
)
from npm_orchestrator.npm import NpmClient
from npm_orchestrator.runtime import ExecutionResult, ProcessRuntime, SubprocessRuntime

__version__ = "0.1.0"

__all__ = [
    # Facade
    "NpmClient",
    # Config
    "ClientConfig",
    "InstallOptions",
    "load_config",
    # Models
    "ALTERNATE_CLIENT",
    "DEFAULT_CLIENT",
    "Command",
    "DependencySpec",
    "ExecutionOptions",
    "PackageDescriptor",
    # Commands
    "INSTALL_POLICY",
    "build_dist_tag_command",
    "build_execution_options",
    "build_install_command",
    "build_publish_command",
    "build_run_script_command",
    # Manifest swap
    "ManifestBackup",
    "restore_manifest",
    "temporary_manifest",
    "temporary_manifest_async",
    "write_temporary_manifest",
    "write_temporary_manifest_async",
    # Runtime
    "ExecutionResult",
    "ProcessRuntime",
    "SubprocessRuntime",
    # Errors
    "NpmOrchestratorError",
    "BackupError",
    "WriteError",
    "NoBackupError",
    "ExecutionError",
]
