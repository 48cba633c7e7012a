"""
Invocation facade: one method per package-manager action.

Each method builds its command with :mod:`npm_orchestrator.commands` and
hands it to a :class:`~npm_orchestrator.runtime.ProcessRuntime`. Failures
surface as :class:`~npm_orchestrator.errors.ExecutionError`.
"""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path

from npm_orchestrator.commands import (
    build_dist_tag_command,
    build_execution_options,
    build_install_command,
    build_publish_command,
    build_run_script_command,
)
from npm_orchestrator.config import ClientConfig, InstallOptions
from npm_orchestrator.logging import SILLY, VERBOSE, get_logger
from npm_orchestrator.models import DependencySpec, PackageDescriptor
from npm_orchestrator.runtime import (
    ExecutionResult,
    OutputCallback,
    ProcessRuntime,
    SubprocessRuntime,
)

logger = get_logger(__name__)


class NpmClient:
    """
    Drives npm (or yarn, for installs) inside package directories.

    Dist-tag operations block; install, run and publish are coroutines.
    Installing an explicit dependency subset does not swap the manifest by
    itself; wrap the call in
    :func:`~npm_orchestrator.manifest.temporary_manifest_async` for that.

    Example:
        client = NpmClient()
        specs = [DependencySpec.parse("lodash@^4.17.0")]
        async with temporary_manifest_async(pkg_dir, specs):
            await client.install_dependencies(pkg_dir, specs, ClientConfig())
    """

    def __init__(self, runtime: ProcessRuntime | None = None) -> None:
        self.runtime = runtime or SubprocessRuntime()

    async def install_dependencies(
        self,
        directory: str | Path,
        dependencies: Sequence[DependencySpec],
        config: ClientConfig,
        options: InstallOptions | None = None,
    ) -> ExecutionResult:
        """Install into *directory*; a no-op when *dependencies* is empty."""
        directory = Path(directory)
        logger.log(
            SILLY,
            "install_dependencies %s: %s",
            directory.name,
            [str(d) for d in dependencies],
        )

        if not dependencies:
            logger.log(VERBOSE, "No dependencies to install in %s", directory.name)
            return ExecutionResult.success_result()

        return await self._install(directory, config, options)

    async def install_original_dependencies(
        self,
        directory: str | Path,
        config: ClientConfig,
        options: InstallOptions | None = None,
    ) -> ExecutionResult:
        """Install whatever *directory*'s own manifest declares."""
        directory = Path(directory)
        logger.log(SILLY, "install_original_dependencies %s", directory.name)
        return await self._install(directory, config, options)

    async def _install(
        self,
        directory: Path,
        config: ClientConfig,
        options: InstallOptions | None,
    ) -> ExecutionResult:
        opts = build_execution_options(directory, config.registry)
        command = build_install_command(config, options)
        return await self.runtime.exec_async(command.executable, command.args, opts)

    def add_dist_tag(
        self,
        directory: str | Path,
        package_name: str,
        version: str,
        tag: str,
        registry: str | None = None,
    ) -> str:
        """Point *tag* at ``package_name@version``."""
        logger.log(SILLY, "add_dist_tag %s %s %s", tag, version, package_name)
        opts = build_execution_options(directory, registry)
        command = build_dist_tag_command("add", package_name, tag=tag, version=version)
        return self.runtime.exec_sync(command.executable, command.args, opts)

    def remove_dist_tag(
        self,
        directory: str | Path,
        package_name: str,
        tag: str,
        registry: str | None = None,
    ) -> str:
        """Remove *tag* from *package_name*."""
        logger.log(SILLY, "remove_dist_tag %s %s", tag, package_name)
        opts = build_execution_options(directory, registry)
        command = build_dist_tag_command("rm", package_name, tag=tag)
        return self.runtime.exec_sync(command.executable, command.args, opts)

    def check_dist_tag(
        self,
        directory: str | Path,
        package_name: str,
        tag: str,
        registry: str | None = None,
    ) -> bool:
        """Whether *tag* appears anywhere in ``npm dist-tag ls`` output."""
        logger.log(SILLY, "check_dist_tag %s %s", tag, package_name)
        opts = build_execution_options(directory, registry)
        command = build_dist_tag_command("ls", package_name)
        output = self.runtime.exec_sync(command.executable, command.args, opts)
        if not output:
            return False
        return tag in output

    async def run_script_in_directory(
        self,
        script: str,
        args: Sequence[str],
        directory: str | Path,
    ) -> ExecutionResult:
        """``npm run <script>`` in *directory*, capturing output."""
        directory = Path(directory)
        logger.log(SILLY, "run_script_in_directory %s %s %s", script, list(args), directory.name)
        opts = build_execution_options(directory)
        command = build_run_script_command(script, args)
        return await self.runtime.exec_async(command.executable, command.args, opts)

    async def run_script_streaming(
        self,
        script: str,
        args: Sequence[str],
        package: PackageDescriptor,
        on_output: OutputCallback | None = None,
    ) -> ExecutionResult:
        """``npm run <script>`` in the package, streaming lines labeled by name."""
        logger.log(SILLY, "run_script_streaming %s %s %s", script, list(args), package.name)
        opts = build_execution_options(package.location)
        command = build_run_script_command(script, args)
        return await self.runtime.spawn_streaming(
            command.executable,
            command.args,
            opts,
            package.name,
            on_output,
        )

    async def publish_tagged(
        self,
        tag: str,
        directory: str | Path,
        registry: str | None = None,
    ) -> ExecutionResult:
        """``npm publish --tag <tag>`` from *directory*."""
        directory = Path(directory)
        logger.log(SILLY, "publish_tagged %s %s", tag, directory.name)
        opts = build_execution_options(directory, registry)
        command = build_publish_command(tag)
        return await self.runtime.exec_async(command.executable, command.args, opts)
