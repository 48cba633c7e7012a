"""Tests for the NpmClient facade."""

from __future__ import annotations

from pathlib import Path

import pytest

from npm_orchestrator.commands import REGISTRY_ENV_VAR
from npm_orchestrator.config import ClientConfig, InstallOptions
from npm_orchestrator.errors import ExecutionError
from npm_orchestrator.models import DependencySpec, PackageDescriptor
from npm_orchestrator.npm import NpmClient
from npm_orchestrator.runtime import SubprocessRuntime

REGISTRY = "https://registry.example.com/"


@pytest.fixture
def client(runtime) -> NpmClient:
    return NpmClient(runtime=runtime)


class TestInstallDependencies:
    """Tests for install_dependencies."""

    @pytest.mark.asyncio
    async def test_empty_dependencies_spawn_nothing(
        self, client: NpmClient, runtime, tmp_path: Path
    ) -> None:
        result = await client.install_dependencies(tmp_path, [], ClientConfig(npm_client="yarn"))

        assert result.success
        assert runtime.calls == []

    @pytest.mark.asyncio
    async def test_runs_install_in_directory(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        specs = [DependencySpec.parse("lodash@^4.0.0")]

        await client.install_dependencies(package_dir, specs, ClientConfig())

        assert len(runtime.calls) == 1
        call = runtime.calls[0]
        assert call.mode == "async"
        assert call.executable == "npm"
        assert call.args == ["install"]
        assert call.options.cwd == package_dir
        assert call.options.env is None

    @pytest.mark.asyncio
    async def test_does_not_swap_manifest(
        self, client: NpmClient, package_dir: Path
    ) -> None:
        before = (package_dir / "package.json").read_bytes()

        await client.install_dependencies(package_dir, [DependencySpec("a")], ClientConfig())

        assert (package_dir / "package.json").read_bytes() == before
        assert not (package_dir / "package.json.backup").exists()

    @pytest.mark.asyncio
    async def test_yarn_config_and_registry(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        config = ClientConfig(
            npm_client="yarn",
            mutex="file:/tmp/lock",
            npm_client_args=["--flat"],
            registry=REGISTRY,
        )

        await client.install_dependencies(package_dir, [DependencySpec("a")], config)

        call = runtime.calls[0]
        assert call.executable == "yarn"
        assert call.args == ["install", "--mutex", "file:/tmp/lock", "--non-interactive", "--flat"]
        assert call.options.env[REGISTRY_ENV_VAR] == REGISTRY

    @pytest.mark.asyncio
    async def test_global_style_option(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        config = ClientConfig(npm_client="yarn", mutex="file:/tmp/lock")

        await client.install_dependencies(
            package_dir, [DependencySpec("a")], config, InstallOptions(global_style=True)
        )

        call = runtime.calls[0]
        assert call.executable == "npm"
        assert call.args == ["install", "--global-style"]

    @pytest.mark.asyncio
    async def test_failure_raises_execution_error(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        runtime.exit_code = 1
        runtime.output = "npm ERR! code E404"

        with pytest.raises(ExecutionError) as exc_info:
            await client.install_dependencies(package_dir, [DependencySpec("a")], ClientConfig())

        assert exc_info.value.exit_code == 1
        assert exc_info.value.stdout == "npm ERR! code E404"
        assert len(runtime.calls) == 1


class TestInstallOriginalDependencies:
    """Tests for install_original_dependencies."""

    @pytest.mark.asyncio
    async def test_always_runs(self, client: NpmClient, runtime, package_dir: Path) -> None:
        await client.install_original_dependencies(package_dir, ClientConfig())

        assert len(runtime.calls) == 1
        assert runtime.calls[0].args == ["install"]

    @pytest.mark.asyncio
    async def test_same_arguments_as_install(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        config = ClientConfig(npm_client="yarn", mutex="network:42424", npm_client_args=["--pure-lockfile"])

        await client.install_dependencies(package_dir, [DependencySpec("a")], config)
        await client.install_original_dependencies(package_dir, config)

        first, second = runtime.calls
        assert (first.executable, first.args) == (second.executable, second.args)


class TestDistTags:
    """Tests for the blocking dist-tag operations."""

    def test_add_dist_tag(self, client: NpmClient, runtime, tmp_path: Path) -> None:
        client.add_dist_tag(tmp_path, "@acme/widget", "1.4.2", "stable", REGISTRY)

        call = runtime.calls[0]
        assert call.mode == "sync"
        assert call.executable == "npm"
        assert call.args == ["dist-tag", "add", "@acme/widget@1.4.2", "stable"]
        assert call.options.cwd == tmp_path
        assert call.options.env[REGISTRY_ENV_VAR] == REGISTRY

    def test_remove_dist_tag(self, client: NpmClient, runtime, tmp_path: Path) -> None:
        client.remove_dist_tag(tmp_path, "@acme/widget", "stable")

        call = runtime.calls[0]
        assert call.mode == "sync"
        assert call.args == ["dist-tag", "rm", "@acme/widget", "stable"]
        assert call.options.env is None

    def test_check_dist_tag_present(self, client: NpmClient, runtime, tmp_path: Path) -> None:
        runtime.output = "latest: 1.4.2\nnext: 2.0.0-beta.1\n"

        assert client.check_dist_tag(tmp_path, "@acme/widget", "next") is True
        assert runtime.calls[0].args == ["dist-tag", "ls", "@acme/widget"]

    def test_check_dist_tag_absent(self, client: NpmClient, runtime, tmp_path: Path) -> None:
        runtime.output = "latest: 1.4.2\n"

        assert client.check_dist_tag(tmp_path, "@acme/widget", "canary") is False

    def test_check_dist_tag_is_substring_search(
        self, client: NpmClient, runtime, tmp_path: Path
    ) -> None:
        runtime.output = "latest: 1.4.2\n"

        assert client.check_dist_tag(tmp_path, "@acme/widget", "late") is True

    def test_check_dist_tag_empty_output(
        self, client: NpmClient, runtime, tmp_path: Path
    ) -> None:
        runtime.output = ""

        assert client.check_dist_tag(tmp_path, "@acme/widget", "") is False

    def test_dist_tag_failure(self, client: NpmClient, runtime, tmp_path: Path) -> None:
        runtime.exit_code = 1

        with pytest.raises(ExecutionError):
            client.add_dist_tag(tmp_path, "pkg", "1.0.0", "next")


class TestRunScripts:
    """Tests for run_script_in_directory and run_script_streaming."""

    @pytest.mark.asyncio
    async def test_run_script_in_directory(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        runtime.output = "built"

        result = await client.run_script_in_directory("build", ["--prod"], package_dir)

        assert result.output == "built"
        call = runtime.calls[0]
        assert call.mode == "async"
        assert call.executable == "npm"
        assert call.args == ["run", "build", "--prod"]
        assert call.options.cwd == package_dir
        assert call.options.env is None

    @pytest.mark.asyncio
    async def test_run_script_ignores_client_choice(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        await client.run_script_in_directory("test", [], package_dir)

        assert runtime.calls[0].executable == "npm"

    @pytest.mark.asyncio
    async def test_run_script_streaming(
        self, client: NpmClient, runtime, package_dir: Path
    ) -> None:
        runtime.stream_lines = ["compiling", "done"]
        package = PackageDescriptor.from_directory(package_dir)
        lines: list[str] = []

        await client.run_script_streaming("build", [], package, on_output=lines.append)

        call = runtime.calls[0]
        assert call.mode == "stream"
        assert call.label == "@acme/widget"
        assert call.args == ["run", "build"]
        assert call.options.cwd == package_dir
        assert lines == ["@acme/widget: compiling", "@acme/widget: done"]


class TestPublishTagged:
    """Tests for publish_tagged."""

    @pytest.mark.asyncio
    async def test_publish(self, client: NpmClient, runtime, package_dir: Path) -> None:
        await client.publish_tagged(" next ", package_dir, REGISTRY)

        call = runtime.calls[0]
        assert call.mode == "async"
        assert call.executable == "npm"
        assert call.args == ["publish", "--tag", "next"]
        assert call.options.env[REGISTRY_ENV_VAR] == REGISTRY


class TestDefaults:
    def test_default_runtime(self) -> None:
        assert isinstance(NpmClient().runtime, SubprocessRuntime)
