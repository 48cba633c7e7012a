"""
Command construction for npm and yarn.

Every function here is pure: configuration in, :class:`Command` (or
:class:`ExecutionOptions`) out. Nothing is executed.

Install arguments come from ``INSTALL_POLICY``, an ordered table of rules.
Each rule sees the executable as left by the rules before it, so the
global-style rule (which forces npm) also switches off the yarn-only rules
that follow it.
"""

from __future__ import annotations

import os
from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from npm_orchestrator.config import ClientConfig, InstallOptions
from npm_orchestrator.logging import SILLY, get_logger
from npm_orchestrator.models import (
    ALTERNATE_CLIENT,
    DEFAULT_CLIENT,
    Command,
    ExecutionOptions,
)

logger = get_logger(__name__)

REGISTRY_ENV_VAR = "npm_config_registry"

DistTagAction = Literal["add", "rm", "ls"]


@dataclass(frozen=True)
class InstallRule:
    """One row of the install policy table.

    ``applies`` receives the current executable, the client config and the
    install options. When it holds, the executable is replaced by
    ``force_client`` (if set) and ``arguments`` is appended.
    """

    name: str
    applies: Callable[[str, ClientConfig, InstallOptions], bool]
    arguments: Callable[[ClientConfig], list[str]]
    force_client: str | None = None


INSTALL_POLICY: tuple[InstallRule, ...] = (
    InstallRule(
        name="global-style",
        applies=lambda client, config, options: options.global_style,
        arguments=lambda config: ["--global-style"],
        force_client=DEFAULT_CLIENT,
    ),
    InstallRule(
        name="mutex",
        applies=lambda client, config, options: (
            client == ALTERNATE_CLIENT and bool(config.mutex)
        ),
        arguments=lambda config: ["--mutex", str(config.mutex)],
    ),
    InstallRule(
        name="non-interactive",
        applies=lambda client, config, options: client == ALTERNATE_CLIENT,
        arguments=lambda config: ["--non-interactive"],
    ),
    InstallRule(
        name="client-args",
        applies=lambda client, config, options: bool(config.npm_client_args),
        arguments=lambda config: list(config.npm_client_args),
    ),
)


def build_install_command(
    config: ClientConfig,
    options: InstallOptions | None = None,
) -> Command:
    """Build ``<client> install ...`` from the policy table."""
    options = options or InstallOptions()
    client = config.npm_client or DEFAULT_CLIENT
    args = ["install"]

    for rule in INSTALL_POLICY:
        if not rule.applies(client, config, options):
            continue
        if rule.force_client:
            client = rule.force_client
        args.extend(rule.arguments(config))

    command = Command(client, args)
    logger.log(SILLY, "Install command: %s", command)
    return command


def build_run_script_command(script: str, args: Sequence[str] = ()) -> Command:
    """``npm run <script> [args...]``; always npm."""
    return Command(DEFAULT_CLIENT, ["run", script, *args])


def build_dist_tag_command(
    action: DistTagAction,
    package_name: str,
    tag: str | None = None,
    version: str | None = None,
) -> Command:
    """Build an ``npm dist-tag`` command.

    - ``add``: ``dist-tag add <package>@<version> <tag>``
    - ``rm``: ``dist-tag rm <package> <tag>``
    - ``ls``: ``dist-tag ls <package>``
    """
    if action == "add":
        if not tag or not version:
            raise ValueError("dist-tag add requires both a version and a tag")
        args = ["dist-tag", "add", f"{package_name}@{version}", tag]
    elif action == "rm":
        if not tag:
            raise ValueError("dist-tag rm requires a tag")
        args = ["dist-tag", "rm", package_name, tag]
    elif action == "ls":
        args = ["dist-tag", "ls", package_name]
    else:
        raise ValueError(f"Unknown dist-tag action: {action!r}")
    return Command(DEFAULT_CLIENT, args)


def build_publish_command(tag: str) -> Command:
    """``npm publish --tag <tag>`` with surrounding whitespace stripped."""
    return Command(DEFAULT_CLIENT, ["publish", "--tag", tag.strip()])


def build_execution_options(
    directory: str | Path,
    registry: str | None = None,
) -> ExecutionOptions:
    """Run in *directory*; export ``npm_config_registry`` when given."""
    opts = ExecutionOptions(cwd=Path(directory))
    if registry:
        opts.env = {**os.environ, REGISTRY_ENV_VAR: registry}
    logger.log(SILLY, "Execution options: cwd=%s registry=%s", opts.cwd, registry)
    return opts
