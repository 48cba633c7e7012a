"""
Command-line interface for npm-orchestrator.
"""

from __future__ import annotations

import argparse
import asyncio
import sys
from pathlib import Path

import yaml
from rich.console import Console
from rich.markup import escape

from npm_orchestrator.config import (
    ClientConfig,
    InstallOptions,
    config_search_paths,
    find_config,
    load_config,
)
from npm_orchestrator.errors import ExecutionError, NpmOrchestratorError, WriteError
from npm_orchestrator.logging import LOG_LEVELS, setup_logging
from npm_orchestrator.manifest import temporary_manifest_async
from npm_orchestrator.models import DependencySpec, PackageDescriptor
from npm_orchestrator.npm import NpmClient

console = Console()
err_console = Console(stderr=True)


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser."""
    parser = argparse.ArgumentParser(
        description="Run npm/yarn on behalf of a monorepo",
        prog="npm-orchestrator",
    )

    # Global options
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Shorthand for --loglevel verbose",
    )
    parser.add_argument(
        "--loglevel",
        choices=list(LOG_LEVELS),
        help="Log level (default: warn)",
    )
    parser.add_argument("--config", type=Path, help="Config file (YAML or lerna.json)")
    parser.add_argument("--npm-client", help="Client used for installs (npm or yarn)")
    parser.add_argument("--registry", help="Registry URL exported as npm_config_registry")
    parser.add_argument("--mutex", help="yarn --mutex value")
    parser.add_argument(
        "--client-arg",
        action="append",
        dest="client_args",
        help="Extra argument passed to the install client (repeatable)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Commands")

    # install
    install_parser = subparsers.add_parser(
        "install", help="Install only the given dependencies into a package"
    )
    install_parser.add_argument("directory", help="Package directory")
    install_parser.add_argument("dependencies", nargs="*", help="Dependencies (name@range)")
    install_parser.add_argument(
        "-D",
        "--dev",
        action="append",
        dest="dev_dependencies",
        default=[],
        help="Dev dependency (repeatable)",
    )
    install_parser.add_argument("--global-style", action="store_true", help="npm --global-style")

    # install-original
    original_parser = subparsers.add_parser(
        "install-original", help="Install a package's own declared dependencies"
    )
    original_parser.add_argument("directory", help="Package directory")
    original_parser.add_argument("--global-style", action="store_true", help="npm --global-style")

    # run
    run_parser = subparsers.add_parser(
        "run",
        help="Run a package script",
        usage="%(prog)s [-C DIR] [--stream] script [-- args ...]",
    )
    run_parser.add_argument("script", help="Script name")
    run_parser.add_argument("args", nargs="*", help="Script arguments (after --)")
    run_parser.add_argument("-C", "--dir", dest="directory", default=".", help="Package directory")
    run_parser.add_argument("--stream", action="store_true", help="Stream labeled output")

    # dist-tag
    tag_parser = subparsers.add_parser("dist-tag", help="Manage dist-tags")
    tag_subparsers = tag_parser.add_subparsers(dest="tag_command", help="dist-tag commands")

    tag_add = tag_subparsers.add_parser("add", help="Add a dist-tag")
    tag_add.add_argument("package", help="Package name")
    tag_add.add_argument("version", help="Version to tag")
    tag_add.add_argument("tag", help="Tag name")

    tag_rm = tag_subparsers.add_parser("rm", help="Remove a dist-tag")
    tag_rm.add_argument("package", help="Package name")
    tag_rm.add_argument("tag", help="Tag name")

    tag_check = tag_subparsers.add_parser("check", help="Check whether a dist-tag exists")
    tag_check.add_argument("package", help="Package name")
    tag_check.add_argument("tag", help="Tag name")

    for sub in (tag_add, tag_rm, tag_check):
        sub.add_argument("-C", "--dir", dest="directory", default=".", help="Working directory")

    # publish
    publish_parser = subparsers.add_parser("publish", help="Publish under a dist-tag")
    publish_parser.add_argument("tag", help="Tag to publish under")
    publish_parser.add_argument("-C", "--dir", dest="directory", default=".", help="Package directory")

    # config
    config_parser = subparsers.add_parser("config", help="Configuration management")
    config_subparsers = config_parser.add_subparsers(dest="config_command", help="Config commands")
    config_subparsers.add_parser("show", help="Show current configuration")
    config_init_parser = config_subparsers.add_parser("init", help="Initialize a new config file")
    config_init_parser.add_argument(
        "-o",
        "--output",
        default="npm-orchestrator.yaml",
        help="Output file path",
    )
    config_subparsers.add_parser("path", help="Show config file paths")

    return parser


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.loglevel:
        setup_logging(args.loglevel)
    elif args.verbose:
        setup_logging("verbose")
    else:
        setup_logging("warn")

    try:
        if args.command == "install":
            asyncio.run(cmd_install(args))
        elif args.command == "install-original":
            asyncio.run(cmd_install_original(args))
        elif args.command == "run":
            asyncio.run(cmd_run(args))
        elif args.command == "dist-tag":
            cmd_dist_tag(args)
        elif args.command == "publish":
            asyncio.run(cmd_publish(args))
        elif args.command == "config":
            cmd_config(args)
        else:
            parser.print_help()
    except ExecutionError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(e.exit_code if e.exit_code > 0 else 1)
    except WriteError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        err_console.print(
            f"[yellow]Original manifest left at {e.backup.backup_path}[/yellow]"
        )
        sys.exit(1)
    except NpmOrchestratorError as e:
        err_console.print(f"[red]Error:[/red] {escape(str(e))}")
        sys.exit(1)


def resolve_config(args: argparse.Namespace) -> ClientConfig:
    """Load the config file, then apply command-line overrides."""
    config = load_config(getattr(args, "config", None))
    if getattr(args, "npm_client", None):
        config.npm_client = args.npm_client
    if getattr(args, "registry", None):
        config.registry = args.registry
    if getattr(args, "mutex", None):
        config.mutex = args.mutex
    if getattr(args, "client_args", None):
        config.npm_client_args = list(args.client_args)
    return config


async def cmd_install(args: argparse.Namespace) -> None:
    """Install only the requested dependencies, restoring the manifest after."""
    config = resolve_config(args)
    specs = [DependencySpec.parse(d) for d in args.dependencies]
    specs += [DependencySpec.parse(d, dev=True) for d in args.dev_dependencies]
    options = InstallOptions(global_style=args.global_style)
    client = NpmClient()

    if not specs:
        console.print("[dim]No dependencies to install.[/dim]")
        return

    async with temporary_manifest_async(args.directory, specs):
        result = await client.install_dependencies(args.directory, specs, config, options)

    if result.output:
        console.print(result.output, end="", markup=False, highlight=False)
    console.print(f"[green]Installed {len(specs)} dependencies in {args.directory}[/green]")


async def cmd_install_original(args: argparse.Namespace) -> None:
    """Install the package's own dependencies."""
    config = resolve_config(args)
    options = InstallOptions(global_style=args.global_style)
    result = await NpmClient().install_original_dependencies(args.directory, config, options)
    if result.output:
        console.print(result.output, end="", markup=False, highlight=False)


async def cmd_run(args: argparse.Namespace) -> None:
    """Run a package script."""
    client = NpmClient()
    if args.stream:
        package = PackageDescriptor.from_directory(args.directory)
        await client.run_script_streaming(
            args.script,
            args.args,
            package,
            on_output=lambda line: console.print(line, markup=False, highlight=False),
        )
        return

    result = await client.run_script_in_directory(args.script, args.args, args.directory)
    if result.output:
        console.print(result.output, end="", markup=False, highlight=False)


def cmd_dist_tag(args: argparse.Namespace) -> None:
    """dist-tag add/rm/check."""
    registry = resolve_config(args).registry
    client = NpmClient()

    if args.tag_command == "add":
        client.add_dist_tag(args.directory, args.package, args.version, args.tag, registry)
        console.print(f"[green]+{args.tag}: {args.package}@{args.version}[/green]")
    elif args.tag_command == "rm":
        client.remove_dist_tag(args.directory, args.package, args.tag, registry)
        console.print(f"[green]-{args.tag}: {args.package}[/green]")
    elif args.tag_command == "check":
        if client.check_dist_tag(args.directory, args.package, args.tag, registry):
            console.print(f"[green]{args.package} has dist-tag {args.tag}[/green]")
        else:
            console.print(f"[yellow]{args.package} has no dist-tag {args.tag}[/yellow]")
            sys.exit(1)
    else:
        console.print("[yellow]Usage: npm-orchestrator dist-tag <add|rm|check>[/yellow]")


async def cmd_publish(args: argparse.Namespace) -> None:
    """Publish under a dist-tag."""
    registry = resolve_config(args).registry
    result = await NpmClient().publish_tagged(args.tag, args.directory, registry)
    if result.output:
        console.print(result.output, end="", markup=False, highlight=False)


def cmd_config(args: argparse.Namespace) -> None:
    """Configuration management commands."""
    if args.config_command == "show":
        _config_show(getattr(args, "config", None))
    elif args.config_command == "init":
        _config_init(args.output)
    elif args.config_command == "path":
        _config_path()
    else:
        console.print("[yellow]Usage: npm-orchestrator config <show|init|path>[/yellow]")


def _config_show(path: Path | None = None) -> None:
    """Show current configuration."""
    loaded_from = path or find_config()

    if loaded_from is None:
        console.print("[dim]No config file found. Using defaults.[/dim]")
        config = ClientConfig()
    else:
        config = ClientConfig.from_yaml(loaded_from)
        console.print(f"[dim]Loaded from: {loaded_from}[/dim]\n")

    console.print("[bold]Current Configuration:[/bold]\n")
    console.print(yaml.dump(config.to_dict(), default_flow_style=False, sort_keys=False))


def _config_init(output: str) -> None:
    """Initialize a new config file."""
    output_path = Path(output)

    if output_path.exists():
        console.print(f"[red]File already exists: {output_path}[/red]")
        sys.exit(1)

    with open(output_path, "w") as f:
        yaml.dump(ClientConfig().to_dict(), f, default_flow_style=False, sort_keys=False)

    console.print(f"[green]Created config file: {output_path}[/green]")


def _config_path() -> None:
    """Show config file search paths."""
    console.print("[bold]Config file search paths:[/bold]\n")

    for path in config_search_paths():
        exists = "[green]✓[/green]" if path.exists() else "[dim]✗[/dim]"
        console.print(f"  {exists} {path}")


if __name__ == "__main__":
    main()
