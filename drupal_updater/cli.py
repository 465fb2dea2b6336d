"""CLI entry point for drupal-updater."""

from __future__ import annotations

from collections.abc import Callable
from datetime import date
from pathlib import Path
from typing import Any

import click

from .composer import ComposerSource
from .config import Settings, load_pinned_packages, load_settings
from .errors import CommandError, UpdaterError
from .prompt import TerminalPrompter
from .report import render_available_updates
from .shell import require_commands
from .vcs import GitRepository
from .workflow import UpdateWorkflow


def project_options(f: Callable[..., Any]) -> Callable[..., Any]:
    """--project-dir and --config, accepted before or after the subcommand."""
    f = click.option(
        "--config",
        "config_path",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Settings file. [default: <project-dir>/.drupal-updater.toml]",
    )(f)
    f = click.option(
        "--project-dir",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=None,
        help="Drupal project root (where composer.json lives). [default: .]",
    )(f)
    return f


def _load(
    ctx: click.Context, project_dir: Path | None, config_path: Path | None
) -> tuple[Path, Settings]:
    # Subcommand options win over the ones given to the group.
    if project_dir is None:
        project_dir = ctx.obj["project_dir"]
    else:
        project_dir = project_dir.resolve()
    if config_path is None:
        config_path = ctx.obj["config_path"]
    return project_dir, load_settings(project_dir, config_path)


@click.group(invoke_without_command=True)
@click.version_option(package_name="drupal-updater")
@project_options
@click.pass_context
def cli(ctx: click.Context, project_dir: Path | None, config_path: Path | None) -> None:
    """Update outdated composer packages one commit at a time."""
    ctx.ensure_object(dict)
    ctx.obj["project_dir"] = (project_dir or Path(".")).resolve()
    ctx.obj["config_path"] = config_path
    if ctx.invoked_subcommand is None:
        ctx.invoke(update)


@cli.command()
@project_options
@click.pass_context
def update(
    ctx: click.Context, project_dir: Path | None, config_path: Path | None
) -> None:
    """Interactively update direct dependencies on a dated branch."""
    project_dir, settings = _load(ctx, project_dir, config_path)
    require_commands("git", "composer")

    prompter = TerminalPrompter()
    workflow = UpdateWorkflow(
        source=ComposerSource(project_dir, timeout=settings.command_timeout),
        vcs=GitRepository(project_dir, timeout=settings.command_timeout),
        prompter=prompter,
        settings=settings,
        project_dir=project_dir,
    )
    try:
        status = workflow.run(date.today())
    except CommandError as exc:
        raise UpdaterError(str(exc)) from exc
    finally:
        prompter.close()
    if status:
        ctx.exit(status)


@cli.command()
@project_options
@click.pass_context
def outdated(
    ctx: click.Context, project_dir: Path | None, config_path: Path | None
) -> None:
    """List outdated direct dependencies without changing anything."""
    project_dir, settings = _load(ctx, project_dir, config_path)
    require_commands("composer")

    pinned = load_pinned_packages(project_dir / settings.ignore_file)
    source = ComposerSource(project_dir, timeout=settings.command_timeout)
    candidates = source.list_outdated(include_dev=settings.include_dev)
    if not candidates:
        click.echo("No outdated direct dependencies found.")
        return
    click.echo(render_available_updates(candidates, pinned))
