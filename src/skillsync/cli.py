"""Command-line interface for skillsync."""

from __future__ import annotations

import functools
from collections.abc import Callable
from typing import Any

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from skillsync import __version__
from skillsync.config import SkillSyncSettings, configure_logging
from skillsync.errors.exceptions import OperationCancelled, SkillSyncError
from skillsync.git.client import GitClient
from skillsync.git.mirror import WorkingCopyManager, mirror_path_for
from skillsync.install.installer import InstallOptions, SkillInstaller
from skillsync.prompts import Choice, accept_all, console_choose, console_confirm, console_select
from skillsync.publish.pipeline import PublishOptions, PublishPipeline, PublishStatus, resolve_bundles
from skillsync.remotes.directory import RemoteDirectory
from skillsync.skills.config import SkillOrigin
from skillsync.skills.discovery import BundleLocator

console = Console()
err_console = Console(stderr=True)


def report_error(error: SkillSyncError) -> None:
    """Print a fatal error: message, captured output verbatim, then the hint."""
    err_console.print(f"[red]Error: {escape(error.message)}[/red]")
    if error.output:
        err_console.print(escape(error.output), style="dim", highlight=False)
    if error.hint:
        err_console.print(f"\n[yellow]Tip: {escape(error.hint)}[/yellow]")


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Map skillsync errors to exit codes: cancellation 0, fatal errors 1."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except OperationCancelled:
            console.print("[yellow]\nCancelled by user[/yellow]")
            raise SystemExit(0) from None
        except SkillSyncError as exc:
            report_error(exc)
            raise SystemExit(1) from None

    return wrapper


def print_post_install_hints(global_install: bool) -> None:
    console.print("\n[dim]List skills:[/dim] [cyan]skillsync list[/cyan]")
    if not global_install:
        console.print("[dim]Share a skill:[/dim] [cyan]skillsync upload <skill-name>[/cyan]")


def _git(settings: SkillSyncSettings) -> GitClient:
    return GitClient(settings.git_executable)


@click.group()
@click.version_option(version=__version__)
@click.option("-v", "--verbose", count=True, help="Increase log output (-v info, -vv debug)")
@click.pass_context
def main(ctx: click.Context, verbose: int) -> None:
    """skillsync - install, share and upload agent skills."""
    settings = SkillSyncSettings()
    if verbose:
        settings.logging.level = "DEBUG" if verbose > 1 else "INFO"
    configure_logging(settings.logging, err_console)
    ctx.obj = settings


@main.command()
@click.argument("source")
@click.option("--global", "global_install", is_flag=True, help="Install to the home directory")
@click.option("--universal", is_flag=True, help="Install to .agent/skills instead of .claude/skills")
@click.option("-y", "--yes", is_flag=True, help="Skip prompts and overwrite existing skills")
@click.pass_obj
@handle_errors
def install(settings: SkillSyncSettings, source: str, global_install: bool, universal: bool, yes: bool) -> None:
    """Install skills from a local path, git URL, or owner/repo[/path]."""
    options = InstallOptions(global_install=global_install, universal=universal, yes=yes)
    installer = SkillInstaller(
        _git(settings),
        confirm=accept_all if yes else console_confirm(console),
        select=console_select(console),
    )
    console.print(f"Installing from: [cyan]{escape(source)}[/cyan]")
    result = installer.install(source, options)

    for name in result.installed:
        console.print(f"[green]Installed: {escape(name)}[/green]")
    for name in result.skipped:
        console.print(f"[yellow]Skipped: {escape(name)}[/yellow]")
    for name in result.conflicts:
        console.print(f"\n[yellow]Warning: '{escape(name)}' matches an Anthropic marketplace skill[/yellow]")
        console.print("[dim]  Installing globally may conflict with Claude Code plugins.[/dim]")
        console.print("[dim]  Install without --global for a conflict-free project copy.[/dim]")
    console.print(f"\n{len(result.installed)} skill(s) installed to {escape(str(result.target_dir))}")
    print_post_install_hints(global_install)

    if result.rejected:
        err_console.print(
            f"[red]Security error: installation path outside target directory for: "
            f"{escape(', '.join(result.rejected))}[/red]"
        )
        raise SystemExit(1)


@main.command(name="list")
def list_skills() -> None:
    """List installed skills in precedence order."""
    bundles = BundleLocator().find_all()
    if not bundles:
        console.print("[dim]No skills installed.[/dim]")
        return

    table = Table("Name", "Location", "Scope", "Description")
    for bundle in bundles.values():
        location = "project" if bundle.origin is SkillOrigin.PROJECT else "global"
        table.add_row(escape(bundle.name), location, bundle.scope.value, escape(bundle.description[:70]))
    console.print(table)


@main.command()
@click.argument("skill", required=False)
@click.option("--repo", "repo_name", help="Configured repository to upload to")
@click.option("-m", "--message", help="Commit message")
@click.option("-y", "--yes", is_flag=True, help="Overwrite existing skills without asking")
@click.pass_obj
@handle_errors
def upload(settings: SkillSyncSettings, skill: str | None, repo_name: str | None, message: str | None, yes: bool) -> None:
    """Upload installed skills to skills/<name>/ in a configured repository."""
    locator = BundleLocator()
    if skill:
        bundles = resolve_bundles(locator, [skill])
    else:
        resolved = locator.find_all()
        if not resolved:
            raise SkillSyncError("No skills installed", hint="Install skills first: skillsync install owner/repo")
        ordered = sorted(resolved.values(), key=lambda b: (b.origin is not SkillOrigin.PROJECT, b.name))
        choices = [
            Choice(value=b.name, label=b.name, description=f"({b.origin.value}) {b.description}", checked=False)
            for b in ordered
        ]
        names = console_select(console)("Select skills to upload", choices)
        if not names:
            console.print("[yellow]No skills selected. Cancelled.[/yellow]")
            return
        bundles = resolve_bundles(locator, names)

    remotes = RemoteDirectory(settings.repositories_file)
    configured = remotes.list_remotes()
    if not configured:
        raise SkillSyncError(
            "No repositories configured",
            hint="Add a repository first: skillsync repo add <name> <url>",
        )
    if repo_name is None:
        repo_name = console_choose(console)(
            "Select repository to upload to",
            [Choice(value=r.name, label=r.name, description=r.url) for r in configured],
        )

    git = _git(settings)
    pipeline = PublishPipeline(
        git,
        remotes,
        WorkingCopyManager(git, functools.partial(mirror_path_for, settings.repos_dir)),
        confirm=accept_all if yes else console_confirm(console),
    )
    result = pipeline.publish(bundles, repo_name, PublishOptions(commit_message=message, skip_confirmations=yes))

    for name in result.skipped:
        console.print(f"[yellow]Skipped: {escape(name)}[/yellow]")
    if result.status is PublishStatus.NO_CHANGES:
        console.print("[yellow]No changes detected. Skills are already up to date.[/yellow]")
        return
    console.print(
        f"[green]Successfully uploaded {len(result.published)} skill(s) to "
        f"{escape(result.remote)} ({escape(result.branch or '')}): "
        f"{escape(', '.join(result.published))}[/green]"
    )


@main.group()
def repo() -> None:
    """Manage repositories that skills are uploaded to."""


@repo.command(name="add")
@click.argument("name")
@click.argument("url")
@click.pass_obj
@handle_errors
def repo_add(settings: SkillSyncSettings, name: str, url: str) -> None:
    """Add a repository."""
    RemoteDirectory(settings.repositories_file).add_remote(name, url)
    console.print(f"[green]Added repository: [bold]{escape(name)}[/bold][/green]")
    console.print(f"[dim]  URL: {escape(url)}[/dim]")


@repo.command(name="remove")
@click.argument("name")
@click.option("-y", "--yes", is_flag=True, help="Do not ask for confirmation")
@click.pass_obj
@handle_errors
def repo_remove(settings: SkillSyncSettings, name: str, yes: bool) -> None:
    """Remove a repository."""
    remotes = RemoteDirectory(settings.repositories_file)
    if remotes.get_remote(name) is None:
        raise SkillSyncError(f"Repository '{name}' not found")

    if not yes and not console_confirm(console)(f"Remove repository '{name}'?"):
        console.print("[yellow]Cancelled[/yellow]")
        return

    if not remotes.remove_remote(name):
        raise SkillSyncError(f"Repository '{name}' not found")
    console.print(f"[green]Removed repository: [bold]{escape(name)}[/bold][/green]")


@repo.command(name="list")
@click.pass_obj
def repo_list(settings: SkillSyncSettings) -> None:
    """List configured repositories."""
    remotes = RemoteDirectory(settings.repositories_file).list_remotes()
    if not remotes:
        console.print("[dim]No repositories configured.[/dim]")
        console.print("[dim]\nAdd a repository:[/dim]")
        console.print("[cyan]  skillsync repo add <name> <url>[/cyan]")
        return

    table = Table("Name", "URL", "Added")
    for remote in remotes:
        table.add_row(escape(remote.name), escape(remote.url), remote.added_at.date().isoformat())
    console.print(table)
    console.print(f"[dim]Total: {len(remotes)} repository(ies)[/dim]")


if __name__ == "__main__":
    main()
