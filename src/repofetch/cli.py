# src/repofetch/cli.py: Command-Line Interface (CLI) entry point.
# Implemented using Typer, this module exposes the command boundary as the
# 'repofetch' command. It loads the configuration, sets up logging, runs one
# command and maps a failed result onto the error's exit code.

import asyncio
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console

from .commands import CommandResult, Commands
from .config import Config, load_config
from .util import errors
from .util.errors import RepofetchError
from .util.log import configure_logging

app = typer.Typer(
    help="Clone repositories, extract folders from them and prune directories."
)
console = Console()

_EXIT_CODES = {
    cls.kind.value: cls.exit_code
    for cls in vars(errors).values()
    if isinstance(cls, type) and issubclass(cls, RepofetchError) and cls is not RepofetchError
}

_config_path: Optional[Path] = None


@app.callback()
def main(
    config: Optional[Path] = typer.Option(
        None, "--config", "-c", help="Path to a config.yaml file."
    ),
):
    """Clone repositories, extract folders from them and prune directories."""
    global _config_path
    _config_path = config


def get_config() -> Config:
    """Loads the config and handles errors."""
    try:
        config = load_config(_config_path)
    except RepofetchError as e:
        console.print(f"[bold red]Error:[/bold red] {e}")
        raise typer.Exit(e.exit_code)
    configure_logging(config.logging.level, config.logging.json_format)
    return config


def _report(result: CommandResult) -> None:
    if result.ok:
        if result.message:
            console.print(f"[bold green]{result.message}[/bold green]")
        return
    console.print(f"[bold red]Error:[/bold red] {result.error}")
    raise typer.Exit(_EXIT_CODES.get(result.kind, 1))


def _run(coro_factory) -> CommandResult:
    commands = Commands(get_config())
    try:
        return asyncio.run(coro_factory(commands))
    finally:
        commands.close()


@app.command()
def clone(
    repo_url: str = typer.Argument(..., help="URL or local path of the repository."),
    destination: str = typer.Argument(..., help="Directory to clone into."),
    commit: Optional[str] = typer.Option(
        None, "--commit", help="Full commit id to check out in detached HEAD state."
    ),
):
    """Clone a repository, optionally pinned to a commit."""
    with console.status(f"Cloning [bold cyan]{repo_url}[/bold cyan]...", spinner="dots"):
        result = _run(lambda c: c.clone_repo(repo_url, destination, commit))
    _report(result)


@app.command()
def extract(
    repo_url: str = typer.Argument(..., help="URL or local path of the repository."),
    folder: str = typer.Argument(..., help="Folder path relative to the repository root."),
    destination: str = typer.Argument(..., help="Where to put the folder. Must not exist."),
):
    """Extract a single folder of a repository."""
    with console.status(f"Extracting [bold cyan]{folder}[/bold cyan]...", spinner="dots"):
        result = _run(lambda c: c.extract_folder_from_repo(repo_url, folder, destination))
    _report(result)


@app.command()
def prune(path: str = typer.Argument(..., help="Directory to empty.")):
    """Remove everything inside a directory, keeping the directory."""
    result = _run(lambda c: c.nuke_directory(path))
    _report(result)
    console.print(f"Emptied [bold]{path}[/bold]")


@app.command()
def secret(name: str = typer.Argument(..., help="Environment variable name.")):
    """Print a configuration value, or the fallback when it is unset."""
    commands = Commands(get_config())
    try:
        console.print(commands.get_secret_key(name), highlight=False)
    finally:
        commands.close()


@app.command()
def show_config():
    """Print the effective configuration."""
    config = get_config()
    console.print(yaml.safe_dump(config.model_dump(mode="json", by_alias=True), sort_keys=False))


if __name__ == "__main__":
    app()
