"""CLI for Cursor-Cortex.

Commands:
    serve                 - Run the MCP server over stdio
    add-commit-separator  - Record a git commit in a branch note (used by the post-commit hook)
    call                  - Invoke any tool once and print its text output
    install-hook          - Install the git post-commit hook into a repository
"""

import asyncio
import json
import stat
import subprocess
from pathlib import Path

import typer
from rich.console import Console

from .branch_notes import append_commit_separator
from .logging import configure_logging, get_logger
from .utils import CortexError, NoteNotFoundError

app = typer.Typer(
    name="cursor-cortex",
    help="Branch notes, context files, checklists and tacit knowledge for coding agents",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)
logger = get_logger(__name__)

HOOK_MARKER = "# cursor-cortex post-commit hook"

POST_COMMIT_HOOK = f"""#!/bin/sh
{HOOK_MARKER}
BRANCH=$(git rev-parse --abbrev-ref HEAD)
PROJECT=$(basename "$(git rev-parse --show-toplevel)")
HASH=$(git rev-parse HEAD)
MESSAGE=$(git log -1 --pretty=%s)
cursor-cortex add-commit-separator "$PROJECT" "$BRANCH" "$HASH" "$MESSAGE" || true
"""


@app.command()
def serve():
    """Run the MCP server (stdio mode)."""
    from .main import main

    main()


@app.command("add-commit-separator")
def add_commit_separator(
    project_name: str = typer.Argument(..., help="Name of the project"),
    branch_name: str = typer.Argument(..., help="Name of the branch"),
    commit_hash: str = typer.Argument(..., help="Git commit hash"),
    commit_message: str = typer.Argument("", help="Git commit message"),
):
    """Append a commit separator to an existing branch note."""
    configure_logging()
    try:
        message = asyncio.run(append_commit_separator(project_name, branch_name, commit_hash, commit_message))
    except NoteNotFoundError as e:
        err_console.print(f"[yellow]{e}[/yellow]")
        raise typer.Exit(1)
    except (CortexError, OSError) as e:
        err_console.print(f"[red]Error adding commit separator: {e}[/red]")
        raise typer.Exit(1)
    console.print(message)


@app.command()
def call(
    tool: str = typer.Argument(..., help="Tool name, e.g. update_branch_note"),
    arguments: str = typer.Argument("{}", help="JSON object of camelCase arguments, or a plain string"),
):
    """Invoke one tool and print its output."""
    from .tools import call_tool

    configure_logging()
    try:
        raw = json.loads(arguments)
    except json.JSONDecodeError:
        raw = arguments

    try:
        results = asyncio.run(call_tool(tool, raw))
    except (CortexError, OSError) as e:
        err_console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)

    for result in results:
        console.print(result.text, markup=False, highlight=False)


@app.command("install-hook")
def install_hook(
    repo: Path = typer.Option(Path("."), "--repo", "-r", help="Path inside the git repository"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing post-commit hook"),
):
    """Install a post-commit hook that records every commit in the branch note."""
    try:
        top_level = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=repo,
            capture_output=True,
            text=True,
            check=True,
        ).stdout.strip()
    except (OSError, subprocess.CalledProcessError):
        err_console.print(f"[red]Not a git repository: {repo}[/red]")
        raise typer.Exit(1)

    hook_path = Path(top_level) / ".git" / "hooks" / "post-commit"
    if hook_path.exists() and HOOK_MARKER not in hook_path.read_text() and not force:
        err_console.print(f"[yellow]A post-commit hook already exists at {hook_path}. Use --force to replace it.[/yellow]")
        raise typer.Exit(1)

    hook_path.parent.mkdir(parents=True, exist_ok=True)
    hook_path.write_text(POST_COMMIT_HOOK)
    hook_path.chmod(hook_path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
    logger.info("hook_installed", path=str(hook_path))
    console.print(f"[green]✓[/green] Installed post-commit hook at {hook_path}")


if __name__ == "__main__":
    app()
