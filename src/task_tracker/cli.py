"""Command-line front end for the task store."""

import functools
import logging
from collections.abc import Callable
from datetime import datetime
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console
from rich.text import Text

from . import __version__
from .logging_setup import setup_logging
from .models import TaskEntity, TaskValidationError
from .repositories import JsonFileRepository, Repository
from .settings import get_settings

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="task-cli",
    help="CLI tool for managing tasks",
    no_args_is_help=True,
)

console = Console()
err_console = Console(stderr=True)


class TaskLookupError(Exception):
    """A task id or prefix matched no task, or more than one."""


def _format_timestamp(value: str) -> str:
    try:
        dt = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except (AttributeError, ValueError):
        return str(value)
    return dt.astimezone().strftime("%Y-%m-%d %H:%M:%S")


def display_task(task: TaskEntity, detailed: bool = False) -> None:
    """Print one task: status mark, short id, title, description, timestamps."""
    mark = Text("✓", style="green") if task.get("completed") else Text("○", style="yellow")
    console.print(
        Text.assemble(
            "\n",
            mark,
            " [",
            (task["id"][:8], "cyan"),
            "] ",
            (task["title"], "bold"),
        )
    )
    if task.get("description"):
        console.print(Text("  " + task["description"], style="bright_black"))
    if detailed:
        console.print(Text.assemble(("  ID: ", "bright_black"), task["id"]))
        status = "completed" if task.get("completed") else "pending"
        console.print(Text.assemble(("  Status: ", "bright_black"), status))
    console.print(
        Text.assemble(("  Created: ", "bright_black"), _format_timestamp(task.get("createdAt", "")))
    )
    if detailed:
        console.print(
            Text.assemble(("  Updated: ", "bright_black"), _format_timestamp(task.get("updatedAt", "")))
        )


def display_tasks(tasks: list[TaskEntity]) -> None:
    if not tasks:
        console.print("\nNo tasks found.", style="yellow")
        return

    console.print(f"\nTotal tasks: {len(tasks)}", style="bold")
    for task in tasks:
        display_task(task)
    console.print("")


def resolve_task_id(repo: Repository, task_id_or_prefix: str) -> str:
    """
    Resolve a full task id or a unique id prefix to the full id.

    Raises:
        TaskValidationError: if the id is empty.
        TaskLookupError: if nothing matches, or the prefix is ambiguous.
    """
    if repo.get(task_id_or_prefix):
        return task_id_or_prefix

    matches = [t["id"] for t in repo.list_all() if t.get("id", "").startswith(task_id_or_prefix)]
    if not matches:
        raise TaskLookupError("Task not found")
    if len(matches) > 1:
        raise TaskLookupError(
            f"ID prefix '{task_id_or_prefix}' matches {len(matches)} tasks; use more characters"
        )
    return matches[0]


def _fail(message: str) -> None:
    err_console.print(Text(f"\n✗ {message}", style="red"))
    raise typer.Exit(1)


def command_wrapper(func: Callable) -> Callable:
    """Turn store errors into a red message and exit code 1."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except TaskLookupError as e:
            _fail(str(e))
        except (TaskValidationError, OSError) as e:
            logger.debug("command %s failed", func.__name__, exc_info=True)
            err_console.print(Text(f"Error: {e}", style="red"))
            raise typer.Exit(1)

    return wrapper


def _repo(ctx: typer.Context) -> Repository:
    return JsonFileRepository(ctx.obj["data_dir"])


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"task-cli {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    ctx: typer.Context,
    data_dir: Annotated[
        Optional[str],
        typer.Option("--data-dir", help="Directory holding tasks.json (default: DATA_DIR or ./data)"),
    ] = None,
    version: Annotated[
        bool,
        typer.Option("--version", "-V", callback=_version_callback, is_eager=True, help="Show version"),
    ] = False,
) -> None:
    """Manage a personal task list stored in a JSON file."""
    ctx.obj = {"data_dir": data_dir or get_settings().data_dir}


@app.command("list")
@command_wrapper
def list_command(
    ctx: typer.Context,
    completed: Annotated[
        bool, typer.Option("--completed", "-c", help="Show only completed tasks")
    ] = False,
    pending: Annotated[
        bool, typer.Option("--pending", "-p", help="Show only pending tasks")
    ] = False,
) -> None:
    """List all tasks."""
    repo = _repo(ctx)
    if completed:
        tasks = repo.list_by_status(True)
        console.print("\nCompleted Tasks:", style="bold")
    elif pending:
        tasks = repo.list_by_status(False)
        console.print("\nPending Tasks:", style="bold")
    else:
        tasks = repo.list_all()
        console.print("\nAll Tasks:", style="bold")
    display_tasks(tasks)


@app.command("add")
@command_wrapper
def add_command(
    ctx: typer.Context,
    title: Annotated[str, typer.Argument(help="Task title")],
    description: Annotated[
        str, typer.Option("--description", "-d", help="Task description")
    ] = "",
) -> None:
    """Add a new task."""
    task = _repo(ctx).create(title, description)
    console.print("\n✓ Task created successfully!", style="green")
    display_task(task)


@app.command("complete")
@command_wrapper
def complete_command(
    ctx: typer.Context,
    task_id: Annotated[str, typer.Argument(help="Task ID or unique ID prefix")],
) -> None:
    """Mark a task as completed."""
    repo = _repo(ctx)
    task = repo.update(resolve_task_id(repo, task_id), {"completed": True})
    if not task:
        _fail("Task not found")
    console.print("\n✓ Task marked as completed!", style="green")
    display_task(task)


@app.command("delete")
@command_wrapper
def delete_command(
    ctx: typer.Context,
    task_id: Annotated[str, typer.Argument(help="Task ID or unique ID prefix")],
) -> None:
    """Delete a task."""
    repo = _repo(ctx)
    if not repo.delete(resolve_task_id(repo, task_id)):
        _fail("Task not found")
    console.print("\n✓ Task deleted successfully!", style="green")


@app.command("view")
@command_wrapper
def view_command(
    ctx: typer.Context,
    task_id: Annotated[str, typer.Argument(help="Task ID or unique ID prefix")],
) -> None:
    """View task details."""
    repo = _repo(ctx)
    task = repo.get(resolve_task_id(repo, task_id))
    if not task:
        _fail("Task not found")
    display_task(task, detailed=True)


def run() -> None:
    """Console-script entry point."""
    load_dotenv()
    setup_logging(logging.WARNING)
    app()


if __name__ == "__main__":
    run()
