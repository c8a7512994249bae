"""Main CLI entry point for Groot."""

import logging
import signal
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.text import Text

from groot.constants import (
    EXIT_DATA_ERROR,
    EXIT_INTERRUPTED,
    EXIT_SYSTEM_ERROR,
    EXIT_USER_ERROR,
    REPO_ENV_VAR,
    SHORT_HASH_LENGTH,
)
from groot.core import (
    CommitChain,
    CommitChainError,
    CorruptCommitError,
    HistoryWalker,
    NothingToCommitError,
    Repository,
    RepositoryNotFoundError,
    StagingError,
    StagingIndex,
)
from groot.diff import ADDED, REMOVED, DiffEngine
from groot.storage import (
    AmbiguousHashError,
    ObjectCorruptedError,
    ObjectNotFoundError,
    ObjectStore,
)

logger = logging.getLogger(__name__)

console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)
app = typer.Typer(
    name="groot",
    help="A minimal single-user version control engine",
    add_completion=False,
)

LINE_STYLES = {ADDED: "green", REMOVED: "red"}


class Session:
    """Storage handles for one CLI invocation, built from an explicit repository."""

    def __init__(self, repository: Repository):
        repository.require()
        self.repository = repository
        self.object_store = ObjectStore(repository.groot_dir)
        self.staging = StagingIndex(repository, self.object_store)
        self.commit_chain = CommitChain(repository, self.object_store, self.staging)
        self.diff_engine = DiffEngine()
        self.history = HistoryWalker(self.commit_chain, self.object_store, self.diff_engine)
        logger.debug("Opened %r", repository)


def _error(message: str, exit_code: int = EXIT_USER_ERROR, hint: Optional[str] = None) -> typer.Exit:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}", style="red", highlight=False)
    if hint:
        console.print(hint, style="yellow")
    return typer.Exit(exit_code)


def _exit_for(e: Exception) -> typer.Exit:
    """Map a core exception to a printed error and an exit code."""
    if isinstance(e, RepositoryNotFoundError):
        return _error(str(e), hint="Run [bold]groot init[/bold] to initialize a repository")
    if isinstance(e, (ObjectNotFoundError, ObjectCorruptedError, CorruptCommitError)):
        return _error(str(e), EXIT_DATA_ERROR)
    if isinstance(e, (StagingError, CommitChainError, AmbiguousHashError, ValueError)):
        return _error(str(e))
    return _error(str(e), EXIT_SYSTEM_ERROR)


def _repository(ctx: typer.Context) -> Repository:
    repo_path = ctx.obj.get("repo") if ctx.obj else None
    if repo_path is not None:
        return Repository(repo_path)
    return Repository.discover(Path.cwd())


def _open(ctx: typer.Context) -> Session:
    return Session(_repository(ctx))


@app.callback()
def main_callback(
    ctx: typer.Context,
    repo: Optional[Path] = typer.Option(
        None,
        "--repo",
        "-C",
        envvar=REPO_ENV_VAR,
        help="Workspace root of the repository (default: discovered from cwd)",
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable debug logging",
    ),
) -> None:
    """Groot records file snapshots into a linear commit history."""
    ctx.ensure_object(dict)
    ctx.obj["repo"] = repo

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=err_console, show_path=False)],
    )


@app.command()
def version() -> None:
    """Show Groot version."""
    from groot import __version__
    typer.echo(f"Groot version {__version__}")


@app.command()
def init(ctx: typer.Context) -> None:
    """Initialize a Groot repository (safe to run more than once)."""
    repo_path = ctx.obj.get("repo") if ctx.obj else None
    repository = Repository(repo_path or Path.cwd())

    try:
        created = repository.initialize()
    except OSError as e:
        raise _error(f"Failed to initialize repository: {e}", EXIT_SYSTEM_ERROR)

    if created:
        console.print(
            f"[bold green]✓[/bold green] Initialized empty Groot repository in {escape(str(repository.groot_dir))}",
            highlight=False,
        )
    else:
        console.print("[yellow]Already initialised the .groot folder[/yellow]")


@app.command()
def add(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(..., help="Files to stage"),
) -> None:
    """Stage files for the next commit."""
    try:
        session = _open(ctx)
        for file in files:
            object_hash = session.staging.stage(file.resolve())
            console.print(object_hash, highlight=False)
            console.print(f"Added {file}", markup=False, highlight=False)
    except (RepositoryNotFoundError, StagingError, OSError) as e:
        raise _exit_for(e)


@app.command()
def commit(
    ctx: typer.Context,
    message: str = typer.Argument(..., help="Commit message"),
    allow_empty: bool = typer.Option(
        False,
        "--allow-empty",
        help="Allow a commit with nothing staged",
    ),
) -> None:
    """Commit staged files and advance HEAD."""
    try:
        session = _open(ctx)
        commit_hash = session.commit_chain.commit(message, allow_empty=allow_empty)
        new_commit = session.commit_chain.get_commit(commit_hash)
    except NothingToCommitError:
        console.print(
            "[bold yellow]Warning:[/bold yellow] Nothing to commit (staging area is empty)",
            style="yellow",
        )
        console.print("  Use [bold]groot add <file>[/bold] to stage files", style="dim")
        console.print(
            "  Or use [bold]--allow-empty[/bold] to create an empty commit", style="dim"
        )
        raise typer.Exit(EXIT_USER_ERROR)
    except (
        RepositoryNotFoundError,
        StagingError,
        CommitChainError,
        ObjectNotFoundError,
        OSError,
    ) as e:
        raise _exit_for(e)

    parent = new_commit.parent
    console.print(
        f"[bold green]>[/bold green] Committed [bold cyan]{commit_hash[:SHORT_HASH_LENGTH]}[/bold cyan]"
        f" ({len(new_commit.files)} file(s))",
        highlight=False,
    )
    console.print(
        f"  [dim]Parent:[/dim]  {parent[:SHORT_HASH_LENGTH] if parent else '(root commit)'}",
        highlight=False,
    )
    console.print(f"\n  {message}", markup=False, highlight=False)


@app.command()
def log(
    ctx: typer.Context,
    max_count: Optional[int] = typer.Option(
        None,
        "--max-count",
        "-n",
        min=1,
        help="Limit number of commits to show",
    ),
    oneline: bool = typer.Option(
        False,
        "--oneline",
        help="Show each commit on a single line",
    ),
) -> None:
    """Show commit history, newest first."""
    try:
        session = _open(ctx)
        if session.commit_chain.current_head() is None:
            console.print("[dim]No commits yet[/dim]")
            return

        for count, entry in enumerate(session.history.walk(), start=1):
            if oneline:
                summary = entry.message.split("\n")[0]
                console.print(
                    Text.assemble((entry.hash[:SHORT_HASH_LENGTH], "yellow"), " ", summary)
                )
            else:
                console.print(f"[bold yellow]Commit: {entry.hash}[/bold yellow]")
                console.print(f"Date: {entry.timestamp}", highlight=False)
                console.print()
                for line in entry.message.split("\n"):
                    console.print(f"    {line}", markup=False, highlight=False)
                console.print()

            if max_count is not None and count >= max_count:
                break
    except (
        RepositoryNotFoundError,
        ObjectNotFoundError,
        CorruptCommitError,
        ValueError,
        OSError,
    ) as e:
        raise _exit_for(e)


@app.command()
def show(
    ctx: typer.Context,
    commit_hash: str = typer.Argument(..., metavar="COMMIT", help="Commit hash or unique prefix"),
    stat: bool = typer.Option(
        False,
        "--stat",
        help="Show per-file line counts instead of the full diff",
    ),
) -> None:
    """Show each file of a commit diffed against its parent."""
    try:
        session = _open(ctx)
        full_hash = session.object_store.resolve_prefix(commit_hash)
        target = session.commit_chain.get_commit(full_hash)
        commit_diff = session.history.diff_against_parent(target)
    except (
        RepositoryNotFoundError,
        ObjectNotFoundError,
        AmbiguousHashError,
        CorruptCommitError,
        ValueError,
        OSError,
    ) as e:
        raise _exit_for(e)

    console.print("Changes in the commit are:\n")

    if commit_diff.first_commit:
        console.print("First commit")
        for entry in target.files:
            console.print(f"File: {entry.path}", markup=False, highlight=False)
        return

    for file_diff in commit_diff.files:
        console.print(f"File: {file_diff.path}", markup=False, highlight=False)

        if file_diff.is_new:
            console.print("New file in this commit", style="green")
        elif stat:
            if session.diff_engine.has_changes(file_diff.segments):
                counts = session.diff_engine.summarize(file_diff.segments)
                console.print(
                    f"  [green]{counts[ADDED]} added[/green], [red]{counts[REMOVED]} removed[/red]"
                )
            else:
                console.print("  no changes", style="dim")
        else:
            console.print("\nDiff:")
            for line in session.diff_engine.render(file_diff.segments):
                console.print(
                    line.text,
                    style=LINE_STYLES.get(line.kind, "dim"),
                    markup=False,
                    highlight=False,
                )
        console.print()


@app.command()
def status(ctx: typer.Context) -> None:
    """Show HEAD and the staging index."""
    try:
        session = _open(ctx)
        head = session.commit_chain.current_head()
        entries = session.staging.current_entries()
    except (RepositoryNotFoundError, StagingError, OSError) as e:
        raise _exit_for(e)

    if head:
        console.print(f"[bold]HEAD:[/bold] {head[:SHORT_HASH_LENGTH]}  [dim]({head})[/dim]")
    else:
        console.print("[bold]HEAD:[/bold] [dim](no commits yet)[/dim]")
    console.print()

    if not entries:
        console.print("[dim]Nothing staged[/dim]")
        console.print("  Use [bold]groot add <file>[/bold] to stage files")
        return

    console.print("[bold green]Changes to be committed:[/bold green]")
    console.print('  [dim](use "groot commit <message>" to commit)[/dim]\n')
    for entry in entries:
        console.print(
            f"  [green]+[/green] {escape(entry.path)}  [dim]({entry.hash[:8]})[/dim]",
            highlight=False,
        )


def _interrupted(signum, frame) -> None:
    err_console.print("\nInterrupted", style="yellow")
    raise typer.Exit(EXIT_INTERRUPTED)


def main() -> None:
    """Entry point for the CLI."""
    # click turns KeyboardInterrupt into exit 1, so SIGINT raises typer.Exit instead.
    signal.signal(signal.SIGINT, _interrupted)
    app()


if __name__ == "__main__":
    main()
