"""CLI entrypoints for bookrender."""

import logging
import time
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.tree import Tree

from . import __version__
from .book import Book
from .check import CheckIssue, IssueSeverity, check_workspace
from .config import Config, load_config
from .errors import BookError
from .render import plan_pages
from .reporting import assemble_report, write_report
from .tree import DocumentNode
from .utils import pluralize

console = Console()
app = typer.Typer(help="Render a book from a structure manifest and markdown sources.")

ConfigPathOption = Annotated[
    str,
    typer.Option(
        "--config",
        "-c",
        help="Path to bookrender.yml or to the project directory holding it.",
    ),
]
VerboseFlag = Annotated[
    bool,
    typer.Option("--verbose", "-v", help="Log per-document progress."),
]


def _version_callback(value: bool) -> None:
    if value:
        console.print(f"bookrender {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            callback=_version_callback,
            is_eager=True,
            help="Show the version and exit.",
        ),
    ] = False,
) -> None:
    """Render a book from a structure manifest and markdown sources."""


@app.command()
def build(
    config_path: ConfigPathOption = ".",
    output_dir: Annotated[
        str | None,
        typer.Option(
            "--output-dir",
            "-o",
            help="Override the output root (relative paths resolve against the project).",
        ),
    ] = None,
    report_path: Annotated[
        str | None,
        typer.Option("--report", "-r", help="Write a JSON build report to this path."),
    ] = None,
    verbose: VerboseFlag = False,
) -> None:
    """Load the manifest, resolve sources, and render every document."""
    _configure_logging(verbose)
    config = _load(config_path)
    if output_dir:
        config.output_dir = _resolve_against_project(config_path, output_dir)

    start = time.perf_counter()
    try:
        book = Book.from_config(config)
        result = book.write(config.output_dir)
    except BookError as exc:
        console.print(f"[bold red]Build failed[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc
    duration = time.perf_counter() - start

    if result.documents:
        console.print(
            f"[bold green]Rendered[/]: {pluralize(result.documents, 'document')} into "
            f"{_display_path(config.output_dir)}"
        )
    else:
        console.print("[bold yellow]Nothing to render[/]: the manifest lists no documents.")
    if result.code_samples_checked:
        console.print(
            f"[bold green]Code samples[/]: {pluralize(result.code_samples_checked, 'sample')} checked"
        )
    if result.contents_path is not None:
        console.print(f"[bold green]Contents[/]: {_display_path(result.contents_path)}")

    if report_path:
        report = assemble_report(
            title=book.title,
            manifest=config.manifest,
            output_dir=config.output_dir,
            result=result,
            duration_seconds=duration,
        )
        try:
            target = write_report(report, Path(report_path))
        except BookError as exc:
            console.print(f"[bold red]Report failed[/]: {escape(str(exc))}")
            raise typer.Exit(code=1) from exc
        console.print(f"[bold green]Report[/]: {_display_path(target)} (duration {duration:.2f}s)")


@app.command()
def check(
    config_path: ConfigPathOption = ".",
    strict: Annotated[
        bool,
        typer.Option("--strict", help="Treat warnings as errors."),
    ] = False,
    verbose: VerboseFlag = False,
) -> None:
    """Report missing sources and broken code samples without writing output."""
    _configure_logging(verbose)
    config = _load(config_path)
    report = check_workspace(config)

    if not report.issues:
        console.print(
            f"[bold green]Check clean[/]: {pluralize(report.document_count, 'document')}, "
            f"{pluralize(report.code_samples_checked, 'code sample')} checked."
        )
        raise typer.Exit()

    for issue in sorted(report.issues, key=_issue_sort_key):
        style = "red" if issue.severity is IssueSeverity.ERROR else "yellow"
        console.print(f"[bold {style}]{issue.severity.name}[/] {escape(issue.path)} - {escape(issue.message)}")
        if issue.suggestions:
            console.print(f"  did you mean: {', '.join(issue.suggestions)}")

    console.print(
        f"[bold blue]Summary[/]: {pluralize(report.error_count, 'error')}, "
        f"{pluralize(report.warning_count, 'warning')} across "
        f"{pluralize(report.document_count, 'document')}."
    )

    exit_code = 0
    if report.error_count > 0 or (strict and report.warning_count > 0):
        exit_code = 1
    raise typer.Exit(code=exit_code)


@app.command()
def tree(config_path: ConfigPathOption = ".") -> None:
    """Print the resolved document tree and each node's output path."""
    config = _load(config_path)
    try:
        book = Book.from_config(config)
    except BookError as exc:
        console.print(f"[bold red]Cannot resolve book[/]: {escape(str(exc))}")
        raise typer.Exit(code=1) from exc

    outputs = {id(page.node): page.relative_path for page in plan_pages(book.tree, config.output_suffix)}
    root = Tree(f"[bold]{escape(book.title or 'Book')}[/] ({pluralize(len(book), 'document')})")

    def _add(branch: Tree, nodes: list[DocumentNode]) -> None:
        for node in nodes:
            label = f"{escape(node.title)} [dim]{escape(node.relative_path)} -> {outputs[id(node)].as_posix()}[/]"
            _add(branch.add(label), node.children)

    _add(root, book.tree.nodes)
    console.print(root)


def _issue_sort_key(issue: CheckIssue) -> tuple[int, str]:
    severity_order = 0 if issue.severity is IssueSeverity.ERROR else 1
    return (severity_order, issue.path)


def _configure_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def _resolve_against_project(config_path: str, value: str) -> Path:
    target = Path(value)
    if target.is_absolute():
        return target
    anchor = Path(config_path)
    base = anchor if anchor.is_dir() else anchor.parent
    return (base / target).resolve()


def _display_path(path: Path) -> str:
    try:
        return path.relative_to(Path.cwd()).as_posix()
    except ValueError:
        return path.as_posix()


def _load(path: str) -> Config:
    try:
        return load_config(path)
    except FileNotFoundError as exc:
        raise typer.BadParameter(f"Config file not found: {path}") from exc
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
