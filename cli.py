import asyncio
from typing import List, Optional

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from config.logic import load_and_merge_configs
from config.models import Config
from core.contracts.models import CommitDetail, CommitSummary, MatchResult
from core.formatter.jinja_formatter import Jinja2Formatter, confidence_bar
from core.router import get_source
from core.session import AnalysisSession
from utils.errors import CommitMatchException
from utils.logger import logger, setup_logger

MATCH_STYLES = {
    "good": ("green", "✔"),
    "partial": ("yellow", "!"),
    "poor": ("red", "✘"),
    "unknown": ("bright_black", "?"),
}


def _truncate(text: str, width: int) -> str:
    return text if len(text) <= width else text[: width - 1] + "…"


def displayed_commits(session: AnalysisSession, config: Config) -> List[CommitSummary]:
    """The commits that make it into the numbered listing."""
    if config.output.max_commits:
        return session.commits[: config.output.max_commits]
    return session.commits


def render_commit_table(session: AnalysisSession, config: Config) -> Table:
    """Builds the numbered commit listing shown by `list` and `inspect`."""
    commits = displayed_commits(session, config)

    table = Table(title=f"{session.reference.full_name} - commits ({len(session.commits)})")
    table.add_column("#", justify="right", style="bright_black")
    table.add_column("SHA", style="cyan", no_wrap=True)
    table.add_column("Subject")
    table.add_column("Author", style="magenta")
    table.add_column("Date", style="green", no_wrap=True)
    for index, commit in enumerate(commits, start=1):
        table.add_row(
            str(index),
            commit.short_sha,
            _truncate(commit.subject, config.output.subject_width),
            commit.author_name or "unknown",
            commit.authored_at.strftime("%Y-%m-%d %H:%M") if commit.authored_at else "",
        )
    return table


def render_detail(console: Console, detail: CommitDetail, result: MatchResult, config: Config) -> None:
    """Prints the message, match score and per-file relevance of one commit."""
    style, icon = MATCH_STYLES[result.classification]

    console.print(Panel(
        detail.message or "(empty message)",
        title=f"[bold cyan]{detail.short_sha}[/bold cyan] by {detail.author_name or 'unknown'}",
        border_style="cyan",
        expand=False,
    ))

    score = Text()
    score.append(f"{icon} {result.classification.upper()} ", style=f"bold {style}")
    score.append(confidence_bar(result.confidence, config.output.bar_width), style=style)
    score.append(f" {result.confidence}%")
    console.print(score)

    if result.per_file:
        files = Table(show_header=True, header_style="bold")
        files.add_column("File")
        files.add_column("Status")
        files.add_column("Changes", justify="right")
        files.add_column("Matched", justify="right")
        files.add_column("Relevance")
        for item in result.per_file:
            relevance_style = "green" if item.relevance == "high" else "bright_black"
            files.add_row(
                item.file,
                item.status,
                item.change_summary,
                str(item.matched_term_count),
                Text(item.relevance, style=relevance_style),
            )
        console.print(files)
    else:
        console.print("[bright_black]No file list available for this commit.[/bright_black]")

    if detail.html_url:
        console.print(f"[link={detail.html_url}]{detail.html_url}[/link]")


def _fail(ctx: click.Context, console: Console, message: str) -> None:
    console.print(f"[bold red]Error:[/bold red] {message}")
    ctx.exit(1)


async def _load(config: Config, url: str) -> AnalysisSession:
    source = get_source(config)
    try:
        session = AnalysisSession(source, host=config.github.host)
        return await session.load_repository(url)
    finally:
        await source.aclose()


async def _show(config: Config, url: str, sha: str) -> AnalysisSession:
    source = get_source(config)
    try:
        session = AnalysisSession(source, host=config.github.host)
        if session.set_repository(url) is None:
            return session
        return await session.select_commit(sha)
    finally:
        await source.aclose()


async def _inspect(console: Console, config: Config, url: str) -> AnalysisSession:
    source = get_source(config)
    try:
        session = AnalysisSession(source, host=config.github.host)
        with console.status("[bold green]Fetching commits...[/bold green]"):
            await session.load_repository(url)
        if session.error:
            return session
        if not session.commits:
            console.print("[yellow]No commits found.[/yellow]")
            return session

        shown = displayed_commits(session, config)
        while True:
            console.print(render_commit_table(session, config))
            choice = await asyncio.to_thread(
                click.prompt, "Commit number (q to quit)", default="q", show_default=False
            )
            if choice.strip().lower() in ("q", "quit", ""):
                session.error = ""
                return session
            if not choice.isdigit() or not 1 <= int(choice) <= len(shown):
                console.print(f"[yellow]Enter a number between 1 and {len(shown)}.[/yellow]")
                continue

            commit = shown[int(choice) - 1]
            with console.status(f"[bold green]Analyzing {commit.short_sha}...[/bold green]"):
                await session.select_commit(commit.sha)
            if session.error:
                console.print(f"[bold red]Error:[/bold red] {session.error}")
            else:
                render_detail(console, session.selected, session.result, config)
    finally:
        await source.aclose()


@click.group()
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Enable debug logging.",
)
@click.option(
    "-c", "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False),
    help="Path to a configuration file that replaces all others.",
)
@click.pass_context
def cli(ctx, verbose: bool, config_path: Optional[str]):
    """
    Checks whether GitHub commit messages match the files they change.
    """
    console = Console()
    try:
        config = load_and_merge_configs(custom_config_path=config_path)
    except CommitMatchException as e:
        _fail(ctx, console, str(e))
        return

    setup_logger(log_level="DEBUG" if verbose else config.log.level, log_file=config.log.file)
    ctx.obj = {"config": config, "console": console, "verbose": verbose}


@cli.command("list")
@click.argument("url")
@click.option("--limit", type=click.IntRange(min=0), default=None, help="Show at most this many commits.")
@click.pass_context
def list_commits(ctx, url: str, limit: Optional[int]):
    """
    List the latest commits of the repository at URL.
    """
    config: Config = ctx.obj["config"]
    console: Console = ctx.obj["console"]
    if limit is not None:
        config.output.max_commits = limit

    try:
        with console.status("[bold green]Fetching commits...[/bold green]"):
            session = asyncio.run(_load(config, url))
    except CommitMatchException as e:
        logger.opt(exception=ctx.obj["verbose"]).error("Failed to list commits: {}", e)
        _fail(ctx, console, str(e))
        return

    if session.error:
        _fail(ctx, console, session.error)
        return
    if not session.commits:
        console.print("[yellow]No commits found.[/yellow]")
        return
    console.print(render_commit_table(session, config))


@cli.command("show")
@click.argument("url")
@click.argument("sha")
@click.option("--plain", is_flag=True, default=False, help="Print a plain-text report instead of rich output.")
@click.pass_context
def show_commit(ctx, url: str, sha: str, plain: bool):
    """
    Analyze commit SHA of the repository at URL.
    """
    config: Config = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    try:
        session = asyncio.run(_show(config, url, sha))
        if session.error:
            _fail(ctx, console, session.error)
            return

        if plain:
            formatter = Jinja2Formatter(
                template_dir=config.formatter.template_dir,
                template_name=config.formatter.template,
                bar_width=config.output.bar_width,
            )
            click.echo(formatter.format(session.selected, session.result), nl=False)
        else:
            render_detail(console, session.selected, session.result, config)
    except CommitMatchException as e:
        logger.opt(exception=ctx.obj["verbose"]).error("Failed to analyze commit: {}", e)
        _fail(ctx, console, str(e))


@cli.command("inspect")
@click.argument("url")
@click.pass_context
def inspect_commits(ctx, url: str):
    """
    Browse the commits of the repository at URL and analyze them one by one.
    """
    config: Config = ctx.obj["config"]
    console: Console = ctx.obj["console"]

    try:
        session = asyncio.run(_inspect(console, config, url))
    except CommitMatchException as e:
        logger.opt(exception=ctx.obj["verbose"]).error("Failed to inspect repository: {}", e)
        _fail(ctx, console, str(e))
        return

    if session.error:
        _fail(ctx, console, session.error)


if __name__ == "__main__":
    cli()
