"""
Command-line interface for SEO Internal Linker.

Provides commands to scan a post collection for internal link
opportunities and to apply selected opportunities back to the store.
"""

import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from .approval import ApprovalBatchRunner
from .file_store import FilePostStore
from .models import LinkOpportunity, Post, RelevanceTier, ScanStats
from .opportunity_matcher import OpportunityMatcher
from .post_store import PostStore, PostStoreError
from .report import ReportWriteError, write_opportunity_report
from .supabase_store import SUPABASE_KEY_ENV, SUPABASE_URL_ENV, SupabasePostStore

console = Console()

TIER_STYLES = {
    RelevanceTier.HIGH: "green",
    RelevanceTier.MEDIUM: "yellow",
    RelevanceTier.LOW: "dark_orange",
}


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        force=True,
    )


def _open_store(
    posts_file: Optional[Path],
    supabase: bool,
    supabase_url: Optional[str],
    supabase_key: Optional[str],
) -> PostStore:
    if posts_file and supabase:
        raise click.UsageError("Provide only one of --posts or --supabase")
    if posts_file:
        return FilePostStore(posts_file)
    if supabase:
        return SupabasePostStore(supabase_url or "", supabase_key or "")
    raise click.UsageError("Must provide either --posts or --supabase")


def _run_scan(store: PostStore) -> tuple[list[Post], list[LinkOpportunity], ScanStats]:
    """Load published posts and scan them, reporting per-post progress."""
    with console.status("[bold green]Loading posts..."):
        posts = store.list_published()

    if len(posts) < 2:
        console.print("[yellow]Need at least 2 published posts to analyze[/yellow]")

    matcher = OpportunityMatcher()
    with console.status(f"[bold green]Scanning 0 / {len(posts)} posts...") as status:
        opportunities, stats = matcher.scan_with_stats(
            posts,
            lambda analyzed, total: status.update(f"[bold green]Scanning {analyzed} / {total} posts..."),
        )

    return posts, opportunities, stats


def _display_stats(stats: ScanStats) -> None:
    console.print(
        f"[cyan]Total posts:[/cyan] {stats.total_posts}  "
        f"[cyan]Analyzed:[/cyan] {stats.posts_analyzed}  "
        f"[cyan]Opportunities:[/cyan] {stats.opportunities_found}  "
        f"[cyan]Avg links/post:[/cyan] {stats.avg_links_per_post:.1f}"
    )


def _display_opportunities(
    opportunities: Sequence[LinkOpportunity],
    tier: Optional[str],
    limit: Optional[int],
    verbose: bool,
) -> None:
    table = Table(title=f"Link Opportunities ({len(opportunities)})", show_header=True)
    table.add_column("#", justify="right")
    table.add_column("Source", style="cyan")
    table.add_column("Link to", style="green")
    table.add_column("Relevance")
    table.add_column("Matched Keywords")
    if verbose:
        table.add_column("Context", style="dim")

    shown = 0
    for index, opp in enumerate(opportunities):
        if tier and opp.tier.value != tier:
            continue
        if limit is not None and shown >= limit:
            break
        style = TIER_STYLES[opp.tier]
        row = [
            str(index),
            f"{opp.source_post.title}\n[dim]{opp.source_post.category_name}[/dim]",
            opp.target_post.title,
            f"[{style}]{opp.tier.label}[/{style}] {opp.relevance_percent}%",
            ", ".join(opp.matched_keywords),
        ]
        if verbose:
            row.append(opp.context_snippet)
        table.add_row(*row)
        shown += 1

    console.print(table)


def _select_indices(
    opportunities: Sequence[LinkOpportunity],
    indices: Sequence[int],
    select_all: bool,
    tier: Optional[str],
) -> list[int]:
    chosen = sum(bool(x) for x in (indices, select_all, tier))
    if chosen != 1:
        raise click.UsageError("Provide exactly one of --index, --all or --tier")
    if select_all:
        return list(range(len(opportunities)))
    if tier:
        return [i for i, opp in enumerate(opportunities) if opp.tier.value == tier]
    return list(indices)


store_options = [
    click.option(
        "--posts",
        "posts_file",
        type=click.Path(exists=True, dir_okay=False, path_type=Path),
        help="Post export to read and update (JSON, CSV or Excel).",
    ),
    click.option(
        "--supabase",
        is_flag=True,
        default=False,
        help="Read and update posts in a Supabase project.",
    ),
    click.option(
        "--supabase-url",
        type=str,
        envvar=SUPABASE_URL_ENV,
        help=f"Supabase project URL. Can also be set via {SUPABASE_URL_ENV} env var.",
    ),
    click.option(
        "--supabase-key",
        type=str,
        envvar=SUPABASE_KEY_ENV,
        help=f"Supabase service key. Can also be set via {SUPABASE_KEY_ENV} env var.",
    ),
    click.option(
        "--verbose",
        "-v",
        is_flag=True,
        default=False,
        help="Enable verbose output.",
    ),
]


def with_store_options(func):
    for option in reversed(store_options):
        func = option(func)
    return func


@click.group()
@click.version_option(package_name="seo-internal-linker")
def main() -> None:
    """
    SEO Internal Linker - Discover and apply internal links between posts.

    Examples:

        seo-linker scan --posts posts.json --report opportunities.docx

        seo-linker apply --posts posts.json --tier high

        seo-linker apply --supabase --index 0 --index 3
    """


@main.command()
@with_store_options
@click.option(
    "--tier",
    type=click.Choice(["high", "medium", "low"]),
    default=None,
    help="Only show opportunities in this relevance tier.",
)
@click.option("--limit", type=int, default=None, help="Maximum opportunities to display.")
@click.option(
    "--report",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the opportunity list to a .docx, .csv or .xlsx file.",
)
def scan(
    posts_file: Optional[Path],
    supabase: bool,
    supabase_url: Optional[str],
    supabase_key: Optional[str],
    verbose: bool,
    tier: Optional[str],
    limit: Optional[int],
    report: Optional[Path],
) -> None:
    """Scan published posts for internal linking opportunities."""
    _configure_logging(verbose)
    console.print(Panel.fit(
        "[bold blue]SEO Internal Linker[/bold blue]\n"
        "Scanning posts for internal linking opportunities",
        border_style="blue",
    ))

    try:
        store = _open_store(posts_file, supabase, supabase_url, supabase_key)
        _, opportunities, stats = _run_scan(store)
        _display_stats(stats)

        if opportunities:
            _display_opportunities(opportunities, tier, limit, verbose)

        if report:
            output_path = write_opportunity_report(opportunities, report, stats)
            console.print(f"\n[bold green]Report saved to:[/bold green] {output_path}")

        console.print(f"\n[bold green]Found {len(opportunities)} internal linking opportunities![/bold green]")

    except PostStoreError as e:
        console.print(f"[red]Post store error:[/red] {e}")
        sys.exit(1)
    except ReportWriteError as e:
        console.print(f"[red]Report error:[/red] {e}")
        sys.exit(1)


@main.command()
@with_store_options
@click.option(
    "--index",
    "-i",
    "indices",
    type=int,
    multiple=True,
    help="Index of an opportunity to apply (as shown by scan). Repeatable.",
)
@click.option("--all", "select_all", is_flag=True, default=False, help="Apply every opportunity.")
@click.option(
    "--tier",
    type=click.Choice(["high", "medium", "low"]),
    default=None,
    help="Apply every opportunity in this relevance tier.",
)
def apply(
    posts_file: Optional[Path],
    supabase: bool,
    supabase_url: Optional[str],
    supabase_key: Optional[str],
    verbose: bool,
    indices: tuple[int, ...],
    select_all: bool,
    tier: Optional[str],
) -> None:
    """Rescan posts and insert links for the selected opportunities."""
    _configure_logging(verbose)

    try:
        store = _open_store(posts_file, supabase, supabase_url, supabase_key)
        _, opportunities, stats = _run_scan(store)
        _display_stats(stats)

        selected = _select_indices(opportunities, indices, select_all, tier)
        if not selected:
            console.print("[red]Error:[/red] No opportunities selected")
            sys.exit(1)

        with console.status(f"[bold green]Approving {len(selected)} opportunities..."):
            result = ApprovalBatchRunner(store).approve(opportunities, selected)

        styles = {"success": "green", "warning": "yellow", "error": "red"}
        for level, message in result.summary_messages():
            console.print(f"[{styles[level]}]{message}[/{styles[level]}]")

        console.print(f"[dim]{len(result.remaining_opportunities)} opportunities remaining[/dim]")

        if result.error_count > 0:
            sys.exit(1)

    except IndexError as e:
        console.print(f"[red]Error:[/red] {e}")
        sys.exit(1)
    except PostStoreError as e:
        console.print(f"[red]Post store error:[/red] {e}")
        sys.exit(1)


def run_cli() -> None:
    """Entry point for the CLI."""
    main()


if __name__ == "__main__":
    run_cli()
