"""
Command-line interface for the review tool.

Usage:
    wikireview fetch <page> [--section N]                 # Print section wikitext and edit tokens
    wikireview compose <file>                             # Compose wikitext from an annotation file
    wikireview review <page> --section N [--import FILE]  # Run the check-writing wizard and commit
    wikireview page-info <page>                           # Print the XTools summary
    wikireview annotations show <page> [--sort MODE]      # List stored annotations
    wikireview annotations add <page> --section S --text T --opinion O [--pos P]
    wikireview annotations edit <page> <id> <opinion>     # Replace an opinion
    wikireview annotations resolve <page> <id> [--reopen] # Mark resolved (or open again)
    wikireview annotations delete <page> <id>             # Remove one annotation
    wikireview annotations clear <page> [--yes]           # Remove every annotation of a page
    wikireview annotations export <page> <out>            # Export stored annotations as JSON
"""

from __future__ import annotations

import asyncio
import json
import logging
from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from bs4 import BeautifulSoup
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from review_service.api import MediaWikiClient, SectionEditClient, get_page_info_html
from review_service.imports import build_composition, load_import_file
from review_service.notify import ConsoleNotifier
from review_service.target import edit_link_heading
from review_service.wizard import CheckWritingWizard
from wikireview_core.errors import ReviewToolError
from wikireview_core.messages import message
from wikireview_core.ordering import build_time_sorted_groups
from wikireview_core.settings import settings as core_settings
from wikireview_core.store import AnnotationStore, store_path_for
from wikireview_core.wikitext import build_review_wikitext

app = typer.Typer(
    name="wikireview",
    help="Compose review suggestions from annotations and append them to a talk-page section",
)
annotations_app = typer.Typer(help="Inspect and edit stored annotations")
app.add_typer(annotations_app, name="annotations")

console = Console()


@app.callback()
def main(verbose: bool = typer.Option(False, "--verbose", "-v", help="Debug logging")) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True)],
    )


def _html_to_text(html: str) -> str:
    return BeautifulSoup(html, "lxml").get_text("\n", strip=True)


class SortMode(str, Enum):
    POSITION = "position"
    TIME_ASC = "time-asc"
    TIME_DESC = "time-desc"


def _fail(exc: ReviewToolError) -> typer.Exit:
    console.print(f"[red]{escape(exc.to_log_message())}[/red]")
    return typer.Exit(1)


def _store_path(page: str) -> Path:
    return store_path_for(core_settings.data_dir, page)


def _store_for(page: str) -> AnnotationStore:
    try:
        return AnnotationStore.load(_store_path(page), page)
    except ReviewToolError as exc:
        raise _fail(exc)


def _require(store: AnnotationStore, annotation_id: str) -> None:
    if annotation_id not in store:
        console.print(f"[red]No annotation {escape(annotation_id)} on {escape(store.page_name)}[/red]")
        raise typer.Exit(1)


@app.command()
def fetch(
    page: str = typer.Argument(..., help="Page title"),
    section: Optional[int] = typer.Option(None, "--section", "-s", help="Section number (whole page if omitted)"),
) -> None:
    """Print the current wikitext of a page or section with its edit tokens."""

    async def _run():
        async with MediaWikiClient() as api:
            return await SectionEditClient(api).retrieve_full_text(page, section)

    try:
        result = asyncio.run(_run())
    except ReviewToolError as exc:
        raise _fail(exc)

    console.print(f"[dim]starttimestamp: {result.starttimestamp}[/dim]")
    console.print(f"[dim]basetimestamp:  {result.basetimestamp}[/dim]")
    console.print(result.text, markup=False, highlight=False)


@app.command()
def compose(
    file: Path = typer.Argument(..., help="Annotation JSON file"),
) -> None:
    """Print the review wikitext an annotation file would produce."""
    try:
        annotations = load_import_file(file, user_name=core_settings.user_name)
        composition = build_composition(annotations, message("annotation-fallback-chapter"))
    except ReviewToolError as exc:
        raise _fail(exc)
    console.print(build_review_wikitext(composition.chapters), markup=False, highlight=False)


@app.command()
def review(
    page: str = typer.Argument(..., help="Talk page holding the review section"),
    section: int = typer.Option(..., "--section", "-s", help="Section number to append to"),
    article: Optional[str] = typer.Option(None, help="Reviewed article title (defaults to PAGE)"),
    import_file: Optional[Path] = typer.Option(
        None, "--import", help="Annotation JSON file (defaults to the stored annotations)"
    ),
    summary: Optional[str] = typer.Option(None, help="Edit summary"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Commit without asking"),
) -> None:
    """
    Run the check-writing wizard end to end:
    - load annotations into chapters
    - build the draft
    - preview the fragment against the current section
    - show the diff and append on confirmation
    """
    article = article or page
    store = _store_for(article) if import_file is None else None
    if not asyncio.run(_review(page, section, article, store, import_file, summary, yes)):
        raise typer.Exit(1)


async def _review(
    page: str,
    section: int,
    article: str,
    store: AnnotationStore | None,
    import_file: Path | None,
    summary: str | None,
    yes: bool,
) -> bool:
    notifier = ConsoleNotifier(console)
    async with MediaWikiClient() as api:
        sections = SectionEditClient(api, notifier=notifier, context_title=page)
        wizard = CheckWritingWizard(
            sections,
            article_title=article,
            heading=edit_link_heading(page, section),
            store=store,
            notifier=notifier,
            summary=summary,
            user_name=core_settings.user_name,
        ).show()
        console.print(f"[bold cyan]{wizard.title}[/bold cyan]")

        if import_file is not None:
            loaded = await wizard.import_annotations_file(import_file)
        else:
            loaded = await wizard.load_annotations_into_form()
        if not loaded:
            wizard.close()
            return False

        while not wizard.machine.is_last:
            await wizard.on_primary_action()
            await wizard.settle()

        console.print(Panel(Text(wizard.preview_wikitext or ""), title="Draft", expand=False))
        if wizard.diff_html:
            console.print(Panel(Text(_html_to_text(wizard.diff_html)), title="Diff", expand=False))
        elif wizard.diff_lines:
            console.print(Panel(Text("\n".join(wizard.diff_lines)), title="Diff", expand=False))
        else:
            console.print("[yellow]Nothing to append.[/yellow]")

        if not yes and not typer.confirm(f"Append to section {section} of {page}?"):
            wizard.close()
            return False
        return await wizard.on_primary_action()


@app.command("page-info")
def page_info(
    page: str = typer.Argument(..., help="Article title"),
    server: Optional[str] = typer.Option(None, help="Wiki host name (defaults to settings)"),
) -> None:
    """Print creation, revision and assessment details from XTools."""
    html = asyncio.run(get_page_info_html(page, server_name=server))
    console.print(_html_to_text(html))


@annotations_app.command("show")
def annotations_show(
    page: str = typer.Argument(..., help="Article title"),
    sort: SortMode = typer.Option(SortMode.POSITION, "--sort", help="Group and member order"),
) -> None:
    """List stored annotations grouped by section, in position or creation-time order."""
    store = _store_for(page)
    if not len(store):
        console.print(f"[yellow]{message('load-empty')}[/yellow]")
        return

    table = Table(title=f"Annotations: {store.page_name}", show_header=True, header_style="bold cyan")
    table.add_column("Section", style="cyan")
    table.add_column("Pos", justify="right")
    table.add_column("Sentence")
    table.add_column("Opinion")
    table.add_column("Resolved", justify="center")
    table.add_column("ID", style="dim")
    if sort is SortMode.POSITION:
        groups = store.groups()
    else:
        groups = build_time_sorted_groups(store, descending=sort is SortMode.TIME_DESC)
    for group in groups:
        for annotation in group.annotations:
            table.add_row(
                Text(group.section_path or message("annotation-fallback-chapter")),
                Text(annotation.sentence_pos or ""),
                Text(annotation.sentence_text),
                Text(annotation.opinion),
                "[green]✓[/green]" if annotation.resolved else "",
                annotation.id,
            )
    console.print(table)


@annotations_app.command("add")
def annotations_add(
    page: str = typer.Argument(..., help="Article title"),
    section: str = typer.Option(..., "--section", "-s", help="Section path the sentence belongs to"),
    text: str = typer.Option(..., "--text", "-t", help="Quoted sentence"),
    opinion: str = typer.Option(..., "--opinion", "-o", help="Review comment"),
    pos: Optional[str] = typer.Option(None, "--pos", help="Sentence position key, e.g. 2.1.4"),
) -> None:
    """Store a new annotation for a sentence."""
    store = _store_for(page)
    annotation = store.create(
        section_path=section.strip(),
        sentence_text=text,
        opinion=opinion,
        sentence_pos=pos,
        created_by=core_settings.user_name,
    )
    store.save(_store_path(page))
    console.print(f"[green]✓ Added {annotation.id}[/green]")


@annotations_app.command("edit")
def annotations_edit(
    page: str = typer.Argument(..., help="Article title"),
    annotation_id: str = typer.Argument(..., help="Annotation id"),
    opinion: str = typer.Argument(..., help="New review comment"),
) -> None:
    """Replace the opinion of a stored annotation."""
    store = _store_for(page)
    _require(store, annotation_id)
    store.update_opinion(annotation_id, opinion)
    store.save(_store_path(page))
    console.print(f"[green]✓ Updated {escape(annotation_id)}[/green]")


@annotations_app.command("resolve")
def annotations_resolve(
    page: str = typer.Argument(..., help="Article title"),
    annotation_id: str = typer.Argument(..., help="Annotation id"),
    reopen: bool = typer.Option(False, "--reopen", help="Mark as unresolved instead"),
) -> None:
    """Mark a stored annotation resolved."""
    store = _store_for(page)
    _require(store, annotation_id)
    store.set_resolved(annotation_id, not reopen)
    store.save(_store_path(page))
    state = "reopened" if reopen else "resolved"
    console.print(f"[green]✓ {escape(annotation_id)} {state}[/green]")


@annotations_app.command("delete")
def annotations_delete(
    page: str = typer.Argument(..., help="Article title"),
    annotation_id: str = typer.Argument(..., help="Annotation id"),
) -> None:
    """Remove one stored annotation."""
    store = _store_for(page)
    _require(store, annotation_id)
    store.remove(annotation_id)
    store.save(_store_path(page))
    console.print(f"[green]✓ Deleted {escape(annotation_id)}[/green]")


@annotations_app.command("clear")
def annotations_clear(
    page: str = typer.Argument(..., help="Article title"),
    yes: bool = typer.Option(False, "--yes", "-y", help="Clear without asking"),
) -> None:
    """Remove every stored annotation of a page."""
    store = _store_for(page)
    count = len(store)
    if not count:
        console.print(f"[yellow]{message('load-empty')}[/yellow]")
        return
    if not yes and not typer.confirm(f"Delete all {count} annotations of {page}?"):
        raise typer.Exit(1)
    store.clear()
    store.save(_store_path(page))
    console.print(f"[green]✓ Cleared {count} annotations[/green]")


@annotations_app.command("export")
def annotations_export(
    page: str = typer.Argument(..., help="Article title"),
    out: Path = typer.Argument(..., help="Output JSON file"),
) -> None:
    """Write stored annotations in the grouped import format."""
    store = _store_for(page)
    payload = {
        "pageName": store.page_name,
        "groups": [
            {
                "sectionPath": group.section_path,
                "annotations": [a.model_dump(by_alias=True) for a in group.annotations],
            }
            for group in store.groups()
        ],
    }
    out.parent.mkdir(parents=True, exist_ok=True)
    out.write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")
    console.print(f"[green]✓ Exported {len(store)} annotations to {out}[/green]")


if __name__ == "__main__":
    app()
