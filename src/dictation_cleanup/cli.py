"""Command-line interface for dictation-cleanup.

Uses Typer for a modern, type-hinted CLI experience.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Annotated, Optional

import typer
from dotenv import load_dotenv
from rich.console import Console

# Load environment variables from .env files
# Priority: local .env > ~/.dictation-cleanup/.env
_user_env = Path.home() / ".dictation-cleanup" / ".env"
if _user_env.exists():
    load_dotenv(_user_env)
load_dotenv()  # Load local .env (overrides user-level)
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from dictation_cleanup import __version__
from dictation_cleanup.config import CleanupSettings, get_settings_store_path, load_settings
from dictation_cleanup.correction import BUILTIN_RULES
from dictation_cleanup.dictionary import DictionaryStore
from dictation_cleanup.errors import ConfigurationError, SampleIndexError, format_error_for_display
from dictation_cleanup.logging import LogLevel, enable_file_logging, set_verbosity
from dictation_cleanup.numbers import NumberNormalizer
from dictation_cleanup.pipeline import RouteKind, TranscriptPipeline
from dictation_cleanup.storage import SettingsStore

# Create the main Typer app
app = typer.Typer(
    name="dictation-cleanup",
    help="Clean up speech-to-text transcripts: fix mishearings, sentence-case, convert numbers.",
    add_completion=False,
    rich_markup_mode="rich",
)

console = Console()

ROUTE_STYLES = {
    RouteKind.INJECT: "green",
    RouteKind.DIRECT_ADDRESS: "magenta",
    RouteKind.REVIEW: "yellow",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"dictation-cleanup version {__version__}")
        raise typer.Exit()


def get_settings() -> CleanupSettings:
    """Load settings, exiting with an error message if they are invalid."""
    try:
        return load_settings()
    except ConfigurationError as e:
        console.print(f"[red]Error:[/red] {escape(format_error_for_display(e))}")
        raise typer.Exit(1)


def open_dictionary(settings: CleanupSettings) -> DictionaryStore:
    """Open and load the user dictionary from the data directory."""
    store = DictionaryStore(SettingsStore(get_settings_store_path()), key=settings.dictionary_key)
    store.load()
    return store


def read_text_argument(text: str) -> str:
    """Return the text argument, reading stdin when it is "-"."""
    if text == "-":
        return typer.get_text_stream("stdin").read().strip()
    return text


@app.callback()
def main(
    version: Annotated[
        Optional[bool],
        typer.Option(
            "--version",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Show informational log messages."),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Show debug log messages."),
    ] = False,
    log_file: Annotated[
        Optional[Path],
        typer.Option("--log-file", help="Also write full debug logs to this file."),
    ] = None,
) -> None:
    """Dictation Cleanup - transcript post-processing.

    Runs raw speech-to-text output through [bold]corrections[/bold]
    (built-in rules and your trained dictionary), [bold]sentence case[/bold]
    and [bold]number normalization[/bold].
    """
    if log_file:
        enable_file_logging(log_file)
    if debug:
        set_verbosity(LogLevel.DEBUG)
    elif verbose:
        set_verbosity(LogLevel.VERBOSE)


# =============================================================================
# Cleanup Commands
# =============================================================================


@app.command()
def clean(
    text: Annotated[str, typer.Argument(help="Raw transcript text, or '-' to read stdin")],
    no_numbers: Annotated[
        bool,
        typer.Option("--no-numbers", help="Leave number words spelled out"),
    ] = False,
    show_log: Annotated[
        bool,
        typer.Option("--log", "-l", help="Show a table of applied corrections"),
    ] = False,
    show_route: Annotated[
        bool,
        typer.Option("--route", "-r", help="Show where the text would be delivered"),
    ] = False,
    as_json: Annotated[
        bool,
        typer.Option("--json", help="Print the full result as JSON"),
    ] = False,
) -> None:
    """Clean a raw transcript.

    Applies built-in rules, the user dictionary, sentence case and
    number conversion, then prints the final text.
    """
    settings = get_settings()
    raw_text = read_text_argument(text)

    pipeline = TranscriptPipeline.from_settings(settings)
    result = pipeline.process_detailed(raw_text, convert_numbers=False if no_numbers else None)

    if as_json:
        console.print_json(json.dumps(result.to_dict(), ensure_ascii=False))
        return

    console.print(result.text, markup=False, highlight=False, soft_wrap=True)

    if show_route and result.route:
        style = ROUTE_STYLES[result.route.kind]
        console.print(f"\n[{style}]Route:[/{style}] {result.route.kind.value}")

    if show_log:
        if not result.log.corrections:
            console.print("\n[dim]No corrections applied.[/dim]")
            return

        table = Table(title=f"Corrections ({len(result.log)})")
        table.add_column("Type", style="cyan")
        table.add_column("Heard")
        table.add_column("Corrected", style="green")
        table.add_column("Position", justify="right")

        for correction in result.log.corrections:
            table.add_row(
                correction.match_type,
                escape(correction.original),
                escape(correction.corrected),
                str(correction.position) if correction.position is not None else "-",
            )

        console.print()
        console.print(table)


@app.command()
def numbers(
    text: Annotated[str, typer.Argument(help="Text containing number words, or '-' to read stdin")],
) -> None:
    """Convert spoken number words to numerals.

    Small numbers stay spelled out where context suggests they are not
    counts ("pick one", "the two of us").
    """
    converted = NumberNormalizer().convert_number_words(read_text_argument(text))
    console.print(converted, markup=False, highlight=False, soft_wrap=True)


@app.command()
def rules() -> None:
    """List the built-in correction rules."""
    table = Table(title=f"Built-in Rules ({len(BUILTIN_RULES)})")
    table.add_column("Correction", style="green")
    table.add_column("Mishearings")
    table.add_column("Context", style="dim")

    for rule in BUILTIN_RULES:
        context = "required" if rule.requires_context else "optional"
        table.add_row(rule.correction, ", ".join(rule.sorted_mishearings()), context)

    console.print(table)


# =============================================================================
# Dictionary Commands
# =============================================================================

dict_app = typer.Typer(help="Manage the user-trained correction dictionary.")
app.add_typer(dict_app, name="dict")


@dict_app.command("add")
def dict_add(
    incorrect: Annotated[str, typer.Argument(help="Phrase as the recognizer transcribes it")],
    correct: Annotated[str, typer.Argument(help="Replacement text, kept exactly as typed")],
) -> None:
    """Add a correction to the dictionary."""
    settings = get_settings()
    store = open_dictionary(settings)

    if store.contains(incorrect):
        console.print(f"[yellow]Note:[/yellow] '{escape(incorrect)}' already has an entry; adding another.")

    entry = store.add_sample(incorrect, correct)
    if not entry.incorrect:
        console.print("[yellow]Warning:[/yellow] Phrase is empty after normalization and will never match.")
    console.print(f"[green]Added:[/green] '{escape(entry.incorrect)}' -> '{escape(entry.correct)}'")


@dict_app.command("list")
def dict_list() -> None:
    """List dictionary entries in insertion order."""
    settings = get_settings()
    store = open_dictionary(settings)

    if len(store) == 0:
        console.print("[yellow]Dictionary is empty.[/yellow]")
        console.print("Add entries with: dictation-cleanup dict add INCORRECT CORRECT")
        return

    table = Table(title=f"Dictionary ({len(store)} entries)")
    table.add_column("#", justify="right", style="dim")
    table.add_column("Heard", style="cyan")
    table.add_column("Corrected", style="green")

    for index, entry in enumerate(store):
        table.add_row(str(index), escape(entry.incorrect), escape(entry.correct))

    console.print(table)


@dict_app.command("remove")
def dict_remove(
    index: Annotated[int, typer.Argument(help="Index of the entry to remove (see 'dict list')")],
) -> None:
    """Remove one dictionary entry by index."""
    settings = get_settings()
    store = open_dictionary(settings)

    try:
        entry = store.remove_sample(index)
    except SampleIndexError as e:
        console.print(f"[red]Error:[/red] {escape(format_error_for_display(e))}")
        raise typer.Exit(1)

    console.print(f"[green]Removed:[/green] '{escape(entry.incorrect)}' -> '{escape(entry.correct)}'")


@dict_app.command("clear")
def dict_clear(
    yes: Annotated[
        bool,
        typer.Option("--yes", "-y", help="Skip confirmation"),
    ] = False,
) -> None:
    """Remove every dictionary entry.

    This cannot be undone.
    """
    settings = get_settings()
    store = open_dictionary(settings)
    count = len(store)

    if count == 0:
        console.print("[green]Dictionary is already empty.[/green]")
        return

    if not yes:
        if not typer.confirm(f"Remove all {count} dictionary entries?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return

    store.clear_all()
    console.print(f"[green]Cleared {count} dictionary entries.[/green]")


@dict_app.command("train")
def dict_train(
    correct: Annotated[str, typer.Argument(help="What you meant to say")],
    transcriptions: Annotated[
        list[str],
        typer.Argument(help="What the recognizer produced for each recording"),
    ],
) -> None:
    """Learn mishearings of a phrase from several transcriptions.

    Each distinct variant that differs from the phrase becomes a new
    entry. Variants already in the dictionary are not added again.
    """
    settings = get_settings()
    store = open_dictionary(settings)
    outcome = store.learn(correct, transcriptions)

    lines = [f"[bold]Phrase:[/bold] {escape(correct)}"]
    for entry in outcome.added:
        lines.append(f"[green]+ learned[/green] '{escape(entry.incorrect)}'")
    for variant in outcome.already_known:
        lines.append(f"[dim]= known[/dim] '{escape(variant)}'")
    if outcome.skipped:
        lines.append(f"[dim]{len(outcome.skipped)} transcription(s) needed no entry[/dim]")

    console.print(Panel("\n".join(lines), title="Training", border_style="cyan"))

    if not outcome.added:
        console.print("[yellow]No new variants learned.[/yellow]")


if __name__ == "__main__":
    app()
