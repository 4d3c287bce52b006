"""
CLI application for subtl
"""
from pathlib import Path
from typing import Optional, Annotated
import typer

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn, BarColumn, TimeElapsedColumn
from rich.markup import escape
from rich.table import Table

from subtl import (
    BatchRunner,
    CaptionPipeline,
    ConfigError,
    ProviderInitError,
    RejectionLedger,
    Settings,
    TranslationCache,
    TranslatorCode,
    ValidationPolicy,
    create_translator,
    load_settings,
    retranslate_ledger,
)
from subtl.providers import Translator

app = typer.Typer(
    help="Batch-translate subtitle folders with caching and validation",
    add_completion=False,
)
console = Console()


def _pause(pause: bool) -> None:
    if pause:
        typer.prompt("\nPress Enter to close", default="", show_default=False)


def _fail(error: Exception, pause: bool) -> None:
    """Report a fatal error and exit with status 1"""
    console.print(f"[red]{escape(str(error))}[/red]")
    hint = getattr(error, "hint", None)
    if hint:
        console.print(f"[red]{escape(hint)}[/red]")
    _pause(pause)
    raise typer.Exit(1)


def _settings(**overrides) -> Settings:
    return load_settings().with_overrides(**overrides)


def _start_translator(settings: Settings) -> Translator:
    translator = create_translator(settings)
    console.print(f"Initializing translator {translator.describe()}")
    translator.initialize()
    return translator


@app.command()
def run(
    input_path: Annotated[Optional[Path], typer.Option("--input", "-i", help="Folder with subtitles to translate (RJ_PATH)")] = None,
    backup_path: Annotated[Optional[Path], typer.Option("--backup", help="Backup folder for originals (BAK_PATH)")] = None,
    output_path: Annotated[Optional[Path], typer.Option("--output", "-o", help="Folder for translated files (OUT_PATH)")] = None,
    cache_path: Annotated[Optional[Path], typer.Option("--cache", help="Translation cache file (CACHE_PATH)")] = None,
    ledger_path: Annotated[Optional[Path], typer.Option("--ledger", help="Rejected translation ledger (EMPTY_PATH)")] = None,
    translator: Annotated[Optional[str], typer.Option("--translator", "-t", help="Provider code (TRANSLATOR)")] = None,
    pause: Annotated[bool, typer.Option(help="Wait for Enter before exiting")] = False,
):
    """Translate every subtitle file under the input folder"""
    try:
        settings = _settings(
            input_path=input_path,
            backup_path=backup_path,
            output_path=output_path,
            cache_path=cache_path,
            ledger_path=ledger_path,
            translator=translator,
        )
        active = _start_translator(settings)
        cache = TranslationCache(settings.cache_path)
        ledger = RejectionLedger(settings.ledger_path)
    except (ConfigError, ProviderInitError) as e:
        _fail(e, pause)

    console.print(f"Loaded {cache.count(active.code)} cached translations for {active.code.value}")
    runner = BatchRunner(settings, CaptionPipeline(active, cache, ledger))

    with Progress(
        SpinnerColumn(),
        TextColumn("[bold blue]{task.description}"),
        BarColumn(),
        TextColumn("{task.completed}/{task.total}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        t_files = progress.add_task("Translating files...", total=runner.count_files())
        summary = runner.run(on_file=lambda _: progress.advance(t_files))

    table = Table(title="Run summary")
    table.add_column("Metric", style="cyan")
    table.add_column("Count", justify="right")
    for label, value in (
        ("Files", summary.files),
        ("Files written", summary.changed),
        ("Files unchanged", summary.unchanged),
        ("Files failed", summary.failed),
        ("Lines translated", summary.translated),
        ("Lines from cache", summary.cached),
        ("Lines rejected", summary.rejected),
    ):
        table.add_row(label, str(value))
    console.print(table)

    console.print("[green]✓ Finished processing all files[/green]")
    _pause(pause)


@app.command()
def check(
    translator: Annotated[Optional[str], typer.Option("--translator", "-t", help="Provider code (TRANSLATOR)")] = None,
):
    """Initialize the configured provider and report whether it is usable"""
    try:
        active = _start_translator(_settings(translator=translator))
    except (ConfigError, ProviderInitError) as e:
        _fail(e, False)
    console.print(f"[green]✓ {active.describe()} is ready[/green]")


@app.command()
def retranslate(
    ledger_file: Annotated[Path, typer.Argument(help="Ledger-shaped JSON file to translate again")],
    merge: Annotated[bool, typer.Option(help="Add accepted results to the translation cache")] = False,
    translator: Annotated[Optional[str], typer.Option("--translator", "-t", help="Provider code (TRANSLATOR)")] = None,
):
    """Translate previously rejected lines again and save the accepted ones"""
    try:
        settings = _settings(translator=translator)
        active = _start_translator(settings)
        cache = TranslationCache(settings.cache_path) if merge else None
        policy = ValidationPolicy(target_lang=active.effective_target_lang, source_lang=active.source_lang)
        accepted, _ = retranslate_ledger(ledger_file, active, policy, cache=cache)
    except (ConfigError, ProviderInitError) as e:
        _fail(e, False)

    if merge:
        console.print(f"Merged {len(accepted)} results into {escape(str(settings.cache_path))}")


@app.command()
def providers():
    """List available translation providers and their configuration"""
    try:
        settings = load_settings()
    except ConfigError as e:
        _fail(e, False)

    console.print("[bold]Available translation providers:[/bold]")
    for code in TranslatorCode:
        marker = " (active)" if code == settings.translator else ""
        console.print(f"[bold cyan]{code.value}[/bold cyan]{marker}")
        section = getattr(settings, code.value.lower())
        for key, value in vars(section).items():
            if key == "api_key" and value:
                value = "***"
            console.print(f"  {key}: {value}")
        console.print()


if __name__ == "__main__":
    app()
