"""CLI entrypoints."""

import logging
from datetime import datetime
from typing import NoReturn

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from rnm.errors import ExecutionError, HistoryError, NothingToUndoError, PatternError, UndoError, ValidationError
from rnm.log import configure_logging
from rnm.models.config import (
    DATE_POSITION_TOKENS,
    MODE_TOKENS,
    Config,
    Preset,
    parse_date_position,
    parse_mode,
    parse_sort_order,
)
from rnm.models.rename import ModeParameters, PrefixAction, RenameMode, RenamePreview
from rnm.processors.executor import execute_renames
from rnm.processors.preview_generator import changed_previews, generate_previews
from rnm.processors.undo import undo_last, undo_preview
from rnm.scan import load_files, split_glob
from rnm.storage import ConfigStore, HistoryStore


console = Console()
logger = logging.getLogger(__name__)


@click.group(context_settings=dict(show_default=True))
@click.option("-v", "--verbose", is_flag=True, default=False, help="Show debug logging on stderr.")
@click.pass_context
def cli(ctx: click.Context, verbose: bool) -> None:
    """rnm - Batch rename files with preview and undo."""
    configure_logging(verbose)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("history_store", HistoryStore.from_default_location())
    ctx.obj.setdefault("config_store", ConfigStore.from_default_location())


def _fail(message: str, error: Exception) -> NoReturn:
    console.print(f"[bold red]Error:[/bold red] {escape(message)}")
    raise SystemExit(1) from error


def _load_config(config_store: ConfigStore, required: bool) -> Config:
    """Load the user config. Failures are fatal only when the caller needs the config."""
    try:
        return config_store.load()
    except HistoryError as e:
        if required:
            _fail(str(e), e)
        logger.debug("Using default configuration: %s", e)
        return Config()


def _resolve_mode(
    config: Config,
    mode: str | None,
    search: str | None,
    replace: str | None,
    pattern: str | None,
    start: int,
    step: int,
    prefix: str | None,
    suffix: str | None,
    remove_prefix: str | None,
    remove_suffix: str | None,
    date: bool,
    date_position: str,
    preset_name: str | None,
) -> tuple[RenameMode, ModeParameters]:
    """Work out the rename mode and its parameters from command line options.

    A preset wins over everything, then the shortcut options, then `--mode`, then the
    configured default mode.
    """
    position = parse_date_position(date_position)
    if position is None:
        raise click.BadParameter(
            f"Unknown date position '{date_position}' (allowed: {', '.join(sorted(DATE_POSITION_TOKENS))})",
            param_hint="--date-position",
        )
    common = dict(number_start=start, number_step=step, date_position=position)

    if preset_name:
        preset = config.get_preset(preset_name)
        if preset is None:
            raise click.UsageError(f"Preset not found: {preset_name}")
        return preset.mode, ModeParameters(search=preset.search, replace=preset.replace, **common)

    if date:
        return RenameMode.DATE_INSERT, ModeParameters(**common)
    if prefix is not None:
        return RenameMode.PREFIX, ModeParameters(search=prefix, **common)
    if suffix is not None:
        return RenameMode.SUFFIX, ModeParameters(search=suffix, **common)
    if remove_prefix is not None:
        return RenameMode.PREFIX, ModeParameters(search=remove_prefix, prefix_action=PrefixAction.REMOVE, **common)
    if remove_suffix is not None:
        return RenameMode.SUFFIX, ModeParameters(search=remove_suffix, prefix_action=PrefixAction.REMOVE, **common)
    if pattern is not None:
        return RenameMode.NUMBERING, ModeParameters(search=pattern, **common)

    if mode is None:
        resolved = config.default_mode
    else:
        resolved = parse_mode(mode)
        if resolved is None:
            raise click.BadParameter(
                f"Unknown mode '{mode}' (allowed: {', '.join(sorted(MODE_TOKENS))})", param_hint="--mode"
            )
    return resolved, ModeParameters(search=search or "", replace=replace or "", **common)


def _check_mode_inputs(mode: RenameMode, params: ModeParameters) -> None:
    if params.search:
        return
    if mode.uses_search_replace:
        raise click.UsageError("--search is required for this mode.")
    if mode is RenameMode.NUMBERING:
        raise click.UsageError("--pattern is required for numbering.")
    if mode in (RenameMode.PREFIX, RenameMode.SUFFIX):
        raise click.UsageError(f"A value is required for {mode.display_name.lower()} mode.")


def _describe(mode: RenameMode, params: ModeParameters) -> str:
    """One line description of a rename, stored in the history."""
    if mode.uses_search_replace:
        return f"{mode.display_name}: '{params.search}' -> '{params.replace}'"
    if mode is RenameMode.NUMBERING:
        return f"{mode.display_name}: '{params.search}' from {params.number_start}"
    if mode in (RenameMode.PREFIX, RenameMode.SUFFIX):
        return f"{mode.display_name} ({params.prefix_action.display_name}): '{params.search}'"
    if mode is RenameMode.DATE_INSERT:
        return f"{mode.display_name} ({params.date_position.display_name})"
    return mode.display_name


def _print_previews(changes: list[RenamePreview]) -> None:
    table = Table(show_header=True, header_style="bold")
    table.add_column("Original", style="cyan")
    table.add_column("New Name", style="green")
    for preview in changes:
        table.add_row(escape(preview.original_name), escape(preview.new_name))
    console.print(table)
    console.print(f"{len(changes)} file(s) will be renamed.")


@cli.command("rename")
@click.argument("path", type=str, default=".")
@click.option(
    "-m",
    "--mode",
    type=str,
    default=None,
    help="Rename mode: search, regex, numbering, prefix, suffix, date, upper, lower, title.",
)
@click.option("-s", "--search", type=str, default=None, help="Search text or regular expression.")
@click.option("-r", "--replace", type=str, default=None, help="Replacement text. Regex groups are `$1` or `${name}`.")
@click.option("--pattern", type=str, default=None, help="Numbering pattern, e.g. 'photo_###'.")
@click.option("--start", type=click.IntRange(min=0), default=1, help="First number for numbering mode.")
@click.option("--step", type=click.IntRange(min=0), default=1, help="Increment for numbering mode.")
@click.option("--prefix", type=str, default=None, help="Add a prefix to every filename.")
@click.option("--suffix", type=str, default=None, help="Add a suffix before the extension.")
@click.option("--remove-prefix", type=str, default=None, help="Remove a prefix where present.")
@click.option("--remove-suffix", type=str, default=None, help="Remove a suffix (before the extension) where present.")
@click.option("--date", is_flag=True, default=False, help="Insert the file modification date (YYYYMMDD).")
@click.option("--date-position", type=str, default="prefix", help="Where to put the date: prefix, suffix, replace.")
@click.option("-p", "--preset", "preset_name", type=str, default=None, help="Use a saved preset.")
@click.option("--sort", type=str, default=None, help="Listing order: name, extension, size, modified.")
@click.option("-n", "--dry-run", is_flag=True, default=False, help="Show the preview without renaming anything.")
@click.option("-y", "--yes", is_flag=True, default=False, help="Apply renames without asking for confirmation.")
@click.pass_context
def rename(
    ctx: click.Context,
    path: str,
    mode: str | None,
    search: str | None,
    replace: str | None,
    pattern: str | None,
    start: int,
    step: int,
    prefix: str | None,
    suffix: str | None,
    remove_prefix: str | None,
    remove_suffix: str | None,
    date: bool,
    date_position: str,
    preset_name: str | None,
    sort: str | None,
    dry_run: bool,
    yes: bool,
) -> None:
    """Rename the files in a directory.

    PATH is a directory or a glob pattern such as 'photos/*.jpg'.

    Examples:

        rnm rename photos --search IMG_ --replace holiday_

        rnm rename 'scans/*.png' --pattern 'scan_###' --start 10

        rnm rename . --mode regex -s 'IMG_(\\d+)' -r 'photo_$1' --dry-run
    """
    history_store: HistoryStore = ctx.obj["history_store"]
    config = _load_config(ctx.obj["config_store"], required=preset_name is not None)

    rename_mode, params = _resolve_mode(
        config,
        mode,
        search,
        replace,
        pattern,
        start,
        step,
        prefix,
        suffix,
        remove_prefix,
        remove_suffix,
        date,
        date_position,
        preset_name,
    )
    _check_mode_inputs(rename_mode, params)

    sort_order = config.default_sort
    if sort is not None:
        sort_order = parse_sort_order(sort)
        if sort_order is None:
            raise click.BadParameter(f"Unknown sort order '{sort}'", param_hint="--sort")

    directory, glob_pattern = split_glob(path)
    try:
        files = load_files(directory, glob_pattern, sort_order)
    except NotADirectoryError as e:
        _fail(str(e), e)

    if not files:
        console.print("[yellow]No files found.[/yellow]")
        return

    console.print(f"Directory: [bold cyan]{escape(str(directory))}[/bold cyan]")
    console.print(f"Mode: [bold magenta]{escape(_describe(rename_mode, params))}[/bold magenta]")
    console.print(f"Files: [cyan]{len(files)}[/cyan]")

    try:
        previews = generate_previews(files, [], rename_mode, params)
    except PatternError as e:
        _fail(str(e), e)

    changes = changed_previews(previews)
    if not changes:
        console.print("[yellow]No changes.[/yellow]")
        return

    console.print()
    _print_previews(changes)

    if dry_run:
        console.print("[dim](Dry run: no files were renamed)[/dim]")
        return

    if not yes and not click.confirm("Apply these renames?", default=False):
        console.print("[yellow]Aborted. No files were renamed.[/yellow]")
        return

    try:
        count = execute_renames(previews, directory, history_store, description=_describe(rename_mode, params))
    except ValidationError as e:
        console.print("[bold red]Validation failed, no files were renamed:[/bold red]")
        for problem in e.problems:
            console.print(f"  - {escape(problem)}")
        raise SystemExit(1) from e
    except ExecutionError as e:
        if e.completed:
            console.print(f"[yellow]{len(e.completed)} file(s) were renamed before the failure.[/yellow]")
        _fail(str(e), e)

    console.print(f"[bold green]Successfully renamed {count} file(s).[/bold green]")


@cli.command("undo")
@click.option("-y", "--yes", is_flag=True, default=False, help="Undo without asking for confirmation.")
@click.pass_context
def undo(ctx: click.Context, yes: bool) -> None:
    """Undo the most recent rename."""
    history_store: HistoryStore = ctx.obj["history_store"]

    try:
        operation = undo_preview(history_store)
    except HistoryError as e:
        _fail(str(e), e)

    if operation is None:
        console.print("[yellow]Nothing to undo.[/yellow]")
        return

    console.print(
        f"Undoing [bold magenta]{escape(operation.description)}[/bold magenta] "
        f"in [bold cyan]{escape(str(operation.directory))}[/bold cyan]"
    )
    table = Table(show_header=True, header_style="bold")
    table.add_column("Current", style="cyan")
    table.add_column("Restored Name", style="green")
    for entry in operation.entries:
        table.add_row(escape(entry.new_name), escape(entry.original_name))
    console.print(table)

    if not yes and not click.confirm("Undo these renames?", default=False):
        console.print("[yellow]Aborted. Nothing was undone.[/yellow]")
        return

    try:
        result = undo_last(history_store)
    except NothingToUndoError:
        console.print("[yellow]Nothing to undo.[/yellow]")
        return
    except UndoError as e:
        console.print("[bold red]Undo failed, no files were restored:[/bold red]")
        for problem in e.problems:
            console.print(f"  - {escape(problem)}")
        raise SystemExit(1) from e
    except HistoryError as e:
        _fail(str(e), e)

    for problem in result.problems:
        console.print(f"[yellow]Warning:[/yellow] {escape(problem)}")
    directory = escape(str(result.directory))
    console.print(f"[bold green]Restored {result.undone_count} file(s) in {directory}.[/bold green]")


@cli.command("history")
@click.option("--limit", type=click.IntRange(min=1), default=10, help="Number of operations to show.")
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """List recorded rename operations, newest first."""
    history_store: HistoryStore = ctx.obj["history_store"]
    try:
        recorded = history_store.load()
    except HistoryError as e:
        _fail(str(e), e)

    if recorded.is_empty():
        console.print("[yellow]No rename history.[/yellow]")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("#", justify="right")
    table.add_column("When")
    table.add_column("Directory", style="cyan")
    table.add_column("Files", justify="right")
    table.add_column("Description", style="dim")

    for number, operation in enumerate(reversed(recorded.operations[-limit:]), start=1):
        when = datetime.fromtimestamp(operation.timestamp).strftime("%Y-%m-%d %H:%M:%S")
        directory = escape(str(operation.directory))
        table.add_row(str(number), when, directory, str(len(operation.entries)), escape(operation.description))

    console.print(table)


@cli.group("presets")
def presets() -> None:
    """Manage saved presets."""
    pass


@presets.command("list")
@click.pass_context
def list_presets(ctx: click.Context) -> None:
    """List saved presets."""
    config = _load_config(ctx.obj["config_store"], required=True)

    if not config.presets:
        console.print("[yellow]No presets saved.[/yellow]")
        console.print("Create one with: rnm presets save my-preset --search old --replace new")
        return

    table = Table(show_header=True, header_style="bold")
    table.add_column("Name", style="cyan")
    table.add_column("Mode", style="magenta")
    table.add_column("Search")
    table.add_column("Replace")
    for name in config.list_presets():
        preset = config.presets[name]
        table.add_row(escape(name), preset.mode.display_name, escape(preset.search), escape(preset.replace))
    console.print(table)


@presets.command("save")
@click.argument("name", type=str)
@click.option("-m", "--mode", type=str, default="search", help="Rename mode of the preset.")
@click.option("-s", "--search", type=str, default="", help="Search text, pattern, or prefix/suffix value.")
@click.option("-r", "--replace", type=str, default="", help="Replacement text.")
@click.pass_context
def save_preset(ctx: click.Context, name: str, mode: str, search: str, replace: str) -> None:
    """Save a preset under NAME, replacing any preset of that name."""
    config_store: ConfigStore = ctx.obj["config_store"]
    if config_store.path is None:
        raise click.UsageError("No configuration directory is available to store presets in.")

    rename_mode = parse_mode(mode)
    if rename_mode is None:
        raise click.BadParameter(f"Unknown mode '{mode}'", param_hint="--mode")

    config = _load_config(config_store, required=True)
    config.add_preset(Preset(name=name, mode=rename_mode, search=search, replace=replace))
    try:
        config_store.save(config)
    except HistoryError as e:
        _fail(str(e), e)

    console.print(f"Preset [bold cyan]{escape(name)}[/bold cyan] saved.")


@presets.command("remove")
@click.argument("name", type=str)
@click.pass_context
def remove_preset(ctx: click.Context, name: str) -> None:
    """Remove the preset NAME."""
    config_store: ConfigStore = ctx.obj["config_store"]
    config = _load_config(config_store, required=True)

    if config.remove_preset(name) is None:
        raise click.UsageError(f"Preset not found: {name}")
    try:
        config_store.save(config)
    except HistoryError as e:
        _fail(str(e), e)

    console.print(f"Preset [bold cyan]{escape(name)}[/bold cyan] removed.")
