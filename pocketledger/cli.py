"""Command line interface: one-shot ledger commands and the curses browser."""
from __future__ import annotations

import curses

import click
import questionary

from .config import LOG_LEVEL_ENV, STORAGE_ENV, Settings, load_settings
from .errors import IndexOutOfRange, LedgerError
from .logging_setup import configure_logging, get_logger
from .loop import run
from .models import MonthKey, Transaction, parse_amount, parse_date_or_today, parse_repeat
from .store import LedgerStore

log = get_logger("pocketledger.cli")

RULE = "-" * 60


def _settings(ctx: click.Context, interactive: bool = False) -> Settings:
    """Resolve settings and configure logging on first use.

    Resolution waits until a command runs so that ``--help`` works without a
    storage root.
    """
    options = ctx.find_root().obj
    if "settings" not in options:
        try:
            settings = load_settings(options["storage_root"], options["log_level"])
        except LedgerError as exc:
            raise click.ClickException(str(exc)) from exc
        if interactive:
            configure_logging(settings.log_level, log_file=settings.log_file)
        else:
            configure_logging(settings.log_level)
        options["settings"] = settings
    return options["settings"]


def _store(ctx: click.Context) -> LedgerStore:
    return LedgerStore(_settings(ctx).storage_root)


def _month_of(date_text: str | None) -> MonthKey:
    return MonthKey.from_date(parse_date_or_today(date_text))


def launch_tui(settings: Settings) -> None:
    store = LedgerStore(settings.storage_root)
    curses.wrapper(run, store)


@click.group(invoke_without_command=True)
@click.option(
    "--root",
    "storage_root",
    envvar=STORAGE_ENV,
    type=click.Path(file_okay=False),
    help=f"Directory holding the ledger files (default: ${STORAGE_ENV}).",
)
@click.option(
    "--log-level",
    envvar=LOG_LEVEL_ENV,
    default=None,
    help="Logging level, e.g. INFO or DEBUG.",
)
@click.pass_context
def main(ctx: click.Context, storage_root: str | None, log_level: str | None) -> None:
    """Keep a personal ledger in one CSV file per month.

    Without a command the interactive browser is started.
    """
    ctx.obj = {"storage_root": storage_root, "log_level": log_level}
    if ctx.invoked_subcommand is None:
        launch_tui(_settings(ctx, interactive=True))


@main.command()
@click.argument("amount")
@click.argument("description")
@click.option("--date", "-d", "date_text", default=None, help="Date as YYYY-MM-DD (default: today).")
@click.option("--repeat", "-r", default=None, help="Repeat tag such as 1m or 2w.")
@click.pass_context
def add(ctx, amount, description, date_text, repeat):
    """Record an expense of AMOUNT; it is stored as a negative amount."""
    try:
        txn = Transaction(
            date=parse_date_or_today(date_text),
            amount=-parse_amount(amount),
            description=description,
            repeat=parse_repeat(repeat),
        )
        _store(ctx).add(txn)
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    log.info("Added %s", txn)


@main.command(name="list")
@click.option("--date", "-d", "date_text", default=None, help="Any date in the month to list.")
@click.option("--full", "-f", is_flag=True, default=False, help="Also print the month's sum.")
@click.pass_context
def list_cmd(ctx, date_text, full):
    """Print the transactions of one month with their indices."""
    try:
        key = _month_of(date_text)
        store = _store(ctx)
        txns = store.load(key)
        click.echo(RULE)
        for index, txn in enumerate(txns):
            click.echo(f"{index:>3}  {txn}")
        click.echo(RULE)
        if full:
            click.echo(f"Sum:\t\t{store.sum_amounts(key):>7.2f}")
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc


@main.command()
@click.argument("index", type=int)
@click.option("--date", "-d", "date_text", default=None, help="Any date in the month.")
@click.option("--yes", "-y", is_flag=True, default=False, help="Do not ask for confirmation.")
@click.pass_context
def delete(ctx, index, date_text, yes):
    """Delete the entry at INDEX as shown by ``list``."""
    try:
        key = _month_of(date_text)
        store = _store(ctx)
        txns = store.load(key)
        if not 0 <= index < len(txns):
            raise IndexOutOfRange(index, len(txns))
        if not yes and not questionary.confirm(f"Delete '{txns[index]}'?").ask():
            click.echo("Nothing deleted.")
            return
        removed = store.delete(key, index)
    except LedgerError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(f"Deleted {removed}")


@main.command()
@click.pass_context
def months(ctx):
    """List every month that has a ledger file."""
    for label in _store(ctx).list_months():
        click.echo(label)


@main.command()
@click.pass_context
def tui(ctx):
    """Browse and edit the ledger interactively."""
    launch_tui(_settings(ctx, interactive=True))

