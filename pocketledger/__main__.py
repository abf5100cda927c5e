"""Module entry point for running the CLI via ``python -m pocketledger``.

Without a subcommand :func:`pocketledger.cli.main` opens the interactive
browser, which it runs under :func:`curses.wrapper` so the terminal is
restored even when the session raises.
"""

from .cli import main


def entry_point() -> None:
    main(prog_name="pocketledger")


if __name__ == "__main__":  # pragma: no cover - manual execution entry
    entry_point()
