"""Typer application and CLI entry point for apicache.

The ``apicache`` command inspects and maintains a persistent cache store
(:class:`~apicache.storage.DiskCacheStorage`) from the shell: list keys,
show an entry, print statistics, and clear or invalidate entries using the
same key derivation as :class:`~apicache.plugins.cache.CachePlugin`.

The store directory comes from ``--dir``, else ``APICACHE_DIR``, else
:func:`~apicache.config.get_cache_dir`.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.
"""

from __future__ import annotations

import contextlib
import json
import logging
import signal
import sys
from typing import Any, Iterator, Optional

import typer

from apicache import __version__
from apicache.exceptions import ApicacheError, InvalidUsageError, NotFoundError
from apicache.exit_codes import EXIT_GENERIC_FAILURE
from apicache.keys import default_key_generator
from apicache.models import CacheEntry
from apicache.output import error, info, print_mapping, print_table, success, warning
from apicache.storage.disk import DiskCacheStorage
from apicache.wrapper import is_stale, utc_now


app = typer.Typer(
    name="apicache",
    help="Inspect and maintain a persistent apicache store.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apicache {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    directory: Optional[str] = typer.Option(
        None, "--dir", "-d", help="Cache directory (default: $APICACHE_DIR or the XDG cache dir)."
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~apicache.output.OutputManager` from
    CLI flags, configures logging, and stores the cache directory in
    ``ctx.obj`` for sub-commands.
    """
    from apicache.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet))

    if verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)s %(name)s: %(message)s",
        )

    ctx.ensure_object(dict)
    ctx.obj["directory"] = directory


# ------------------------------------------------------------------ #
# Helpers
# ------------------------------------------------------------------ #


@contextlib.contextmanager
def _open_storage(ctx: typer.Context) -> Iterator[DiskCacheStorage]:
    """Open the disk store for a command, mapping apicache errors to exit codes."""
    from apicache.config import resolve_cache_dir

    try:
        with DiskCacheStorage(resolve_cache_dir(ctx.obj.get("directory"))) as storage:
            yield storage
    except ApicacheError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code)


def _entry_row(entry: CacheEntry) -> list[str]:
    return [
        entry.key,
        entry.cached_at.isoformat(),
        entry.expires_at.isoformat(),
        "yes" if is_stale(utc_now(), entry.expires_at) else "no",
    ]


def _parse_input(raw: Optional[str]) -> Any:
    if raw is None:
        return None
    try:
        return json.loads(raw)
    except json.JSONDecodeError as exc:
        raise InvalidUsageError(f"--input is not valid JSON: {exc.msg}") from exc


# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #


@app.command("stats")
def stats_command(ctx: typer.Context) -> None:
    """Show entry counts and on-disk size of the cache.

    Example::

        apicache stats
        apicache --json stats
    """
    with _open_storage(ctx) as storage:
        now = utc_now()
        stale = 0
        for key in storage.keys():
            entry = storage.get(key)
            if entry is not None and is_stale(now, entry.expires_at):
                stale += 1
        data = storage.stats()
        data["stale"] = stale
        data["fresh"] = data["size"] - stale
        print_mapping(data, title="Cache statistics")


@app.command("keys")
def keys_command(ctx: typer.Context) -> None:
    """List stored keys with their timestamps and staleness."""
    with _open_storage(ctx) as storage:
        rows = []
        for key in sorted(storage.keys()):
            entry = storage.get(key)
            if entry is not None:
                rows.append(_entry_row(entry))
        if not rows:
            info("Cache is empty.")
            return
        print_table(["Key", "Cached at", "Expires at", "Stale"], rows, title="Cached entries")


@app.command("show")
def show_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Literal cache key, e.g. 'GET:/users:'."),
) -> None:
    """Show one entry, including its cached data.

    Exits with code 4 when no entry is stored under KEY.
    """
    with _open_storage(ctx) as storage:
        entry = storage.get(key)
        if entry is None:
            raise NotFoundError(f"No cache entry for key {key!r}")
        print_mapping(
            {
                "key": entry.key,
                "cached_at": entry.cached_at.isoformat(),
                "expires_at": entry.expires_at.isoformat(),
                "stale": is_stale(utc_now(), entry.expires_at),
                "data": entry.data,
            },
            title="Cache entry",
        )


@app.command("clear")
def clear_command(
    ctx: typer.Context,
    yes: bool = typer.Option(False, "--yes", "-y", help="Skip the confirmation prompt."),
) -> None:
    """Remove every entry from the cache."""
    with _open_storage(ctx) as storage:
        count = len(storage)
        if not yes and not typer.confirm(f"Remove {count} cached entries?"):
            info("Aborted.")
            raise typer.Exit(code=1)
        storage.clear()
        success(f"Removed {count} cached entries.")


@app.command("invalidate")
def invalidate_command(
    ctx: typer.Context,
    verb: str = typer.Argument(help="Request verb, e.g. GET."),
    path: str = typer.Argument(help="Request path, e.g. /users."),
    raw_input: Optional[str] = typer.Option(
        None, "--input", "-i", help="Call input as JSON, exactly as the client sent it."
    ),
) -> None:
    """Remove the entry a call would be served from, using the default key rule."""
    with _open_storage(ctx) as storage:
        key = default_key_generator(verb.upper(), path, _parse_input(raw_input))
        _delete_key(storage, key)


@app.command("invalidate-key")
def invalidate_key_command(
    ctx: typer.Context,
    key: str = typer.Argument(help="Literal cache key."),
) -> None:
    """Remove the entry stored under a literal key."""
    with _open_storage(ctx) as storage:
        _delete_key(storage, key)


def _delete_key(storage: DiskCacheStorage, key: str) -> None:
    if key not in storage:
        warning(f"No cache entry for key {key!r}")
        return
    storage.delete(key)
    success(f"Invalidated {key}")


# ------------------------------------------------------------------ #
# Entry point
# ------------------------------------------------------------------ #


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def main() -> None:
    """CLI entry point invoked by the ``apicache`` console script.

    Unhandled :class:`~apicache.exceptions.ApicacheError` instances cause a
    clean exit with the error's ``exit_code``. All other exceptions are
    reported with a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        error(f"Unexpected error: {exc}")
        sys.exit(EXIT_GENERIC_FAILURE)
