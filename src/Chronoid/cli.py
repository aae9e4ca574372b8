"""Command line wrapper around :class:`SortableIDGenerator`.

Examples:
  chronoid generate -n 5
  chronoid --alphabet 0123456789abcdef --length 24 --level second generate
  chronoid decode 0Pz4... --json
  chronoid info

Settings come from chronoid.toml / CHRONOID_* env vars; flags override them.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path

import click
from pydantic import ValidationError

from Chronoid.config import load_settings
from Chronoid.errors import (
    ConfigurationError,
    DecodeError,
    EntropyUnavailable,
    RateExceeded,
    TimestampExhausted,
)
from Chronoid.generator import SortableIDGenerator
from Chronoid.logging import setup_logging
from Chronoid.timeutils import format_iso
from Chronoid.units import MaxSortableRate, TimestampLevel

EXIT_DECODE_ERROR = 1
EXIT_CONFIG_ERROR = 2
EXIT_GENERATE_ERROR = 3

# Bad flags, env values, TOML syntax or field combinations.
_CONFIG_ERRORS = (ConfigurationError, ValidationError, tomllib.TOMLDecodeError)


def _make_generator(ctx: click.Context) -> SortableIDGenerator:
    settings = ctx.obj["settings"]
    try:
        return SortableIDGenerator(settings.generator_config())
    except _CONFIG_ERRORS as exc:
        click.echo(f"configuration error: {exc}", err=True)
        ctx.exit(EXIT_CONFIG_ERROR)


@click.group()
@click.option("--config", "config_path", type=click.Path(dir_okay=False, path_type=Path), default=None)
@click.option("--alphabet", default=None, help="Symbols to build IDs from.")
@click.option("--length", "total_length", type=int, default=None, help="Total ID length.")
@click.option(
    "--level",
    "timestamp_level",
    type=click.Choice([lvl.value for lvl in TimestampLevel], case_sensitive=False),
    default=None,
)
@click.option(
    "--rate",
    "max_sortable_rate",
    type=click.Choice([r.value for r in MaxSortableRate], case_sensitive=False),
    default=None,
)
@click.option("--start", "epoch_start", type=click.DateTime(), default=None, help="Epoch start (UTC).")
@click.option("--end", "epoch_end", type=click.DateTime(), default=None, help="Epoch end (UTC).")
@click.pass_context
def main(ctx: click.Context, config_path: Path | None, **overrides) -> None:
    """Generate and inspect lexicographically sortable IDs."""
    try:
        settings = load_settings(config_path, **overrides)
    except _CONFIG_ERRORS as exc:
        click.echo(f"configuration error: {exc}", err=True)
        ctx.exit(EXIT_CONFIG_ERROR)
    setup_logging(settings)
    ctx.ensure_object(dict)
    ctx.obj["settings"] = settings


@main.command()
@click.option("-n", "--count", type=click.IntRange(min=1), default=1, show_default=True)
@click.option("--json", "as_json", is_flag=True, help="Emit a JSON array.")
@click.pass_context
def generate(ctx: click.Context, count: int, as_json: bool) -> None:
    """Print COUNT new identifiers, one per line."""
    gen = _make_generator(ctx)
    try:
        ids = gen.generate_batch(count)
    except (RateExceeded, TimestampExhausted, EntropyUnavailable) as exc:
        click.echo(f"generation failed: {exc}", err=True)
        ctx.exit(EXIT_GENERATE_ERROR)
    if as_json:
        click.echo(json.dumps(ids))
        return
    for id_ in ids:
        click.echo(id_)


# IDs may start with "-", so unknown option-like tokens are kept as arguments.
@main.command(context_settings={"ignore_unknown_options": True})
@click.argument("identifiers", nargs=-1, required=True)
@click.option("--json", "as_json", is_flag=True, help="Emit one JSON object per line.")
@click.pass_context
def decode(ctx: click.Context, identifiers: tuple[str, ...], as_json: bool) -> None:
    """Decode IDENTIFIERS issued under the current configuration."""
    gen = _make_generator(ctx)
    failed = False
    for identifier in identifiers:
        try:
            decoded = gen.decode(identifier)
        except DecodeError as exc:
            click.echo(f"{identifier}: {exc}", err=True)
            failed = True
            continue
        if as_json:
            click.echo(decoded.model_dump_json())
        else:
            click.echo(
                f"{identifier}  timestamp={format_iso(decoded.instant)} "
                f"chrono={decoded.chrono_part} suffix={decoded.suffix_part}"
            )
    if failed:
        ctx.exit(EXIT_DECODE_ERROR)


@main.command()
@click.option("--json", "as_json", is_flag=True)
@click.pass_context
def info(ctx: click.Context, as_json: bool) -> None:
    """Show the resolved generator configuration."""
    snapshot = _make_generator(ctx).describe()
    if as_json:
        click.echo(snapshot.model_dump_json(indent=2))
        return
    click.echo("ID Generator Configuration:")
    click.echo(f"Timestamp Length: {snapshot.timestamp_length} symbols")
    click.echo(f"Start Date: {format_iso(snapshot.start_date)}")
    click.echo(f"End Date: {format_iso(snapshot.end_date)}")
    click.echo(f"Timestamp Level: {snapshot.timestamp_level.value}")
    click.echo(f"Chrono Length: {snapshot.chrono_length} symbols")
    click.echo(f"Suffix Length: {snapshot.suffix_length} symbols")
    click.echo(f"Alphabet ({snapshot.alphabet_size} chars): {snapshot.alphabet}")
    click.echo(f"Total ID Length: {snapshot.total_length} symbols")
    click.echo(f"Max Sortable Rate: {snapshot.max_sortable_rate.value}")
    if snapshot.degraded_entropy:
        click.echo("WARNING: insecure random fallback in use")


if __name__ == "__main__":  # pragma: no cover
    main()
