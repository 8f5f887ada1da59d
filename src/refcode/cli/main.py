"""refcode CLI entry point."""

from __future__ import annotations

from pathlib import Path
from typing import NoReturn

import click
import structlog

from refcode.core.errors import RefCodeError
from refcode.core.generator import CodeGenerator
from refcode.core.models import GeneratorConfig, OverflowPolicy

log = structlog.get_logger(__name__)


def _fail(message: str) -> NoReturn:
    click.echo(f"Error: {message}", err=True)
    raise SystemExit(1)


def _resolve_config(
    config_path: Path | None, series: str | None, options: dict[str, object]
) -> GeneratorConfig:
    """Build the generator config from a series file and/or flags.

    Flags given on the command line override values from the series file.
    """
    from refcode.core.config import load_series_config, make_generator_config

    base: dict[str, object] = {}
    if config_path is not None:
        configs = load_series_config(config_path)
        if series is None:
            _fail("--series is required with --config")
        if series not in configs:
            _fail(f"Series {series!r} not found in {config_path}. Available: {sorted(configs)}")
        base = configs[series].model_dump()
    elif series is not None:
        _fail("--series requires --config")

    base.update({k: v for k, v in options.items() if v is not None})
    return make_generator_config(base)


@click.group()
@click.version_option(package_name="refcode")
@click.option("--prefix", default=None, help="Literal code prefix.")
@click.option("--separator", default=None, help="Separator between segments.")
@click.option("--date-format", default=None, help="strftime pattern for the date key (%Q = quarter).")
@click.option("--width", "sequence_width", type=int, default=None, help="Minimum sequence digits.")
@click.option("--timezone", default=None, help="IANA timezone for the date key.")
@click.option(
    "--on-overflow",
    type=click.Choice([p.value for p in OverflowPolicy]),
    default=None,
    help="Keep counting or restart at 1 when the sequence outgrows its width.",
)
@click.option("--strict-dates", is_flag=True, default=None, help="Validate date segments as real dates.")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="YAML file with a 'series' mapping.",
)
@click.option("--series", default=None, help="Series name to use from --config.")
@click.option("--json-logs", is_flag=True, default=False, help="Output logs as JSON.")
@click.option("--log-level", default="WARNING", show_default=True, help="Log level.")
@click.pass_context
def cli(
    ctx: click.Context,
    prefix: str | None,
    separator: str | None,
    date_format: str | None,
    sequence_width: int | None,
    timezone: str | None,
    on_overflow: str | None,
    strict_dates: bool | None,
    config_path: Path | None,
    series: str | None,
    json_logs: bool,
    log_level: str,
) -> None:
    """refcode: date-keyed sequential reference codes."""
    from refcode.core.logging import configure_logging

    configure_logging(json_output=json_logs, level=log_level)

    options = {
        "prefix": prefix,
        "separator": separator,
        "date_format": date_format,
        "sequence_width": sequence_width,
        "timezone": timezone,
        "on_overflow": on_overflow,
        "strict_dates": strict_dates or None,
    }
    try:
        config = _resolve_config(config_path, series, options)
        ctx.obj = CodeGenerator(config)
    except RefCodeError as e:
        _fail(str(e))


@cli.command()
@click.option("--count", type=click.IntRange(min=1), default=1, show_default=True, help="Codes to issue.")
@click.pass_obj
def generate(generator: CodeGenerator, count: int) -> None:
    """Issue COUNT consecutive codes for today."""
    for _ in range(count):
        click.echo(generator.generate())
    log.debug("codes generated", count=count, last_sequence=generator.state.current_sequence)


@cli.command("from-sequence")
@click.argument("sequence", type=int)
@click.option("--date-key", default=None, help="Date key to use instead of today's.")
@click.pass_obj
def from_sequence(generator: CodeGenerator, sequence: int, date_key: str | None) -> None:
    """Render the code for an externally tracked SEQUENCE."""
    try:
        click.echo(generator.generate_from_sequence(sequence, date_key))
    except RefCodeError as e:
        _fail(str(e))


@cli.command()
@click.argument("code")
@click.pass_obj
def increment(generator: CodeGenerator, code: str) -> None:
    """Print the code that follows CODE."""
    try:
        click.echo(generator.increment(code))
    except RefCodeError as e:
        _fail(str(e))


@cli.command()
@click.argument("code")
@click.pass_obj
def validate(generator: CodeGenerator, code: str) -> None:
    """Exit 0 if CODE is well formed, 1 otherwise."""
    if generator.validate(code):
        click.echo("valid")
        return
    click.echo("invalid")
    raise SystemExit(1)


@cli.command()
@click.argument("code")
@click.pass_obj
def parse(generator: CodeGenerator, code: str) -> None:
    """Print the prefix, date and sequence of CODE as JSON."""
    try:
        parsed = generator.parse(code)
    except RefCodeError as e:
        _fail(str(e))
    click.echo(parsed.model_dump_json())
