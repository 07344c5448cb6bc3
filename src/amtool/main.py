"""CLI main entry point."""

import asyncio
import json
import os
import sys
from datetime import datetime, timezone
from typing import Any, NoReturn

import click

from .client import AlertmanagerClient
from .config import FILE_KEYS, CLIConfig
from .decorators import global_options, pass_config, require_url
from .errors import EXIT_FAILURE, AmtoolError, expected_command_error
from .formatters import print_alerts, print_config_yaml, print_silences
from .shared.logging import get_logger
from .utils import (
    format_time,
    parse_annotations,
    parse_duration,
    parse_labels,
    parse_matchers,
    parse_time,
)
from .version import format_version

logger = get_logger(__name__)

USAGE_PIECES = ["[<flags>]", "<command>", "[<args> ...]"]


class AmtoolGroup(click.Group):
    """Group with a kingpin-style usage line and command-token errors."""

    group_class = type

    def collect_usage_pieces(self, ctx: click.Context) -> list[str]:
        return list(USAGE_PIECES)

    def format_usage(self, ctx: click.Context, formatter: click.HelpFormatter) -> None:
        formatter.write_usage(
            ctx.command_path, " ".join(self.collect_usage_pieces(ctx)), prefix="usage: "
        )

    def resolve_command(
        self, ctx: click.Context, args: list[str]
    ) -> tuple[str | None, click.Command | None, list[str]]:
        token = args[0]
        if (
            not ctx.resilient_parsing
            and not token.startswith("-")
            and self.get_command(ctx, token) is None
        ):
            raise expected_command_error(token)
        return super().resolve_command(ctx, args)


def _print_version(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if not value or ctx.resilient_parsing:
        return
    click.echo(format_version(ctx.find_root().info_name or "amtool"), nl=False)
    ctx.exit(0)


@click.group(
    cls=AmtoolGroup,
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)
@click.option(
    "--version",
    is_flag=True,
    expose_value=False,
    is_eager=True,
    callback=_print_version,
    help="Show application version.",
)
@global_options
@click.pass_context
def cli(ctx: click.Context) -> None:
    """View and modify the current Alertmanager state.

    Config File: the alertmanager URL, output format and timeout can be set in
    ~/.config/amtool/config.yml using the flag names as keys, e.g.
    "alertmanager.url: http://localhost:9093".
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())
        ctx.exit(0)


# -----------------------------------------------------------------------------
# alert
# -----------------------------------------------------------------------------


@cli.group(invoke_without_command=True)
@global_options
@click.pass_context
def alert(ctx: click.Context) -> None:
    """Add or query alerts. Defaults to query."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(alert_query)


@alert.command("add")
@click.argument("labels", nargs=-1)
@click.option("--annotation", "annotations", multiple=True, help="Annotation name=value")
@click.option("--start", help="Start time of the alert (RFC 3339), defaults to now")
@click.option("--end", help="End time of the alert (RFC 3339)")
@click.option("--generator-url", default="", help="Link to the source of the alert")
@pass_config
def alert_add(
    config: CLIConfig,
    labels: tuple[str, ...],
    annotations: tuple[str, ...],
    start: str | None,
    end: str | None,
    generator_url: str,
) -> None:
    """Add a new alert.

    The first label may be given without a name, it is then used as the
    alertname: "amtool alert add HighLatency instance=web-1".
    """
    url = require_url(config)
    try:
        starts_at = parse_time(start) if start else datetime.now(timezone.utc)
        ends_at = parse_time(end) if end else None
    except ValueError as e:
        raise click.BadParameter(str(e))

    payload: dict[str, Any] = {
        "labels": parse_labels(labels),
        "annotations": parse_annotations(annotations),
        "startsAt": format_time(starts_at),
        "generatorURL": generator_url,
    }
    if ends_at:
        payload["endsAt"] = format_time(ends_at)

    async def _add() -> None:
        async with AlertmanagerClient(url, timeout=config.timeout) as client:
            await client.post_alerts([payload])

    asyncio.run(_add())
    logger.debug("alert added", labels=payload["labels"])


@alert.command("query")
@click.argument("matchers", nargs=-1)
@click.option("-a", "--active", is_flag=True, help="Show active alerts")
@click.option("-s", "--silenced", is_flag=True, help="Show silenced alerts")
@click.option("-i", "--inhibited", is_flag=True, help="Show inhibited alerts")
@pass_config
def alert_query(
    config: CLIConfig,
    matchers: tuple[str, ...],
    active: bool,
    silenced: bool,
    inhibited: bool,
) -> None:
    """View and search through current alerts.

    Without state flags only active alerts are shown.
    """
    url = require_url(config)
    filters = [str(m) for m in parse_matchers(matchers)]
    if not (active or silenced or inhibited):
        active = True

    async def _query() -> list[dict[str, Any]]:
        async with AlertmanagerClient(url, timeout=config.timeout) as client:
            return await client.get_alerts(
                filters, active=active, silenced=silenced, inhibited=inhibited
            )

    print_alerts(asyncio.run(_query()), config.output)


# -----------------------------------------------------------------------------
# silence
# -----------------------------------------------------------------------------


@cli.group(invoke_without_command=True)
@global_options
@click.pass_context
def silence(ctx: click.Context) -> None:
    """Add, expire or view silences. Defaults to query."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(silence_query)


@silence.command("add")
@click.argument("matchers", nargs=-1, required=True)
@click.option("-c", "--comment", required=True, help="A comment to help describe the silence")
@click.option(
    "-a",
    "--author",
    default=lambda: os.environ.get("USER", ""),
    show_default="$USER",
    help="Username for CreatedBy field",
)
@click.option("-d", "--duration", default="1h", show_default=True, help="Duration of silence")
@click.option("--start", help="Start time of the silence (RFC 3339), defaults to now")
@click.option("--end", help="End time of the silence (RFC 3339), overrides --duration")
@pass_config
def silence_add(
    config: CLIConfig,
    matchers: tuple[str, ...],
    comment: str,
    author: str,
    duration: str,
    start: str | None,
    end: str | None,
) -> None:
    """Add a new alertmanager silence and print its ID."""
    url = require_url(config)
    parsed = parse_matchers(matchers)
    try:
        starts_at = parse_time(start) if start else datetime.now(timezone.utc)
        ends_at = parse_time(end) if end else starts_at + parse_duration(duration)
    except ValueError as e:
        raise click.BadParameter(str(e))
    if ends_at <= starts_at:
        raise click.BadParameter("silence cannot end before it starts")

    body = {
        "matchers": [m.to_api() for m in parsed],
        "startsAt": format_time(starts_at),
        "endsAt": format_time(ends_at),
        "createdBy": author,
        "comment": comment,
    }

    async def _add() -> str:
        async with AlertmanagerClient(url, timeout=config.timeout) as client:
            return await client.post_silence(body)

    click.echo(asyncio.run(_add()))


@silence.command("query")
@click.argument("matchers", nargs=-1)
@click.option("-e", "--expired", is_flag=True, help="Show expired silences instead of active")
@click.option("-q", "--quiet", is_flag=True, help="Only show silence IDs")
@pass_config
def silence_query(
    config: CLIConfig, matchers: tuple[str, ...], expired: bool, quiet: bool
) -> None:
    """Query Alertmanager silences."""
    url = require_url(config)
    filters = [str(m) for m in parse_matchers(matchers)]
    wanted = {"expired"} if expired else {"active", "pending"}

    async def _query() -> list[dict[str, Any]]:
        async with AlertmanagerClient(url, timeout=config.timeout) as client:
            return await client.get_silences(filters)

    silences = [
        s for s in asyncio.run(_query()) if s.get("status", {}).get("state") in wanted
    ]

    if quiet:
        for s in silences:
            click.echo(s.get("id", ""))
    else:
        print_silences(silences, config.output)


@silence.command("expire")
@click.argument("silence_ids", nargs=-1, required=True)
@pass_config
def silence_expire(config: CLIConfig, silence_ids: tuple[str, ...]) -> None:
    """Expire one or more silences."""
    url = require_url(config)

    async def _expire() -> None:
        async with AlertmanagerClient(url, timeout=config.timeout) as client:
            for silence_id in silence_ids:
                await client.delete_silence(silence_id)
                logger.debug("silence expired", silence_id=silence_id)

    asyncio.run(_expire())


# -----------------------------------------------------------------------------
# config
# -----------------------------------------------------------------------------


@cli.group("config", invoke_without_command=True)
@global_options
@click.pass_context
def config_group(ctx: click.Context) -> None:
    """View amtool config. Defaults to show."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(config_show)


@config_group.command("show")
@pass_config
def config_show(config: CLIConfig) -> None:
    """Show the effective configuration and where each value came from."""
    values = config.as_dict()
    sources = {file_key: config.get_source(key) for key, file_key in FILE_KEYS.items()}

    if config.output == "json":
        click.echo(json.dumps({"values": values, "sources": sources}, indent=2))
    else:
        print_config_yaml(values, sources)


# -----------------------------------------------------------------------------
# Entry points
# -----------------------------------------------------------------------------


def run(argv: list[str]) -> NoReturn:
    """Run amtool for a full argument vector and exit the process.

    ``argv[0]`` is the program name. Errors are printed to stderr as
    ``<prog>: error: <message>`` and exit with status 1.
    """
    prog = os.path.basename(argv[0]) if argv else "amtool"
    try:
        rv = cli.main(args=list(argv[1:]), prog_name=prog, obj={}, standalone_mode=False)
    except click.Abort:
        click.echo(f"{prog}: error: aborted", err=True)
        sys.exit(EXIT_FAILURE)
    except click.ClickException as e:
        click.echo(f"{prog}: error: {e.format_message()}", err=True)
        sys.exit(EXIT_FAILURE)
    except AmtoolError as e:
        click.echo(f"{prog}: error: {e.message}", err=True)
        sys.exit(EXIT_FAILURE)
    sys.exit(rv if isinstance(rv, int) else 0)


def main() -> None:
    """Main entry point."""
    run(["amtool", *sys.argv[1:]])


if __name__ == "__main__":
    main()
