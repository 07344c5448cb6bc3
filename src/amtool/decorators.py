"""Command decorators shared by every amtool command.

Global flags such as ``--alertmanager.url`` are accepted on the root group
and again on every subcommand, so ``amtool alert add --alertmanager.url=...``
and ``amtool --alertmanager.url=... alert add`` mean the same thing. The
flags only record their values in ``ctx.obj``; ``pass_config`` turns the
recorded values into a ``CLIConfig`` when a command actually runs.
"""

from functools import wraps
from typing import Any, Callable

import click

from .config import OUTPUT_FORMATS, CLIConfig, load_config
from .shared.logging import configure_logging


def _state(ctx: click.Context) -> dict[str, Any]:
    obj = ctx.ensure_object(dict)
    obj.setdefault("verbose", False)
    obj.setdefault("overrides", {})
    return obj


def _set_verbose(ctx: click.Context, param: click.Parameter, value: bool) -> None:
    if value:
        _state(ctx)["verbose"] = True


def _set_override(ctx: click.Context, param: click.Parameter, value: Any) -> None:
    if value is not None:
        _state(ctx)["overrides"][param.name] = value


GLOBAL_OPTIONS = [
    click.option(
        "-v",
        "--verbose",
        is_flag=True,
        expose_value=False,
        callback=_set_verbose,
        help="Verbose running information",
    ),
    click.option(
        "--alertmanager.url",
        "alertmanager_url",
        expose_value=False,
        callback=_set_override,
        help="Alertmanager to talk to",
    ),
    click.option(
        "-o",
        "--output",
        type=click.Choice(OUTPUT_FORMATS),
        expose_value=False,
        callback=_set_override,
        help="Output formatter (simple, extended, json)",
    ),
    click.option(
        "--timeout",
        type=click.IntRange(min=1),
        expose_value=False,
        callback=_set_override,
        help="Timeout for the executed command in seconds",
    ),
]


def global_options(func: Callable) -> Callable:
    """Attach the global flags to a group or command."""
    for option in reversed(GLOBAL_OPTIONS):
        func = option(func)
    return func


def pass_config(func: Callable) -> Callable:
    """Configure logging and pass the effective ``CLIConfig`` as first argument.

    Also attaches the global flags, so a decorated command accepts them after
    its own name.
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        state = _state(click.get_current_context())
        configure_logging("debug" if state["verbose"] else "warning")
        config = load_config(state["overrides"])
        return func(config, *args, **kwargs)

    return global_options(wrapper)


def require_url(config: CLIConfig) -> str:
    """Return the Alertmanager URL or fail with the flag the user must set."""
    if not config.alertmanager_url:
        raise click.UsageError("required flag --alertmanager.url not provided")
    return config.alertmanager_url
