"""CLI output formatting helpers.

All formatters work with dict responses from the HTTP API. ``simple``
output is plain aligned columns, ``extended`` renders a rich table with
every field, ``json`` dumps the API objects unchanged.
"""

import json
from typing import Any

import click
import yaml
from rich.console import Console
from rich.table import Table


def _labels(labels: dict[str, str]) -> str:
    return " ".join(f'{k}="{v}"' for k, v in sorted(labels.items()))


def _matchers(matchers: list[dict[str, Any]]) -> str:
    parts = []
    for m in matchers:
        if m.get("isRegex"):
            op = "=~" if m.get("isEqual", True) else "!~"
        else:
            op = "=" if m.get("isEqual", True) else "!="
        parts.append(f'{m.get("name", "?")}{op}"{m.get("value", "")}"')
    return " ".join(parts)


def _print_columns(header: list[str], rows: list[list[str]]) -> None:
    widths = [len(h) for h in header]
    for row in rows:
        widths = [max(w, len(cell)) for w, cell in zip(widths, row)]
    for row in [header, *rows]:
        click.echo("  ".join(cell.ljust(w) for cell, w in zip(row, widths)).rstrip())


def _print_table(title: str, header: list[str], rows: list[list[str]]) -> None:
    table = Table(title=title, show_lines=False)
    for column in header:
        table.add_column(column)
    for row in rows:
        table.add_row(*row)
    Console(soft_wrap=True).print(table)


def print_alerts(alerts: list[dict[str, Any]], output: str) -> None:
    """Print alerts from the API.

    Args:
        alerts: List of alert dicts from API
        output: Output format (simple, extended, json)
    """
    if output == "json":
        click.echo(json.dumps(alerts, indent=2))
        return

    if output == "extended":
        rows = [
            [
                _labels(a.get("labels", {})),
                _labels(a.get("annotations", {})),
                a.get("startsAt", ""),
                a.get("endsAt", ""),
                a.get("generatorURL", ""),
            ]
            for a in alerts
        ]
        _print_table(
            "Alerts", ["Labels", "Annotations", "Starts At", "Ends At", "Generator URL"], rows
        )
        return

    rows = [
        [
            a.get("labels", {}).get("alertname", ""),
            a.get("startsAt", ""),
            a.get("annotations", {}).get("summary", ""),
        ]
        for a in alerts
    ]
    _print_columns(["Alertname", "Starts At", "Summary"], rows)


def print_silences(silences: list[dict[str, Any]], output: str) -> None:
    """Print silences from the API.

    Args:
        silences: List of silence dicts from API
        output: Output format (simple, extended, json)
    """
    if output == "json":
        click.echo(json.dumps(silences, indent=2))
        return

    if output == "extended":
        rows = [
            [
                s.get("id", ""),
                _matchers(s.get("matchers", [])),
                s.get("startsAt", ""),
                s.get("endsAt", ""),
                s.get("updatedAt", ""),
                s.get("createdBy", ""),
                s.get("comment", ""),
            ]
            for s in silences
        ]
        _print_table(
            "Silences",
            ["ID", "Matchers", "Starts At", "Ends At", "Updated At", "Created By", "Comment"],
            rows,
        )
        return

    rows = [
        [
            s.get("id", ""),
            _matchers(s.get("matchers", [])),
            s.get("endsAt", ""),
            s.get("createdBy", ""),
            s.get("comment", ""),
        ]
        for s in silences
    ]
    _print_columns(["ID", "Matchers", "Ends At", "Created By", "Comment"], rows)


def print_config_yaml(data: dict[str, Any], sources: dict[str, str] | None = None) -> None:
    """Print config as YAML, with value sources as trailing comments.

    Args:
        data: Configuration data
        sources: Optional source per key
    """
    for line in yaml.dump(data, default_flow_style=False, sort_keys=False).splitlines():
        key = line.split(":", 1)[0]
        if sources and key in sources:
            click.echo(f"{line}  # {sources[key]}")
        else:
            click.echo(line)
