"""CLI utility functions."""

import re
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any

from .errors import MatcherError

# Longest operators first so "!=" is not read as "="
MATCHER_RE = re.compile(r'^\s*([a-zA-Z_:][a-zA-Z0-9_:]*)\s*(=~|!~|!=|=)\s*(.*?)\s*$')
DURATION_RE = re.compile(r"(\d+)(ms|s|m|h|d|w|y)")

DURATION_UNITS = {
    "ms": timedelta(milliseconds=1),
    "s": timedelta(seconds=1),
    "m": timedelta(minutes=1),
    "h": timedelta(hours=1),
    "d": timedelta(days=1),
    "w": timedelta(weeks=1),
    "y": timedelta(days=365),
}


@dataclass(frozen=True)
class Matcher:
    """A label matcher such as ``severity=~"warn|crit"``."""

    name: str
    value: str
    is_regex: bool = False
    is_equal: bool = True

    @property
    def operator(self) -> str:
        if self.is_regex:
            return "=~" if self.is_equal else "!~"
        return "=" if self.is_equal else "!="

    def to_api(self) -> dict[str, Any]:
        """Matcher in Alertmanager API v2 form."""
        return {
            "name": self.name,
            "value": self.value,
            "isRegex": self.is_regex,
            "isEqual": self.is_equal,
        }

    def __str__(self) -> str:
        return f'{self.name}{self.operator}"{self.value}"'


def _unquote(value: str) -> str:
    if len(value) >= 2 and value[0] == value[-1] == '"':
        return value[1:-1].replace('\\"', '"')
    return value


def parse_matcher(text: str) -> Matcher:
    """Parse a single ``name<op>value`` matcher.

    Raises:
        MatcherError: If the text is not a valid matcher or regex
    """
    match = MATCHER_RE.match(text)
    if not match:
        raise MatcherError(f"bad matcher format: {text}")

    name, op, value = match.group(1), match.group(2), _unquote(match.group(3))
    matcher = Matcher(name=name, value=value, is_regex="~" in op, is_equal=op[0] != "!")
    if matcher.is_regex:
        try:
            re.compile(value)
        except re.error as e:
            raise MatcherError(f"invalid regular expression in matcher {text}: {e}")
    return matcher


def parse_matchers(args: tuple[str, ...] | list[str]) -> list[Matcher]:
    """Parse matcher arguments.

    A first argument without an operator is shorthand for ``alertname=<arg>``.
    """
    matchers: list[Matcher] = []
    for i, arg in enumerate(args):
        if i == 0 and "=" not in arg and "~" not in arg:
            matchers.append(Matcher(name="alertname", value=arg))
            continue
        matchers.append(parse_matcher(arg))
    return matchers


def parse_labels(args: tuple[str, ...] | list[str]) -> dict[str, str]:
    """Parse ``name=value`` label pairs.

    A first argument without ``=`` is shorthand for ``alertname=<arg>``.

    Raises:
        MatcherError: If a label uses anything but equality
    """
    labels: dict[str, str] = {}
    for matcher in parse_matchers(args):
        if matcher.is_regex or not matcher.is_equal:
            raise MatcherError(f"labels must be name=value pairs, got {matcher}")
        labels[matcher.name] = matcher.value
    return labels


def parse_annotations(pairs: tuple[str, ...]) -> dict[str, str]:
    """Parse repeated ``--annotation name=value`` flags."""
    annotations: dict[str, str] = {}
    for pair in pairs:
        if "=" not in pair:
            raise MatcherError(f"invalid annotation {pair}: expected name=value")
        key, value = pair.split("=", 1)
        annotations[key] = _unquote(value)
    return annotations


def parse_duration(text: str) -> timedelta:
    """Parse a Prometheus-style duration such as ``1h30m``.

    Raises:
        ValueError: If the text is not a positive duration
    """
    if not text or DURATION_RE.sub("", text) != "":
        raise ValueError(f'not a valid duration string: "{text}"')
    total = timedelta()
    for amount, unit in DURATION_RE.findall(text):
        total += int(amount) * DURATION_UNITS[unit]
    if total <= timedelta():
        raise ValueError(f'duration must be positive: "{text}"')
    return total


def parse_time(text: str) -> datetime:
    """Parse an RFC 3339 timestamp; naive times are taken as UTC."""
    try:
        value = datetime.fromisoformat(text.replace("Z", "+00:00"))
    except ValueError:
        raise ValueError(f'not a valid RFC 3339 time: "{text}"')
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return value


def format_time(value: datetime) -> str:
    """Format a timestamp as RFC 3339 in UTC."""
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")
