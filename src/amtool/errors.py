"""Error types for amtool.

Every error raised by the CLI ends up as a single ``amtool: error: ...``
line on stderr and exit status 1.
"""

from dataclasses import dataclass

EXIT_FAILURE = 1


@dataclass
class AmtoolError(Exception):
    """Base error class for amtool errors."""

    message: str

    def __str__(self) -> str:
        return self.message


@dataclass
class ConfigError(AmtoolError):
    """Configuration file could not be read or has invalid values."""


@dataclass
class MatcherError(AmtoolError):
    """Label matcher or label pair could not be parsed."""


@dataclass
class UsageError(AmtoolError):
    """Command line could not be dispatched to a command."""


def expected_command_error(token: str) -> UsageError:
    """Error for a command token that is empty or names no command."""
    return UsageError(message=f'expected command but got "{token}"')
