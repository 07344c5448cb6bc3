"""Test helpers for running amtool as a black box."""

from .fork import (
    CapturedResult,
    ExitedWithCode,
    FailedToStart,
    ForkHarness,
    Mode,
    Scenario,
    ScenarioMismatch,
    Success,
    assert_scenario,
    run_fork,
    run_subject,
)

__all__ = [
    "CapturedResult",
    "ExitedWithCode",
    "FailedToStart",
    "ForkHarness",
    "Mode",
    "Scenario",
    "ScenarioMismatch",
    "Success",
    "assert_scenario",
    "run_fork",
    "run_subject",
]
