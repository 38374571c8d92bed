"""
Bootstrap package for lovebuild.

Generates the HTML page that downloads, injects and launches the bundle,
and models its loader state machine in Python.
"""

from .states import FailureKind, LoaderEvent, LoaderState, TRANSITIONS, next_state, transition_table
from .machine import (
    LOADER_TEXT,
    Failure,
    LoaderActions,
    LoaderMachine,
    ProgressBar,
    ProgressGauge,
    download_error_message,
    runtime_error_message,
)
from .page import render_bootstrap_page, render_loader_script

__all__ = [
    "FailureKind",
    "LoaderEvent",
    "LoaderState",
    "TRANSITIONS",
    "next_state",
    "transition_table",
    "LOADER_TEXT",
    "Failure",
    "LoaderActions",
    "LoaderMachine",
    "ProgressBar",
    "ProgressGauge",
    "download_error_message",
    "runtime_error_message",
    "render_bootstrap_page",
    "render_loader_script",
]
