"""
Loader states, events and the transition table.

The same table drives the Python model (machine.py) and is serialized into
the generated page, so both follow identical rules.
"""
from enum import Enum
from typing import Dict, Optional


class LoaderState(str, Enum):
    """Where the page is in the load/launch sequence."""
    IDLE = "idle"                 # Waiting for the player's click
    DOWNLOADING = "downloading"   # Fetching <base>.js
    PREPARING = "preparing"       # Injecting the fetched script
    EXECUTING = "executing"       # love.js is initializing the game
    RUNNING = "running"           # Game is live; loader is done
    FAILED = "failed"


class LoaderEvent(str, Enum):
    """Inputs to the state machine."""
    CLICK = "click"
    DOWNLOAD_FAILED = "download_failed"
    DOWNLOADED = "downloaded"
    INITIALIZED = "initialized"   # Runtime called Module.preInit
    STARTED = "started"           # postRun with noExitRuntime set
    EXITED = "exited"             # postRun without noExitRuntime
    RUNTIME_ERROR = "runtime_error"


class FailureKind(str, Enum):
    """How a failure is presented to the player."""
    DOWNLOAD = "download"       # Message on the canvas, click to retry
    CAPABILITY = "capability"   # No WebGL; overlay with help links
    RUNTIME = "runtime"         # Script error; overlay with location


TERMINAL_STATES = frozenset({LoaderState.RUNNING, LoaderState.FAILED})

TRANSITIONS: Dict[LoaderState, Dict[LoaderEvent, LoaderState]] = {
    LoaderState.IDLE: {
        LoaderEvent.CLICK: LoaderState.DOWNLOADING,
    },
    LoaderState.DOWNLOADING: {
        LoaderEvent.DOWNLOAD_FAILED: LoaderState.FAILED,
        LoaderEvent.DOWNLOADED: LoaderState.PREPARING,
    },
    LoaderState.PREPARING: {
        LoaderEvent.INITIALIZED: LoaderState.EXECUTING,
        LoaderEvent.RUNTIME_ERROR: LoaderState.FAILED,
    },
    LoaderState.EXECUTING: {
        LoaderEvent.STARTED: LoaderState.RUNNING,
        LoaderEvent.EXITED: LoaderState.FAILED,
        LoaderEvent.RUNTIME_ERROR: LoaderState.FAILED,
    },
    LoaderState.RUNNING: {},
    # Only reachable with the play affordance enabled, i.e. after a
    # download failure.
    LoaderState.FAILED: {
        LoaderEvent.CLICK: LoaderState.DOWNLOADING,
    },
}


def next_state(state: LoaderState, event: LoaderEvent) -> Optional[LoaderState]:
    """Return the state ``event`` leads to, or None if it is ignored."""
    return TRANSITIONS[LoaderState(state)].get(LoaderEvent(event))


def transition_table() -> Dict[str, Dict[str, str]]:
    """The transition table as plain strings, for embedding in the page."""
    return {
        state.value: {event.value: target.value for event, target in edges.items()}
        for state, edges in TRANSITIONS.items()
    }
