"""
Python model of the page's loader state machine.

LoaderMachine applies the transition table from states.py and calls a
LoaderActions implementation for every side effect (drawing, fetching,
launching). The generated page implements the same actions in JavaScript;
tests drive the machine with a recording LoaderActions instead of a browser.
"""
import html
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from lovebuild.bootstrap.states import FailureKind, LoaderEvent, LoaderState, next_state
from lovebuild.config import PresentationConfig
from lovebuild.logging import get_logger
from lovebuild.packaging.encoder import VIRTUAL_ROOT

log = get_logger('loader')

# Progress events ignored before the bar is first drawn
PROGRESS_DEBOUNCE = 5
PROGRESS_BAR_WIDTH = 300
PROGRESS_BAR_HEIGHT = 24
# Delay before injecting the bundle and before Module.run(); only yields
# to the event loop.
TICK_MS = 50

LOADER_TEXT = {
    'PLAYBTN': 'Click to Play',
    'LOAD': 'Downloading Game...',
    'PARSE': 'Preparing Game...',
    'EXECUTE': 'Starting Game...',
    'DLERROR': 'Error while downloading game data.\nCheck your internet connection.',
    'NOWEBGL': (
        'Your browser does not support '
        '<a href="http://khronos.org/webgl/wiki/Getting_a_WebGL_Implementation">WebGL</a>.'
        '<br>Find out how to get it <a href="http://get.webgl.org/">here</a>.'
    ),
}


@dataclass(frozen=True)
class ProgressBar:
    """Filled part of the download bar, in canvas pixels."""
    x: float
    y: float
    width: float


@dataclass(frozen=True)
class Failure:
    kind: FailureKind
    message: str


class ProgressGauge:
    """Turns XHR progress events into bar geometry.

    Events with an unknown total never draw; the first PROGRESS_DEBOUNCE
    events with a known total are skipped.
    """

    def __init__(self, canvas_width: int, canvas_height: int):
        self.canvas_width = canvas_width
        self.canvas_height = canvas_height
        self.count = 0

    def reset(self) -> None:
        self.count = 0

    def update(self, loaded: int, total: int, length_computable: bool = True) -> Optional[ProgressBar]:
        if not length_computable:
            return None
        seen = self.count
        self.count += 1
        if seen < PROGRESS_DEBOUNCE or total <= 0:
            return None
        return ProgressBar(
            x=self.canvas_width / 2 - PROGRESS_BAR_WIDTH / 2,
            y=self.canvas_height * .6,
            width=min(loaded / total, 1) * PROGRESS_BAR_WIDTH,
        )


def download_error_message(status: Optional[int] = None, status_text: str = '') -> str:
    """Canvas message for a failed download; includes the HTTP status when known."""
    if status is None:
        return LOADER_TEXT['DLERROR']
    return f"{LOADER_TEXT['DLERROR']}\nStatus: {status} {status_text}".rstrip()


def runtime_error_message(message: str, source: str = '', line: Optional[int] = None) -> str:
    """Overlay detail for an uncaught script error."""
    where = f"{source}:{line}" if line is not None else source
    return f"{html.escape(str(message))}<br>({html.escape(where)})"


class LoaderActions(ABC):
    """Side effects the loader performs; the page implements these in JS."""

    @abstractmethod
    def show_play_button(self) -> None:
        """Draw the click-to-play affordance."""

    @abstractmethod
    def show_message(self, text: str) -> None:
        """Clear the canvas and draw ``text`` (lines split on newlines)."""

    @abstractmethod
    def set_affordance(self, enabled: bool) -> None:
        pass

    @abstractmethod
    def start_download(self, url: str) -> None:
        pass

    @abstractmethod
    def draw_progress(self, bar: ProgressBar) -> None:
        pass

    @abstractmethod
    def inject_bundle(self, memory_bytes: int, stack_bytes: int) -> None:
        """Configure Module and inject the downloaded script."""

    @abstractmethod
    def launch_runtime(self, arguments: List[str]) -> None:
        """Hand love.js a fresh canvas and call Module.run(arguments)."""

    @abstractmethod
    def swap_canvas(self) -> None:
        pass

    @abstractmethod
    def release(self) -> None:
        """Drop the loader's canvas, context and message renderer."""

    @abstractmethod
    def show_failure(self, failure: Failure) -> None:
        """Replace the canvas with the full-width failure overlay."""


class LoaderMachine:
    """The click-to-play loader as an explicit state machine."""

    def __init__(self, actions: LoaderActions, presentation: Optional[PresentationConfig] = None):
        self.actions = actions
        self.presentation = presentation or PresentationConfig()
        self.state = LoaderState.IDLE
        self.failure: Optional[Failure] = None
        self.affordance_enabled = True
        self.gauge = ProgressGauge(self.presentation.width, self.presentation.height)
        self.actions.show_play_button()

    @property
    def finished(self) -> bool:
        return self.state == LoaderState.RUNNING or (
            self.state == LoaderState.FAILED and not self.affordance_enabled
        )

    def dispatch(self, event: LoaderEvent, failure: Optional[Failure] = None) -> LoaderState:
        """Apply ``event``; events without a transition are ignored."""
        target = next_state(self.state, event)
        if target is None:
            log.debug(f"Ignoring {event.value} in state {self.state.value}")
            return self.state
        log.debug(f"{self.state.value} --{event.value}--> {target.value}")
        self.state = target

        if target == LoaderState.DOWNLOADING:
            self._enter_downloading()
        elif target == LoaderState.PREPARING:
            self._enter_preparing()
        elif target == LoaderState.EXECUTING:
            self._enter_executing()
        elif target == LoaderState.RUNNING:
            self._enter_running()
        elif target == LoaderState.FAILED:
            self._enter_failed(failure)
        return self.state

    # -- inputs -------------------------------------------------------------

    def click(self) -> LoaderState:
        if not self.affordance_enabled:
            return self.state
        return self.dispatch(LoaderEvent.CLICK)

    def progress(self, loaded: int, total: int, length_computable: bool = True) -> Optional[ProgressBar]:
        if self.state != LoaderState.DOWNLOADING:
            return None
        bar = self.gauge.update(loaded, total, length_computable)
        if bar is not None:
            self.actions.draw_progress(bar)
        return bar

    def download_failed(self, status: Optional[int] = None, status_text: str = '') -> LoaderState:
        failure = Failure(FailureKind.DOWNLOAD, download_error_message(status, status_text))
        return self.dispatch(LoaderEvent.DOWNLOAD_FAILED, failure)

    def downloaded(self) -> LoaderState:
        return self.dispatch(LoaderEvent.DOWNLOADED)

    def initialized(self) -> LoaderState:
        return self.dispatch(LoaderEvent.INITIALIZED)

    def post_run(self, still_running: bool) -> LoaderState:
        if still_running:
            return self.dispatch(LoaderEvent.STARTED)
        return self.dispatch(LoaderEvent.EXITED, Failure(FailureKind.CAPABILITY, ''))

    def runtime_error(self, message: str, source: str = '', line: Optional[int] = None) -> LoaderState:
        failure = Failure(FailureKind.RUNTIME, runtime_error_message(message, source, line))
        return self.dispatch(LoaderEvent.RUNTIME_ERROR, failure)

    # -- state entry actions -------------------------------------------------

    def _enter_downloading(self) -> None:
        self.failure = None
        self.affordance_enabled = False
        self.actions.set_affordance(False)
        self.gauge.reset()
        self.actions.show_message(LOADER_TEXT['LOAD'])
        self.actions.start_download(self.presentation.script_name)

    def _enter_preparing(self) -> None:
        self.actions.show_message(LOADER_TEXT['PARSE'])
        self.actions.inject_bundle(self.presentation.memory_bytes, self.presentation.stack_bytes)

    def _enter_executing(self) -> None:
        self.actions.show_message(LOADER_TEXT['EXECUTE'])
        self.actions.launch_runtime([VIRTUAL_ROOT])

    def _enter_running(self) -> None:
        self.actions.swap_canvas()
        self.actions.release()

    def _enter_failed(self, failure: Optional[Failure]) -> None:
        self.failure = failure or Failure(FailureKind.RUNTIME, '')
        if self.failure.kind == FailureKind.DOWNLOAD:
            self.actions.show_message(self.failure.message)
            self.affordance_enabled = True
            self.actions.set_affordance(True)
        else:
            self.actions.show_failure(self.failure)
