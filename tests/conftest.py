import textwrap
from pathlib import Path

import pytest

from lovebuild.bootstrap.machine import LoaderActions


CONF_LUA = textwrap.dedent(
    """\
    function love.conf(t)
        t.identity = "slime-split"
        t.version = "11.4"
        t.window.title = "Slime Split"
    end
    """
)


@pytest.fixture
def game_tree(tmp_path) -> Path:
    """main.lua, conf.lua and src/level1.lua under a project root."""
    root = tmp_path / "game"
    (root / "src").mkdir(parents=True)
    (root / "main.lua").write_text('require("src.level1")\n', encoding="utf-8")
    (root / "conf.lua").write_text(CONF_LUA, encoding="utf-8")
    (root / "src" / "level1.lua").write_text("return { width = 40 }\n", encoding="utf-8")
    return root


class RecordingActions(LoaderActions):
    """LoaderActions that records every call as (name, args)."""

    def __init__(self):
        self.calls = []
        self.affordance = True

    def names(self):
        return [name for name, _ in self.calls]

    def show_play_button(self):
        self.calls.append(("show_play_button", ()))

    def show_message(self, text):
        self.calls.append(("show_message", (text,)))

    def set_affordance(self, enabled):
        self.affordance = enabled
        self.calls.append(("set_affordance", (enabled,)))

    def start_download(self, url):
        self.calls.append(("start_download", (url,)))

    def draw_progress(self, bar):
        self.calls.append(("draw_progress", (bar,)))

    def inject_bundle(self, memory_bytes, stack_bytes):
        self.calls.append(("inject_bundle", (memory_bytes, stack_bytes)))

    def launch_runtime(self, arguments):
        self.calls.append(("launch_runtime", (arguments,)))

    def swap_canvas(self):
        self.calls.append(("swap_canvas", ()))

    def release(self):
        self.calls.append(("release", ()))

    def show_failure(self, failure):
        self.calls.append(("show_failure", (failure,)))


@pytest.fixture
def actions():
    return RecordingActions()
