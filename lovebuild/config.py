"""
Configuration models for a lovebuild web build.

A build is described by a YAML (or JSON) file such as:

    root: .
    include: [main.lua, conf.lua, src]
    output_dir: build/web
    presentation:
      title: Slime Split
      base_name: slime-split
      width: 640
      height: 480
"""

from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator

from lovebuild import yaml as build_yaml
from lovebuild.errors import ConfigError


LOVE_JS_URL = "https://schellingb.github.io/LoveWebBuilder/love.js"
MEGABYTE = 1024 * 1024


class EntryOrder(str, Enum):
    """Order in which directory entries are walked."""
    LISTING = "listing"  # Whatever the filesystem returns
    NAME = "name"        # Sorted by entry name, identical on every host


class ControlHint(BaseModel):
    """One key hint rendered under the canvas, e.g. ``← → Move``."""

    keys: List[str] = Field(..., min_length=1, description="Key labels, each drawn as a <kbd>")
    action: str = Field(..., min_length=1, description="What the keys do")


class PresentationConfig(BaseModel):
    """Everything the bootstrap page needs to know about the game."""

    title: str = Field(default="LÖVE Game", min_length=1, description="Page heading and document title")
    base_name: str = Field(
        default="game",
        pattern=r"^[A-Za-z0-9._-]+$",
        description="Base file name of the bundle (<base>.js) and the page (<base>.html)",
    )
    width: int = Field(default=640, ge=1, description="Canvas width in pixels")
    height: int = Field(default=480, ge=1, description="Canvas height in pixels")
    memory_mb: int = Field(default=256, ge=1, description="Emscripten TOTAL_MEMORY in megabytes")
    stack_mb: int = Field(default=8, ge=1, description="Emscripten TOTAL_STACK in megabytes")
    controls: List[ControlHint] = Field(default_factory=list, description="Key hints shown under the canvas")
    footer: bool = Field(default=True, description="Show the 'Made with LÖVE' footer")

    @field_validator('base_name')
    @classmethod
    def validate_base_name(cls, v):
        if v in ('index', '.', '..'):
            raise ValueError(f"base_name {v!r} would clash with the generated index page")
        return v

    @property
    def memory_bytes(self) -> int:
        return self.memory_mb * MEGABYTE

    @property
    def stack_bytes(self) -> int:
        return self.stack_mb * MEGABYTE

    @property
    def script_name(self) -> str:
        """File name of the bundle the page fetches."""
        return f"{self.base_name}.js"

    @property
    def page_name(self) -> str:
        return f"{self.base_name}.html"


class RuntimeConfig(BaseModel):
    """Where the love.js runtime comes from."""

    url: str = Field(default=LOVE_JS_URL, description="Download URL of love.js")
    cache: Path = Field(
        default=Path("build/love.js.cache"),
        description="Local copy of love.js; reused for every later build",
    )


class BuildConfig(BaseModel):
    """Complete description of one web build."""

    root: Path = Field(default=Path("."), description="Game project root; virtual paths are relative to it")
    include: List[str] = Field(
        default_factory=lambda: ["main.lua", "conf.lua", "src"],
        min_length=1,
        description="Files or directories (relative to root) to embed, in order",
    )
    exclude: List[str] = Field(
        default_factory=list,
        description="fnmatch patterns matched against virtual paths to leave out",
    )
    order: EntryOrder = Field(default=EntryOrder.LISTING, description="Directory walk order")
    output_dir: Path = Field(default=Path("build/web"), description="Where <base>.js and the pages go")
    patch_conf_version: bool = Field(
        default=True,
        description="Strip t.version from conf.lua so love.js does not warn about a version mismatch",
    )
    runtime: RuntimeConfig = Field(default_factory=RuntimeConfig)
    presentation: PresentationConfig = Field(default_factory=PresentationConfig)

    @field_validator('include')
    @classmethod
    def validate_include(cls, v):
        for pattern in v:
            if not pattern.strip():
                raise ValueError("include patterns must not be empty")
        return v

    def resolved(self, base_dir: Union[str, Path]) -> 'BuildConfig':
        """Return a copy whose relative paths are anchored at ``base_dir``."""
        base = Path(base_dir)

        def anchor(p: Path) -> Path:
            return p if p.is_absolute() else (base / p).resolve()

        runtime = self.runtime.model_copy(update={'cache': anchor(self.runtime.cache)})
        return self.model_copy(update={
            'root': anchor(self.root),
            'output_dir': anchor(self.output_dir),
            'runtime': runtime,
        })


def parse_build_config(data: Optional[Dict[str, Any]], source: Optional[Path] = None) -> BuildConfig:
    """Validate raw build-file data.

    Args:
        data: Parsed mapping (None is treated as an empty file)
        source: File the data came from, for error messages

    Raises:
        ConfigError: If the data does not describe a valid build
    """
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError(f"Build file must contain a mapping, got {type(data).__name__}", path=source)
    try:
        return BuildConfig.model_validate(data)
    except ValidationError as e:
        where = f" in {source}" if source else ""
        raise ConfigError(f"Invalid build configuration{where}:\n{e}", path=source) from e


def load_build_config(path: Union[str, Path]) -> BuildConfig:
    """Load a build file and resolve its paths against the file's directory.

    Raises:
        ConfigError: If the file is missing, unparsable, or invalid
    """
    path = Path(path)
    if not path.is_file():
        raise ConfigError(f"Build file not found: {path}", path=path)
    try:
        data = build_yaml.load(path)
    except (OSError, ValueError, build_yaml.YAMLError) as e:
        raise ConfigError(f"Cannot read build file {path}: {e}", path=path) from e
    return parse_build_config(data, source=path).resolved(path.parent.resolve())


def default_config_data() -> Dict[str, Any]:
    """Default build file content, as written by ``lovebuild --init``."""
    return BuildConfig().model_dump(mode='json')
