"""
lovebuild - browser builds for LÖVE games.

Packages a game's file tree into love.js's virtual filesystem and generates
the click-to-play bootstrap page that downloads and launches it.

Modules:
    packaging/ - manifest collection, content patches, FS script encoder
    bootstrap/ - loader state machine and bootstrap page generator
    runtime.py - love.js download and cache
    archive.py - .love archive and itch.io upload zip
    build.py - build orchestration and command line interface
    config.py - pydantic build configuration models
"""

from lovebuild.bootstrap.page import render_bootstrap_page
from lovebuild.config import BuildConfig, PresentationConfig, load_build_config
from lovebuild.errors import (
    BuildError,
    ConfigError,
    EncodingError,
    OutputError,
    PreconditionError,
    RuntimeFetchError,
)
from lovebuild.packaging.encoder import build_embedding_script
from lovebuild.packaging.manifest import collect_manifest

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "BuildConfig",
    "PresentationConfig",
    "load_build_config",
    "BuildError",
    "ConfigError",
    "EncodingError",
    "OutputError",
    "PreconditionError",
    "RuntimeFetchError",
    "build_embedding_script",
    "collect_manifest",
    "render_bootstrap_page",
]
