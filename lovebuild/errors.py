"""
Exceptions raised by the packaging run.

Everything a build can fail with derives from BuildError so the CLI has a
single place to turn failures into an exit code.
"""
from pathlib import Path
from typing import Optional, Union


class BuildError(Exception):
    """Base class for packaging failures."""

    def __init__(self, message: str, path: Optional[Union[str, Path]] = None):
        self.path = Path(path) if path is not None else None
        super().__init__(message)


class PreconditionError(BuildError):
    """A declared input is missing or unusable; nothing has been written."""


class RuntimeFetchError(PreconditionError):
    """The love.js runtime could not be downloaded."""


class EncodingError(BuildError):
    """A file could not be read or patched while building the embed script."""


class ConfigError(BuildError):
    """The build file is malformed or fails validation."""


class OutputError(BuildError):
    """A build output or cache file could not be written."""
