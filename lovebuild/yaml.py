"""Unified YAML/JSON loader for lovebuild build files.

Build files can be written in either format; the format is picked from the
file extension:

    from lovebuild.yaml import load, dump

    data = load(Path('lovebuild.yaml'))
    data = load(Path('lovebuild.json'))

    # Parse from a string
    data = loads(content, format='yaml')

    # Write a file (format from extension)
    dump(data, Path('lovebuild.yaml'))
"""

from pathlib import Path
from typing import Any, IO, Optional, Union
import json

import yaml as _yaml


FORMATS = ('yaml', 'json')
YAMLError = _yaml.YAMLError


class UnknownFormatError(ValueError):
    """Raised when a format other than 'yaml' or 'json' is requested."""

    def __init__(self, format: str):
        super().__init__(f"Unknown data format {format!r}; expected one of {', '.join(FORMATS)}")


def _detect_format(path: Union[str, Path]) -> str:
    """Detect file format from extension; anything but .json is YAML."""
    suffix = Path(path).suffix.lower()
    if suffix == '.json':
        return 'json'
    return 'yaml'


def _check_format(format: str) -> None:
    if format not in FORMATS:
        raise UnknownFormatError(format)


def load(
    source: Union[str, Path, IO[str]],
    format: Optional[str] = None,
) -> Any:
    """Load data from a file path or file-like object.

    Args:
        source: File path (str or Path) or file-like object
        format: 'yaml', 'json', or None to auto-detect from extension

    Returns:
        Parsed data (usually dict or list)

    Raises:
        FileNotFoundError: If file doesn't exist
        json.JSONDecodeError: If JSON parsing fails
        yaml.YAMLError: If YAML parsing fails
    """
    if isinstance(source, (str, Path)):
        path = Path(source)
        if format is None:
            format = _detect_format(path)
        with open(path, 'r', encoding='utf-8') as f:
            return _load_from_file(f, format)

    if format is None:
        name = getattr(source, 'name', None)
        format = _detect_format(name) if name else 'yaml'
    return _load_from_file(source, format)


def _load_from_file(f: IO[str], format: str) -> Any:
    """Load from an open file object."""
    _check_format(format)
    if format == 'yaml':
        return _yaml.safe_load(f)
    return json.load(f)


def loads(content: str, format: str = 'yaml') -> Any:
    """Load data from a string.

    Args:
        content: String content to parse
        format: 'yaml' or 'json'

    Returns:
        Parsed data (usually dict or list)
    """
    _check_format(format)
    if format == 'yaml':
        return _yaml.safe_load(content)
    return json.loads(content)


def dump(
    data: Any,
    dest: Union[str, Path],
    format: Optional[str] = None,
    **kwargs: Any,
) -> None:
    """Dump data to a file path.

    Args:
        data: Data to serialize
        dest: File path
        format: 'yaml', 'json', or None to auto-detect from extension
        **kwargs: Additional arguments passed to yaml.dump or json.dump
    """
    path = Path(dest)
    if format is None:
        format = _detect_format(path)
    _check_format(format)

    with open(path, 'w', encoding='utf-8') as f:
        if format == 'yaml':
            # Readable block-style output
            kwargs.setdefault('default_flow_style', False)
            kwargs.setdefault('allow_unicode', True)
            kwargs.setdefault('sort_keys', False)
            _yaml.dump(data, f, **kwargs)
        else:
            kwargs.setdefault('indent', 2)
            kwargs.setdefault('ensure_ascii', False)
            json.dump(data, f, **kwargs)
            f.write('\n')
