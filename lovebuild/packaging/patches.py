"""
Content patch rules applied to file text before it is embedded.

A patch is a (predicate, transform) pair keyed on the file name. Patches
run in list order; each matching patch sees the output of the previous one.
"""
import re
from dataclasses import dataclass
from typing import Callable, Optional, Sequence

from lovebuild.logging import get_logger

log = get_logger('patches')

CONF_VERSION_PLACEHOLDER = "-- t.version removed for web build compatibility"

# love.js is LÖVE 0.11.0; a conf.lua declaring 11.x makes it show a
# version-mismatch warning before the game starts.
_CONF_VERSION_LINE = re.compile(
    r'^(?P<indent>[ \t]*)t\.version[ \t]*=[ \t]*"[^"\n]*"[ \t]*(?P<eol>\r?)$',
    re.MULTILINE,
)


@dataclass(frozen=True)
class ContentPatch:
    """A named text transformation for files matching a predicate."""
    name: str
    predicate: Callable[[str], bool]
    transform: Callable[[str], str]

    def matches(self, file_name: str) -> bool:
        return self.predicate(file_name)

    def apply(self, text: str) -> str:
        return self.transform(text)


def file_named(name: str) -> Callable[[str], bool]:
    """Predicate matching one exact file name."""
    return lambda file_name: file_name == name


def strip_conf_version(text: str) -> str:
    """Replace every ``t.version = "..."`` line with a comment.

    Indentation and line ending of each replaced line are kept; every other
    line is left untouched. The result has no version line left to match,
    so applying the patch again changes nothing.
    """
    return _CONF_VERSION_LINE.sub(
        lambda m: f"{m.group('indent')}{CONF_VERSION_PLACEHOLDER}{m.group('eol')}",
        text,
    )


CONF_VERSION_PATCH = ContentPatch(
    name="conf.lua t.version",
    predicate=file_named("conf.lua"),
    transform=strip_conf_version,
)

DEFAULT_PATCHES = (CONF_VERSION_PATCH,)


def matching_patches(file_name: str, patches: Sequence[ContentPatch]) -> Sequence[ContentPatch]:
    return [p for p in patches if p.matches(file_name)]


def apply_patches(
    file_name: str,
    text: str,
    patches: Sequence[ContentPatch],
) -> Optional[str]:
    """Run every matching patch over ``text``.

    Returns:
        The patched text, or None if no patch applies to ``file_name``
    """
    selected = matching_patches(file_name, patches)
    if not selected:
        return None
    for patch in selected:
        patched = patch.apply(text)
        if patched != text:
            log.info(f"  Patched {file_name}: {patch.name}")
        text = patched
    return text
