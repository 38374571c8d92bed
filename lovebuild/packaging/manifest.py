"""
Tree collector: turns inclusion patterns into an ordered manifest.

Each manifest entry pairs an absolute source path with the forward-slash
path the file will have inside the virtual filesystem, relative to the
project root.
"""
import fnmatch
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Sequence, Set, Tuple, Union

from lovebuild.config import EntryOrder
from lovebuild.errors import PreconditionError
from lovebuild.logging import get_logger

log = get_logger('manifest')


@dataclass(frozen=True)
class ManifestEntry:
    """One file to embed.

    Attributes:
        source_path: Absolute path of the file on disk
        virtual_path: Path relative to the virtual root, '/'-separated
    """
    source_path: Path
    virtual_path: str

    @property
    def directories(self) -> Tuple[str, ...]:
        """Directory components leading to the file (empty for root files)."""
        return tuple(self.virtual_path.split('/')[:-1])

    @property
    def file_name(self) -> str:
        return self.virtual_path.rsplit('/', 1)[-1]


def _normalize_pattern(pattern: str) -> str:
    return pattern.replace('\\', '/').strip()


def _inside(root: Path, path: Path) -> bool:
    return path == root or root in path.parents


def _resolve_pattern(root: Path, pattern: str) -> Path:
    """Join a pattern onto the root without leaving it."""
    rel = _normalize_pattern(pattern)
    if not rel:
        raise PreconditionError("Empty include pattern", path=root)
    full = Path(os.path.normpath(os.path.join(root, rel)))
    if not _inside(root, full):
        raise PreconditionError(f"Include pattern escapes the project root: {pattern}", path=full)
    return full


def _real_path(root: Path, path: Path) -> Path:
    """Resolve symlinks in ``path``; the target must stay under root."""
    try:
        real = path.resolve(strict=True)
    except (OSError, RuntimeError) as e:
        raise PreconditionError(f"Cannot resolve {path}: {e}", path=path) from e
    if not _inside(root, real):
        raise PreconditionError(f"{path} links outside the project root to {real}", path=path)
    return real


def _walk(root: Path, directory: Path, order: EntryOrder, visited: Set[Path]) -> Iterator[Path]:
    """Yield regular files under ``directory`` depth-first.

    Symlinks are followed as long as they resolve inside root; a directory
    already visited (a link cycle or a second link to it) is skipped.
    """
    real_dir = _real_path(root, directory)
    if real_dir in visited:
        log.warning(f"  Skipping already visited directory: {directory}")
        return
    visited.add(real_dir)

    try:
        with os.scandir(directory) as it:
            entries = list(it)
    except OSError as e:
        raise PreconditionError(f"Cannot list {directory}: {e}", path=directory) from e
    if order == EntryOrder.NAME:
        entries.sort(key=lambda e: e.name)
    for entry in entries:
        path = Path(entry.path)
        if entry.is_symlink():
            _real_path(root, path)
        if entry.is_dir():
            yield from _walk(root, path, order, visited)
        elif entry.is_file():
            yield path


def collect_manifest(
    root: Union[str, Path],
    patterns: Sequence[str],
    order: EntryOrder = EntryOrder.LISTING,
    exclude: Iterable[str] = (),
) -> List[ManifestEntry]:
    """Build the manifest for a project.

    Args:
        root: Project root; every virtual path is relative to it
        patterns: Files or directories (relative to root), in embed order
        order: How directory entries are ordered while walking
        exclude: fnmatch patterns; matching virtual paths are skipped

    Returns:
        Manifest entries, unique by virtual path, in discovery order

    Raises:
        PreconditionError: If a pattern is missing, or a pattern or a file
            found under it resolves outside root
    """
    root = Path(os.path.normpath(Path(root).resolve()))
    exclude = list(exclude)
    manifest: List[ManifestEntry] = []
    seen = set()

    for pattern in patterns:
        full = _resolve_pattern(root, pattern)
        if not full.exists():
            raise PreconditionError(f"Source not found: {full}", path=full)

        if full.is_dir():
            files: Iterable[Path] = _walk(root, full, order, set())
        else:
            _real_path(root, full)
            files = [full]

        for path in files:
            virtual_path = path.relative_to(root).as_posix()
            if any(fnmatch.fnmatchcase(virtual_path, pat) for pat in exclude):
                log.debug(f"  Excluded: {virtual_path}")
                continue
            if virtual_path in seen:
                log.warning(f"  Skipping duplicate entry: {virtual_path} (matched by '{pattern}')")
                continue
            seen.add(virtual_path)
            manifest.append(ManifestEntry(source_path=path, virtual_path=virtual_path))

    log.debug(f"Collected {len(manifest)} files from {root}")
    return manifest
