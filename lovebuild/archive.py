"""
Zip archives built next to the web bundle.

- ``<base>.love``: the game sources, for running with a local LÖVE install
- itch.io upload zip: the web output flattened to the zip root, checked
  against itch.io's limit on the number of files in a zip
"""
import zipfile
from pathlib import Path
from typing import Iterator, List, Sequence, Union

from lovebuild.errors import OutputError, PreconditionError
from lovebuild.logging import get_logger
from lovebuild.packaging.manifest import ManifestEntry

log = get_logger('archive')

ITCH_FILE_LIMIT = 1000
_IGNORED_NAMES = {'.ds_store', 'thumbs.db'}


def build_love_archive(manifest: Sequence[ManifestEntry], dest: Union[str, Path]) -> Path:
    """Zip the manifest into a .love file, using virtual paths as names."""
    dest = Path(dest)
    try:
        dest.parent.mkdir(parents=True, exist_ok=True)
        if dest.exists():
            dest.unlink()
        with zipfile.ZipFile(dest, 'w', compression=zipfile.ZIP_DEFLATED) as zf:
            for entry in manifest:
                zf.write(entry.source_path, arcname=entry.virtual_path)
    except OSError as e:
        raise OutputError(f"Cannot write {dest}: {e}", path=dest) from e

    log.info(f"Written: {dest.name} ({len(manifest)} files)")
    return dest


def iter_release_files(root: Path) -> Iterator[Path]:
    for p in root.rglob('*'):
        if p.is_file() and p.name.lower() not in _IGNORED_NAMES:
            yield p


def build_itch_zip(
    web_dir: Union[str, Path],
    dest: Union[str, Path],
    file_limit: int = ITCH_FILE_LIMIT,
) -> Path:
    """Zip the contents of ``web_dir`` so index.html sits at the zip root.

    Raises:
        PreconditionError: If web_dir is missing or has too many files
        OutputError: If the zip cannot be written
    """
    web_dir = Path(web_dir)
    dest = Path(dest)
    if not web_dir.is_dir():
        raise PreconditionError(f"Web build not found at {web_dir}", path=web_dir)

    files: List[Path] = [f for f in iter_release_files(web_dir) if f.resolve() != dest.resolve()]
    if len(files) > file_limit:
        raise PreconditionError(
            f"Too many files for itch.io ({len(files)} > {file_limit})",
            path=web_dir,
        )

    # Deterministic ordering
    files.sort(key=lambda p: p.relative_to(web_dir).as_posix())
    try:
        if dest.exists():
            dest.unlink()
        dest.parent.mkdir(parents=True, exist_ok=True)
        with zipfile.ZipFile(dest, 'w', compression=zipfile.ZIP_DEFLATED, compresslevel=9) as zf:
            for f in files:
                zf.write(f, arcname=f.relative_to(web_dir).as_posix())
    except OSError as e:
        raise OutputError(f"Cannot write {dest}: {e}", path=dest) from e

    size_mb = dest.stat().st_size / (1024 * 1024)
    log.info(f"Written: {dest.name} ({len(files)} files, {size_mb:.2f} MB)")
    return dest
