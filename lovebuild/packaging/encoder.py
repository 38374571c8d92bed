"""
Virtualization encoder: manifest -> Emscripten FS construction script.

The script is appended to love.js and runs before the game starts. It uses
exactly two statements, one per line:

    FS.mkdir('/l/src');
    FS.createDataFile('/l/src','level1.lua',FS.DEC('<base64>'),!0,!0,!0);

The virtual root (/l) is created first, and every directory is created
once, before anything beneath it.
"""
import base64
from dataclasses import dataclass
from typing import Iterable, List, Sequence, Set

from lovebuild.errors import EncodingError
from lovebuild.logging import get_logger
from lovebuild.packaging.manifest import ManifestEntry
from lovebuild.packaging.patches import DEFAULT_PATCHES, ContentPatch, apply_patches, matching_patches

log = get_logger('encoder')

VIRTUAL_ROOT = '/l'

_JS_ESCAPES = {
    '\\': '\\\\',
    "'": "\\'",
    '\n': '\\n',
    '\r': '\\r',
    '\u2028': '\\u2028',
    '\u2029': '\\u2029',
}


def js_string(value: str) -> str:
    """Quote ``value`` as a single-quoted JavaScript string literal."""
    return "'" + ''.join(_JS_ESCAPES.get(ch, ch) for ch in value) + "'"


def mkdir_statement(path: str) -> str:
    return f"FS.mkdir({js_string(path)});"


def create_file_statement(parent: str, file_name: str, data: bytes) -> str:
    """createDataFile call with canRead, canWrite and canOwn all set."""
    payload = base64.b64encode(data).decode('ascii')
    return f"FS.createDataFile({js_string(parent)},{js_string(file_name)},FS.DEC('{payload}'),!0,!0,!0);"


@dataclass(frozen=True)
class EncodeResult:
    """Output of one encoding pass.

    Attributes:
        script: The FS construction script, newline-terminated statements
        file_count: Number of createDataFile statements
        directory_count: Number of mkdir statements, root included
        payload_bytes: Total size of the embedded (patched) file data
    """
    script: str
    file_count: int
    directory_count: int
    payload_bytes: int


class VirtualFSEncoder:
    """Builds the embedding script for a manifest.

    The directory set and the output buffer only live for the duration of
    one :meth:`encode` call; an encoder can be reused for several builds.
    """

    def __init__(self, patches: Sequence[ContentPatch] = DEFAULT_PATCHES, root: str = VIRTUAL_ROOT):
        self.patches = tuple(patches)
        self.root = root.rstrip('/') or '/'

    def encode(self, manifest: Iterable[ManifestEntry]) -> EncodeResult:
        """Encode every manifest entry, in order.

        Raises:
            EncodingError: If a file cannot be read or patched
        """
        lines: List[str] = []
        created: Set[str] = set()
        file_count = 0
        payload_bytes = 0

        lines.append(mkdir_statement(self.root))
        created.add(self.root)

        for entry in manifest:
            parent = self.root
            for part in entry.directories:
                parent = f"{parent}/{part}"
                if parent not in created:
                    lines.append(mkdir_statement(parent))
                    created.add(parent)

            data = self._read(entry)
            lines.append(create_file_statement(parent, entry.file_name, data))
            file_count += 1
            payload_bytes += len(data)
            log.debug(f"  {entry.virtual_path} ({len(data)} bytes)")

        log.info(f"  Embedded {file_count} files, {len(created)} directories")
        return EncodeResult(
            script=''.join(line + '\n' for line in lines),
            file_count=file_count,
            directory_count=len(created),
            payload_bytes=payload_bytes,
        )

    def _read(self, entry: ManifestEntry) -> bytes:
        """File bytes with any matching content patches applied."""
        try:
            data = entry.source_path.read_bytes()
        except OSError as e:
            raise EncodingError(f"Cannot read {entry.source_path}: {e}", path=entry.source_path) from e

        if not matching_patches(entry.file_name, self.patches):
            return data

        try:
            text = data.decode('utf-8')
        except UnicodeDecodeError as e:
            raise EncodingError(
                f"Cannot patch {entry.virtual_path}: not valid UTF-8 ({e})",
                path=entry.source_path,
            ) from e
        return apply_patches(entry.file_name, text, self.patches).encode('utf-8')


def build_embedding_script(
    manifest: Iterable[ManifestEntry],
    patches: Sequence[ContentPatch] = DEFAULT_PATCHES,
) -> str:
    """Return the FS construction script for ``manifest``."""
    return VirtualFSEncoder(patches).encode(manifest).script
