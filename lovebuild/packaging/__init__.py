"""
Packaging package for lovebuild.

Collects a game's files into a manifest and encodes them into the script
that populates love.js's virtual filesystem.
"""

from .manifest import ManifestEntry, collect_manifest
from .patches import CONF_VERSION_PATCH, DEFAULT_PATCHES, ContentPatch, strip_conf_version
from .encoder import VIRTUAL_ROOT, EncodeResult, VirtualFSEncoder, build_embedding_script

__all__ = [
    "ManifestEntry",
    "collect_manifest",
    "ContentPatch",
    "CONF_VERSION_PATCH",
    "DEFAULT_PATCHES",
    "strip_conf_version",
    "VIRTUAL_ROOT",
    "EncodeResult",
    "VirtualFSEncoder",
    "build_embedding_script",
]
