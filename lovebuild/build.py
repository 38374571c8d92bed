#!/usr/bin/env python3
"""
Web build for LÖVE games.

Embeds the game's files into love.js's virtual filesystem and writes a
browser-playable build:

    <output>/<base>.js     love.js runtime + FS construction script
    <output>/<base>.html   bootstrap page
    <output>/index.html    copy of the bootstrap page

Usage:
    lovebuild [--config lovebuild.yaml] [--output DIR] [--love] [--itch-zip]

Options:
    --config    Build file (YAML or JSON, default: ./lovebuild.yaml if present)
    --output    Output directory (default: build/web)
    --offline   Never download love.js; require the cached copy
    --love      Also write build/<base>.love
    --itch-zip  Also write build/<base>-web.zip for itch.io
    --init      Write a default build file and exit
"""
import argparse
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from lovebuild import yaml as build_yaml
from lovebuild.archive import build_itch_zip, build_love_archive
from lovebuild.bootstrap.page import render_bootstrap_page
from lovebuild.config import BuildConfig, default_config_data, load_build_config
from lovebuild.errors import BuildError, OutputError
from lovebuild.logging import configure_logging, get_logger
from lovebuild.packaging.encoder import VirtualFSEncoder
from lovebuild.packaging.manifest import collect_manifest
from lovebuild.packaging.patches import DEFAULT_PATCHES
from lovebuild.runtime import load_runtime

log = get_logger('build')

DEFAULT_CONFIG_NAME = 'lovebuild.yaml'
INDEX_PAGE = 'index.html'


@dataclass
class BuildReport:
    """What a web build wrote."""
    output_dir: Path
    bundle_path: Path
    page_path: Path
    index_path: Path
    file_count: int
    directory_count: int
    script_bytes: int
    bundle_bytes: int
    elapsed: float
    love_path: Optional[Path] = None
    itch_zip_path: Optional[Path] = None


def format_size(num_bytes: int) -> str:
    if num_bytes > 1024 * 1024:
        return f"{num_bytes / 1024 / 1024:.1f} MB"
    return f"{num_bytes / 1024:.1f} KB"


def remove_stale_archives(output_dir: Path) -> None:
    """Delete .love files left in the web directory by older builds."""
    if not output_dir.is_dir():
        return
    for stale in output_dir.glob('*.love'):
        stale.unlink()
        log.debug(f"  Removed stale {stale.name}")


def build_web(config: BuildConfig, offline: bool = False) -> BuildReport:
    """Run one web build.

    Every input is collected and encoded before anything is written, so a
    failing build leaves the output directory untouched.

    Args:
        config: Build configuration with resolved paths
        offline: Require the cached love.js instead of downloading it

    Raises:
        PreconditionError: Missing sources or runtime
        EncodingError: A file could not be read or patched
        OutputError: The output directory could not be written
    """
    started = time.monotonic()
    presentation = config.presentation

    manifest = collect_manifest(config.root, config.include, order=config.order, exclude=config.exclude)
    runtime = load_runtime(config.runtime.url, config.runtime.cache, offline=offline)

    log.info("Embedding game files into virtual filesystem...")
    patches = DEFAULT_PATCHES if config.patch_conf_version else ()
    encoded = VirtualFSEncoder(patches).encode(manifest)
    log.info(f"  Total FS code: {format_size(len(encoded.script))}")

    bundle = runtime + '\n' + encoded.script
    page = render_bootstrap_page(presentation)

    output_dir = config.output_dir
    bundle_path = output_dir / presentation.script_name
    page_path = output_dir / presentation.page_name
    index_path = output_dir / INDEX_PAGE
    try:
        output_dir.mkdir(parents=True, exist_ok=True)
        remove_stale_archives(output_dir)

        bundle_path.write_text(bundle, encoding='utf-8')
        log.info(f"Written: {bundle_path.name} ({format_size(bundle_path.stat().st_size)})")

        page_path.write_text(page, encoding='utf-8')
        index_path.write_text(page, encoding='utf-8')
        log.info(f"Written: {page_path.name}")
        log.info(f"Written: {INDEX_PAGE} (copy)")
    except OSError as e:
        raise OutputError(f"Cannot write web build to {output_dir}: {e}", path=output_dir) from e

    return BuildReport(
        output_dir=output_dir,
        bundle_path=bundle_path,
        page_path=page_path,
        index_path=index_path,
        file_count=encoded.file_count,
        directory_count=encoded.directory_count,
        script_bytes=len(encoded.script.encode('utf-8')),
        bundle_bytes=bundle_path.stat().st_size,
        elapsed=time.monotonic() - started,
    )


def build_release(
    config: BuildConfig,
    offline: bool = False,
    love: bool = False,
    itch_zip: bool = False,
) -> BuildReport:
    """Web build plus the optional .love archive and itch.io zip."""
    report = build_web(config, offline=offline)
    base = config.presentation.base_name
    build_dir = config.output_dir.parent

    if love:
        manifest = collect_manifest(config.root, config.include, order=config.order, exclude=config.exclude)
        report.love_path = build_love_archive(manifest, build_dir / f"{base}.love")
    if itch_zip:
        report.itch_zip_path = build_itch_zip(config.output_dir, build_dir / f"{base}-web.zip")
    return report


def print_summary(report: BuildReport) -> None:
    print("\n=== Build Complete ===")
    print(f"Output directory: {report.output_dir}")
    print(f"  {report.page_path.name}  ({format_size(report.page_path.stat().st_size)})")
    print(f"  {report.bundle_path.name}  ({format_size(report.bundle_bytes)})")
    print(f"  {INDEX_PAGE}  (copy of {report.page_path.name})")
    print(f"  {report.file_count} files, {report.directory_count} directories in {report.elapsed:.2f}s")
    if report.love_path:
        print(f"  {report.love_path}  ({format_size(report.love_path.stat().st_size)})")
    if report.itch_zip_path:
        print(f"  {report.itch_zip_path}  ({format_size(report.itch_zip_path.stat().st_size)})")
    print("\nTo test locally:")
    print(f"  python -m http.server --directory {report.output_dir}")


def resolve_config(args: argparse.Namespace) -> BuildConfig:
    """Build file (explicit, ./lovebuild.yaml, or defaults) plus CLI overrides."""
    if args.config is not None:
        config = load_build_config(args.config)
    elif Path(DEFAULT_CONFIG_NAME).is_file():
        config = load_build_config(DEFAULT_CONFIG_NAME)
    else:
        config = BuildConfig().resolved(Path.cwd())

    overrides = {}
    if args.root is not None:
        overrides['root'] = args.root.resolve()
    if args.output is not None:
        overrides['output_dir'] = args.output.resolve()
    if overrides:
        config = config.model_copy(update=overrides)
    return config


def _parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog='lovebuild',
        description='Build a browser-playable love.js bundle from a LÖVE game',
    )
    parser.add_argument(
        '--config',
        type=Path,
        default=None,
        help=f'Build file, YAML or JSON (default: ./{DEFAULT_CONFIG_NAME} if present)',
    )
    parser.add_argument(
        '--root',
        type=Path,
        default=None,
        help='Game project root (overrides the build file)',
    )
    parser.add_argument(
        '--output',
        type=Path,
        default=None,
        help='Output directory (overrides the build file)',
    )
    parser.add_argument(
        '--offline',
        action='store_true',
        help='Use the cached love.js only; fail if it is missing',
    )
    parser.add_argument(
        '--love',
        action='store_true',
        help='Also write a .love archive of the game sources',
    )
    parser.add_argument(
        '--itch-zip',
        action='store_true',
        help='Also zip the web build for upload to itch.io',
    )
    parser.add_argument(
        '--init',
        action='store_true',
        help=f'Write a default {DEFAULT_CONFIG_NAME} (or --config path) and exit',
    )
    parser.add_argument(
        '-v', '--verbose',
        action='count',
        default=0,
        help='More logging; shows every embedded file',
    )
    parser.add_argument(
        '-q', '--quiet',
        action='count',
        default=0,
        help='Less logging; pass twice for errors only',
    )
    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    args = _parse_args(argv)
    configure_logging(verbose=args.verbose, quiet=args.quiet)

    if args.init:
        target = args.config or Path(DEFAULT_CONFIG_NAME)
        if target.exists():
            print(f"ERROR: {target} already exists", file=sys.stderr)
            return 1
        build_yaml.dump(default_config_data(), target)
        print(f"Written: {target}")
        return 0

    try:
        config = resolve_config(args)
        report = build_release(config, offline=args.offline, love=args.love, itch_zip=args.itch_zip)
    except BuildError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    if args.quiet == 0:
        print_summary(report)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
