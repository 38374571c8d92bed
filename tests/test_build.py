import base64
import re
import zipfile

import pytest

from lovebuild import build
from lovebuild import runtime as runtime_module
from lovebuild.config import BuildConfig, PresentationConfig, RuntimeConfig
from lovebuild.errors import EncodingError, OutputError, PreconditionError
from lovebuild.packaging.patches import CONF_VERSION_PLACEHOLDER

RUNTIME_JS = "var Module = Module || {};\n/* love.js */"


@pytest.fixture
def runtime_cache(tmp_path):
    cache = tmp_path / "cache" / "love.js.cache"
    cache.parent.mkdir()
    cache.write_text(RUNTIME_JS, encoding="utf-8")
    return cache


@pytest.fixture
def config(game_tree, runtime_cache, tmp_path):
    return BuildConfig(
        root=game_tree,
        output_dir=tmp_path / "build" / "web",
        runtime=RuntimeConfig(cache=runtime_cache),
        presentation=PresentationConfig(title="Slime Split", base_name="slime-split"),
    )


def test_build_web_writes_bundle_and_pages(config):
    report = build.build_web(config, offline=True)

    out = config.output_dir
    assert report.bundle_path == out / "slime-split.js"
    assert report.page_path == out / "slime-split.html"
    assert report.index_path == out / "index.html"
    assert report.file_count == 3
    assert report.directory_count == 2

    bundle = report.bundle_path.read_text(encoding="utf-8")
    assert bundle.startswith(RUNTIME_JS + "\nFS.mkdir('/l');\n")
    assert bundle.count("FS.createDataFile(") == 3
    assert report.bundle_bytes == report.bundle_path.stat().st_size

    page = report.page_path.read_text(encoding="utf-8")
    assert report.index_path.read_text(encoding="utf-8") == page
    assert '"slime-split.js"' in page


def test_build_web_embeds_patched_conf(config):
    report = build.build_web(config, offline=True)

    bundle = report.bundle_path.read_text(encoding="utf-8")
    payload = re.search(r"FS\.createDataFile\('/l','conf\.lua',FS\.DEC\('([^']*)'\)", bundle).group(1)
    assert CONF_VERSION_PLACEHOLDER in base64.b64decode(payload).decode("utf-8")


def test_missing_source_writes_nothing(config):
    config = config.model_copy(update={"include": ["main.lua", "assets"]})

    with pytest.raises(PreconditionError):
        build.build_web(config, offline=True)

    assert not config.output_dir.exists()


def test_missing_runtime_writes_nothing(config, tmp_path):
    runtime = RuntimeConfig(cache=tmp_path / "nowhere" / "love.js.cache")
    config = config.model_copy(update={"runtime": runtime})

    with pytest.raises(PreconditionError, match="not cached"):
        build.build_web(config, offline=True)

    assert not config.output_dir.exists()


def test_encoding_failure_writes_nothing(config):
    (config.root / "conf.lua").write_bytes(b"t.version = '\xff'\n")

    with pytest.raises(EncodingError):
        build.build_web(config, offline=True)

    assert not config.output_dir.exists()


def test_unwritable_output_is_a_build_error(config):
    config.output_dir.parent.mkdir(parents=True)
    config.output_dir.write_text("not a directory", encoding="utf-8")

    with pytest.raises(OutputError) as excinfo:
        build.build_web(config, offline=True)

    assert excinfo.value.path == config.output_dir


def test_cli_reports_unwritable_output(config, tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(config.root)
    (config.root / "lovebuild.yaml").write_text(
        f"runtime:\n  cache: {config.runtime.cache.as_posix()}\n", encoding="utf-8"
    )
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    code = build.main(["--output", str(blocker / "web"), "--offline"])

    assert code == 1
    assert "ERROR: Cannot write web build" in capsys.readouterr().err


def test_runtime_is_downloaded_when_not_cached(config, tmp_path, monkeypatch):
    cache = tmp_path / "fresh" / "love.js.cache"
    config = config.model_copy(update={"runtime": RuntimeConfig(url="https://example.invalid/love.js", cache=cache)})
    monkeypatch.setattr(runtime_module, "download", lambda url: RUNTIME_JS.encode("utf-8"))

    report = build.build_web(config)

    assert cache.read_text(encoding="utf-8") == RUNTIME_JS
    assert report.bundle_path.read_text(encoding="utf-8").startswith(RUNTIME_JS)


def test_stale_love_files_are_removed(config):
    config.output_dir.mkdir(parents=True)
    stale = config.output_dir / "old.love"
    stale.write_bytes(b"PK")

    build.build_web(config, offline=True)

    assert not stale.exists()


def test_build_release_writes_love_and_itch_zip(config):
    report = build.build_release(config, offline=True, love=True, itch_zip=True)

    build_dir = config.output_dir.parent
    assert report.love_path == build_dir / "slime-split.love"
    assert report.itch_zip_path == build_dir / "slime-split-web.zip"
    with zipfile.ZipFile(report.love_path) as zf:
        assert zf.namelist() == ["main.lua", "conf.lua", "src/level1.lua"]
    with zipfile.ZipFile(report.itch_zip_path) as zf:
        assert sorted(zf.namelist()) == ["index.html", "slime-split.html", "slime-split.js"]


def test_cli_builds_from_config_file(config, tmp_path, capsys):
    build_file = tmp_path / "lovebuild.yaml"
    build_file.write_text(
        f"root: {config.root.as_posix()}\n"
        f"output_dir: {config.output_dir.as_posix()}\n"
        f"runtime:\n  cache: {config.runtime.cache.as_posix()}\n"
        "presentation:\n  base_name: slime-split\n",
        encoding="utf-8",
    )

    code = build.main(["--config", str(build_file), "--offline", "-q"])

    assert code == 0
    assert (config.output_dir / "slime-split.js").exists()
    assert (config.output_dir / "index.html").exists()


def test_cli_overrides_output_and_prints_summary(config, tmp_path, capsys, monkeypatch):
    monkeypatch.chdir(config.root)
    (config.root / "lovebuild.yaml").write_text(
        f"runtime:\n  cache: {config.runtime.cache.as_posix()}\n", encoding="utf-8"
    )
    out = tmp_path / "elsewhere"

    code = build.main(["--output", str(out), "--offline"])

    assert code == 0
    assert (out / "game.js").exists()
    assert "=== Build Complete ===" in capsys.readouterr().out


def test_cli_reports_build_errors(config, tmp_path, capsys):
    code = build.main(["--root", str(tmp_path / "missing"), "--offline", "--config", str(tmp_path / "x.yaml")])

    assert code == 1
    assert capsys.readouterr().err.startswith("ERROR: ")


def test_cli_init_writes_default_build_file(tmp_path, monkeypatch, capsys):
    monkeypatch.chdir(tmp_path)

    assert build.main(["--init"]) == 0
    assert (tmp_path / "lovebuild.yaml").exists()
    assert build.main(["--init"]) == 1


def test_format_size():
    assert build.format_size(2048) == "2.0 KB"
    assert build.format_size(3 * 1024 * 1024) == "3.0 MB"
