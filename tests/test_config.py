import json
import textwrap

import pytest

from lovebuild import yaml as build_yaml
from lovebuild.config import (
    BuildConfig,
    EntryOrder,
    PresentationConfig,
    default_config_data,
    load_build_config,
    parse_build_config,
)
from lovebuild.errors import ConfigError


def test_defaults_match_classic_love_project():
    config = BuildConfig()

    assert config.include == ["main.lua", "conf.lua", "src"]
    assert config.order == EntryOrder.LISTING
    assert config.patch_conf_version is True
    p = config.presentation
    assert (p.width, p.height, p.memory_mb, p.stack_mb) == (640, 480, 256, 8)


def test_presentation_derived_names_and_sizes():
    p = PresentationConfig(base_name="slime-split", memory_mb=256, stack_mb=8)

    assert p.script_name == "slime-split.js"
    assert p.page_name == "slime-split.html"
    assert p.memory_bytes == 268435456
    assert p.stack_bytes == 8388608


@pytest.mark.parametrize("base_name", ["index", "my game", "../x", "a/b", ""])
def test_bad_base_names_are_rejected(base_name):
    with pytest.raises(ConfigError):
        parse_build_config({"presentation": {"base_name": base_name}})


def test_non_positive_budgets_are_rejected():
    with pytest.raises(ConfigError, match="memory_mb"):
        parse_build_config({"presentation": {"memory_mb": 0}})


def test_empty_include_pattern_is_rejected():
    with pytest.raises(ConfigError):
        parse_build_config({"include": ["main.lua", "  "]})


def test_yaml_build_file_resolves_paths_against_its_directory(tmp_path):
    project = tmp_path / "project"
    project.mkdir()
    build_file = project / "lovebuild.yaml"
    build_file.write_text(
        textwrap.dedent(
            """\
            root: game
            include: [main.lua, assets]
            order: name
            output_dir: out/web
            runtime:
              cache: cache/love.js
            presentation:
              title: Slime Split
              base_name: slime-split
              controls:
                - {keys: [Space], action: Jump}
            """
        ),
        encoding="utf-8",
    )

    config = load_build_config(build_file)

    base = project.resolve()
    assert config.root == base / "game"
    assert config.output_dir == base / "out" / "web"
    assert config.runtime.cache == base / "cache" / "love.js"
    assert config.order == EntryOrder.NAME
    assert config.presentation.controls[0].keys == ["Space"]


def test_json_build_file_is_accepted(tmp_path):
    build_file = tmp_path / "lovebuild.json"
    build_file.write_text(json.dumps({"presentation": {"title": "Json Game"}}), encoding="utf-8")

    assert load_build_config(build_file).presentation.title == "Json Game"


def test_empty_build_file_means_defaults(tmp_path):
    build_file = tmp_path / "lovebuild.yaml"
    build_file.write_text("", encoding="utf-8")

    config = load_build_config(build_file)

    assert config.include == ["main.lua", "conf.lua", "src"]
    assert config.root == tmp_path.resolve()


def test_missing_or_malformed_build_files_raise_config_error(tmp_path):
    with pytest.raises(ConfigError, match="not found"):
        load_build_config(tmp_path / "nope.yaml")

    broken = tmp_path / "broken.yaml"
    broken.write_text("include: [main.lua\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="Cannot read"):
        load_build_config(broken)

    listing = tmp_path / "list.yaml"
    listing.write_text("- main.lua\n", encoding="utf-8")
    with pytest.raises(ConfigError, match="mapping"):
        load_build_config(listing)


def test_default_config_round_trips_through_yaml(tmp_path):
    target = tmp_path / "lovebuild.yaml"

    build_yaml.dump(default_config_data(), target)

    assert parse_build_config(build_yaml.load(target)) == BuildConfig()


def test_yaml_module_rejects_unknown_formats():
    with pytest.raises(ValueError, match="Unknown data format"):
        build_yaml.loads("a: 1", format="toml")
    assert build_yaml.loads('{"a": 1}', format="json") == {"a": 1}
    assert build_yaml.loads("a: [1, 2]") == {"a": [1, 2]}
