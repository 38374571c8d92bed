import textwrap

from lovebuild.packaging.patches import (
    CONF_VERSION_PATCH,
    CONF_VERSION_PLACEHOLDER,
    ContentPatch,
    apply_patches,
    strip_conf_version,
)

from conftest import CONF_LUA


def test_conf_version_line_becomes_placeholder_comment():
    patched = strip_conf_version(CONF_LUA)

    original_lines = CONF_LUA.splitlines()
    patched_lines = patched.splitlines()
    assert len(patched_lines) == len(original_lines)
    assert patched_lines[2] == "    " + CONF_VERSION_PLACEHOLDER
    changed = [i for i, (a, b) in enumerate(zip(original_lines, patched_lines)) if a != b]
    assert changed == [2]
    assert 't.version' not in patched.replace(CONF_VERSION_PLACEHOLDER, "")


def test_strip_conf_version_is_idempotent():
    once = strip_conf_version(CONF_LUA)

    assert strip_conf_version(once) == once


def test_blank_lines_around_version_are_preserved():
    source = 'function love.conf(t)\n\n    t.version = "11.4"\n\n    t.console = false\nend\n'

    patched = strip_conf_version(source)

    assert patched == (
        "function love.conf(t)\n\n    "
        + CONF_VERSION_PLACEHOLDER
        + "\n\n    t.console = false\nend\n"
    )


def test_crlf_line_endings_survive():
    source = 'function love.conf(t)\r\n\tt.version = "11.4"\r\nend\r\n'

    patched = strip_conf_version(source)

    assert patched == "function love.conf(t)\r\n\t" + CONF_VERSION_PLACEHOLDER + "\r\nend\r\n"


def test_every_version_line_is_replaced_in_one_pass():
    source = 'if jit then\n    t.version = "11.4"\nelse\n    t.version = "11.5"\nend\n'

    once = strip_conf_version(source)

    assert once == (
        "if jit then\n    " + CONF_VERSION_PLACEHOLDER
        + "\nelse\n    " + CONF_VERSION_PLACEHOLDER + "\nend\n"
    )
    assert strip_conf_version(once) == once


def test_other_assignments_are_untouched():
    source = textwrap.dedent(
        """\
        t.versions = "11.4"
        local t_version = "11.4"
        -- t.version = "11.4" is what we target
        """
    )

    assert strip_conf_version(source) == source


def test_apply_patches_matches_exact_file_name_only():
    assert apply_patches("conf.lua", CONF_LUA, [CONF_VERSION_PATCH]) == strip_conf_version(CONF_LUA)
    assert apply_patches("myconf.lua", CONF_LUA, [CONF_VERSION_PATCH]) is None
    assert apply_patches("conf.lua.bak", CONF_LUA, [CONF_VERSION_PATCH]) is None


def test_apply_patches_runs_matching_rules_in_order():
    upper = ContentPatch("upper", lambda name: name.endswith(".lua"), str.upper)
    suffix = ContentPatch("suffix", lambda name: True, lambda text: text + "-- end\n")

    patched = apply_patches("conf.lua", "x = 1\n", [upper, suffix])

    assert patched == "X = 1\n-- end\n"
