from __future__ import annotations

"""
Integration tests for the compile pipeline.

Runs compile_code end-to-end over real script trees on disk: directive
resolution, emission order, failure reporting and multi-stage position map
composition.
"""

import asyncio
import json
from pathlib import Path

import pytest

from jsconcat import (
    CompileOptions,
    CyclicInclusion,
    FileNotFound,
    GlobNoMatch,
    MapParseFailure,
    MissingRequiredOption,
    OutputPosition,
    SelfInclusion,
    compile_async,
    compile_code,
)


def _opts(root: Path, name: str = "main.js", **extra) -> dict:
    opts = {"file": str(root / name), "output": str(root / "out.js")}
    opts.update(extra)
    return opts


def _compile(root: Path, name: str = "main.js", **extra):
    code = (root / name).read_text(encoding="utf-8")
    return compile_code(code, _opts(root, name, **extra))


# -----------------------------------------------------------------------------
# CONCATENATION
# -----------------------------------------------------------------------------

def test_prepend_and_append_concrete_scenario(make_tree) -> None:
    root = make_tree({
        "main.js": "//@prepend zero.js\nconsole.log(1);\n//@append two.js",
        "zero.js": "console.log(0);",
        "two.js": "console.log(2);",
    })

    result = _compile(root)

    assert result.code == "console.log(0);\nconsole.log(1);\nconsole.log(2);"
    assert result.map is None


def test_partials_globs_and_nesting(make_tree) -> None:
    root = make_tree({
        "main.js": "//@prepend 'lib/util';\n//@append \"widgets/*.js\"\nmain();",
        "lib/_util.js": "//@prepend helpers\nutil();",
        "lib/helpers.js": "helpers();",
        "widgets/button.js": "button();",
        "widgets/README.md": "# not a script",
    })

    result = _compile(root)

    assert result.code == "helpers();\nutil();\nmain();\nbutton();"


def test_same_file_included_twice_is_emitted_twice(make_tree) -> None:
    root = make_tree({"main.js": "//@append a.js\n//@append a.js\nmain();", "a.js": "a();"})
    assert _compile(root).code == "main();\na();\na();"


def test_root_content_is_taken_from_argument(make_tree) -> None:
    root = make_tree({"main.js": "on disk", "a.js": "a();"})
    result = compile_code("transformed();\n//@append a.js", _opts(root))

    assert result.code == "transformed();\na();"


def test_compile_accepts_validated_options(make_tree) -> None:
    root = make_tree({"main.js": "//@append a.js", "a.js": "a();"})
    opts = CompileOptions(file=str(root / "main.js"), output=str(root / "out.js"), root_dir=str(root))

    assert compile_code("main();\n//@append a.js", opts).code == "main();\na();"


def test_concurrent_compile_matches_sequential(make_tree) -> None:
    files = {"main.js": "//@prepend " + ", ".join(f"p{i}" for i in range(8)) + "\nmain();"}
    files.update({f"p{i}.js": f"//@append q{i}\np{i}();" for i in range(8)})
    files.update({f"q{i}.js": f"q{i}();" for i in range(8)})
    root = make_tree(files)

    sequential = _compile(root)
    concurrent = _compile(root, max_workers=4)

    assert concurrent.code == sequential.code


def test_compile_async(make_tree) -> None:
    root = make_tree({"main.js": "//@append a.js\nmain();", "a.js": "a();"})
    code = (root / "main.js").read_text(encoding="utf-8")

    result = asyncio.run(compile_async(code, _opts(root)))

    assert result.code == "main();\na();"


# -----------------------------------------------------------------------------
# FAILURES
# -----------------------------------------------------------------------------

def test_missing_options_fail_before_io() -> None:
    with pytest.raises(MissingRequiredOption, match="`file` is required"):
        compile_code("x();", {})
    with pytest.raises(MissingRequiredOption, match="`output` is required"):
        compile_code("x();", {"file": "/nowhere/main.js"})


def test_self_inclusion(make_tree) -> None:
    root = make_tree({"main.js": "main();\n//@append main.js"})

    with pytest.raises(SelfInclusion) as exc_info:
        _compile(root)

    err = exc_info.value
    assert str(err) == "`main.js` can not be appended/prepended to itself"
    assert (err.file, err.line, err.column) == (str(root / "main.js"), 2, 1)


def test_parent_cycle(make_tree) -> None:
    root = make_tree({"main.js": "//@append child.js", "child.js": "//@prepend main.js"})

    with pytest.raises(CyclicInclusion) as exc_info:
        _compile(root)

    err = exc_info.value
    assert str(err) == "`child.js` can not append/prepend the parent file `main.js`"
    assert err.file == str(root / "child.js")
    assert err.line == 1


def test_missing_file_reports_directive_line(make_tree) -> None:
    root = make_tree({"main.js": "a();\nb();\nc();\nd();\n//@append nowhere.js"})

    with pytest.raises(FileNotFound) as exc_info:
        _compile(root)

    err = exc_info.value
    assert (err.file, err.line, err.column) == (str(root / "main.js"), 5, 1)
    assert "nowhere.js" in str(err)


def test_glob_without_matches(make_tree) -> None:
    root = make_tree({"main.js": "//@prepend vendor/*.js", "vendor/readme.txt": ""})

    with pytest.raises(GlobNoMatch) as exc_info:
        _compile(root)

    assert "vendor/*.js" in str(exc_info.value)


# -----------------------------------------------------------------------------
# POSITION MAPS
# -----------------------------------------------------------------------------

def test_map_mode_output_and_positions(make_tree) -> None:
    root = make_tree({"main.js": "//@prepend a.js\nmain();", "a.js": "a();\n//# sourceMappingURL=a.js.map"})

    result = _compile(root, source_map=True)

    assert result.code == "a();\nmain();\n//# sourceMappingURL=out.js.map"
    assert result.positions == [
        OutputPosition(1, 1, str(root / "a.js")),
        OutputPosition(2, 1, str(root / "main.js")),
    ]
    doc = json.loads(result.map)
    assert doc["file"] == "out.js"
    assert doc["sources"] == ["a.js", "main.js"]


def test_adjacent_map_resolves_to_original(make_tree) -> None:
    compiled_map = json.dumps({"version": 3, "sources": ["O.js"], "names": [], "mappings": "AAAA;AACA"})
    root = make_tree({
        "main.js": "//@append build/lib.js\nmain();",
        "build/lib.js": "one();\ntwo();",
        "build/lib.js.map": compiled_map,
    })

    result = _compile(root, source_map=True)

    original = str(root / "build" / "O.js")
    assert result.positions[1:] == [OutputPosition(1, 1, original), OutputPosition(2, 1, original)]
    assert json.loads(result.map)["sources"] == ["main.js", "build/O.js"]


def test_adjacent_map_ignored_without_map_mode(make_tree) -> None:
    root = make_tree({
        "main.js": "//@append lib.js",
        "lib.js": "lib();",
        "lib.js.map": "{broken",
    })
    assert _compile(root).code == "lib();"


def test_two_stage_build_resolves_through_both_layers(make_tree) -> None:
    root = make_tree({
        "stage1/entry.js": "//@prepend parts/one.js\nentry();",
        "stage1/parts/one.js": "one();",
    })
    stage1_code = (root / "stage1" / "entry.js").read_text(encoding="utf-8")
    stage1 = compile_code(stage1_code, {
        "file": str(root / "stage1" / "entry.js"),
        "output": str(root / "stage1" / "dist" / "bundle.js"),
        "source_map": True,
    })
    (root / "stage1" / "dist").mkdir()
    (root / "stage1" / "dist" / "bundle.js").write_text(stage1.code, encoding="utf-8")
    (root / "stage1" / "dist" / "bundle.js.map").write_text(stage1.map, encoding="utf-8")
    (root / "app.js").write_text("//@append stage1/dist/bundle.js\napp();", encoding="utf-8")

    stage2 = _compile(root, "app.js", source_map=True)

    assert stage2.positions == [
        OutputPosition(2, 1, str(root / "app.js")),
        OutputPosition(1, 1, str(root / "stage1" / "parts" / "one.js")),
        OutputPosition(2, 1, str(root / "stage1" / "entry.js")),
    ]
    assert json.loads(stage2.map)["sources"] == ["app.js", "stage1/parts/one.js", "stage1/entry.js"]


def test_root_input_map_is_honored(make_tree) -> None:
    root = make_tree({"main.js": "x();"})
    input_map = {"version": 3, "sources": ["main.ts"], "names": [], "mappings": "AAEE"}

    result = _compile(root, source_map=True, input_source_map=input_map)

    assert result.positions == [OutputPosition(3, 3, str(root / "main.ts"))]


def test_malformed_root_input_map_is_fatal(make_tree) -> None:
    root = make_tree({"main.js": "x();"})

    with pytest.raises(MapParseFailure) as exc_info:
        _compile(root, source_map=True, input_source_map="{not json")

    err = exc_info.value
    assert str(err) == "Unable to parse the input source map of `main.js`"
    assert (err.file, err.line, err.column) == (str(root / "main.js"), 1, 1)


def test_malformed_nested_map_degrades(make_tree) -> None:
    root = make_tree({
        "main.js": "//@append lib.js",
        "lib.js": "lib();",
        "lib.js.map": "{broken",
    })

    result = _compile(root, source_map=True)

    assert result.positions == [OutputPosition(1, 1, str(root / "lib.js"))]


@pytest.mark.parametrize("nested_map", [
    {"version": 3, "sources": ["a.js"], "names": [], "mappings": 5},
    {"version": 3, "sources": [7], "names": [], "mappings": "AAAA"},
])
def test_nested_map_with_wrong_field_types_degrades(make_tree, nested_map) -> None:
    root = make_tree({
        "main.js": "//@append lib.js",
        "lib.js": "lib();",
        "lib.js.map": json.dumps(nested_map),
    })

    result = _compile(root, source_map=True)

    assert result.positions == [OutputPosition(1, 1, str(root / "lib.js"))]


def test_root_map_with_wrong_field_types_is_fatal(make_tree) -> None:
    root = make_tree({"main.js": "x();"})
    input_map = {"version": 3, "sources": ["main.ts"], "names": [], "mappings": 5}

    with pytest.raises(MapParseFailure) as exc_info:
        _compile(root, source_map=True, input_source_map=input_map)

    assert (exc_info.value.line, exc_info.value.column) == (1, 1)
