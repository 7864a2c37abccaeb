from __future__ import annotations

"""
Unit tests for the concatenation domain models and the error taxonomy.
"""

import dataclasses

import pytest

from jsconcat.domain.errors import (
    ConcatError,
    CyclicInclusion,
    FileNotFound,
    GlobNoMatch,
    IncludeReadError,
    MapParseFailure,
    MissingRequiredOption,
    SelfInclusion,
)
from jsconcat.domain.models import CompileResult, Directive, IncludeNode, SourceUnit


def _node(name: str, prepends=(), appends=()) -> IncludeNode:
    return IncludeNode(unit=SourceUnit(path=name, code=""), prepends=tuple(prepends), appends=tuple(appends))


# -----------------------------------------------------------------------------
# MODELS
# -----------------------------------------------------------------------------

def test_flatten_emission_order() -> None:
    tree = _node(
        "root",
        prepends=[_node("p1", prepends=[_node("p1a")]), _node("p2")],
        appends=[_node("a1", appends=[_node("a1a")]), _node("a2", prepends=[_node("a2p")])],
    )
    assert [u.path for u in tree.flatten()] == ["p1a", "p1", "p2", "root", "a1", "a1a", "a2p", "a2"]


def test_child_ancestors_extends_chain() -> None:
    unit = SourceUnit(path="/b.js", code="", ancestors=("/a.js",))
    assert unit.child_ancestors() == ("/a.js", "/b.js")
    assert unit.ancestors == ("/a.js",)


def test_models_are_immutable() -> None:
    directive = Directive(kind="append", target_spec="a.js", line=1)
    with pytest.raises(dataclasses.FrozenInstanceError):
        directive.line = 2  # type: ignore[misc]


def test_compile_result_defaults_are_independent() -> None:
    first = CompileResult(code="")
    second = CompileResult(code="")
    first.sources.append("x")
    assert second.sources == []
    assert first.map is None


# -----------------------------------------------------------------------------
# ERRORS
# -----------------------------------------------------------------------------

@pytest.mark.parametrize("cls", [
    MissingRequiredOption, FileNotFound, GlobNoMatch, SelfInclusion,
    CyclicInclusion, IncludeReadError, MapParseFailure,
])
def test_error_kinds_share_base(cls) -> None:
    assert issubclass(cls, ConcatError)


def test_annotate_sets_location_once() -> None:
    err = FileNotFound("File `x.js` does not exist")
    assert not err.is_annotated
    assert err.location() == ""

    assert err.annotate("/inner.js", 4) is err
    err.annotate("/outer.js", 9)

    assert (err.file, err.line, err.column) == ("/inner.js", 4, 1)
    assert err.location() == "/inner.js:4:1"
    assert str(err) == "File `x.js` does not exist"


def test_cause_is_kept() -> None:
    cause = PermissionError("denied")
    err = IncludeReadError("Unable to read included file `a.js`", cause=cause)
    assert err.cause is cause
