from __future__ import annotations

"""
Concatenation Domain Data Models.

Defines the immutable value objects exchanged between the scanner, the
resolver, the tree builder and the composer, plus the public options and
result types of the compile operation.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional, Tuple

from jsconcat.domain.constants import DEFAULT_EXTENSION

# -----------------------------------------------------------------------------
# SCANNING
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class Directive:
    """
    A single include request found in a source file.

    Attributes:
        kind: Either 'append' or 'prepend'.
        target_spec: Raw target as written (file name, partial name or glob).
        line: 1-based line of the directive in the scanned file.
    """
    kind: str
    target_spec: str
    line: int


# -----------------------------------------------------------------------------
# INCLUSION TREE
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SourceUnit:
    """
    One loaded file taking part in the concatenation.

    Attributes:
        path: Absolute, normalized path of the file.
        code: Verbatim file content.
        input_map: Optional position map of the content (raw JSON text,
                   decoded dict or parsed map). None when absent.
        ancestors: Paths of every file that transitively included this one,
                   outermost first.
    """
    path: str
    code: str
    input_map: Optional[Any] = None
    ancestors: Tuple[str, ...] = ()

    def child_ancestors(self) -> Tuple[str, ...]:
        """Ancestor chain handed to the files this unit includes."""
        return self.ancestors + (self.path,)


@dataclass(frozen=True)
class IncludeNode:
    """A unit plus its ordered prepend and append subtrees."""
    unit: SourceUnit
    prepends: Tuple[IncludeNode, ...] = ()
    appends: Tuple[IncludeNode, ...] = ()

    def flatten(self) -> List[SourceUnit]:
        """
        Linearize the subtree in emission order.

        Prepended subtrees come first in directive order, then the unit
        itself, then the appended subtrees in directive order.
        """
        units: List[SourceUnit] = []
        for child in self.prepends:
            units.extend(child.flatten())
        units.append(self.unit)
        for child in self.appends:
            units.extend(child.flatten())
        return units


# -----------------------------------------------------------------------------
# COMPOSITION
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class OutputPosition:
    """
    True origin of one output line.

    Attributes:
        line: 1-based line in the original source.
        column: 1-based column in the original source.
        source_path: Absolute path of the original source.
    """
    line: int
    column: int
    source_path: str


@dataclass(frozen=True)
class CompileOptions:
    """
    Validated options of a compile run.

    Attributes:
        file: Absolute path of the root source.
        output: Absolute path of the bundle, used for relative map sources.
        root_dir: Directory used to shorten paths in error messages.
        source_map: Enables map mode.
        input_source_map: Position map of the root content, if any.
        extension: Accepted source extension for glob and name resolution.
        max_workers: Upper bound of concurrent sibling subtree builds.
    """
    file: str
    output: str
    root_dir: str
    source_map: bool = False
    input_source_map: Optional[Any] = None
    extension: str = DEFAULT_EXTENSION
    max_workers: int = 1


@dataclass(frozen=True)
class CompileResult:
    """
    Outcome of a compile run.

    Attributes:
        code: Concatenated output.
        map: Serialized position map, None when map mode is disabled.
        positions: Origin of every retained output line (map mode only).
        sources: Absolute paths of every unit, in emission order.
    """
    code: str
    map: Optional[str] = None
    positions: List[OutputPosition] = field(default_factory=list)
    sources: List[str] = field(default_factory=list)
