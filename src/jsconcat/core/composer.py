from __future__ import annotations

"""
Source Joiner and Position Map Composer.

Concatenates the flattened units of an inclusion tree. Directive lines and
existing source map references are dropped. In map mode every retained
output line is traced back through the unit's own input map (if any) to its
true original file, and the traces are serialized as a single map.
"""

import logging
import os
from typing import Dict, List, Sequence, Tuple

from jsconcat.core.codec import InputMapReader, encode_line_mappings, serialize_map
from jsconcat.core.scanner import is_stripped_line
from jsconcat.domain.constants import MAP_MARKER_TEMPLATE, MAP_SUFFIX
from jsconcat.domain.models import CompileResult, OutputPosition, SourceUnit
from jsconcat.infra.fs import relative_to

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def join_units(
        units: Sequence[SourceUnit],
        *,
        emit_map: bool,
        output: str,
) -> CompileResult:
    """
    Join units in emission order.

    Args:
        units: Flattened units (prepends, self, appends, recursively).
        emit_map: Enables map mode.
        output: Bundle location; map sources are made relative to its directory.

    Returns:
        CompileResult: Code, and in map mode the serialized map and the
                       origin of every output line.
    """
    sources = [unit.path for unit in units]
    logger.debug(f"Joining {len(units)} unit(s), map mode: {emit_map}")
    if not emit_map:
        return CompileResult(code=join_without_map(units), sources=sources)

    code, positions = join_with_map(units)
    code += MAP_MARKER_TEMPLATE.format(name=os.path.basename(output) + MAP_SUFFIX)
    return CompileResult(
        code=code,
        map=build_map(positions, output),
        positions=positions,
        sources=sources,
    )


def retained_lines(unit: SourceUnit) -> List[Tuple[int, str]]:
    """
    Lines of a unit that reach the output.

    Returns:
        List[Tuple[int, str]]: (0-based line index in the unit, line text).
    """
    return [
        (index, line)
        for index, line in enumerate(unit.code.split("\n"))
        if not is_stripped_line(line)
    ]


# -----------------------------------------------------------------------------
# NO-MAP MODE
# -----------------------------------------------------------------------------

def join_without_map(units: Sequence[SourceUnit]) -> str:
    """Concatenate the retained lines of all units with single newlines."""
    lines: List[str] = []
    for unit in units:
        lines.extend(line for _, line in retained_lines(unit))
    return "\n".join(lines)


# -----------------------------------------------------------------------------
# MAP MODE
# -----------------------------------------------------------------------------

def join_with_map(units: Sequence[SourceUnit]) -> Tuple[str, List[OutputPosition]]:
    """
    Concatenate units while tracing each output line to its origin.

    Each retained line is followed by a newline. The input map of a unit is
    decoded on entry to its block and released when its lines are done,
    including when an exception escapes.
    """
    chunks: List[str] = []
    positions: List[OutputPosition] = []

    for unit in units:
        with InputMapReader(unit.input_map, label=unit.path) as reader:
            for index, line in retained_lines(unit):
                positions.append(_trace_line(unit, reader, index, line))
                chunks.append(line)
                chunks.append("\n")

    return "".join(chunks), positions


def build_map(positions: Sequence[OutputPosition], output: str) -> str:
    """
    Serialize output positions as a Source Map v3 document.

    Source paths are made relative to the output directory with forward
    slashes, in order of first use.
    """
    output_dir = os.path.dirname(os.path.abspath(output))
    source_ids: Dict[str, int] = {}
    segments: List[Tuple[int, int, int]] = []

    for position in positions:
        rel = relative_to(position.source_path, output_dir)
        source_id = source_ids.setdefault(rel, len(source_ids))
        segments.append((source_id, position.line - 1, position.column - 1))

    return serialize_map(
        file=os.path.basename(output),
        sources=list(source_ids),
        mappings=encode_line_mappings(segments),
    )


# -----------------------------------------------------------------------------
# PRIVATE HELPERS
# -----------------------------------------------------------------------------

def _trace_line(
        unit: SourceUnit,
        reader: InputMapReader,
        index: int,
        line: str,
) -> OutputPosition:
    """
    Resolve the origin of one retained line.

    Without a usable mapping the origin is the unit itself at column 1.
    Mapped sources are relative to the unit's own location, not to the
    output, so they are re-anchored on the unit's directory.
    """
    token = reader.first_mapping(index, len(line))
    if token is None:
        return OutputPosition(line=index + 1, column=1, source_path=unit.path)

    return OutputPosition(
        line=token.src_line + 1,
        column=token.src_col + 1,
        source_path=_resolve_mapped_source(unit.path, token.src),
    )


def _resolve_mapped_source(unit_path: str, source: str) -> str:
    source = source.replace("\\", "/")
    if source.startswith("file://"):
        source = source[len("file://"):]
    return os.path.normpath(os.path.join(os.path.dirname(unit_path), source))

