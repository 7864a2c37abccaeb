from __future__ import annotations

"""
Directive Scanner.

Pure functions that extract `append` / `prepend` directives from source text
and classify lines the composer has to drop (directives and source map
references). One pass, lines indexed from 1, no I/O.
"""

import logging
from typing import List, Optional, Tuple

from jsconcat.domain.constants import (
    DIRECTIVE_RX,
    KIND_APPEND,
    KIND_PREPEND,
    MAP_REFERENCE_RX,
    QUIET_PREFIX_RX,
    QUIET_SUFFIX_RX,
    STRIP_CHARS_RX,
)
from jsconcat.domain.models import Directive

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def scan_directives(code: str) -> List[Directive]:
    """
    Extract every include directive from a source text.

    Specs on one line keep their left-to-right order and directive lines keep
    their top-to-bottom order. A directive with nothing after the keyword
    contributes no spec.

    Args:
        code: Full source text.

    Returns:
        List[Directive]: Directives of both kinds, in source order.
    """
    directives: List[Directive] = []
    for index, line in enumerate(code.split("\n")):
        parsed = parse_directive_line(line)
        if parsed is None:
            continue
        kind, specs = parsed
        directives.extend(Directive(kind, spec, index + 1) for spec in specs)

    if directives:
        logger.debug(f"Scanned {len(directives)} include directive(s).")
    return directives


def partition_directives(directives: List[Directive]) -> Tuple[List[Directive], List[Directive]]:
    """Split directives into (prepends, appends), preserving order within each group."""
    prepends = [d for d in directives if d.kind == KIND_PREPEND]
    appends = [d for d in directives if d.kind == KIND_APPEND]
    return prepends, appends


def parse_directive_line(line: str) -> Optional[Tuple[str, List[str]]]:
    """
    Parse one line as a directive.

    Returns:
        Optional[Tuple[str, List[str]]]: (kind, specs) for a directive line,
                                         None for any other line.
    """
    match = DIRECTIVE_RX.match(line)
    if not match:
        return None
    return match.group("kind"), split_specs(match.group("rest"))


def split_specs(remainder: str) -> List[str]:
    """
    Split the text after a directive keyword into include specs.

    Quotes and semicolons are removed, entries are trimmed, the CodeKit
    `quiet` keyword is dropped and empty entries are discarded.
    """
    specs: List[str] = []
    for entry in STRIP_CHARS_RX.sub("", remainder).split(","):
        spec = entry.strip()
        spec = QUIET_PREFIX_RX.sub("", spec)
        spec = QUIET_SUFFIX_RX.sub("", spec).strip()
        if spec:
            specs.append(spec)
    return specs


# -----------------------------------------------------------------------------
# LINE CLASSIFICATION
# -----------------------------------------------------------------------------

def is_directive_line(line: str) -> bool:
    return DIRECTIVE_RX.match(line) is not None


def is_map_reference_line(line: str) -> bool:
    return MAP_REFERENCE_RX.match(line) is not None


def is_stripped_line(line: str) -> bool:
    """True for lines that never reach the output."""
    return is_directive_line(line) or is_map_reference_line(line)
