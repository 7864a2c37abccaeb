from __future__ import annotations

"""
jsconcat: directive-driven script concatenation with composed source maps.
"""

from jsconcat.core.engine import compile_async, compile_code
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
from jsconcat.domain.models import CompileOptions, CompileResult, OutputPosition

__version__ = "1.0.0"

__all__ = [
    "compile_code",
    "compile_async",
    "CompileOptions",
    "CompileResult",
    "OutputPosition",
    "ConcatError",
    "MissingRequiredOption",
    "FileNotFound",
    "GlobNoMatch",
    "SelfInclusion",
    "CyclicInclusion",
    "IncludeReadError",
    "MapParseFailure",
]
