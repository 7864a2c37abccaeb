from __future__ import annotations

"""
Core compile orchestration.

This module coordinates one compile run:
1. Validates the root content and the options (before any I/O).
2. Decodes the root input map, if one was supplied.
3. Builds the inclusion tree from the root file's directives.
4. Flattens the tree into emission order.
5. Joins the units into code and, in map mode, a composed map.
"""

import asyncio
import logging
import time
from typing import Any, Mapping, Optional, Union

from jsconcat.core.builder import TreeBuilder
from jsconcat.core.codec import InvalidSourceMap, parse_source_map
from jsconcat.core.composer import join_units
from jsconcat.core.validator import validate_code, validate_options
from jsconcat.domain.errors import MapParseFailure
from jsconcat.domain.models import CompileOptions, CompileResult, SourceUnit
from jsconcat.infra.fs import display_path

logger = logging.getLogger(__name__)

OptionsLike = Union[Mapping[str, Any], CompileOptions, None]


def compile_code(code: Any, options: OptionsLike = None) -> CompileResult:
    """
    Resolve the directives of `code` and produce the merged bundle.

    Args:
        code: Content of the root file (already read, possibly transformed).
        options: Compile options; `file` and `output` are required.

    Returns:
        CompileResult: Merged code, plus the composed map in map mode.

    Raises:
        MissingRequiredOption: Invalid options or non-text code.
        MapParseFailure: The supplied root input map is malformed.
        ConcatError: Any resolution or read failure, annotated with the
                     file and directive line where it happened.
    """
    opts, _ = validate_options(options)
    code = validate_code(code)

    started = time.perf_counter()
    logger.info(f"Compiling {display_path(opts.file, opts.root_dir)}")

    root = SourceUnit(
        path=opts.file,
        code=code,
        input_map=_parse_root_map(opts),
        ancestors=(),
    )

    builder = TreeBuilder(
        root_dir=opts.root_dir,
        extension=opts.extension,
        read_maps=opts.source_map,
        max_workers=opts.max_workers,
    )
    tree = builder.build(root)
    units = tree.flatten()

    result = join_units(units, emit_map=opts.source_map, output=opts.output)

    elapsed = (time.perf_counter() - started) * 1000
    logger.info(f"Compiled {len(units)} file(s) in {elapsed:.1f} ms.")
    return result


async def compile_async(code: Any, options: OptionsLike = None) -> CompileResult:
    """
    Awaitable variant of compile_code for callers running an event loop.

    The compile runs on a worker thread; filesystem access is the only
    blocking work it does.
    """
    return await asyncio.to_thread(compile_code, code, options)


def _parse_root_map(opts: CompileOptions) -> Optional[Any]:
    """Decode the caller-supplied root map in map mode. A malformed root map is fatal."""
    if opts.input_source_map is None or not opts.source_map:
        return None
    try:
        return parse_source_map(opts.input_source_map)
    except InvalidSourceMap as e:
        raise MapParseFailure(
            f"Unable to parse the input source map of `{display_path(opts.file, opts.root_dir)}`",
            file=opts.file,
            line=1,
            column=1,
            cause=e,
        ) from e
