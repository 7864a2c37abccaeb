from __future__ import annotations

"""
Command Line Interface (CLI) Application Controller.

Orchestrates the CLI lifecycle: logging bootstrap, merging of option sources
(defaults, options file, command-line overrides), the compile run, writing
the bundle and its map, and result rendering.
"""

import json
import os
import sys
from dataclasses import asdict
from typing import Any, Dict, List, Optional

from jsconcat.core.engine import compile_code
from jsconcat.core.validator import validate_options
from jsconcat.domain.config import load_options_file
from jsconcat.domain.constants import MAP_SUFFIX
from jsconcat.domain.errors import ConcatError, MissingRequiredOption
from jsconcat.domain.models import CompileOptions, CompileResult
from jsconcat.infra.fs import read_text, relative_to, safe_mkdir, write_text
from jsconcat.infra.logging import LoggingConfig, configure_logging, get_default_log_path, get_logger
from jsconcat.interface.cli import args as cli_args

logger = get_logger(__name__)

# -----------------------------------------------------------------------------
# ENTRYPOINT ORCHESTRATOR
# -----------------------------------------------------------------------------

def main(argv: Optional[List[str]] = None) -> int:
    """
    Execute the CLI workflow.

    Args:
        argv: Optional list of command line arguments. Defaults to sys.argv.

    Returns:
        int: 0 on success, 1 on compile failure, 2 on invalid input, 130 if interrupted.
    """
    parser = cli_args.build_parser()
    args = parser.parse_args(argv)

    # 1. Logging bootstrap (console on stderr, optional file)
    log_level = "DEBUG" if args.debug else "INFO"
    configure_logging(LoggingConfig(level=log_level, console=True, log_file=_resolve_log_file(args.log_file)))

    # 2. Option sources: options file, then command-line overrides
    base_conf: Dict[str, Any] = load_options_file(args.config_file) if args.config_file else {}
    raw_conf = _merge_config(base_conf, cli_args.args_to_overrides(args))

    if args.input_source_map:
        try:
            raw_conf["input_source_map"] = read_text(args.input_source_map)
        except OSError as e:
            return _fail(f"Cannot read input source map '{args.input_source_map}': {e}", 2)

    try:
        opts, _ = validate_options(raw_conf)
    except (MissingRequiredOption, TypeError, ValueError) as e:
        return _fail(str(e), 2)

    if args.dump_config:
        dumped = asdict(opts)
        dumped["input_source_map"] = opts.input_source_map is not None
        print(json.dumps(dumped, ensure_ascii=False, indent=2))
        return 0

    # 3. Pre-flight input verification
    if not os.path.isfile(opts.file):
        return _fail(f"Input file does not exist: {opts.file}", 2)

    # 4. Compile
    try:
        result = compile_code(read_text(opts.file), opts)
    except ConcatError as e:
        where = e.location()
        logger.error(f"{where}: {e}" if where else str(e))
        print(f"ERROR: {where}: {e}" if where else f"ERROR: {e}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        print("Interrupted.", file=sys.stderr)
        return 130

    # 5. Persist artifacts
    map_path = opts.output + MAP_SUFFIX if result.map is not None else None
    ok, err = safe_mkdir(os.path.dirname(opts.output))
    if not ok:
        return _fail(f"Failed to create output directory: {err}", 1)
    try:
        write_text(opts.output, result.code)
        if map_path:
            write_text(map_path, result.map or "")
    except OSError as e:
        return _fail(f"Failed to write output: {e}", 1)

    # 6. Render summary
    if args.json_output:
        print(json.dumps(_summary(result, opts, map_path), ensure_ascii=False, indent=2))
    else:
        _print_human_summary(result, opts, map_path)

    return 0

# -----------------------------------------------------------------------------
# CONFIGURATION MERGING
# -----------------------------------------------------------------------------

def _resolve_log_file(value: Optional[str]) -> Optional[str]:
    """Map `--log-file` without a value onto the default log location."""
    if value is None:
        return None
    return value or get_default_log_path()


def _merge_config(base: Dict[str, Any], overrides: Dict[str, Any]) -> Dict[str, Any]:
    """Overlay overrides on the base options, skipping unset (None) values."""
    out = dict(base)
    for k, v in overrides.items():
        if v is not None:
            out[k] = v
    return out

# -----------------------------------------------------------------------------
# VIEW RENDERING
# -----------------------------------------------------------------------------

def _summary(result: CompileResult, opts: CompileOptions, map_path: Optional[str]) -> Dict[str, Any]:
    out_dir = os.path.dirname(opts.output)
    return {
        "ok": True,
        "output": opts.output,
        "map": map_path,
        "lines": result.code.count("\n") + 1 if result.code else 0,
        "sources": [relative_to(s, out_dir) for s in result.sources],
    }


def _print_human_summary(result: CompileResult, opts: CompileOptions, map_path: Optional[str]) -> None:
    print(f"Bundle written: {opts.output}")
    if map_path:
        print(f"Source map written: {map_path}")
    print(f"Files concatenated: {len(result.sources)}")
    for source in result.sources:
        print(f"  - {relative_to(source, opts.root_dir)}")


def _fail(msg: str, code: int) -> int:
    logger.error(msg)
    print(f"ERROR: {msg}", file=sys.stderr)
    return code


if __name__ == "__main__":
    sys.exit(main())
