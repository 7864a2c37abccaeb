from __future__ import annotations

"""
CLI Argument Definition and Mapping.

Defines the command-line schema and translates the parsed argparse namespace
into compile option overrides.
"""

import argparse
from typing import Any, Dict

# -----------------------------------------------------------------------------
# ARGUMENT DEFINITION
# -----------------------------------------------------------------------------

def build_parser() -> argparse.ArgumentParser:
    """
    Construct the argument parser for the jsconcat CLI.

    Returns:
        argparse.ArgumentParser: Configured parser instance.
    """
    p = argparse.ArgumentParser(
        prog="jsconcat",
        description="Inline files referenced by //@append and //@prepend directives.",
    )

    # --- Paths ---
    p.add_argument(
        "input",
        help="Root source file.",
    )
    p.add_argument(
        "-o", "--output",
        dest="output",
        default=None,
        help="Bundle path. The map is written next to it as <output>.map.",
    )
    p.add_argument(
        "--root-dir",
        dest="root_dir",
        default=None,
        help="Directory used to shorten paths in error messages.",
    )

    # --- Source maps ---
    p.add_argument(
        "--source-map",
        dest="source_map",
        action="store_true",
        help="Emit a composed source map.",
    )
    p.add_argument(
        "--input-source-map",
        dest="input_source_map",
        default=None,
        help="Existing map of the root file.",
    )

    # --- Resolution ---
    p.add_argument(
        "--ext",
        dest="extension",
        default=None,
        help="Accepted source extension (default: .js).",
    )
    p.add_argument(
        "-j", "--jobs",
        dest="max_workers",
        type=int,
        default=None,
        help="Resolve sibling includes on up to N threads.",
    )

    # --- Configuration and diagnostics ---
    p.add_argument(
        "--config",
        dest="config_file",
        default=None,
        help="JSON file with compile options.",
    )
    p.add_argument(
        "--dump-config",
        action="store_true",
        help="Print the effective options and exit.",
    )
    p.add_argument(
        "--json",
        dest="json_output",
        action="store_true",
        help="Print a JSON summary instead of a human-readable one.",
    )
    p.add_argument(
        "--log-file",
        dest="log_file",
        nargs="?",
        const="",
        default=None,
        help="Also write logs to this file. Without a value, logs go to the user data directory.",
    )
    p.add_argument(
        "--debug",
        action="store_true",
        help="Elevate logging verbosity to DEBUG.",
    )

    return p

# -----------------------------------------------------------------------------
# ARGUMENT MAPPING
# -----------------------------------------------------------------------------

def args_to_overrides(args: argparse.Namespace) -> Dict[str, Any]:
    """
    Translate the argparse Namespace into compile option overrides.

    Options the user did not pass are mapped to None so they do not shadow
    values from an options file.
    """
    overrides: Dict[str, Any] = {
        "file": args.input,
        "output": args.output,
        "root_dir": args.root_dir,
        "extension": args.extension,
        "max_workers": args.max_workers,
    }

    if args.source_map:
        overrides["source_map"] = True

    return overrides
