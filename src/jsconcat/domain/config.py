from __future__ import annotations

"""
Compile Options Domain Management.

Provides the default option dictionary, the camelCase aliases accepted for
compatibility with existing build scripts, and loading of option files
used by the command line interface.
"""

import json
import logging
import os
from typing import Any, Dict, Mapping

from jsconcat.domain.constants import DEFAULT_EXTENSION

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Constants & Defaults
# -----------------------------------------------------------------------------
OPTION_ALIASES: Dict[str, str] = {
    "rootDir": "root_dir",
    "sourceMap": "source_map",
    "inputSourceMap": "input_source_map",
    "maxWorkers": "max_workers",
}

KNOWN_OPTIONS = (
    "file", "output", "root_dir", "source_map",
    "input_source_map", "extension", "max_workers",
)


def get_default_options() -> Dict[str, Any]:
    """
    Generate the default option values of a compile run.

    `file` and `output` have no meaningful default and stay None so the
    validator can report them as missing.

    Returns:
        Dict[str, Any]: Default option values.
    """
    return {
        "file": None,
        "output": None,
        "root_dir": None,
        "source_map": False,
        "input_source_map": None,
        "extension": DEFAULT_EXTENSION,
        "max_workers": 1,
    }


def canonicalize_keys(options: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Map camelCase aliases onto their snake_case option names.

    A snake_case key wins over its alias when both are present.
    """
    out: Dict[str, Any] = {}
    for key, value in options.items():
        canonical = OPTION_ALIASES.get(key, key)
        if canonical != key and canonical in options:
            continue
        out[canonical] = value
    return out


# -----------------------------------------------------------------------------
# Persistence Logic
# -----------------------------------------------------------------------------
def load_options_file(path: str) -> Dict[str, Any]:
    """
    Load a JSON object of compile options from disk.

    Args:
        path: Location of the option file.

    Returns:
        Dict[str, Any]: Canonicalized options, or an empty dict when the
                        file is missing, unreadable or not a JSON object.
    """
    if not os.path.exists(path):
        logger.warning(f"Options file not found: {path}")
        return {}

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, ValueError) as e:
        logger.error(f"Failed to load options file '{path}': {e}")
        return {}

    if not isinstance(data, dict):
        logger.warning(f"Options file '{path}' is not a JSON object. Ignoring it.")
        return {}

    return canonicalize_keys(data)
