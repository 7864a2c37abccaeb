from __future__ import annotations

"""
Compile Options Validation Service.

Acts as the gatekeeper of the compile operation: required options are
enforced before any I/O happens, loosely typed values coming from build
scripts or the CLI are coerced, and defaults are injected.
"""

import logging
import os
from typing import Any, Dict, List, Mapping, Tuple, Union

from jsconcat.domain.config import KNOWN_OPTIONS, canonicalize_keys, get_default_options
from jsconcat.domain.errors import MissingRequiredOption
from jsconcat.domain.models import CompileOptions
from jsconcat.infra.fs import normalize_path

logger = logging.getLogger(__name__)


# -----------------------------------------------------------------------------
# PUBLIC API
# -----------------------------------------------------------------------------

def validate_code(code: Any) -> str:
    """Ensure the root content is text."""
    if not isinstance(code, str):
        raise MissingRequiredOption("`code` must be a string")
    return code


def validate_options(
        options: Union[Mapping[str, Any], CompileOptions, None],
        *,
        strict: bool = False,
) -> Tuple[CompileOptions, List[str]]:
    """
    Validate and normalize compile options.

    Args:
        options: Raw option mapping (snake_case or camelCase keys), or an
                 already validated CompileOptions instance.
        strict: If True, raise TypeError on type mismatch instead of coercing.

    Returns:
        Tuple[CompileOptions, List[str]]: Normalized options and warnings.

    Raises:
        MissingRequiredOption: If `file` or `output` is missing or not text.
    """
    if isinstance(options, CompileOptions):
        return options, []

    warnings: List[str] = []
    if options is None:
        options = {}
    if not isinstance(options, Mapping):
        raise MissingRequiredOption(
            f"Invalid options type: expected mapping, received {type(options).__name__}."
        )

    merged: Dict[str, Any] = get_default_options()
    merged.update(canonicalize_keys(options))

    for key in merged:
        if key not in KNOWN_OPTIONS:
            warnings.append(f"Unknown option '{key}' ignored.")

    file = _require_path(merged.get("file"), "file")
    output = _require_path(merged.get("output"), "output")

    file_abs = normalize_path(file, file)
    output_abs = normalize_path(output, output)

    root_dir = merged.get("root_dir")
    if root_dir is not None and not isinstance(root_dir, str):
        msg = f"Invalid field 'root_dir': expected str, received {type(root_dir).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using the file directory.")
        root_dir = None
    root_dir_abs = normalize_path(root_dir, os.path.dirname(file_abs))

    validated = CompileOptions(
        file=file_abs,
        output=output_abs,
        root_dir=root_dir_abs,
        source_map=_as_bool(merged.get("source_map"), False, "source_map", warnings, strict),
        input_source_map=merged.get("input_source_map"),
        extension=_as_extension(merged.get("extension"), warnings, strict),
        max_workers=_as_workers(merged.get("max_workers"), warnings, strict),
    )

    for warning in warnings:
        logger.warning(f"Option Warning: {warning}")

    return validated, warnings


# -----------------------------------------------------------------------------
# PRIVATE HELPERS: TYPE COERCION
# -----------------------------------------------------------------------------

def _require_path(value: Any, field: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise MissingRequiredOption(f"`{field}` is required")
    return value


def _as_bool(value: Any, fallback: bool, field: str, warnings: List[str], strict: bool) -> bool:
    """Coerce various input types into native booleans."""
    if isinstance(value, bool):
        return value
    if value is None:
        return fallback

    if not strict:
        if isinstance(value, (int, float)) and value in (0, 1):
            warnings.append(f"Field '{field}' converted from number {value} to bool.")
            return bool(value)
        if isinstance(value, str):
            s = value.strip().lower()
            if s in ("true", "1", "yes", "y", "on"):
                warnings.append(f"Field '{field}' converted from '{value}' to True.")
                return True
            if s in ("false", "0", "no", "n", "off"):
                warnings.append(f"Field '{field}' converted from '{value}' to False.")
                return False

    msg = f"Invalid field '{field}': expected bool, received {type(value).__name__}."
    if strict:
        raise TypeError(msg)
    warnings.append(f"{msg} Using fallback.")
    return fallback


def _as_extension(value: Any, warnings: List[str], strict: bool) -> str:
    """Ensure the extension is a dotted suffix such as '.js'."""
    fallback = get_default_options()["extension"]
    if value is None:
        return fallback
    if not isinstance(value, str) or not value.strip():
        msg = f"Invalid field 'extension': expected non-empty str, received {value!r}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using fallback.")
        return fallback

    ext = value.strip()
    if not ext.startswith("."):
        if strict:
            raise ValueError(f"Invalid extension '{value}': must start with '.'.")
        warnings.append(f"Extension '{value}' corrected to '.{ext}'.")
        ext = "." + ext
    return ext


def _as_workers(value: Any, warnings: List[str], strict: bool) -> int:
    if value is None:
        return 1
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        msg = f"Invalid field 'max_workers': expected int, received {type(value).__name__}."
        if strict:
            raise TypeError(msg)
        warnings.append(f"{msg} Using 1.")
        return 1

    try:
        workers = int(value)
    except ValueError:
        if strict:
            raise TypeError(f"Invalid field 'max_workers': '{value}' is not an integer.")
        warnings.append(f"Field 'max_workers' value '{value}' is not an integer. Using 1.")
        return 1

    if workers < 1:
        if strict:
            raise ValueError("Invalid field 'max_workers': must be >= 1.")
        warnings.append(f"Field 'max_workers' value {workers} below 1. Using 1.")
        return 1
    return workers
