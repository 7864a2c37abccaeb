from __future__ import annotations

"""
Domain Constants.

Centralizes the directive grammar, the source-map reference pattern and the
on-disk conventions (extension, adjacent map suffix) shared by the scanner,
the resolver and the composer.
"""

import re
from typing import Tuple

# -----------------------------------------------------------------------------
# FILE CONVENTIONS
# -----------------------------------------------------------------------------
DEFAULT_EXTENSION = ".js"
MAP_SUFFIX = ".map"
PARTIAL_PREFIX = "_"
WILDCARD_CHARS = "*?["

# -----------------------------------------------------------------------------
# DIRECTIVE GRAMMAR
# -----------------------------------------------------------------------------
VENDOR_PREFIXES: Tuple[str, ...] = ("prepros-", "codekit-")

KIND_APPEND = "append"
KIND_PREPEND = "prepend"

_VENDOR_GROUP = "|".join(re.escape(p) for p in VENDOR_PREFIXES)

# `//@append a.js`, `// @codekit-prepend "b.js";`
DIRECTIVE_RX: re.Pattern = re.compile(
    rf"^\s*//\s*@(?:{_VENDOR_GROUP})?(?P<kind>{KIND_APPEND}|{KIND_PREPEND})\b(?P<rest>.*)$"
)

# `//# sourceMappingURL=x.js.map` and the legacy `//@` form
MAP_REFERENCE_RX: re.Pattern = re.compile(r"^\s*//\s*[@#]\s*sourceMappingURL=")

QUIET_PREFIX_RX: re.Pattern = re.compile(r"^quiet\s+")
QUIET_SUFFIX_RX: re.Pattern = re.compile(r"\s+quiet$")

# Characters removed from every directive entry
STRIP_CHARS_RX: re.Pattern = re.compile(r"[;'\"]")

# -----------------------------------------------------------------------------
# OUTPUT
# -----------------------------------------------------------------------------
SOURCE_MAP_VERSION = 3
MAP_MARKER_TEMPLATE = "//# sourceMappingURL={name}"
