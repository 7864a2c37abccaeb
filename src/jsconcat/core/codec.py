from __future__ import annotations

"""
Position Map Codec.

Bridges the composer and the Source Map v3 wire format. Decoding is delegated
to the `sourcemap` package; encoding writes the Base64 VLQ `mappings` string
for the one-segment-per-line maps the composer produces.
"""

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import sourcemap
from sourcemap.exceptions import SourceMapDecodeError

from jsconcat.domain.constants import SOURCE_MAP_VERSION

logger = logging.getLogger(__name__)

_BASE64_ALPHABET = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789+/"
_VLQ_SHIFT = 5
_VLQ_CONTINUATION = 1 << _VLQ_SHIFT
_VLQ_MASK = _VLQ_CONTINUATION - 1

# Failures surfaced by the decoder for malformed JSON, field types, mapping tables or index maps
_DECODE_ERRORS = (
    SourceMapDecodeError,
    ValueError,
    KeyError,
    TypeError,
    IndexError,
    AttributeError,
    NotImplementedError,
)


class InvalidSourceMap(ValueError):
    """Raised when raw map data cannot be decoded."""


# -----------------------------------------------------------------------------
# DECODING
# -----------------------------------------------------------------------------

def parse_source_map(raw: Any) -> Any:
    """
    Decode a position map.

    Args:
        raw: JSON text, a decoded JSON object, or an already parsed index.

    Returns:
        The decoded index; iterating it yields tokens with dst_line,
        dst_col, src, src_line and src_col (all 0-based).

    Raises:
        InvalidSourceMap: If the data is not a well-formed v3 map.
    """
    if hasattr(raw, "tokens"):
        return _check_sources(raw)
    if isinstance(raw, bytes):
        raw = raw.decode("utf-8", errors="replace")
    if isinstance(raw, dict):
        raw = json.dumps(raw)
    if not isinstance(raw, str):
        raise InvalidSourceMap(f"Unsupported source map type: {type(raw).__name__}")

    try:
        smap = sourcemap.loads(raw)
    except _DECODE_ERRORS as e:
        raise InvalidSourceMap(str(e)) from e
    return _check_sources(smap)


def _check_sources(smap: Any) -> Any:
    """Reject maps whose segments name a source that is not a string."""
    for token in smap:
        if token.src is not None and not isinstance(token.src, str):
            raise InvalidSourceMap(
                f"Invalid source entry {token.src!r} at generated line {token.dst_line + 1}"
            )
    return smap


class InputMapReader:
    """
    Scoped lookup over one unit's input map.

    Entering the context decodes the map and indexes its segments by
    generated position; leaving it drops the index. A map that fails to
    decode leaves the reader empty, so every lookup misses.

    Usage:
        with InputMapReader(unit.input_map, label=unit.path) as reader:
            token = reader.first_mapping(line_index, width)
    """

    def __init__(self, raw: Optional[Any], *, label: str = "") -> None:
        self.raw = raw
        self.label = label
        self._index: Optional[Dict[Tuple[int, int], Any]] = None

    def __enter__(self) -> InputMapReader:
        if self.raw is None:
            return self
        try:
            smap = parse_source_map(self.raw)
        except InvalidSourceMap as e:
            logger.warning(f"Ignoring malformed source map of '{self.label}': {e}")
            return self
        self._index = {(token.dst_line, token.dst_col): token for token in smap}
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self._index = None

    @property
    def active(self) -> bool:
        return self._index is not None

    def first_mapping(self, line_index: int, width: int) -> Optional[Any]:
        """
        Find the leftmost mapped column of a generated line.

        Scans columns 0..width left to right and returns the first segment
        that names a source. Costs O(width) per line.

        Args:
            line_index: 0-based generated line.
            width: Length of the generated line.
        """
        if self._index is None:
            return None
        for column in range(width + 1):
            token = self._index.get((line_index, column))
            if token is not None and token.src:
                return token
        return None


# -----------------------------------------------------------------------------
# ENCODING
# -----------------------------------------------------------------------------

def encode_vlq(value: int) -> str:
    """Encode one signed integer as a Base64 VLQ digit string."""
    vlq = (-value << 1) | 1 if value < 0 else value << 1
    digits: List[str] = []
    while True:
        digit = vlq & _VLQ_MASK
        vlq >>= _VLQ_SHIFT
        if vlq:
            digit |= _VLQ_CONTINUATION
        digits.append(_BASE64_ALPHABET[digit])
        if not vlq:
            return "".join(digits)


def encode_line_mappings(segments: Sequence[Tuple[int, int, int]]) -> str:
    """
    Encode one segment per generated line at generated column 0.

    Args:
        segments: (source index, 0-based source line, 0-based source column)
                  for each generated line, in order.

    Returns:
        str: The `mappings` field.
    """
    prev_source = prev_line = prev_column = 0
    lines: List[str] = []
    for source, line, column in segments:
        lines.append(
            encode_vlq(0)
            + encode_vlq(source - prev_source)
            + encode_vlq(line - prev_line)
            + encode_vlq(column - prev_column)
        )
        prev_source, prev_line, prev_column = source, line, column
    return ";".join(lines)


def serialize_map(file: str, sources: List[str], mappings: str) -> str:
    """Render a Source Map v3 document."""
    return json.dumps({
        "version": SOURCE_MAP_VERSION,
        "file": file,
        "sources": sources,
        "names": [],
        "mappings": mappings,
    })
