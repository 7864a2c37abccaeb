from __future__ import annotations

"""
Concatenation Error Taxonomy.

Every failure raised while resolving or composing a bundle is a ConcatError
carrying the offending file, the 1-based directive line and the column. The
location is attached once, at the point of failure, and never overwritten by
enclosing recursion frames.
"""

from typing import Optional


class ConcatError(Exception):
    """
    Base class for structured compile failures.

    Attributes:
        message: Human-readable description.
        file: Absolute path of the file holding the failing directive.
        line: 1-based line of the failing directive.
        column: Always 1 once annotated.
        cause: Lower-level exception that triggered the failure, if any.
    """

    def __init__(
            self,
            message: str,
            *,
            file: Optional[str] = None,
            line: Optional[int] = None,
            column: Optional[int] = None,
            cause: Optional[BaseException] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.file = file
        self.line = line
        self.column = column
        self.cause = cause

    @property
    def is_annotated(self) -> bool:
        return self.file is not None

    def annotate(self, file: str, line: int, column: int = 1) -> ConcatError:
        """
        Attach the failure location unless one is already set.

        Returns:
            ConcatError: The same instance, to allow `raise err.annotate(...)`.
        """
        if not self.is_annotated:
            self.file = file
            self.line = line
            self.column = column
        return self

    def location(self) -> str:
        """Render `file:line:column`, or an empty string when unannotated."""
        if not self.is_annotated:
            return ""
        return f"{self.file}:{self.line}:{self.column}"

    def __str__(self) -> str:
        return self.message


class MissingRequiredOption(ConcatError):
    """A required option is absent or has the wrong shape."""


class FileNotFound(ConcatError):
    """No candidate file exists for an include spec."""


class GlobNoMatch(ConcatError):
    """A wildcard include spec expanded to zero source files."""


class SelfInclusion(ConcatError):
    """A file includes itself."""


class CyclicInclusion(ConcatError):
    """A file includes one of the files that transitively included it."""


class IncludeReadError(ConcatError):
    """A resolved include exists but could not be read."""


class MapParseFailure(ConcatError):
    """The root input position map is malformed."""
