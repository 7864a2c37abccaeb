from __future__ import annotations

"""
Include Path Resolver.

Turns the include specs of one file into concrete absolute paths. Handles
wildcard expansion, the `.js` / `_partial.js` naming conventions, and rejects
self and cyclic inclusion before any target is read, so recursion always
terminates.
"""

import logging
import os
from typing import List, Sequence

from jsconcat.domain.constants import DEFAULT_EXTENSION, PARTIAL_PREFIX, WILDCARD_CHARS
from jsconcat.domain.errors import (
    ConcatError,
    CyclicInclusion,
    FileNotFound,
    GlobNoMatch,
    SelfInclusion,
)
from jsconcat.domain.models import Directive
from jsconcat.infra.fs import display_path, expand_pattern, is_file

logger = logging.getLogger(__name__)


class PathResolver:
    """
    Resolves the directives of a single file.

    Attributes:
        file: Absolute path of the file whose directives are resolved.
        base_dir: Directory relative specs are resolved against.
        root_dir: Directory used to shorten paths in error messages.
        ancestors: Files that transitively included `file`, outermost first.
        extension: Accepted source extension.
    """

    def __init__(
            self,
            file: str,
            *,
            root_dir: str,
            ancestors: Sequence[str] = (),
            extension: str = DEFAULT_EXTENSION,
    ) -> None:
        self.file = file
        self.base_dir = os.path.dirname(file)
        self.root_dir = root_dir
        self.ancestors = tuple(ancestors)
        self.extension = extension

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def resolve(self, directive: Directive) -> List[str]:
        """
        Resolve one directive to the file(s) it includes.

        Every failure is annotated with this file, the directive line and
        column 1. An error that already carries a location keeps it.

        Raises:
            GlobNoMatch, FileNotFound, SelfInclusion, CyclicInclusion
        """
        try:
            files = self._resolve_spec(directive.target_spec)
            for path in files:
                self._check_inclusion(path)
        except ConcatError as err:
            raise err.annotate(self.file, directive.line)

        logger.debug(
            f"{self._display(self.file)}:{directive.line} "
            f"{directive.kind} '{directive.target_spec}' -> {len(files)} file(s)"
        )
        return files

    def candidate_names(self, spec: str) -> List[str]:
        """
        File names tried for a literal spec, in priority order.

        `name`, `name.js`, `_name`, `_name.js`; the variants that add the
        extension are skipped when the name already carries it.
        """
        name = os.path.basename(spec)
        names = [name]
        if not name.endswith(self.extension):
            names.append(name + self.extension)

        partial = PARTIAL_PREFIX + name
        names.append(partial)
        if not partial.endswith(self.extension):
            names.append(partial + self.extension)

        return list(dict.fromkeys(names))

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _resolve_spec(self, spec: str) -> List[str]:
        if any(ch in spec for ch in WILDCARD_CHARS):
            return self._resolve_glob(spec)
        return [self._resolve_literal(spec)]

    def _resolve_glob(self, pattern: str) -> List[str]:
        files = [
            path for path in expand_pattern(pattern, self.base_dir)
            if os.path.splitext(path)[1] == self.extension
        ]
        if not files:
            raise GlobNoMatch(f"Unable to find any files matching the pattern `{pattern}`")
        return files

    def _resolve_literal(self, spec: str) -> str:
        spec_dir = os.path.join(self.base_dir, os.path.dirname(spec))
        for name in self.candidate_names(spec):
            path = os.path.normpath(os.path.abspath(os.path.join(spec_dir, name)))
            if is_file(path):
                return path
        raise FileNotFound(f"Unable to find the included file `{spec}`")

    def _check_inclusion(self, path: str) -> None:
        if path == self.file:
            raise SelfInclusion(
                f"`{self._display(path)}` can not be appended/prepended to itself"
            )
        if path in self.ancestors:
            raise CyclicInclusion(
                f"`{self._display(self.file)}` can not append/prepend "
                f"the parent file `{self._display(path)}`"
            )

    def _display(self, path: str) -> str:
        return display_path(path, self.root_dir)
