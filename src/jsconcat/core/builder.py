from __future__ import annotations

"""
Inclusion Tree Builder.

Recursively loads every file reached through directives and assembles the
ordered inclusion tree. Sibling subtrees may be built concurrently; the tree
shape always follows directive order, never completion order.
"""

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from typing import Any, Callable, Dict, List, Sequence, Tuple

from jsconcat.core.resolver import PathResolver
from jsconcat.core.scanner import partition_directives, scan_directives
from jsconcat.domain.constants import DEFAULT_EXTENSION, MAP_SUFFIX
from jsconcat.domain.errors import IncludeReadError
from jsconcat.domain.models import Directive, IncludeNode, SourceUnit
from jsconcat.infra.fs import display_path, read_optional_text, read_text

logger = logging.getLogger(__name__)

# (absolute path, directive line)
_Target = Tuple[str, int]


class TreeBuilder:
    """
    Builds IncludeNode trees for one compile run.

    Attributes:
        root_dir: Directory used to shorten paths in error messages.
        extension: Accepted source extension.
        read_maps: Whether adjacent `<file>.map` files are loaded.
        max_workers: Concurrent sibling builds per node (1 = sequential).
    """

    def __init__(
            self,
            *,
            root_dir: str,
            extension: str = DEFAULT_EXTENSION,
            read_maps: bool = False,
            max_workers: int = 1,
    ) -> None:
        self.root_dir = root_dir
        self.extension = extension
        self.read_maps = read_maps
        self.max_workers = max(1, int(max_workers))

    # -------------------------------------------------------------------------
    # PUBLIC API
    # -------------------------------------------------------------------------

    def build(self, unit: SourceUnit) -> IncludeNode:
        """
        Build the inclusion subtree rooted at `unit`.

        All directives of the unit are resolved before any child is read, so
        self and cyclic inclusion fail without touching the target. Any
        failure aborts the whole build; there is no partial tree.
        """
        prepends, appends = partition_directives(scan_directives(unit.code))
        resolver = PathResolver(
            unit.path,
            root_dir=self.root_dir,
            ancestors=unit.ancestors,
            extension=self.extension,
        )

        prepend_targets = self._resolve_group(resolver, prepends)
        append_targets = self._resolve_group(resolver, appends)

        ancestors = unit.child_ancestors()
        tasks = [
            (lambda target=target: self._build_child(unit.path, target, ancestors))
            for target in prepend_targets + append_targets
        ]
        children = _run_ordered(tasks, max_workers=self.max_workers)

        split = len(prepend_targets)
        return IncludeNode(
            unit=unit,
            prepends=tuple(children[:split]),
            appends=tuple(children[split:]),
        )

    def load_unit(self, path: str, ancestors: Tuple[str, ...]) -> SourceUnit:
        """
        Read a file and, in map mode, its adjacent position map.

        A missing or unreadable map file means "no map". OSError from the
        source read propagates.
        """
        code = read_text(path)
        input_map = read_optional_text(path + MAP_SUFFIX) if self.read_maps else None
        if input_map is not None:
            logger.debug(f"Loaded adjacent map for {display_path(path, self.root_dir)}")
        return SourceUnit(path=path, code=code, input_map=input_map, ancestors=ancestors)

    # -------------------------------------------------------------------------
    # PRIVATE HELPERS
    # -------------------------------------------------------------------------

    def _resolve_group(self, resolver: PathResolver, directives: List[Directive]) -> List[_Target]:
        targets: List[_Target] = []
        for directive in directives:
            targets.extend((path, directive.line) for path in resolver.resolve(directive))
        return targets

    def _build_child(self, parent: str, target: _Target, ancestors: Tuple[str, ...]) -> IncludeNode:
        path, line = target
        try:
            child = self.load_unit(path, ancestors)
        except OSError as e:
            raise IncludeReadError(
                f"Unable to read included file `{display_path(path, self.root_dir)}`",
                cause=e,
            ).annotate(parent, line) from e
        return self.build(child)


# -----------------------------------------------------------------------------
# ORDERED EXECUTION
# -----------------------------------------------------------------------------

def _run_ordered(tasks: Sequence[Callable[[], Any]], *, max_workers: int) -> List[Any]:
    """
    Run tasks and return their results in submission order.

    With more than one worker the tasks run on a dedicated pool; the first
    failure cancels the tasks that have not started and is re-raised as is.
    """
    if not tasks:
        return []
    if max_workers <= 1 or len(tasks) == 1:
        return [task() for task in tasks]

    results: Dict[int, Any] = {}
    with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="TreeBuilder") as executor:
        future_to_index = {executor.submit(task): index for index, task in enumerate(tasks)}
        try:
            for future in as_completed(future_to_index):
                results[future_to_index[future]] = future.result()
        except BaseException:
            for future in future_to_index:
                future.cancel()
            raise

    return [results[index] for index in range(len(tasks))]
