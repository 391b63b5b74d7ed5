"""
Module Path Resolution

Pure path resolution for rules-file imports. Computes the canonical
(extension-less, '/'-separated) module path an import refers to.

This class is stateless apart from its configuration and can be shared.
"""

import logging
from dataclasses import dataclass
from typing import List, Tuple

from ...shared.nodes import ImportSpecifier
from ...utils.config import (
    CURRENT_DIR_SEGMENT,
    DEFAULT_MODULE_ROOT,
    FILE_EXTENSION,
    PARENT_DIR_SEGMENT,
    PATH_SEPARATOR,
    SCOPED_INDEX_NAME,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResolutionContext:
    """Directory that relative imports of one module are resolved from."""
    current_directory: Tuple[str, ...]

    @classmethod
    def for_module(cls, canonical_path: str) -> "ResolutionContext":
        segments = canonical_path.split(PATH_SEPARATOR)
        return cls(current_directory=tuple(segments[:-1]))


class PathResolver:
    """
    Resolves import specifiers to canonical module paths:
    - {'libfoo'}        -> <module_root>/libfoo/index
    - {'../shared/x'}   from proj/rules/base -> proj/shared/x
    - {'./sibling'}     from proj/rules/base -> proj/rules/sibling

    No I/O: a path that points nowhere (e.g. ascending past the root) is
    returned as computed and fails later when the loader cannot find it.
    """

    def __init__(self, module_root: str = DEFAULT_MODULE_ROOT, file_extension: str = FILE_EXTENSION):
        self.module_root = module_root.rstrip(PATH_SEPARATOR) or module_root
        self.file_extension = file_extension

    def canonicalize(self, path: str) -> str:
        """Canonical module path for a file path: '/' separators, no extension."""
        path = path.replace("\\", PATH_SEPARATOR)
        if self.file_extension and path.endswith(self.file_extension):
            path = path[: -len(self.file_extension)]
        return path

    def resolve(self, importer_path: str, spec: ImportSpecifier) -> str:
        """
        Canonical path of the module `spec` refers to when imported from
        the module at canonical path `importer_path`.
        """
        target = self.canonicalize(spec.target_path)
        if spec.is_scoped:
            resolved = PATH_SEPARATOR.join((self.module_root, target, SCOPED_INDEX_NAME))
        else:
            context = ResolutionContext.for_module(importer_path)
            resolved = self._resolve_relative(context, target)
        logger.debug(f"PathResolver: {spec.target_path!r} from {importer_path!r} -> {resolved!r}")
        return resolved

    def _resolve_relative(self, context: ResolutionContext, target: str) -> str:
        directory: List[str] = list(context.current_directory)
        rel: List[str] = target.split(PATH_SEPARATOR)

        # One level of ascent per leading '..'
        while rel and rel[0] == PARENT_DIR_SEGMENT:
            if directory:
                directory.pop()
            rel.pop(0)

        # Only a single leading '.' is dropped: './././x' keeps './x'
        if rel and rel[0] == CURRENT_DIR_SEGMENT:
            rel.pop(0)

        return PATH_SEPARATOR.join(directory + rel)
