"""
Shared components: declaration nodes, source locations, errors.
"""

from .source_location import SourceLocation
from .errors import (
    Error, ErrorReporter, BoltError, ResolutionError, NotFoundError,
    ResolutionTimeoutError, SymbolConflictError, ResolutionCancelledError, SourceReadError,
)
from .nodes import (
    ImportSpecifier, SourceUnit, FunctionDef, SchemaDef, PathRuleDef, MethodDef,
    FUNCTIONS, SCHEMAS, PATH_RULES, NAMESPACES,
)
