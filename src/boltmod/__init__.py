"""
boltmod: multi-file module resolution for Bolt-style rules files.

    from boltmod import CompilerDriver
    result = CompilerDriver().compile_file("rules/main.bolt")
"""

from .analysis.module_system import (
    FileSourceLoader,
    InMemorySourceLoader,
    MergedSymbolTable,
    PathResolver,
    ResolutionEngine,
    SourceLoader,
)
from .compiler.driver import CompilationResult, CompilerDriver
from .frontend.parser import ParseError, Parser
from .shared.errors import (
    BoltError,
    NotFoundError,
    ResolutionCancelledError,
    ResolutionError,
    ResolutionTimeoutError,
    SourceReadError,
    SymbolConflictError,
)
from .utils.config import ConflictPolicy, ResolverConfig

__all__ = [
    "CompilerDriver",
    "CompilationResult",
    "ResolutionEngine",
    "PathResolver",
    "SourceLoader",
    "FileSourceLoader",
    "InMemorySourceLoader",
    "MergedSymbolTable",
    "Parser",
    "ParseError",
    "BoltError",
    "ResolutionError",
    "NotFoundError",
    "ResolutionTimeoutError",
    "SourceReadError",
    "SymbolConflictError",
    "ResolutionCancelledError",
    "ConflictPolicy",
    "ResolverConfig",
]
