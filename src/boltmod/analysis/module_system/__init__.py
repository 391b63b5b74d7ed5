"""Module system: path resolution, source loading, symbol merging, import resolution."""

from .path_resolver import PathResolver, ResolutionContext
from .source_loader import SourceLoader, FileSourceLoader, InMemorySourceLoader
from .symbol_table import MergedSymbolTable
from .resolution_engine import ResolutionEngine

__all__ = [
    'PathResolver',
    'ResolutionContext',
    'SourceLoader',
    'FileSourceLoader',
    'InMemorySourceLoader',
    'MergedSymbolTable',
    'ResolutionEngine',
]
