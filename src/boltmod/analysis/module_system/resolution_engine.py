"""
Resolution Engine

Recursive, concurrent fetch -> parse -> merge over the import graph of one
entry file, producing a single MergedSymbolTable.

Concurrency model: one asyncio event loop. Loads are the only suspension
points; parsing, path resolution, visited bookkeeping and merging run
between two awaits and are therefore atomic with respect to each other.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set, Tuple

from ...frontend.parser import ParseError
from ...shared.errors import ResolutionCancelledError, ResolutionError, ResolutionTimeoutError
from ...shared.nodes import ImportSpecifier, SourceUnit
from ...utils.config import ResolverConfig
from .path_resolver import PathResolver
from .source_loader import SourceLoader
from .symbol_table import MergedSymbolTable

logger = logging.getLogger(__name__)


@dataclass
class _ResolutionState:
    """Everything shared by the branches of one resolve() call."""
    table: MergedSymbolTable
    visited: Set[str]
    cancelled: asyncio.Event
    source_files: Dict[str, str] = field(default_factory=dict)


class ResolutionEngine:
    """
    Builds the merged symbol table for an entry file and everything it
    transitively imports.

    - Every canonical path is marked visited before its load is issued, so
      cycles terminate and diamonds are fetched once.
    - Imports of one module load concurrently and are joined before that
      module counts as resolved.
    - The first failure anywhere trips a per-call cancellation token and
      cancels the still-running branches; resolve() then raises that
      failure with the import chain that led to it. No table is returned.
    """

    def __init__(
        self,
        loader: SourceLoader,
        parser: Optional[Any] = None,
        path_resolver: Optional[PathResolver] = None,
        config: Optional[ResolverConfig] = None,
    ):
        """
        Args:
            loader: SourceLoader used for every imported module
            parser: object with parse(text, source_file) -> SourceUnit (auto-created if None)
            path_resolver: PathResolver (built from config if None)
            config: ResolverConfig (defaults if None)
        """
        self.config = config if config is not None else ResolverConfig()
        self.loader = loader
        self.path_resolver = path_resolver or PathResolver(self.config.module_root, self.config.file_extension)
        if parser is None:
            from ...frontend.parser import Parser
            self.parser = Parser()
        else:
            self.parser = parser

    async def resolve(
        self,
        entry_path: str,
        entry_text: str,
        source_files: Optional[Dict[str, str]] = None,
    ) -> MergedSymbolTable:
        """
        Resolve `entry_text` (the contents of `entry_path`) and its imports.

        Args:
            entry_path: path of the entry file; its canonical form is the
                root of the resolution context
            entry_text: source of the entry file
            source_files: optional dict filled with every source text seen,
                keyed by file name, for diagnostics

        Raises:
            ParseError: a module in the graph is not well-formed
            ResolutionError: a module could not be loaded, timed out, or
                conflicts under ConflictPolicy.REJECT
        """
        canonical = self.path_resolver.canonicalize(entry_path)
        state = _ResolutionState(
            table=MergedSymbolTable(self.config.conflict_policy),
            visited={canonical},
            cancelled=asyncio.Event(),
            source_files=source_files if source_files is not None else {},
        )

        state.source_files[entry_path] = entry_text
        unit = self._parse(entry_text, entry_path, ())
        self._merge(state, unit, canonical, ())
        try:
            await self._resolve_imports(state, canonical, unit, (canonical,))
        except BaseException:
            state.cancelled.set()
            raise

        logger.debug(f"Resolved {entry_path}: {len(state.table.merged_paths)} modules, {len(state.table)} symbols")
        return state.table

    # =========================================================================
    # RECURSION
    # =========================================================================

    async def _resolve_imports(
        self,
        state: _ResolutionState,
        importer: str,
        unit: SourceUnit,
        chain: Tuple[str, ...],
    ) -> None:
        """Fan out over the imports of one module and join them."""
        branches: List[asyncio.Task] = []
        for spec in unit.imports:
            path = self.path_resolver.resolve(importer, spec)
            if path in state.visited:
                logger.debug(f"Skipping {path} imported by {importer}: already visited")
                continue
            state.visited.add(path)
            branches.append(asyncio.ensure_future(self._resolve_module(state, path, spec, chain)))

        if branches:
            await self._join(state, branches)

    async def _resolve_module(
        self,
        state: _ResolutionState,
        path: str,
        spec: ImportSpecifier,
        chain: Tuple[str, ...],
    ) -> None:
        """One branch: load, parse and merge `path`, then its own imports."""
        if state.cancelled.is_set():
            raise ResolutionCancelledError(path, chain)

        text = await self._fetch(path, spec, chain)
        if state.cancelled.is_set():
            raise ResolutionCancelledError(path, chain)

        source_file = path + self.config.file_extension
        state.source_files[source_file] = text
        unit = self._parse(text, source_file, chain)
        self._merge(state, unit, path, chain)
        await self._resolve_imports(state, path, unit, chain + (path,))

    async def _join(self, state: _ResolutionState, branches: List[asyncio.Task]) -> None:
        try:
            await asyncio.wait(branches, return_when=asyncio.FIRST_EXCEPTION)
        except asyncio.CancelledError:
            for task in branches:
                task.cancel()
            await asyncio.gather(*branches, return_exceptions=True)
            raise

        failures = [
            task.exception() for task in branches
            if task.done() and not task.cancelled() and task.exception() is not None
        ]
        if not failures:
            return

        state.cancelled.set()
        pending = [task for task in branches if not task.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.debug(f"Abandoning {len(pending)} in-flight branches after a failure")
            await asyncio.gather(*pending, return_exceptions=True)

        # A cancelled sibling is never the reason a resolution failed
        primary = next((e for e in failures if not isinstance(e, ResolutionCancelledError)), failures[0])
        raise primary

    # =========================================================================
    # STEPS
    # =========================================================================

    async def _fetch(self, path: str, spec: ImportSpecifier, chain: Tuple[str, ...]) -> str:
        timeout = self.config.fetch_timeout
        logger.debug(f"Fetching {path}")
        try:
            if timeout is None:
                return await self.loader.load(path)
            return await asyncio.wait_for(self.loader.load(path), timeout)
        except asyncio.TimeoutError:
            error = ResolutionTimeoutError(path, timeout, chain)
            error.location = spec.location
            raise error from None
        except ResolutionError as e:
            if not e.import_chain:
                e.import_chain = chain
            if e.location is None:
                e.location = spec.location
            raise

    def _parse(self, text: str, source_file: str, chain: Tuple[str, ...]) -> SourceUnit:
        try:
            return self.parser.parse(text, source_file)
        except ParseError as e:
            e.import_chain = chain
            raise

    def _merge(self, state: _ResolutionState, unit: SourceUnit, path: str, chain: Tuple[str, ...]) -> None:
        try:
            state.table.merge_unit(unit, path)
        except ResolutionError as e:
            e.import_chain = chain
            raise
