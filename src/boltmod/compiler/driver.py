"""
Compiler Driver

Adapter between a build pipeline and the resolution engine: one entry file
in, one generated document (or diagnostics) out.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Optional, Union

from ..analysis.module_system import FileSourceLoader, MergedSymbolTable, ResolutionEngine, SourceLoader
from ..frontend.parser import Parser
from ..shared.errors import BoltError, ErrorReporter
from ..utils.config import OUTPUT_INDENT, ResolverConfig
from ..utils.io_utils import output_path_for, read_source_file, write_output_file
from .serialization import serialize_table

logger = logging.getLogger(__name__)

Generator = Callable[[MergedSymbolTable], Any]


class CompilationResult:
    """Compilation result"""
    def __init__(
        self,
        table: Optional[MergedSymbolTable] = None,
        output: Any = None,
        reporter: Optional[ErrorReporter] = None,
        success: bool = False
    ):
        self.table = table
        self.output = output
        self.reporter = reporter
        self.success = success

    def has_errors(self) -> bool:
        if self.reporter:
            return self.reporter.has_errors()
        return not self.success

    def get_errors(self) -> list:
        if self.reporter and self.reporter.has_errors():
            return [self.reporter.format_all_errors(color=False)]
        return []

    def to_json(self) -> str:
        """Generated output as JSON text (only meaningful on success)."""
        return json.dumps(self.output, indent=OUTPUT_INDENT)


class CompilerDriver:
    """
    Runs resolution then generation for one entry file.

    Failures never produce output: the result carries diagnostics instead,
    and compile_file() writes nothing.
    """

    def __init__(
        self,
        config: Optional[ResolverConfig] = None,
        loader: Optional[SourceLoader] = None,
        generator: Optional[Generator] = None,
        parser: Optional[Parser] = None,
    ):
        self.config = config if config is not None else ResolverConfig()
        self.loader = loader
        self.generator: Generator = generator or serialize_table
        self.parser = parser or Parser()

    def _engine(self, root_path: Optional[Path]) -> ResolutionEngine:
        loader = self.loader or FileSourceLoader(base_dir=root_path, file_extension=self.config.file_extension)
        return ResolutionEngine(loader, parser=self.parser, config=self.config)

    async def compile_async(
        self,
        source: str,
        source_file: str = "main.bolt",
        root_path: Optional[Path] = None,
    ) -> CompilationResult:
        """
        Resolve and generate.

        source_file is the entry's path as used for resolving its relative
        imports; root_path is the directory the file loader reads from.
        """
        reporter = ErrorReporter({source_file: source})
        engine = self._engine(root_path)
        try:
            table = await engine.resolve(source_file, source, source_files=reporter.source_files)
        except BoltError as e:
            logger.debug(f"Compilation of {source_file} failed: {e}")
            reporter.report_exception(e)
            return CompilationResult(reporter=reporter, success=False)

        output = self.generator(table)
        return CompilationResult(table=table, output=output, reporter=reporter, success=True)

    def compile(
        self,
        source: str,
        source_file: str = "main.bolt",
        root_path: Optional[Path] = None,
    ) -> CompilationResult:
        """Synchronous wrapper around compile_async()."""
        return asyncio.run(self.compile_async(source, source_file, root_path))

    def compile_file(
        self,
        path: Union[Path, str],
        output_path: Optional[Union[Path, str]] = None,
        write: bool = True,
    ) -> CompilationResult:
        """
        Compile an entry file from disk, writing `<name>.json` beside it
        (or to output_path) on success.

        Module paths are resolved relative to the working directory, like
        the scoped-import module root.
        """
        path = Path(path)
        source = read_source_file(path)
        result = self.compile(source, path.as_posix(), root_path=None)
        if result.success and write:
            target = Path(output_path) if output_path is not None else output_path_for(path, self.config.file_extension)
            write_output_file(target, result.to_json() + "\n")
            logger.debug(f"Wrote {target}")
        return result
