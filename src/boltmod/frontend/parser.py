"""
Parser

Lark-based parser for the declaration structure of a rules file.
"""

import logging
from pathlib import Path
from typing import Optional, Tuple

from lark import Lark
from lark.exceptions import UnexpectedCharacters, UnexpectedInput, UnexpectedToken, VisitError

from ..shared.errors import BoltError
from ..shared.nodes import SourceUnit
from ..shared.source_location import SourceLocation
from ..utils.config import DEFAULT_PARSER_CACHE_FILE
from .transformers import DeclarationTransformer

logger = logging.getLogger("boltmod.frontend.parser")

_MAX_EXPECTED_SHOWN = 6


class ParseError(BoltError):
    """Parse error with source location"""
    error_code = "E0001"

    def __init__(
        self,
        message: str,
        source_file: str,
        location: Optional[SourceLocation] = None,
        import_chain: Tuple[str, ...] = (),
        help: Optional[str] = None,
    ):
        super().__init__(message, location)
        self.source_file = source_file
        self.import_chain = tuple(import_chain)
        self.help_text = help

    def __str__(self):
        where = str(self.location) if self.location else self.source_file
        return f"{self.message} in {where}"


def _describe_unexpected(e: UnexpectedInput) -> str:
    if isinstance(e, UnexpectedToken):
        if e.token.type == "$END":
            return "unexpected end of input"
        return f"unexpected token '{e.token}'"
    if isinstance(e, UnexpectedCharacters):
        return f"unexpected character '{e.char}'"
    return "unexpected input"


def _expected_hint(e: UnexpectedInput) -> Optional[str]:
    expected = getattr(e, "expected", None) or getattr(e, "allowed", None)
    if not expected:
        return None
    names = sorted(str(x) for x in expected)
    shown = ", ".join(names[:_MAX_EXPECTED_SHOWN])
    if len(names) > _MAX_EXPECTED_SHOWN:
        shown += ", ..."
    return f"expected one of: {shown}"


class Parser:
    """
    Parses rules source text into a SourceUnit.

    The grammar is compiled once per Parser with LALR and Lark's on-disk
    cache; one Parser can be shared across files and compilations.
    """

    def __init__(self, cache_file: str = DEFAULT_PARSER_CACHE_FILE):
        grammar_path = Path(__file__).parent / "grammar.lark"
        self.parser = Lark.open(
            str(grammar_path),
            start='unit',
            parser='lalr',
            cache=cache_file,
            propagate_positions=True,
            maybe_placeholders=False,
        )

    def parse(self, source: str, source_file: str = "main.bolt") -> SourceUnit:
        """
        Parse source code into its imports and declarations.

        Raises:
            ParseError: if the text is not a well-formed rules file
        """
        try:
            tree = self.parser.parse(source)
            unit = DeclarationTransformer(source_file).transform(tree)
        except UnexpectedInput as e:
            # End-of-input tokens can carry '?' or -1 instead of a position
            line = e.line if isinstance(e.line, int) and e.line > 0 else 1
            column = e.column if isinstance(e.column, int) and e.column > 0 else 1
            location = SourceLocation(file=source_file, line=line, column=column)
            raise ParseError(
                _describe_unexpected(e), source_file, location, help=_expected_hint(e)
            ) from e
        except VisitError as e:
            raise ParseError(f"Parse error: {e.orig_exc}", source_file) from e

        logger.debug(f"Parsed {source_file}: {len(unit.imports)} imports, {unit.symbol_count()} symbols")
        return unit
