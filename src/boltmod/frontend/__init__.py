"""Frontend: rules-file parsing."""

from .parser import Parser, ParseError

__all__ = ["Parser", "ParseError"]
