"""
Source Location (Span)
"""

from dataclasses import dataclass


@dataclass(frozen=True)
class SourceLocation:
    """
    Position of a declaration or error inside a rules file.

    Lines and columns are 1-based, as reported by the lark parser.
    end_line/end_column are 0 when unknown. Frozen so locations can live
    inside the immutable declaration nodes.
    """
    file: str
    line: int
    column: int
    end_line: int = 0
    end_column: int = 0

    def __str__(self) -> str:
        """Format as file:line:column"""
        return f"{self.file}:{self.line}:{self.column}"
