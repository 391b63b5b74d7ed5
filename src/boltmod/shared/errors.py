"""
Error Reporting

Diagnostics for multi-file rules compilation, rendered in rustc style:

    error[E0432]: module not found: 'proj/shared/x'
     --> proj/rules/base.bolt:1:1
      |
    1 | import {'../shared/x'}
      | ^^^^^^
      |
      = note: imported via proj/main -> proj/rules/base
"""

import os
import sys
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from .source_location import SourceLocation


# ---------------------------------------------------------------------------
# ANSI color helpers (disabled when NO_COLOR is set)
# ---------------------------------------------------------------------------

def _use_color() -> bool:
    if os.environ.get("NO_COLOR"):
        return False
    explicit = os.environ.get("BOLTMOD_COLOR", "").lower()
    if explicit in ("0", "false", "no", "never"):
        return False
    return sys.stderr.isatty()

_BOLD   = "\033[1m"
_RED    = "\033[31m"
_BLUE   = "\033[34m"
_CYAN   = "\033[36m"
_RESET  = "\033[0m"

def _style(text: str, *codes: str, color: bool = True) -> str:
    if not color:
        return text
    prefix = "".join(codes)
    return f"{prefix}{text}{_RESET}" if prefix else text


# ---------------------------------------------------------------------------
# Diagnostic dataclass
# ---------------------------------------------------------------------------

@dataclass
class Error:
    """A single user-facing compilation diagnostic."""
    message: str
    location: Optional[SourceLocation]
    code: Optional[str] = None
    help: Optional[str] = None
    note: Optional[str] = None
    label: Optional[str] = None


def _format_diagnostic(error: Error, source_files: Dict[str, str], color: bool = False) -> str:
    out: List[str] = []

    code_str = f"[{error.code}]" if error.code else ""
    out.append(
        _style(f"error{code_str}", _BOLD, _RED, color=color)
        + _style(f": {error.message}", _BOLD, color=color)
    )

    loc = error.location
    if loc is None:
        out.append(_style(" --> ", _BOLD, _BLUE, color=color) + "<unknown location>")
        _append_annotations(out, error, 1, color)
        return "\n".join(out)

    source = source_files.get(loc.file)
    src_lines = source.split("\n") if source is not None else []
    gw = max(len(str(loc.line)), 1)

    out.append(_style(" " * gw + "--> ", _BOLD, _BLUE, color=color) + str(loc))
    if 0 < loc.line <= len(src_lines):
        code_line = src_lines[loc.line - 1]
        col_start = max(loc.column, 1) - 1
        if loc.end_column > loc.column and loc.end_line in (0, loc.line):
            span_len = loc.end_column - loc.column
        else:
            span_len = _guess_span(code_line, col_start)
        carets = " " * col_start + "^" * max(1, span_len)
        if error.label:
            carets += f" {error.label}"
        out.append(_style(" " * (gw + 1) + "|", _BOLD, _BLUE, color=color))
        out.append(_style(str(loc.line).rjust(gw) + " | ", _BOLD, _BLUE, color=color) + code_line)
        out.append(
            _style(" " * (gw + 1) + "| ", _BOLD, _BLUE, color=color)
            + _style(carets, _BOLD, _RED, color=color)
        )

    _append_annotations(out, error, gw, color)
    return "\n".join(out)


def _guess_span(code_line: str, col_start: int) -> int:
    """Guess token length when end_column is unavailable."""
    if col_start >= len(code_line):
        return 1
    length = 0
    for ch in code_line[col_start:]:
        if ch in (" ", "\t", ";", ",", "(", ")", "{", "}"):
            break
        length += 1
    return max(1, length)


def _append_annotations(out: List[str], error: Error, gw: int, color: bool) -> None:
    if not (error.help or error.note):
        return
    pad = " " * (gw + 1)
    out.append(_style(pad + "|", _BOLD, _BLUE, color=color))
    if error.help:
        out.append(_style(f"{pad}= ", _BOLD, _CYAN, color=color) + _style("help: ", _BOLD, color=color) + error.help)
    if error.note:
        out.append(_style(f"{pad}= ", _BOLD, _CYAN, color=color) + _style("note: ", _BOLD, color=color) + error.note)


# ---------------------------------------------------------------------------
# ErrorReporter
# ---------------------------------------------------------------------------

class ErrorReporter:
    """Collects diagnostics for one compilation and renders them."""

    def __init__(self, source_files: Optional[Dict[str, str]] = None):
        self.source_files: Dict[str, str] = source_files if source_files is not None else {}
        self.errors: List[Error] = []

    def report_error(
        self,
        message: str,
        location: Optional[SourceLocation],
        code: Optional[str] = None,
        help: Optional[str] = None,
        note: Optional[str] = None,
        label: Optional[str] = None,
    ) -> None:
        self.errors.append(Error(message=message, location=location, code=code,
                                 help=help, note=note, label=label))

    def report_exception(self, exc: "BoltError") -> None:
        """Turn a raised BoltError into a diagnostic."""
        chain = getattr(exc, "import_chain", ())
        note = f"imported via {' -> '.join(chain)}" if chain else None
        self.report_error(
            exc.message,
            exc.location,
            code=exc.error_code,
            help=getattr(exc, "help_text", None),
            note=note,
        )

    def format_error(self, error: Error, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        return _format_diagnostic(error, self.source_files, color=use_color)

    def format_all_errors(self, color: Optional[bool] = None) -> str:
        use_color = color if color is not None else _use_color()
        parts = [self.format_error(e, color=use_color) for e in self.errors]
        count = len(self.errors)
        summary = f"aborting due to {count} previous error{'s' if count != 1 else ''}"
        parts.append(
            _style("error", _BOLD, _RED, color=use_color)
            + _style(f": {summary}", _BOLD, color=use_color)
        )
        return "\n\n".join(parts)

    def has_errors(self) -> bool:
        return len(self.errors) > 0

    def print_errors(self) -> None:
        if self.errors:
            print(self.format_all_errors(), file=sys.stderr)


# ============================================================================
# Exception Classes
# ============================================================================

class BoltError(Exception):
    """Base exception for all boltmod errors"""
    error_code = "E0001"

    def __init__(self, message: str, location: Optional[SourceLocation] = None):
        super().__init__(message)
        self.message = message
        self.location = location

    def __str__(self):
        if self.location:
            return f"{self.message} ({self.location})"
        return self.message


class ResolutionError(BoltError):
    """
    A module in the import graph could not be brought into the symbol table.

    path is the canonical module path that failed; import_chain lists the
    canonical paths from the entry file down to the importer of `path`.
    """
    error_code = "E0432"

    def __init__(
        self,
        message: str,
        path: str,
        import_chain: Tuple[str, ...] = (),
        location: Optional[SourceLocation] = None,
    ):
        super().__init__(message, location)
        self.path = path
        self.import_chain = tuple(import_chain)

    def __str__(self):
        text = super().__str__()
        if self.import_chain:
            text += f" [imported via {' -> '.join(self.import_chain)}]"
        return text


class NotFoundError(ResolutionError):
    """The source loader has no content for a canonical path."""

    def __init__(self, path: str, import_chain: Tuple[str, ...] = (), searched: Tuple[str, ...] = ()):
        super().__init__(f"module not found: '{path}'", path, import_chain)
        self.searched = tuple(searched)
        if self.searched:
            self.help_text = f"searched: {', '.join(self.searched)}"


class SourceReadError(ResolutionError):
    """A module file exists but could not be read or decoded."""
    error_code = "E0434"

    def __init__(self, path: str, file_name: str, reason: Exception, import_chain: Tuple[str, ...] = ()):
        super().__init__(f"could not read '{path}': {reason}", path, import_chain)
        self.file_name = file_name
        self.reason = reason
        self.help_text = f"while reading {file_name}"


class ResolutionTimeoutError(ResolutionError):
    """Loading a module took longer than the configured fetch timeout."""
    error_code = "E0433"

    def __init__(self, path: str, timeout: float, import_chain: Tuple[str, ...] = ()):
        super().__init__(f"timed out after {timeout:g}s loading '{path}'", path, import_chain)
        self.timeout = timeout


class SymbolConflictError(ResolutionError):
    """Two modules define the same symbol and the conflict policy rejects it."""
    error_code = "E0428"

    def __init__(self, namespace: str, name: str, path: str, existing_path: str,
                 import_chain: Tuple[str, ...] = (), location: Optional[SourceLocation] = None):
        super().__init__(
            f"{namespace} '{name}' in '{path}' is already defined in '{existing_path}'",
            path, import_chain, location,
        )
        self.namespace = namespace
        self.name = name
        self.existing_path = existing_path


class ResolutionCancelledError(ResolutionError):
    """A branch stopped because another branch of the same resolve already failed."""

    def __init__(self, path: str, import_chain: Tuple[str, ...] = ()):
        super().__init__(f"resolution of '{path}' abandoned after an earlier failure", path, import_chain)
