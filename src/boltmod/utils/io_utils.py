"""
Centralized file I/O utilities.

- Single place for encoding and output-path handling
- Use Path.read_text() consistently (no raw open/read)
"""

from pathlib import Path
from typing import Union

from .config import DEFAULT_FILE_ENCODING, FILE_EXTENSION, OUTPUT_EXTENSION


def read_source_file(path: Union[Path, str], encoding: str = DEFAULT_FILE_ENCODING) -> str:
    """Read source file with standard encoding."""
    p = Path(path) if not isinstance(path, Path) else path
    return p.read_text(encoding=encoding)


def write_output_file(path: Union[Path, str], content: str) -> None:
    """Write generated output, creating parent directories."""
    p = Path(path) if not isinstance(path, Path) else path
    p.parent.mkdir(parents=True, exist_ok=True)
    p.write_text(content, encoding=DEFAULT_FILE_ENCODING)


def output_path_for(
    path: Union[Path, str],
    source_extension: str = FILE_EXTENSION,
    output_extension: str = OUTPUT_EXTENSION,
) -> Path:
    """Swap the source extension for the output one (rules.bolt -> rules.json)."""
    p = Path(path) if not isinstance(path, Path) else path
    if p.suffix == source_extension:
        return p.with_suffix(output_extension)
    return p.with_name(p.name + output_extension)
