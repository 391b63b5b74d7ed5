"""
Source Loading

Asynchronous access to the text of a module given its canonical path.
Loaders append the configured extension themselves; callers only ever
deal in canonical paths.
"""

import asyncio
import logging
from pathlib import Path
from typing import Dict, List, Mapping, Optional, Union

from ...shared.errors import NotFoundError, SourceReadError
from ...utils.config import DEFAULT_FILE_ENCODING, FILE_EXTENSION, PATH_SEPARATOR, SCOPED_INDEX_NAME
from ...utils.io_utils import read_source_file

logger = logging.getLogger(__name__)


class SourceLoader:
    """
    Interface every loader implements.

    load() returns the source text for a canonical module path or raises
    NotFoundError. It is the only suspension point of a resolution.
    """

    async def load(self, canonical_path: str) -> str:
        raise NotImplementedError


class FileSourceLoader(SourceLoader):
    """
    Loads modules from disk.

    Tries `<path><ext>` first and then `<path>/index<ext>`, so a directory
    with an index file can be imported by its directory name. Relative
    canonical paths are taken relative to base_dir (default: the working
    directory). Lookup and read both happen on a worker thread.
    """

    def __init__(
        self,
        base_dir: Optional[Union[Path, str]] = None,
        file_extension: str = FILE_EXTENSION,
        encoding: str = DEFAULT_FILE_ENCODING,
    ):
        self.base_dir = Path(base_dir) if base_dir is not None else None
        self.file_extension = file_extension
        self.encoding = encoding

    def candidates(self, canonical_path: str) -> List[Path]:
        base = Path(canonical_path)
        if self.base_dir is not None and not base.is_absolute():
            base = self.base_dir / base
        return [
            Path(f"{base}{self.file_extension}"),
            base / f"{SCOPED_INDEX_NAME}{self.file_extension}",
        ]

    def read(self, canonical_path: str) -> str:
        """Blocking lookup and read; load() runs this on a worker thread."""
        candidates = self.candidates(canonical_path)
        for candidate in candidates:
            if candidate.is_file():
                logger.debug(f"Loading {canonical_path} from {candidate}")
                try:
                    return read_source_file(candidate, self.encoding)
                except (OSError, UnicodeDecodeError) as e:
                    raise SourceReadError(canonical_path, str(candidate), e) from e
        raise NotFoundError(canonical_path, searched=tuple(str(c) for c in candidates))

    async def load(self, canonical_path: str) -> str:
        return await asyncio.to_thread(self.read, canonical_path)


class InMemorySourceLoader(SourceLoader):
    """
    Serves module sources from a dict keyed by canonical path.

    Used for editor overlays and tests. `latency` maps canonical paths to a
    delay in seconds before the text is returned, which makes completion
    order controllable. Every load request is recorded in `requests`.
    """

    def __init__(self, sources: Mapping[str, str], latency: Optional[Mapping[str, float]] = None):
        self.sources: Dict[str, str] = dict(sources)
        self.latency: Dict[str, float] = dict(latency or {})
        self.requests: List[str] = []

    def add(self, canonical_path: str, source: str) -> None:
        self.sources[canonical_path.rstrip(PATH_SEPARATOR)] = source

    async def load(self, canonical_path: str) -> str:
        self.requests.append(canonical_path)
        delay = self.latency.get(canonical_path, 0)
        if delay:
            await asyncio.sleep(delay)
        else:
            # Yield once so siblings interleave like real I/O would
            await asyncio.sleep(0)
        if canonical_path not in self.sources:
            raise NotFoundError(canonical_path)
        return self.sources[canonical_path]
