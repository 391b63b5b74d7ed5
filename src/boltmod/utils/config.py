"""
Configuration constants and resolver settings for boltmod
"""

import os
import tempfile
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional

# Source and output file naming
FILE_EXTENSION = ".bolt"
OUTPUT_EXTENSION = ".json"
PATH_SEPARATOR = "/"

# Module resolution constants
DEFAULT_MODULE_ROOT = "node_modules"  # relative to the working directory
SCOPED_INDEX_NAME = "index"
CURRENT_DIR_SEGMENT = "."
PARENT_DIR_SEGMENT = ".."

# Environment overrides
MODULE_ROOT_ENV = "BOLTMOD_MODULE_ROOT"
FETCH_TIMEOUT_ENV = "BOLTMOD_FETCH_TIMEOUT"
CONFLICT_POLICY_ENV = "BOLTMOD_CONFLICTS"

# Parser configuration constants (cache under temp dir to avoid cluttering project root)
DEFAULT_PARSER_CACHE_FILE = os.path.join(tempfile.gettempdir(), "boltmod_parser.cache")

# Default type for path rules declared without `is`
DEFAULT_PATH_TYPE = "Any"

# File encoding constants
DEFAULT_FILE_ENCODING = "utf-8"

# JSON output formatting
OUTPUT_INDENT = 2


class ConflictPolicy(Enum):
    """What happens when two files define the same symbol in one namespace."""
    LAST_WRITE_WINS = "last"
    FIRST_WRITE_WINS = "first"
    REJECT = "reject"


@dataclass
class ResolverConfig:
    """
    Settings shared by the path resolver, loaders and resolution engine.

    module_root is the directory scoped (library-style) imports resolve against.
    fetch_timeout is per source load, in seconds; None waits forever.
    """
    module_root: str = DEFAULT_MODULE_ROOT
    file_extension: str = FILE_EXTENSION
    fetch_timeout: Optional[float] = None
    conflict_policy: ConflictPolicy = ConflictPolicy.LAST_WRITE_WINS

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "ResolverConfig":
        """Build a config from BOLTMOD_* environment variables."""
        env = os.environ if environ is None else environ
        config = cls()
        if env.get(MODULE_ROOT_ENV):
            config.module_root = env[MODULE_ROOT_ENV]
        if env.get(FETCH_TIMEOUT_ENV):
            config.fetch_timeout = float(env[FETCH_TIMEOUT_ENV])
        if env.get(CONFLICT_POLICY_ENV):
            config.conflict_policy = ConflictPolicy(env[CONFLICT_POLICY_ENV].lower())
        return config
