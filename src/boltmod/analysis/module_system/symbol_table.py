"""
Merged Symbol Table

The single artifact a resolution produces: every function, schema and
path rule of every module reachable from the entry file.
"""

import logging
from typing import Dict, List, Mapping, Optional, Tuple

from ...shared.errors import SymbolConflictError
from ...shared.nodes import FUNCTIONS, NAMESPACES, PATH_RULES, SCHEMAS, SourceUnit
from ...utils.config import ConflictPolicy

logger = logging.getLogger(__name__)


class MergedSymbolTable:
    """
    Three symbol namespaces plus where each surviving definition came from.

    merge_unit() is the only mutator and is fully synchronous: a module's
    symbols land all at once or, when the policy rejects a conflict, not
    at all. Callers on a single event loop therefore never observe a
    half-merged module.
    """

    def __init__(self, conflict_policy: ConflictPolicy = ConflictPolicy.LAST_WRITE_WINS):
        self.conflict_policy = conflict_policy
        self.functions: Dict[str, object] = {}
        self.schemas: Dict[str, object] = {}
        self.path_rules: Dict[str, object] = {}
        self.origins: Dict[Tuple[str, str], str] = {}
        self.merged_paths: List[str] = []

    def namespace(self, name: str) -> Dict[str, object]:
        if name == FUNCTIONS:
            return self.functions
        if name == SCHEMAS:
            return self.schemas
        if name == PATH_RULES:
            return self.path_rules
        raise KeyError(name)

    def origin(self, namespace: str, name: str) -> Optional[str]:
        """Canonical path of the module whose definition of `name` survived."""
        return self.origins.get((namespace, name))

    def merge_unit(self, unit: SourceUnit, canonical_path: str) -> None:
        """
        Merge all three namespaces of `unit` in one step.

        Raises:
            SymbolConflictError: under ConflictPolicy.REJECT, before anything
                of `unit` has been merged
        """
        incoming = unit.namespaces()

        if self.conflict_policy is ConflictPolicy.REJECT:
            for ns_name, symbols in incoming.items():
                existing = self.namespace(ns_name)
                for name in symbols:
                    if name in existing:
                        raise SymbolConflictError(
                            ns_name, name, canonical_path, self.origins[(ns_name, name)],
                            location=getattr(symbols[name], "location", None),
                        )

        for ns_name, symbols in incoming.items():
            self._merge_namespace(ns_name, symbols, canonical_path)

        self.merged_paths.append(canonical_path)
        logger.debug(f"Merged {canonical_path}: {unit.symbol_count()} symbols "
                     f"(table now {len(self)} symbols from {len(self.merged_paths)} modules)")

    def _merge_namespace(self, ns_name: str, symbols: Mapping[str, object], canonical_path: str) -> None:
        table = self.namespace(ns_name)
        for name, definition in symbols.items():
            key = (ns_name, name)
            if name in table:
                if self.conflict_policy is ConflictPolicy.FIRST_WRITE_WINS:
                    logger.debug(f"Keeping {ns_name} '{name}' from {self.origins[key]}; ignoring {canonical_path}")
                    continue
                logger.warning(f"{ns_name} '{name}' from {canonical_path} overrides the one from {self.origins[key]}")
            table[name] = definition
            self.origins[key] = canonical_path

    def as_namespaces(self) -> Dict[str, Dict[str, object]]:
        return {ns_name: dict(self.namespace(ns_name)) for ns_name in NAMESPACES}

    def __len__(self) -> int:
        return len(self.functions) + len(self.schemas) + len(self.path_rules)

    def __repr__(self) -> str:
        return (f"MergedSymbolTable(functions={sorted(self.functions)}, "
                f"schemas={sorted(self.schemas)}, paths={sorted(self.path_rules)})")
