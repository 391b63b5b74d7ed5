"""
Declaration Nodes

Declaration-level structure of a rules file: imports plus the three symbol
namespaces (functions, schemas, path rules). Expression bodies and type
expressions are kept as source text; nothing here interprets them.

All nodes are frozen; mapping fields are read-only views.
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Tuple

from .source_location import SourceLocation

# Namespace names (also the keys of the generated JSON document)
FUNCTIONS = "functions"
SCHEMAS = "schema"
PATH_RULES = "paths"
NAMESPACES = (FUNCTIONS, SCHEMAS, PATH_RULES)


def _frozen(mapping: Optional[Mapping]) -> Mapping:
    return MappingProxyType(dict(mapping or {}))


@dataclass(frozen=True)
class ImportSpecifier:
    """
    `import {'<target_path>'} [as <alias>]`

    is_scoped marks library-style imports (no leading ./ or ../), which are
    resolved against the module root instead of the importing file.
    """
    target_path: str
    alias: Optional[str] = None
    is_scoped: bool = False
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __str__(self) -> str:
        alias = f" as {self.alias}" if self.alias else ""
        return f"import {{'{self.target_path}'}}{alias}"


@dataclass(frozen=True)
class MethodDef:
    """A method inside a type or path body: read(), write(), validate(), ..."""
    name: str
    params: Tuple[str, ...] = ()
    body: str = ""


@dataclass(frozen=True)
class FunctionDef:
    name: str
    params: Tuple[str, ...] = ()
    body: str = ""
    location: Optional[SourceLocation] = field(default=None, compare=False)


@dataclass(frozen=True)
class SchemaDef:
    """`type Name<params> extends Base { prop: Type, method() { ... } }`"""
    name: str
    derived_from: str = "Any"
    properties: Mapping[str, str] = field(default_factory=dict)
    methods: Mapping[str, MethodDef] = field(default_factory=dict)
    params: Tuple[str, ...] = ()
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "properties", _frozen(self.properties))
        object.__setattr__(self, "methods", _frozen(self.methods))


@dataclass(frozen=True)
class PathRuleDef:
    """`path /users/{uid} is User { read() { ... } }`"""
    template: str
    is_type: str = "Any"
    methods: Mapping[str, MethodDef] = field(default_factory=dict)
    location: Optional[SourceLocation] = field(default=None, compare=False)

    def __post_init__(self):
        object.__setattr__(self, "methods", _frozen(self.methods))


@dataclass(frozen=True)
class SourceUnit:
    """
    Everything one parsed rules file declares.

    Produced by the parser, consumed once by the resolution engine.
    path_rules is keyed by path template.
    """
    imports: Tuple[ImportSpecifier, ...] = ()
    functions: Mapping[str, FunctionDef] = field(default_factory=dict)
    schemas: Mapping[str, SchemaDef] = field(default_factory=dict)
    path_rules: Mapping[str, PathRuleDef] = field(default_factory=dict)
    source_file: str = "<unknown>"

    def __post_init__(self):
        object.__setattr__(self, "imports", tuple(self.imports))
        object.__setattr__(self, "functions", _frozen(self.functions))
        object.__setattr__(self, "schemas", _frozen(self.schemas))
        object.__setattr__(self, "path_rules", _frozen(self.path_rules))

    def namespaces(self) -> Dict[str, Mapping]:
        """The three symbol namespaces keyed by namespace name."""
        return {
            FUNCTIONS: self.functions,
            SCHEMAS: self.schemas,
            PATH_RULES: self.path_rules,
        }

    def symbol_count(self) -> int:
        return len(self.functions) + len(self.schemas) + len(self.path_rules)

    def __repr__(self) -> str:
        return (f"SourceUnit(file={self.source_file!r}, "
                f"imports={[i.target_path for i in self.imports]}, "
                f"functions={list(self.functions)}, schemas={list(self.schemas)}, "
                f"paths={list(self.path_rules)})")
