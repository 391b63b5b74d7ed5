"""
Declaration Transformer
Converts the Lark parse tree of one rules file into a SourceUnit
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from lark import Transformer, v_args
from lark.lexer import Token

from ...shared.nodes import (
    FunctionDef,
    ImportSpecifier,
    MethodDef,
    PathRuleDef,
    SchemaDef,
    SourceUnit,
)
from ...shared.source_location import SourceLocation
from ...utils.config import CURRENT_DIR_SEGMENT, DEFAULT_PATH_TYPE, PARENT_DIR_SEGMENT, PATH_SEPARATOR

logger = logging.getLogger(__name__)

# Tags for intermediate results that are not declarations themselves
_PARAMS = "params"
_EXTENDS = "extends"
_IS = "is"
_BODY = "body"
_PROPERTY = "property"
_GENERIC = "generic"
_ARRAY = "array"
_SEPARATOR = "separator"


def _clean_body(text: Optional[str]) -> str:
    """Strip whitespace, a leading `return` and a trailing `;` from a body."""
    if text is None:
        return ""
    body = text.strip()
    if body.startswith("return") and (len(body) == 6 or not (body[6].isalnum() or body[6] in "_$")):
        body = body[6:].strip()
    if body.endswith(";"):
        body = body[:-1].rstrip()
    return body


def _is_relative(target_path: str) -> bool:
    first = target_path.split(PATH_SEPARATOR)[0]
    return first in (CURRENT_DIR_SEGMENT, PARENT_DIR_SEGMENT)


def _join_templates(parent: str, child: str) -> str:
    if parent == PATH_SEPARATOR:
        return child
    if child == PATH_SEPARATOR:
        return parent
    return parent.rstrip(PATH_SEPARATOR) + child


@v_args(inline=True, meta=True)
class DeclarationTransformer(Transformer):
    """
    Builds the declaration nodes bottom-up.

    Duplicate names inside one file keep the first definition and log a
    warning; clashes between files are the symbol table's business.
    """

    def __init__(self, source_file: str) -> None:
        super().__init__()
        self.source_file = source_file

    def _location(self, meta: Any) -> Optional[SourceLocation]:
        if meta is None or getattr(meta, "empty", True):
            return None
        return SourceLocation(
            file=self.source_file,
            line=meta.line,
            column=meta.column,
            end_line=getattr(meta, "end_line", 0) or 0,
            end_column=getattr(meta, "end_column", 0) or 0,
        )

    def _register(self, table: Dict[str, Any], kind: str, name: str, value: Any) -> None:
        if name in table:
            logger.warning(f"Duplicated {kind} definition: {name} in {self.source_file}; keeping the first")
            return
        table[name] = value

    # =========================================================================
    # FILE STRUCTURE
    # =========================================================================

    def unit(self, meta: Any, *declarations: Any) -> SourceUnit:
        imports: List[ImportSpecifier] = []
        functions: Dict[str, FunctionDef] = {}
        schemas: Dict[str, SchemaDef] = {}
        path_rules: Dict[str, PathRuleDef] = {}

        for decl in declarations:
            if isinstance(decl, ImportSpecifier):
                imports.append(decl)
            elif isinstance(decl, FunctionDef):
                self._register(functions, "function", decl.name, decl)
            elif isinstance(decl, SchemaDef):
                self._register(schemas, "type", decl.name, decl)
            elif isinstance(decl, list):
                for rule in decl:
                    self._register(path_rules, "path", rule.template, rule)

        return SourceUnit(
            imports=tuple(imports),
            functions=functions,
            schemas=schemas,
            path_rules=path_rules,
            source_file=self.source_file,
        )

    def import_decl(self, meta: Any, target: Token, alias: Optional[Token] = None) -> ImportSpecifier:
        target_path = str(target)[1:-1]
        return ImportSpecifier(
            target_path=target_path,
            alias=str(alias) if alias is not None else None,
            is_scoped=not _is_relative(target_path),
            location=self._location(meta),
        )

    # =========================================================================
    # FUNCTIONS AND METHODS
    # =========================================================================

    def function_decl(self, meta: Any, name: Token, *rest: Any) -> FunctionDef:
        params = rest[0] if len(rest) == 2 else []
        return FunctionDef(
            name=str(name),
            params=tuple(params),
            body=rest[-1],
            location=self._location(meta),
        )

    def method(self, meta: Any, name: Token, *rest: Any) -> MethodDef:
        if rest and rest[-1] == (_SEPARATOR,):
            logger.warning(f"Extra separator (;) after method {name}() in {self.source_file}")
            rest = rest[:-1]
        params = rest[0] if len(rest) == 2 else []
        return MethodDef(name=str(name), params=tuple(params), body=rest[-1])

    def param_list(self, meta: Any, *names: Token) -> List[str]:
        return [str(n) for n in names]

    def body(self, meta: Any, text: Optional[Token] = None) -> str:
        return _clean_body(str(text) if text is not None else None)

    def expr_body(self, meta: Any, text: Token) -> str:
        logger.warning(f"Use of fn(x) = exp; format is deprecated in {self.source_file}; use fn(x) {{ exp }}")
        return _clean_body(str(text))

    def extra_separator(self, meta: Any) -> Tuple:
        return (_SEPARATOR,)

    # =========================================================================
    # TYPES
    # =========================================================================

    def type_decl(self, meta: Any, name: Token, *rest: Tuple) -> SchemaDef:
        params: Tuple[str, ...] = ()
        derived_from: Optional[str] = None
        properties: Dict[str, str] = {}
        methods: Dict[str, MethodDef] = {}

        for tag, *values in rest:
            if tag == _PARAMS:
                params = tuple(values[0])
            elif tag == _EXTENDS:
                derived_from = values[0]
            elif tag == _BODY:
                for member in values[0]:
                    if isinstance(member, MethodDef):
                        self._register(methods, f"method of {name}", member.name, member)
                    else:
                        _, prop_name, prop_type = member
                        self._register(properties, f"property of {name}", prop_name, prop_type)

        if derived_from is None:
            derived_from = "Object" if properties else "Any"
        return SchemaDef(
            name=str(name),
            derived_from=derived_from,
            properties=properties,
            methods=methods,
            params=params,
            location=self._location(meta),
        )

    def type_params(self, meta: Any, *names: Token) -> Tuple:
        return (_PARAMS, [str(n) for n in names])

    def extends_clause(self, meta: Any, type_expr: str) -> Tuple:
        return (_EXTENDS, type_expr)

    def type_body(self, meta: Any, *members: Any) -> Tuple:
        return (_BODY, list(members))

    def type_property(self, meta: Any, name: Token, type_expr: str) -> Tuple:
        prop_name = str(name)
        if name.type == "STRING":
            prop_name = prop_name[1:-1]
        return (_PROPERTY, prop_name, type_expr)

    def type_expr(self, meta: Any, *alternatives: str) -> str:
        return " | ".join(alternatives)

    def simple_type(self, meta: Any, name: Token, *suffixes: Tuple) -> str:
        text = str(name)
        for tag, *values in suffixes:
            if tag == _GENERIC:
                text += "<" + ", ".join(values[0]) + ">"
            elif tag == _ARRAY:
                text += "[]"
        return text

    def generic_args(self, meta: Any, *type_exprs: str) -> Tuple:
        return (_GENERIC, list(type_exprs))

    def array_suffix(self, meta: Any) -> Tuple:
        return (_ARRAY,)

    # =========================================================================
    # PATHS
    # =========================================================================

    def path_decl(self, meta: Any, template: Token, *rest: Tuple) -> List[PathRuleDef]:
        """Returns the rule plus any nested rules, with nested templates made absolute."""
        is_type = DEFAULT_PATH_TYPE
        methods: Dict[str, MethodDef] = {}
        nested: List[PathRuleDef] = []

        for tag, *values in rest:
            if tag == _IS:
                is_type = values[0]
            elif tag == _BODY:
                for member in values[0]:
                    if isinstance(member, MethodDef):
                        self._register(methods, f"method of path {template}", member.name, member)
                    else:
                        nested.extend(member)

        rule = PathRuleDef(
            template=str(template),
            is_type=is_type,
            methods=methods,
            location=self._location(meta),
        )
        rules = [rule]
        for child in nested:
            rules.append(PathRuleDef(
                template=_join_templates(rule.template, child.template),
                is_type=child.is_type,
                methods=child.methods,
                location=child.location,
            ))
        return rules

    def nested_path(self, meta: Any, template: Token, *rest: Tuple) -> List[PathRuleDef]:
        """A nested path written without the `path` keyword."""
        return self.path_decl(meta, template, *rest)

    def is_clause(self, meta: Any, type_expr: str) -> Tuple:
        return (_IS, type_expr)

    def path_body(self, meta: Any, *members: Any) -> Tuple:
        return (_BODY, list(members))
