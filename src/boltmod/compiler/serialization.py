"""
Symbol Table Serialization
==========================

Two renderings of a MergedSymbolTable:

- serialize_table(): JSON-compatible document with `functions`, `schema` and
  `paths` keys. This is the default generator of the compiler driver.
- serialize_table_sexpr(): canonical S-expression dump (one form per
  namespace, names sorted) for tests and debugging.
"""

from typing import Any, Dict, List, Mapping

import sexpdata
from sexpdata import Symbol

from ..analysis.module_system.symbol_table import MergedSymbolTable
from ..shared.nodes import FUNCTIONS, PATH_RULES, SCHEMAS, MethodDef


def _method_json(method: MethodDef) -> Dict[str, Any]:
    return {"params": list(method.params), "body": method.body}


def _methods_json(methods: Mapping[str, MethodDef]) -> Dict[str, Any]:
    return {name: _method_json(methods[name]) for name in sorted(methods)}


def serialize_table(table: MergedSymbolTable) -> Dict[str, Any]:
    """JSON-compatible document of every merged symbol."""
    functions = {
        name: {"params": list(fn.params), "body": fn.body}
        for name, fn in sorted(table.functions.items())
    }
    schema = {
        name: {
            "derivedFrom": s.derived_from,
            "params": list(s.params),
            "properties": {p: s.properties[p] for p in sorted(s.properties)},
            "methods": _methods_json(s.methods),
        }
        for name, s in sorted(table.schemas.items())
    }
    paths = {
        template: {"isType": rule.is_type, "methods": _methods_json(rule.methods)}
        for template, rule in sorted(table.path_rules.items())
    }
    return {FUNCTIONS: functions, SCHEMAS: schema, PATH_RULES: paths}


# ---------------------------------------------------------------------------
# S-expressions
# ---------------------------------------------------------------------------

def _sym(name: str) -> Symbol:
    return Symbol(name)


def _method_sexpr(method: MethodDef) -> List[Any]:
    return [_sym("method"), method.name, [_sym("params")] + list(method.params), [_sym("body"), method.body]]


def _namespace_sexpr(table: MergedSymbolTable) -> List[List[Any]]:
    functions: List[Any] = [_sym(FUNCTIONS)]
    for name, fn in sorted(table.functions.items()):
        functions.append([_sym("function"), name, [_sym("params")] + list(fn.params), [_sym("body"), fn.body]])

    schema: List[Any] = [_sym(SCHEMAS)]
    for name, s in sorted(table.schemas.items()):
        form: List[Any] = [_sym("type"), name, [_sym("extends"), s.derived_from], [_sym("params")] + list(s.params)]
        form.extend([_sym("property"), p, s.properties[p]] for p in sorted(s.properties))
        form.extend(_method_sexpr(s.methods[m]) for m in sorted(s.methods))
        schema.append(form)

    paths: List[Any] = [_sym(PATH_RULES)]
    for template, rule in sorted(table.path_rules.items()):
        form = [_sym("path"), template, [_sym("is"), rule.is_type]]
        form.extend(_method_sexpr(rule.methods[m]) for m in sorted(rule.methods))
        paths.append(form)

    return [functions, schema, paths]


def serialize_table_sexpr(table: MergedSymbolTable) -> str:
    """Canonical S-expression text; equal tables give identical text."""
    body = "\n".join("  " + sexpdata.dumps(form) for form in _namespace_sexpr(table))
    return f"(symbols\n{body})"
