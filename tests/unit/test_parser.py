"""
Tests for the declaration-level rules parser.
"""

import logging
import pytest
from boltmod.frontend.parser import ParseError
from boltmod.shared.nodes import SourceUnit


class TestImports:
    """Import forms accepted by the rules parser."""

    @pytest.mark.parametrize("source,target,alias,is_scoped", [
        ("import {'foo'}", "foo", None, True),
        ("import {'../../foo/bar'}", "../../foo/bar", None, False),
        ("import {'./foo/bar'}", "./foo/bar", None, False),
        ("import {'./foo/bar'} as lol", "./foo/bar", "lol", False),
        ("import {'./foo-bar'} as lol", "./foo-bar", "lol", False),
        ('import {"acme/rules"};', "acme/rules", None, True),
    ])
    def test_import_forms(self, parser, source, target, alias, is_scoped):
        unit = parser.parse(source, "main.bolt")
        assert len(unit.imports) == 1
        spec = unit.imports[0]
        assert spec.target_path == target
        assert spec.alias == alias
        assert spec.is_scoped is is_scoped

    def test_declaration_order_is_kept(self, parser):
        unit = parser.parse("import {'./b'}\nimport {'./a'}\nimport {'c'}\n", "main.bolt")
        assert [i.target_path for i in unit.imports] == ["./b", "./a", "c"]

    def test_import_location(self, parser):
        unit = parser.parse("\n\nimport {'./x'}", "rules/main.bolt")
        loc = unit.imports[0].location
        assert loc.file == "rules/main.bolt"
        assert loc.line == 3
        assert loc.column == 1


class TestDeclarations:

    def test_empty_input(self, parser):
        unit = parser.parse("", "empty.bolt")
        assert isinstance(unit, SourceUnit)
        assert unit.symbol_count() == 0
        assert unit.imports == ()

    def test_function(self, parser):
        unit = parser.parse("function isOwner(uid) { return auth.uid == uid; }", "f.bolt")
        fn = unit.functions["isOwner"]
        assert fn.params == ("uid",)
        assert fn.body == "auth.uid == uid"

    def test_function_without_params_or_return(self, parser):
        unit = parser.parse("function f() { true }", "f.bolt")
        assert unit.functions["f"].params == ()
        assert unit.functions["f"].body == "true"

    def test_function_multiple_params(self, parser):
        unit = parser.parse("function between(x, lo, hi) { return x >= lo && x <= hi; }", "f.bolt")
        assert unit.functions["between"].params == ("x", "lo", "hi")

    def test_type_with_properties_and_method(self, parser):
        source = """
        type User {
          name: String,
          age: Number | Null,
          tags: String[]
          validate() { return this.name.length > 0; }
        }
        """
        schema = parser.parse(source, "t.bolt").schemas["User"]
        assert schema.derived_from == "Object"
        assert dict(schema.properties) == {"name": "String", "age": "Number | Null", "tags": "String[]"}
        assert schema.methods["validate"].body == "this.name.length > 0"

    def test_type_extends_generic(self, parser):
        unit = parser.parse("type Messages extends Map<String, Message>;", "t.bolt")
        assert unit.schemas["Messages"].derived_from == "Map<String, Message>"

    def test_generic_type_params(self, parser):
        schema = parser.parse("type Pair<A, B> { first: A, second: B }", "t.bolt").schemas["Pair"]
        assert schema.params == ("A", "B")

    def test_empty_type_derives_from_any(self, parser):
        assert parser.parse("type Empty {}", "t.bolt").schemas["Empty"].derived_from == "Any"

    def test_path_with_type_and_methods(self, parser):
        source = """
        path /users/{uid} is User {
          read() { true }
          write() { isOwner(uid) }
        }
        """
        rule = parser.parse(source, "p.bolt").path_rules["/users/{uid}"]
        assert rule.is_type == "User"
        assert rule.methods["read"].body == "true"
        assert rule.methods["write"].body == "isOwner(uid)"

    def test_path_defaults_to_any(self, parser):
        rule = parser.parse("path /public;", "p.bolt").path_rules["/public"]
        assert rule.is_type == "Any"
        assert dict(rule.methods) == {}

    def test_nested_paths_are_flattened(self, parser):
        source = """
        path /users/{uid} {
          read() { true }
          path /posts/{pid} is Post;
        }
        """
        rules = parser.parse(source, "p.bolt").path_rules
        assert set(rules) == {"/users/{uid}", "/users/{uid}/posts/{pid}"}
        assert rules["/users/{uid}/posts/{pid}"].is_type == "Post"

    def test_nested_paths_without_keyword(self, parser):
        source = "path /x { read() { true } /y { write() { true } }}"
        rules = parser.parse(source, "p.bolt").path_rules
        assert set(rules) == {"/x", "/x/y"}
        assert rules["/x"].methods["read"].body == "true"
        assert rules["/x/y"].methods["write"].body == "true"

    def test_mixed_nested_path_forms(self, parser):
        source = "path /x { read() { true } /y { write() { true } path /{id} { validate() { false } }}}"
        rules = parser.parse(source, "p.bolt").path_rules
        assert set(rules) == {"/x", "/x/y", "/x/y/{id}"}

    def test_quoted_property_name(self, parser):
        schema = parser.parse("type Foo { 'hyphen-prop': String }", "t.bolt").schemas["Foo"]
        assert dict(schema.properties) == {"hyphen-prop": "String"}
        assert schema.derived_from == "Object"

    def test_semicolon_separated_properties(self, parser):
        schema = parser.parse("type Foo { name: String; age: Number; }", "t.bolt").schemas["Foo"]
        assert dict(schema.properties) == {"name": "String", "age": "Number"}

    def test_function_without_keyword(self, parser):
        unit = parser.parse("isOwner(uid) { return auth.uid == uid; }\nfunction g() { true }", "f.bolt")
        assert set(unit.functions) == {"isOwner", "g"}
        assert unit.functions["isOwner"].params == ("uid",)
        assert unit.functions["isOwner"].body == "auth.uid == uid"

    def test_extra_separator_after_method_warns(self, parser, caplog):
        with caplog.at_level(logging.WARNING):
            rule = parser.parse("path /x { read() { true }; }", "p.bolt").path_rules["/x"]
        assert rule.methods["read"].body == "true"
        assert "Extra separator" in caplog.text

    @pytest.mark.parametrize("source", ["f(x) = x + 1;", "f(x) = x + 1"])
    def test_deprecated_expression_function(self, parser, caplog, source):
        with caplog.at_level(logging.WARNING):
            fn = parser.parse(source, "f.bolt").functions["f"]
        assert fn.params == ("x",)
        assert fn.body == "x + 1"
        assert "format is deprecated" in caplog.text

    def test_deprecated_form_ends_at_line_break(self, parser):
        unit = parser.parse("f(x) = x + 1\ng() { true }\n", "f.bolt")
        assert unit.functions["f"].body == "x + 1"
        assert unit.functions["g"].body == "true"

    def test_comments_are_ignored(self, parser):
        source = "// header\nfunction f() { true }\n/* block\ncomment */\ntype T {}\n"
        unit = parser.parse(source, "c.bolt")
        assert set(unit.functions) == {"f"}
        assert set(unit.schemas) == {"T"}

    def test_duplicate_definition_keeps_first(self, parser, caplog):
        source = "function f() { return 1; }\nfunction f() { return 2; }\n"
        with caplog.at_level(logging.WARNING):
            unit = parser.parse(source, "dup.bolt")
        assert unit.functions["f"].body == "1"
        assert "Duplicated function definition: f" in caplog.text

    def test_unit_is_read_only(self, parser):
        unit = parser.parse("function f() { true }", "f.bolt")
        with pytest.raises(TypeError):
            unit.functions["g"] = unit.functions["f"]


class TestParseErrors:

    def test_error_has_location(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("function f() { true }\nfunction broken( { }", "bad.bolt")
        err = exc_info.value
        assert err.source_file == "bad.bolt"
        assert err.location.file == "bad.bolt"
        assert err.location.line == 2

    def test_unexpected_end_of_input(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("import {'./x'", "eof.bolt")
        assert exc_info.value.location.line >= 1
        assert "eof.bolt" in str(exc_info.value)

    def test_unexpected_character(self, parser):
        with pytest.raises(ParseError) as exc_info:
            parser.parse("function f() { true }\n@", "chars.bolt")
        assert exc_info.value.location.line == 2
