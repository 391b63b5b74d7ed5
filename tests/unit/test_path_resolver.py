"""
Tests for canonical module path resolution (relative and scoped imports).
"""

import pytest
from boltmod.analysis.module_system.path_resolver import PathResolver, ResolutionContext
from boltmod.shared.nodes import ImportSpecifier


def relative(target: str) -> ImportSpecifier:
    return ImportSpecifier(target_path=target, is_scoped=False)


def scoped(target: str) -> ImportSpecifier:
    return ImportSpecifier(target_path=target, is_scoped=True)


class TestRelativeResolution:

    def setup_method(self):
        self.resolver = PathResolver()

    def test_parent_directory(self):
        assert self.resolver.resolve("proj/rules/base", relative("../shared/x")) == "proj/shared/x"

    def test_leading_dot_is_sibling(self):
        assert self.resolver.resolve("proj/rules/base", relative("./sibling")) == "proj/rules/sibling"

    def test_nested_sibling_directory(self):
        assert self.resolver.resolve("proj/rules/base", relative("./sub/dir/x")) == "proj/rules/sub/dir/x"

    def test_multiple_ascents(self):
        assert self.resolver.resolve("proj/rules/deep/base", relative("../../x")) == "proj/x"

    def test_only_one_leading_dot_is_dropped(self):
        assert self.resolver.resolve("proj/rules/base", relative("././x")) == "proj/rules/./x"

    def test_dot_after_ascent_is_dropped(self):
        assert self.resolver.resolve("proj/rules/base", relative(".././x")) == "proj/x"

    def test_ascent_past_root_is_not_rejected(self):
        assert self.resolver.resolve("proj/base", relative("../../../x")) == "x"

    def test_importer_at_top_level(self):
        assert self.resolver.resolve("main", relative("./a")) == "a"

    def test_extension_on_target_is_stripped(self):
        assert self.resolver.resolve("proj/rules/base", relative("./types.bolt")) == "proj/rules/types"


class TestScopedResolution:

    def test_resolves_under_module_root(self):
        resolver = PathResolver(module_root="node_modules")
        assert resolver.resolve("proj/rules/base", scoped("libfoo")) == "node_modules/libfoo/index"

    @pytest.mark.parametrize("importer", ["main", "proj/rules/base", "a/b/c/d/e"])
    def test_importer_is_irrelevant(self, importer):
        resolver = PathResolver(module_root="vendor")
        assert resolver.resolve(importer, scoped("libfoo")) == "vendor/libfoo/index"

    def test_nested_package_name(self):
        resolver = PathResolver(module_root="node_modules")
        assert resolver.resolve("main", scoped("acme/rules")) == "node_modules/acme/rules/index"

    def test_trailing_slash_on_module_root(self):
        resolver = PathResolver(module_root="libs/")
        assert resolver.resolve("main", scoped("x")) == "libs/x/index"


class TestCanonicalize:

    def test_strips_extension(self):
        assert PathResolver().canonicalize("proj/rules/base.bolt") == "proj/rules/base"

    def test_normalizes_backslashes(self):
        assert PathResolver().canonicalize("proj\\rules\\base.bolt") == "proj/rules/base"

    def test_keeps_other_extensions(self):
        assert PathResolver().canonicalize("proj/rules.txt") == "proj/rules.txt"

    def test_custom_extension(self):
        assert PathResolver(file_extension=".rules").canonicalize("a/b.rules") == "a/b"


def test_resolution_context_drops_file_name():
    assert ResolutionContext.for_module("proj/rules/base").current_directory == ("proj", "rules")
    assert ResolutionContext.for_module("main").current_directory == ()
