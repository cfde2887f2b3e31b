"""
Tests for the translation unit index: include loading, class symbol table,
base class resolution and main-file locality.
"""

import os
import tempfile
import unittest
from pathlib import Path

from extraction.models import BaseSpecifier
from extraction.translation_unit import TranslationUnit


class TranslationUnitTestCase(unittest.TestCase):
    """Shared temporary source tree."""

    def setUp(self) -> None:
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()

    def tearDown(self) -> None:
        self._tmp.cleanup()

    def write(self, relative: str, text: str) -> str:
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")
        return str(path)

    def one(self, tu: TranslationUnit, qualified_name: str):
        decls = tu.lookup(qualified_name)
        self.assertEqual(len(decls), 1, f"expected one declaration of {qualified_name}")
        return decls[0]


class TestIdentity(TranslationUnitTestCase):
    """Test main file identity."""

    def test_existing_file_resolves_to_canonical_path(self) -> None:
        """Test that the identity is the canonical path."""
        path = self.write("src/page.h", "")
        tu = TranslationUnit(os.path.join(self.root, "src", "..", "src", "page.h"))
        self.assertEqual(tu.main_file_identity(), path)

    def test_missing_file_has_no_identity(self) -> None:
        """Test that a missing file has no identity and cannot load."""
        tu = TranslationUnit(self.root / "missing.h")
        self.assertIsNone(tu.main_file_identity())
        with self.assertRaises(FileNotFoundError):
            tu.load()

    def test_directory_has_no_identity(self) -> None:
        """Test that a directory has no identity."""
        self.assertIsNone(TranslationUnit(self.root).main_file_identity())


class TestIncludes(TranslationUnitTestCase):
    """Test include resolution."""

    def test_local_and_include_dir_headers_are_indexed(self) -> None:
        """Test quoted and angle includes."""
        self.write("main/base.h", "namespace N { class Base {}; }\n")
        self.write("include/Lib/Object.h", "#pragma once\nnamespace Core { class Object {}; }\n")
        main = self.write(
            "main/main.cpp",
            '#include "base.h"\n#include <Lib/Object.h>\n#include <vector>\n'
            "namespace N { class A : public Base {}; }\n",
        )
        tu = TranslationUnit(main, include_dirs=[self.root / "include"]).load()

        self.assertEqual(len(tu.files), 3)
        self.assertEqual(tu.files[0], main)
        self.one(tu, "N::Base")
        self.one(tu, "Core::Object")
        self.one(tu, "N::A")

    def test_each_header_is_parsed_once(self) -> None:
        """Test that a header included twice is parsed once."""
        self.write("common.h", "#ifndef COMMON_H\n#define COMMON_H\nnamespace N { class C {}; }\n#endif\n")
        self.write("a.h", '#include "common.h"\n')
        main = self.write("main.cpp", '#include "a.h"\n#include "common.h"\n')
        tu = TranslationUnit(main).load()
        self.assertEqual(len(tu.files), 3)
        self.one(tu, "N::C")

    def test_include_cycle_terminates(self) -> None:
        """Test that mutually including headers terminate."""
        self.write("a.h", '#include "b.h"\nnamespace N { class A {}; }\n')
        self.write("b.h", '#include "a.h"\nnamespace N { class B {}; }\n')
        main = self.write("main.cpp", '#include "a.h"\n')
        tu = TranslationUnit(main).load()
        self.one(tu, "N::A")
        self.one(tu, "N::B")


class TestSymbolTable(TranslationUnitTestCase):
    """Test the class symbol table."""

    def test_nested_namespaces_and_classes(self) -> None:
        """Test qualified names for nested scopes."""
        main = self.write(
            "main.cpp",
            "namespace Outer { namespace Inner { class A { public: class Nested {}; }; } }\n"
            "namespace X::Y { struct S {}; }\n",
        )
        tu = TranslationUnit(main).load()
        a = self.one(tu, "Outer::Inner::A")
        self.assertEqual(a.kind, "class")
        self.assertEqual(a.scope, ("Outer", "Inner"))
        self.one(tu, "Outer::Inner::A::Nested")
        s = self.one(tu, "X::Y::S")
        self.assertEqual(s.kind, "struct")

    def test_forward_declaration_links_to_definition(self) -> None:
        """Test that a forward declaration links to its definition."""
        self.write("a.h", "namespace N { class A {}; }\n")
        main = self.write("main.cpp", 'namespace N { class A; }\n#include "a.h"\n')
        tu = TranslationUnit(main).load()
        decls = tu.lookup("N::A")
        self.assertEqual(len(decls), 2)
        forward, definition = decls
        self.assertFalse(forward.is_definition)
        self.assertTrue(definition.is_definition)
        self.assertIs(forward.definition, definition)
        self.assertIs(definition.definition, definition)

    def test_decl_ids_are_unique(self) -> None:
        """Test that every declaration gets its own id."""
        main = self.write("main.cpp", "namespace N { class A {}; class B {}; class C {}; }\n")
        tu = TranslationUnit(main).load()
        ids = [decl.decl_id for decl in tu.classes()]
        self.assertEqual(len(ids), len(set(ids)))


class TestResolveBase(TranslationUnitTestCase):
    """Test base class lookup."""

    def setUp(self) -> None:
        super().setUp()
        self.write(
            "lib.h",
            "class Global {};\n"
            "namespace Core { class Object {}; }\n"
            "namespace N { class Widget {}; class Incomplete; }\n",
        )
        main = self.write(
            "main.cpp",
            '#include "lib.h"\n'
            "namespace N {\n"
            "class Local {};\n"
            "class User : public Widget {};\n"
            "}\n",
        )
        self.tu = TranslationUnit(main).load()
        self.user = self.one(self.tu, "N::User")

    def resolve(self, name: str):
        return self.tu.resolve_base(self.user, BaseSpecifier(name=name, access="public", is_virtual=False, line=1))

    def test_unqualified_name_found_in_enclosing_namespace(self) -> None:
        """Test lookup in the owner's namespace."""
        self.assertIs(self.resolve("Widget"), self.one(self.tu, "N::Widget"))

    def test_global_name_found_from_namespace(self) -> None:
        """Test lookup falling back to the global scope."""
        self.assertIs(self.resolve("Global"), self.one(self.tu, "Global"))

    def test_qualified_and_absolute_names(self) -> None:
        """Test qualified and leading-scope names."""
        obj = self.one(self.tu, "Core::Object")
        self.assertIs(self.resolve("Core::Object"), obj)
        self.assertIs(self.resolve("::Core::Object"), obj)

    def test_template_arguments_are_ignored(self) -> None:
        """Test that template arguments are stripped."""
        self.assertIs(self.resolve("Widget<int>"), self.one(self.tu, "N::Widget"))

    def test_forward_declared_only_is_unresolved(self) -> None:
        """Test that a forward declaration alone does not resolve."""
        self.assertIsNone(self.resolve("Incomplete"))

    def test_unknown_name_is_unresolved(self) -> None:
        """Test that an unknown name does not resolve."""
        self.assertIsNone(self.resolve("Nowhere"))

    def test_main_file_locality(self) -> None:
        """Test the main-file check."""
        self.assertTrue(self.tu.is_in_main_file(self.one(self.tu, "N::Local")))
        self.assertFalse(self.tu.is_in_main_file(self.one(self.tu, "N::Widget")))


if __name__ == "__main__":
    unittest.main()
