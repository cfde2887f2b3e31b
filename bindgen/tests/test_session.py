"""
Tests for the per-file session controller.

Each test writes a small C++ tree into a temporary directory and drives the
handler end to end, capturing the model handed to the generator.
"""

import os
import tempfile
import unittest
from pathlib import Path

from bindgen.errors import NonPublicBaseError, VirtualBaseError
from bindgen.session import SessionState, SourceFileHandler, output_filename
from core.bindgen_config import BindgenConfig
from extraction.translation_unit import TranslationUnit


class RecordingGenerator:
    """Generator stand-in that remembers every model it was given."""

    runs = []

    def __init__(self, stream, model, namespace):
        self.stream = stream
        self.model = model
        self.namespace = namespace

    def generate(self, relative_path):
        RecordingGenerator.runs.append((relative_path, self.model))
        self.stream.write(f"// {relative_path}\n")


class SessionTestCase(unittest.TestCase):
    """Shared temporary source tree and handler factory."""

    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.root = Path(self._tmp.name).resolve()
        self.out_dir = self.root / "out"
        self.out_dir.mkdir()
        RecordingGenerator.runs = []

    def tearDown(self):
        self._tmp.cleanup()

    def write(self, relative, text):
        path = self.root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        if isinstance(text, bytes):
            path.write_bytes(text)
        else:
            path.write_text(text, encoding="utf-8")
        return str(path)

    def handler(self, namespace="N", out_dir=None, generator=RecordingGenerator):
        config = BindgenConfig(
            namespace=namespace,
            out_dir=str(out_dir or self.out_dir),
            base_dir=str(self.root),
            include_dirs=[str(self.root / "include")],
        )
        return SourceFileHandler(config, generator_factory=generator)

    @staticmethod
    def names(decls):
        return [decl.name for decl in decls]


class TestOutputFilename(unittest.TestCase):
    """Test generated file naming."""

    def test_extension_replaced_and_lower_cased(self):
        """Test that the extension becomes .jakt and the name is lower-cased."""
        self.assertEqual(output_filename("LibWeb/Page/Page.h", ".jakt"), "page.jakt")
        self.assertEqual(output_filename("/abs/HTMLElement.HPP", ".jakt"), "htmlelement.jakt")

    def test_name_without_extension(self):
        """Test that a name without extension gains the suffix."""
        self.assertEqual(output_filename("Makefile", ".jakt"), "makefile.jakt")

    def test_only_last_extension_replaced(self):
        """Test that only the final extension is replaced."""
        self.assertEqual(output_filename("Foo.Bar.h", ".jakt"), "foo.bar.jakt")


class TestProcessFile(SessionTestCase):
    """Test begin, match and end for whole files."""

    def test_methods_filtered_for_single_class(self):
        """Test that special and private members never reach the model."""
        source = self.write(
            "LibWeb/Page.h",
            "namespace N {\n"
            "class A {\n"
            "public:\n"
            "  A();\n"
            "  ~A();\n"
            "  void f();\n"
            "private:\n"
            "  void g();\n"
            "};\n"
            "}\n",
        )
        outcome = self.handler().process_file(source)

        self.assertEqual(outcome.status, "generated")
        self.assertEqual(outcome.output_path, str(self.out_dir / "page.jakt"))
        self.assertTrue(Path(outcome.output_path).is_file())
        relative_path, model = RecordingGenerator.runs[0]
        self.assertEqual(relative_path, os.path.join("LibWeb", "Page.h"))
        self.assertEqual(self.names(model.classes), ["A"])
        self.assertEqual(model.imports, ())
        self.assertEqual(self.names(model.methods_of(model.classes[0])), ["f"])
        self.assertEqual((outcome.classes, outcome.imports, outcome.methods), (1, 0, 1))

    def test_base_from_included_header_is_imported(self):
        """Test that a base defined in a header becomes an import."""
        self.write("include/A.h", "namespace N { class A { public: void a(); }; }\n")
        source = self.write("B.h", "#include <A.h>\nnamespace N { class B : public A {}; }\n")
        self.handler().process_file(source)

        _, model = RecordingGenerator.runs[0]
        self.assertEqual(self.names(model.classes), ["B"])
        self.assertEqual(self.names(model.imports), ["A"])
        self.assertEqual(model.imports[0].location.path, str(self.root / "include" / "A.h"))

    def test_base_in_same_file_is_local(self):
        """Test that a base defined in the main file is not imported."""
        source = self.write(
            "C.h",
            "namespace N {\n"
            "class A {};\n"
            "class C : public A {};\n"
            "}\n",
        )
        self.handler().process_file(source)

        _, model = RecordingGenerator.runs[0]
        self.assertEqual(self.names(model.classes), ["A", "C"])
        self.assertEqual(model.imports, ())

    def test_sessions_are_isolated(self):
        """Test that nothing from one file leaks into the next."""
        self.write("include/Base.h", "namespace N { class Base {}; }\n")
        first = self.write("First.h", "#include <Base.h>\nnamespace N { class X : public Base { public: void x(); }; }\n")
        second = self.write("Second.h", "namespace N { class Y { public: void y(); }; }\n")
        handler = self.handler()
        handler.process_file(first)
        handler.process_file(second)

        _, model = RecordingGenerator.runs[1]
        self.assertEqual(self.names(model.classes), ["Y"])
        self.assertEqual(model.imports, ())
        self.assertEqual([self.names(m) for m in model.methods.values()], [["y"]])
        self.assertEqual(handler.state, SessionState.IDLE)
        self.assertTrue(handler.aggregator.is_empty())

    def test_non_utf8_default_argument(self):
        """Test that a Latin-1 byte in a default value does not abort the file."""
        source = self.write(
            "Latin.h",
            b'namespace N { class A { public: void f(const char* s = "caf\xe9"); }; }\n',
        )
        outcome = self.handler().process_file(source)

        self.assertEqual(outcome.status, "generated")
        _, model = RecordingGenerator.runs[0]
        method = model.methods_of(model.classes[0])[0]
        self.assertEqual(method.name, "f")
        self.assertIn("\ufffd", method.parameters[0].default)

    def test_missing_file_is_skipped(self):
        """Test that an unresolvable input is skipped without generating."""
        handler = self.handler()
        outcome = handler.process_file(str(self.root / "Nope.h"))
        self.assertEqual(outcome.status, "skipped")
        self.assertIsNone(outcome.output_path)
        self.assertEqual(RecordingGenerator.runs, [])
        self.assertEqual(handler.state, SessionState.IDLE)

    def test_output_open_failure_skips_generation(self):
        """Test that an unopenable destination skips the generator."""
        blocker = self.root / "not_a_dir"
        blocker.write_text("", encoding="utf-8")
        source = self.write("A.h", "namespace N { class A {}; }\n")
        handler = self.handler(out_dir=blocker)

        outcome = handler.process_file(source)
        self.assertEqual(outcome.status, "output_failed")
        self.assertIsNone(outcome.output_path)
        self.assertEqual(outcome.classes, 1)
        self.assertEqual(RecordingGenerator.runs, [])
        self.assertEqual(handler.state, SessionState.IDLE)

    def test_unsupported_base_aborts_and_resets(self):
        """Test that a fatal base leaves the handler idle and reusable."""
        bad = self.write("Bad.h", "namespace N { class A {}; class B : private A {}; }\n")
        good = self.write("Good.h", "namespace N { class G {}; }\n")
        handler = self.handler()

        with self.assertRaises(NonPublicBaseError):
            handler.process_file(bad)
        self.assertEqual(handler.state, SessionState.IDLE)
        self.assertTrue(handler.aggregator.is_empty())
        self.assertFalse((self.out_dir / "bad.jakt").exists())

        handler.process_file(good)
        _, model = RecordingGenerator.runs[0]
        self.assertEqual(self.names(model.classes), ["G"])

    def test_virtual_base_in_same_file_is_fatal(self):
        """Test that a virtual base is fatal even when defined locally."""
        source = self.write("V.h", "namespace N { class A {}; class B : public virtual A {}; }\n")
        with self.assertRaises(VirtualBaseError):
            self.handler().process_file(source)

    def test_input_outside_base_dir_uses_relative_path(self):
        """Test that inputs outside the base directory still generate."""
        with tempfile.TemporaryDirectory() as other:
            source = Path(other).resolve() / "Outside.h"
            source.write_text("namespace N { class O {}; }\n", encoding="utf-8")
            outcome = self.handler().process_file(str(source))

        self.assertEqual(outcome.status, "generated")
        relative_path, _ = RecordingGenerator.runs[0]
        self.assertTrue(relative_path.endswith("Outside.h"))
        self.assertEqual(Path(outcome.output_path).name, "outside.jakt")


class TestSessionState(SessionTestCase):
    """Test the IDLE and ACTIVE state machine."""

    def test_begin_twice_raises(self):
        """Test that beginning an active session is an error."""
        source = self.write("A.h", "namespace N { class A {}; }\n")
        handler = self.handler()
        self.assertTrue(handler.begin_file(TranslationUnit(source)))
        self.assertEqual(handler.state, SessionState.ACTIVE)
        with self.assertRaises(RuntimeError):
            handler.begin_file(TranslationUnit(source))

    def test_end_without_begin_raises(self):
        """Test that ending an idle session is an error."""
        with self.assertRaises(RuntimeError):
            self.handler().end_file()

    def test_begin_on_missing_file_stays_idle(self):
        """Test that an unknown identity leaves the handler idle."""
        handler = self.handler()
        self.assertFalse(handler.begin_file(TranslationUnit(self.root / "missing.h")))
        self.assertEqual(handler.state, SessionState.IDLE)

    def test_manual_session_writes_real_bindings(self):
        """Test a manual begin, match, end cycle with the Jakt generator."""
        source = self.write("Widget.h", "namespace N { class Widget { public: int size() const; }; }\n")
        handler = SourceFileHandler(
            BindgenConfig(namespace="N", out_dir=str(self.out_dir), base_dir=str(self.root))
        )
        tu = TranslationUnit(source)
        self.assertTrue(handler.begin_file(tu))
        handler.matcher.match(tu)
        output_path = handler.end_file()

        text = Path(output_path).read_text(encoding="utf-8")
        self.assertIn('import extern "Widget.h" {', text)
        self.assertIn("class Widget {", text)
        self.assertIn("public fn size(this) -> i32", text)
        self.assertEqual(handler.state, SessionState.IDLE)
        self.assertTrue(handler.aggregator.is_empty())


if __name__ == "__main__":
    unittest.main()
