"""
Jakt binding stub generator.

Renders a BindingModel as a Jakt ``import extern`` block. The generator only
reads the model; it never mutates the aggregator's state.
"""

from __future__ import annotations

import logging
import os
import re
from typing import Dict, List, TextIO

from bindgen.aggregator import BindingModel
from extraction.models import ClassDecl, MethodDecl, Parameter

logger = logging.getLogger(__name__)

INDENT = "    "

# C++ spellings with a direct Jakt equivalent
PRIMITIVE_TYPES: Dict[str, str] = {
    "void": "void",
    "bool": "bool",
    "char": "c_char",
    "signed char": "i8",
    "unsigned char": "u8",
    "short": "i16",
    "unsigned short": "u16",
    "int": "i32",
    "signed": "i32",
    "unsigned": "u32",
    "unsigned int": "u32",
    "long": "i64",
    "unsigned long": "u64",
    "long long": "i64",
    "unsigned long long": "u64",
    "float": "f32",
    "double": "f64",
    "size_t": "usize",
    "ssize_t": "isize",
    "int8_t": "i8",
    "int16_t": "i16",
    "int32_t": "i32",
    "int64_t": "i64",
    "uint8_t": "u8",
    "uint16_t": "u16",
    "uint32_t": "u32",
    "uint64_t": "u64",
    "i8": "i8",
    "i16": "i16",
    "i32": "i32",
    "i64": "i64",
    "u8": "u8",
    "u16": "u16",
    "u32": "u32",
    "u64": "u64",
    "f32": "f32",
    "f64": "f64",
}

_IDENTIFIER_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_QUALIFIER_RE = re.compile(r"\b(const|volatile|struct|class|enum|typename)\b")


def map_type(cpp_type: str) -> str:
    """Map a C++ type spelling to a Jakt type spelling.

    Example:
        >>> map_type("const char*")
        'raw c_char'
        >>> map_type("Web::Request&")
        '&mut Web::Request'
    """
    text = cpp_type.strip()
    if not text:
        return "void"

    if text.endswith("&&"):
        return map_type(text[:-2])
    if text.endswith("&"):
        inner = text[:-1].strip()
        prefix = "&" if re.search(r"\bconst\b", inner) else "&mut "
        return prefix + map_type(inner)
    if text.endswith("* const"):
        return map_type(text[: -len(" const")])
    if text.endswith("*"):
        return "raw " + map_type(text[:-1])
    if text.endswith("[]"):
        return "raw " + map_type(text[:-2])

    bare = " ".join(_QUALIFIER_RE.sub(" ", text).split())
    if bare.startswith("std::"):
        bare = bare[len("std::"):]
    if bare in PRIMITIVE_TYPES:
        return PRIMITIVE_TYPES[bare]
    return bare


def module_name_for(decl: ClassDecl) -> str:
    """Name of the generated module that declares ``decl``."""
    stem = os.path.splitext(os.path.basename(decl.location.path))[0]
    return stem.lower()


class JaktGenerator:
    """Writes Jakt binding stubs for one translation unit.

    Args:
        stream: Writable text stream for the generated source.
        model: Read-only aggregation result for the file.
        namespace: Namespace the classes were matched in.
    """

    def __init__(self, stream: TextIO, model: BindingModel, namespace: str):
        self.stream = stream
        self.model = model
        self.namespace = namespace

    def generate(self, relative_path: str) -> None:
        """Render the model; ``relative_path`` names the C++ header to import."""
        lines: List[str] = [
            f"// Generated from {relative_path}. Do not edit.",
            "",
        ]

        for decl in self.model.imports:
            lines.append(f"import {module_name_for(decl)} {{ {decl.name} }}")
        if self.model.imports:
            lines.append("")

        lines.append(f'import extern "{relative_path}" {{')
        lines.append(f"{INDENT}namespace {self.namespace} {{")
        for index, decl in enumerate(self.model.classes):
            if index:
                lines.append("")
            lines.extend(self._render_class(decl, depth=2))
        lines.append(f"{INDENT}}}")
        lines.append("}")

        self.stream.write("\n".join(lines) + "\n")
        logger.debug(
            "Generated %d classes and %d imports for %s",
            len(self.model.classes),
            len(self.model.imports),
            relative_path,
        )

    def _render_class(self, decl: ClassDecl, depth: int) -> List[str]:
        pad = INDENT * depth
        header = f"{pad}class {decl.name}"
        if decl.bases:
            header += ": " + ", ".join(base.name for base in decl.bases)
        lines = [header + " {"]
        for method in self.model.methods_of(decl):
            lines.append(self._render_method(method, depth + 1))
        lines.append(f"{pad}}}")
        return lines

    def _render_method(self, method: MethodDecl, depth: int) -> str:
        pad = INDENT * depth
        if not _IDENTIFIER_RE.match(method.name) or any(p.type == "..." for p in method.parameters):
            return f"{pad}// unsupported: {method.name}"

        params: List[str] = []
        if method.is_instance:
            params.append("this" if method.is_const else "mut this")
        for index, param in enumerate(method.parameters):
            params.append(self._render_parameter(param, index))

        visibility = "public" if method.access == "public" else "private"
        signature = f"{pad}{visibility} fn {method.name}({', '.join(params)})"
        return_type = map_type(method.return_type)
        if return_type != "void":
            signature += f" -> {return_type}"
        return signature

    @staticmethod
    def _render_parameter(param: Parameter, index: int) -> str:
        name = param.name or f"arg{index}"
        return f"anon {name}: {map_type(param.type)}"
