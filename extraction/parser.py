"""
Tree-sitter parser initialization and file parsing utilities.

The C++ frontend never type-checks: syntax errors in the input are reported
as warnings and the (partial) tree is used as-is.
"""

import logging
import os
from typing import Tuple, Union

import tree_sitter_cpp as tscpp
from tree_sitter import Language, Node, Parser, Tree

logger = logging.getLogger(__name__)

# Module-level language constant
CPP_LANGUAGE = Language(tscpp.language())


def create_parser() -> Parser:
    """Create a tree-sitter parser configured for C++.

    Example:
        >>> parser = create_parser()
        >>> tree = parser.parse(b"namespace N { class A {}; }")
    """
    return Parser(CPP_LANGUAGE)


def count_error_nodes(tree: Tree) -> int:
    """Count ERROR and MISSING nodes in a parsed tree."""
    count = 0
    stack = [tree.root_node]
    while stack:
        node: Node = stack.pop()
        if node.type == "ERROR" or node.is_missing:
            count += 1
        if node.has_error:
            stack.extend(node.children)
    return count


def parse_bytes(source: bytes) -> Tree:
    """Parse raw bytes of C++ source code.

    Raises:
        TypeError: If source is not bytes.

    Example:
        >>> tree = parse_bytes(b"class A {};")
        >>> tree.root_node.type
        'translation_unit'
    """
    if not isinstance(source, bytes):
        raise TypeError(f"Source must be bytes, got {type(source).__name__}")

    tree = create_parser().parse(source)
    logger.debug("Parsed %d bytes of C++ code", len(source))
    return tree


def parse_file(file_path: Union[str, os.PathLike]) -> Tuple[Tree, bytes]:
    """Parse a C++ source or header file from disk.

    Returns:
        A tuple of (Tree, source_bytes).

    Raises:
        FileNotFoundError: If the file does not exist.
        OSError: If the file cannot be read.
    """
    try:
        with open(file_path, "rb") as f:
            source_bytes = f.read()
    except FileNotFoundError:
        logger.error(f"File not found: {file_path}")
        raise
    except OSError as e:
        logger.error(f"Error reading file {file_path}: {e}")
        raise

    tree = parse_bytes(source_bytes)

    if tree.root_node.has_error:
        logger.warning(
            "File %s contains syntax errors (%d error nodes)",
            file_path,
            count_error_nodes(tree),
        )

    logger.debug(f"Parsed file: {file_path}")
    return tree, source_bytes
