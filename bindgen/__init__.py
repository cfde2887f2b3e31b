"""
Binding generation core.

Aggregates the classes of one translation unit, classifies their bases as
local or imported, filters their methods, and renders Jakt binding stubs.
"""

from bindgen.aggregator import BindingModel, ClassAggregator, SourceInfo
from bindgen.driver import BindgenStats, discover_source_files, expand_sources, generate_bindings
from bindgen.errors import (
    NonPublicBaseError,
    UnresolvedBaseError,
    UnsupportedInputError,
    VirtualBaseError,
)
from bindgen.jakt_generator import JaktGenerator, map_type
from bindgen.session import FileOutcome, SessionState, SourceFileHandler, output_filename

__all__ = [
    # Aggregation
    "BindingModel",
    "ClassAggregator",
    "SourceInfo",
    # Errors
    "UnsupportedInputError",
    "VirtualBaseError",
    "NonPublicBaseError",
    "UnresolvedBaseError",
    # Session
    "FileOutcome",
    "SessionState",
    "SourceFileHandler",
    "output_filename",
    # Generation
    "JaktGenerator",
    "map_type",
    # Orchestration
    "BindgenStats",
    "discover_source_files",
    "expand_sources",
    "generate_bindings",
]
