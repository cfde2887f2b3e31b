"""
High-level orchestrator for a binding generation run.

Expands the configured sources into a list of C++ files and processes them
one at a time through a single SourceFileHandler. An unsupported input aborts
the whole run; every other per-file failure is counted and the run continues.
"""

import logging
import os
from typing import Dict, List, Optional

from bindgen.session import FileOutcome, SourceFileHandler
from core.bindgen_config import BindgenConfig
from extraction.config import CPP_EXTENSIONS, SKIPPED_DIRECTORIES

logger = logging.getLogger(__name__)


class BindgenStats:
    """Statistics for a generation run."""

    def __init__(self):
        self.files_processed = 0
        self.files_skipped = 0
        self.outputs_failed = 0
        self.classes = 0
        self.imports = 0
        self.methods = 0
        self.outputs: List[str] = []

    def record(self, outcome: FileOutcome) -> None:
        if outcome.status == "skipped":
            self.files_skipped += 1
            return
        self.files_processed += 1
        self.classes += outcome.classes
        self.imports += outcome.imports
        self.methods += outcome.methods
        if outcome.status == "output_failed":
            self.outputs_failed += 1
        elif outcome.output_path:
            self.outputs.append(outcome.output_path)

    @property
    def status(self) -> str:
        if self.files_processed == 0 and self.files_skipped == 0:
            return "success"
        if not self.outputs:
            return "failed"
        if self.files_skipped or self.outputs_failed:
            return "partial_success"
        return "success"

    def to_dict(self) -> Dict[str, object]:
        """Convert stats to dictionary."""
        return {
            "files_processed": self.files_processed,
            "files_skipped": self.files_skipped,
            "outputs_failed": self.outputs_failed,
            "classes": self.classes,
            "imports": self.imports,
            "methods": self.methods,
            "outputs": list(self.outputs),
        }

    def __str__(self) -> str:
        return (
            f"BindgenStats(processed={self.files_processed}, "
            f"skipped={self.files_skipped}, output_failed={self.outputs_failed}, "
            f"classes={self.classes}, imports={self.imports}, methods={self.methods})"
        )


def discover_source_files(directory: str) -> List[str]:
    """Recursively discover all C++ files in a directory.

    Hidden directories and common build/cache directories are skipped.

    Returns:
        Sorted list of absolute paths.
    """
    cpp_files = []
    directory = os.path.abspath(directory)

    for root, dirs, files in os.walk(directory):
        dirs[:] = [d for d in dirs if not d.startswith(".") and d not in SKIPPED_DIRECTORIES]
        for file in files:
            if os.path.splitext(file)[1] in CPP_EXTENSIONS:
                cpp_files.append(os.path.join(root, file))

    logger.info(f"Found {len(cpp_files)} C++ files in {directory}")
    return sorted(cpp_files)


def expand_sources(sources: List[str]) -> List[str]:
    """Expand directories into their C++ files, keeping file order stable.

    Plain paths are passed through even if they do not exist: the session
    controller reports and skips them.
    """
    expanded: List[str] = []
    seen = set()
    for source in sources:
        if os.path.isdir(source):
            candidates = discover_source_files(source)
        else:
            candidates = [source]
        for candidate in candidates:
            key = os.path.abspath(candidate)
            if key in seen:
                continue
            seen.add(key)
            expanded.append(candidate)
    return expanded


def generate_bindings(
    config: BindgenConfig,
    handler: Optional[SourceFileHandler] = None,
) -> BindgenStats:
    """Generate bindings for every configured source.

    Raises:
        UnsupportedInputError: A source uses a class shape the bindings cannot
            represent; no further files are processed.
    """
    handler = handler or SourceFileHandler(config)
    stats = BindgenStats()

    sources = expand_sources(config.sources)
    if not sources:
        logger.warning("No C++ sources to process")
        return stats

    os.makedirs(config.out_dir, exist_ok=True)
    logger.info(
        "Generating bindings for namespace %s from %d files into %s",
        config.namespace,
        len(sources),
        os.path.abspath(config.out_dir),
    )

    for source in sources:
        stats.record(handler.process_file(source))

    logger.info(f"Generation complete: {stats}")
    return stats
