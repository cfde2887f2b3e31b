"""
Per-file session controller.

Owns one ClassAggregator and drives it through a single translation unit at
a time: begin file, run the matcher rules, end file and hand the finished
model to the binding generator.
"""

from __future__ import annotations

import enum
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, TextIO

from bindgen.aggregator import BindingModel, ClassAggregator
from bindgen.jakt_generator import JaktGenerator
from core.bindgen_config import BindgenConfig
from core.structured_logging import source_scope
from extraction.matcher import DeclarationMatcher
from extraction.translation_unit import TranslationUnit

logger = logging.getLogger(__name__)

GeneratorFactory = Callable[[TextIO, BindingModel, str], JaktGenerator]


@dataclass(frozen=True)
class FileOutcome:
    """Result of processing one input file.

    ``status`` is one of generated, skipped or output_failed.
    """

    source: str
    status: str
    output_path: Optional[str] = None
    classes: int = 0
    imports: int = 0
    methods: int = 0


class SessionState(enum.Enum):
    IDLE = "idle"
    ACTIVE = "active"


def output_filename(source_path: str, suffix: str) -> str:
    """Derive the generated file name from an input path.

    Example:
        >>> output_filename("LibWeb/Page/Page.h", ".jakt")
        'page.jakt'
    """
    base = Path(source_path).name
    return str(Path(base).with_suffix(suffix)).lower()


class SourceFileHandler:
    """Runs one aggregation pass per translation unit.

    Args:
        config: Run configuration (namespace, output and base directories).
        generator_factory: Builds the generator for a stream and model.
    """

    def __init__(
        self,
        config: BindgenConfig,
        generator_factory: GeneratorFactory = JaktGenerator,
    ):
        self.config = config
        self.out_dir = os.path.abspath(config.out_dir)
        self.base_dir = os.path.realpath(config.base_dir)
        self.generator_factory = generator_factory
        self.aggregator = ClassAggregator()
        self.matcher = DeclarationMatcher(config.namespace, self.aggregator)
        self.state = SessionState.IDLE
        self.current_filepath: Optional[str] = None

    def begin_file(self, tu: TranslationUnit) -> bool:
        """Start a file session.

        Returns:
            False if the file's identity cannot be determined; the caller
            must skip the file.
        """
        if self.state is not SessionState.IDLE:
            raise RuntimeError(f"begin_file while processing {self.current_filepath}")

        identity = tu.main_file_identity()
        if identity is None:
            logger.warning("Cannot determine identity of %s; skipping", tu.main_file)
            return False

        try:
            self.current_filepath = os.path.relpath(identity, self.base_dir)
        except ValueError:
            logger.warning("Cannot compute relative path for %s from %s. Using absolute path.", identity, self.base_dir)
            self.current_filepath = identity
        logger.info(f"Processing {self.current_filepath}")

        self.aggregator.reset()
        self.state = SessionState.ACTIVE
        return True

    def end_file(self) -> Optional[str]:
        """Finish the file session and generate its bindings.

        Returns:
            Path of the generated file, or None if the output could not be
            opened and generation was skipped.
        """
        if self.state is not SessionState.ACTIVE:
            raise RuntimeError("end_file called without an active file")

        try:
            new_filename = os.path.join(
                self.out_dir,
                output_filename(self.current_filepath, self.config.output_suffix),
            )
            try:
                stream = open(new_filename, "w", encoding="utf-8")
            except OSError as e:
                logger.error("Can't open file %s: %s", new_filename, e)
                return None

            with stream:
                generator = self.generator_factory(stream, self.aggregator.view(), self.config.namespace)
                generator.generate(self.current_filepath)
            logger.info("Wrote %s", new_filename)
            return new_filename
        finally:
            self.aggregator.reset()
            self.state = SessionState.IDLE

    def process_file(self, source_path: str) -> FileOutcome:
        """Run begin, matcher and end for one input file.

        Raises:
            UnsupportedInputError: The file uses an unsupported class shape.
        """
        tu = TranslationUnit(source_path, include_dirs=self.config.include_dirs)
        with source_scope(os.path.basename(source_path)):
            if not self.begin_file(tu):
                return FileOutcome(source=source_path, status="skipped")
            try:
                self.matcher.match(tu)
            except Exception:
                self.aggregator.reset()
                self.state = SessionState.IDLE
                raise
            model = self.aggregator.view()
            output_path = self.end_file()
        return FileOutcome(
            source=source_path,
            status="generated" if output_path else "output_failed",
            output_path=output_path,
            classes=len(model.classes),
            imports=len(model.imports),
            methods=sum(len(m) for m in model.methods.values()),
        )
