"""Run configuration for the binding generator.

A run is described either on the command line or by a YAML/JSON file:

    namespace: Web
    out_dir: generated/jakt
    base_dir: Libraries
    include_dirs:
      - Libraries
    sources:
      - Libraries/LibWeb/Page
"""

from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

DEFAULT_OUTPUT_SUFFIX = ".jakt"
DEFAULT_REPORT_DIR = "output/run_reports"


@dataclass(frozen=True)
class BindgenConfig:
    """Settings fixed for the whole run.

    Attributes:
        namespace: C++ namespace whose direct classes are bound.
        out_dir: Directory receiving generated files.
        base_dir: Root that input paths are reported relative to.
        include_dirs: Header search directories.
        sources: Input files or directories.
        output_suffix: Extension given to generated files.
        report_dir: Directory receiving the JSON run report.
    """

    namespace: str
    out_dir: str
    base_dir: str = "."
    include_dirs: list[str] = field(default_factory=list)
    sources: list[str] = field(default_factory=list)
    output_suffix: str = DEFAULT_OUTPUT_SUFFIX
    report_dir: str = DEFAULT_REPORT_DIR


def _expect_dict(payload: Any, ctx: str) -> dict[str, Any]:
    if not isinstance(payload, dict):
        raise ValueError(f"{ctx} must be an object")
    return payload


def _expect_str_list(payload: Any, ctx: str) -> list[str]:
    if payload is None:
        return []
    if isinstance(payload, str):
        payload = [payload]
    if not isinstance(payload, list):
        raise ValueError(f"{ctx} must be a list of paths")
    values: list[str] = []
    for item in payload:
        text = str(item).strip()
        if not text:
            raise ValueError(f"{ctx} contains an empty path")
        values.append(text)
    return values


def _load_config_payload(path: str) -> dict[str, Any]:
    config_path = Path(path)
    if not config_path.is_file():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    text = config_path.read_text(encoding="utf-8")
    if config_path.suffix.lower() == ".json":
        payload = json.loads(text)
    else:
        try:
            payload = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid YAML in {config_path}: {e}") from e
    return _expect_dict(payload, "config")


def build_config(payload: dict[str, Any], relative_to: str | None = None) -> BindgenConfig:
    """Validate a raw payload and build the run configuration.

    Relative paths are resolved against ``relative_to`` when given.

    Raises:
        ValueError: If a required key is missing or has the wrong shape.
    """
    namespace = str(payload.get("namespace", "") or "").strip()
    if not namespace:
        raise ValueError("namespace is required")

    out_dir = str(payload.get("out_dir", "") or "").strip()
    if not out_dir:
        raise ValueError("out_dir is required")

    suffix = str(payload.get("output_suffix", DEFAULT_OUTPUT_SUFFIX)).strip()
    if not suffix.startswith(".") or len(suffix) < 2:
        raise ValueError(f"output_suffix must look like '.ext', got {suffix!r}")

    def anchor(value: str) -> str:
        if relative_to is None or os.path.isabs(value):
            return value
        return os.path.join(relative_to, value)

    return BindgenConfig(
        namespace=namespace,
        out_dir=anchor(out_dir),
        base_dir=anchor(str(payload.get("base_dir", ".") or ".")),
        include_dirs=[anchor(p) for p in _expect_str_list(payload.get("include_dirs"), "include_dirs")],
        sources=[anchor(p) for p in _expect_str_list(payload.get("sources"), "sources")],
        output_suffix=suffix,
        report_dir=anchor(str(payload.get("report_dir", DEFAULT_REPORT_DIR))),
    )


def load_bindgen_config(path: str) -> BindgenConfig:
    """Load and validate a run configuration from a YAML/JSON file.

    Relative paths inside the file are taken relative to the file's directory.
    """
    payload = _load_config_payload(path)
    return build_config(payload, relative_to=str(Path(path).resolve().parent))
