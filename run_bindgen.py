#!/usr/bin/env python3
"""
Jakt binding generator for the classes of one C++ namespace.

For every input file, binds the classes declared directly in the target
namespace and writes one lower-cased ``.jakt`` file per input into the output
directory.

Usage:
    python run_bindgen.py --config bindgen.yml
    python run_bindgen.py --namespace Web --out-dir out/jakt --base-dir Libraries \
        -I Libraries Libraries/LibWeb/Page/Page.h
"""

from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Optional, Sequence

from bindgen.driver import generate_bindings
from bindgen.errors import UnsupportedInputError
from core.bindgen_config import BindgenConfig, build_config, load_bindgen_config
from core.run_artifacts import write_run_report
from core.structured_logging import configure_structured_logging, phase_scope, set_run_id

logger = logging.getLogger(__name__)


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Generate Jakt binding stubs for C++ namespace classes",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  python run_bindgen.py --config bindgen.yml\n"
            "  python run_bindgen.py --namespace Web --out-dir out -I include src/Page.h\n"
        ),
    )
    parser.add_argument(
        "sources",
        nargs="*",
        help="C++ files or directories to process (added to the config's sources).",
    )
    parser.add_argument(
        "--config",
        default=None,
        help="Path to a YAML/JSON run configuration.",
    )
    parser.add_argument(
        "--namespace",
        default=None,
        help="Namespace whose direct classes are bound.",
    )
    parser.add_argument(
        "--out-dir",
        default=None,
        help="Directory receiving generated files.",
    )
    parser.add_argument(
        "--base-dir",
        default=None,
        help="Root that input paths are reported relative to. Default: current directory.",
    )
    parser.add_argument(
        "-I",
        "--include-dir",
        action="append",
        default=[],
        dest="include_dirs",
        help="Header search directory (repeatable).",
    )
    parser.add_argument(
        "--report-dir",
        default=None,
        help="Directory receiving the JSON run report.",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging.",
    )
    return parser.parse_args(argv)


def resolve_config(args: argparse.Namespace) -> BindgenConfig:
    """Merge the optional config file with command-line overrides.

    Raises:
        FileNotFoundError: The config file does not exist.
        ValueError: The merged configuration is invalid.
    """
    payload: dict[str, Any] = {}
    if args.config:
        base = load_bindgen_config(args.config)
        payload = {
            "namespace": base.namespace,
            "out_dir": base.out_dir,
            "base_dir": base.base_dir,
            "include_dirs": list(base.include_dirs),
            "sources": list(base.sources),
            "output_suffix": base.output_suffix,
            "report_dir": base.report_dir,
        }

    for key in ("namespace", "out_dir", "base_dir", "report_dir"):
        value = getattr(args, key)
        if value:
            payload[key] = value
    payload["include_dirs"] = payload.get("include_dirs", []) + list(args.include_dirs)
    payload["sources"] = payload.get("sources", []) + list(args.sources)
    return build_config(payload)


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = parse_args(argv)
    configure_structured_logging(level=logging.DEBUG if args.verbose else logging.INFO)
    run_id = set_run_id()

    run_report: dict[str, Any] = {
        "run_id": run_id,
        "pipeline": "jakt_bindgen",
    }
    try:
        config = resolve_config(args)
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Invalid configuration: %s", exc)
        return 1

    run_report["namespace"] = config.namespace
    try:
        with phase_scope("generate"):
            stats = generate_bindings(config)
    except UnsupportedInputError as exc:
        logger.error("ERROR: %s", exc)
        run_report["error"] = str(exc)
        report_path = write_run_report(run_report, run_id, "failed", config.report_dir)
        logger.info("Run report written: %s", report_path)
        return 1

    run_report.update(stats.to_dict())
    report_path = write_run_report(run_report, run_id, stats.status, config.report_dir)
    logger.info("Run report written: %s", report_path)
    return 1 if stats.status == "failed" else 0


if __name__ == "__main__":
    sys.exit(main())
