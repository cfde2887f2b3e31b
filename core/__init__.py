"""Core shared configuration, logging and reporting utilities."""

from core.bindgen_config import (
    BindgenConfig,
    build_config,
    load_bindgen_config,
)
from core.structured_logging import (
    configure_structured_logging,
    get_run_id,
    get_source,
    phase_scope,
    set_run_id,
    source_scope,
)
from core.run_artifacts import write_run_report

__all__ = [
    "BindgenConfig",
    "build_config",
    "load_bindgen_config",
    "configure_structured_logging",
    "get_run_id",
    "get_source",
    "phase_scope",
    "set_run_id",
    "source_scope",
    "write_run_report",
]
