"""Export evaluation domain exports."""

from .export_registry import (
    ExportBinding,
    ExportEvaluation,
    ExportEvaluationError,
    ExportRegistry,
    default_registry,
    export_test_values,
)
from .export_route import ExportRouteApp, with_export_route
from .export_source import ExportSource, ExportSourceError, HttpExportSource
from .runtime_flags import (
    SEED_ENV_VAR,
    TEST_MODE_ENV_VAR,
    build_app_environment,
    is_test_mode,
    seed_from_environment,
)

__all__ = [
    "ExportBinding",
    "ExportEvaluation",
    "ExportEvaluationError",
    "ExportRegistry",
    "default_registry",
    "export_test_values",
    "ExportRouteApp",
    "with_export_route",
    "ExportSource",
    "ExportSourceError",
    "HttpExportSource",
    "SEED_ENV_VAR",
    "TEST_MODE_ENV_VAR",
    "build_app_environment",
    "is_test_mode",
    "seed_from_environment",
]
