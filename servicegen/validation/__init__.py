"""
Validation layer for servicegen.

Organized by concern:
- path_validators: path template well-formedness and slot binding
- route_validators: duplicate (verb, path) detection
- record_validators: record names that clash with generated code
- schema_validators: drift between an emitted artifact and the current model
"""

from servicegen.validation.path_validators import (
    validate_path_template,
    verify_path_params,
    verify_paths,
)
from servicegen.validation.record_validators import verify_record_names
from servicegen.validation.route_validators import (
    normalize_path,
    verify_unique_routes,
)
from servicegen.validation.schema_validators import (
    compare_artifact,
    diff_documents,
    diff_text,
    verify_schema,
)

__all__ = [
    "validate_path_template",
    "verify_path_params",
    "verify_paths",
    "normalize_path",
    "verify_unique_routes",
    "verify_record_names",
    "compare_artifact",
    "diff_documents",
    "diff_text",
    "verify_schema",
]
