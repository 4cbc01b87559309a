"""Model extraction utilities."""

from .model_extractor import (
    get_services,
    get_records,
    type_ref_from_node,
    method_declaration,
    service_declaration,
    get_service_declarations,
)
from .signature_capture import (
    capture_method,
    capture_methods,
    capture_service_options,
    split_docstring,
)
from .return_shape import analyze_return_type, analyze_methods
from .param_classifier import classify_param, classify_method, path_slots
from .type_mapper import get_mapper, map_type, canonical_scalar, referenced_records

__all__ = [
    "get_services",
    "get_records",
    "type_ref_from_node",
    "method_declaration",
    "service_declaration",
    "get_service_declarations",
    "capture_method",
    "capture_methods",
    "capture_service_options",
    "split_docstring",
    "analyze_return_type",
    "analyze_methods",
    "classify_param",
    "classify_method",
    "path_slots",
    "get_mapper",
    "map_type",
    "canonical_scalar",
    "referenced_records",
]
