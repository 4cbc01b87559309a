"""
Model extraction pipeline: ServiceDeclaration -> ServiceDescriptor.

Passes run in a fixed order over the whole block and never mutate the output
of an earlier pass:

    [PHASE 1] signature capture          drafts + validated overrides
    [PHASE 2] return-shape analysis      one of six shapes per method
    [PHASE 3] context resolution         block-wide two-pass scan
    [PHASE 4] classification + naming    roles, verbs, paths, backend names
    [PHASE 5] validation                 paths, duplicate routes, record names

Every independent problem found along the way is collected; the block fails
once with GenerationFailed listing all of them.
"""

from servicegen.config import get_settings
from servicegen.errors import raise_if_errors
from servicegen.lib.descriptors import ServiceDescriptor, freeze
from servicegen.validation import verify_paths, verify_record_names, verify_unique_routes

from .context_resolver import resolve_context
from .conventions import resolve_operation, route_basis
from .extractors import (
    analyze_methods,
    capture_methods,
    capture_service_options,
    classify_method,
    get_service_declarations,
)
from .gen_logging import get_logger

logger = get_logger(__name__)


def extract_service(declaration, settings=None) -> ServiceDescriptor:
    """Build the immutable ServiceDescriptor of one service block."""
    settings = settings or get_settings()
    errors = []

    logger.debug(f"[PHASE 1] Capturing signatures of '{declaration.name}'...")
    options, option_errors = capture_service_options(declaration)
    errors.extend(option_errors)
    drafts, capture_errors = capture_methods(declaration.methods)
    errors.extend(capture_errors)

    logger.debug("[PHASE 2] Analyzing return shapes...")
    shaped = analyze_methods(drafts)

    logger.debug("[PHASE 3] Resolving ambient context...")
    resolution = resolve_context(shaped, settings.CONTEXT_TYPE)
    errors.extend(resolution.errors)
    if resolution.has_qualified:
        logger.debug(f"  Qualified {settings.CONTEXT_TYPE} found; bare names are user types")

    logger.debug("[PHASE 4] Classifying parameters and resolving operations...")
    prefix = options.get("http", {}).get("prefix")
    methods = []
    operations = []
    for method in shaped:
        basis = route_basis(method)
        classified, class_errors = classify_method(
            method, basis.verb, resolution, explicit_path=basis.explicit_path
        )
        errors.extend(class_errors)
        op = resolve_operation(classified, basis, prefix)
        logger.debug(
            f"  {method.name}: {op.kind.value} {op.verb} {op.path} "
            f"-> {classified.return_shape.describe()}"
        )
        methods.append(classified)
        operations.append(op)

    logger.debug("[PHASE 5] Validating routes...")
    errors.extend(verify_paths(methods, operations))
    errors.extend(verify_unique_routes(methods, operations))
    errors.extend(verify_record_names(declaration.records, methods, operations))

    raise_if_errors(declaration.name, errors)

    return ServiceDescriptor(
        name=declaration.name,
        methods=tuple(methods),
        operations=tuple(operations),
        documentation=declaration.documentation,
        options=freeze(options),
        records=tuple(declaration.records),
        has_qualified_context=resolution.has_qualified,
        location=declaration.location,
    )


def extract_services(model, settings=None):
    """Extract every service block of a parsed textX model, in order."""
    services = []
    for declaration in get_service_declarations(model):
        services.append(extract_service(declaration, settings))
        logger.info(f"[EXTRACTED] {declaration.name} ({len(services[-1].methods)} methods)")
    return services
