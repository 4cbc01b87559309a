"""
OpenAPI specification generator.

Generates a static openapi.yaml documenting every documented operation: its
parameters by role, the request body built from StructuredBody parameters,
and responses per return shape.
"""

from servicegen.api.conventions import snake_case
from servicegen.api.extractors.type_mapper import JsonSchemaMapper
from servicegen.lib.descriptors import Role, ShapeKind

from ..schema_utils import (
    collect_records,
    dump_yaml,
    error_schema,
    method_type_refs,
    param_schema,
    params_by_role,
    params_schema,
    record_definitions,
    result_schema,
)

REF_PREFIX = "#/components/schemas/"

PARAMETER_LOCATIONS = {
    Role.PATH_IDENTIFIER: "path",
    Role.QUERY_VALUE: "query",
    Role.HEADER_VALUE: "header",
}


def _parameters(method, mapper):
    parameters = []
    for p in method.params:
        location = PARAMETER_LOCATIONS.get(p.role)
        if location is None:
            continue
        parameters.append({
            "name": p.wire_name,
            "in": location,
            "required": location == "path" or p.is_required,
            "schema": param_schema(p, mapper),
        })
    return parameters


def _responses(method, op, mapper):
    shape = method.return_shape
    status = str(op.status_code)
    responses = {}

    if shape.kind == ShapeKind.UNIT and op.status_code == 204:
        responses[status] = {"description": "No content"}
    elif shape.is_streaming:
        responses[status] = {
            "description": "Stream of server-sent events, one item per event",
            "content": {"text/event-stream": {"schema": result_schema(method, mapper, openapi=True)}},
        }
    else:
        content_type = op.content_type or "application/json"
        responses[status] = {
            "description": "Successful response",
            "content": {content_type: {"schema": result_schema(method, mapper, openapi=True)}},
        }

    if op.extra_headers:
        responses[status]["headers"] = {
            name: {"schema": {"type": "string", "example": value}}
            for name, value in op.extra_headers.items()
        }

    if shape.kind == ShapeKind.OPTIONAL_VALUE:
        responses["404"] = {"description": "Not found"}

    if shape.kind == ShapeKind.OUTCOME_SUM:
        responses["400"] = {
            "description": "Operation failed",
            "content": {
                "application/json": {
                    "schema": {
                        "type": "object",
                        "properties": {"error": error_schema(method, mapper)},
                        "required": ["error"],
                    }
                }
            },
        }

    if method.caller_params:
        responses["422"] = {"description": "Validation error"}

    return responses


def _operation(service, method, op, mapper):
    operation = {"operationId": method.name, "tags": [service.name]}
    if op.summary:
        operation["summary"] = op.summary
    if op.description:
        operation["description"] = op.description

    parameters = _parameters(method, mapper)
    if parameters:
        operation["parameters"] = parameters

    body = params_by_role(method, Role.STRUCTURED_BODY)
    if body:
        operation["requestBody"] = {
            "required": True,
            "content": {"application/json": {"schema": params_schema(body, mapper)}},
        }

    operation["responses"] = _responses(method, op, mapper)
    return operation


def build_openapi(service, settings):
    """Build the OpenAPI document as a plain dict."""
    names = [r.name for r in service.records]
    mapper = JsonSchemaMapper(names, ref_prefix=REF_PREFIX)

    info = {
        "title": service.option("openapi", "title", service.name),
        "version": service.option("openapi", "version", settings.API_VERSION),
    }
    if service.documentation:
        info["description"] = service.documentation

    spec = {
        "openapi": settings.OPENAPI_VERSION,
        "info": info,
        "servers": [{"url": service.option("openapi", "server", settings.SERVER_URL)}],
        "paths": {},
        "components": {"schemas": {}},
    }

    refs = []
    for method, op in service.documented():
        spec["paths"].setdefault(op.path, {})[op.verb.lower()] = _operation(service, method, op, mapper)
        refs.extend(method_type_refs(method))

    spec["components"]["schemas"] = record_definitions(collect_records(refs, service), service, mapper)
    return spec


def render_openapi(service, settings):
    spec = build_openapi(service, settings)
    return {f"{snake_case(service.name)}.openapi.yaml": dump_yaml(spec)}
