"""OpenRPC document describing the JSON-RPC backend."""

import json

from servicegen.api.conventions import snake_case
from servicegen.api.extractors.type_mapper import JsonSchemaMapper
from servicegen.lib.descriptors import ShapeKind

from ..schema_utils import (
    collect_records,
    error_schema,
    method_type_refs,
    param_schema,
    record_definitions,
    result_schema,
)

REF_PREFIX = "#/components/schemas/"


def _method(method, op, mapper):
    entry = {"name": method.name}
    if op.summary:
        entry["summary"] = op.summary
    if op.description:
        entry["description"] = op.description
    entry["paramStructure"] = "by-name"
    entry["params"] = [
        {"name": p.wire_name, "required": p.is_required, "schema": param_schema(p, mapper)}
        for p in method.caller_params
    ]
    entry["result"] = {"name": "result", "schema": result_schema(method, mapper)}
    if method.return_shape.kind == ShapeKind.OUTCOME_SUM:
        entry["errors"] = [{
            "code": -32000,
            "message": f"{method.name} failed",
            "data": error_schema(method, mapper),
        }]
    return entry


def build_openrpc(service, settings):
    names = [r.name for r in service.records]
    mapper = JsonSchemaMapper(names, ref_prefix=REF_PREFIX)
    pairs = list(service.documented())

    refs = []
    for m, _ in pairs:
        refs.extend(method_type_refs(m))

    info = {
        "title": service.option("openapi", "title", service.name),
        "version": service.option("openapi", "version", settings.API_VERSION),
    }
    if service.documentation:
        info["description"] = service.documentation

    return {
        "openrpc": settings.OPENRPC_VERSION,
        "info": info,
        "methods": [_method(m, op, mapper) for m, op in pairs],
        "components": {"schemas": record_definitions(collect_records(refs, service), service, mapper)},
    }


def render_openrpc(service, settings):
    document = build_openrpc(service, settings)
    return {f"{snake_case(service.name)}.openrpc.json": json.dumps(document, indent=2) + "\n"}
