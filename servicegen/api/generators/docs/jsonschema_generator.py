"""JSON Schema document of every documented method's parameters and result."""

import json

from servicegen.api.conventions import pascal_case, snake_case
from servicegen.api.extractors.type_mapper import JsonSchemaMapper

from ..schema_utils import (
    collect_records,
    method_type_refs,
    params_schema,
    record_definitions,
    result_schema,
)

DRAFT = "http://json-schema.org/draft-07/schema#"
REF_PREFIX = "#/definitions/"


def build_jsonschema(service, settings):
    names = [r.name for r in service.records]
    mapper = JsonSchemaMapper(names, ref_prefix=REF_PREFIX)
    pairs = list(service.documented())

    refs = []
    definitions = {}
    methods = {}
    for method, op in pairs:
        base = pascal_case(method.name)
        definitions[f"{base}Params"] = params_schema(method.caller_params, mapper, op.summary)
        definitions[f"{base}Result"] = result_schema(method, mapper)
        methods[method.name] = {
            "params": {"$ref": f"{REF_PREFIX}{base}Params"},
            "result": {"$ref": f"{REF_PREFIX}{base}Result"},
        }
        if method.return_shape.is_streaming:
            methods[method.name]["streaming"] = True
        refs.extend(method_type_refs(method))

    definitions.update(record_definitions(collect_records(refs, service), service, mapper))

    document = {
        "$schema": DRAFT,
        "title": service.name,
    }
    if service.documentation:
        document["description"] = service.documentation
    document["methods"] = methods
    document["definitions"] = definitions
    return document


def render_jsonschema(service, settings):
    document = build_jsonschema(service, settings)
    return {f"{snake_case(service.name)}.schema.json": json.dumps(document, indent=2) + "\n"}
