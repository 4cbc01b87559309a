"""
JSON Schema fragments shared by the document backends.

openapi, openrpc, asyncapi, jsonschema and mcp all describe parameters,
results and records the same way; they differ only in where record
definitions live (the `$ref` prefix).
"""

import yaml

from servicegen.api.extractors.type_mapper import JsonSchemaMapper, referenced_records
from servicegen.lib.descriptors import Role, ShapeKind


def record_names(service):
    return [r.name for r in service.records]


def collect_records(type_refs, service):
    """Declared records reachable from `type_refs`, following record fields."""
    names = record_names(service)
    found = []
    pending = list(type_refs)
    while pending:
        type_ref = pending.pop(0)
        for name in referenced_records(type_ref, names):
            if name in found:
                continue
            found.append(name)
            record = service.get_record(name)
            pending.extend(f.type_ref for f in record.fields)
    return found


def method_type_refs(method, include_context=False):
    refs = [p.type_ref for p in method.params if include_context or not p.is_injected]
    shape = method.return_shape
    refs.extend(t for t in (shape.value_type, shape.error_type) if t is not None)
    return refs


def record_schema(record, mapper: JsonSchemaMapper):
    schema = {"type": "object", "properties": {}}
    if record.documentation:
        schema["description"] = record.documentation
    required = []
    for f in record.fields:
        prop = dict(mapper.map(f.type_ref))
        if f.documentation:
            prop["description"] = f.documentation
        schema["properties"][f.name] = prop
        if not f.is_optional:
            required.append(f.name)
    if required:
        schema["required"] = required
    return schema


def record_definitions(names, service, mapper):
    return {name: record_schema(service.get_record(name), mapper) for name in names}


def param_schema(param, mapper):
    schema = dict(mapper.map(param.value_type))
    if param.default_value is not None:
        schema["default"] = param.default_value
    return schema


def params_schema(params, mapper, description=None):
    """Object schema for a list of caller-visible parameters, keyed by wire name."""
    schema = {"type": "object", "properties": {}}
    if description:
        schema["description"] = description
    required = []
    for p in params:
        schema["properties"][p.wire_name] = param_schema(p, mapper)
        if p.is_required:
            required.append(p.wire_name)
    if required:
        schema["required"] = required
    return schema


def nullable(schema, openapi=False):
    """Admit null: OpenAPI 3.0 `nullable`, or `anyOf` with null for plain JSON Schema."""
    if not openapi:
        return {"anyOf": [schema, {"type": "null"}]}
    if "$ref" in schema:
        # OpenAPI 3.0 ignores siblings of $ref
        return {"allOf": [schema], "nullable": True}
    return dict(schema, nullable=True)


def result_schema(method, mapper, openapi=False):
    """Schema of the serialized success value of a method."""
    shape = method.return_shape
    if shape.kind == ShapeKind.UNIT:
        return mapper.unit()
    if shape.kind == ShapeKind.SEQUENCE:
        return {"type": "array", "items": mapper.map(shape.value_type)}
    if shape.kind == ShapeKind.OPTIONAL_VALUE:
        return nullable(dict(mapper.map(shape.value_type)), openapi)
    # plain, outcome success and stream items
    return mapper.map(shape.value_type)


def error_schema(method, mapper):
    shape = method.return_shape
    if shape.kind != ShapeKind.OUTCOME_SUM:
        return None
    return mapper.map(shape.error_type)


def params_by_role(method, role: Role):
    return [p for p in method.params if p.role == role]


class _NoAliasDumper(yaml.SafeDumper):
    def ignore_aliases(self, data):
        return True


def dump_yaml(document) -> str:
    return yaml.dump(
        document,
        Dumper=_NoAliasDumper,
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
    )
