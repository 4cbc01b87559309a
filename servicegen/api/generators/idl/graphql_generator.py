"""
GraphQL SDL backend.

Lookups and collection queries become Query fields, streaming methods
Subscription fields, everything else Mutation fields. Records used as
results are emitted as object types; records used as arguments as
`<Record>Input` input types.
"""

from servicegen.api.conventions import snake_case
from servicegen.api.extractors.type_mapper import GraphQLMapper
from servicegen.lib.descriptors import ShapeKind

from ..schema_utils import collect_records
from ..templating import render_template

INPUT_SUFFIX = "Input"


def _result_type(method, mapper):
    shape = method.return_shape
    if shape.kind == ShapeKind.UNIT:
        return "Boolean"
    if shape.kind == ShapeKind.OPTIONAL_VALUE:
        return mapper.map(shape.value_type)
    if shape.kind == ShapeKind.SEQUENCE:
        return f"[{mapper.map_required(shape.value_type)}]!"
    return mapper.map_required(shape.value_type)


def _record_type(record, mapper):
    return {
        "name": record.name + (mapper.record_suffix or ""),
        "doc": record.documentation,
        "fields": [
            {"name": f.name, "type": mapper.map_required(f.type_ref), "doc": f.documentation}
            for f in record.fields
        ],
    }


def build_graphql_context(service):
    names = [r.name for r in service.records]
    output_mapper = GraphQLMapper(names)
    input_mapper = GraphQLMapper(names, record_suffix=INPUT_SUFFIX)

    roots = {"query": [], "mutation": [], "subscription": []}
    output_refs = []
    input_refs = []
    uses_json = False

    for method, op in service.exposed():
        args = [
            {"name": p.wire_name, "type": input_mapper.map_required(p.type_ref)}
            for p in method.caller_params
        ]
        field_type = _result_type(method, output_mapper)
        roots[op.graphql_kind].append({
            "name": op.graphql_field,
            "doc": op.summary,
            "args": args,
            "type": field_type,
        })
        input_refs.extend(p.type_ref for p in method.caller_params)
        shape = method.return_shape
        output_refs.extend(t for t in (shape.value_type,) if t is not None)
        uses_json = uses_json or "JSON" in field_type or any("JSON" in a["type"] for a in args)

    output_types = [_record_type(service.get_record(n), output_mapper) for n in collect_records(output_refs, service)]
    input_types = [_record_type(service.get_record(n), input_mapper) for n in collect_records(input_refs, service)]
    for t in output_types + input_types:
        uses_json = uses_json or any("JSON" in f["type"] for f in t["fields"])

    return {
        "name": service.name,
        "doc": service.documentation,
        "roots": roots,
        "types": output_types,
        "inputs": input_types,
        "uses_json": uses_json,
    }


def render_graphql(service, settings):
    text = render_template("idl/schema.graphql.jinja", svc=build_graphql_context(service))
    return {f"{snake_case(service.name)}.graphql": text}
