"""
Smithy 2.0 IDL backend.

One `service` shape lists every exposed method as an `operation` with
`<Op>Input` / `<Op>Output` structures. List and map types become named
collection shapes (`StringList`, `UserMap`, ...) collected by the mapper.
"""

from servicegen.api.conventions import pascal_case, snake_case
from servicegen.api.extractors.type_mapper import SmithyMapper
from servicegen.lib.descriptors import ShapeKind

from ..schema_utils import collect_records, method_type_refs
from ..templating import render_template


def _member(name, smithy_type, required, doc=None):
    return {"name": name, "type": smithy_type, "required": required, "doc": doc}


def _output_members(method, mapper):
    shape = method.return_shape
    if shape.kind == ShapeKind.UNIT:
        return []
    if shape.kind == ShapeKind.SEQUENCE:
        return [_member("items", mapper.sequence(shape.value_type), True)]
    required = shape.kind == ShapeKind.PLAIN_VALUE
    return [_member("value", mapper.map(shape.value_type), required)]


def build_smithy_context(service, settings):
    mapper = SmithyMapper([r.name for r in service.records])
    operations = []
    errors = []
    refs = []

    for method, op in service.exposed():
        refs.extend(method_type_refs(method))
        shape = method.return_shape
        error_name = None
        if shape.kind == ShapeKind.OUTCOME_SUM:
            error_name = f"{op.rpc_name}Error"
            errors.append({
                "name": error_name,
                "members": [_member("error", mapper.map(shape.error_type), True)],
            })
        operations.append({
            "name": op.rpc_name,
            "doc": op.summary,
            "input": [
                _member(p.wire_name, mapper.map(p.value_type), p.is_required)
                for p in method.caller_params
            ],
            "output": _output_members(method, mapper),
            "error": error_name,
        })

    structures = []
    for name in collect_records(refs, service):
        record = service.get_record(name)
        structures.append({
            "name": record.name,
            "doc": record.documentation,
            "members": [
                _member(f.name, mapper.map(f.type_ref), not f.is_optional, f.documentation)
                for f in record.fields
            ],
        })

    collections = [
        {"name": name, "kind": kind, "members": members}
        for name, (kind, members) in sorted(mapper.collections.items())
    ]

    return {
        "namespace": service.option("smithy", "namespace") or settings.SMITHY_NAMESPACE,
        "name": pascal_case(service.name),
        "version": service.option("openapi", "version") or settings.API_VERSION,
        "doc": service.documentation,
        "operations": operations,
        "errors": errors,
        "structures": structures,
        "collections": collections,
    }


def render_smithy(service, settings):
    text = render_template("idl/model.smithy.jinja", svc=build_smithy_context(service, settings))
    return {f"{snake_case(service.name)}.smithy": text}
