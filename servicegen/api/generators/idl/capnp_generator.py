"""
Cap'n Proto schema backend.

Methods become interface methods `camelName @N (arg :T) -> (value :T)`,
records become structs. Field and parameter names are camelCased. The file
id is derived from the service name so regenerating never changes it.
"""

import hashlib

from servicegen.api.conventions import camel_case, pascal_case, snake_case
from servicegen.api.extractors.type_mapper import CapnpMapper
from servicegen.lib.descriptors import ShapeKind

from ..schema_utils import collect_records, method_type_refs
from ..templating import render_template


def file_id(name: str) -> str:
    """Deterministic 64-bit id with the high bit set, as capnp requires."""
    digest = hashlib.sha256(name.encode("utf-8")).digest()
    value = int.from_bytes(digest[:8], "big") | (1 << 63)
    return f"0x{value:016x}"


def _results(method, mapper):
    shape = method.return_shape
    if shape.kind == ShapeKind.UNIT:
        return []
    if shape.kind == ShapeKind.SEQUENCE:
        return [("items", f"List({mapper.map(shape.value_type)})")]
    results = [("value", mapper.map(shape.value_type))]
    if shape.kind == ShapeKind.OUTCOME_SUM:
        results.append(("error", mapper.map(shape.error_type)))
    return results


def build_capnp_context(service):
    mapper = CapnpMapper([r.name for r in service.records])
    methods = []
    refs = []
    for ordinal, (method, op) in enumerate(service.exposed()):
        refs.extend(method_type_refs(method))
        methods.append({
            "name": op.capnp_name,
            "ordinal": ordinal,
            "doc": op.summary,
            "params": [
                {"name": camel_case(p.wire_name), "type": mapper.map(p.value_type)}
                for p in method.caller_params
            ],
            "results": [{"name": n, "type": t} for n, t in _results(method, mapper)],
        })

    structs = []
    for name in collect_records(refs, service):
        record = service.get_record(name)
        structs.append({
            "name": record.name,
            "doc": record.documentation,
            "fields": [
                {"name": camel_case(f.name), "ordinal": i, "type": mapper.map(f.type_ref)}
                for i, f in enumerate(record.fields)
            ],
        })

    return {
        "id": file_id(service.name),
        "name": pascal_case(service.name),
        "doc": service.documentation,
        "methods": methods,
        "structs": structs,
    }


def render_capnp(service, settings):
    text = render_template("idl/schema.capnp.jinja", svc=build_capnp_context(service))
    return {f"{snake_case(service.name)}.capnp": text}
