"""Apache Thrift IDL backend."""

from servicegen.api.conventions import pascal_case, snake_case
from servicegen.api.extractors.type_mapper import ThriftMapper
from servicegen.lib.descriptors import ShapeKind

from ..schema_utils import collect_records, method_type_refs
from ..templating import render_template


def _field(number, name, thrift_type, required):
    return {
        "number": number,
        "name": name,
        "type": thrift_type,
        "qualifier": "required" if required else "optional",
    }


def _return_type(method, mapper):
    shape = method.return_shape
    if shape.kind == ShapeKind.SEQUENCE:
        return f"list<{mapper.map(shape.value_type)}>"
    return mapper.map(shape.value_type)


def build_thrift_context(service, settings):
    mapper = ThriftMapper([r.name for r in service.records])
    functions = []
    exceptions = []
    refs = []

    for method, op in service.exposed():
        refs.extend(method_type_refs(method))
        shape = method.return_shape
        throws = None
        if shape.kind == ShapeKind.OUTCOME_SUM:
            throws = f"{op.rpc_name}Error"
            exceptions.append({
                "name": throws,
                "fields": [_field(1, "error", mapper.map(shape.error_type), True)],
            })
        functions.append({
            "name": snake_case(method.name),
            "doc": op.summary,
            "returns": _return_type(method, mapper),
            "args": [
                _field(n, snake_case(p.wire_name), mapper.map(p.value_type), p.is_required)
                for n, p in enumerate(method.caller_params, start=1)
            ],
            "throws": throws,
        })

    structs = []
    for name in collect_records(refs, service):
        record = service.get_record(name)
        structs.append({
            "name": record.name,
            "doc": record.documentation,
            "fields": [
                _field(n, f.name, mapper.map(f.type_ref), not f.is_optional)
                for n, f in enumerate(record.fields, start=1)
            ],
        })

    namespace = service.option("grpc", "package") or settings.PROTO_PACKAGE or snake_case(service.name)
    return {
        "namespace": namespace,
        "name": pascal_case(service.name),
        "doc": service.documentation,
        "functions": functions,
        "structs": structs,
        "exceptions": exceptions,
    }


def render_thrift(service, settings):
    text = render_template("idl/service.thrift.jinja", svc=build_thrift_context(service, settings))
    return {f"{snake_case(service.name)}.thrift": text}
