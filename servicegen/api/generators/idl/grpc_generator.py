"""
Protocol Buffers (proto3) service backend.

Each exposed method becomes `rpc <Pascal>(<Pascal>Request) returns (...)`.
Unit results return google.protobuf.Empty, streaming results use a
server-streaming `stream <Pascal>Response`, and outcome results carry a
`oneof result { value, error }` when both sides are representable in a oneof.
"""

from servicegen.api.conventions import pascal_case, snake_case
from servicegen.api.extractors.type_mapper import ProtobufMapper
from servicegen.lib.descriptors import ShapeKind

from ..schema_utils import collect_records, method_type_refs
from ..templating import render_template

WELL_KNOWN_IMPORTS = (
    ("google.protobuf.Empty", "google/protobuf/empty.proto"),
    ("google.protobuf.Struct", "google/protobuf/struct.proto"),
    ("google.protobuf.ListValue", "google/protobuf/struct.proto"),
    ("google.protobuf.Value", "google/protobuf/struct.proto"),
)


def _is_composite(proto_type):
    return proto_type.startswith(("repeated ", "map<"))


def _field(name, proto_type, number, optional=False):
    label = "optional " if optional and not _is_composite(proto_type) else ""
    return {"name": name, "type": f"{label}{proto_type}", "number": number}


def _request_message(method, op, mapper):
    fields = [
        _field(snake_case(p.wire_name), mapper.map(p.value_type), n, optional=not p.is_required)
        for n, p in enumerate(method.caller_params, start=1)
    ]
    return {"name": f"{op.rpc_name}Request", "fields": fields, "oneof": None}


def _response_message(method, op, mapper):
    shape = method.return_shape
    name = f"{op.rpc_name}Response"
    if shape.kind == ShapeKind.SEQUENCE:
        value_type = mapper.map(shape.value_type)
        if _is_composite(value_type):
            value_type = "google.protobuf.ListValue"
        return {"name": name, "fields": [_field("items", f"repeated {value_type}", 1)], "oneof": None}
    value_type = mapper.map(shape.value_type)
    if shape.kind == ShapeKind.OUTCOME_SUM:
        error_type = mapper.map(shape.error_type)
        if not _is_composite(value_type) and not _is_composite(error_type):
            return {
                "name": name,
                "fields": [],
                "oneof": {"name": "result", "fields": [_field("value", value_type, 1), _field("error", error_type, 2)]},
            }
        return {"name": name, "fields": [_field("value", value_type, 1), _field("error", error_type, 2)], "oneof": None}
    optional = shape.kind == ShapeKind.OPTIONAL_VALUE
    return {"name": name, "fields": [_field("value", value_type, 1, optional=optional)], "oneof": None}


def _record_message(record, mapper):
    fields = [
        _field(f.name, mapper.map(f.type_ref), n, optional=f.is_optional)
        for n, f in enumerate(record.fields, start=1)
    ]
    return {"name": record.name, "fields": fields, "oneof": None, "doc": record.documentation}


def package_name(service, settings, *groups):
    """First `package` option among `groups` (then @grpc), the settings default, or the service name."""
    for group in groups + ("grpc",):
        package = service.option(group, "package")
        if package:
            return package
    return settings.PROTO_PACKAGE or snake_case(service.name)


def build_proto_context(service, settings, package=None):
    mapper = ProtobufMapper([r.name for r in service.records])
    rpcs = []
    messages = []
    refs = []

    for method, op in service.exposed():
        refs.extend(method_type_refs(method))
        request = _request_message(method, op, mapper)
        messages.append(request)
        if method.return_shape.kind == ShapeKind.UNIT:
            response_type = "google.protobuf.Empty"
        else:
            response = _response_message(method, op, mapper)
            messages.append(response)
            response_type = response["name"]
        rpcs.append({
            "name": op.rpc_name,
            "doc": op.summary,
            "request": request["name"],
            "response": response_type,
            "streaming": method.return_shape.is_streaming,
            "path": None,
        })

    records = [_record_message(service.get_record(n), mapper) for n in collect_records(refs, service)]

    used_types = [rpc["response"] for rpc in rpcs]
    for message in messages + records:
        fields = list(message["fields"]) + list((message.get("oneof") or {}).get("fields", []))
        used_types.extend(f["type"] for f in fields)
    imports = sorted({
        path for type_name, path in WELL_KNOWN_IMPORTS
        if any(type_name in used for used in used_types)
    })

    return {
        "package": package or package_name(service, settings),
        "service": pascal_case(service.name),
        "doc": service.documentation,
        "imports": imports,
        "rpcs": rpcs,
        "messages": messages,
        "records": records,
    }


def render_grpc(service, settings):
    text = render_template(
        "idl/service.proto.jinja", svc=build_proto_context(service, settings), heading="Protocol Buffers definition",
    )
    return {f"{snake_case(service.name)}.proto": text}
