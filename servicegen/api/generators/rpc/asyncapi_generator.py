"""AsyncAPI document describing the WebSocket backend's messages."""

from servicegen.api.conventions import pascal_case, snake_case
from servicegen.api.extractors.type_mapper import JsonSchemaMapper

from ..schema_utils import (
    collect_records,
    dump_yaml,
    method_type_refs,
    params_schema,
    record_definitions,
    result_schema,
)
from .ws_generator import ws_path

REF_PREFIX = "#/components/schemas/"


def _ws_url(server_url):
    if server_url.startswith("https://"):
        return "wss://" + server_url[len("https://"):]
    if server_url.startswith("http://"):
        return "ws://" + server_url[len("http://"):]
    return server_url


def _request_message(method, op, mapper):
    message = {
        "name": method.name,
        "payload": {
            "type": "object",
            "properties": {
                "id": {"type": ["integer", "string"]},
                "method": {"type": "string", "const": method.name},
                "params": params_schema(method.caller_params, mapper),
            },
            "required": ["method"],
        },
    }
    if op.summary:
        message["summary"] = op.summary
    return message


def _response_message(method, mapper):
    value = result_schema(method, mapper)
    if method.return_shape.is_streaming:
        properties = {"id": {}, "item": value, "done": {"type": "boolean"}}
    else:
        properties = {"id": {}, "result": value}
    return {"name": f"{method.name}Response", "payload": {"type": "object", "properties": properties}}


def build_asyncapi(service, settings):
    names = [r.name for r in service.records]
    mapper = JsonSchemaMapper(names, ref_prefix=REF_PREFIX)
    pairs = list(service.documented())

    messages = {}
    refs = []
    for method, op in pairs:
        base = pascal_case(method.name)
        messages[f"{base}Request"] = _request_message(method, op, mapper)
        messages[f"{base}Response"] = _response_message(method, mapper)
        refs.extend(method_type_refs(method))

    messages["Error"] = {
        "name": "error",
        "payload": {
            "type": "object",
            "properties": {
                "id": {},
                "error": {
                    "type": "object",
                    "properties": {"code": {"type": "integer"}, "message": {"type": "string"}, "data": {}},
                    "required": ["code", "message"],
                },
            },
        },
    }

    def refs_to(suffix):
        return [{"$ref": f"#/components/messages/{name}"} for name in messages if name.endswith(suffix)]

    info = {
        "title": service.option("openapi", "title", service.name),
        "version": service.option("openapi", "version", settings.API_VERSION),
    }
    if service.documentation:
        info["description"] = service.documentation

    return {
        "asyncapi": settings.ASYNCAPI_VERSION,
        "info": info,
        "servers": {"default": {"url": _ws_url(settings.SERVER_URL), "protocol": "ws"}},
        "channels": {
            ws_path(service): {
                "publish": {"operationId": "sendRequest", "message": {"oneOf": refs_to("Request")}},
                "subscribe": {
                    "operationId": "receiveResponse",
                    "message": {"oneOf": refs_to("Response") + refs_to("Error")},
                },
            }
        },
        "components": {
            "messages": messages,
            "schemas": record_definitions(collect_records(refs, service), service, mapper),
        },
    }


def render_asyncapi(service, settings):
    document = build_asyncapi(service, settings)
    return {f"{snake_case(service.name)}.asyncapi.yaml": dump_yaml(document)}
