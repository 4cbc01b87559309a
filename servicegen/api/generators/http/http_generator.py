"""
HTTP backend: a FastAPI APIRouter module.

One endpoint per exposed method, using the resolved verb, path and status
code. Parameters are bound by role:

    PathIdentifier  -> Path(alias=wire_name)
    QueryValue      -> Query(default, alias=wire_name)
    HeaderValue     -> Header(default, alias=wire_name)
    StructuredBody  -> fields of a generated <Method>Body pydantic model
    AmbientContext  -> runtime Context.from_headers(request.headers)

Hidden methods are routed but excluded from FastAPI's own schema.
"""

from servicegen.api.conventions import pascal_case, snake_case
from servicegen.api.gen_logging import get_logger
from servicegen.lib.descriptors import Role

from ..dispatch_generator import param_context, python_mapper, record_models, used_records
from ..templating import render_template

logger = get_logger(__name__)

FASTAPI_MARKERS = {
    Role.PATH_IDENTIFIER: "Path",
    Role.QUERY_VALUE: "Query",
    Role.HEADER_VALUE: "Header",
}


def endpoint_context(method, op, mapper):
    params = []
    body = []
    for p in method.params:
        ctx = param_context(p, mapper)
        if p.role == Role.STRUCTURED_BODY:
            body.append(ctx)
        elif p.role != Role.AMBIENT_CONTEXT:
            ctx["marker"] = FASTAPI_MARKERS[p.role]
            ctx["arg"] = argument_name(p)
            params.append(ctx)
    return {
        "name": method.name,
        "verb": op.verb.lower(),
        "path": op.path,
        "status_code": op.status_code,
        "summary": op.summary,
        "description": op.description,
        "content_type": op.content_type,
        "headers": dict(op.extra_headers),
        "in_schema": op.in_schema,
        "is_async": method.is_asynchronous,
        "shape": method.return_shape.kind.value,
        "is_streaming": method.return_shape.is_streaming,
        "params": params,
        "body": body,
        "body_model": f"{pascal_case(method.name)}Body" if body else None,
        "call_args": [
            {"name": p.name, "source": _source(p)} for p in method.params
        ],
    }


def argument_name(param):
    """Path arguments must be named after their slot."""
    if param.role == Role.PATH_IDENTIFIER and param.wire_name.isidentifier():
        return param.wire_name
    return param.name


def _source(param):
    if param.role == Role.AMBIENT_CONTEXT:
        return "_rt.Context.from_headers(_request.headers)"
    if param.role == Role.STRUCTURED_BODY:
        return f"_body.{param.name}"
    return argument_name(param)


def build_http_context(service):
    mapper = python_mapper(service)
    pairs = list(service.exposed())
    return {
        "service_name": service.name,
        "endpoints": [endpoint_context(m, op, mapper) for m, op in pairs],
        "records": record_models(service, used_records(service, [m for m, _ in pairs])),
    }


def render_http(service, settings):
    context = build_http_context(service)
    code = render_template("http/router.py.jinja", ctx=context)
    logger.debug(f"  [HTTP] {len(context['endpoints'])} endpoints")
    return {f"{snake_case(service.name)}_http.py": code}
