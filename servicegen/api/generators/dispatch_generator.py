"""
Generic dispatch generator.

Builds the template context shared by every JSON-dispatch backend (MCP tool
calls, WebSocket RPC, JSON-RPC over HTTP). For each exposed method the
generated code contains:

    - one argument builder reading each parameter from a JSON-like mapping by
      wire name, validated with a pydantic TypeAdapter; the ambient context is
      injected, never read from the payload
    - an entry in METHODS: (attribute, builder, is_async, return shape)
    - the shared dispatch() / adispatch() callers

The jinja side lives in templates/dispatch/_dispatch.py.jinja and is imported
by each backend template.
"""

from servicegen.api.extractors.type_mapper import PythonMapper

from .schema_utils import collect_records, method_type_refs


def python_mapper(service):
    return PythonMapper(records=[r.name for r in service.records])


def record_models(service, names=None):
    """Context for generated pydantic models, in declaration order."""
    mapper = python_mapper(service)
    wanted = set(names) if names is not None else None
    models = []
    for record in service.records:
        if wanted is not None and record.name not in wanted:
            continue
        models.append({
            "name": record.name,
            "doc": record.documentation,
            "fields": [
                {
                    "name": f.name,
                    "annotation": mapper.map_annotation(f.type_ref),
                    "optional": f.is_optional,
                }
                for f in record.fields
            ],
        })
    return models


def used_records(service, methods):
    refs = []
    for method in methods:
        refs.extend(method_type_refs(method, include_context=False))
    return collect_records(refs, service)


def param_context(param, mapper):
    return {
        "name": param.name,
        "wire_name": param.wire_name,
        "role": param.role.value,
        "annotation": mapper.map(param.value_type),
        "full_annotation": mapper.map_annotation(param.type_ref),
        "required": param.is_required,
        "default": repr(param.default_value),
        "is_context": param.is_injected,
    }


def method_context(method, op, key=None, mapper=None):
    """Per-method dispatch context; `key` is the externally visible method name."""
    return {
        "name": method.name,
        "key": key or method.name,
        "is_async": method.is_asynchronous,
        "shape": method.return_shape.kind.value,
        "is_streaming": method.return_shape.is_streaming,
        "summary": op.summary,
        "params": [param_context(p, mapper) for p in method.params],
        "caller_params": [param_context(p, mapper) for p in method.caller_params],
    }


def build_dispatch_context(service, key_for=None):
    """
    Context for the dispatch macros of a service.

    `key_for(method, op)` returns the dispatch key (defaults to the method
    name). Suppressed methods are excluded; hidden ones stay dispatchable.
    """
    mapper = python_mapper(service)
    pairs = list(service.exposed())
    methods = [
        method_context(m, op, key_for(m, op) if key_for else None, mapper)
        for m, op in pairs
    ]
    return {
        "service_name": service.name,
        "methods": methods,
        "records": record_models(service, used_records(service, [m for m, _ in pairs])),
    }
