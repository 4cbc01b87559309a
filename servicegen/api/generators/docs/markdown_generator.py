"""Human-readable Markdown reference of a service."""

from servicegen.api.conventions import snake_case
from servicegen.lib.descriptors import ShapeKind

from ..templating import render_template

SHAPE_LABELS = {
    ShapeKind.PLAIN_VALUE: "value",
    ShapeKind.OPTIONAL_VALUE: "optional value",
    ShapeKind.OUTCOME_SUM: "success or failure",
    ShapeKind.SEQUENCE: "list",
    ShapeKind.UNIT: "nothing",
    ShapeKind.LAZY_SEQUENCE: "stream",
}


def _returns(shape):
    if shape.kind == ShapeKind.UNIT:
        return "Nothing"
    if shape.kind == ShapeKind.OUTCOME_SUM:
        return f"`{shape.value_type}` on success, `{shape.error_type}` on failure"
    if shape.kind == ShapeKind.OPTIONAL_VALUE:
        return f"`{shape.value_type}` or nothing"
    if shape.kind == ShapeKind.SEQUENCE:
        return f"list of `{shape.value_type}`"
    if shape.kind == ShapeKind.LAZY_SEQUENCE:
        return f"stream of `{shape.value_type}`"
    return f"`{shape.value_type}`"


def build_markdown_context(service):
    methods = []
    for method, op in service.documented():
        methods.append({
            "name": method.name,
            "summary": op.summary,
            "description": op.description,
            "verb": op.verb,
            "path": op.path,
            "status_code": op.status_code,
            "cli_command": op.cli_command,
            "is_async": method.is_asynchronous,
            "returns": _returns(method.return_shape),
            "shape": SHAPE_LABELS[method.return_shape.kind],
            "params": [
                {
                    "name": p.name,
                    "wire_name": p.wire_name,
                    "type": str(p.type_ref),
                    "role": p.role.value,
                    "required": p.is_required,
                    "default": p.default_value,
                }
                for p in method.caller_params
            ],
            "uses_context": method.context_param is not None,
        })
    return {
        "name": service.name,
        "documentation": service.documentation,
        "methods": methods,
        "records": service.records,
    }


def render_markdown(service, settings):
    text = render_template("docs/reference.md.jinja", svc=build_markdown_context(service))
    return {f"{snake_case(service.name)}.md": text}
