"""
Record name checks.

Records become module-level pydantic classes in every generated Python
module (HTTP router, JSON-RPC, WebSocket, MCP, CLI). Runtime and framework
names are reached through private module aliases there, so `Context`,
`Request` or `Path` are ordinary record names; what remains off limits are
the names generated annotations and module bodies spell bare.
"""

from servicegen.api.conventions import pascal_case
from servicegen.errors import DuplicateName
from servicegen.lib.descriptors import Role

# typing names and builtins used in generated annotations
ANNOTATION_NAMES = frozenset({"Any", "Dict", "List", "Optional", "str", "int", "float", "bool", "bytes"})

# module-level names of the generated modules
MODULE_NAMES = frozenset({
    "json",
    "asyncio",
    "click",
    "annotations",
    "METHODS",
    "TOOLS",
    "COMMAND_TREE",
    "ENDPOINT",
    "PARSE_ERROR",
    "INVALID_REQUEST",
    "dispatch",
    "adispatch",
    "create_router",
    "create_app",
    "handle_request",
    "ahandle_request",
    "handle_message",
    "list_tools",
    "call_tool",
    "acall_tool",
    "cli",
    "main",
})


def body_model_names(methods, operations):
    """Request-body model classes the HTTP backend generates, by name."""
    return {
        f"{pascal_case(method.name)}Body": method.name
        for method, op in zip(methods, operations)
        if not op.is_suppressed and method.params_with_role(Role.STRUCTURED_BODY)
    }


def verify_record_names(records, methods, operations):
    errors = []
    bodies = body_model_names(methods, operations)
    for record in records:
        name = record.name
        if name.startswith("_") or name in ANNOTATION_NAMES or name in MODULE_NAMES:
            errors.append(DuplicateName(
                f"Record name '{name}' clashes with a name used by generated code.",
                record.location,
                hints=["Rename the record."],
            ))
        elif name in bodies:
            errors.append(DuplicateName(
                f"Record name '{name}' clashes with the request body model of '{bodies[name]}'.",
                record.location,
                hints=["Rename the record or the method."],
            ))
    return errors
