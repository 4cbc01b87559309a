"""
Parameter role classification.

Roles are assigned in a fixed order, first match wins:
    (a) explicit @param(role=...) override
    (b) ambient context type (as decided by the context resolver)
    (c) identifier: bound to a `{slot}` of an explicit @route path, or
        named `id` / `*_id` (an explicit path must then place it)
    (d) body-bearing verb (POST, PUT, PATCH) -> structured body
    (e) query value
"""

import re
from dataclasses import replace

from servicegen.errors import ContextCollision
from servicegen.lib.descriptors import Role

BODY_VERBS = frozenset({"POST", "PUT", "PATCH"})

ROLE_BY_NAME = {
    "path": Role.PATH_IDENTIFIER,
    "query": Role.QUERY_VALUE,
    "header": Role.HEADER_VALUE,
    "body": Role.STRUCTURED_BODY,
    "context": Role.AMBIENT_CONTEXT,
}

SLOT_PATTERN = re.compile(r"\{([^{}]*)\}")


def path_slots(path):
    """Slot names of a path template, in order of appearance."""
    if not path:
        return []
    return SLOT_PATTERN.findall(path)


def is_identifier_name(name: str) -> bool:
    return name == "id" or name.endswith("_id")


def is_body_bearing(verb: str) -> bool:
    return verb.upper() in BODY_VERBS


def classify_param(param, verb, injectable=False, explicit_path=None):
    """Return the Role for a single parameter."""
    role_override = param.overrides.get("role")
    if role_override:
        return ROLE_BY_NAME[role_override]

    if injectable:
        return Role.AMBIENT_CONTEXT

    if explicit_path is not None and param.wire_name in path_slots(explicit_path):
        return Role.PATH_IDENTIFIER
    if is_identifier_name(param.name):
        return Role.PATH_IDENTIFIER

    if is_body_bearing(verb):
        return Role.STRUCTURED_BODY

    return Role.QUERY_VALUE


def classify_method(method, verb, resolution, explicit_path=None):
    """
    Return (method_with_roles, errors).

    `resolution` is the block-wide ContextResolution; `explicit_path` is the
    path of a @route override, when present.
    """
    errors = []
    params = []
    context_owner = None

    for param in method.params:
        role = classify_param(
            param,
            verb,
            injectable=resolution.is_injectable(method.name, param.name),
            explicit_path=explicit_path,
        )
        if role == Role.AMBIENT_CONTEXT:
            if context_owner is not None:
                errors.append(ContextCollision(
                    f"Method '{method.name}' declares more than one context parameter "
                    f"('{context_owner}' and '{param.name}').",
                    param.location,
                ))
                role = Role.STRUCTURED_BODY if is_body_bearing(verb) else Role.QUERY_VALUE
            else:
                context_owner = param.name
        params.append(replace(param, role=role))

    return replace(method, params=tuple(params)), errors
