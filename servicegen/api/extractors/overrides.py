"""
Recognized override decorators and their keys.

Decorators are flattened into a single override mapping per method,
parameter or service. Any decorator or key that is not listed here is an
UnknownOverrideKey error, reported with the valid alternatives as hints.
"""

from servicegen.errors import InvalidOverrideValue, UnknownOverrideKey

HTTP_VERBS = ("GET", "POST", "PUT", "PATCH", "DELETE")
VISIBILITIES = ("normal", "suppressed", "hidden")
ROLE_NAMES = ("path", "query", "header", "body", "context")
SERVE_PROTOCOLS = ("http", "jsonrpc", "ws")

# decorator -> {key: expected python type}
METHOD_OVERRIDES = {
    "route": {"verb": str, "path": str, "visibility": str},
    "doc": {"summary": str, "description": str},
    "response": {"status_code": int, "content_type": str, "extra_headers": dict},
}

PARAM_OVERRIDES = {
    "param": {"role": str, "wire_name": str, "default_value": object},
}

SERVICE_OPTIONS = {
    "http": {"prefix": str},
    "openapi": {"title": str, "version": str, "server": str},
    "cli": {"name": str, "version": str, "about": str},
    "mcp": {"namespace": str},
    "grpc": {"package": str},
    "connect": {"package": str},
    "smithy": {"namespace": str},
    "serve": {"health": str, "protocols": list},
}

# Keys whose values are restricted to a fixed set of choices
CHOICES = {
    "verb": HTTP_VERBS,
    "visibility": VISIBILITIES,
    "role": ROLE_NAMES,
}


def _check_type(key, value, expected):
    if expected is object:
        return True
    if expected is int:
        return isinstance(value, int) and not isinstance(value, bool)
    return isinstance(value, expected)


def _normalize(key, value):
    if key == "verb":
        return value.upper()
    if key in ("visibility", "role"):
        return value.lower()
    return value


def collect_overrides(decorators, schema, owner, flatten=True):
    """
    Validate decorators against `schema` and return (overrides, errors).

    With flatten=True the result maps key -> value (method/param overrides);
    otherwise it maps decorator -> {key: value} (service options).
    """
    overrides = {}
    errors = []

    for deco in decorators:
        keys = schema.get(deco.name)
        if keys is None:
            errors.append(UnknownOverrideKey(
                f"Unknown decorator '@{deco.name}' on {owner}.",
                deco.location,
                hints=[f"Valid decorators: {', '.join('@' + n for n in schema)}"],
            ))
            continue

        target = overrides if flatten else overrides.setdefault(deco.name, {})
        for key, value in deco.arguments.items():
            expected = keys.get(key)
            if expected is None:
                errors.append(UnknownOverrideKey(
                    f"Unknown key '{key}' in '@{deco.name}' on {owner}.",
                    deco.location,
                    hints=[f"Valid keys for @{deco.name}: {', '.join(keys)}"],
                ))
                continue

            if not _check_type(key, value, expected):
                errors.append(InvalidOverrideValue(
                    f"'@{deco.name}({key}=...)' on {owner} expects {expected.__name__}, "
                    f"got {type(value).__name__} {value!r}.",
                    deco.location,
                ))
                continue

            value = _normalize(key, value)
            choices = CHOICES.get(key)
            if choices and value not in choices:
                errors.append(InvalidOverrideValue(
                    f"'@{deco.name}({key}={value!r})' on {owner} is not a valid {key}.",
                    deco.location,
                    hints=[f"Valid values: {', '.join(choices)}"],
                ))
                continue

            if key == "extra_headers" and not all(
                isinstance(k, str) and isinstance(v, str) for k, v in value.items()
            ):
                errors.append(InvalidOverrideValue(
                    f"'@{deco.name}(extra_headers=...)' on {owner} must map header names to strings.",
                    deco.location,
                ))
                continue

            if key == "protocols" and (not value or not all(p in SERVE_PROTOCOLS for p in value)):
                errors.append(InvalidOverrideValue(
                    f"'@{deco.name}(protocols={value!r})' on {owner} must list protocols to mount.",
                    deco.location,
                    hints=[f"Valid values: {', '.join(SERVE_PROTOCOLS)}"],
                ))
                continue

            if key == "health" and not value.startswith("/"):
                errors.append(InvalidOverrideValue(
                    f"'@{deco.name}(health={value!r})' on {owner} must start with '/'.",
                    deco.location,
                    hints=[f"Change to '/{value}'"],
                ))
                continue

            target[key] = value

    return overrides, errors
