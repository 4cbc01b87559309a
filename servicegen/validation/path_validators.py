"""
Path template well-formedness.

A path template must:
    - start with "/"
    - contain no empty segments ("//") and no trailing slash
    - avoid characters that are not valid in a URL path
    - have balanced, non-nested braces with non-empty, unique slot names
    - bind every slot to a PathIdentifier parameter, and place every
      PathIdentifier parameter in a slot
"""

import re

from servicegen.errors import MalformedPathTemplate
from servicegen.lib.descriptors import Role

INVALID_PATH_CHARS = ("<", ">", '"', "\\", " ", "?", "#")

_SLOT = re.compile(r"\{([^{}]*)\}")


def _error(method, path, problem, hint=None):
    return MalformedPathTemplate(
        f"Path '{path}' of method '{method.name}' {problem}.",
        method.location,
        hints=[hint] if hint else None,
    )


def check_braces(path):
    """Return None when braces are balanced and not nested, else a problem string."""
    depth = 0
    for ch in path:
        if ch == "{":
            depth += 1
            if depth > 1:
                return "nests braces"
        elif ch == "}":
            depth -= 1
            if depth < 0:
                return "closes a brace that was never opened"
    if depth != 0:
        return "has an unclosed '{'"
    return None


def validate_path_template(method, path):
    """Syntactic checks on one path template. Returns a list of errors."""
    errors = []

    if not path.startswith("/"):
        errors.append(_error(method, path, "must start with '/'", f"Change to '/{path}'"))

    if "//" in path:
        errors.append(_error(
            method, path, "contains an empty segment ('//')",
            f"Change to '{re.sub('/+', '/', path)}'",
        ))

    if len(path) > 1 and path.endswith("/"):
        errors.append(_error(method, path, "ends with a trailing slash", f"Change to '{path.rstrip('/')}'"))

    bad = sorted({ch for ch in path if ch in INVALID_PATH_CHARS})
    if bad:
        errors.append(_error(
            method, path, f"contains invalid character(s) {', '.join(repr(c) for c in bad)}",
        ))

    problem = check_braces(path)
    if problem:
        errors.append(_error(method, path, problem))
        # Slot checks are meaningless with broken braces
        return errors

    slots = _SLOT.findall(path)
    seen = set()
    for slot in slots:
        if not slot.strip():
            errors.append(_error(method, path, "has an empty '{}' slot", "Name the slot, e.g. '{id}'"))
            continue
        if slot in seen:
            errors.append(_error(method, path, f"uses slot '{{{slot}}}' more than once"))
        seen.add(slot)

    return errors


def verify_path_params(method, path):
    """Every slot is bound to a PathIdentifier, and every PathIdentifier has a slot."""
    errors = []
    slots = [s for s in _SLOT.findall(path) if s.strip()]
    identifiers = {p.wire_name: p for p in method.params_with_role(Role.PATH_IDENTIFIER)}

    for slot in slots:
        if slot not in identifiers:
            errors.append(_error(
                method, path,
                f"has slot '{{{slot}}}' with no matching path parameter",
                f"Path parameters of '{method.name}': {', '.join(identifiers) or '(none)'}",
            ))

    for wire_name in identifiers:
        if wire_name not in slots:
            errors.append(_error(
                method, path,
                f"does not place path parameter '{wire_name}'",
                f"Add '/{{{wire_name}}}' to the path",
            ))

    return errors


def verify_paths(methods, operations):
    """Run all path checks for the exposed operations of a block."""
    errors = []
    for method, op in zip(methods, operations):
        if op.is_suppressed:
            continue
        syntax_errors = validate_path_template(method, op.path)
        errors.extend(syntax_errors)
        if not syntax_errors:
            errors.extend(verify_path_params(method, op.path))
    return errors
