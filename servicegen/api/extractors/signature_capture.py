"""
Signature capture: method declarations -> draft MethodDescriptors.

Only instance operations (first parameter is the `self` receiver) are
captured; constructor-style declarations and private methods (leading
underscore) are skipped silently. Everything else that cannot be expressed
as a plain `name: Type` binding is an InvalidSignature error.

The drafts returned here carry validated overrides, wire names and defaults,
but every parameter still has role UNCLASSIFIED and no return shape; later
passes fill those in without mutating the drafts.
"""

from servicegen.errors import DuplicateName, InvalidSignature
from servicegen.lib.descriptors import (
    MethodDescriptor,
    ParamDescriptor,
    ParamPattern,
    Role,
    freeze,
)
from servicegen.lib.type_refs import UNIT
from .overrides import (
    METHOD_OVERRIDES,
    PARAM_OVERRIDES,
    SERVICE_OPTIONS,
    collect_overrides,
)

_PATTERN_HINT = "Use: name: str    Not: (name, _): Tuple[str, int], *args or **kwargs"


def is_instance_operation(decl) -> bool:
    return decl.has_receiver and not decl.name.startswith("_")


def split_docstring(doc):
    """Return (summary, description) from a cleaned docstring."""
    if not doc:
        return None, None
    lines = doc.strip().splitlines()
    summary = lines[0].strip() or None
    rest = "\n".join(lines[1:]).strip()
    return summary, (rest or None)


def _capture_param(decl, method_name):
    errors = []
    owner = f"parameter '{decl.name}' of '{method_name}'"

    if decl.pattern == ParamPattern.TUPLE:
        errors.append(InvalidSignature(
            f"Unsupported parameter pattern '({decl.name})' in '{method_name}'. "
            f"Parameters must be plain name-and-type bindings.",
            decl.location,
            hints=[_PATTERN_HINT],
        ))
        return None, errors

    if decl.pattern in (ParamPattern.VAR_POSITIONAL, ParamPattern.VAR_KEYWORD):
        star = "*" if decl.pattern == ParamPattern.VAR_POSITIONAL else "**"
        errors.append(InvalidSignature(
            f"Unsupported variadic parameter '{star}{decl.name}' in '{method_name}'.",
            decl.location,
            hints=[_PATTERN_HINT],
        ))
        return None, errors

    if decl.type_ref is None:
        errors.append(InvalidSignature(
            f"Parameter '{decl.name}' of '{method_name}' has no type annotation.",
            decl.location,
            hints=[f"Annotate it, e.g. {decl.name}: str"],
        ))
        return None, errors

    overrides, override_errors = collect_overrides(decl.decorators, PARAM_OVERRIDES, owner)
    errors.extend(override_errors)

    # Explicit @param(default_value=...) wins over the signature default
    default_value = overrides.get("default_value", decl.default)

    param = ParamDescriptor(
        name=decl.name,
        type_ref=decl.type_ref,
        role=Role.UNCLASSIFIED,
        is_optional=decl.type_ref.is_optional,
        wire_name=overrides.get("wire_name") or decl.name,
        default_value=default_value,
        overrides=freeze(overrides),
        location=decl.location,
    )
    return param, errors


def capture_method(decl):
    """
    Capture a single method declaration.

    Returns (descriptor_or_None, errors). None means the declaration is not an
    instance operation and was skipped.
    """
    if not is_instance_operation(decl):
        return None, []

    errors = []
    params = []
    seen = {}
    for param_decl in decl.params[1:]:
        param, param_errors = _capture_param(param_decl, decl.name)
        errors.extend(param_errors)
        if param is None:
            continue
        if param.name in seen:
            errors.append(DuplicateName(
                f"Parameter '{param.name}' is declared twice in '{decl.name}'.",
                param.location,
            ))
            continue
        seen[param.name] = param
        params.append(param)

    overrides, override_errors = collect_overrides(
        decl.decorators, METHOD_OVERRIDES, f"method '{decl.name}'"
    )
    errors.extend(override_errors)

    method = MethodDescriptor(
        name=decl.name,
        params=tuple(params),
        return_shape=None,
        is_asynchronous=decl.is_async,
        documentation=decl.documentation,
        overrides=freeze(overrides),
        return_type=decl.return_type or UNIT,
        location=decl.location,
    )
    return method, errors


def capture_methods(declarations):
    """
    Capture every instance operation of a block, in declaration order.

    Returns (methods, errors); all independent problems are reported.
    """
    methods = []
    errors = []
    names = {}
    for decl in declarations:
        method, method_errors = capture_method(decl)
        errors.extend(method_errors)
        if method is None:
            continue
        if method.name in names:
            errors.append(DuplicateName(
                f"Method '{method.name}' is declared more than once.",
                method.location,
                hints=[f"First declared at {names[method.name].location}"],
            ))
            continue
        names[method.name] = method
        methods.append(method)
    return methods, errors


def capture_service_options(service_decl):
    """Validate service-level decorators into {group: {key: value}}."""
    options, errors = collect_overrides(
        service_decl.decorators,
        SERVICE_OPTIONS,
        f"service '{service_decl.name}'",
        flatten=False,
    )
    return {group: freeze(values) for group, values in options.items()}, errors
